# listing_sync/models/seller_profile.py
from sqlalchemy import Column, String, Integer, Boolean, Numeric, DateTime
from sqlalchemy.sql import func

from listing_sync.database import Base


class SellerProfile(Base):
    """Seller shipping/return defaults and resolved eBay business policy ids"""
    __tablename__ = "seller_profiles"

    user_id = Column(String, primary_key=True)
    store_name = Column(String)
    email = Column(String)

    # Shipping defaults
    handling_time_days = Column(Integer)
    shipping_cost_domestic = Column(Numeric(10, 2))
    shipping_cost_additional = Column(Numeric(10, 2))
    preferred_shipping_service = Column(String)
    offers_free_shipping = Column(Boolean, default=False)

    # Return defaults
    accepts_returns = Column(Boolean, default=True)
    return_period_days = Column(Integer, default=30)
    return_shipping_paid_by = Column(String, default="buyer")  # buyer | seller
    restocking_fee_percentage = Column(String, default="0")

    # Written back by the account policy resolver
    ebay_fulfillment_policy_id = Column(String, nullable=True)
    ebay_payment_policy_id = Column(String, nullable=True)
    ebay_return_policy_id = Column(String, nullable=True)

    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
