# listing_sync/models/marketplace_account.py
from sqlalchemy import Column, Integer, String, Boolean, DateTime, Text, UniqueConstraint
from sqlalchemy.sql import func

from listing_sync.database import Base


class MarketplaceAccount(Base):
    """
    OAuth credentials for one seller on one marketplace.
    Only the token manager writes to this table.
    """
    __tablename__ = "marketplace_accounts"
    __table_args__ = (UniqueConstraint("user_id", "platform", name="uq_marketplace_account_user_platform"),)

    id = Column(Integer, primary_key=True)
    user_id = Column(String, index=True, nullable=False)
    platform = Column(String, nullable=False)
    account_username = Column(String)

    oauth_token = Column(Text)
    oauth_expires_at = Column(DateTime(timezone=True), nullable=True)
    refresh_token = Column(Text)

    is_connected = Column(Boolean, default=False, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return (f"<MarketplaceAccount(user_id='{self.user_id}', platform='{self.platform}', "
                f"connected={self.is_connected})>")
