# listing_sync/models/listing.py
from sqlalchemy import Column, Integer, String, Text, Numeric, DateTime, ForeignKey, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from listing_sync.database import Base
from listing_sync.core.enums import ListingSyncStatus


class Listing(Base):
    """
    A sellable item authored by a seller.
    The listing id doubles as the eBay SKU.
    """
    __tablename__ = "listings"

    id = Column(String, primary_key=True)
    user_id = Column(String, index=True, nullable=False)

    title = Column(String)
    description = Column(Text)
    price = Column(Numeric(10, 2))
    condition = Column(String)
    quantity = Column(Integer, default=1)
    shipping_cost = Column(Numeric(10, 2))
    handling_time = Column(Integer)
    ebay_category_id = Column(String)

    # Item specifics
    brand = Column(String)
    color_primary = Column(String)
    size_value = Column(String)
    material = Column(String)

    # Legacy photo URLs (before listing_photos existed)
    photos = Column(JSON, default=list)

    # Sync outcome fields - only these are written by the sync orchestrator
    ebay_listing_id = Column(String, nullable=True)
    last_synced_at = Column(DateTime(timezone=True), nullable=True)
    sync_status = Column(String, default=ListingSyncStatus.UNSYNCED.value, index=True)
    sync_message = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    listing_photos = relationship(
        "ListingPhoto",
        back_populates="listing",
        order_by="ListingPhoto.photo_order",
        lazy="selectin",
    )

    def __repr__(self):
        return f"<Listing(id='{self.id}', title='{self.title}', sync_status='{self.sync_status}')>"


class ListingPhoto(Base):
    __tablename__ = "listing_photos"

    id = Column(Integer, primary_key=True)
    listing_id = Column(String, ForeignKey("listings.id"), index=True, nullable=False)
    storage_path = Column(String, nullable=False)
    photo_order = Column(Integer, default=0)

    listing = relationship("Listing", back_populates="listing_photos")
