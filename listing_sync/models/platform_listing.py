# listing_sync/models/platform_listing.py
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, JSON, UniqueConstraint
from sqlalchemy.sql import func

from listing_sync.database import Base


class PlatformListing(Base):
    """Links a local listing to its remote marketplace identifiers"""
    __tablename__ = "platform_listings"
    __table_args__ = (UniqueConstraint("listing_id", "platform", name="uq_platform_listing_listing_platform"),)

    id = Column(Integer, primary_key=True)
    listing_id = Column(String, ForeignKey("listings.id"), index=True, nullable=False)
    user_id = Column(String, index=True, nullable=False)
    platform = Column(String, nullable=False)

    platform_listing_id = Column(String, index=True)
    platform_url = Column(String)
    status = Column(String, index=True)
    last_synced_at = Column(DateTime(timezone=True))
    platform_data = Column(JSON, default=dict)  # {"offer_id": ..., "sku": ...}

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return (f"<PlatformListing(listing_id='{self.listing_id}', platform='{self.platform}', "
                f"platform_listing_id='{self.platform_listing_id}', status='{self.status}')>")
