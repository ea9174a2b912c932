"""
Detached snapshots of stored rows handed to the sync pipeline.
"""
from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, field_validator

from listing_sync.core.enums import ListingSyncStatus


class ListingSnapshot(BaseModel):
    id: str
    user_id: str
    title: Optional[str] = None
    description: Optional[str] = None
    price: Optional[Decimal] = None
    condition: Optional[str] = None
    quantity: Optional[int] = 1
    shipping_cost: Optional[Decimal] = None
    handling_time: Optional[int] = None
    ebay_category_id: Optional[str] = None
    brand: Optional[str] = None
    color_primary: Optional[str] = None
    size_value: Optional[str] = None
    material: Optional[str] = None
    photo_paths: List[str] = []
    photos: List[str] = []
    ebay_listing_id: Optional[str] = None
    last_synced_at: Optional[datetime] = None
    sync_status: ListingSyncStatus = ListingSyncStatus.UNSYNCED

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_model(cls, listing) -> "ListingSnapshot":
        photo_paths = [p.storage_path for p in sorted(listing.listing_photos or [], key=lambda p: p.photo_order or 0)]
        return cls(
            id=listing.id,
            user_id=listing.user_id,
            title=listing.title,
            description=listing.description,
            price=listing.price,
            condition=listing.condition,
            quantity=listing.quantity,
            shipping_cost=listing.shipping_cost,
            handling_time=listing.handling_time,
            ebay_category_id=listing.ebay_category_id,
            brand=listing.brand,
            color_primary=listing.color_primary,
            size_value=listing.size_value,
            material=listing.material,
            photo_paths=photo_paths,
            photos=listing.photos or [],
            ebay_listing_id=listing.ebay_listing_id,
            last_synced_at=listing.last_synced_at,
            sync_status=listing.sync_status or ListingSyncStatus.UNSYNCED,
        )


class SellerProfileSnapshot(BaseModel):
    user_id: str
    store_name: Optional[str] = None
    email: Optional[str] = None
    handling_time_days: Optional[int] = None
    shipping_cost_domestic: Optional[Decimal] = None
    shipping_cost_additional: Optional[Decimal] = None
    preferred_shipping_service: Optional[str] = None
    offers_free_shipping: Optional[bool] = False
    accepts_returns: Optional[bool] = True
    return_period_days: Optional[int] = 30
    return_shipping_paid_by: Optional[str] = "buyer"
    restocking_fee_percentage: Optional[str] = "0"
    ebay_fulfillment_policy_id: Optional[str] = None
    ebay_payment_policy_id: Optional[str] = None
    ebay_return_policy_id: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class CredentialSnapshot(BaseModel):
    user_id: str
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    expires_at: Optional[datetime] = None
    is_connected: bool = False
    account_username: Optional[str] = None

    @field_validator("expires_at")
    @classmethod
    def assume_utc(cls, value):
        # Some drivers hand back naive datetimes for timestamptz columns
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value
