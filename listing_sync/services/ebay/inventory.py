import logging
from typing import Dict, List, Optional

from listing_sync.core.config import Settings, get_settings
from listing_sync.core.exceptions import InventoryLocationError
from listing_sync.schemas.ebay import (
    Availability,
    InventoryItemRequest,
    InventoryProduct,
    ShipToLocationAvailability,
)
from listing_sync.schemas.records import ListingSnapshot

logger = logging.getLogger(__name__)

MAX_IMAGES = 12

CONDITION_MAP = {
    "new_with_tags": "NEW_WITH_TAGS",
    "new_without_tags": "NEW_WITHOUT_TAGS",
    "new": "NEW_WITHOUT_TAGS",
    "excellent": "USED_EXCELLENT",
    "very_good": "USED_VERY_GOOD",
    "good": "USED_GOOD",
    "fair": "USED_ACCEPTABLE",
    "poor": "FOR_PARTS_OR_NOT_WORKING",
}
DEFAULT_CONDITION = "USED_GOOD"


def map_condition(condition: Optional[str]) -> str:
    if not condition:
        return DEFAULT_CONDITION
    return CONDITION_MAP.get(condition.strip().lower().replace(" ", "_"), DEFAULT_CONDITION)


def _is_absolute_url(value: str) -> bool:
    return value.startswith("http://") or value.startswith("https://")


class InventoryClient:
    """Maps listings to eBay inventory items and upserts them"""

    def __init__(self, client, settings: Optional[Settings] = None):
        self.client = client
        self.settings = settings or get_settings()

    def image_urls(self, listing: ListingSnapshot) -> List[str]:
        """Ordered public photo URLs, stored photos first, then legacy URLs"""
        base = self.settings.LISTING_PHOTO_BASE_URL.rstrip("/")
        urls = []
        for path in listing.photo_paths:
            if _is_absolute_url(path):
                urls.append(path)
            elif base:
                urls.append(f"{base}/{path.lstrip('/')}")
        for photo in listing.photos:
            if photo and _is_absolute_url(photo.strip()):
                urls.append(photo.strip())

        deduped = list(dict.fromkeys(urls))
        return deduped[:MAX_IMAGES]

    @staticmethod
    def aspects(listing: ListingSnapshot) -> Dict[str, List[str]]:
        aspects = {}
        for name, value in (
            ("Brand", listing.brand),
            ("Color", listing.color_primary),
            ("Size", listing.size_value),
            ("Material", listing.material),
        ):
            if value and value.strip():
                aspects[name] = [value.strip()]
        return aspects

    def build_item(self, listing: ListingSnapshot) -> InventoryItemRequest:
        return InventoryItemRequest(
            product=InventoryProduct(
                title=(listing.title or "").strip()[:80],
                description=listing.description or listing.title or "",
                image_urls=self.image_urls(listing),
                brand=listing.brand or None,
                aspects=self.aspects(listing),
            ),
            condition=map_condition(listing.condition),
            availability=Availability(
                ship_to_location_availability=ShipToLocationAvailability(quantity=max(listing.quantity or 1, 1))
            ),
        )

    async def upsert_item(self, sku: str, listing: ListingSnapshot) -> None:
        """
        Create or replace the inventory item for a SKU

        Raises:
            InventoryRejectedError: with eBay's error payload unmodified
        """
        item = self.build_item(listing)
        logger.info(f"Upserting inventory item {sku} ({len(item.product.image_urls)} images, "
                    f"condition {item.condition})")
        await self.client.create_or_update_inventory_item(sku, item)

    async def get_location_key(self) -> str:
        """Merchant location key to ship from, preferring a warehouse"""
        locations = await self.client.get_inventory_locations()
        if not locations:
            raise InventoryLocationError(
                "No inventory location found. Create a merchant location in eBay Seller Hub first."
            )
        for location in locations:
            if "WAREHOUSE" in (location.location_types or []):
                return location.merchant_location_key
        return locations[0].merchant_location_key
