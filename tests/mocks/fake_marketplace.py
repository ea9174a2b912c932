from typing import Dict, List, Optional

from listing_sync.core.config import Settings
from listing_sync.core.enums import OfferStatus, PolicyType
from listing_sync.core.exceptions import OfferRejectedError, PolicyRequestError, PublishRejectedError
from listing_sync.schemas.ebay import (
    InventoryLocationRecord,
    OfferListing,
    OfferRecord,
    PolicyRecord,
)

# Calls that change inventory or offer state on eBay
MUTATING_CALLS = {"create_or_update_inventory_item", "create_offer", "delete_offer", "publish_offer"}


def shipping_rejection(service_code: str = "US_PriorityMail") -> PublishRejectedError:
    return PublishRejectedError(
        "Failed to publish offer: 400",
        status_code=400,
        details={"errors": [{
            "errorId": 25007,
            "message": f"Please add at least one valid shipping service option. {service_code} is not valid.",
        }]},
    )


class FakeMarketplace:
    """
    In-memory stand-in for EbayClient.

    Keeps offers per SKU with eBay's published/unpublished semantics and records
    every call so tests can assert on exactly what reached the marketplace.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or Settings()
        self.calls: List[tuple] = []
        self.inventory_items: Dict[str, object] = {}
        self.offers: Dict[str, Dict] = {}  # offer_id -> {"sku", "status", "listing_id", "request"}
        self.policies: Dict[PolicyType, List[PolicyRecord]] = {t: [] for t in PolicyType}
        self.locations: List[InventoryLocationRecord] = [
            InventoryLocationRecord(merchant_location_key="default-location", location_types=["WAREHOUSE"])
        ]
        self.publish_errors: List[Exception] = []
        self.delete_failures: set = set()
        self.policy_create_errors: Dict[PolicyType, Exception] = {}
        self._next_id = 1

    def _new_id(self) -> int:
        value = self._next_id
        self._next_id += 1
        return value

    def count(self, name: str) -> int:
        return len([c for c in self.calls if c[0] == name])

    @property
    def mutating_calls(self) -> List[tuple]:
        return [c for c in self.calls if c[0] in MUTATING_CALLS]

    def add_offer(self, sku: str, status: str = OfferStatus.UNPUBLISHED.value,
                  listing_id: Optional[str] = None) -> str:
        offer_id = f"existing-{self._new_id()}"
        self.offers[offer_id] = {"sku": sku, "status": status, "listing_id": listing_id, "request": None}
        return offer_id

    def offers_for(self, sku: str, status: Optional[str] = None) -> List[str]:
        return [
            offer_id for offer_id, offer in self.offers.items()
            if offer["sku"] == sku and (status is None or offer["status"] == status)
        ]

    # --- EbayClient surface ---

    async def create_or_update_inventory_item(self, sku, item):
        self.calls.append(("create_or_update_inventory_item", sku))
        self.inventory_items[sku] = item
        return True

    async def get_inventory_locations(self):
        self.calls.append(("get_inventory_locations",))
        return list(self.locations)

    async def get_offers(self, sku):
        self.calls.append(("get_offers", sku))
        return [
            OfferRecord(
                offer_id=offer_id,
                sku=offer["sku"],
                status=offer["status"],
                listing=OfferListing(listing_id=offer["listing_id"]) if offer["listing_id"] else None,
            )
            for offer_id, offer in self.offers.items() if offer["sku"] == sku
        ]

    async def create_offer(self, offer):
        self.calls.append(("create_offer", offer.sku))
        offer_id = f"offer-{self._new_id()}"
        self.offers[offer_id] = {
            "sku": offer.sku, "status": OfferStatus.UNPUBLISHED.value, "listing_id": None, "request": offer,
        }
        return offer_id

    async def delete_offer(self, offer_id):
        self.calls.append(("delete_offer", offer_id))
        if offer_id in self.delete_failures:
            raise OfferRejectedError(f"Failed to delete offer {offer_id}: 500", status_code=500,
                                     details={"errors": [{"errorId": 25001}]})
        self.offers.pop(offer_id, None)
        return True

    async def publish_offer(self, offer_id):
        self.calls.append(("publish_offer", offer_id))
        if self.publish_errors:
            raise self.publish_errors.pop(0)
        listing_id = f"11000{self._new_id()}"
        self.offers[offer_id]["status"] = OfferStatus.PUBLISHED.value
        self.offers[offer_id]["listing_id"] = listing_id
        return listing_id

    async def get_policies(self, policy_type):
        self.calls.append(("get_policies", policy_type))
        return list(self.policies[policy_type])

    async def create_policy(self, policy_type, request):
        self.calls.append(("create_policy", policy_type, request))
        if policy_type in self.policy_create_errors:
            raise self.policy_create_errors[policy_type]
        record = PolicyRecord(policy_id=f"2000000000000{self._new_id():02d}", name=request.name)
        self.policies[policy_type].append(record)
        return record


def policy_error(message: str = "User is not eligible for Business Policy.") -> PolicyRequestError:
    return PolicyRequestError(
        "Failed to create policy: 400",
        status_code=400,
        details={"errors": [{"errorId": 20403, "message": message}]},
    )
