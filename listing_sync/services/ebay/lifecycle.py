"""
Offer lifecycle for one SKU: inspect, clean up, create, publish.

eBay allows a single offer per SKU and marketplace. A published offer means the
listing is live and nothing else needs to happen. Unpublished offers left behind
by an earlier run are deleted before a fresh offer is created from current data.
"""
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from listing_sync.core.enums import OfferStatus, RemoteOfferState
from listing_sync.core.exceptions import EbayAPIError, PublishRejectedError
from listing_sync.schemas.ebay import OfferRecord, OfferRequest
from listing_sync.schemas.records import ListingSnapshot, SellerProfileSnapshot
from listing_sync.services.ebay.shipping import validate_fulfillment_details

logger = logging.getLogger(__name__)

# "Please select a valid postage service"
INVALID_SHIPPING_SERVICE_ERROR_ID = 25007


@dataclass
class RemoteOffers:
    """Offers found for a SKU, split by status"""
    sku: str
    published: List[OfferRecord] = field(default_factory=list)
    unpublished: List[OfferRecord] = field(default_factory=list)

    @property
    def state(self) -> RemoteOfferState:
        if self.published:
            return RemoteOfferState.HAS_PUBLISHED
        if self.unpublished:
            return RemoteOfferState.HAS_UNPUBLISHED_ONLY
        return RemoteOfferState.NO_OFFER

    @property
    def live_offer(self) -> Optional[OfferRecord]:
        return self.published[0] if self.published else None


@dataclass
class PublishedOffer:
    offer_id: str
    listing_id: str
    used_fallback: bool = False


def is_shipping_rejection(error: PublishRejectedError) -> bool:
    if INVALID_SHIPPING_SERVICE_ERROR_ID in error.error_ids:
        return True
    return "shipping service" in str(error.details or "").lower()


class OfferLifecycleManager:
    """Drives a SKU from whatever offers exist to exactly one published offer"""

    def __init__(self, client, offer_builder):
        self.client = client
        self.offer_builder = offer_builder

    async def inspect(self, sku: str) -> RemoteOffers:
        """Fetch the SKU's offers fresh from eBay and classify them"""
        offers = await self.client.get_offers(sku)
        remote = RemoteOffers(sku=sku)
        for offer in offers:
            if (offer.status or "").upper() == OfferStatus.PUBLISHED.value:
                remote.published.append(offer)
            else:
                remote.unpublished.append(offer)
        logger.info(f"SKU {sku}: {len(remote.published)} published, {len(remote.unpublished)} unpublished offers "
                    f"({remote.state.value})")
        return remote

    async def remove_unpublished(self, remote: RemoteOffers) -> None:
        """Best-effort delete of stale unpublished offers"""
        for offer in remote.unpublished:
            try:
                await self.client.delete_offer(offer.offer_id)
                logger.info(f"Deleted unpublished offer {offer.offer_id} for SKU {remote.sku}")
            except EbayAPIError as e:
                logger.warning(f"Could not delete unpublished offer {offer.offer_id} for SKU {remote.sku}: "
                               f"{e.details or e.message}")

    async def publish(self, remote: RemoteOffers, offer: OfferRequest, listing: ListingSnapshot,
                      profile: SellerProfileSnapshot) -> PublishedOffer:
        """
        Replace any unpublished offers with a new one and publish it

        Args:
            remote: Offers found at run start (must not contain a published offer)
            offer: Offer payload to create
            listing: Listing being synced, used to rebuild fulfillment on fallback
            profile: Seller profile, used to rebuild fulfillment on fallback

        Returns:
            PublishedOffer: offer id and eBay listing id

        Raises:
            OfferRejectedError: offer creation failed
            PublishRejectedError: publish failed, or failed again after the shipping fallback
        """
        if remote.state == RemoteOfferState.HAS_UNPUBLISHED_ONLY:
            await self.remove_unpublished(remote)

        if offer.has_inline_terms:
            validate_fulfillment_details(offer.fulfillment_details)

        offer_id = await self.client.create_offer(offer)
        logger.info(f"Created offer {offer_id} for SKU {offer.sku}")

        try:
            listing_id = await self.client.publish_offer(offer_id)
        except PublishRejectedError as e:
            if not (offer.has_inline_terms and is_shipping_rejection(e)):
                raise
            logger.warning(f"Publish of offer {offer_id} rejected for shipping configuration, "
                           f"retrying with fallback service: {e.details}")
            return await self._publish_with_fallback(offer, offer_id, listing, profile)

        logger.info(f"Published offer {offer_id} for SKU {offer.sku} as eBay item {listing_id}")
        return PublishedOffer(offer_id=offer_id, listing_id=listing_id)

    async def _publish_with_fallback(self, offer: OfferRequest, rejected_offer_id: str,
                                     listing: ListingSnapshot, profile: SellerProfileSnapshot) -> PublishedOffer:
        attempted = offer.fulfillment_details.service_code
        fulfillment = self.offer_builder.fallback_fulfillment(listing, profile, attempted)
        validate_fulfillment_details(fulfillment)
        retry_offer = offer.model_copy(update={"fulfillment_details": fulfillment})

        await self.client.delete_offer(rejected_offer_id)
        logger.info(f"Deleted rejected offer {rejected_offer_id} for SKU {offer.sku}")

        offer_id = await self.client.create_offer(retry_offer)
        logger.info(f"Created replacement offer {offer_id} for SKU {offer.sku} "
                    f"with shipping service {fulfillment.service_code}")

        # Single retry; a second rejection propagates
        listing_id = await self.client.publish_offer(offer_id)
        logger.info(f"Published offer {offer_id} for SKU {offer.sku} as eBay item {listing_id} after fallback")
        return PublishedOffer(offer_id=offer_id, listing_id=listing_id, used_fallback=True)
