"""
Sync orchestrator: publishes one local listing to eBay.

A run is a single sequential pipeline:

    listing/profile -> validation -> [dry run stops here]
          -> token -> existing offers -> policies -> location
          -> inventory item -> offer create/publish -> persist outcome

Every failure the pipeline knows about is a ``SyncError``; anything else is wrapped
in one. Either way it is recorded on the listing and returned as an ``error`` result
instead of being raised.
"""
import logging
from decimal import Decimal, InvalidOperation
from typing import Callable, List, Optional

from listing_sync.core.config import Settings, get_settings
from listing_sync.core.enums import AccountClassification, RemoteOfferState
from listing_sync.core.exceptions import (
    ListingNotFoundError,
    NotConnectedError,
    SellerProfileNotFoundError,
    SyncError,
    ValidationFailedError,
)
from listing_sync.schemas.records import ListingSnapshot, SellerProfileSnapshot
from listing_sync.schemas.sync import SyncResult
from listing_sync.services.ebay.auth import EbayTokenManager
from listing_sync.services.ebay.client import EbayClient
from listing_sync.services.ebay.inventory import InventoryClient
from listing_sync.services.ebay.lifecycle import OfferLifecycleManager
from listing_sync.services.ebay.offers import OfferBuilder
from listing_sync.services.ebay.policies import AccountPolicyResolver

logger = logging.getLogger(__name__)

MIN_TITLE_LENGTH = 10


def validate_listing(listing: ListingSnapshot, profile: SellerProfileSnapshot, is_business: bool,
                     image_urls: List[str]) -> List[str]:
    """Names of required fields that are missing or invalid"""
    missing = []
    if not listing.title or len(listing.title.strip()) < MIN_TITLE_LENGTH:
        missing.append("title")
    try:
        if listing.price is None or Decimal(str(listing.price)) <= 0:
            missing.append("price")
    except InvalidOperation:
        missing.append("price")
    if not listing.condition:
        missing.append("condition")
    if not image_urls:
        missing.append("photos")

    if is_business:
        for name, value in (
            ("fulfillment_policy", profile.ebay_fulfillment_policy_id),
            ("payment_policy", profile.ebay_payment_policy_id),
            ("return_policy", profile.ebay_return_policy_id),
        ):
            if not value:
                missing.append(name)
    else:
        if (not profile.offers_free_shipping and profile.shipping_cost_domestic is None
                and listing.shipping_cost is None):
            missing.append("shipping_cost")
        if not profile.handling_time_days and not listing.handling_time:
            missing.append("handling_time")
    return missing


class SyncOrchestrator:
    """
    Sequences token, policy, inventory and offer steps for one listing.

    Stores and the token manager are injected; nothing is shared between runs
    except those collaborators.
    """

    def __init__(self, listing_store, credential_store, token_manager: Optional[EbayTokenManager] = None,
                 settings: Optional[Settings] = None, client_factory: Optional[Callable] = None,
                 offer_builder: Optional[OfferBuilder] = None):
        self.listing_store = listing_store
        self.credential_store = credential_store
        self.settings = settings or get_settings()
        self.token_manager = token_manager or EbayTokenManager(credential_store, self.settings)
        self.client_factory = client_factory or self._default_client
        self.offer_builder = offer_builder or OfferBuilder(self.settings)

    def _default_client(self, seller_id: str) -> EbayClient:
        return EbayClient(self.token_manager, seller_id, self.settings)

    def platform_url(self, remote_listing_id: str) -> str:
        host = "sandbox.ebay.com" if self.settings.EBAY_SANDBOX_MODE else "www.ebay.com"
        return f"https://{host}/itm/{remote_listing_id}"

    async def sync(self, seller_id: str, listing_id: str, dry_run: bool = False) -> SyncResult:
        """
        Publish a listing to eBay

        Args:
            seller_id: Owner of the listing
            listing_id: Listing to sync (also the SKU)
            dry_run: Validate only, without calling eBay or writing anything

        Returns:
            SyncResult: success, already_synced, dry_run_success or error
        """
        logger.info(f"Starting eBay sync for listing {listing_id} (seller {seller_id}, dry_run={dry_run})")
        try:
            result = await self._run(seller_id, listing_id, dry_run)
        except SyncError as e:
            logger.error(f"eBay sync failed for listing {listing_id} (seller {seller_id}): "
                         f"[{e.code}] {e.message}")
            return await self._failed(seller_id, listing_id, e, dry_run)
        except Exception as e:
            logger.exception(f"Unexpected error syncing listing {listing_id} (seller {seller_id}): {str(e)}")
            return await self._failed(seller_id, listing_id, SyncError(f"Unexpected error: {str(e)}"), dry_run)

        logger.info(f"eBay sync for listing {listing_id} finished: {result.status.value}")
        return result

    async def _failed(self, seller_id: str, listing_id: str, error: SyncError, dry_run: bool) -> SyncResult:
        if not dry_run:
            try:
                await self.listing_store.record_sync_error(seller_id, listing_id, error.message)
            except Exception:
                logger.exception(f"Could not record sync error for listing {listing_id} (seller {seller_id})")
        return SyncResult.from_error(listing_id, error)

    async def _run(self, seller_id: str, listing_id: str, dry_run: bool) -> SyncResult:
        listing = await self.listing_store.get_listing(seller_id, listing_id)
        if listing is None:
            raise ListingNotFoundError(f"Listing {listing_id} not found")
        profile = await self.listing_store.get_profile(seller_id)
        if profile is None:
            raise SellerProfileNotFoundError(
                "Seller profile not found. Complete your shipping and return settings first."
            )

        client = self.client_factory(seller_id)
        resolver = AccountPolicyResolver(client, self.listing_store, self.settings)
        inventory = InventoryClient(client, self.settings)
        lifecycle = OfferLifecycleManager(client, self.offer_builder)

        classification = resolver.classify(profile)
        missing = validate_listing(
            listing, profile, classification == AccountClassification.BUSINESS, inventory.image_urls(listing)
        )
        if missing:
            raise ValidationFailedError(missing)

        if dry_run:
            credential = await self.credential_store.get_credential(seller_id)
            if credential is None or not credential.is_connected:
                raise NotConnectedError("No connected eBay account found. Please connect your eBay account first.")
            logger.info(f"Dry run passed for listing {listing_id} ({classification.value} account)")
            return SyncResult.dry_run(listing_id)

        await self.token_manager.ensure_valid_token(seller_id)

        sku = listing.id
        remote = await lifecycle.inspect(sku)
        if remote.state == RemoteOfferState.HAS_PUBLISHED:
            return await self._already_synced(seller_id, listing, remote.live_offer)

        policies = await resolver.resolve(seller_id, profile)
        location_key = await inventory.get_location_key()
        await inventory.upsert_item(sku, listing)

        offer = self.offer_builder.build(listing, profile, policies, location_key)
        published = await lifecycle.publish(remote, offer, listing, profile)

        url = self.platform_url(published.listing_id)
        await self.listing_store.record_sync_success(
            seller_id, listing_id, published.listing_id, published.offer_id, url
        )
        return SyncResult.success(listing_id, published.listing_id, published.offer_id, url)

    async def _already_synced(self, seller_id: str, listing: ListingSnapshot, live_offer) -> SyncResult:
        remote_listing_id = live_offer.listing_id or listing.ebay_listing_id
        url = self.platform_url(remote_listing_id) if remote_listing_id else None
        if remote_listing_id:
            await self.listing_store.record_sync_success(
                seller_id, listing.id, remote_listing_id, live_offer.offer_id, url
            )
        logger.info(f"Listing {listing.id} already live on eBay (offer {live_offer.offer_id}, "
                    f"item {remote_listing_id})")
        return SyncResult.already_synced(listing.id, remote_listing_id, live_offer.offer_id, url)
