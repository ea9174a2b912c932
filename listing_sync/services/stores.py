# listing_sync/services/stores.py
"""
Data-store access for the sync pipeline.

Each method opens its own session from the injected session factory and returns
detached snapshots, so concurrent sync runs never share ORM state.
"""
import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import async_sessionmaker

from listing_sync.core.enums import ListingSyncStatus, PlatformName
from listing_sync.models import Listing, MarketplaceAccount, PlatformListing, SellerProfile
from listing_sync.schemas.records import CredentialSnapshot, ListingSnapshot, SellerProfileSnapshot
from listing_sync.schemas.sync import ResolvedPolicies

logger = logging.getLogger(__name__)


class CredentialStore:
    """Persists per-seller eBay OAuth tokens (marketplace_accounts)"""

    def __init__(self, session_factory: async_sessionmaker, platform: str = PlatformName.EBAY.value):
        self.session_factory = session_factory
        self.platform = platform

    def _account_query(self, seller_id: str):
        return select(MarketplaceAccount).where(
            MarketplaceAccount.user_id == seller_id,
            MarketplaceAccount.platform == self.platform,
            MarketplaceAccount.is_active.is_(True),
        )

    async def get_credential(self, seller_id: str) -> Optional[CredentialSnapshot]:
        async with self.session_factory() as session:
            account = (await session.execute(self._account_query(seller_id))).scalars().first()
            if account is None:
                return None
            return CredentialSnapshot(
                user_id=account.user_id,
                access_token=account.oauth_token,
                refresh_token=account.refresh_token,
                expires_at=account.oauth_expires_at,
                is_connected=account.is_connected,
                account_username=account.account_username,
            )

    async def save_tokens(self, seller_id: str, access_token: str, refresh_token: Optional[str],
                          expires_at: datetime) -> None:
        async with self.session_factory() as session:
            account = (await session.execute(self._account_query(seller_id))).scalars().first()
            if account is None:
                raise LookupError(f"No eBay account stored for seller {seller_id}")
            account.oauth_token = access_token
            if refresh_token:
                account.refresh_token = refresh_token
            account.oauth_expires_at = expires_at
            await session.commit()
        logger.info(f"Stored refreshed eBay token for seller {seller_id} (expires: {expires_at})")

    async def mark_disconnected(self, seller_id: str) -> None:
        async with self.session_factory() as session:
            account = (await session.execute(self._account_query(seller_id))).scalars().first()
            if account is None:
                return
            account.is_connected = False
            account.oauth_expires_at = None
            await session.commit()
        logger.warning(f"Marked eBay account for seller {seller_id} as disconnected")

    async def connect_account(self, seller_id: str, access_token: str, refresh_token: str,
                              expires_at: datetime, username: Optional[str] = None) -> None:
        async with self.session_factory() as session:
            account = (await session.execute(self._account_query(seller_id))).scalars().first()
            if account is None:
                account = MarketplaceAccount(user_id=seller_id, platform=self.platform, is_active=True)
                session.add(account)
            account.oauth_token = access_token
            account.refresh_token = refresh_token
            account.oauth_expires_at = expires_at
            account.is_connected = True
            if username:
                account.account_username = username
            await session.commit()
        logger.info(f"Connected eBay account for seller {seller_id}")


class ListingStore:
    """Reads listings/profiles and writes sync outcomes"""

    def __init__(self, session_factory: async_sessionmaker, platform: str = PlatformName.EBAY.value):
        self.session_factory = session_factory
        self.platform = platform

    async def get_listing(self, seller_id: str, listing_id: str) -> Optional[ListingSnapshot]:
        async with self.session_factory() as session:
            stmt = select(Listing).where(Listing.id == listing_id, Listing.user_id == seller_id)
            listing = (await session.execute(stmt)).scalars().first()
            return ListingSnapshot.from_model(listing) if listing else None

    async def get_profile(self, seller_id: str) -> Optional[SellerProfileSnapshot]:
        async with self.session_factory() as session:
            profile = await session.get(SellerProfile, seller_id)
            return SellerProfileSnapshot.model_validate(profile) if profile else None

    async def save_policy_ids(self, seller_id: str, policies: ResolvedPolicies) -> None:
        async with self.session_factory() as session:
            profile = await session.get(SellerProfile, seller_id)
            if profile is None:
                raise LookupError(f"No seller profile for {seller_id}")
            profile.ebay_fulfillment_policy_id = policies.fulfillment_policy_id
            profile.ebay_payment_policy_id = policies.payment_policy_id
            profile.ebay_return_policy_id = policies.return_policy_id
            await session.commit()
        logger.info(f"Saved eBay policy ids for seller {seller_id}")

    async def record_sync_success(self, seller_id: str, listing_id: str, remote_listing_id: str,
                                  offer_id: Optional[str], platform_url: str) -> None:
        now = datetime.now(timezone.utc)
        async with self.session_factory() as session:
            listing = await session.get(Listing, listing_id)
            if listing is None or listing.user_id != seller_id:
                raise LookupError(f"Listing {listing_id} not found for seller {seller_id}")
            listing.ebay_listing_id = remote_listing_id
            listing.sync_status = ListingSyncStatus.ACTIVE.value
            listing.last_synced_at = now
            listing.sync_message = None

            link = await self._get_link(session, listing_id)
            if link is None:
                link = PlatformListing(listing_id=listing_id, user_id=seller_id, platform=self.platform)
                session.add(link)
            link.platform_listing_id = remote_listing_id
            link.platform_url = platform_url
            link.status = ListingSyncStatus.ACTIVE.value
            link.last_synced_at = now
            link.platform_data = {"offer_id": offer_id, "sku": listing_id}
            await session.commit()

    async def record_sync_error(self, seller_id: str, listing_id: str, message: str) -> None:
        async with self.session_factory() as session:
            listing = await session.get(Listing, listing_id)
            if listing is None or listing.user_id != seller_id:
                return
            listing.sync_status = ListingSyncStatus.ERROR.value
            listing.sync_message = message
            link = await self._get_link(session, listing_id)
            if link is not None:
                link.status = ListingSyncStatus.ERROR.value
            await session.commit()

    async def _get_link(self, session, listing_id: str) -> Optional[PlatformListing]:
        stmt = select(PlatformListing).where(
            PlatformListing.listing_id == listing_id,
            PlatformListing.platform == self.platform,
        )
        return (await session.execute(stmt)).scalars().first()
