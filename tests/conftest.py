# tests/conftest.py
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from listing_sync.core.config import Settings
from listing_sync.schemas.records import CredentialSnapshot, ListingSnapshot, SellerProfileSnapshot
from listing_sync.services.ebay.auth import EbayTokenManager
from listing_sync.services.ebay.sync import SyncOrchestrator
from tests.mocks.fake_marketplace import FakeMarketplace
from tests.mocks.fake_stores import FakeCredentialStore, FakeListingStore

SELLER_ID = "seller-1"
LISTING_ID = "lst-0001"

BUSINESS_POLICY_IDS = {
    "ebay_fulfillment_policy_id": "246810121416182",
    "ebay_payment_policy_id": "135791113151719",
    "ebay_return_policy_id": "112233445566778",
}


@pytest.fixture
def settings():
    """Provide test settings"""
    return Settings(
        DATABASE_URL="sqlite+aiosqlite:///:memory:",
        EBAY_CLIENT_ID="test-client-id",
        EBAY_CLIENT_SECRET="test-client-secret",
        EBAY_RU_NAME="test-ru-name",
        EBAY_SANDBOX_MODE=False,
        LISTING_PHOTO_BASE_URL="https://cdn.example.com/listing-photos",
        BULK_SYNC_BATCH_SIZE=3,
        BULK_SYNC_BATCH_PAUSE_SECONDS=0,
    )


def make_listing(**overrides) -> ListingSnapshot:
    data = dict(
        id=LISTING_ID,
        user_id=SELLER_ID,
        title="Vintage Levi's 501 Denim Jacket",
        description="Classic trucker jacket, light wash.",
        price=Decimal("48.00"),
        condition="very_good",
        quantity=1,
        ebay_category_id="57988",
        brand="Levi's",
        color_primary="Blue",
        size_value="M",
        material="Denim",
        photo_paths=["users/seller-1/lst-0001/front.jpg", "users/seller-1/lst-0001/back.jpg"],
    )
    data.update(overrides)
    return ListingSnapshot(**data)


def make_profile(**overrides) -> SellerProfileSnapshot:
    data = dict(
        user_id=SELLER_ID,
        store_name="Thrift Corner",
        handling_time_days=2,
        shipping_cost_domestic=Decimal("7.50"),
        shipping_cost_additional=Decimal("2.00"),
        preferred_shipping_service="usps_priority",
        accepts_returns=True,
        return_period_days=30,
        return_shipping_paid_by="buyer",
    )
    data.update(overrides)
    return SellerProfileSnapshot(**data)


def make_business_profile(**overrides) -> SellerProfileSnapshot:
    return make_profile(**{**BUSINESS_POLICY_IDS, **overrides})


@pytest.fixture
def listing():
    return make_listing()


@pytest.fixture
def individual_profile():
    return make_profile()


@pytest.fixture
def business_profile():
    return make_business_profile()


@pytest.fixture
def marketplace(settings):
    return FakeMarketplace(settings)


@pytest.fixture
def credential_store():
    store = FakeCredentialStore()
    store.credentials[SELLER_ID] = CredentialSnapshot(
        user_id=SELLER_ID,
        access_token="valid-access-token",
        refresh_token="valid-refresh-token",
        expires_at=datetime.now(timezone.utc) + timedelta(hours=2),
        is_connected=True,
    )
    return store


@pytest.fixture
def listing_store(listing, individual_profile):
    store = FakeListingStore()
    store.listings[listing.id] = listing
    store.profiles[SELLER_ID] = individual_profile
    return store


@pytest.fixture
def token_manager(credential_store, settings):
    return EbayTokenManager(credential_store, settings)


@pytest.fixture
def orchestrator(listing_store, credential_store, token_manager, settings, marketplace):
    return SyncOrchestrator(
        listing_store,
        credential_store,
        token_manager=token_manager,
        settings=settings,
        client_factory=lambda seller_id: marketplace,
    )
