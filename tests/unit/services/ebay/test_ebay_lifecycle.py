# tests/unit/services/ebay/test_ebay_lifecycle.py
import pytest

from listing_sync.core.enums import AccountClassification, OfferStatus, RemoteOfferState
from listing_sync.core.exceptions import PublishRejectedError
from listing_sync.schemas.sync import ResolvedPolicies
from listing_sync.services.ebay.lifecycle import OfferLifecycleManager, is_shipping_rejection
from listing_sync.services.ebay.offers import OfferBuilder
from tests.conftest import BUSINESS_POLICY_IDS, LISTING_ID, make_business_profile, make_listing, make_profile
from tests.mocks.fake_marketplace import shipping_rejection

PUBLISHED = OfferStatus.PUBLISHED.value
UNPUBLISHED = OfferStatus.UNPUBLISHED.value


@pytest.fixture
def builder(settings):
    return OfferBuilder(settings)


@pytest.fixture
def lifecycle(marketplace, builder):
    return OfferLifecycleManager(marketplace, builder)


def individual_offer(builder):
    return builder.build(
        make_listing(), make_profile(), ResolvedPolicies(classification=AccountClassification.INDIVIDUAL), "loc-1"
    )


"""
1. State Classification Tests
"""

async def test_no_offer_state(lifecycle):
    remote = await lifecycle.inspect(LISTING_ID)
    assert remote.state == RemoteOfferState.NO_OFFER


async def test_published_state(lifecycle, marketplace):
    marketplace.add_offer(LISTING_ID, UNPUBLISHED)
    offer_id = marketplace.add_offer(LISTING_ID, PUBLISHED, listing_id="110077")

    remote = await lifecycle.inspect(LISTING_ID)

    assert remote.state == RemoteOfferState.HAS_PUBLISHED
    assert remote.live_offer.offer_id == offer_id
    assert remote.live_offer.listing_id == "110077"


async def test_unpublished_only_state(lifecycle, marketplace):
    marketplace.add_offer(LISTING_ID, UNPUBLISHED)
    marketplace.add_offer("other-sku", PUBLISHED, listing_id="110099")

    remote = await lifecycle.inspect(LISTING_ID)

    assert remote.state == RemoteOfferState.HAS_UNPUBLISHED_ONLY
    assert len(remote.unpublished) == 1


"""
2. Create and Publish Tests
"""

async def test_publish_from_no_offer(lifecycle, marketplace, builder):
    remote = await lifecycle.inspect(LISTING_ID)

    published = await lifecycle.publish(remote, individual_offer(builder), make_listing(), make_profile())

    assert published.listing_id
    assert published.used_fallback is False
    assert marketplace.count("create_offer") == 1
    assert marketplace.count("publish_offer") == 1
    assert marketplace.count("delete_offer") == 0


async def test_unpublished_offers_replaced(lifecycle, marketplace, builder):
    marketplace.add_offer(LISTING_ID, UNPUBLISHED)
    marketplace.add_offer(LISTING_ID, UNPUBLISHED)
    remote = await lifecycle.inspect(LISTING_ID)

    await lifecycle.publish(remote, individual_offer(builder), make_listing(), make_profile())

    assert len(marketplace.offers_for(LISTING_ID, PUBLISHED)) == 1
    assert marketplace.offers_for(LISTING_ID, UNPUBLISHED) == []
    assert marketplace.count("delete_offer") == 2


async def test_delete_failure_is_not_fatal(lifecycle, marketplace, builder, caplog):
    stale = marketplace.add_offer(LISTING_ID, UNPUBLISHED)
    marketplace.delete_failures.add(stale)
    remote = await lifecycle.inspect(LISTING_ID)

    published = await lifecycle.publish(remote, individual_offer(builder), make_listing(), make_profile())

    assert published.listing_id
    assert "Could not delete unpublished offer" in caplog.text


"""
3. Shipping Fallback Tests
"""

def test_is_shipping_rejection():
    assert is_shipping_rejection(shipping_rejection())
    assert is_shipping_rejection(PublishRejectedError("x", details="Invalid shipping service for item"))
    assert not is_shipping_rejection(PublishRejectedError("x", details={"errors": [{"errorId": 25002}]}))


async def test_shipping_rejection_retries_once_with_fallback(lifecycle, marketplace, builder):
    marketplace.publish_errors = [shipping_rejection()]
    remote = await lifecycle.inspect(LISTING_ID)

    published = await lifecycle.publish(remote, individual_offer(builder), make_listing(), make_profile())

    assert published.used_fallback is True
    assert marketplace.count("create_offer") == 2
    assert marketplace.count("publish_offer") == 2
    assert marketplace.count("delete_offer") == 1
    retry_request = marketplace.offers[published.offer_id]["request"]
    assert retry_request.fulfillment_details.service_code == "US_GroundAdvantage"
    assert marketplace.offers_for(LISTING_ID) == [published.offer_id]


async def test_second_shipping_rejection_is_terminal(lifecycle, marketplace, builder):
    marketplace.publish_errors = [shipping_rejection(), shipping_rejection("US_GroundAdvantage")]
    remote = await lifecycle.inspect(LISTING_ID)

    with pytest.raises(PublishRejectedError):
        await lifecycle.publish(remote, individual_offer(builder), make_listing(), make_profile())

    assert marketplace.count("publish_offer") == 2
    assert marketplace.count("create_offer") == 2


async def test_other_publish_rejection_is_not_retried(lifecycle, marketplace, builder):
    marketplace.publish_errors = [PublishRejectedError("Failed", status_code=400,
                                                       details={"errors": [{"errorId": 25019}]})]
    remote = await lifecycle.inspect(LISTING_ID)

    with pytest.raises(PublishRejectedError):
        await lifecycle.publish(remote, individual_offer(builder), make_listing(), make_profile())

    assert marketplace.count("publish_offer") == 1
    assert marketplace.count("create_offer") == 1


async def test_business_offer_shipping_rejection_is_terminal(lifecycle, marketplace, builder):
    marketplace.publish_errors = [shipping_rejection()]
    policies = ResolvedPolicies(
        classification=AccountClassification.BUSINESS,
        fulfillment_policy_id=BUSINESS_POLICY_IDS["ebay_fulfillment_policy_id"],
        payment_policy_id=BUSINESS_POLICY_IDS["ebay_payment_policy_id"],
        return_policy_id=BUSINESS_POLICY_IDS["ebay_return_policy_id"],
    )
    offer = builder.build(make_listing(), make_business_profile(), policies, "loc-1")
    remote = await lifecycle.inspect(LISTING_ID)

    with pytest.raises(PublishRejectedError):
        await lifecycle.publish(remote, offer, make_listing(), make_business_profile())

    assert marketplace.count("publish_offer") == 1
