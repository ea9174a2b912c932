# tests/unit/services/test_sync_service.py
import asyncio
import pytest
from unittest.mock import AsyncMock

from listing_sync.core.enums import SyncOutcome
from listing_sync.core.exceptions import ValidationFailedError
from listing_sync.schemas.sync import SyncResult
from listing_sync.services.sync_service import ListingSyncService
from tests.conftest import SELLER_ID, make_listing


@pytest.fixture
def service(orchestrator, settings):
    return ListingSyncService(orchestrator, settings)


def add_listings(listing_store, count):
    ids = []
    for i in range(count):
        listing_id = f"lst-{i:04d}"
        listing_store.listings[listing_id] = make_listing(id=listing_id)
        ids.append(listing_id)
    return ids


async def test_sync_listing_delegates_to_orchestrator(service, marketplace):
    result = await service.sync_listing(SELLER_ID, "lst-0001", dry_run=True)

    assert result.status == SyncOutcome.DRY_RUN_SUCCESS
    assert marketplace.calls == []


async def test_bulk_sync_counts_outcomes(service, listing_store, marketplace):
    ids = add_listings(listing_store, 4)
    listing_store.listings["lst-0002"] = make_listing(id="lst-0002", price=0)

    summary = await service.bulk_sync_listings(SELLER_ID, ids)

    assert [r.listing_id for r in summary.results] == ids
    assert summary.success_count == 3
    assert summary.error_count == 1
    assert summary.results[2].error_code == "validation_failed"


async def test_bulk_sync_pauses_between_batches(service, listing_store, settings, mocker):
    service.settings = settings.model_copy(update={"BULK_SYNC_BATCH_PAUSE_SECONDS": 2.0})
    sleep = mocker.patch("listing_sync.services.sync_service.asyncio.sleep", new_callable=AsyncMock)
    ids = add_listings(listing_store, 7)

    summary = await service.bulk_sync_listings(SELLER_ID, ids, batch_size=3)

    assert len(summary.results) == 7
    # 3 batches -> 2 pauses
    assert sleep.await_count == 2
    sleep.assert_awaited_with(2.0)


async def test_bulk_sync_limits_concurrency(service, settings):
    running = 0
    peak = 0

    async def fake_sync(seller_id, listing_id, dry_run=False):
        nonlocal running, peak
        running += 1
        peak = max(peak, running)
        await asyncio.sleep(0)
        running -= 1
        return SyncResult.dry_run(listing_id)

    service.orchestrator.sync = fake_sync

    summary = await service.bulk_sync_listings(SELLER_ID, [f"id-{i}" for i in range(8)], batch_size=2)

    assert summary.success_count == 8
    assert peak <= 2


async def test_unexpected_error_does_not_abort_batch(service, listing_store):
    ids = add_listings(listing_store, 3)
    original = service.orchestrator.sync

    async def flaky_sync(seller_id, listing_id, dry_run=False):
        if listing_id == "lst-0001":
            raise RuntimeError("database went away")
        return await original(seller_id, listing_id, dry_run=dry_run)

    service.orchestrator.sync = flaky_sync

    summary = await service.bulk_sync_listings(SELLER_ID, ids)

    assert summary.success_count == 2
    assert summary.error_count == 1
    failed = summary.results[1]
    assert failed.status == SyncOutcome.ERROR
    assert "database went away" in failed.message


def test_sync_result_from_error():
    result = SyncResult.from_error("lst-1", ValidationFailedError(["price", "photos"]))

    assert result.status == SyncOutcome.ERROR
    assert result.error_code == "validation_failed"
    assert result.missing_fields == ["price", "photos"]
    assert result.message == "Validation failed: price, photos"
    assert not result.ok
