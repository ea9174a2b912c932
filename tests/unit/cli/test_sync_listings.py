# tests/unit/cli/test_sync_listings.py
from unittest.mock import AsyncMock

from click.testing import CliRunner

from listing_sync.cli.sync_listings import sync_listings
from listing_sync.schemas.sync import BulkSyncResult, SyncResult
from listing_sync.core.exceptions import ValidationFailedError


def test_sync_listings_prints_outcomes(mocker):
    summary = BulkSyncResult(
        results=[
            SyncResult.success("lst-1", "110001", "offer-1", "https://www.ebay.com/itm/110001"),
            SyncResult.from_error("lst-2", ValidationFailedError(["price"])),
        ],
        success_count=1,
        error_count=1,
    )
    run_sync = mocker.patch("listing_sync.cli.sync_listings.run_sync", new_callable=AsyncMock, return_value=summary)

    result = CliRunner().invoke(
        sync_listings,
        ["--seller-id", "seller-1", "--listing-id", "lst-1", "--listing-id", "lst-2", "--batch-size", "2"],
    )

    run_sync.assert_awaited_once_with("seller-1", ["lst-1", "lst-2"], dry_run=False, batch_size=2)
    assert "lst-1: success" in result.output
    assert "https://www.ebay.com/itm/110001" in result.output
    assert "lst-2: error - Validation failed: price" in result.output
    assert "Succeeded: 1" in result.output
    assert "Failed: 1" in result.output
    assert result.exit_code == 1


def test_sync_listings_dry_run(mocker):
    summary = BulkSyncResult(results=[SyncResult.dry_run("lst-1")], success_count=1)
    run_sync = mocker.patch("listing_sync.cli.sync_listings.run_sync", new_callable=AsyncMock, return_value=summary)

    result = CliRunner().invoke(sync_listings, ["--seller-id", "seller-1", "--listing-id", "lst-1", "--dry-run"])

    assert result.exit_code == 0
    assert run_sync.await_args.kwargs["dry_run"] is True
    assert "lst-1: dry_run_success" in result.output


def test_sync_listings_requires_listing_id():
    result = CliRunner().invoke(sync_listings, ["--seller-id", "seller-1"])

    assert result.exit_code == 2
