# listing_sync/cli/sync_listings.py
import asyncio
import logging
import sys
from datetime import datetime

import click

from listing_sync.core.config import get_settings
from listing_sync.core.logging_config import configure_logging
from listing_sync.database import create_engine, create_session_factory
from listing_sync.schemas.sync import BulkSyncResult
from listing_sync.services.ebay.sync import SyncOrchestrator
from listing_sync.services.stores import CredentialStore, ListingStore
from listing_sync.services.sync_service import ListingSyncService

logger = logging.getLogger(__name__)


def build_service(settings, session_factory) -> ListingSyncService:
    listing_store = ListingStore(session_factory)
    credential_store = CredentialStore(session_factory)
    orchestrator = SyncOrchestrator(listing_store, credential_store, settings=settings)
    return ListingSyncService(orchestrator, settings)


async def run_sync(seller_id, listing_ids, dry_run=False, batch_size=None) -> BulkSyncResult:
    """Sync listings using a direct database connection."""
    settings = get_settings()
    engine = create_engine(settings.DATABASE_URL)
    try:
        service = build_service(settings, create_session_factory(engine))
        if dry_run:
            summary = BulkSyncResult()
            for listing_id in listing_ids:
                result = await service.sync_listing(seller_id, listing_id, dry_run=True)
                summary.results.append(result)
                if result.ok:
                    summary.success_count += 1
                else:
                    summary.error_count += 1
            return summary
        return await service.bulk_sync_listings(seller_id, listing_ids, batch_size=batch_size)
    finally:
        await engine.dispose()


@click.command(name="listing-sync")
@click.option('--seller-id', required=True, help='Seller whose listings are synced')
@click.option('--listing-id', 'listing_ids', multiple=True, required=True, help='Listing to sync (repeatable)')
@click.option('--dry-run', is_flag=True, help='Validate only, no eBay calls')
@click.option('--batch-size', type=click.IntRange(min=1), default=None, help='Listings synced concurrently')
def sync_listings(seller_id, listing_ids, dry_run, batch_size):
    """Publish listings to eBay"""
    configure_logging(get_settings().LOG_LEVEL)

    start_time = datetime.now()
    logger.info(f"Starting eBay listing sync at {start_time}")

    summary = asyncio.run(run_sync(seller_id, list(listing_ids), dry_run=dry_run, batch_size=batch_size))

    for result in summary.results:
        line = f"{result.listing_id}: {result.status.value} - {result.message}"
        if result.platform_url:
            line += f" ({result.platform_url})"
        click.echo(line)

    click.echo(f"\nSync completed in {datetime.now() - start_time}")
    click.echo(f"Succeeded: {summary.success_count}")
    click.echo(f"Failed: {summary.error_count}")

    if summary.error_count:
        sys.exit(1)


if __name__ == "__main__":
    sync_listings()
