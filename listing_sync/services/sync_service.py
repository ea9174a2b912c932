# listing_sync/services/sync_service.py
import asyncio
import logging
from typing import List, Optional

from listing_sync.core.config import Settings, get_settings
from listing_sync.core.enums import SyncOutcome
from listing_sync.core.exceptions import SyncError
from listing_sync.schemas.sync import BulkSyncResult, SyncResult
from listing_sync.services.ebay.sync import SyncOrchestrator

logger = logging.getLogger(__name__)


class ListingSyncService:
    """
    Caller-facing sync operations.

    Bulk sync runs listings in small concurrent batches with a pause between
    batches to stay inside eBay's rate limits.
    """

    def __init__(self, orchestrator: SyncOrchestrator, settings: Optional[Settings] = None):
        self.orchestrator = orchestrator
        self.settings = settings or get_settings()

    async def sync_listing(self, seller_id: str, listing_id: str, dry_run: bool = False) -> SyncResult:
        return await self.orchestrator.sync(seller_id, listing_id, dry_run=dry_run)

    async def _sync_one(self, seller_id: str, listing_id: str) -> SyncResult:
        try:
            return await self.sync_listing(seller_id, listing_id)
        except Exception as e:
            # One listing must not abort the batch
            logger.exception(f"Unexpected error syncing listing {listing_id} for seller {seller_id}")
            error = SyncError(f"Unexpected error: {str(e)}")
            return SyncResult.from_error(listing_id, error)

    async def bulk_sync_listings(self, seller_id: str, listing_ids: List[str],
                                 batch_size: Optional[int] = None) -> BulkSyncResult:
        """
        Sync several listings for one seller

        Args:
            seller_id: Owner of the listings
            listing_ids: Listings to sync, processed in order
            batch_size: Listings synced concurrently per batch

        Returns:
            BulkSyncResult: per-listing results plus success/error counts
        """
        batch_size = max(batch_size or self.settings.BULK_SYNC_BATCH_SIZE, 1)
        pause = self.settings.BULK_SYNC_BATCH_PAUSE_SECONDS
        summary = BulkSyncResult()

        batches = [listing_ids[i:i + batch_size] for i in range(0, len(listing_ids), batch_size)]
        logger.info(f"Bulk syncing {len(listing_ids)} listings for seller {seller_id} "
                    f"in {len(batches)} batches of up to {batch_size}")

        for index, batch in enumerate(batches):
            results = await asyncio.gather(*(self._sync_one(seller_id, listing_id) for listing_id in batch))
            for result in results:
                summary.results.append(result)
                if result.status == SyncOutcome.ERROR:
                    summary.error_count += 1
                else:
                    summary.success_count += 1

            if index < len(batches) - 1 and pause > 0:
                await asyncio.sleep(pause)

        logger.info(f"Bulk sync for seller {seller_id} complete: "
                    f"{summary.success_count} succeeded, {summary.error_count} failed")
        return summary
