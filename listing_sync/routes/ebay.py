import logging

from fastapi import APIRouter, Depends, HTTPException

from listing_sync.core.exceptions import ConfigurationError, ReauthRequiredError, TransientNetworkError
from listing_sync.dependencies import get_sync_service, get_token_manager
from listing_sync.schemas.sync import BulkSyncRequest, BulkSyncResult, ConnectRequest, SyncResult
from listing_sync.services.ebay.auth import EbayTokenManager
from listing_sync.services.sync_service import ListingSyncService

router = APIRouter(prefix="/api/ebay", tags=["ebay"])

logger = logging.getLogger(__name__)


@router.post("/sellers/{seller_id}/listings/{listing_id}/sync", response_model=SyncResult)
async def sync_listing(
    seller_id: str,
    listing_id: str,
    dry_run: bool = False,
    service: ListingSyncService = Depends(get_sync_service),
):
    """Publish one listing to eBay. Every run outcome, including errors, returns 200."""
    return await service.sync_listing(seller_id, listing_id, dry_run=dry_run)


@router.post("/sellers/{seller_id}/listings/bulk-sync", response_model=BulkSyncResult)
async def bulk_sync_listings(
    seller_id: str,
    request: BulkSyncRequest,
    service: ListingSyncService = Depends(get_sync_service),
):
    logger.info(f"Bulk sync requested for seller {seller_id}: {len(request.listing_ids)} listings")
    return await service.bulk_sync_listings(seller_id, request.listing_ids, batch_size=request.batch_size)


@router.get("/sellers/{seller_id}/connect-url")
async def get_connect_url(
    seller_id: str,
    token_manager: EbayTokenManager = Depends(get_token_manager),
):
    """Consent URL the seller opens to link their eBay account"""
    try:
        url = token_manager.generate_user_authorization_url(state=seller_id)
    except ConfigurationError as e:
        raise HTTPException(status_code=503, detail=e.message)
    return {"authorization_url": url}


@router.post("/sellers/{seller_id}/connect")
async def connect_account(
    seller_id: str,
    request: ConnectRequest,
    token_manager: EbayTokenManager = Depends(get_token_manager),
):
    """Exchange the authorization code from the consent redirect"""
    try:
        await token_manager.connect(seller_id, request.code)
    except ReauthRequiredError as e:
        raise HTTPException(status_code=400, detail=e.message)
    except (ConfigurationError, TransientNetworkError) as e:
        raise HTTPException(status_code=503, detail=e.message)
    return {"status": "connected", "seller_id": seller_id}
