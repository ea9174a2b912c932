from typing import Any, List, Optional

from pydantic import BaseModel, Field

from listing_sync.core.enums import AccountClassification, SyncOutcome
from listing_sync.core.exceptions import SyncError


class ResolvedPolicies(BaseModel):
    classification: AccountClassification
    fulfillment_policy_id: Optional[str] = None
    payment_policy_id: Optional[str] = None
    return_policy_id: Optional[str] = None

    @property
    def is_business(self) -> bool:
        return self.classification == AccountClassification.BUSINESS


class SyncResult(BaseModel):
    """Outcome of a single listing sync run"""
    status: SyncOutcome
    listing_id: str
    message: str
    remote_listing_id: Optional[str] = None
    offer_id: Optional[str] = None
    platform_url: Optional[str] = None
    error_code: Optional[str] = None
    missing_fields: List[str] = []
    details: Any = None

    @property
    def ok(self) -> bool:
        return self.status != SyncOutcome.ERROR

    @classmethod
    def success(cls, listing_id: str, remote_listing_id: str, offer_id: str, platform_url: str) -> "SyncResult":
        return cls(
            status=SyncOutcome.SUCCESS,
            listing_id=listing_id,
            message=f"Listing published to eBay as item {remote_listing_id}",
            remote_listing_id=remote_listing_id,
            offer_id=offer_id,
            platform_url=platform_url,
        )

    @classmethod
    def already_synced(cls, listing_id: str, remote_listing_id: Optional[str], offer_id: Optional[str],
                       platform_url: Optional[str]) -> "SyncResult":
        return cls(
            status=SyncOutcome.ALREADY_SYNCED,
            listing_id=listing_id,
            message=f"Listing is already live on eBay as item {remote_listing_id or 'unknown'}",
            remote_listing_id=remote_listing_id,
            offer_id=offer_id,
            platform_url=platform_url,
        )

    @classmethod
    def dry_run(cls, listing_id: str) -> "SyncResult":
        return cls(
            status=SyncOutcome.DRY_RUN_SUCCESS,
            listing_id=listing_id,
            message="Listing passed validation and is ready to sync",
        )

    @classmethod
    def from_error(cls, listing_id: str, error: SyncError) -> "SyncResult":
        return cls(
            status=SyncOutcome.ERROR,
            listing_id=listing_id,
            message=error.message or str(error) or error.__class__.__name__,
            error_code=error.code,
            missing_fields=getattr(error, "missing_fields", None) or getattr(error, "missing_policies", None) or [],
            details=getattr(error, "details", None),
        )


class BulkSyncRequest(BaseModel):
    listing_ids: List[str] = Field(min_length=1)
    batch_size: Optional[int] = Field(default=None, ge=1)


class ConnectRequest(BaseModel):
    code: str = Field(min_length=1)


class BulkSyncResult(BaseModel):
    results: List[SyncResult] = []
    success_count: int = 0
    error_count: int = 0
