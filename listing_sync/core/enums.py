"""
Shared enums and constants used across the application.
"""

from enum import Enum


class PlatformName(str, Enum):
    EBAY = "ebay"


class ListingSyncStatus(str, Enum):
    """Sync status stored on a local listing"""
    UNSYNCED = "unsynced"
    ACTIVE = "active"
    ENDED = "ended"
    ERROR = "error"


class AccountClassification(str, Enum):
    INDIVIDUAL = "individual"
    BUSINESS = "business"


class PolicyType(str, Enum):
    FULFILLMENT = "fulfillment"
    PAYMENT = "payment"
    RETURN = "return"

    @property
    def endpoint(self):
        # fulfillment -> fulfillment_policy
        return f"{self.value}_policy"

    @property
    def list_key(self):
        return f"{self.value}Policies"

    @property
    def id_key(self):
        return f"{self.value}PolicyId"


class OfferStatus(str, Enum):
    PUBLISHED = "PUBLISHED"
    UNPUBLISHED = "UNPUBLISHED"


class RemoteOfferState(str, Enum):
    """Offer state of a SKU at the start of a sync run"""
    NO_OFFER = "no_offer"
    HAS_PUBLISHED = "has_published"
    HAS_UNPUBLISHED_ONLY = "has_unpublished_only"


class SyncOutcome(str, Enum):
    SUCCESS = "success"
    ALREADY_SYNCED = "already_synced"
    DRY_RUN_SUCCESS = "dry_run_success"
    ERROR = "error"
