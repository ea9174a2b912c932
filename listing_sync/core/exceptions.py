from typing import Any, List, Optional


class BaseServiceError(Exception):
    """Base exception for all service-related errors."""
    pass


class SyncError(BaseServiceError):
    """Base exception for anything that aborts a listing sync run."""
    code = "sync_error"

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message


class NotConnectedError(SyncError):
    """Raised when the seller has no connected eBay account."""
    code = "not_connected"


class ReauthRequiredError(SyncError):
    """Raised when the stored refresh token is rejected and the seller must reconnect."""
    code = "reauth_required"


class ConfigurationError(SyncError):
    """Raised when eBay application credentials are not configured."""
    code = "configuration_error"


class ValidationFailedError(SyncError):
    """Raised when a listing or seller profile is missing required fields."""
    code = "validation_failed"

    def __init__(self, missing_fields: List[str]):
        super().__init__(f"Validation failed: {', '.join(missing_fields)}")
        self.missing_fields = list(missing_fields)


class ListingNotFoundError(SyncError):
    """Raised when a listing does not exist for the seller."""
    code = "listing_not_found"


class SellerProfileNotFoundError(SyncError):
    """Raised when the seller has no business profile."""
    code = "profile_not_found"


class PolicyResolutionFailedError(SyncError):
    """Raised when business policies cannot be found or created."""
    code = "policy_resolution_failed"

    def __init__(self, missing_policies: List[str], details: Any = None):
        super().__init__(
            "eBay business policies could not be created for: "
            f"{', '.join(missing_policies)}. Create them in eBay Seller Hub and retry."
        )
        self.missing_policies = list(missing_policies)
        self.details = details


class TransientNetworkError(SyncError):
    """Raised when the marketplace could not be reached."""
    code = "network_error"


class EbayAPIError(SyncError):
    """Raised when eBay API calls fail. Keeps the eBay error payload as returned."""
    code = "ebay_api_error"

    def __init__(self, message: str, status_code: Optional[int] = None, details: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.details = details

    @property
    def error_ids(self) -> List[int]:
        if isinstance(self.details, dict):
            return [e.get("errorId") for e in self.details.get("errors", []) if isinstance(e, dict)]
        return []


class InventoryRejectedError(EbayAPIError):
    """Raised when eBay rejects an inventory item upsert."""
    code = "inventory_rejected"


class OfferRejectedError(EbayAPIError):
    """Raised when eBay rejects an offer query, create or delete."""
    code = "offer_rejected"


class PublishRejectedError(EbayAPIError):
    """Raised when eBay rejects publishing an offer."""
    code = "publish_rejected"


class PolicyRequestError(EbayAPIError):
    """Raised when a business policy list/create call fails."""
    code = "policy_request_failed"


class InventoryLocationError(EbayAPIError):
    """Raised when no usable inventory location exists."""
    code = "inventory_location_missing"

