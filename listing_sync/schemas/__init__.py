from .records import ListingSnapshot, SellerProfileSnapshot, CredentialSnapshot
from .sync import ResolvedPolicies, SyncResult, BulkSyncRequest, BulkSyncResult, ConnectRequest
