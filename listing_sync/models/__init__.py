from .listing import Listing, ListingPhoto
from .marketplace_account import MarketplaceAccount
from .seller_profile import SellerProfile
from .platform_listing import PlatformListing

# This ensures all models are registered with SQLAlchemy
__all__ = [
    'Listing',
    'ListingPhoto',
    'MarketplaceAccount',
    'SellerProfile',
    'PlatformListing',
]
