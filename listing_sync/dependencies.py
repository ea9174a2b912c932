from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import async_sessionmaker

from listing_sync.core.config import Settings, get_settings
from listing_sync.services.ebay.auth import EbayTokenManager
from listing_sync.services.ebay.sync import SyncOrchestrator
from listing_sync.services.stores import CredentialStore, ListingStore
from listing_sync.services.sync_service import ListingSyncService


def get_session_factory(request: Request) -> async_sessionmaker:
    """Session factory created by the app lifespan"""
    return request.app.state.session_factory


def get_credential_store(session_factory: async_sessionmaker = Depends(get_session_factory)) -> CredentialStore:
    return CredentialStore(session_factory)


def get_listing_store(session_factory: async_sessionmaker = Depends(get_session_factory)) -> ListingStore:
    return ListingStore(session_factory)


def get_token_manager(
    credential_store: CredentialStore = Depends(get_credential_store),
    settings: Settings = Depends(get_settings),
) -> EbayTokenManager:
    return EbayTokenManager(credential_store, settings)


def get_sync_service(
    listing_store: ListingStore = Depends(get_listing_store),
    credential_store: CredentialStore = Depends(get_credential_store),
    token_manager: EbayTokenManager = Depends(get_token_manager),
    settings: Settings = Depends(get_settings),
) -> ListingSyncService:
    """Fresh orchestrator per request, nothing kept at module level"""
    orchestrator = SyncOrchestrator(listing_store, credential_store, token_manager=token_manager, settings=settings)
    return ListingSyncService(orchestrator, settings)
