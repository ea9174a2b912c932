"""
eBay OAuth token lifecycle per seller.

Access and refresh tokens live in the credential store; this manager is the
only writer. A token expiring within the refresh margin is exchanged before
any marketplace call is made with it.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional
from urllib.parse import urlencode

import httpx

from listing_sync.core.config import Settings, get_settings
from listing_sync.core.exceptions import (
    ConfigurationError,
    NotConnectedError,
    ReauthRequiredError,
    TransientNetworkError,
)
from listing_sync.schemas.ebay import TokenResponse

logger = logging.getLogger(__name__)

SCOPES = [
    "https://api.ebay.com/oauth/api_scope/sell.inventory",
    "https://api.ebay.com/oauth/api_scope/sell.account",
]


class EbayTokenManager:
    """
    Guarantees a valid, non-expiring-soon access token for a seller
    """

    def __init__(self, credential_store, settings: Optional[Settings] = None):
        self.credential_store = credential_store
        self.settings = settings or get_settings()
        self.token_url = f"{self.settings.ebay_api_base}/identity/v1/oauth2/token"
        self.auth_url = f"{self.settings.ebay_auth_base}/oauth2/authorize"
        self.refresh_margin = timedelta(minutes=self.settings.TOKEN_REFRESH_MARGIN_MINUTES)

    async def ensure_valid_token(self, seller_id: str) -> str:
        """
        Get a valid access token for the seller, refreshing if necessary

        Raises:
            NotConnectedError: no connected eBay account
            ReauthRequiredError: the refresh token was rejected
        """
        credential = await self.credential_store.get_credential(seller_id)
        if credential is None or not credential.is_connected:
            raise NotConnectedError("No connected eBay account found. Please connect your eBay account first.")

        now = datetime.now(timezone.utc)
        if credential.access_token and credential.expires_at and now + self.refresh_margin < credential.expires_at:
            logger.debug(f"Using stored access token for seller {seller_id} (expires: {credential.expires_at})")
            return credential.access_token

        logger.info(f"Access token for seller {seller_id} expired or expiring soon, refreshing...")

        if not credential.refresh_token:
            await self.credential_store.mark_disconnected(seller_id)
            raise ReauthRequiredError("No refresh token available. Please reconnect your eBay account.")

        token = await self.refresh_access_token(seller_id, credential.refresh_token)
        expires_at = datetime.now(timezone.utc) + timedelta(seconds=token.expires_in)
        await self.credential_store.save_tokens(
            seller_id,
            access_token=token.access_token,
            refresh_token=token.refresh_token or credential.refresh_token,
            expires_at=expires_at,
        )
        logger.info(f"Successfully refreshed access token for seller {seller_id}")
        return token.access_token

    async def refresh_access_token(self, seller_id: str, refresh_token: str) -> TokenResponse:
        """Exchange a refresh token for a new access token"""
        data = {
            "grant_type": "refresh_token",
            "refresh_token": refresh_token,
            "scope": " ".join(SCOPES),
        }
        response = await self._post_token_request(data)

        if response.status_code == 200:
            return TokenResponse.model_validate(response.json())

        error_text = response.text
        logger.error(f"Token refresh failed for seller {seller_id}: {response.status_code} {error_text}")

        if "invalid_grant" in error_text or "refresh token" in error_text.lower():
            # Stop further refresh attempts until the seller reconnects
            await self.credential_store.mark_disconnected(seller_id)
            raise ReauthRequiredError(
                "Invalid refresh token. Please reconnect your eBay account."
            )
        raise ReauthRequiredError(f"Failed to refresh access token: {error_text}")

    def generate_user_authorization_url(self, state: Optional[str] = None) -> str:
        """Generate the URL for user authorization"""
        if not self.settings.ebay_ru_name:
            raise ConfigurationError("RuName is required for authorization URL generation")

        auth_params = {
            "client_id": self.settings.ebay_client_id,
            "response_type": "code",
            "redirect_uri": self.settings.ebay_ru_name,
            "scope": " ".join(SCOPES),
        }
        if state:
            auth_params["state"] = state

        logger.info("Generated user authorization URL")
        return f"{self.auth_url}?{urlencode(auth_params)}"

    async def connect(self, seller_id: str, authorization_code: str) -> TokenResponse:
        """Exchange an authorization code and store the seller's token set"""
        data = {
            "grant_type": "authorization_code",
            "code": authorization_code,
            "redirect_uri": self.settings.ebay_ru_name,
        }
        response = await self._post_token_request(data)

        if response.status_code != 200:
            logger.error(f"Failed to exchange authorization code: {response.text}")
            raise ReauthRequiredError(f"Failed to connect eBay account: {response.text}")

        token = TokenResponse.model_validate(response.json())
        if not token.refresh_token:
            raise ReauthRequiredError("eBay did not return a refresh token")

        await self.credential_store.connect_account(
            seller_id,
            access_token=token.access_token,
            refresh_token=token.refresh_token,
            expires_at=datetime.now(timezone.utc) + timedelta(seconds=token.expires_in),
        )
        if token.refresh_token_expires_in:
            logger.info(f"Refresh token expires in {int(token.refresh_token_expires_in / 86400)} days")
        return token

    async def _post_token_request(self, data: dict) -> httpx.Response:
        client_id = self.settings.ebay_client_id
        client_secret = self.settings.ebay_client_secret
        if not client_id or not client_secret:
            raise ConfigurationError("eBay client credentials are not configured")

        auth = httpx.BasicAuth(client_id, client_secret)
        try:
            async with httpx.AsyncClient() as client:
                return await client.post(
                    self.token_url,
                    data=data,
                    auth=auth,
                    headers={"Content-Type": "application/x-www-form-urlencoded"},
                )
        except httpx.RequestError as e:
            logger.error(f"Network error refreshing token: {str(e)}")
            raise TransientNetworkError(f"Network error contacting eBay identity service: {str(e)}")
