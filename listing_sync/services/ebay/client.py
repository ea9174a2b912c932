import logging
import httpx

from typing import Any, Dict, List, Optional, Type

from pydantic import ValidationError

from listing_sync.core.config import Settings, get_settings
from listing_sync.core.enums import PolicyType
from listing_sync.core.exceptions import (
    EbayAPIError,
    InventoryLocationError,
    InventoryRejectedError,
    OfferRejectedError,
    PolicyRequestError,
    PublishRejectedError,
    TransientNetworkError,
)
from listing_sync.schemas.ebay import (
    CreateOfferResponse,
    EbayModel,
    InventoryItemRequest,
    InventoryLocationRecord,
    InventoryLocationsResponse,
    OfferRecord,
    OfferRequest,
    OffersResponse,
    PolicyRecord,
    PublishOfferResponse,
)

logger = logging.getLogger(__name__)


def error_payload(response: httpx.Response) -> Any:
    """eBay error body as sent: decoded JSON when possible, raw text otherwise"""
    try:
        return response.json()
    except ValueError:
        return response.text


class EbayClient:
    """
    Client for the eBay Sell Inventory and Account APIs, bound to one seller.
    Every request carries a bearer token obtained from the token manager.
    """

    def __init__(self, token_manager, seller_id: str, settings: Optional[Settings] = None):
        self.token_manager = token_manager
        self.seller_id = seller_id
        self.settings = settings or get_settings()
        self.marketplace_id = self.settings.EBAY_MARKETPLACE_ID

        self.INVENTORY_API = f"{self.settings.ebay_api_base}/sell/inventory/v1"
        self.ACCOUNT_API = f"{self.settings.ebay_api_base}/sell/account/v1"

    async def _get_headers(self) -> Dict[str, str]:
        """Get headers with auth token for API requests"""
        token = await self.token_manager.ensure_valid_token(self.seller_id)
        return {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
            "Accept": "application/json",
            "Content-Language": self.settings.EBAY_CONTENT_LANGUAGE,
            "Accept-Language": self.settings.EBAY_CONTENT_LANGUAGE,
        }

    async def _request(
        self,
        method: str,
        url: str,
        error_cls: Type[EbayAPIError],
        action: str,
        json: Optional[Dict] = None,
        params: Optional[Dict] = None,
        ok_statuses: tuple = (200,),
    ) -> httpx.Response:
        headers = await self._get_headers()

        try:
            async with httpx.AsyncClient() as client:
                response = await client.request(method, url, headers=headers, json=json, params=params)
        except httpx.RequestError as e:
            logger.error(f"Network error trying to {action}: {str(e)}")
            raise TransientNetworkError(f"Network error trying to {action}: {str(e)}")

        if response.status_code not in ok_statuses:
            details = error_payload(response)
            logger.error(f"eBay API error ({response.status_code}) trying to {action}: {details}")
            raise error_cls(
                f"Failed to {action}: {response.status_code}",
                status_code=response.status_code,
                details=details,
            )
        return response

    def _decode(self, response: httpx.Response, error_cls: Type[EbayAPIError], action: str, model=None):
        """JSON body of a successful reply, validated against `model` when given"""
        try:
            data = response.json()
            if model is not None:
                return model.model_validate(data)
        except (ValueError, ValidationError) as e:
            details = error_payload(response)
            logger.error(f"Unexpected eBay response ({response.status_code}) trying to {action}: {details}")
            raise error_cls(
                f"Unexpected response trying to {action}: {str(e)}",
                status_code=response.status_code,
                details=details,
            )
        if not isinstance(data, dict):
            raise error_cls(
                f"Unexpected response trying to {action}",
                status_code=response.status_code,
                details=data,
            )
        return data

    # --- Inventory items ---

    async def create_or_update_inventory_item(self, sku: str, item: InventoryItemRequest) -> bool:
        """
        Create or update an inventory item

        Args:
            sku: The SKU of the item
            item: Inventory item payload

        Returns:
            bool: Success status

        Raises:
            InventoryRejectedError: If eBay rejects the item
        """
        url = f"{self.INVENTORY_API}/inventory_item/{sku}"
        await self._request(
            "PUT", url, InventoryRejectedError, f"create/update inventory item {sku}",
            json=item.to_payload(), ok_statuses=(200, 201, 204),
        )
        return True

    async def get_inventory_locations(self) -> List[InventoryLocationRecord]:
        url = f"{self.INVENTORY_API}/location"
        response = await self._request("GET", url, InventoryLocationError, "get inventory locations")
        return self._decode(
            response, InventoryLocationError, "get inventory locations", InventoryLocationsResponse
        ).locations

    # --- Offers ---

    async def get_offers(self, sku: str) -> List[OfferRecord]:
        """
        Get the offers that exist for a SKU

        eBay answers 404 when the SKU has no offers at all; that is an empty result.
        """
        url = f"{self.INVENTORY_API}/offer"
        params = {"sku": sku, "marketplace_id": self.marketplace_id}
        response = await self._request(
            "GET", url, OfferRejectedError, f"get offers for {sku}",
            params=params, ok_statuses=(200, 404),
        )
        if response.status_code == 404:
            return []
        return self._decode(response, OfferRejectedError, f"get offers for {sku}", OffersResponse).offers

    async def create_offer(self, offer: OfferRequest) -> str:
        """
        Create an offer for an inventory item

        Args:
            offer: Offer payload

        Returns:
            str: The new offer id

        Raises:
            OfferRejectedError: If eBay rejects the offer
        """
        url = f"{self.INVENTORY_API}/offer"
        response = await self._request(
            "POST", url, OfferRejectedError, f"create offer for {offer.sku}",
            json=offer.to_payload(), ok_statuses=(200, 201),
        )
        return self._decode(
            response, OfferRejectedError, f"create offer for {offer.sku}", CreateOfferResponse
        ).offer_id

    async def delete_offer(self, offer_id: str) -> bool:
        """Delete an offer. An offer that is already gone counts as deleted."""
        url = f"{self.INVENTORY_API}/offer/{offer_id}"
        await self._request(
            "DELETE", url, OfferRejectedError, f"delete offer {offer_id}",
            ok_statuses=(200, 204, 404),
        )
        return True

    async def publish_offer(self, offer_id: str) -> str:
        """
        Publish an offer to make it active on eBay

        Args:
            offer_id: The ID of the offer to publish

        Returns:
            str: The eBay listing id

        Raises:
            PublishRejectedError: If eBay refuses to publish
        """
        url = f"{self.INVENTORY_API}/offer/{offer_id}/publish"
        response = await self._request("POST", url, PublishRejectedError, f"publish offer {offer_id}")
        return self._decode(
            response, PublishRejectedError, f"publish offer {offer_id}", PublishOfferResponse
        ).listing_id

    # --- Business policies ---

    async def get_policies(self, policy_type: PolicyType) -> List[PolicyRecord]:
        url = f"{self.ACCOUNT_API}/{policy_type.endpoint}"
        response = await self._request(
            "GET", url, PolicyRequestError, f"get {policy_type.value} policies",
            params={"marketplace_id": self.marketplace_id},
        )
        data = self._decode(response, PolicyRequestError, f"get {policy_type.value} policies")
        return [
            PolicyRecord(policy_id=p[policy_type.id_key], name=p.get("name"))
            for p in data.get(policy_type.list_key, [])
            if p.get(policy_type.id_key)
        ]

    async def create_policy(self, policy_type: PolicyType, request: EbayModel) -> PolicyRecord:
        url = f"{self.ACCOUNT_API}/{policy_type.endpoint}"
        response = await self._request(
            "POST", url, PolicyRequestError, f"create {policy_type.value} policy",
            json=request.to_payload(), ok_statuses=(200, 201),
        )
        data = self._decode(response, PolicyRequestError, f"create {policy_type.value} policy")
        if not data.get(policy_type.id_key):
            raise PolicyRequestError(
                f"eBay did not return a {policy_type.value} policy id",
                status_code=response.status_code,
                details=data,
            )
        return PolicyRecord(policy_id=data[policy_type.id_key], name=data.get("name"))
