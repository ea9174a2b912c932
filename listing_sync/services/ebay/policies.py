"""
Business policy resolution for a seller's eBay account.

eBay accounts enrolled in business policies must reference a fulfillment, payment
and return policy by id on every offer. Accounts without them (individual sellers)
send those terms inline instead. This module decides which kind of account a seller
has and, for business accounts, makes sure all three policies exist remotely.
"""
import logging
from typing import Dict, List, Optional

from listing_sync.core.enums import AccountClassification, PolicyType
from listing_sync.core.exceptions import EbayAPIError, PolicyResolutionFailedError
from listing_sync.schemas.ebay import (
    Amount,
    FulfillmentPolicyRequest,
    PaymentPolicyRequest,
    PolicyShippingOption,
    PolicyShippingService,
    Region,
    ReturnPolicyRequest,
    ShipToLocations,
    TimeDuration,
)
from listing_sync.schemas.records import SellerProfileSnapshot
from listing_sync.schemas.sync import ResolvedPolicies
from listing_sync.services.ebay.shipping import (
    additional_shipping_cost,
    domestic_shipping_cost,
    format_amount,
    handling_days,
    map_shipping_service,
)

logger = logging.getLogger(__name__)

# Real eBay policy ids are long numeric strings
MIN_POLICY_ID_LENGTH = 15

PLACEHOLDER_POLICY_IDS = {
    "INDIVIDUAL_DEFAULT_PAYMENT",
    "INDIVIDUAL_DEFAULT_RETURN",
    "INDIVIDUAL_DEFAULT_FULFILLMENT",
    "DEFAULT_PAYMENT_POLICY",
    "DEFAULT_RETURN_POLICY",
    "DEFAULT_FULFILLMENT_POLICY",
}


def stored_policy_ids(profile: SellerProfileSnapshot) -> Dict[PolicyType, Optional[str]]:
    return {
        PolicyType.FULFILLMENT: profile.ebay_fulfillment_policy_id,
        PolicyType.PAYMENT: profile.ebay_payment_policy_id,
        PolicyType.RETURN: profile.ebay_return_policy_id,
    }


def is_plausible_policy_id(policy_id: Optional[str]) -> bool:
    if not policy_id:
        return False
    policy_id = policy_id.strip()
    return len(policy_id) >= MIN_POLICY_ID_LENGTH and policy_id not in PLACEHOLDER_POLICY_IDS


class AccountPolicyResolver:
    """Classifies seller accounts and resolves their business policy ids"""

    def __init__(self, client, listing_store, settings=None):
        self.client = client
        self.listing_store = listing_store
        self.settings = settings or client.settings

    @staticmethod
    def classify(profile: SellerProfileSnapshot) -> AccountClassification:
        """
        Individual when any policy id is missing, implausibly short, or a placeholder
        """
        if all(is_plausible_policy_id(pid) for pid in stored_policy_ids(profile).values()):
            return AccountClassification.BUSINESS
        return AccountClassification.INDIVIDUAL

    async def resolve(self, seller_id: str, profile: SellerProfileSnapshot) -> ResolvedPolicies:
        """
        Resolve the policy ids an offer should reference

        Args:
            seller_id: Seller whose account is being resolved
            profile: The seller's stored business profile

        Returns:
            ResolvedPolicies: classification plus ids (ids are None for individual accounts)

        Raises:
            PolicyResolutionFailedError: a business policy could neither be found nor created
        """
        classification = self.classify(profile)
        if classification == AccountClassification.INDIVIDUAL:
            logger.info(f"Seller {seller_id} classified as individual account, using inline offer terms")
            return ResolvedPolicies(classification=classification)

        stored = stored_policy_ids(profile)
        resolved: Dict[PolicyType, str] = {}
        missing: List[str] = []
        failures: Dict[str, object] = {}

        for policy_type in PolicyType:
            try:
                resolved[policy_type] = await self._resolve_one(seller_id, profile, policy_type, stored[policy_type])
            except EbayAPIError as e:
                logger.error(f"Could not resolve {policy_type.value} policy for seller {seller_id}: {e.message}")
                missing.append(policy_type.value)
                failures[policy_type.value] = e.details if e.details is not None else e.message

        if missing:
            raise PolicyResolutionFailedError(missing, details=failures)

        result = ResolvedPolicies(
            classification=classification,
            fulfillment_policy_id=resolved[PolicyType.FULFILLMENT],
            payment_policy_id=resolved[PolicyType.PAYMENT],
            return_policy_id=resolved[PolicyType.RETURN],
        )

        if any(resolved[t] != stored[t] for t in PolicyType):
            await self.listing_store.save_policy_ids(seller_id, result)

        logger.info(
            f"Resolved business policies for seller {seller_id}: "
            f"fulfillment={result.fulfillment_policy_id}, payment={result.payment_policy_id}, "
            f"return={result.return_policy_id}"
        )
        return result

    async def _resolve_one(self, seller_id: str, profile: SellerProfileSnapshot,
                           policy_type: PolicyType, stored_id: Optional[str]) -> str:
        existing = await self.client.get_policies(policy_type)
        existing_ids = [p.policy_id for p in existing]

        if stored_id in existing_ids:
            return stored_id
        if existing_ids:
            logger.info(f"Stored {policy_type.value} policy not found remotely for seller {seller_id}, "
                        f"using existing policy {existing_ids[0]}")
            return existing_ids[0]

        logger.info(f"No {policy_type.value} policy found for seller {seller_id}, creating default")
        created = await self.client.create_policy(policy_type, self.build_policy_request(policy_type, profile))
        logger.info(f"Created {policy_type.value} policy {created.policy_id} for seller {seller_id}")
        return created.policy_id

    def build_policy_request(self, policy_type: PolicyType, profile: SellerProfileSnapshot):
        """Default policy payload built from the seller's stored settings"""
        store = profile.store_name or "Store"
        marketplace_id = self.settings.EBAY_MARKETPLACE_ID
        currency = self.settings.EBAY_CURRENCY

        if policy_type == PolicyType.PAYMENT:
            return PaymentPolicyRequest(
                name=f"{store} Payment Policy",
                description="Default payment policy",
                marketplace_id=marketplace_id,
                immediate_pay=True,
            )

        if policy_type == PolicyType.RETURN:
            if profile.accepts_returns is False:
                return ReturnPolicyRequest(
                    name=f"{store} Return Policy",
                    description="Returns not accepted",
                    marketplace_id=marketplace_id,
                    returns_accepted=False,
                )
            payer = "SELLER" if (profile.return_shipping_paid_by or "").lower() == "seller" else "BUYER"
            return ReturnPolicyRequest(
                name=f"{store} Return Policy",
                description="Default return policy",
                marketplace_id=marketplace_id,
                returns_accepted=True,
                return_period=TimeDuration(value=profile.return_period_days or 30),
                return_shipping_cost_payer=payer,
                refund_method="MONEY_BACK",
            )

        free_shipping = bool(profile.offers_free_shipping)
        service = PolicyShippingService(
            shipping_service_code=map_shipping_service(profile.preferred_shipping_service),
            shipping_cost=Amount(value=format_amount(domestic_shipping_cost(profile)), currency=currency),
            additional_shipping_cost=Amount(value=format_amount(additional_shipping_cost(profile)), currency=currency),
            free_shipping=free_shipping,
        )
        return FulfillmentPolicyRequest(
            name=f"{store} Fulfillment Policy",
            description="Free domestic shipping" if free_shipping else "Default domestic shipping",
            marketplace_id=marketplace_id,
            handling_time=TimeDuration(value=handling_days(profile)),
            shipping_options=[PolicyShippingOption(shipping_services=[service])],
            ship_to_locations=ShipToLocations(region_included=[Region(region_name="United States")]),
        )
