import logging
from decimal import Decimal, InvalidOperation
from typing import List, Optional

from listing_sync.core.config import Settings, get_settings
from listing_sync.schemas.ebay import (
    Amount,
    FulfillmentDetails,
    ListingPolicies,
    OfferRequest,
    PaymentMethod,
    PricingSummary,
    Region,
    ReturnTerms,
    ShippingOption,
    ShippingServiceEntry,
    ShipToLocations,
    TimeDuration,
)
from listing_sync.schemas.records import ListingSnapshot, SellerProfileSnapshot
from listing_sync.schemas.sync import ResolvedPolicies
from listing_sync.services.ebay.shipping import (
    additional_shipping_cost,
    domestic_shipping_cost,
    fallback_service,
    format_amount,
    handling_days,
    map_shipping_service,
)

logger = logging.getLogger(__name__)

DEFAULT_CATEGORY_ID = "11450"  # Clothing, Shoes & Accessories
DEFAULT_PRICE = Decimal("10.00")
DEFAULT_DESCRIPTION = "Quality item in great condition."

CARD_BRANDS = ["VISA", "MASTERCARD", "AMERICAN_EXPRESS", "DISCOVER"]


class OfferBuilder:
    """
    Builds offer payloads.

    Business accounts reference their three policy ids. Individual accounts
    carry fulfillment, payment and return terms inline on the offer.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()

    def _amount(self, value) -> Amount:
        return Amount(value=format_amount(value), currency=self.settings.EBAY_CURRENCY)

    def build(self, listing: ListingSnapshot, profile: SellerProfileSnapshot, policies: ResolvedPolicies,
              location_key: Optional[str], fulfillment: Optional[FulfillmentDetails] = None) -> OfferRequest:
        """
        Build the offer payload for a listing

        Args:
            listing: Listing being synced (its id is the SKU)
            profile: Seller profile with shipping/return defaults
            policies: Account classification and policy ids
            location_key: Merchant location key
            fulfillment: Inline fulfillment block to use instead of the default one

        Returns:
            OfferRequest: Validated offer payload
        """
        common = dict(
            sku=listing.id,
            marketplace_id=self.settings.EBAY_MARKETPLACE_ID,
            format="FIXED_PRICE",
            available_quantity=max(listing.quantity or 1, 1),
            category_id=listing.ebay_category_id or DEFAULT_CATEGORY_ID,
            merchant_location_key=location_key,
            pricing_summary=PricingSummary(price=self._amount(self._price(listing))),
            listing_description=listing.description or DEFAULT_DESCRIPTION,
        )

        if policies.is_business:
            logger.info(f"Building policy-based offer for SKU {listing.id}")
            return OfferRequest(
                **common,
                listing_policies=ListingPolicies(
                    fulfillment_policy_id=policies.fulfillment_policy_id,
                    payment_policy_id=policies.payment_policy_id,
                    return_policy_id=policies.return_policy_id,
                ),
            )

        logger.info(f"Building offer with inline terms for SKU {listing.id}")
        return OfferRequest(
            **common,
            fulfillment_details=fulfillment or self.build_fulfillment(listing, profile),
            payment_methods=self.payment_methods(),
            return_terms=self.return_terms(profile),
        )

    @staticmethod
    def _price(listing: ListingSnapshot) -> Decimal:
        try:
            price = Decimal(str(listing.price)) if listing.price is not None else DEFAULT_PRICE
        except InvalidOperation:
            return DEFAULT_PRICE
        return price if price > 0 else DEFAULT_PRICE

    def build_fulfillment(self, listing: ListingSnapshot, profile: SellerProfileSnapshot,
                          service_code: Optional[str] = None) -> FulfillmentDetails:
        """Handling time plus one domestic flat-rate service"""
        code = service_code or map_shipping_service(profile.preferred_shipping_service)
        return FulfillmentDetails(
            handling_time=TimeDuration(value=handling_days(profile, listing)),
            shipping_options=[
                ShippingOption(
                    option_type="DOMESTIC",
                    cost_type="FLAT_RATE",
                    shipping_services=[
                        ShippingServiceEntry(
                            service_code=code,
                            shipping_cost=self._amount(domestic_shipping_cost(profile, listing)),
                            additional_shipping_cost=self._amount(additional_shipping_cost(profile)),
                        )
                    ],
                )
            ],
            ship_to_locations=ShipToLocations(region_included=[Region(region_name="United States")]),
        )

    def fallback_fulfillment(self, listing: ListingSnapshot, profile: SellerProfileSnapshot,
                             attempted_code: Optional[str]) -> FulfillmentDetails:
        code = fallback_service(attempted_code)
        logger.info(f"Using fallback shipping service {code} for SKU {listing.id} (rejected: {attempted_code})")
        return self.build_fulfillment(listing, profile, service_code=code)

    @staticmethod
    def payment_methods() -> List[PaymentMethod]:
        return [
            PaymentMethod(payment_method_type="CREDIT_CARD", brands=list(CARD_BRANDS)),
            PaymentMethod(payment_method_type="PAYPAL"),
        ]

    @staticmethod
    def return_terms(profile: SellerProfileSnapshot) -> ReturnTerms:
        accepted = profile.accepts_returns is not False
        if not accepted:
            return ReturnTerms(returns_accepted=False)
        payer = "SELLER" if (profile.return_shipping_paid_by or "").lower() == "seller" else "BUYER"
        return ReturnTerms(
            returns_accepted=True,
            return_period=TimeDuration(value=profile.return_period_days or 30),
            return_method="MONEY_BACK",
            return_shipping_cost_payer=payer,
            restocking_fee_percentage=profile.restocking_fee_percentage or "0",
        )
