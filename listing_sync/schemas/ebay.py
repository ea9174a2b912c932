"""
Request and response structures for the eBay Sell APIs (Inventory, Account, Identity).

Request models serialize to eBay's camelCase JSON via ``to_payload()``.
Response models validate what eBay sends back before the pipeline uses it.
"""
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class EbayModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    def to_payload(self) -> Dict:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


# --- Shared building blocks ---

class Amount(EbayModel):
    value: str
    currency: str = "USD"


class TimeDuration(EbayModel):
    value: int
    unit: str = "DAY"


class Region(EbayModel):
    region_name: str
    region_type: str = "COUNTRY"


class ShipToLocations(EbayModel):
    region_included: List[Region]


class CategoryType(EbayModel):
    name: str = "ALL_EXCLUDING_MOTORS_VEHICLES"


# --- Inventory item ---

class InventoryProduct(EbayModel):
    title: str
    description: str
    image_urls: List[str]
    brand: Optional[str] = None
    aspects: Dict[str, List[str]] = {}


class ShipToLocationAvailability(EbayModel):
    quantity: int


class Availability(EbayModel):
    ship_to_location_availability: ShipToLocationAvailability


class InventoryItemRequest(EbayModel):
    product: InventoryProduct
    condition: str
    availability: Availability


# --- Offer ---

class ShippingServiceEntry(EbayModel):
    service_code: str
    shipping_cost: Amount
    additional_shipping_cost: Optional[Amount] = None


class ShippingOption(EbayModel):
    option_type: str = "DOMESTIC"
    cost_type: str = "FLAT_RATE"
    shipping_services: List[ShippingServiceEntry]


class FulfillmentDetails(EbayModel):
    handling_time: TimeDuration
    shipping_options: List[ShippingOption]
    ship_to_locations: Optional[ShipToLocations] = None

    @property
    def service_code(self) -> Optional[str]:
        for option in self.shipping_options:
            for service in option.shipping_services:
                return service.service_code
        return None


class PaymentMethod(EbayModel):
    payment_method_type: str
    brands: Optional[List[str]] = None


class ReturnTerms(EbayModel):
    returns_accepted: bool
    return_period: Optional[TimeDuration] = None
    return_method: str = "MONEY_BACK"
    return_shipping_cost_payer: str = "BUYER"
    restocking_fee_percentage: str = "0"


class ListingPolicies(EbayModel):
    fulfillment_policy_id: str
    payment_policy_id: str
    return_policy_id: str


class PricingSummary(EbayModel):
    price: Amount


class OfferRequest(EbayModel):
    """
    Offer payload for POST /sell/inventory/v1/offer.

    Exactly one of two shapes is valid: policy references only (business accounts)
    or inline fulfillment, payment and return blocks (individual accounts).
    """
    sku: str
    marketplace_id: str = "EBAY_US"
    format: str = "FIXED_PRICE"
    available_quantity: int = 1
    category_id: str
    merchant_location_key: Optional[str] = None
    pricing_summary: PricingSummary
    listing_description: Optional[str] = None
    listing_policies: Optional[ListingPolicies] = None
    fulfillment_details: Optional[FulfillmentDetails] = None
    payment_methods: Optional[List[PaymentMethod]] = None
    return_terms: Optional[ReturnTerms] = None

    @model_validator(mode="after")
    def check_policy_shape(self):
        inline = [self.fulfillment_details, self.payment_methods, self.return_terms]
        if self.listing_policies is not None:
            if any(block is not None for block in inline):
                raise ValueError("offer with listing policies must not carry inline terms")
        elif any(block is None for block in inline):
            raise ValueError("offer without listing policies needs fulfillment, payment and return blocks")
        return self

    @property
    def has_inline_terms(self) -> bool:
        return self.listing_policies is None


# --- Business policies (Account API) ---

class PolicyShippingService(EbayModel):
    shipping_service_code: str
    shipping_cost: Amount
    additional_shipping_cost: Optional[Amount] = None
    free_shipping: bool = False
    sort_order: int = 1


class PolicyShippingOption(EbayModel):
    option_type: str = "DOMESTIC"
    cost_type: str = "FLAT_RATE"
    shipping_services: List[PolicyShippingService]


class FulfillmentPolicyRequest(EbayModel):
    name: str
    description: Optional[str] = None
    marketplace_id: str = "EBAY_US"
    category_types: List[CategoryType] = Field(default_factory=lambda: [CategoryType()])
    handling_time: TimeDuration
    shipping_options: List[PolicyShippingOption]
    ship_to_locations: Optional[ShipToLocations] = None


class PaymentPolicyRequest(EbayModel):
    name: str
    description: Optional[str] = None
    marketplace_id: str = "EBAY_US"
    category_types: List[CategoryType] = Field(default_factory=lambda: [CategoryType()])
    immediate_pay: bool = True


class ReturnPolicyRequest(EbayModel):
    name: str
    description: Optional[str] = None
    marketplace_id: str = "EBAY_US"
    category_types: List[CategoryType] = Field(default_factory=lambda: [CategoryType()])
    returns_accepted: bool
    return_period: Optional[TimeDuration] = None
    return_shipping_cost_payer: Optional[str] = None
    refund_method: Optional[str] = None


class PolicyRecord(BaseModel):
    policy_id: str
    name: Optional[str] = None


# --- Responses ---

class TokenResponse(BaseModel):
    """Identity API token payload (snake_case on the wire)"""
    access_token: str
    expires_in: int = 7200
    refresh_token: Optional[str] = None
    refresh_token_expires_in: Optional[int] = None
    token_type: Optional[str] = None


class OfferListing(EbayModel):
    listing_id: Optional[str] = None
    listing_status: Optional[str] = None


class OfferRecord(EbayModel):
    offer_id: str
    sku: Optional[str] = None
    status: Optional[str] = None
    listing: Optional[OfferListing] = None

    @property
    def listing_id(self) -> Optional[str]:
        return self.listing.listing_id if self.listing else None


class OffersResponse(EbayModel):
    offers: List[OfferRecord] = []
    total: int = 0


class CreateOfferResponse(EbayModel):
    offer_id: str


class PublishOfferResponse(EbayModel):
    listing_id: str


class InventoryLocationRecord(EbayModel):
    merchant_location_key: str
    name: Optional[str] = None
    location_types: List[str] = []


class InventoryLocationsResponse(EbayModel):
    locations: List[InventoryLocationRecord] = []
