"""
Domestic shipping service codes accepted by the Inventory API offer endpoint.

Seller profiles store a loose preference label ("usps_priority", "standard", ...);
offers need one of the validated service codes below.
"""
from decimal import ROUND_HALF_UP, Decimal
from typing import List, Optional

from listing_sync.core.exceptions import ValidationFailedError
from listing_sync.schemas.ebay import FulfillmentDetails

US_PRIORITY_MAIL = "US_PriorityMail"
US_FIRST_CLASS_MAIL = "US_FirstClassMail"
US_GROUND_ADVANTAGE = "US_GroundAdvantage"
US_EXPRESS_MAIL = "US_ExpressMail"
US_UPS_GROUND = "US_UPSGround"

VALID_SHIPPING_SERVICES = {
    US_PRIORITY_MAIL: "USPS Priority Mail",
    US_FIRST_CLASS_MAIL: "USPS First Class",
    US_GROUND_ADVANTAGE: "USPS Ground Advantage",
    US_EXPRESS_MAIL: "USPS Priority Mail Express",
    US_UPS_GROUND: "UPS Ground",
}

PREFERENCE_MAP = {
    "usps_priority": US_PRIORITY_MAIL,
    "usps_first_class": US_FIRST_CLASS_MAIL,
    "usps_ground": US_GROUND_ADVANTAGE,
    "ups_ground": US_UPS_GROUND,
    "standard": US_PRIORITY_MAIL,
    "expedited": US_PRIORITY_MAIL,
    "overnight": US_EXPRESS_MAIL,
    "express": US_EXPRESS_MAIL,
}

DEFAULT_SHIPPING_SERVICE = US_PRIORITY_MAIL
DEFAULT_SHIPPING_COST = Decimal("9.95")
DEFAULT_ADDITIONAL_SHIPPING_COST = Decimal("2.00")
DEFAULT_HANDLING_DAYS = 1

# Most broadly accepted first
FALLBACK_ORDER = [US_GROUND_ADVANTAGE, US_PRIORITY_MAIL, US_FIRST_CLASS_MAIL]


def map_shipping_service(preference: Optional[str]) -> str:
    """Map a seller's preferred-service label to a valid service code"""
    if not preference:
        return DEFAULT_SHIPPING_SERVICE
    key = preference.strip()
    if key in VALID_SHIPPING_SERVICES:
        return key
    return PREFERENCE_MAP.get(key.lower(), DEFAULT_SHIPPING_SERVICE)


def format_amount(value) -> str:
    return f"{Decimal(str(value)).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)}"


def domestic_shipping_cost(profile, listing=None) -> Decimal:
    """Flat domestic cost: zero for free shipping, else listing, then profile, then default"""
    if profile is not None and profile.offers_free_shipping:
        return Decimal("0.00")
    if listing is not None and listing.shipping_cost is not None:
        return Decimal(str(listing.shipping_cost))
    if profile is not None and profile.shipping_cost_domestic is not None:
        return Decimal(str(profile.shipping_cost_domestic))
    return DEFAULT_SHIPPING_COST


def additional_shipping_cost(profile) -> Decimal:
    if profile is not None and profile.offers_free_shipping:
        return Decimal("0.00")
    if profile is not None and profile.shipping_cost_additional is not None:
        return Decimal(str(profile.shipping_cost_additional))
    return DEFAULT_ADDITIONAL_SHIPPING_COST


def handling_days(profile, listing=None) -> int:
    if listing is not None and listing.handling_time:
        return max(int(listing.handling_time), 1)
    if profile is not None and profile.handling_time_days:
        return max(int(profile.handling_time_days), 1)
    return DEFAULT_HANDLING_DAYS


def fallback_service(attempted: Optional[str]) -> str:
    """Pick a conservative service code different from the one that was rejected"""
    for code in FALLBACK_ORDER:
        if code != attempted:
            return code
    return DEFAULT_SHIPPING_SERVICE


def fulfillment_problems(details: FulfillmentDetails) -> List[str]:
    problems = []
    if details.handling_time.value < 1:
        problems.append("handling_time")
    if not details.shipping_options:
        problems.append("shipping_options")
    for option in details.shipping_options:
        if not option.shipping_services:
            problems.append("shipping_services")
        for service in option.shipping_services:
            if service.service_code not in VALID_SHIPPING_SERVICES:
                problems.append(f"shipping_service:{service.service_code}")
            if service.shipping_cost is None or not service.shipping_cost.value:
                problems.append("shipping_cost")
    return problems


def validate_fulfillment_details(details: FulfillmentDetails) -> None:
    """
    Check an inline fulfillment block before it is sent with an offer

    Raises:
        ValidationFailedError: listing the invalid parts
    """
    problems = fulfillment_problems(details)
    if problems:
        raise ValidationFailedError(problems)
