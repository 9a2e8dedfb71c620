from enum import Enum
from typing import Dict, Union

from rishta.core.exceptions import InvalidTierError


class Tier(str, Enum):
    """Subscription packages a registrant can be approved on."""
    STANDARD = "Standard"
    BASIC = "Basic"
    GOLD = "Gold"
    DIAMOND = "Diamond"


# Package configuration
# credits and duration are independent per tier; Diamond bypasses the credit
# check entirely, the 999 allotment is only what gets displayed.
PACKAGE_TABLE: Dict[Tier, Dict[str, Union[int, bool]]] = {
    Tier.STANDARD: {
        "credits": 0,
        "duration_months": 1,
        "unlimited": False,
    },
    Tier.BASIC: {
        "credits": 3,
        "duration_months": 1,
        "unlimited": False,
    },
    Tier.GOLD: {
        "credits": 10,
        "duration_months": 3,
        "unlimited": False,
    },
    Tier.DIAMOND: {
        "credits": 999,
        "duration_months": 12,
        "unlimited": True,
    },
}

DEFAULT_TIER = Tier.STANDARD


def parse_tier(value: Union[str, Tier, None]) -> Tier:
    """Resolve a tier name ("Gold", "gold", "Gold Plan") to a Tier."""
    if isinstance(value, Tier):
        return value
    if not value or not isinstance(value, str):
        raise InvalidTierError("Package tier is required")
    name = value.strip()
    # Older clients send "Gold Plan" etc.
    if name.lower().endswith(" plan"):
        name = name[:-5].strip()
    for tier in Tier:
        if tier.value.lower() == name.lower():
            return tier
    raise InvalidTierError(
        f"Unknown package tier '{value}'. Expected one of: {', '.join(t.value for t in Tier)}"
    )


def get_package(tier: Union[str, Tier]) -> Dict[str, Union[int, bool]]:
    return PACKAGE_TABLE[parse_tier(tier)]


def is_unlimited(tier: Union[str, Tier, None]) -> bool:
    if tier is None:
        return False
    try:
        return bool(get_package(tier)["unlimited"])
    except InvalidTierError:
        return False
