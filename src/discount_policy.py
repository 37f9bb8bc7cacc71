"""Online discount policy - one authoritative rate for every price display"""
from decimal import Decimal
from typing import Any, Dict, Optional

from config import FALLBACK_DISCOUNT_RATE
from .config_store import flag_enabled
from .models import DiscountPolicy
from .money import round_whole, to_decimal


def discount_text(rate: Decimal) -> str:
    """'15%'-style text, always a whole percent."""
    return f"{round_whole(rate * 100)}%"


def make_policy(rate: Any, from_config: bool = False) -> DiscountPolicy:
    value = to_decimal(rate)
    if value is None or not Decimal("0") <= value < Decimal("1"):
        raise ValueError(f"Discount rate must be a fraction in [0, 1), got {rate!r}")
    return DiscountPolicy(rate=value, label=discount_text(value), from_config=from_config)


def fallback_policy() -> DiscountPolicy:
    """Policy used while the config is unavailable or still loading."""
    return make_policy(FALLBACK_DISCOUNT_RATE)


def resolve_discount_policy(features: Optional[Dict[str, Any]]) -> DiscountPolicy:
    """
    Resolve the discount policy from the 'features' config record.

    The configured rate is authoritative. A disabled discount resolves to a
    0% policy. A missing or malformed rate (including percentages such as
    15 instead of 0.15) resolves to the fallback policy.
    """
    if features is None:
        return fallback_policy()

    if not flag_enabled(features.get('online_discount_enabled'), default=True):
        return make_policy(0, from_config=True)

    try:
        return make_policy(features.get('online_discount_rate'), from_config=True)
    except ValueError as e:
        print(f"⚠️ Using fallback discount: {e}")
        return fallback_policy()
