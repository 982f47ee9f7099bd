"""
Subscription plan limits for card designs.

The dashboard mirrors these definitions; keep both in sync.
"""
from enum import Enum
from typing import TypedDict


class SubscriptionTier(str, Enum):
    """Subscription tier identifiers."""
    PAY = "pay"
    PRO = "pro"


class PlanLimits(TypedDict):
    max_card_designs: int | None  # None = unlimited


PLAN_LIMITS: dict[SubscriptionTier, PlanLimits] = {
    SubscriptionTier.PAY: {"max_card_designs": 1},
    SubscriptionTier.PRO: {"max_card_designs": None},
}


def get_plan_limits(tier: str | None) -> PlanLimits:
    """Get limits for a subscription tier, defaulting to PAY if unknown."""
    try:
        return PLAN_LIMITS[SubscriptionTier(tier)]
    except (ValueError, KeyError):
        return PLAN_LIMITS[SubscriptionTier.PAY]


def get_design_limit(tier: str | None) -> int | None:
    """Maximum number of card designs for a tier, or None if unlimited."""
    return get_plan_limits(tier)["max_card_designs"]
