"""
Commission Calculator

Turns an engagement's value, client rating and deadline compliance into the
consultant's commission. The rating/deadline -> percent mapping lives in named
tier tables so the policy can change without touching call sites.
"""

from dataclasses import dataclass
from decimal import Decimal

from ..errors import ValidationError
from ..models import CommissionResult, quantize_money
from ..validators import EngagementValidator


@dataclass(frozen=True)
class CommissionTier:
    """One row of a tier table. deadline_met=None matches either outcome."""

    min_rating: int
    max_rating: int
    deadline_met: bool | None
    percent: int

    def matches(self, rating: int, deadline_met: bool) -> bool:
        if not (self.min_rating <= rating <= self.max_rating):
            return False
        return self.deadline_met is None or self.deadline_met == deadline_met


@dataclass(frozen=True)
class CommissionTierTable:
    """Ordered tiers; the first matching row wins, no match pays 0%."""

    name: str
    tiers: tuple[CommissionTier, ...]

    def percent_for(self, rating: int, deadline_met: bool) -> int:
        for tier in self.tiers:
            if tier.matches(rating, deadline_met):
                return tier.percent
        return 0


# Production rule: only ratings of 4 or 5 earn commission,
# with the higher tier reserved for on-time delivery.
STANDARD_TIERS = CommissionTierTable(
    name="standard",
    tiers=(
        CommissionTier(min_rating=4, max_rating=5, deadline_met=True, percent=12),
        CommissionTier(min_rating=4, max_rating=5, deadline_met=False, percent=8),
    ),
)

# Alternate rule: on-time delivery earns the lower tier regardless of rating.
DEADLINE_WEIGHTED_TIERS = CommissionTierTable(
    name="deadline_weighted",
    tiers=(
        CommissionTier(min_rating=4, max_rating=5, deadline_met=True, percent=12),
        CommissionTier(min_rating=1, max_rating=3, deadline_met=True, percent=8),
        CommissionTier(min_rating=4, max_rating=5, deadline_met=False, percent=8),
    ),
)

TIER_TABLES: dict[str, CommissionTierTable] = {
    STANDARD_TIERS.name: STANDARD_TIERS,
    DEADLINE_WEIGHTED_TIERS.name: DEADLINE_WEIGHTED_TIERS,
}


def get_tier_table(name: str) -> CommissionTierTable:
    try:
        return TIER_TABLES[name]
    except KeyError:
        allowed = ", ".join(sorted(TIER_TABLES))
        raise ValidationError(f"Unknown commission tier table: {name!r}. Allowed values: {allowed}")


class CommissionCalculator:
    """Calculates consultant commission for a finished engagement."""

    def __init__(self, table: CommissionTierTable = STANDARD_TIERS):
        self.table = table
        self.validator = EngagementValidator()

    def calculate(self, value, rating: int, deadline_met: bool) -> CommissionResult:
        """
        amount = value * percent / 100, rounded half-up to cents.
        """
        amount = self.validator.validate_value(value)
        rating = self.validator.validate_rating(rating)
        if not isinstance(deadline_met, bool):
            raise ValidationError(f"deadline_met must be a boolean, got: {deadline_met!r}")

        percent = self.table.percent_for(rating, deadline_met)
        commission = quantize_money(amount * Decimal(percent) / Decimal("100"))
        return CommissionResult(percent=percent, amount=commission)


def calculate_commission(value, rating: int, deadline_met: bool) -> CommissionResult:
    """Calculate commission with the standard tier table."""
    return CommissionCalculator().calculate(value, rating, deadline_met)
