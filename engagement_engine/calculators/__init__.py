"""
Calculators Package

Provides the deadline, commission and statistics rules used by the lifecycle.
"""

from .commission import (
    DEADLINE_WEIGHTED_TIERS,
    STANDARD_TIERS,
    CommissionCalculator,
    CommissionTier,
    CommissionTierTable,
    calculate_commission,
    get_tier_table,
)
from .deadline import DEFAULT_SIZE_LIMITS, DeadlinePolicy
from .stats import ConsultingStatsCalculator

__all__ = [
    "CommissionCalculator",
    "CommissionTier",
    "CommissionTierTable",
    "ConsultingStatsCalculator",
    "DEADLINE_WEIGHTED_TIERS",
    "DEFAULT_SIZE_LIMITS",
    "DeadlinePolicy",
    "STANDARD_TIERS",
    "calculate_commission",
    "get_tier_table",
]
