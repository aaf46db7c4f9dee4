"""
Deadline Policy

Maps engagement size to the maximum number of days allowed for on-time
completion, and decides whether an engagement met its deadline.
"""

from ..errors import ValidationError
from ..models import Engagement, EngagementSize, EngagementType

# Allotted days per size. CUSTOM is absent on purpose: no limit applies.
DEFAULT_SIZE_LIMITS: dict[EngagementSize, int] = {
    EngagementSize.BASIC: 15,
    EngagementSize.STARTER: 25,
    EngagementSize.PRO: 40,
    EngagementSize.ENTERPRISE: 60,
}


class DeadlinePolicy:
    """Size-based deadline rules."""

    def __init__(self, limits: dict | None = None):
        source = DEFAULT_SIZE_LIMITS if limits is None else limits
        self._limits: dict[EngagementSize, int] = {}
        for size, days in source.items():
            if isinstance(days, bool) or not isinstance(days, int) or days < 0:
                raise ValidationError(f"Deadline limit for {size} must be a non-negative integer, got: {days!r}")
            self._limits[EngagementSize.parse(size)] = days

    @property
    def limits(self) -> dict[EngagementSize, int]:
        return dict(self._limits)

    def limit_for(self, size: EngagementSize) -> int:
        """Allotted days for a size. 0 means the deadline policy does not apply."""
        return self._limits.get(size, 0)

    @staticmethod
    def is_deadline_met(
        engagement_type: EngagementType,
        effective_duration_days: int,
        size_limit: int,
    ) -> bool:
        """
        True iff 0 < effective_duration_days <= size_limit.

        engagement_type is accepted so that type-specific limits can be
        introduced without changing call sites; the current table ignores it.
        """
        if effective_duration_days <= 0:
            return False
        return effective_duration_days <= size_limit

    def evaluate(self, engagement: Engagement) -> bool:
        """Deadline compliance of an engagement at its current effective duration."""
        return self.is_deadline_met(
            engagement.engagement_type,
            engagement.effective_duration_days,
            self.limit_for(engagement.size),
        )
