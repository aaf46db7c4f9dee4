"""
Consulting Stats Calculator

Aggregates portfolio statistics for the consulting dashboard.
"""

from collections import defaultdict
from decimal import ROUND_HALF_UP, Decimal

from ..models import Engagement, EngagementStats, EngagementStatus, quantize_money

UNASSIGNED = "unassigned"


class ConsultingStatsCalculator:
    """Computes EngagementStats over a list of engagements."""

    def calculate(self, engagements: list[Engagement]) -> EngagementStats:
        if not engagements:
            return EngagementStats()

        by_status = defaultdict(int)
        for engagement in engagements:
            by_status[engagement.status] += 1

        rated = [e.rating for e in engagements if e.rating is not None]
        average_rating = (
            self._ratio(Decimal(sum(rated)), len(rated)) if rated else Decimal("0")
        )

        total_revenue = sum((e.value for e in engagements), Decimal("0"))

        total_days = sum(e.effective_duration_days for e in engagements)
        average_duration = self._ratio(Decimal(total_days), len(engagements))

        # Compliance only counts engagements whose deadline was evaluated at finalize
        completed = [
            e for e in engagements
            if e.status == EngagementStatus.COMPLETED and e.deadline_met is not None
        ]
        if completed:
            on_time = sum(1 for e in completed if e.deadline_met)
            compliance = self._ratio(Decimal(on_time) * 100, len(completed))
        else:
            compliance = Decimal("0")

        commission_by_consultant: dict[str, Decimal] = defaultdict(lambda: Decimal("0"))
        for engagement in engagements:
            if engagement.commission_amount is None:
                continue
            key = engagement.consultant_id or UNASSIGNED
            commission_by_consultant[key] += engagement.commission_amount

        return EngagementStats(
            total_engagements=len(engagements),
            active_engagements=by_status[EngagementStatus.IN_PROGRESS] + by_status[EngagementStatus.PAUSED],
            paused_engagements=by_status[EngagementStatus.PAUSED],
            completed_engagements=by_status[EngagementStatus.COMPLETED],
            cancelled_engagements=by_status[EngagementStatus.CANCELLED],
            average_rating=average_rating,
            total_revenue=quantize_money(total_revenue),
            average_effective_duration=average_duration,
            deadline_compliance_rate=compliance,
            total_commission=quantize_money(sum(commission_by_consultant.values(), Decimal("0"))),
            commission_by_consultant={k: quantize_money(v) for k, v in sorted(commission_by_consultant.items())},
        )

    @staticmethod
    def _ratio(numerator: Decimal, denominator: int) -> Decimal:
        return (numerator / Decimal(denominator)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
