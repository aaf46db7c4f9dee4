"""
Output Builder

Constructs API responses from engagements, stats and errors.
"""

from decimal import Decimal

from .errors import (
    ConcurrentModification,
    EngagementError,
    InvalidTransition,
    NotFound,
    StoreError,
    ValidationError,
)
from .models import CommissionResult, Engagement, EngagementStats


def to_money(value: Decimal | None) -> float | None:
    """Convert Decimal to float with 2 decimal places."""
    if value is None:
        return None
    return round(float(value), 2)


def _fmt(value) -> str:
    """Format a number as currency string for descriptions."""
    return f"R$ {value:,.2f}"


ERROR_STATUS_CODES = {
    ValidationError: 400,
    NotFound: 404,
    InvalidTransition: 409,
    ConcurrentModification: 409,
    StoreError: 503,
}


class OutputBuilder:
    """Builds the response bodies returned by the HTTP layers."""

    def engagement(self, engagement: Engagement, deadline_limit_days: int) -> dict:
        record = engagement.to_dict()
        record["value"] = to_money(engagement.value)
        record["commission_amount"] = to_money(engagement.commission_amount)
        record["effective_duration_days"] = engagement.effective_duration_days
        record["deadline_limit_days"] = deadline_limit_days
        return record

    def commission(self, result: CommissionResult, value: Decimal) -> dict:
        return {
            "percent": result.percent,
            "amount": to_money(result.amount),
            "description": f"{result.percent}% × {_fmt(to_money(value))} = {_fmt(to_money(result.amount))}",
        }

    def stats(self, stats: EngagementStats) -> dict:
        return {
            "total_engagements": stats.total_engagements,
            "active_engagements": stats.active_engagements,
            "paused_engagements": stats.paused_engagements,
            "completed_engagements": stats.completed_engagements,
            "cancelled_engagements": stats.cancelled_engagements,
            "average_rating": float(stats.average_rating),
            "total_revenue": to_money(stats.total_revenue),
            "average_effective_duration": float(stats.average_effective_duration),
            "deadline_compliance_rate": float(stats.deadline_compliance_rate),
            "total_commission": to_money(stats.total_commission),
            "commission_by_consultant": {
                consultant: to_money(amount)
                for consultant, amount in stats.commission_by_consultant.items()
            },
        }

    def error(self, exc: EngagementError) -> tuple[int, dict]:
        """Map an engine error to (HTTP status, body)."""
        status_code = ERROR_STATUS_CODES.get(type(exc), 500)
        return status_code, {"error": exc.message, "status": exc.code}
