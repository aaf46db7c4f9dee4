"""
Input Validation for the Engagement Engine

Validates operation inputs and stored engagement records.
Raises ValidationError (a ValueError) with clear messages for any constraint violation.
"""

from decimal import Decimal

from .errors import ValidationError
from .models import Engagement, EngagementStatus, parse_date, parse_money

MIN_RATING = 1
MAX_RATING = 5


class EngagementValidator:
    """Validates engagement data according to business rules."""

    def validate_rating(self, rating) -> int:
        if isinstance(rating, bool) or not isinstance(rating, int):
            raise ValidationError(f"rating must be an integer between {MIN_RATING} and {MAX_RATING}, got: {rating!r}")
        if not (MIN_RATING <= rating <= MAX_RATING):
            raise ValidationError(f"rating must be between {MIN_RATING} and {MAX_RATING}, got: {rating}")
        return rating

    def validate_value(self, value) -> Decimal:
        amount = value if isinstance(value, Decimal) else parse_money(value)
        if not amount.is_finite():
            raise ValidationError(f"value must be a finite amount, got: {value!r}")
        if amount < 0:
            raise ValidationError(f"value cannot be negative, got: {amount}")
        return amount

    def validate_registration(self, data: dict) -> None:
        """
        Validate the fields of a new engagement registration.
        """
        client = data.get("client")
        if not isinstance(client, str) or not client.strip():
            raise ValidationError("client is required")

        for key in ("engagement_type", "size", "start_date", "planned_end_date", "value"):
            if data.get(key) in (None, ""):
                raise ValidationError(f"{key} is required")

        self.validate_value(data["value"])

        start = parse_date(data["start_date"], "start_date")
        end = parse_date(data["planned_end_date"], "planned_end_date")
        if end <= start:
            raise ValidationError(
                f"planned_end_date must be after start_date, got: {start.isoformat()} -> {end.isoformat()}"
            )

        duration = data.get("planned_duration_days")
        if duration is not None:
            if isinstance(duration, bool) or not isinstance(duration, int) or duration < 1:
                raise ValidationError(f"planned_duration_days must be an integer >= 1, got: {duration!r}")

    def validate_record(self, engagement: Engagement) -> None:
        """
        Check the invariants every stored engagement must satisfy.
        """
        if not engagement.id:
            raise ValidationError("id is required")

        if not engagement.client or not engagement.client.strip():
            raise ValidationError("client is required")

        for name in ("planned_duration_days", "paused_days_total"):
            count = getattr(engagement, name)
            if not isinstance(count, int) or isinstance(count, bool):
                raise ValidationError(f"{name} must be an integer, got: {count!r}")

        if engagement.planned_duration_days < 1:
            raise ValidationError(
                f"planned_duration_days must be >= 1, got: {engagement.planned_duration_days}"
            )

        if engagement.paused_days_total < 0:
            raise ValidationError(
                f"paused_days_total cannot be negative, got: {engagement.paused_days_total}"
            )

        self.validate_value(engagement.value)

        paused = engagement.status == EngagementStatus.PAUSED
        if paused and engagement.pause_started_at is None:
            raise ValidationError("pause_started_at is required while the engagement is paused")
        if not paused and engagement.pause_started_at is not None:
            raise ValidationError(
                f"pause_started_at must be empty when status is '{engagement.status.value}'"
            )

        if engagement.rating is not None:
            self.validate_rating(engagement.rating)

        if engagement.deadline_met is not None and not isinstance(engagement.deadline_met, bool):
            raise ValidationError(f"deadline_met must be a boolean, got: {engagement.deadline_met!r}")

        if engagement.status == EngagementStatus.COMPLETED:
            missing = [
                name for name in ("rating", "deadline_met", "commission_percent", "commission_amount", "finalized_at")
                if getattr(engagement, name) is None
            ]
            if missing:
                raise ValidationError(f"completed engagement is missing: {', '.join(missing)}")
        elif engagement.commission_amount is not None or engagement.commission_percent is not None:
            raise ValidationError("commission is only recorded on completed engagements")

        if engagement.status == EngagementStatus.CANCELLED and engagement.cancelled_at is None:
            raise ValidationError("cancelled engagement is missing cancelled_at")
