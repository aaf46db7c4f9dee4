"""
Engagement Lifecycle

State machine for consulting engagements:

    in_progress --pause--> paused --resume--> in_progress
    in_progress | paused --finalize--> completed   (terminal)
    in_progress | paused --cancel----> cancelled   (terminal)

Every operation returns a new Engagement snapshot and leaves its input
untouched. Nothing here performs I/O; callers persist the returned snapshot.
"""

import logging
import uuid
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from typing import Callable

from .calculators import CommissionCalculator, DeadlinePolicy
from .errors import InvalidTransition, ValidationError
from .models import (
    Engagement,
    EngagementSize,
    EngagementStatus,
    EngagementType,
    parse_date,
    parse_money,
)
from .validators import EngagementValidator

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]

REVISABLE_FIELDS = (
    "client",
    "engagement_type",
    "size",
    "consultant_id",
    "start_date",
    "planned_end_date",
    "planned_duration_days",
    "value",
)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def days_between(start: datetime, end: datetime) -> int:
    """Whole days elapsed from start to end (floor), never negative."""
    return max(0, (end - start) // timedelta(days=1))


class EngagementLifecycle:
    """Applies status transitions and pause/resume accounting."""

    def __init__(
        self,
        deadline_policy: DeadlinePolicy | None = None,
        commission_calculator: CommissionCalculator | None = None,
        clock: Clock = utc_now,
    ):
        self.deadline_policy = deadline_policy or DeadlinePolicy()
        self.commission_calculator = commission_calculator or CommissionCalculator()
        self.clock = clock
        self.validator = EngagementValidator()

    def register(self, data: dict) -> Engagement:
        """Build a new in_progress engagement from registration data."""
        self.validator.validate_registration(data)
        start = parse_date(data["start_date"], "start_date")
        end = parse_date(data["planned_end_date"], "planned_end_date")
        now = self.clock()

        return Engagement(
            id=str(data.get("id") or uuid.uuid4().hex),
            client=data["client"].strip(),
            engagement_type=EngagementType.parse(data["engagement_type"]),
            size=EngagementSize.parse(data["size"]),
            start_date=start,
            planned_end_date=end,
            planned_duration_days=data.get("planned_duration_days") or (end - start).days,
            value=parse_money(data["value"]),
            consultant_id=data.get("consultant_id") or None,
            status=EngagementStatus.IN_PROGRESS,
            paused_days_total=0,
            created_at=now,
            updated_at=now,
        )

    def pause(self, engagement: Engagement) -> Engagement:
        if engagement.status != EngagementStatus.IN_PROGRESS:
            raise InvalidTransition("pause", engagement.status)

        now = self.clock()
        return replace(
            engagement,
            status=EngagementStatus.PAUSED,
            pause_started_at=now,
            updated_at=self._touch(engagement, now),
        )

    def resume(self, engagement: Engagement) -> Engagement:
        if engagement.status != EngagementStatus.PAUSED:
            raise InvalidTransition("resume", engagement.status)
        return self._close_pause(engagement, self.clock())

    def finalize(self, engagement: Engagement, rating: int, signature_confirmed: bool = False) -> Engagement:
        """
        Complete the engagement and fix its commission.

        A paused engagement is resumed first so the pause window counts
        against the effective duration used for the deadline check.
        """
        if engagement.status.is_terminal:
            raise InvalidTransition("finalize", engagement.status)
        rating = self.validator.validate_rating(rating)
        if not isinstance(signature_confirmed, bool):
            raise ValidationError(f"signature_confirmed must be a boolean, got: {signature_confirmed!r}")

        now = self.clock()
        current = engagement
        if current.status == EngagementStatus.PAUSED:
            current = self._close_pause(current, now)

        deadline_met = self.deadline_policy.evaluate(current)
        commission = self.commission_calculator.calculate(current.value, rating, deadline_met)

        return replace(
            current,
            status=EngagementStatus.COMPLETED,
            pause_started_at=None,
            rating=rating,
            deadline_met=deadline_met,
            closing_signature_confirmed=signature_confirmed,
            commission_percent=commission.percent,
            commission_amount=commission.amount,
            finalized_at=now,
            updated_at=self._touch(current, now),
        )

    def cancel(self, engagement: Engagement) -> Engagement:
        """Cancel the engagement. An open pause window is discarded, not accumulated."""
        if engagement.status.is_terminal:
            raise InvalidTransition("cancel", engagement.status)

        now = self.clock()
        return replace(
            engagement,
            status=EngagementStatus.CANCELLED,
            pause_started_at=None,
            cancelled_at=now,
            updated_at=self._touch(engagement, now),
        )

    def revise(self, engagement: Engagement, changes: dict) -> Engagement:
        """Edit the registration details of a non-terminal engagement."""
        if engagement.status.is_terminal:
            raise InvalidTransition("revise", engagement.status)

        unknown = sorted(set(changes) - set(REVISABLE_FIELDS))
        if unknown:
            raise ValidationError(f"Fields cannot be revised: {', '.join(unknown)}")

        merged = {
            "client": engagement.client,
            "engagement_type": engagement.engagement_type,
            "size": engagement.size,
            "consultant_id": engagement.consultant_id,
            "start_date": engagement.start_date,
            "planned_end_date": engagement.planned_end_date,
            "value": engagement.value,
        }
        merged.update(changes)
        self.validator.validate_registration(merged)

        start = parse_date(merged["start_date"], "start_date")
        end = parse_date(merged["planned_end_date"], "planned_end_date")
        # A null duration means "derive it from the dates again"
        if changes.get("planned_duration_days") is not None:
            duration = changes["planned_duration_days"]
        elif (
            "planned_duration_days" in changes
            or start != engagement.start_date
            or end != engagement.planned_end_date
        ):
            duration = (end - start).days
        else:
            duration = engagement.planned_duration_days

        return replace(
            engagement,
            client=merged["client"].strip(),
            engagement_type=EngagementType.parse(merged["engagement_type"]),
            size=EngagementSize.parse(merged["size"]),
            consultant_id=merged["consultant_id"] or None,
            start_date=start,
            planned_end_date=end,
            planned_duration_days=duration,
            value=parse_money(merged["value"]),
            updated_at=self._touch(engagement, self.clock()),
        )

    def _close_pause(self, engagement: Engagement, now: datetime) -> Engagement:
        paused_days = days_between(engagement.pause_started_at, now)
        logger.debug(f"Closing pause on {engagement.id}: {paused_days} day(s)")
        return replace(
            engagement,
            status=EngagementStatus.IN_PROGRESS,
            pause_started_at=None,
            paused_days_total=engagement.paused_days_total + paused_days,
            updated_at=self._touch(engagement, now),
        )

    @staticmethod
    def _touch(engagement: Engagement, now: datetime) -> datetime:
        # updated_at must move forward on every write for the store's version check
        previous = engagement.updated_at
        if previous is not None and now <= previous:
            return previous + timedelta(microseconds=1)
        return now
