"""
Engagement Service - Main Orchestrator

Coordinates store and lifecycle for each user action:
1. Load the current engagement
2. Apply the lifecycle operation
3. Save with an optimistic-concurrency check
4. On conflict, reload and retry once
"""

import logging
from typing import Callable

from .calculators import ConsultingStatsCalculator
from .errors import ConcurrentModification
from .lifecycle import EngagementLifecycle
from .models import CommissionResult, Engagement, EngagementStats, EngagementStatus, parse_date
from .store import EngagementStore

logger = logging.getLogger(__name__)

MAX_ATTEMPTS = 2


class EngagementService:
    """Entry point used by the HTTP layers."""

    def __init__(self, store: EngagementStore, lifecycle: EngagementLifecycle | None = None):
        self.store = store
        self.lifecycle = lifecycle or EngagementLifecycle()
        self.stats_calculator = ConsultingStatsCalculator()

    def register(self, data: dict) -> Engagement:
        engagement = self.lifecycle.register(data)
        saved = self.store.save_engagement(engagement)
        logger.info(f"Registered engagement {saved.id} for client {saved.client}")
        return saved

    def get(self, engagement_id: str) -> Engagement:
        return self.store.load_engagement(engagement_id)

    def list_engagements(
        self,
        status=None,
        consultant_id: str | None = None,
        start_date=None,
        end_date=None,
    ) -> list[Engagement]:
        return self.store.list_engagements(
            status=EngagementStatus.parse(status) if status else None,
            consultant_id=consultant_id or None,
            start_date=parse_date(start_date, "start_date") if start_date else None,
            end_date=parse_date(end_date, "end_date") if end_date else None,
        )

    def pause(self, engagement_id: str) -> Engagement:
        return self._apply(engagement_id, "pause", self.lifecycle.pause)

    def resume(self, engagement_id: str) -> Engagement:
        return self._apply(engagement_id, "resume", self.lifecycle.resume)

    def finalize(self, engagement_id: str, rating: int, signature_confirmed: bool = False) -> Engagement:
        return self._apply(
            engagement_id,
            "finalize",
            lambda e: self.lifecycle.finalize(e, rating, signature_confirmed),
        )

    def cancel(self, engagement_id: str) -> Engagement:
        return self._apply(engagement_id, "cancel", self.lifecycle.cancel)

    def revise(self, engagement_id: str, changes: dict) -> Engagement:
        return self._apply(engagement_id, "revise", lambda e: self.lifecycle.revise(e, changes))

    def stats(self, consultant_id: str | None = None, start_date=None, end_date=None) -> EngagementStats:
        engagements = self.list_engagements(consultant_id=consultant_id, start_date=start_date, end_date=end_date)
        return self.stats_calculator.calculate(engagements)

    def consultants(self) -> list[str]:
        """Distinct assigned consultant ids, sorted."""
        return sorted({e.consultant_id for e in self.store.list_engagements() if e.consultant_id})

    def preview_commission(self, value, rating: int, deadline_met: bool) -> CommissionResult:
        return self.lifecycle.commission_calculator.calculate(value, rating, deadline_met)

    def deadline_limit(self, engagement: Engagement) -> int:
        return self.lifecycle.deadline_policy.limit_for(engagement.size)

    def _apply(
        self,
        engagement_id: str,
        operation: str,
        transition: Callable[[Engagement], Engagement],
    ) -> Engagement:
        for attempt in range(1, MAX_ATTEMPTS + 1):
            current = self.store.load_engagement(engagement_id)
            updated = transition(current)
            try:
                saved = self.store.save_engagement(updated, expected_updated_at=current.updated_at)
            except ConcurrentModification:
                if attempt == MAX_ATTEMPTS:
                    raise
                logger.warning(f"Conflict on {operation} for engagement {engagement_id}, retrying")
                continue

            logger.info(f"Engagement {engagement_id}: {operation} -> {saved.status.value}")
            return saved
