"""
Unit Tests for Consulting Stats Calculator
"""

from decimal import Decimal

import pytest

from engagement_engine.calculators.stats import UNASSIGNED, ConsultingStatsCalculator
from engagement_engine.models import EngagementStats


class TestConsultingStats:

    @pytest.fixture
    def calculator(self):
        return ConsultingStatsCalculator()

    def test_empty_portfolio(self, calculator):
        assert calculator.calculate([]) == EngagementStats()

    def test_portfolio_figures(self, calculator, lifecycle, registration, clock):
        on_time = lifecycle.finalize(lifecycle.register(registration), rating=5)
        late = lifecycle.finalize(
            lifecycle.register(dict(registration, size="basic", value=2000, consultant_id="member-bruno")),
            rating=4,
        )
        paused = lifecycle.pause(lifecycle.register(dict(registration, consultant_id=None)))
        cancelled = lifecycle.cancel(lifecycle.register(registration))

        stats = calculator.calculate([on_time, late, paused, cancelled])

        assert stats.total_engagements == 4
        assert stats.active_engagements == 1
        assert stats.paused_engagements == 1
        assert stats.completed_engagements == 2
        assert stats.cancelled_engagements == 1
        assert stats.average_rating == Decimal("4.50")
        assert stats.total_revenue == Decimal("32000.00")
        assert stats.average_effective_duration == Decimal("40.00")
        assert stats.deadline_compliance_rate == Decimal("50.00")
        # 12% of 10000 + 8% of 2000
        assert stats.total_commission == Decimal("1360.00")
        assert stats.commission_by_consultant == {
            "member-ana": Decimal("1200.00"),
            "member-bruno": Decimal("160.00"),
        }

    def test_unassigned_commission_bucket(self, calculator, lifecycle, registration):
        done = lifecycle.finalize(lifecycle.register(dict(registration, consultant_id=None)), rating=5)

        stats = calculator.calculate([done])

        assert stats.commission_by_consultant == {UNASSIGNED: Decimal("1200.00")}

    def test_no_completed_means_zero_compliance(self, calculator, lifecycle, registration):
        stats = calculator.calculate([lifecycle.register(registration)])

        assert stats.deadline_compliance_rate == Decimal("0")
        assert stats.average_rating == Decimal("0")
