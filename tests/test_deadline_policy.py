"""
Unit Tests for Deadline Policy

Tests verify size limits and the on-time predicate.
"""

import pytest

from engagement_engine.calculators.deadline import DEFAULT_SIZE_LIMITS, DeadlinePolicy
from engagement_engine.errors import ValidationError
from engagement_engine.models import EngagementSize, EngagementType


class TestSizeLimits:
    """Test the size -> allotted days table."""

    @pytest.fixture
    def policy(self):
        return DeadlinePolicy()

    @pytest.mark.parametrize("size, days", [
        (EngagementSize.BASIC, 15),
        (EngagementSize.STARTER, 25),
        (EngagementSize.PRO, 40),
        (EngagementSize.ENTERPRISE, 60),
    ])
    def test_default_limits(self, policy, size, days):
        assert policy.limit_for(size) == days

    def test_custom_size_has_no_limit(self, policy):
        """Custom engagements fall outside the policy → limit 0."""
        assert policy.limit_for(EngagementSize.CUSTOM) == 0

    def test_custom_table_replaces_defaults(self):
        policy = DeadlinePolicy({"basic": 10, EngagementSize.PRO: 30})

        assert policy.limit_for(EngagementSize.BASIC) == 10
        assert policy.limit_for(EngagementSize.PRO) == 30
        assert policy.limit_for(EngagementSize.ENTERPRISE) == 0

    def test_negative_limit_rejected(self):
        with pytest.raises(ValidationError):
            DeadlinePolicy({"basic": -1})

    def test_limits_property_is_a_copy(self, policy):
        policy.limits[EngagementSize.BASIC] = 99
        assert policy.limit_for(EngagementSize.BASIC) == 15
        assert DEFAULT_SIZE_LIMITS[EngagementSize.BASIC] == 15


class TestIsDeadlineMet:
    """Test 0 < effective_days <= limit."""

    def test_exactly_at_limit_is_met(self):
        assert DeadlinePolicy.is_deadline_met(EngagementType.CONSULTORIA, 15, 15) is True

    def test_one_day_over_limit_is_not_met(self):
        assert DeadlinePolicy.is_deadline_met(EngagementType.CONSULTORIA, 16, 15) is False

    def test_zero_days_is_not_met(self):
        """Zero effective days is not yet computable."""
        assert DeadlinePolicy.is_deadline_met(EngagementType.CONSULTORIA, 0, 15) is False

    def test_zero_limit_is_never_met(self):
        assert DeadlinePolicy.is_deadline_met(EngagementType.UPSELL, 1, 0) is False

    def test_engagement_type_does_not_change_outcome(self):
        for engagement_type in EngagementType:
            assert DeadlinePolicy.is_deadline_met(engagement_type, 40, 40) is True
