"""
Unit Tests for Engagement Validator

Tests verify the record invariants enforced at the store boundary.
"""

from dataclasses import replace

import pytest

from engagement_engine.errors import ValidationError
from engagement_engine.models import EngagementStatus
from engagement_engine.validators import EngagementValidator


class TestRecordInvariants:
    """Test validate_record."""

    @pytest.fixture
    def validator(self):
        return EngagementValidator()

    @pytest.fixture
    def engagement(self, lifecycle, registration):
        return lifecycle.register(registration)

    def test_fresh_engagement_is_valid(self, validator, engagement):
        validator.validate_record(engagement)

    def test_paused_without_pause_start(self, validator, engagement):
        broken = replace(engagement, status=EngagementStatus.PAUSED)
        with pytest.raises(ValidationError, match="pause_started_at"):
            validator.validate_record(broken)

    def test_pause_start_without_paused_status(self, validator, engagement, clock):
        broken = replace(engagement, pause_started_at=clock.now)
        with pytest.raises(ValidationError, match="pause_started_at"):
            validator.validate_record(broken)

    def test_negative_paused_days(self, validator, engagement):
        with pytest.raises(ValidationError):
            validator.validate_record(replace(engagement, paused_days_total=-1))

    def test_zero_planned_duration(self, validator, engagement):
        with pytest.raises(ValidationError):
            validator.validate_record(replace(engagement, planned_duration_days=0))

    @pytest.mark.parametrize("field", ["planned_duration_days", "paused_days_total"])
    @pytest.mark.parametrize("bad", [None, "10", 2.5, True])
    def test_day_counts_must_be_integers(self, validator, engagement, field, bad):
        with pytest.raises(ValidationError, match=field):
            validator.validate_record(replace(engagement, **{field: bad}))

    def test_deadline_flag_must_be_boolean(self, validator, lifecycle, engagement):
        done = lifecycle.finalize(engagement, rating=5)
        with pytest.raises(ValidationError, match="deadline_met"):
            validator.validate_record(replace(done, deadline_met="false"))

    def test_completed_without_commission(self, validator, engagement):
        broken = replace(engagement, status=EngagementStatus.COMPLETED, rating=5)
        with pytest.raises(ValidationError, match="missing"):
            validator.validate_record(broken)

    def test_commission_on_open_engagement(self, validator, engagement):
        with pytest.raises(ValidationError):
            validator.validate_record(replace(engagement, commission_percent=12))

    def test_cancelled_without_timestamp(self, validator, engagement):
        with pytest.raises(ValidationError):
            validator.validate_record(replace(engagement, status=EngagementStatus.CANCELLED))

    def test_completed_engagement_is_valid(self, validator, lifecycle, engagement, clock):
        clock.advance(days=1)
        validator.validate_record(lifecycle.finalize(engagement, rating=3))


class TestRegistrationInput:
    """Test validate_registration."""

    @pytest.fixture
    def validator(self):
        return EngagementValidator()

    def test_valid_registration(self, validator, registration):
        validator.validate_registration(registration)

    @pytest.mark.parametrize("key", ["engagement_type", "size", "start_date", "planned_end_date", "value"])
    def test_required_fields(self, validator, registration, key):
        del registration[key]
        with pytest.raises(ValidationError, match=key):
            validator.validate_registration(registration)

    def test_negative_value(self, validator, registration):
        registration["value"] = -10
        with pytest.raises(ValidationError):
            validator.validate_registration(registration)

    def test_same_day_start_and_end(self, validator, registration):
        registration["planned_end_date"] = registration["start_date"]
        with pytest.raises(ValidationError):
            validator.validate_registration(registration)

    def test_planned_duration_must_be_positive(self, validator, registration):
        registration["planned_duration_days"] = 0
        with pytest.raises(ValidationError):
            validator.validate_registration(registration)
