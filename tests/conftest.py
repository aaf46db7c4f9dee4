"""Shared fixtures for the engagement engine tests."""

from datetime import datetime, timedelta, timezone

import pytest

from engagement_engine import EngagementLifecycle, EngagementService, InMemoryEngagementStore


class FakeClock:
    """Controllable UTC clock."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock(datetime(2025, 3, 1, 9, 0, tzinfo=timezone.utc))


@pytest.fixture
def lifecycle(clock):
    return EngagementLifecycle(clock=clock)


@pytest.fixture
def store():
    return InMemoryEngagementStore()


@pytest.fixture
def service(store, lifecycle):
    return EngagementService(store, lifecycle)


@pytest.fixture
def registration():
    """Registration payload for a Pro engagement planned for 40 days."""
    return {
        "client": "Acme Ltda",
        "engagement_type": "Consultoria",
        "size": "pro",
        "consultant_id": "member-ana",
        "start_date": "2025-03-01",
        "planned_end_date": "2025-04-10",
        "value": 10000,
    }
