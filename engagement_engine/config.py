"""
Configuration and composition root.

The store implementation is chosen explicitly from configuration, never by
inspecting the runtime environment.
"""

import os
from dataclasses import dataclass

from .calculators import CommissionCalculator, DeadlinePolicy, get_tier_table
from .errors import ValidationError
from .lifecycle import EngagementLifecycle
from .service import EngagementService
from .store import EngagementStore, InMemoryEngagementStore, SqlEngagementStore

STORE_BACKENDS = ("memory", "sql")


@dataclass
class Settings:
    environment: str = "dev"
    store_backend: str = "memory"
    database_url: str = "sqlite:///engagements.db"
    commission_tier_table: str = "standard"

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            environment=os.environ.get("ENVIRONMENT", "dev"),
            store_backend=os.environ.get("ENGAGEMENT_STORE", "memory").lower(),
            database_url=os.environ.get("DATABASE_URL", "sqlite:///engagements.db"),
            commission_tier_table=os.environ.get("COMMISSION_TIER_TABLE", "standard"),
        )


def create_store(settings: Settings) -> EngagementStore:
    if settings.store_backend == "memory":
        return InMemoryEngagementStore()
    if settings.store_backend == "sql":
        return SqlEngagementStore(settings.database_url)
    raise ValidationError(
        f"Invalid ENGAGEMENT_STORE: {settings.store_backend!r}. Must be one of: {', '.join(STORE_BACKENDS)}"
    )


def create_service(settings: Settings | None = None) -> EngagementService:
    """Wire store, policies and lifecycle into a service."""
    settings = settings or Settings.from_env()
    store = create_store(settings)
    lifecycle = EngagementLifecycle(
        deadline_policy=DeadlinePolicy(store.load_size_deadline_policy()),
        commission_calculator=CommissionCalculator(get_tier_table(settings.commission_tier_table)),
    )
    return EngagementService(store, lifecycle)
