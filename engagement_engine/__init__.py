"""
CONSULTING ENGAGEMENT ENGINE
Lifecycle, deadline and commission rules for consulting engagements.
"""

from .calculators import CommissionCalculator, DeadlinePolicy, calculate_commission
from .config import Settings, create_service
from .errors import (
    ConcurrentModification,
    EngagementError,
    InvalidTransition,
    NotFound,
    StoreError,
    ValidationError,
)
from .lifecycle import EngagementLifecycle
from .models import (
    CommissionResult,
    Engagement,
    EngagementSize,
    EngagementStats,
    EngagementStatus,
    EngagementType,
)
from .service import EngagementService
from .store import EngagementStore, InMemoryEngagementStore, SqlEngagementStore

__all__ = [
    "CommissionCalculator",
    "CommissionResult",
    "ConcurrentModification",
    "DeadlinePolicy",
    "Engagement",
    "EngagementError",
    "EngagementLifecycle",
    "EngagementService",
    "EngagementSize",
    "EngagementStats",
    "EngagementStatus",
    "EngagementStore",
    "EngagementType",
    "InMemoryEngagementStore",
    "InvalidTransition",
    "NotFound",
    "Settings",
    "SqlEngagementStore",
    "StoreError",
    "ValidationError",
    "calculate_commission",
    "create_service",
]
