"""
Error Taxonomy for the Engagement Engine

Every error raised by the lifecycle, calculators and stores derives from
EngagementError and carries a stable ``code`` used by the API layer.
"""


class EngagementError(Exception):
    """Base class for all engine errors."""

    code = "engagement_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(EngagementError, ValueError):
    """Malformed input. Raised before any state mutation."""

    code = "validation_failed"


class InvalidTransition(EngagementError):
    """Operation not permitted from the engagement's current status."""

    code = "invalid_transition"

    def __init__(self, operation: str, status):
        status_value = getattr(status, "value", status)
        super().__init__(f"Cannot {operation} an engagement with status '{status_value}'")
        self.operation = operation
        self.status = status


class NotFound(EngagementError):
    """Referenced engagement id does not exist in the store."""

    code = "not_found"

    def __init__(self, engagement_id: str):
        super().__init__(f"Engagement not found: {engagement_id}")
        self.engagement_id = engagement_id


class ConcurrentModification(EngagementError):
    """Optimistic-concurrency conflict detected by the store."""

    code = "concurrent_modification"


class StoreError(EngagementError):
    """Transport or persistence failure."""

    code = "store_error"
