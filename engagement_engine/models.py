"""
Domain Models for the Engagement Engine

These dataclasses provide type-safe representations of consulting engagements.
All monetary values use Decimal for precision.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from enum import Enum

from .errors import ValidationError


def quantize_money(value: Decimal) -> Decimal:
    """Round to 2 decimal places using half-up currency rounding."""
    return value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def parse_money(value, field_name: str = "value") -> Decimal:
    try:
        return quantize_money(Decimal(str(value)))
    except (InvalidOperation, ValueError):
        raise ValidationError(f"{field_name} must be a decimal amount, got: {value!r}")


def parse_date(value, field_name: str) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.strptime(str(value), "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError(f"{field_name} must be a YYYY-MM-DD date, got: {value!r}")


def parse_timestamp(value, field_name: str) -> datetime | None:
    """Parse an ISO-8601 timestamp. Naive values are taken as UTC."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
        except ValueError:
            raise ValidationError(f"{field_name} must be an ISO-8601 timestamp, got: {value!r}")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _format_timestamp(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


# =============================================================================
# ENUMS
# =============================================================================


class EngagementStatus(str, Enum):
    IN_PROGRESS = "in_progress"
    PAUSED = "paused"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (EngagementStatus.COMPLETED, EngagementStatus.CANCELLED)

    @classmethod
    def parse(cls, value) -> "EngagementStatus":
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower()
        # Status strings written by the dashboard before the rename
        legacy = {
            "em_andamento": cls.IN_PROGRESS,
            "pausado": cls.PAUSED,
            "concluido": cls.COMPLETED,
            "cancelado": cls.CANCELLED,
        }
        if key in legacy:
            return legacy[key]
        try:
            return cls(key)
        except ValueError:
            raise ValidationError(f"Invalid status: {value!r}")


class EngagementType(str, Enum):
    CONSULTORIA = "Consultoria"
    UPSELL = "Upsell"

    @classmethod
    def parse(cls, value) -> "EngagementType":
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower()
        for member in cls:
            if member.value.lower() == key:
                return member
        allowed = ", ".join(m.value for m in cls)
        raise ValidationError(f"Invalid engagement_type: {value!r}. Allowed values: {allowed}")


class EngagementSize(str, Enum):
    BASIC = "basic"
    STARTER = "starter"
    PRO = "pro"
    ENTERPRISE = "enterprise"
    CUSTOM = "custom"

    @classmethod
    def parse(cls, value) -> "EngagementSize":
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower()
        aliases = {"standard": cls.STARTER, "premium": cls.PRO}
        if key in aliases:
            return aliases[key]
        try:
            return cls(key)
        except ValueError:
            raise ValidationError(f"Invalid size: {value!r}")


# =============================================================================
# ENGAGEMENT
# =============================================================================


@dataclass
class Engagement:
    """A consulting engagement and its lifecycle bookkeeping."""

    id: str
    client: str
    engagement_type: EngagementType
    size: EngagementSize
    start_date: date
    planned_end_date: date
    planned_duration_days: int
    value: Decimal
    status: EngagementStatus = EngagementStatus.IN_PROGRESS
    consultant_id: str | None = None  # None = unassigned
    pause_started_at: datetime | None = None
    paused_days_total: int = 0
    rating: int | None = None
    deadline_met: bool | None = None
    closing_signature_confirmed: bool = False
    commission_percent: int | None = None
    commission_amount: Decimal | None = None
    finalized_at: datetime | None = None
    cancelled_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def effective_duration_days(self) -> int:
        """Planned duration minus paused days, never below zero."""
        return max(0, self.planned_duration_days - self.paused_days_total)

    @property
    def is_paused(self) -> bool:
        return self.status == EngagementStatus.PAUSED

    @classmethod
    def from_dict(cls, data: dict) -> "Engagement":
        try:
            commission_amount = data.get("commission_amount")
            rating = data.get("rating")
            commission_percent = data.get("commission_percent")
            return cls(
                id=str(data["id"]),
                client=data["client"],
                engagement_type=EngagementType.parse(data["engagement_type"]),
                size=EngagementSize.parse(data["size"]),
                start_date=parse_date(data["start_date"], "start_date"),
                planned_end_date=parse_date(data["planned_end_date"], "planned_end_date"),
                planned_duration_days=int(data["planned_duration_days"]),
                value=parse_money(data["value"]),
                status=EngagementStatus.parse(data.get("status", EngagementStatus.IN_PROGRESS)),
                consultant_id=data.get("consultant_id"),
                pause_started_at=parse_timestamp(data.get("pause_started_at"), "pause_started_at"),
                paused_days_total=int(data.get("paused_days_total", 0)),
                rating=int(rating) if rating is not None else None,
                deadline_met=data.get("deadline_met"),
                closing_signature_confirmed=bool(data.get("closing_signature_confirmed", False)),
                commission_percent=int(commission_percent) if commission_percent is not None else None,
                commission_amount=(
                    parse_money(commission_amount, "commission_amount")
                    if commission_amount is not None else None
                ),
                finalized_at=parse_timestamp(data.get("finalized_at"), "finalized_at"),
                cancelled_at=parse_timestamp(data.get("cancelled_at"), "cancelled_at"),
                created_at=parse_timestamp(data.get("created_at"), "created_at"),
                updated_at=parse_timestamp(data.get("updated_at"), "updated_at"),
            )
        except KeyError as e:
            raise ValidationError(f"Missing required field: {e.args[0]}")
        except (TypeError, ValueError) as e:
            if isinstance(e, ValidationError):
                raise
            raise ValidationError(f"Malformed engagement record: {e}")

    def to_dict(self) -> dict:
        """Serialize to the plain record format exchanged with stores."""
        return {
            "id": self.id,
            "client": self.client,
            "engagement_type": self.engagement_type.value,
            "size": self.size.value,
            "start_date": self.start_date.isoformat(),
            "planned_end_date": self.planned_end_date.isoformat(),
            "planned_duration_days": self.planned_duration_days,
            "value": str(quantize_money(self.value)),
            "status": self.status.value,
            "consultant_id": self.consultant_id,
            "pause_started_at": _format_timestamp(self.pause_started_at),
            "paused_days_total": self.paused_days_total,
            "rating": self.rating,
            "deadline_met": self.deadline_met,
            "closing_signature_confirmed": self.closing_signature_confirmed,
            "commission_percent": self.commission_percent,
            "commission_amount": (
                str(quantize_money(self.commission_amount))
                if self.commission_amount is not None else None
            ),
            "finalized_at": _format_timestamp(self.finalized_at),
            "cancelled_at": _format_timestamp(self.cancelled_at),
            "created_at": _format_timestamp(self.created_at),
            "updated_at": _format_timestamp(self.updated_at),
        }


# =============================================================================
# RESULT MODELS
# =============================================================================


@dataclass(frozen=True)
class CommissionResult:
    """Commission percentage and amount for a finished engagement."""

    percent: int
    amount: Decimal


@dataclass
class EngagementStats:
    """Portfolio statistics over a set of engagements."""

    total_engagements: int = 0
    active_engagements: int = 0  # in_progress + paused
    paused_engagements: int = 0
    completed_engagements: int = 0
    cancelled_engagements: int = 0
    average_rating: Decimal = Decimal("0")
    total_revenue: Decimal = Decimal("0")
    average_effective_duration: Decimal = Decimal("0")
    deadline_compliance_rate: Decimal = Decimal("0")
    total_commission: Decimal = Decimal("0")
    commission_by_consultant: dict[str, Decimal] = field(default_factory=dict)
