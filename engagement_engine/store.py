"""
Engagement Stores

The lifecycle never touches persistence directly. Callers load and save
engagement snapshots through an EngagementStore:

- InMemoryEngagementStore: process-local store for tests and local development
- SqlEngagementStore: durable store backed by an ``engagements`` table (SQLAlchemy)

Both enforce optimistic concurrency on ``updated_at`` and validate records
at the boundary in both directions.
"""

import logging
import threading
from abc import ABC, abstractmethod
from datetime import date, datetime, timezone

from sqlalchemy import select, update
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from .calculators import DEFAULT_SIZE_LIMITS
from .database import ENGAGEMENT_COLUMNS, EngagementRow, create_db_engine, create_schema, create_session_factory
from .errors import ConcurrentModification, NotFound, StoreError
from .models import Engagement, EngagementSize, EngagementStatus
from .validators import EngagementValidator

logger = logging.getLogger(__name__)


class EngagementStore(ABC):
    """Persistence interface consumed by EngagementService."""

    def __init__(self, size_limits: dict | None = None):
        self.validator = EngagementValidator()
        self._size_limits = dict(DEFAULT_SIZE_LIMITS if size_limits is None else size_limits)

    @abstractmethod
    def load_engagement(self, engagement_id: str) -> Engagement:
        """Return the stored engagement or raise NotFound."""

    @abstractmethod
    def save_engagement(self, engagement: Engagement, expected_updated_at: datetime | None = None) -> Engagement:
        """
        Insert or update an engagement.

        Inserting requires the id to be new (expected_updated_at=None).
        Updating requires expected_updated_at to match the stored version.
        """

    @abstractmethod
    def list_engagements(
        self,
        status: EngagementStatus | None = None,
        consultant_id: str | None = None,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> list[Engagement]:
        """List engagements, newest start date first."""

    def load_size_deadline_policy(self) -> dict[EngagementSize, int]:
        return dict(self._size_limits)

    def _to_engagement(self, record: dict) -> Engagement:
        engagement = Engagement.from_dict(record)
        self.validator.validate_record(engagement)
        return engagement

    @staticmethod
    def _conflict(engagement_id: str, expected_updated_at: datetime, found: datetime | None) -> ConcurrentModification:
        return ConcurrentModification(
            f"Engagement {engagement_id} was modified concurrently "
            f"(expected {expected_updated_at.isoformat()}, "
            f"found {found.isoformat() if found else None})"
        )


class InMemoryEngagementStore(EngagementStore):
    """Keeps serialized records in memory so callers never share state with the store."""

    def __init__(self, size_limits: dict | None = None):
        super().__init__(size_limits)
        self._records: dict[str, dict] = {}
        self._lock = threading.Lock()

    def load_engagement(self, engagement_id: str) -> Engagement:
        record = self._records.get(engagement_id)
        if record is None:
            raise NotFound(engagement_id)
        return self._to_engagement(dict(record))

    def save_engagement(self, engagement: Engagement, expected_updated_at: datetime | None = None) -> Engagement:
        self.validator.validate_record(engagement)
        record = engagement.to_dict()

        with self._lock:
            current = self._records.get(engagement.id)

            if expected_updated_at is None:
                if current is not None:
                    raise ConcurrentModification(f"Engagement already exists: {engagement.id}")
            else:
                if current is None:
                    raise NotFound(engagement.id)
                stored_version = self._to_engagement(dict(current)).updated_at
                if stored_version != expected_updated_at:
                    raise self._conflict(engagement.id, expected_updated_at, stored_version)

            self._records[engagement.id] = dict(record)

        return self._to_engagement(record)

    def list_engagements(
        self,
        status: EngagementStatus | None = None,
        consultant_id: str | None = None,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> list[Engagement]:
        engagements = [self._to_engagement(dict(r)) for r in list(self._records.values())]

        if status is not None:
            engagements = [e for e in engagements if e.status == status]
        if consultant_id is not None:
            engagements = [e for e in engagements if e.consultant_id == consultant_id]
        if start_date is not None:
            engagements = [e for e in engagements if e.start_date >= start_date]
        if end_date is not None:
            engagements = [e for e in engagements if e.planned_end_date <= end_date]

        return sorted(engagements, key=lambda e: (e.start_date, e.id), reverse=True)


def _utc(value: datetime | None) -> datetime | None:
    """Normalize to aware UTC. Naive values (SQLite returns these) are taken as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class SqlEngagementStore(EngagementStore):
    """
    Stores engagements in a relational table.

    Updates are a single conditional statement:

        UPDATE engagements SET ... WHERE id = :id AND updated_at = :expected

    so writers in different processes sharing one database cannot overwrite
    each other. A zero-row result means the version moved (or the id is gone).
    """

    def __init__(self, url_or_engine: str | Engine, size_limits: dict | None = None, create_tables: bool = True):
        super().__init__(size_limits)
        if isinstance(url_or_engine, Engine):
            self.engine = url_or_engine
        else:
            self.engine = create_db_engine(url_or_engine)
        self.Session = create_session_factory(self.engine)
        if create_tables:
            try:
                create_schema(self.engine)
            except SQLAlchemyError as e:
                raise StoreError(f"Could not create engagement schema: {e}")

    def load_engagement(self, engagement_id: str) -> Engagement:
        try:
            with self.Session() as session:
                row = session.get(EngagementRow, engagement_id)
                record = self._row_to_record(row) if row is not None else None
        except SQLAlchemyError as e:
            raise StoreError(f"Could not load engagement {engagement_id}: {e}")

        if record is None:
            raise NotFound(engagement_id)
        return self._to_engagement(record)

    def save_engagement(self, engagement: Engagement, expected_updated_at: datetime | None = None) -> Engagement:
        self.validator.validate_record(engagement)
        values = self._row_values(engagement)

        if expected_updated_at is None:
            self._insert(engagement.id, values)
        else:
            self._update(engagement.id, values, expected_updated_at)

        logger.debug(f"Saved engagement {engagement.id} ({engagement.status.value})")
        return self.load_engagement(engagement.id)

    def list_engagements(
        self,
        status: EngagementStatus | None = None,
        consultant_id: str | None = None,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> list[Engagement]:
        query = select(EngagementRow)
        if status is not None:
            query = query.where(EngagementRow.status == status.value)
        if consultant_id is not None:
            query = query.where(EngagementRow.consultant_id == consultant_id)
        if start_date is not None:
            query = query.where(EngagementRow.start_date >= start_date)
        if end_date is not None:
            query = query.where(EngagementRow.planned_end_date <= end_date)
        query = query.order_by(EngagementRow.start_date.desc(), EngagementRow.id.desc())

        try:
            with self.Session() as session:
                records = [self._row_to_record(row) for row in session.scalars(query)]
        except SQLAlchemyError as e:
            raise StoreError(f"Could not list engagements: {e}")

        return [self._to_engagement(record) for record in records]

    def _insert(self, engagement_id: str, values: dict) -> None:
        try:
            with self.Session.begin() as session:
                session.add(EngagementRow(**values))
        except IntegrityError:
            raise ConcurrentModification(f"Engagement already exists: {engagement_id}")
        except SQLAlchemyError as e:
            raise StoreError(f"Could not insert engagement {engagement_id}: {e}")

    def _update(self, engagement_id: str, values: dict, expected_updated_at: datetime) -> None:
        statement = (
            update(EngagementRow)
            .where(EngagementRow.id == engagement_id)
            .where(EngagementRow.updated_at == _utc(expected_updated_at))
            .values(**{key: value for key, value in values.items() if key != "id"})
            .execution_options(synchronize_session=False)
        )
        try:
            with self.Session.begin() as session:
                result = session.execute(statement)
                if result.rowcount == 0:
                    current = session.get(EngagementRow, engagement_id)
                    if current is None:
                        raise NotFound(engagement_id)
                    raise self._conflict(engagement_id, expected_updated_at, _utc(current.updated_at))
        except SQLAlchemyError as e:
            raise StoreError(f"Could not update engagement {engagement_id}: {e}")

    @staticmethod
    def _row_values(engagement: Engagement) -> dict:
        return {
            "id": engagement.id,
            "client": engagement.client,
            "engagement_type": engagement.engagement_type.value,
            "size": engagement.size.value,
            "consultant_id": engagement.consultant_id,
            "start_date": engagement.start_date,
            "planned_end_date": engagement.planned_end_date,
            "planned_duration_days": engagement.planned_duration_days,
            "value": engagement.value,
            "status": engagement.status.value,
            "pause_started_at": _utc(engagement.pause_started_at),
            "paused_days_total": engagement.paused_days_total,
            "rating": engagement.rating,
            "deadline_met": engagement.deadline_met,
            "closing_signature_confirmed": engagement.closing_signature_confirmed,
            "commission_percent": engagement.commission_percent,
            "commission_amount": engagement.commission_amount,
            "finalized_at": _utc(engagement.finalized_at),
            "cancelled_at": _utc(engagement.cancelled_at),
            "created_at": _utc(engagement.created_at),
            "updated_at": _utc(engagement.updated_at),
        }

    @staticmethod
    def _row_to_record(row: EngagementRow) -> dict:
        return {key: getattr(row, key) for key in ENGAGEMENT_COLUMNS}
