"""
Database schema for the SQL engagement store.

One row per engagement. Column names match the record keys produced by
Engagement.to_dict(), so rows convert to and from domain objects by name.
"""

from sqlalchemy import Boolean, Column, Date, DateTime, Integer, MetaData, Numeric, String, create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker


class Base(DeclarativeBase):
    metadata = MetaData()


class EngagementRow(Base):
    __tablename__ = "engagements"

    id = Column(String(64), primary_key=True)
    client = Column(String(255), nullable=False)
    engagement_type = Column(String(32), nullable=False)
    size = Column(String(32), nullable=False)
    consultant_id = Column(String(64), nullable=True, index=True)

    start_date = Column(Date, nullable=False, index=True)
    planned_end_date = Column(Date, nullable=False)
    planned_duration_days = Column(Integer, nullable=False)
    value = Column(Numeric(14, 2), nullable=False)

    status = Column(String(32), nullable=False, index=True)
    pause_started_at = Column(DateTime(timezone=True), nullable=True)
    paused_days_total = Column(Integer, nullable=False, default=0)

    rating = Column(Integer, nullable=True)
    deadline_met = Column(Boolean, nullable=True)
    closing_signature_confirmed = Column(Boolean, nullable=False, default=False)
    commission_percent = Column(Integer, nullable=True)
    commission_amount = Column(Numeric(14, 2), nullable=True)

    finalized_at = Column(DateTime(timezone=True), nullable=True)
    cancelled_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=True)
    # Version token for optimistic concurrency
    updated_at = Column(DateTime(timezone=True), nullable=True)


ENGAGEMENT_COLUMNS = tuple(column.key for column in EngagementRow.__table__.columns)


def create_db_engine(url: str) -> Engine:
    return create_engine(url, future=True)


def create_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, future=True, expire_on_commit=False)


def create_schema(engine: Engine) -> None:
    Base.metadata.create_all(bind=engine)
