"""SQLAlchemy models for pocketledger database."""

import uuid
from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    String,
    DateTime,
    Date,
    Numeric,
    Boolean,
    JSON,
    Index,
    UniqueConstraint,
    create_engine,
)
from sqlalchemy.orm import declarative_base, sessionmaker, Session

Base = declarative_base()


def new_id() -> str:
    """Opaque identifier for new rows."""
    return uuid.uuid4().hex


def utcnow() -> datetime:
    return datetime.now(UTC)


class RecurringTemplate(Base):
    """Recurring transaction template model."""

    __tablename__ = "recurring_templates"

    id = Column(String, primary_key=True, default=new_id)
    type = Column(String, nullable=False)
    company = Column(String, nullable=False)
    tags = Column(JSON, nullable=False, default=list)
    amount_type = Column(String, nullable=False)
    amount = Column(Numeric(12, 2), nullable=True)
    estimated_amount = Column(Numeric(12, 2), nullable=True)
    paid = Column(Boolean, default=False, nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=True)
    recurrence_pattern = Column(JSON, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False, index=True)
    last_generated = Column(Date, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)


class TemplateException(Base):
    """Per-occurrence override of a template."""

    __tablename__ = "template_exceptions"

    id = Column(String, primary_key=True, default=new_id)
    # No foreign key: exceptions are removed explicitly with their template
    template_id = Column(String, nullable=False, index=True)
    occurrence_date = Column(Date, nullable=False)
    exception_type = Column(String, nullable=False)
    modified_amount = Column(Numeric(12, 2), nullable=True)
    modified_date = Column(Date, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint("template_id", "occurrence_date", name="uq_template_occurrence"),
    )


class Transaction(Base):
    """Transaction model."""

    __tablename__ = "transactions"

    id = Column(String, primary_key=True, default=new_id)
    date = Column(Date, nullable=False, index=True)
    type = Column(String, nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    company = Column(String, nullable=False)
    tags = Column(JSON, nullable=False, default=list)
    paid = Column(Boolean, default=False, nullable=False)
    # Plain column, not a foreign key: deleting a template keeps its history
    template_id = Column(String, nullable=True)
    is_auto_generated = Column(Boolean, default=False, nullable=False)
    is_pending = Column(Boolean, default=False, nullable=False)
    notes = Column(String, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    # Duplicate-detection key for generated occurrences (not unique)
    __table_args__ = (
        Index("ix_transactions_occurrence_key", "template_id", "date", "company"),
    )


class SavingsAccount(Base):
    """Savings account model."""

    __tablename__ = "savings_accounts"

    id = Column(String, primary_key=True, default=new_id)
    name = Column(String, nullable=False, index=True)
    balance = Column(Numeric(12, 2), nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
