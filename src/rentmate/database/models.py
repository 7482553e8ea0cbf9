"""SQLAlchemy models for rentmate database."""

import uuid
from datetime import datetime, UTC
from sqlalchemy import (
    JSON,
    Integer,
    Column,
    String,
    Text,
    ForeignKey,
    DateTime,
    Date,
    Numeric,
    Boolean,
    Index,
    create_engine,
    event,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()


def _new_id() -> str:
    return str(uuid.uuid4())


def _now() -> datetime:
    return datetime.now(UTC)


class Household(Base):
    """Household model."""

    __tablename__ = "households"

    id = Column(String(36), primary_key=True, default=_new_id)
    name = Column(String(100), nullable=False)
    created_at = Column(DateTime(timezone=True), default=_now, nullable=False)

    # Relationships
    members = relationship("User", back_populates="household")
    chores = relationship("Chore", back_populates="household", cascade="all, delete-orphan")
    expenses = relationship("Expense", back_populates="household", cascade="all, delete-orphan")
    invitations = relationship(
        "Invitation", back_populates="household", cascade="all, delete-orphan"
    )
    activity_logs = relationship("ActivityLog", cascade="all, delete-orphan")


class User(Base):
    """User model. A user belongs to at most one household."""

    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=_new_id)
    email = Column(String(255), unique=True, nullable=False)
    name = Column(String(100), nullable=True)
    role = Column(String(16), default="member", nullable=False)
    household_id = Column(
        String(36), ForeignKey("households.id", ondelete="SET NULL"), nullable=True
    )
    created_at = Column(DateTime(timezone=True), default=_now, nullable=False)

    # Relationships
    household = relationship("Household", back_populates="members")


class Chore(Base):
    """Chore model."""

    __tablename__ = "chores"

    id = Column(String(36), primary_key=True, default=_new_id)
    household_id = Column(
        String(36), ForeignKey("households.id", ondelete="CASCADE"), nullable=False
    )
    description = Column(String(255), nullable=False)
    notes = Column(Text, nullable=True)
    is_complete = Column(Boolean, default=False, nullable=False)
    due_date = Column(Date, nullable=True)
    recurrence = Column(String(16), default="none", nullable=False)
    assigned_to_id = Column(
        String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    completed_by_id = Column(
        String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    completed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=_now, nullable=False)

    # Relationships
    household = relationship("Household", back_populates="chores")


class Expense(Base):
    """Expense model."""

    __tablename__ = "expenses"

    id = Column(String(36), primary_key=True, default=_new_id)
    household_id = Column(
        String(36), ForeignKey("households.id", ondelete="CASCADE"), nullable=False
    )
    description = Column(String(255), nullable=False)
    amount = Column(Numeric(10, 2), nullable=False)
    date = Column(Date, nullable=False)
    paid_by_id = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), default=_now, nullable=False)

    __table_args__ = (Index("ix_expenses_household_date", "household_id", "date"),)

    # Relationships
    household = relationship("Household", back_populates="expenses")
    shares = relationship(
        "ExpenseShare",
        back_populates="expense",
        cascade="all, delete-orphan",
        order_by="ExpenseShare.position",
    )


class ExpenseShare(Base):
    """Expense share model."""

    __tablename__ = "expense_shares"

    id = Column(String(36), primary_key=True, default=_new_id)
    expense_id = Column(
        String(36), ForeignKey("expenses.id", ondelete="CASCADE"), nullable=False, index=True
    )
    owed_by_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    amount_owed = Column(Numeric(10, 2), nullable=False)
    is_settled = Column(Boolean, default=False, nullable=False)
    settled_at = Column(DateTime(timezone=True), nullable=True)
    # Keeps shares in the order they were supplied
    position = Column(Integer, default=0, nullable=False)

    # Relationships
    expense = relationship("Expense", back_populates="shares")


class Invitation(Base):
    """Household invitation model."""

    __tablename__ = "invitations"

    id = Column(String(36), primary_key=True, default=_new_id)
    household_id = Column(
        String(36), ForeignKey("households.id", ondelete="CASCADE"), nullable=False
    )
    invited_by_id = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    token = Column(String(255), unique=True, nullable=False)
    email = Column(String(255), nullable=True)
    short_code = Column(String(16), unique=True, nullable=True)
    status = Column(String(16), default="pending", nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    accepted_at = Column(DateTime(timezone=True), nullable=True)
    accepted_by_user_id = Column(
        String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    created_at = Column(DateTime(timezone=True), default=_now, nullable=False)

    # Relationships
    household = relationship("Household", back_populates="invitations")


class ActivityLog(Base):
    """Activity (audit) log model."""

    __tablename__ = "activity_logs"

    id = Column(String(36), primary_key=True, default=_new_id)
    household_id = Column(
        String(36), ForeignKey("households.id", ondelete="CASCADE"), nullable=False
    )
    actor_id = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    entity_id = Column(String(36), nullable=False, index=True)
    entity_type = Column(String(32), nullable=False)
    activity_type = Column(String(32), nullable=False)
    details = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), default=_now, nullable=False)

    __table_args__ = (Index("ix_activity_logs_household_created", "household_id", "created_at"),)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    if engine.dialect.name == "sqlite":
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
