"""SQLAlchemy ORM models — single source of truth for the database schema.

Declarative ORM mapping with SQLAlchemy 2.0 style (Mapped[] + mapped_column).
Each class = one table.

Key concepts:
- Integer primary keys (ids show up in URLs: /jobs/5)
- customer_id is the ownership key for quotes, jobs and properties.
  Deleting a user never deletes jobs or properties (no ON DELETE
  CASCADE there); only its auth tokens go with it
- Python-side defaults for timestamps so rows are complete right after
  flush, on SQLite and PostgreSQL alike
- status columns are plain strings; the allowed values live in
  services/workflow.py and are checked before anything is written
"""

from datetime import date, datetime, timezone
from typing import Optional

from sqlalchemy import (
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# Closed role set.
ROLE_CUSTOMER = "customer"
ROLE_EMPLOYEE = "employee"
ROLE_MANAGER = "manager"
ROLES = (ROLE_CUSTOMER, ROLE_EMPLOYEE, ROLE_MANAGER)
STAFF_ROLES = (ROLE_EMPLOYEE, ROLE_MANAGER)

COOKIE_CONSENT_VALUES = ("pending", "accepted", "declined")


class User(Base):
    """Anyone who can log in: customers, employees and managers.

    Customers and employees are not separate tables — the `role` column
    decides which portal a user logs into and what they may touch.
    """

    __tablename__ = "users"
    __table_args__ = (Index("idx_users_role", "role"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    phone: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)
    role: Mapped[str] = mapped_column(
        String(20), nullable=False, default=ROLE_CUSTOMER
    )  # customer, employee, manager
    profile_picture: Mapped[Optional[str]] = mapped_column(
        String(500), nullable=True
    )
    cookie_consent: Mapped[str] = mapped_column(
        String(20), nullable=False, default="pending"
    )  # pending, accepted, declined
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )


class AuthToken(Base):
    """An opaque bearer token for one login session.

    A user may hold many tokens at once (one per device/session).
    A token is valid only while its row exists and expires_at is in the future.
    """

    __tablename__ = "auth_tokens"
    __table_args__ = (
        Index("idx_auth_tokens_user", "user_id"),
        Index("idx_auth_tokens_expires", "expires_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    token: Mapped[str] = mapped_column(String(128), unique=True, nullable=False)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    expires_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow
    )


class Quote(Base):
    """A quote request. Anonymous visitors may submit one (customer_id NULL)."""

    __tablename__ = "quotes"
    __table_args__ = (
        Index("idx_quotes_customer", "customer_id"),
        Index("idx_quotes_status", "status"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    customer_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)
    address: Mapped[str] = mapped_column(String(255), nullable=False)
    city: Mapped[str] = mapped_column(String(100), nullable=False)
    state: Mapped[str] = mapped_column(String(50), nullable=False)
    zip_code: Mapped[str] = mapped_column(String(20), nullable=False)
    service_type: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    property_size: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    timeline: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    budget_range: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    additional_info: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="pending"
    )  # pending, reviewed, approved, declined, completed
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )


class Property(Base):
    """A customer's property (house, apartment, storage unit...)."""

    __tablename__ = "properties"
    __table_args__ = (Index("idx_properties_customer", "customer_id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    customer_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False
    )
    address: Mapped[str] = mapped_column(String(255), nullable=False)
    city: Mapped[str] = mapped_column(String(100), nullable=False)
    state: Mapped[str] = mapped_column(String(50), nullable=False)
    zip_code: Mapped[str] = mapped_column(String(20), nullable=False)
    property_type: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    square_feet: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )


class Job(Base):
    """A scheduled piece of work, usually converted from a quote."""

    __tablename__ = "jobs"
    __table_args__ = (
        Index("idx_jobs_customer", "customer_id"),
        Index("idx_jobs_employee_status", "assigned_employee_id", "status"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    quote_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("quotes.id", ondelete="SET NULL"), nullable=True
    )
    customer_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False
    )
    property_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("properties.id", ondelete="SET NULL"), nullable=True
    )
    assigned_employee_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    address: Mapped[str] = mapped_column(String(255), nullable=False)
    city: Mapped[str] = mapped_column(String(100), nullable=False)
    state: Mapped[str] = mapped_column(String(50), nullable=False)
    zip_code: Mapped[str] = mapped_column(String(20), nullable=False)
    start_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    end_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    estimated_cost: Mapped[Optional[float]] = mapped_column(
        Numeric(10, 2, asdecimal=False), nullable=True
    )
    actual_cost: Mapped[Optional[float]] = mapped_column(
        Numeric(10, 2, asdecimal=False), nullable=True
    )
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="scheduled"
    )  # scheduled, in_progress, completed, cancelled
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )
