from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import (
    JSON,
    TIMESTAMP,
    Boolean,
    CheckConstraint,
    Enum,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

DEFAULT_NOTIFICATION_SETTINGS = {
    "emailNotifications": True,
    "pushNotifications": False,
    "monthlyReports": True,
    "largeTransactions": True,
    "budgetAlerts": True,
}

DEFAULT_SECURITY_SETTINGS = {
    "twoFactorAuth": False,
    "sessionTimeout": 30,
    "loginAlerts": True,
}


class Base(DeclarativeBase):
    pass


class UserTable(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)
    account_status: Mapped[str] = mapped_column(
        Enum("active", "pending_activation", "deactivated", name="account_status"),
        nullable=False,
        default="active",
    )
    trial_ends_at: Mapped[Optional[datetime]] = mapped_column(TIMESTAMP(timezone=True), nullable=True)
    role: Mapped[str] = mapped_column(Enum("user", "admin", name="user_role"), nullable=False, default="user")
    photo_url: Mapped[str] = mapped_column(String(255), default="/uploads/default-avatar.png")
    currency: Mapped[str] = mapped_column(String(8), default="USD")
    date_format: Mapped[str] = mapped_column(String(20), default="MM/DD/YYYY")
    language: Mapped[str] = mapped_column(String(8), default="en")
    timezone: Mapped[str] = mapped_column(String(64), default="UTC")
    notification_settings: Mapped[dict] = mapped_column(JSON, default=lambda: dict(DEFAULT_NOTIFICATION_SETTINGS))
    security_settings: Mapped[dict] = mapped_column(JSON, default=lambda: dict(DEFAULT_SECURITY_SETTINGS))
    created_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )


class TransactionTable(Base):
    __tablename__ = "transactions"
    __table_args__ = (
        Index("ix_transactions_user_date", "user_id", "date"),
        Index("ix_transactions_user_type", "user_id", "type"),
        Index("ix_transactions_user_category", "user_id", "category"),
        CheckConstraint("amount >= 0.01", name="ck_transactions_amount_positive"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    description: Mapped[str] = mapped_column(String(255), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    type: Mapped[str] = mapped_column(Enum("income", "expense", name="transaction_type"), nullable=False)
    category: Mapped[str] = mapped_column(String(100), default="General")
    date: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), server_default=func.now(), nullable=False)
    recurring: Mapped[bool] = mapped_column(Boolean, default=False)
    recurring_interval: Mapped[Optional[str]] = mapped_column(
        Enum("daily", "weekly", "monthly", "yearly", name="recurring_interval"), nullable=True
    )
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


class BudgetTable(Base):
    __tablename__ = "budgets"
    __table_args__ = (
        UniqueConstraint("user_id", "category", name="uq_budgets_user_category"),
        CheckConstraint("budget_amount >= 0.01", name="ck_budgets_amount_positive"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    category: Mapped[str] = mapped_column(String(100), nullable=False)
    budget_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    color: Mapped[str] = mapped_column(String(7), default="#3B82F6")
    active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)


class GoalTable(Base):
    __tablename__ = "goals"
    __table_args__ = (
        CheckConstraint("target_amount >= 0.01", name="ck_goals_target_positive"),
        CheckConstraint("saved_amount >= 0", name="ck_goals_saved_non_negative"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    target_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    saved_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=Decimal("0"), nullable=False)
    deadline: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)
    category: Mapped[str] = mapped_column(String(100), default="Savings")
    color: Mapped[str] = mapped_column(String(7), default="#3B82F6")
    completed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
