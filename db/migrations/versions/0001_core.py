from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision = "0001_core"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), nullable=False),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("hashed_password", sa.String(255), nullable=False),
        sa.Column(
            "account_status",
            sa.Enum("active", "pending_activation", "deactivated", name="account_status"),
            nullable=False,
            server_default="active",
        ),
        sa.Column("trial_ends_at", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column("role", sa.Enum("user", "admin", name="user_role"), nullable=False, server_default="user"),
        sa.Column("photo_url", sa.String(255), server_default="/uploads/default-avatar.png"),
        sa.Column("currency", sa.String(8), server_default="USD"),
        sa.Column("date_format", sa.String(20), server_default="MM/DD/YYYY"),
        sa.Column("language", sa.String(8), server_default="en"),
        sa.Column("timezone", sa.String(64), server_default="UTC"),
        sa.Column("notification_settings", sa.JSON, nullable=True),
        sa.Column("security_settings", sa.JSON, nullable=True),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=False),
    )

    op.create_table(
        "transactions",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer, sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("description", sa.String(255), nullable=False),
        sa.Column("amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("type", sa.Enum("income", "expense", name="transaction_type"), nullable=False),
        sa.Column("category", sa.String(100), server_default="General"),
        sa.Column("date", sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("recurring", sa.Boolean, server_default=sa.false()),
        sa.Column(
            "recurring_interval",
            sa.Enum("daily", "weekly", "monthly", "yearly", name="recurring_interval"),
            nullable=True,
        ),
        sa.Column("notes", sa.Text, nullable=True),
        sa.CheckConstraint("amount >= 0.01", name="ck_transactions_amount_positive"),
    )
    op.create_index("ix_transactions_user_date", "transactions", ["user_id", "date"])
    op.create_index("ix_transactions_user_type", "transactions", ["user_id", "type"])
    op.create_index("ix_transactions_user_category", "transactions", ["user_id", "category"])

    op.create_table(
        "budgets",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer, sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("category", sa.String(100), nullable=False),
        sa.Column("budget_amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("color", sa.String(7), server_default="#3B82F6"),
        sa.Column("active", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.UniqueConstraint("user_id", "category", name="uq_budgets_user_category"),
        sa.CheckConstraint("budget_amount >= 0.01", name="ck_budgets_amount_positive"),
    )

    op.create_table(
        "goals",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer, sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("target_amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("saved_amount", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("deadline", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column("category", sa.String(100), server_default="Savings"),
        sa.Column("color", sa.String(7), server_default="#3B82F6"),
        sa.Column("completed", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("notes", sa.Text, nullable=True),
        sa.CheckConstraint("target_amount >= 0.01", name="ck_goals_target_positive"),
        sa.CheckConstraint("saved_amount >= 0", name="ck_goals_saved_non_negative"),
    )


def downgrade() -> None:
    op.drop_table("goals")
    op.drop_table("budgets")
    op.drop_index("ix_transactions_user_category", table_name="transactions")
    op.drop_index("ix_transactions_user_type", table_name="transactions")
    op.drop_index("ix_transactions_user_date", table_name="transactions")
    op.drop_table("transactions")
    op.drop_table("users")
    for enum_name in ("recurring_interval", "transaction_type", "user_role", "account_status"):
        sa.Enum(name=enum_name).drop(op.get_bind(), checkfirst=True)
