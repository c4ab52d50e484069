"""transactions and budgets

Revision ID: 202510010900
Revises:
Create Date: 2025-10-01 09:00:00.000000

"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa


revision = "202510010900"
down_revision = None
branch_labels = None
depends_on = None


transaction_type = sa.Enum("income", "expense", name="transactiontype")


def upgrade() -> None:
    op.create_table(
        "transactions",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("owner_id", sa.String(length=64), nullable=False),
        sa.Column("type", transaction_type, nullable=False),
        sa.Column("amount_cents", sa.Integer(), nullable=False),
        sa.Column("category", sa.String(length=100), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.CheckConstraint(
            "amount_cents >= 0", name="ck_transactions_amount_positive"
        ),
    )
    op.create_index(
        "ix_transactions_owner_date", "transactions", ["owner_id", "date"]
    )
    op.create_index(
        "ix_transactions_owner_type_date",
        "transactions",
        ["owner_id", "type", "date"],
    )

    op.create_table(
        "budgets",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("owner_id", sa.String(length=64), nullable=True),
        sa.Column("category", sa.String(length=100), nullable=False),
        sa.Column("amount_cents", sa.Integer(), nullable=False),
        sa.Column("month", sa.String(length=7), nullable=False),
        sa.Column("month_start", sa.Date(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.CheckConstraint("amount_cents >= 0", name="ck_budget_amount_positive"),
        sa.UniqueConstraint(
            "owner_id", "month", "category", name="uq_budget_owner_month_category"
        ),
    )
    op.create_index("ix_budget_owner_month", "budgets", ["owner_id", "month"])

    # NULL owners (anonymous/dev budgets) are not covered by the unique
    # constraint above.
    op.execute(
        "CREATE UNIQUE INDEX uq_budget_owner_month_category_coalesce "
        "ON budgets(COALESCE(owner_id, ''), month, category)"
    )


def downgrade() -> None:
    op.drop_index("uq_budget_owner_month_category_coalesce", table_name="budgets")
    op.drop_index("ix_budget_owner_month", table_name="budgets")
    op.drop_table("budgets")
    op.drop_index("ix_transactions_owner_type_date", table_name="transactions")
    op.drop_index("ix_transactions_owner_date", table_name="transactions")
    op.drop_table("transactions")
    transaction_type.drop(op.get_bind(), checkfirst=True)
