from datetime import date, datetime
from enum import Enum
from typing import Optional

from sqlalchemy import (
    CheckConstraint,
    Date,
    DateTime,
    Enum as SAEnum,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, validates

from database import Base
from periods import parse_month_key


class TransactionType(str, Enum):
    income = "income"
    expense = "expense"


class TimestampMixin:
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False
    )


class Transaction(Base, TimestampMixin):
    __tablename__ = "transactions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    owner_id: Mapped[str] = mapped_column(String(64), nullable=False)
    type: Mapped[TransactionType] = mapped_column(
        SAEnum(TransactionType), nullable=False
    )
    amount_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    category: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    date: Mapped[date] = mapped_column(Date, nullable=False)

    __table_args__ = (
        Index("ix_transactions_owner_date", "owner_id", "date"),
        Index("ix_transactions_owner_type_date", "owner_id", "type", "date"),
        CheckConstraint("amount_cents >= 0", name="ck_transactions_amount_positive"),
    )


class Budget(Base, TimestampMixin):
    __tablename__ = "budgets"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    owner_id: Mapped[Optional[str]] = mapped_column(String(64))
    category: Mapped[str] = mapped_column(String(100), nullable=False)
    amount_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    month: Mapped[str] = mapped_column(String(7), nullable=False)
    month_start: Mapped[date] = mapped_column(Date, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")

    __table_args__ = (
        CheckConstraint("amount_cents >= 0", name="ck_budget_amount_positive"),
        UniqueConstraint(
            "owner_id", "month", "category", name="uq_budget_owner_month_category"
        ),
        Index("ix_budget_owner_month", "owner_id", "month"),
    )

    @validates("month")
    def _sync_month_start(self, _key: str, value: str) -> str:
        value = value.strip()
        self.month_start = parse_month_key(value)
        return value


# NULL owners never collide under the plain unique constraint.
Index(
    "uq_budget_owner_month_category_coalesce",
    func.coalesce(Budget.owner_id, ""),
    Budget.month,
    Budget.category,
    unique=True,
)
