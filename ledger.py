from __future__ import annotations

from datetime import date
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from models import Transaction, TransactionType
from schemas import TransactionIn, TransactionUpdate, to_cents

RECENT_HARD_LIMIT = 100


class LedgerStore:
    """Transaction ledger scoped by owner.

    Writes are owner-scoped last-writer-wins updates; reads never lock and
    every list query is bounded.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, owner_id: str, data: TransactionIn) -> Transaction:
        txn = Transaction(
            owner_id=owner_id,
            type=data.type,
            amount_cents=to_cents(data.amount),
            category=data.category,
            description=data.description,
            date=data.date,
        )
        self.session.add(txn)
        self.session.commit()
        self.session.refresh(txn)
        return txn

    def get(self, owner_id: str, transaction_id: int) -> Transaction:
        txn = self.session.get(Transaction, transaction_id)
        if not txn or txn.owner_id != owner_id:
            raise ValueError("Transaction not found")
        return txn

    def update(
        self, owner_id: str, transaction_id: int, data: TransactionUpdate
    ) -> Transaction:
        txn = self.get(owner_id, transaction_id)
        if data.type is not None:
            txn.type = data.type
        if data.amount is not None:
            txn.amount_cents = to_cents(data.amount)
        if data.category is not None:
            txn.category = data.category
        if data.description is not None:
            txn.description = data.description
        if data.date is not None:
            txn.date = data.date
        self.session.commit()
        self.session.refresh(txn)
        return txn

    def delete(self, owner_id: str, transaction_id: int) -> None:
        txn = self.get(owner_id, transaction_id)
        self.session.delete(txn)
        self.session.commit()

    def _window(self, owner_id: str, start: date, end: date):
        return (
            Transaction.owner_id == owner_id,
            Transaction.date >= start,
            Transaction.date < end,
        )

    def totals_by_type(
        self, owner_id: str, start: date, end: date
    ) -> dict[TransactionType, int]:
        stmt = (
            select(
                Transaction.type,
                func.coalesce(func.sum(Transaction.amount_cents), 0).label("total"),
            )
            .where(*self._window(owner_id, start, end))
            .group_by(Transaction.type)
        )
        totals = {txn_type: 0 for txn_type in TransactionType}
        for row in self.session.execute(stmt):
            totals[row.type] = int(row.total or 0)
        return totals

    def totals_by_category(
        self,
        owner_id: str,
        start: date,
        end: date,
        transaction_type: TransactionType = TransactionType.expense,
    ) -> dict[str, int]:
        stmt = (
            select(
                Transaction.category,
                func.coalesce(func.sum(Transaction.amount_cents), 0).label("total"),
            )
            .where(
                *self._window(owner_id, start, end),
                Transaction.type == transaction_type,
            )
            .group_by(Transaction.category)
        )
        return {
            row.category: int(row.total or 0) for row in self.session.execute(stmt)
        }

    def daily_totals(
        self, owner_id: str, start: date, end: date
    ) -> dict[tuple[date, TransactionType], int]:
        stmt = (
            select(
                Transaction.date,
                Transaction.type,
                func.coalesce(func.sum(Transaction.amount_cents), 0).label("total"),
            )
            .where(*self._window(owner_id, start, end))
            .group_by(Transaction.date, Transaction.type)
        )
        return {
            (row.date, row.type): int(row.total or 0)
            for row in self.session.execute(stmt)
        }

    def recent(
        self,
        owner_id: str,
        limit: int = 10,
        *,
        since: Optional[date] = None,
        until: Optional[date] = None,
    ) -> list[Transaction]:
        """Newest first. ``until`` is exclusive."""
        limit = max(1, min(limit, RECENT_HARD_LIMIT))
        stmt = (
            select(Transaction)
            .where(Transaction.owner_id == owner_id)
            .order_by(
                Transaction.date.desc(),
                Transaction.created_at.desc(),
                Transaction.id.desc(),
            )
            .limit(limit)
        )
        if since is not None:
            stmt = stmt.where(Transaction.date >= since)
        if until is not None:
            stmt = stmt.where(Transaction.date < until)
        return list(self.session.scalars(stmt).all())
