from __future__ import annotations

from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from models import Budget
from schemas import BudgetIn, BudgetUpdate, to_cents

MONTH_ROWS_LIMIT = 500


def _owner_clause(owner_id: Optional[str]):
    if owner_id is None:
        return Budget.owner_id.is_(None)
    return Budget.owner_id == owner_id


class BudgetStore:
    def __init__(self, session: Session) -> None:
        self.session = session

    def upsert(self, owner_id: Optional[str], data: BudgetIn) -> Budget:
        stmt = select(Budget).where(
            _owner_clause(owner_id),
            Budget.month == data.month,
            Budget.category == data.category,
        )
        existing = self.session.scalar(stmt)
        if existing:
            existing.amount_cents = to_cents(data.amount)
            existing.description = data.description
            self.session.commit()
            self.session.refresh(existing)
            return existing

        budget = Budget(
            owner_id=owner_id,
            category=data.category,
            amount_cents=to_cents(data.amount),
            month=data.month,
            description=data.description,
        )
        self.session.add(budget)
        self.session.commit()
        self.session.refresh(budget)
        return budget

    def get(self, owner_id: Optional[str], budget_id: int) -> Budget:
        budget = self.session.get(Budget, budget_id)
        if not budget or budget.owner_id != owner_id:
            raise ValueError("Budget not found")
        return budget

    def update(
        self, owner_id: Optional[str], budget_id: int, data: BudgetUpdate
    ) -> Budget:
        budget = self.get(owner_id, budget_id)
        month = data.month if data.month is not None else budget.month
        category = data.category if data.category is not None else budget.category
        if (month, category) != (budget.month, budget.category):
            clash = self.session.scalar(
                select(Budget.id).where(
                    _owner_clause(owner_id),
                    Budget.month == month,
                    Budget.category == category,
                    Budget.id != budget.id,
                )
            )
            if clash:
                raise ValueError("Budget already exists for this month and category")
        if data.month is not None:
            # month_start follows via the model validator.
            budget.month = data.month
        if data.category is not None:
            budget.category = data.category
        if data.amount is not None:
            budget.amount_cents = to_cents(data.amount)
        if data.description is not None:
            budget.description = data.description
        self.session.commit()
        self.session.refresh(budget)
        return budget

    def delete(self, owner_id: Optional[str], budget_id: int) -> None:
        budget = self.get(owner_id, budget_id)
        self.session.delete(budget)
        self.session.commit()

    def for_month(self, owner_id: Optional[str], month: str) -> list[Budget]:
        stmt = (
            select(Budget)
            .where(_owner_clause(owner_id), Budget.month == month)
            .order_by(Budget.category.asc(), Budget.id.asc())
            .limit(MONTH_ROWS_LIMIT)
        )
        return list(self.session.scalars(stmt).all())
