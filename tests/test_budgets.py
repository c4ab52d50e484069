from datetime import date

import pytest
from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError

from budgets import BudgetStore
from models import Budget
from schemas import BudgetIn, BudgetUpdate


def test_month_start_is_derived_from_month(session) -> None:
    budget = BudgetStore(session).upsert(
        "u1", BudgetIn(category="Food", amount="500", month="2025-10")
    )
    assert budget.month_start == date(2025, 10, 1)
    assert budget.amount_cents == 50_000
    assert budget.description == ""


def test_month_start_follows_month_changes(session) -> None:
    store = BudgetStore(session)
    budget = store.upsert("u1", BudgetIn(category="Food", amount="500", month="2025-10"))

    moved = store.update("u1", budget.id, BudgetUpdate(month="2026-01"))
    assert moved.month == "2026-01"
    assert moved.month_start == date(2026, 1, 1)


def test_invalid_month_is_rejected() -> None:
    with pytest.raises(ValueError):
        Budget(category="Food", amount_cents=100, month="2025-13")
    with pytest.raises(ValidationError):
        BudgetIn(category="Food", amount="1", month="2025-1")


def test_upsert_keeps_one_row_per_owner_month_category(session) -> None:
    store = BudgetStore(session)
    first = store.upsert("u1", BudgetIn(category="Food", amount="500", month="2025-10"))
    second = store.upsert(
        "u1",
        BudgetIn(category="Food", amount="650", month="2025-10", description="raised"),
    )
    assert second.id == first.id
    assert second.amount_cents == 65_000
    assert second.description == "raised"

    other_owner = store.upsert(
        "u2", BudgetIn(category="Food", amount="100", month="2025-10")
    )
    assert other_owner.id != first.id
    assert [b.id for b in store.for_month("u1", "2025-10")] == [first.id]


def test_ownerless_budgets_are_isolated_from_owners(session) -> None:
    store = BudgetStore(session)
    shared = store.upsert(None, BudgetIn(category="Rent", amount="900", month="2025-10"))
    again = store.upsert(None, BudgetIn(category="Rent", amount="950", month="2025-10"))
    assert again.id == shared.id

    assert store.for_month("u1", "2025-10") == []
    assert [b.category for b in store.for_month(None, "2025-10")] == ["Rent"]


def test_database_rejects_duplicate_ownerless_budgets(session) -> None:
    session.add(Budget(owner_id=None, category="Rent", amount_cents=100, month="2025-10"))
    session.commit()

    session.add(Budget(owner_id=None, category="Rent", amount_cents=200, month="2025-10"))
    with pytest.raises(IntegrityError):
        session.commit()
    session.rollback()

    session.add(Budget(owner_id=None, category="Rent", amount_cents=200, month="2025-11"))
    session.commit()


def test_update_rejects_collisions_and_foreign_rows(session) -> None:
    store = BudgetStore(session)
    food = store.upsert("u1", BudgetIn(category="Food", amount="500", month="2025-10"))
    store.upsert("u1", BudgetIn(category="Travel", amount="300", month="2025-10"))

    with pytest.raises(ValueError):
        store.update("u1", food.id, BudgetUpdate(category="Travel"))
    with pytest.raises(ValueError):
        store.update("u2", food.id, BudgetUpdate(amount="1"))

    store.delete("u1", food.id)
    assert [b.category for b in store.for_month("u1", "2025-10")] == ["Travel"]
