from datetime import date, timedelta

from auth import Identity
from conftest import add_txn
from dashboard import DashboardService
from models import Transaction, TransactionType
from tax import NullTaxEstimator


def test_recent_view_is_capped_at_one_hundred(session) -> None:
    start = date(2024, 1, 1)
    session.add_all(
        [
            Transaction(
                owner_id="U",
                type=TransactionType.expense,
                amount_cents=100,
                category="Food",
                date=start + timedelta(days=i),
            )
            for i in range(120)
        ]
    )
    session.commit()

    service = DashboardService.for_session(session, NullTaxEstimator())
    view = service.recent(Identity("U"), limit=1_000)
    assert len(view.transactions) == 100
    assert view.transactions[0].date == start + timedelta(days=119)
    assert view.transactions[0].description == "Expense"
    assert len(service.recent(Identity("U"), limit=5).transactions) == 5


def test_summary_recent_list_is_limited_to_window(session) -> None:
    for day in range(1, 15):
        add_txn(session, "U", TransactionType.expense, "1", "Food", date(2025, 6, day))
    add_txn(session, "U", TransactionType.expense, "1", "Food", date(2025, 7, 1))

    service = DashboardService.for_session(session, NullTaxEstimator())
    summary = service.summary(Identity("U"), 2025, 6)
    assert len(summary.recent_transactions) == 10
    assert summary.recent_transactions[0].date == date(2025, 6, 14)
    assert summary.cards.expenses.amount == 14
    assert summary.cards.estimated_tax_due == 0
