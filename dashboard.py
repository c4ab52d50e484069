from __future__ import annotations

from datetime import date, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from aggregation import (
    AggregationEngine,
    BudgetUtilization,
    CategoryAmount,
    percent_change,
    savings_rate,
)
from auth import Identity
from budgets import BudgetStore
from ledger import RECENT_HARD_LIMIT, LedgerStore
from models import Transaction, TransactionType
from periods import (
    PeriodKind,
    month_range,
    previous_month,
    resolve_named_period,
    resolve_period,
)
from schemas import (
    BreakdownOut,
    BudgetUtilizationOut,
    CategoryAmountOut,
    DashboardSummaryOut,
    IncomeVsExpensesOut,
    MoneyCard,
    RecentTransactionsOut,
    ReportPeriodOut,
    ReportSummaryOut,
    ReportTotalsOut,
    SeriesOut,
    SummaryCards,
    SummaryPeriodOut,
    TransactionOut,
    round_money,
)
from tax import TaxEstimator

SUMMARY_RECENT_LIMIT = 10
RECENT_DEFAULT_LIMIT = 8


def transaction_out(txn: Transaction) -> TransactionOut:
    fallback = "Income" if txn.type == TransactionType.income else "Expense"
    return TransactionOut(
        id=txn.id,
        owner_id=txn.owner_id,
        type=txn.type,
        category=txn.category,
        amount=round_money(txn.amount_cents),
        date=txn.date,
        description=txn.description or fallback,
        created_at=txn.created_at,
        updated_at=txn.updated_at,
    )


def breakdown_out(rows: list[CategoryAmount]) -> BreakdownOut:
    return BreakdownOut(
        by_category=[
            CategoryAmountOut(category=row.category, amount=round_money(row.amount_cents))
            for row in rows
        ]
    )


def budget_out(row: BudgetUtilization) -> BudgetUtilizationOut:
    budget = row.budget
    return BudgetUtilizationOut(
        id=budget.id,
        owner_id=budget.owner_id,
        category=budget.category,
        amount=round_money(row.cap_cents),
        cap=round_money(row.cap_cents),
        month=budget.month,
        month_start=budget.month_start,
        description=budget.description or "",
        spent=round_money(row.spent_cents),
        remaining=round_money(row.remaining_cents),
        used_pct=round(row.used_pct, 2),
        created_at=budget.created_at,
        updated_at=budget.updated_at,
    )


class DashboardService:
    """Shapes aggregation results into the dashboard's read-only views."""

    def __init__(self, engine: AggregationEngine, ledger: LedgerStore) -> None:
        self.engine = engine
        self.ledger = ledger

    @classmethod
    def for_session(cls, session: Session, tax: TaxEstimator) -> DashboardService:
        ledger = LedgerStore(session)
        engine = AggregationEngine(ledger, BudgetStore(session), tax)
        return cls(engine, ledger)

    def summary(self, identity: Identity, year: int, month: int) -> DashboardSummaryOut:
        owner_id = identity.owner_id
        period = month_range(year, month)
        previous = previous_month(period)

        current = self.engine.totals_by_type(owner_id, period)
        prior = self.engine.totals_by_type(owner_id, previous)
        income = current.income_cents
        expense = current.expense_cents

        recent = self.ledger.recent(
            owner_id, SUMMARY_RECENT_LIMIT, since=period.start, until=period.end
        )
        return DashboardSummaryOut(
            period=SummaryPeriodOut(
                year=year,
                month=month,
                month_str=period.month_key,
                label=period.label,
                start=period.start,
                end=period.end,
            ),
            cards=SummaryCards(
                income=MoneyCard(
                    amount=round_money(income),
                    change_pct=round(percent_change(income, prior.income_cents), 2),
                ),
                expenses=MoneyCard(
                    amount=round_money(expense),
                    change_pct=round(percent_change(expense, prior.expense_cents), 2),
                ),
                estimated_tax_due=round_money(self.engine.estimated_tax_due(income)),
                savings_rate_pct=round(savings_rate(income, expense), 2),
            ),
            breakdown=breakdown_out(self.engine.category_breakdown(owner_id, period)),
            budgets=[
                budget_out(row)
                for row in self.engine.budget_utilization(owner_id, period)
            ],
            recent_transactions=[transaction_out(txn) for txn in recent],
        )

    def income_vs_expenses(
        self, identity: Identity, kind: PeriodKind, year: int, month: int
    ) -> IncomeVsExpensesOut:
        period = resolve_period(kind, year, month)
        series = self.engine.time_series(identity.owner_id, period)
        return IncomeVsExpensesOut(
            labels=series.labels,
            series=[
                SeriesOut(
                    label="Income", data=[round_money(v) for v in series.income_cents]
                ),
                SeriesOut(
                    label="Expenses",
                    data=[round_money(v) for v in series.expense_cents],
                ),
            ],
            period=kind,
        )

    def recent(
        self,
        identity: Identity,
        limit: int = RECENT_DEFAULT_LIMIT,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> RecentTransactionsOut:
        limit = max(1, min(limit, RECENT_HARD_LIMIT))
        # The end date is inclusive for callers; the last representable day has
        # no exclusive bound after it.
        until = None
        if end_date is not None and end_date < date.max:
            until = end_date + timedelta(days=1)
        txns = self.ledger.recent(
            identity.owner_id, limit, since=start_date, until=until
        )
        return RecentTransactionsOut(transactions=[transaction_out(t) for t in txns])

    def report_summary(
        self, identity: Identity, name: str, *, reference: Optional[date] = None
    ) -> ReportSummaryOut:
        period = resolve_named_period(name, reference=reference)
        totals = self.engine.totals_by_type(identity.owner_id, period)
        return ReportSummaryOut(
            period=ReportPeriodOut(
                name=name, label=period.label, start=period.start, end=period.end
            ),
            totals=ReportTotalsOut(
                income=round_money(totals.income_cents),
                expenses=round_money(totals.expense_cents),
                net=round_money(totals.income_cents - totals.expense_cents),
            ),
            breakdown=breakdown_out(
                self.engine.category_breakdown(identity.owner_id, period)
            ),
        )
