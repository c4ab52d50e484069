from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta

from budgets import BudgetStore
from ledger import LedgerStore
from models import Budget, TransactionType
from periods import Period, PeriodKind, add_months
from tax import TaxEstimator


@dataclass(frozen=True)
class Totals:
    income_cents: int
    expense_cents: int


@dataclass(frozen=True)
class CategoryAmount:
    category: str
    amount_cents: int


@dataclass(frozen=True)
class BudgetUtilization:
    budget: Budget
    cap_cents: int
    spent_cents: int
    remaining_cents: int
    used_pct: float


@dataclass(frozen=True)
class TimeSeries:
    kind: PeriodKind
    labels: list[str]
    income_cents: list[int]
    expense_cents: list[int]


def percent_change(current: float, previous: float) -> float:
    # A zero baseline reads as "no change" rather than an infinite jump.
    if previous == 0:
        return 0.0
    return (current - previous) / previous * 100


def savings_rate(income: float, expense: float) -> float:
    if income <= 0:
        return 0.0
    return (income - expense) / income * 100


def utilization(cap_cents: int, spent_cents: int) -> tuple[int, float]:
    """Return ``(remaining, used_pct)``; both clamp instead of going negative or past 100."""
    remaining = max(0, cap_cents - spent_cents)
    if cap_cents <= 0:
        return remaining, 0.0
    return remaining, min(100.0, spent_cents / cap_cents * 100)


class AggregationEngine:
    """Read-only summaries over the ledger and budget stores.

    Every method is scoped to a single owner and a resolved period. Amounts
    stay in integer cents; rounding to currency units is left to the
    presentation layer.
    """

    def __init__(
        self, ledger: LedgerStore, budgets: BudgetStore, tax: TaxEstimator
    ) -> None:
        self.ledger = ledger
        self.budgets = budgets
        self.tax = tax

    def totals_by_type(self, owner_id: str, period: Period) -> Totals:
        totals = self.ledger.totals_by_type(owner_id, period.start, period.end)
        return Totals(
            income_cents=totals.get(TransactionType.income, 0),
            expense_cents=totals.get(TransactionType.expense, 0),
        )

    def category_breakdown(self, owner_id: str, period: Period) -> list[CategoryAmount]:
        by_category = self.ledger.totals_by_category(
            owner_id, period.start, period.end, TransactionType.expense
        )
        rows = sorted(by_category.items(), key=lambda item: (-item[1], item[0]))
        return [CategoryAmount(category=name, amount_cents=amount) for name, amount in rows]

    def budget_utilization(
        self, owner_id: str, period: Period
    ) -> list[BudgetUtilization]:
        """Budgets are monthly, so only the month that ``period`` starts in is used."""
        month_start = period.start.replace(day=1)
        month_end = add_months(month_start, 1)
        budgets = self.budgets.for_month(owner_id, period.month_key)
        if not budgets:
            return []
        spent_by_category = self.ledger.totals_by_category(
            owner_id, month_start, month_end, TransactionType.expense
        )
        rows: list[BudgetUtilization] = []
        for budget in budgets:
            spent = spent_by_category.get(budget.category, 0)
            remaining, used_pct = utilization(budget.amount_cents, spent)
            rows.append(
                BudgetUtilization(
                    budget=budget,
                    cap_cents=budget.amount_cents,
                    spent_cents=spent,
                    remaining_cents=remaining,
                    used_pct=used_pct,
                )
            )
        return rows

    def estimated_tax_due(self, income_cents: int) -> float:
        return self.tax.estimate(income_cents)

    def time_series(self, owner_id: str, period: Period) -> TimeSeries:
        monthly = period.kind != PeriodKind.month
        if monthly:
            keys = _months(period.start, period.end)
            label_format = "%b %Y"
        else:
            keys = _days(period.start, period.end)
            label_format = "%d %b"

        # Seed every bucket first so quiet days and months still show up as zero.
        buckets: dict[date, dict[TransactionType, int]] = {
            key: {txn_type: 0 for txn_type in TransactionType} for key in keys
        }
        daily = self.ledger.daily_totals(owner_id, period.start, period.end)
        for (day, txn_type), total in daily.items():
            if not period.contains(day):
                continue
            buckets[day.replace(day=1) if monthly else day][txn_type] += total

        return TimeSeries(
            kind=period.kind,
            labels=[key.strftime(label_format) for key in buckets],
            income_cents=[b[TransactionType.income] for b in buckets.values()],
            expense_cents=[b[TransactionType.expense] for b in buckets.values()],
        )


def _days(start: date, end: date) -> list[date]:
    days: list[date] = []
    current = start
    while current < end:
        days.append(current)
        current += timedelta(days=1)
    return days


def _months(start: date, end: date) -> list[date]:
    months: list[date] = []
    current = start.replace(day=1)
    while current < end:
        months.append(current)
        current = add_months(current, 1)
    return months
