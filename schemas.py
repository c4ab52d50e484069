import datetime as dt
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from models import TransactionType
from periods import PeriodKind

MONTH_PATTERN = r"^\d{4}-(0[1-9]|1[0-2])$"


def to_cents(amount: Decimal) -> int:
    return int((Decimal(amount) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def round_money(cents: float) -> float:
    return round(cents / 100, 2)


class TransactionIn(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    type: TransactionType
    amount: Decimal = Field(..., ge=0, max_digits=14, decimal_places=2)
    category: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    date: date


class TransactionUpdate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    type: Optional[TransactionType] = None
    amount: Optional[Decimal] = Field(
        default=None, ge=0, max_digits=14, decimal_places=2
    )
    category: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    date: Optional[dt.date] = None


class BudgetIn(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    category: str = Field(..., min_length=1, max_length=100)
    amount: Decimal = Field(..., ge=0, max_digits=14, decimal_places=2)
    month: str = Field(..., pattern=MONTH_PATTERN)
    description: str = Field(default="", max_length=500)


class BudgetUpdate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    category: Optional[str] = Field(default=None, min_length=1, max_length=100)
    amount: Optional[Decimal] = Field(
        default=None, ge=0, max_digits=14, decimal_places=2
    )
    month: Optional[str] = Field(default=None, pattern=MONTH_PATTERN)
    description: Optional[str] = Field(default=None, max_length=500)


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TransactionOut(CamelModel):
    id: int
    owner_id: str
    type: TransactionType
    category: str
    amount: float
    date: date
    description: str
    created_at: datetime
    updated_at: datetime


class MoneyCard(CamelModel):
    amount: float
    change_pct: float


class SummaryCards(CamelModel):
    income: MoneyCard
    expenses: MoneyCard
    estimated_tax_due: float
    savings_rate_pct: float


class CategoryAmountOut(CamelModel):
    category: str
    amount: float


class BreakdownOut(CamelModel):
    by_category: list[CategoryAmountOut]


class BudgetUtilizationOut(CamelModel):
    id: int
    owner_id: Optional[str] = None
    category: str
    amount: float
    cap: float
    month: str
    month_start: date
    description: str
    spent: float
    remaining: float
    used_pct: float
    created_at: datetime
    updated_at: datetime


class SummaryPeriodOut(CamelModel):
    year: int
    month: int
    month_str: str
    label: str
    start: date
    end: date


class DashboardSummaryOut(CamelModel):
    period: SummaryPeriodOut
    cards: SummaryCards
    breakdown: BreakdownOut
    budgets: list[BudgetUtilizationOut]
    recent_transactions: list[TransactionOut]


class SeriesOut(CamelModel):
    label: str
    data: list[float]


class IncomeVsExpensesOut(CamelModel):
    labels: list[str]
    series: list[SeriesOut]
    period: PeriodKind


class RecentTransactionsOut(CamelModel):
    transactions: list[TransactionOut]


class ReportPeriodOut(CamelModel):
    name: str
    label: str
    start: date
    end: date


class ReportTotalsOut(CamelModel):
    income: float
    expenses: float
    net: float


class ReportSummaryOut(CamelModel):
    period: ReportPeriodOut
    totals: ReportTotalsOut
    breakdown: BreakdownOut
