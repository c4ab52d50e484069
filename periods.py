"""Date-window arithmetic for dashboard and report periods.

Every window is half-open: ``start`` is the first day included and ``end`` is
the first day *not* included. Callers are expected to pass validated integers;
range checks live at the HTTP boundary.
"""

import re
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Optional
from zoneinfo import ZoneInfo

from config import get_settings

MONTH_KEY_RE = re.compile(r"^(\d{4})-(0[1-9]|1[0-2])$")


class PeriodKind(str, Enum):
    month = "month"
    quarter = "quarter"
    year = "year"


@dataclass(frozen=True)
class Period:
    kind: PeriodKind
    start: date
    end: date
    label: str

    def contains(self, day: date) -> bool:
        return self.start <= day < self.end

    @property
    def month_key(self) -> str:
        return month_key(self.start.year, self.start.month)


def today() -> date:
    return datetime.now(ZoneInfo(get_settings().timezone)).date()


def month_key(year: int, month: int) -> str:
    return f"{year:04d}-{month:02d}"


def parse_month_key(value: str) -> date:
    match = MONTH_KEY_RE.match(value.strip())
    if not match:
        raise ValueError("month must be in YYYY-MM format")
    return date(int(match.group(1)), int(match.group(2)), 1)


def add_months(d: date, count: int) -> date:
    month_index = (d.year * 12) + (d.month - 1) + count
    year = month_index // 12
    month = (month_index % 12) + 1
    return date(year, month, 1)


def month_range(year: int, month: int) -> Period:
    start = date(year, month, 1)
    return Period(
        PeriodKind.month,
        start,
        add_months(start, 1),
        start.strftime("%B %Y"),
    )


def quarter_range(year: int, quarter: int) -> Period:
    start = date(year, (quarter - 1) * 3 + 1, 1)
    return Period(PeriodKind.quarter, start, add_months(start, 3), f"Q{quarter} {year}")


def year_range(year: int) -> Period:
    return Period(PeriodKind.year, date(year, 1, 1), date(year + 1, 1, 1), str(year))


def quarter_of(month: int) -> int:
    return (month + 2) // 3


def previous_month(period: Period) -> Period:
    prev = add_months(period.start, -1)
    return month_range(prev.year, prev.month)


def resolve_period(kind: PeriodKind, year: int, month: int) -> Period:
    if kind == PeriodKind.quarter:
        return quarter_range(year, quarter_of(month))
    if kind == PeriodKind.year:
        return year_range(year)
    return month_range(year, month)


NAMED_PERIODS = ("this-month", "last-month", "this-quarter", "this-year")


def resolve_named_period(name: str, *, reference: Optional[date] = None) -> Period:
    reference = reference or today()
    if name == "this-month":
        base = month_range(reference.year, reference.month)
        label = "Current Month"
    elif name == "last-month":
        base = previous_month(month_range(reference.year, reference.month))
        label = "Last Month"
    elif name == "this-quarter":
        base = quarter_range(reference.year, quarter_of(reference.month))
        label = "This Quarter"
    elif name == "this-year":
        base = year_range(reference.year)
        label = "This Year"
    else:
        raise ValueError(f"Unknown report period: {name}")
    return Period(base.kind, base.start, base.end, label)
