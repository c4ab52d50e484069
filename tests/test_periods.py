from datetime import date

import pytest

from periods import (
    PeriodKind,
    month_range,
    parse_month_key,
    previous_month,
    quarter_range,
    resolve_named_period,
    resolve_period,
    year_range,
)


def test_month_range_end_meets_next_month_start() -> None:
    for year in (1999, 2000, 2024, 2025, 2100):
        for month in range(1, 13):
            next_year, next_month = (year + 1, 1) if month == 12 else (year, month + 1)
            assert month_range(year, month).end == month_range(next_year, next_month).start


def test_december_rolls_into_next_year() -> None:
    period = month_range(2025, 12)
    assert period.kind == PeriodKind.month
    assert period.start == date(2025, 12, 1)
    assert period.end == date(2026, 1, 1)
    assert period.label == "December 2025"
    assert period.month_key == "2025-12"


def test_period_is_half_open() -> None:
    period = month_range(2025, 10)
    assert period.contains(date(2025, 10, 1))
    assert period.contains(date(2025, 10, 31))
    assert not period.contains(date(2025, 11, 1))
    assert not period.contains(date(2025, 9, 30))


def test_quarter_is_derived_from_month() -> None:
    q4 = resolve_period(PeriodKind.quarter, 2025, 11)
    assert (q4.start, q4.end, q4.label) == (date(2025, 10, 1), date(2026, 1, 1), "Q4 2025")

    assert resolve_period(PeriodKind.quarter, 2025, 3).start == date(2025, 1, 1)
    assert resolve_period(PeriodKind.quarter, 2025, 4).start == date(2025, 4, 1)
    assert quarter_range(2025, 2).end == date(2025, 7, 1)


def test_year_range() -> None:
    period = year_range(2024)
    assert period.start == date(2024, 1, 1)
    assert period.end == date(2025, 1, 1)
    assert period.label == "2024"
    assert resolve_period(PeriodKind.year, 2024, 7) == period


def test_previous_month_wraps_january() -> None:
    prev = previous_month(month_range(2025, 1))
    assert prev.start == date(2024, 12, 1)
    assert prev.end == date(2025, 1, 1)

    assert previous_month(month_range(2025, 7)).start == date(2025, 6, 1)


def test_named_report_periods() -> None:
    reference = date(2025, 1, 15)

    this_month = resolve_named_period("this-month", reference=reference)
    assert (this_month.start, this_month.end) == (date(2025, 1, 1), date(2025, 2, 1))
    assert this_month.label == "Current Month"

    last_month = resolve_named_period("last-month", reference=reference)
    assert (last_month.start, last_month.end) == (date(2024, 12, 1), date(2025, 1, 1))
    assert last_month.label == "Last Month"

    quarter = resolve_named_period("this-quarter", reference=reference)
    assert (quarter.start, quarter.end) == (date(2025, 1, 1), date(2025, 4, 1))

    year = resolve_named_period("this-year", reference=reference)
    assert (year.start, year.end, year.label) == (
        date(2025, 1, 1),
        date(2026, 1, 1),
        "This Year",
    )

    with pytest.raises(ValueError):
        resolve_named_period("next-decade", reference=reference)


def test_parse_month_key() -> None:
    assert parse_month_key("2025-10") == date(2025, 10, 1)
    assert parse_month_key(" 2025-01 ") == date(2025, 1, 1)
    for bad in ("2025-13", "2025-1", "25-10", "October"):
        with pytest.raises(ValueError):
            parse_month_key(bad)
