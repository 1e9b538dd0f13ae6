from datetime import date

import pytest

from freelance_ledger.models import ExpenseEntry, IncomeEntry
from freelance_ledger.periods import period_quarter
from freelance_ledger.views import (
    EXPORT_COLUMNS,
    build_export_table,
    expenses_by_category,
    format_amount,
    income_by_category,
    monthly_trend,
    payment_status_breakdown,
)


def _income(entry_id: str, day: date, amount: float, **kwargs) -> IncomeEntry:
    return IncomeEntry(
        id=entry_id,
        date=day,
        job_title=kwargs.pop("job_title", f"Job {entry_id}"),
        client_name="Client",
        amount=amount,
        **kwargs,
    )


def _expense(entry_id: str, day: date, amount: float, **kwargs) -> ExpenseEntry:
    return ExpenseEntry(
        id=entry_id,
        date=day,
        title=kwargs.pop("title", f"Cost {entry_id}"),
        amount=amount,
        **kwargs,
    )


def test_export_table_row_count_and_columns() -> None:
    """One row per entry, with the fixed export columns."""
    income = [_income("i1", date(2025, 1, 5), 100), _income("i2", date(2025, 1, 6), 50)]
    expenses = [_expense("e1", date(2025, 1, 7), 40)]

    df = build_export_table(income, expenses)

    assert list(df.columns) == EXPORT_COLUMNS
    assert len(df) == len(income) + len(expenses)


def test_export_table_income_first_and_expenses_negated() -> None:
    """Income rows come first even when an expense is older."""
    income = [_income("i1", date(2025, 1, 20), 100, category="Design")]
    expenses = [
        _expense("e1", date(2025, 1, 1), 40, category="Software"),
        _expense("e2", date(2025, 1, 2), 10.5, status="pending"),
    ]

    df = build_export_table(income, expenses)

    assert df["Type"].tolist() == ["Income", "Expense", "Expense"]
    assert df["Amount"].tolist() == ["100.00", "-40.00", "-10.50"]
    assert df["Description"].tolist() == ["Job i1", "Cost e1", "Cost e2"]
    assert df["Status"].tolist() == ["paid", "paid", "pending"]
    assert df["Date"].tolist() == ["2025-01-20", "2025-01-01", "2025-01-02"]


def test_export_table_empty() -> None:
    df = build_export_table([], [])

    assert df.empty
    assert list(df.columns) == EXPORT_COLUMNS


@pytest.mark.parametrize(
    "value, expected",
    [(0, "0.00"), (-0.0, "0.00"), (-0.001, "0.00"), (1234.5, "1234.50"), (-40, "-40.00")],
)
def test_format_amount(value: float, expected: str) -> None:
    assert format_amount(value) == expected


def test_income_by_category_sorted_by_total() -> None:
    income = [
        _income("i1", date(2025, 1, 1), 100, category="Writing"),
        _income("i2", date(2025, 1, 2), 300, category="Design"),
        _income("i3", date(2025, 1, 3), 50, category="Writing"),
    ]

    df = income_by_category(income)

    assert df["category"].tolist() == ["Design", "Writing"]
    assert df["total"].tolist() == [300.0, 150.0]
    assert df["count"].tolist() == [1, 2]
    assert df["average"].tolist() == [300.0, 75.0]


def test_expenses_by_category_empty_has_columns() -> None:
    df = expenses_by_category([])

    assert df.empty
    assert list(df.columns) == ["category", "total", "count", "average"]


def test_payment_status_breakdown() -> None:
    income = [
        _income("i1", date(2025, 1, 1), 100),
        _income("i2", date(2025, 1, 2), 200, payment_status="overdue"),
        _income("i3", date(2025, 1, 3), 25),
    ]

    df = payment_status_breakdown(income)

    assert list(df.columns) == ["payment_status", "total", "count"]
    rows = dict(zip(df["payment_status"], df["total"]))
    assert rows == {"overdue": 200.0, "paid": 125.0}


def test_monthly_trend_keeps_empty_months() -> None:
    period = period_quarter(2025, 1)
    income = [_income("i1", date(2025, 1, 10), 100), _income("i2", date(2025, 3, 5), 60)]
    expenses = [_expense("e1", date(2025, 3, 6), 80)]

    df = monthly_trend(period, income, expenses)

    assert df["month"].tolist() == ["January 2025", "February 2025", "March 2025"]
    assert df["income"].tolist() == [100.0, 0.0, 60.0]
    assert df["expenses"].tolist() == [0.0, 0.0, 80.0]
    assert df["profit"].tolist() == [100.0, 0.0, -20.0]
