# FreelanceLedger - Income & expense tracking for freelancers
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
View utilities for FreelanceLedger.

This module turns lists of entries into tabular pandas views used for
CSV export and console display:

- export table: income and expense entries flattened into one table with
  columns Date, Type, Category, Description, Amount, Status. Income rows
  come first, then expense rows, each group in the order received.
  Expense amounts are negated so both kinds can live in one column.
- breakdowns: totals per category, per payment status, and per calendar
  month of a reporting period.

Amounts in the export table are pre-formatted strings with exactly two
decimals and no thousands separator, so the exported file is identical
whatever the locale.
"""

from collections.abc import Sequence

import pandas as pd

from .models import ExpenseEntry, IncomeEntry
from .periods import MONTH_NAMES, ReportPeriod, months_in_period

EXPORT_COLUMNS = ["Date", "Type", "Category", "Description", "Amount", "Status"]


def format_amount(value: float) -> str:
    """Two decimals, no grouping; negative zero is printed as 0.00."""
    rounded = round(float(value), 2) + 0.0
    return f"{rounded:.2f}"


def build_export_table(
    income_entries: Sequence[IncomeEntry],
    expense_entries: Sequence[ExpenseEntry],
) -> pd.DataFrame:
    """Return the flattened export table (one row per entry).

    The number of rows always equals
    ``len(income_entries) + len(expense_entries)``.
    """
    rows: list[dict[str, str]] = []

    for e in income_entries:
        rows.append(
            {
                "Date": e.date.isoformat(),
                "Type": "Income",
                "Category": e.category,
                "Description": e.job_title,
                "Amount": format_amount(e.amount),
                "Status": e.payment_status,
            }
        )

    for e in expense_entries:
        rows.append(
            {
                "Date": e.date.isoformat(),
                "Type": "Expense",
                "Category": e.category,
                "Description": e.title,
                "Amount": format_amount(-e.amount),
                "Status": e.status or "paid",
            }
        )

    return pd.DataFrame(rows, columns=EXPORT_COLUMNS)


# ---------------------------------------------------------------------------
# Breakdowns
# ---------------------------------------------------------------------------


def _entries_frame(entries: Sequence, key: str) -> pd.DataFrame:
    return pd.DataFrame(
        {
            key: [getattr(e, key) for e in entries],
            "amount": [float(e.amount) for e in entries],
        }
    )


def _group_totals(df: pd.DataFrame, key: str) -> pd.DataFrame:
    if df.empty:
        return pd.DataFrame(columns=[key, "total", "count", "average"])
    out = (
        df.groupby(key, sort=False)["amount"]
        .agg(total="sum", count="count", average="mean")
        .reset_index()
    )
    out = out.sort_values("total", ascending=False, kind="stable")
    out["total"] = out["total"].round(2)
    out["average"] = out["average"].round(2)
    return out.reset_index(drop=True)


def income_by_category(income_entries: Sequence[IncomeEntry]) -> pd.DataFrame:
    """Total, count and average income per category (largest first)."""
    return _group_totals(_entries_frame(income_entries, "category"), "category")


def expenses_by_category(expense_entries: Sequence[ExpenseEntry]) -> pd.DataFrame:
    """Total, count and average expense per category (largest first)."""
    return _group_totals(_entries_frame(expense_entries, "category"), "category")


def payment_status_breakdown(income_entries: Sequence[IncomeEntry]) -> pd.DataFrame:
    """Income total and count per payment status (paid, pending, overdue)."""
    df = _entries_frame(income_entries, "payment_status")
    out = _group_totals(df, "payment_status")
    return out[["payment_status", "total", "count"]]


def monthly_trend(
    period: ReportPeriod,
    income_entries: Sequence[IncomeEntry],
    expense_entries: Sequence[ExpenseEntry],
) -> pd.DataFrame:
    """One row per calendar month spanned by the period.

    Columns: month (e.g. "March 2025"), income, expenses, profit.
    Months without entries are kept with zero amounts.
    """
    income_by_month: dict[tuple[int, int], float] = {}
    for e in income_entries:
        k = (e.date.year, e.date.month)
        income_by_month[k] = income_by_month.get(k, 0.0) + float(e.amount)

    expenses_by_month: dict[tuple[int, int], float] = {}
    for e in expense_entries:
        k = (e.date.year, e.date.month)
        expenses_by_month[k] = expenses_by_month.get(k, 0.0) + float(e.amount)

    out = []
    for year, month in months_in_period(period):
        inc = income_by_month.get((year, month), 0.0)
        exp = expenses_by_month.get((year, month), 0.0)
        out.append(
            {
                "month": f"{MONTH_NAMES[month - 1]} {year}",
                "income": round(inc, 2),
                "expenses": round(exp, 2),
                "profit": round(inc - exp, 2),
            }
        )
    return pd.DataFrame(out, columns=["month", "income", "expenses", "profit"])
