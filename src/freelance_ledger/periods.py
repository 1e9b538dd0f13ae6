# FreelanceLedger - Income & expense tracking for freelancers
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Period helpers for FreelanceLedger.

This module defines the ReportPeriod value object and helpers to derive
reporting periods (month, quarter, year, custom range) from a selection
made in the UI or on the command line, plus filtering of entries by period.

A period stores its last included day in ``end``. The equivalent half-open
range is ``[start, end_exclusive)``; both forms describe the same days.
"""

import calendar
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Literal, Optional, TypeVar

PeriodKind = Literal["month", "quarter", "year", "custom"]

MONTH_NAMES: tuple[str, ...] = tuple(calendar.month_name[1:])

_E = TypeVar("_E")


@dataclass(frozen=True)
class ReportPeriod:
    """Represents a reporting period with a human-readable label."""

    start: date
    end: date
    label: str
    kind: PeriodKind = "custom"

    @property
    def end_exclusive(self) -> date:
        return self.end + timedelta(days=1)

    def contains(self, day: date) -> bool:
        return self.start <= day < self.end_exclusive

    @property
    def period_line(self) -> str:
        """Line printed under the report title."""
        if self.kind == "custom":
            return f"{self.start.isoformat()} to {self.end.isoformat()}"
        return self.label

    @property
    def filename_token(self) -> str:
        """Deterministic token used in report file names."""
        if self.kind == "custom":
            return f"{self.start.isoformat()}_{self.end.isoformat()}"
        return self.label.replace(" ", "_")


def _today() -> date:
    """Return today's date as a date object (isolated for easier testing)."""
    return datetime.today().date()


def period_month(year: int, month: int) -> ReportPeriod:
    """Full calendar month. ``month`` is 1-based."""
    if not 1 <= month <= 12:
        raise ValueError(f"Invalid month: {month!r} (expected 1-12).")
    last_day = calendar.monthrange(year, month)[1]
    return ReportPeriod(
        start=date(year, month, 1),
        end=date(year, month, last_day),
        label=f"{MONTH_NAMES[month - 1]} {year}",
        kind="month",
    )


def period_quarter(year: int, quarter: int) -> ReportPeriod:
    """Calendar quarter (Q1 = Jan-Mar, ..., Q4 = Oct-Dec)."""
    if not 1 <= quarter <= 4:
        raise ValueError(f"Invalid quarter: {quarter!r} (expected 1-4).")
    first_month = (quarter - 1) * 3 + 1
    last_month = first_month + 2
    last_day = calendar.monthrange(year, last_month)[1]
    return ReportPeriod(
        start=date(year, first_month, 1),
        end=date(year, last_month, last_day),
        label=f"Q{quarter} {year}",
        kind="quarter",
    )


def period_year(year: int) -> ReportPeriod:
    """Full calendar year."""
    return ReportPeriod(
        start=date(year, 1, 1),
        end=date(year, 12, 31),
        label=str(year),
        kind="year",
    )


def period_custom(start: date, end: date) -> ReportPeriod:
    """Explicit inclusive date range."""
    if end < start:
        raise ValueError("Custom period end date cannot be before start date.")
    return ReportPeriod(
        start=start,
        end=end,
        label=f"Custom period ({start} → {end})",
        kind="custom",
    )


def determine_period_from_args(
    args,
    default_type: str = "monthly",
) -> ReportPeriod:
    """
    Determine the reporting period from CLI args.

    Priority (highest to lowest):

        1. args.from_date / args.to_date (custom period)
        2. args.period (monthly, quarterly, yearly, custom)
        3. ``default_type`` for the current month/quarter/year

    Missing year/month/quarter values default to the current date.
    """
    today = _today()

    from_raw: Optional[str] = getattr(args, "from_date", None)
    to_raw: Optional[str] = getattr(args, "to_date", None)
    period_type = getattr(args, "period", None)

    if from_raw or to_raw or period_type == "custom":
        if not (from_raw and to_raw):
            raise ValueError(
                "A custom period requires both --from-date and --to-date."
            )
        start = date.fromisoformat(from_raw)
        end = date.fromisoformat(to_raw)
        return period_custom(start, end)

    period_type = period_type or default_type
    year = getattr(args, "year", None) or today.year

    if period_type == "monthly":
        month = getattr(args, "month", None) or today.month
        return period_month(year, month)
    if period_type == "quarterly":
        quarter = getattr(args, "quarter", None) or (today.month - 1) // 3 + 1
        return period_quarter(year, quarter)
    if period_type == "yearly":
        return period_year(year)
    raise ValueError(f"Unknown period: {period_type!r}")


def filter_entries_by_period(entries: Iterable[_E], period: ReportPeriod) -> list[_E]:
    """
    Keep only entries whose ``date`` falls within the period.

    Order is preserved: the report renders entries in the order received.
    """
    return [e for e in entries if period.contains(e.date)]  # type: ignore[attr-defined]


def months_in_period(period: ReportPeriod) -> list[tuple[int, int]]:
    """List the (year, month) pairs spanned by the period, in order."""
    out: list[tuple[int, int]] = []
    year, month = period.start.year, period.start.month
    while (year, month) <= (period.end.year, period.end.month):
        out.append((year, month))
        if month == 12:
            year, month = year + 1, 1
        else:
            month += 1
    return out
