from datetime import date
from types import SimpleNamespace

import pytest

import freelance_ledger.periods as periods
from freelance_ledger.models import IncomeEntry


def _entry(day: date, entry_id: str) -> IncomeEntry:
    return IncomeEntry(
        id=entry_id, date=day, job_title="Job", client_name="Client", amount=10.0
    )


def _args(**kwargs) -> SimpleNamespace:
    defaults = dict(
        period=None, year=None, month=None, quarter=None, from_date=None, to_date=None
    )
    defaults.update(kwargs)
    return SimpleNamespace(**defaults)


def test_filter_entries_by_period_inclusive_bounds() -> None:
    """Entries on the first and last day of the period are kept."""
    entries = [
        _entry(date(2025, 1, 31), "a"),
        _entry(date(2025, 2, 1), "b"),
        _entry(date(2025, 2, 15), "c"),
        _entry(date(2025, 2, 28), "d"),
        _entry(date(2025, 3, 1), "e"),
    ]

    filtered = periods.filter_entries_by_period(entries, periods.period_month(2025, 2))

    assert [e.id for e in filtered] == ["b", "c", "d"]


def test_filter_entries_by_period_preserves_order() -> None:
    entries = [_entry(date(2025, 2, 20), "late"), _entry(date(2025, 2, 2), "early")]

    filtered = periods.filter_entries_by_period(entries, periods.period_month(2025, 2))

    assert [e.id for e in filtered] == ["late", "early"]


def test_period_month_handles_leap_year() -> None:
    p = periods.period_month(2024, 2)

    assert p.start == date(2024, 2, 1)
    assert p.end == date(2024, 2, 29)
    assert p.end_exclusive == date(2024, 3, 1)
    assert p.label == "February 2024"


def test_period_quarter_bounds_and_label() -> None:
    p = periods.period_quarter(2026, 3)

    assert p.start == date(2026, 7, 1)
    assert p.end == date(2026, 9, 30)
    assert p.label == "Q3 2026"
    assert p.filename_token == "Q3_2026"


def test_period_year_covers_whole_year() -> None:
    p = periods.period_year(2025)

    assert p.contains(date(2025, 1, 1))
    assert p.contains(date(2025, 12, 31))
    assert not p.contains(date(2026, 1, 1))


def test_period_custom_rejects_inverted_range() -> None:
    with pytest.raises(ValueError):
        periods.period_custom(date(2025, 3, 1), date(2025, 2, 1))


def test_custom_period_line_and_filename_token() -> None:
    p = periods.period_custom(date(2025, 1, 15), date(2025, 2, 14))

    assert p.period_line == "2025-01-15 to 2025-02-14"
    assert p.filename_token == "2025-01-15_2025-02-14"


def test_month_period_line_is_label() -> None:
    p = periods.period_month(2026, 10)

    assert p.period_line == "October 2026"
    assert p.filename_token == "October_2026"


@pytest.mark.parametrize("month", [0, 13])
def test_period_month_rejects_invalid_month(month: int) -> None:
    with pytest.raises(ValueError):
        periods.period_month(2025, month)


def test_determine_period_defaults_to_current_month(monkeypatch) -> None:
    """Without arguments the current month of the default type is used."""
    monkeypatch.setattr(periods, "_today", lambda: date(2025, 5, 17))

    p = periods.determine_period_from_args(_args())

    assert p == periods.period_month(2025, 5)


def test_determine_period_current_quarter(monkeypatch) -> None:
    monkeypatch.setattr(periods, "_today", lambda: date(2025, 11, 3))

    p = periods.determine_period_from_args(_args(period="quarterly"))

    assert p.label == "Q4 2025"


def test_determine_period_uses_default_type(monkeypatch) -> None:
    monkeypatch.setattr(periods, "_today", lambda: date(2025, 11, 3))

    p = periods.determine_period_from_args(_args(), default_type="yearly")

    assert p == periods.period_year(2025)


def test_determine_period_custom_dates_take_precedence() -> None:
    p = periods.determine_period_from_args(
        _args(period="monthly", month=3, from_date="2025-01-01", to_date="2025-01-31")
    )

    assert p.kind == "custom"
    assert p.start == date(2025, 1, 1)
    assert p.end == date(2025, 1, 31)


def test_determine_period_custom_requires_both_dates() -> None:
    with pytest.raises(ValueError):
        periods.determine_period_from_args(_args(period="custom", from_date="2025-01-01"))


def test_determine_period_rejects_unknown_type() -> None:
    with pytest.raises(ValueError):
        periods.determine_period_from_args(_args(period="weekly"))


def test_months_in_period_spans_year_boundary() -> None:
    p = periods.period_custom(date(2024, 11, 20), date(2025, 2, 3))

    assert periods.months_in_period(p) == [(2024, 11), (2024, 12), (2025, 1), (2025, 2)]
