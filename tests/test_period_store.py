import sqlite3
from datetime import date

import pytest

from freelance_ledger.period_store import (
    SELECTED_PERIOD_KEY,
    MemoryPeriodStore,
    SqlitePeriodStore,
    period_from_json,
    period_to_json,
)
from freelance_ledger.periods import period_custom, period_quarter


def test_sqlite_store_creates_file_and_starts_empty(tmp_path) -> None:
    """A fresh store has no selected period."""
    store = SqlitePeriodStore(tmp_path / "state" / "store.sqlite")

    assert store.load() is None
    assert store.path.exists()


def test_sqlite_store_roundtrip_and_overwrite(tmp_path) -> None:
    path = tmp_path / "store.sqlite"
    first = period_quarter(2025, 2)
    second = period_custom(date(2025, 1, 1), date(2025, 1, 31))

    SqlitePeriodStore(path).save(first)
    assert SqlitePeriodStore(path).load() == first

    # The latest selection replaces the previous one.
    SqlitePeriodStore(path).save(second)
    assert SqlitePeriodStore(path).load() == second


def test_sqlite_store_ignores_corrupted_value(tmp_path, caplog) -> None:
    path = tmp_path / "store.sqlite"
    store = SqlitePeriodStore(path)
    store.save(period_quarter(2025, 2))

    conn = sqlite3.connect(path)
    with conn:
        conn.execute(
            "UPDATE settings SET value = ? WHERE key = ?;",
            ("{broken", SELECTED_PERIOD_KEY),
        )
    conn.close()

    assert store.load() is None
    assert "Ignoring invalid stored period" in caplog.text


def test_memory_store() -> None:
    store = MemoryPeriodStore()
    assert store.load() is None

    period = period_quarter(2026, 4)
    store.save(period)

    assert store.load() == period


def test_period_json_keeps_kind_and_label() -> None:
    period = period_quarter(2026, 1)

    restored = period_from_json(period_to_json(period))

    assert restored.kind == "quarter"
    assert restored.label == "Q1 2026"


@pytest.mark.parametrize("raw", ["", "[]", '{"start": "2025-01-01"}', '{"start": "x", "end": "y", "label": "z"}'])
def test_period_from_json_rejects_malformed_documents(raw: str) -> None:
    with pytest.raises(ValueError):
        period_from_json(raw)
