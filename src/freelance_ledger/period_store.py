# FreelanceLedger - Income & expense tracking for freelancers
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Persistence of the selected report period.

The dashboard remembers the last period a user looked at. This is a UI
concern: the engine and the report renderer never import this module.
Front ends receive a ``PeriodStore`` and call ``load()`` on start-up and
``save()`` whenever the selection changes.

Two implementations are provided:

- MemoryPeriodStore: process-local, used by tests and embedding code.
- SqlitePeriodStore: a single-table key/value store in a SQLite file.

Schema
------
    settings
    - key    TEXT PRIMARY KEY
    - value  TEXT NOT NULL     -- JSON document

The selected period is stored under the key ``selected_period`` as
``{"start": "YYYY-MM-DD", "end": "YYYY-MM-DD", "label": ..., "kind": ...}``.
"""

import json
import logging
import sqlite3
from datetime import date
from pathlib import Path
from typing import Optional, Protocol

from .periods import ReportPeriod

logger = logging.getLogger(__name__)

SELECTED_PERIOD_KEY = "selected_period"


class PeriodStore(Protocol):
    """Capability to remember the selected report period."""

    def load(self) -> Optional[ReportPeriod]: ...

    def save(self, period: ReportPeriod) -> None: ...


def period_to_json(period: ReportPeriod) -> str:
    return json.dumps(
        {
            "start": period.start.isoformat(),
            "end": period.end.isoformat(),
            "label": period.label,
            "kind": period.kind,
        }
    )


def period_from_json(raw: str) -> ReportPeriod:
    """
    Rebuild a ReportPeriod from its stored JSON form.

    Raises:
        ValueError: if the document is malformed.
    """
    try:
        data = json.loads(raw)
        return ReportPeriod(
            start=date.fromisoformat(data["start"]),
            end=date.fromisoformat(data["end"]),
            label=str(data["label"]),
            kind=data.get("kind", "custom"),
        )
    except (json.JSONDecodeError, KeyError, TypeError, ValueError) as exc:
        raise ValueError(f"Invalid stored period: {raw!r}") from exc


class MemoryPeriodStore:
    """In-memory store; nothing survives the process."""

    def __init__(self, initial: Optional[ReportPeriod] = None) -> None:
        self._period = initial

    def load(self) -> Optional[ReportPeriod]:
        return self._period

    def save(self, period: ReportPeriod) -> None:
        self._period = period


class SqlitePeriodStore:
    """Key/value store backed by a SQLite file."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def _connect(self) -> sqlite3.Connection:
        """
        Open a SQLite connection, creating the file and schema if needed.

        The caller is responsible for closing the connection.
        """
        self.path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(self.path)
        conn.execute(
            "CREATE TABLE IF NOT EXISTS settings ("
            "key TEXT PRIMARY KEY, value TEXT NOT NULL);"
        )
        return conn

    def load(self) -> Optional[ReportPeriod]:
        """
        Return the stored period, or None when nothing usable is stored.

        A corrupted value is logged and ignored so that a bad state file
        never prevents a report from being produced.
        """
        conn = self._connect()
        try:
            cur = conn.execute(
                "SELECT value FROM settings WHERE key = ?;", (SELECTED_PERIOD_KEY,)
            )
            row = cur.fetchone()
        finally:
            conn.close()

        if row is None:
            return None
        try:
            return period_from_json(row[0])
        except ValueError:
            logger.warning("Ignoring invalid stored period in %s", self.path)
            return None

    def save(self, period: ReportPeriod) -> None:
        conn = self._connect()
        try:
            with conn:
                conn.execute(
                    "INSERT INTO settings (key, value) VALUES (?, ?) "
                    "ON CONFLICT(key) DO UPDATE SET value = excluded.value;",
                    (SELECTED_PERIOD_KEY, period_to_json(period)),
                )
        finally:
            conn.close()
        logger.debug("Saved selected period %s to %s", period.label, self.path)
