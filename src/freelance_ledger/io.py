# FreelanceLedger - Income & expense tracking for freelancers
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
I/O module for FreelanceLedger.

This module reads the inputs of the aggregation pipeline:

1) REST payload dumps (JSON)
   -------------------------
   Income entries, expense entries and collaborations as returned by the
   backend. The top-level value may be either a bare JSON array or an API
   envelope:

       {"success": true, "data": [...]}
       {"success": true, "data": {"data": [...], "pagination": {...}}}

   An envelope with ``"success": false`` raises a ValueError carrying the
   backend's message. Backend data is trusted to be well-formed: the first
   invalid object raises a ValidationError naming its index.

2) CSV uploads
   -----------
   Income/expense spreadsheets exported by freelance platforms or filled
   from the downloadable template. Column names are case-insensitive and a
   few aliases are accepted:

       income : Work Date, Date, Job Title, Client Name / Company Name,
                Bill Amount (or Amount), Category, Payment Status, Currency
       expense: Work Date, Date, Title (or Description), Vendor, Amount,
                Category, Tax Deductible, Status, Currency

   Dates may be ISO (2025-04-08) or human-readable ("Apr 8, 2025").
   Invalid rows do not abort the import: they are reported in the returned
   ImportResult with their line number in the file (the header is line 1).
"""

import json
import logging
import os
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, TypeVar, Union

import pandas as pd

from .models import Collaboration, ExpenseEntry, IncomeEntry, ValidationError

logger = logging.getLogger(__name__)

PathLike = Union[str, "os.PathLike[str]"]

_T = TypeVar("_T")

INCOME_COLUMN_ALIASES: dict[str, tuple[str, ...]] = {
    "workDate": ("work date", "workdate", "work_date"),
    "date": ("date", "payment date", "paid date"),
    "jobTitle": ("job title", "jobtitle", "job_title", "title"),
    "clientName": (
        "client name / company name",
        "client name",
        "clientname",
        "client_name",
        "client",
        "company name",
    ),
    "amount": ("amount", "bill amount", "billamount", "bill_amount"),
    "category": ("category",),
    "paymentStatus": ("payment status", "paymentstatus", "payment_status", "status"),
    "currency": ("currency",),
}

EXPENSE_COLUMN_ALIASES: dict[str, tuple[str, ...]] = {
    "workDate": ("work date", "workdate", "work_date"),
    "date": ("date", "payment date", "paid date"),
    "title": ("title", "description", "cost title", "expense"),
    "vendor": ("vendor", "supplier"),
    "amount": ("amount", "cost amount", "cost_amount"),
    "category": ("category",),
    "isTaxDeductible": ("tax deductible", "taxdeductible", "istaxdeductible", "is_tax_deductible"),
    "status": ("status", "payment status"),
    "currency": ("currency",),
}

# ---------------------------------------------------------------------------
# REST JSON payloads
# ---------------------------------------------------------------------------


def _unwrap_payload(payload: Any, source: str) -> list[Any]:
    """Extract the list of objects from a bare array or an API envelope."""
    if isinstance(payload, list):
        return payload

    if isinstance(payload, Mapping):
        if payload.get("success") is False:
            message = payload.get("message") or "request failed"
            raise ValueError(f"Backend payload in {source} reports an error: {message}")
        data = payload.get("data")
        if isinstance(data, Mapping):
            data = data.get("data")
        if isinstance(data, list):
            return data

    raise ValueError(
        f"Invalid payload structure in {source}. Expected a JSON array or an "
        "envelope of the form {\"success\": true, \"data\": [...]}."
    )


def _read_json(path: PathLike) -> Any:
    p = Path(path)
    try:
        return json.loads(p.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {p}: {exc}") from exc


def _load_objects(
    path: PathLike,
    build: Callable[[Mapping[str, Any]], _T],
    kind: str,
) -> list[_T]:
    items = _unwrap_payload(_read_json(path), str(path))
    out: list[_T] = []
    for index, obj in enumerate(items):
        if not isinstance(obj, Mapping):
            raise ValidationError(f"Invalid {kind} at index {index}: expected an object.")
        try:
            out.append(build(obj))
        except ValidationError as exc:
            raise ValidationError(f"Invalid {kind} at index {index}: {exc}") from exc
    logger.debug("Loaded %d %s object(s) from %s", len(out), kind, path)
    return out


def load_income_json(path: PathLike) -> list[IncomeEntry]:
    """Load income entries from a backend JSON dump."""
    return _load_objects(path, IncomeEntry.from_dict, "income entry")


def load_expense_json(path: PathLike) -> list[ExpenseEntry]:
    """Load expense entries from a backend JSON dump."""
    return _load_objects(path, ExpenseEntry.from_dict, "expense entry")


def load_collaborations_json(path: PathLike) -> list[Collaboration]:
    """Load collaborations (with embedded members) from a backend JSON dump."""
    return _load_objects(path, Collaboration.from_dict, "collaboration")


def load_overview_json(path: PathLike) -> dict[str, Any]:
    """
    Load server-side overview totals.

    Accepts the dashboard response (``{"data": {"overview": {...}}}``), a
    bare ``{"overview": {...}}`` object, or the overview object itself.
    """
    payload = _read_json(path)
    if not isinstance(payload, Mapping):
        raise ValueError(f"Invalid overview payload in {path}: expected an object.")

    node: Any = payload
    if isinstance(node.get("data"), Mapping):
        node = node["data"]
    if isinstance(node.get("overview"), Mapping):
        node = node["overview"]
    elif isinstance(node.get("summary"), Mapping):
        node = node["summary"]
    return dict(node)


# ---------------------------------------------------------------------------
# CSV uploads
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RowError:
    """One rejected CSV row."""

    row: int
    error: str
    data: dict[str, str]


@dataclass(frozen=True)
class ImportResult:
    """Outcome of a CSV import: accepted entries and rejected rows."""

    entries: tuple
    errors: tuple[RowError, ...]

    @property
    def success_count(self) -> int:
        return len(self.entries)

    @property
    def error_count(self) -> int:
        return len(self.errors)

    @property
    def total_processed(self) -> int:
        return self.success_count + self.error_count


def _resolve_columns(
    columns: list[str], aliases: Mapping[str, tuple[str, ...]]
) -> dict[str, str]:
    """Map canonical field names to the actual CSV column names."""
    normalized = {str(c).strip().lower(): c for c in columns}
    resolved: dict[str, str] = {}
    used: set[str] = set()
    for target, candidates in aliases.items():
        for cand in candidates:
            if cand in normalized and normalized[cand] not in used:
                resolved[target] = normalized[cand]
                used.add(normalized[cand])
                break
    return resolved


def _normalize_date(value: str, field_name: str) -> Optional[str]:
    text = value.strip()
    if not text:
        return None
    try:
        return pd.to_datetime(text).date().isoformat()
    except (ValueError, TypeError, OverflowError) as exc:
        raise ValidationError(f"Invalid value for '{field_name}': {text!r}.") from exc


def _normalize_amount(value: str) -> str:
    # Spreadsheet exports often carry a currency sign or grouping commas.
    return value.strip().replace(",", "").lstrip("$€£")


def _read_csv_rows(
    path: PathLike,
    aliases: Mapping[str, tuple[str, ...]],
    required: tuple[str, ...],
) -> tuple[pd.DataFrame, dict[str, str]]:
    df = pd.read_csv(path, dtype=str, keep_default_na=False, skipinitialspace=True)
    columns = _resolve_columns(list(df.columns), aliases)

    has_date = "date" in columns or "workDate" in columns
    missing = [name for name in required if name not in columns]
    if missing or not has_date:
        expected = ", ".join(aliases[name][0] for name in required)
        raise ValueError(
            f"Invalid CSV structure in {path}. Expected at least the columns: "
            f"date (or work date), {expected} (column names are case-insensitive)."
        )
    return df, columns


def _import_rows(
    df: pd.DataFrame,
    columns: Mapping[str, str],
    build: Callable[[dict[str, Any]], _T],
    id_prefix: str,
) -> ImportResult:
    entries: list[_T] = []
    errors: list[RowError] = []

    for index, raw in enumerate(df.to_dict(orient="records")):
        line = index + 2
        record = {target: str(raw.get(col, "")) for target, col in columns.items()}
        try:
            payload: dict[str, Any] = dict(record)
            payload["id"] = f"{id_prefix}-{line}"
            payload["date"] = _normalize_date(record.get("date", ""), "date")
            payload["workDate"] = _normalize_date(record.get("workDate", ""), "workDate")
            payload["amount"] = _normalize_amount(record.get("amount", ""))
            entries.append(build(payload))
        except ValidationError as exc:
            errors.append(RowError(row=line, error=str(exc), data=record))

    return ImportResult(entries=tuple(entries), errors=tuple(errors))


def read_income_csv(path: PathLike) -> ImportResult:
    """Import income entries from a CSV upload.

    Raises:
        ValueError: if the file lacks the date or amount columns.
    """
    df, columns = _read_csv_rows(path, INCOME_COLUMN_ALIASES, ("amount",))
    result = _import_rows(df, columns, IncomeEntry.from_dict, "csv-income")
    logger.info(
        "Imported income CSV %s: %d ok, %d rejected",
        path,
        result.success_count,
        result.error_count,
    )
    return result


def read_expense_csv(path: PathLike) -> ImportResult:
    """Import expense entries from a CSV upload.

    Raises:
        ValueError: if the file lacks the date or amount columns.
    """
    df, columns = _read_csv_rows(path, EXPENSE_COLUMN_ALIASES, ("amount",))
    result = _import_rows(df, columns, ExpenseEntry.from_dict, "csv-expense")
    logger.info(
        "Imported expense CSV %s: %d ok, %d rejected",
        path,
        result.success_count,
        result.error_count,
    )
    return result


def read_entries(path: PathLike, kind: str) -> list:
    """
    Load income or expense entries from a JSON dump or a CSV upload.

    The format is chosen from the file extension. For CSV files, rejected
    rows raise a ValidationError listing the first few errors, since a
    report must not silently drop entries.
    """
    if kind not in {"income", "expense"}:
        raise ValueError(f"Unknown entry kind: {kind!r}")

    suffix = Path(path).suffix.lower()
    if suffix == ".json":
        return load_income_json(path) if kind == "income" else load_expense_json(path)
    if suffix == ".csv":
        result = read_income_csv(path) if kind == "income" else read_expense_csv(path)
        if result.errors:
            details = "; ".join(f"line {e.row}: {e.error}" for e in result.errors[:5])
            raise ValidationError(
                f"{result.error_count} invalid row(s) in {path}: {details}"
            )
        return list(result.entries)
    raise ValueError(f"Unsupported file type for {path}: expected .json or .csv")
