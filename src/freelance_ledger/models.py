# FreelanceLedger - Income & expense tracking for freelancers
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Data model for FreelanceLedger.

This module defines the typed value objects exchanged between the REST
backend, the aggregation engine and the report renderer:

- IncomeEntry / ExpenseEntry : individual ledger lines,
- UserRef / Member           : collaboration participants and their shares,
- Collaboration              : a named group sharing profit from pooled
                               income and expenses,
- Totals / AggregationResult : derived numbers (never persisted).

Each persisted shape provides a ``from_dict`` constructor accepting the
backend's JSON payloads (camelCase keys, ``_id`` identifiers, ISO date or
datetime strings). Invalid payloads raise ``ValidationError`` with a
human-readable message; callers decide whether to surface it, skip the row
or abort.

Currency is stored on entries but never converted: amounts of mixed
currencies are summed at face value by the engine.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Literal, Optional

PaymentStatus = Literal["paid", "pending", "overdue"]
MemberRole = Literal["admin", "member", "viewer"]
MemberStatus = Literal["active", "pending", "inactive"]

PAYMENT_STATUSES: tuple[str, ...] = ("paid", "pending", "overdue")
MEMBER_ROLES: tuple[str, ...] = ("admin", "member", "viewer")
MEMBER_STATUSES: tuple[str, ...] = ("active", "pending", "inactive")
VISIBILITIES: tuple[str, ...] = ("public", "private", "invite-only")

DEFAULT_CURRENCY = "USD"


class ValidationError(ValueError):
    """Raised when user or backend data cannot be accepted as-is."""


# ---------------------------------------------------------------------------
# Field parsing helpers
# ---------------------------------------------------------------------------


def parse_date(value: Any, field_name: str = "date") -> date:
    """
    Parse a date coming from the backend or a user form.

    Accepts ``date``/``datetime`` objects and ISO strings, including full
    ISO datetimes such as ``2025-04-08T00:00:00.000Z`` (only the date part is
    kept).
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if value is None or str(value).strip() == "":
        raise ValidationError(f"Missing value for '{field_name}'.")

    raw = str(value).strip()
    try:
        return date.fromisoformat(raw[:10])
    except ValueError as exc:
        raise ValidationError(
            f"Invalid value for '{field_name}': {raw!r} (expected YYYY-MM-DD)."
        ) from exc


def parse_amount(value: Any, field_name: str = "amount") -> float:
    """Parse a non-negative monetary amount."""
    if isinstance(value, bool) or value is None:
        raise ValidationError(f"Invalid numeric value for '{field_name}': {value!r}.")
    try:
        amount = float(str(value).strip()) if isinstance(value, str) else float(value)
    except (TypeError, ValueError) as exc:
        raise ValidationError(
            f"Invalid numeric value for '{field_name}': {value!r}."
        ) from exc

    if amount != amount or amount in (float("inf"), float("-inf")):
        raise ValidationError(f"Invalid numeric value for '{field_name}': {value!r}.")
    if amount < 0:
        raise ValidationError(f"'{field_name}' cannot be negative (got {amount}).")
    return amount


def parse_share_percentage(value: Any) -> float:
    """Parse a share percentage, which must lie within [0, 100]."""
    share = parse_amount(0 if value is None else value, "sharePercentage")
    if share > 100:
        raise ValidationError(
            f"'sharePercentage' must be between 0 and 100 (got {share})."
        )
    return share


_TRUE_VALUES = {"true", "yes", "y", "1"}
_FALSE_VALUES = {"false", "no", "n", "0"}


def parse_bool(value: Any, field_name: str) -> Optional[bool]:
    """Parse a yes/no flag given as a JSON boolean or a string such as "false"."""
    if value is None:
        return None
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if not text:
        return None
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    raise ValidationError(f"Invalid value for '{field_name}': {value!r} (expected yes/no).")


def _flag(data: Mapping[str, Any], key: str, default: bool) -> bool:
    parsed = parse_bool(data.get(key), key)
    return default if parsed is None else parsed


def _require_mapping(data: Any, kind: str) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise ValidationError(f"Invalid {kind}: expected an object, got {data!r}.")
    return data


def _optional_float(value: Any, field_name: str) -> Optional[float]:
    if value is None or value == "":
        return None
    return parse_amount(value, field_name)


def _optional_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _choice(value: Any, allowed: tuple[str, ...], field_name: str, default: str) -> str:
    if value is None or str(value).strip() == "":
        return default
    text = str(value).strip().lower()
    if text not in allowed:
        raise ValidationError(
            f"Invalid value for '{field_name}': {value!r}. "
            f"Expected one of: {', '.join(allowed)}."
        )
    return text


def _entry_id(data: Mapping[str, Any]) -> str:
    raw = data.get("_id", data.get("id"))
    return "" if raw is None else str(raw)


# ---------------------------------------------------------------------------
# Entries
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class IncomeEntry:
    """A single income line (one job / invoice)."""

    id: str
    date: date
    job_title: str
    client_name: str
    amount: float
    category: str = "Other"
    payment_status: PaymentStatus = "paid"
    currency: str = DEFAULT_CURRENCY
    work_date: Optional[date] = None
    description: Optional[str] = None
    hours: Optional[float] = None
    hourly_rate: Optional[float] = None
    tax_amount: Optional[float] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "IncomeEntry":
        """Build an IncomeEntry from a backend JSON object."""
        _require_mapping(data, "income entry")
        work_date_raw = data.get("workDate")
        return cls(
            id=_entry_id(data),
            date=parse_date(data.get("date") or work_date_raw, "date"),
            job_title=str(data.get("jobTitle") or "").strip(),
            client_name=str(data.get("clientName") or "").strip(),
            amount=parse_amount(data.get("amount")),
            category=str(data.get("category") or "Other").strip(),
            payment_status=_choice(  # type: ignore[arg-type]
                data.get("paymentStatus"), PAYMENT_STATUSES, "paymentStatus", "paid"
            ),
            currency=str(data.get("currency") or DEFAULT_CURRENCY).strip().upper(),
            work_date=parse_date(work_date_raw, "workDate") if work_date_raw else None,
            description=_optional_str(data.get("description")),
            hours=_optional_float(data.get("hours"), "hours"),
            hourly_rate=_optional_float(data.get("hourlyRate"), "hourlyRate"),
            tax_amount=_optional_float(data.get("taxAmount"), "taxAmount"),
        )


@dataclass(frozen=True)
class ExpenseEntry:
    """A single expense line."""

    id: str
    date: date
    title: str
    amount: float
    category: str = "Other"
    vendor: Optional[str] = None
    is_tax_deductible: Optional[bool] = None
    currency: str = DEFAULT_CURRENCY
    work_date: Optional[date] = None
    description: Optional[str] = None
    payment_method: Optional[str] = None
    status: Optional[PaymentStatus] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ExpenseEntry":
        """Build an ExpenseEntry from a backend JSON object."""
        _require_mapping(data, "expense entry")
        work_date_raw = data.get("workDate")
        raw_status = data.get("status")
        return cls(
            id=_entry_id(data),
            date=parse_date(data.get("date") or work_date_raw, "date"),
            title=str(data.get("title") or "").strip(),
            amount=parse_amount(data.get("amount")),
            category=str(data.get("category") or "Other").strip(),
            vendor=_optional_str(data.get("vendor")),
            is_tax_deductible=parse_bool(data.get("isTaxDeductible"), "isTaxDeductible"),
            currency=str(data.get("currency") or DEFAULT_CURRENCY).strip().upper(),
            work_date=parse_date(work_date_raw, "workDate") if work_date_raw else None,
            description=_optional_str(data.get("description")),
            payment_method=_optional_str(data.get("paymentMethod")),
            status=(
                _choice(raw_status, PAYMENT_STATUSES, "status", "paid")  # type: ignore[arg-type]
                if raw_status
                else None
            ),
        )


# ---------------------------------------------------------------------------
# Collaborations
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class UserRef:
    """Reference to a backend user, as embedded in collaboration payloads."""

    id: str
    first_name: str = ""
    last_name: str = ""
    email: str = ""

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @classmethod
    def from_dict(cls, data: Any) -> "UserRef":
        """Accept either an embedded user object or a bare user id."""
        if not isinstance(data, Mapping):
            return cls(id="" if data is None else str(data))
        return cls(
            id=_entry_id(data),
            first_name=str(data.get("firstName") or "").strip(),
            last_name=str(data.get("lastName") or "").strip(),
            email=str(data.get("email") or "").strip(),
        )


@dataclass(frozen=True)
class Member:
    """A collaboration member and their share of net profit."""

    user: UserRef
    role: MemberRole = "member"
    share_percentage: float = 0.0
    status: MemberStatus = "active"

    @property
    def member_id(self) -> str:
        return self.user.id

    @property
    def name(self) -> str:
        return self.user.display_name

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Member":
        _require_mapping(data, "member")
        return cls(
            user=UserRef.from_dict(data.get("user")),
            role=_choice(data.get("role"), MEMBER_ROLES, "role", "member"),  # type: ignore[arg-type]
            share_percentage=parse_share_percentage(data.get("sharePercentage")),
            status=_choice(  # type: ignore[arg-type]
                data.get("status"), MEMBER_STATUSES, "status", "active"
            ),
        )


@dataclass(frozen=True)
class CollaborationSettings:
    """Collaboration settings; stored as-is, never enforced by the core."""

    allow_income_sharing: bool = True
    allow_expense_sharing: bool = True
    allow_member_invites: bool = False
    require_approval: bool = True
    visibility: str = "private"

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "CollaborationSettings":
        if not data:
            return cls()
        _require_mapping(data, "settings")
        defaults = cls()
        return cls(
            allow_income_sharing=_flag(
                data, "allowIncomeSharing", defaults.allow_income_sharing
            ),
            allow_expense_sharing=_flag(
                data, "allowExpenseSharing", defaults.allow_expense_sharing
            ),
            allow_member_invites=_flag(
                data, "allowMemberInvites", defaults.allow_member_invites
            ),
            require_approval=_flag(data, "requireApproval", defaults.require_approval),
            visibility=_choice(
                data.get("visibility"), VISIBILITIES, "visibility", defaults.visibility
            ),
        )


@dataclass(frozen=True)
class Collaboration:
    """A named group of members sharing profit from pooled income/expenses."""

    id: str
    name: str
    description: Optional[str] = None
    owner: Optional[UserRef] = None
    members: tuple[Member, ...] = ()
    settings: CollaborationSettings = field(default_factory=CollaborationSettings)
    status: str = "active"
    tags: tuple[str, ...] = ()

    @property
    def total_share_percentage(self) -> float:
        return sum(m.share_percentage for m in self.members)

    @property
    def named_members(self) -> tuple[Member, ...]:
        """Members whose display name is non-blank (the ones a report lists)."""
        return tuple(m for m in self.members if m.name)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Collaboration":
        _require_mapping(data, "collaboration")
        members_raw = data.get("members") or []
        if not isinstance(members_raw, list):
            raise ValidationError("Invalid value for 'members': expected a list.")
        owner_raw = data.get("owner")
        return cls(
            id=_entry_id(data),
            name=str(data.get("name") or "").strip(),
            description=_optional_str(data.get("description")),
            owner=UserRef.from_dict(owner_raw) if owner_raw is not None else None,
            members=tuple(Member.from_dict(m) for m in members_raw),
            settings=CollaborationSettings.from_dict(data.get("settings")),
            status=str(data.get("status") or "active"),
            tags=tuple(str(t) for t in data.get("tags") or []),
        )


# ---------------------------------------------------------------------------
# Derived results
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Totals:
    """Period totals. ``net_profit`` is always income minus expenses."""

    total_income: float
    total_expenses: float
    net_profit: float


@dataclass(frozen=True)
class AggregationResult:
    """
    Result of one aggregation run.

    ``per_member`` maps member ids to their profit share. It is empty when
    the net profit is zero or negative: shares are not computed in that case.
    """

    total_income: float
    total_expenses: float
    net_profit: float
    per_member: dict[str, float] = field(default_factory=dict)

    @property
    def totals(self) -> Totals:
        return Totals(self.total_income, self.total_expenses, self.net_profit)
