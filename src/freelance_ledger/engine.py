# FreelanceLedger - Income & expense tracking for freelancers
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Core aggregation engine for FreelanceLedger.

This module provides the pure computations behind the dashboard and the
reports. Every function works on its arguments only: nothing is cached and
no state is retained between calls.

1. Totals
   ------
   ``compute_totals()`` sums the ``amount`` of income and expense entries
   and derives the net profit (income - expenses). Currencies are not
   converted: entries of mixed currency are summed at face value.

2. Profit sharing
   --------------
   ``compute_member_shares()`` allocates the net profit of a period to the
   members of a collaboration according to their share percentage.
   Shares are only computed for a strictly positive net profit; for a zero
   or negative result the mapping is empty and the report prints a notice
   instead of distributing losses.

3. Share validation
   ----------------
   ``validate_shares()`` and ``add_member()`` implement the soft/hard rule
   for share percentages: a total above 100% is rejected, a total below
   100% is accepted with a warning. Validation never raises; it returns a
   ``ShareValidation`` the caller can display.

4. Overview
   --------
   ``build_overview()`` rebuilds the dashboard overview from raw entries,
   and ``verify_overview()`` compares it with totals pre-computed by the
   backend, so client-side numbers do not have to trust the server's.
"""

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, replace
from typing import Any, Optional

from .models import (
    AggregationResult,
    Collaboration,
    ExpenseEntry,
    IncomeEntry,
    Member,
    Totals,
)

MAX_TOTAL_SHARE = 100.0
SHARE_EPSILON = 1e-9

SHARE_OVER_LIMIT_MESSAGE = "Total share percentage cannot exceed 100%"


# ---------------------------------------------------------------------------
# Totals and shares
# ---------------------------------------------------------------------------


def compute_totals(
    income_entries: Iterable[IncomeEntry],
    expense_entries: Iterable[ExpenseEntry],
) -> Totals:
    """Sum income and expense amounts and derive the net profit.

    Args:
        income_entries: Income entries of the period.
        expense_entries: Expense entries of the period.

    Returns:
        A Totals instance where ``net_profit == total_income - total_expenses``.
    """
    total_income = 0.0
    for e in income_entries:
        total_income += float(e.amount)

    total_expenses = 0.0
    for e in expense_entries:
        total_expenses += float(e.amount)

    return Totals(
        total_income=total_income,
        total_expenses=total_expenses,
        net_profit=total_income - total_expenses,
    )


def member_share(net_profit: float, member: Member) -> float:
    """Profit share of one member row; 0.0 when there is no profit to share."""
    if net_profit <= 0:
        return 0.0
    return net_profit * float(member.share_percentage) / 100.0


def compute_member_shares(
    net_profit: float,
    members: Iterable[Member],
) -> dict[str, float]:
    """Allocate a positive net profit to members by share percentage.

    Each member receives ``net_profit * share_percentage / 100``. When
    ``net_profit <= 0`` no share is computed and an empty dict is returned.
    Members sharing the same id are accumulated.
    """
    shares: dict[str, float] = {}
    if net_profit <= 0:
        return shares

    for m in members:
        shares[m.member_id] = shares.get(m.member_id, 0.0) + member_share(net_profit, m)
    return shares


def aggregate(
    income_entries: Sequence[IncomeEntry],
    expense_entries: Sequence[ExpenseEntry],
    collaboration: Optional[Collaboration] = None,
) -> AggregationResult:
    """Compute totals and, if a collaboration is given, the member shares."""
    totals = compute_totals(income_entries, expense_entries)
    per_member = (
        compute_member_shares(totals.net_profit, collaboration.members)
        if collaboration is not None
        else {}
    )
    return AggregationResult(
        total_income=totals.total_income,
        total_expenses=totals.total_expenses,
        net_profit=totals.net_profit,
        per_member=per_member,
    )


# ---------------------------------------------------------------------------
# Share validation
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ShareValidation:
    """
    Outcome of a share-percentage check.

    Attributes
    ----------
    ok :
        False when the configuration must be rejected.
    total :
        Total share percentage including any incoming share.
    message :
        Human-readable rejection reason (None when ok).
    warning :
        Human-readable warning for totals under 100% (None otherwise).
    """

    ok: bool
    total: float
    message: Optional[str] = None
    warning: Optional[str] = None


def validate_shares(
    members: Iterable[Member],
    incoming_share_percentage: Optional[float] = None,
) -> ShareValidation:
    """Check that member shares (plus an optional new share) stay within 100%.

    Rules:
      - any single share outside [0, 100] is rejected,
      - a total above 100% is rejected,
      - a total below 100% is accepted with a warning,
      - exactly 100% (within a tiny float tolerance) is accepted silently.
    """
    shares = [float(m.share_percentage) for m in members]
    if incoming_share_percentage is not None:
        shares.append(float(incoming_share_percentage))

    for share in shares:
        if share < 0 or share > MAX_TOTAL_SHARE:
            return ShareValidation(
                ok=False,
                total=sum(shares),
                message="Share percentage must be between 0 and 100",
            )

    total = sum(shares)
    if total > MAX_TOTAL_SHARE + SHARE_EPSILON:
        return ShareValidation(ok=False, total=total, message=SHARE_OVER_LIMIT_MESSAGE)

    warning = None
    if total < MAX_TOTAL_SHARE - SHARE_EPSILON:
        warning = f"Total share is {total:g}% (should equal 100%)"
    return ShareValidation(ok=True, total=total, warning=warning)


@dataclass(frozen=True)
class MemberChange:
    """Result of ``add_member``: the (possibly unchanged) collaboration."""

    collaboration: Collaboration
    validation: ShareValidation

    @property
    def accepted(self) -> bool:
        return self.validation.ok


def add_member(collaboration: Collaboration, member: Member) -> MemberChange:
    """Append a member when the resulting shares are acceptable.

    The input collaboration is never modified. On rejection the returned
    collaboration is the original one.
    """
    existing_ids = {m.member_id for m in collaboration.members}
    if member.member_id and member.member_id in existing_ids:
        return MemberChange(
            collaboration=collaboration,
            validation=ShareValidation(
                ok=False,
                total=collaboration.total_share_percentage,
                message="User is already a member of this collaboration",
            ),
        )

    validation = validate_shares(collaboration.members, member.share_percentage)
    if not validation.ok:
        return MemberChange(collaboration=collaboration, validation=validation)

    updated = replace(collaboration, members=collaboration.members + (member,))
    return MemberChange(collaboration=updated, validation=validation)


# ---------------------------------------------------------------------------
# Overview
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Overview:
    """Dashboard overview recomputed from raw entries."""

    total_income: float
    total_expenses: float
    net_profit: float
    profit_margin: float
    income_count: int
    expense_count: int
    collaborator_count: int


def build_overview(
    income_entries: Sequence[IncomeEntry],
    expense_entries: Sequence[ExpenseEntry],
    collaborations: Sequence[Collaboration] = (),
) -> Overview:
    """Rebuild the dashboard overview.

    ``profit_margin`` is net profit as a percentage of income (0.0 when
    there is no income). ``collaborator_count`` counts distinct member ids
    across all collaborations.
    """
    totals = compute_totals(income_entries, expense_entries)
    margin = (
        totals.net_profit / totals.total_income * 100.0
        if totals.total_income > 0
        else 0.0
    )
    collaborators = {
        m.member_id for c in collaborations for m in c.members if m.member_id
    }
    return Overview(
        total_income=totals.total_income,
        total_expenses=totals.total_expenses,
        net_profit=totals.net_profit,
        profit_margin=margin,
        income_count=len(income_entries),
        expense_count=len(expense_entries),
        collaborator_count=len(collaborators),
    )


@dataclass(frozen=True)
class OverviewCheck:
    """Comparison between server-side totals and locally recomputed totals."""

    recomputed: Totals
    discrepancies: dict[str, tuple[float, float]]

    @property
    def matches(self) -> bool:
        return not self.discrepancies


_OVERVIEW_FIELDS = {
    "total_income": "totalIncome",
    "total_expenses": "totalExpenses",
    "net_profit": "netProfit",
}


def verify_overview(
    server_totals: Mapping[str, Any],
    income_entries: Sequence[IncomeEntry],
    expense_entries: Sequence[ExpenseEntry],
    tolerance: float = 0.005,
) -> OverviewCheck:
    """Recompute totals from raw entries and compare with the server's.

    ``server_totals`` may use the backend's camelCase keys (``totalIncome``)
    or snake_case keys. Fields absent from ``server_totals`` are skipped.
    Discrepancies map a field name to ``(server_value, recomputed_value)``.

    Raises:
        ValueError: if a server value present in the payload is not numeric.
    """
    recomputed = compute_totals(income_entries, expense_entries)
    discrepancies: dict[str, tuple[float, float]] = {}

    for attr, camel in _OVERVIEW_FIELDS.items():
        raw = server_totals.get(camel, server_totals.get(attr))
        if raw is None:
            continue
        try:
            server_value = float(raw)
        except (TypeError, ValueError) as exc:
            raise ValueError(
                f"Invalid numeric value for '{camel}' in server overview: {raw!r}"
            ) from exc

        local_value = float(getattr(recomputed, attr))
        if abs(server_value - local_value) > tolerance:
            discrepancies[attr] = (server_value, local_value)

    return OverviewCheck(recomputed=recomputed, discrepancies=discrepancies)
