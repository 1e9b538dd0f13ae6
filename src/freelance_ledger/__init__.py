# FreelanceLedger - Income & expense tracking for freelancers
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
FreelanceLedger
---------------

Computation core of a freelancer income/expense dashboard. Income and
expense entries and collaboration memberships are supplied by a REST
backend (as JSON); FreelanceLedger aggregates them and renders downloadable
report artifacts.

Main capabilities:
- total income, total expenses and net profit for a reporting period,
- profit-sharing allocation across the members of a collaboration,
- share-percentage validation (soft under 100%, hard over 100%),
- verification of server-side overview totals against raw entries,
- category, payment-status and monthly breakdowns,
- a paginated PDF report and a flattened CSV export,
- CSV/JSON import of entries with per-row error reporting.

FreelanceLedger separates computation (engine), presentation (report,
views), configuration (TOML) and the command-line front end, so that the
same pure functions can be driven from a CLI or an enclosing UI.


Version: 0.1.0

Usage:
    python -m freelance_ledger.cli --help
"""

__all__ = ["engine", "models", "periods", "report", "views", "io"]

__version__ = "0.1.0"
