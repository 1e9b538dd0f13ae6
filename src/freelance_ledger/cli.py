# FreelanceLedger - Income & expense tracking for freelancers
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Command-Line Interface (CLI) for FreelanceLedger.

This module wires together the main building blocks of FreelanceLedger:

- configuration (report layout, export options, period defaults),
- entry and collaboration loading (JSON dumps of the REST backend, or
  CSV uploads for entries),
- period selection and filtering,
- aggregation engine (totals, profit shares, share validation),
- views (breakdowns) and the report renderer (PDF and CSV artifacts).

The CLI is intentionally thin: it does not implement any financial logic
itself. It orchestrates the underlying modules based on command-line
arguments and the configuration file.


Commands
--------

``report``
    Compute the summary for a period, print it together with category,
    payment-status and monthly breakdowns, and write the PDF and/or CSV
    artifacts into the output directory.

    Inputs:
      --income PATH           income entries (.json or .csv)
      --expenses PATH         expense entries (.json or .csv)
      --collaborations PATH   collaborations (.json), optional
      --overview PATH         server-side overview totals (.json), optional;
                              when given, totals are recomputed locally and
                              any discrepancy is reported.

``check-shares``
    Validate the share percentages of every collaboration in a JSON dump
    and report which ones exceed 100% (rejected) or stay below 100%
    (warning).


Period selection
----------------

- ``--period monthly|quarterly|yearly|custom``
- ``--year``, ``--month`` (1-12), ``--quarter`` (1-4)
- ``--from-date YYYY-MM-DD`` / ``--to-date YYYY-MM-DD`` (custom range)

Custom dates take precedence over ``--period``. When no period argument
is given, the last period selected (remembered in the period store) is
reused; failing that, the current month/quarter/year according to
``period.default_type`` in the configuration.


Output
------

``--format pdf|csv|both`` overrides ``export.format`` and ``--output DIR``
overrides ``export.output_dir``. File names are deterministic:

- Income_Expense_Report_<Month>_<Year>.pdf
- income_report_<YYYY-MM-DD>.csv
"""

import argparse
import logging
from pathlib import Path
from typing import Optional

from . import __version__
from .config import AppConfig, load_app_config
from .engine import build_overview, validate_shares, verify_overview
from .io import load_collaborations_json, load_overview_json, read_entries
from .period_store import MemoryPeriodStore, PeriodStore, SqlitePeriodStore
from .periods import ReportPeriod, determine_period_from_args, filter_entries_by_period
from .report import generate_csv, generate_report
from .views import (
    expenses_by_category,
    format_amount,
    income_by_category,
    monthly_trend,
    payment_status_breakdown,
)


def _add_period_arguments(ap: argparse.ArgumentParser) -> None:
    ap.add_argument(
        "--period",
        choices=["monthly", "quarterly", "yearly", "custom"],
        help=(
            "Report period type. If omitted, the last selected period is reused, "
            "or the current period of the configured default type."
        ),
    )
    ap.add_argument("--year", type=int, help="Year of the period (default: current year).")
    ap.add_argument(
        "--month",
        type=int,
        choices=range(1, 13),
        metavar="1-12",
        help="Month for monthly periods (default: current month).",
    )
    ap.add_argument(
        "--quarter",
        type=int,
        choices=range(1, 5),
        metavar="1-4",
        help="Quarter for quarterly periods (default: current quarter).",
    )
    ap.add_argument(
        "--from-date",
        dest="from_date",
        help="Custom period start date (YYYY-MM-DD). Requires --to-date.",
    )
    ap.add_argument(
        "--to-date",
        dest="to_date",
        help="Custom period end date (YYYY-MM-DD). Requires --from-date.",
    )


def _build_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser for the CLI."""
    ap = argparse.ArgumentParser(
        prog="freelance-ledger",
        description=(
            "FreelanceLedger - income & expense tracking for freelancers. "
            "Aggregates income and expense entries, allocates net profit to "
            "collaboration members and exports PDF/CSV reports."
        ),
    )

    ap.add_argument(
        "--version",
        action="store_true",
        help="Show the installed version of freelance_ledger and exit.",
    )
    ap.add_argument(
        "--config",
        dest="config_path",
        help=(
            "Path to the TOML configuration file. If omitted, "
            "'freelance_ledger_config.toml' in the current directory is used "
            "when present, built-in defaults otherwise."
        ),
    )
    ap.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging.",
    )

    sub = ap.add_subparsers(dest="command")

    # ---- report -------------------------------------------------------------
    report = sub.add_parser("report", help="Compute a period summary and export reports.")
    report.add_argument(
        "--income",
        dest="income_path",
        required=True,
        help="Income entries file (.json backend dump or .csv upload).",
    )
    report.add_argument(
        "--expenses",
        dest="expenses_path",
        required=True,
        help="Expense entries file (.json backend dump or .csv upload).",
    )
    report.add_argument(
        "--collaborations",
        dest="collaborations_path",
        help="Collaborations file (.json backend dump).",
    )
    report.add_argument(
        "--overview",
        dest="overview_path",
        help="Server-side overview totals (.json) to verify against raw entries.",
    )
    _add_period_arguments(report)
    report.add_argument(
        "--format",
        dest="export_format",
        choices=["pdf", "csv", "both"],
        help="Override export.format from the configuration.",
    )
    report.add_argument(
        "--output",
        dest="output_dir",
        help="Output directory (overrides export.output_dir).",
    )
    report.add_argument(
        "--no-breakdowns",
        dest="breakdowns",
        action="store_false",
        help="Do not print category, status and monthly breakdowns.",
    )

    # ---- check-shares ---------------------------------------------------------
    check = sub.add_parser(
        "check-shares", help="Validate collaboration share percentages."
    )
    check.add_argument(
        "--collaborations",
        dest="collaborations_path",
        required=True,
        help="Collaborations file (.json backend dump).",
    )

    return ap


def _has_period_arguments(args: argparse.Namespace) -> bool:
    return any(
        getattr(args, name, None)
        for name in ("period", "year", "month", "quarter", "from_date", "to_date")
    )


def _build_period_store(config: AppConfig) -> PeriodStore:
    if config.period_store.enabled:
        return SqlitePeriodStore(config.period_store.path)
    return MemoryPeriodStore()


def _resolve_period(
    args: argparse.Namespace, config: AppConfig, store: PeriodStore
) -> ReportPeriod:
    """Explicit arguments first, then the remembered period, then defaults."""
    if not _has_period_arguments(args):
        remembered = store.load()
        if remembered is not None:
            return remembered
    try:
        return determine_period_from_args(args, config.default_period_type)
    except ValueError as exc:
        raise SystemExit(f"Invalid period: {exc}") from exc


def _print_table(title: str, df) -> None:
    print()
    print(f"=== {title} ===")
    if df.empty:
        print("(no data)")
    else:
        print(df.to_string(index=False))


def _handle_report(args: argparse.Namespace, config: AppConfig) -> None:
    store = _build_period_store(config)
    period = _resolve_period(args, config, store)

    try:
        income_all = read_entries(args.income_path, "income")
        expenses_all = read_entries(args.expenses_path, "expense")
        collaborations = (
            load_collaborations_json(args.collaborations_path)
            if args.collaborations_path
            else []
        )
    except FileNotFoundError as exc:
        raise SystemExit(f"Input file not found: {exc.filename}") from exc
    except ValueError as exc:
        raise SystemExit(str(exc)) from exc

    income = filter_entries_by_period(income_all, period)
    expenses = filter_entries_by_period(expenses_all, period)

    print(
        f"Applied period: {period.label} "
        f"({period.start.isoformat()} → {period.end.isoformat()})"
    )
    print(f"Income entries for period: {len(income)} (of {len(income_all)})")
    print(f"Expense entries for period: {len(expenses)} (of {len(expenses_all)})")
    if not income and not expenses:
        print("Warning: no entries were found for the selected period.")

    currencies = {e.currency for e in income} | {e.currency for e in expenses}
    if len(currencies) > 1:
        print(
            "Warning: entries use several currencies "
            f"({', '.join(sorted(currencies))}); amounts are summed at face value."
        )

    # Summary
    overview = build_overview(income, expenses, collaborations)
    symbol = config.report.currency_symbol
    print()
    print("=== Financial Summary ===")
    print(f"Total Income:   {symbol}{format_amount(overview.total_income)}")
    print(f"Total Expenses: {symbol}{format_amount(overview.total_expenses)}")
    print(f"Net Profit:     {symbol}{format_amount(overview.net_profit)}")
    print(f"Profit Margin:  {overview.profit_margin:.1f}%")

    # Share validation
    for collab in collaborations:
        check = validate_shares(collab.members)
        if not check.ok:
            print(f"Warning: collaboration '{collab.name}': {check.message}.")
        elif check.warning:
            print(f"Note: collaboration '{collab.name}': {check.warning}.")

    # Server-side totals
    if args.overview_path:
        try:
            server_totals = load_overview_json(args.overview_path)
            result = verify_overview(server_totals, income, expenses)
        except (FileNotFoundError, ValueError) as exc:
            raise SystemExit(f"Cannot verify overview: {exc}") from exc
        if result.matches:
            print("Server overview totals match the recomputed totals.")
        else:
            for name, (server_value, local_value) in result.discrepancies.items():
                print(
                    f"Warning: server {name} = {format_amount(server_value)} "
                    f"but entries sum to {format_amount(local_value)}."
                )

    if args.breakdowns:
        _print_table("Income by category", income_by_category(income))
        _print_table("Expenses by category", expenses_by_category(expenses))
        _print_table("Payment status", payment_status_breakdown(income))
        _print_table("Monthly trend", monthly_trend(period, income, expenses))

    # Artifacts
    export_format = args.export_format or config.export_format
    output_dir = Path(args.output_dir) if args.output_dir else config.output_dir
    output_dir.mkdir(parents=True, exist_ok=True)

    artifacts = []
    if export_format in {"pdf", "both"}:
        artifacts.append(
            generate_report(period, income, expenses, collaborations, settings=config.report)
        )
    if export_format in {"csv", "both"}:
        artifacts.append(generate_csv(income, expenses))

    print()
    for artifact in artifacts:
        path = output_dir / artifact.filename
        path.write_bytes(artifact.content)
        print(f"Wrote {path} ({len(artifact.content)} bytes)")

    store.save(period)


def _handle_check_shares(args: argparse.Namespace) -> None:
    try:
        collaborations = load_collaborations_json(args.collaborations_path)
    except FileNotFoundError as exc:
        raise SystemExit(f"Input file not found: {exc.filename}") from exc
    except ValueError as exc:
        raise SystemExit(str(exc)) from exc

    if not collaborations:
        print("No collaborations found.")
        return

    rejected = 0
    for collab in collaborations:
        check = validate_shares(collab.members)
        if not check.ok:
            status = f"REJECTED - {check.message}"
            rejected += 1
        elif check.warning:
            status = f"WARNING - {check.warning}"
        else:
            status = "OK"
        print(f"{collab.name}: {len(collab.members)} member(s), {check.total:g}% -> {status}")

    print()
    print(f"Total collaborations: {len(collaborations)} | Rejected: {rejected}")


def main(argv: Optional[list[str]] = None) -> None:
    """Entry point for the FreelanceLedger CLI."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    # --version: short-circuit and exit early.
    if args.version:
        print(f"freelance_ledger version {__version__}")
        return

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.command is None:
        parser.error("No command specified. Available commands: 'report', 'check-shares'.")

    try:
        config = load_app_config(args.config_path)
    except (FileNotFoundError, ValueError) as exc:
        parser.error(str(exc))

    if args.command == "report":
        _handle_report(args, config)
    elif args.command == "check-shares":
        _handle_check_shares(args)


if __name__ == "__main__":
    main()
