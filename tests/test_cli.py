import json
from pathlib import Path

import pytest

from freelance_ledger import __version__
from freelance_ledger.cli import main


def _setup(tmp_path: Path) -> dict[str, str]:
    """Write a config, income, expenses and collaborations into tmp_path."""
    config = tmp_path / "freelance_ledger_config.toml"
    config.write_text(
        '[export]\noutput_dir = "out"\nformat = "both"\n\n'
        '[period_store]\npath = "state/store.sqlite"\n',
        encoding="utf-8",
    )

    income = tmp_path / "income.json"
    income.write_text(
        json.dumps(
            {
                "success": True,
                "data": [
                    {
                        "_id": "i1",
                        "date": "2026-10-05",
                        "jobTitle": "Website",
                        "clientName": "ACME",
                        "amount": 100,
                    },
                    {
                        "_id": "i2",
                        "date": "2026-09-30",
                        "jobTitle": "Old job",
                        "clientName": "ACME",
                        "amount": 999,
                    },
                ],
            }
        ),
        encoding="utf-8",
    )

    expenses = tmp_path / "expenses.csv"
    expenses.write_text(
        "date,title,amount,category\n2026-10-06,Hosting,40,Software\n",
        encoding="utf-8",
    )

    collabs = tmp_path / "collabs.json"
    collabs.write_text(
        json.dumps(
            [
                {
                    "_id": "c1",
                    "name": "Studio",
                    "members": [
                        {"user": {"_id": "u1", "firstName": "Ada"}, "sharePercentage": 60},
                        {"user": {"_id": "u2", "firstName": "Bob"}, "sharePercentage": 40},
                    ],
                },
                {
                    "_id": "c2",
                    "name": "Overbooked",
                    "members": [
                        {"user": "u1", "sharePercentage": 80},
                        {"user": "u2", "sharePercentage": 30},
                    ],
                },
            ]
        ),
        encoding="utf-8",
    )

    return {
        "config": str(config),
        "income": str(income),
        "expenses": str(expenses),
        "collabs": str(collabs),
    }


def _report_args(paths: dict[str, str], *extra: str) -> list[str]:
    return [
        "--config",
        paths["config"],
        "report",
        "--income",
        paths["income"],
        "--expenses",
        paths["expenses"],
        "--collaborations",
        paths["collabs"],
        *extra,
    ]


def test_report_writes_pdf_and_csv(tmp_path, capsys) -> None:
    """A monthly report filters entries and writes both artifacts."""
    paths = _setup(tmp_path)

    main(_report_args(paths, "--period", "monthly", "--year", "2026", "--month", "10"))

    out = capsys.readouterr().out
    assert "Applied period: October 2026" in out
    assert "Income entries for period: 1 (of 2)" in out
    assert "=== Financial Summary ===" in out
    assert "Net Profit:     $60.00" in out
    assert "Warning: collaboration 'Overbooked'" in out

    pdf = tmp_path / "out" / "Income_Expense_Report_October_2026.pdf"
    assert pdf.read_bytes().startswith(b"%PDF")
    csv_files = list((tmp_path / "out").glob("income_report_*.csv"))
    assert len(csv_files) == 1
    assert csv_files[0].read_text(encoding="utf-8").count("\n") == 3


def test_report_reuses_remembered_period(tmp_path, capsys) -> None:
    """Without period arguments the last selected period is used."""
    paths = _setup(tmp_path)
    main(_report_args(paths, "--period", "quarterly", "--year", "2026", "--quarter", "3"))
    capsys.readouterr()

    main(_report_args(paths, "--format", "csv", "--no-breakdowns"))

    out = capsys.readouterr().out
    assert "Applied period: Q3 2026" in out
    assert "Income entries for period: 1 (of 2)" in out
    assert "=== Income by category ===" not in out


def test_report_with_invalid_custom_period_exits(tmp_path) -> None:
    paths = _setup(tmp_path)

    with pytest.raises(SystemExit):
        main(_report_args(paths, "--from-date", "2026-10-01"))


def test_report_with_missing_input_exits(tmp_path) -> None:
    paths = _setup(tmp_path)
    paths["income"] = str(tmp_path / "missing.json")

    with pytest.raises(SystemExit, match="Input file not found"):
        main(_report_args(paths, "--period", "yearly", "--year", "2026"))


def test_report_verifies_server_overview(tmp_path, capsys) -> None:
    paths = _setup(tmp_path)
    overview = tmp_path / "overview.json"
    overview.write_text(
        json.dumps({"data": {"overview": {"totalIncome": 150, "netProfit": 60}}}),
        encoding="utf-8",
    )

    main(
        _report_args(
            paths,
            "--period",
            "monthly",
            "--year",
            "2026",
            "--month",
            "10",
            "--overview",
            str(overview),
            "--format",
            "csv",
        )
    )

    out = capsys.readouterr().out
    assert "Warning: server total_income = 150.00 but entries sum to 100.00." in out


def test_check_shares(tmp_path, capsys) -> None:
    paths = _setup(tmp_path)

    main(["--config", paths["config"], "check-shares", "--collaborations", paths["collabs"]])

    out = capsys.readouterr().out
    assert "Studio: 2 member(s), 100% -> OK" in out
    assert "Overbooked: 2 member(s), 110% -> REJECTED" in out
    assert "Total collaborations: 2 | Rejected: 1" in out


def test_no_command_is_an_error(capsys) -> None:
    with pytest.raises(SystemExit):
        main([])


def test_version(capsys) -> None:
    main(["--version"])

    assert __version__ in capsys.readouterr().out
