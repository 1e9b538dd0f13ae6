# FreelanceLedger - Income & expense tracking for freelancers
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Configuration helpers for FreelanceLedger.

This module is responsible for:
- loading the application configuration from a TOML file,
- exposing typed dataclasses used by the rest of the application.

The library functions (engine, report renderer) never read the
configuration themselves: they receive a ``ReportSettings`` instance (or
use its defaults). Only the CLI loads the TOML file.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

try:
    import tomllib  # Python 3.11+
except ModuleNotFoundError:  # pragma: no cover - fallback for older Python
    import tomli as tomllib  # type: ignore[import]

DEFAULT_CONFIG_FILENAME = "freelance_ledger_config.toml"

PAGE_SIZES = ("A4", "LETTER")
PERIOD_TYPES = ("monthly", "quarterly", "yearly", "custom")
EXPORT_FORMATS = ("pdf", "csv", "both")


@dataclass(frozen=True)
class ReportSettings:
    """
    Layout settings for the PDF report.

    Lengths are expressed in millimetres, font sizes in points.
    """

    title: str = "Income & Expense Report"
    page_size: str = "A4"
    margin_mm: float = 20.0
    currency_symbol: str = "$"
    title_font_size: float = 24.0
    section_font_size: float = 18.0
    body_font_size: float = 10.0


@dataclass(frozen=True)
class PeriodStoreConfig:
    """Where the last selected report period is remembered."""

    enabled: bool
    path: Path


@dataclass(frozen=True)
class AppConfig:
    """
    Application-wide configuration for FreelanceLedger.

    This aggregates:
    - the report layout settings,
    - export options (output directory and default format),
    - the default period type,
    - the period store location.
    """

    report: ReportSettings
    output_dir: Path
    export_format: str
    default_period_type: str
    period_store: PeriodStoreConfig
    source: Optional[Path] = field(default=None, compare=False)


def _load_toml(path: Path) -> dict[str, Any]:
    """
    Load a TOML file and return its content as a dictionary.

    Raises:
        FileNotFoundError: if the file does not exist.
        ValueError: if the TOML content cannot be parsed or is not a table.
    """
    if not path.is_file():
        raise FileNotFoundError(f"Config file not found: {path}")

    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except Exception as exc:  # noqa: BLE001
        raise ValueError(f"Failed to parse TOML config file: {path}") from exc

    if not isinstance(data, dict):
        raise ValueError(f"Invalid TOML root type in {path}, expected a table.")

    return data


def _section(raw: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    section = raw.get(name) or {}
    if not isinstance(section, Mapping):
        return {}
    return section


def _parse_report_settings(section: Mapping[str, Any]) -> ReportSettings:
    """
    Extract and validate report layout settings.

    Raises:
        ValueError: if page_size is unknown or a numeric value is invalid.
    """
    defaults = ReportSettings()

    page_size = str(section.get("page_size", defaults.page_size)).upper()
    if page_size not in PAGE_SIZES:
        raise ValueError(
            f"Invalid report.page_size {page_size!r}. "
            f"Expected one of: {', '.join(PAGE_SIZES)}."
        )

    numeric: dict[str, float] = {}
    for key in ("margin_mm", "title_font_size", "section_font_size", "body_font_size"):
        raw_value = section.get(key, getattr(defaults, key))
        try:
            numeric[key] = float(raw_value)
        except (TypeError, ValueError) as exc:
            raise ValueError(
                f"Invalid value for 'report.{key}' in the configuration. "
                "Expected a number."
            ) from exc
        if numeric[key] <= 0:
            raise ValueError(f"'report.{key}' must be strictly positive.")

    return ReportSettings(
        title=str(section.get("title", defaults.title)),
        page_size=page_size,
        currency_symbol=str(section.get("currency_symbol", defaults.currency_symbol)),
        **numeric,
    )


def load_app_config(config_path: Optional[str] = None) -> AppConfig:
    """
    Load the FreelanceLedger application configuration from a TOML file.

    Expected top-level sections in the TOML file (all optional)
    -----------------------------------------------------------
    [report]
        title, page_size ("A4" | "LETTER"), margin_mm, currency_symbol,
        title_font_size, section_font_size, body_font_size.

    [export]
        output_dir (default "data/output"),
        format ("pdf" | "csv" | "both", default "both").

    [period]
        default_type ("monthly" | "quarterly" | "yearly", default "monthly").

    [period_store]
        enabled (default true), path (default "data/state/period_store.sqlite").

    All file paths in the TOML are resolved relative to the directory of
    the TOML file itself.

    When ``config_path`` is None and no ``freelance_ledger_config.toml``
    exists in the current directory, defaults are used.

    Returns
    -------
    AppConfig
        Parsed and validated application configuration.
    """
    if config_path is None:
        config_file = Path(DEFAULT_CONFIG_FILENAME).resolve()
        source = config_file if config_file.is_file() else None
        raw = _load_toml(config_file) if source is not None else {}
    else:
        config_file = Path(config_path).resolve()
        raw = _load_toml(config_file)
        source = config_file

    base_dir = config_file.parent

    # 1) Report layout
    report = _parse_report_settings(_section(raw, "report"))

    # 2) Export options
    export_section = _section(raw, "export")
    output_dir = (base_dir / str(export_section.get("output_dir") or "data/output")).resolve()
    export_format = str(export_section.get("format") or "both").lower()
    if export_format not in EXPORT_FORMATS:
        raise ValueError(
            f"Invalid export.format {export_format!r}. "
            f"Expected one of: {', '.join(EXPORT_FORMATS)}."
        )

    # 3) Period defaults
    period_section = _section(raw, "period")
    default_type = str(period_section.get("default_type") or "monthly").lower()
    if default_type not in PERIOD_TYPES or default_type == "custom":
        raise ValueError(
            f"Invalid period.default_type {default_type!r}. "
            "Expected one of: monthly, quarterly, yearly."
        )

    # 4) Period store
    store_section = _section(raw, "period_store")
    store_path_raw = store_section.get("path") or "data/state/period_store.sqlite"
    period_store = PeriodStoreConfig(
        enabled=bool(store_section.get("enabled", True)),
        path=(base_dir / str(store_path_raw)).resolve(),
    )

    return AppConfig(
        report=report,
        output_dir=output_dir,
        export_format=export_format,
        default_period_type=default_type,
        period_store=period_store,
        source=source,
    )
