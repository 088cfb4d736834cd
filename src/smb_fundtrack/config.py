# SMB FundTrack - Expense & Funding tracker for SMBs
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Configuration helpers for SMB FundTrack.

This module is responsible for:
- loading the application configuration from a TOML file,
- exposing typed dataclasses used by the rest of the application.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

try:
    import tomllib  # Python 3.11+
except ModuleNotFoundError:  # pragma: no cover - fallback for older Python
    import tomli as tomllib  # type: ignore[import]

from .db import DatabaseConfig
from .engine import (
    DEFAULT_REPAYMENT_ALERT_DAYS,
    DEFAULT_TREND_MONTHS,
    DEFAULT_UPCOMING_DAYS,
)
from .exporter import DEFAULT_TITLE

DEFAULT_CONFIG_FILE = "smb_fundtrack_config.toml"


@dataclass(frozen=True)
class RemindersConfig:
    """Look-ahead windows (in days) for bill reminders and repayment alerts."""

    upcoming_days: int = DEFAULT_UPCOMING_DAYS
    repayment_alert_days: int = DEFAULT_REPAYMENT_ALERT_DAYS


@dataclass(frozen=True)
class DashboardConfig:
    """Sizes of the dashboard series and lists."""

    trend_months: int = DEFAULT_TREND_MONTHS
    recent_expenses: int = 5
    recent_funding: int = 3


@dataclass(frozen=True)
class AppConfig:
    """
    Application-wide configuration for SMB FundTrack.

    This aggregates:
    - the display currency and the report title,
    - the database configuration (where records are stored),
    - reminder and dashboard options,
    - the default output directory for exported reports,
    - the log level used by the CLI.
    """

    currency: str
    report_title: str
    database: DatabaseConfig
    reminders: RemindersConfig
    dashboard: DashboardConfig
    output_dir: Path
    log_level: str


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
    except tomllib.TOMLDecodeError as exc:
        raise ValueError(f"Failed to parse TOML config file: {path}") from exc

    if not isinstance(data, dict):
        raise ValueError(f"Invalid TOML root type in {path}, expected a table.")

    return data


def _section(raw: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    """Return a top-level table, or an empty mapping if absent or malformed."""
    section = raw.get(name) or {}
    if not isinstance(section, Mapping):
        return {}
    return section


def _int_option(section: Mapping[str, Any], key: str, default: int, name: str) -> int:
    """
    Read a non-negative integer option.

    Raises:
        ValueError: if the value is not an integer or is negative.
    """
    raw_value = section.get(key, default)
    if isinstance(raw_value, bool):
        raw_value = None
    try:
        value = int(raw_value)
    except (TypeError, ValueError) as exc:
        raise ValueError(
            f"Invalid value for '{name}.{key}' in the configuration. "
            "Expected an integer."
        ) from exc
    if value < 0:
        raise ValueError(
            f"Invalid value for '{name}.{key}' in the configuration. "
            "Expected a non-negative integer."
        )
    return value


def load_app_config(config_path: Optional[str] = None) -> AppConfig:
    """
    Load the SMB FundTrack application configuration from a TOML file.

    Expected top-level sections in the TOML file
    --------------------------------------------
    [app]
        Display currency (ISO code, default "INR") and report title.

    [database]
        Database engine ("sqlite") and SQLite file path.

    [reminders]
        ``upcoming_days`` (bill reminders, default 7) and
        ``repayment_alert_days`` (repayable funding, default 5).

    [dashboard]
        ``trend_months``, ``recent_expenses`` and ``recent_funding``.

    [export]
        ``output_dir`` where xlsx reports are written.

    [logging]
        ``level`` (DEBUG, INFO, WARNING...).

    Notes
    -----
    - Every section is optional; defaults are used for missing values.
    - All file paths in the TOML are resolved relative to the directory of
      the TOML file itself.

    Parameters
    ----------
    config_path : str, optional
        Path to the TOML configuration file. Defaults to
        ``smb_fundtrack_config.toml`` in the current directory.

    Returns
    -------
    AppConfig
        Parsed and validated application configuration.
    """
    if config_path is None:
        config_file = Path(DEFAULT_CONFIG_FILE).resolve()
    else:
        config_file = Path(config_path).resolve()

    raw = _load_toml(config_file)
    base_dir = config_file.parent

    # 1) App section
    app_section = _section(raw, "app")
    currency = str(app_section.get("currency") or "INR").upper()
    report_title = str(app_section.get("report_title") or DEFAULT_TITLE)

    # 2) Database section
    database_section = _section(raw, "database")
    db_engine = str(database_section.get("engine") or "sqlite")
    db_path_raw = database_section.get("path") or "data/db/smb_fundtrack.sqlite"
    db_path = (base_dir / str(db_path_raw)).resolve()

    database_config = DatabaseConfig(engine=db_engine, path=db_path)

    # 3) Reminders
    reminders_section = _section(raw, "reminders")
    reminders = RemindersConfig(
        upcoming_days=_int_option(
            reminders_section, "upcoming_days", DEFAULT_UPCOMING_DAYS, "reminders"
        ),
        repayment_alert_days=_int_option(
            reminders_section,
            "repayment_alert_days",
            DEFAULT_REPAYMENT_ALERT_DAYS,
            "reminders",
        ),
    )

    # 4) Dashboard
    dashboard_section = _section(raw, "dashboard")
    dashboard = DashboardConfig(
        trend_months=_int_option(
            dashboard_section, "trend_months", DEFAULT_TREND_MONTHS, "dashboard"
        ),
        recent_expenses=_int_option(
            dashboard_section, "recent_expenses", 5, "dashboard"
        ),
        recent_funding=_int_option(dashboard_section, "recent_funding", 3, "dashboard"),
    )

    # 5) Export
    export_section = _section(raw, "export")
    output_dir_raw = export_section.get("output_dir") or "data/output"
    output_dir = (base_dir / str(output_dir_raw)).resolve()

    # 6) Logging
    logging_section = _section(raw, "logging")
    log_level = str(logging_section.get("level") or "INFO").upper()

    return AppConfig(
        currency=currency,
        report_title=report_title,
        database=database_config,
        reminders=reminders,
        dashboard=dashboard,
        output_dir=output_dir,
        log_level=log_level,
    )
