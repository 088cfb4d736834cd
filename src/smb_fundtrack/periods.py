# SMB FundTrack - Expense & Funding tracker for SMBs
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Period and date helpers for SMB FundTrack.

This module defines the Period value object (a closed [start, end] date
window) and the pure date functions used by the aggregation engine:

- report windows (weekly, monthly, yearly, custom),
- due-date helpers (overdue detection, days until due),
- month labels and month windows for trend series,
- parsing and display formatting of dates.

All comparisons are done on calendar dates. "Today" is obtained through
``_today()`` so that tests can pin the clock with monkeypatch, and every
public helper also accepts an explicit ``today`` argument.
"""

from calendar import monthrange
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Literal, Optional, Union

from .models import InputError

PeriodKind = Literal["weekly", "monthly", "yearly", "custom"]

PERIOD_KINDS: tuple[str, ...] = ("weekly", "monthly", "yearly", "custom")

MONTH_NAMES: tuple[str, ...] = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)

INVALID_MONTH = "Invalid Month"

DateLike = Union[date, datetime, str]


@dataclass(frozen=True)
class Period:
    """Represents a reporting window with a human-readable label."""

    start: date
    end: date
    label: str
    kind: str = "custom"

    def contains(self, value: date) -> bool:
        """Return True if ``value`` falls within [start, end] (inclusive)."""
        return self.start <= value <= self.end


def _today() -> date:
    """Return today's date as a date object (isolated for easier testing)."""
    return datetime.today().date()


def parse_date(value: DateLike) -> date:
    """
    Normalize a date-like value to a ``datetime.date``.

    Accepted inputs are ``date``, ``datetime`` (its date part is used) and
    ISO strings (``YYYY-MM-DD``, optionally followed by a time part).

    Raises:
        ValueError: if a string cannot be parsed. The error is not caught
            anywhere in the engine: callers decide on a fallback.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    raw = str(value).strip()
    try:
        return date.fromisoformat(raw[:10])
    except ValueError as exc:
        raise ValueError(f"Invalid date: {value!r}. Expected YYYY-MM-DD.") from exc


def date_range(
    kind: str,
    start: Optional[DateLike] = None,
    end: Optional[DateLike] = None,
    *,
    today: Optional[date] = None,
) -> Period:
    """
    Compute the reporting window for a period kind.

    - ``weekly``:  [today - 7 days, today]
    - ``monthly``: [first day of the current month, today]
    - ``yearly``:  [January 1 of the current year, today]
    - ``custom``:  [start, end], defaulting to first-of-month and today
      when a bound is missing.

    ``start`` and ``end`` are ignored for the non-custom kinds.

    Raises:
        ValueError: for an unknown kind or a malformed date string.
        InputError: if a custom window ends before it starts.
    """
    today = today or _today()

    if kind == "weekly":
        return Period(
            start=today - timedelta(days=7), end=today, label="Last 7 days", kind=kind
        )
    if kind == "monthly":
        return Period(
            start=today.replace(day=1), end=today, label="Month to date", kind=kind
        )
    if kind == "yearly":
        return Period(
            start=date(today.year, 1, 1), end=today, label="Year to date", kind=kind
        )
    if kind == "custom":
        start_d = parse_date(start) if start is not None else today.replace(day=1)
        end_d = parse_date(end) if end is not None else today
        if end_d < start_d:
            raise InputError("Custom period end date cannot be before start date.")
        label = f"Custom period ({start_d} → {end_d})"
        return Period(start=start_d, end=end_d, label=label, kind=kind)

    raise ValueError(f"Unknown period: {kind!r}")


def determine_period_from_args(args, *, today: Optional[date] = None) -> Period:
    """
    Determine the report window from CLI arguments.

    Priority (highest to lowest):

        1. --from-date / --to-date (forces a custom period)
        2. --period (weekly, monthly, yearly, custom)
        3. monthly by default
    """
    from_raw: Optional[str] = getattr(args, "from_date", None)
    to_raw: Optional[str] = getattr(args, "to_date", None)

    if from_raw or to_raw:
        return date_range("custom", from_raw, to_raw, today=today)

    kind = getattr(args, "period", None) or "monthly"
    return date_range(kind, today=today)


def is_overdue(due: DateLike, *, today: Optional[date] = None) -> bool:
    """Return True if ``due`` is strictly before today's date."""
    today = today or _today()
    return parse_date(due) < today


def days_until_due(due: DateLike, *, today: Optional[date] = None) -> int:
    """
    Number of whole days between today and ``due``.

    Negative when overdue, zero when due today.
    """
    today = today or _today()
    return (parse_date(due) - today).days


def month_label(index: int) -> str:
    """
    Return the English month name for a 0-based month index (0 = January).

    Out-of-range values (including negative ones) return ``"Invalid Month"``
    instead of raising.
    """
    if isinstance(index, bool) or not isinstance(index, int):
        return INVALID_MONTH
    if 0 <= index < len(MONTH_NAMES):
        return MONTH_NAMES[index]
    return INVALID_MONTH


def month_windows(count: int, *, today: Optional[date] = None) -> list[Period]:
    """
    Return the ``count`` calendar months ending at the current month.

    Months are ordered oldest first. Each Period spans the full month and is
    labelled with the abbreviated month name (e.g. "Jan").
    """
    today = today or _today()

    windows: list[Period] = []
    for offset in range(count - 1, -1, -1):
        # Months since year 0, shifted back by `offset`.
        absolute = today.year * 12 + (today.month - 1) - offset
        year, month_index = divmod(absolute, 12)
        last_day = monthrange(year, month_index + 1)[1]
        windows.append(
            Period(
                start=date(year, month_index + 1, 1),
                end=date(year, month_index + 1, last_day),
                label=month_label(month_index)[:3],
                kind="monthly",
            )
        )
    return windows


def previous_month(today: Optional[date] = None) -> Period:
    """Full previous calendar month."""
    return month_windows(2, today=today)[0]


def format_date(value: DateLike) -> str:
    """Format a date for display, e.g. ``Jan 5, 2025``."""
    d = parse_date(value)
    return f"{MONTH_NAMES[d.month - 1][:3]} {d.day}, {d.year}"
