from argparse import Namespace
from datetime import date, datetime

import pytest

import smb_fundtrack.periods as periods
from smb_fundtrack.models import InputError

TODAY = date(2025, 3, 15)


def test_weekly_window_spans_last_seven_days() -> None:
    """weekly should cover [today - 7 days, today]."""
    p = periods.date_range("weekly", today=TODAY)

    assert p.start == date(2025, 3, 8)
    assert p.end == TODAY
    assert p.kind == "weekly"
    assert p.label == "Last 7 days"


def test_monthly_window_is_month_to_date() -> None:
    p = periods.date_range("monthly", today=TODAY)

    assert p.start == date(2025, 3, 1)
    assert p.end == TODAY


def test_yearly_window_is_year_to_date() -> None:
    p = periods.date_range("yearly", today=TODAY)

    assert p.start == date(2025, 1, 1)
    assert p.end == TODAY


def test_custom_window_uses_given_bounds() -> None:
    p = periods.date_range("custom", "2025-01-10", date(2025, 2, 20), today=TODAY)

    assert p.start == date(2025, 1, 10)
    assert p.end == date(2025, 2, 20)
    assert p.kind == "custom"
    assert "2025-01-10" in p.label


def test_custom_window_defaults_missing_bounds() -> None:
    """Missing bounds fall back to first-of-month and today."""
    p = periods.date_range("custom", today=TODAY)

    assert p.start == date(2025, 3, 1)
    assert p.end == TODAY


def test_custom_window_rejects_inverted_bounds() -> None:
    with pytest.raises(InputError):
        periods.date_range("custom", "2025-03-10", "2025-03-01", today=TODAY)


def test_unknown_period_kind_raises() -> None:
    with pytest.raises(ValueError):
        periods.date_range("quarterly", today=TODAY)


def test_date_range_uses_isolated_clock(monkeypatch) -> None:
    """Without an explicit today, date_range relies on _today()."""
    monkeypatch.setattr(periods, "_today", lambda: date(2024, 2, 29))

    p = periods.date_range("monthly")

    assert p.start == date(2024, 2, 1)
    assert p.end == date(2024, 2, 29)


def test_period_contains_is_inclusive() -> None:
    p = periods.Period(start=date(2025, 2, 1), end=date(2025, 2, 28), label="Feb")

    assert p.contains(date(2025, 2, 1))
    assert p.contains(date(2025, 2, 28))
    assert not p.contains(date(2025, 1, 31))
    assert not p.contains(date(2025, 3, 1))


def test_parse_date_accepts_dates_datetimes_and_iso_strings() -> None:
    assert periods.parse_date(date(2025, 1, 2)) == date(2025, 1, 2)
    assert periods.parse_date(datetime(2025, 1, 2, 13, 30)) == date(2025, 1, 2)
    assert periods.parse_date("2025-01-02") == date(2025, 1, 2)
    assert periods.parse_date("2025-01-02T08:00:00") == date(2025, 1, 2)


def test_parse_date_rejects_malformed_strings() -> None:
    with pytest.raises(ValueError):
        periods.parse_date("02/01/2025")


def test_overdue_and_days_until_due_agree() -> None:
    """A past due date is overdue and has a negative day count."""
    for offset in (-30, -1):
        due = date.fromordinal(TODAY.toordinal() + offset)
        assert periods.is_overdue(due, today=TODAY)
        assert periods.days_until_due(due, today=TODAY) == offset

    assert not periods.is_overdue(TODAY, today=TODAY)
    assert periods.days_until_due(TODAY, today=TODAY) == 0
    assert periods.days_until_due("2025-03-18", today=TODAY) == 3


def test_month_label_valid_and_invalid_indices() -> None:
    assert periods.month_label(0) == "January"
    assert periods.month_label(11) == "December"
    assert periods.month_label(12) == periods.INVALID_MONTH
    assert periods.month_label(-1) == periods.INVALID_MONTH
    assert periods.month_label(True) == periods.INVALID_MONTH


def test_month_windows_are_oldest_first_and_cross_years() -> None:
    windows = periods.month_windows(3, today=date(2025, 2, 10))

    assert [w.label for w in windows] == ["Dec", "Jan", "Feb"]
    assert windows[0].start == date(2024, 12, 1)
    assert windows[0].end == date(2024, 12, 31)
    assert windows[-1].end == date(2025, 2, 28)


def test_previous_month_spans_full_month() -> None:
    p = periods.previous_month(date(2024, 3, 31))

    assert p.start == date(2024, 2, 1)
    assert p.end == date(2024, 2, 29)


def test_determine_period_from_args_priority() -> None:
    """Custom dates win over --period; monthly is the default."""
    args = Namespace(period="yearly", from_date="2025-01-05", to_date=None)
    p = periods.determine_period_from_args(args, today=TODAY)
    assert p.kind == "custom"
    assert p.start == date(2025, 1, 5)
    assert p.end == TODAY

    args = Namespace(period="weekly", from_date=None, to_date=None)
    assert periods.determine_period_from_args(args, today=TODAY).kind == "weekly"

    args = Namespace(period=None, from_date=None, to_date=None)
    assert periods.determine_period_from_args(args, today=TODAY).kind == "monthly"


def test_format_date() -> None:
    assert periods.format_date(date(2025, 1, 5)) == "Jan 5, 2025"
