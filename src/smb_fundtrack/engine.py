# SMB FundTrack - Expense & Funding tracker for SMBs
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Aggregation engine for SMB FundTrack.

This module derives every read-side projection of the application from
plain collections of ``Expense`` and ``Funding`` records. It never touches
the database and never mutates its inputs: callers pass whatever snapshot
they loaded and get new value objects back.

Responsibilities
----------------
1. Report summary
   ``summarize(expenses, funding, period)`` filters both collections to the
   period (inclusive bounds) and computes counts, totals, GST, net cash flow,
   the average expense and the per-category breakdown.

2. Month trends
   ``month_trends(expenses, months=6)`` builds the dashboard bar series for
   the last N calendar months (oldest first), with bar widths relative to
   the largest month.

3. Reminders and alerts
   ``classify_reminders`` splits unpaid recurring expenses into overdue,
   upcoming and later buckets; ``repayment_alerts`` lists repayable funding
   due within a short window.

4. Dashboard KPIs
   ``dashboard_kpis`` combines the above into the figures displayed on the
   dashboard (current vs previous month, outstanding funding, recent
   records, GST summary).

Edge-case policy
----------------
Divisions use a denominator floored to 1 (average expense, bar widths,
average GST) so that empty inputs produce zeros rather than errors.
Malformed dates are not caught here: ``ValueError`` propagates from
``periods.parse_date``.
"""

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional

from .models import ZERO, Expense, Funding
from .periods import (
    Period,
    _today,
    days_until_due,
    is_overdue,
    month_windows,
    parse_date,
)

logger = logging.getLogger(__name__)

DEFAULT_UPCOMING_DAYS = 7
DEFAULT_REPAYMENT_ALERT_DAYS = 5
DEFAULT_TREND_MONTHS = 6


# ---------------------------------------------------------------------------
# Value objects
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ReportSummary:
    """
    Financial summary of a report window.

    Attributes
    ----------
    expense_count, funding_count:
        Number of records within the window.
    total_amount:
        Sum of expense amounts.
    total_gst:
        Sum of GST over GST-applicable expenses.
    total_funding:
        Sum of funding amounts.
    net_cash_flow:
        ``total_funding - total_amount``.
    average_expense:
        ``total_amount / max(expense_count, 1)``.
    expenses_by_type:
        Category label -> summed amount. Insertion order is the ranked
        order: descending amount, ties kept in first-encountered order.
    """

    period: Period
    expense_count: int
    funding_count: int
    total_amount: Decimal
    total_gst: Decimal
    total_funding: Decimal
    net_cash_flow: Decimal
    average_expense: Decimal
    expenses_by_type: dict[str, Decimal]

    def ranked_categories(self) -> list[tuple[str, Decimal]]:
        """Category breakdown as (label, amount) pairs, largest first."""
        return list(self.expenses_by_type.items())

    def category_share(self, category: str) -> float:
        """Percentage of the total amount spent in ``category``."""
        amount = self.expenses_by_type.get(category, ZERO)
        denominator = self.total_amount if self.total_amount > 0 else Decimal(1)
        return float(amount / denominator * 100)


@dataclass(frozen=True)
class MonthTrend:
    """One bar of the month-trend series."""

    year: int
    month: int
    label: str
    total: Decimal
    gst_total: Decimal
    gst_count: int
    width_pct: float
    gst_width_pct: float


@dataclass(frozen=True)
class ReminderBuckets:
    """Unpaid recurring expenses split by due-date urgency."""

    overdue: list[Expense]
    upcoming: list[Expense]
    later: list[Expense]

    @property
    def total(self) -> int:
        return len(self.overdue) + len(self.upcoming) + len(self.later)


@dataclass(frozen=True)
class DashboardKPIs:
    """Figures displayed on the dashboard."""

    current_month: Period
    previous_month: Period
    current_month_total: Decimal
    current_month_gst: Decimal
    previous_month_total: Decimal
    previous_month_gst: Decimal
    monthly_change_pct: float
    gst_change_pct: float
    overdue_bills: list[Expense]
    upcoming_repayments: list[Funding]
    total_funding: Decimal
    outstanding_repayable: Decimal
    recent_expenses: list[Expense]
    recent_funding: list[Funding]
    gst_expense_count: int
    average_gst: Decimal
    trends: list[MonthTrend]


# ---------------------------------------------------------------------------
# Filtering and sums
# ---------------------------------------------------------------------------


def filter_expenses_by_period(
    expenses: Iterable[Expense], period: Period
) -> list[Expense]:
    """Keep expenses whose date falls within [start, end] (inclusive)."""
    return [e for e in expenses if period.contains(parse_date(e.date))]


def filter_funding_by_period(
    funding: Iterable[Funding], period: Period
) -> list[Funding]:
    """Keep funding records whose received date falls within the period."""
    return [f for f in funding if period.contains(parse_date(f.received_date))]


def _sum_amounts(records: Iterable) -> Decimal:
    return sum((r.amount for r in records), ZERO)


def _sum_gst(expenses: Iterable[Expense]) -> Decimal:
    return sum((e.effective_gst for e in expenses), ZERO)


def _ratio_pct(numerator: Decimal, denominator: Decimal) -> float:
    """Percentage with a denominator floored to 1."""
    return float(numerator / max(denominator, Decimal(1)) * 100)


def _change_pct(current: Decimal, previous: Decimal) -> float:
    """Month-over-month change in percent, 0 when there is no baseline."""
    if previous <= 0:
        return 0.0
    return float((current - previous) / previous * 100)


def group_by_category(expenses: Iterable[Expense]) -> dict[str, Decimal]:
    """
    Sum expense amounts per category, ranked by descending amount.

    Ties keep the order in which categories were first encountered
    (``sorted`` is stable).
    """
    totals: dict[str, Decimal] = {}
    for expense in expenses:
        totals[expense.category] = totals.get(expense.category, ZERO) + expense.amount

    ranked = sorted(totals.items(), key=lambda item: item[1], reverse=True)
    return dict(ranked)


# ---------------------------------------------------------------------------
# Report summary
# ---------------------------------------------------------------------------


def summarize(
    expenses: Sequence[Expense],
    funding: Sequence[Funding],
    period: Period,
) -> ReportSummary:
    """
    Compute the report summary of a window.

    Parameters
    ----------
    expenses, funding:
        Full record collections. They are filtered to ``period`` here.
    period:
        Report window (inclusive bounds).

    Returns
    -------
    ReportSummary
    """
    in_window = filter_expenses_by_period(expenses, period)
    funding_in_window = filter_funding_by_period(funding, period)

    total_amount = _sum_amounts(in_window)
    total_gst = _sum_gst(in_window)
    total_funding = _sum_amounts(funding_in_window)

    count = len(in_window)
    average = total_amount / (count or 1)

    logger.debug(
        "Summarized %d expenses and %d funding records for %s → %s",
        count,
        len(funding_in_window),
        period.start,
        period.end,
    )

    return ReportSummary(
        period=period,
        expense_count=count,
        funding_count=len(funding_in_window),
        total_amount=total_amount,
        total_gst=total_gst,
        total_funding=total_funding,
        net_cash_flow=total_funding - total_amount,
        average_expense=average,
        expenses_by_type=group_by_category(in_window),
    )


# ---------------------------------------------------------------------------
# Month trends
# ---------------------------------------------------------------------------


def month_trends(
    expenses: Sequence[Expense],
    months: int = DEFAULT_TREND_MONTHS,
    *,
    today: Optional[date] = None,
) -> list[MonthTrend]:
    """
    Build the month-trend series for the last ``months`` calendar months.

    The series is ordered oldest first and ends with the current month.
    Bar widths are percentages of the largest month (expense total and GST
    separately), with the maximum floored to 1 so that a series of empty
    months yields 0% everywhere.
    """
    windows = month_windows(months, today=today)

    rows: list[tuple[Period, Decimal, Decimal, int]] = []
    for window in windows:
        in_month = filter_expenses_by_period(expenses, window)
        rows.append(
            (
                window,
                _sum_amounts(in_month),
                _sum_gst(in_month),
                sum(1 for e in in_month if e.gst_applicable),
            )
        )

    max_total = max((total for _, total, _, _ in rows), default=ZERO)
    max_gst = max((gst for _, _, gst, _ in rows), default=ZERO)

    return [
        MonthTrend(
            year=window.start.year,
            month=window.start.month,
            label=window.label,
            total=total,
            gst_total=gst,
            gst_count=gst_count,
            width_pct=_ratio_pct(total, max_total),
            gst_width_pct=_ratio_pct(gst, max_gst),
        )
        for window, total, gst, gst_count in rows
    ]


# ---------------------------------------------------------------------------
# Reminders and repayment alerts
# ---------------------------------------------------------------------------


def classify_reminders(
    expenses: Iterable[Expense],
    *,
    today: Optional[date] = None,
    upcoming_days: int = DEFAULT_UPCOMING_DAYS,
) -> ReminderBuckets:
    """
    Split unpaid recurring expenses into overdue / upcoming / later.

    Only candidates (recurring, with a due date, not paid) are considered;
    every candidate lands in exactly one bucket:

    - overdue:  due date strictly before today,
    - upcoming: due in 0..upcoming_days days (inclusive),
    - later:    due in more than upcoming_days days.

    Each bucket is sorted by due date.
    """
    today = today or _today()

    overdue: list[Expense] = []
    upcoming: list[Expense] = []
    later: list[Expense] = []

    for expense in expenses:
        if not expense.is_reminder_candidate:
            continue
        if is_overdue(expense.due_date, today=today):
            overdue.append(expense)
        elif days_until_due(expense.due_date, today=today) <= upcoming_days:
            upcoming.append(expense)
        else:
            later.append(expense)

    def by_due(e: Expense) -> date:
        return parse_date(e.due_date)

    return ReminderBuckets(
        overdue=sorted(overdue, key=by_due),
        upcoming=sorted(upcoming, key=by_due),
        later=sorted(later, key=by_due),
    )


def repayment_alerts(
    funding: Iterable[Funding],
    *,
    today: Optional[date] = None,
    window_days: int = DEFAULT_REPAYMENT_ALERT_DAYS,
) -> list[Funding]:
    """
    Return repayable, unrepaid funding due within ``window_days`` days.

    Records already past their repayment date are not alerts: they are
    overdue repayments and only the [0, window_days] range is reported.
    """
    today = today or _today()

    alerts: list[Funding] = []
    for fund in funding:
        if not fund.is_outstanding or fund.repayment_date is None:
            continue
        days = days_until_due(fund.repayment_date, today=today)
        if 0 <= days <= window_days:
            alerts.append(fund)
    return alerts


# ---------------------------------------------------------------------------
# Dashboard
# ---------------------------------------------------------------------------


def dashboard_kpis(
    expenses: Sequence[Expense],
    funding: Sequence[Funding],
    *,
    today: Optional[date] = None,
    upcoming_days: int = DEFAULT_UPCOMING_DAYS,
    repayment_alert_days: int = DEFAULT_REPAYMENT_ALERT_DAYS,
    trend_months: int = DEFAULT_TREND_MONTHS,
    recent_expenses: int = 5,
    recent_funding: int = 3,
) -> DashboardKPIs:
    """
    Compute all dashboard figures from the full record collections.

    Month figures use full calendar months (current and previous). Funding
    totals are computed over all records, not a window.
    """
    today = today or _today()

    previous, current = month_windows(2, today=today)

    current_expenses = filter_expenses_by_period(expenses, current)
    previous_expenses = filter_expenses_by_period(expenses, previous)

    current_total = _sum_amounts(current_expenses)
    current_gst = _sum_gst(current_expenses)
    previous_total = _sum_amounts(previous_expenses)
    previous_gst = _sum_gst(previous_expenses)

    reminders = classify_reminders(expenses, today=today, upcoming_days=upcoming_days)

    gst_count = sum(1 for e in current_expenses if e.gst_applicable)

    latest_expenses = sorted(
        expenses, key=lambda e: parse_date(e.date), reverse=True
    )[:recent_expenses]
    latest_funding = sorted(
        funding, key=lambda f: parse_date(f.received_date), reverse=True
    )[:recent_funding]

    return DashboardKPIs(
        current_month=current,
        previous_month=previous,
        current_month_total=current_total,
        current_month_gst=current_gst,
        previous_month_total=previous_total,
        previous_month_gst=previous_gst,
        monthly_change_pct=_change_pct(current_total, previous_total),
        gst_change_pct=_change_pct(current_gst, previous_gst),
        overdue_bills=reminders.overdue,
        upcoming_repayments=repayment_alerts(
            funding, today=today, window_days=repayment_alert_days
        ),
        total_funding=_sum_amounts(funding),
        outstanding_repayable=_sum_amounts(f for f in funding if f.is_outstanding),
        recent_expenses=latest_expenses,
        recent_funding=latest_funding,
        gst_expense_count=gst_count,
        average_gst=current_gst / (gst_count or 1),
        trends=month_trends(expenses, trend_months, today=today),
    )
