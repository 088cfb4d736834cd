# SMB FundTrack - Expense & Funding tracker for SMBs
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
View utilities for SMB FundTrack.

This module turns records and engine results into pandas DataFrames ready
for console display (``DataFrame.to_string``) or spreadsheet export. It
does not compute anything beyond formatting: totals and classifications
come from ``engine``.

Amounts are converted from Decimal to float at this boundary, because
spreadsheet writers only store binary floating point numbers.
"""

from collections.abc import Sequence
from datetime import date
from typing import Optional

import pandas as pd

from .engine import MonthTrend, ReminderBuckets, ReportSummary
from .models import Expense, Funding
from .periods import _today, days_until_due

NOT_APPLICABLE = "N/A"

EXPENSE_COLUMNS = [
    "id",
    "date",
    "category",
    "name",
    "amount",
    "gst_applicable",
    "gst_amount",
    "is_recurring",
    "due_date",
    "is_paid",
    "attachments",
]

FUNDING_COLUMNS = [
    "id",
    "received_date",
    "funder_name",
    "amount",
    "is_repayable",
    "repayment_date",
    "is_repaid",
    "description",
    "attachments",
]

EXPENSE_EXPORT_COLUMNS = [
    "Date",
    "Name",
    "Type",
    "Amount",
    "GST Applicable",
    "GST Amount",
    "Recurring",
    "Due Date",
    "Status",
]

FUNDING_EXPORT_COLUMNS = [
    "Date Received",
    "Funder Name",
    "Amount",
    "Repayable",
    "Repayment Date",
    "Status",
    "Description",
]


def _yes_no(flag: bool) -> str:
    return "Yes" if flag else "No"


def expenses_to_dataframe(expenses: Sequence[Expense]) -> pd.DataFrame:
    """Listing view of expenses (one row per record)."""
    if not expenses:
        return pd.DataFrame(columns=EXPENSE_COLUMNS)

    rows = [
        {
            "id": e.id,
            "date": e.date.isoformat(),
            "category": e.category,
            "name": e.name,
            "amount": float(e.amount),
            "gst_applicable": e.gst_applicable,
            "gst_amount": float(e.effective_gst),
            "is_recurring": e.is_recurring,
            "due_date": e.due_date.isoformat() if e.due_date else None,
            "is_paid": e.is_paid,
            "attachments": len(e.attachments),
        }
        for e in expenses
    ]
    return pd.DataFrame(rows, columns=EXPENSE_COLUMNS)


def funding_to_dataframe(funding: Sequence[Funding]) -> pd.DataFrame:
    """Listing view of funding records (one row per record)."""
    if not funding:
        return pd.DataFrame(columns=FUNDING_COLUMNS)

    rows = [
        {
            "id": f.id,
            "received_date": f.received_date.isoformat(),
            "funder_name": f.funder_name,
            "amount": float(f.amount),
            "is_repayable": f.is_repayable,
            "repayment_date": f.repayment_date.isoformat()
            if f.repayment_date
            else None,
            "is_repaid": f.is_repaid,
            "description": f.description or "",
            "attachments": len(f.attachments),
        }
        for f in funding
    ]
    return pd.DataFrame(rows, columns=FUNDING_COLUMNS)


def expenses_export_frame(expenses: Sequence[Expense]) -> pd.DataFrame:
    """Rows of the 'Expenses' sheet."""
    rows = [
        [
            e.date.isoformat(),
            e.name,
            e.category,
            float(e.amount),
            _yes_no(e.gst_applicable),
            float(e.effective_gst),
            _yes_no(e.is_recurring),
            e.due_date.isoformat() if e.due_date else NOT_APPLICABLE,
            "Paid" if e.is_paid else "Pending",
        ]
        for e in expenses
    ]
    return pd.DataFrame(rows, columns=EXPENSE_EXPORT_COLUMNS)


def funding_export_frame(funding: Sequence[Funding]) -> pd.DataFrame:
    """Rows of the 'Funding' sheet."""
    rows = [
        [
            f.received_date.isoformat(),
            f.funder_name,
            float(f.amount),
            _yes_no(f.is_repayable),
            f.repayment_date.isoformat() if f.repayment_date else NOT_APPLICABLE,
            "Repaid" if f.is_repaid else "Pending",
            f.description or "",
        ]
        for f in funding
    ]
    return pd.DataFrame(rows, columns=FUNDING_EXPORT_COLUMNS)


def summary_metrics_frame(summary: ReportSummary) -> pd.DataFrame:
    """Metric/value table of a report summary."""
    rows = [
        ("Total Expenses", summary.expense_count),
        ("Total Amount", float(summary.total_amount)),
        ("Total GST", float(summary.total_gst)),
        ("Total Funding", float(summary.total_funding)),
        ("Net Cash Flow", float(summary.net_cash_flow)),
        ("Average Expense", float(summary.average_expense)),
    ]
    return pd.DataFrame(rows, columns=["Metric", "Value"])


def category_breakdown_frame(
    summary: ReportSummary, *, with_share: bool = False
) -> pd.DataFrame:
    """Category breakdown, largest amount first."""
    rows = []
    for category, amount in summary.ranked_categories():
        row = {"Type": category, "Amount": float(amount)}
        if with_share:
            row["Share %"] = round(summary.category_share(category), 1)
        rows.append(row)

    columns = ["Type", "Amount", "Share %"] if with_share else ["Type", "Amount"]
    return pd.DataFrame(rows, columns=columns)


def trends_frame(trends: Sequence[MonthTrend]) -> pd.DataFrame:
    """Month-trend series as a table (oldest month first)."""
    rows = [
        {
            "month": f"{t.label} {t.year}",
            "total": float(t.total),
            "bar_pct": round(t.width_pct, 1),
            "gst": float(t.gst_total),
            "gst_bar_pct": round(t.gst_width_pct, 1),
            "gst_expenses": t.gst_count,
        }
        for t in trends
    ]
    return pd.DataFrame(
        rows,
        columns=["month", "total", "bar_pct", "gst", "gst_bar_pct", "gst_expenses"],
    )


def reminders_frame(
    buckets: ReminderBuckets, *, today: Optional[date] = None
) -> pd.DataFrame:
    """
    Flatten reminder buckets into one table.

    Rows are ordered overdue first, then upcoming, then later. The
    ``days`` column is negative for overdue bills.
    """
    today = today or _today()

    rows = []
    for status, expenses in (
        ("overdue", buckets.overdue),
        ("upcoming", buckets.upcoming),
        ("later", buckets.later),
    ):
        for e in expenses:
            rows.append(
                {
                    "status": status,
                    "id": e.id,
                    "name": e.name,
                    "category": e.category,
                    "amount": float(e.amount),
                    "due_date": e.due_date.isoformat(),
                    "days": days_until_due(e.due_date, today=today),
                }
            )
    return pd.DataFrame(
        rows,
        columns=["status", "id", "name", "category", "amount", "due_date", "days"],
    )
