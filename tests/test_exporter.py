import io
from datetime import date, datetime
from decimal import Decimal

import pandas as pd
import pytest
from openpyxl import load_workbook

import smb_fundtrack.exporter as exporter
from smb_fundtrack.engine import (
    filter_expenses_by_period,
    filter_funding_by_period,
    summarize,
)
from smb_fundtrack.models import Expense, Funding
from smb_fundtrack.periods import date_range

TODAY = date(2025, 1, 31)
GENERATED_AT = datetime(2025, 1, 31, 18, 45)


def _records():
    expenses = [
        Expense(
            id=1,
            date=date(2025, 1, 5),
            category="Rent",
            name="Office rent",
            amount=Decimal("1200.10"),
            gst_applicable=True,
            gst_amount=Decimal("216.02"),
        ),
        Expense(
            id=2,
            date=date(2025, 1, 10),
            category="Subscriptions & Due",
            name="Internet",
            amount=Decimal("49.99"),
            gst_amount=Decimal("5"),
            is_recurring=True,
            due_date=date(2025, 2, 10),
        ),
        Expense(
            id=3,
            date=date(2025, 1, 11),
            category="Rent",
            name="Storage",
            amount=Decimal("0.33"),
        ),
    ]
    funding = [
        Funding(
            id=1,
            received_date=date(2025, 1, 2),
            funder_name="Seed Bank",
            amount=Decimal("5000.00"),
            is_repayable=True,
            repayment_date=date(2025, 12, 31),
            description="Working capital loan",
        )
    ]
    return expenses, funding


def _export(expenses, funding):
    period = date_range("monthly", today=TODAY)
    summary = summarize(expenses, funding, period)
    metadata = exporter.build_report_metadata(period, generated_at=GENERATED_AT)
    data = exporter.export_report(
        summary,
        filter_expenses_by_period(expenses, period),
        filter_funding_by_period(funding, period),
        metadata,
    )
    return summary, metadata, data


def test_summary_metrics_round_trip() -> None:
    """Re-reading the metric table reproduces the in-memory totals."""
    expenses, funding = _records()
    summary, _, data = _export(expenses, funding)

    metrics = exporter.read_summary_metrics(data)

    assert metrics["Total Expenses"] == summary.expense_count
    assert metrics["Total Amount"] == float(summary.total_amount)
    assert metrics["Total GST"] == float(summary.total_gst)
    assert metrics["Total Funding"] == float(summary.total_funding)
    assert metrics["Net Cash Flow"] == float(summary.net_cash_flow)
    assert metrics["Average Expense"] == float(summary.average_expense)


def test_workbook_has_three_sheets_in_order() -> None:
    expenses, funding = _records()
    _, _, data = _export(expenses, funding)

    workbook = load_workbook(io.BytesIO(data))

    assert workbook.sheetnames == ["Summary", "Expenses", "Funding"]
    assert workbook["Summary"].column_dimensions["A"].width == 20


def test_empty_record_lists_omit_their_sheets() -> None:
    _, _, data = _export([], [])

    workbook = load_workbook(io.BytesIO(data))

    assert workbook.sheetnames == ["Summary"]
    assert exporter.read_summary_metrics(data)["Total Amount"] == 0.0


def test_summary_sheet_layout() -> None:
    expenses, funding = _records()
    _, metadata, data = _export(expenses, funding)

    sheet = pd.read_excel(io.BytesIO(data), sheet_name="Summary", header=None)
    labels = sheet.iloc[:, 0].tolist()

    assert labels[0] == "SMB FundTrack Financial Report - Monthly"
    assert sheet.iloc[2, 1] == "2025-01-01 to 2025-01-31"
    assert sheet.iloc[3, 1] == "2025-01-31 18:45"
    assert exporter.SUMMARY_SECTION in labels
    assert exporter.BREAKDOWN_SECTION in labels

    # Category breakdown: largest amount first.
    type_row = labels.index("Type")
    assert labels[type_row + 1] == "Rent"
    assert sheet.iloc[type_row + 1, 1] == pytest.approx(1200.43)
    assert labels[type_row + 2] == "Subscriptions & Due"


def test_expenses_sheet_rows() -> None:
    expenses, funding = _records()
    _, _, data = _export(expenses, funding)

    # "N/A" markers must stay strings, not become NaN.
    sheet = pd.read_excel(
        io.BytesIO(data), sheet_name="Expenses", keep_default_na=False
    )

    assert list(sheet.columns) == [
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
    internet = sheet[sheet["Name"] == "Internet"].iloc[0]
    assert internet["GST Applicable"] == "No"
    assert internet["GST Amount"] == 0
    assert internet["Recurring"] == "Yes"
    assert internet["Due Date"] == "2025-02-10"
    assert internet["Status"] == "Pending"

    rent = sheet[sheet["Name"] == "Office rent"].iloc[0]
    assert rent["Due Date"] == "N/A"


def test_funding_sheet_rows() -> None:
    expenses, funding = _records()
    _, _, data = _export(expenses, funding)

    sheet = pd.read_excel(
        io.BytesIO(data), sheet_name="Funding", keep_default_na=False
    )

    row = sheet.iloc[0]
    assert row["Funder Name"] == "Seed Bank"
    assert row["Amount"] == 5000.0
    assert row["Repayable"] == "Yes"
    assert row["Status"] == "Pending"
    assert row["Description"] == "Working capital loan"


def test_report_filename_and_save(tmp_path) -> None:
    expenses, funding = _records()
    _, metadata, data = _export(expenses, funding)

    assert exporter.report_filename(metadata) == (
        "smb-fundtrack-report-monthly-2025-01-31.xlsx"
    )

    path = exporter.save_report(data, metadata, tmp_path / "out")

    assert path.name == exporter.report_filename(metadata)
    assert path.read_bytes() == data


def test_read_summary_metrics_requires_metric_table() -> None:
    buffer = io.BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        pd.DataFrame([["hello", 1]]).to_excel(
            writer, sheet_name="Summary", header=False, index=False
        )

    with pytest.raises(ValueError):
        exporter.read_summary_metrics(buffer.getvalue())
