# SMB FundTrack - Expense & Funding tracker for SMBs
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Spreadsheet report exporter for SMB FundTrack.

``export_report`` serializes a report summary and the raw record lists of
the window into an xlsx workbook (returned as bytes) with up to three
sheets:

- ``Summary``:  title, period bounds, generation timestamp, the metric/value
  table and the category breakdown (largest amount first),
- ``Expenses``: one row per expense (omitted when there are none),
- ``Funding``:  one row per funding record (omitted when there are none).

The workbook is produced by pandas with the openpyxl engine. The Summary
sheet is first assembled as rows of cells (``build_summary_rows``) and then
written as a header-less DataFrame, so the layout stays independent from
the spreadsheet library.

``read_summary_metrics`` reads the metric table back from an exported
workbook, which is what the report round-trip tests rely on.
"""

import io
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

import pandas as pd
from openpyxl.utils import get_column_letter

from .engine import ReportSummary
from .models import Expense, Funding
from .periods import Period
from .views import (
    expenses_export_frame,
    funding_export_frame,
    summary_metrics_frame,
)

logger = logging.getLogger(__name__)

SUMMARY_SHEET = "Summary"
EXPENSES_SHEET = "Expenses"
FUNDING_SHEET = "Funding"

METRICS_HEADER = "Metric"
SUMMARY_SECTION = "FINANCIAL SUMMARY"
BREAKDOWN_SECTION = "EXPENSES BY TYPE"

SUMMARY_WIDTHS = [20, 15]
EXPENSES_WIDTHS = [12, 25, 20, 12, 12, 12, 10, 12, 10]
FUNDING_WIDTHS = [15, 20, 15, 10, 15, 10, 30]

DEFAULT_TITLE = "SMB FundTrack Financial Report"


@dataclass(frozen=True)
class ReportMetadata:
    """Descriptive information written at the top of the Summary sheet."""

    title: str
    period: Period
    generated_at: datetime


def build_report_metadata(
    period: Period,
    *,
    title: str = DEFAULT_TITLE,
    generated_at: Optional[datetime] = None,
) -> ReportMetadata:
    """Build report metadata, suffixing the title with the period kind."""
    return ReportMetadata(
        title=f"{title} - {period.kind.capitalize()}",
        period=period,
        generated_at=generated_at or datetime.now(),
    )


def report_filename(metadata: ReportMetadata) -> str:
    """File name embedding the period kind and the generation date."""
    generated = metadata.generated_at.date().isoformat()
    return f"smb-fundtrack-report-{metadata.period.kind}-{generated}.xlsx"


def build_summary_rows(
    summary: ReportSummary, metadata: ReportMetadata
) -> list[list[Any]]:
    """
    Lay out the Summary sheet as rows of (at most two) cells.

    Empty separator rows are represented by ``[None, None]``.
    """
    blank: list[Any] = [None, None]
    period = metadata.period

    rows: list[list[Any]] = [
        [metadata.title, None],
        blank,
        ["Report Period:", f"{period.start.isoformat()} to {period.end.isoformat()}"],
        ["Generated:", metadata.generated_at.strftime("%Y-%m-%d %H:%M")],
        blank,
        [SUMMARY_SECTION, None],
        [METRICS_HEADER, "Value"],
    ]
    metrics = summary_metrics_frame(summary)
    rows.extend([metric, value] for metric, value in metrics.itertuples(index=False))

    rows.append(blank)
    rows.append([BREAKDOWN_SECTION, None])
    rows.append(["Type", "Amount"])
    rows.extend(
        [category, float(amount)] for category, amount in summary.ranked_categories()
    )
    return rows


def _set_column_widths(worksheet, widths: Sequence[int]) -> None:
    for index, width in enumerate(widths, start=1):
        worksheet.column_dimensions[get_column_letter(index)].width = width


def export_report(
    summary: ReportSummary,
    expenses: Sequence[Expense],
    funding: Sequence[Funding],
    metadata: ReportMetadata,
) -> bytes:
    """
    Serialize a report into an xlsx workbook.

    Parameters
    ----------
    summary:
        Summary computed by ``engine.summarize`` for the report window.
    expenses, funding:
        Records of the window (already filtered by the caller). Empty lists
        omit the corresponding sheet.
    metadata:
        Title, period and generation timestamp.

    Returns
    -------
    bytes
        The xlsx file content. Inputs are left untouched.
    """
    buffer = io.BytesIO()

    summary_df = pd.DataFrame(build_summary_rows(summary, metadata))

    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        summary_df.to_excel(writer, sheet_name=SUMMARY_SHEET, header=False, index=False)
        _set_column_widths(writer.sheets[SUMMARY_SHEET], SUMMARY_WIDTHS)

        if expenses:
            expenses_export_frame(expenses).to_excel(
                writer, sheet_name=EXPENSES_SHEET, index=False
            )
            _set_column_widths(writer.sheets[EXPENSES_SHEET], EXPENSES_WIDTHS)

        if funding:
            funding_export_frame(funding).to_excel(
                writer, sheet_name=FUNDING_SHEET, index=False
            )
            _set_column_widths(writer.sheets[FUNDING_SHEET], FUNDING_WIDTHS)

    data = buffer.getvalue()
    logger.info(
        "Exported report %r (%d expenses, %d funding records, %d bytes)",
        metadata.title,
        len(expenses),
        len(funding),
        len(data),
    )
    return data


def save_report(data: bytes, metadata: ReportMetadata, output_dir: Path) -> Path:
    """Write an exported workbook to ``output_dir`` and return its path."""
    output_dir.mkdir(parents=True, exist_ok=True)
    path = output_dir / report_filename(metadata)
    path.write_bytes(data)
    logger.info("Wrote report file %s", path)
    return path


def read_summary_metrics(data: bytes) -> dict[str, float]:
    """
    Read the metric/value table back from an exported workbook.

    Returns
    -------
    dict[str, float]
        Metric label -> value, in sheet order.

    Raises
    ------
    ValueError
        If the Summary sheet has no metric table.
    """
    sheet = pd.read_excel(
        io.BytesIO(data), sheet_name=SUMMARY_SHEET, header=None, engine="openpyxl"
    )

    labels = sheet.iloc[:, 0].tolist()
    try:
        header_row = labels.index(METRICS_HEADER)
    except ValueError as exc:
        raise ValueError("Summary sheet does not contain a metric table.") from exc

    metrics: dict[str, float] = {}
    for _, row in sheet.iloc[header_row + 1 :].iterrows():
        label = row.iloc[0]
        value = pd.to_numeric(row.iloc[1], errors="coerce")
        if pd.isna(label) or pd.isna(value):
            break
        metrics[str(label)] = float(value)
    return metrics
