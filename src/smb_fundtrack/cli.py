# SMB FundTrack - Expense & Funding tracker for SMBs
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Command-Line Interface (CLI) for SMB FundTrack.

This module wires together the main building blocks of SMB FundTrack:

- global configuration (currency, database, reminders, dashboard, export),
- record services (expenses, funding, attachments, categories),
- aggregation engine (report summaries, reminders, dashboard KPIs),
- view helpers (tabular rendering) and the xlsx report exporter.

The CLI is intentionally thin: it does not implement financial logic
itself. It orchestrates the underlying modules based on command-line
arguments and the configuration file.


Commands
--------

    expenses   add | list | edit | delete | mark-paid
    funding    add | list | edit | delete | mark-repaid
    attachments add | remove
    categories list | add
    report     summary for a window, optionally exported to xlsx
    reminders  bill reminders and repayment alerts
    dashboard  KPIs, month trends and recent records


Configuration
-------------

By default, the CLI reads ``smb_fundtrack_config.toml`` in the current
working directory. Use ``--config PATH`` to point to another file.


Period selection
----------------

``report`` and the ``list`` commands accept:

- ``--period weekly|monthly|yearly|custom``
- ``--from-date YYYY-MM-DD`` / ``--to-date YYYY-MM-DD``

Custom dates take precedence over ``--period``. ``report`` defaults to
the current month to date; ``list`` commands default to all records.


Errors
------

Missing required fields and unknown record ids are reported as usage
errors (exit status 2). Invalid dates stop the command with a message.
"""

import argparse
import logging
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Optional

from . import __version__
from .config import AppConfig, load_app_config
from .db import ExpensesFilter, FundingFilter, has_records, init_database
from .engine import (
    classify_reminders,
    dashboard_kpis,
    filter_expenses_by_period,
    filter_funding_by_period,
    repayment_alerts,
    summarize,
)
from .exporter import build_report_metadata, export_report, save_report
from .formatting import attachment_kind, format_currency, format_file_size
from .logging_utils import init_logging
from .models import (
    Expense,
    ExpenseUpdate,
    Funding,
    FundingUpdate,
    InputError,
    NewAttachment,
    NewExpense,
    NewFunding,
    RecordNotFoundError,
)
from .periods import PERIOD_KINDS, Period, determine_period_from_args, format_date
from .records_service import (
    attach_file,
    create_expense,
    create_funding,
    detach_file,
    edit_expense,
    edit_funding,
    list_categories,
    list_expenses_for_period,
    list_funding_for_period,
    load_all_records,
    mark_paid,
    mark_repaid,
    register_category,
    remove_expense,
    remove_funding,
    search_expenses,
    search_funding,
)
from .views import (
    category_breakdown_frame,
    expenses_to_dataframe,
    funding_to_dataframe,
    reminders_frame,
    trends_frame,
)

logger = logging.getLogger(__name__)

# --sort choice -> (order_by column, direction).
EXPENSE_SORT_ORDERS = {
    "date": ("date", "DESC"),
    "amount": ("amount", "DESC"),
    "name": ("name", "ASC"),
}
FUNDING_SORT_ORDERS = {
    "date": ("received_date", "DESC"),
    "amount": ("amount", "DESC"),
    "name": ("funder_name", "ASC"),
}


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


def _add_period_arguments(parser: argparse.ArgumentParser, *, default_help: str) -> None:
    """Add --period / --from-date / --to-date to a subcommand parser."""
    parser.add_argument(
        "--period",
        choices=list(PERIOD_KINDS),
        help=(
            "Named report window: weekly (last 7 days), monthly (month to "
            f"date), yearly (year to date) or custom. {default_help}"
        ),
    )
    parser.add_argument(
        "--from-date",
        dest="from_date",
        help=(
            "Custom window start date (YYYY-MM-DD). If provided without "
            "--to-date, the window ends today."
        ),
    )
    parser.add_argument(
        "--to-date",
        dest="to_date",
        help=(
            "Custom window end date (YYYY-MM-DD). If provided without "
            "--from-date, the window starts on the first day of the month."
        ),
    )


def _build_expenses_parser(subparsers) -> None:
    expenses_parser = subparsers.add_parser(
        "expenses",
        help="Record and manage business expenses.",
    )
    expenses_subparsers = expenses_parser.add_subparsers(
        dest="expenses_command",
        metavar="expenses-command",
        help="Expenses subcommands.",
    )

    # expenses add
    add = expenses_subparsers.add_parser("add", help="Record a new expense.")
    add.add_argument("--date", help="Date incurred (YYYY-MM-DD). Required.")
    add.add_argument("--category", help="Expense category (type). Required.")
    add.add_argument("--name", help="Display name of the expense. Required.")
    add.add_argument("--amount", type=Decimal, help="Amount. Required.")
    add.add_argument(
        "--gst-amount",
        dest="gst_amount",
        type=Decimal,
        help="GST amount. Providing it marks the expense as GST applicable.",
    )
    add.add_argument(
        "--recurring",
        action="store_true",
        help="Mark the expense as a recurring bill.",
    )
    add.add_argument(
        "--due-date",
        dest="due_date",
        help="Due date of a recurring bill (YYYY-MM-DD). Ignored otherwise.",
    )

    # expenses list
    list_parser = expenses_subparsers.add_parser(
        "list", help="List expenses, optionally restricted to a window."
    )
    _add_period_arguments(list_parser, default_help="If omitted, all expenses.")
    list_parser.add_argument("--category", help="Exact category (case-insensitive).")
    list_parser.add_argument(
        "--search",
        dest="name_contains",
        help="Case-insensitive substring search on the expense name.",
    )
    list_parser.add_argument(
        "--recurring-only",
        action="store_true",
        help="Only list recurring expenses.",
    )
    list_parser.add_argument(
        "--unpaid-only",
        action="store_true",
        help="Only list expenses not marked as paid.",
    )
    list_parser.add_argument(
        "--sort",
        choices=sorted(EXPENSE_SORT_ORDERS),
        default="date",
        help="Sort by date (newest first), amount (largest first) or name.",
    )

    # expenses edit
    edit = expenses_subparsers.add_parser(
        "edit", help="Edit an existing expense (only given fields change)."
    )
    edit.add_argument("expense_id", type=int, help="Expense id.")
    edit.add_argument("--date", help="New date (YYYY-MM-DD).")
    edit.add_argument("--category", help="New category.")
    edit.add_argument("--name", help="New display name.")
    edit.add_argument("--amount", type=Decimal, help="New amount.")
    edit.add_argument(
        "--gst",
        dest="gst_applicable",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Set or clear the GST-applicable flag.",
    )
    edit.add_argument("--gst-amount", dest="gst_amount", type=Decimal)
    edit.add_argument(
        "--recurring",
        dest="is_recurring",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Set or clear the recurring flag. Clearing it drops the due date.",
    )
    edit.add_argument("--due-date", dest="due_date", help="New due date.")

    # expenses delete / mark-paid
    delete = expenses_subparsers.add_parser(
        "delete", help="Delete an expense and its attachments."
    )
    delete.add_argument("expense_id", type=int, help="Expense id.")

    paid = expenses_subparsers.add_parser(
        "mark-paid", help="Mark a recurring bill as paid."
    )
    paid.add_argument("expense_id", type=int, help="Expense id.")


def _build_funding_parser(subparsers) -> None:
    funding_parser = subparsers.add_parser(
        "funding",
        help="Record and manage funding (grants, loans, investments).",
    )
    funding_subparsers = funding_parser.add_subparsers(
        dest="funding_command",
        metavar="funding-command",
        help="Funding subcommands.",
    )

    # funding add
    add = funding_subparsers.add_parser("add", help="Record received funding.")
    add.add_argument("--date", help="Date received (YYYY-MM-DD). Required.")
    add.add_argument("--funder", dest="funder_name", help="Funder name. Required.")
    add.add_argument("--amount", type=Decimal, help="Amount. Required.")
    add.add_argument(
        "--repayable",
        action="store_true",
        help="Mark the funding as repayable (loan).",
    )
    add.add_argument(
        "--repayment-date",
        dest="repayment_date",
        help="Repayment date (YYYY-MM-DD). Required with --repayable.",
    )
    add.add_argument("--description", help="Free-form description.")

    # funding list
    list_parser = funding_subparsers.add_parser(
        "list", help="List funding records, optionally restricted to a window."
    )
    _add_period_arguments(list_parser, default_help="If omitted, all records.")
    list_parser.add_argument(
        "--repayable",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Only repayable (--repayable) or non-repayable (--no-repayable).",
    )
    list_parser.add_argument(
        "--outstanding-only",
        action="store_true",
        help="Only repayable funding that has not been repaid yet.",
    )
    list_parser.add_argument(
        "--sort",
        choices=sorted(FUNDING_SORT_ORDERS),
        default="date",
        help=(
            "Sort by received date (newest first), amount (largest first) "
            "or funder name."
        ),
    )

    # funding edit
    edit = funding_subparsers.add_parser(
        "edit", help="Edit a funding record (only given fields change)."
    )
    edit.add_argument("funding_id", type=int, help="Funding id.")
    edit.add_argument("--date", help="New received date (YYYY-MM-DD).")
    edit.add_argument("--funder", dest="funder_name", help="New funder name.")
    edit.add_argument("--amount", type=Decimal, help="New amount.")
    edit.add_argument(
        "--repayable",
        dest="is_repayable",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Set or clear the repayable flag. Clearing it drops the date.",
    )
    edit.add_argument("--repayment-date", dest="repayment_date")
    edit.add_argument("--description")

    # funding delete / mark-repaid
    delete = funding_subparsers.add_parser(
        "delete", help="Delete a funding record and its attachments."
    )
    delete.add_argument("funding_id", type=int, help="Funding id.")

    repaid = funding_subparsers.add_parser(
        "mark-repaid", help="Mark repayable funding as repaid."
    )
    repaid.add_argument("funding_id", type=int, help="Funding id.")


def _build_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser for the CLI."""
    ap = argparse.ArgumentParser(
        prog="smb-fundtrack",
        description=(
            "SMB FundTrack - Expense & Funding tracker for SMBs. "
            "Records expenses and funding, summarizes them per report window, "
            "tracks recurring bills and loan repayments, and exports xlsx "
            "reports."
        ),
    )

    # Generic options
    ap.add_argument(
        "--version",
        action="store_true",
        help="Show the installed version of smb_fundtrack and exit.",
    )
    ap.add_argument(
        "--config",
        dest="config_path",
        help=(
            "Path to the main TOML configuration file. If omitted, "
            "'smb_fundtrack_config.toml' in the current directory is used."
        ),
    )
    ap.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging (overrides [logging].level).",
    )

    subparsers = ap.add_subparsers(
        dest="command",
        metavar="command",
        help="One of: expenses, funding, attachments, categories, report, "
        "reminders, dashboard.",
    )

    _build_expenses_parser(subparsers)
    _build_funding_parser(subparsers)

    # ------------------------------------------------------------------
    # attachments
    # ------------------------------------------------------------------
    attachments_parser = subparsers.add_parser(
        "attachments",
        help="Attach file metadata to records, or remove it.",
    )
    attachments_subparsers = attachments_parser.add_subparsers(
        dest="attachments_command",
        metavar="attachments-command",
    )
    att_add = attachments_subparsers.add_parser(
        "add", help="Attach a file reference to an expense or funding record."
    )
    att_add.add_argument("owner_kind", choices=["expense", "funding"])
    att_add.add_argument("owner_id", type=int)
    att_add.add_argument("--name", help="File name. Required.")
    att_add.add_argument("--ref", dest="reference", help="File reference. Required.")
    att_add.add_argument("--size", type=int, default=0, help="File size in bytes.")
    att_add.add_argument(
        "--type",
        dest="mime_type",
        default="application/octet-stream",
        help="MIME type of the file.",
    )
    att_remove = attachments_subparsers.add_parser(
        "remove", help="Remove attachment metadata."
    )
    att_remove.add_argument("attachment_id", type=int)

    # ------------------------------------------------------------------
    # categories
    # ------------------------------------------------------------------
    categories_parser = subparsers.add_parser(
        "categories", help="List or extend expense categories."
    )
    categories_subparsers = categories_parser.add_subparsers(
        dest="categories_command",
        metavar="categories-command",
    )
    categories_subparsers.add_parser("list", help="List known categories.")
    cat_add = categories_subparsers.add_parser("add", help="Add a category.")
    cat_add.add_argument("label", help="Category label.")

    # ------------------------------------------------------------------
    # report / reminders / dashboard
    # ------------------------------------------------------------------
    report_parser = subparsers.add_parser(
        "report", help="Summarize a report window and optionally export it."
    )
    _add_period_arguments(report_parser, default_help="If omitted, monthly.")
    report_parser.add_argument(
        "--export",
        action="store_true",
        help="Write the report as an xlsx workbook.",
    )
    report_parser.add_argument(
        "--output",
        dest="output_dir",
        help=(
            "Output directory for the xlsx report. If omitted, "
            "[export].output_dir from the configuration is used."
        ),
    )

    subparsers.add_parser(
        "reminders", help="Show bill reminders and repayment alerts."
    )
    subparsers.add_parser(
        "dashboard", help="Show dashboard KPIs, month trends and recent records."
    )

    return ap


# ---------------------------------------------------------------------------
# Argument helpers
# ---------------------------------------------------------------------------


def _parse_optional_date(value: Optional[str]) -> Optional[date]:
    """
    Parse an optional CLI date argument (YYYY-MM-DD).

    Raises
    ------
    SystemExit
        If the date format is invalid.
    """
    if value is None:
        return None

    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        msg = f"Invalid date format: {value!r}. Expected YYYY-MM-DD."
        raise SystemExit(msg) from exc


def _optional_period(args: argparse.Namespace) -> Optional[Period]:
    """Return the requested window, or None if no period flag was given."""
    if not (args.period or args.from_date or args.to_date):
        return None
    return _resolve_period(args)


def _resolve_period(args: argparse.Namespace) -> Period:
    """Determine the report window, turning malformed dates into SystemExit."""
    _parse_optional_date(args.from_date)
    _parse_optional_date(args.to_date)
    return determine_period_from_args(args)


def _print_period(period: Period) -> None:
    print(
        f"Applied period: {period.label} "
        f"({period.start.isoformat()} → {period.end.isoformat()})"
    )


def _print_expense(title: str, expense: Expense, currency: str) -> None:
    print(title)
    print(f"  id:          {expense.id}")
    print(f"  date:        {expense.date.isoformat()}")
    print(f"  category:    {expense.category}")
    print(f"  name:        {expense.name}")
    print(f"  amount:      {format_currency(expense.amount, currency)}")
    if expense.gst_applicable:
        print(f"  gst:         {format_currency(expense.gst_amount, currency)}")
    if expense.is_recurring:
        due = format_date(expense.due_date) if expense.due_date else "-"
        status = "paid" if expense.is_paid else "pending"
        print(f"  recurring:   due {due} ({status})")
    for att in expense.attachments:
        print(
            f"  attachment:  #{att.id} {att.name} "
            f"({attachment_kind(att.mime_type)}, {format_file_size(att.size)})"
        )


def _print_funding(title: str, funding: Funding, currency: str) -> None:
    print(title)
    print(f"  id:          {funding.id}")
    print(f"  received:    {funding.received_date.isoformat()}")
    print(f"  funder:      {funding.funder_name}")
    print(f"  amount:      {format_currency(funding.amount, currency)}")
    if funding.is_repayable:
        repay = format_date(funding.repayment_date) if funding.repayment_date else "-"
        status = "repaid" if funding.is_repaid else "outstanding"
        print(f"  repayment:   {repay} ({status})")
    if funding.description:
        print(f"  description: {funding.description}")
    for att in funding.attachments:
        print(
            f"  attachment:  #{att.id} {att.name} "
            f"({attachment_kind(att.mime_type)}, {format_file_size(att.size)})"
        )


# ---------------------------------------------------------------------------
# expenses
# ---------------------------------------------------------------------------


def _handle_expenses_add(args: argparse.Namespace, config: AppConfig) -> None:
    new_expense = NewExpense(
        date=_parse_optional_date(args.date),
        category=args.category,
        name=args.name,
        amount=args.amount,
        gst_applicable=args.gst_amount is not None,
        gst_amount=args.gst_amount if args.gst_amount is not None else Decimal("0"),
        is_recurring=args.recurring,
        due_date=_parse_optional_date(args.due_date),
    )
    expense = create_expense(config, new_expense)
    _print_expense("Expense recorded:", expense, config.currency)


def _handle_expenses_list(args: argparse.Namespace, config: AppConfig) -> None:
    """
    Handle 'expenses list': print matching expenses as a table with a
    footer showing the count and total amount.
    """
    extra_filters = ExpensesFilter(
        category=args.category,
        name_contains=args.name_contains,
        recurring_only=args.recurring_only,
        unpaid_only=args.unpaid_only,
    )
    order_by = EXPENSE_SORT_ORDERS[args.sort]

    period = _optional_period(args)
    if period is None:
        expenses = search_expenses(config, extra_filters, order_by=order_by)
        print("Applied period: all records")
    else:
        expenses = list_expenses_for_period(
            config, period, extra_filters, order_by=order_by
        )
        _print_period(period)

    if not expenses:
        print("No expenses found for the given criteria.")
        return

    print()
    print(expenses_to_dataframe(expenses).to_string(index=False))

    total = sum((e.amount for e in expenses), Decimal("0"))
    print()
    print(
        f"Total expenses: {len(expenses)} | "
        f"Total amount: {format_currency(total, config.currency)}"
    )


def _handle_expenses_edit(args: argparse.Namespace, config: AppConfig) -> None:
    update = ExpenseUpdate(
        date=_parse_optional_date(args.date),
        category=args.category,
        name=args.name,
        amount=args.amount,
        gst_applicable=args.gst_applicable,
        gst_amount=args.gst_amount,
        is_recurring=args.is_recurring,
        due_date=_parse_optional_date(args.due_date),
    )
    expense = edit_expense(config, args.expense_id, update)
    _print_expense("Expense updated:", expense, config.currency)


def _handle_expenses_delete(args: argparse.Namespace, config: AppConfig) -> None:
    remove_expense(config, args.expense_id)
    print(f"Expense #{args.expense_id} deleted.")


def _handle_expenses_mark_paid(args: argparse.Namespace, config: AppConfig) -> None:
    expense = mark_paid(config, args.expense_id)
    _print_expense("Expense marked as paid:", expense, config.currency)


def _handle_expenses_command(args: argparse.Namespace, config: AppConfig) -> None:
    """Dispatch function for the 'expenses' subcommands."""
    subcmd = getattr(args, "expenses_command", None)

    if subcmd == "add":
        _handle_expenses_add(args, config)
    elif subcmd == "list":
        _handle_expenses_list(args, config)
    elif subcmd == "edit":
        _handle_expenses_edit(args, config)
    elif subcmd == "delete":
        _handle_expenses_delete(args, config)
    elif subcmd == "mark-paid":
        _handle_expenses_mark_paid(args, config)
    else:
        print(
            "No expenses subcommand specified. "
            "Available subcommands are: 'add', 'list', 'edit', 'delete', "
            "'mark-paid'."
        )


# ---------------------------------------------------------------------------
# funding
# ---------------------------------------------------------------------------


def _handle_funding_add(args: argparse.Namespace, config: AppConfig) -> None:
    new_funding = NewFunding(
        received_date=_parse_optional_date(args.date),
        funder_name=args.funder_name,
        amount=args.amount,
        is_repayable=args.repayable,
        repayment_date=_parse_optional_date(args.repayment_date),
        description=args.description,
    )
    funding = create_funding(config, new_funding)
    _print_funding("Funding recorded:", funding, config.currency)


def _handle_funding_list(args: argparse.Namespace, config: AppConfig) -> None:
    extra_filters = FundingFilter(
        repayable=args.repayable,
        outstanding_only=args.outstanding_only,
    )
    order_by = FUNDING_SORT_ORDERS[args.sort]

    period = _optional_period(args)
    if period is None:
        funding = search_funding(config, extra_filters, order_by=order_by)
        print("Applied period: all records")
    else:
        funding = list_funding_for_period(
            config, period, extra_filters, order_by=order_by
        )
        _print_period(period)

    if not funding:
        print("No funding records found for the given criteria.")
        return

    print()
    print(funding_to_dataframe(funding).to_string(index=False))

    total = sum((f.amount for f in funding), Decimal("0"))
    print()
    print(
        f"Total records: {len(funding)} | "
        f"Total amount: {format_currency(total, config.currency)}"
    )


def _handle_funding_edit(args: argparse.Namespace, config: AppConfig) -> None:
    update = FundingUpdate(
        received_date=_parse_optional_date(args.date),
        funder_name=args.funder_name,
        amount=args.amount,
        is_repayable=args.is_repayable,
        repayment_date=_parse_optional_date(args.repayment_date),
        description=args.description,
    )
    funding = edit_funding(config, args.funding_id, update)
    _print_funding("Funding updated:", funding, config.currency)


def _handle_funding_delete(args: argparse.Namespace, config: AppConfig) -> None:
    remove_funding(config, args.funding_id)
    print(f"Funding #{args.funding_id} deleted.")


def _handle_funding_mark_repaid(args: argparse.Namespace, config: AppConfig) -> None:
    funding = mark_repaid(config, args.funding_id)
    _print_funding("Funding marked as repaid:", funding, config.currency)


def _handle_funding_command(args: argparse.Namespace, config: AppConfig) -> None:
    """Dispatch function for the 'funding' subcommands."""
    subcmd = getattr(args, "funding_command", None)

    if subcmd == "add":
        _handle_funding_add(args, config)
    elif subcmd == "list":
        _handle_funding_list(args, config)
    elif subcmd == "edit":
        _handle_funding_edit(args, config)
    elif subcmd == "delete":
        _handle_funding_delete(args, config)
    elif subcmd == "mark-repaid":
        _handle_funding_mark_repaid(args, config)
    else:
        print(
            "No funding subcommand specified. "
            "Available subcommands are: 'add', 'list', 'edit', 'delete', "
            "'mark-repaid'."
        )


# ---------------------------------------------------------------------------
# attachments / categories
# ---------------------------------------------------------------------------


def _handle_attachments_command(args: argparse.Namespace, config: AppConfig) -> None:
    """Dispatch function for the 'attachments' subcommands."""
    subcmd = getattr(args, "attachments_command", None)

    if subcmd == "add":
        attachment = attach_file(
            config,
            args.owner_kind,
            args.owner_id,
            NewAttachment(
                name=args.name,
                size=args.size,
                mime_type=args.mime_type,
                reference=args.reference,
            ),
        )
        print(
            f"Attachment #{attachment.id} added to {args.owner_kind} "
            f"#{args.owner_id}: {attachment.name} "
            f"({attachment_kind(attachment.mime_type)}, "
            f"{format_file_size(attachment.size)})"
        )
    elif subcmd == "remove":
        detach_file(config, args.attachment_id)
        print(f"Attachment #{args.attachment_id} removed.")
    else:
        print(
            "No attachments subcommand specified. "
            "Available subcommands are: 'add', 'remove'."
        )


def _handle_categories_command(args: argparse.Namespace, config: AppConfig) -> None:
    """Dispatch function for the 'categories' subcommands."""
    subcmd = getattr(args, "categories_command", None)

    if subcmd == "list":
        for label in list_categories(config):
            print(f"- {label}")
    elif subcmd == "add":
        if register_category(config, args.label):
            print(f"Category added: {args.label.strip()}")
        else:
            print(f"Category already exists: {args.label.strip()}")
    else:
        print(
            "No categories subcommand specified. "
            "Available subcommands are: 'list', 'add'."
        )


# ---------------------------------------------------------------------------
# report / reminders / dashboard
# ---------------------------------------------------------------------------


def _handle_report(args: argparse.Namespace, config: AppConfig) -> None:
    """
    Handle the 'report' command.

    This function:
    - determines the report window from CLI args,
    - loads every record and summarizes the window with the engine,
    - prints the metrics and the category breakdown,
    - optionally exports the report as an xlsx workbook.
    """
    period = _resolve_period(args)
    expenses, funding = load_all_records(config)
    summary = summarize(expenses, funding, period)
    currency = config.currency

    _print_period(period)
    print()
    print("=== Financial summary ===")
    print(f"Total expenses:  {summary.expense_count}")
    print(f"Total amount:    {format_currency(summary.total_amount, currency)}")
    print(f"Total GST:       {format_currency(summary.total_gst, currency)}")
    print(f"Total funding:   {format_currency(summary.total_funding, currency)}")
    print(f"Net cash flow:   {format_currency(summary.net_cash_flow, currency)}")
    print(f"Average expense: {format_currency(summary.average_expense, currency)}")

    if summary.expenses_by_type:
        print()
        print("=== Expenses by type ===")
        breakdown = category_breakdown_frame(summary, with_share=True)
        print(breakdown.to_string(index=False))

    if not args.export:
        return

    metadata = build_report_metadata(period, title=config.report_title)
    data = export_report(
        summary,
        filter_expenses_by_period(expenses, period),
        filter_funding_by_period(funding, period),
        metadata,
    )
    output_dir = Path(args.output_dir) if args.output_dir else config.output_dir
    path = save_report(data, metadata, output_dir)
    print()
    print(f"Wrote {path} ({len(data)} bytes)")


def _handle_reminders(args: argparse.Namespace, config: AppConfig) -> None:
    expenses, funding = load_all_records(config)
    buckets = classify_reminders(
        expenses, upcoming_days=config.reminders.upcoming_days
    )
    alerts = repayment_alerts(
        funding, window_days=config.reminders.repayment_alert_days
    )

    print(
        f"Bill reminders: {len(buckets.overdue)} overdue, "
        f"{len(buckets.upcoming)} due within "
        f"{config.reminders.upcoming_days} days, {len(buckets.later)} later."
    )
    if buckets.total:
        print()
        print(reminders_frame(buckets).to_string(index=False))

    print()
    print(
        f"Repayment alerts (next {config.reminders.repayment_alert_days} days): "
        f"{len(alerts)}"
    )
    if alerts:
        print()
        print(funding_to_dataframe(alerts).to_string(index=False))


def _handle_dashboard(args: argparse.Namespace, config: AppConfig) -> None:
    expenses, funding = load_all_records(config)
    kpis = dashboard_kpis(
        expenses,
        funding,
        upcoming_days=config.reminders.upcoming_days,
        repayment_alert_days=config.reminders.repayment_alert_days,
        trend_months=config.dashboard.trend_months,
        recent_expenses=config.dashboard.recent_expenses,
        recent_funding=config.dashboard.recent_funding,
    )
    currency = config.currency
    current = f"{kpis.current_month.label} {kpis.current_month.start.year}"
    previous = f"{kpis.previous_month.label} {kpis.previous_month.start.year}"

    print("=== Dashboard ===")
    print(
        f"Expenses {current}: {format_currency(kpis.current_month_total, currency)} "
        f"({kpis.monthly_change_pct:+.1f}% vs {previous})"
    )
    print(
        f"GST {current}: {format_currency(kpis.current_month_gst, currency)} "
        f"({kpis.gst_change_pct:+.1f}% vs {previous}), "
        f"{kpis.gst_expense_count} GST expenses, "
        f"average {format_currency(kpis.average_gst, currency)}"
    )
    print(f"Total funding: {format_currency(kpis.total_funding, currency)}")
    print(
        "Outstanding repayable funding: "
        f"{format_currency(kpis.outstanding_repayable, currency)}"
    )
    print(f"Overdue bills: {len(kpis.overdue_bills)}")
    for bill in kpis.overdue_bills:
        print(
            f"  - {bill.name} ({format_currency(bill.amount, currency)}), "
            f"due {format_date(bill.due_date)}"
        )
    print(f"Upcoming repayments: {len(kpis.upcoming_repayments)}")
    for fund in kpis.upcoming_repayments:
        print(
            f"  - {fund.funder_name} ({format_currency(fund.amount, currency)}), "
            f"due {format_date(fund.repayment_date)}"
        )

    print()
    print("=== Month trends ===")
    print(trends_frame(kpis.trends).to_string(index=False))

    if kpis.recent_expenses:
        print()
        print("=== Recent expenses ===")
        recent = expenses_to_dataframe(kpis.recent_expenses)
        print(recent[["date", "name", "category", "amount"]].to_string(index=False))

    if kpis.recent_funding:
        print()
        print("=== Recent funding ===")
        recent = funding_to_dataframe(kpis.recent_funding)
        print(
            recent[["received_date", "funder_name", "amount"]].to_string(index=False)
        )


def _dispatch(args: argparse.Namespace, config: AppConfig) -> None:
    command = getattr(args, "command", None)

    if command == "expenses":
        _handle_expenses_command(args, config)
    elif command == "funding":
        _handle_funding_command(args, config)
    elif command == "attachments":
        _handle_attachments_command(args, config)
    elif command == "categories":
        _handle_categories_command(args, config)
    elif command == "report":
        _handle_report(args, config)
    elif command == "reminders":
        _handle_reminders(args, config)
    elif command == "dashboard":
        _handle_dashboard(args, config)
    else:
        print(
            "No command specified. Available commands are: 'expenses', "
            "'funding', 'attachments', 'categories', 'report', 'reminders', "
            "'dashboard'."
        )


def main(argv: Optional[list[str]] = None) -> None:
    """Entry point for the SMB FundTrack CLI.

    This function parses command-line arguments, loads the configuration,
    sets up logging, initializes the database and runs the requested
    command. Missing required fields and unknown record ids are reported
    through ``parser.error``.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    # --version: short-circuit and exit early.
    if args.version:
        print(f"smb_fundtrack version {__version__}")
        return

    # 1) Load application configuration
    if args.config_path:
        config = load_app_config(args.config_path)
    else:
        config = load_app_config()

    # 2) Logging
    init_logging("DEBUG" if args.verbose else config.log_level)
    logger.debug("Loaded configuration, database at %s", config.database.path)

    # 3) Initialize the database (create file and schema if needed)
    init_database(config.database)

    if args.command in {"report", "reminders", "dashboard"} and not has_records(
        config.database
    ):
        print("Warning: database is empty. Use 'expenses add' or 'funding add'.")

    # 4) Run the command
    try:
        _dispatch(args, config)
    except (InputError, RecordNotFoundError) as exc:
        parser.error(str(exc))


if __name__ == "__main__":
    main()
