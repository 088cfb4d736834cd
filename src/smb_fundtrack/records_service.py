# SMB FundTrack - Expense & Funding tracker for SMBs
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.


"""
High-level services for expense and funding records.

This module sits between:
- the low-level database helpers in `db.py`, and
- user-facing layers such as the CLI.

Responsibilities
----------------
1) Input checks
   Required fields (date, category, name, amount for expenses; received
   date, funder name, amount for funding) are checked here, before any
   database call. A missing or blank field raises ``InputError``; nothing
   is silently defaulted. No other business validation is applied.

2) Record invariants
   - A non-recurring expense never carries a due date.
   - A non-repayable funding record never carries a repayment date.
   These are enforced on create and on partial updates.

3) CRUD orchestration
   Create / edit / delete records, mark bills paid and loans repaid,
   attach and detach file metadata, manage the category list.

4) Listing
   Load records for a reporting period, or the full snapshot that the
   aggregation engine works on (``load_all_records``).
"""

from dataclasses import replace
from typing import Optional

from .config import AppConfig
from .db import (
    DatabaseConfig,
    ExpensesFilter,
    FundingFilter,
)
from .db import (
    add_attachment as _db_add_attachment,
)
from .db import (
    add_category as _db_add_category,
)
from .db import (
    delete_expense as _db_delete_expense,
)
from .db import (
    delete_funding as _db_delete_funding,
)
from .db import (
    get_expense_by_id as _db_get_expense_by_id,
)
from .db import (
    get_funding_by_id as _db_get_funding_by_id,
)
from .db import (
    insert_expense as _db_insert_expense,
)
from .db import (
    insert_funding as _db_insert_funding,
)
from .db import (
    list_categories as _db_list_categories,
)
from .db import (
    list_expenses as _db_list_expenses,
)
from .db import (
    list_funding as _db_list_funding,
)
from .db import (
    mark_expense_paid as _db_mark_expense_paid,
)
from .db import (
    mark_funding_repaid as _db_mark_funding_repaid,
)
from .db import (
    remove_attachment as _db_remove_attachment,
)
from .db import (
    update_expense as _db_update_expense,
)
from .db import (
    update_funding as _db_update_funding,
)
from .models import (
    ZERO,
    Attachment,
    Expense,
    ExpenseUpdate,
    Funding,
    FundingUpdate,
    InputError,
    NewAttachment,
    NewExpense,
    NewFunding,
    OwnerKind,
    RecordNotFoundError,
    normalize_category,
    to_amount,
)
from .periods import Period

# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _get_db_config(app_config: AppConfig) -> DatabaseConfig:
    """Access the database configuration from an AppConfig."""
    return app_config.database


def _require(value, label: str):
    """Raise InputError if ``value`` is None or a blank string."""
    if value is None or (isinstance(value, str) and not value.strip()):
        raise InputError(f"{label} is required.")
    return value.strip() if isinstance(value, str) else value


def _check_attachment(attachment: NewAttachment) -> NewAttachment:
    name = _require(attachment.name, "Attachment name")
    reference = _require(attachment.reference, "Attachment reference")
    if attachment.size is None or int(attachment.size) < 0:
        raise InputError("Attachment size must be a non-negative integer.")
    return replace(attachment, name=name, reference=reference)


def _merge_expense_filters(
    base: ExpensesFilter, override: Optional[ExpensesFilter]
) -> ExpensesFilter:
    """Refine a period filter with user filters (override wins when set)."""
    if override is None:
        return base

    return ExpensesFilter(
        start=override.start or base.start,
        end=override.end or base.end,
        category=override.category or base.category,
        name_contains=override.name_contains or base.name_contains,
        recurring_only=base.recurring_only or override.recurring_only,
        unpaid_only=base.unpaid_only or override.unpaid_only,
    )


def _merge_funding_filters(
    base: FundingFilter, override: Optional[FundingFilter]
) -> FundingFilter:
    if override is None:
        return base

    return FundingFilter(
        start=override.start or base.start,
        end=override.end or base.end,
        repayable=override.repayable
        if override.repayable is not None
        else base.repayable,
        outstanding_only=base.outstanding_only or override.outstanding_only,
    )


# ---------------------------------------------------------------------------
# Expenses
# ---------------------------------------------------------------------------


def create_expense(app_config: AppConfig, new_expense: NewExpense) -> Expense:
    """
    Create a new expense.

    Parameters
    ----------
    app_config:
        Global application configuration.
    new_expense:
        Data for the new expense. ``date``, ``category``, ``name`` and
        ``amount`` are required.

    Returns
    -------
    Expense
        The stored expense, including attachment metadata.

    Raises
    ------
    InputError
        If a required field is missing or blank.
    """
    expense_date = _require(new_expense.date, "Date")
    category = normalize_category(new_expense.category)
    name = _require(new_expense.name, "Name")
    amount = to_amount(_require(new_expense.amount, "Amount"))

    gst_amount = (
        to_amount(new_expense.gst_amount)
        if new_expense.gst_amount is not None
        else ZERO
    )

    checked = replace(
        new_expense,
        date=expense_date,
        category=category,
        name=name,
        amount=amount,
        gst_amount=gst_amount,
        due_date=new_expense.due_date if new_expense.is_recurring else None,
        attachments=tuple(_check_attachment(a) for a in new_expense.attachments),
    )
    return _db_insert_expense(_get_db_config(app_config), checked)


def get_expense(app_config: AppConfig, expense_id: int) -> Expense:
    """Load an expense, raising RecordNotFoundError if it does not exist."""
    expense = _db_get_expense_by_id(_get_db_config(app_config), expense_id)
    if expense is None:
        raise RecordNotFoundError(f"Expense #{expense_id} does not exist.")
    return expense


def edit_expense(
    app_config: AppConfig,
    expense_id: int,
    update: ExpenseUpdate,
) -> Expense:
    """
    Edit an existing expense using a partial update.

    Only non-None attributes of ``update`` are changed. A due date is
    ignored when the expense is (or becomes) non-recurring.

    Raises
    ------
    InputError
        If the update is empty or sets a required field to a blank value.
    RecordNotFoundError
        If the expense does not exist.
    """
    if update == ExpenseUpdate():
        raise InputError("No fields to update.")

    current = get_expense(app_config, expense_id)

    if update.category is not None:
        update = replace(update, category=normalize_category(update.category))
    if update.name is not None:
        update = replace(update, name=_require(update.name, "Name"))
    if update.amount is not None:
        update = replace(update, amount=to_amount(update.amount))
    if update.gst_amount is not None:
        update = replace(update, gst_amount=to_amount(update.gst_amount))

    recurring = (
        update.is_recurring if update.is_recurring is not None else current.is_recurring
    )
    if not recurring and update.due_date is not None:
        update = replace(update, due_date=None)
        if update == ExpenseUpdate():
            return current

    return _db_update_expense(_get_db_config(app_config), expense_id, update)


def remove_expense(app_config: AppConfig, expense_id: int) -> None:
    """Delete an expense and its attachment metadata."""
    _db_delete_expense(_get_db_config(app_config), expense_id)


def mark_paid(app_config: AppConfig, expense_id: int) -> Expense:
    """Mark a recurring bill as paid. It then leaves the reminder buckets."""
    if not get_expense(app_config, expense_id).is_recurring:
        raise InputError(f"Expense #{expense_id} is not a recurring bill.")
    return _db_mark_expense_paid(_get_db_config(app_config), expense_id)


def list_expenses_for_period(
    app_config: AppConfig,
    period: Period,
    extra_filters: Optional[ExpensesFilter] = None,
    *,
    order_by: tuple[str, str] = ("date", "DESC"),
) -> list[Expense]:
    """
    List expenses dated within ``period`` (inclusive bounds).

    ``extra_filters`` can narrow the result (category, name search,
    recurring/unpaid flags).
    """
    base_filter = ExpensesFilter(start=period.start, end=period.end)
    merged = _merge_expense_filters(base_filter, extra_filters)
    return _db_list_expenses(_get_db_config(app_config), merged, order_by=order_by)


def search_expenses(
    app_config: AppConfig,
    filters: ExpensesFilter,
    *,
    order_by: tuple[str, str] = ("date", "DESC"),
) -> list[Expense]:
    """Search expenses with a caller-built filter (no implicit date bounds)."""
    return _db_list_expenses(_get_db_config(app_config), filters, order_by=order_by)


# ---------------------------------------------------------------------------
# Funding
# ---------------------------------------------------------------------------


def create_funding(app_config: AppConfig, new_funding: NewFunding) -> Funding:
    """
    Create a new funding record.

    ``received_date``, ``funder_name`` and ``amount`` are required. The
    repayment date is required for repayable funding and dropped otherwise.

    Raises
    ------
    InputError
        If a required field is missing or blank, or repayable funding has
        no repayment date.
    """
    received = _require(new_funding.received_date, "Received date")
    funder_name = _require(new_funding.funder_name, "Funder name")
    amount = to_amount(_require(new_funding.amount, "Amount"))
    if new_funding.is_repayable and new_funding.repayment_date is None:
        raise InputError("Repayment date is required for repayable funding.")

    description = new_funding.description
    if description is not None:
        description = description.strip() or None

    checked = replace(
        new_funding,
        received_date=received,
        funder_name=funder_name,
        amount=amount,
        repayment_date=new_funding.repayment_date
        if new_funding.is_repayable
        else None,
        description=description,
        attachments=tuple(_check_attachment(a) for a in new_funding.attachments),
    )
    return _db_insert_funding(_get_db_config(app_config), checked)


def get_funding(app_config: AppConfig, funding_id: int) -> Funding:
    """Load a funding record, raising RecordNotFoundError if missing."""
    funding = _db_get_funding_by_id(_get_db_config(app_config), funding_id)
    if funding is None:
        raise RecordNotFoundError(f"Funding #{funding_id} does not exist.")
    return funding


def edit_funding(
    app_config: AppConfig,
    funding_id: int,
    update: FundingUpdate,
) -> Funding:
    """
    Edit an existing funding record using a partial update.

    Raises
    ------
    InputError
        If the update is empty, blanks the funder name or leaves repayable
        funding without a repayment date.
    RecordNotFoundError
        If the funding record does not exist.
    """
    if update == FundingUpdate():
        raise InputError("No fields to update.")

    current = get_funding(app_config, funding_id)

    if update.funder_name is not None:
        update = replace(update, funder_name=_require(update.funder_name, "Funder name"))
    if update.amount is not None:
        update = replace(update, amount=to_amount(update.amount))

    repayable = (
        update.is_repayable
        if update.is_repayable is not None
        else current.is_repayable
    )
    if not repayable and update.repayment_date is not None:
        update = replace(update, repayment_date=None)
        if update == FundingUpdate():
            return current
    if repayable and (update.repayment_date or current.repayment_date) is None:
        raise InputError("Repayment date is required for repayable funding.")

    return _db_update_funding(_get_db_config(app_config), funding_id, update)


def remove_funding(app_config: AppConfig, funding_id: int) -> None:
    """Delete a funding record and its attachment metadata."""
    _db_delete_funding(_get_db_config(app_config), funding_id)


def mark_repaid(app_config: AppConfig, funding_id: int) -> Funding:
    """Mark repayable funding as repaid. It then leaves the repayment alerts."""
    return _db_mark_funding_repaid(_get_db_config(app_config), funding_id)


def list_funding_for_period(
    app_config: AppConfig,
    period: Period,
    extra_filters: Optional[FundingFilter] = None,
    *,
    order_by: tuple[str, str] = ("received_date", "DESC"),
) -> list[Funding]:
    """List funding records received within ``period`` (inclusive bounds)."""
    base_filter = FundingFilter(start=period.start, end=period.end)
    merged = _merge_funding_filters(base_filter, extra_filters)
    return _db_list_funding(_get_db_config(app_config), merged, order_by=order_by)


def search_funding(
    app_config: AppConfig,
    filters: FundingFilter,
    *,
    order_by: tuple[str, str] = ("received_date", "DESC"),
) -> list[Funding]:
    """Search funding records with a caller-built filter."""
    return _db_list_funding(_get_db_config(app_config), filters, order_by=order_by)


# ---------------------------------------------------------------------------
# Snapshot for the aggregation engine
# ---------------------------------------------------------------------------


def load_all_records(app_config: AppConfig) -> tuple[list[Expense], list[Funding]]:
    """
    Load every expense and funding record.

    The aggregation engine filters in memory, so reports, reminders and the
    dashboard all start from this snapshot.
    """
    db_cfg = _get_db_config(app_config)
    return _db_list_expenses(db_cfg), _db_list_funding(db_cfg)


# ---------------------------------------------------------------------------
# Attachments
# ---------------------------------------------------------------------------


def attach_file(
    app_config: AppConfig,
    owner_kind: OwnerKind,
    owner_id: int,
    attachment: NewAttachment,
) -> Attachment:
    """
    Record attachment metadata on an expense or a funding record.

    Only metadata is stored: the ``reference`` points to wherever the file
    content lives.

    Raises
    ------
    InputError
        If the attachment name or reference is blank, or the size negative.
    RecordNotFoundError
        If the owning record does not exist.
    """
    checked = _check_attachment(attachment)
    return _db_add_attachment(
        _get_db_config(app_config), owner_kind, owner_id, checked
    )


def detach_file(app_config: AppConfig, attachment_id: int) -> None:
    """Remove attachment metadata by id."""
    _db_remove_attachment(_get_db_config(app_config), attachment_id)


# ---------------------------------------------------------------------------
# Categories
# ---------------------------------------------------------------------------


def list_categories(app_config: AppConfig) -> list[str]:
    """Return the known category labels (defaults first)."""
    return _db_list_categories(_get_db_config(app_config))


def register_category(app_config: AppConfig, label: Optional[str]) -> bool:
    """
    Add a category label to the user-extensible list.

    Returns
    -------
    bool
        True if the label was added, False if it already existed.

    Raises
    ------
    InputError
        If the label is blank.
    """
    return _db_add_category(_get_db_config(app_config), normalize_category(label))
