# SMB FundTrack - Expense & Funding tracker for SMBs
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Domain types for SMB FundTrack.

This module defines the value objects shared by every layer of the
application:

- ``Expense`` and ``Funding``: fully materialized records, as returned by
  the record store (including attachment metadata),
- ``NewExpense`` / ``ExpenseUpdate`` and ``NewFunding`` / ``FundingUpdate``:
  inputs for create and partial-update operations,
- ``Attachment`` / ``NewAttachment``: closed value types describing file
  attachments (metadata only, the file content is never stored),
- the error types raised by the services (``InputError``,
  ``RecordNotFoundError``).

Monetary amounts are represented as ``decimal.Decimal`` so that sums and
per-category breakdowns add up exactly. The record store persists them as
integer cents.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Literal, Optional, Union

AmountLike = Union[Decimal, int, float, str]

OwnerKind = Literal["expense", "funding"]
"""Type of record an attachment belongs to."""

DEFAULT_CATEGORIES: tuple[str, ...] = (
    "Rent",
    "Operation Expense",
    "Subscriptions & Due",
    "Salary",
    "Utilities",
    "Transportation",
    "Food & Dining",
    "Entertainment",
    "Health & Medical",
    "Shopping",
    "Marketing & Advertising",
    "Auditing",
    "Employee Training",
)

ZERO = Decimal("0")


class InputError(ValueError):
    """Raised when a required field is missing or an input is unusable."""


class RecordNotFoundError(LookupError):
    """Raised when an operation targets a record id that does not exist."""


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def to_amount(value: AmountLike) -> Decimal:
    """
    Convert a number-like value into a Decimal amount.

    Floats go through ``str()`` so that ``0.1`` becomes ``Decimal("0.1")``
    and not its binary approximation.
    """
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, float):
        result = Decimal(str(value))
    else:
        try:
            result = Decimal(str(value).strip())
        except (InvalidOperation, ValueError) as exc:
            raise InputError(f"Invalid amount: {value!r}") from exc
    if not result.is_finite():
        raise InputError(f"Invalid amount: {value!r}")
    return result


def amount_to_cents(amount: Decimal) -> int:
    """Round a Decimal amount to integer cents (half up)."""
    return int((amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def cents_to_amount(cents: int) -> Decimal:
    """Convert integer cents back to a Decimal amount with 2 decimals."""
    return (Decimal(cents) / 100).quantize(Decimal("0.01"))


def normalize_category(label: Optional[str]) -> str:
    """
    Validate and normalize a category label.

    Categories are an open set: any non-blank label is accepted, with
    surrounding whitespace removed.

    Raises:
        InputError: if the label is missing or blank.
    """
    if label is None or not str(label).strip():
        raise InputError("Category is required.")
    return str(label).strip()


# ---------------------------------------------------------------------------
# Attachments
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Attachment:
    """Metadata of a file attached to an expense or a funding record."""

    id: int
    name: str
    size: int
    mime_type: str
    reference: str
    uploaded_at: Optional[datetime] = None


@dataclass(frozen=True)
class NewAttachment:
    """Data required to attach a file to a record."""

    name: str
    size: int
    mime_type: str
    reference: str


# ---------------------------------------------------------------------------
# Expenses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Expense:
    """
    An expense as stored in the record store.

    Invariants
    ----------
    - ``due_date`` is only set for recurring expenses.
    - The GST amount only counts when ``gst_applicable`` is set; use
      ``effective_gst`` rather than ``gst_amount`` in computations.
    """

    id: int
    date: date
    category: str
    name: str
    amount: Decimal
    gst_applicable: bool = False
    gst_amount: Decimal = ZERO
    is_recurring: bool = False
    due_date: Optional[date] = None
    is_paid: bool = False
    created_at: Optional[datetime] = None
    attachments: tuple[Attachment, ...] = field(default_factory=tuple)

    @property
    def effective_gst(self) -> Decimal:
        """GST amount that counts towards totals (zero when not applicable)."""
        return self.gst_amount if self.gst_applicable else ZERO

    @property
    def is_reminder_candidate(self) -> bool:
        """True for recurring, unpaid expenses that carry a due date."""
        return self.is_recurring and self.due_date is not None and not self.is_paid


@dataclass(frozen=True)
class NewExpense:
    """
    Data required to create a new expense.

    ``date``, ``category``, ``name`` and ``amount`` are required; they are
    typed as optional so that the record service can report a missing field
    as an ``InputError`` instead of failing on construction.
    """

    date: Optional[date]
    category: Optional[str]
    name: Optional[str]
    amount: Optional[Decimal]
    gst_applicable: bool = False
    gst_amount: Decimal = ZERO
    is_recurring: bool = False
    due_date: Optional[date] = None
    attachments: tuple[NewAttachment, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class ExpenseUpdate:
    """
    Fields that can be updated on an existing expense.

    Each attribute is optional. Only non-None values are applied.
    """

    date: Optional[date] = None
    category: Optional[str] = None
    name: Optional[str] = None
    amount: Optional[Decimal] = None
    gst_applicable: Optional[bool] = None
    gst_amount: Optional[Decimal] = None
    is_recurring: Optional[bool] = None
    due_date: Optional[date] = None
    is_paid: Optional[bool] = None


# ---------------------------------------------------------------------------
# Funding
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Funding:
    """
    A funding event (grant, loan, investment) as stored in the record store.

    ``repayment_date`` and ``is_repaid`` only carry meaning when
    ``is_repayable`` is set.
    """

    id: int
    received_date: date
    funder_name: str
    amount: Decimal
    is_repayable: bool = False
    repayment_date: Optional[date] = None
    is_repaid: bool = False
    description: Optional[str] = None
    created_at: Optional[datetime] = None
    attachments: tuple[Attachment, ...] = field(default_factory=tuple)

    @property
    def is_outstanding(self) -> bool:
        """True for repayable funding that has not been repaid yet."""
        return self.is_repayable and not self.is_repaid


@dataclass(frozen=True)
class NewFunding:
    """Data required to create a new funding record."""

    received_date: Optional[date]
    funder_name: Optional[str]
    amount: Optional[Decimal]
    is_repayable: bool = False
    repayment_date: Optional[date] = None
    description: Optional[str] = None
    attachments: tuple[NewAttachment, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class FundingUpdate:
    """Partial update for a funding record. Only non-None values are applied."""

    received_date: Optional[date] = None
    funder_name: Optional[str] = None
    amount: Optional[Decimal] = None
    is_repayable: Optional[bool] = None
    repayment_date: Optional[date] = None
    is_repaid: Optional[bool] = None
    description: Optional[str] = None
