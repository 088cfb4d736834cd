# SMB FundTrack - Expense & Funding tracker for SMBs
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.


"""
Database layer for SMB FundTrack.

This module provides the low-level accessors for the SQLite database that
stores expenses, funding records, attachment metadata and the list of
expense categories. It is responsible for:

- Initializing the database schema and seeding the default categories.
- CRUD operations on expenses and funding records (partial updates).
- Marking recurring bills as paid and repayable funding as repaid.
- Recording and removing attachment metadata.
- Searching records with simple filters.

The aggregation engine never calls this module: services load record
snapshots here and hand them over to the engine.

------------------------------------------------------------------------------
Schema Overview
------------------------------------------------------------------------------

1) expenses
   - id               INTEGER PRIMARY KEY AUTOINCREMENT
   - date             TEXT    NOT NULL  -- ISO date 'YYYY-MM-DD'
   - category         TEXT    NOT NULL
   - name             TEXT    NOT NULL
   - amount_cents     INTEGER NOT NULL
   - gst_applicable   INTEGER NOT NULL DEFAULT 0
   - gst_amount_cents INTEGER NOT NULL DEFAULT 0
   - is_recurring     INTEGER NOT NULL DEFAULT 0
   - due_date         TEXT              -- only for recurring expenses
   - is_paid          INTEGER NOT NULL DEFAULT 0
   - created_at       TEXT    NOT NULL  -- ISO datetime, UTC
   - updated_at       TEXT

2) funding
   - id               INTEGER PRIMARY KEY AUTOINCREMENT
   - received_date    TEXT    NOT NULL
   - funder_name      TEXT    NOT NULL
   - amount_cents     INTEGER NOT NULL
   - is_repayable     INTEGER NOT NULL DEFAULT 0
   - repayment_date   TEXT              -- only for repayable funding
   - is_repaid        INTEGER NOT NULL DEFAULT 0
   - description      TEXT
   - created_at       TEXT    NOT NULL
   - updated_at       TEXT

3) attachments
   One row per attached file (metadata only).
   - id, owner_kind ('expense' | 'funding'), owner_id,
     file_name, file_size, file_type, file_ref, uploaded_at

4) categories
   User-extensible list of expense categories (case-insensitive unique).

Amounts are stored as integer cents and converted back to Decimal when
records are materialized. Deleting a record also deletes its attachments.
"""

import logging
import sqlite3
from collections import defaultdict
from dataclasses import dataclass
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Optional

from .models import (
    DEFAULT_CATEGORIES,
    Attachment,
    Expense,
    ExpenseUpdate,
    Funding,
    FundingUpdate,
    NewAttachment,
    NewExpense,
    NewFunding,
    OwnerKind,
    RecordNotFoundError,
    amount_to_cents,
    cents_to_amount,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DatabaseConfig:
    """Database settings (engine name and SQLite file path)."""

    engine: str
    path: Path


@dataclass(frozen=True)
class ExpensesFilter:
    """
    Filters used to search expenses. Date bounds are inclusive.

    Attributes
    ----------
    start, end:
        Bounds on the expense date.
    category:
        Exact category label (case-insensitive).
    name_contains:
        Case-insensitive substring search on the name.
    recurring_only:
        Only return recurring expenses.
    unpaid_only:
        Only return expenses that are not marked as paid.
    """

    start: Optional[date] = None
    end: Optional[date] = None
    category: Optional[str] = None
    name_contains: Optional[str] = None
    recurring_only: bool = False
    unpaid_only: bool = False


@dataclass(frozen=True)
class FundingFilter:
    """
    Filters used to search funding records. Date bounds are inclusive.

    ``repayable`` restricts to repayable (True) or non-repayable (False)
    funding; None keeps both.
    """

    start: Optional[date] = None
    end: Optional[date] = None
    repayable: Optional[bool] = None
    outstanding_only: bool = False


_EXPENSE_COLUMNS = """
    id, date, category, name, amount_cents, gst_applicable,
    gst_amount_cents, is_recurring, due_date, is_paid, created_at
"""

_FUNDING_COLUMNS = """
    id, received_date, funder_name, amount_cents, is_repayable,
    repayment_date, is_repaid, description, created_at
"""


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _ensure_sqlite(cfg: DatabaseConfig) -> None:
    """Raise if the configuration does not refer to a supported engine."""
    if cfg.engine.lower() != "sqlite":
        msg = (
            f"Unsupported database engine: {cfg.engine!r}. "
            "Only 'sqlite' is supported for now."
        )
        raise ValueError(msg)


def _connect(cfg: DatabaseConfig) -> sqlite3.Connection:
    """
    Open a SQLite connection with foreign keys enabled.

    The caller is responsible for closing the connection.
    """
    _ensure_sqlite(cfg)
    conn = sqlite3.connect(cfg.path)
    conn.execute("PRAGMA foreign_keys = ON;")
    return conn


def _now_utc_iso() -> str:
    """Return the current UTC datetime as ISO string."""
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


def _iso_or_none(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _date_or_none(value: Optional[str]) -> Optional[date]:
    return date.fromisoformat(value) if value is not None else None


def _datetime_or_none(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value is not None else None


def _create_schema_if_needed(conn: sqlite3.Connection) -> None:
    """
    Create tables and indexes if they do not exist yet.

    This function is idempotent and can be called multiple times safely.
    """
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS expenses (
            id               INTEGER PRIMARY KEY AUTOINCREMENT,
            date             TEXT    NOT NULL,
            category         TEXT    NOT NULL,
            name             TEXT    NOT NULL,
            amount_cents     INTEGER NOT NULL,
            gst_applicable   INTEGER NOT NULL DEFAULT 0,
            gst_amount_cents INTEGER NOT NULL DEFAULT 0,
            is_recurring     INTEGER NOT NULL DEFAULT 0,
            due_date         TEXT,
            is_paid          INTEGER NOT NULL DEFAULT 0,
            created_at       TEXT    NOT NULL,
            updated_at       TEXT
        );
        """
    )

    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS funding (
            id              INTEGER PRIMARY KEY AUTOINCREMENT,
            received_date   TEXT    NOT NULL,
            funder_name     TEXT    NOT NULL,
            amount_cents    INTEGER NOT NULL,
            is_repayable    INTEGER NOT NULL DEFAULT 0,
            repayment_date  TEXT,
            is_repaid       INTEGER NOT NULL DEFAULT 0,
            description     TEXT,
            created_at      TEXT    NOT NULL,
            updated_at      TEXT
        );
        """
    )

    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS attachments (
            id           INTEGER PRIMARY KEY AUTOINCREMENT,
            owner_kind   TEXT    NOT NULL CHECK (owner_kind IN ('expense', 'funding')),
            owner_id     INTEGER NOT NULL,
            file_name    TEXT    NOT NULL,
            file_size    INTEGER NOT NULL DEFAULT 0,
            file_type    TEXT    NOT NULL DEFAULT '',
            file_ref     TEXT    NOT NULL,
            uploaded_at  TEXT    NOT NULL
        );
        """
    )

    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS categories (
            id          INTEGER PRIMARY KEY AUTOINCREMENT,
            name        TEXT    NOT NULL UNIQUE COLLATE NOCASE,
            created_at  TEXT    NOT NULL
        );
        """
    )

    # Indexes
    conn.execute("CREATE INDEX IF NOT EXISTS idx_expenses_date ON expenses(date);")
    conn.execute(
        "CREATE INDEX IF NOT EXISTS idx_funding_date ON funding(received_date);"
    )
    conn.execute(
        """
        CREATE INDEX IF NOT EXISTS idx_attachments_owner
            ON attachments(owner_kind, owner_id);
        """
    )

    # Default categories (no-op when already present).
    now = _now_utc_iso()
    conn.executemany(
        "INSERT OR IGNORE INTO categories (name, created_at) VALUES (?, ?);",
        [(name, now) for name in DEFAULT_CATEGORIES],
    )

    conn.commit()


def _row_to_attachment(row: tuple) -> Attachment:
    """
    Expected row layout:
      (id, file_name, file_size, file_type, file_ref, uploaded_at)
    """
    att_id, name, size, mime_type, reference, uploaded_at = row
    return Attachment(
        id=att_id,
        name=name,
        size=int(size),
        mime_type=mime_type,
        reference=reference,
        uploaded_at=_datetime_or_none(uploaded_at),
    )


def _load_attachments(
    conn: sqlite3.Connection, owner_kind: OwnerKind, owner_ids: list[int]
) -> dict[int, tuple[Attachment, ...]]:
    """Load attachments for several owners in a single query."""
    if not owner_ids:
        return {}

    placeholders = ", ".join("?" for _ in owner_ids)
    cur = conn.execute(
        f"""
        SELECT owner_id, id, file_name, file_size, file_type, file_ref, uploaded_at
          FROM attachments
         WHERE owner_kind = ?
           AND owner_id IN ({placeholders})
         ORDER BY id;
        """,
        [owner_kind, *owner_ids],
    )

    grouped: dict[int, list[Attachment]] = defaultdict(list)
    for owner_id, *rest in cur.fetchall():
        grouped[owner_id].append(_row_to_attachment(tuple(rest)))
    return {owner_id: tuple(items) for owner_id, items in grouped.items()}


def _insert_attachments(
    cur: sqlite3.Cursor,
    owner_kind: OwnerKind,
    owner_id: int,
    attachments: tuple[NewAttachment, ...],
    uploaded_at: str,
) -> None:
    cur.executemany(
        """
        INSERT INTO attachments (
            owner_kind, owner_id, file_name, file_size, file_type,
            file_ref, uploaded_at
        )
        VALUES (?, ?, ?, ?, ?, ?, ?);
        """,
        [
            (
                owner_kind,
                owner_id,
                att.name,
                int(att.size),
                att.mime_type,
                att.reference,
                uploaded_at,
            )
            for att in attachments
        ],
    )


def _row_to_expense(row: tuple, attachments: tuple[Attachment, ...]) -> Expense:
    """
    Convert a database row into an Expense.

    Expected row layout: see ``_EXPENSE_COLUMNS``.
    """
    (
        expense_id,
        date_str,
        category,
        name,
        amount_cents,
        gst_applicable,
        gst_amount_cents,
        is_recurring,
        due_date_str,
        is_paid,
        created_at_str,
    ) = row

    return Expense(
        id=expense_id,
        date=date.fromisoformat(date_str),
        category=category,
        name=name,
        amount=cents_to_amount(amount_cents),
        gst_applicable=bool(gst_applicable),
        gst_amount=cents_to_amount(gst_amount_cents),
        is_recurring=bool(is_recurring),
        due_date=_date_or_none(due_date_str),
        is_paid=bool(is_paid),
        created_at=_datetime_or_none(created_at_str),
        attachments=attachments,
    )


def _row_to_funding(row: tuple, attachments: tuple[Attachment, ...]) -> Funding:
    """
    Convert a database row into a Funding record.

    Expected row layout: see ``_FUNDING_COLUMNS``.
    """
    (
        funding_id,
        received_str,
        funder_name,
        amount_cents,
        is_repayable,
        repayment_str,
        is_repaid,
        description,
        created_at_str,
    ) = row

    return Funding(
        id=funding_id,
        received_date=date.fromisoformat(received_str),
        funder_name=funder_name,
        amount=cents_to_amount(amount_cents),
        is_repayable=bool(is_repayable),
        repayment_date=_date_or_none(repayment_str),
        is_repaid=bool(is_repaid),
        description=description,
        created_at=_datetime_or_none(created_at_str),
        attachments=attachments,
    )


def _escape_like(term: str) -> str:
    """Escape LIKE wildcards so they match literally (used with ESCAPE '\\')."""
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _order_clause(order_by: tuple[str, str], allowed: dict[str, str]) -> str:
    """Validate (column, direction) and build an ORDER BY clause."""
    column, direction = order_by
    if column not in allowed:
        raise ValueError(f"Invalid order_by column: {column!r}")
    direction_upper = direction.upper()
    if direction_upper not in {"ASC", "DESC"}:
        raise ValueError(f"Invalid order_by direction: {direction!r}")
    return f"ORDER BY {allowed[column]} {direction_upper}, id {direction_upper}"


# ---------------------------------------------------------------------------
# Public API: schema
# ---------------------------------------------------------------------------


def init_database(cfg: DatabaseConfig) -> None:
    """
    Initialize the database schema if needed.

    - Creates the SQLite file (and its parent directory) if missing.
    - Creates tables and indexes and seeds the default categories.
    - This function is idempotent: calling it multiple times is safe.

    Raises
    ------
    ValueError
        If cfg.engine is not supported.
    sqlite3.Error
        If schema creation fails.
    """
    cfg.path.parent.mkdir(parents=True, exist_ok=True)

    conn = _connect(cfg)
    try:
        _create_schema_if_needed(conn)
    finally:
        conn.close()


def has_records(cfg: DatabaseConfig) -> bool:
    """Return True if the database holds at least one expense or funding."""
    init_database(cfg)

    conn = _connect(cfg)
    try:
        cur = conn.execute(
            """
            SELECT EXISTS (SELECT 1 FROM expenses)
                OR EXISTS (SELECT 1 FROM funding);
            """
        )
        return bool(cur.fetchone()[0])
    finally:
        conn.close()


# ---------------------------------------------------------------------------
# Expenses
# ---------------------------------------------------------------------------


def get_expense_by_id(cfg: DatabaseConfig, expense_id: int) -> Optional[Expense]:
    """Load a single expense (with attachments), or None if not found."""
    init_database(cfg)

    conn = _connect(cfg)
    try:
        cur = conn.execute(
            f"SELECT {_EXPENSE_COLUMNS} FROM expenses WHERE id = ?;",
            (expense_id,),
        )
        row = cur.fetchone()
        if row is None:
            return None
        attachments = _load_attachments(conn, "expense", [expense_id])
    finally:
        conn.close()

    return _row_to_expense(row, attachments.get(expense_id, ()))


def _require_expense(cfg: DatabaseConfig, expense_id: int) -> Expense:
    expense = get_expense_by_id(cfg, expense_id)
    if expense is None:
        raise RecordNotFoundError(f"Expense #{expense_id} does not exist.")
    return expense


def insert_expense(cfg: DatabaseConfig, new_expense: NewExpense) -> Expense:
    """
    Insert a new expense and its attachments in a single transaction.

    The input is expected to be validated already (see records_service).
    The paid flag always starts as False.
    """
    init_database(cfg)

    created_at = _now_utc_iso()

    conn = _connect(cfg)
    try:
        cur = conn.cursor()
        cur.execute(
            """
            INSERT INTO expenses (
                date, category, name, amount_cents,
                gst_applicable, gst_amount_cents,
                is_recurring, due_date, is_paid, created_at
            )
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, 0, ?);
            """,
            (
                new_expense.date.isoformat(),
                new_expense.category,
                new_expense.name,
                amount_to_cents(new_expense.amount),
                int(new_expense.gst_applicable),
                amount_to_cents(new_expense.gst_amount),
                int(new_expense.is_recurring),
                _iso_or_none(new_expense.due_date),
                created_at,
            ),
        )
        expense_id = cur.lastrowid
        _insert_attachments(
            cur, "expense", expense_id, new_expense.attachments, created_at
        )
        conn.commit()
    finally:
        conn.close()

    logger.debug("Inserted expense #%s", expense_id)
    return _require_expense(cfg, expense_id)


def list_expenses(
    cfg: DatabaseConfig,
    filters: Optional[ExpensesFilter] = None,
    *,
    order_by: tuple[str, str] = ("date", "DESC"),
) -> list[Expense]:
    """
    Return expenses matching ``filters`` (all expenses when None).

    Supported order_by columns: "date", "amount", "name", "created_at", "id".
    """
    init_database(cfg)
    filters = filters or ExpensesFilter()

    where_clauses: list[str] = ["1 = 1"]
    params: list[object] = []

    if filters.start is not None:
        where_clauses.append("date >= ?")
        params.append(filters.start.isoformat())
    if filters.end is not None:
        where_clauses.append("date <= ?")
        params.append(filters.end.isoformat())
    if filters.category is not None:
        where_clauses.append("LOWER(category) = ?")
        params.append(filters.category.strip().lower())
    if filters.name_contains is not None:
        where_clauses.append("LOWER(name) LIKE ? ESCAPE '\\'")
        params.append(f"%{_escape_like(filters.name_contains.lower())}%")
    if filters.recurring_only:
        where_clauses.append("is_recurring = 1")
    if filters.unpaid_only:
        where_clauses.append("is_paid = 0")

    order_clause = _order_clause(
        order_by,
        {
            "date": "date",
            "amount": "amount_cents",
            "name": "name COLLATE NOCASE",
            "created_at": "created_at",
            "id": "id",
        },
    )

    conn = _connect(cfg)
    try:
        cur = conn.execute(
            f"""
            SELECT {_EXPENSE_COLUMNS}
              FROM expenses
             WHERE {' AND '.join(where_clauses)}
             {order_clause};
            """,
            params,
        )
        rows = cur.fetchall()
        attachments = _load_attachments(conn, "expense", [row[0] for row in rows])
    finally:
        conn.close()

    return [_row_to_expense(row, attachments.get(row[0], ())) for row in rows]


def update_expense(
    cfg: DatabaseConfig,
    expense_id: int,
    update: ExpenseUpdate,
) -> Expense:
    """
    Apply a partial update to an existing expense.

    Only non-None attributes of ``update`` are applied. Turning
    ``is_recurring`` off also clears the due date and the paid flag.

    Raises
    ------
    ValueError
        If no fields are provided for update.
    RecordNotFoundError
        If the expense does not exist.
    """
    init_database(cfg)

    fields: list[str] = []
    params: list[object] = []

    if update.date is not None:
        fields.append("date = ?")
        params.append(update.date.isoformat())
    if update.category is not None:
        fields.append("category = ?")
        params.append(update.category)
    if update.name is not None:
        fields.append("name = ?")
        params.append(update.name)
    if update.amount is not None:
        fields.append("amount_cents = ?")
        params.append(amount_to_cents(update.amount))
    if update.gst_applicable is not None:
        fields.append("gst_applicable = ?")
        params.append(int(update.gst_applicable))
    if update.gst_amount is not None:
        fields.append("gst_amount_cents = ?")
        params.append(amount_to_cents(update.gst_amount))
    if update.is_recurring is not None:
        fields.append("is_recurring = ?")
        params.append(int(update.is_recurring))
    if update.is_recurring is False:
        fields.append("due_date = NULL")
        fields.append("is_paid = 0")
    else:
        if update.due_date is not None:
            fields.append("due_date = ?")
            params.append(update.due_date.isoformat())
        if update.is_paid is not None:
            fields.append("is_paid = ?")
            params.append(int(update.is_paid))

    if not fields:
        raise ValueError("No fields to update in ExpenseUpdate.")

    fields.append("updated_at = ?")
    params.append(_now_utc_iso())
    params.append(expense_id)

    conn = _connect(cfg)
    try:
        cur = conn.execute(
            f"""
            UPDATE expenses
               SET {", ".join(fields)}
             WHERE id = ?;
            """,
            params,
        )
        updated = cur.rowcount
        conn.commit()
    finally:
        conn.close()

    if updated == 0:
        raise RecordNotFoundError(f"Expense #{expense_id} does not exist.")
    return _require_expense(cfg, expense_id)


def mark_expense_paid(cfg: DatabaseConfig, expense_id: int) -> Expense:
    """Mark an expense as paid."""
    return update_expense(cfg, expense_id, ExpenseUpdate(is_paid=True))


def delete_expense(cfg: DatabaseConfig, expense_id: int) -> None:
    """
    Delete an expense and its attachment metadata.

    Raises
    ------
    RecordNotFoundError
        If the expense does not exist.
    """
    init_database(cfg)

    conn = _connect(cfg)
    try:
        conn.execute(
            "DELETE FROM attachments WHERE owner_kind = 'expense' AND owner_id = ?;",
            (expense_id,),
        )
        cur = conn.execute("DELETE FROM expenses WHERE id = ?;", (expense_id,))
        if cur.rowcount == 0:
            conn.rollback()
            raise RecordNotFoundError(f"Expense #{expense_id} does not exist.")
        conn.commit()
    finally:
        conn.close()

    logger.debug("Deleted expense #%s", expense_id)


# ---------------------------------------------------------------------------
# Funding
# ---------------------------------------------------------------------------


def get_funding_by_id(cfg: DatabaseConfig, funding_id: int) -> Optional[Funding]:
    """Load a single funding record (with attachments), or None."""
    init_database(cfg)

    conn = _connect(cfg)
    try:
        cur = conn.execute(
            f"SELECT {_FUNDING_COLUMNS} FROM funding WHERE id = ?;",
            (funding_id,),
        )
        row = cur.fetchone()
        if row is None:
            return None
        attachments = _load_attachments(conn, "funding", [funding_id])
    finally:
        conn.close()

    return _row_to_funding(row, attachments.get(funding_id, ()))


def _require_funding(cfg: DatabaseConfig, funding_id: int) -> Funding:
    funding = get_funding_by_id(cfg, funding_id)
    if funding is None:
        raise RecordNotFoundError(f"Funding #{funding_id} does not exist.")
    return funding


def insert_funding(cfg: DatabaseConfig, new_funding: NewFunding) -> Funding:
    """Insert a new funding record and its attachments."""
    init_database(cfg)

    created_at = _now_utc_iso()

    conn = _connect(cfg)
    try:
        cur = conn.cursor()
        cur.execute(
            """
            INSERT INTO funding (
                received_date, funder_name, amount_cents,
                is_repayable, repayment_date, is_repaid,
                description, created_at
            )
            VALUES (?, ?, ?, ?, ?, 0, ?, ?);
            """,
            (
                new_funding.received_date.isoformat(),
                new_funding.funder_name,
                amount_to_cents(new_funding.amount),
                int(new_funding.is_repayable),
                _iso_or_none(new_funding.repayment_date),
                new_funding.description,
                created_at,
            ),
        )
        funding_id = cur.lastrowid
        _insert_attachments(
            cur, "funding", funding_id, new_funding.attachments, created_at
        )
        conn.commit()
    finally:
        conn.close()

    logger.debug("Inserted funding #%s", funding_id)
    return _require_funding(cfg, funding_id)


def list_funding(
    cfg: DatabaseConfig,
    filters: Optional[FundingFilter] = None,
    *,
    order_by: tuple[str, str] = ("received_date", "DESC"),
) -> list[Funding]:
    """
    Return funding records matching ``filters`` (all records when None).

    Supported order_by columns: "received_date", "amount", "funder_name",
    "created_at", "id".
    """
    init_database(cfg)
    filters = filters or FundingFilter()

    where_clauses: list[str] = ["1 = 1"]
    params: list[object] = []

    if filters.start is not None:
        where_clauses.append("received_date >= ?")
        params.append(filters.start.isoformat())
    if filters.end is not None:
        where_clauses.append("received_date <= ?")
        params.append(filters.end.isoformat())
    if filters.repayable is not None:
        where_clauses.append("is_repayable = ?")
        params.append(int(filters.repayable))
    if filters.outstanding_only:
        where_clauses.append("is_repayable = 1 AND is_repaid = 0")

    order_clause = _order_clause(
        order_by,
        {
            "received_date": "received_date",
            "amount": "amount_cents",
            "funder_name": "funder_name COLLATE NOCASE",
            "created_at": "created_at",
            "id": "id",
        },
    )

    conn = _connect(cfg)
    try:
        cur = conn.execute(
            f"""
            SELECT {_FUNDING_COLUMNS}
              FROM funding
             WHERE {' AND '.join(where_clauses)}
             {order_clause};
            """,
            params,
        )
        rows = cur.fetchall()
        attachments = _load_attachments(conn, "funding", [row[0] for row in rows])
    finally:
        conn.close()

    return [_row_to_funding(row, attachments.get(row[0], ())) for row in rows]


def update_funding(
    cfg: DatabaseConfig,
    funding_id: int,
    update: FundingUpdate,
) -> Funding:
    """
    Apply a partial update to an existing funding record.

    Turning ``is_repayable`` off also clears the repayment date and the
    repaid flag.

    Raises
    ------
    ValueError
        If no fields are provided for update.
    RecordNotFoundError
        If the funding record does not exist.
    """
    init_database(cfg)

    fields: list[str] = []
    params: list[object] = []

    if update.received_date is not None:
        fields.append("received_date = ?")
        params.append(update.received_date.isoformat())
    if update.funder_name is not None:
        fields.append("funder_name = ?")
        params.append(update.funder_name)
    if update.amount is not None:
        fields.append("amount_cents = ?")
        params.append(amount_to_cents(update.amount))
    if update.description is not None:
        fields.append("description = ?")
        params.append(update.description)
    if update.is_repayable is not None:
        fields.append("is_repayable = ?")
        params.append(int(update.is_repayable))
    if update.is_repayable is False:
        fields.append("repayment_date = NULL")
        fields.append("is_repaid = 0")
    else:
        if update.repayment_date is not None:
            fields.append("repayment_date = ?")
            params.append(update.repayment_date.isoformat())
        if update.is_repaid is not None:
            fields.append("is_repaid = ?")
            params.append(int(update.is_repaid))

    if not fields:
        raise ValueError("No fields to update in FundingUpdate.")

    fields.append("updated_at = ?")
    params.append(_now_utc_iso())
    params.append(funding_id)

    conn = _connect(cfg)
    try:
        cur = conn.execute(
            f"""
            UPDATE funding
               SET {", ".join(fields)}
             WHERE id = ?;
            """,
            params,
        )
        updated = cur.rowcount
        conn.commit()
    finally:
        conn.close()

    if updated == 0:
        raise RecordNotFoundError(f"Funding #{funding_id} does not exist.")
    return _require_funding(cfg, funding_id)


def mark_funding_repaid(cfg: DatabaseConfig, funding_id: int) -> Funding:
    """Mark a funding record as repaid."""
    return update_funding(cfg, funding_id, FundingUpdate(is_repaid=True))


def delete_funding(cfg: DatabaseConfig, funding_id: int) -> None:
    """Delete a funding record and its attachment metadata."""
    init_database(cfg)

    conn = _connect(cfg)
    try:
        conn.execute(
            "DELETE FROM attachments WHERE owner_kind = 'funding' AND owner_id = ?;",
            (funding_id,),
        )
        cur = conn.execute("DELETE FROM funding WHERE id = ?;", (funding_id,))
        if cur.rowcount == 0:
            conn.rollback()
            raise RecordNotFoundError(f"Funding #{funding_id} does not exist.")
        conn.commit()
    finally:
        conn.close()

    logger.debug("Deleted funding #%s", funding_id)


# ---------------------------------------------------------------------------
# Attachments
# ---------------------------------------------------------------------------


def add_attachment(
    cfg: DatabaseConfig,
    owner_kind: OwnerKind,
    owner_id: int,
    attachment: NewAttachment,
) -> Attachment:
    """
    Record attachment metadata for an expense or a funding record.

    Raises
    ------
    ValueError
        If ``owner_kind`` is not 'expense' or 'funding'.
    RecordNotFoundError
        If the owning record does not exist.
    """
    if owner_kind == "expense":
        _require_expense(cfg, owner_id)
    elif owner_kind == "funding":
        _require_funding(cfg, owner_id)
    else:
        raise ValueError(f"Invalid attachment owner kind: {owner_kind!r}")

    uploaded_at = _now_utc_iso()

    conn = _connect(cfg)
    try:
        cur = conn.execute(
            """
            INSERT INTO attachments (
                owner_kind, owner_id, file_name, file_size, file_type,
                file_ref, uploaded_at
            )
            VALUES (?, ?, ?, ?, ?, ?, ?);
            """,
            (
                owner_kind,
                owner_id,
                attachment.name,
                int(attachment.size),
                attachment.mime_type,
                attachment.reference,
                uploaded_at,
            ),
        )
        attachment_id = cur.lastrowid
        conn.commit()
    finally:
        conn.close()

    return Attachment(
        id=attachment_id,
        name=attachment.name,
        size=int(attachment.size),
        mime_type=attachment.mime_type,
        reference=attachment.reference,
        uploaded_at=datetime.fromisoformat(uploaded_at),
    )


def remove_attachment(cfg: DatabaseConfig, attachment_id: int) -> None:
    """Delete attachment metadata by id."""
    init_database(cfg)

    conn = _connect(cfg)
    try:
        cur = conn.execute("DELETE FROM attachments WHERE id = ?;", (attachment_id,))
        deleted = cur.rowcount
        conn.commit()
    finally:
        conn.close()

    if deleted == 0:
        raise RecordNotFoundError(f"Attachment #{attachment_id} does not exist.")


# ---------------------------------------------------------------------------
# Categories
# ---------------------------------------------------------------------------


def list_categories(cfg: DatabaseConfig) -> list[str]:
    """Return category labels in creation order (defaults first)."""
    init_database(cfg)

    conn = _connect(cfg)
    try:
        cur = conn.execute("SELECT name FROM categories ORDER BY id;")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()


def add_category(cfg: DatabaseConfig, name: str) -> bool:
    """
    Add a category label.

    Returns
    -------
    bool
        True if the category was created, False if it already existed
        (comparison is case-insensitive).
    """
    init_database(cfg)

    conn = _connect(cfg)
    try:
        cur = conn.execute(
            "INSERT OR IGNORE INTO categories (name, created_at) VALUES (?, ?);",
            (name, _now_utc_iso()),
        )
        created = cur.rowcount > 0
        conn.commit()
    finally:
        conn.close()

    return created
