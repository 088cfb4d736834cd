from datetime import date
from decimal import Decimal

import pytest

from smb_fundtrack.db import (
    DatabaseConfig,
    ExpensesFilter,
    FundingFilter,
    add_attachment,
    add_category,
    delete_expense,
    delete_funding,
    get_expense_by_id,
    get_funding_by_id,
    has_records,
    init_database,
    insert_expense,
    insert_funding,
    list_categories,
    list_expenses,
    list_funding,
    mark_expense_paid,
    mark_funding_repaid,
    remove_attachment,
    update_expense,
    update_funding,
)
from smb_fundtrack.models import (
    DEFAULT_CATEGORIES,
    ExpenseUpdate,
    FundingUpdate,
    NewAttachment,
    NewExpense,
    NewFunding,
    RecordNotFoundError,
)


def make_tmp_db_cfg(tmp_path) -> DatabaseConfig:
    """Helper to build a DatabaseConfig pointing to a temporary SQLite file."""
    db_path = tmp_path / "db" / "test_db.sqlite"
    return DatabaseConfig(engine="sqlite", path=db_path)


def _new_expense(**overrides) -> NewExpense:
    values = dict(
        date=date(2025, 1, 5),
        category="Rent",
        name="Office rent",
        amount=Decimal("1200.50"),
    )
    values.update(overrides)
    return NewExpense(**values)


def _new_funding(**overrides) -> NewFunding:
    values = dict(
        received_date=date(2025, 1, 2),
        funder_name="Seed Bank",
        amount=Decimal("5000"),
    )
    values.update(overrides)
    return NewFunding(**values)


def test_init_database_creates_file_and_seeds_categories(tmp_path):
    """init_database should create the SQLite file and the default categories."""
    cfg = make_tmp_db_cfg(tmp_path)

    assert not cfg.path.exists()
    init_database(cfg)
    assert cfg.path.exists()

    assert has_records(cfg) is False
    assert list_categories(cfg) == list(DEFAULT_CATEGORIES)

    # Idempotent: a second call does not duplicate the seed.
    init_database(cfg)
    assert len(list_categories(cfg)) == len(DEFAULT_CATEGORIES)


def test_unsupported_engine_is_rejected(tmp_path):
    cfg = DatabaseConfig(engine="postgres", path=tmp_path / "x.sqlite")

    with pytest.raises(ValueError):
        init_database(cfg)


def test_insert_and_get_expense_round_trip(tmp_path):
    """Amounts are reconstructed exactly from integer cents."""
    cfg = make_tmp_db_cfg(tmp_path)

    created = insert_expense(
        cfg,
        _new_expense(
            gst_applicable=True,
            gst_amount=Decimal("216.09"),
            is_recurring=True,
            due_date=date(2025, 2, 5),
            attachments=(
                NewAttachment(
                    name="invoice.pdf",
                    size=2048,
                    mime_type="application/pdf",
                    reference="files/invoice.pdf",
                ),
            ),
        ),
    )

    loaded = get_expense_by_id(cfg, created.id)

    assert loaded == created
    assert loaded.amount == Decimal("1200.50")
    assert loaded.gst_amount == Decimal("216.09")
    assert loaded.due_date == date(2025, 2, 5)
    assert loaded.is_paid is False
    assert loaded.created_at is not None
    assert [a.name for a in loaded.attachments] == ["invoice.pdf"]
    assert has_records(cfg) is True


def test_get_missing_records_returns_none(tmp_path):
    cfg = make_tmp_db_cfg(tmp_path)

    assert get_expense_by_id(cfg, 42) is None
    assert get_funding_by_id(cfg, 42) is None


def test_list_expenses_filters(tmp_path):
    cfg = make_tmp_db_cfg(tmp_path)
    insert_expense(cfg, _new_expense(date=date(2025, 1, 1), name="Rent Jan"))
    insert_expense(
        cfg,
        _new_expense(
            date=date(2025, 2, 1),
            category="Utilities",
            name="Electricity",
            is_recurring=True,
            due_date=date(2025, 2, 20),
        ),
    )
    insert_expense(cfg, _new_expense(date=date(2025, 3, 1), name="Rent Mar"))

    all_rows = list_expenses(cfg)
    assert [e.name for e in all_rows] == ["Rent Mar", "Electricity", "Rent Jan"]

    in_feb = list_expenses(
        cfg, ExpensesFilter(start=date(2025, 2, 1), end=date(2025, 2, 28))
    )
    assert [e.name for e in in_feb] == ["Electricity"]

    rent = list_expenses(cfg, ExpensesFilter(category="rent"))
    assert len(rent) == 2

    search = list_expenses(cfg, ExpensesFilter(name_contains="ELEC"))
    assert [e.name for e in search] == ["Electricity"]

    recurring = list_expenses(cfg, ExpensesFilter(recurring_only=True))
    assert [e.name for e in recurring] == ["Electricity"]

    ascending = list_expenses(cfg, order_by=("amount", "ASC"))
    assert len(ascending) == 3

    with pytest.raises(ValueError):
        list_expenses(cfg, order_by=("name; DROP TABLE", "ASC"))


def test_list_expenses_sorted_by_name_ignores_case(tmp_path):
    cfg = make_tmp_db_cfg(tmp_path)
    for name in ["rent", "Electricity", "Audit"]:
        insert_expense(cfg, _new_expense(name=name))

    by_name = list_expenses(cfg, order_by=("name", "ASC"))

    assert [e.name for e in by_name] == ["Audit", "Electricity", "rent"]


def test_name_search_matches_wildcards_literally(tmp_path):
    """'%' and '_' in the search term are not LIKE wildcards."""
    cfg = make_tmp_db_cfg(tmp_path)
    insert_expense(cfg, _new_expense(name="50% deposit"))
    insert_expense(cfg, _new_expense(name="500 chairs"))
    insert_expense(cfg, _new_expense(name="tax_2025"))
    insert_expense(cfg, _new_expense(name="tax 2025"))

    percent = list_expenses(cfg, ExpensesFilter(name_contains="50%"))
    underscore = list_expenses(cfg, ExpensesFilter(name_contains="x_2"))

    assert [e.name for e in percent] == ["50% deposit"]
    assert [e.name for e in underscore] == ["tax_2025"]


def test_list_funding_sorted_by_funder_name(tmp_path):
    cfg = make_tmp_db_cfg(tmp_path)
    for funder in ["seed bank", "Angel Fund", "Grant Office"]:
        insert_funding(cfg, _new_funding(funder_name=funder))

    by_funder = list_funding(cfg, order_by=("funder_name", "ASC"))

    assert [f.funder_name for f in by_funder] == [
        "Angel Fund",
        "Grant Office",
        "seed bank",
    ]


def test_update_expense_partial_and_recurring_invariant(tmp_path):
    cfg = make_tmp_db_cfg(tmp_path)
    created = insert_expense(
        cfg, _new_expense(is_recurring=True, due_date=date(2025, 2, 5))
    )

    updated = update_expense(cfg, created.id, ExpenseUpdate(name="HQ rent"))
    assert updated.name == "HQ rent"
    assert updated.amount == created.amount
    assert updated.due_date == date(2025, 2, 5)

    paid = mark_expense_paid(cfg, created.id)
    assert paid.is_paid is True

    # Turning recurring off clears the due date and the paid flag.
    cleared = update_expense(cfg, created.id, ExpenseUpdate(is_recurring=False))
    assert cleared.is_recurring is False
    assert cleared.due_date is None
    assert cleared.is_paid is False


def test_update_expense_errors(tmp_path):
    cfg = make_tmp_db_cfg(tmp_path)
    created = insert_expense(cfg, _new_expense())

    with pytest.raises(ValueError):
        update_expense(cfg, created.id, ExpenseUpdate())

    with pytest.raises(RecordNotFoundError):
        update_expense(cfg, 999, ExpenseUpdate(name="x"))

    with pytest.raises(RecordNotFoundError):
        mark_expense_paid(cfg, 999)


def test_delete_expense_removes_attachments(tmp_path):
    cfg = make_tmp_db_cfg(tmp_path)
    created = insert_expense(cfg, _new_expense())
    attachment = add_attachment(
        cfg,
        "expense",
        created.id,
        NewAttachment(name="r.png", size=10, mime_type="image/png", reference="r"),
    )

    delete_expense(cfg, created.id)

    assert get_expense_by_id(cfg, created.id) is None
    with pytest.raises(RecordNotFoundError):
        remove_attachment(cfg, attachment.id)
    with pytest.raises(RecordNotFoundError):
        delete_expense(cfg, created.id)


def test_funding_crud_and_repayable_invariant(tmp_path):
    cfg = make_tmp_db_cfg(tmp_path)
    loan = insert_funding(
        cfg,
        _new_funding(
            is_repayable=True,
            repayment_date=date(2025, 6, 30),
            description="Working capital",
        ),
    )
    grant = insert_funding(
        cfg, _new_funding(received_date=date(2025, 3, 1), funder_name="Grant Office")
    )

    assert loan.is_outstanding is True
    assert [f.id for f in list_funding(cfg)] == [grant.id, loan.id]
    assert [f.id for f in list_funding(cfg, FundingFilter(repayable=False))] == [
        grant.id
    ]

    repaid = mark_funding_repaid(cfg, loan.id)
    assert repaid.is_repaid is True
    assert list_funding(cfg, FundingFilter(outstanding_only=True)) == []

    updated = update_funding(cfg, loan.id, FundingUpdate(amount=Decimal("4500.25")))
    assert updated.amount == Decimal("4500.25")
    assert updated.description == "Working capital"

    cleared = update_funding(cfg, loan.id, FundingUpdate(is_repayable=False))
    assert cleared.repayment_date is None
    assert cleared.is_repaid is False

    delete_funding(cfg, grant.id)
    assert get_funding_by_id(cfg, grant.id) is None
    with pytest.raises(RecordNotFoundError):
        delete_funding(cfg, grant.id)


def test_add_attachment_requires_existing_owner(tmp_path):
    cfg = make_tmp_db_cfg(tmp_path)
    att = NewAttachment(name="a.pdf", size=1, mime_type="application/pdf", reference="a")

    with pytest.raises(RecordNotFoundError):
        add_attachment(cfg, "funding", 1, att)

    with pytest.raises(ValueError):
        add_attachment(cfg, "invoice", 1, att)  # type: ignore[arg-type]

    funding = insert_funding(cfg, _new_funding())
    stored = add_attachment(cfg, "funding", funding.id, att)

    assert get_funding_by_id(cfg, funding.id).attachments == (stored,)

    remove_attachment(cfg, stored.id)
    assert get_funding_by_id(cfg, funding.id).attachments == ()


def test_add_category_is_case_insensitive(tmp_path):
    cfg = make_tmp_db_cfg(tmp_path)

    assert add_category(cfg, "Legal Fees") is True
    assert add_category(cfg, "legal fees") is False
    assert add_category(cfg, "RENT") is False
    assert list_categories(cfg)[-1] == "Legal Fees"
