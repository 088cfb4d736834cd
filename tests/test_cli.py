from datetime import date, timedelta

import pytest
from openpyxl import load_workbook

import smb_fundtrack.cli as cli
import smb_fundtrack.engine as engine
import smb_fundtrack.periods as periods

TODAY = date(2025, 3, 15)


@pytest.fixture
def config_path(tmp_path, monkeypatch):
    """Config file pointing to a temporary database, with a pinned clock."""
    path = tmp_path / "smb_fundtrack_config.toml"
    path.write_text(
        '[database]\npath = "db/cli.sqlite"\n\n'
        '[export]\noutput_dir = "out"\n\n'
        '[logging]\nlevel = "WARNING"\n',
        encoding="utf-8",
    )
    monkeypatch.setattr(periods, "_today", lambda: TODAY)
    monkeypatch.setattr(engine, "_today", lambda: TODAY)
    return str(path)


def run(config_path: str, *argv: str) -> None:
    cli.main(["--config", config_path, *argv])


def test_version(capsys):
    cli.main(["--version"])

    assert "smb_fundtrack version" in capsys.readouterr().out


def test_add_and_list_expenses(config_path, capsys):
    run(
        config_path,
        "expenses", "add",
        "--date", "2025-03-02",
        "--category", "Rent",
        "--name", "Office rent",
        "--amount", "1200.50",
        "--gst-amount", "216",
    )
    out = capsys.readouterr().out
    assert "Expense recorded:" in out
    assert "₹1,200.50" in out

    run(config_path, "expenses", "list", "--period", "monthly")
    out = capsys.readouterr().out
    assert "Month to date" in out
    assert "Office rent" in out
    assert "Total expenses: 1" in out


def test_missing_required_field_is_a_usage_error(config_path, capsys):
    with pytest.raises(SystemExit) as excinfo:
        run(config_path, "expenses", "add", "--date", "2025-03-02", "--name", "x",
            "--amount", "1")

    assert excinfo.value.code == 2
    assert "Category is required." in capsys.readouterr().err


def test_unknown_record_is_a_usage_error(config_path, capsys):
    with pytest.raises(SystemExit) as excinfo:
        run(config_path, "expenses", "mark-paid", "42")

    assert excinfo.value.code == 2
    assert "Expense #42 does not exist." in capsys.readouterr().err


def test_invalid_date_stops_the_command(config_path):
    with pytest.raises(SystemExit) as excinfo:
        run(config_path, "report", "--from-date", "15/03/2025")

    assert "Invalid date format" in str(excinfo.value.code)


def test_report_export_writes_workbook(config_path, tmp_path, capsys):
    run(config_path, "expenses", "add", "--date", "2025-03-02", "--category",
        "Rent", "--name", "Rent", "--amount", "100")
    run(config_path, "funding", "add", "--date", "2025-03-01", "--funder", "Bank",
        "--amount", "500")
    capsys.readouterr()

    run(config_path, "report", "--period", "monthly", "--export")

    out = capsys.readouterr().out
    assert "Net cash flow:   ₹400.00" in out
    report = tmp_path / "out"
    files = list(report.glob("smb-fundtrack-report-monthly-*.xlsx"))
    assert len(files) == 1
    assert load_workbook(files[0]).sheetnames == ["Summary", "Expenses", "Funding"]


def test_reminders_and_dashboard(config_path, capsys):
    due = (TODAY + timedelta(days=2)).isoformat()
    run(config_path, "expenses", "add", "--date", "2025-03-01", "--category",
        "Utilities", "--name", "Power", "--amount", "80", "--recurring",
        "--due-date", due)
    run(config_path, "funding", "add", "--date", "2025-01-01", "--funder", "Bank",
        "--amount", "1000", "--repayable", "--repayment-date",
        (TODAY + timedelta(days=3)).isoformat())
    capsys.readouterr()

    run(config_path, "reminders")
    out = capsys.readouterr().out
    assert "0 overdue, 1 due within 7 days, 0 later" in out
    assert "Repayment alerts (next 5 days): 1" in out

    run(config_path, "dashboard")
    out = capsys.readouterr().out
    assert "=== Dashboard ===" in out
    assert "Upcoming repayments: 1" in out
    assert "=== Month trends ===" in out


def test_categories_commands(config_path, capsys):
    run(config_path, "categories", "add", "Legal Fees")
    run(config_path, "categories", "add", "legal fees")
    run(config_path, "categories", "list")

    out = capsys.readouterr().out
    assert "Category added: Legal Fees" in out
    assert "Category already exists: legal fees" in out
    assert "- Legal Fees" in out


def test_list_sort_options(config_path, capsys):
    for name, amount in [("Zoom", "20"), ("audit", "500"), ("Lease", "100")]:
        run(config_path, "expenses", "add", "--date", "2025-03-02", "--category",
            "Rent", "--name", name, "--amount", amount)
    for funder, amount in [("seed bank", "100"), ("Angel Fund", "900")]:
        run(config_path, "funding", "add", "--date", "2025-03-01", "--funder",
            funder, "--amount", amount)
    capsys.readouterr()

    run(config_path, "expenses", "list", "--sort", "name")
    out = capsys.readouterr().out
    assert out.index("audit") < out.index("Lease") < out.index("Zoom")

    run(config_path, "expenses", "list", "--sort", "amount")
    out = capsys.readouterr().out
    assert out.index("audit") < out.index("Lease") < out.index("Zoom")

    run(config_path, "funding", "list", "--sort", "name")
    out = capsys.readouterr().out
    assert out.index("Angel Fund") < out.index("seed bank")


def test_repayable_funding_without_date_is_a_usage_error(config_path, capsys):
    with pytest.raises(SystemExit) as excinfo:
        run(config_path, "funding", "add", "--date", "2025-03-01", "--funder",
            "Bank", "--amount", "1000", "--repayable")

    assert excinfo.value.code == 2
    assert "Repayment date is required" in capsys.readouterr().err


def test_non_finite_amount_is_a_usage_error(config_path, capsys):
    with pytest.raises(SystemExit) as excinfo:
        run(config_path, "expenses", "add", "--date", "2025-03-02", "--category",
            "Rent", "--name", "x", "--amount", "NaN")

    assert excinfo.value.code == 2
    assert "Invalid amount" in capsys.readouterr().err
