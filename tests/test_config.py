from pathlib import Path

import pytest

from smb_fundtrack.config import load_app_config


def write_config(tmp_path: Path, content: str) -> Path:
    path = tmp_path / "smb_fundtrack_config.toml"
    path.write_text(content, encoding="utf-8")
    return path


def test_load_full_config(tmp_path):
    path = write_config(
        tmp_path,
        """
[app]
currency = "usd"
report_title = "ACME Report"

[database]
engine = "sqlite"
path = "db/acme.sqlite"

[reminders]
upcoming_days = 10
repayment_alert_days = 3

[dashboard]
trend_months = 12
recent_expenses = 8
recent_funding = 2

[export]
output_dir = "reports"

[logging]
level = "debug"
""",
    )

    config = load_app_config(str(path))

    assert config.currency == "USD"
    assert config.report_title == "ACME Report"
    assert config.database.engine == "sqlite"
    assert config.database.path == (tmp_path / "db" / "acme.sqlite").resolve()
    assert config.reminders.upcoming_days == 10
    assert config.reminders.repayment_alert_days == 3
    assert config.dashboard.trend_months == 12
    assert config.dashboard.recent_expenses == 8
    assert config.dashboard.recent_funding == 2
    assert config.output_dir == (tmp_path / "reports").resolve()
    assert config.log_level == "DEBUG"


def test_empty_config_uses_defaults(tmp_path):
    path = write_config(tmp_path, "")

    config = load_app_config(str(path))

    assert config.currency == "INR"
    assert config.report_title == "SMB FundTrack Financial Report"
    assert config.database.path == (
        tmp_path / "data" / "db" / "smb_fundtrack.sqlite"
    ).resolve()
    assert config.reminders.upcoming_days == 7
    assert config.reminders.repayment_alert_days == 5
    assert config.dashboard.trend_months == 6
    assert config.output_dir == (tmp_path / "data" / "output").resolve()
    assert config.log_level == "INFO"


def test_default_config_file_is_read_from_cwd(tmp_path, monkeypatch):
    write_config(tmp_path, '[app]\ncurrency = "EUR"\n')
    monkeypatch.chdir(tmp_path)

    assert load_app_config().currency == "EUR"


def test_missing_config_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_app_config(str(tmp_path / "missing.toml"))


def test_unparseable_config_raises_value_error(tmp_path):
    path = write_config(tmp_path, "[app\ncurrency = ")

    with pytest.raises(ValueError):
        load_app_config(str(path))


@pytest.mark.parametrize("value", ['"soon"', "-1", "true"])
def test_invalid_integer_option_raises_value_error(tmp_path, value):
    path = write_config(tmp_path, f"[reminders]\nupcoming_days = {value}\n")

    with pytest.raises(ValueError, match="reminders.upcoming_days"):
        load_app_config(str(path))
