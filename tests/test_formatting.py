from decimal import Decimal

from smb_fundtrack.formatting import attachment_kind, format_currency, format_file_size


def test_format_currency_known_and_unknown_codes() -> None:
    assert format_currency(Decimal("1234.5")) == "₹1,234.50"
    assert format_currency(10, "usd") == "$10.00"
    assert format_currency(Decimal("-5.25"), "EUR") == "-€5.25"
    assert format_currency(Decimal("99"), "CHF") == "99.00 CHF"


def test_format_file_size() -> None:
    assert format_file_size(0) == "0 Bytes"
    assert format_file_size(512) == "512 Bytes"
    assert format_file_size(1536) == "1.5 KB"
    assert format_file_size(2048) == "2 KB"
    assert format_file_size(5 * 1024 * 1024) == "5 MB"


def test_attachment_kind() -> None:
    assert attachment_kind("image/png") == "image"
    assert attachment_kind("application/pdf") == "pdf"
    assert (
        attachment_kind(
            "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
        )
        == "spreadsheet"
    )
    assert attachment_kind("application/msword") == "document"
    assert attachment_kind("application/zip") == "archive"
    assert attachment_kind("") == "file"
