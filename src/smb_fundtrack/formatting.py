# SMB FundTrack - Expense & Funding tracker for SMBs
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""Display helpers for amounts, file sizes and attachment types."""

from decimal import Decimal
from typing import Union

CURRENCY_SYMBOLS = {
    "INR": "₹",
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "AUD": "A$",
    "CAD": "C$",
    "NZD": "NZ$",
    "SGD": "S$",
}

_SIZE_UNITS = ("Bytes", "KB", "MB", "GB")


def format_currency(amount: Union[Decimal, float, int], currency: str = "INR") -> str:
    """
    Format an amount with its currency symbol and 2 decimals.

    Unknown currency codes are rendered as a suffix (``1,234.50 CHF``).
    Negative amounts keep the sign in front of the symbol.
    """
    value = Decimal(str(amount))
    sign = "-" if value < 0 else ""
    body = f"{abs(value):,.2f}"

    symbol = CURRENCY_SYMBOLS.get(currency.upper())
    if symbol is None:
        return f"{sign}{body} {currency.upper()}"
    return f"{sign}{symbol}{body}"


def format_file_size(size: int) -> str:
    """Human-readable file size (``0 Bytes``, ``1.5 KB``, ``2 MB``...)."""
    if size <= 0:
        return "0 Bytes"
    exponent = 0
    while size >= 1024 ** (exponent + 1) and exponent < len(_SIZE_UNITS) - 1:
        exponent += 1
    value = round(size / 1024**exponent, 2)
    # Whole values are shown without decimals ("2 KB").
    text = f"{value:g}" if value == int(value) else f"{value}"
    return f"{text} {_SIZE_UNITS[exponent]}"


def attachment_kind(mime_type: str) -> str:
    """Classify an attachment MIME type into a coarse display kind."""
    mime = (mime_type or "").lower()
    if mime.startswith("image/"):
        return "image"
    if "pdf" in mime:
        return "pdf"
    if "excel" in mime or "spreadsheet" in mime:
        return "spreadsheet"
    if "word" in mime or "document" in mime:
        return "document"
    if "zip" in mime or "rar" in mime:
        return "archive"
    return "file"
