# SMB FundTrack - Expense & Funding tracker for SMBs
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
SMB FundTrack
-------------

A Python-based expense and funding tracker designed for Small and
Medium-sized Businesses (SMBs). The project provides a pure aggregation
engine over expense and funding records and a command-line interface.

Main capabilities:
- expense records with categories, GST and recurring bills,
- funding records (grants, loans, investments) with repayment tracking,
- attachment metadata on any record,
- weekly / monthly / yearly / custom report windows,
- report summaries with per-category breakdown,
- bill reminders (overdue, upcoming, later) and repayment alerts,
- dashboard KPIs and month trends,
- xlsx report export (Summary, Expenses, Funding sheets),
- a database-first architecture (SQLite).

SMB FundTrack separates computation (engine), configuration (TOML), and
presentation (CLI), making it suitable for scripting and automation.


Version: 0.1.0

Usage:
    python -m smb_fundtrack.cli --help
"""

__all__ = ["engine", "exporter", "periods", "views"]

__version__ = "0.1.0"
