# SMB FundTrack - Expense & Funding tracker for SMBs
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""Logging setup for the SMB FundTrack command-line interface."""

import logging
import sys
from typing import Union

PACKAGE_LOGGER = "smb_fundtrack"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _resolve_level(level: Union[int, str]) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level).upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level: {level!r}")
    return resolved


def init_logging(level: Union[int, str] = logging.INFO) -> logging.Logger:
    """
    Configure the package logger with a single stderr handler.

    Calling this function again replaces the previous handler, so the CLI
    can re-initialize logging once the configuration has been read.
    Messages go to stderr to keep stdout for command output.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.handlers.clear()
    numeric_level = _resolve_level(level)
    logger.setLevel(numeric_level)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(numeric_level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    logger.propagate = False
    return logger
