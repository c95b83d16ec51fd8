# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Parsers for the two Elm compiler report formats."""

from __future__ import annotations

from .base import LineParser, ParseContext, flatten_message
from .legacy import SUCCESS_SENTINEL, LegacyReportParser
from .report import JsonReportParser

__all__ = [
    "JsonReportParser",
    "LegacyReportParser",
    "LineParser",
    "ParseContext",
    "SUCCESS_SENTINEL",
    "flatten_message",
]
