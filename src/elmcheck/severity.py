# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Severity related types and helpers."""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum, IntEnum
from typing import Final


class Severity(str, Enum):
    """Severity labels emitted by the compiler and the analyzer."""

    ERROR = "error"
    WARNING = "warning"


class HostSeverity(IntEnum):
    """Editor severity levels, numbered the way editors number them."""

    ERROR = 0
    WARNING = 1
    INFORMATION = 2
    HINT = 3


_LABEL_TO_HOST: Final[Mapping[str, HostSeverity]] = {
    Severity.ERROR.value: HostSeverity.ERROR,
    Severity.WARNING.value: HostSeverity.WARNING,
}


def severity_from_label(label: object, default: HostSeverity = HostSeverity.ERROR) -> HostSeverity:
    """Return the :class:`HostSeverity` matching ``label``.

    Args:
        label: Severity label carried by a diagnostic, usually ``"error"`` or ``"warning"``.
        default: Severity used when ``label`` is not recognised.

    Returns:
        HostSeverity: Mapped severity; unknown or non-string labels degrade to ``default``.
    """

    if isinstance(label, Severity):
        label = label.value
    if isinstance(label, str):
        return _LABEL_TO_HOST.get(label.strip().lower(), default)
    return default


__all__ = ["HostSeverity", "Severity", "severity_from_label"]
