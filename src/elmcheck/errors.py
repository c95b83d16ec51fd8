# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Exception types raised by the diagnostic pipeline."""

from __future__ import annotations

from collections.abc import Sequence


class ElmCheckError(Exception):
    """Base class for every error raised by elmcheck."""


class ConfigError(ElmCheckError):
    """Raised when configuration input is invalid."""


class CompilerOutputError(ElmCheckError):
    """Raised when a line of compiler output cannot be interpreted."""

    def __init__(self, message: str, *, line: str) -> None:
        super().__init__(message)
        self.line = line


class ReportError(ElmCheckError):
    """Raised when an analyzer report file cannot be loaded."""


class InvocationError(ElmCheckError):
    """Raised when the compiler process cannot be started or supervised."""

    def __init__(self, message: str, *, command: Sequence[str]) -> None:
        super().__init__(message)
        self.command = tuple(command)


class InvocationTimeoutError(InvocationError):
    """Raised when the compiler exceeds the configured timeout."""

    def __init__(self, command: Sequence[str], timeout: float) -> None:
        super().__init__(f"Command '{command[0]}' timed out after {timeout:.1f}s", command=command)
        self.timeout = timeout


__all__ = [
    "CompilerOutputError",
    "ConfigError",
    "ElmCheckError",
    "InvocationError",
    "InvocationTimeoutError",
    "ReportError",
]
