# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Shared parser infrastructure and helper utilities."""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Final, Protocol, runtime_checkable

from pydantic import ValidationError

from ..errors import CompilerOutputError
from ..models import Diagnostic

STYLED_FRAGMENT_KEY: Final[str] = "string"
STYLED_FRAGMENT_MARKER: Final[str] = "#"


@dataclass(frozen=True, slots=True)
class ParseContext:
    """Per-invocation facts a parser may need to complete a record."""

    target_file: str


@runtime_checkable
class LineParser(Protocol):
    """Protocol implemented by parsers consuming compiler output line by line."""

    def parse_line(self, line: str, context: ParseContext) -> list[Diagnostic]:
        """Return the diagnostics carried by ``line``."""
        ...


def load_json_line(line: str) -> Any:
    """Decode ``line`` as JSON, raising :class:`CompilerOutputError` on failure."""

    try:
        return json.loads(line)
    except json.JSONDecodeError as exc:
        raise CompilerOutputError(f"Malformed compiler output: {exc}", line=line) from exc


def flatten_message(parts: object) -> str:
    """Concatenate a compiler message into plain text.

    Messages are sequences of plain strings and styled fragments such as
    ``{"string": "Foo", "bold": true}``. Styled fragments are wrapped in ``#``
    markers so emphasis stays visible without terminal styling.

    Args:
        parts: Message payload taken from a compiler report.

    Returns:
        str: The message with every fragment rendered in order.
    """

    if isinstance(parts, str):
        return parts
    if not isinstance(parts, Sequence):
        return "" if parts is None else str(parts)
    rendered: list[str] = []
    for part in parts:
        if isinstance(part, str):
            rendered.append(part)
        elif isinstance(part, Mapping):
            inner = part.get(STYLED_FRAGMENT_KEY, "")
            rendered.append(f"{STYLED_FRAGMENT_MARKER}{inner}{STYLED_FRAGMENT_MARKER}")
        else:
            rendered.append(str(part))
    return "".join(rendered)


def build_diagnostic(payload: Mapping[str, Any], *, line: str) -> Diagnostic:
    """Validate ``payload`` into a :class:`Diagnostic` or raise a parse error."""

    try:
        return Diagnostic.model_validate(payload)
    except ValidationError as exc:
        raise CompilerOutputError(f"Unexpected diagnostic shape: {exc}", line=line) from exc


__all__ = [
    "LineParser",
    "ParseContext",
    "build_diagnostic",
    "flatten_message",
    "load_json_line",
]
