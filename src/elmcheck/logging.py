# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""User-facing logging helpers with optional colour and emoji support."""

from __future__ import annotations

import logging
import sys
from functools import lru_cache
from typing import Literal, Protocol

from rich.console import Console
from rich.logging import RichHandler
from rich.text import Text


def detect_tty() -> bool:
    """Return ``True`` when stdout appears to be backed by a terminal."""

    try:
        return sys.stdout.isatty()
    except (AttributeError, ValueError):
        return False


@lru_cache(maxsize=8)
def _cached_console(color: bool, emoji: bool, tty: bool) -> Console:
    color_system: Literal["auto"] | None = "auto" if color and tty else None
    return Console(
        color_system=color_system,
        force_terminal=tty,
        no_color=not (color and tty),
        emoji=emoji,
        soft_wrap=True,
        highlight=False,
    )


def get_console(*, color: bool, emoji: bool) -> Console:
    """Return a Rich console configured for ``color`` and ``emoji`` preferences.

    Consoles are cached per preference pair and TTY state so repeated calls
    share one instance.
    """

    return _cached_console(color, emoji, detect_tty())


def emoji(symbol: str, enable: bool) -> str:
    """Select an emoji symbol based on the caller's preference.

    Args:
        symbol: Emoji text to include in the output.
        enable: Flag indicating whether emoji output is desired.

    Returns:
        str: ``symbol`` when enabled, otherwise an empty string.
    """

    return symbol if enable else ""


def _print_line(msg: str, *, style: str, use_emoji: bool, use_color: bool | None) -> None:
    """Print ``msg`` on the shared console, styled when colour is active.

    Args:
        msg: Message text to print.
        style: Rich style applied when colour output is enabled.
        use_emoji: Flag indicating whether emoji output is desired.
        use_color: Explicit colour flag; ``None`` follows TTY detection.
    """

    color_enabled = detect_tty() if use_color is None else use_color
    console = get_console(color=color_enabled, emoji=use_emoji)
    text = Text(msg)
    if color_enabled:
        text.stylize(style)
    console.print(text)


def info(msg: str, *, use_emoji: bool, use_color: bool | None = None) -> None:
    """Emit an informational message.

    Args:
        msg: Message text to print.
        use_emoji: Flag indicating whether to prefix an emoji.
        use_color: Explicit colour flag; ``None`` follows TTY detection.
    """

    _print_line(f"{emoji('ℹ️ ', use_emoji)}{msg}", style="cyan", use_emoji=use_emoji, use_color=use_color)


def ok(msg: str, *, use_emoji: bool, use_color: bool | None = None) -> None:
    """Emit a success message.

    Args:
        msg: Message text to print.
        use_emoji: Flag indicating whether to prefix an emoji.
        use_color: Explicit colour flag; ``None`` follows TTY detection.
    """

    _print_line(f"{emoji('✅ ', use_emoji)}{msg}", style="green", use_emoji=use_emoji, use_color=use_color)


def warn(msg: str, *, use_emoji: bool, use_color: bool | None = None) -> None:
    """Emit a warning message.

    Args:
        msg: Message text to print.
        use_emoji: Flag indicating whether to prefix an emoji.
        use_color: Explicit colour flag; ``None`` follows TTY detection.
    """

    _print_line(f"{emoji('⚠️ ', use_emoji)}{msg}", style="yellow", use_emoji=use_emoji, use_color=use_color)


def fail(msg: str, *, use_emoji: bool, use_color: bool | None = None) -> None:
    """Emit an error message.

    Args:
        msg: Message text to print.
        use_emoji: Flag indicating whether to prefix an emoji.
        use_color: Explicit colour flag; ``None`` follows TTY detection.
    """

    _print_line(f"{emoji('❌ ', use_emoji)}{msg}", style="red", use_emoji=use_emoji, use_color=use_color)


class Notifier(Protocol):
    """Channel used to tell the user about expected, non-fatal conditions."""

    def notify(self, message: str) -> None:
        """Show ``message`` to the user."""
        ...


class ConsoleNotifier:
    """Notifier printing informational messages to the console."""

    def __init__(self, *, use_emoji: bool = True, use_color: bool | None = None) -> None:
        self.use_emoji = use_emoji
        self.use_color = use_color

    def notify(self, message: str) -> None:
        info(message, use_emoji=self.use_emoji, use_color=self.use_color)


def configure_logging(*, debug: bool) -> None:
    """Route library loggers to stderr through a Rich handler."""

    logger = logging.getLogger("elmcheck")
    logger.setLevel(logging.DEBUG if debug else logging.WARNING)
    if not any(isinstance(handler, RichHandler) for handler in logger.handlers):
        handler = RichHandler(
            console=Console(stderr=True, highlight=False),
            show_time=False,
            show_path=debug,
        )
        logger.addHandler(handler)


__all__ = [
    "ConsoleNotifier",
    "Notifier",
    "configure_logging",
    "detect_tty",
    "emoji",
    "fail",
    "get_console",
    "info",
    "ok",
    "warn",
]
