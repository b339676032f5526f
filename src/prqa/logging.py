# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Console status lines for CI logs, styled with rich when stdout is a terminal."""

from __future__ import annotations

import sys
from functools import lru_cache
from typing import Final

from rich.console import Console
from rich.rule import Rule
from rich.text import Text

# level -> (emoji prefix, rich style)
_LEVELS: Final[dict[str, tuple[str, str]]] = {
    "info": ("ℹ️ ", "cyan"),
    "ok": ("✅ ", "green"),
    "warn": ("⚠️ ", "yellow"),
    "fail": ("❌ ", "red"),
}


def _stdout_is_terminal() -> bool:
    isatty = getattr(sys.stdout, "isatty", None)
    try:
        return bool(isatty and isatty())
    except ValueError:
        return False


@lru_cache(maxsize=4)
def _terminal_console(color: bool, emoji: bool) -> Console:
    return Console(color_system="auto" if color else None, no_color=not color, emoji=emoji, soft_wrap=True)


def get_console(*, color: bool, emoji: bool) -> Console:
    """Return a console writing to the current ``sys.stdout``.

    Terminal consoles are cached; piped output gets a plain console bound to
    whatever stream is installed at call time.
    """

    if _stdout_is_terminal():
        return _terminal_console(color, emoji)
    return Console(file=sys.stdout, no_color=True, emoji=emoji, soft_wrap=True)


def _emit(level: str, msg: str, *, use_emoji: bool, use_color: bool | None) -> None:
    prefix, style = _LEVELS[level]
    color = _stdout_is_terminal() if use_color is None else use_color
    text = Text(f"{prefix if use_emoji else ''}{msg}")
    if color:
        text.stylize(style)
    get_console(color=color, emoji=use_emoji).print(text)


def section(title: str, *, use_color: bool) -> None:
    """Print a header separating blocks of output."""

    console = get_console(color=use_color, emoji=False)
    if use_color and _stdout_is_terminal():
        console.print()
        console.print(Rule(title))
    else:
        console.print(f"\n--- {title} ---", markup=False, emoji=False)


def info(msg: str, *, use_emoji: bool, use_color: bool | None = None) -> None:
    _emit("info", msg, use_emoji=use_emoji, use_color=use_color)


def ok(msg: str, *, use_emoji: bool, use_color: bool | None = None) -> None:
    _emit("ok", msg, use_emoji=use_emoji, use_color=use_color)


def warn(msg: str, *, use_emoji: bool, use_color: bool | None = None) -> None:
    """Report a recoverable problem; processing continues."""
    _emit("warn", msg, use_emoji=use_emoji, use_color=use_color)


def fail(msg: str, *, use_emoji: bool, use_color: bool | None = None) -> None:
    """Report a fatal problem before the caller exits."""
    _emit("fail", msg, use_emoji=use_emoji, use_color=use_color)


__all__ = ["fail", "get_console", "info", "ok", "section", "warn"]
