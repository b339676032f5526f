# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Index the lines added by a unified diff."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from typing import Final

LOGGER = logging.getLogger(__name__)

ChangedLineMap = Mapping[str, frozenset[int]]

DEV_NULL: Final[str] = "/dev/null"
_TARGET_PREFIX: Final[str] = "b/"
_HUNK_HEADER: Final[re.Pattern[str]] = re.compile(r"^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@")
_GIT_ESCAPE: Final[re.Pattern[bytes]] = re.compile(rb"\\(?:([0-7]{1,3})|(.))", re.DOTALL)
_GIT_SIMPLE_ESCAPES: Final[dict[bytes, bytes]] = {
    b"a": b"\a",
    b"b": b"\b",
    b"f": b"\f",
    b"n": b"\n",
    b"r": b"\r",
    b"t": b"\t",
    b"v": b"\v",
}


class DiffParseError(ValueError):
    """Raised when unified diff text cannot be interpreted."""


@dataclass(slots=True)
class _Hunk:
    """Counters tracking the unconsumed body of a hunk."""

    old_remaining: int
    new_remaining: int
    new_line: int

    @property
    def open(self) -> bool:
        return self.old_remaining > 0 or self.new_remaining > 0


def compute_changed_lines(diff_text: str) -> ChangedLineMap:
    """Return the post-change line numbers added per file in ``diff_text``.

    Only additions are recorded; deletions and context lines never appear.
    Whole-file deletions (target ``/dev/null``), binary patches and
    rename/mode-only entries contribute nothing.

    Args:
        diff_text: Unified diff as served for a pull request.

    Returns:
        ChangedLineMap: Mapping of repository-relative path to added lines.

    Raises:
        DiffParseError: If a hunk header is malformed or a hunk is truncated.
    """

    changed: dict[str, set[int]] = {}
    for path, line_number in _iter_additions(diff_text):
        changed.setdefault(path, set()).add(line_number)
    LOGGER.debug("indexed additions in %d file(s)", len(changed))
    return {path: frozenset(lines) for path, lines in changed.items()}


def _iter_additions(diff_text: str) -> Iterator[tuple[str, int]]:
    """Yield ``(target path, new line number)`` for every added line."""

    target: str | None = None
    hunk: _Hunk | None = None
    for index, line in enumerate(_split_lines(diff_text), start=1):
        if hunk is not None and hunk.open:
            added = _consume_hunk_line(hunk, line, index)
            if added is not None and target is not None:
                yield target, added
            continue
        if line.startswith("diff --git "):
            target = None
        elif line.startswith("+++ "):
            target = _target_path(line[4:])
        elif line.startswith("@@"):
            hunk = _parse_hunk_header(line, index)
    if hunk is not None and hunk.open:
        raise DiffParseError("diff ended inside a hunk")


def _consume_hunk_line(hunk: _Hunk, line: str, index: int) -> int | None:
    """Advance ``hunk`` past ``line`` returning the added line number, if any."""

    tag = line[:1]
    if tag == "\\":
        return None
    if tag == "+":
        if hunk.new_remaining <= 0:
            raise DiffParseError(f"line {index}: addition exceeds hunk length")
        added = hunk.new_line
        hunk.new_line += 1
        hunk.new_remaining -= 1
        return added
    if tag == "-":
        if hunk.old_remaining <= 0:
            raise DiffParseError(f"line {index}: deletion exceeds hunk length")
        hunk.old_remaining -= 1
        return None
    if tag in {" ", ""}:
        if hunk.old_remaining <= 0 or hunk.new_remaining <= 0:
            raise DiffParseError(f"line {index}: context line exceeds hunk length")
        hunk.new_line += 1
        hunk.old_remaining -= 1
        hunk.new_remaining -= 1
        return None
    raise DiffParseError(f"line {index}: hunk ended early, got {line[:40]!r}")


def _parse_hunk_header(line: str, index: int) -> _Hunk:
    match = _HUNK_HEADER.match(line)
    if match is None:
        raise DiffParseError(f"line {index}: malformed hunk header {line!r}")
    old_count, new_start, new_count = match.group(2), match.group(3), match.group(4)
    return _Hunk(
        old_remaining=1 if old_count is None else int(old_count),
        new_remaining=1 if new_count is None else int(new_count),
        new_line=int(new_start),
    )


def _split_lines(diff_text: str) -> list[str]:
    # Only "\n" terminates a diff line; form feeds and unicode separators are content.
    lines = diff_text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def _target_path(raw: str) -> str | None:
    """Return the repository path from a ``+++`` header value."""

    value = raw.split("\t", 1)[0].rstrip()
    if value.startswith('"') and value.endswith('"') and len(value) >= 2:
        value = _git_unquote(value)
    if value == DEV_NULL:
        return None
    if value.startswith(_TARGET_PREFIX):
        value = value[len(_TARGET_PREFIX) :]
    return value


def _git_unquote(value: str) -> str:
    """Decode a C-style quoted path as written by git."""

    def _replace(match: re.Match[bytes]) -> bytes:
        octal, char = match.group(1), match.group(2)
        if octal is not None:
            return bytes([int(octal, 8) & 0xFF])
        return _GIT_SIMPLE_ESCAPES.get(char, char)

    return _GIT_ESCAPE.sub(_replace, value[1:-1].encode("utf-8")).decode("utf-8", errors="replace")


__all__ = ["ChangedLineMap", "DEV_NULL", "DiffParseError", "compute_changed_lines"]
