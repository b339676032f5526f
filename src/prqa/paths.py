# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Helpers for reasoning about filesystem paths and artifact URIs."""

from __future__ import annotations

import os
from functools import lru_cache
from os import PathLike
from pathlib import Path
from typing import Final
from urllib.parse import unquote, urlsplit

_Pathish = str | PathLike[str] | Path
_DEFAULT_CACHE_SIZE: Final[int] = 1024
_FILE_SCHEME: Final[str] = "file"


@lru_cache(maxsize=_DEFAULT_CACHE_SIZE)
def _best_effort_resolve(path: Path) -> Path:
    """Return ``path`` resolved where possible without raising."""

    try:
        return path.resolve(strict=False)
    except (OSError, RuntimeError):
        return path.absolute() if not path.is_absolute() else path


def normalize_path(path: _Pathish, *, base_dir: _Pathish | None = None) -> Path:
    """Return ``path`` normalised relative to ``base_dir``.

    Args:
        path: Filesystem path supplied by the caller.
        base_dir: Base directory used to relativise the path. Defaults to
            ``Path.cwd()`` when omitted.

    Returns:
        Path: Relative path when both inputs share a lineage, otherwise the
        ``os.path.relpath`` form or, failing that, the resolved candidate.

    Raises:
        ValueError: If ``path`` is ``None``.
    """

    if path is None:
        raise ValueError("path must not be None")

    raw_path = Path(path).expanduser()
    base_candidate = Path.cwd() if base_dir is None else Path(base_dir)
    base = _best_effort_resolve(base_candidate.expanduser())

    candidate = raw_path if raw_path.is_absolute() else base / raw_path
    candidate = _best_effort_resolve(candidate)

    try:
        return candidate.relative_to(base)
    except ValueError:
        try:
            return Path(os.path.relpath(candidate, base))
        except ValueError:
            return candidate


def artifact_uri_to_path(uri: str) -> str:
    """Return the filesystem path named by a SARIF artifact ``uri``.

    Plain paths pass through untouched; ``file://`` URIs are stripped of their
    scheme and percent-decoded.
    """

    parts = urlsplit(uri)
    if parts.scheme.lower() != _FILE_SCHEME:
        return uri
    decoded = unquote(parts.path)
    # file:///C:/src/a.py
    if len(decoded) > 2 and decoded[0] == "/" and decoded[2] == ":":
        decoded = decoded[1:]
    return decoded


def repository_relative(uri: str, *, root: _Pathish | None = None) -> str:
    """Return the POSIX-style path of ``uri`` relative to ``root``.

    Args:
        uri: Artifact location as written in a SARIF report.
        root: Repository root. Defaults to the current working directory.

    Returns:
        str: Key comparable with the target paths of a unified diff.
    """

    return normalize_path(artifact_uri_to_path(uri), base_dir=root).as_posix()


__all__ = ["artifact_uri_to_path", "normalize_path", "repository_relative"]
