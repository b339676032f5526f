# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Flatten SARIF reports into located violations."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Iterator, Mapping, Sequence
from pathlib import Path
from typing import Any

from .diff import ChangedLineMap
from .logging import warn
from .models import Violation
from .paths import repository_relative
from .severity import SarifLevel

LOGGER = logging.getLogger(__name__)

SarifDocument = Mapping[str, Any]


def load_sarif(text: str) -> dict[str, Any]:
    """Parse SARIF JSON text.

    Raises:
        json.JSONDecodeError: If ``text`` is not valid JSON.
        ValueError: If the document is not a JSON object.
    """

    document = json.loads(text)
    if not isinstance(document, dict):
        raise ValueError("SARIF document must be a JSON object")
    return document


def lookup_rule(rules: Sequence[Any] | None, rule_index: object) -> dict[str, Any] | None:
    """Return the rule descriptor at ``rule_index`` or ``None`` when unavailable."""

    if not isinstance(rules, list) or isinstance(rule_index, bool) or not isinstance(rule_index, int):
        return None
    if not 0 <= rule_index < len(rules):
        return None
    rule = rules[rule_index]
    return rule if isinstance(rule, dict) else None


def extract_violations(
    sarif: SarifDocument,
    changed_lines: ChangedLineMap,
    *,
    root: Path | None = None,
) -> list[Violation]:
    """Return one violation per (run, result, location) in document order.

    Args:
        sarif: Parsed SARIF document.
        changed_lines: Added lines per repository-relative path.
        root: Repository root used to relativise artifact URIs. Defaults to
            the current working directory.

    Returns:
        list[Violation]: Violations ordered by run, result, then location.
    """

    return list(_iter_violations(sarif, changed_lines, root))


def extract_from_documents(
    documents: Iterable[SarifDocument],
    changed_lines: ChangedLineMap,
    *,
    root: Path | None = None,
) -> list[Violation]:
    """Concatenate the violations of several documents in input order."""

    violations: list[Violation] = []
    for document in documents:
        violations.extend(extract_violations(document, changed_lines, root=root))
    return violations


def _iter_violations(
    sarif: SarifDocument,
    changed_lines: ChangedLineMap,
    root: Path | None,
) -> Iterator[Violation]:
    for run in _mappings(sarif.get("runs"), "run"):
        driver = _mapping(_mapping(run.get("tool")).get("driver"))
        tool_name = str(driver.get("name") or "")
        rules = driver.get("rules")
        for result in _mappings(run.get("results"), f"{tool_name} result"):
            rule = lookup_rule(rules, result.get("ruleIndex"))
            raw_rule_id = result.get("ruleId")
            rule_id = None if raw_rule_id is None else str(raw_rule_id)
            level = SarifLevel.parse(result.get("level"))
            message = str(_mapping(result.get("message")).get("text") or "")
            for location in _mappings(result.get("locations"), f"{tool_name} location"):
                placed = _resolve_location(location, root)
                if placed is None:
                    warn(f"skipping unplaceable location for {tool_name} rule {rule_id}", use_emoji=True)
                    continue
                path, start_line, end_line = placed
                yield Violation(
                    tool_name=tool_name,
                    rule_id=rule_id,
                    rule=rule,
                    path=path,
                    start_line=start_line,
                    end_line=end_line,
                    message=message,
                    was_changed=start_line in changed_lines.get(path, frozenset()),
                    level=level,
                )


def _mapping(value: object) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


def _mappings(value: object, kind: str) -> Iterator[Mapping[str, Any]]:
    """Yield the JSON objects of an array, warning about any other entries."""

    if value is None:
        return
    if not isinstance(value, list):
        warn(f"skipping malformed {kind} list", use_emoji=True)
        return
    for item in value:
        if isinstance(item, Mapping):
            yield item
        else:
            warn(f"skipping malformed {kind}: {item!r}", use_emoji=True)


def _resolve_location(location: Mapping[str, Any], root: Path | None) -> tuple[str, int, int] | None:
    """Return ``(path, start line, end line)`` for ``location`` when it names a line."""

    physical = _mapping(location.get("physicalLocation"))
    uri = _mapping(physical.get("artifactLocation")).get("uri")
    region = _mapping(physical.get("region"))
    start_line = region.get("startLine")
    if not uri or not _is_line_number(start_line):
        LOGGER.debug("location without uri or start line: %r", location)
        return None
    end_line = region.get("endLine")
    if not _is_line_number(end_line):
        end_line = start_line
    return repository_relative(str(uri), root=root), start_line, end_line


def _is_line_number(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


__all__ = [
    "SarifDocument",
    "extract_from_documents",
    "extract_violations",
    "load_sarif",
    "lookup_rule",
]
