# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Translate violations into a check-run payload."""

from __future__ import annotations

from collections.abc import Iterable

from .models import Annotation, CheckRunPayload, Conclusion, SeverityCounts, Violation
from .severity import AnnotationLevel, annotation_level


def annotation_title(violation: Violation) -> str:
    """Return ``"<tool> - <rule>"``, or just the tool name when the rule is unknown."""

    if violation.rule_id is None:
        return violation.tool_name
    return f"{violation.tool_name} - {violation.rule_id}"


def to_annotation(violation: Violation) -> Annotation:
    """Build the single-line annotation marking ``violation``'s start line."""

    return Annotation(
        path=violation.path,
        start_line=violation.start_line,
        end_line=violation.start_line,
        annotation_level=annotation_level(violation.level),
        message=violation.message,
        title=annotation_title(violation),
    )


def build_check_run(violations: Iterable[Violation]) -> CheckRunPayload:
    """Aggregate changed-line violations into a check-run payload.

    Violations outside the changed lines are dropped entirely. Annotations
    keep extraction order.

    Args:
        violations: Violations in extraction order.

    Returns:
        CheckRunPayload: Conclusion, per-level counts and annotations.
    """

    tally = {level: 0 for level in AnnotationLevel}
    annotations: list[Annotation] = []
    for violation in violations:
        if not violation.was_changed:
            continue
        annotation = to_annotation(violation)
        tally[annotation.annotation_level] += 1
        annotations.append(annotation)

    counts = SeverityCounts(
        error_count=tally[AnnotationLevel.FAILURE],
        warning_count=tally[AnnotationLevel.WARNING],
        notice_count=tally[AnnotationLevel.NOTICE],
    )
    conclusion: Conclusion = "failure" if counts.error_count > 0 else "success"
    return CheckRunPayload(conclusion=conclusion, counts=counts, annotations=tuple(annotations))


__all__ = ["annotation_title", "build_check_run", "to_annotation"]
