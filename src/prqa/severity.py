# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Severity related types and helpers."""

from __future__ import annotations

from enum import Enum
from typing import Final


class SarifLevel(str, Enum):
    """Result levels defined by the SARIF 2.1.0 format."""

    ERROR = "error"
    WARNING = "warning"
    NOTE = "note"
    NONE = "none"

    @classmethod
    def parse(cls, raw: object) -> SarifLevel:
        """Return the level named by ``raw``.

        SARIF consumers treat an omitted level as ``error``. Level names are
        case-sensitive; anything else carries no severity and collapses to
        :attr:`NONE`.

        Args:
            raw: Value of a result's ``level`` property, if any.

        Returns:
            SarifLevel: Matching enum member.
        """

        if raw is None or raw == "":
            return cls.ERROR
        if isinstance(raw, SarifLevel):
            return raw
        if not isinstance(raw, str):
            return cls.NONE
        try:
            return cls(raw)
        except ValueError:
            return cls.NONE


class AnnotationLevel(str, Enum):
    """Annotation levels accepted by the GitHub check-runs API."""

    FAILURE = "failure"
    WARNING = "warning"
    NOTICE = "notice"


_SARIF_TO_ANNOTATION: Final[dict[SarifLevel, AnnotationLevel]] = {
    SarifLevel.ERROR: AnnotationLevel.FAILURE,
    SarifLevel.WARNING: AnnotationLevel.WARNING,
    SarifLevel.NOTE: AnnotationLevel.NOTICE,
    SarifLevel.NONE: AnnotationLevel.NOTICE,
}


def annotation_level(level: SarifLevel) -> AnnotationLevel:
    """Map a :class:`SarifLevel` to the check-run annotation level."""

    return _SARIF_TO_ANNOTATION[level]
