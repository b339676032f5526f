# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Core data models shared across the prqa package."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Final, Literal

from pydantic import BaseModel, ConfigDict, Field, PositiveInt

from .severity import AnnotationLevel, SarifLevel

if TYPE_CHECKING:
    from .config import GitHubContext

CHECK_RUN_NAME: Final[str] = "Code Quality"

Conclusion = Literal["success", "failure"]


class Violation(BaseModel):
    """One located finding taken from a SARIF report."""

    model_config = ConfigDict(frozen=True)

    tool_name: str
    rule_id: str | None = None
    rule: dict[str, Any] | None = None
    path: str
    start_line: PositiveInt
    end_line: PositiveInt
    message: str
    was_changed: bool
    level: SarifLevel = SarifLevel.ERROR


class Annotation(BaseModel):
    """Single-line check-run annotation using GitHub's field names."""

    model_config = ConfigDict(frozen=True)

    path: str
    start_line: PositiveInt
    end_line: PositiveInt
    annotation_level: AnnotationLevel
    message: str
    title: str


class SeverityCounts(BaseModel):
    """Per-bucket totals over changed-line violations."""

    model_config = ConfigDict(frozen=True)

    error_count: int = 0
    warning_count: int = 0
    notice_count: int = 0

    @property
    def total(self) -> int:
        """Return the number of counted violations."""
        return self.error_count + self.warning_count + self.notice_count

    @property
    def summary(self) -> str:
        """Return the human-readable totals line."""
        return f"{self.error_count} errors, {self.warning_count} warnings, {self.notice_count} infos."


class CheckRunPayload(BaseModel):
    """Aggregated outcome of a run, independent of where it is published."""

    model_config = ConfigDict(frozen=True)

    conclusion: Conclusion
    counts: SeverityCounts
    annotations: tuple[Annotation, ...] = Field(default_factory=tuple)

    @property
    def title(self) -> str:
        return self.counts.summary

    @property
    def summary(self) -> str:
        return self.counts.summary


class CheckRunOutput(BaseModel):
    """The ``output`` object of a check-run request."""

    model_config = ConfigDict(frozen=True)

    title: str
    summary: str
    annotations: tuple[Annotation, ...] = Field(default_factory=tuple)


class CheckRunRequest(BaseModel):
    """Check-run creation request addressed to a repository commit."""

    model_config = ConfigDict(frozen=True)

    owner: str
    repo: str
    name: str = CHECK_RUN_NAME
    head_sha: str
    status: Literal["completed"] = "completed"
    conclusion: Conclusion
    output: CheckRunOutput

    @classmethod
    def from_payload(
        cls,
        payload: CheckRunPayload,
        context: GitHubContext,
        *,
        name: str = CHECK_RUN_NAME,
    ) -> CheckRunRequest:
        """Address ``payload`` to the commit described by ``context``."""

        return cls(
            owner=context.owner,
            repo=context.repo,
            name=name,
            head_sha=context.head_sha,
            conclusion=payload.conclusion,
            output=CheckRunOutput(
                title=payload.title,
                summary=payload.summary,
                annotations=payload.annotations,
            ),
        )

    def as_api_body(self) -> dict[str, Any]:
        """Return the JSON body for the REST endpoint.

        ``owner`` and ``repo`` are part of the endpoint URL and are omitted.
        """

        return self.model_dump(mode="json", exclude={"owner", "repo"})


__all__ = [
    "Annotation",
    "CHECK_RUN_NAME",
    "CheckRunOutput",
    "CheckRunPayload",
    "CheckRunRequest",
    "Conclusion",
    "SeverityCounts",
    "Violation",
]
