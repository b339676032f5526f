# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Configuration models resolved once from the CI environment."""

from __future__ import annotations

import json
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Final

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .models import CHECK_RUN_NAME

REPORTS_INPUT_ENV: Final[str] = "INPUT_SARIF_REPORTS"
REPORTS_ENV: Final[str] = "SARIF_REPORTS"
DEFAULT_API_URL: Final[str] = "https://api.github.com"


class ConfigError(Exception):
    """Raised when configuration input is invalid."""


def parse_report_list(raw: str | None) -> list[str]:
    """Split a comma-separated report list, discarding blank entries."""

    if not raw:
        return []
    return [item.strip() for item in raw.split(",") if item.strip()]


class PublishConfig(BaseModel):
    """Options controlling a single publishing run."""

    model_config = ConfigDict(frozen=True)

    sarif_reports: tuple[Path, ...]
    root: Path = Field(default_factory=Path.cwd)
    check_name: str = CHECK_RUN_NAME
    dry_run: bool = False

    @field_validator("sarif_reports", mode="before")
    @classmethod
    def _split_reports(cls, value: object) -> object:
        if value is None:
            return ()
        if isinstance(value, str):
            return tuple(parse_report_list(value))
        return value

    @classmethod
    def from_environment(
        cls,
        env: Mapping[str, str] | None = None,
        *,
        sarif_reports: str | None = None,
        root: Path | None = None,
        dry_run: bool = False,
    ) -> PublishConfig:
        """Resolve the report list from an explicit value or the environment.

        Precedence: ``sarif_reports``, then the ``sarif_reports`` action input
        (``INPUT_SARIF_REPORTS``), then ``SARIF_REPORTS``.

        Raises:
            ConfigError: If no report file is configured.
        """

        source = os.environ if env is None else env
        raw = sarif_reports or source.get(REPORTS_INPUT_ENV) or source.get(REPORTS_ENV) or ""
        reports = parse_report_list(raw)
        if not reports:
            raise ConfigError("sarif_reports was not set.")
        return cls(
            sarif_reports=tuple(Path(item) for item in reports),
            root=root or Path.cwd(),
            dry_run=dry_run,
        )


class GitHubContext(BaseModel):
    """Repository, commit and pull-request coordinates of the workflow run."""

    model_config = ConfigDict(frozen=True)

    owner: str
    repo: str
    sha: str = ""
    head_sha: str
    diff_url: str | None = None
    api_url: str = DEFAULT_API_URL
    token: str | None = Field(default=None, repr=False)

    def require_diff_url(self) -> str:
        """Return the pull-request diff URL.

        Raises:
            ConfigError: If the triggering event was not a pull request.
        """

        if not self.diff_url:
            raise ConfigError("no pull request diff_url in the event payload")
        return self.diff_url

    @classmethod
    def from_environment(cls, env: Mapping[str, str] | None = None) -> GitHubContext:
        """Build the context from the variables GitHub Actions exports.

        Raises:
            ConfigError: If ``GITHUB_REPOSITORY`` is missing or malformed, the
                event file cannot be read, or no commit SHA is available.
        """

        source = os.environ if env is None else env
        repository = source.get("GITHUB_REPOSITORY", "")
        owner, _, repo = repository.partition("/")
        if not owner or not repo:
            raise ConfigError(f"GITHUB_REPOSITORY must be 'owner/repo', got {repository!r}")

        event = _load_event(source.get("GITHUB_EVENT_PATH"))
        pull_request = event.get("pull_request") or {}
        sha = source.get("GITHUB_SHA", "")
        head_sha = (pull_request.get("head") or {}).get("sha") or sha
        if not head_sha:
            raise ConfigError("unable to determine the head commit SHA")
        return cls(
            owner=owner,
            repo=repo,
            sha=sha,
            head_sha=head_sha,
            diff_url=pull_request.get("diff_url"),
            api_url=(source.get("GITHUB_API_URL") or DEFAULT_API_URL).rstrip("/"),
            token=source.get("INPUT_GITHUB_TOKEN") or source.get("GITHUB_TOKEN") or None,
        )


def _load_event(event_path: str | None) -> dict[str, Any]:
    if not event_path:
        return {}
    try:
        payload = json.loads(Path(event_path).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigError(f"unable to read event payload {event_path}: {exc}") from exc
    return payload if isinstance(payload, dict) else {}


__all__ = [
    "ConfigError",
    "DEFAULT_API_URL",
    "GitHubContext",
    "PublishConfig",
    "REPORTS_ENV",
    "REPORTS_INPUT_ENV",
    "parse_report_list",
]
