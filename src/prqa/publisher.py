# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Sequence diff indexing, SARIF extraction and check-run publication."""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol

from .checks import build_check_run
from .config import ConfigError, GitHubContext, PublishConfig
from .diff import ChangedLineMap, compute_changed_lines
from .logging import info, ok, section, warn
from .models import CheckRunPayload, CheckRunRequest, Violation
from .sarif import extract_from_documents, load_sarif

LOGGER = logging.getLogger(__name__)


class CheckRunService(Protocol):
    """Collaborator that talks to the source-control host."""

    async def fetch_diff(self, diff_url: str) -> str: ...

    async def create_check_run(self, request: CheckRunRequest) -> dict[str, Any]: ...


@dataclass(frozen=True, slots=True)
class PublishResult:
    """Request that was built and the host's reply, if it was sent."""

    request: CheckRunRequest
    response: dict[str, Any] | None = None

    @property
    def submitted(self) -> bool:
        return self.response is not None


def iter_reports(report_paths: Sequence[Path], *, root: Path | None = None) -> Iterator[tuple[Path, dict[str, Any]]]:
    """Yield ``(path, document)`` for each readable report, in order.

    Unreadable files are reported and skipped. A file that reads but does not
    parse as JSON aborts the iteration.
    """

    for report_path in report_paths:
        location = report_path if root is None else root / report_path
        try:
            text = location.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            warn(f'could not open file "{report_path}", {exc}', use_emoji=True)
            continue
        LOGGER.debug("loaded report %s", report_path)
        yield report_path, load_sarif(text)


def collect_violations(
    report_paths: Sequence[Path],
    changed_lines: ChangedLineMap,
    *,
    root: Path | None = None,
) -> list[Violation]:
    """Concatenate the violations of every readable report in input order."""

    documents = (document for _, document in iter_reports(report_paths, root=root))
    return extract_from_documents(documents, changed_lines, root=root)


def evaluate_reports(
    report_paths: Sequence[Path],
    diff_text: str,
    *,
    root: Path | None = None,
) -> CheckRunPayload:
    """Run the offline pipeline: index ``diff_text``, extract, aggregate."""

    changed_lines = compute_changed_lines(diff_text)
    return build_check_run(collect_violations(report_paths, changed_lines, root=root))


async def publish_sarif_annotations(
    config: PublishConfig,
    context: GitHubContext,
    client: CheckRunService,
    *,
    diff_text: str | None = None,
) -> PublishResult:
    """Publish the changed-line violations of ``config.sarif_reports``.

    Args:
        config: Resolved run configuration.
        context: Repository and commit the check run is attached to.
        client: Host collaborator used to fetch the diff and create the run.
        diff_text: Pre-fetched diff; when given no diff request is made.

    Returns:
        PublishResult: The built request and, unless ``config.dry_run``, the
        host's response.

    Raises:
        ConfigError: If no reports are configured or the diff URL is unknown.
    """

    if not config.sarif_reports:
        raise ConfigError("sarif_reports was not set.")

    if diff_text is None:
        diff_text = await client.fetch_diff(context.require_diff_url())
    payload = evaluate_reports(config.sarif_reports, diff_text, root=config.root)
    request = CheckRunRequest.from_payload(payload, context, name=config.check_name)

    section(config.check_name, use_color=True)
    info(f"{request.conclusion}: {request.output.summary}", use_emoji=True)
    LOGGER.debug("check run request: %s", request.model_dump_json())

    if config.dry_run:
        info("dry run, check run not submitted", use_emoji=True)
        return PublishResult(request=request)

    response = await client.create_check_run(request)
    ok(f"created check run {response.get('id')} {response.get('html_url') or ''}".rstrip(), use_emoji=True)
    return PublishResult(request=request, response=response)


__all__ = [
    "CheckRunService",
    "PublishResult",
    "collect_violations",
    "evaluate_reports",
    "iter_reports",
    "publish_sarif_annotations",
]
