# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""CLI application entry point wiring the publish and evaluate commands."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path

import typer

from ..config import ConfigError, GitHubContext, PublishConfig
from ..diff import DiffParseError
from ..github import GitHubClient, GitHubError
from ..logging import fail
from ..publisher import PublishResult, evaluate_reports, publish_sarif_annotations

app = typer.Typer(
    name="prqa",
    help="Annotate pull requests with SARIF findings on changed lines.",
    no_args_is_help=True,
    add_completion=False,
)


def _resolve_root(root: Path | None) -> Path:
    return (root or Path.cwd()).resolve()


async def _publish(config: PublishConfig, context: GitHubContext, diff_text: str | None) -> PublishResult:
    async with GitHubClient(context) as client:
        return await publish_sarif_annotations(config, context, client, diff_text=diff_text)


@app.command()
def publish(
    sarif_reports: str | None = typer.Option(
        None,
        "--sarif-reports",
        help="Comma-separated SARIF report paths (defaults to INPUT_SARIF_REPORTS or SARIF_REPORTS).",
    ),
    diff_file: Path | None = typer.Option(
        None,
        "--diff-file",
        help="Read the pull-request diff from a file instead of GitHub.",
    ),
    root: Path | None = typer.Option(None, "--root", "-r", help="Repository root (defaults to the working directory)."),
    dry_run: bool = typer.Option(False, "--dry-run", help="Build the check run without submitting it."),
) -> None:
    """Publish changed-line SARIF violations as a GitHub check run."""
    try:
        config = PublishConfig.from_environment(sarif_reports=sarif_reports, root=_resolve_root(root), dry_run=dry_run)
        context = GitHubContext.from_environment()
        diff_text = diff_file.read_text(encoding="utf-8") if diff_file is not None else None
        asyncio.run(_publish(config, context, diff_text))
    except (ConfigError, GitHubError, DiffParseError, OSError, ValueError) as exc:
        fail(str(exc), use_emoji=True)
        raise typer.Exit(code=1) from exc


@app.command()
def evaluate(
    diff_file: Path = typer.Argument(..., metavar="DIFF", help="Unified diff of the change under review."),
    reports: list[Path] = typer.Argument(..., metavar="REPORT...", help="SARIF report files."),
    root: Path | None = typer.Option(None, "--root", "-r", help="Repository root (defaults to the working directory)."),
) -> None:
    """Print the check-run payload for a local diff and reports."""
    try:
        diff_text = diff_file.read_text(encoding="utf-8")
        payload = evaluate_reports(reports, diff_text, root=_resolve_root(root))
    except (DiffParseError, OSError, ValueError) as exc:
        fail(str(exc), use_emoji=True)
        raise typer.Exit(code=1) from exc

    typer.echo(json.dumps(payload.model_dump(mode="json"), indent=2))
    if payload.conclusion == "failure":
        raise typer.Exit(code=1)


__all__ = ["app"]
