# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for the end-to-end publishing pipeline."""

from __future__ import annotations

import asyncio
import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from prqa.config import ConfigError, GitHubContext, PublishConfig
from prqa.diff import DiffParseError
from prqa.models import CheckRunRequest
from prqa.publisher import collect_violations, evaluate_reports, publish_sarif_annotations

Factory = Callable[..., dict[str, Any]]

CONTEXT = GitHubContext(
    owner="octo",
    repo="widgets",
    head_sha="abc",
    diff_url="https://github.com/octo/widgets/pull/1.diff",
)


class FakeGitHub:
    """Record calls instead of talking to GitHub."""

    def __init__(self, diff_text: str) -> None:
        self.diff_text = diff_text
        self.fetched: list[str] = []
        self.created: list[CheckRunRequest] = []

    async def fetch_diff(self, diff_url: str) -> str:
        self.fetched.append(diff_url)
        return self.diff_text

    async def create_check_run(self, request: CheckRunRequest) -> dict[str, Any]:
        self.created.append(request)
        return {"id": len(self.created), "html_url": "https://github.com/octo/widgets/runs/1"}


def _write(path: Path, document: dict[str, Any]) -> Path:
    path.write_text(json.dumps(document), encoding="utf-8")
    return path


def _publish(config: PublishConfig, client: FakeGitHub, **kwargs: Any):
    return asyncio.run(publish_sarif_annotations(config, CONTEXT, client, **kwargs))


def test_scenario_warning_on_added_line(
    tmp_path: Path, sample_diff: str, make_result: Factory, make_run: Factory, make_document: Factory
) -> None:
    report = _write(
        tmp_path / "eslint.sarif",
        make_document(
            make_run("eslint", [make_result("src/a.js", 10, level="warning"), make_result("src/a.js", 99, level="error")])
        ),
    )
    client = FakeGitHub(sample_diff)

    result = _publish(PublishConfig(sarif_reports=(report,), root=tmp_path), client)

    assert client.fetched == [CONTEXT.diff_url]
    assert client.created == [result.request]
    assert result.submitted
    assert result.request.conclusion == "success"
    assert result.request.output.summary == "0 errors, 1 warnings, 0 infos."
    assert [a.start_line for a in result.request.output.annotations] == [10]


def test_scenario_empty_report_list_fails_before_network(sample_diff: str) -> None:
    client = FakeGitHub(sample_diff)

    with pytest.raises(ConfigError):
        _publish(PublishConfig(sarif_reports=()), client)

    assert client.fetched == []
    assert client.created == []


def test_scenario_two_reports_accumulate_in_order(
    tmp_path: Path, sample_diff: str, make_result: Factory, make_run: Factory, make_document: Factory
) -> None:
    first = _write(tmp_path / "pmd.sarif", make_document(make_run("PMD", [make_result("src/a.js", 12)])))
    second = _write(tmp_path / "cpd.sarif", make_document(make_run("CPD", [make_result("src/new.py", 2)])))
    client = FakeGitHub(sample_diff)

    result = _publish(PublishConfig(sarif_reports=(first, second), root=tmp_path), client)

    assert result.request.conclusion == "failure"
    assert result.request.output.title == "2 errors, 0 warnings, 0 infos."
    assert [a.title for a in result.request.output.annotations] == ["PMD - R1", "CPD - R1"]


def test_scenario_unreadable_report_is_skipped(
    tmp_path: Path,
    sample_diff: str,
    make_result: Factory,
    make_run: Factory,
    make_document: Factory,
    capsys: pytest.CaptureFixture[str],
) -> None:
    readable = _write(tmp_path / "ok.sarif", make_document(make_run("PMD", [make_result("src/a.js", 10, level="note")])))
    client = FakeGitHub(sample_diff)

    result = _publish(PublishConfig(sarif_reports=(tmp_path / "missing.sarif", readable), root=tmp_path), client)

    assert len(result.request.output.annotations) == 1
    assert len(client.created) == 1
    assert "missing.sarif" in capsys.readouterr().out


def test_invalid_sarif_json_is_fatal(tmp_path: Path, sample_diff: str) -> None:
    broken = tmp_path / "broken.sarif"
    broken.write_text("{", encoding="utf-8")
    client = FakeGitHub(sample_diff)

    with pytest.raises(json.JSONDecodeError):
        _publish(PublishConfig(sarif_reports=(broken,), root=tmp_path), client)

    assert client.created == []


def test_diff_parse_errors_propagate(tmp_path: Path) -> None:
    client = FakeGitHub("--- a/x\n+++ b/x\n@@ bogus @@\n")

    with pytest.raises(DiffParseError):
        _publish(PublishConfig(sarif_reports=(tmp_path / "any.sarif",), root=tmp_path), client)


def test_missing_diff_url_is_a_configuration_error(tmp_path: Path, sample_diff: str) -> None:
    client = FakeGitHub(sample_diff)
    context = GitHubContext(owner="octo", repo="widgets", head_sha="abc")
    config = PublishConfig(sarif_reports=(tmp_path / "any.sarif",), root=tmp_path)

    with pytest.raises(ConfigError):
        asyncio.run(publish_sarif_annotations(config, context, client))


def test_dry_run_with_supplied_diff_makes_no_calls(
    tmp_path: Path, sample_diff: str, make_result: Factory, make_run: Factory, make_document: Factory
) -> None:
    report = _write(tmp_path / "r.sarif", make_document(make_run("PMD", [make_result("src/a.js", 10)])))
    client = FakeGitHub("unused")

    result = _publish(
        PublishConfig(sarif_reports=(report,), root=tmp_path, dry_run=True),
        client,
        diff_text=sample_diff,
    )

    assert not result.submitted
    assert client.fetched == [] and client.created == []
    assert result.request.conclusion == "failure"


def test_evaluate_is_idempotent(
    tmp_path: Path, sample_diff: str, make_result: Factory, make_run: Factory, make_document: Factory
) -> None:
    report = _write(
        tmp_path / "r.sarif",
        make_document(make_run("PMD", [make_result("src/a.js", 10), make_result("src/a.js", 11, level="warning")])),
    )

    first = evaluate_reports([report], sample_diff, root=tmp_path)
    second = evaluate_reports([report], sample_diff, root=tmp_path)

    assert first.model_dump_json() == second.model_dump_json()
    assert first.counts.total == len(first.annotations) == 1


def test_collect_violations_concatenates_readable_reports(
    tmp_path: Path, make_result: Factory, make_run: Factory, make_document: Factory
) -> None:
    first = _write(tmp_path / "a.sarif", make_document(make_run("PMD", [make_result("src/a.js", 10)])))
    second = _write(tmp_path / "b.sarif", make_document(make_run("CPD", [make_result("src/a.js", 99)])))
    changed = {"src/a.js": frozenset({10})}

    violations = collect_violations([first, Path("absent.sarif"), second], changed, root=tmp_path)

    assert [(v.tool_name, v.was_changed) for v in violations] == [("PMD", True), ("CPD", False)]
