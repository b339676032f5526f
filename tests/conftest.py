# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared pytest fixtures."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any

import pytest

SAMPLE_DIFF = """\
diff --git a/src/a.js b/src/a.js
index 1111111..2222222 100644
--- a/src/a.js
+++ b/src/a.js
@@ -8,4 +8,5 @@ function render() {
 const a = 1;
 const b = 2;
+const c = 3;
 return a + b;
-}
+};
diff --git a/old.txt b/old.txt
deleted file mode 100644
index 3333333..0000000
--- a/old.txt
+++ /dev/null
@@ -1,2 +0,0 @@
-gone
-gone too
diff --git a/src/new.py b/src/new.py
new file mode 100644
index 0000000..4444444
--- /dev/null
+++ b/src/new.py
@@ -0,0 +1,2 @@
+print("hi")
+++counter
diff --git a/img.png b/img.png
index 5555555..6666666 100644
Binary files a/img.png and b/img.png differ
diff --git a/x.txt b/y.txt
similarity index 100%
rename from x.txt
rename to y.txt
"""


def build_location(uri: str, start_line: int | None, end_line: int | None = None) -> dict[str, Any]:
    region: dict[str, Any] = {}
    if start_line is not None:
        region["startLine"] = start_line
    if end_line is not None:
        region["endLine"] = end_line
    return {"physicalLocation": {"artifactLocation": {"uri": uri}, "region": region}}


def build_result(
    uri: str,
    start_line: int | None,
    *,
    level: str | None = None,
    rule_id: str | None = "R1",
    rule_index: int | None = 0,
    message: str = "problem",
    end_line: int | None = None,
    extra_locations: Sequence[dict[str, Any]] = (),
) -> dict[str, Any]:
    result: dict[str, Any] = {
        "message": {"text": message},
        "locations": [build_location(uri, start_line, end_line), *extra_locations],
    }
    if level is not None:
        result["level"] = level
    if rule_id is not None:
        result["ruleId"] = rule_id
    if rule_index is not None:
        result["ruleIndex"] = rule_index
    return result


def build_document(*runs: dict[str, Any]) -> dict[str, Any]:
    return {"version": "2.1.0", "runs": list(runs)}


def build_run(
    tool: str,
    results: Sequence[dict[str, Any]],
    rules: Sequence[dict[str, Any]] | None = None,
) -> dict[str, Any]:
    return {
        "tool": {"driver": {"name": tool, "rules": list(rules if rules is not None else [{"id": "R1"}])}},
        "results": list(results),
    }


@pytest.fixture
def sample_diff() -> str:
    """Return a diff touching added, deleted, new, binary and renamed files."""
    return SAMPLE_DIFF


@pytest.fixture
def make_result() -> Callable[..., dict[str, Any]]:
    return build_result


@pytest.fixture
def make_run() -> Callable[..., dict[str, Any]]:
    return build_run


@pytest.fixture
def make_document() -> Callable[..., dict[str, Any]]:
    return build_document


@pytest.fixture
def make_location() -> Callable[..., dict[str, Any]]:
    return build_location
