# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Minimal asynchronous client for the GitHub REST endpoints we call."""

from __future__ import annotations

import logging
from typing import Any, Final

import httpx

from .config import GitHubContext
from .models import CheckRunRequest

LOGGER = logging.getLogger(__name__)

DIFF_MEDIA_TYPE: Final[str] = "application/vnd.github.v3.diff"
JSON_MEDIA_TYPE: Final[str] = "application/vnd.github+json"
API_VERSION: Final[str] = "2022-11-28"
MAX_ANNOTATIONS_PER_REQUEST: Final[int] = 50
DEFAULT_TIMEOUT: Final[float] = 30.0


class GitHubError(Exception):
    """Raised when a GitHub request fails."""


class GitHubClient:
    """Fetch pull-request diffs and create check runs."""

    def __init__(self, context: GitHubContext, *, http: httpx.AsyncClient | None = None) -> None:
        """Create a client bound to ``context``.

        Args:
            context: Repository coordinates and credentials.
            http: Optional pre-configured client. One is created (and closed by
                :meth:`aclose`) when omitted.
        """

        self._context = context
        self._owns_http = http is None
        self._http = http or httpx.AsyncClient(timeout=DEFAULT_TIMEOUT, follow_redirects=True)

    async def __aenter__(self) -> GitHubClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP client when this instance created it."""

        if self._owns_http:
            await self._http.aclose()

    def _headers(self, accept: str) -> dict[str, str]:
        headers = {"Accept": accept, "X-GitHub-Api-Version": API_VERSION}
        if self._context.token:
            headers["Authorization"] = f"Bearer {self._context.token}"
        return headers

    async def _send(self, method: str, url: str, *, accept: str, body: dict[str, Any] | None = None) -> httpx.Response:
        try:
            response = await self._http.request(method, url, headers=self._headers(accept), json=body)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise GitHubError(
                f"{method} {url} failed with HTTP {exc.response.status_code}: {exc.response.text[:200]}"
            ) from exc
        except httpx.HTTPError as exc:
            raise GitHubError(f"{method} {url} failed: {exc}") from exc
        return response

    async def fetch_diff(self, diff_url: str) -> str:
        """Return the unified diff served at ``diff_url``."""

        LOGGER.debug("fetching diff from %s", diff_url)
        response = await self._send("GET", diff_url, accept=DIFF_MEDIA_TYPE)
        return response.text

    async def create_check_run(self, request: CheckRunRequest) -> dict[str, Any]:
        """Create ``request`` as a completed check run.

        GitHub caps annotations at 50 per request; any beyond the first batch
        are appended to the created run with follow-up updates.

        Returns:
            dict[str, Any]: JSON body of the creation response.
        """

        body = request.as_api_body()
        annotations = body["output"]["annotations"]
        batches = [
            annotations[start : start + MAX_ANNOTATIONS_PER_REQUEST]
            for start in range(0, len(annotations), MAX_ANNOTATIONS_PER_REQUEST)
        ] or [[]]

        base = f"{self._context.api_url}/repos/{request.owner}/{request.repo}/check-runs"
        body["output"]["annotations"] = batches[0]
        response = await self._send("POST", base, accept=JSON_MEDIA_TYPE, body=body)
        created: dict[str, Any] = response.json()

        for batch in batches[1:]:
            update = {"output": {**body["output"], "annotations": batch}}
            await self._send("PATCH", f"{base}/{created['id']}", accept=JSON_MEDIA_TYPE, body=update)
        return created


__all__ = ["GitHubClient", "GitHubError", "MAX_ANNOTATIONS_PER_REQUEST"]
