"""Async client for the subset of the GitHub REST API used by the reporter."""

import logging
from collections.abc import AsyncGenerator, Sequence
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any

import aiohttp

from report_annotator.github.config import GitHubConfig
from report_annotator.github.models import (
    CheckRun,
    CheckRunsResponse,
    CreateCheckRunRequest,
    CreateCommentRequest,
    IssueComment,
    ListCheckRunsRequest,
    ListCommentsRequest,
    UpdateCheckRunRequest,
    UpdateCommentRequest,
    describe,
)

log = logging.getLogger(__name__)

API_VERSION = "2022-11-28"
PAGE_SIZE = 100


class GitHubApiError(RuntimeError):
    """Raised when the GitHub API answers with an unexpected status."""

    def __init__(self, action: str, status: int, text: str) -> None:
        super().__init__(f"Failed to {action}: {status} {text}")
        self.status = status
        self.text = text


@dataclass(frozen=True, kw_only=True)
class GitHubClient:
    """GitHub checks and issue-comments client."""

    config: GitHubConfig
    session: aiohttp.ClientSession = field(repr=False)

    @classmethod
    @asynccontextmanager
    async def from_config(
        cls, config: GitHubConfig
    ) -> AsyncGenerator["GitHubClient", None]:
        """Create client with managed session lifecycle."""
        headers = {
            "Authorization": f"Bearer {config.token.get_secret_value()}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": API_VERSION,
        }
        async with aiohttp.ClientSession(headers=headers) as session:
            yield cls(config=config, session=session)

    async def _send(
        self,
        method: str,
        path: str,
        *,
        action: str,
        expected_status: int,
        json: dict[str, Any] | None = None,
        params: dict[str, str] | None = None,
    ) -> Any:
        log.debug("%s", describe(method, path, json, params))
        # api_base_url may carry a path prefix such as /api/v3.
        url = self.config.api_base_url.rstrip("/") + path
        async with self.session.request(
            method, url, json=json, params=params
        ) as response:
            if response.status != expected_status:
                text = await response.text()
                raise GitHubApiError(action, response.status, text)
            return await response.json()

    async def list_check_runs(
        self, request: ListCheckRunsRequest
    ) -> Sequence[CheckRun]:
        """List check-runs for a ref, most recent first."""
        data = await self._send(
            "GET",
            request.path,
            action="list check runs",
            expected_status=200,
            params=request.params(),
        )
        return CheckRunsResponse.model_validate(data).check_runs

    async def create_check_run(self, request: CreateCheckRunRequest) -> CheckRun:
        """Create a completed check-run."""
        data = await self._send(
            "POST",
            request.path,
            action="create check run",
            expected_status=201,
            json=request.body(),
        )
        return CheckRun.model_validate(data)

    async def update_check_run(self, request: UpdateCheckRunRequest) -> CheckRun:
        """Update the output of an existing check-run."""
        data = await self._send(
            "PATCH",
            request.path,
            action="update check run",
            expected_status=200,
            json=request.body(),
        )
        return CheckRun.model_validate(data)

    async def list_comments(
        self, request: ListCommentsRequest
    ) -> AsyncGenerator[IssueComment, None]:
        """Yield every comment of an issue, fetching pages lazily.

        Pages are requested until one comes back with fewer than
        ``PAGE_SIZE`` entries.
        """
        page = 1

        while True:
            params = {"per_page": str(PAGE_SIZE), "page": str(page)}
            data = await self._send(
                "GET",
                request.path,
                action="list comments",
                expected_status=200,
                params=params,
            )

            comments = [IssueComment.model_validate(item) for item in data]
            for comment in comments:
                yield comment

            if len(comments) < PAGE_SIZE:
                break

            page += 1

    async def create_comment(self, request: CreateCommentRequest) -> IssueComment:
        """Create a comment on an issue or pull request."""
        data = await self._send(
            "POST",
            request.path,
            action="create comment",
            expected_status=201,
            json=request.body(),
        )
        return IssueComment.model_validate(data)

    async def update_comment(self, request: UpdateCommentRequest) -> IssueComment:
        """Replace the body of an existing comment."""
        data = await self._send(
            "PATCH",
            request.path,
            action="update comment",
            expected_status=200,
            json=request.body(),
        )
        return IssueComment.model_validate(data)
