"""Workflow context read from the GitHub Actions runner environment."""

import json
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import Field

from report_annotator.models.base import Model

DEFAULT_API_URL = "https://api.github.com"


class ContextError(Exception):
    """Raised when the runner environment lacks required information."""


class ActionContext(Model):
    """Repository, commit and pull request the run reports on."""

    owner: str
    repo: str
    sha: str = ""
    issue_number: int | None = None
    pull_request_head_sha: str | None = None
    step_summary_path: Path | None = None
    api_url: str = Field(default=DEFAULT_API_URL)

    @classmethod
    def from_environ(cls, environ: Mapping[str, str]) -> "ActionContext":
        """Build the context from ``GITHUB_*`` environment variables.

        Raises:
            ContextError: If ``GITHUB_REPOSITORY`` is missing or malformed

        """
        repository = environ.get("GITHUB_REPOSITORY", "")
        owner, _, repo = repository.partition("/")
        if not owner or not repo:
            raise ContextError(
                f"GITHUB_REPOSITORY must be in 'owner/repo' format, got '{repository}'"
            )

        event = load_event(environ.get("GITHUB_EVENT_PATH"))
        summary_path = environ.get("GITHUB_STEP_SUMMARY")

        return cls(
            owner=owner,
            repo=repo,
            sha=environ.get("GITHUB_SHA", ""),
            issue_number=event_issue_number(event),
            pull_request_head_sha=(event.get("pull_request") or {})
            .get("head", {})
            .get("sha"),
            step_summary_path=Path(summary_path) if summary_path else None,
            api_url=environ.get("GITHUB_API_URL") or DEFAULT_API_URL,
        )

    @property
    def head_sha(self) -> str:
        """Commit to attach check-runs to; the PR head wins over the merge SHA."""
        return self.pull_request_head_sha or self.sha


def load_event(event_path: str | None) -> Mapping[str, Any]:
    """Load the webhook payload that triggered the workflow."""
    if not event_path:
        return {}
    path = Path(event_path)
    if not path.exists():
        return {}
    data = json.loads(path.read_text(encoding="utf-8"))
    return data if isinstance(data, dict) else {}


def event_issue_number(event: Mapping[str, Any]) -> int | None:
    """Issue or pull request number, as the toolkit resolves it."""
    for key in ("issue", "pull_request"):
        number = (event.get(key) or {}).get("number")
        if number:
            return int(number)
    number = event.get("number")
    return int(number) if number else None
