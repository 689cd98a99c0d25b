"""Request and response models for the GitHub checks and issues APIs.

Every request is built from an explicit ``RepoContext`` plus the fields of
the operation, and knows its own URL path and JSON body.
"""

import json
from collections.abc import Sequence
from typing import Any, Literal
from urllib.parse import urlencode

from pydantic import BaseModel, Field

from report_annotator.filtering import MAX_ANNOTATIONS_PER_REQUEST
from report_annotator.models.base import Model
from report_annotator.models.result import Annotation, Conclusion


class RepoContext(Model):
    """Owner and name of the repository every request targets."""

    owner: str
    repo: str

    @property
    def path(self) -> str:
        return f"/repos/{self.owner}/{self.repo}"


class CheckRunOutput(Model):
    """Output block of a check-run."""

    title: str
    summary: str
    annotations: Sequence[Annotation] = Field(
        default_factory=list, max_length=MAX_ANNOTATIONS_PER_REQUEST
    )

    def body(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "summary": self.summary,
            "annotations": [a.to_api_payload() for a in self.annotations],
        }


class ListCheckRunsRequest(Model):
    """Lookup of check-runs for a commit by name and status."""

    repo: RepoContext
    ref: str
    check_name: str
    status: Literal["queued", "in_progress", "completed"] = "in_progress"
    filter: Literal["latest", "all"] = "latest"

    @property
    def path(self) -> str:
        return f"{self.repo.path}/commits/{self.ref}/check-runs"

    def params(self) -> dict[str, str]:
        return {
            "check_name": self.check_name,
            "status": self.status,
            "filter": self.filter,
        }


class CreateCheckRunRequest(Model):
    """Creation of a completed check-run."""

    repo: RepoContext
    name: str
    head_sha: str
    status: Literal["completed"] = "completed"
    conclusion: Conclusion
    output: CheckRunOutput

    @property
    def path(self) -> str:
        return f"{self.repo.path}/check-runs"

    def body(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "head_sha": self.head_sha,
            "status": self.status,
            "conclusion": self.conclusion,
            "output": self.output.body(),
        }


class UpdateCheckRunRequest(Model):
    """Update of the output of an existing check-run."""

    repo: RepoContext
    check_run_id: int
    output: CheckRunOutput

    @property
    def path(self) -> str:
        return f"{self.repo.path}/check-runs/{self.check_run_id}"

    def body(self) -> dict[str, Any]:
        return {"output": self.output.body()}


class ListCommentsRequest(Model):
    """Listing of the comments on an issue or pull request."""

    repo: RepoContext
    issue_number: int

    @property
    def path(self) -> str:
        return f"{self.repo.path}/issues/{self.issue_number}/comments"


class CreateCommentRequest(Model):
    """New comment on an issue or pull request."""

    repo: RepoContext
    issue_number: int
    body_text: str = Field(..., alias="body")

    @property
    def path(self) -> str:
        return f"{self.repo.path}/issues/{self.issue_number}/comments"

    def body(self) -> dict[str, Any]:
        return {"body": self.body_text}


class UpdateCommentRequest(Model):
    """Replacement of the body of an existing comment."""

    repo: RepoContext
    comment_id: int
    body_text: str = Field(..., alias="body")

    @property
    def path(self) -> str:
        return f"{self.repo.path}/issues/comments/{self.comment_id}"

    def body(self) -> dict[str, Any]:
        return {"body": self.body_text}


def describe(
    method: str,
    path: str,
    body: dict[str, Any] | None = None,
    params: dict[str, str] | None = None,
) -> str:
    """Render an outbound request, query and JSON body, for debug logging."""
    target = f"{path}?{urlencode(params)}" if params else path
    if body is None:
        return f"{method} {target}"
    return f"{method} {target}\n{json.dumps(body, indent=2, ensure_ascii=False)}"


class CheckRun(BaseModel):
    """A check-run from the checks API."""

    id: int
    name: str
    head_sha: str | None = None
    status: Literal["queued", "in_progress", "completed"] | str
    conclusion: str | None = None
    html_url: str | None = None


class CheckRunsResponse(BaseModel):
    """Response from the list check-runs for a ref API."""

    total_count: int
    check_runs: Sequence[CheckRun]


class IssueComment(BaseModel):
    """A comment on an issue or pull request."""

    id: int
    body: str | None = None
    html_url: str | None = None
