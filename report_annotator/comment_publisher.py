"""Publish summary tables as a pull-request comment that is updated in place."""

import json
import logging
from collections.abc import Sequence
from dataclasses import dataclass

from report_annotator.github.client import GitHubClient
from report_annotator.github.models import (
    CreateCommentRequest,
    IssueComment,
    ListCommentsRequest,
    RepoContext,
    UpdateCommentRequest,
)
from report_annotator.job_summary import summary_sections
from report_annotator.markdown import build_tables
from report_annotator.models.summary import SummaryTables

log = logging.getLogger(__name__)

COMMENT_IDENTITY = "report-annotator"


def build_comment_identifier(
    check_names: Sequence[str], identity: str = COMMENT_IDENTITY
) -> str:
    """Build the hidden marker used to find a previously posted comment.

    The marker only depends on the ordered list of check names, so a later
    run reporting the same checks produces the same marker.
    """
    names = json.dumps(list(check_names), separators=(",", ":"), ensure_ascii=False)
    return f"<!-- Summary comment for {names} by {identity} -->"


def build_comment_body(tables: SummaryTables, identifier: str) -> str:
    """Render the tables followed by the identifier on the last line."""
    return f"{build_tables(summary_sections(tables))}\n\n{identifier}"


@dataclass(frozen=True, kw_only=True)
class CommentPublisher:
    """Creates or updates the summary comment on a pull request."""

    client: GitHubClient
    repo: RepoContext
    issue_number: int | None
    identity: str = COMMENT_IDENTITY

    async def publish(
        self,
        check_names: Sequence[str],
        update_comment: bool,
        tables: SummaryTables,
    ) -> IssueComment | None:
        """Post the summary comment.

        Args:
            check_names: Names of the reported checks, identifies the comment
            update_comment: Replace a prior comment for the same checks
            tables: Aggregated summary tables

        Returns:
            The created or updated comment, None when there is no pull
            request to comment on.

        """
        if not self.issue_number:
            log.warning(
                "A valid issue number (PR reference) is required to attach a comment"
            )
            return None

        identifier = build_comment_identifier(check_names, self.identity)
        body = build_comment_body(tables, identifier)

        prior = None
        if update_comment:
            prior = await self.find_prior_comment(self.issue_number, identifier)
        if prior is not None:
            log.info("Updating summary comment %d", prior.id)
            return await self.client.update_comment(
                UpdateCommentRequest(repo=self.repo, comment_id=prior.id, body=body)
            )

        log.info("Creating summary comment on #%d", self.issue_number)
        return await self.client.create_comment(
            CreateCommentRequest(
                repo=self.repo, issue_number=self.issue_number, body=body
            )
        )

    async def find_prior_comment(
        self, issue_number: int, identifier: str
    ) -> IssueComment | None:
        """Find the first comment whose body ends with the identifier."""
        request = ListCommentsRequest(repo=self.repo, issue_number=issue_number)
        async for comment in self.client.list_comments(request):
            if comment.body and comment.body.endswith(identifier):
                return comment
        return None
