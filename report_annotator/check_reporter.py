"""Project test results onto GitHub check-runs."""

import json
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import TextIO

from report_annotator.filtering import (
    MAX_ANNOTATIONS_PER_REQUEST,
    chunked,
    filter_annotations,
)
from report_annotator.github.client import GitHubClient
from report_annotator.github.models import (
    CheckRun,
    CheckRunOutput,
    CreateCheckRunRequest,
    ListCheckRunsRequest,
    RepoContext,
    UpdateCheckRunRequest,
)
from report_annotator.models.result import Annotation, TestResult
from report_annotator.workflow_commands import annotate

log = logging.getLogger(__name__)


class CheckRunNotFoundError(Exception):
    """Raised when no in-progress check-run exists to be updated."""


@dataclass(frozen=True, kw_only=True)
class CheckOptions:
    """How a test result is turned into check-run output."""

    check_annotations: bool = True
    annotate_only: bool = False
    update_check: bool = False
    annotate_notice: bool = False
    job_name: str = ""


@dataclass(frozen=True, kw_only=True)
class CheckReporter:
    """Creates or updates check-runs, or emits standalone annotations."""

    client: GitHubClient
    repo: RepoContext
    stream: TextIO | None = field(default=None, repr=False)

    async def report(
        self, test_result: TestResult, head_sha: str, options: CheckOptions
    ) -> Sequence[CheckRun]:
        """Publish a single test result.

        Args:
            test_result: Result of one suite
            head_sha: Commit the check-run belongs to
            options: Output options for this run

        Returns:
            Check-runs returned by the API; empty when only workflow
            annotations were emitted.

        Raises:
            CheckRunNotFoundError: If an update was requested but no
                in-progress check-run named ``options.job_name`` exists

        """
        annotations = filter_annotations(
            test_result.annotations, include_notices=options.annotate_notice
        )
        title = test_result.title

        log.info("%s - %s", test_result.check_name, title)
        for annotation in annotations:
            log.info("   %s | %s", annotation.path, annotation.first_message_line)

        if options.annotate_only:
            self._annotate(annotations, options.annotate_notice)
            return []

        if options.update_check:
            return await self._update(
                test_result, head_sha, title, annotations, options
            )

        created = await self._create(test_result, head_sha, title, annotations, options)
        return [created]

    def _annotate(
        self, annotations: Sequence[Annotation], annotate_notice: bool
    ) -> None:
        for annotation in annotations:
            annotate(annotation, annotate_notice=annotate_notice, stream=self.stream)

    async def find_check_run(self, head_sha: str, job_name: str) -> CheckRun:
        """Find the most recent in-progress check-run for the job.

        The API lists the latest check-run first, so the first match wins.
        """
        check_runs = await self.client.list_check_runs(
            ListCheckRunsRequest(repo=self.repo, ref=head_sha, check_name=job_name)
        )
        log.debug(
            "Check-runs found: %s",
            json.dumps([run.model_dump() for run in check_runs], indent=2),
        )
        if not check_runs:
            raise CheckRunNotFoundError(
                f"No in-progress check run named '{job_name}' found for {head_sha}"
            )
        return check_runs[0]

    async def _update(
        self,
        test_result: TestResult,
        head_sha: str,
        title: str,
        annotations: Sequence[Annotation],
        options: CheckOptions,
    ) -> Sequence[CheckRun]:
        check_run = await self.find_check_run(head_sha, options.job_name)

        if options.check_annotations:
            log.info(
                "%s - Updating checks (Annotations: %d)",
                test_result.check_name,
                len(annotations),
            )
            batches: list[Sequence[Annotation]] = list(
                chunked(annotations, MAX_ANNOTATIONS_PER_REQUEST)
            )
        else:
            log.info(
                "%s - Updating checks (disabled annotations)", test_result.check_name
            )
            # Title and summary are still refreshed.
            batches = [[]]

        # Sequential, so the last chunk's output is the one that sticks.
        updated: list[CheckRun] = []
        for batch in batches:
            request = UpdateCheckRunRequest(
                repo=self.repo,
                check_run_id=check_run.id,
                output=CheckRunOutput(
                    title=title, summary=test_result.summary, annotations=batch
                ),
            )
            updated.append(await self.client.update_check_run(request))
        return updated

    async def _create(
        self,
        test_result: TestResult,
        head_sha: str,
        title: str,
        annotations: Sequence[Annotation],
        options: CheckOptions,
    ) -> CheckRun:
        selected = annotations if options.check_annotations else []
        log.info(
            "%s - Creating check (Annotations: %d)",
            test_result.check_name,
            len(selected),
        )
        if len(selected) > MAX_ANNOTATIONS_PER_REQUEST:
            log.info(
                "%s - Only the first %d annotations are attached",
                test_result.check_name,
                MAX_ANNOTATIONS_PER_REQUEST,
            )

        request = CreateCheckRunRequest(
            repo=self.repo,
            name=test_result.check_name,
            head_sha=head_sha,
            conclusion=test_result.conclusion,
            output=CheckRunOutput(
                title=title,
                summary=test_result.summary,
                annotations=selected[:MAX_ANNOTATIONS_PER_REQUEST],
            ),
        )
        return await self.client.create_check_run(request)
