"""CLI entry point for publishing parsed test results to GitHub."""

import argparse
import asyncio
import logging
import os
import sys
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path

from pydantic import SecretStr, TypeAdapter

from report_annotator.aggregator import build_summary_tables
from report_annotator.check_reporter import CheckOptions, CheckReporter
from report_annotator.comment_publisher import COMMENT_IDENTITY, CommentPublisher
from report_annotator.context import ActionContext
from report_annotator.github import GitHubClient, GitHubConfig
from report_annotator.job_summary import attach_summary
from report_annotator.models.result import TestResult

RESULTS_ADAPTER = TypeAdapter(list[TestResult])


@dataclass(frozen=True, kw_only=True)
class SummaryOptions:
    """Which summary surfaces are produced and what they contain."""

    job_summary: bool = True
    comment: bool = False
    update_comment: bool = True
    include_passed: bool = False
    detailed_summary: bool = False
    flaky_summary: bool = False
    comment_identity: str = COMMENT_IDENTITY


def load_test_results(results_path: Path) -> Sequence[TestResult]:
    """Load parser output, a JSON list of test results."""
    return RESULTS_ADAPTER.validate_json(results_path.read_bytes())


def log_results_summary(
    log: logging.Logger, test_results: Sequence[TestResult]
) -> None:
    """Log one line per reported suite."""
    for test_result in test_results:
        symbol = "✅" if test_result.conclusion == "success" else "❌"
        log.info("%s %s: %s", symbol, test_result.check_name, test_result.title)


async def run(
    test_results: Sequence[TestResult],
    token: str,
    context: ActionContext,
    head_sha: str,
    check_options: CheckOptions,
    summary_options: SummaryOptions,
    fail_on_failure: bool = False,
) -> int:
    """Publish checks and summaries and return exit code."""
    log = logging.getLogger("report_annotator")

    if not test_results:
        log.warning("No test results to report")

    config = GitHubConfig(
        token=SecretStr(token),
        owner=context.owner,
        repo=context.repo,
        api_base_url=context.api_url,
    )
    repo = config.repo_context

    tables = build_summary_tables(
        test_results,
        include_passed=summary_options.include_passed,
        detailed_summary=summary_options.detailed_summary,
        flaky_summary=summary_options.flaky_summary,
    )

    async with GitHubClient.from_config(config) as client:
        reporter = CheckReporter(client=client, repo=repo)
        for test_result in test_results:
            await reporter.report(test_result, head_sha, check_options)

        if summary_options.job_summary:
            attach_summary(context.step_summary_path, tables)

        if summary_options.comment:
            publisher = CommentPublisher(
                client=client,
                repo=repo,
                issue_number=context.issue_number,
                identity=summary_options.comment_identity,
            )
            await publisher.publish(
                [test_result.check_name for test_result in test_results],
                summary_options.update_comment,
                tables,
            )

    log_results_summary(log, test_results)

    has_failures = any(r.conclusion == "failure" for r in test_results)
    return 1 if fail_on_failure and has_failures else 0


def build_parser() -> argparse.ArgumentParser:
    """Command line options, mirroring the action inputs."""
    parser = argparse.ArgumentParser(
        description="Publish parsed test results as GitHub checks and comments"
    )
    parser.add_argument(
        "--results",
        type=Path,
        required=True,
        help="JSON file with the test results produced by the report parser",
    )
    parser.add_argument(
        "--token",
        default=None,
        help="GitHub token (defaults to the GITHUB_TOKEN environment variable)",
    )
    parser.add_argument(
        "--head-sha",
        default=None,
        help="Commit to attach check-runs to (defaults to the PR head or GITHUB_SHA)",
    )
    parser.add_argument(
        "--job-name",
        default=None,
        help="Check-run name to update when --update-check is given "
        "(defaults to the GITHUB_JOB environment variable)",
    )
    parser.add_argument(
        "--check-annotations",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="Attach annotations to the check-run",
    )
    parser.add_argument(
        "--annotate-only",
        action="store_true",
        help="Only emit workflow annotations, never create check-runs",
    )
    parser.add_argument(
        "--update-check",
        action="store_true",
        help="Update the in-progress check-run of --job-name instead of creating one",
    )
    parser.add_argument(
        "--annotate-notice",
        action="store_true",
        help="Also annotate notice-level (passed) results",
    )
    parser.add_argument(
        "--job-summary",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="Write the summary tables to the job summary",
    )
    parser.add_argument(
        "--comment",
        action="store_true",
        help="Post the summary tables as a pull request comment",
    )
    parser.add_argument(
        "--update-comment",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="Update a prior summary comment for the same checks",
    )
    parser.add_argument(
        "--comment-identity",
        default=COMMENT_IDENTITY,
        help="Tool identity embedded in the hidden comment marker",
    )
    parser.add_argument(
        "--include-passed",
        action="store_true",
        help="Include passed tests in the detailed summary",
    )
    parser.add_argument(
        "--detailed-summary",
        action="store_true",
        help="Add a per-test table to the summary",
    )
    parser.add_argument(
        "--flaky-summary",
        action="store_true",
        help="Add a table of tests that needed retries to the summary",
    )
    parser.add_argument(
        "--fail-on-failure",
        action="store_true",
        help="Exit with status 1 when any reported suite has failures",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Log outbound API payloads",
    )
    return parser


def main(
    argv: Sequence[str] | None = None, environ: Mapping[str, str] | None = None
) -> None:
    """CLI entry point."""
    args = build_parser().parse_args(argv)
    environ = os.environ if environ is None else environ

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    token = args.token or environ.get("GITHUB_TOKEN", "")
    job_name = args.job_name or environ.get("GITHUB_JOB", "")
    context = ActionContext.from_environ(environ)

    exit_code = asyncio.run(
        run(
            test_results=load_test_results(args.results),
            token=token,
            context=context,
            head_sha=args.head_sha or context.head_sha,
            check_options=CheckOptions(
                check_annotations=args.check_annotations,
                annotate_only=args.annotate_only,
                update_check=args.update_check,
                annotate_notice=args.annotate_notice,
                job_name=job_name,
            ),
            summary_options=SummaryOptions(
                job_summary=args.job_summary,
                comment=args.comment,
                update_comment=args.update_comment,
                include_passed=args.include_passed,
                detailed_summary=args.detailed_summary,
                flaky_summary=args.flaky_summary,
                comment_identity=args.comment_identity,
            ),
            fail_on_failure=args.fail_on_failure,
        )
    )
    sys.exit(exit_code)


if __name__ == "__main__":  # pragma: no cover
    main()
