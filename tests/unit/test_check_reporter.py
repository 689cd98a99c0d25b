"""Tests for the check-run reporter."""

import io
import logging
from unittest.mock import Mock

import pytest

from report_annotator.check_reporter import (
    CheckOptions,
    CheckReporter,
    CheckRunNotFoundError,
)
from report_annotator.github.client import GitHubApiError, GitHubClient
from report_annotator.github.models import CheckRun, RepoContext
from report_annotator.models.result import Annotation, TestResult
from report_annotator.testing.factories import AnnotationFactory, TestResultFactory

HEAD_SHA = "abc123"


@pytest.fixture
def client_mock() -> Mock:
    """Create mock GitHub client."""
    client = Mock(spec=GitHubClient)
    client.create_check_run.return_value = CheckRun(
        id=1, name="unit", status="completed"
    )
    client.update_check_run.return_value = CheckRun(
        id=42, name="build", status="in_progress"
    )
    client.list_check_runs.return_value = [
        CheckRun(id=42, name="build", status="in_progress"),
        CheckRun(id=41, name="build", status="in_progress"),
    ]
    return client


@pytest.fixture
def stream() -> io.StringIO:
    """Capture workflow commands."""
    return io.StringIO()


@pytest.fixture
def reporter(client_mock: Mock, stream: io.StringIO) -> CheckReporter:
    """Create reporter with mock client."""
    return CheckReporter(
        client=client_mock,
        repo=RepoContext(owner="test-owner", repo="test-repo"),
        stream=stream,
    )


def failures(count: int) -> list[Annotation]:
    return [
        AnnotationFactory.build(title=f"test_{i}", annotation_level="failure")
        for i in range(count)
    ]


class TestCreate:
    """Tests for the create path."""

    async def test_creates_completed_check_run(
        self, reporter: CheckReporter, client_mock: Mock
    ) -> None:
        """Creates a check-run with conclusion, title and summary."""
        result = TestResult(
            check_name="unit",
            total_count=5,
            passed=4,
            failed=1,
            summary="details",
            annotations=failures(1),
        )

        await reporter.report(result, HEAD_SHA, CheckOptions())

        client_mock.create_check_run.assert_called_once()
        client_mock.update_check_run.assert_not_called()
        request = client_mock.create_check_run.call_args.args[0]
        assert request.name == "unit"
        assert request.head_sha == HEAD_SHA
        assert request.status == "completed"
        assert request.conclusion == "failure"
        assert request.output.title == "5 tests run, 4 passed, 0 skipped, 1 failed."
        assert request.output.summary == "details"
        assert list(request.output.annotations) == list(result.annotations)

    async def test_success_conclusion_ignores_skipped(
        self, reporter: CheckReporter, client_mock: Mock
    ) -> None:
        """Skipped tests never turn the conclusion into a failure."""
        result = TestResultFactory.build(total_count=0, skipped=4, failed=0)

        await reporter.report(result, HEAD_SHA, CheckOptions())

        request = client_mock.create_check_run.call_args.args[0]
        assert request.conclusion == "success"

    async def test_truncates_to_first_fifty_annotations(
        self, reporter: CheckReporter, client_mock: Mock
    ) -> None:
        """Only the first fifty annotations are sent on creation."""
        annotations = failures(75)
        result = TestResultFactory.build(failed=75, annotations=annotations)

        await reporter.report(result, HEAD_SHA, CheckOptions())

        request = client_mock.create_check_run.call_args.args[0]
        assert list(request.output.annotations) == annotations[:50]

    async def test_no_annotations_when_disabled(
        self, reporter: CheckReporter, client_mock: Mock
    ) -> None:
        """Annotations are left out when check annotations are disabled."""
        result = TestResultFactory.build(failed=2, annotations=failures(2))

        await reporter.report(result, HEAD_SHA, CheckOptions(check_annotations=False))

        request = client_mock.create_check_run.call_args.args[0]
        assert list(request.output.annotations) == []

    async def test_filters_notices(
        self, reporter: CheckReporter, client_mock: Mock
    ) -> None:
        """Notice-level annotations are only sent when enabled."""
        notice = AnnotationFactory.build(annotation_level="notice")
        failure = AnnotationFactory.build(annotation_level="failure")
        result = TestResultFactory.build(annotations=[notice, failure])

        await reporter.report(result, HEAD_SHA, CheckOptions())
        await reporter.report(result, HEAD_SHA, CheckOptions(annotate_notice=True))

        first, second = client_mock.create_check_run.call_args_list
        assert list(first.args[0].output.annotations) == [failure]
        assert list(second.args[0].output.annotations) == [notice, failure]

    async def test_logs_title_before_sending(
        self,
        reporter: CheckReporter,
        client_mock: Mock,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        """Title and annotation lines are logged for diagnosis."""
        result = TestResultFactory.build(
            check_name="unit",
            annotations=[
                AnnotationFactory.build(path="src/a.py", message="first\nsecond")
            ],
        )

        with caplog.at_level(logging.INFO):
            await reporter.report(result, HEAD_SHA, CheckOptions())

        assert "unit - No test results found!" in caplog.text
        assert "src/a.py | first" in caplog.text
        assert "second" not in caplog.text
        assert "Creating check (Annotations: 1)" in caplog.text

    async def test_propagates_api_errors(
        self, reporter: CheckReporter, client_mock: Mock
    ) -> None:
        """Transport errors are fatal."""
        client_mock.create_check_run.side_effect = GitHubApiError(
            "create check run", 422, "Unprocessable"
        )

        with pytest.raises(GitHubApiError, match="422"):
            await reporter.report(TestResultFactory.build(), HEAD_SHA, CheckOptions())


class TestUpdate:
    """Tests for the update path."""

    async def test_updates_latest_in_progress_run(
        self, reporter: CheckReporter, client_mock: Mock
    ) -> None:
        """The first listed in-progress run of the job is updated."""
        result = TestResultFactory.build(failed=1, annotations=failures(1))

        await reporter.report(
            result, HEAD_SHA, CheckOptions(update_check=True, job_name="build")
        )

        lookup = client_mock.list_check_runs.call_args.args[0]
        assert lookup.ref == HEAD_SHA
        assert lookup.check_name == "build"
        assert lookup.status == "in_progress"
        assert lookup.filter == "latest"
        client_mock.create_check_run.assert_not_called()
        request = client_mock.update_check_run.call_args.args[0]
        assert request.check_run_id == 42

    @pytest.mark.parametrize(
        ("count", "expected_sizes"),
        [
            (0, []),
            (1, [1]),
            (50, [50]),
            (51, [50, 1]),
            (130, [50, 50, 30]),
        ],
    )
    async def test_one_update_per_chunk_of_fifty(
        self,
        reporter: CheckReporter,
        client_mock: Mock,
        count: int,
        expected_sizes: list[int],
    ) -> None:
        """Annotations are split in order across ceil(N/50) updates."""
        annotations = failures(count)
        result = TestResultFactory.build(
            failed=count, summary="summary", annotations=annotations
        )

        await reporter.report(
            result, HEAD_SHA, CheckOptions(update_check=True, job_name="build")
        )

        requests = [c.args[0] for c in client_mock.update_check_run.call_args_list]
        assert [len(r.output.annotations) for r in requests] == expected_sizes
        assert [a for r in requests for a in r.output.annotations] == annotations
        assert {r.output.title for r in requests} <= {result.title}
        assert {r.output.summary for r in requests} <= {"summary"}

    async def test_single_update_without_annotations(
        self, reporter: CheckReporter, client_mock: Mock
    ) -> None:
        """Disabled annotations still refresh the check-run once."""
        result = TestResultFactory.build(failed=60, annotations=failures(60))

        await reporter.report(
            result,
            HEAD_SHA,
            CheckOptions(update_check=True, check_annotations=False, job_name="build"),
        )

        client_mock.update_check_run.assert_called_once()
        request = client_mock.update_check_run.call_args.args[0]
        assert list(request.output.annotations) == []
        assert request.output.title == result.title

    async def test_raises_when_no_run_in_progress(
        self, reporter: CheckReporter, client_mock: Mock
    ) -> None:
        """A missing in-progress run is an error, not a silent no-op."""
        client_mock.list_check_runs.return_value = []

        with pytest.raises(CheckRunNotFoundError, match="build"):
            await reporter.report(
                TestResultFactory.build(),
                HEAD_SHA,
                CheckOptions(update_check=True, job_name="build"),
            )

        client_mock.update_check_run.assert_not_called()


class TestAnnotateOnly:
    """Tests for the annotate-only path."""

    async def test_emits_workflow_commands_without_check_runs(
        self, reporter: CheckReporter, client_mock: Mock, stream: io.StringIO
    ) -> None:
        """No check-run is touched, diagnostics are written instead."""
        result = TestResultFactory.build(
            annotations=[
                AnnotationFactory.build(annotation_level="failure", message="bad"),
                AnnotationFactory.build(annotation_level="warning", message="meh"),
                AnnotationFactory.build(annotation_level="notice", message="ok"),
            ]
        )

        runs = await reporter.report(
            result, HEAD_SHA, CheckOptions(annotate_only=True, update_check=True)
        )

        assert runs == []
        client_mock.create_check_run.assert_not_called()
        client_mock.update_check_run.assert_not_called()
        client_mock.list_check_runs.assert_not_called()
        lines = stream.getvalue().splitlines()
        assert len(lines) == 2
        assert lines[0].startswith("::error ")
        assert lines[0].endswith("::bad")
        assert lines[1].startswith("::warning ")

    async def test_emits_notices_when_enabled(
        self, reporter: CheckReporter, stream: io.StringIO
    ) -> None:
        """Notices are written as notice commands when enabled."""
        result = TestResultFactory.build(
            annotations=[AnnotationFactory.build(annotation_level="notice")]
        )

        await reporter.report(
            result, HEAD_SHA, CheckOptions(annotate_only=True, annotate_notice=True)
        )

        assert stream.getvalue().startswith("::notice ")
