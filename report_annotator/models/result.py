"""Models for parsed test results handed over by the report parser."""

from collections.abc import Sequence
from typing import Any, Literal

from pydantic import Field, NonNegativeInt

from report_annotator.models.base import Model

type AnnotationLevel = Literal["notice", "warning", "failure"]
type Conclusion = Literal["success", "failure"]

NO_RESULTS_TITLE = "No test results found!"


class Annotation(Model):
    """A file and line scoped diagnostic for a single test case."""

    path: str = Field(..., description="Path of the file relative to the repository")
    start_line: int = Field(default=1, ge=1, description="First line (1-based)")
    end_line: int = Field(default=1, ge=1, description="Last line (1-based)")
    start_column: int | None = Field(default=None, ge=1)
    end_column: int | None = Field(default=None, ge=1)
    annotation_level: AnnotationLevel = Field(..., description="Severity of the entry")
    status: str = Field(
        default="failure", description="Test status (success, skipped, failure, ...)"
    )
    title: str = Field(default="", description="Test case name")
    message: str = Field(default="", description="Failure message, may be multi-line")
    raw_details: str | None = Field(default=None, description="Stack trace or output")
    retries: NonNegativeInt = Field(
        default=0, description="Attempts before the final status"
    )

    @property
    def first_message_line(self) -> str:
        """First line of the message, used for terse logging."""
        return self.message.split("\n", 1)[0]

    def to_api_payload(self) -> dict[str, Any]:
        """Build the annotation object accepted by the check-runs API.

        Columns are only sent for single-line annotations, GitHub rejects
        them otherwise. ``status`` and ``retries`` never leave the process.
        """
        payload: dict[str, Any] = {
            "path": self.path,
            "start_line": self.start_line,
            "end_line": self.end_line,
            "annotation_level": self.annotation_level,
            "message": self.message,
        }
        if self.start_line == self.end_line:
            if self.start_column is not None:
                payload["start_column"] = self.start_column
            if self.end_column is not None:
                payload["end_column"] = self.end_column
        if self.title:
            payload["title"] = self.title
        if self.raw_details:
            payload["raw_details"] = self.raw_details
        return payload


class TestResult(Model):
    """Aggregated outcome of one test suite or job."""

    __test__ = False

    check_name: str = Field(..., description="Name of the check-run for this suite")
    total_count: NonNegativeInt = 0
    passed: NonNegativeInt = 0
    skipped: NonNegativeInt = 0
    failed: NonNegativeInt = 0
    summary: str = ""
    annotations: Sequence[Annotation] = Field(default_factory=list)

    @property
    def found_results(self) -> bool:
        """Whether the suite ran or skipped anything at all."""
        return self.total_count > 0 or self.skipped > 0

    @property
    def conclusion(self) -> Conclusion:
        """Overall pass/fail, decided by the failure count alone."""
        return "success" if self.failed <= 0 else "failure"

    @property
    def title(self) -> str:
        """Human-readable headline used for check-runs and logs."""
        if not self.found_results:
            return NO_RESULTS_TITLE
        return (
            f"{self.total_count} tests run, {self.passed} passed, "
            f"{self.skipped} skipped, {self.failed} failed."
        )
