"""Fold test results into the overview, details and flaky-test tables."""

import logging
from collections.abc import Sequence

from report_annotator.filtering import filter_annotations
from report_annotator.models.result import Annotation, TestResult
from report_annotator.models.summary import SummaryCell, SummaryRow, SummaryTables

log = logging.getLogger(__name__)

OVERVIEW_HEADER: SummaryRow = (
    SummaryCell(data="", header=True),
    SummaryCell(data="Tests", header=True),
    SummaryCell(data="Passed ✅", header=True),
    SummaryCell(data="Skipped ⏭️", header=True),
    SummaryCell(data="Failed ❌", header=True),
)

DETAILS_HEADER: SummaryRow = (
    SummaryCell(data="", header=True),
    SummaryCell(data="Test", header=True),
    SummaryCell(data="Result", header=True),
)

FLAKY_HEADER: SummaryRow = (
    SummaryCell(data="", header=True),
    SummaryCell(data="Test", header=True),
    SummaryCell(data="Retries", header=True),
)

NO_ANNOTATIONS_ROW: SummaryRow = ("-", "No test annotations available", "-")


def result_label(annotation: Annotation) -> str:
    """Three-way status label shown in the details table."""
    if annotation.status == "success":
        return "✅ pass"
    if annotation.status == "skipped":
        return "⏭️ skipped"
    return f"❌ {annotation.annotation_level}"


def build_summary_tables(
    test_results: Sequence[TestResult],
    *,
    include_passed: bool,
    detailed_summary: bool,
    flaky_summary: bool,
) -> SummaryTables:
    """Build the presentation tables for a set of test results.

    Args:
        test_results: Parsed results, one per suite
        include_passed: Keep notice-level (passed) entries in the details table
        detailed_summary: Produce the per-test details table
        flaky_summary: Produce the table of tests that needed retries

    Returns:
        Overview, details and flaky tables. Details and flaky rows are only
        collected while walking the details, so both stay empty without
        ``detailed_summary``.

    """
    overview: list[SummaryRow] = [OVERVIEW_HEADER]
    details: list[SummaryRow] = [DETAILS_HEADER] if detailed_summary else []
    flaky: list[SummaryRow] = [FLAKY_HEADER] if flaky_summary else []

    for test_result in test_results:
        overview.append(
            (
                test_result.check_name,
                f"{test_result.total_count} ran",
                f"{test_result.passed} passed",
                f"{test_result.skipped} skipped",
                f"{test_result.failed} failed",
            )
        )

        if not detailed_summary:
            continue

        annotations = filter_annotations(
            test_result.annotations, include_notices=include_passed
        )
        if not annotations:
            if not include_passed:
                log.info(
                    "No annotations found for %s. To include passed results in "
                    "this table set 'include_passed' to 'true'",
                    test_result.check_name,
                )
            details.append(NO_ANNOTATIONS_ROW)
            continue

        for annotation in annotations:
            details.append(
                (test_result.check_name, annotation.title, result_label(annotation))
            )
            if flaky_summary and annotation.retries > 0:
                flaky.append(
                    (test_result.check_name, annotation.title, str(annotation.retries))
                )

    if not detailed_summary:
        flaky = []

    return SummaryTables(overview=overview, details=details, flaky=flaky)
