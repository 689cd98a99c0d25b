"""Append summary tables to the GitHub Actions job summary."""

import logging
from pathlib import Path

from report_annotator.markdown import build_tables
from report_annotator.models.summary import SummaryRow, SummaryTables

log = logging.getLogger(__name__)


def summary_sections(tables: SummaryTables) -> list[list[SummaryRow]]:
    """Tables to render, in order, leaving out the ones without content."""
    sections = [list(tables.overview)]
    if tables.has_details:
        sections.append(list(tables.details))
    if tables.has_flaky:
        sections.append(list(tables.flaky))
    return sections


def attach_summary(summary_path: Path | None, tables: SummaryTables) -> bool:
    """Append the rendered tables to the job summary file.

    Returns:
        True when the summary was written, False when no summary file is
        available for this job.

    """
    if summary_path is None:
        log.warning("No job summary file available (GITHUB_STEP_SUMMARY unset)")
        return False

    content = build_tables(summary_sections(tables))
    with summary_path.open("a", encoding="utf-8") as summary_file:
        summary_file.write(content + "\n\n")

    log.info("Job summary written to %s", summary_path)
    return True
