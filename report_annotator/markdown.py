"""Render summary tables as GitHub-flavoured markdown."""

from collections.abc import Sequence

from report_annotator.models.summary import SummaryCell, SummaryRow


def escape_cell(data: str) -> str:
    """Keep a cell on a single table line."""
    return data.replace("|", "\\|").replace("\r\n", "<br>").replace("\n", "<br>")


def _cell_data(cell: str | SummaryCell) -> str:
    return cell.data if isinstance(cell, SummaryCell) else cell


def _is_header(row: SummaryRow) -> bool:
    return bool(row) and all(
        isinstance(cell, SummaryCell) and cell.header for cell in row
    )


def _render_row(row: SummaryRow) -> str:
    return "| " + " | ".join(escape_cell(_cell_data(cell)) for cell in row) + " |"


def build_table(rows: Sequence[SummaryRow]) -> str:
    """Render rows as a markdown table.

    The first row is used as the heading when all of its cells are header
    cells; otherwise an empty heading is emitted so the table still renders.
    """
    if not rows:
        return ""

    first, *rest = rows
    if _is_header(first):
        heading, body = first, rest
    else:
        heading, body = tuple("" for _ in first), list(rows)

    lines = [_render_row(heading), "| " + " | ".join("---" for _ in heading) + " |"]
    lines.extend(_render_row(row) for row in body)
    return "\n".join(lines)


def build_tables(tables: Sequence[Sequence[SummaryRow]]) -> str:
    """Render several tables separated by blank lines."""
    return "\n\n".join(build_table(table) for table in tables)
