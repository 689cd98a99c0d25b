"""Presentation rows produced by the result aggregator."""

from collections.abc import Sequence
from dataclasses import dataclass, field


@dataclass(frozen=True, kw_only=True)
class SummaryCell:
    """A table cell; header cells render as the table heading."""

    data: str
    header: bool = False


type SummaryRow = Sequence[str | SummaryCell]


@dataclass(frozen=True, kw_only=True)
class SummaryTables:
    """The three tables rendered into job summaries and PR comments."""

    overview: Sequence[SummaryRow] = field(default_factory=list)
    details: Sequence[SummaryRow] = field(default_factory=list)
    flaky: Sequence[SummaryRow] = field(default_factory=list)

    @property
    def has_details(self) -> bool:
        """Details are shown whenever the table was requested."""
        return len(self.details) > 0

    @property
    def has_flaky(self) -> bool:
        """Flaky tests are only shown when at least one row follows the header."""
        return len(self.flaky) > 1
