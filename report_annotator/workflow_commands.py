"""Standalone annotations written as GitHub Actions workflow commands."""

import sys
from collections.abc import Mapping
from typing import Literal, TextIO

from report_annotator.models.result import Annotation

type CommandName = Literal["error", "warning", "notice"]

LEVEL_TO_COMMAND: Mapping[str, CommandName] = {
    "failure": "error",
    "warning": "warning",
    "notice": "notice",
}


def escape_data(value: str) -> str:
    """Escape the message part of a workflow command."""
    return value.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def escape_property(value: str) -> str:
    """Escape a property value of a workflow command."""
    return escape_data(value).replace(":", "%3A").replace(",", "%2C")


def format_command(
    command: str, properties: Mapping[str, str | int | None], message: str
) -> str:
    """Format a workflow command line, skipping unset properties."""
    rendered = ",".join(
        f"{key}={escape_property(str(value))}"
        for key, value in properties.items()
        if value is not None and value != ""
    )
    prefix = f"::{command} {rendered}" if rendered else f"::{command}"
    return f"{prefix}::{escape_data(message)}"


def annotate(
    annotation: Annotation,
    *,
    annotate_notice: bool,
    stream: TextIO | None = None,
) -> CommandName | None:
    """Emit a line-level diagnostic for the annotation.

    Returns:
        The workflow command that was written, or None when the annotation
        is a notice and notices are disabled.

    """
    command = LEVEL_TO_COMMAND[annotation.annotation_level]
    if command == "notice" and not annotate_notice:
        return None

    properties = {
        "title": annotation.title,
        "file": annotation.path,
        "line": annotation.start_line,
        "endLine": annotation.end_line,
        "col": annotation.start_column,
        "endColumn": annotation.end_column,
    }
    print(
        format_command(command, properties, annotation.message),
        file=stream if stream is not None else sys.stdout,
    )
    return command
