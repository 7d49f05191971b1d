"""Source snippet extraction for diagnostics."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from puregate.kernel.diagnostics.models import SourceLocation

CONTEXT_LINES = 2
MAX_LINE_LENGTH = 80

# "> " marker, four digit line number and " | " separator
_GUTTER_WIDTH = 9


def code_snippet(
    source: str,
    location: SourceLocation,
    context_lines: int = CONTEXT_LINES,
    max_line_length: int = MAX_LINE_LENGTH,
) -> str:
    """Render the lines around ``location`` with a marker and a column caret.

    Parameters
    ----------
    source : str
        Full source text
    location : SourceLocation
        Position to highlight
    context_lines : int
        Number of lines shown before and after the highlighted line
    max_line_length : int
        Longer lines are truncated and end with ``...``

    Returns
    -------
    str
        The snippet, or an empty string when the line is out of range
    """
    if not source:
        return ""

    lines = source.split("\n")
    line_index = location.line - 1
    if line_index >= len(lines):
        return ""

    start = max(0, line_index - context_lines)
    end = min(len(lines) - 1, line_index + context_lines)

    rendered: list[str] = []
    for index in range(start, end + 1):
        text = lines[index].rstrip("\r")
        if len(text) > max_line_length:
            text = text[: max_line_length - 3] + "..."
        marker = ">" if index == line_index else " "
        rendered.append(f"{marker} {index + 1:>4} | {text}")
        if index == line_index:
            rendered.append(" " * (_GUTTER_WIDTH + location.column) + "^")
    return "\n".join(rendered)
