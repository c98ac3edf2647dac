"""Match Highlighter -- text ranges to decorate in the loaded buffer."""

from __future__ import annotations

import bisect
import logging
import re
from dataclasses import dataclass

from reviewdesk.errors import MalformedPattern
from reviewdesk.notices import NoticeBoard

logger = logging.getLogger("reviewdesk.highlighter")


@dataclass(frozen=True, slots=True)
class TextRange:
    """A span of the buffer. Lines and columns are 1-based; ends are exclusive."""

    start_line: int
    start_column: int
    end_line: int
    end_column: int
    start_offset: int
    end_offset: int


def compile_pattern(pattern: str, is_regex: bool) -> re.Pattern[str]:
    """Compile a search expression the way the search service matches it.

    Matching is case-insensitive; literal patterns are escaped.

    Raises:
        MalformedPattern: If a regular expression does not compile.
    """
    source = pattern if is_regex else re.escape(pattern)
    try:
        return re.compile(source, re.IGNORECASE | re.MULTILINE)
    except re.error as exc:
        raise MalformedPattern(f"Invalid regular expression {pattern!r}: {exc}") from exc


def locate(
    content: str,
    pattern: str,
    is_regex: bool,
    notices: NoticeBoard | None = None,
) -> list[TextRange]:
    """Find every non-empty match of ``pattern`` in ``content``.

    Never raises for a bad expression: a malformed regex yields no ranges
    and a warning.
    """
    if not pattern:
        return []
    try:
        compiled = compile_pattern(pattern, is_regex)
    except MalformedPattern as exc:
        logger.warning("%s", exc)
        if notices:
            notices.warning("Invalid regex; matches not highlighted")
        return []

    line_starts = _line_starts(content)
    ranges: list[TextRange] = []
    for match in compiled.finditer(content):
        start, end = match.span()
        if start == end:
            continue
        start_line, start_column = _position(line_starts, start)
        end_line, end_column = _position(line_starts, end)
        ranges.append(
            TextRange(
                start_line=start_line,
                start_column=start_column,
                end_line=end_line,
                end_column=end_column,
                start_offset=start,
                end_offset=end,
            )
        )
    return ranges


def _line_starts(content: str) -> list[int]:
    starts = [0]
    starts.extend(i + 1 for i, ch in enumerate(content) if ch == "\n")
    return starts


def _position(line_starts: list[int], offset: int) -> tuple[int, int]:
    index = bisect.bisect_right(line_starts, offset) - 1
    return index + 1, offset - line_starts[index] + 1
