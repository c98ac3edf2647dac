"""Repository search -- filename and line-content matching over a directory tree."""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger("engine.search")

# Directory names never descended into.  ``codeedit`` holds our own checklist.
IGNORED_DIRS = frozenset({".git", "node_modules", "target", "dist", "codeedit"})

BINARY_SNIFF_BYTES = 8192
PREVIEW_CHARS = 200
DEFAULT_MAX_RESULTS = 2000


@dataclass(slots=True)
class SearchHit:
    """A single match location inside the repository."""

    file: str
    line: int
    column: int
    preview: str


def is_binary(data: bytes) -> bool:
    """Treat anything with a NUL byte in its first 8 KiB as binary."""
    return b"\x00" in data[:BINARY_SNIFF_BYTES]


def split_lines(text: str) -> list[str]:
    """Split on ``\\n`` and strip a trailing ``\\r``; no phantom final line."""
    if not text:
        return []
    parts = text.split("\n")
    if text.endswith("\n"):
        parts.pop()
    return [p[:-1] if p.endswith("\r") else p for p in parts]


def _compile(query: str, use_regex: bool) -> re.Pattern[str] | None:
    if not use_regex:
        return None
    try:
        return re.compile(query, re.IGNORECASE)
    except re.error as exc:
        # Invalid expressions degrade to a literal, case-insensitive search
        logger.warning("Invalid search regex %r (%s); falling back to literal", query, exc)
        return None


def _walk_files(root: Path):
    """Yield files under root in a stable order, pruning ignored directories."""
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(d for d in dirnames if d not in IGNORED_DIRS)
        for name in sorted(filenames):
            yield Path(dirpath) / name


def perform_search(
    root: Path,
    query: str,
    use_regex: bool = False,
    glob: str | None = None,
    max_results: int = DEFAULT_MAX_RESULTS,
) -> list[SearchHit]:
    """Search file paths and file contents under ``root``.

    A path match produces one hit at line 1, column 1 with a
    ``FILENAME MATCH`` preview.  Content matches produce at most one hit per
    line (the first occurrence), with 1-based line and column.  Matching is
    case-insensitive in both literal and regex mode.

    Args:
        root: Repository root to walk.
        query: Literal text or regular expression.
        use_regex: Interpret ``query`` as a regular expression.
        glob: Optional suffix filter (leading ``*`` characters are ignored).
        max_results: Scanning stops once more than this many hits exist.

    Returns:
        Hits in walk order.
    """
    results: list[SearchHit] = []
    pattern = _compile(query, use_regex)
    query_lower = query.lower()
    suffix = glob.lstrip("*") if glob else None

    for path in _walk_files(root):
        if suffix and not str(path).endswith(suffix):
            continue

        rel_path = path.relative_to(root).as_posix()

        if pattern is not None:
            path_matched = pattern.search(rel_path) is not None
        else:
            path_matched = query_lower in rel_path.lower()

        if path_matched:
            results.append(
                SearchHit(file=rel_path, line=1, column=1, preview=f"FILENAME MATCH: {rel_path}")
            )

        try:
            data = path.read_bytes()
        except OSError as exc:
            logger.debug("Skipping unreadable file %s: %s", rel_path, exc)
            continue
        if is_binary(data):
            continue

        text = data.decode("utf-8", errors="replace")
        for index, line in enumerate(split_lines(text)):
            if pattern is not None:
                match = pattern.search(line)
                column = match.start() if match else -1
            else:
                column = line.lower().find(query_lower)

            if column >= 0:
                results.append(
                    SearchHit(
                        file=rel_path,
                        line=index + 1,
                        column=column + 1,
                        preview=line.strip()[:PREVIEW_CHARS],
                    )
                )
                if len(results) > max_results:
                    break
        if len(results) > max_results:
            logger.info("Search for %r truncated at %d results", query, len(results))
            break

    return results
