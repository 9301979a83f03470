"""Snippet extraction and match post-processing for search results."""

from __future__ import annotations

import re
from collections.abc import Sequence

from spec_search.search.ast_nodes import SearchMatch
from spec_search.search.scoring import find_match_positions

DEFAULT_CONTEXT_LENGTH = 80
DEFAULT_MIN_LINE_DISTANCE = 3
DEFAULT_MAX_MATCHES = 5

ELLIPSIS = "..."

# How far (in characters) a window edge may move to reach a sentence boundary
_SENTENCE_SNAP = 20
_SENTENCE_BREAK = ". "

# Display order of fields in a result
FIELD_ORDER: dict[str, int] = {
    "title": 0,
    "name": 1,
    "tags": 2,
    "description": 3,
    "content": 4,
}


def _line_at(text: str, line_index: int) -> str:
    lines = text.split("\n")
    if 0 <= line_index < len(lines):
        return lines[line_index]
    return ""


def _first_match_position(line: str, query_terms: Sequence[str]) -> int:
    first = len(line)
    for term in query_terms:
        if not term:
            continue
        found = re.search(re.escape(term), line, re.IGNORECASE)
        if found is not None and found.start() < first:
            first = found.start()
    return first


def _window(
    line: str, start: int, end: int, query_terms: Sequence[str]
) -> tuple[str, list[tuple[int, int]]]:
    snippet = line[start:end]
    if start > 0:
        snippet = ELLIPSIS + snippet
    if end < len(line):
        snippet = snippet + ELLIPSIS
    return snippet, find_match_positions(snippet, query_terms)


def extract_context(
    text: str,
    line_index: int,
    query_terms: Sequence[str],
    context_length: int = DEFAULT_CONTEXT_LENGTH,
) -> tuple[str, list[tuple[int, int]]]:
    """Extract a snippet around the first match on a line.

    Lines up to ``2 * context_length`` characters are returned whole.
    Longer lines are cut to ``context_length`` characters either side of
    the first match, with an ellipsis marking each truncated side.

    Args:
        text: Full multi-line text.
        line_index: 0-based index of the matching line.
        query_terms: Terms to highlight.
        context_length: Characters to keep before and after the match.

    Returns:
        Tuple of (snippet, highlight ranges within the snippet).
    """
    line = _line_at(text, line_index)

    if len(line) <= context_length * 2:
        return line, find_match_positions(line, query_terms)

    first = _first_match_position(line, query_terms)
    start = max(0, first - context_length)
    end = min(len(line), first + context_length)
    return _window(line, start, end, query_terms)


def extract_smart_context(
    text: str,
    line_index: int,
    query_terms: Sequence[str],
    context_length: int = DEFAULT_CONTEXT_LENGTH,
) -> tuple[str, list[tuple[int, int]]]:
    """Like :func:`extract_context`, but snap to nearby sentence boundaries."""
    line = _line_at(text, line_index)

    if len(line) <= context_length * 2:
        return extract_context(text, line_index, query_terms, context_length)

    first = _first_match_position(line, query_terms)
    start = max(0, first - context_length)
    end = min(len(line), first + context_length)

    last_sentence = line.rfind(_SENTENCE_BREAK, 0, start)
    if last_sentence != -1 and start - last_sentence < _SENTENCE_SNAP:
        start = last_sentence + len(_SENTENCE_BREAK)

    next_sentence = line.find(_SENTENCE_BREAK, end)
    if next_sentence != -1 and next_sentence - end < _SENTENCE_SNAP:
        end = next_sentence + 1  # keep the period

    return _window(line, start, end, query_terms)


def deduplicate_matches(
    matches: Sequence[SearchMatch],
    min_distance: int = DEFAULT_MIN_LINE_DISTANCE,
) -> list[SearchMatch]:
    """Drop content matches that sit too close to a better one.

    Non-content matches are always kept. A content match is dropped when
    a higher-scoring content match lies within *min_distance* lines.

    Returns:
        Matches ordered by field priority, then score descending.
    """
    ranked = sorted(matches, key=lambda m: (-m.score, m.line_number or 0))

    kept: list[SearchMatch] = []
    used_lines: list[int] = []
    for match in ranked:
        if match.field != "content":
            kept.append(match)
            continue
        line = match.line_number or 0
        if any(abs(line - used) <= min_distance for used in used_lines):
            continue
        kept.append(match)
        used_lines.append(line)

    return sorted(kept, key=lambda m: (FIELD_ORDER.get(m.field, len(FIELD_ORDER)), -m.score))


def limit_matches(
    matches: Sequence[SearchMatch],
    max_matches: int = DEFAULT_MAX_MATCHES,
) -> list[SearchMatch]:
    """Keep all non-content matches plus the best content matches up to *max_matches*."""
    if len(matches) <= max_matches:
        return list(matches)

    non_content = sorted(
        (m for m in matches if m.field != "content"),
        key=lambda m: FIELD_ORDER.get(m.field, len(FIELD_ORDER)),
    )
    content = sorted((m for m in matches if m.field == "content"), key=lambda m: -m.score)
    return non_content + content[: max(0, max_matches - len(non_content))]
