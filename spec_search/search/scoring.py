"""Relevance scoring for search matches.

Scoring factors for a single match:

- Field weight (title > name = tags > description > content)
- Whole-word bonus (up to 2x when every matching term is a whole word)
- Occurrences (logarithmic, so repeats have diminishing returns)
- Position bonus (earlier matches score higher)
- Frequency penalty (many matches in a document are less specific)
"""

from __future__ import annotations

import math
import re
from collections.abc import Iterable, Mapping, Sequence
from types import MappingProxyType
from typing import Protocol

from spec_search.search.ast_nodes import SearchMatch

FIELD_WEIGHTS: Mapping[str, int] = MappingProxyType(
    {
        "title": 100,
        "name": 70,
        "tags": 70,
        "description": 50,
        "content": 10,
    }
)

# Weight for fields missing from FIELD_WEIGHTS
DEFAULT_FIELD_WEIGHT = 1

MAX_SCORE = 100.0

_OCCURRENCE_FACTOR = 0.25
_POSITION_BONUS = 0.5
_POSITION_DECAY = 0.1
_FREQUENCY_DECAY = 0.1


class ScorableMatch(Protocol):
    """The parts of a match that :func:`calculate_match_score` reads."""

    field: str
    text: str
    occurrences: int


def field_weight(field: str) -> int:
    """Return the weight of *field*, falling back to the default."""
    return FIELD_WEIGHTS.get(field, DEFAULT_FIELD_WEIGHT)


def _clean_terms(terms: Iterable[str]) -> list[str]:
    return [term.lower() for term in terms if term]


def _is_whole_word(term: str, text: str) -> bool:
    pattern = rf"(?<!\w){re.escape(term)}(?!\w)"
    return re.search(pattern, text, re.IGNORECASE) is not None


def calculate_match_score(
    match: ScorableMatch,
    query_terms: Sequence[str],
    total_matches: int,
    position: int,
) -> float:
    """Calculate the relevance score of one match.

    Args:
        match: The match to score (field, text and occurrences are used).
        query_terms: Terms of the query.
        total_matches: Number of matches found across the document.
        position: Position of this match (0-based, e.g. line index).

    Returns:
        Score between 0 and 100.
    """
    score = float(field_weight(match.field))

    text_lower = match.text.lower()
    present = [term for term in _clean_terms(query_terms) if term in text_lower]
    if present:
        exact = sum(1 for term in present if _is_whole_word(term, match.text))
        score *= 1.0 + exact / len(present)

    score *= 1.0 + _OCCURRENCE_FACTOR * math.log2(max(match.occurrences, 1))
    score *= 1.0 + _POSITION_BONUS / (1.0 + _POSITION_DECAY * max(position, 0))
    score /= 1.0 + _FREQUENCY_DECAY * (max(total_matches, 1) - 1)

    return max(0.0, min(MAX_SCORE, score))


def calculate_spec_score(matches: Sequence[SearchMatch]) -> int:
    """Calculate the overall relevance score of a spec.

    Keeps the best match per field and averages those maxima weighted
    by field importance.

    Returns:
        Integer score between 0 and 100; 0 when there are no matches.
    """
    if not matches:
        return 0

    best_by_field: dict[str, float] = {}
    for match in matches:
        best_by_field[match.field] = max(best_by_field.get(match.field, 0.0), match.score)

    total_score = 0.0
    total_weight = 0
    for field, score in best_by_field.items():
        weight = field_weight(field)
        total_score += score * weight
        total_weight += weight

    if total_weight == 0:
        return 0
    combined = math.floor(total_score / total_weight + 0.5)
    return int(max(0, min(MAX_SCORE, combined)))


def contains_all_terms(text: str, query_terms: Sequence[str]) -> bool:
    """Check if text contains every query term (case-insensitive)."""
    text_lower = text.lower()
    return all(term.lower() in text_lower for term in query_terms)


def contains_any_term(text: str, query_terms: Sequence[str]) -> bool:
    """Check if text contains at least one query term (case-insensitive)."""
    if not text:
        return False
    text_lower = text.lower()
    return any(term.lower() in text_lower for term in query_terms)


def count_occurrences(text: str, query_terms: Sequence[str]) -> int:
    """Count non-overlapping occurrences of each term, summed over terms."""
    text_lower = text.lower()
    return sum(text_lower.count(term) for term in _clean_terms(query_terms))


def find_match_positions(text: str, query_terms: Sequence[str]) -> list[tuple[int, int]]:
    """Find all match ranges of the query terms in *text*.

    Returns:
        Sorted half-open ``(start, end)`` ranges, with overlapping or
        adjacent ranges merged.
    """
    positions: list[tuple[int, int]] = []

    # Matched on the original text so offsets stay valid when lowercasing
    # changes the length of a character
    for term in _clean_terms(query_terms):
        for found in re.finditer(re.escape(term), text, re.IGNORECASE):
            positions.append(found.span())

    positions.sort()

    merged: list[tuple[int, int]] = []
    for start, end in positions:
        if merged and start <= merged[-1][1]:
            last_start, last_end = merged[-1]
            merged[-1] = (last_start, max(last_end, end))
        else:
            merged.append((start, end))
    return merged
