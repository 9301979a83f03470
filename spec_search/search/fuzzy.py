"""Edit-distance based fuzzy matching."""

from __future__ import annotations

from collections.abc import Iterable

from rapidfuzz import process
from rapidfuzz.distance import Levenshtein

DEFAULT_MAX_DISTANCE = 1


def levenshtein_distance(a: str, b: str) -> int:
    """Return the Levenshtein edit distance between two strings.

    Insertions, deletions and substitutions each cost 1. Comparison is
    case-sensitive.
    """
    return Levenshtein.distance(a, b)


def fuzzy_match(term: str, text: str, max_distance: int = DEFAULT_MAX_DISTANCE) -> bool:
    """Check whether *term* approximately occurs in *text*.

    Matches when *text* contains *term* as a case-insensitive substring,
    or when any whitespace-delimited word of *text* is within
    *max_distance* edits of *term*.

    Args:
        term: The (possibly misspelled) search term.
        text: Text to search in.
        max_distance: Maximum edit distance for a word to count as a match.

    Returns:
        True if the term fuzzy-matches the text.
    """
    term_lower = term.lower()
    text_lower = text.lower()

    if term_lower in text_lower:
        return True

    return any(
        Levenshtein.distance(term_lower, word, score_cutoff=max_distance) <= max_distance
        for word in text_lower.split()
    )


def close_words(term: str, words: Iterable[str], max_distance: int) -> list[str]:
    """Return the *words* within *max_distance* edits of *term*, sorted."""
    found = process.extract(
        term,
        list(words),
        scorer=Levenshtein.distance,
        processor=None,
        score_cutoff=max_distance,
        limit=None,
    )
    return sorted(word for word, _distance, _index in found)
