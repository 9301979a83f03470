"""Evaluate queries against specs and rank the results."""

from __future__ import annotations

import logging
import re
import time
from collections.abc import Sequence
from dataclasses import dataclass, field

from spec_search.search.ast_nodes import (
    AndNode,
    ASTNode,
    DateFilter,
    FieldFilter,
    FieldNode,
    FuzzyNode,
    NodeType,
    NotNode,
    OrNode,
    ParsedQuery,
    SearchMatch,
)
from spec_search.search.context import (
    DEFAULT_CONTEXT_LENGTH,
    DEFAULT_MAX_MATCHES,
    deduplicate_matches,
    extract_smart_context,
    limit_matches,
)
from spec_search.search.fuzzy import close_words, fuzzy_match
from spec_search.search.parser import (
    DATE_FIELDS,
    SUPPORTED_FIELDS,
    parse_date_filter,
    parse_query,
)
from spec_search.search.scoring import (
    MAX_SCORE,
    calculate_match_score,
    calculate_spec_score,
    contains_any_term,
    count_occurrences,
    find_match_positions,
)

logger = logging.getLogger(__name__)

# Terms up to this length tolerate one typo, longer terms two
_SHORT_FUZZY_TERM = 4

_WORD_RE = re.compile(r"[\w-]+")


@dataclass(frozen=True)
class SearchableSpec:
    """A spec as seen by the search engine.

    Dates are ISO ``YYYY-MM-DD`` strings (a longer timestamp is fine,
    only the prefix is compared).
    """

    path: str
    name: str
    status: str = ""
    priority: str | None = None
    tags: tuple[str, ...] = ()
    title: str | None = None
    description: str | None = None
    content: str | None = None
    created: str | None = None
    updated: str | None = None
    assignee: str | None = None


@dataclass(frozen=True)
class SearchOptions:
    max_matches_per_spec: int = DEFAULT_MAX_MATCHES
    context_length: int = DEFAULT_CONTEXT_LENGTH


@dataclass(frozen=True)
class SearchResult:
    spec: SearchableSpec
    score: int
    total_matches: int
    matches: list[SearchMatch] = field(default_factory=list)


@dataclass(frozen=True)
class SearchMetadata:
    total_results: int
    search_time_ms: float
    query: str
    specs_searched: int


@dataclass(frozen=True)
class SearchResponse:
    results: list[SearchResult]
    metadata: SearchMetadata


def _field_texts(spec: SearchableSpec) -> list[str]:
    # One entry per tag so a phrase cannot run from one tag into the next
    return [
        spec.title or "",
        spec.name or "",
        *spec.tags,
        spec.description or "",
        spec.content or "",
    ]


def _spec_text(spec: SearchableSpec) -> str:
    return " ".join(_field_texts(spec)).lower()


def fuzzy_distance(term: str) -> int:
    """Edit distance budget the engine allows for a fuzzy term."""
    return 1 if len(term) <= _SHORT_FUZZY_TERM else 2


def spec_contains_all_terms(spec: SearchableSpec, query_terms: Sequence[str]) -> bool:
    """Check that every term occurs somewhere in the spec.

    Terms may be spread across fields (one in the title, another in the
    content). Returns False for an empty term list.
    """
    if not query_terms:
        return False
    text = _spec_text(spec)
    return all(term.lower() in text for term in query_terms)


# ---------------------------------------------------------------------------
# Match collection
# ---------------------------------------------------------------------------


def _field_match(
    field_name: str,
    text: str,
    query_terms: Sequence[str],
    total_matches: int = 1,
    position: int = 0,
) -> SearchMatch:
    occurrences = count_occurrences(text, query_terms)
    match = SearchMatch(field=field_name, text=text, occurrences=occurrences)
    score = calculate_match_score(match, query_terms, total_matches, position)
    return SearchMatch(
        field=field_name,
        text=text,
        score=score,
        highlights=find_match_positions(text, query_terms),
        occurrences=occurrences,
    )


def _content_matches(
    content: str, query_terms: Sequence[str], context_length: int
) -> list[SearchMatch]:
    lines = content.split("\n")
    hits = [i for i, line in enumerate(lines) if contains_any_term(line, query_terms)]

    matches: list[SearchMatch] = []
    for i in hits:
        line = lines[i]
        occurrences = count_occurrences(line, query_terms)
        snippet, highlights = extract_smart_context(content, i, query_terms, context_length)
        score = calculate_match_score(
            SearchMatch(field="content", text=line, occurrences=occurrences),
            query_terms,
            len(hits),
            i,
        )
        matches.append(
            SearchMatch(
                field="content",
                text=snippet,
                score=score,
                highlights=highlights,
                occurrences=occurrences,
                line_number=i + 1,
            )
        )
    return matches


def collect_matches(
    spec: SearchableSpec, query_terms: Sequence[str], context_length: int
) -> list[SearchMatch]:
    """Collect a match for every field of *spec* holding any query term."""
    matches: list[SearchMatch] = []

    for field_name, text in (("title", spec.title), ("name", spec.name)):
        if text and contains_any_term(text, query_terms):
            matches.append(_field_match(field_name, text, query_terms))

    for index, tag in enumerate(spec.tags):
        if contains_any_term(tag, query_terms):
            matches.append(_field_match("tags", tag, query_terms, len(spec.tags), index))

    if spec.description and contains_any_term(spec.description, query_terms):
        matches.append(_field_match("description", spec.description, query_terms))

    if spec.content:
        matches.extend(_content_matches(spec.content, query_terms, context_length))

    return matches


def _rank(
    spec: SearchableSpec,
    query_terms: Sequence[str],
    options: SearchOptions,
) -> SearchResult:
    matches = collect_matches(spec, query_terms, options.context_length)
    processed = limit_matches(deduplicate_matches(matches), options.max_matches_per_spec)
    return SearchResult(
        spec=spec,
        score=calculate_spec_score(processed),
        total_matches=len(matches),
        matches=processed,
    )


def _response(
    results: list[SearchResult], query: str, specs: Sequence[SearchableSpec], started: float
) -> SearchResponse:
    results.sort(key=lambda r: r.score, reverse=True)
    elapsed_ms = (time.perf_counter() - started) * 1000
    logger.debug(
        "Query %r matched %d of %d specs in %.1fms", query, len(results), len(specs), elapsed_ms
    )
    return SearchResponse(
        results=results,
        metadata=SearchMetadata(
            total_results=len(results),
            search_time_ms=elapsed_ms,
            query=query,
            specs_searched=len(specs),
        ),
    )


def search_specs(
    query: str,
    specs: Sequence[SearchableSpec],
    options: SearchOptions | None = None,
) -> SearchResponse:
    """Search specs for whitespace-separated terms.

    Every term must appear somewhere in a spec (cross-field AND). Results
    are sorted by relevance, best first.
    """
    started = time.perf_counter()
    options = options or SearchOptions()
    query_terms = query.lower().split()

    results: list[SearchResult] = []
    if query_terms:
        for spec in specs:
            if not spec_contains_all_terms(spec, query_terms):
                continue
            result = _rank(spec, query_terms, options)
            if result.matches:
                results.append(result)

    return _response(results, query, specs, started)


# ---------------------------------------------------------------------------
# Advanced queries
# ---------------------------------------------------------------------------


def _date_prefix(value: str, length: int) -> str:
    return value[:length]


def matches_date_filter(spec: SearchableSpec, date_filter: DateFilter) -> bool:
    """Check a spec's created/updated date against a date filter.

    Dates compare as ISO strings truncated to the filter value's length,
    so ``created:>2025-11`` means "after November 2025".
    """
    spec_date = getattr(spec, date_filter.field, None)
    if not spec_date:
        return False

    value = date_filter.value
    actual = _date_prefix(spec_date, len(value))
    op = date_filter.operator

    if op == ">":
        return actual > value
    if op == ">=":
        return actual >= value
    if op == "<":
        return actual < value
    if op == "<=":
        return actual <= value
    if op == "range":
        # Either end of a range may be left open: "..2025-11-15"
        end = date_filter.end_value or ""
        after_start = not value or actual >= value
        before_end = not end or _date_prefix(spec_date, len(end)) <= end
        return after_start and before_end

    logger.debug("Unknown date operator %r", op)
    return False


def matches_field_filter(spec: SearchableSpec, field_filter: FieldFilter) -> bool:
    """Check a spec against an exact field filter (case-insensitive)."""
    name = field_filter.field
    value = field_filter.value.lower()

    if name not in SUPPORTED_FIELDS:
        # Unknown field: search its value as plain text
        logger.debug("Unknown field %r, matching %r as text", name, field_filter.value)
        return value in _spec_text(spec)

    if name in ("status", "priority", "assignee"):
        actual = getattr(spec, name) or ""
        return actual.lower() == value
    if name in ("tag", "tags"):
        return any(tag.lower() == value for tag in spec.tags)
    if name in ("title", "name", "description"):
        return value in (getattr(spec, name) or "").lower()
    # created and updated
    actual = getattr(spec, name) or ""
    return actual.startswith(field_filter.value)


def _matches_field_node(spec: SearchableSpec, node: FieldNode) -> bool:
    if node.field in DATE_FIELDS:
        date_filter = parse_date_filter(node.field, node.value)
        if date_filter is not None:
            return matches_date_filter(spec, date_filter)
    return matches_field_filter(spec, FieldFilter(field=node.field, value=node.value))


def _matches_leaf(spec: SearchableSpec, node: ASTNode) -> bool:
    if isinstance(node, FieldNode):
        return _matches_field_node(spec, node)
    if isinstance(node, FuzzyNode):
        distance = fuzzy_distance(node.value)
        return any(fuzzy_match(node.value, text, distance) for text in _field_texts(spec) if text)
    # TERM and PHRASE match within a single field
    value = node.value.lower()
    return any(value in text.lower() for text in _field_texts(spec))


def evaluate(node: ASTNode, spec: SearchableSpec) -> bool:
    """Evaluate a query expression tree against a spec.

    Uses an explicit stack, so long implicit-AND chains cannot exhaust
    the interpreter's recursion limit.
    """
    values: list[bool] = []
    stack: list[tuple[ASTNode, bool]] = [(node, False)]

    while stack:
        current, visited = stack.pop()
        if isinstance(current, (AndNode, OrNode)):
            if visited:
                right = values.pop()
                left = values.pop()
                values.append(left and right if current.type == NodeType.AND else left or right)
            else:
                stack.append((current, True))
                stack.append((current.right, False))
                stack.append((current.left, False))
        elif isinstance(current, NotNode):
            if visited:
                values.append(not values.pop())
            else:
                stack.append((current, True))
                stack.append((current.child, False))
        else:
            values.append(_matches_leaf(spec, current))

    return values.pop()


def _fuzzy_highlight_terms(spec: SearchableSpec, fuzzy_terms: Sequence[str]) -> list[str]:
    """Words of the spec that each fuzzy term matched, for scoring and highlighting."""
    text = _spec_text(spec)
    words = set(_WORD_RE.findall(text))
    found: list[str] = []
    for term in fuzzy_terms:
        if term in text:
            found.append(term)
            continue
        found.extend(close_words(term, words, fuzzy_distance(term)))
    return found


def _passes_filters(spec: SearchableSpec, parsed: ParsedQuery) -> bool:
    # Field and date filters live in the tree too, under their OR/NOT context
    return parsed.ast is not None and evaluate(parsed.ast, spec)


def advanced_search_specs(
    query: str,
    specs: Sequence[SearchableSpec],
    options: SearchOptions | None = None,
    parsed: ParsedQuery | None = None,
) -> SearchResponse:
    """Search specs with the full query language.

    Supports boolean operators, field filters, date filters, fuzzy terms
    and phrases. Queries made only of bare words use :func:`search_specs`.

    Specs that pass on filters alone (no textual terms in the query)
    score 100; specs that pass but hold no query term score 0.

    Pass *parsed* when the caller already parsed *query*, so the same
    parse is reported and evaluated.
    """
    if parsed is None:
        parsed = parse_query(query)
    if not parsed.has_advanced_syntax:
        return search_specs(query, specs, options)

    started = time.perf_counter()
    options = options or SearchOptions()
    for message in parsed.errors:
        logger.debug("Query %r: %s", query, message)

    results: list[SearchResult] = []
    for spec in specs:
        if not _passes_filters(spec, parsed):
            continue

        scoring_terms = parsed.terms + _fuzzy_highlight_terms(spec, parsed.fuzzy_terms)
        if not scoring_terms:
            results.append(SearchResult(spec=spec, score=int(MAX_SCORE), total_matches=0))
            continue
        results.append(_rank(spec, scoring_terms, options))

    return _response(results, query, specs, started)
