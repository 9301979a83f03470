"""Query language, relevance scoring and search engine for specs."""

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
    PhraseNode,
    SearchMatch,
    TermNode,
    Token,
    TokenType,
)
from spec_search.search.engine import (
    SearchableSpec,
    SearchMetadata,
    SearchOptions,
    SearchResponse,
    SearchResult,
    advanced_search_specs,
    search_specs,
    spec_contains_all_terms,
)
from spec_search.search.fuzzy import fuzzy_match, levenshtein_distance
from spec_search.search.lexer import tokenize
from spec_search.search.parser import SUPPORTED_FIELDS, get_search_syntax_help, parse_query
from spec_search.search.scoring import (
    FIELD_WEIGHTS,
    calculate_match_score,
    calculate_spec_score,
    contains_all_terms,
    contains_any_term,
    count_occurrences,
    find_match_positions,
)

__all__ = [
    "ASTNode",
    "AndNode",
    "DateFilter",
    "FIELD_WEIGHTS",
    "FieldFilter",
    "FieldNode",
    "FuzzyNode",
    "NodeType",
    "NotNode",
    "OrNode",
    "ParsedQuery",
    "PhraseNode",
    "SUPPORTED_FIELDS",
    "SearchMatch",
    "SearchMetadata",
    "SearchOptions",
    "SearchResponse",
    "SearchResult",
    "SearchableSpec",
    "TermNode",
    "Token",
    "TokenType",
    "advanced_search_specs",
    "calculate_match_score",
    "calculate_spec_score",
    "contains_all_terms",
    "contains_any_term",
    "count_occurrences",
    "find_match_positions",
    "fuzzy_match",
    "get_search_syntax_help",
    "levenshtein_distance",
    "parse_query",
    "search_specs",
    "spec_contains_all_terms",
    "tokenize",
]
