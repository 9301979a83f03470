"""Unit tests for search query parser."""

from __future__ import annotations

import pytest

from spec_search.search.ast_nodes import (
    AndNode,
    DateFilter,
    FieldFilter,
    FieldNode,
    FuzzyNode,
    NodeType,
    NotNode,
    OrNode,
    PhraseNode,
    TermNode,
)
from spec_search.search.parser import (
    MAX_NESTING_DEPTH,
    get_search_syntax_help,
    parse_date_filter,
    parse_query,
)

# ---------------------------------------------------------------------------
# Terms and phrases
# ---------------------------------------------------------------------------


class TestTerms:
    def test_empty_query(self) -> None:
        q = parse_query("")
        assert q.ast is None
        assert q.terms == []
        assert q.fields == []
        assert q.date_filters == []
        assert q.fuzzy_terms == []
        assert q.has_advanced_syntax is False
        assert q.errors == []

    def test_whitespace_query(self) -> None:
        q = parse_query("   \t ")
        assert q.ast is None
        assert q.original_query == "   \t "

    def test_single_term(self) -> None:
        q = parse_query("api")
        assert q.ast == TermNode("api")
        assert q.terms == ["api"]
        assert q.has_advanced_syntax is False

    def test_bare_words_are_anded(self) -> None:
        q = parse_query("api authentication")
        assert q.ast == AndNode(TermNode("api"), TermNode("authentication"))
        assert q.terms == ["api", "authentication"]
        assert q.has_advanced_syntax is False

    def test_terms_lowercased_node_keeps_case(self) -> None:
        q = parse_query("OAuth API")
        assert q.terms == ["oauth", "api"]
        assert q.ast == AndNode(TermNode("OAuth"), TermNode("API"))

    def test_duplicate_terms_kept(self) -> None:
        assert parse_query("api api").terms == ["api", "api"]

    def test_phrase(self) -> None:
        q = parse_query('"token refresh"')
        assert q.ast == PhraseNode("token refresh")
        assert q.terms == ["token refresh"]
        assert q.has_advanced_syntax is True

    def test_original_query_preserved(self) -> None:
        q = parse_query("  api  ")
        assert q.original_query == "  api  "
        assert q.ast == TermNode("api")


# ---------------------------------------------------------------------------
# Boolean operators
# ---------------------------------------------------------------------------


class TestBooleanOperators:
    def test_explicit_and(self) -> None:
        q = parse_query("api AND auth")
        assert q.ast == AndNode(TermNode("api"), TermNode("auth"))
        assert q.has_advanced_syntax is True

    def test_or(self) -> None:
        q = parse_query("api OR auth")
        assert q.ast == OrNode(TermNode("api"), TermNode("auth"))

    def test_and_binds_tighter_than_or(self) -> None:
        q = parse_query("a OR b c")
        assert q.ast == OrNode(TermNode("a"), AndNode(TermNode("b"), TermNode("c")))

    def test_and_is_left_associative(self) -> None:
        q = parse_query("a b c")
        assert q.ast == AndNode(AndNode(TermNode("a"), TermNode("b")), TermNode("c"))

    def test_or_is_left_associative(self) -> None:
        q = parse_query("a OR b OR c")
        assert q.ast == OrNode(OrNode(TermNode("a"), TermNode("b")), TermNode("c"))

    def test_not_after_term(self) -> None:
        q = parse_query("api NOT deprecated")
        assert q.ast is not None
        assert q.ast.type == NodeType.AND
        assert q.ast.right.type == "NOT"
        assert q.ast == AndNode(TermNode("api"), NotNode(TermNode("deprecated")))
        # Negated terms still feed highlighting
        assert q.terms == ["api", "deprecated"]

    def test_not_binds_tighter_than_and(self) -> None:
        q = parse_query("NOT a b")
        assert q.ast == AndNode(NotNode(TermNode("a")), TermNode("b"))

    def test_double_not(self) -> None:
        q = parse_query("NOT NOT api")
        assert q.ast == NotNode(NotNode(TermNode("api")))

    def test_grouping(self) -> None:
        q = parse_query("(frontend OR backend) AND api")
        assert q.ast == AndNode(
            OrNode(TermNode("frontend"), TermNode("backend")),
            TermNode("api"),
        )

    def test_group_changes_precedence(self) -> None:
        q = parse_query("a (b OR c)")
        assert q.ast == AndNode(TermNode("a"), OrNode(TermNode("b"), TermNode("c")))

    def test_lowercase_keywords_are_terms(self) -> None:
        q = parse_query("api and auth")
        assert q.terms == ["api", "and", "auth"]
        assert q.has_advanced_syntax is False


# ---------------------------------------------------------------------------
# Field, date and fuzzy filters
# ---------------------------------------------------------------------------


class TestFieldFilters:
    def test_single_field(self) -> None:
        q = parse_query("status:planned")
        assert q.ast == FieldNode(field="status", value="planned")
        assert q.fields == [FieldFilter(field="status", value="planned", exact=True)]
        assert q.terms == []
        assert q.has_advanced_syntax is True

    def test_multiple_fields_and_terms(self) -> None:
        q = parse_query("tag:api status:planned authentication")
        assert q.fields == [
            FieldFilter(field="tag", value="api"),
            FieldFilter(field="status", value="planned"),
        ]
        assert q.terms == ["authentication"]

    def test_field_name_lowercased_value_kept(self) -> None:
        q = parse_query("Status:In-Progress")
        assert q.fields == [FieldFilter(field="status", value="In-Progress")]
        assert q.ast == FieldNode(field="status", value="In-Progress")

    def test_value_keeps_extra_colons(self) -> None:
        q = parse_query("title:a:b")
        assert q.fields == [FieldFilter(field="title", value="a:b")]

    def test_unknown_field_still_parsed(self) -> None:
        q = parse_query("color:blue")
        assert q.fields == [FieldFilter(field="color", value="blue")]


class TestDateFilters:
    @pytest.mark.parametrize("op", [">", "<", ">=", "<="])
    def test_comparison(self, op: str) -> None:
        q = parse_query(f"created:{op}2025-11-01")
        assert q.date_filters == [DateFilter(field="created", operator=op, value="2025-11-01")]
        assert q.fields == []

    def test_range(self) -> None:
        q = parse_query("updated:2025-11-01..2025-11-15")
        assert q.date_filters == [
            DateFilter(
                field="updated", operator="range", value="2025-11-01", end_value="2025-11-15"
            )
        ]

    def test_plain_date_is_field_filter(self) -> None:
        q = parse_query("created:2025-11-01")
        assert q.date_filters == []
        assert q.fields == [FieldFilter(field="created", value="2025-11-01")]

    def test_operator_on_non_date_field_is_field_filter(self) -> None:
        q = parse_query("priority:>high")
        assert q.date_filters == []
        assert q.fields == [FieldFilter(field="priority", value=">high")]

    def test_field_node_keeps_raw_value(self) -> None:
        q = parse_query("created:>=2025-11-01")
        assert q.ast == FieldNode(field="created", value=">=2025-11-01")

    def test_parse_date_filter_plain_value(self) -> None:
        assert parse_date_filter("created", "2025-11-01") is None

    def test_parse_date_filter_open_range(self) -> None:
        assert parse_date_filter("created", "..2025-11-15") == DateFilter(
            field="created", operator="range", value="", end_value="2025-11-15"
        )


class TestFuzzy:
    def test_fuzzy_term(self) -> None:
        q = parse_query("authetication~")
        assert q.ast == FuzzyNode("authetication")
        assert q.fuzzy_terms == ["authetication"]
        assert q.terms == []
        assert q.has_advanced_syntax is True

    def test_fuzzy_lowercased(self) -> None:
        assert parse_query("OAuht~").fuzzy_terms == ["oauht"]


# ---------------------------------------------------------------------------
# Malformed input
# ---------------------------------------------------------------------------


class TestFailSoft:
    def test_missing_closing_paren(self) -> None:
        q = parse_query("(api OR auth")
        assert q.ast == OrNode(TermNode("api"), TermNode("auth"))
        assert len(q.errors) == 1
        assert "closing parenthesis" in q.errors[0]

    def test_stray_closing_paren(self) -> None:
        q = parse_query("api)")
        assert q.ast == TermNode("api")
        assert q.errors == ["Unexpected ')' at position 3"]

    def test_stray_paren_between_terms(self) -> None:
        q = parse_query("api ) docs")
        assert q.ast == AndNode(TermNode("api"), TermNode("docs"))
        assert len(q.errors) == 1

    def test_dangling_and(self) -> None:
        q = parse_query("api AND")
        assert q.ast == TermNode("api")
        assert "after AND" in q.errors[0]

    def test_dangling_or(self) -> None:
        q = parse_query("api OR")
        assert q.ast == TermNode("api")
        assert "after OR" in q.errors[0]

    def test_leading_or(self) -> None:
        q = parse_query("OR api")
        assert q.ast == TermNode("api")
        assert q.errors == ["Unexpected 'OR' at position 0"]

    def test_lone_not(self) -> None:
        q = parse_query("NOT")
        assert q.ast is None
        assert q.has_advanced_syntax is True
        assert "after NOT" in q.errors[0]

    def test_lone_closing_paren(self) -> None:
        q = parse_query(")")
        assert q.ast is None
        assert len(q.errors) == 1

    def test_empty_group(self) -> None:
        q = parse_query("api ()")
        assert q.ast == TermNode("api")

    def test_unterminated_phrase(self) -> None:
        q = parse_query('api "token refresh')
        assert q.ast == AndNode(TermNode("api"), PhraseNode("token refresh"))
        assert q.errors == ["Unterminated quote at position 4"]

    def test_closed_phrases_are_not_errors(self) -> None:
        assert parse_query('"a b" OR "c d"').errors == []

    def test_empty_phrase_dropped(self) -> None:
        q = parse_query('api ""')
        assert q.ast == TermNode("api")
        assert q.terms == ["api"]
        assert q.errors == ["Empty phrase at position 4"]

    @pytest.mark.parametrize(
        "query",
        ["(((", ")))", "AND OR NOT", '"', "((a) OR", "NOT (", "a ) ( b", ":", "~"],
    )
    def test_never_raises(self, query: str) -> None:
        q = parse_query(query)
        assert q.original_query == query


class TestDepthLimits:
    def test_nesting_within_limit(self) -> None:
        depth = MAX_NESTING_DEPTH
        q = parse_query("(" * depth + "api" + ")" * depth)
        assert q.ast == TermNode("api")
        assert q.errors == []

    def test_nesting_beyond_limit_is_flattened(self) -> None:
        depth = MAX_NESTING_DEPTH + 8
        q = parse_query("(" * depth + "api" + ")" * depth)
        assert q.ast == TermNode("api")
        assert any("Nesting deeper" in e for e in q.errors)

    def test_huge_unbalanced_nesting(self) -> None:
        q = parse_query("(" * 10000 + "api")
        assert q.ast == TermNode("api")
        assert q.errors

    def test_long_not_chain(self) -> None:
        q = parse_query("NOT " * 5000 + "api")
        node = q.ast
        count = 0
        while isinstance(node, NotNode):
            node = node.child
            count += 1
        assert count == 5000
        assert isinstance(node, TermNode)

    def test_long_implicit_and_chain(self) -> None:
        q = parse_query(" ".join(f"w{i}" for i in range(5000)))
        assert len(q.terms) == 5000
        assert isinstance(q.ast, AndNode)
        assert isinstance(q.ast.right, TermNode)
        assert q.ast.right.value == "w4999"


class TestSyntaxHelp:
    def test_mentions_every_construct(self) -> None:
        text = get_search_syntax_help()
        for snippet in ("AND", "OR", "NOT", '"exact phrase"', "status:", "tag:", "created:>", "~"):
            assert snippet in text

    def test_uppercase_note(self) -> None:
        assert "must be uppercase" in get_search_syntax_help()
