"""Recursive-descent parser for the spec search query language.

Grammar, lowest to highest precedence::

    expr    := or_expr
    or_expr := and_expr ( "OR" and_expr )*
    and_expr:= not_expr ( ["AND"] not_expr )*      # juxtaposition = AND
    not_expr:= "NOT" not_expr | atom
    atom    := "(" expr ")" | TERM | PHRASE | FIELD | FUZZY

Malformed input never raises: unbalanced parentheses, dangling operators
and stray tokens are dropped and reported in ``ParsedQuery.errors``.
"""

from __future__ import annotations

from spec_search.search.ast_nodes import (
    AndNode,
    ASTNode,
    DateFilter,
    FieldFilter,
    FieldNode,
    FuzzyNode,
    NotNode,
    OrNode,
    ParsedQuery,
    PhraseNode,
    TermNode,
    Token,
    TokenType,
)
from spec_search.search.lexer import QUOTE, tokenize

# Fields the search engine knows how to filter on
SUPPORTED_FIELDS: tuple[str, ...] = (
    "status",
    "tag",
    "tags",
    "priority",
    "assignee",
    "title",
    "name",
    "description",
    "created",
    "updated",
)

# Fields whose values may carry a comparison operator or a range
DATE_FIELDS: frozenset[str] = frozenset({"created", "updated"})

# Checked longest first so ">=" is not read as ">"
_DATE_OPERATORS: tuple[str, ...] = (">=", "<=", ">", "<")

RANGE_SEPARATOR = ".."

MAX_NESTING_DEPTH = 32

# Token types that mark a query as using more than bare words
_ADVANCED_TOKENS: frozenset[TokenType] = frozenset(
    {
        TokenType.PHRASE,
        TokenType.FIELD,
        TokenType.FUZZY,
        TokenType.AND,
        TokenType.OR,
        TokenType.NOT,
        TokenType.LPAREN,
    }
)

# Token types that can begin an operand (used for implicit AND)
_OPERAND_START: frozenset[TokenType] = frozenset(
    {
        TokenType.TERM,
        TokenType.PHRASE,
        TokenType.FIELD,
        TokenType.FUZZY,
        TokenType.LPAREN,
        TokenType.NOT,
    }
)


def parse_date_filter(field: str, value: str) -> DateFilter | None:
    """Interpret a date field value as a comparison or range, if it is one."""
    if RANGE_SEPARATOR in value:
        start, _, end = value.partition(RANGE_SEPARATOR)
        return DateFilter(field=field, operator="range", value=start, end_value=end)
    for op in _DATE_OPERATORS:
        if value.startswith(op):
            return DateFilter(field=field, operator=op, value=value[len(op) :])
    return None


class QueryParser:
    """Builds an AST from a token list, collecting side channels as it goes.

    A parser instance is single-use: call :meth:`parse` once.
    """

    def __init__(self, tokens: list[Token]) -> None:
        self.tokens = tokens
        self.current = 0
        self.depth = 0
        self.terms: list[str] = []
        self.fields: list[FieldFilter] = []
        self.date_filters: list[DateFilter] = []
        self.fuzzy_terms: list[str] = []
        self.errors: list[str] = []

    def parse(self) -> ASTNode | None:
        """Parse the whole token stream.

        Tokens that cannot start or continue an expression (a stray ``)``,
        a leading ``OR``) are skipped; the expressions on either side of
        them are joined with an implicit AND.
        """
        root: ASTNode | None = None
        while not self._at_end():
            before = self.current
            node = self._parse_or()
            if node is not None:
                root = node if root is None else AndNode(root, node)
            elif self.current == before:
                token = self._advance()
                self.errors.append(f"Unexpected '{token.value}' at position {token.position}")
        return root

    def _parse_or(self) -> ASTNode | None:
        left = self._parse_and()
        if left is None:
            return None

        while self._check(TokenType.OR):
            op = self._advance()
            right = self._parse_and()
            if right is None:
                self.errors.append(f"Expected term after OR at position {op.position}")
                break
            left = OrNode(left, right)

        return left

    def _parse_and(self) -> ASTNode | None:
        left = self._parse_not()
        if left is None:
            return None

        while self._check(TokenType.AND) or self._peek().type in _OPERAND_START:
            op = self._peek()
            if op.type == TokenType.AND:
                self._advance()
            right = self._parse_not()
            if right is None:
                if op.type == TokenType.AND:
                    self.errors.append(f"Expected term after AND at position {op.position}")
                break
            left = AndNode(left, right)

        return left

    def _parse_not(self) -> ASTNode | None:
        # NOT chains are folded iteratively to keep recursion bounded
        negations: list[Token] = []
        while self._check(TokenType.NOT):
            negations.append(self._advance())

        node = self._parse_atom()
        if node is None:
            if negations:
                self.errors.append(
                    f"Expected term after NOT at position {negations[-1].position}"
                )
            return None

        for _ in negations:
            node = NotNode(node)
        return node

    def _parse_atom(self) -> ASTNode | None:
        token = self._peek()

        if token.type == TokenType.LPAREN:
            return self._parse_group()

        if token.type == TokenType.TERM:
            self._advance()
            self.terms.append(token.value.lower())
            return TermNode(token.value)

        if token.type == TokenType.PHRASE:
            self._advance()
            if not token.value.strip():
                self.errors.append(f"Empty phrase at position {token.position}")
                return None
            self.terms.append(token.value.lower())
            return PhraseNode(token.value)

        if token.type == TokenType.FIELD:
            self._advance()
            return self._field_node(token)

        if token.type == TokenType.FUZZY:
            self._advance()
            self.fuzzy_terms.append(token.value.lower())
            return FuzzyNode(token.value)

        return None

    def _parse_group(self) -> ASTNode | None:
        lparen = self._advance()

        if self.depth >= MAX_NESTING_DEPTH:
            # Too deep: treat the "(" run as absent and parse the next operand flat
            self.errors.append(
                f"Nesting deeper than {MAX_NESTING_DEPTH} at position {lparen.position}"
            )
            while self._check(TokenType.LPAREN):
                self._advance()
            return self._parse_atom()

        self.depth += 1
        try:
            expr = self._parse_or()
        finally:
            self.depth -= 1

        if self._check(TokenType.RPAREN):
            self._advance()
        else:
            self.errors.append(
                f"Expected closing parenthesis for '(' at position {lparen.position}"
            )
        return expr

    def _field_node(self, token: Token) -> FieldNode:
        name, _, value = token.value.partition(":")
        name = name.lower()

        date_filter = parse_date_filter(name, value) if name in DATE_FIELDS else None
        if date_filter is not None:
            self.date_filters.append(date_filter)
        else:
            self.fields.append(FieldFilter(field=name, value=value, exact=True))

        return FieldNode(field=name, value=value)

    def _peek(self) -> Token:
        return self.tokens[self.current]

    def _check(self, token_type: TokenType) -> bool:
        return self._peek().type == token_type

    def _advance(self) -> Token:
        token = self.tokens[self.current]
        if token.type != TokenType.EOF:
            self.current += 1
        return token

    def _at_end(self) -> bool:
        return self._check(TokenType.EOF)


def _has_advanced_syntax(tokens: list[Token]) -> bool:
    return any(token.type in _ADVANCED_TOKENS for token in tokens)


def parse_query(query: str) -> ParsedQuery:
    """Parse a search query string into a structured query.

    Args:
        query: The search query to parse.

    Returns:
        A ParsedQuery with the expression tree and flattened terms,
        field filters, date filters and fuzzy terms. Empty or
        whitespace-only input yields an inert query with ``ast=None``.
    """
    if not query.strip():
        return ParsedQuery(original_query=query)

    tokens = tokenize(query)
    parser = QueryParser(tokens)
    ast = parser.parse()

    # Phrases cannot contain quotes, so an odd count means the last one is open
    if query.count(QUOTE) % 2:
        parser.errors.append(f"Unterminated quote at position {query.rfind(QUOTE)}")

    return ParsedQuery(
        terms=parser.terms,
        fields=parser.fields,
        date_filters=parser.date_filters,
        fuzzy_terms=parser.fuzzy_terms,
        ast=ast,
        has_advanced_syntax=_has_advanced_syntax(tokens),
        original_query=query,
        errors=parser.errors,
    )


def get_search_syntax_help() -> str:
    """Return human-readable documentation of the query syntax."""
    return """\
Search Syntax:
  term              Simple term search
  "exact phrase"    Match exact phrase
  term1 AND term2   Both terms must match (AND is optional)
  term1 OR term2    Either term matches
  NOT term          Exclude specs with term
  (a OR b) AND c    Group with parentheses

  Keywords AND, OR and NOT must be uppercase.

Field Filters:
  status:in-progress    Filter by status (planned, in-progress, complete, archived)
  tag:api               Filter by tag
  priority:high         Filter by priority (low, medium, high, critical)
  assignee:marvin       Filter by assignee
  title:dashboard       Search in title only
  name:oauth            Search in spec name

Date Filters:
  created:>2025-11-01             Created after date
  created:<2025-11-15             Created before date
  created:2025-11-01..2025-11-15  Created in date range
  updated:>=2025-11-01            Updated on or after date

Fuzzy Matching:
  authetication~     Matches "authentication" (typo-tolerant)

Examples:
  api authentication                 Find specs with both terms
  tag:api status:planned             API specs that are planned
  "user session" OR "token refresh"  Either phrase
  dashboard NOT deprecated           Dashboard specs, exclude deprecated
  authetication~                     Find despite typo"""
