"""Token, AST and result data classes for parsed search queries."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, Union


class TokenType(str, Enum):
    """Lexical token kinds produced by :func:`spec_search.search.lexer.tokenize`."""

    TERM = "TERM"
    PHRASE = "PHRASE"
    FIELD = "FIELD"
    FUZZY = "FUZZY"
    AND = "AND"
    OR = "OR"
    NOT = "NOT"
    LPAREN = "LPAREN"
    RPAREN = "RPAREN"
    EOF = "EOF"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Token:
    """A lexical token.

    ``position`` is the 0-based offset of the token's first character
    in the original query string.
    """

    type: TokenType
    value: str
    position: int


class NodeType(str, Enum):
    """Discriminant shared by all AST node variants."""

    AND = "AND"
    OR = "OR"
    NOT = "NOT"
    TERM = "TERM"
    PHRASE = "PHRASE"
    FIELD = "FIELD"
    FUZZY = "FUZZY"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class AndNode:
    """Both children must match."""

    type: ClassVar[NodeType] = NodeType.AND
    left: ASTNode
    right: ASTNode


@dataclass(frozen=True)
class OrNode:
    """Either child may match."""

    type: ClassVar[NodeType] = NodeType.OR
    left: ASTNode
    right: ASTNode


@dataclass(frozen=True)
class NotNode:
    """Child must not match."""

    type: ClassVar[NodeType] = NodeType.NOT
    child: ASTNode


@dataclass(frozen=True)
class TermNode:
    """A bare word."""

    type: ClassVar[NodeType] = NodeType.TERM
    value: str


@dataclass(frozen=True)
class PhraseNode:
    """A double-quoted phrase, quotes stripped."""

    type: ClassVar[NodeType] = NodeType.PHRASE
    value: str


@dataclass(frozen=True)
class FieldNode:
    """A ``field:value`` filter.

    ``field`` is lowercased, ``value`` is everything after the first colon
    (including any date operator prefix such as ``>`` or a ``..`` range).
    """

    type: ClassVar[NodeType] = NodeType.FIELD
    field: str
    value: str


@dataclass(frozen=True)
class FuzzyNode:
    """A typo-tolerant ``word~`` term, marker stripped."""

    type: ClassVar[NodeType] = NodeType.FUZZY
    value: str


ASTNode = Union[AndNode, OrNode, NotNode, TermNode, PhraseNode, FieldNode, FuzzyNode]


@dataclass(frozen=True)
class FieldFilter:
    """An exact field filter like ``status:planned`` or ``tag:api``."""

    field: str
    value: str
    exact: bool = True


@dataclass(frozen=True)
class DateFilter:
    """A date filter on ``created`` or ``updated``.

    Operators:
        - ``>``, ``<``, ``>=``, ``<=``: comparison against ``value``
        - ``range``: inclusive range, ``value`` to ``end_value``
    """

    field: str
    operator: str
    value: str
    end_value: str | None = None


@dataclass(frozen=True)
class ParsedQuery:
    """Result of :func:`spec_search.search.parser.parse_query`.

    ``terms`` holds every plain term and phrase (lowercased, in order of
    appearance) regardless of the boolean structure; it drives scoring
    and highlighting. ``ast`` is ``None`` only for an empty query.
    ``errors`` lists fail-soft diagnostics; parsing never raises.
    """

    terms: list[str] = field(default_factory=list)
    fields: list[FieldFilter] = field(default_factory=list)
    date_filters: list[DateFilter] = field(default_factory=list)
    fuzzy_terms: list[str] = field(default_factory=list)
    ast: ASTNode | None = None
    has_advanced_syntax: bool = False
    original_query: str = ""
    errors: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class SearchMatch:
    """A match of the query in one field of a spec.

    ``highlights`` are half-open ``(start, end)`` ranges into ``text``,
    sorted and merged. ``line_number`` is set for content matches only.
    """

    field: str
    text: str
    score: float = 0.0
    highlights: list[tuple[int, int]] = field(default_factory=list)
    occurrences: int = 0
    line_number: int | None = None
