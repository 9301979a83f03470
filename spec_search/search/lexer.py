"""Tokenizer for the spec search query language."""

from __future__ import annotations

import re

from spec_search.search.ast_nodes import Token, TokenType

# Boolean keywords are matched case-sensitively: only the uppercase forms
# are operators, "and"/"or"/"not" stay plain terms.
_KEYWORDS: dict[str, TokenType] = {
    "AND": TokenType.AND,
    "OR": TokenType.OR,
    "NOT": TokenType.NOT,
}

# field:value with a non-empty value, e.g. status:planned or created:>2025-11-01
_FIELD_RE = re.compile(r"^[A-Za-z][\w-]*:.+$")

FUZZY_MARKER = "~"
QUOTE = '"'

# Characters that end a bare word
_WORD_BREAK = frozenset('()"')


def _classify_word(word: str) -> tuple[TokenType, str]:
    """Return the token type and value for a bare word."""
    keyword = _KEYWORDS.get(word)
    if keyword is not None:
        return keyword, word
    if _FIELD_RE.match(word):
        return TokenType.FIELD, word
    if len(word) > 1 and word.endswith(FUZZY_MARKER):
        return TokenType.FUZZY, word[: -len(FUZZY_MARKER)]
    return TokenType.TERM, word


def tokenize(query: str) -> list[Token]:
    """Split a query string into tokens.

    The returned list always ends with a single ``EOF`` token positioned
    at ``len(query)``. An unterminated quote produces a phrase running to
    the end of the input.

    Args:
        query: Raw query string.

    Returns:
        List of tokens in source order.
    """
    tokens: list[Token] = []
    length = len(query)
    pos = 0

    while pos < length:
        char = query[pos]

        if char.isspace():
            pos += 1
            continue

        if char == QUOTE:
            start = pos
            end = query.find(QUOTE, pos + 1)
            if end == -1:
                tokens.append(Token(TokenType.PHRASE, query[pos + 1 :], start))
                pos = length
            else:
                tokens.append(Token(TokenType.PHRASE, query[pos + 1 : end], start))
                pos = end + 1
            continue

        if char == "(":
            tokens.append(Token(TokenType.LPAREN, char, pos))
            pos += 1
            continue

        if char == ")":
            tokens.append(Token(TokenType.RPAREN, char, pos))
            pos += 1
            continue

        start = pos
        while pos < length and not query[pos].isspace() and query[pos] not in _WORD_BREAK:
            pos += 1
        token_type, value = _classify_word(query[start:pos])
        tokens.append(Token(token_type, value, start))

    tokens.append(Token(TokenType.EOF, "", length))
    return tokens
