"""Shared test fixtures and helpers."""

from __future__ import annotations

import pytest

from lexlight.lexer import tokenize
from lexlight.tokens import Token


@pytest.fixture
def lex():
    """Return a helper that tokenizes source with a grammar (combined by default)."""

    def _lex(source: str, grammar: str = "lua", combine: bool = True) -> list[Token]:
        return tokenize(source, grammar, combine=combine)

    return _lex


def significant(tokens: list[Token]) -> list[Token]:
    """Drop whitespace tokens."""
    return [t for t in tokens if not t.has_type("whitespace")]


def assert_contents(tokens: list[Token], expected: list[str]) -> None:
    """Assert that the token contents match the expected list."""
    actual = [t.content for t in tokens]
    assert actual == expected, f"Expected {expected}, got {actual}"


def assert_types(tokens: list[Token], expected: list[list[str]]) -> None:
    """Assert that each token's tag list matches the expected list."""
    actual = [t.types for t in tokens]
    assert actual == expected, f"Expected {expected}, got {actual}"
