"""Lexer driver — runs a grammar over the source and combines the result."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from lexlight.errors import GrammarError
from lexlight.matcher import match_step
from lexlight.tokens import Token, TokenPattern, same_type_set

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class LexerState:
    """Per-call lexer state, owned by a single ``tokenize`` invocation."""

    source: str
    cursor: int = 0
    tokens: list[Token] = field(default_factory=list)
    patterns: list[TokenPattern] = field(default_factory=list)
    extras: dict[str, Any] = field(default_factory=dict)

    @property
    def current_char(self) -> str:
        if self.cursor < len(self.source):
            return self.source[self.cursor]
        return ""

    @property
    def last_token(self) -> Token | None:
        return self.tokens[-1] if self.tokens else None


class Grammar(ABC):
    """A pluggable pattern table plus reclassification rules for one language.

    Subclasses fill in ``initialize``; most only need ``reclassify`` on top.
    """

    name: str = "grammar"

    @abstractmethod
    def initialize(self, state: LexerState) -> None:
        """Populate ``state.patterns`` and any lookup tables in ``state.extras``."""

    def step(self, state: LexerState) -> list[Token] | None:
        """Match the next batch of tokens and advance ``state.cursor``."""
        tokens, state.cursor = match_step(state.source, state.cursor, state.patterns)
        self.reclassify(tokens, state)
        return tokens

    def reclassify(self, tokens: list[Token], state: LexerState) -> None:
        """Add tags to the tokens of one batch before they are accumulated.

        ``state.tokens`` still holds only earlier batches, so lookback past
        the start of *tokens* goes there.
        """


def _resolve(grammar: Grammar | str) -> Grammar:
    if isinstance(grammar, Grammar):
        return grammar
    from lexlight.grammars import get_grammar

    return get_grammar(grammar)


def tokenize(source: str, grammar: Grammar | str, *, combine: bool = True) -> list[Token]:
    """Tokenize *source* with *grammar* (an instance or a registered name).

    Raw tokens cover the source exactly. With *combine* (the default) runs
    of tokens with equal tag sets are merged by ``combine_tokens``.
    """
    grammar = _resolve(grammar)
    state = LexerState(source)
    grammar.initialize(state)

    size = len(source)
    while state.cursor < size:
        before = state.cursor
        batch = grammar.step(state)
        if state.cursor <= before:
            raise GrammarError(
                f"grammar {grammar.name!r} did not advance the cursor",
                offset=before,
                source=source,
            )
        if batch:
            state.tokens.extend(batch)

    logger.debug("%s: %d raw tokens from %d chars", grammar.name, len(state.tokens), size)
    if not combine:
        return state.tokens
    return combine_tokens(state.tokens)


def combine_tokens(tokens: Sequence[Token]) -> list[Token]:
    """Merge each run of adjacent tokens with equal tag sets into one token."""
    combined: list[Token] = []
    i = 0
    while i < len(tokens):
        base = tokens[i]
        parts = [base.content]
        i += 1
        while i < len(tokens) and same_type_set(base, tokens[i]):
            parts.append(tokens[i].content)
            i += 1
        combined.append(Token("".join(parts), list(base.types)))
    return combined
