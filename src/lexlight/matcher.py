"""Pattern matcher — one priority-ordered matching step over the source.

A step tries every rule in declaration order and takes the first one that
matches *anywhere* at or after the cursor, even if a later rule would have
matched earlier in the text. Grammars rely on this: priority beats position.

Text between the cursor and the winning match ("skipped" text) is tokenized
on its own, from local offset 0 with the same rules, and its tokens come
before the winning token.
"""

from __future__ import annotations

from collections.abc import Sequence

from lexlight.errors import GrammarError
from lexlight.tokens import FALLBACK, WHITESPACE, Token, TokenPattern


def match_step(
    source: str, cursor: int, patterns: Sequence[TokenPattern]
) -> tuple[list[Token], int]:
    """Run one matching step and return ``(tokens, new_cursor)``.

    The result holds the tokens for any skipped text followed by the token
    of the winning match. Callers loop until the cursor reaches the end.
    """
    if cursor >= len(source):
        return [], cursor

    rules = [*patterns, WHITESPACE, FALLBACK]
    rule, start, end = _first_match(source, cursor, rules)
    token = Token(source[start:end], [rule.type])
    if start == cursor:
        return [token], end

    tokens = _tokenize_skipped(source[cursor:start], rules)
    tokens.append(token)
    return tokens, end


def _first_match(
    source: str, cursor: int, rules: Sequence[TokenPattern]
) -> tuple[TokenPattern, int, int]:
    for rule in rules:
        span = rule.find(source, cursor)
        if span is None:
            continue
        start, end = span
        if end <= start:
            raise GrammarError(
                f"rule {rule.type!r} produced an empty match",
                pattern=rule.pattern,
                offset=start,
                source=source,
            )
        return rule, start, end

    # FALLBACK matches any character, so this only happens at end of input.
    raise GrammarError("no rule matched", offset=cursor, source=source)


def _tokenize_skipped(text: str, rules: Sequence[TokenPattern]) -> list[Token]:
    """Tokenize *text* completely, in order, without recursion.

    The stack holds pending work: either a ``(text, pos)`` segment still to
    be tokenized or a finished Token waiting for its skipped prefix.
    """
    tokens: list[Token] = []
    stack: list[tuple[str, int] | Token] = [(text, 0)]

    while stack:
        item = stack.pop()
        if isinstance(item, Token):
            tokens.append(item)
            continue

        segment, pos = item
        if pos >= len(segment):
            continue

        rule, start, end = _first_match(segment, pos, rules)
        # Pushed in reverse: skipped prefix, then the match, then the rest.
        stack.append((segment, end))
        stack.append(Token(segment[start:end], [rule.type]))
        if start > pos:
            stack.append((segment[pos:start], 0))

    return tokens
