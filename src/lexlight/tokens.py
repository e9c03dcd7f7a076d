"""Token and pattern data structures, plus source position helpers."""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from lexlight.errors import GrammarError


@dataclass(slots=True)
class Token:
    """A classified run of source text.

    ``content`` never changes after creation. ``types`` is an ordered tag list
    without duplicates; grammars may append tags but never remove them.
    """

    content: str
    types: list[str]

    def __post_init__(self) -> None:
        tags: list[str] = []
        for tag in self.types:
            if tag not in tags:
                tags.append(tag)
        if not tags:
            raise ValueError(f"token {self.content!r} needs at least one type")
        self.types = tags

    def has_type(self, tag: str) -> bool:
        """Return True if the token carries *tag*."""
        return tag in self.types

    def add_type(self, tag: str) -> None:
        """Append *tag* unless the token already carries it."""
        if tag not in self.types:
            self.types.append(tag)


def same_type_set(a: Token, b: Token) -> bool:
    """Return True if both tokens carry exactly the same tags, in any order.

    Content is ignored. Only the combiner uses this comparison.
    """
    return set(a.types) == set(b.types)


@dataclass(frozen=True, slots=True)
class TokenPattern:
    r"""A ``(type, pattern)`` rule compiled to a regular expression.

    Non-anchored patterns are searched forward from the cursor; anchored ones
    must match exactly at the cursor. When the expression has capture groups,
    the emitted token covers group 1 only. Patterns compile with ``re.ASCII``,
    so ``\d``, ``\s`` and ``\w`` match ASCII characters only.
    """

    type: str
    pattern: str
    anchored: bool = False
    regex: re.Pattern[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        try:
            regex = re.compile(self.pattern, re.ASCII)
        except re.error as exc:
            raise GrammarError(
                f"invalid pattern for {self.type!r}: {exc}", pattern=self.pattern
            ) from exc
        if regex.fullmatch("") is not None:
            raise GrammarError(
                f"pattern for {self.type!r} matches the empty string", pattern=self.pattern
            )
        object.__setattr__(self, "regex", regex)

    def find(self, source: str, cursor: int) -> tuple[int, int] | None:
        """Return the ``(start, end)`` span this rule selects, or None.

        Matching runs on the text from *cursor* onwards, so ``^`` anchors at
        the cursor rather than at the start of *source*.
        """
        text = source[cursor:] if cursor else source
        if self.anchored:
            m = self.regex.match(text)
        else:
            m = self.regex.search(text)
        if m is None:
            return None
        if self.regex.groups:
            start, end = m.span(1)
            if start < 0:
                # Optional group did not take part in the match
                return None
        else:
            start, end = m.span()
        return start + cursor, end + cursor


# Always tried after the grammar's own rules, in this order.
WHITESPACE = TokenPattern("whitespace", r"\s+", anchored=True)
FALLBACK = TokenPattern("ind", r"(?s:.)", anchored=True)


@dataclass(frozen=True, slots=True)
class Position:
    """Source position, 1-based line and column, 0-based offset."""

    line: int
    column: int
    offset: int


def position_at(source: str, offset: int) -> Position:
    """Return the Position of *offset* within *source*."""
    offset = max(0, min(offset, len(source)))
    line = source.count("\n", 0, offset) + 1
    line_start = source.rfind("\n", 0, offset) + 1
    return Position(line, offset - line_start + 1, offset)
