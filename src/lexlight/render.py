"""Markup renderer — turns tokens into colorized rich text."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass

from lexlight.errors import MarkupError
from lexlight.themes import DEFAULT_THEME, Color, Theme
from lexlight.tokens import Token

# ---------------------------------------------------------------------------
# Escaping
# ---------------------------------------------------------------------------

_ENTITIES = {
    "<": "&lt;",
    ">": "&gt;",
    "&": "&amp;",
    '"': "&quot;",
    "'": "&apos;",
}


def escape_markup(text: str) -> str:
    """Replace the five markup-unsafe characters with entities."""
    return "".join(_ENTITIES.get(ch, ch) for ch in text)


# ---------------------------------------------------------------------------
# Markup targets
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Markup:
    """Tag vocabulary for one display surface."""

    name: str
    color: Callable[[Color, str], str]
    italic: Callable[[str], str]
    bold: Callable[[str], str]


RICH_TEXT = Markup(
    "rich-text",
    color=lambda c, s: f'<font color="#{c.to_hex()}">{s}</font>',
    italic=lambda s: f"<i>{s}</i>",
    bold=lambda s: f"<b>{s}</b>",
)

HTML = Markup(
    "html",
    color=lambda c, s: f'<span style="color: #{c.to_hex()}">{s}</span>',
    italic=lambda s: f"<i>{s}</i>",
    bold=lambda s: f"<b>{s}</b>",
)

MARKUPS: dict[str, Markup] = {m.name: m for m in (RICH_TEXT, HTML)}


def get_markup(name: str) -> Markup:
    try:
        return MARKUPS[name.lower()]
    except KeyError:
        known = ", ".join(sorted(MARKUPS))
        raise MarkupError(f"unknown markup '{name}' (available: {known})") from None


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


def string_tokens(
    tokens: Iterable[Token], callback: Callable[[Token], str | None] | None = None
) -> str:
    """Join token contents, substituting *callback*'s result when it gives one."""
    parts: list[str] = []
    for token in tokens:
        text = token.content
        if callback is not None:
            replaced = callback(token)
            if replaced is not None:
                text = replaced
        parts.append(text)
    return "".join(parts)


def render(
    tokens: Iterable[Token],
    theme: Theme = DEFAULT_THEME,
    *,
    markup: Markup = RICH_TEXT,
    escape: Callable[[str], str] = escape_markup,
) -> str:
    """Render tokens as markup styled by the first matching theme rule.

    Content is escaped before wrapping. Color is the innermost wrapper, then
    italic, then bold. Unstyled tokens are emitted as escaped content only.
    """

    def style(token: Token) -> str:
        text = escape(token.content)
        rule = theme.rule_for(token.types)
        if rule is None:
            return text
        text = markup.color(rule.color, text)
        if rule.italic:
            text = markup.italic(text)
        if rule.bold:
            text = markup.bold(text)
        return text

    return string_tokens(tokens, style)
