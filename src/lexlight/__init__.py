"""lexlight — pattern-table tokenizer and syntax highlighter."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from lexlight.lexer import Grammar
    from lexlight.render import Markup
    from lexlight.themes import Theme

__version__ = "0.1.0"


def highlight(
    source: str,
    grammar: Grammar | str,
    theme: Theme | None = None,
    markup: Markup | None = None,
) -> str:
    """Tokenize *source* with *grammar* and render it as styled markup."""
    from lexlight.lexer import tokenize
    from lexlight.render import RICH_TEXT, render
    from lexlight.themes import DEFAULT_THEME

    tokens = tokenize(source, grammar)
    return render(tokens, theme or DEFAULT_THEME, markup=markup or RICH_TEXT)
