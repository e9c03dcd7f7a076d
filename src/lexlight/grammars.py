"""Built-in grammars and the grammar registry."""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable
from pathlib import PurePath

from lexlight.errors import GrammarError
from lexlight.lexer import Grammar, LexerState
from lexlight.tokens import Token, TokenPattern

# ---------------------------------------------------------------------------
# JSON (with a few engine-config extensions: vec3(...), Enum.X.Y, 0b/0x)
# ---------------------------------------------------------------------------

_JSON_PATTERNS = (
    TokenPattern("string", r'"[^"]*"'),
    TokenPattern("constructor", r"([A-Za-z0-9]+)\([^)]*\)"),  # vec3(1, 1, 1), rgb(255, 0, 0)
    TokenPattern("keyword", r"true"),
    TokenPattern("keyword", r"false"),
    TokenPattern("keyword", r"null"),
    TokenPattern("number", r"0b[01]+"),
    TokenPattern("number", r"0x[0-9A-Fa-f]+"),
    TokenPattern("number", r"\d*\.\d+"),  # 1.54, .03
    TokenPattern("number", r"\d+e-?\d+"),  # 1e4, 10e-5
    TokenPattern("number", r"\d+"),
    TokenPattern("parameter", r"\(([^)]+)\)"),
    TokenPattern("assignment", r":"),
    TokenPattern("enum", r"Enum\.[A-Za-z0-9]+\.[A-Za-z0-9]+"),
    TokenPattern("operator", r"[{}()\[\]]+"),
)


class JsonGrammar(Grammar):
    """JSON-like data: object keys become ``string`` + ``index``."""

    name = "json"

    def initialize(self, state: LexerState) -> None:
        state.patterns = list(_JSON_PATTERNS)

    def reclassify(self, tokens: list[Token], state: LexerState) -> None:
        for index, token in enumerate(tokens):
            if token.has_type("assignment"):
                previous = tokens[index - 1] if index > 0 else state.last_token
                if previous is not None and previous.has_type("string"):
                    previous.add_type("index")
            elif token.has_type("keyword") and token.content == "null":
                token.add_type("null")


# ---------------------------------------------------------------------------
# Lua / Luau
# ---------------------------------------------------------------------------

LUA_KEYWORDS = frozenset(
    {
        "and",
        "break",
        "continue",
        "do",
        "else",
        "elseif",
        "end",
        "export",
        "false",
        "for",
        "function",
        "if",
        "in",
        "local",
        "nil",
        "not",
        "or",
        "repeat",
        "return",
        "self",
        "then",
        "true",
        "type",
        "typeof",
        "until",
        "while",
    }
)

_LUA_PATTERNS = (
    TokenPattern("string", r'"[^"]*"'),
    TokenPattern("string", r"'[^']*'"),
    TokenPattern("number", r"\d+e-?\d+"),
    TokenPattern("number", r"0x[0-9A-Fa-f]+"),
    TokenPattern("method", r"([A-Za-z_]\w*)\([^)]*\)?"),
    TokenPattern("var", r"[A-Za-z_]\w*"),
    TokenPattern("number", r"0b[01]+"),
    TokenPattern("number", r"\d*\.\d+"),
    TokenPattern("number", r"\d+"),
    TokenPattern("operator", r"[-+*/^%#()\[\]{}=<>,.:;]+"),
)

_CONSTANT_RE = re.compile(r"[A-Z_]+")


class LuaGrammar(Grammar):
    """Lua/Luau source: reserved words, ALL_CAPS constants, method calls."""

    name = "lua"

    def initialize(self, state: LexerState) -> None:
        state.extras["keywords"] = LUA_KEYWORDS
        state.patterns = list(_LUA_PATTERNS)

    def reclassify(self, tokens: list[Token], state: LexerState) -> None:
        keywords = state.extras["keywords"]
        for token in tokens:
            if token.has_type("var") and _CONSTANT_RE.fullmatch(token.content):
                token.add_type("constant")
            if token.content in keywords:
                token.add_type("keyword")


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

GrammarFactory = Callable[[], Grammar]

_GRAMMARS: dict[str, GrammarFactory] = {}
_ALIASES: dict[str, str] = {}
_EXTENSIONS: dict[str, str] = {}


def register_grammar(
    name: str,
    factory: GrammarFactory,
    aliases: Iterable[str] = (),
    extensions: Iterable[str] = (),
) -> None:
    """Register *factory* under *name*, its aliases and file extensions."""
    key = name.lower()
    _GRAMMARS[key] = factory
    for alias in aliases:
        _ALIASES[alias.lower()] = key
    for ext in extensions:
        _EXTENSIONS[_normalize_ext(ext)] = key


def get_grammar(name: str) -> Grammar:
    """Return a fresh grammar instance for *name* or one of its aliases."""
    key = name.lower()
    key = _ALIASES.get(key, key)
    factory = _GRAMMARS.get(key)
    if factory is None:
        known = ", ".join(available_grammars())
        raise GrammarError(f"unknown grammar '{name}' (available: {known})")
    return factory()


def grammar_name_for_path(path: str | PurePath, extra: dict[str, str] | None = None) -> str | None:
    """Return the grammar name for *path*'s extension, or None if unknown.

    *extra* maps additional extensions to grammar names and wins over the
    built-in table.
    """
    ext = _normalize_ext(PurePath(path).suffix)
    if not ext:
        return None
    if extra:
        for k, v in extra.items():
            if _normalize_ext(k) == ext:
                return v
    return _EXTENSIONS.get(ext)


def grammar_for_path(path: str | PurePath, extra: dict[str, str] | None = None) -> Grammar | None:
    """Return a grammar instance chosen by file extension, or None."""
    name = grammar_name_for_path(path, extra)
    return get_grammar(name) if name is not None else None


def is_registered(name: str) -> bool:
    key = name.lower()
    return _ALIASES.get(key, key) in _GRAMMARS


def available_grammars() -> list[str]:
    return sorted(_GRAMMARS)


def _normalize_ext(ext: str) -> str:
    ext = ext.lower()
    if ext and not ext.startswith("."):
        ext = "." + ext
    return ext


register_grammar("json", JsonGrammar, extensions=(".json",))
register_grammar("lua", LuaGrammar, aliases=("luau",), extensions=(".lua", ".luau"))
