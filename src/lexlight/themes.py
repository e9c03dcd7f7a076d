"""Colors, theme rules, built-in themes and TOML theme files."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from lexlight.errors import ThemeError


@dataclass(frozen=True, slots=True)
class Color:
    """An RGB color with 0-255 channels."""

    r: int
    g: int
    b: int

    def __post_init__(self) -> None:
        for channel in (self.r, self.g, self.b):
            if not 0 <= channel <= 255:
                raise ValueError(f"color channel out of range: {channel}")

    @classmethod
    def from_rgb(cls, r: int, g: int, b: int) -> Color:
        return cls(r, g, b)

    @classmethod
    def from_hex(cls, text: str) -> Color:
        """Parse ``#RRGGBB``, ``#RGB`` or the same without the ``#``."""
        digits = text.strip().removeprefix("#")
        if len(digits) == 3:
            digits = "".join(ch * 2 for ch in digits)
        if len(digits) != 6:
            raise ValueError(f"invalid hex color: {text!r}")
        try:
            value = int(digits, 16)
        except ValueError:
            raise ValueError(f"invalid hex color: {text!r}") from None
        return cls((value >> 16) & 0xFF, (value >> 8) & 0xFF, value & 0xFF)

    def to_hex(self) -> str:
        """Return the color as uppercase ``RRGGBB`` without a leading ``#``."""
        return f"{self.r:02X}{self.g:02X}{self.b:02X}"


@dataclass(frozen=True, slots=True)
class ThemeRule:
    """Style for tokens carrying ``type``."""

    type: str
    color: Color
    italic: bool = False
    bold: bool = False


@dataclass(frozen=True, slots=True)
class Theme:
    """An ordered rule list; the first rule whose type a token carries wins."""

    name: str
    rules: tuple[ThemeRule, ...]

    def rule_for(self, tags: list[str]) -> ThemeRule | None:
        for rule in self.rules:
            if rule.type in tags:
                return rule
        return None


def _rule(type_: str, color: str, *, italic: bool = False, bold: bool = False) -> ThemeRule:
    return ThemeRule(type_, Color.from_hex(color), italic=italic, bold=bold)


# Order matters: "index" before "string", "null"/"constant" before their base tags.
DEFAULT_THEME = Theme(
    "default",
    (
        _rule("index", "#9CDCFE"),
        _rule("null", "#569CD6", italic=True),
        _rule("keyword", "#C586C0", bold=True),
        _rule("string", "#CE9178"),
        _rule("constant", "#4FC1FF"),
        _rule("number", "#B5CEA8"),
        _rule("method", "#DCDCAA"),
        _rule("constructor", "#4EC9B0"),
        _rule("enum", "#4EC9B0", italic=True),
        _rule("parameter", "#9CDCFE", italic=True),
        _rule("var", "#D4D4D4"),
        _rule("operator", "#D4D4D4"),
    ),
)

LIGHT_THEME = Theme(
    "light",
    (
        _rule("index", "#0451A5"),
        _rule("null", "#0000FF", italic=True),
        _rule("keyword", "#AF00DB", bold=True),
        _rule("string", "#A31515"),
        _rule("constant", "#0070C1"),
        _rule("number", "#098658"),
        _rule("method", "#795E26"),
        _rule("constructor", "#267F99"),
        _rule("enum", "#267F99", italic=True),
        _rule("parameter", "#001080", italic=True),
        _rule("var", "#001080"),
        _rule("operator", "#000000"),
    ),
)

THEMES: dict[str, Theme] = {t.name: t for t in (DEFAULT_THEME, LIGHT_THEME)}


def get_theme(name: str) -> Theme:
    """Return the built-in theme called *name*."""
    theme = THEMES.get(name.lower())
    if theme is None:
        known = ", ".join(sorted(THEMES))
        raise ThemeError(f"unknown theme '{name}' (available: {known})")
    return theme


def theme_from_dict(data: dict[str, Any], name: str, path: Path | None = None) -> Theme:
    """Build a Theme from parsed TOML data of the form ``[[rule]] type/color/...``."""
    raw_rules = data.get("rule", [])
    if not isinstance(raw_rules, list):
        raise ThemeError("'rule' must be an array of tables", path)

    rules: list[ThemeRule] = []
    for i, raw in enumerate(raw_rules, 1):
        if not isinstance(raw, dict):
            raise ThemeError(f"rule {i} is not a table", path)
        type_ = raw.get("type")
        if not isinstance(type_, str) or not type_:
            raise ThemeError(f"rule {i} needs a 'type' string", path)
        color = raw.get("color")
        if not isinstance(color, str):
            raise ThemeError(f"rule {i} ({type_}) needs a 'color' string", path)
        try:
            parsed = Color.from_hex(color)
        except ValueError as exc:
            raise ThemeError(f"rule {i} ({type_}): {exc}", path) from None
        italic = raw.get("italic", False)
        bold = raw.get("bold", False)
        if not isinstance(italic, bool) or not isinstance(bold, bool):
            raise ThemeError(f"rule {i} ({type_}): 'italic' and 'bold' must be booleans", path)
        rules.append(ThemeRule(type_, parsed, italic=italic, bold=bold))

    return Theme(str(data.get("name", name)), tuple(rules))


def load_theme(path: Path) -> Theme:
    """Load a theme from a TOML file."""
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except OSError as exc:
        raise ThemeError(f"cannot read theme file: {exc.strerror}", path) from None
    except tomllib.TOMLDecodeError as exc:
        raise ThemeError(f"invalid theme file: {exc}", path) from None
    return theme_from_dict(data, path.stem, path)
