"""Error types with formatted source context."""

from __future__ import annotations

from pathlib import Path


class GrammarError(Exception):
    """Raised when a grammar breaks the lexer contract.

    Invalid or empty-matching patterns, zero-length matches, steps that do
    not advance the cursor and unknown grammar names all end up here. When
    the failure happened at a known offset, ``format()`` shows the source
    line with a caret underneath.
    """

    def __init__(
        self,
        message: str,
        *,
        pattern: str | None = None,
        offset: int | None = None,
        source: str | None = None,
    ) -> None:
        self.message = message
        self.pattern = pattern
        self.offset = offset
        self.source = source
        super().__init__(self.format())

    def format(self, filename: str = "<input>") -> str:
        if self.offset is None or self.source is None:
            result = f"error: {self.message}"
            if self.pattern is not None:
                result += f"\n  pattern: {self.pattern}"
            return result

        from lexlight.tokens import position_at

        position = position_at(self.source, self.offset)
        lines = self.source.splitlines(keepends=True)
        line_idx = position.line - 1
        col = position.column

        if 0 <= line_idx < len(lines):
            source_line = lines[line_idx].rstrip("\n").rstrip("\r")
        else:
            source_line = ""

        pad = " " * (col - 1)
        line_num = str(position.line)
        gutter_width = len(line_num) + 1

        blank_gutter = " " * gutter_width + "|"
        line_gutter = f"{line_num:>{gutter_width - 1}} |"

        result = (
            f"error: {self.message}\n"
            f"{' ' * gutter_width}--> {filename}:{position.line}:{col}\n"
            f"{blank_gutter}\n"
            f"{line_gutter} {source_line}\n"
            f"{blank_gutter} {pad}^"
        )
        if self.pattern is not None:
            result += f"\n  pattern: {self.pattern}"
        return result


class ThemeError(Exception):
    """Raised for unknown theme names and malformed theme data."""

    def __init__(self, message: str, path: Path | None = None) -> None:
        self.message = message
        self.path = path
        super().__init__(self.format())

    def format(self) -> str:
        if self.path is None:
            return f"error: {self.message}"
        return f"error: {self.message}\n  --> {self.path}"


class MarkupError(Exception):
    """Raised for unknown markup target names."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(f"error: {message}")
