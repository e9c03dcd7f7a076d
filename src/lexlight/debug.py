"""--debug token dump to stderr."""

from __future__ import annotations

import sys
from collections.abc import Sequence
from typing import TextIO

from lexlight.tokens import Token


def dump_tokens(tokens: Sequence[Token], *, file: TextIO = sys.stderr) -> None:
    """Print one line per token: index, tags and content."""
    width = len(str(len(tokens)))
    for i, token in enumerate(tokens):
        tags = "+".join(token.types)
        file.write(f"{i:>{width}} {tags:<20} {token.content!r}\n")
