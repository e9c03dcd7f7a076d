"""Minimal LSP server for lexlight — semantic tokens only."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from lsprotocol.types import (
    TEXT_DOCUMENT_SEMANTIC_TOKENS_FULL,
    SemanticTokens,
    SemanticTokensLegend,
    SemanticTokensParams,
    TextDocumentSyncKind,
)
from pygls.lsp.server import LanguageServer

from lexlight.grammars import get_grammar, grammar_for_path, is_registered
from lexlight.lexer import Grammar, tokenize
from lexlight.tokens import Token

logger = logging.getLogger(__name__)

# Checked in order; the first tag a token carries decides its LSP type.
TAG_TO_TOKEN_TYPE: tuple[tuple[str, str], ...] = (
    ("index", "property"),
    ("keyword", "keyword"),
    ("string", "string"),
    ("number", "number"),
    ("method", "function"),
    ("constructor", "class"),
    ("parameter", "parameter"),
    ("enum", "enumMember"),
    ("var", "variable"),
    ("operator", "operator"),
)

TOKEN_TYPES: list[str] = list(dict.fromkeys(lsp_type for _, lsp_type in TAG_TO_TOKEN_TYPE))

TOKEN_MODIFIERS = ["readonly"]
_READONLY = 1 << TOKEN_MODIFIERS.index("readonly")

LEGEND = SemanticTokensLegend(token_types=TOKEN_TYPES, token_modifiers=TOKEN_MODIFIERS)

server = LanguageServer("lexlight-lsp", "0.1.0", text_document_sync_kind=TextDocumentSyncKind.Full)


def _classify(token: Token) -> tuple[int, int] | None:
    for tag, lsp_type in TAG_TO_TOKEN_TYPE:
        if token.has_type(tag):
            modifiers = _READONLY if token.has_type("constant") else 0
            return TOKEN_TYPES.index(lsp_type), modifiers
    return None


def _utf16_len(text: str) -> int:
    return len(text.encode("utf-16-le")) // 2


def encode_semantic_tokens(tokens: Sequence[Token]) -> list[int]:
    """Encode tokens as the LSP relative ``(line, char, length, type, mods)`` stream.

    Positions come from walking token contents, which cover the source with
    no gaps. Tokens spanning several lines are split per line.
    """
    data: list[int] = []
    line = char = 0
    prev_line = prev_char = 0

    for token in tokens:
        kind = _classify(token)
        for n, piece in enumerate(token.content.split("\n")):
            if n > 0:
                line += 1
                char = 0
            length = _utf16_len(piece.rstrip("\r"))
            if kind is not None and length:
                delta_line = line - prev_line
                delta_char = char - prev_char if delta_line == 0 else char
                data.extend((delta_line, delta_char, length, kind[0], kind[1]))
                prev_line, prev_char = line, char
            char += _utf16_len(piece)

    return data


def _grammar_for(language_id: str | None, uri: str) -> Grammar | None:
    if language_id and is_registered(language_id):
        return get_grammar(language_id)
    return grammar_for_path(uri)


def _semantic_tokens(ls: LanguageServer, uri: str) -> SemanticTokens:
    """Tokenize the open document and return its semantic tokens."""
    doc = ls.workspace.get_text_document(uri)
    grammar = _grammar_for(doc.language_id, uri)
    if grammar is None:
        logger.debug("no grammar for %s (language %r)", uri, doc.language_id)
        return SemanticTokens(data=[])
    tokens = tokenize(doc.source, grammar)
    return SemanticTokens(data=encode_semantic_tokens(tokens))


@server.feature(TEXT_DOCUMENT_SEMANTIC_TOKENS_FULL, LEGEND)
def semantic_tokens_full(ls: LanguageServer, params: SemanticTokensParams) -> SemanticTokens:
    return _semantic_tokens(ls, params.text_document.uri)


def main() -> None:
    server.start_io()
