"""Test the tokenize driver and the grammar protocol."""

from __future__ import annotations

import logging

import pytest

from lexlight.errors import GrammarError
from lexlight.grammars import LuaGrammar
from lexlight.lexer import Grammar, LexerState, tokenize
from lexlight.tokens import Token, TokenPattern

from tests.conftest import assert_contents, assert_types


class RecordingGrammar(Grammar):
    """Numbers only; records every call it receives."""

    name = "recording"

    def __init__(self) -> None:
        self.init_calls = 0
        self.chars: list[str] = []

    def initialize(self, state: LexerState) -> None:
        self.init_calls += 1
        state.patterns = [TokenPattern("number", r"\d+")]

    def step(self, state: LexerState) -> list[Token] | None:
        self.chars.append(state.current_char)
        return super().step(state)


class StuckGrammar(Grammar):
    name = "stuck"

    def initialize(self, state: LexerState) -> None:
        pass

    def step(self, state: LexerState) -> list[Token] | None:
        return None


class SilentGrammar(Grammar):
    """Advances the cursor without emitting anything."""

    name = "silent"

    def initialize(self, state: LexerState) -> None:
        pass

    def step(self, state: LexerState) -> list[Token] | None:
        state.cursor = len(state.source)
        return None


class TestTokenize:
    def test_empty_source(self):
        assert tokenize("", LuaGrammar()) == []

    def test_initialize_called_once(self):
        grammar = RecordingGrammar()
        tokenize("1 2 3", grammar)
        assert grammar.init_calls == 1

    def test_step_sees_current_char(self):
        grammar = RecordingGrammar()
        tokenize("1 2", grammar)
        assert grammar.chars == ["1", " "]

    def test_raw_tokens_cover_source(self):
        source = 'local t = {a = "x", [1] = 0x1F}\nprint(t.a)  -- done\n'
        tokens = tokenize(source, "lua", combine=False)
        assert "".join(t.content for t in tokens) == source

    def test_combined_tokens_cover_source(self):
        source = "x=1;\n\n  y = x * 2.5"
        tokens = tokenize(source, "lua")
        assert "".join(t.content for t in tokens) == source

    def test_grammar_by_name(self):
        tokens = tokenize("nil", "lua")
        assert_contents(tokens, ["nil"])
        assert_types(tokens, [["var", "keyword"]])

    def test_unknown_grammar_name(self):
        with pytest.raises(GrammarError):
            tokenize("x", "cobol")

    def test_step_may_return_nothing(self):
        tokens = tokenize("ab", SilentGrammar())
        assert tokens == []

    def test_combine_merges_fallback_run(self):
        grammar = RecordingGrammar()
        raw = tokenize("ab 7", grammar, combine=False)
        assert_contents(raw, ["a", "b", " ", "7"])
        combined = tokenize("ab 7", RecordingGrammar())
        assert_contents(combined, ["ab", " ", "7"])
        assert_types(combined, [["ind"], ["whitespace"], ["number"]])

    def test_non_advancing_step_raises(self):
        with pytest.raises(GrammarError) as exc_info:
            tokenize("abc", StuckGrammar())
        assert "did not advance" in exc_info.value.message
        assert exc_info.value.offset == 0

    def test_debug_log(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="lexlight.lexer"):
            tokenize("1 2", RecordingGrammar())
        assert "recording" in caplog.text


class TestLexerState:
    def test_current_char_at_end(self):
        state = LexerState("ab", cursor=2)
        assert state.current_char == ""

    def test_last_token(self):
        state = LexerState("ab")
        assert state.last_token is None
        state.tokens.append(Token("a", ["ind"]))
        assert state.last_token is state.tokens[-1]


class TestReclassify:
    def test_lookback_into_earlier_batches(self):
        class PairGrammar(Grammar):
            name = "pair"

            def initialize(self, state: LexerState) -> None:
                state.patterns = [TokenPattern("word", r"[a-z]+"), TokenPattern("bang", r"!")]

            def reclassify(self, tokens: list[Token], state: LexerState) -> None:
                for index, token in enumerate(tokens):
                    if token.has_type("bang"):
                        previous = tokens[index - 1] if index > 0 else state.last_token
                        if previous is not None:
                            previous.add_type("loud")

        tokens = tokenize("hey!", PairGrammar(), combine=False)
        assert_contents(tokens, ["hey", "!"])
        assert_types(tokens, [["word", "loud"], ["bang"]])
