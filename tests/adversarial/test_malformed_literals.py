"""Adversarial tests: malformed literal syntax must fail as a located SigilError.

Whatever the input, resolution either produces a value or raises a
``SigilError`` subclass carrying a source position.  No other exception
type may escape the dispatcher.
"""

from __future__ import annotations

import random

import pytest

from sigilforge.core.errors import (
    InvalidEscape,
    MalformedDelimiter,
    SigilError,
    UnbalancedBracket,
    UnterminatedLiteral,
)

ALPHABET = list("~sSwWcCrRqDU()[]{}<>/|\"'\\#x0123aci \n") + ['"""', "'''", "\\x{", "#{"]


class TestFuzzedInput:
    @pytest.mark.parametrize("seed", range(40))
    def test_random_input_never_escapes_as_other_exception(self, evaluate, seed):
        rng = random.Random(seed)
        for _ in range(50):
            source = "~" + "".join(rng.choice(ALPHABET) for _ in range(rng.randint(0, 16)))
            try:
                evaluate(source)
            except SigilError as exc:
                assert exc.position is not None, source

    @pytest.mark.parametrize("seed", range(10))
    def test_random_text_scan_never_escapes(self, dispatcher, seed):
        rng = random.Random(1000 + seed)
        text = "".join(rng.choice(ALPHABET) for _ in range(200))
        try:
            dispatcher.expand_all(text)
        except SigilError as exc:
            assert exc.position is not None


class TestPathologicalBodies:
    def test_deep_nesting_is_iterative(self, evaluate):
        depth = 50_000
        body = "(" * depth + ")" * depth
        assert evaluate(f"~s({body})") == body

    def test_deep_unbalanced_nesting(self, evaluate):
        with pytest.raises(UnbalancedBracket, match="5000 unclosed"):
            evaluate("~s(" + "(" * 5000)

    def test_large_body(self, evaluate):
        body = "word " * 20_000
        assert len(evaluate(f"~w[{body}]")) == 20_000

    def test_closing_delimiter_escaped_at_end(self, evaluate):
        with pytest.raises(UnterminatedLiteral):
            evaluate("~s(abc\\)")

    def test_lone_backslash_before_close_in_uppercase(self, evaluate):
        with pytest.raises(UnterminatedLiteral):
            evaluate("~S/\\/")

    def test_escape_cut_by_delimiter(self, evaluate):
        with pytest.raises(InvalidEscape):
            evaluate(r"~s(\x)")

    def test_triple_quote_inside_inline_literal(self, evaluate):
        assert evaluate('~s("""inline""")') == '"""inline"""'

    def test_unicode_tag_is_rejected(self, evaluate):
        with pytest.raises(MalformedDelimiter):
            evaluate("~é(x)")

    def test_unicode_modifier_ends_modifiers(self, evaluate):
        with pytest.raises(MalformedDelimiter, match="unexpected text"):
            evaluate("~s(x)é")
