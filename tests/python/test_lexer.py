"""Tests for the lazy S-expression tokenizer."""

from __future__ import annotations

import types

import pytest

from packages.lang import lexer
from packages.lang.errors import LexError


def _kinds_and_values(source: str) -> list[tuple[str, object]]:
    return [(token.kind, token.value) for token in lexer.tokenize(source)]


def test_simple_application_tokens() -> None:
    assert _kinds_and_values("(+ 1 2)") == [
        (lexer.LPAREN, None),
        (lexer.IDENT, "+"),
        (lexer.NUMBER, 1),
        (lexer.NUMBER, 2),
        (lexer.RPAREN, None),
    ]


def test_comments_and_whitespace_are_elided() -> None:
    plain = _kinds_and_values("(+ 1 2)")
    assert _kinds_and_values("(+ 1 2) ; comment\n") == plain
    assert _kinds_and_values("  (+\n\t1   2) ;trailing without newline") == plain


def test_tokenize_is_lazy_and_restartable() -> None:
    stream = lexer.tokenize("[a b]")
    assert isinstance(stream, types.GeneratorType)
    first = next(stream)
    assert first.kind == lexer.LBRACKET
    again = list(lexer.tokenize("[a b]"))
    assert [token.kind for token in again] == [
        lexer.LBRACKET,
        lexer.IDENT,
        lexer.IDENT,
        lexer.RBRACKET,
    ]


def test_string_payload_has_no_escape_processing() -> None:
    tokens = list(lexer.tokenize(r'"a\nb ; not a comment"'))
    assert len(tokens) == 1
    assert tokens[0].kind == lexer.STRING
    assert tokens[0].value == r"a\nb ; not a comment"


def test_numbers_parse_to_int_or_float() -> None:
    values = [token.value for token in lexer.tokenize("7 42 3.25")]
    assert values == [7, 42, 3.25]
    assert isinstance(values[0], int)
    assert isinstance(values[2], float)


def test_identifier_characters() -> None:
    names = [token.value for token in lexer.tokenize("map .push a/b x-1 * str2")]
    assert names == ["map", ".push", "a/b", "x-1", "*", "str2"]


def test_spans_are_character_offsets() -> None:
    tokens = list(lexer.tokenize("(foo 12)"))
    assert [token.span.to_tuple() for token in tokens] == [(0, 1), (1, 4), (5, 7), (7, 8)]


def test_unrecognized_input_raises() -> None:
    with pytest.raises(LexError) as excinfo:
        list(lexer.tokenize("(a # b)"))
    assert excinfo.value.kind == "unrecognized input"
    assert excinfo.value.span is not None
    assert excinfo.value.span.start == 3


def test_unterminated_string_raises() -> None:
    with pytest.raises(LexError):
        list(lexer.tokenize('(str "abc)'))


def test_malformed_number_raises() -> None:
    with pytest.raises(LexError) as excinfo:
        list(lexer.tokenize("1.2.3"))
    assert excinfo.value.kind == "malformed number"


def test_error_is_raised_lazily() -> None:
    stream = lexer.tokenize("(a) {")
    assert next(stream).kind == lexer.LPAREN
    assert next(stream).kind == lexer.IDENT
    assert next(stream).kind == lexer.RPAREN
    with pytest.raises(LexError):
        next(stream)
