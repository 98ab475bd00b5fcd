"""Tests for the JavaScript emitter."""

from __future__ import annotations

import pytest

from packages.lang import grammar, transpiler


@pytest.mark.parametrize(
    "source, expected",
    [
        ("x", "x"),
        ('"hi"', '"hi"'),
        ("2.5", "2.5"),
        ("0.0000001", "0.0000001"),
        ("[1 2 3]", "[1, 2, 3]"),
        ("(f 1 x)", "f(1, x)"),
        ("(g)", "g()"),
        ("(+ 1 2 3)", "(1 + 2 + 3)"),
        ("(* (+ a 1) b)", "((a + 1) * b)"),
        ("(.push xs 1)", "xs.push(1)"),
        ('(.join (map str xs) ", ")', 'map(str, xs).join(", ")'),
        ("(fn [x] (+ x 1))", "function(x) { return (x + 1); }"),
        ("(fn [a b] (log a) b)", "function(a, b) { log(a); return b; }"),
        ("((fn [x] x) 1)", "(function(x) { return x; })(1)"),
    ],
)
def test_transpile(source: str, expected: str) -> None:
    assert transpiler.transpile(grammar.parse_one(source)) == expected


def test_transpile_program_joins_statements() -> None:
    forms = grammar.parse("(f 1)\n[x]")
    assert transpiler.transpile_program(forms) == "f(1);\n[x];\n"


def test_special_forms_are_checked_before_application() -> None:
    assert "fn" in transpiler.SPECIAL_FORMS
    with pytest.raises(ValueError):
        transpiler.transpile(grammar.parse_one("(fn x)"))


def test_empty_form_cannot_be_emitted() -> None:
    with pytest.raises(ValueError):
        transpiler.transpile(grammar.parse_one("()"))
