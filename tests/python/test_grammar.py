"""Integration-focused tests for the bracket-matching parser and printer."""

from __future__ import annotations

import pytest

from packages.lang import ast, generators, grammar, printer
from packages.lang.errors import ParseError


def test_nested_list_and_vector() -> None:
    node = grammar.parse_one("(a [b c])")
    assert isinstance(node, ast.List)
    head, vector = node.elements
    assert isinstance(head, ast.Symbol) and head.name == "a"
    assert isinstance(vector, ast.Vector)
    assert [child.name for child in vector.elements] == ["b", "c"]  # type: ignore[attr-defined]
    assert node.type is None


def test_multiple_top_level_forms() -> None:
    forms = grammar.parse('1 "two" (three) [4]')
    assert [form.node_type for form in forms] == [
        "NumberLiteral",
        "StringLiteral",
        "List",
        "Vector",
    ]


def test_empty_source_has_no_forms() -> None:
    assert grammar.parse("  ; only a comment\n") == []


def test_compound_span_covers_delimiters() -> None:
    node = grammar.parse_one("  (f [x])")
    assert node.span == ast.Span(2, 9)
    inner = node.elements[1]  # type: ignore[attr-defined]
    assert inner.span == ast.Span(5, 8)


@pytest.mark.parametrize("source", ["(a]", "[a)", "(a [b)]"])
def test_mismatched_delimiter(source: str) -> None:
    with pytest.raises(ParseError) as excinfo:
        grammar.parse(source)
    assert excinfo.value.kind == "mismatched delimiter"


def test_stray_closer_is_mismatched() -> None:
    with pytest.raises(ParseError) as excinfo:
        grammar.parse("a)")
    assert excinfo.value.kind == "mismatched delimiter"


def test_unclosed_delimiter_reports_innermost_opener() -> None:
    with pytest.raises(ParseError) as excinfo:
        grammar.parse("(a [b")
    assert excinfo.value.kind == "unclosed delimiter"
    assert excinfo.value.span == ast.Span(3, 4)
    assert "unclosed delimiter" in str(excinfo.value)


def test_unclosed_paren() -> None:
    with pytest.raises(ParseError, match="unclosed delimiter"):
        grammar.parse("(a")


def test_error_location_is_line_and_column() -> None:
    source = "(ok)\n  (bad]"
    with pytest.raises(ParseError) as excinfo:
        grammar.parse(source)
    assert excinfo.value.describe(source, "demo.sexp").startswith("demo.sexp:2:7: ")


@pytest.mark.parametrize(
    "source",
    [
        "(+ 1 2)",
        '(fn [x y] (.concat x y) "done")',
        "[[1 2.5] [] (f)]",
        "(map str [1 2 3])",
    ],
)
def test_print_then_parse_round_trip(source: str) -> None:
    node = grammar.parse_one(source)
    rendered = printer.to_source(node)
    assert rendered == source
    assert ast.structurally_equal(grammar.parse_one(rendered), node)


@pytest.mark.parametrize(
    "source, expected",
    [
        ("0.0000001", "0.0000001"),
        ("[0.00001 2]", "[0.00001 2]"),
        ("12345678901234567890.5", "12345678901234567000.0"),
        ("10000000000000000.0", "10000000000000000.0"),
    ],
)
def test_extreme_floats_print_in_decimal_form(source: str, expected: str) -> None:
    node = grammar.parse_one(source)
    rendered = printer.to_source(node)
    assert rendered == expected
    assert ast.structurally_equal(grammar.parse_one(rendered), node)


@pytest.mark.parametrize(
    "program",
    list(generators.load_sample_programs()),
    ids=lambda program: program.name,
)
def test_sample_programs_round_trip(program: generators.SampleProgram) -> None:
    assert program.forms, "samples should define at least one form"
    reparsed = grammar.parse(printer.program_to_source(program.forms))
    assert len(reparsed) == len(program.forms)
    for original, again in zip(program.forms, reparsed):
        assert ast.structurally_equal(original, again)


def test_split_call_desugars_method_sugar() -> None:
    node = grammar.parse_one("(.push xs 1 2)")
    assert isinstance(node, ast.List)
    shape = ast.split_call(node)
    assert isinstance(shape.callee, ast.Symbol) and shape.callee.name == ".push"
    assert isinstance(shape.receiver, ast.Symbol) and shape.receiver.name == "xs"
    assert [arg.value for arg in shape.arguments] == [1, 2]  # type: ignore[attr-defined]
    assert len(shape.operands) == 3


def test_split_call_requires_method_target() -> None:
    node = grammar.parse_one("(.push)")
    assert isinstance(node, ast.List)
    with pytest.raises(ValueError):
        ast.split_call(node)
