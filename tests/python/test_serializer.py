"""Tests for canonical JSON serialisation of expression trees."""

import json

import pytest

from packages.lang import ast, generators, grammar, serializer
from packages.lang.inference import infer_types


@pytest.mark.parametrize(
    "program",
    list(generators.load_sample_programs()),
    ids=lambda program: program.name,
)
def test_round_trip_is_canonical(program):
    for form in program.forms:
        payload = serializer.to_json(form)
        restored = serializer.from_json(payload)
        assert ast.structurally_equal(restored, form)
        assert serializer.to_json(restored) == payload


def test_types_are_exported_but_not_restored():
    node = grammar.parse_one("(+ 1 2)")
    infer_types(node)
    data = json.loads(serializer.to_json(node))
    assert data["type"] == "Number"
    assert data["elements"][0]["type"] == "(Number, Number) -> Number"
    restored = serializer.from_json(serializer.to_json(node))
    assert restored.type is None
    assert restored.span == node.span


def test_corrupted_hash_is_detected():
    node = grammar.parse_one('(str "x")')
    data = json.loads(serializer.to_json(node))
    data["elements"][1]["value"] = "y"
    with pytest.raises(ValueError):
        serializer.from_json(json.dumps(data))
