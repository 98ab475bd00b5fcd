"""Canonical JSON serializer for (optionally typed) expression trees.

The serializer produces deterministic output so that golden files and driver
reports remain stable across runs.  Each node receives a content-addressed
identifier derived from its structural JSON encoding; the deserializer
recomputes the hash to guarantee integrity.  Types are exported as rendered
strings only, so deserialized trees come back untyped.
"""

from __future__ import annotations

import hashlib
import json
from collections import OrderedDict
from typing import Any, Mapping

from . import ast
from .types import format_type


def to_json(node: ast.Node, *, ensure_ascii: bool = True) -> str:
    """Serialize ``node`` into canonical JSON."""

    payload = serialize_node(node)
    return json.dumps(payload, indent=2, separators=(",", ": "), ensure_ascii=ensure_ascii)


def from_json(payload: str) -> ast.Node:
    """Deserialize JSON back into a tree, validating all node hashes."""

    raw = json.loads(payload)
    return _deserialize_node(raw)


# ---------------------------------------------------------------------------
# Serialization helpers


def serialize_node(node: ast.Node) -> OrderedDict[str, Any]:
    data: OrderedDict[str, Any] = OrderedDict()
    data["node"] = node.node_type
    if node.span is not None:
        data["span"] = list(node.span.to_tuple())
    if isinstance(node, ast.Symbol):
        data["name"] = node.name
    elif isinstance(node, (ast.StringLiteral, ast.NumberLiteral)):
        data["value"] = node.value
    elif isinstance(node, (ast.List, ast.Vector)):
        data["elements"] = [serialize_node(child) for child in node.elements]
    else:
        raise TypeError(f"Unsupported node {node.node_type}")
    if node.type is not None:
        data["type"] = format_type(node.type, raw=True)
    data["id"] = _hash_payload(data)
    return data


def _hash_payload(data: Mapping[str, Any]) -> str:
    normalized = json.dumps(
        _strip_ids(data), sort_keys=True, separators=(",", ":"), ensure_ascii=False
    )
    return hashlib.sha256(normalized.encode("utf-8")).hexdigest()[:16]


def _strip_ids(data: Any) -> Any:
    if isinstance(data, Mapping):
        return {key: _strip_ids(value) for key, value in data.items() if key != "id"}
    if isinstance(data, list):
        return [_strip_ids(item) for item in data]
    return data


# ---------------------------------------------------------------------------
# Deserialization helpers


NODE_TYPES: dict[str, type[ast.Node]] = {
    cls.__name__: cls
    for cls in (ast.Symbol, ast.StringLiteral, ast.NumberLiteral, ast.List, ast.Vector)
}


def _deserialize_node(data: Mapping[str, Any]) -> ast.Node:
    _verify_hash(data)
    node_type = data.get("node")
    if node_type not in NODE_TYPES:
        raise ValueError(f"Unknown node type '{node_type}'")
    span_data = data.get("span")
    span = ast.Span(*span_data) if span_data is not None else None
    if node_type == "Symbol":
        return ast.Symbol(str(data["name"]), span=span)
    if node_type == "StringLiteral":
        return ast.StringLiteral(str(data["value"]), span=span)
    if node_type == "NumberLiteral":
        value = data["value"]
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError("NumberLiteral value must be numeric")
        return ast.NumberLiteral(value, span=span)
    elements = [_deserialize_node(child) for child in data.get("elements", [])]
    cls = NODE_TYPES[node_type]
    return cls(elements, span=span)  # type: ignore[call-arg]


def _verify_hash(data: Mapping[str, Any]) -> None:
    stored = data.get("id")
    if stored is None:
        raise ValueError("Serialized node is missing 'id'")
    computed = _hash_payload(data)
    if stored != computed:
        raise ValueError("Serialized node failed integrity check")


__all__ = ["from_json", "serialize_node", "to_json"]
