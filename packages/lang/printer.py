"""Render trees back to surface syntax."""

from __future__ import annotations

from . import ast
from .types import format_type


def to_source(node: ast.Node, *, with_types: bool = False) -> str:
    """Return the surface syntax for ``node``.

    With ``with_types`` every node whose type slot is populated is suffixed
    with ``:<type>`` (variables keep their ``t<id>`` names so they line up
    across nodes); such output is a debugging aid and does not re-parse.
    """

    if isinstance(node, ast.Symbol):
        text = node.name
    elif isinstance(node, ast.StringLiteral):
        text = f'"{node.value}"'
    elif isinstance(node, ast.NumberLiteral):
        text = ast.format_number(node.value)
    elif isinstance(node, (ast.List, ast.Vector)):
        opener, closer = ("(", ")") if isinstance(node, ast.List) else ("[", "]")
        inner = " ".join(to_source(item, with_types=with_types) for item in node.elements)
        text = f"{opener}{inner}{closer}"
    else:
        raise TypeError(f"Unsupported node {node.node_type}")
    if with_types and node.type is not None:
        text += ":" + format_type(node.type, raw=True)
    return text


def program_to_source(nodes: list[ast.Node]) -> str:
    return "\n".join(to_source(node) for node in nodes)


__all__ = ["program_to_source", "to_source"]
