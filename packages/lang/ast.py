"""Symbolic expression tree produced by the parser.

The node set is deliberately closed: ``Symbol``, ``StringLiteral``,
``NumberLiteral``, ``List`` and ``Vector``.  Tags and children are fixed once
the parser builds a node; the only mutable attribute is the ``type`` slot,
which the inference engine fills in and later rewrites when it applies the
solved substitution.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import TYPE_CHECKING, Iterator, Optional, Union

if TYPE_CHECKING:  # pragma: no cover - import for typing only
    from .types import TypeTerm

FN_FORM = "fn"
METHOD_PREFIX = "."

# ---------------------------------------------------------------------------
# Shared utilities


@dataclass(frozen=True, slots=True)
class Span:
    """Start/end character offsets of a token or node in the source text."""

    start: int
    end: int

    def to_tuple(self) -> tuple[int, int]:
        """Return a tuple form used by serializers."""

        return (self.start, self.end)

    def location(self, source: str) -> tuple[int, int]:
        """Return the 1-based ``(line, column)`` of ``start`` within ``source``."""

        prefix = source[: self.start]
        line = prefix.count("\n") + 1
        column = self.start - (prefix.rfind("\n") + 1) + 1
        return line, column

    def cover(self, other: "Span") -> "Span":
        return Span(min(self.start, other.start), max(self.end, other.end))


@dataclass(slots=True, eq=False, kw_only=True)
class Node:
    """Base class for all tree nodes.

    ``span`` is optional because tests and rewrites occasionally synthesise
    nodes that never came from source text.
    """

    span: Optional[Span] = None
    type: Optional["TypeTerm"] = None

    @property
    def node_type(self) -> str:
        """Expose a stable node type string used by the serializer."""

        return self.__class__.__name__

    def children(self) -> Iterator["Node"]:
        return iter(())

    def walk(self) -> Iterator["Node"]:
        """Depth-first traversal starting at this node."""

        yield self
        for child in self.children():
            yield from child.walk()


# ---------------------------------------------------------------------------
# Node variants


@dataclass(slots=True, eq=False)
class Symbol(Node):
    """Identifier reference (``x``, ``+``, ``.push``)."""

    name: str


@dataclass(slots=True, eq=False)
class StringLiteral(Node):
    value: str


@dataclass(slots=True, eq=False)
class NumberLiteral(Node):
    value: Union[int, float]


@dataclass(slots=True, eq=False)
class List(Node):
    """Parenthesised form: a function definition or an application."""

    elements: tuple[Node, ...]

    def __post_init__(self) -> None:
        self.elements = tuple(self.elements)

    def children(self) -> Iterator[Node]:
        return iter(self.elements)


@dataclass(slots=True, eq=False)
class Vector(Node):
    """Bracketed form: an array literal or a parameter list."""

    elements: tuple[Node, ...]

    def __post_init__(self) -> None:
        self.elements = tuple(self.elements)

    def children(self) -> Iterator[Node]:
        return iter(self.elements)


# ---------------------------------------------------------------------------
# Helper functions


def head_name(node: Node) -> Optional[str]:
    """Return the head symbol name of a list, or ``None``."""

    if isinstance(node, List) and node.elements and isinstance(node.elements[0], Symbol):
        return node.elements[0].name
    return None


def is_function_definition(node: Node) -> bool:
    return head_name(node) == FN_FORM


def is_method_name(name: str) -> bool:
    return len(name) > 1 and name.startswith(METHOD_PREFIX)


@dataclass(frozen=True, slots=True)
class CallShape:
    """Application form split into callee, optional receiver, and arguments."""

    callee: Node
    receiver: Optional[Node]
    arguments: tuple[Node, ...]

    @property
    def operands(self) -> tuple[Node, ...]:
        """Receiver (when present) followed by the explicit arguments."""

        if self.receiver is None:
            return self.arguments
        return (self.receiver, *self.arguments)


def format_number(value: Union[int, float]) -> str:
    """Render a number literal in plain decimal notation.

    ``str()`` switches floats to exponent form at the extremes, which the lexer
    does not accept.  Floats always keep a fractional part so they read back as
    floats.
    """

    if isinstance(value, int):
        return str(value)
    text = format(Decimal(repr(value)), "f")
    if "." not in text:
        text += ".0"
    return text


def split_call(node: List) -> CallShape:
    """Desugar ``(.method target args...)`` into callee/receiver/arguments.

    Ordinary applications come back with ``receiver=None``.  A method head with
    no target raises :class:`ValueError`; callers translate that into their own
    error type.
    """

    if not node.elements:
        raise ValueError("empty form has no callee")
    callee, *rest = node.elements
    if isinstance(callee, Symbol) and is_method_name(callee.name):
        if not rest:
            raise ValueError(f"method call {callee.name!r} requires a target")
        return CallShape(callee=callee, receiver=rest[0], arguments=tuple(rest[1:]))
    return CallShape(callee=callee, receiver=None, arguments=tuple(rest))


def structurally_equal(left: Node, right: Node) -> bool:
    """Compare two trees by tag and payload, ignoring spans and types."""

    if type(left) is not type(right):
        return False
    if isinstance(left, Symbol):
        return left.name == right.name  # type: ignore[attr-defined]
    if isinstance(left, (StringLiteral, NumberLiteral)):
        return left.value == right.value  # type: ignore[attr-defined]
    if isinstance(left, (List, Vector)):
        other = right.elements  # type: ignore[attr-defined]
        return len(left.elements) == len(other) and all(
            structurally_equal(a, b) for a, b in zip(left.elements, other)
        )
    raise AssertionError(f"Unknown node: {left!r}")
