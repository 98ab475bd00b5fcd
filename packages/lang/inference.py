"""Constraint-based type inference for symbolic expression trees.

A run has three phases:

1. :class:`ConstraintGenerator` walks the tree, writes a provisional type into
   every node's ``type`` slot, and records equality constraints between type
   terms.
2. :func:`unify` solves the constraints as a work-list, producing an ordered
   :class:`Substitution`.  An occurs-check rejects self-referential bindings
   with an ``infinite type`` error instead of building an infinite term.
3. :func:`apply_substitution` rewrites every node's type slot with the solved
   substitution, applying the pairs strictly in the order they were found.

There is no let-generalisation: a type variable bound in the standard
environment is shared by every use within the run.  Each run owns its own
:class:`~packages.lang.types.TypeVariableSupply` so independent runs never
interfere with each other.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Iterator, Mapping, Optional, Sequence

from . import ast
from .errors import TypeSystemError
from .types import (
    NUMBER,
    STRING,
    FunctionType,
    TypeApplication,
    TypeTerm,
    TypeVariable,
    TypeVariableSupply,
    array_of,
    format_types,
    function_type,
    occurs_in,
    substitute,
)

__all__ = [
    "Constraint",
    "ConstraintGenerator",
    "InferenceResult",
    "Substitution",
    "TypeEnv",
    "apply_substitution",
    "infer_types",
    "standard_environment",
    "unify",
]


# ---------------------------------------------------------------------------
# Environment


@dataclass(slots=True)
class TypeEnv:
    """Lexically scoped mapping from symbol names to type terms.

    A frame only stores its own bindings; lookups walk the ``parent`` links
    outward.  Sealed frames (the standard environment) reject new bindings.
    """

    bindings: Dict[str, TypeTerm] = field(default_factory=dict)
    parent: Optional[TypeEnv] = None
    sealed: bool = False

    def child(self) -> "TypeEnv":
        return TypeEnv(parent=self)

    def define(self, name: str, typ: TypeTerm) -> None:
        if self.sealed:
            raise ValueError(f"cannot bind {name!r} in a sealed environment")
        self.bindings[name] = typ

    def lookup(self, name: str) -> TypeTerm:
        env: Optional[TypeEnv] = self
        while env is not None:
            if name in env.bindings:
                return env.bindings[name]
            env = env.parent
        raise KeyError(name)

    def __contains__(self, name: object) -> bool:
        try:
            self.lookup(str(name))
        except KeyError:
            return False
        return True


def standard_environment(supply: TypeVariableSupply) -> TypeEnv:
    """Build the sealed outermost scope for one inference run."""

    a = supply.fresh()
    b = supply.fresh()
    c = supply.fresh()
    bindings: Dict[str, TypeTerm] = {
        "+": function_type((NUMBER, NUMBER), NUMBER),
        # map: ((a) -> b, Array<a>) -> Array<b>
        "map": function_type((function_type((a,), b), array_of(a)), array_of(b)),
        "str": function_type((NUMBER,), STRING),
        # Methods take their receiver as the first parameter.
        ".concat": function_type((array_of(c), array_of(c)), array_of(c)),
        ".join": function_type((array_of(STRING), STRING), STRING),
    }
    return TypeEnv(bindings=bindings, sealed=True)


# ---------------------------------------------------------------------------
# Constraints and substitutions


@dataclass(frozen=True, slots=True)
class Constraint:
    """Assertion that ``left`` and ``right`` must unify.

    ``origin`` is the node whose inference produced the constraint; it only
    serves to attach a source span to unification errors.
    """

    left: TypeTerm
    right: TypeTerm
    origin: Optional[ast.Node] = None

    def substitute(self, variable: TypeVariable, replacement: TypeTerm) -> "Constraint":
        return Constraint(
            substitute(self.left, variable, replacement),
            substitute(self.right, variable, replacement),
            self.origin,
        )


@dataclass(slots=True)
class Substitution:
    """Ordered ``(variable, replacement)`` pairs discovered by :func:`unify`."""

    pairs: list[tuple[TypeVariable, TypeTerm]] = field(default_factory=list)

    def bind(self, variable: TypeVariable, replacement: TypeTerm) -> None:
        self.pairs.append((variable, replacement))

    def apply(self, term: TypeTerm) -> TypeTerm:
        """Rewrite ``term`` with every pair, strictly in discovery order."""

        for variable, replacement in self.pairs:
            term = substitute(term, variable, replacement)
        return term

    def as_mapping(self) -> Mapping[TypeVariable, TypeTerm]:
        """Fully resolved view: each variable mapped to its final term."""

        resolved: Dict[TypeVariable, TypeTerm] = {}
        for index, (variable, replacement) in enumerate(self.pairs):
            for later_variable, later_replacement in self.pairs[index + 1 :]:
                replacement = substitute(replacement, later_variable, later_replacement)
            resolved[variable] = replacement
        return MappingProxyType(resolved)

    def __iter__(self) -> Iterator[tuple[TypeVariable, TypeTerm]]:
        return iter(self.pairs)

    def __len__(self) -> int:
        return len(self.pairs)


# ---------------------------------------------------------------------------
# Constraint generation


class ConstraintGenerator:
    """Assigns provisional types to a tree and collects equality constraints."""

    def __init__(self, supply: TypeVariableSupply) -> None:
        self.supply = supply
        self.constraints: list[Constraint] = []

    def infer(self, env: TypeEnv, node: ast.Node) -> TypeTerm:
        """Infer ``node`` in ``env``, writing ``node.type`` and returning it."""

        result: Optional[TypeTerm]
        if isinstance(node, ast.Symbol):
            result = self._infer_symbol(env, node)
        elif isinstance(node, ast.StringLiteral):
            result = STRING
        elif isinstance(node, ast.NumberLiteral):
            result = NUMBER
        elif isinstance(node, ast.Vector):
            result = self._infer_vector(env, node)
        elif isinstance(node, ast.List):
            if ast.is_function_definition(node):
                result = self._infer_function(env, node)
            else:
                result = self._infer_application(env, node)
        else:
            raise TypeSystemError(
                "no type computed", f"unsupported node {node.node_type}", span=node.span
            )
        if result is None:
            raise TypeSystemError(
                "no type computed", f"for {node.node_type} node", span=node.span
            )
        node.type = result
        return result

    def _infer_symbol(self, env: TypeEnv, node: ast.Symbol) -> TypeTerm:
        try:
            return env.lookup(node.name)
        except KeyError as exc:
            raise TypeSystemError("unbound symbol", repr(node.name), span=node.span) from exc

    def _infer_vector(self, env: TypeEnv, node: ast.Vector) -> TypeTerm:
        element_type = self.supply.fresh()
        for element in node.elements:
            inferred = self.infer(env, element)
            self.constraints.append(Constraint(element_type, inferred, element))
        return array_of(element_type)

    def _infer_function(self, env: TypeEnv, node: ast.List) -> Optional[TypeTerm]:
        if len(node.elements) < 2 or not isinstance(node.elements[1], ast.Vector):
            raise TypeSystemError(
                "malformed form",
                f"{ast.FN_FORM!r} requires a parameter vector",
                span=node.span,
            )
        scope = env.child()
        param_types: list[TypeTerm] = []
        for param in node.elements[1].elements:
            if not isinstance(param, ast.Symbol):
                raise TypeSystemError(
                    "malformed form",
                    f"parameter must be a symbol, found {param.node_type}",
                    span=param.span,
                )
            variable = self.supply.fresh()
            scope.define(param.name, variable)
            param.type = variable
            param_types.append(variable)

        body = node.elements[2:]
        if not body:
            raise TypeSystemError("no type computed", "function body is empty", span=node.span)
        result: Optional[TypeTerm] = None
        for expression in body:
            result = self.infer(scope, expression)
        if result is None:
            return None
        return function_type(param_types, result)

    def _infer_application(self, env: TypeEnv, node: ast.List) -> TypeTerm:
        if not node.elements:
            raise TypeSystemError("no type computed", "empty application", span=node.span)
        try:
            shape = ast.split_call(node)
        except ValueError as exc:
            raise TypeSystemError("malformed form", str(exc), span=node.span) from exc

        callee_type = self.infer(env, shape.callee)
        operand_types = [self.infer(env, operand) for operand in shape.operands]
        result = self.supply.fresh()
        self.constraints.append(
            Constraint(callee_type, function_type(operand_types, result), node)
        )
        return result


# ---------------------------------------------------------------------------
# Unification


def unify(constraints: list[Constraint]) -> Substitution:
    """Solve ``constraints`` destructively and return the substitution.

    The list is used as a LIFO work-list and is empty on return.  Each new
    binding is immediately applied to every outstanding constraint, so later
    replacements never mention an already-bound variable.
    """

    substitution = Substitution()
    while constraints:
        constraint = constraints.pop()
        left, right = constraint.left, constraint.right
        if left == right:
            continue
        if isinstance(left, TypeVariable):
            _bind(left, right, constraint, constraints, substitution)
        elif isinstance(right, TypeVariable):
            _bind(right, left, constraint, constraints, substitution)
        elif isinstance(left, FunctionType) and isinstance(right, FunctionType):
            if len(left.params) != len(right.params):
                rendered = format_types(left, right)
                raise TypeSystemError(
                    "arity mismatch",
                    f"{rendered[0]} takes {len(left.params)} argument(s) "
                    f"but {rendered[1]} takes {len(right.params)}",
                    span=_span_of(constraint),
                    terms=(left, right),
                )
            for left_param, right_param in zip(left.params, right.params):
                constraints.append(Constraint(left_param, right_param, constraint.origin))
            constraints.append(Constraint(left.result, right.result, constraint.origin))
        elif isinstance(left, TypeApplication) and isinstance(right, TypeApplication):
            constraints.append(
                Constraint(left.constructor, right.constructor, constraint.origin)
            )
            constraints.append(Constraint(left.argument, right.argument, constraint.origin))
        else:
            rendered = format_types(left, right)
            raise TypeSystemError(
                "unification failure",
                f"cannot unify {rendered[0]} with {rendered[1]}",
                span=_span_of(constraint),
                terms=(left, right),
            )
    return substitution


def _bind(
    variable: TypeVariable,
    term: TypeTerm,
    constraint: Constraint,
    constraints: list[Constraint],
    substitution: Substitution,
) -> None:
    if occurs_in(variable, term):
        rendered = format_types(variable, term)
        raise TypeSystemError(
            "infinite type",
            f"{rendered[0]} occurs in {rendered[1]}",
            span=_span_of(constraint),
            terms=(variable, term),
        )
    substitution.bind(variable, term)
    constraints[:] = [pending.substitute(variable, term) for pending in constraints]


def _span_of(constraint: Constraint) -> Optional[ast.Span]:
    return constraint.origin.span if constraint.origin is not None else None


# ---------------------------------------------------------------------------
# Substitution application


def apply_substitution(node: ast.Node, substitution: Substitution) -> None:
    """Rewrite the type slots of ``node`` and its subtree in place.

    For function definitions the parameter symbols and body are visited; the
    ``fn`` head and the parameter vector itself carry no type.
    """

    if node.type is not None:
        node.type = substitution.apply(node.type)
    if isinstance(node, ast.List) and ast.is_function_definition(node):
        children: Sequence[ast.Node] = node.elements[2:]
        if len(node.elements) > 1 and isinstance(node.elements[1], ast.Vector):
            children = (*node.elements[1].elements, *children)
    elif isinstance(node, (ast.List, ast.Vector)):
        children = node.elements
    else:
        return
    for child in children:
        apply_substitution(child, substitution)


# ---------------------------------------------------------------------------
# Entry point


@dataclass(slots=True)
class InferenceResult:
    """Aggregate outcome of one successful inference run."""

    node: ast.Node
    root_type: TypeTerm
    substitution: Substitution
    environment: TypeEnv
    constraint_count: int


def infer_types(
    node: ast.Node,
    env: Optional[TypeEnv] = None,
    *,
    supply: Optional[TypeVariableSupply] = None,
) -> InferenceResult:
    """Run constraint generation, unification, and substitution on ``node``.

    When ``env`` is supplied its type variables must come from ``supply``;
    otherwise a fresh supply and standard environment are created for the run.
    """

    if supply is None:
        supply = TypeVariableSupply()
    if env is None:
        env = standard_environment(supply)
    generator = ConstraintGenerator(supply)
    generator.infer(env, node)
    constraint_count = len(generator.constraints)
    substitution = unify(generator.constraints)
    apply_substitution(node, substitution)
    if node.type is None:
        raise TypeSystemError("no type computed", node.node_type, span=node.span)
    return InferenceResult(
        node=node,
        root_type=node.type,
        substitution=substitution,
        environment=env,
        constraint_count=constraint_count,
    )
