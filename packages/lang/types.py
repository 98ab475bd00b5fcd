"""Type-term vocabulary used by the inference engine.

Four closed variants make up the type language:

* :class:`BaseType` - nominal atoms drawn from a fixed registry and compared
  by identity (``Number``, ``String`` and the ``Array`` constructor).
* :class:`FunctionType` - ordered parameter types plus a result type.
* :class:`TypeVariable` - an unresolved placeholder, compared by identity.
* :class:`TypeApplication` - a constructor applied to one argument
  (``Array<Number>``).

Compound terms are immutable; :func:`substitute` returns rewritten copies and
is the single recursive primitive used both while solving constraints and
while annotating the tree.
"""

from __future__ import annotations

import itertools
import string
from dataclasses import dataclass
from typing import Dict, Iterator, Sequence, Union

__all__ = [
    "ARRAY",
    "BUILTIN_TYPES",
    "BaseType",
    "FunctionType",
    "NUMBER",
    "STRING",
    "TypeApplication",
    "TypeTerm",
    "TypeVariable",
    "TypeVariableSupply",
    "array_of",
    "format_type",
    "format_types",
    "free_variables",
    "function_type",
    "occurs_in",
    "substitute",
]


# ---------------------------------------------------------------------------
# Type representation


@dataclass(frozen=True, eq=False, slots=True)
class BaseType:
    """Nominal type atom; two base types are equal only if they are the same object."""

    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True, eq=False, slots=True)
class TypeVariable:
    """Unification variable handed out by a :class:`TypeVariableSupply`."""

    id: int

    def __str__(self) -> str:
        return f"t{self.id}"


@dataclass(frozen=True, slots=True)
class FunctionType:
    params: tuple["TypeTerm", ...]
    result: "TypeTerm"

    def __str__(self) -> str:
        return format_type(self, raw=True)


@dataclass(frozen=True, slots=True)
class TypeApplication:
    """Parametrised type such as ``Array<T>``."""

    constructor: "TypeTerm"
    argument: "TypeTerm"

    def __str__(self) -> str:
        return format_type(self, raw=True)


TypeTerm = Union[BaseType, FunctionType, TypeVariable, TypeApplication]


# ---------------------------------------------------------------------------
# Built-in registry and constructors


NUMBER = BaseType("Number")
STRING = BaseType("String")
ARRAY = BaseType("Array")

BUILTIN_TYPES: Dict[str, BaseType] = {base.name: base for base in (NUMBER, STRING, ARRAY)}


def function_type(params: Sequence[TypeTerm], result: TypeTerm) -> FunctionType:
    return FunctionType(tuple(params), result)


def array_of(element: TypeTerm) -> TypeApplication:
    return TypeApplication(ARRAY, element)


class TypeVariableSupply:
    """Per-run allocator of fresh type variables.

    Each inference run owns its own supply so concurrent runs never share a
    counter; ids are unique within a supply and never reused.
    """

    def __init__(self, start: int = 0) -> None:
        self._counter = itertools.count(start)

    def fresh(self) -> TypeVariable:
        return TypeVariable(next(self._counter))


# ---------------------------------------------------------------------------
# Term operations


def substitute(term: TypeTerm, variable: TypeVariable, replacement: TypeTerm) -> TypeTerm:
    """Return ``term`` with every occurrence of ``variable`` replaced."""

    if isinstance(term, BaseType):
        return term
    if isinstance(term, TypeVariable):
        return replacement if term is variable else term
    if isinstance(term, FunctionType):
        return FunctionType(
            tuple(substitute(param, variable, replacement) for param in term.params),
            substitute(term.result, variable, replacement),
        )
    if isinstance(term, TypeApplication):
        return TypeApplication(
            substitute(term.constructor, variable, replacement),
            substitute(term.argument, variable, replacement),
        )
    raise AssertionError(f"Unknown type term: {term!r}")


def iter_subterms(term: TypeTerm) -> Iterator[TypeTerm]:
    """Pre-order traversal over ``term`` and all of its components."""

    yield term
    if isinstance(term, FunctionType):
        for param in term.params:
            yield from iter_subterms(param)
        yield from iter_subterms(term.result)
    elif isinstance(term, TypeApplication):
        yield from iter_subterms(term.constructor)
        yield from iter_subterms(term.argument)


def occurs_in(variable: TypeVariable, term: TypeTerm) -> bool:
    """Return True when ``variable`` appears anywhere inside ``term``."""

    return any(sub is variable for sub in iter_subterms(term))


def free_variables(term: TypeTerm) -> list[TypeVariable]:
    """Distinct type variables of ``term`` in order of first appearance."""

    seen: dict[int, TypeVariable] = {}
    for sub in iter_subterms(term):
        if isinstance(sub, TypeVariable) and id(sub) not in seen:
            seen[id(sub)] = sub
    return list(seen.values())


# ---------------------------------------------------------------------------
# Pretty-printing


def format_type(term: TypeTerm, *, raw: bool = False) -> str:
    """Return a human-readable rendering used in diagnostics and tests.

    Variables are renamed ``'a``, ``'b``... in order of first appearance so the
    output does not depend on the allocation counter.  With ``raw`` variables
    keep their allocated ``t<id>`` names instead.
    """

    return format_types(term, raw=raw)[0]


def format_types(*terms: TypeTerm, raw: bool = False) -> list[str]:
    """Render several terms with one shared variable naming."""

    variables: Dict[int, TypeVariable] = {}
    for term in terms:
        for variable in free_variables(term):
            variables.setdefault(id(variable), variable)
    names: Dict[int, str] = {}
    for index, variable in enumerate(variables.values()):
        if index < len(string.ascii_lowercase):
            names[id(variable)] = f"'{string.ascii_lowercase[index]}"
        else:
            names[id(variable)] = f"'t{index}"

    def pretty(t: TypeTerm) -> str:
        if isinstance(t, BaseType):
            return t.name
        if isinstance(t, TypeVariable):
            return str(t) if raw else names[id(t)]
        if isinstance(t, FunctionType):
            params = ", ".join(pretty(param) for param in t.params)
            return f"({params}) -> {pretty(t.result)}"
        if isinstance(t, TypeApplication):
            return f"{pretty(t.constructor)}<{pretty(t.argument)}>"
        raise AssertionError(f"Unknown type term: {t!r}")

    return [pretty(term) for term in terms]
