"""Lightweight transpiler from symbolic expression trees to JavaScript.

Reserved head symbols are dispatched through :data:`SPECIAL_FORMS` before the
generic application rule applies.  The emitter reads the tree shape only; it
does not require the tree to have been typed and never validates its output.
"""

from __future__ import annotations

from typing import Callable, Iterable, List, Mapping, cast

from . import ast

Handler = Callable[[ast.List], str]

INFIX_OPERATORS = frozenset({"+", "-", "*", "/"})


def transpile(node: ast.Node) -> str:
    """Render a single expression as JavaScript source."""

    if isinstance(node, ast.Symbol):
        return node.name
    if isinstance(node, ast.StringLiteral):
        return f'"{node.value}"'
    if isinstance(node, ast.NumberLiteral):
        return ast.format_number(node.value)
    if isinstance(node, ast.Vector):
        return f"[{_emit_arguments(node.elements)}]"
    if isinstance(node, ast.List):
        return _emit_list(node)
    raise TypeError(f"Unsupported node {node.node_type}")


def transpile_program(nodes: Iterable[ast.Node]) -> str:
    """Render top-level forms as a sequence of JavaScript statements."""

    return "".join(f"{transpile(node)};\n" for node in nodes)


def _emit_list(node: ast.List) -> str:
    if not node.elements:
        raise ValueError("cannot emit an empty form")
    name = ast.head_name(node)
    if name is not None and name in SPECIAL_FORMS:
        return SPECIAL_FORMS[name](node)
    if name is not None and name in INFIX_OPERATORS:
        return _emit_infix(name, node.elements[1:])
    shape = ast.split_call(node)
    if shape.receiver is not None:
        method = cast(ast.Symbol, shape.callee)
        receiver = _emit_receiver(shape.receiver)
        return f"{receiver}{method.name}({_emit_arguments(shape.arguments)})"
    return f"{_emit_callee(shape.callee)}({_emit_arguments(shape.arguments)})"


def _emit_function(node: ast.List) -> str:
    if len(node.elements) < 2 or not isinstance(node.elements[1], ast.Vector):
        raise ValueError(f"{ast.FN_FORM!r} requires a parameter vector")
    params: List[str] = []
    for param in node.elements[1].elements:
        if not isinstance(param, ast.Symbol):
            raise ValueError("function parameters must be symbols")
        params.append(param.name)
    body = [transpile(expr) for expr in node.elements[2:]]
    statements = [f"{line}; " for line in body[:-1]]
    if body:
        statements.append(f"return {body[-1]}; ")
    return f"function({', '.join(params)}) {{ {''.join(statements)}}}"


def _emit_infix(operator: str, operands: Iterable[ast.Node]) -> str:
    rendered = [transpile(operand) for operand in operands]
    return "(" + f" {operator} ".join(rendered) + ")"


def _emit_callee(node: ast.Node) -> str:
    text = transpile(node)
    if isinstance(node, ast.List) and ast.is_function_definition(node):
        return f"({text})"
    return text


def _emit_receiver(node: ast.Node) -> str:
    if isinstance(node, ast.NumberLiteral):
        return f"({transpile(node)})"
    return _emit_callee(node)


def _emit_arguments(arguments: Iterable[ast.Node]) -> str:
    return ", ".join(transpile(arg) for arg in arguments)


SPECIAL_FORMS: Mapping[str, Handler] = {
    ast.FN_FORM: _emit_function,
}


__all__ = ["INFIX_OPERATORS", "SPECIAL_FORMS", "transpile", "transpile_program"]
