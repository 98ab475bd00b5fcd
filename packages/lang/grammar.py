"""Parser building symbolic expression trees from the token stream.

The grammar has no precedence or keywords, so instead of recursive descent the
parser keeps an explicit stack of open frames.  Each frame remembers the
sibling list that was being filled before the delimiter opened, plus the
opening token so the matching closer and error spans can be checked.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Union, cast

from . import ast
from .errors import ParseError
from .lexer import (
    CLOSERS,
    IDENT,
    LPAREN,
    NUMBER,
    OPENERS,
    STRING,
    Token,
    tokenize,
)

_DELIMITER_TEXT = {"LPAREN": "(", "RPAREN": ")", "LBRACKET": "[", "RBRACKET": "]"}


@dataclass(slots=True)
class _Frame:
    siblings: list[ast.Node]
    opener: Token


def parse(source: str) -> list[ast.Node]:
    """Parse ``source`` into its ordered top-level forms."""

    return parse_tokens(tokenize(source))


def parse_tokens(tokens: Iterable[Token]) -> list[ast.Node]:
    """Build the forest for an already tokenized stream."""

    stack: list[_Frame] = []
    current: list[ast.Node] = []
    for token in tokens:
        if token.kind in OPENERS:
            stack.append(_Frame(current, token))
            current = []
        elif token.kind in CLOSERS:
            if not stack:
                raise ParseError(
                    "mismatched delimiter",
                    f"{_DELIMITER_TEXT[token.kind]!r} has no matching opener",
                    span=token.span,
                )
            frame = stack.pop()
            if CLOSERS[token.kind] != frame.opener.kind:
                raise ParseError(
                    "mismatched delimiter",
                    f"{_DELIMITER_TEXT[frame.opener.kind]!r} closed by "
                    f"{_DELIMITER_TEXT[token.kind]!r}",
                    span=token.span,
                )
            span = frame.opener.span.cover(token.span)
            node: ast.Node
            if frame.opener.kind == LPAREN:
                node = ast.List(current, span=span)
            else:
                node = ast.Vector(current, span=span)
            frame.siblings.append(node)
            current = frame.siblings
        elif token.kind == IDENT:
            current.append(ast.Symbol(str(token.value), span=token.span))
        elif token.kind == STRING:
            current.append(ast.StringLiteral(str(token.value), span=token.span))
        elif token.kind == NUMBER:
            value = cast(Union[int, float], token.value)
            current.append(ast.NumberLiteral(value, span=token.span))
        else:  # pragma: no cover - the lexer restricts kinds
            raise ParseError("unexpected token", str(token), span=token.span)
    if stack:
        opener = stack[-1].opener
        raise ParseError(
            "unclosed delimiter",
            f"{_DELIMITER_TEXT[opener.kind]!r} is never closed",
            span=opener.span,
        )
    return current


def parse_one(source: str) -> ast.Node:
    """Parse ``source`` and return its single top-level form.

    Useful for unit tests and callers that only deal with one expression.
    """

    forms = parse(source)
    if len(forms) != 1:
        raise ValueError(f"expected exactly one form, found {len(forms)}")
    return forms[0]


__all__ = ["parse", "parse_one", "parse_tokens"]
