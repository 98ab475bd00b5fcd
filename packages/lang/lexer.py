"""Lazy tokenizer for the S-expression surface syntax.

Tokens are produced one at a time from a single master regular expression.
Whitespace and ``;`` line comments are consumed silently; any fragment that
matches none of the patterns is reported as a :class:`LexError` rather than
being skipped.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterator, Union

from .ast import Span
from .errors import LexError

LPAREN = "LPAREN"
RPAREN = "RPAREN"
LBRACKET = "LBRACKET"
RBRACKET = "RBRACKET"
STRING = "STRING"
NUMBER = "NUMBER"
IDENT = "IDENT"

OPENERS = {LPAREN: RPAREN, LBRACKET: RBRACKET}
CLOSERS = {RPAREN: LPAREN, RBRACKET: LBRACKET}

_TOKEN_PATTERN = r"""
(?P<LPAREN>\()
|(?P<RPAREN>\))
|(?P<LBRACKET>\[)
|(?P<RBRACKET>\])
|(?P<SPACE>\s+)
|(?P<COMMENT>;[^\n]*)
|(?P<STRING>"(?P<text>[^"]*)")
|(?P<WORD>[a-zA-Z0-9.*/+\-]+)
"""

_TOKEN_RE = re.compile(_TOKEN_PATTERN, re.VERBOSE)
_NUMBER_RE = re.compile(r"[0-9]+(\.[0-9]+)?")


@dataclass(frozen=True, slots=True)
class Token:
    """Single lexical token."""

    kind: str
    value: Union[str, int, float, None]
    span: Span

    def __str__(self) -> str:
        if self.value is None:
            return self.kind
        return f"{self.kind}({self.value!r})"


def tokenize(source: str) -> Iterator[Token]:
    """Yield the tokens of ``source`` lazily.

    Each call starts a fresh scan; a partially consumed generator cannot be
    resumed from another position.
    """

    pos = 0
    length = len(source)
    while pos < length:
        match = _TOKEN_RE.match(source, pos)
        if match is None:
            raise LexError(
                "unrecognized input",
                f"unexpected {source[pos]!r} at offset {pos}",
                span=Span(pos, pos + 1),
            )
        kind = match.lastgroup
        span = Span(match.start(), match.end())
        pos = match.end()
        if kind in ("SPACE", "COMMENT"):
            continue
        if kind == "STRING":
            yield Token(STRING, match.group("text"), span)
        elif kind == "WORD":
            yield _word_token(match.group(kind), span)
        else:
            yield Token(kind, None, span)


def _word_token(text: str, span: Span) -> Token:
    if not text[0].isdigit():
        return Token(IDENT, text, span)
    if _NUMBER_RE.fullmatch(text) is None:
        raise LexError("malformed number", repr(text), span=span)
    if "." in text:
        return Token(NUMBER, float(text), span)
    return Token(NUMBER, int(text), span)


__all__ = [
    "CLOSERS",
    "IDENT",
    "LBRACKET",
    "LPAREN",
    "NUMBER",
    "OPENERS",
    "RBRACKET",
    "RPAREN",
    "STRING",
    "Token",
    "tokenize",
]
