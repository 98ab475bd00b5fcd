"""Structured error taxonomy shared by every compiler stage.

All failures are non-recoverable for the current run: the stage raising the
error aborts, and the caller (usually the driver) decides how to report it.
Each error carries a short ``kind`` string that identifies the failure class
independently of the human-readable detail.
"""

from __future__ import annotations

from typing import Optional

from .ast import Span

__all__ = ["CompileError", "LexError", "ParseError", "TypeSystemError"]


class CompileError(RuntimeError):
    """Base class for lexing, parsing, and typing failures."""

    stage = "compile"

    def __init__(self, kind: str, detail: str = "", *, span: Optional[Span] = None) -> None:
        message = f"{kind}: {detail}" if detail else kind
        super().__init__(message)
        self.kind = kind
        self.detail = detail
        self.message = message
        self.span = span

    def describe(self, source: str, filename: str = "<sexp>") -> str:
        """Render ``filename:line:column: message`` using the error span."""

        if self.span is None:
            return f"{filename}: {self.message}"
        line, column = self.span.location(source)
        return f"{filename}:{line}:{column}: {self.message}"


class LexError(CompileError):
    """Raised when the source contains a fragment no token pattern matches."""

    stage = "lex"


class ParseError(CompileError):
    """Raised for ``mismatched delimiter`` and ``unclosed delimiter`` failures."""

    stage = "parse"


class TypeSystemError(CompileError):
    """Raised when constraint generation or unification fails.

    ``terms`` holds the conflicting type terms for unification failures.
    """

    stage = "type"

    def __init__(
        self,
        kind: str,
        detail: str = "",
        *,
        span: Optional[Span] = None,
        terms: tuple[object, ...] = (),
    ) -> None:
        super().__init__(kind, detail, span=span)
        self.terms = terms
