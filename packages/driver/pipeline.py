"""Compile pipeline: source text in, typed forms (and JavaScript) out.

Every top-level form is inferred in its own run with a fresh type variable
supply, so forms never share type variables.  Compile errors propagate to the
caller unchanged; nothing is printed here.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Optional

from packages.lang import grammar, printer, serializer, transpiler
from packages.lang.ast import Node
from packages.lang.errors import CompileError
from packages.lang.inference import Substitution, infer_types
from packages.lang.types import TypeTerm, format_type
from packages.telemetry import hooks
from packages.telemetry.logger import get_logger
from packages.utils.config import load_config

from .types import DriverConfig

_LOGGER = get_logger("sexpc.driver.pipeline")


@dataclass(slots=True)
class FormReport:
    """Outcome for one top-level form."""

    index: int
    node: Node
    root_type: Optional[TypeTerm] = None
    substitution: Optional[Substitution] = None
    javascript: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "index": self.index,
            "source": printer.to_source(self.node),
            "tree": serializer.serialize_node(self.node),
        }
        if self.root_type is not None:
            payload["type"] = format_type(self.root_type)
        if self.substitution is not None:
            payload["substitution"] = [
                [str(variable), format_type(replacement, raw=True)]
                for variable, replacement in self.substitution
            ]
        if self.javascript is not None:
            payload["javascript"] = self.javascript
        return payload


@dataclass(slots=True)
class CompileReport:
    """Aggregate of every form compiled from one source buffer."""

    filename: str
    forms: list[FormReport] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"filename": self.filename, "forms": [form.to_dict() for form in self.forms]}

    @property
    def javascript(self) -> str:
        emitted = [form.javascript for form in self.forms if form.javascript is not None]
        return "".join(f"{text};\n" for text in emitted)


def load_configuration(
    config_path: str | Path | None = None,
    *,
    overrides: Mapping[str, Any] | None = None,
) -> DriverConfig:
    """Return a :class:`DriverConfig` from ``config_path`` and overrides."""

    data: Mapping[str, Any] | None = None
    if config_path is not None:
        data = load_config(config_path)
    return DriverConfig.from_mapping(data).merge(overrides)


def compile_source(
    source: str,
    *,
    filename: str = "<sexp>",
    config: DriverConfig | None = None,
) -> CompileReport:
    """Lex, parse, type, and optionally emit every form in ``source``.

    Listeners of :data:`hooks.COMPILE_FAILED` see any :class:`CompileError`
    before it propagates.
    """

    config = config or DriverConfig()
    started = time.perf_counter()
    try:
        report = _compile_forms(source, filename, config)
    except CompileError as exc:
        hooks.compile_failed(
            hooks.CompileFailed(
                filename=filename,
                stage=exc.stage,
                kind=exc.kind,
                location=exc.span.location(source) if exc.span is not None else None,
                elapsed=time.perf_counter() - started,
            )
        )
        raise
    _LOGGER.info("compiled %s: %d form(s)", filename, len(report.forms))
    hooks.compile_completed(
        hooks.CompileCompleted(
            filename=filename,
            root_types=tuple(
                format_type(form.root_type) if form.root_type is not None else None
                for form in report.forms
            ),
            emitted_javascript=config.output.emit_javascript,
            elapsed=time.perf_counter() - started,
        )
    )
    return report


def _compile_forms(source: str, filename: str, config: DriverConfig) -> CompileReport:
    report = CompileReport(filename=filename)
    for index, node in enumerate(grammar.parse(source)):
        form = FormReport(index=index, node=node)
        if config.inference.enabled:
            result = infer_types(node)
            form.root_type = result.root_type
            form.substitution = result.substitution
            _LOGGER.debug(
                "%s form %d: %d constraint(s), %d binding(s)",
                filename,
                index,
                result.constraint_count,
                len(result.substitution),
            )
        if config.output.emit_javascript:
            form.javascript = _emit(node)
        report.forms.append(form)
    return report


def compile_file(path: str | Path, *, config: DriverConfig | None = None) -> CompileReport:
    source_path = Path(path)
    source = source_path.read_text(encoding="utf-8")
    return compile_source(source, filename=str(source_path), config=config)


def _emit(node: Node) -> str:
    try:
        return transpiler.transpile(node)
    except ValueError as exc:
        raise CompileError("emit failure", str(exc), span=node.span) from exc


__all__ = ["CompileReport", "FormReport", "compile_file", "compile_source", "load_configuration"]
