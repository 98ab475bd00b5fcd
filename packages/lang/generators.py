"""Helper utilities for loading the bundled sample programs used in tests.

The project includes several small ``.sexp`` fixtures that capture the flavour
of programs we expect the parser and inference engine to handle.  The helpers
here load and parse those fixtures on demand so tests can focus on semantic
checks instead of I/O boilerplate.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator

from . import grammar
from .ast import Node

FIXTURE_ROOT = Path(__file__).resolve().parents[2] / "tests" / "python" / "fixtures" / "programs"


@dataclass(frozen=True)
class SampleProgram:
    """Container bundling parsed forms with their source."""

    name: str
    path: Path
    source: str
    forms: list[Node]


def load_sample_programs(root: Path | None = None) -> Iterable[SampleProgram]:
    """Yield parsed representations of the bundled sample programs.

    Parameters
    ----------
    root:
        Optional directory override.  When omitted the default fixture
        collection under ``tests/python/fixtures/programs`` is used.
    """

    yield from _iter_programs(root or FIXTURE_ROOT)


def _iter_programs(root: Path) -> Iterator[SampleProgram]:
    if not root.exists():
        return
    for path in sorted(root.glob("*.sexp")):
        source = path.read_text(encoding="utf-8")
        yield SampleProgram(name=path.stem, path=path, source=source, forms=grammar.parse(source))


__all__ = ["SampleProgram", "load_sample_programs"]
