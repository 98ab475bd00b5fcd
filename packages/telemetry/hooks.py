"""Compiler run notifications.

The driver announces the end of every compile, successful or not, so tooling
(editors, watchers, test harnesses) can observe runs without parsing CLI
output.  Listeners subscribe by event name and receive a :class:`HookEvent`
whose payload is one of the typed records below; ad-hoc events may still carry
a plain mapping, which is frozen before delivery.  A listener that raises is
logged and skipped.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from threading import RLock
from types import MappingProxyType
from typing import Any, Callable, Dict, Mapping, Optional, Union

from . import logger

COMPILE_COMPLETED = "compiler.run.completed"
COMPILE_FAILED = "compiler.run.failed"


@dataclass(frozen=True, slots=True)
class CompileCompleted:
    """Summary of a compile that produced a report.

    ``root_types`` holds the user-facing type of each top-level form in
    source order, or ``None`` per form when inference was disabled.
    """

    filename: str
    root_types: tuple[Optional[str], ...]
    emitted_javascript: bool
    elapsed: float

    @property
    def forms(self) -> int:
        return len(self.root_types)

    @property
    def typed(self) -> bool:
        return all(root is not None for root in self.root_types)


@dataclass(frozen=True, slots=True)
class CompileFailed:
    """A compile aborted by a lexing, parsing, typing, or emit error."""

    filename: str
    stage: str
    kind: str
    location: Optional[tuple[int, int]]
    elapsed: float


Payload = Union[CompileCompleted, CompileFailed, Mapping[str, Any]]
HookFn = Callable[["HookEvent"], None]


@dataclass(frozen=True)
class HookEvent:
    name: str
    payload: Payload
    timestamp: float


class HookHandle:
    """Subscription token; closing it (or leaving its ``with`` block) unsubscribes."""

    def __init__(self, name: str, fn: HookFn) -> None:
        self._name = name
        self._fn = fn
        self._closed = False

    def close(self) -> None:
        if not self._closed:
            unregister_hook(self._name, self._fn)
            self._closed = True

    def __enter__(self) -> "HookHandle":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


_LOCK = RLock()
_LISTENERS: Dict[str, list[HookFn]] = {}
_LOGGER = logger.get_logger("sexpc.telemetry.hooks")


def register_hook(name: str, fn: HookFn) -> HookHandle:
    if not isinstance(name, str) or not name:
        raise ValueError("hook name must be a non-empty string")
    if not callable(fn):
        raise TypeError("hook callback must be callable")
    with _LOCK:
        _LISTENERS.setdefault(name, []).append(fn)
    return HookHandle(name, fn)


def unregister_hook(name: str, fn: HookFn) -> None:
    with _LOCK:
        listeners = _LISTENERS.get(name, [])
        if fn in listeners:
            listeners.remove(fn)
        if not listeners:
            _LISTENERS.pop(name, None)


def dispatch(name: str, payload: Payload | None = None) -> HookEvent:
    """Deliver ``payload`` to every listener of ``name`` and return the event."""

    if payload is None or isinstance(payload, Mapping):
        payload = MappingProxyType(dict(payload or {}))
    event = HookEvent(name=name, payload=payload, timestamp=time.time())
    with _LOCK:
        listeners = tuple(_LISTENERS.get(name, ()))
    for fn in listeners:
        try:
            fn(event)
        except Exception:
            _LOGGER.exception("listener for %s failed", name)
    return event


def compile_completed(summary: CompileCompleted) -> HookEvent:
    _LOGGER.debug(
        "%s: %d form(s) in %.3fs", summary.filename, summary.forms, summary.elapsed
    )
    return dispatch(COMPILE_COMPLETED, summary)


def compile_failed(failure: CompileFailed) -> HookEvent:
    _LOGGER.debug("%s: %s error %r", failure.filename, failure.stage, failure.kind)
    return dispatch(COMPILE_FAILED, failure)


def registered_hooks() -> Mapping[str, tuple[HookFn, ...]]:
    with _LOCK:
        return {name: tuple(listeners) for name, listeners in _LISTENERS.items()}


__all__ = [
    "COMPILE_COMPLETED",
    "COMPILE_FAILED",
    "CompileCompleted",
    "CompileFailed",
    "HookEvent",
    "HookFn",
    "HookHandle",
    "Payload",
    "compile_completed",
    "compile_failed",
    "dispatch",
    "register_hook",
    "registered_hooks",
    "unregister_hook",
]
