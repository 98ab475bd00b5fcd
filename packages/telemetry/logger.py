"""Logging helpers shared by the driver and tooling.

Configuration is read once from ``configs/logging.yaml`` (falling back to a
built-in console configuration) and applied with :func:`logging.config.dictConfig`.
The ``SEXPC_LOG_LEVEL`` environment variable overrides the ``sexpc`` logger
level without editing the YAML file.
"""

from __future__ import annotations

import logging
import logging.config
import os
from pathlib import Path
from threading import RLock
from typing import Any, Mapping

import yaml

LOGGER_NAMESPACE = "sexpc"
LEVEL_ENV_VAR = "SEXPC_LOG_LEVEL"
CONFIG_PATH = Path(__file__).resolve().parents[2] / "configs" / "logging.yaml"

_CONFIG_LOCK = RLock()
_CONFIGURED = False

_DEFAULT_CONFIG: dict[str, Any] = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "standard": {
            "format": "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        }
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "stream": "ext://sys.stderr",
            "formatter": "standard",
        }
    },
    "root": {
        "level": "WARNING",
        "handlers": ["console"],
    },
    "loggers": {
        LOGGER_NAMESPACE: {
            "level": "WARNING",
            "handlers": ["console"],
            "propagate": False,
        }
    },
}

_ALLOWED_KEYS = ("version", "disable_existing_loggers", "formatters", "handlers", "root", "loggers")


def _load_config(path: Path = CONFIG_PATH) -> dict[str, Any]:
    if not path.exists():
        return dict(_DEFAULT_CONFIG)
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:  # pragma: no cover - guard rails for broken configs
        logging.basicConfig(level=logging.WARNING)
        logging.getLogger(f"{LOGGER_NAMESPACE}.telemetry").warning(
            "failed to parse %s: %s", path.name, exc
        )
        return dict(_DEFAULT_CONFIG)
    if not isinstance(data, Mapping):
        return dict(_DEFAULT_CONFIG)
    merged = dict(_DEFAULT_CONFIG)
    merged.update({k: v for k, v in data.items() if k in _ALLOWED_KEYS})
    return merged


def _apply_level_override(config: dict[str, Any]) -> dict[str, Any]:
    level = os.environ.get(LEVEL_ENV_VAR)
    if not level:
        return config
    loggers = dict(config.get("loggers") or {})
    namespace = dict(loggers.get(LOGGER_NAMESPACE) or {})
    namespace["level"] = level.upper()
    loggers[LOGGER_NAMESPACE] = namespace
    return {**config, "loggers": loggers}


def configure(*, force: bool = False) -> None:
    """Ensure the logging subsystem is configured exactly once."""

    global _CONFIGURED
    with _CONFIG_LOCK:
        if _CONFIGURED and not force:
            return
        logging.config.dictConfig(_apply_level_override(_load_config()))
        _CONFIGURED = True


def get_logger(name: str) -> logging.Logger:
    """Return a logger configured via ``configs/logging.yaml``."""

    if not isinstance(name, str) or not name:
        raise ValueError("logger name must be a non-empty string")
    configure()
    return logging.getLogger(name)


__all__ = ["LEVEL_ENV_VAR", "LOGGER_NAMESPACE", "configure", "get_logger"]
