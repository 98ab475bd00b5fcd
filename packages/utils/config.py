"""YAML configuration loading for the driver."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

__all__ = ["load_config", "parse_config"]


def load_config(path: str | Path) -> dict[str, Any]:
    """Return the mapping stored in the YAML document at ``path``.

    Missing files raise :class:`FileNotFoundError`; malformed documents or a
    non-mapping root raise :class:`ValueError`.  An empty document yields an
    empty mapping so every section falls back to its defaults.
    """

    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"configuration file not found: {config_path}")
    return parse_config(config_path.read_text(encoding="utf-8"), source=str(config_path))


def parse_config(text: str, *, source: str = "<config>") -> dict[str, Any]:
    """Parse YAML ``text`` into a configuration mapping."""

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ValueError(f"failed to parse configuration {source}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"configuration root must be a mapping in {source}")
    return data
