"""Tests for logging, hook registration, and YAML configuration helpers."""

from __future__ import annotations

import logging

import pytest

from packages.telemetry import hooks, logger
from packages.utils.config import load_config, parse_config


def test_get_logger_requires_name() -> None:
    with pytest.raises(ValueError):
        logger.get_logger("")
    assert isinstance(logger.get_logger("sexpc.tests"), logging.Logger)


def test_level_override_from_environment(monkeypatch) -> None:
    monkeypatch.setenv(logger.LEVEL_ENV_VAR, "debug")
    logger.configure(force=True)
    try:
        assert logging.getLogger(logger.LOGGER_NAMESPACE).level == logging.DEBUG
    finally:
        monkeypatch.delenv(logger.LEVEL_ENV_VAR)
        logger.configure(force=True)


def test_register_hook_validates_arguments() -> None:
    with pytest.raises(ValueError):
        hooks.register_hook("", lambda event: None)
    with pytest.raises(TypeError):
        hooks.register_hook("custom.event", "not callable")  # type: ignore[arg-type]


def test_hook_handle_close_is_idempotent() -> None:
    seen: list[str] = []
    handle = hooks.register_hook("custom.event", lambda event: seen.append(event.name))
    hooks.dispatch("custom.event", {"n": 1})
    handle.close()
    handle.close()
    hooks.dispatch("custom.event")
    assert seen == ["custom.event"]


def test_load_config_reads_mapping(tmp_path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text("output:\n  format: text\n", encoding="utf-8")
    assert load_config(path) == {"output": {"format": "text"}}


def test_load_config_errors(tmp_path) -> None:
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "missing.yaml")
    with pytest.raises(ValueError):
        parse_config("- just\n- a list\n")
    with pytest.raises(ValueError):
        parse_config("key: [unclosed\n")
    assert parse_config("") == {}


def test_mapping_payloads_are_frozen() -> None:
    event = hooks.dispatch("custom.event", {"n": 1})
    assert event.payload == {"n": 1}
    with pytest.raises(TypeError):
        event.payload["n"] = 2  # type: ignore[index]
