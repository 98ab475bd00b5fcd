"""Typed configuration objects for the compiler driver."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

OUTPUT_FORMATS = ("text", "json")


def _deep_update(base: Mapping[str, Any], updates: Mapping[str, Any]) -> dict[str, Any]:
    """Return ``base`` with ``updates`` recursively merged."""

    result: dict[str, Any] = {key: value for key, value in base.items()}
    for key, value in updates.items():
        if isinstance(value, Mapping) and isinstance(result.get(key), Mapping):
            result[key] = _deep_update(result[key], value)
        else:
            result[key] = value
    return result


def _coerce_bool(value: Any, *, fallback: bool) -> bool:
    if value is None:
        return fallback
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"1", "true", "yes", "on"}:
            return True
        if lowered in {"0", "false", "no", "off"}:
            return False
        raise ValueError(f"expected a boolean, found {value!r}")
    return bool(value)


def _section(payload: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    value = payload.get(name)
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ValueError(f"configuration section '{name}' must be a mapping")
    return value


@dataclass(slots=True)
class InferenceOptions:
    """Controls whether forms are type checked before output."""

    enabled: bool = True


@dataclass(slots=True)
class OutputOptions:
    """What the driver prints for each compiled form."""

    format: str = "text"
    show_types: bool = False
    show_substitution: bool = False
    emit_javascript: bool = False

    def __post_init__(self) -> None:
        if self.format not in OUTPUT_FORMATS:
            expected = ", ".join(OUTPUT_FORMATS)
            raise ValueError(f"unknown output format {self.format!r}; expected one of {expected}")


@dataclass(slots=True)
class DriverConfig:
    """Top-level driver configuration bundle."""

    inference: InferenceOptions = field(default_factory=InferenceOptions)
    output: OutputOptions = field(default_factory=OutputOptions)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None) -> "DriverConfig":
        payload = dict(data or {})
        inference_data = _section(payload, "inference")
        output_data = _section(payload, "output")
        defaults = OutputOptions()
        return cls(
            inference=InferenceOptions(
                enabled=_coerce_bool(inference_data.get("enabled"), fallback=True)
            ),
            output=OutputOptions(
                format=str(output_data.get("format", defaults.format)),
                show_types=_coerce_bool(
                    output_data.get("show_types"), fallback=defaults.show_types
                ),
                show_substitution=_coerce_bool(
                    output_data.get("show_substitution"), fallback=defaults.show_substitution
                ),
                emit_javascript=_coerce_bool(
                    output_data.get("emit_javascript"), fallback=defaults.emit_javascript
                ),
            ),
        )

    def merge(self, overrides: Mapping[str, Any] | None) -> "DriverConfig":
        if not overrides:
            return self
        return DriverConfig.from_mapping(_deep_update(self.to_dict(), overrides))

    def to_dict(self) -> dict[str, Any]:
        return {
            "inference": {"enabled": self.inference.enabled},
            "output": {
                "format": self.output.format,
                "show_types": self.output.show_types,
                "show_substitution": self.output.show_substitution,
                "emit_javascript": self.output.emit_javascript,
            },
        }


__all__ = ["DriverConfig", "InferenceOptions", "OUTPUT_FORMATS", "OutputOptions"]
