"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Pipeline settings and explicit config loading.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from .errors import PipelineConfigError

MetricsBackend = Literal["noop", "prometheus"]

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _env_first(*names: str, default: str | None = None) -> str | None:
    """
    Return the first non-empty environment variable in `names`.

    Args:
        *names: Environment variable names to check in order.
        default: Value returned if no non-empty variable is found.
    """
    for name in names:
        raw = os.getenv(name)
        if raw is None:
            continue
        value = raw.strip()
        if value:
            return value
    return default


def _split_keys(raw: str | None) -> tuple[str, ...] | None:
    if raw is None:
        return None
    return tuple(part.strip() for part in raw.split(",") if part.strip())


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise PipelineConfigError(f"{name} must be a boolean, got '{raw}'")


class PipelineSettings(BaseModel):
    """
    Explicit settings used to wire a unit pipeline.

    Attributes:
        enabled_units: When set, only these unit keys are registered.
        disabled_units: Unit keys never registered.
        warn_on_cycles: Log a warning when the dependency graph has a cycle.
        metrics_backend: ``noop`` or ``prometheus``.
        metrics_namespace: Namespace prefix for exported metrics.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    enabled_units: tuple[str, ...] | None = None
    disabled_units: tuple[str, ...] = ()
    warn_on_cycles: bool = True
    metrics_backend: MetricsBackend = "noop"
    metrics_namespace: str = "mosaic"

    @field_validator("enabled_units", "disabled_units", mode="before")
    @classmethod
    def _normalize_keys(cls, value: Any) -> Any:
        if value is None:
            return None
        if isinstance(value, str):
            value = value.split(",")
        return tuple(dict.fromkeys(str(key).strip() for key in value if str(key).strip()))

    @field_validator("metrics_backend", mode="before")
    @classmethod
    def _normalize_backend(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("metrics_namespace")
    @classmethod
    def _require_namespace(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("metrics_namespace must be non-empty")
        return value.strip()

    def allows(self, unit_key: str) -> bool:
        """Whether `unit_key` passes the enabled/disabled filters."""
        if unit_key in self.disabled_units:
            return False
        return self.enabled_units is None or unit_key in self.enabled_units

    @staticmethod
    def from_mapping(data: Mapping[str, Any]) -> "PipelineSettings":
        """Validate settings from a plain mapping (for example a parsed config file)."""
        try:
            return PipelineSettings.model_validate(dict(data))
        except ValidationError as exc:
            raise PipelineConfigError(f"Invalid pipeline settings: {exc}") from exc

    @staticmethod
    def from_env() -> "PipelineSettings":
        """Load settings from `MOSAIC_*` environment variables."""
        data: dict[str, Any] = {}
        enabled = _split_keys(_env_first("MOSAIC_UNITS_ENABLED"))
        if enabled is not None:
            data["enabled_units"] = enabled
        disabled = _split_keys(_env_first("MOSAIC_UNITS_DISABLED"))
        if disabled is not None:
            data["disabled_units"] = disabled
        warn = _env_first("MOSAIC_WARN_ON_CYCLES")
        if warn is not None:
            data["warn_on_cycles"] = _parse_bool("MOSAIC_WARN_ON_CYCLES", warn)
        data["metrics_backend"] = _env_first("MOSAIC_METRICS_BACKEND", default="noop")
        data["metrics_namespace"] = _env_first(
            "MOSAIC_METRICS_NAMESPACE", default="mosaic"
        )
        return PipelineSettings.from_mapping(data)
