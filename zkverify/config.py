"""
zkverify configuration loader.

Layered config with clear precedence:
    1) Explicit overrides passed to `load_config()` (highest)
    2) Environment variables (ZKVERIFY_*)
    3) Built-in defaults (lowest)

Only tool-level concerns live here (curve selection, logging, worker pool
size, resource caps for the CLI). The verification core itself is pure and
takes no configuration.

Environment
-----------
- ZKVERIFY_CURVE              curve id (default "bn254")
- ZKVERIFY_LOG_LEVEL          DEBUG | INFO | WARNING | ERROR (default WARNING)
- ZKVERIFY_LOG_FORMAT         text | json (default text)
- ZKVERIFY_MAX_WORKERS        worker processes for batch verification
- ZKVERIFY_MAX_PUBLIC_INPUTS  reject requests with more public inputs
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Any, Mapping, Optional

from zkverify.curves import normalize_curve_id
from zkverify.errors import ConfigError, UnsupportedCurve

DEFAULT_CURVE = "bn254"
DEFAULT_LOG_LEVEL = "WARNING"
DEFAULT_LOG_FORMAT = "text"
DEFAULT_MAX_PUBLIC_INPUTS = 1024

_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")
_LOG_FORMATS = ("text", "json")


def _default_workers() -> int:
    return max(1, os.cpu_count() or 1)


@dataclass(frozen=True)
class VerifierConfig:
    curve: str = DEFAULT_CURVE
    log_level: str = DEFAULT_LOG_LEVEL
    log_format: str = DEFAULT_LOG_FORMAT
    max_workers: int = 1
    max_public_inputs: int = DEFAULT_MAX_PUBLIC_INPUTS

    def validate(self) -> "VerifierConfig":
        try:
            curve = normalize_curve_id(self.curve).value
        except UnsupportedCurve as e:
            raise ConfigError(f"invalid curve: {self.curve!r}", field="curve") from e
        level = str(self.log_level).strip().upper()
        if level not in _LOG_LEVELS:
            raise ConfigError(f"invalid log level: {self.log_level!r}", field="log_level")
        fmt = str(self.log_format).strip().lower()
        if fmt not in _LOG_FORMATS:
            raise ConfigError(f"invalid log format: {self.log_format!r}", field="log_format")
        if self.max_workers < 1:
            raise ConfigError("max_workers must be >= 1", field="max_workers")
        if self.max_public_inputs < 0:
            raise ConfigError("max_public_inputs must be >= 0", field="max_public_inputs")
        return replace(self, curve=curve, log_level=level, log_format=fmt)


def _env_int(env: Mapping[str, str], name: str) -> Optional[int]:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return None
    try:
        return int(raw.strip())
    except ValueError as e:
        raise ConfigError(f"{name} must be an integer, got {raw!r}", field=name) from e


def load_config(
    overrides: Optional[Mapping[str, Any]] = None,
    *,
    env: Optional[Mapping[str, str]] = None,
) -> VerifierConfig:
    """
    Build a validated VerifierConfig from defaults, environment and overrides.

    `env` defaults to `os.environ`; tests pass a plain dict.
    """
    env = os.environ if env is None else env
    values: dict[str, Any] = {
        "curve": env.get("ZKVERIFY_CURVE", DEFAULT_CURVE),
        "log_level": env.get("ZKVERIFY_LOG_LEVEL", DEFAULT_LOG_LEVEL),
        "log_format": env.get("ZKVERIFY_LOG_FORMAT", DEFAULT_LOG_FORMAT),
        "max_workers": _env_int(env, "ZKVERIFY_MAX_WORKERS") or _default_workers(),
        "max_public_inputs": _env_int(env, "ZKVERIFY_MAX_PUBLIC_INPUTS"),
    }
    if values["max_public_inputs"] is None:
        values["max_public_inputs"] = DEFAULT_MAX_PUBLIC_INPUTS

    for k, v in (overrides or {}).items():
        if v is None:
            continue
        if k not in values:
            raise ConfigError(f"unknown config key: {k!r}", field=k)
        values[k] = v

    return VerifierConfig(**values).validate()


__all__ = [
    "VerifierConfig",
    "load_config",
    "DEFAULT_CURVE",
    "DEFAULT_LOG_LEVEL",
    "DEFAULT_LOG_FORMAT",
    "DEFAULT_MAX_PUBLIC_INPUTS",
]
