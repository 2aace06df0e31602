"""
zkverify.logging
----------------

Logging setup for the verifier library and its command line tool.

- JSON or concise text formats
- Safe JSON serialization of extras (bytes → length only, Paths → str)
- Stdlib only; library modules just call `get_logger(__name__)`

Usage
-----
    from zkverify import logging as zlog

    zlog.configure(json=False, level="DEBUG")   # once, at process start
    log = zlog.get_logger(__name__)
    log.debug("prepared key", extra={"num_public_inputs": 2})

Library code never configures handlers on import; only the CLI (or the host
application) calls `configure`.
"""

from __future__ import annotations

import datetime as _dt
import io
import json
import logging
import os
import sys
import traceback
from pathlib import Path
from typing import Any, Dict, Optional

ROOT_LOGGER_NAME = "zkverify"

_LEVEL_TO_INT = {
    "CRITICAL": logging.CRITICAL,
    "ERROR": logging.ERROR,
    "WARNING": logging.WARNING,
    "INFO": logging.INFO,
    "DEBUG": logging.DEBUG,
    "NOTSET": logging.NOTSET,
}

# LogRecord attributes that are not user-supplied extras.
_RESERVED = frozenset(
    (
        "name",
        "msg",
        "args",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "exc_info",
        "exc_text",
        "stack_info",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "taskName",
        "message",
    )
)


def _utcnow_iso() -> str:
    return _dt.datetime.now(_dt.timezone.utc).isoformat(timespec="milliseconds")


def _coerce_value(v: Any) -> Any:
    if v is None or isinstance(v, (bool, int, float, str)):
        return v
    if isinstance(v, (bytes, bytearray, memoryview)):
        # Key and proof material is never logged, only its size.
        return f"<{len(v)} bytes>"
    if isinstance(v, Path):
        return str(v)
    if isinstance(v, (list, tuple)):
        return [_coerce_value(x) for x in v]
    if isinstance(v, dict):
        return {str(k): _coerce_value(x) for k, x in v.items()}
    return str(v)


def _extras(record: logging.LogRecord) -> Dict[str, Any]:
    return {
        k: _coerce_value(v)
        for k, v in record.__dict__.items()
        if not k.startswith("_") and k not in _RESERVED
    }


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "ts": _utcnow_iso(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        for k, v in _extras(record).items():
            payload.setdefault(k, v)
        if record.exc_info:
            payload["err"] = "".join(traceback.format_exception(*record.exc_info)).rstrip()
        return json.dumps(payload, separators=(",", ":"), default=str)


class TextFormatter(logging.Formatter):
    """
    Human-friendly one-liner:
      2026-01-05T12:34:56.789+00:00 | DEBUG | zkverify.api | inputs=2 | verified proof
    """

    def format(self, record: logging.LogRecord) -> str:
        line = f"{_utcnow_iso()} | {record.levelname:<5} | {record.name}"
        extras = _extras(record)
        if extras:
            line += " | " + " ".join(f"{k}={v}" for k, v in extras.items())
        line += f" | {record.getMessage()}"
        if record.exc_info:
            line += "\n" + "".join(traceback.format_exception(*record.exc_info)).rstrip()
        return line


def configure(
    *,
    json: Optional[bool] = None,
    level: str | int = "WARNING",
    stream: io.TextIOBase = sys.stderr,
) -> None:
    """
    Configure the `zkverify` logger hierarchy.

    Parameters
    ----------
    json : bool | None
        If None, determined by env ZKVERIFY_LOG_FORMAT=(json|text); default text.
    level : str | int
        Minimum log level.
    stream : TextIO
        Stream for the console handler (default: stderr).
    """
    chosen_json = _env_json_override() if json is None else json
    lvl = coerce_level(level)

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(lvl)
    for h in list(logger.handlers):
        logger.removeHandler(h)

    console = logging.StreamHandler(stream)
    console.setLevel(lvl)
    console.setFormatter(JSONFormatter() if chosen_json else TextFormatter())
    logger.addHandler(console)
    logger.propagate = False


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Get a logger inside the `zkverify` hierarchy."""
    if not name:
        return logging.getLogger(ROOT_LOGGER_NAME)
    if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def coerce_level(level: str | int) -> int:
    if isinstance(level, int):
        return level
    return _LEVEL_TO_INT.get(level.strip().upper(), logging.INFO)


def _env_json_override() -> bool:
    return os.environ.get("ZKVERIFY_LOG_FORMAT", "").strip().lower() == "json"


__all__ = [
    "ROOT_LOGGER_NAME",
    "JSONFormatter",
    "TextFormatter",
    "configure",
    "get_logger",
    "coerce_level",
]
