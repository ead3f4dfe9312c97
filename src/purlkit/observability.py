"""
purlkit — JSON-lines logging

File: src/purlkit/observability.py
Last updated: 2026-10-17

Purpose
- Install a JSON-lines handler on the ``purlkit`` logger so that records
  emitted by the engine modules (normalizer fallbacks, config overrides,
  URL derivation misses) can be collected as structured events.

What should be included in this file
- ``LoggingConfig`` describing the destination, level and redaction.
- ``setup_logging``/``shutdown_logging`` managing one owned handler per logger.
- Credential redaction for URL userinfo, secret assignments, bearer tokens and
  secret-named ``extra`` fields.

Functional requirements
- Repeated setup replaces the handler it installed earlier; foreign handlers
  are left alone.
"""

from __future__ import annotations

import json
import logging
import math
import re
import threading
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import IO, Final

JSONScalar = str | int | float | bool | None
JSONValue = JSONScalar | list["JSONValue"] | dict[str, "JSONValue"]
LogRedactor = Callable[[JSONValue], JSONValue]

REDACTED: Final[str] = "***REDACTED***"
PACKAGE_LOGGER: Final[str] = "purlkit"

# Attributes every LogRecord carries; anything else arrived through ``extra``.
_RECORD_ATTRIBUTES: Final[frozenset[str]] = frozenset(vars(logging.makeLogRecord({}))) | {
    "message",
    "asctime",
}

_SECRET_KEY_RE: Final[re.Pattern[str]] = re.compile(
    r"(?i)secret|token|pass(?:word|phrase)|api_?key|authorization|credential|private_key"
)
# Qualifier values such as download_url or vcs_url may embed "user:pass@".
_SECRET_SUBSTITUTIONS: Final[tuple[tuple[re.Pattern[str], str], ...]] = (
    (re.compile(r"(?i)\b([a-z][a-z0-9+.-]*://)[^/\s@]+@"), rf"\1{REDACTED}@"),
    (
        re.compile(
            r"(?i)\b(api[_-]?key|token|password|secret|authorization)\b\s*([:=])\s*([^\s,;&]+)"
        ),
        rf"\1\2{REDACTED}",
    ),
    (re.compile(r"(?i)\bbearer\s+[A-Za-z0-9._~+/-]+=*"), f"Bearer {REDACTED}"),
)

_SETUP_LOCK = threading.Lock()


@dataclass(frozen=True, slots=True)
class LoggingConfig:
    """Where and how purlkit log records are written."""

    logger_name: str = PACKAGE_LOGGER
    level: int | str = "WARNING"
    log_path: Path | str | None = None
    stream: IO[str] | None = None
    redact_secrets: bool = True
    redactor: LogRedactor | None = None


class JsonLinesFormatter(logging.Formatter):
    """One JSON object per record: timestamp, level, logger, message, fields, exception."""

    converter = time.gmtime
    default_time_format = "%Y-%m-%dT%H:%M:%S"
    default_msec_format = "%s.%03dZ"

    def __init__(self, redactor: LogRedactor | None = None) -> None:
        super().__init__()
        self.redactor = redactor or _keep

    def format(self, record: logging.LogRecord) -> str:
        event: dict[str, JSONValue] = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": _as_text(self.redactor(record.getMessage())),
        }
        fields = {
            key: _jsonable(value)
            for key, value in vars(record).items()
            if key not in _RECORD_ATTRIBUTES and not key.startswith("_")
        }
        if fields:
            event["fields"] = self.redactor(fields)
        if record.exc_info:
            event["exception"] = _as_text(self.redactor(self.formatException(record.exc_info)))
        return json.dumps(event, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def setup_logging(config: LoggingConfig | None = None) -> logging.Logger:
    """Attach a JSON-lines handler to ``config.logger_name`` and return that logger.

    The logger level is set to ``config.level``. A handler installed by an
    earlier call for the same logger is closed and replaced.
    """

    config = config or LoggingConfig()
    if not isinstance(config.logger_name, str) or not config.logger_name.strip():
        raise ValueError("logger_name must not be empty")
    level = resolve_level(config.level)

    if config.redactor is not None:
        redactor = config.redactor
    else:
        redactor = default_log_redactor if config.redact_secrets else _keep

    handler: logging.Handler
    if config.log_path is None:
        handler = logging.StreamHandler(config.stream)
    else:
        path = Path(config.log_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(path, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(JsonLinesFormatter(redactor))

    logger = logging.getLogger(config.logger_name.strip())
    with _SETUP_LOCK:
        _detach_owned(logger)
        logger.setLevel(level)
        logger.addHandler(handler)
    return logger


def shutdown_logging(logger_name: str = PACKAGE_LOGGER) -> None:
    """Flush, close and detach the handler ``setup_logging`` installed."""

    with _SETUP_LOCK:
        _detach_owned(logging.getLogger(logger_name))


def resolve_level(level: int | str) -> int:
    """Map a level name (any case) or number to the numeric ``logging`` level."""

    if isinstance(level, bool) or not isinstance(level, (int, str)):
        raise ValueError(f"unsupported logging level {level!r}")
    if isinstance(level, int):
        return level
    try:
        return logging.getLevelNamesMapping()[level.strip().upper()]
    except KeyError:
        raise ValueError(f"unsupported logging level {level!r}") from None


def default_log_redactor(value: JSONValue) -> JSONValue:
    """Return ``value`` with credentials masked, walking lists and dicts."""

    if isinstance(value, str):
        for pattern, replacement in _SECRET_SUBSTITUTIONS:
            value = pattern.sub(replacement, value)
        return value
    if isinstance(value, list):
        return [default_log_redactor(item) for item in value]
    if isinstance(value, dict):
        return {
            key: REDACTED if _SECRET_KEY_RE.search(key) else default_log_redactor(item)
            for key, item in value.items()
        }
    return value


# ---------------------------------------------------------------------------
# Internal helper routines
# ---------------------------------------------------------------------------


def _detach_owned(logger: logging.Logger) -> None:
    for handler in list(logger.handlers):
        if isinstance(handler.formatter, JsonLinesFormatter):
            logger.removeHandler(handler)
            handler.flush()
            handler.close()


def _keep(value: JSONValue) -> JSONValue:
    return value


def _as_text(value: JSONValue) -> str:
    if isinstance(value, str):
        return value
    return "" if value is None else json.dumps(value, sort_keys=True, ensure_ascii=False)


def _jsonable(value: object) -> JSONValue:
    if isinstance(value, Mapping):
        return {str(key): _jsonable(item) for key, item in value.items()}
    if isinstance(value, (set, frozenset)):
        return sorted((_jsonable(item) for item in value), key=repr)
    if isinstance(value, (list, tuple)):
        return [_jsonable(item) for item in value]
    if isinstance(value, float) and not math.isfinite(value):
        return repr(value)
    if value is None or isinstance(value, (str, int, float)):
        return value
    return str(value)


__all__ = [
    "PACKAGE_LOGGER",
    "REDACTED",
    "JSONScalar",
    "JSONValue",
    "JsonLinesFormatter",
    "LogRedactor",
    "LoggingConfig",
    "default_log_redactor",
    "resolve_level",
    "setup_logging",
    "shutdown_logging",
]
