"""
Logging configuration with sensitive-field redaction.

All modules log through the standard library (`logging.getLogger(__name__)`).
`setup_logging()` installs:

  - a console handler (always),
  - `combined.log` and `error.log` file handlers when a log directory is set.

Every handler carries a `RedactingFilter`. Structured payloads passed either
as the single mapping argument of a log call or through `extra=` are walked
recursively and any key that looks sensitive has its value replaced with
`REDACTED` before the record is formatted.
"""

import json
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

REDACTED = "***REDACTED***"

# Case-insensitive substring match against mapping keys.
SENSITIVE_TERMS: tuple[str, ...] = (
    "password",
    "secret",
    "token",
    "key",
    "credential",
    "auth",
    "private_key",
    "authorization",
)

# Attributes every LogRecord has; anything else came in through `extra=`.
_RECORD_ATTRS = frozenset(logging.LogRecord("", 0, "", 0, "", (), None).__dict__) | {
    "message",
    "asctime",
    "taskName",
    "color_message",  # uvicorn
}


def is_sensitive(key: Any) -> bool:
    lowered = str(key).lower()
    return any(term in lowered for term in SENSITIVE_TERMS)


def redact(value: Any) -> Any:
    """Return a copy of `value` with sensitive mapping entries masked.

    Walks mappings, lists and tuples to any depth. Scalars are returned as-is.
    The input is never mutated.

    >>> redact({"user": "a", "password": "p@ss"})
    {'user': 'a', 'password': '***REDACTED***'}
    """
    if isinstance(value, Mapping):
        return {
            k: REDACTED if is_sensitive(k) else redact(v)
            for k, v in value.items()
        }
    if isinstance(value, list):
        return [redact(item) for item in value]
    if isinstance(value, tuple):
        return tuple(redact(item) for item in value)
    return value


def extra_fields(record: logging.LogRecord) -> dict[str, Any]:
    return {k: v for k, v in record.__dict__.items() if k not in _RECORD_ATTRS}


class RedactingFilter(logging.Filter):
    """Masks sensitive values in the message, record args and `extra=` fields."""

    def filter(self, record: logging.LogRecord) -> bool:
        # logger.info({"user": ..., "password": ...}) puts the payload in msg itself
        if isinstance(record.msg, (Mapping, list, tuple)):
            record.msg = redact(record.msg)

        if isinstance(record.args, Mapping):
            record.args = redact(record.args)
        elif isinstance(record.args, tuple):
            record.args = tuple(redact(arg) for arg in record.args)

        for key, value in extra_fields(record).items():
            setattr(record, key, REDACTED if is_sensitive(key) else redact(value))
        return True


class StructuredFormatter(logging.Formatter):
    """Plain text line, followed by the `extra=` payload as JSON when present."""

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        extras = extra_fields(record)
        if extras:
            line = f"{line} {json.dumps(extras, default=str, sort_keys=True)}"
        return line


def is_configured() -> bool:
    """True once the root logger carries a handler installed by setup_logging()."""
    return any(
        isinstance(f, RedactingFilter)
        for handler in logging.getLogger().handlers
        for f in handler.filters
    )


def setup_logging(level: str = "info", log_dir: str | None = None, force: bool = False) -> None:
    """Install the redacting handlers on the root logger.

    Both the entry point and the app lifespan call this; the second call is a
    no-op unless `force` is set.
    """
    if is_configured() and not force:
        return

    handlers: list[logging.Handler] = [logging.StreamHandler()]

    if log_dir:
        directory = Path(log_dir)
        directory.mkdir(parents=True, exist_ok=True)
        error_handler = logging.FileHandler(directory / "error.log", encoding="utf-8")
        error_handler.setLevel(logging.ERROR)
        handlers.append(error_handler)
        handlers.append(logging.FileHandler(directory / "combined.log", encoding="utf-8"))

    formatter = StructuredFormatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    for handler in handlers:
        handler.setFormatter(formatter)
        handler.addFilter(RedactingFilter())

    logging.basicConfig(level=level.upper(), handlers=handlers, force=True)
