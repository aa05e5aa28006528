"""
Structured Logger
=================

Structured logging for the call pipeline with request-id injection.

Design:
  - JSON output for machine parsing, one line per record
  - Human-readable fallback for development
  - Request context (request_id, action_type) carried in ContextVars, so
    concurrent calls on one event loop never see each other's ids
  - Events are short snake_case names; details go in keyword fields
"""

from __future__ import annotations

import json
import logging
import sys
from contextvars import ContextVar, Token
from datetime import UTC, datetime
from typing import Any

# ── Context Variables ──────────────────────────────────────────────

_request_id: ContextVar[str | None] = ContextVar("request_id", default=None)
_action_type: ContextVar[str | None] = ContextVar("action_type", default=None)

def set_request_context(
    *,
    request_id: str | None = None,
    action_type: str | None = None,
) -> list[Token[str | None]]:
    """
    Set request-scoped context for log enrichment.

    Returns the tokens to hand to :func:`reset_request_context`, which
    restores whatever context was active before (e.g. an enclosing request).
    """
    tokens = []
    if request_id is not None:
        tokens.append(_request_id.set(request_id))
    if action_type is not None:
        tokens.append(_action_type.set(action_type))
    return tokens

def reset_request_context(tokens: list[Token[str | None]]) -> None:
    """Undo a :func:`set_request_context` call."""
    for token in reversed(tokens):
        token.var.reset(token)

def clear_request_context() -> None:
    """Clear all request-scoped context."""
    _request_id.set(None)
    _action_type.set(None)

# ── Structured Formatter ──────────────────────────────────────────

_RESERVED = frozenset({
    "name", "msg", "args", "created", "relativeCreated",
    "exc_info", "exc_text", "stack_info", "lineno", "funcName",
    "pathname", "filename", "module", "levelno", "levelname",
    "thread", "threadName", "process", "processName", "msecs",
    "taskName", "message",
})

_JSON_SAFE = (str, int, float, bool, type(None))

class StructuredFormatter(logging.Formatter):
    """Log formatter that adds request context and extra fields."""

    def __init__(self, *, json_output: bool = True):
        super().__init__()
        self._json = json_output

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        ctx = {
            "request_id": _request_id.get(None),
            "action_type": _action_type.get(None),
        }
        entry["context"] = {k: v for k, v in ctx.items() if v is not None}

        extras = {
            key: val if isinstance(val, _JSON_SAFE) else str(val)
            for key, val in record.__dict__.items()
            if not key.startswith("_") and key not in _RESERVED
        }
        if extras:
            entry["data"] = extras

        if record.exc_info and record.exc_info[1] is not None:
            entry["exception"] = {
                "type": type(record.exc_info[1]).__name__,
                "message": str(record.exc_info[1]),
            }

        if self._json:
            return json.dumps(entry, default=str, ensure_ascii=False)

        req_id = entry["context"].get("request_id", "-")
        line = (
            f"{entry['timestamp']} | {entry['level']:8s} | "
            f"{req_id} | {entry['logger']} | {entry['message']}"
        )
        if extras:
            line += " | " + " ".join(f"{k}={v}" for k, v in extras.items())
        if "exception" in entry:
            exc = entry["exception"]
            line += f" | {exc['type']}: {exc['message']}"
        return line

# ── Structured Logger ─────────────────────────────────────────────

class StructuredLogger:
    """
    Wrapper around stdlib logger providing structured logging helpers.

    Usage:
        log = StructuredLogger("callapi.middleware")
        log.debug("request_sent", endpoint="/users", method="GET")
        log.warning("transport_failed", exc=err, endpoint="/users")
    """

    __slots__ = ("_logger", "_name")

    def __init__(self, name: str):
        self._name = name
        self._logger = logging.getLogger(name)

    @property
    def name(self) -> str:
        return self._name

    def _log(
        self, level: int, event: str, exc: BaseException | None = None, **kwargs: Any
    ) -> None:
        if not self._logger.isEnabledFor(level):
            return
        self._logger.log(level, event, extra=kwargs, exc_info=exc, stacklevel=3)

    def debug(self, event: str, **kwargs: Any) -> None:
        self._log(logging.DEBUG, event, **kwargs)

    def info(self, event: str, **kwargs: Any) -> None:
        self._log(logging.INFO, event, **kwargs)

    def warning(self, event: str, exc: BaseException | None = None, **kwargs: Any) -> None:
        self._log(logging.WARNING, event, exc=exc, **kwargs)

    def error(self, event: str, exc: BaseException | None = None, **kwargs: Any) -> None:
        self._log(logging.ERROR, event, exc=exc, **kwargs)

# ── Setup ──────────────────────────────────────────────────────────

def setup_logging(*, level: str | None = None, json_output: bool | None = None) -> None:
    """
    Attach a structured handler to the ``callapi`` logger.

    Args:
        level: Log level name. Defaults to ``Settings.LOG_LEVEL``.
        json_output: Emit JSON lines. Defaults to ``Settings.LOG_JSON``.
    """
    from callapi.core.config import get_settings

    settings = get_settings()
    level = level or settings.LOG_LEVEL
    if json_output is None:
        json_output = settings.LOG_JSON

    root = logging.getLogger("callapi")
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    root.handlers.clear()

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(StructuredFormatter(json_output=json_output))
    root.addHandler(console)

    # httpx logs every request at INFO
    for noisy in ("httpx", "httpcore"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

def get_logger(name: str) -> StructuredLogger:
    """Get a structured logger instance."""
    return StructuredLogger(name)
