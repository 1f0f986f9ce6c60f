# ============================================================================
# STRUCTURED LOGGING
# ============================================================================
# EPOCH: 1 - RESULT PRIMITIVE
# STATUS: Core - Structured logging with context
# PURPOSE: Consistent, queryable logging across all facets
# CREATED: 16 OCT 2026
# ============================================================================
"""
Structured Logging

The library only emits records. Applications route them with
configure_logging(), which reads LoggingDefaults when called without
arguments (LOG_LEVEL, LOG_FORMAT or the YAML `logging:` section).

Every record carries the promise it concerns:

    logger = get_logger(__name__, ComponentType.SETTLEMENT)

    with log_context(promise_id="p-123", outcome="rejected"):
        logger.debug("Notifying subscribers")
"""

import json
import logging
import sys
import threading
from contextlib import contextmanager
from dataclasses import asdict, dataclass, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional, Union


class ComponentType(str, Enum):
    """Facet that emitted a record."""
    SETTLEMENT = "settlement"
    SCHEDULER = "scheduler"
    EVENTS = "events"
    COMPAT = "compat"
    PROXY = "proxy"
    AGGREGATE = "aggregate"
    PRODUCER = "producer"


# ============================================================================
# CONTEXT
# ============================================================================

@dataclass(frozen=True)
class LogContext:
    """Promise-level fields attached to records logged inside log_context()."""
    promise_id: Optional[str] = None
    event: Optional[str] = None
    outcome: Optional[str] = None

    def to_dict(self) -> Dict[str, str]:
        return {key: value for key, value in asdict(self).items() if value is not None}


_EMPTY = LogContext()
_local = threading.local()


def _stack() -> list:
    if not hasattr(_local, "stack"):
        _local.stack = []
    return _local.stack


def get_current_context() -> LogContext:
    stack = _stack()
    return stack[-1] if stack else _EMPTY


@contextmanager
def log_context(**fields):
    """
    Push context fields for the duration of the block.

    Unset fields are inherited from the enclosing block. Never hold one
    open across an await; the stack is per thread, not per task.
    """
    context = replace(get_current_context(), **fields)
    stack = _stack()
    stack.append(context)
    try:
        yield context
    finally:
        stack.pop()


# ============================================================================
# FORMATTERS
# ============================================================================

def _timestamp() -> datetime:
    return datetime.now(timezone.utc)


class StructuredFormatter(logging.Formatter):
    """One JSON object per record, for log aggregators."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": _timestamp().isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        context = get_current_context().to_dict()
        if context:
            payload["context"] = context
        data = getattr(record, "extra", None)
        if data:
            payload["data"] = data
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        payload["source"] = f"{record.filename}:{record.lineno}"
        return json.dumps(payload, default=str)


# context field -> label shown by HumanFormatter
_HUMAN_LABELS = {"promise_id": "promise", "event": "event", "outcome": "outcome"}


class HumanFormatter(logging.Formatter):
    """Single-line records with the promise context inline."""

    def format(self, record: logging.LogRecord) -> str:
        context = get_current_context().to_dict()
        tags = ", ".join(f"{_HUMAN_LABELS[key]}={value}" for key, value in context.items())
        line = (
            f"{_timestamp():%Y-%m-%d %H:%M:%S} {record.levelname:<8} {record.name}"
            f"{f' [{tags}]' if tags else ''}: {record.getMessage()}"
        )
        data = getattr(record, "extra", None)
        if data:
            line += f" {data}"
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


# ============================================================================
# LOGGERS
# ============================================================================

class ContextLogger(logging.LoggerAdapter):
    """Adapter that copies the current LogContext and component onto records."""

    def process(self, msg, kwargs):
        data = dict(kwargs.get("extra") or {})
        data.update(get_current_context().to_dict())
        component = self.extra.get("component") if self.extra else None
        if component is not None:
            data.setdefault("component", str(getattr(component, "value", component)))
        kwargs["extra"] = {"extra": data}
        return msg, kwargs


def get_logger(name: str, component: Optional[ComponentType] = None) -> ContextLogger:
    return ContextLogger(logging.getLogger(name), {"component": component})


def configure_logging(
    level: Union[str, int, None] = None,
    json_output: Optional[bool] = None,
) -> None:
    """
    Route all records to stdout, replacing any root handlers.

    Args:
        level: Log level name or number (default: LoggingDefaults.level)
        json_output: JSON records instead of human lines
            (default: LoggingDefaults.json_output)
    """
    if level is None or json_output is None:
        from core.config import get_defaults
        defaults = get_defaults().logging
        level = defaults.level if level is None else level
        json_output = defaults.json_output if json_output is None else json_output

    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(StructuredFormatter() if json_output else HumanFormatter())

    root = logging.getLogger()
    for existing in root.handlers[:]:
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(level)


# ============================================================================
# CHECKPOINTS
# ============================================================================

def log_checkpoint(
    name: str,
    data: Optional[Dict[str, Any]] = None,
    logger: Optional[logging.Logger] = None,
) -> None:
    """
    Log a named lifecycle marker ("settled", "proxy_attached", ...) at DEBUG.

    Filter on the "dualpromise.checkpoint" logger to follow one promise.
    """
    logger = logger or logging.getLogger("dualpromise.checkpoint")
    if not logger.isEnabledFor(logging.DEBUG):
        return
    checkpoint: Dict[str, Any] = {"checkpoint": name, **get_current_context().to_dict()}
    if data:
        checkpoint["data"] = data
    logger.debug(f"CHECKPOINT: {name}", extra={"extra": checkpoint})


__all__ = [
    "ComponentType",
    "LogContext",
    "StructuredFormatter",
    "HumanFormatter",
    "ContextLogger",
    "get_logger",
    "configure_logging",
    "log_context",
    "get_current_context",
    "log_checkpoint",
]
