# ============================================================================
# CONFIGURATION DEFAULTS
# ============================================================================
# EPOCH: 1 - RESULT PRIMITIVE
# STATUS: Core - Default configuration values
# PURPOSE: Centralized defaults for forwarding, reporting and logging
# CREATED: 16 OCT 2026
# ============================================================================
"""
Configuration Defaults

Provides defaults for the compatibility layer and logging.
These can be overridden via environment variables or a YAML file.

Design:
- Immutable dataclasses for defaults
- Environment variable overrides
- Optional YAML file (missing keys keep their defaults)
"""

import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

import yaml


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_list(name: str, default: Tuple[str, ...]) -> Tuple[str, ...]:
    raw = os.getenv(name)
    if raw is None:
        return default
    return tuple(part.strip() for part in raw.split(",") if part.strip())


@dataclass(frozen=True)
class PromiseDefaults:
    """
    Defaults for the compatibility surface.

    Controls proxy forwarding, sql bookkeeping and rejection reporting.
    """
    # Events a proxy link forwards when no explicit list is given
    proxy_events: Tuple[str, ...] = ("success", "error", "sql")

    # Derived promises (then/catch/...) re-emit their parent's sql events
    forward_sql_to_derived: bool = True

    # Keep every sql payload on promise.sql_statements
    record_sql: bool = True

    # Report rejections nobody consumed when the promise is collected
    report_unhandled_rejections: bool = True

    @classmethod
    def from_env(cls) -> "PromiseDefaults":
        """Create from environment variables."""
        return cls(
            proxy_events=_env_list("PROMISE_PROXY_EVENTS", cls.proxy_events),
            forward_sql_to_derived=_env_bool("PROMISE_FORWARD_SQL", True),
            record_sql=_env_bool("PROMISE_RECORD_SQL", True),
            report_unhandled_rejections=_env_bool("PROMISE_REPORT_UNHANDLED", True),
        )


@dataclass(frozen=True)
class LoggingDefaults:
    """Defaults read by core.logging.configure_logging() when called without arguments."""
    level: str = "INFO"
    json_output: bool = False

    @classmethod
    def from_env(cls) -> "LoggingDefaults":
        """Create from environment variables."""
        return cls(
            level=os.getenv("LOG_LEVEL", "INFO"),
            json_output=os.getenv("LOG_FORMAT", "").lower() == "json",
        )


# ============================================================================
# GLOBAL DEFAULTS INSTANCE
# ============================================================================

def _section(section_cls, data: Optional[Dict[str, Any]]):
    """Build one frozen section from a mapping, ignoring unknown keys."""
    if not data:
        return section_cls()
    known = {f.name for f in fields(section_cls)}
    values = {key: value for key, value in data.items() if key in known}
    if "proxy_events" in values:
        values["proxy_events"] = tuple(values["proxy_events"])
    return section_cls(**values)


@dataclass
class Defaults:
    """Container for all default configurations."""
    promise: PromiseDefaults = field(default_factory=PromiseDefaults)
    logging: LoggingDefaults = field(default_factory=LoggingDefaults)

    @classmethod
    def from_env(cls) -> "Defaults":
        """Create all defaults from environment variables."""
        return cls(
            promise=PromiseDefaults.from_env(),
            logging=LoggingDefaults.from_env(),
        )

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "Defaults":
        """
        Load defaults from a YAML file.

        Expected layout:
            promise:
              proxy_events: [success, error, sql]
              report_unhandled_rejections: false
            logging:
              level: DEBUG
        """
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            raise ValueError(f"Config file {path} must contain a mapping, got {type(data).__name__}")

        return cls(
            promise=_section(PromiseDefaults, data.get("promise")),
            logging=_section(LoggingDefaults, data.get("logging")),
        )


_defaults: Optional[Defaults] = None


def get_defaults() -> Defaults:
    """Get global defaults instance."""
    global _defaults
    if _defaults is None:
        _defaults = Defaults.from_env()
    return _defaults


def set_defaults(defaults: Defaults) -> None:
    """Replace the global defaults (e.g. after Defaults.from_yaml())."""
    global _defaults
    _defaults = defaults


def reset_defaults() -> None:
    """Reset defaults (for testing)."""
    global _defaults
    _defaults = None


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "PromiseDefaults",
    "LoggingDefaults",
    "Defaults",
    "get_defaults",
    "set_defaults",
    "reset_defaults",
]
