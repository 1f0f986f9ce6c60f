# ============================================================================
# CONFIGURATION MODULE
# ============================================================================
# EPOCH: 1 - RESULT PRIMITIVE
# STATUS: Core - Configuration and defaults
# PURPOSE: Centralized configuration management
# CREATED: 16 OCT 2026
# ============================================================================
"""
Configuration Module

Provides centralized configuration and defaults for the result primitive.
"""

from core.config.defaults import (
    PromiseDefaults,
    LoggingDefaults,
    Defaults,
    get_defaults,
    set_defaults,
    reset_defaults,
)

__all__ = [
    "PromiseDefaults",
    "LoggingDefaults",
    "Defaults",
    "get_defaults",
    "set_defaults",
    "reset_defaults",
]
