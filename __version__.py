# ============================================================================
# VERSION - DUALPROMISE
# ============================================================================
# EPOCH: 1 - RESULT PRIMITIVE
# ============================================================================
"""
Version information for dualpromise.

This is the single source of truth for the package version.
Updated manually for each release.
"""
# Version format: major.minor.patch
# Criteria for 0.2 - legacy callback/event surface and proxying complete
__version__ = "0.2.0"
__version_info__ = tuple(int(x) for x in __version__.split("."))

# Build metadata
BUILD_DATE = "2026-10-16"

EPOCH = 1
CODENAME = "Dual Promise"
