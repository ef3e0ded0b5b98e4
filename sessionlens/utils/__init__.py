# ==============================================================================
# Session Lens Utilities
# ==============================================================================
"""
Shared utilities for sessionlens.

This module exports configuration and event loading helpers.
"""

from sessionlens.utils.config import (
    AnalyticsSettings,
    CategorySettings,
    DetectorSettings,
    Settings,
    TrackingSettings,
    get_settings,
)
from sessionlens.utils.events import (
    EventLoadError,
    load_events,
    parse_events,
)

__all__ = [
    # Config
    "AnalyticsSettings",
    "CategorySettings",
    "DetectorSettings",
    "Settings",
    "TrackingSettings",
    "get_settings",
    # Events
    "EventLoadError",
    "load_events",
    "parse_events",
]
