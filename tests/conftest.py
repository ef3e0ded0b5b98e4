# ==============================================================================
# Shared Test Fixtures
# ==============================================================================
"""
Pytest fixtures shared across all test modules.

Provides:
- A BrowsingEvent factory with sequential ids
- A fixed base time (2024-01-15 10:00:00 UTC, not an hour transition)
- Default detector and analytics settings independent of cached settings
"""

import itertools

import pytest

from sessionlens.core.models import BrowsingEvent, EventType
from sessionlens.utils.config import AnalyticsSettings, DetectorSettings

BASE_TIME = 1_705_312_800_000
MINUTE = 60_000


@pytest.fixture()
def base_time():
    """Epoch milliseconds for 2024-01-15 10:00:00 UTC."""
    return BASE_TIME


@pytest.fixture()
def make_event():
    """Factory for BrowsingEvent instances.

    Usage:
        make_event(timestamp, "https://github.com", EventType.TAB_ACTIVATED)
    """
    counter = itertools.count(1)

    def _make(timestamp, url=None, event_type=EventType.TAB_ACTIVATED, **kwargs):
        kwargs.setdefault("session_id", "session-1")
        kwargs.setdefault("tab_id", 1)
        kwargs.setdefault("window_id", 1)
        return BrowsingEvent(
            id=f"evt-{next(counter)}",
            timestamp=timestamp,
            type=event_type,
            url=url,
            **kwargs,
        )

    return _make


@pytest.fixture()
def detector_settings():
    """Detector settings with default thresholds."""
    return DetectorSettings()


@pytest.fixture()
def analytics_settings():
    """Analytics settings with default thresholds."""
    return AnalyticsSettings()


@pytest.fixture()
def replay_clock(base_time):
    """A settable clock for SessionDetector.

    Set `replay_clock.now` before each analyze_event() call to replay events
    as if they were arriving live.
    """

    class _Clock:
        def __init__(self, now):
            self.now = now

        def __call__(self):
            return self.now

    return _Clock(base_time)
