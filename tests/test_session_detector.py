# ==============================================================================
# Tests for SessionDetector - session_detector.py
# ==============================================================================
"""
Tests for the online session boundary detector: signal aggregation,
boundary creation, history trimming, stats, reconfiguration and reset.
"""

import re

import pytest

from sessionlens.core.models import BoundaryReason, BoundaryType, SessionSignal, SignalType
from sessionlens.core.session_detector import SessionDetector
from sessionlens.utils.config import DetectorSettings

MINUTE = 60_000


def _feed(detector, clock, event):
    """Replay one event live and return (signals, boundary)."""
    clock.now = event.timestamp
    signals = detector.analyze_event(event)
    return signals, detector.should_create_boundary(signals)


def _signal(strength, signal_type=SignalType.IDLE, timestamp=0, **metadata):
    return SessionSignal(type=signal_type, strength=strength, timestamp=timestamp, metadata=metadata)


# ==============================================================================
# Boundary Threshold
# ==============================================================================


@pytest.mark.calibration
class TestBoundaryThreshold:
    """Calibration scenarios for the 0.7 boundary threshold."""

    def test_gap_below_idle_threshold_no_boundary(self, make_event, detector_settings, replay_clock, base_time):
        """A gap just below the idle threshold does not create a boundary on its own."""
        detector = SessionDetector(detector_settings, clock=replay_clock)
        _feed(detector, replay_clock, make_event(base_time, "https://github.com", "navigation_completed"))
        signals, boundary = _feed(
            detector, replay_clock, make_event(base_time + 299_000, "https://github.com/user/repo")
        )
        assert boundary is None
        assert all(s.strength < 0.7 for s in signals)

    def test_double_idle_gap_with_domain_change(self, make_event, detector_settings, replay_clock, base_time):
        """Twice the idle threshold plus a domain change creates an idle boundary."""
        detector = SessionDetector(detector_settings, clock=replay_clock)
        _feed(detector, replay_clock, make_event(base_time, "https://github.com", "navigation_completed"))
        signals, boundary = _feed(
            detector, replay_clock, make_event(base_time + 10 * MINUTE, "https://youtube.com/watch")
        )

        assert boundary is not None
        assert boundary.type == BoundaryType.END
        assert boundary.reason == BoundaryReason.IDLE_TIMEOUT
        assert boundary.timestamp == base_time + 10 * MINUTE
        assert boundary.session_id == ""
        assert boundary.metadata["primary_signal"] == "idle"
        assert boundary.metadata["signal_strength"] == 1.0
        assert boundary.metadata["total_signals"] == len(signals)
        assert "domain_change" in boundary.metadata["all_signal_types"]

    def test_window_closing_boundary(self, make_event, detector_settings, replay_clock, base_time):
        """Closing the last window is enough for a user-initiated boundary."""
        detector = SessionDetector(detector_settings, clock=replay_clock)
        _feed(detector, replay_clock, make_event(base_time, event_type="window_created"))
        _, boundary = _feed(detector, replay_clock, make_event(base_time + 1000, event_type="window_removed"))
        assert boundary is not None
        assert boundary.reason == BoundaryReason.USER_INITIATED
        assert boundary.metadata["pattern"] == "window_closing"


# ==============================================================================
# Aggregation
# ==============================================================================


class TestShouldCreateBoundary:
    """Tests for signal aggregation."""

    def test_no_signals(self, detector_settings):
        assert SessionDetector(detector_settings).should_create_boundary([]) is None

    def test_average_below_threshold(self, detector_settings):
        detector = SessionDetector(detector_settings)
        assert detector.should_create_boundary([_signal(1.0), _signal(0.3)]) is None

    def test_average_at_threshold(self, detector_settings):
        detector = SessionDetector(detector_settings)
        assert detector.should_create_boundary([_signal(0.7)]) is not None

    def test_first_strongest_signal_wins(self, detector_settings):
        """Ties on strength keep the earlier signal as primary."""
        detector = SessionDetector(detector_settings)
        boundary = detector.should_create_boundary(
            [
                _signal(0.8, SignalType.NAVIGATION_GAP, timestamp=5),
                _signal(0.8, SignalType.DOMAIN_CHANGE, timestamp=6),
            ]
        )
        assert boundary.reason == BoundaryReason.NAVIGATION_GAP
        assert boundary.timestamp == 5

    @pytest.mark.parametrize(
        "signal_type, reason",
        [
            (SignalType.IDLE, BoundaryReason.IDLE_TIMEOUT),
            (SignalType.DOMAIN_CHANGE, BoundaryReason.DOMAIN_CHANGE),
            (SignalType.NAVIGATION_GAP, BoundaryReason.NAVIGATION_GAP),
            (SignalType.WINDOW_PATTERN, BoundaryReason.USER_INITIATED),
            (SignalType.TIME_BASED, BoundaryReason.USER_INITIATED),
        ],
    )
    def test_reason_mapping(self, detector_settings, signal_type, reason):
        detector = SessionDetector(detector_settings)
        boundary = detector.should_create_boundary([_signal(0.9, signal_type)])
        assert boundary.reason == reason

    def test_boundary_id_format(self, detector_settings):
        detector = SessionDetector(detector_settings, clock=lambda: 1234)
        boundary = detector.should_create_boundary([_signal(0.9)])
        assert re.fullmatch(r"boundary_1234_[a-z0-9]{6}", boundary.id)

    def test_primary_metadata_merged(self, detector_settings):
        detector = SessionDetector(detector_settings)
        boundary = detector.should_create_boundary([_signal(0.9, idle_duration=42)])
        assert boundary.metadata["idle_duration"] == 42


# ==============================================================================
# Lifecycle
# ==============================================================================


class TestDetectorLifecycle:
    """Tests for history trimming, stats, reconfiguration and reset."""

    def test_signal_history_trimmed(self, make_event, replay_clock, base_time):
        """Once the history passes its limit, only the newest signals are kept."""
        settings = DetectorSettings(signal_history_limit=4, signal_history_keep=2)
        detector = SessionDetector(settings, clock=replay_clock)
        for i in range(1, 6):
            _feed(detector, replay_clock, make_event(base_time + i * 20 * MINUTE, event_type="click_event"))
        assert len(detector.signal_history) <= 4
        assert detector.signal_history[-1].timestamp == base_time + 100 * MINUTE

    def test_detection_stats(self, make_event, detector_settings, replay_clock, base_time):
        detector = SessionDetector(detector_settings, clock=replay_clock)
        _feed(detector, replay_clock, make_event(base_time, "https://github.com", "window_created"))
        _feed(detector, replay_clock, make_event(base_time + 1000, "https://github.com/a", "tab_created"))
        stats = detector.get_detection_stats()
        assert stats["recent_events"] == 2
        assert stats["current_domains"] == 1
        assert stats["window_count"] == 1
        assert stats["tab_count"] == 1

    def test_update_config(self, make_event, replay_clock, base_time):
        """New thresholds apply to the next event without resetting context."""
        detector = SessionDetector(DetectorSettings(), clock=replay_clock)
        _feed(detector, replay_clock, make_event(base_time, "https://github.com"))
        detector.update_config(DetectorSettings(domain_change_session_boundary=False))
        signals, _ = _feed(detector, replay_clock, make_event(base_time + 1000, "https://youtube.com"))
        assert all(s.type != SignalType.DOMAIN_CHANGE for s in signals)
        assert detector.get_detection_stats()["recent_events"] == 2

    def test_no_auto_reset_after_boundary(self, make_event, detector_settings, replay_clock, base_time):
        detector = SessionDetector(detector_settings, clock=replay_clock)
        _feed(detector, replay_clock, make_event(base_time, "https://github.com"))
        _, boundary = _feed(detector, replay_clock, make_event(base_time + 10 * MINUTE, "https://youtube.com"))
        assert boundary is not None
        assert detector.get_detection_stats()["recent_events"] == 2

    def test_reset(self, make_event, detector_settings, replay_clock, base_time):
        detector = SessionDetector(detector_settings, clock=replay_clock)
        _feed(detector, replay_clock, make_event(base_time, "https://github.com"))
        _feed(detector, replay_clock, make_event(base_time + 10 * MINUTE, "https://youtube.com"))
        detector.reset()
        stats = detector.get_detection_stats()
        assert stats["recent_events"] == 0
        assert stats["current_domains"] == 0
        assert stats["session_signals"] == 0
        assert detector.signal_history == ()

    def test_custom_categories(self, make_event, detector_settings, replay_clock, base_time):
        """Domains in one custom category only produce the relatedness signal."""
        detector = SessionDetector(
            detector_settings, categories={"video": ["youtube.com", "vimeo.com"]}, clock=replay_clock
        )
        _feed(detector, replay_clock, make_event(base_time, "https://youtube.com"))
        signals, _ = _feed(detector, replay_clock, make_event(base_time + 1000, "https://vimeo.com"))
        domain_signals = [s for s in signals if s.type == SignalType.DOMAIN_CHANGE]
        assert [s.strength for s in domain_signals] == [0.8]

    def test_far_future_timestamp(self, make_event, detector_settings, replay_clock):
        """Events dated past year 9999 are analyzed without raising."""
        far_future = 300_000_000_000_000
        detector = SessionDetector(detector_settings, clock=replay_clock)
        _feed(detector, replay_clock, make_event(far_future, "https://github.com"))
        signals, boundary = _feed(detector, replay_clock, make_event(far_future + MINUTE, "https://github.com/x"))
        assert boundary is None
        assert all(s.type != SignalType.TIME_BASED for s in signals)
