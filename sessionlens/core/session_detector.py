# ==============================================================================
# Session Detector - Online Session Boundary Detection
# ==============================================================================
"""
Online session boundary detection.

The detector consumes one event at a time, folds it into a rolling
SessionContext, runs every signal detector against the updated context and
aggregates the resulting signals into an optional SessionBoundary.

The detector never resets itself after a boundary. Callers that start a new
session after a boundary decide whether to call reset().
"""

import logging
import secrets
import string
import time
from collections.abc import Callable, Iterable, Mapping, Sequence
from typing import Optional

from sessionlens.core.models import (
    BoundaryReason,
    BoundaryType,
    BrowsingEvent,
    SessionBoundary,
    SessionSignal,
    SignalType,
)
from sessionlens.core.signals import SIGNAL_DETECTORS, SessionContext, update_context
from sessionlens.utils.config import CategorySettings, DetectorSettings

logger = logging.getLogger(__name__)

REASON_BY_SIGNAL = {
    SignalType.IDLE: BoundaryReason.IDLE_TIMEOUT,
    SignalType.DOMAIN_CHANGE: BoundaryReason.DOMAIN_CHANGE,
    SignalType.NAVIGATION_GAP: BoundaryReason.NAVIGATION_GAP,
    SignalType.WINDOW_PATTERN: BoundaryReason.USER_INITIATED,
    SignalType.TIME_BASED: BoundaryReason.USER_INITIATED,
}

_ID_ALPHABET = string.ascii_lowercase + string.digits


def _wall_clock_ms() -> int:
    return int(time.time() * 1000)


class SessionDetector:
    """
    Multi-signal session boundary detector.

    One instance tracks one browsing lifetime; calls must be serialized.
    """

    def __init__(
        self,
        settings: Optional[DetectorSettings] = None,
        categories: Optional[Mapping[str, Iterable[str]]] = None,
        clock: Optional[Callable[[], int]] = None,
    ):
        """
        Initialize the detector.

        Args:
            settings: Detector thresholds and capacities (defaults from environment)
            categories: Category name -> domain keywords used by the domain signal
            clock: Returns the current time in epoch milliseconds
        """
        self.settings = settings or DetectorSettings()
        self.categories = categories if categories is not None else CategorySettings().table
        self._clock = clock or _wall_clock_ms
        self.context = SessionContext.create(self.settings, self._clock())
        self._signal_history: list[SessionSignal] = []

    @property
    def signal_history(self) -> tuple[SessionSignal, ...]:
        """Recently emitted signals, newest last (diagnostics only)."""
        return tuple(self._signal_history)

    def analyze_event(self, event: BrowsingEvent) -> list[SessionSignal]:
        """
        Fold an event into the context and collect boundary signals for it.

        Args:
            event: The next event, in the order it occurred

        Returns:
            Signals from every detector, in detector order (may be empty)
        """
        update_context(self.context, event, self.settings)
        now = self._clock()

        signals: list[SessionSignal] = []
        for detector in SIGNAL_DETECTORS:
            signals.extend(detector(event, self.context, self.settings, now, self.categories))

        if signals:
            logger.debug(
                "Event %s produced %d signal(s): %s",
                event.id,
                len(signals),
                ", ".join(f"{s.type.value}={s.strength:.2f}" for s in signals),
            )

        self._signal_history.extend(signals)
        if len(self._signal_history) > self.settings.signal_history_limit:
            self._signal_history = self._signal_history[-self.settings.signal_history_keep :]

        return signals

    def should_create_boundary(self, signals: Sequence[SessionSignal]) -> Optional[SessionBoundary]:
        """
        Decide whether a set of signals justifies a session boundary.

        Args:
            signals: Signals from one analyze_event() call (or any chosen set)

        Returns:
            A boundary when the mean strength reaches the boundary threshold,
            otherwise None
        """
        if not signals:
            return None

        average = sum(s.strength for s in signals) / len(signals)
        if average < self.settings.boundary_threshold:
            return None

        # max() keeps the first of equally strong signals
        primary = max(signals, key=lambda s: s.strength)
        boundary = self._create_boundary(primary, signals)
        logger.debug(
            "Boundary %s at %d: reason=%s average=%.2f",
            boundary.id,
            boundary.timestamp,
            boundary.reason.value,
            average,
        )
        return boundary

    def _create_boundary(
        self, primary: SessionSignal, signals: Sequence[SessionSignal]
    ) -> SessionBoundary:
        suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(6))
        return SessionBoundary(
            id=f"boundary_{self._clock()}_{suffix}",
            type=BoundaryType.END,
            reason=REASON_BY_SIGNAL.get(primary.type, BoundaryReason.USER_INITIATED),
            timestamp=primary.timestamp,
            session_id="",
            metadata={
                "primary_signal": primary.type.value,
                "signal_strength": primary.strength,
                "total_signals": len(signals),
                "all_signal_types": [s.type.value for s in signals],
                **primary.metadata,
            },
        )

    def get_detection_stats(self) -> dict:
        """Sizes of the rolling context collections and live counters."""
        return {
            "recent_events": len(self.context.recent_events),
            "current_domains": len(self.context.current_domains),
            "navigation_gaps": len(self.context.navigation_gaps),
            "domain_transitions": len(self.context.domain_transitions),
            "session_signals": len(self._signal_history),
            "window_count": self.context.window_count,
            "tab_count": self.context.tab_count,
        }

    def update_config(self, settings: DetectorSettings) -> None:
        """Replace thresholds for subsequent events. The context is kept."""
        self.settings = settings

    def reset(self) -> None:
        """Discard the rolling context and signal history."""
        self.context = SessionContext.create(self.settings, self._clock())
        self._signal_history = []
