# ==============================================================================
# Session Signals - Rolling Context and Signal Detectors
# ==============================================================================
"""
Rolling session context and the five session signal detectors.

Each detector is a plain function with the same signature:

    detector(event, context, settings, now, categories) -> list[SessionSignal]

Detectors run against a context that already includes the event. They never
raise: an event that lacks the fields a detector needs yields no signals.
"""

from collections import deque
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Iterable

from sessionlens.core.domains import are_related, categorize_domain
from sessionlens.core.models import BrowsingEvent, EventType, SessionSignal, SignalType
from sessionlens.utils.config import DetectorSettings

CategoryTable = Mapping[str, Iterable[str]]

TRANSITION_NAMES = {
    9: "work_start",
    12: "lunch_break",
    17: "work_end",
    22: "evening_wind_down",
}


# ==============================================================================
# Context
# ==============================================================================


@dataclass
class SessionContext:
    """
    Rolling state the detector accumulates across events.

    `previous_domains` and `previous_activity` hold the values from before the
    most recent event was folded in, so detectors can compare the new event
    against what came before it.
    """

    recent_events: deque = field(default_factory=deque)
    current_domains: set = field(default_factory=set)
    previous_domains: frozenset = frozenset()
    last_activity: int = 0
    previous_activity: int = 0
    window_count: int = 0
    tab_count: int = 0
    navigation_gaps: deque = field(default_factory=deque)
    domain_transitions: deque = field(default_factory=deque)

    @classmethod
    def create(cls, settings: DetectorSettings, now: int) -> "SessionContext":
        """Create an empty context with capacities taken from settings."""
        return cls(
            recent_events=deque(maxlen=settings.context_window_size),
            last_activity=now,
            previous_activity=now,
            navigation_gaps=deque(maxlen=settings.navigation_gap_history),
            domain_transitions=deque(maxlen=settings.domain_transition_history),
        )


def navigation_gap(context: SessionContext, timestamp: int) -> int:
    """Time between `timestamp` and the second most recent navigation in context."""
    navigations = [e for e in context.recent_events if e.is_navigation][-2:]
    if len(navigations) < 2:
        return 0
    return timestamp - navigations[-2].timestamp


def quiet_period_before(context: SessionContext, timestamp: int) -> int:
    """Time since the latest event in context that happened before `timestamp`."""
    earlier = [e for e in context.recent_events if e.timestamp < timestamp]
    if not earlier:
        return 0
    return timestamp - earlier[-1].timestamp


def update_context(context: SessionContext, event: BrowsingEvent, settings: DetectorSettings) -> None:
    """
    Fold an event into the context.

    Mutates the context in place: appends to the rolling window, records the
    domain, refreshes last activity, tracks navigation gaps and window/tab
    counts, and prunes the active domain set when it grows too large.
    """
    context.previous_domains = frozenset(context.current_domains)
    context.previous_activity = context.last_activity

    context.recent_events.append(event)

    domain = event.domain
    if domain:
        context.current_domains.add(domain)
        context.domain_transitions.append(domain)

    context.last_activity = event.timestamp

    if event.is_navigation:
        context.navigation_gaps.append(navigation_gap(context, event.timestamp))

    if event.type == EventType.WINDOW_CREATED:
        context.window_count += 1
    elif event.type == EventType.WINDOW_REMOVED:
        context.window_count = max(0, context.window_count - 1)

    if event.type == EventType.TAB_CREATED:
        context.tab_count += 1
    elif event.type == EventType.TAB_REMOVED:
        context.tab_count = max(0, context.tab_count - 1)

    # Keep only the domains seen recently once the set overflows
    if len(context.current_domains) > settings.max_tracked_domains:
        recent = list(context.recent_events)[-settings.domain_prune_window :]
        context.current_domains = {e.domain for e in recent if e.domain}


# ==============================================================================
# Detectors
# ==============================================================================


def detect_idle_signals(
    event: BrowsingEvent,
    context: SessionContext,
    settings: DetectorSettings,
    now: int,
    categories: CategoryTable,
) -> list[SessionSignal]:
    """Long inactivity before the event, or activity resuming after a quiet period."""
    signals = []
    idle_threshold = settings.idle_threshold_ms
    idle_duration = event.timestamp - context.previous_activity

    if idle_duration > idle_threshold:
        signals.append(
            SessionSignal(
                type=SignalType.IDLE,
                strength=min(idle_duration / (idle_threshold * 2), 1.0),
                timestamp=event.timestamp,
                metadata={"idle_duration": idle_duration, "threshold": idle_threshold},
            )
        )

    if event.type in (EventType.TAB_ACTIVATED, EventType.NAVIGATION_STARTED):
        quiet_period = quiet_period_before(context, event.timestamp)
        if quiet_period > idle_threshold * settings.resume_quiet_ratio:
            signals.append(
                SessionSignal(
                    type=SignalType.IDLE,
                    strength=0.6,
                    timestamp=event.timestamp,
                    metadata={"quiet_period": quiet_period, "resumed_activity": True},
                )
            )

    return signals


def domain_change_strength(
    new_domain: str, previous_domains: Iterable[str], categories: CategoryTable
) -> float:
    """
    Score how strongly a new domain departs from the previously active ones.

    Returns 0.1 for the very first domain. Otherwise adds 0.4 when no previous
    domain shares the second-level domain and 0.3 when the category is new.
    """
    previous_domains = list(previous_domains)
    if not previous_domains:
        return 0.1

    new_category = categorize_domain(new_domain, categories)
    previous_categories = {categorize_domain(d, categories) for d in previous_domains}

    strength = 0.0
    if not are_related(new_domain, previous_domains):
        strength += 0.4
    if new_category not in previous_categories:
        strength += 0.3
    return min(strength, 1.0)


def detect_domain_change_signals(
    event: BrowsingEvent,
    context: SessionContext,
    settings: DetectorSettings,
    now: int,
    categories: CategoryTable,
) -> list[SessionSignal]:
    """Category change or full context switch away from the active domains."""
    if not settings.domain_change_session_boundary:
        return []
    new_domain = event.domain
    if not new_domain:
        return []

    signals = []
    previous = context.previous_domains

    strength = domain_change_strength(new_domain, previous, categories)
    if strength > 0.5:
        new_category = categorize_domain(new_domain, categories)
        signals.append(
            SessionSignal(
                type=SignalType.DOMAIN_CHANGE,
                strength=strength,
                timestamp=event.timestamp,
                metadata={
                    "new_domain": new_domain,
                    "previous_domains": sorted(previous),
                    "category_change": new_category
                    not in {categorize_domain(d, categories) for d in previous},
                },
            )
        )

    if previous and not are_related(new_domain, previous):
        signals.append(
            SessionSignal(
                type=SignalType.DOMAIN_CHANGE,
                strength=0.8,
                timestamp=event.timestamp,
                metadata={
                    "context_switch": True,
                    "new_domain": new_domain,
                    "previous_domain_count": len(previous),
                },
            )
        )

    return signals


def _is_increasing(values: Sequence[int]) -> bool:
    if len(values) < 2:
        return False
    return all(later > earlier for earlier, later in zip(values, values[1:]))


def detect_navigation_gap_signals(
    event: BrowsingEvent,
    context: SessionContext,
    settings: DetectorSettings,
    now: int,
    categories: CategoryTable,
) -> list[SessionSignal]:
    """Long gap between navigations, or steadily growing gaps."""
    if not event.is_navigation:
        return []

    signals = []
    threshold = settings.session_gap_threshold_ms
    gap = navigation_gap(context, event.timestamp)
    gaps = list(context.navigation_gaps)

    if gap > threshold:
        signals.append(
            SessionSignal(
                type=SignalType.NAVIGATION_GAP,
                strength=min(gap / (threshold * 3), 1.0),
                timestamp=event.timestamp,
                metadata={
                    "gap": gap,
                    "threshold": threshold,
                    "previous_navigations": gaps[-5:],
                },
            )
        )

    if len(gaps) >= 3 and _is_increasing(gaps[-3:]):
        signals.append(
            SessionSignal(
                type=SignalType.NAVIGATION_GAP,
                strength=0.6,
                timestamp=event.timestamp,
                metadata={"pattern": "increasing_gaps", "gaps": gaps[-3:]},
            )
        )

    return signals


def window_close_strength(remaining_windows: int) -> float:
    if remaining_windows <= 0:
        return 0.9
    if remaining_windows == 1:
        return 0.6
    return 0.3


def detect_window_pattern_signals(
    event: BrowsingEvent,
    context: SessionContext,
    settings: DetectorSettings,
    now: int,
    categories: CategoryTable,
) -> list[SessionSignal]:
    """Closing the last windows, or opening a window after a quiet period."""
    signals = []

    if event.type == EventType.WINDOW_REMOVED:
        strength = window_close_strength(context.window_count)
        if strength > 0.5:
            signals.append(
                SessionSignal(
                    type=SignalType.WINDOW_PATTERN,
                    strength=strength,
                    timestamp=event.timestamp,
                    metadata={
                        "pattern": "window_closing",
                        "remaining_windows": context.window_count,
                    },
                )
            )

    if event.type == EventType.WINDOW_CREATED:
        quiet_period = quiet_period_before(context, event.timestamp)
        if quiet_period > settings.new_window_quiet_ms:
            signals.append(
                SessionSignal(
                    type=SignalType.WINDOW_PATTERN,
                    strength=0.5,
                    timestamp=event.timestamp,
                    metadata={"pattern": "new_window_after_quiet", "quiet_period": quiet_period},
                )
            )

    return signals


def detect_time_based_signals(
    event: BrowsingEvent,
    context: SessionContext,
    settings: DetectorSettings,
    now: int,
    categories: CategoryTable,
) -> list[SessionSignal]:
    """Live events at canonical hour transitions, and very long sessions."""
    signals = []

    event_hour = event.hour_of_day
    if (
        event_hour in settings.hour_transitions
        and abs(event.timestamp - now) < settings.hour_transition_window_ms
    ):
        signals.append(
            SessionSignal(
                type=SignalType.TIME_BASED,
                strength=0.4,
                timestamp=event.timestamp,
                metadata={
                    "hour_transition": event_hour,
                    "transition_type": TRANSITION_NAMES.get(event_hour, "other"),
                },
            )
        )

    session_duration = 0
    if context.recent_events:
        session_duration = event.timestamp - context.recent_events[0].timestamp
    if session_duration > settings.long_session_ms:
        signals.append(
            SessionSignal(
                type=SignalType.TIME_BASED,
                strength=min(session_duration / settings.long_session_saturation_ms, 0.8),
                timestamp=event.timestamp,
                metadata={"long_session": True, "duration": session_duration},
            )
        )

    return signals


SignalDetector = Callable[
    [BrowsingEvent, SessionContext, DetectorSettings, int, CategoryTable], list[SessionSignal]
]

SIGNAL_DETECTORS: tuple[SignalDetector, ...] = (
    detect_idle_signals,
    detect_domain_change_signals,
    detect_navigation_gap_signals,
    detect_window_pattern_signals,
    detect_time_based_signals,
)
