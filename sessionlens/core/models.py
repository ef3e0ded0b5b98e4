# ==============================================================================
# Browsing Activity Domain Models
# ==============================================================================
"""
Pydantic models for browsing events, session signals and analytics results.

These models are used for:
- Validating events exported by the browser extension (camelCase accepted)
- Carrying detector output (signals, boundaries) to the session manager
- Returning analytics sections to the reporting layer

This module is part of the core domain layer and has no external dependencies
beyond Pydantic.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from sessionlens.core.domains import extract_domain

HOUR_MS = 60 * 60 * 1000


class EventType(str, Enum):
    """Event types emitted by the capture layer."""

    TAB_CREATED = "tab_created"
    TAB_UPDATED = "tab_updated"
    TAB_REMOVED = "tab_removed"
    TAB_ACTIVATED = "tab_activated"
    TAB_MOVED = "tab_moved"
    TAB_PINNED = "tab_pinned"
    TAB_UNPINNED = "tab_unpinned"
    TAB_MUTED = "tab_muted"
    TAB_UNMUTED = "tab_unmuted"
    WINDOW_CREATED = "window_created"
    WINDOW_REMOVED = "window_removed"
    WINDOW_FOCUS_CHANGED = "window_focus_changed"
    WINDOW_STATE_CHANGED = "window_state_changed"
    NAVIGATION_STARTED = "navigation_started"
    NAVIGATION_COMPLETED = "navigation_completed"
    NAVIGATION_COMMITTED = "navigation_committed"
    NAVIGATION_ERROR = "navigation_error"
    PAGE_LOADED = "page_loaded"
    PAGE_UNLOADED = "page_unloaded"
    FORM_INTERACTION = "form_interaction"
    SCROLL_EVENT = "scroll_event"
    CLICK_EVENT = "click_event"
    SESSION_STARTED = "session_started"
    SESSION_ENDED = "session_ended"
    IDLE_START = "idle_start"
    IDLE_END = "idle_end"
    VISIBILITY_CHANGED = "visibility_changed"


NAVIGATION_EVENT_TYPES = frozenset(
    {
        EventType.NAVIGATION_STARTED,
        EventType.NAVIGATION_COMPLETED,
        EventType.NAVIGATION_COMMITTED,
        EventType.PAGE_LOADED,
    }
)


class SignalType(str, Enum):
    """Kinds of evidence the session detector can emit."""

    IDLE = "idle"
    DOMAIN_CHANGE = "domain_change"
    NAVIGATION_GAP = "navigation_gap"
    WINDOW_PATTERN = "window_pattern"
    TIME_BASED = "time_based"


class BoundaryType(str, Enum):
    START = "start"
    END = "end"


class BoundaryReason(str, Enum):
    """Why a session boundary was created."""

    USER_INITIATED = "user_initiated"
    IDLE_TIMEOUT = "idle_timeout"
    NAVIGATION_GAP = "navigation_gap"
    DOMAIN_CHANGE = "domain_change"
    WINDOW_CLOSED = "window_closed"


class BlockType(str, Enum):
    """Classification of a time block."""

    ACTIVE = "active"
    IDLE = "idle"
    FOCUSED = "focused"
    DISTRACTED = "distracted"


class PatternType(str, Enum):
    """Behavioral patterns detected over time blocks."""

    FOCUS_PERIOD = "focus_period"
    MULTITASKING = "multitasking"
    BROWSING_SPREE = "browsing_spree"
    RESEARCH_MODE = "research_mode"


class Productivity(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


# ==============================================================================
# Events
# ==============================================================================


class EventMetadata(BaseModel):
    """
    Metadata envelope attached to every browsing event.

    Only the keys the capture layer commonly sends are declared. Unknown keys
    are kept as extra attributes and missing keys read as None.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True, frozen=True)

    domain: Optional[str] = Field(None, description="Hostname reported by the capture layer")
    referrer: Optional[str] = Field(None, description="Navigation referrer")
    transition_type: Optional[str] = Field(
        None, alias="transitionType", description="Navigation transition type"
    )
    parent_tab_id: Optional[int] = Field(None, alias="parentTabId")
    opener_tab_id: Optional[int] = Field(None, alias="openerTabId")
    index: Optional[int] = Field(None, description="Tab index within its window")
    pinned: Optional[bool] = None
    muted: Optional[bool] = None
    window_type: Optional[str] = Field(None, alias="windowType")
    window_state: Optional[str] = Field(None, alias="windowState")
    scroll_events: Optional[int] = Field(None, alias="scrollEvents")
    click_events: Optional[int] = Field(None, alias="clickEvents")
    time_spent: Optional[int] = Field(None, alias="timeSpent", description="Milliseconds")
    incognito: Optional[bool] = None


class BrowsingEvent(BaseModel):
    """
    A single captured browsing event.

    Attributes:
        id: Opaque event identifier
        timestamp: Unix timestamp in milliseconds when the event occurred
        type: Event type
        session_id: Session the capture layer assigned the event to
        tab_id: Browser tab identifier, when the event concerns a tab
        window_id: Browser window identifier, when known
        url: Page URL (optional, may be malformed)
        title: Page title (optional)
        metadata: Metadata envelope
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str = Field(..., description="Event identifier")
    timestamp: int = Field(..., description="Unix timestamp in milliseconds")
    type: EventType = Field(..., description="Event type")
    session_id: str = Field("", alias="sessionId", description="Session identifier")
    tab_id: Optional[int] = Field(None, alias="tabId")
    window_id: Optional[int] = Field(None, alias="windowId")
    url: Optional[str] = Field(None, description="Page URL")
    title: Optional[str] = Field(None, description="Page title")
    metadata: EventMetadata = Field(default_factory=EventMetadata)

    @field_validator("metadata", mode="before")
    @classmethod
    def _empty_metadata(cls, value: Any) -> Any:
        return {} if value is None else value

    @property
    def event_time(self) -> datetime:
        """Convert timestamp to a UTC datetime."""
        return datetime.fromtimestamp(self.timestamp / 1000.0, tz=timezone.utc)

    @property
    def hour_of_day(self) -> int:
        """Hour of day (UTC), valid for any timestamp including ones past year 9999."""
        return (self.timestamp // HOUR_MS) % 24

    @property
    def domain(self) -> Optional[str]:
        """Hostname of the event URL, or None when missing or unparseable."""
        if not self.url:
            return None
        return extract_domain(self.url)

    @property
    def is_navigation(self) -> bool:
        return self.type in NAVIGATION_EVENT_TYPES


# ==============================================================================
# Session Detection
# ==============================================================================


class SessionSignal(BaseModel):
    """
    One piece of evidence that the current session may have ended.

    Attributes:
        type: Signal kind
        strength: Confidence in [0, 1]
        timestamp: Timestamp of the event that produced the signal
        metadata: Free-form explanation of the signal
    """

    type: SignalType
    strength: float = Field(..., ge=0.0, le=1.0)
    timestamp: int
    metadata: dict[str, Any] = Field(default_factory=dict)


class SessionBoundary(BaseModel):
    """
    A decision that a session ended at a given point.

    The session id is left blank; the session manager fills it in.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str
    type: BoundaryType = BoundaryType.END
    reason: BoundaryReason
    timestamp: int
    session_id: str = Field("", alias="sessionId")
    metadata: dict[str, Any] = Field(default_factory=dict)


# ==============================================================================
# Analytics
# ==============================================================================


class TimeRange(BaseModel):
    start: int
    end: int
    duration: int


class TimeBlock(BaseModel):
    """
    A contiguous run of events with no gap above the block gap.

    Attributes:
        start: Timestamp of the first event (ms)
        end: Timestamp of the last event (ms)
        duration: end - start (ms)
        type: Block classification
        events: Events inside the block, in timestamp order
        domains: Distinct hostnames touched, in first-seen order
        tab_switches: Number of tab activations
        window_switches: Number of window focus changes
    """

    start: int
    end: int
    duration: int
    type: BlockType
    events: list[BrowsingEvent] = Field(default_factory=list)
    domains: list[str] = Field(default_factory=list)
    tab_switches: int = 0
    window_switches: int = 0

    @property
    def duration_minutes(self) -> float:
        """Duration in minutes, floored at one millisecond for rate math."""
        return max(self.duration, 1) / 60000.0

    def to_range(self) -> TimeRange:
        return TimeRange(start=self.start, end=self.end, duration=self.duration)


class PatternCharacteristics(BaseModel):
    domain_count: int
    tab_switch_rate: float
    average_page_time: float
    scroll_activity: int


class ActivityPattern(BaseModel):
    type: PatternType
    start_time: int
    duration: int
    confidence: float = Field(..., ge=0.0, le=1.0)
    characteristics: PatternCharacteristics


class DomainAnalytics(BaseModel):
    """
    Usage profile of a single hostname within one batch.

    Attributes:
        domain: Hostname
        total_time: Estimated time spent (ms)
        visit_count: Number of visits (split at long gaps)
        average_visit_duration: total_time / visit_count (ms)
        focus_score: Percent of total_time inside focused blocks, 0-100
        productivity: high / medium / low
        category: Category name from the category tables
        peak_hours: Hours of day (UTC) with above-average activity
        patterns: Reserved for navigation patterns, currently empty
    """

    domain: str
    total_time: int
    visit_count: int
    average_visit_duration: float
    focus_score: float = Field(..., ge=0.0, le=100.0)
    productivity: Productivity
    category: str
    peak_hours: list[int] = Field(default_factory=list)
    patterns: list[dict[str, Any]] = Field(default_factory=list)


class ProductivityMetrics(BaseModel):
    session_id: str
    total_time: int
    active_time: int
    idle_time: int
    tab_switches: int
    window_switches: int
    unique_domains: list[str] = Field(default_factory=list)
    page_count: int
    scroll_events: int
    click_events: int
    form_interactions: int
    deep_work_periods: list[TimeRange] = Field(default_factory=list)
    distraction_periods: list[TimeRange] = Field(default_factory=list)
    focus_score: float = Field(..., ge=0.0, le=100.0)


class DateRange(BaseModel):
    start: int
    end: int


class AnalyticsQuery(BaseModel):
    """
    Query against the most recently processed batch.

    Unknown metric names are accepted and ignored.
    """

    model_config = ConfigDict(populate_by_name=True)

    session_id: Optional[str] = Field(None, alias="sessionId")
    date_range: DateRange = Field(..., alias="dateRange")
    metrics: list[str] = Field(default_factory=list)
    group_by: Optional[str] = Field(None, alias="groupBy")
