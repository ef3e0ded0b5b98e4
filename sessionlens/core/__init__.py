# ==============================================================================
# Core Domain Logic
# ==============================================================================
"""
Pure domain logic with no I/O.

This module contains:
- Domain models (BrowsingEvent, SessionSignal, SessionBoundary, TimeBlock, ...)
- Online session boundary detection (SessionDetector)
- Batch behavioral analytics (AnalyticsEngine)

All code here is framework-agnostic and easily unit-testable.
"""

from sessionlens.core.analytics_engine import AnalyticsEngine
from sessionlens.core.models import (
    ActivityPattern,
    AnalyticsQuery,
    BlockType,
    BoundaryReason,
    BrowsingEvent,
    DomainAnalytics,
    EventMetadata,
    EventType,
    PatternType,
    ProductivityMetrics,
    SessionBoundary,
    SessionSignal,
    SignalType,
    TimeBlock,
    TimeRange,
)
from sessionlens.core.session_detector import SessionDetector

__all__ = [
    "ActivityPattern",
    "AnalyticsEngine",
    "AnalyticsQuery",
    "BlockType",
    "BoundaryReason",
    "BrowsingEvent",
    "DomainAnalytics",
    "EventMetadata",
    "EventType",
    "PatternType",
    "ProductivityMetrics",
    "SessionBoundary",
    "SessionDetector",
    "SessionSignal",
    "SignalType",
    "TimeBlock",
    "TimeRange",
]
