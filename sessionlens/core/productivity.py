# ==============================================================================
# Productivity Metrics
# ==============================================================================
"""
Session-level productivity metrics and the bounded focus score.

Score composition (clamped to 0-100):
- up to 40 points for the active share of total time
- 10 points per deep work period, at most 30
- 20 points for touching 3 domains or fewer, minus 2 per extra domain
- minus 0.5 per tab switch, at most 15
- minus 5 per distraction period
- up to 10 points for a low idle share
"""

import math
from collections.abc import Sequence

from sessionlens.core.models import (
    BlockType,
    BrowsingEvent,
    EventType,
    ProductivityMetrics,
    TimeBlock,
)
from sessionlens.utils.config import AnalyticsSettings

UNKNOWN_SESSION = "unknown"


def overall_focus_score(
    total_time: int,
    active_time: int,
    idle_time: int,
    domain_count: int,
    tab_switches: int,
    deep_work_count: int,
    distraction_count: int,
) -> float:
    """Combine session metrics into a focus score in [0, 100]."""
    if total_time <= 0:
        return 0.0

    score = active_time / total_time * 40
    score += min(deep_work_count * 10, 30)
    score += 20 if domain_count <= 3 else max(0, 20 - (domain_count - 3) * 2)
    score -= min(tab_switches * 0.5, 15)
    score -= distraction_count * 5
    score += max(0.0, (1 - idle_time / total_time) * 10)

    if not math.isfinite(score):
        return 0.0
    return max(0.0, min(100.0, score))


def calculate_productivity_metrics(
    events: Sequence[BrowsingEvent],
    blocks: Sequence[TimeBlock],
    settings: AnalyticsSettings,
) -> ProductivityMetrics:
    """
    Compute productivity metrics for a sorted, non-empty batch.

    Args:
        events: Events sorted by timestamp
        blocks: Time blocks built from the same events
        settings: Supplies the deep-work and distraction thresholds

    Returns:
        Metrics keyed by the session id of the first event
    """
    session_id = (events[0].session_id if events else "") or UNKNOWN_SESSION
    total_time = events[-1].timestamp - events[0].timestamp if events else 0

    active_time = sum(
        b.duration for b in blocks if b.type in (BlockType.ACTIVE, BlockType.FOCUSED)
    )
    idle_time = sum(b.duration for b in blocks if b.type == BlockType.IDLE)

    unique_domains = list(dict.fromkeys(e.domain for e in events if e.domain))
    type_counts: dict[EventType, int] = {}
    for event in events:
        type_counts[event.type] = type_counts.get(event.type, 0) + 1
    tab_switches = type_counts.get(EventType.TAB_ACTIVATED, 0)

    deep_work_periods = [
        b.to_range()
        for b in blocks
        if b.type == BlockType.FOCUSED and b.duration > settings.deep_work_threshold_ms
    ]
    distraction_periods = [
        b.to_range()
        for b in blocks
        if b.type == BlockType.DISTRACTED and b.duration > settings.distraction_threshold_ms
    ]

    return ProductivityMetrics(
        session_id=session_id,
        total_time=total_time,
        active_time=active_time,
        idle_time=idle_time,
        tab_switches=tab_switches,
        window_switches=type_counts.get(EventType.WINDOW_FOCUS_CHANGED, 0),
        unique_domains=unique_domains,
        page_count=type_counts.get(EventType.PAGE_LOADED, 0),
        scroll_events=type_counts.get(EventType.SCROLL_EVENT, 0),
        click_events=type_counts.get(EventType.CLICK_EVENT, 0),
        form_interactions=type_counts.get(EventType.FORM_INTERACTION, 0),
        deep_work_periods=deep_work_periods,
        distraction_periods=distraction_periods,
        focus_score=overall_focus_score(
            total_time,
            active_time,
            idle_time,
            len(unique_domains),
            tab_switches,
            len(deep_work_periods),
            len(distraction_periods),
        ),
    )


def generate_recommendations(metrics: ProductivityMetrics) -> list[str]:
    """Plain-language suggestions derived from session metrics."""
    recommendations = []
    if metrics.focus_score < 60:
        recommendations.append("Consider reducing tab switching to improve focus")
    if not metrics.deep_work_periods:
        recommendations.append("Try to establish longer periods of focused work")
    if len(metrics.distraction_periods) > 3:
        recommendations.append("Identify and minimize sources of distraction")
    if len(metrics.unique_domains) > 20:
        recommendations.append("Consider focusing on fewer websites to improve productivity")
    return recommendations
