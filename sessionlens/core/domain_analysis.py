# ==============================================================================
# Domain Analysis
# ==============================================================================
"""
Per-domain usage profiling over a sorted event batch.

Events are grouped by hostname, split into visits at long gaps, and scored
against the batch's focused time blocks.
"""

from collections import Counter
from collections.abc import Iterable, Mapping, Sequence

from sessionlens.core.domains import categorize_domain
from sessionlens.core.models import (
    BlockType,
    BrowsingEvent,
    DomainAnalytics,
    Productivity,
    TimeBlock,
)
from sessionlens.utils.config import AnalyticsSettings

PRODUCTIVE_CATEGORIES = frozenset({"work", "education"})
NEUTRAL_CATEGORIES = frozenset({"news", "other"})


def group_visits(events: Sequence[BrowsingEvent], visit_gap_ms: int) -> list[list[BrowsingEvent]]:
    """Split a domain's events into visits wherever the gap exceeds `visit_gap_ms`."""
    if not events:
        return []

    visits = [[events[0]]]
    for previous, event in zip(events, events[1:]):
        if event.timestamp - previous.timestamp > visit_gap_ms:
            visits.append([event])
        else:
            visits[-1].append(event)
    return visits


def total_visit_time(visits: Iterable[Sequence[BrowsingEvent]], single_visit_ms: int) -> int:
    """Sum visit spans; single-event visits count as `single_visit_ms`."""
    total = 0
    for visit in visits:
        if len(visit) > 1:
            total += visit[-1].timestamp - visit[0].timestamp
        else:
            total += single_visit_ms
    return total


def domain_focus_score(domain: str, total_time: int, blocks: Iterable[TimeBlock]) -> float:
    """Percent of a domain's time covered by focused blocks that touched it, capped at 100."""
    if total_time <= 0:
        return 0.0
    focused_time = sum(
        block.duration
        for block in blocks
        if block.type == BlockType.FOCUSED and domain in block.domains
    )
    return min(focused_time / total_time * 100.0, 100.0)


def classify_productivity(focus_score: float, category: str) -> Productivity:
    if category in PRODUCTIVE_CATEGORIES:
        if focus_score > 70:
            return Productivity.HIGH
        if focus_score > 40:
            return Productivity.MEDIUM
        return Productivity.LOW
    if category in NEUTRAL_CATEGORIES:
        return Productivity.MEDIUM if focus_score > 80 else Productivity.LOW
    # Entertainment, social, shopping
    return Productivity.LOW


def find_peak_hours(events: Iterable[BrowsingEvent], factor: float) -> list[int]:
    """Hours of day (UTC) whose event count exceeds `factor` x the 24-hour average."""
    hour_counts = Counter(event.hour_of_day for event in events)
    average = sum(hour_counts.values()) / 24
    return [hour for hour in range(24) if hour_counts[hour] > average * factor]


def analyze_domain(
    domain: str,
    events: Sequence[BrowsingEvent],
    blocks: Sequence[TimeBlock],
    settings: AnalyticsSettings,
    categories: Mapping[str, Iterable[str]],
) -> DomainAnalytics:
    """Build the usage profile of one domain."""
    visits = group_visits(events, settings.visit_gap_ms)
    total_time = total_visit_time(visits, settings.single_visit_ms)
    focus_score = domain_focus_score(domain, total_time, blocks)
    category = categorize_domain(domain, categories)

    return DomainAnalytics(
        domain=domain,
        total_time=total_time,
        visit_count=len(visits),
        average_visit_duration=total_time / len(visits) if visits else 0.0,
        focus_score=focus_score,
        productivity=classify_productivity(focus_score, category),
        category=category,
        peak_hours=find_peak_hours(events, settings.peak_hour_factor),
        patterns=[],
    )


def analyze_domains(
    events: Sequence[BrowsingEvent],
    blocks: Sequence[TimeBlock],
    settings: AnalyticsSettings,
    categories: Mapping[str, Iterable[str]],
) -> dict[str, DomainAnalytics]:
    """
    Profile every domain in a sorted batch.

    Events without an extractable hostname are ignored.

    Returns:
        Domain -> analytics, in order of first appearance
    """
    events_by_domain: dict[str, list[BrowsingEvent]] = {}
    for event in events:
        domain = event.domain
        if domain:
            events_by_domain.setdefault(domain, []).append(event)

    return {
        domain: analyze_domain(domain, domain_events, blocks, settings, categories)
        for domain, domain_events in events_by_domain.items()
    }
