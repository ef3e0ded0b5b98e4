# ==============================================================================
# Analytics Query Sections
# ==============================================================================
"""
Build the plain-data sections returned by AnalyticsEngine.query_analytics().

Every builder accepts already-filtered inputs and returns a JSON-friendly
dict. Empty inputs produce zero-valued sections of the same shape.
"""

from collections import Counter
from collections.abc import Iterable, Mapping, Sequence
from typing import Any, Optional

from sessionlens.core.models import (
    ActivityPattern,
    BlockType,
    DateRange,
    DomainAnalytics,
    ProductivityMetrics,
    TimeBlock,
)
from sessionlens.core.productivity import generate_recommendations

HOUR_MS = 60 * 60 * 1000
TOP_DOMAINS = 10
FOCUS_LEADERS = 5
PATTERN_SAMPLE = 10


def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def blocks_in_range(blocks: Iterable[TimeBlock], date_range: DateRange) -> list[TimeBlock]:
    """Blocks that lie entirely inside the date range."""
    return [b for b in blocks if b.start >= date_range.start and b.end <= date_range.end]


def patterns_in_range(
    patterns: Iterable[ActivityPattern], date_range: DateRange
) -> list[ActivityPattern]:
    """Patterns that start inside the date range."""
    return [p for p in patterns if date_range.start <= p.start_time <= date_range.end]


def time_section(blocks: Sequence[TimeBlock]) -> dict[str, Any]:
    def _total(*types: BlockType) -> int:
        return sum(b.duration for b in blocks if b.type in types)

    total_time = sum(b.duration for b in blocks)
    return {
        "total_time": total_time,
        "active_time": _total(BlockType.ACTIVE, BlockType.FOCUSED),
        "focused_time": _total(BlockType.FOCUSED),
        "distracted_time": _total(BlockType.DISTRACTED),
        "idle_time": _total(BlockType.IDLE),
        "block_count": len(blocks),
        "average_block_duration": total_time / len(blocks) if blocks else 0.0,
    }


def productivity_section(metrics: Optional[ProductivityMetrics]) -> Optional[dict[str, Any]]:
    if metrics is None:
        return None
    return {
        "focus_score": metrics.focus_score,
        "deep_work_periods": len(metrics.deep_work_periods),
        "distraction_periods": len(metrics.distraction_periods),
        "total_deep_work_time": sum(p.duration for p in metrics.deep_work_periods),
        # Trend needs history across batches, which the engine does not keep
        "productivity_trend": "stable",
        "recommendations": generate_recommendations(metrics),
    }


def patterns_section(patterns: Sequence[ActivityPattern]) -> dict[str, Any]:
    counts = Counter(p.type.value for p in patterns)
    most_common = counts.most_common(1)
    return {
        "total_patterns": len(patterns),
        "pattern_types": dict(counts),
        "average_confidence": _mean([p.confidence for p in patterns]),
        "most_common_pattern": most_common[0][0] if most_common else "",
        "patterns": [p.model_dump(mode="json") for p in patterns[:PATTERN_SAMPLE]],
    }


def domains_section(domains: Sequence[DomainAnalytics]) -> dict[str, Any]:
    by_time = sorted(domains, key=lambda d: d.total_time, reverse=True)
    by_focus = sorted(domains, key=lambda d: d.focus_score, reverse=True)

    by_category: dict[str, dict[str, Any]] = {}
    for domain in domains:
        group = by_category.setdefault(
            domain.category, {"domains": [], "total_time": 0, "average_focus_score": 0.0}
        )
        group["domains"].append(domain.model_dump(mode="json"))
        group["total_time"] += domain.total_time
    for group in by_category.values():
        group["average_focus_score"] = _mean([d["focus_score"] for d in group["domains"]])

    all_time = sum(d.total_time for d in domains)
    distribution = {
        d.domain: (d.total_time / all_time * 100.0 if all_time > 0 else 0.0)
        for d in by_time[:TOP_DOMAINS]
    }

    return {
        "total_domains": len(domains),
        "top_domains": [d.model_dump(mode="json") for d in by_time[:TOP_DOMAINS]],
        "productivity_by_category": by_category,
        "focus_leaders": [d.model_dump(mode="json") for d in by_focus[:FOCUS_LEADERS]],
        "time_distribution": distribution,
    }


def hourly_activity(blocks: Iterable[TimeBlock]) -> dict[int, float]:
    """
    Spread block durations over hours of day (UTC).

    A block spanning several clock hours contributes an equal share to each.
    """
    activity = {hour: 0.0 for hour in range(24)}
    for block in blocks:
        first_hour = block.start // HOUR_MS
        last_hour = block.end // HOUR_MS
        span = last_hour - first_hour + 1
        share = block.duration / span
        for absolute_hour in range(first_hour, last_hour + 1):
            activity[absolute_hour % 24] += share
    return activity


def activity_section(blocks: Sequence[TimeBlock]) -> dict[str, Any]:
    return {
        "total_blocks": len(blocks),
        "block_types": dict(Counter(b.type.value for b in blocks)),
        "average_tab_switches": _mean([b.tab_switches for b in blocks]),
        "average_window_switches": _mean([b.window_switches for b in blocks]),
        "hourly_activity": hourly_activity(blocks),
    }


def build_sections(
    metrics_requested: Iterable[str],
    date_range: DateRange,
    blocks: Sequence[TimeBlock],
    patterns: Sequence[ActivityPattern],
    domains: Sequence[DomainAnalytics],
    session_metrics: Optional[ProductivityMetrics],
) -> dict[str, Any]:
    """
    Assemble the requested sections.

    Unknown metric names are ignored. An inverted date range selects nothing,
    so every requested section comes back empty.
    """
    requested = set(metrics_requested)
    valid_range = date_range.start <= date_range.end
    if not valid_range:
        blocks, patterns, domains, session_metrics = [], [], [], None

    builders: Mapping[str, Any] = {
        "time": lambda: time_section(blocks_in_range(blocks, date_range)),
        "productivity": lambda: productivity_section(session_metrics),
        "patterns": lambda: patterns_section(patterns_in_range(patterns, date_range)),
        "domains": lambda: domains_section(domains),
        "activity": lambda: activity_section(blocks_in_range(blocks, date_range)),
    }
    return {name: build() for name, build in builders.items() if name in requested}
