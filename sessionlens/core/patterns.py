# ==============================================================================
# Activity Pattern Detection
# ==============================================================================
"""
Detect behavioral patterns in classified time blocks.

Each block yields at most one pattern. Rules are checked in precedence order:
focus period, multitasking, browsing spree, research mode.
"""

from collections.abc import Sequence
from typing import Optional

from sessionlens.core.models import (
    ActivityPattern,
    BlockType,
    EventType,
    PatternCharacteristics,
    PatternType,
    TimeBlock,
)
from sessionlens.utils.config import AnalyticsSettings


def block_characteristics(block: TimeBlock) -> PatternCharacteristics:
    """Snapshot of the activity profile used by the pattern rules."""
    return PatternCharacteristics(
        domain_count=len(block.domains),
        tab_switch_rate=block.tab_switches / block.duration_minutes,
        average_page_time=block.duration / max(len(block.events), 1),
        scroll_activity=sum(1 for e in block.events if e.type == EventType.SCROLL_EVENT),
    )


def identify_activity_pattern(
    block: TimeBlock, settings: AnalyticsSettings
) -> Optional[ActivityPattern]:
    """
    Identify the pattern a block exhibits, if any.

    Args:
        block: Classified time block
        settings: Supplies the deep-work and pattern thresholds

    Returns:
        The highest-precedence matching pattern, or None
    """
    traits = block_characteristics(block)

    def _pattern(pattern_type: PatternType, confidence: float) -> ActivityPattern:
        return ActivityPattern(
            type=pattern_type,
            start_time=block.start,
            duration=block.duration,
            confidence=confidence,
            characteristics=traits,
        )

    if block.type == BlockType.FOCUSED and block.duration > settings.deep_work_threshold_ms:
        return _pattern(PatternType.FOCUS_PERIOD, 0.9)

    if (
        traits.domain_count >= settings.multitasking_min_domains
        and traits.tab_switch_rate > settings.multitasking_switch_rate
    ):
        return _pattern(PatternType.MULTITASKING, 0.8)

    if (
        traits.average_page_time < settings.spree_max_page_time_ms
        and len(block.events) > settings.spree_min_events
    ):
        return _pattern(PatternType.BROWSING_SPREE, 0.7)

    if (
        traits.domain_count >= settings.research_min_domains
        and traits.scroll_activity > settings.research_min_scrolls
        and block.duration > settings.research_min_duration_ms
    ):
        return _pattern(PatternType.RESEARCH_MODE, 0.6)

    return None


def detect_activity_patterns(
    blocks: Sequence[TimeBlock], settings: AnalyticsSettings
) -> list[ActivityPattern]:
    """Run pattern identification over every block, in chronological order."""
    patterns = []
    for block in blocks:
        pattern = identify_activity_pattern(block, settings)
        if pattern is not None:
            patterns.append(pattern)
    return patterns
