# ==============================================================================
# Tests for Activity Patterns - patterns.py
# ==============================================================================
"""
Tests for per-block activity pattern identification and its precedence.
"""

import pytest

from sessionlens.core.models import BlockType, EventType, PatternType
from sessionlens.core.patterns import (
    block_characteristics,
    detect_activity_patterns,
    identify_activity_pattern,
)
from sessionlens.core.time_blocks import create_time_blocks
from sessionlens.utils.config import AnalyticsSettings

MINUTE = 60_000


def _single_block(events, settings):
    (block,) = create_time_blocks(events, settings)
    return block


class TestIdentifyActivityPattern:
    """Tests for identify_activity_pattern."""

    @pytest.mark.calibration
    def test_focus_period(self, make_event, analytics_settings, base_time):
        events = [
            make_event(base_time + i * MINUTE, "https://docs.google.com/document/1", EventType.SCROLL_EVENT)
            for i in range(30)
        ]
        pattern = identify_activity_pattern(_single_block(events, analytics_settings), analytics_settings)
        assert pattern.type == PatternType.FOCUS_PERIOD
        assert pattern.confidence == 0.9
        assert pattern.start_time == base_time
        assert pattern.duration == 29 * MINUTE

    @pytest.mark.calibration
    def test_multitasking(self, make_event, analytics_settings, base_time):
        domains = ["github.com", "youtube.com", "reddit.com", "amazon.com"]
        events = [make_event(base_time + i * 5000, f"https://{domains[i % 4]}") for i in range(40)]
        block = _single_block(events, analytics_settings)
        pattern = identify_activity_pattern(block, analytics_settings)
        assert block.type == BlockType.DISTRACTED
        assert pattern.type == PatternType.MULTITASKING
        assert pattern.confidence == 0.8
        assert pattern.characteristics.domain_count == 4

    def test_browsing_spree(self, make_event, analytics_settings, base_time):
        events = [
            make_event(base_time + i * 10_000, f"https://news.example.com/{i}", EventType.PAGE_LOADED)
            for i in range(12)
        ]
        pattern = identify_activity_pattern(_single_block(events, analytics_settings), analytics_settings)
        assert pattern.type == PatternType.BROWSING_SPREE
        assert pattern.confidence == 0.7

    def test_research_mode(self, make_event, analytics_settings, base_time):
        urls = ["https://en.wikipedia.org/wiki/Python", "https://docs.python.org/3/"]
        events = [
            make_event(base_time + i * MINUTE, urls[i % 2], EventType.SCROLL_EVENT) for i in range(8)
        ]
        pattern = identify_activity_pattern(_single_block(events, analytics_settings), analytics_settings)
        assert pattern.type == PatternType.RESEARCH_MODE
        assert pattern.confidence == 0.6
        assert pattern.characteristics.scroll_activity == 8

    def test_no_pattern(self, make_event, analytics_settings, base_time):
        events = [make_event(base_time + i * 10_000, "https://a.com") for i in range(3)]
        assert identify_activity_pattern(_single_block(events, analytics_settings), analytics_settings) is None

    def test_thresholds_come_from_settings(self, make_event, base_time):
        """Raising the spree event floor turns a spree into no pattern at all."""
        events = [
            make_event(base_time + i * 10_000, f"https://news.example.com/{i}", EventType.PAGE_LOADED)
            for i in range(12)
        ]
        strict = AnalyticsSettings(spree_min_events=20)
        assert identify_activity_pattern(_single_block(events, strict), strict) is None

    def test_lowered_research_scrolls(self, make_event, base_time):
        """Lowering the scroll floor lets a lightly scrolled block count as research."""
        urls = ["https://en.wikipedia.org/wiki/Python", "https://docs.python.org/3/"]
        kinds = [EventType.SCROLL_EVENT] * 3 + [EventType.CLICK_EVENT] * 5
        events = [make_event(base_time + i * MINUTE, urls[i % 2], kinds[i]) for i in range(8)]
        default = AnalyticsSettings()
        assert identify_activity_pattern(_single_block(events, default), default) is None
        relaxed = AnalyticsSettings(research_min_scrolls=2)
        pattern = identify_activity_pattern(_single_block(events, relaxed), relaxed)
        assert pattern.type == PatternType.RESEARCH_MODE


class TestBlockCharacteristics:
    """Tests for block_characteristics."""

    def test_zero_length_block(self, make_event, analytics_settings, base_time):
        """A single-event block has finite rates."""
        block = _single_block([make_event(base_time, "https://a.com")], analytics_settings)
        traits = block_characteristics(block)
        assert traits.domain_count == 1
        assert traits.average_page_time == 0
        assert traits.tab_switch_rate == pytest.approx(60_000.0)


class TestDetectActivityPatterns:
    """Tests for detect_activity_patterns."""

    def test_one_pattern_per_block_in_order(self, make_event, analytics_settings, base_time):
        spree = [
            make_event(base_time + i * 10_000, f"https://news.example.com/{i}", EventType.PAGE_LOADED)
            for i in range(12)
        ]
        quiet = [make_event(base_time + 60 * MINUTE, "https://a.com")]
        focus = [
            make_event(base_time + 120 * MINUTE + i * MINUTE, "https://github.com", EventType.SCROLL_EVENT)
            for i in range(30)
        ]
        blocks = create_time_blocks(spree + quiet + focus, analytics_settings)
        patterns = detect_activity_patterns(blocks, analytics_settings)
        assert [p.type for p in patterns] == [PatternType.BROWSING_SPREE, PatternType.FOCUS_PERIOD]

    def test_empty(self, analytics_settings):
        assert detect_activity_patterns([], analytics_settings) == []
