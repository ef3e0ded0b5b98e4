# ==============================================================================
# Tests for Time Blocks - time_blocks.py
# ==============================================================================
"""
Tests for time-block segmentation and classification.
"""

import pytest

from sessionlens.core.models import BlockType, EventType
from sessionlens.core.time_blocks import classify_time_block, create_time_blocks

MINUTE = 60_000


# ==============================================================================
# Classification
# ==============================================================================


class TestClassifyTimeBlock:
    """Tests for classify_time_block rule precedence."""

    def test_sparse_long_block_is_idle(self, analytics_settings):
        assert classify_time_block(20 * MINUTE, 5, 1, 0, analytics_settings) == BlockType.IDLE

    def test_very_low_density_is_idle(self, analytics_settings):
        assert classify_time_block(5 * MINUTE, 0, 0, 0, analytics_settings) == BlockType.IDLE

    def test_sustained_long_block_is_focused(self, analytics_settings):
        """One event a minute over half an hour is focus, not idleness."""
        assert classify_time_block(29 * MINUTE, 30, 1, 0, analytics_settings) == BlockType.FOCUSED

    def test_many_domains_is_distracted(self, analytics_settings):
        assert classify_time_block(2 * MINUTE, 20, 6, 1, analytics_settings) == BlockType.DISTRACTED

    def test_fast_switching_is_distracted(self, analytics_settings):
        assert classify_time_block(4 * MINUTE, 40, 3, 30, analytics_settings) == BlockType.DISTRACTED

    def test_short_block_is_active(self, analytics_settings):
        assert classify_time_block(MINUTE, 5, 1, 0, analytics_settings) == BlockType.ACTIVE

    def test_single_event_is_active(self, analytics_settings):
        """Zero-length blocks are rated against a one millisecond floor."""
        assert classify_time_block(0, 1, 1, 0, analytics_settings) == BlockType.ACTIVE


# ==============================================================================
# Segmentation
# ==============================================================================


class TestCreateTimeBlocks:
    """Tests for create_time_blocks."""

    def test_empty(self, analytics_settings):
        assert create_time_blocks([], analytics_settings) == []

    def test_gap_splits_blocks(self, make_event, analytics_settings, base_time):
        events = [
            make_event(base_time, "https://a.com"),
            make_event(base_time + MINUTE, "https://a.com"),
            make_event(base_time + 10 * MINUTE, "https://b.com"),
        ]
        blocks = create_time_blocks(events, analytics_settings)
        assert [(b.start, b.end) for b in blocks] == [
            (base_time, base_time + MINUTE),
            (base_time + 10 * MINUTE, base_time + 10 * MINUTE),
        ]
        assert blocks[1].duration == 0

    def test_gap_at_threshold_does_not_split(self, make_event, analytics_settings, base_time):
        events = [
            make_event(base_time, "https://a.com"),
            make_event(base_time + analytics_settings.block_gap_ms, "https://a.com"),
        ]
        assert len(create_time_blocks(events, analytics_settings)) == 1

    def test_event_cap_splits_blocks(self, make_event, analytics_settings, base_time):
        events = [make_event(base_time + i * 1000, "https://a.com") for i in range(60)]
        blocks = create_time_blocks(events, analytics_settings)
        assert [len(b.events) for b in blocks] == [50, 10]
        assert blocks[1].start == base_time + 50_000

    def test_block_profile(self, make_event, analytics_settings, base_time):
        """Domains keep first-seen order and switches are counted by event type."""
        events = [
            make_event(base_time, "https://b.com", EventType.TAB_ACTIVATED),
            make_event(base_time + 1000, "https://a.com", EventType.WINDOW_FOCUS_CHANGED),
            make_event(base_time + 2000, "https://b.com/x", EventType.TAB_ACTIVATED),
            make_event(base_time + 3000, None, EventType.CLICK_EVENT),
        ]
        (block,) = create_time_blocks(events, analytics_settings)
        assert block.domains == ["b.com", "a.com"]
        assert block.tab_switches == 2
        assert block.window_switches == 1
        assert block.duration == block.end - block.start == 3000

    @pytest.mark.calibration
    def test_focused_half_hour(self, make_event, analytics_settings, base_time):
        """Thirty single-domain scroll events a minute apart form one focused block."""
        events = [
            make_event(base_time + i * MINUTE, "https://docs.google.com/document/1", EventType.SCROLL_EVENT)
            for i in range(30)
        ]
        (block,) = create_time_blocks(events, analytics_settings)
        assert block.type == BlockType.FOCUSED
        assert block.duration == 29 * MINUTE
