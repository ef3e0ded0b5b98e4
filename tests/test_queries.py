# ==============================================================================
# Tests for Analytics Query Sections - queries.py
# ==============================================================================
"""
Tests for the section builders behind AnalyticsEngine.query_analytics().
"""

import pytest

from sessionlens.core.models import (
    BlockType,
    DateRange,
    DomainAnalytics,
    Productivity,
    TimeBlock,
)
from sessionlens.core.queries import (
    activity_section,
    blocks_in_range,
    build_sections,
    domains_section,
    hourly_activity,
    time_section,
)

HOUR = 3_600_000
MINUTE = 60_000


def _block(start, end, block_type=BlockType.ACTIVE, tab_switches=0):
    return TimeBlock(start=start, end=end, duration=end - start, type=block_type, tab_switches=tab_switches)


def _domain(name, total_time, focus_score=0.0, category="other"):
    return DomainAnalytics(
        domain=name,
        total_time=total_time,
        visit_count=1,
        average_visit_duration=float(total_time),
        focus_score=focus_score,
        productivity=Productivity.LOW,
        category=category,
    )


class TestTimeSection:
    """Tests for time_section."""

    def test_totals(self):
        blocks = [
            _block(0, 10 * MINUTE, BlockType.FOCUSED),
            _block(20 * MINUTE, 25 * MINUTE, BlockType.ACTIVE),
            _block(30 * MINUTE, 32 * MINUTE, BlockType.DISTRACTED),
            _block(40 * MINUTE, 60 * MINUTE, BlockType.IDLE),
        ]
        section = time_section(blocks)
        assert section["total_time"] == 37 * MINUTE
        assert section["active_time"] == 15 * MINUTE
        assert section["focused_time"] == 10 * MINUTE
        assert section["distracted_time"] == 2 * MINUTE
        assert section["idle_time"] == 20 * MINUTE
        assert section["average_block_duration"] == pytest.approx(37 * MINUTE / 4)

    def test_empty(self):
        section = time_section([])
        assert section["total_time"] == 0
        assert section["average_block_duration"] == 0.0


class TestHourlyActivity:
    """Tests for hourly_activity."""

    def test_block_split_across_hours(self, base_time):
        """A block from 10:30 to 11:30 UTC credits half its duration to each hour."""
        block = _block(base_time + 30 * MINUTE, base_time + 90 * MINUTE)
        activity = hourly_activity([block])
        assert activity[10] == pytest.approx(30 * MINUTE)
        assert activity[11] == pytest.approx(30 * MINUTE)
        assert sum(activity.values()) == pytest.approx(block.duration)

    def test_wraps_past_midnight(self, base_time):
        midnight = base_time + 14 * HOUR
        block = _block(midnight - 30 * MINUTE, midnight + 30 * MINUTE)
        activity = hourly_activity([block])
        assert activity[23] > 0
        assert activity[0] > 0

    def test_activity_section(self, base_time):
        blocks = [_block(base_time, base_time + MINUTE, tab_switches=4), _block(base_time, base_time, tab_switches=0)]
        section = activity_section(blocks)
        assert section["total_blocks"] == 2
        assert section["block_types"] == {"active": 2}
        assert section["average_tab_switches"] == 2.0


class TestDomainsSection:
    """Tests for domains_section."""

    def test_rankings_and_distribution(self):
        domains = [
            _domain("a.com", 1 * MINUTE, focus_score=90, category="work"),
            _domain("b.com", 3 * MINUTE, focus_score=10, category="work"),
            _domain("c.com", 0, focus_score=50, category="social"),
        ]
        section = domains_section(domains)
        assert section["total_domains"] == 3
        assert [d["domain"] for d in section["top_domains"]] == ["b.com", "a.com", "c.com"]
        assert section["focus_leaders"][0]["domain"] == "a.com"
        assert section["time_distribution"]["b.com"] == pytest.approx(75.0)
        assert section["productivity_by_category"]["work"]["total_time"] == 4 * MINUTE
        assert section["productivity_by_category"]["work"]["average_focus_score"] == pytest.approx(50.0)

    def test_top_ten_only(self):
        domains = [_domain(f"site{i}.com", (i + 1) * MINUTE) for i in range(15)]
        section = domains_section(domains)
        assert len(section["top_domains"]) == 10
        assert len(section["focus_leaders"]) == 5
        assert len(section["time_distribution"]) == 10

    def test_no_time(self):
        section = domains_section([_domain("a.com", 0)])
        assert section["time_distribution"] == {"a.com": 0.0}


class TestBuildSections:
    """Tests for build_sections."""

    def test_blocks_in_range_is_inclusive(self):
        blocks = [_block(0, 10), _block(10, 20), _block(15, 30)]
        assert len(blocks_in_range(blocks, DateRange(start=0, end=20))) == 2

    def test_inverted_range_empties_everything(self):
        blocks = [_block(0, 10)]
        domains = [_domain("a.com", 10)]
        sections = build_sections(
            ["time", "domains", "activity"], DateRange(start=10, end=0), blocks, [], domains, None
        )
        assert sections["time"]["total_time"] == 0
        assert sections["domains"]["total_domains"] == 0
        assert sections["activity"]["total_blocks"] == 0

    def test_only_requested_sections(self):
        sections = build_sections(["activity", "bogus"], DateRange(start=0, end=1), [], [], [], None)
        assert list(sections) == ["activity"]
