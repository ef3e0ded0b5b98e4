# ==============================================================================
# Time Blocks - Segmentation and Classification
# ==============================================================================
"""
Segment a sorted event batch into time blocks and classify each block.

A block closes when the next event is more than `block_gap_ms` later, when
there is no next event, or when it already holds `max_block_events` events.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field

from sessionlens.core.models import BlockType, BrowsingEvent, EventType, TimeBlock
from sessionlens.utils.config import AnalyticsSettings


def classify_time_block(
    duration: int,
    event_count: int,
    domain_count: int,
    switch_count: int,
    settings: AnalyticsSettings,
) -> BlockType:
    """
    Classify a block from its activity profile.

    Rules are checked in order: idle, focused, distracted, active.

    Args:
        duration: Block length in milliseconds
        event_count: Number of events in the block
        domain_count: Number of distinct domains touched
        switch_count: Tab activations plus window focus changes
        settings: Classification thresholds

    Returns:
        The block type
    """
    minutes = max(duration, 1) / 60000.0
    density = event_count / minutes
    switch_rate = switch_count / minutes

    if density < settings.idle_density or (
        duration > settings.idle_block_ms and density < settings.sustained_density
    ):
        return BlockType.IDLE

    if (
        domain_count <= settings.focused_max_domains
        and switch_rate < settings.focused_max_switch_rate
        and duration > settings.focused_min_ms
    ):
        return BlockType.FOCUSED

    if domain_count > settings.distracted_min_domains or switch_rate > settings.distracted_switch_rate:
        return BlockType.DISTRACTED

    return BlockType.ACTIVE


@dataclass
class _OpenBlock:
    start: int
    events: list = field(default_factory=list)
    domains: list = field(default_factory=list)
    tab_switches: int = 0
    window_switches: int = 0

    def add(self, event: BrowsingEvent) -> None:
        self.events.append(event)
        domain = event.domain
        if domain and domain not in self.domains:
            self.domains.append(domain)
        if event.type == EventType.TAB_ACTIVATED:
            self.tab_switches += 1
        elif event.type == EventType.WINDOW_FOCUS_CHANGED:
            self.window_switches += 1

    def close(self, end: int, settings: AnalyticsSettings) -> TimeBlock:
        duration = end - self.start
        block_type = classify_time_block(
            duration,
            len(self.events),
            len(self.domains),
            self.tab_switches + self.window_switches,
            settings,
        )
        return TimeBlock(
            start=self.start,
            end=end,
            duration=duration,
            type=block_type,
            events=self.events,
            domains=self.domains,
            tab_switches=self.tab_switches,
            window_switches=self.window_switches,
        )


def create_time_blocks(events: Sequence[BrowsingEvent], settings: AnalyticsSettings) -> list[TimeBlock]:
    """
    Segment events into classified time blocks.

    Args:
        events: Events sorted by timestamp
        settings: Segmentation and classification thresholds

    Returns:
        Blocks in chronological order; empty for an empty batch
    """
    blocks: list[TimeBlock] = []
    if not events:
        return blocks

    current = _OpenBlock(start=events[0].timestamp)
    for i, event in enumerate(events):
        next_event = events[i + 1] if i + 1 < len(events) else None
        current.add(event)

        if (
            next_event is None
            or next_event.timestamp - event.timestamp > settings.block_gap_ms
            or len(current.events) >= settings.max_block_events
        ):
            blocks.append(current.close(event.timestamp, settings))
            if next_event is not None:
                current = _OpenBlock(start=next_event.timestamp)

    return blocks
