# ==============================================================================
# Analytics Engine - Batch Behavioral Analytics
# ==============================================================================
"""
Batch behavioral analytics over a finished set of browsing events.

process_events() discards everything computed for the previous batch and
rebuilds, in order: time blocks, domain analytics, activity patterns and
productivity metrics. query_analytics() reads from that state.

The async methods contain no suspension points; they are async so callers can
schedule them alongside I/O-bound work. Do not query while a process_events()
call on the same instance is in flight.
"""

import logging
from collections.abc import Iterable, Mapping
from typing import Any, Optional, Union

from pydantic import ValidationError

from sessionlens.core.domain_analysis import analyze_domains
from sessionlens.core.models import (
    ActivityPattern,
    AnalyticsQuery,
    BlockType,
    BrowsingEvent,
    DomainAnalytics,
    ProductivityMetrics,
    TimeBlock,
)
from sessionlens.core.patterns import detect_activity_patterns
from sessionlens.core.productivity import calculate_productivity_metrics
from sessionlens.core.queries import build_sections
from sessionlens.core.time_blocks import create_time_blocks
from sessionlens.utils.config import AnalyticsSettings, CategorySettings

logger = logging.getLogger(__name__)


class AnalyticsEngine:
    """
    Time-block, domain, pattern and productivity analytics for one batch.

    Use one instance per independently analyzed event set.
    """

    def __init__(
        self,
        settings: Optional[AnalyticsSettings] = None,
        categories: Optional[Mapping[str, Iterable[str]]] = None,
    ):
        """
        Initialize the engine.

        Args:
            settings: Analytics thresholds (defaults from environment)
            categories: Category name -> domain keywords for domain categorization
        """
        self.settings = settings or AnalyticsSettings()
        self.categories = categories if categories is not None else CategorySettings().table
        self._time_blocks: list[TimeBlock] = []
        self._domain_analytics: dict[str, DomainAnalytics] = {}
        self._activity_patterns: list[ActivityPattern] = []
        self._cached_metrics: dict[str, ProductivityMetrics] = {}

    # --------------------------------------------------------------------------
    # Read-only state
    # --------------------------------------------------------------------------

    @property
    def time_blocks(self) -> tuple[TimeBlock, ...]:
        return tuple(self._time_blocks)

    @property
    def domain_analytics(self) -> dict[str, DomainAnalytics]:
        return dict(self._domain_analytics)

    @property
    def activity_patterns(self) -> tuple[ActivityPattern, ...]:
        return tuple(self._activity_patterns)

    def get_metrics(self, session_id: Optional[str] = None) -> Optional[ProductivityMetrics]:
        """Metrics for a session id, or the first cached metrics when no id is given."""
        if session_id:
            return self._cached_metrics.get(session_id)
        return next(iter(self._cached_metrics.values()), None)

    # --------------------------------------------------------------------------
    # Processing
    # --------------------------------------------------------------------------

    async def process_events(self, events: Iterable[BrowsingEvent]) -> None:
        """
        Rebuild all analytics from a batch of events.

        Args:
            events: Events in any order; sorted by timestamp (stable) on ingestion
        """
        self.clear_analytics()

        ordered = sorted(events, key=lambda e: e.timestamp)
        if not ordered:
            return

        self._time_blocks = create_time_blocks(ordered, self.settings)
        self._domain_analytics = analyze_domains(
            ordered, self._time_blocks, self.settings, self.categories
        )
        self._activity_patterns = detect_activity_patterns(self._time_blocks, self.settings)

        metrics = calculate_productivity_metrics(ordered, self._time_blocks, self.settings)
        self._cached_metrics[metrics.session_id] = metrics

        logger.info(
            "Processed %d events: %d blocks, %d domains, %d patterns, focus score %.1f",
            len(ordered),
            len(self._time_blocks),
            len(self._domain_analytics),
            len(self._activity_patterns),
            metrics.focus_score,
        )

    async def query_analytics(
        self, query: Union[AnalyticsQuery, Mapping[str, Any]]
    ) -> dict[str, Any]:
        """
        Return the requested analytics sections.

        Args:
            query: AnalyticsQuery, or a mapping with the same fields
                   (camelCase keys accepted)

        Returns:
            Dict with one key per recognised metric name in the query; empty
            when the query mapping cannot be validated
        """
        if not isinstance(query, AnalyticsQuery):
            try:
                query = AnalyticsQuery.model_validate(query)
            except ValidationError as e:
                logger.warning("Ignoring invalid analytics query: %s", e)
                return {}

        return build_sections(
            query.metrics,
            query.date_range,
            self._time_blocks,
            self._activity_patterns,
            list(self._domain_analytics.values()),
            self.get_metrics(query.session_id),
        )

    # --------------------------------------------------------------------------
    # Configuration and introspection
    # --------------------------------------------------------------------------

    def update_config(self, settings: AnalyticsSettings) -> None:
        """Replace thresholds for future batches. Existing results are kept as-is."""
        self.settings = settings

    def get_analytics_stats(self) -> dict[str, int]:
        return {
            "time_blocks": len(self._time_blocks),
            "domains": len(self._domain_analytics),
            "patterns": len(self._activity_patterns),
            "cached_metrics": len(self._cached_metrics),
            "focused_blocks": sum(1 for b in self._time_blocks if b.type == BlockType.FOCUSED),
            "distracted_blocks": sum(
                1 for b in self._time_blocks if b.type == BlockType.DISTRACTED
            ),
        }

    def clear_analytics(self) -> None:
        """Discard all computed state."""
        self._time_blocks = []
        self._domain_analytics = {}
        self._activity_patterns = []
        self._cached_metrics = {}
