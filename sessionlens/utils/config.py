# ==============================================================================
# Application Configuration
# ==============================================================================
"""
Configuration management using pydantic-settings.

All configuration is loaded from environment variables, with support for
.env files via python-dotenv. Every heuristic constant used by the detector
and the analytics engine is exposed here as a default so it can be tuned
without touching the algorithms.
"""

from functools import lru_cache

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load .env file before any settings are instantiated
load_dotenv()

MINUTE_MS = 60 * 1000
HOUR_MS = 60 * MINUTE_MS


class DetectorSettings(BaseSettings):
    """Session boundary detector settings."""

    model_config = SettingsConfigDict(env_prefix="SESSIONLENS_DETECTOR_")

    idle_threshold_ms: int = Field(
        default=5 * MINUTE_MS, description="Inactivity before an idle signal fires"
    )
    session_gap_threshold_ms: int = Field(
        default=10 * MINUTE_MS, description="Gap between navigations before a gap signal fires"
    )
    domain_change_session_boundary: bool = Field(
        default=True, description="Emit domain change signals"
    )
    boundary_threshold: float = Field(
        default=0.7, description="Mean signal strength required to create a boundary"
    )

    # Rolling context capacities
    context_window_size: int = Field(default=50, description="Recent events kept in context")
    max_tracked_domains: int = Field(
        default=10, description="Active domains kept before pruning"
    )
    domain_prune_window: int = Field(
        default=20, description="Recent events whose domains survive a prune"
    )
    navigation_gap_history: int = Field(default=10, description="Navigation gaps kept")
    domain_transition_history: int = Field(default=20, description="Domain transitions kept")
    signal_history_limit: int = Field(
        default=100, description="Signal history size that triggers a trim"
    )
    signal_history_keep: int = Field(default=50, description="Signals kept after a trim")

    # Signal calibration
    resume_quiet_ratio: float = Field(
        default=0.8, description="Fraction of the idle threshold that counts as a quiet period"
    )
    new_window_quiet_ms: int = Field(
        default=MINUTE_MS, description="Quiet period before a new window signals a boundary"
    )
    long_session_ms: int = Field(
        default=8 * HOUR_MS, description="Session duration that starts a time-based signal"
    )
    long_session_saturation_ms: int = Field(
        default=12 * HOUR_MS, description="Session duration used to scale the signal"
    )
    hour_transitions: list[int] = Field(
        default=[9, 12, 17, 22], description="Hours of day (UTC) treated as transitions"
    )
    hour_transition_window_ms: int = Field(
        default=5 * MINUTE_MS, description="How close to now an hour transition must be"
    )


class AnalyticsSettings(BaseSettings):
    """Behavioral analytics engine settings."""

    model_config = SettingsConfigDict(env_prefix="SESSIONLENS_ANALYTICS_")

    deep_work_threshold_ms: int = Field(
        default=15 * MINUTE_MS, description="Focused block length that counts as deep work"
    )
    distraction_threshold_ms: int = Field(
        default=30 * 1000, description="Distracted block length that counts as a distraction"
    )

    # Segmentation
    block_gap_ms: int = Field(default=5 * MINUTE_MS, description="Gap that closes a time block")
    max_block_events: int = Field(default=50, description="Events that close a time block")

    # Classification
    idle_density: float = Field(
        default=0.1, description="Events per minute below which a block is idle"
    )
    idle_block_ms: int = Field(
        default=10 * MINUTE_MS, description="Block length above which sparse blocks are idle"
    )
    sustained_density: float = Field(
        default=1.0, description="Events per minute that keep a long block from being idle"
    )
    focused_min_ms: int = Field(default=3 * MINUTE_MS, description="Minimum focused block length")
    focused_max_domains: int = Field(default=2, description="Maximum domains in a focused block")
    focused_max_switch_rate: float = Field(
        default=2.0, description="Switches per minute below which a block can be focused"
    )
    distracted_min_domains: int = Field(
        default=5, description="Domains above which a block is distracted"
    )
    distracted_switch_rate: float = Field(
        default=5.0, description="Switches per minute above which a block is distracted"
    )

    # Domain analysis
    visit_gap_ms: int = Field(default=10 * MINUTE_MS, description="Gap that splits domain visits")
    single_visit_ms: int = Field(
        default=30 * 1000, description="Time credited to a single-event visit"
    )
    peak_hour_factor: float = Field(
        default=1.5, description="Multiple of the hourly average that makes a peak hour"
    )

    # Pattern detection
    multitasking_min_domains: int = Field(
        default=3, description="Minimum domains in a multitasking block"
    )
    multitasking_switch_rate: float = Field(
        default=3.0, description="Tab switches per minute above which a block is multitasking"
    )
    spree_max_page_time_ms: int = Field(
        default=30 * 1000, description="Average page time below which a block is a browsing spree"
    )
    spree_min_events: int = Field(
        default=10, description="Events above which a fast block is a browsing spree"
    )
    research_min_domains: int = Field(default=2, description="Minimum domains in research mode")
    research_min_scrolls: int = Field(
        default=5, description="Scroll events above which a block can be research mode"
    )
    research_min_duration_ms: int = Field(
        default=5 * MINUTE_MS, description="Block length above which a block can be research mode"
    )


def _default_category_table() -> dict[str, list[str]]:
    # Import here to avoid circular imports
    from sessionlens.core.domains import DEFAULT_CATEGORY_TABLE

    return {category: list(keywords) for category, keywords in DEFAULT_CATEGORY_TABLE.items()}


class CategorySettings(BaseSettings):
    """Domain category tables (category -> domain keywords).

    Override with a JSON object, e.g.
    SESSIONLENS_CATEGORY_TABLE='{"work": ["corp.example.com"], "social": ["reddit.com"]}'
    """

    model_config = SettingsConfigDict(env_prefix="SESSIONLENS_CATEGORY_")

    table: dict[str, list[str]] = Field(
        default_factory=_default_category_table,
        description="Category name -> domain keywords, checked in order",
    )


class TrackingSettings(BaseSettings):
    """Capture toggles consumed by the upstream extension, kept for completeness."""

    model_config = SettingsConfigDict(env_prefix="SESSIONLENS_TRACKING_")

    enable_form_tracking: bool = Field(default=True, description="Capture form interactions")
    enable_scroll_tracking: bool = Field(default=True, description="Capture scroll events")
    enable_click_tracking: bool = Field(default=True, description="Capture click events")


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_prefix="SESSIONLENS_",
        extra="ignore",
    )

    # Nested settings
    detector: DetectorSettings = Field(default_factory=DetectorSettings)
    analytics: AnalyticsSettings = Field(default_factory=AnalyticsSettings)
    categories: CategorySettings = Field(default_factory=CategorySettings)
    tracking: TrackingSettings = Field(default_factory=TrackingSettings)

    # General settings
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: str = Field(default="INFO", description="Logging level")


@lru_cache
def get_settings() -> Settings:
    """
    Get cached application settings.

    Settings are loaded once and cached for subsequent calls.
    """
    return Settings()
