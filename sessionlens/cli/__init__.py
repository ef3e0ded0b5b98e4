# ==============================================================================
# CLI Commands Module
# ==============================================================================
"""
CLI commands for sessionlens.

Commands are organized into separate modules for maintainability:
- shared.py: Common utilities, constants, and helpers
- detect.py: Session boundary detection over an event file
- analyze.py: Behavioral analytics over an event file
- config.py: Configuration display
"""

from sessionlens.cli.shared import (
    # Constants
    BOX_WIDTH,
    # Classes
    Box,
    Colors,
    Icons,
    # Aliases
    B,
    C,
    I,
    # Box drawing helpers (private)
    _box_bottom,
    _box_header,
    _box_line,
    _empty_line,
    _section_header,
    _visible_len,
    # Formatting
    format_duration,
    format_timestamp,
    # Command helpers
    load_events_or_exit,
    setup_logging,
)

__all__ = [
    # Constants
    "BOX_WIDTH",
    # Classes
    "Box",
    "Colors",
    "Icons",
    # Aliases
    "B",
    "C",
    "I",
    # Box drawing helpers (private - kept for internal use)
    "_box_bottom",
    "_box_header",
    "_box_line",
    "_empty_line",
    "_section_header",
    "_visible_len",
    # Formatting
    "format_duration",
    "format_timestamp",
    # Command helpers
    "load_events_or_exit",
    "setup_logging",
]
