# ==============================================================================
# Detect Command
# ==============================================================================
"""
Session boundary detection command for the sessionlens CLI.

Replays an event file through a SessionDetector in timestamp order and
reports every boundary it decides on.
"""

import json
from pathlib import Path
from typing import Annotated

import typer

from sessionlens.cli.shared import (
    BOX_WIDTH,
    C,
    I,
    _box_bottom,
    _box_header,
    _box_line,
    _empty_line,
    format_timestamp,
    load_events_or_exit,
    setup_logging,
)
from sessionlens.core.models import BrowsingEvent, SessionBoundary
from sessionlens.core.session_detector import SessionDetector
from sessionlens.utils.config import Settings, get_settings


def replay_events(
    events: list[BrowsingEvent], settings: Settings, reset_on_boundary: bool = False
) -> list[SessionBoundary]:
    """
    Feed events through a detector as if they were arriving live.

    The detector's clock follows the event being replayed, so time-based
    signals behave as they would have at capture time.

    Args:
        events: Events in any order (sorted here)
        settings: Application settings
        reset_on_boundary: Clear the detector context after each boundary

    Returns:
        Boundaries with session_id set to the session of the deciding event
    """
    ordered = sorted(events, key=lambda e: e.timestamp)
    if not ordered:
        return []

    replay_clock = {"now": ordered[0].timestamp}
    detector = SessionDetector(
        settings.detector,
        settings.categories.table,
        clock=lambda: replay_clock["now"],
    )

    boundaries = []
    for event in ordered:
        replay_clock["now"] = event.timestamp
        signals = detector.analyze_event(event)
        boundary = detector.should_create_boundary(signals)
        if boundary is None:
            continue
        boundaries.append(boundary.model_copy(update={"session_id": event.session_id}))
        if reset_on_boundary:
            detector.reset()
    return boundaries


# ==============================================================================
# Commands
# ==============================================================================


def detect_boundaries(
    file: Annotated[Path, typer.Argument(help="Event file (.json, .jsonl, .ndjson or .csv)")],
    reset_on_boundary: Annotated[
        bool,
        typer.Option("--reset/--no-reset", help="Reset detector context after each boundary"),
    ] = False,
    json_output: Annotated[
        bool, typer.Option("--json", "-j", help="Output as JSON for scripting")
    ] = False,
) -> None:
    """Detect session boundaries in an event file.

    Examples:
        sessionlens detect events.json
        sessionlens detect events.csv --reset
        sessionlens detect events.jsonl --json
    """
    settings = get_settings()
    setup_logging(settings)

    events = load_events_or_exit(file, json_output)
    boundaries = replay_events(events, settings, reset_on_boundary)

    if json_output:
        print(
            json.dumps(
                {
                    "events": len(events),
                    "boundaries": [b.model_dump(mode="json") for b in boundaries],
                },
                indent=2,
            )
        )
        return

    W = BOX_WIDTH
    print()
    print(_box_header("SESSION BOUNDARIES", W))
    print(_empty_line(W))

    if not boundaries:
        print(_box_line(f"  {C.DIM}No boundaries detected in {len(events):,} events{C.RESET}", W))
    for boundary in boundaries:
        strength = boundary.metadata.get("signal_strength", 0.0)
        signal_types = ", ".join(boundary.metadata.get("all_signal_types", []))
        print(
            _box_line(
                f"  {C.BRIGHT_CYAN}{I.BULLET}{C.RESET} {format_timestamp(boundary.timestamp)}  "
                f"{C.WHITE}{boundary.reason.value:<16}{C.RESET}{strength:>5.2f}",
                W,
            )
        )
        print(_box_line(f"      {C.DIM}{signal_types}{C.RESET}", W))

    print(_empty_line(W))
    summary = f"  {len(boundaries)} boundar{'y' if len(boundaries) == 1 else 'ies'} in {len(events):,} events"
    print(_box_line(summary, W))
    print(_box_bottom(W))
    print()
