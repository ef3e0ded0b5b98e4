# ==============================================================================
# Analyze Command
# ==============================================================================
"""
Behavioral analytics command for the sessionlens CLI.

Runs an event file through the AnalyticsEngine and prints the requested
query sections as a summary box and a table of top domains.
"""

import asyncio
import json
from pathlib import Path
from typing import Annotated, Any, Optional

import typer
from rich.console import Console
from rich.table import Table

from sessionlens.cli.shared import (
    BOX_WIDTH,
    C,
    I,
    _box_bottom,
    _box_header,
    _box_line,
    _empty_line,
    _section_header,
    format_duration,
    load_events_or_exit,
    setup_logging,
)
from sessionlens.core.analytics_engine import AnalyticsEngine
from sessionlens.core.models import AnalyticsQuery, BrowsingEvent, DateRange
from sessionlens.utils.config import Settings, get_settings

ALL_METRICS = ["time", "productivity", "patterns", "domains", "activity"]

# Full epoch-millisecond range used when --start/--end are omitted
_RANGE_MIN = 0
_RANGE_MAX = 2**53 - 1


async def run_analysis(
    events: list[BrowsingEvent], query: AnalyticsQuery, settings: Settings
) -> dict[str, Any]:
    """Process a batch with a fresh engine and answer one query against it."""
    engine = AnalyticsEngine(settings.analytics, settings.categories.table)
    await engine.process_events(events)
    return await engine.query_analytics(query)


# ==============================================================================
# Output
# ==============================================================================


def _print_summary(results: dict[str, Any], event_count: int) -> None:
    W = BOX_WIDTH
    print()
    print(_box_header("SESSION ANALYTICS", W))
    print(_empty_line(W))
    print(_box_line(f"  {C.DIM}Events analyzed:{C.RESET}  {event_count:,}", W))
    print(_empty_line(W))

    time_section = results.get("time")
    if time_section is not None:
        print(_section_header("Time", W))
        print(_empty_line(W))
        for label, key in (
            ("Total", "total_time"),
            ("Active", "active_time"),
            ("Focused", "focused_time"),
            ("Distracted", "distracted_time"),
            ("Idle", "idle_time"),
        ):
            print(_box_line(f"  {label:<12}{format_duration(time_section[key]):>12}", W))
        print(_box_line(f"  {'Blocks':<12}{time_section['block_count']:>12,}", W))
        print(_empty_line(W))

    if "productivity" in results:
        print(_section_header("Productivity", W))
        print(_empty_line(W))
        productivity = results["productivity"]
        if productivity is None:
            print(_box_line(f"  {C.DIM}No metrics for this session{C.RESET}", W))
        else:
            score = productivity["focus_score"]
            color = C.BRIGHT_GREEN if score >= 70 else C.BRIGHT_YELLOW if score >= 40 else C.BRIGHT_RED
            print(_box_line(f"  {'Focus score':<20}{color}{score:>6.1f}{C.RESET}", W))
            print(_box_line(f"  {'Deep work periods':<20}{productivity['deep_work_periods']:>6}", W))
            print(
                _box_line(f"  {'Distractions':<20}{productivity['distraction_periods']:>6}", W)
            )
            for recommendation in productivity["recommendations"]:
                print(_box_line(f"  {C.YELLOW}{I.ARROW}{C.RESET} {recommendation[:60]}", W))
        print(_empty_line(W))

    patterns = results.get("patterns")
    if patterns is not None:
        print(_section_header("Patterns", W))
        print(_empty_line(W))
        if not patterns["pattern_types"]:
            print(_box_line(f"  {C.DIM}No patterns detected{C.RESET}", W))
        for pattern_type, count in sorted(patterns["pattern_types"].items()):
            print(_box_line(f"  {I.BULLET} {pattern_type:<20}{count:>6}", W))
        print(_empty_line(W))

    activity = results.get("activity")
    if activity is not None:
        print(_section_header("Activity", W))
        print(_empty_line(W))
        for block_type, count in sorted(activity["block_types"].items()):
            print(_box_line(f"  {I.BULLET} {block_type:<20}{count:>6}", W))
        print(
            _box_line(f"  {'Avg tab switches':<22}{activity['average_tab_switches']:>6.1f}", W)
        )
        print(_empty_line(W))

    print(_box_bottom(W))


def _print_domains(domains: dict[str, Any]) -> None:
    if not domains["top_domains"]:
        return

    console = Console()
    table = Table(
        title=f"Top Domains ({domains['total_domains']} total)",
        show_header=True,
        header_style="bold",
    )
    table.add_column("Domain")
    table.add_column("Category")
    table.add_column("Time", justify="right")
    table.add_column("Visits", justify="right")
    table.add_column("Focus", justify="right")
    table.add_column("Productivity")

    for domain in domains["top_domains"]:
        table.add_row(
            domain["domain"],
            domain["category"],
            format_duration(domain["total_time"]),
            f"{domain['visit_count']:,}",
            f"{domain['focus_score']:.0f}",
            domain["productivity"],
        )

    print()
    console.print(table)


# ==============================================================================
# Commands
# ==============================================================================


def analyze_events(
    file: Annotated[Path, typer.Argument(help="Event file (.json, .jsonl, .ndjson or .csv)")],
    metric: Annotated[
        Optional[list[str]],
        typer.Option(
            "--metric",
            "-m",
            help="Section to include (time, productivity, patterns, domains, activity). Repeatable.",
        ),
    ] = None,
    session: Annotated[
        Optional[str], typer.Option("--session", "-s", help="Session id for productivity metrics")
    ] = None,
    start: Annotated[
        Optional[int], typer.Option("--start", help="Range start (epoch milliseconds)")
    ] = None,
    end: Annotated[Optional[int], typer.Option("--end", help="Range end (epoch milliseconds)")] = None,
    json_output: Annotated[
        bool, typer.Option("--json", "-j", help="Output as JSON for scripting")
    ] = False,
) -> None:
    """Run behavioral analytics over an event file.

    Examples:
        sessionlens analyze events.json
        sessionlens analyze events.csv -m time -m domains
        sessionlens analyze events.jsonl --start 1700000000000 --json
    """
    settings = get_settings()
    setup_logging(settings)

    events = load_events_or_exit(file, json_output)
    query = AnalyticsQuery(
        session_id=session,
        date_range=DateRange(
            start=_RANGE_MIN if start is None else start,
            end=_RANGE_MAX if end is None else end,
        ),
        metrics=metric or ALL_METRICS,
    )
    results = asyncio.run(run_analysis(events, query, settings))

    if json_output:
        print(json.dumps({"events": len(events), **results}, indent=2))
        return

    _print_summary(results, len(events))
    if "domains" in results:
        _print_domains(results["domains"])
    print()
