# ==============================================================================
# Config Commands
# ==============================================================================
"""
Configuration commands for the sessionlens CLI.
"""

import json
from typing import Annotated

import typer

from sessionlens.cli.shared import (
    BOX_WIDTH,
    C,
    _box_bottom,
    _box_header,
    _box_line,
    _empty_line,
    _section_header,
)
from sessionlens.utils.config import get_settings


# ==============================================================================
# Commands
# ==============================================================================


def config_show(
    json_output: Annotated[
        bool, typer.Option("--json", "-j", help="Output configuration as JSON")
    ] = False,
) -> None:
    """Display current configuration."""
    settings = get_settings()

    if json_output:
        print(json.dumps(settings.model_dump(mode="json"), indent=2))
        return

    W = BOX_WIDTH
    print()
    print(_box_header("CONFIGURATION", W))
    print(_empty_line(W))
    print(_box_line(f"  {C.DIM}Log level:{C.RESET}  {settings.log_level}", W))
    print(_box_line(f"  {C.DIM}Debug:{C.RESET}      {settings.debug}", W))
    print(_empty_line(W))

    for title, section in (
        ("Detector", settings.detector),
        ("Analytics", settings.analytics),
        ("Tracking", settings.tracking),
    ):
        print(_section_header(title, W))
        print(_empty_line(W))
        for name, value in section.model_dump().items():
            print(_box_line(f"  {C.DIM}{name:<32}{C.RESET}{value}", W))
        print(_empty_line(W))

    print(_section_header("Categories", W))
    print(_empty_line(W))
    for category, keywords in settings.categories.table.items():
        print(_box_line(f"  {C.DIM}{category:<16}{C.RESET}{len(keywords)} keywords", W))
    print(_empty_line(W))
    print(_box_bottom(W))
    print()
