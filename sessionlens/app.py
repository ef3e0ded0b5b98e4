# ==============================================================================
# Session Lens CLI
# ==============================================================================
"""
Command-line interface for browsing session detection and analytics.

Usage:
    sessionlens --help
    sessionlens --version
    sessionlens detect events.json
    sessionlens analyze events.csv --metric domains
    sessionlens config show
"""

# ==============================================================================
# App Configuration
# ==============================================================================
# Set consistent terminal width for help output formatting
import os
from typing import Annotated, Optional

import typer

if "COLUMNS" not in os.environ:
    os.environ["COLUMNS"] = "115"

app = typer.Typer(
    name="sessionlens",
    help="Browsing session detection and activity analytics CLI",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    if value:
        from sessionlens.utils.versions import get_sessionlens_version

        print(f"sessionlens {get_sessionlens_version()}")
        raise typer.Exit()


@app.callback()
def _root(
    version: Annotated[
        Optional[bool],
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit",
            callback=_version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """Browsing session detection and activity analytics CLI"""


config_app = typer.Typer(
    help="Configuration management",
    no_args_is_help=True,
)
app.add_typer(config_app, name="config")

# Register config commands from cli.config module
from sessionlens.cli.config import config_show

config_app.command("show")(config_show)

# Detect command is imported from sessionlens.cli.detect
from sessionlens.cli.detect import detect_boundaries

app.command("detect")(detect_boundaries)

# Analyze command is imported from sessionlens.cli.analyze
from sessionlens.cli.analyze import analyze_events

app.command("analyze")(analyze_events)


# ==============================================================================
# Entry Point
# ==============================================================================


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
