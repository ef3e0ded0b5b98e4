# ==============================================================================
# Event File Loading
# ==============================================================================
"""
Load browsing events exported by the capture layer.

Supported formats:
- .json: an array of events, or an object with an "events" array
- .jsonl / .ndjson: one event object per line
- .csv: one event per row; metadata either as a JSON text column named
  "metadata" or as flat "metadata.<key>" columns

Records that fail validation are skipped with a warning so a single bad row
does not discard an entire export.
"""

import json
import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Any, Union

from pydantic import ValidationError

from sessionlens.core.models import BrowsingEvent

logger = logging.getLogger(__name__)

METADATA_PREFIX = "metadata."


class EventLoadError(ValueError):
    """Raised when an event file cannot be read."""

    pass


def parse_events(records: Iterable[dict[str, Any]]) -> list[BrowsingEvent]:
    """
    Validate raw event dicts into BrowsingEvent models.

    Args:
        records: Event dicts (snake_case or camelCase keys)

    Returns:
        Valid events in input order
    """
    events = []
    skipped = 0
    for index, record in enumerate(records):
        try:
            events.append(BrowsingEvent.model_validate(record))
        except ValidationError as e:
            skipped += 1
            logger.warning("Skipping invalid event record %d: %s", index, e.errors()[0]["msg"])
    if skipped:
        logger.warning("Skipped %d invalid event record(s)", skipped)
    return events


def _read_json(path: Path) -> list[dict[str, Any]]:
    data = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(data, dict):
        data = data.get("events", [])
    if not isinstance(data, list):
        raise EventLoadError(f"Expected a list of events in {path}")
    return data


def _read_json_lines(path: Path) -> list[dict[str, Any]]:
    records = []
    with path.open(encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if line:
                records.append(json.loads(line))
    return records


def _csv_row_to_record(row: dict[str, Any]) -> dict[str, Any]:
    record: dict[str, Any] = {}
    metadata: dict[str, Any] = {}

    for key, value in row.items():
        if value is None or value == "":
            continue
        if key == "metadata":
            try:
                parsed = json.loads(value)
            except (json.JSONDecodeError, TypeError):
                logger.debug("Ignoring unparseable metadata column: %r", value)
                continue
            if isinstance(parsed, dict):
                metadata.update(parsed)
            else:
                logger.debug("Ignoring non-object metadata column: %r", value)
        elif key.startswith(METADATA_PREFIX):
            metadata[key[len(METADATA_PREFIX) :]] = value
        else:
            record[key] = value

    record["metadata"] = metadata
    return record


def _read_csv(path: Path) -> list[dict[str, Any]]:
    import polars as pl

    # Read every column as text; pydantic coerces the declared field types
    try:
        df = pl.read_csv(path, infer_schema_length=0)
    except pl.exceptions.PolarsError as e:
        raise EventLoadError(f"Could not read CSV {path}: {e}") from e

    return [_csv_row_to_record(row) for row in df.iter_rows(named=True)]


def load_events(path: Union[str, Path]) -> list[BrowsingEvent]:
    """
    Load and validate events from a file.

    Args:
        path: Path to a .json, .jsonl, .ndjson or .csv file

    Returns:
        Valid events in file order (not sorted)

    Raises:
        EventLoadError: If the file is missing, unreadable or of an unknown type
    """
    path = Path(path)
    if not path.is_file():
        raise EventLoadError(f"Event file not found: {path}")

    suffix = path.suffix.lower()
    try:
        if suffix == ".json":
            records = _read_json(path)
        elif suffix in (".jsonl", ".ndjson"):
            records = _read_json_lines(path)
        elif suffix == ".csv":
            records = _read_csv(path)
        else:
            raise EventLoadError(f"Unsupported event file type: {suffix or path.name}")
    except json.JSONDecodeError as e:
        raise EventLoadError(f"Invalid JSON in {path}: {e}") from e
    except (UnicodeDecodeError, OSError) as e:
        raise EventLoadError(f"Could not read {path}: {e}") from e

    events = parse_events(r for r in records if isinstance(r, dict))
    logger.info("Loaded %d event(s) from %s", len(events), path)
    return events
