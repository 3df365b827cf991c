"""Loading component records produced by the extraction layer."""

import json
from pathlib import Path
from typing import Any

from .dedup_logging import LogCategory, get_category_logger
from .errors import InputError
from .models import ComponentRecord
from .performance import timed

logger = get_category_logger(LogCategory.ANALYZER)

JSON_LINES_SUFFIXES = (".jsonl", ".ndjson")


@timed("load_components")
def load_components(path: Path | str) -> list[ComponentRecord]:
    """Load component records from a JSON or JSON Lines file.

    Accepted layouts are a JSON array of records, an object with a
    ``components`` array, or one record per line for ``.jsonl`` files.

    Raises:
        InputError: The file cannot be read or a record is malformed.
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise InputError(f"Cannot read {path}: {e}", file_path=str(path)) from e

    if path.suffix.lower() in JSON_LINES_SUFFIXES:
        payloads = _parse_json_lines(text, path)
    else:
        payloads = _parse_json(text, path)

    records = [_to_record(payload, index, path) for index, payload in enumerate(payloads)]
    logger.info(
        f"Loaded {len(records)} components from {path}",
        extra={"component_count": len(records)},
    )
    return records


def parse_components(data: Any, source: str = "<data>") -> list[ComponentRecord]:
    """Build records from already decoded JSON data."""
    payloads = _unwrap(data, source)
    return [_to_record(payload, index, source) for index, payload in enumerate(payloads)]


def _parse_json(text: str, path: Path) -> list[Any]:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise InputError(
            f"Invalid JSON in {path} at line {e.lineno}: {e.msg}",
            file_path=str(path),
        ) from e
    return _unwrap(data, str(path))


def _parse_json_lines(text: str, path: Path) -> list[Any]:
    payloads = []
    for line_number, line in enumerate(text.splitlines(), start=1):
        if not line.strip():
            continue
        try:
            payloads.append(json.loads(line))
        except json.JSONDecodeError as e:
            raise InputError(
                f"Invalid JSON on line {line_number} of {path}: {e.msg}",
                file_path=str(path),
            ) from e
    return payloads


def _unwrap(data: Any, source: str) -> list[Any]:
    if isinstance(data, dict) and isinstance(data.get("components"), list):
        return data["components"]
    if isinstance(data, list):
        return data
    raise InputError(
        f"Expected a list of components in {source}",
        file_path=source,
    )


def _to_record(payload: Any, index: int, source: Path | str) -> ComponentRecord:
    if not isinstance(payload, dict):
        raise InputError(
            f"Component #{index} in {source} is not an object",
            file_path=str(source),
        )
    try:
        return ComponentRecord.from_dict(payload)
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise InputError(
            f"Malformed component #{index} in {source}: {e!r}",
            file_path=str(source),
            suggestion="Each component needs a name and a file path",
        ) from e
