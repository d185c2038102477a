"""
Dataset Loading

Reads the JSON exports the engines are built from. Missing files and wrong
top-level shapes fail here, before any index is built.
"""

import json
import logging
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


def load_json_rows(path: str | Path) -> list[dict[str, Any]]:
    """
    Load a JSON file holding a list of row objects.

    Raises:
        FileNotFoundError: The file does not exist
        ValueError: The top level is not a list
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Dataset not found: {path}")

    with open(path, encoding="utf-8") as f:
        data = json.load(f)

    if not isinstance(data, list):
        raise ValueError(f"Expected a JSON list in {path}, got {type(data).__name__}")

    rows = [row for row in data if isinstance(row, dict)]
    if len(rows) != len(data):
        logger.debug("Ignored %d non-object rows in %s", len(data) - len(rows), path)

    logger.info("Loaded %d rows from %s", len(rows), path)
    return rows


def load_optional_rows(path: str | Path | None) -> list[dict[str, Any]]:
    """Like load_json_rows, but an unset path means no rows."""
    if not path:
        return []
    return load_json_rows(path)
