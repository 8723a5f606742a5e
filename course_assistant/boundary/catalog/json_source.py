"""
JSON file catalog source.

Reads the published course catalog: a JSON array of raw course records.

Dependencies: json (stdlib), course_assistant.core.exceptions
System role: Catalog data source
"""

import json
import logging
from pathlib import Path
from typing import Any

from course_assistant.core.exceptions import CatalogLoadError

logger = logging.getLogger(__name__)


def load_raw_records(path: str | Path) -> list[Any]:
    """
    Read raw course records from a JSON file.

    Args:
        path: Path to a UTF-8 JSON file whose root is an array

    Returns:
        list: Raw records, unvalidated

    Raises:
        CatalogLoadError: File missing, unreadable, not JSON, or root not an array
    """
    source = Path(path)
    try:
        raw = source.read_text(encoding="utf-8")
    except OSError as e:
        raise CatalogLoadError(f"Cannot read catalog file: {e}", source=str(source)) from e

    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError as e:
        raise CatalogLoadError(f"Catalog is not valid JSON: {e}", source=str(source)) from e

    if not isinstance(parsed, list):
        raise CatalogLoadError("Catalog root is not an array", source=str(source))

    logger.debug("Read %d raw catalog records from %s", len(parsed), source)
    return parsed
