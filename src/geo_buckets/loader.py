"""Readers for point files fed to the CLI.

Two formats are understood:

* CSV with a header containing ``lat`` and ``lon`` (``latitude`` and
  ``longitude`` also work) and an optional ``payload`` column.
* A JSON array of objects using the same keys.

Malformed rows are skipped with a warning rather than aborting the load.
"""

from __future__ import annotations

import csv
import io
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

logger = logging.getLogger(__name__)

_LAT_KEYS = ("lat", "latitude")
_LON_KEYS = ("lon", "lng", "longitude")


@dataclass
class Point:
    latitude: float
    longitude: float
    payload: Optional[Any] = None


@dataclass
class LoadResult:
    points: list[Point]
    skipped: int = 0


def _pick(row: dict, keys: tuple[str, ...]) -> Any:
    for key in keys:
        if row.get(key) not in (None, ""):
            return row[key]
    return None


def _row_to_point(row: dict) -> Point:
    lat = _pick(row, _LAT_KEYS)
    lon = _pick(row, _LON_KEYS)
    if lat is None or lon is None:
        raise KeyError("lat/lon")
    if isinstance(lat, bool) or isinstance(lon, bool):
        raise TypeError("lat/lon must be numbers, not booleans")
    payload = row.get("payload")
    if payload == "":
        payload = None
    return Point(latitude=float(lat), longitude=float(lon), payload=payload)


def parse_csv(text: str) -> LoadResult:
    reader = csv.DictReader(io.StringIO(text))
    result = LoadResult(points=[])
    for line_no, row in enumerate(reader, start=2):
        normalized = {
            (k or "").strip().lower(): v.strip() if isinstance(v, str) else v
            for k, v in row.items()
        }
        try:
            result.points.append(_row_to_point(normalized))
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning("Skipping CSV line %d: %s", line_no, exc)
            result.skipped += 1
    return result


def parse_json(text: str) -> LoadResult:
    data = json.loads(text)
    if not isinstance(data, list):
        raise ValueError("JSON point file must contain an array of objects")

    result = LoadResult(points=[])
    for i, item in enumerate(data):
        try:
            if not isinstance(item, dict):
                raise TypeError(f"expected an object, got {type(item).__name__}")
            result.points.append(_row_to_point({k.lower(): v for k, v in item.items()}))
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning("Skipping JSON item %d: %s", i, exc)
            result.skipped += 1
    return result


def load_points(path: Path) -> LoadResult:
    """Load a point file, choosing the format from its suffix."""
    text = Path(path).read_text(encoding="utf-8")
    if Path(path).suffix.lower() == ".json":
        return parse_json(text)
    return parse_csv(text)
