"""Index configuration: pivot point and bucket width."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from geo_buckets.errors import InvalidInput

# Pivot defaults to New York City (longitude sign as historically shipped)
DEFAULT_PIVOT_LAT = 40.7127
DEFAULT_PIVOT_LON = 74.0059
DEFAULT_MIN_DISTANCE = 10.0     # Miles with the default distance function

ENV_PIVOT_LAT = "GEO_BUCKETS_PIVOT_LAT"
ENV_PIVOT_LON = "GEO_BUCKETS_PIVOT_LON"
ENV_MIN_DISTANCE = "GEO_BUCKETS_MIN_DISTANCE"


@dataclass(frozen=True)
class IndexConfig:
    """Immutable settings of one index instance."""

    pivot_lat: float = DEFAULT_PIVOT_LAT
    pivot_lon: float = DEFAULT_PIVOT_LON
    min_distance: float = DEFAULT_MIN_DISTANCE

    def __post_init__(self):
        if self.min_distance < 0:
            raise InvalidInput("min_distance", f"must be non-negative, got {self.min_distance}")

    @classmethod
    def build(
        cls,
        lat: Optional[float] = None,
        lon: Optional[float] = None,
        min_distance: Optional[float] = None,
    ) -> IndexConfig:
        """Fill unset values with defaults. Zero is a value, not an absence."""
        return cls(
            pivot_lat=DEFAULT_PIVOT_LAT if lat is None else _as_float("lat", lat),
            pivot_lon=DEFAULT_PIVOT_LON if lon is None else _as_float("lon", lon),
            min_distance=(
                DEFAULT_MIN_DISTANCE if min_distance is None
                else _as_float("min_distance", min_distance)
            ),
        )

    @classmethod
    def from_mapping(cls, options: Mapping[str, Any]) -> IndexConfig:
        """Accept ``{lat, lon, minDistance}`` (``min_distance`` also works)."""
        min_distance = options.get("minDistance", options.get("min_distance"))
        return cls.build(options.get("lat"), options.get("lon"), min_distance)

    @classmethod
    def from_env(cls) -> IndexConfig:
        """Read overrides from ``GEO_BUCKETS_*`` environment variables."""
        return cls.build(
            _env_float(ENV_PIVOT_LAT),
            _env_float(ENV_PIVOT_LON),
            _env_float(ENV_MIN_DISTANCE),
        )


def _as_float(name: str, value: Any) -> float:
    if isinstance(value, bool):
        raise InvalidInput(name, f"expected a number, got {value!r}")
    try:
        return float(value)
    except (TypeError, ValueError):
        raise InvalidInput(name, f"expected a number, got {value!r}") from None


def _env_float(name: str) -> Optional[float]:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return None
    return _as_float(name, raw)
