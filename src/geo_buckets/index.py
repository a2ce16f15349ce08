"""Distance-bucket index.

Records are grouped by their great-circle distance from a fixed pivot. Buckets
are kept sorted ascending by distance, so the bucket nearest any query
distance is found with a binary search and a record either joins that bucket
(when within ``min_distance`` of it) or starts a new one beside it.

Only one scalar is indexed: two records equidistant from the pivot land in the
same bucket no matter how far apart they are on the map.
"""

from __future__ import annotations

import logging
import math
import numbers
from typing import Any, Callable, Mapping, Optional, Sequence, Union

from geo_buckets.config import IndexConfig
from geo_buckets.errors import InvalidInput
from geo_buckets.geo import haversine_miles
from geo_buckets.models import Bucket, Record

logger = logging.getLogger(__name__)

DistanceFn = Callable[[float, float, float, float], float]


def binary_closest(buckets: Sequence[Bucket], distance: float) -> int:
    """Position of the bucket whose distance is nearest ``distance``.

    ``buckets`` must be non-empty and sorted ascending by distance. When the
    query sits exactly between two buckets the upper one wins.
    """
    if not buckets:
        raise IndexError("binary_closest() on an empty bucket sequence")

    lo = 0
    hi = len(buckets) - 1
    while hi - lo > 1:
        mid = (lo + hi) // 2
        if buckets[mid].distance < distance:
            lo = mid
        else:
            hi = mid

    if distance - buckets[lo].distance < buckets[hi].distance - distance:
        return lo
    return hi


def _require_coordinate(name: str, value: Any) -> float:
    """Reject absent or non-numeric coordinates. ``0`` is a valid coordinate.

    Range is not checked: the distance function may work in any coordinate
    space, so a latitude of 200 is passed through unchanged.
    """
    if value is None:
        raise InvalidInput(name, "is required")
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise InvalidInput(name, f"expected a number, got {value!r}")
    if math.isnan(value):
        raise InvalidInput(name, "must not be NaN")
    return value


class DistanceBucketIndex:
    """Ordered buckets of records keyed by distance from a pivot point.

    Not thread-safe: callers sharing an index across threads must serialize
    access themselves.
    """

    def __init__(
        self,
        lat: Optional[float] = None,
        lon: Optional[float] = None,
        min_distance: Optional[float] = None,
        distance_fn: Optional[DistanceFn] = None,
        config: Optional[IndexConfig] = None,
    ):
        if config is None:
            config = IndexConfig.build(lat, lon, min_distance)
        self.config = config
        self._distance_fn = distance_fn or haversine_miles
        self._buckets: list[Bucket] = []

    @property
    def pivot_lat(self) -> float:
        return self.config.pivot_lat

    @property
    def pivot_lon(self) -> float:
        return self.config.pivot_lon

    @property
    def min_distance(self) -> float:
        return self.config.min_distance

    def __len__(self) -> int:
        return len(self._buckets)

    def __repr__(self) -> str:
        return (
            f"DistanceBucketIndex(pivot=({self.pivot_lat}, {self.pivot_lon}), "
            f"min_distance={self.min_distance}, buckets={len(self._buckets)})"
        )

    def distance_to_pivot(self, latitude: float, longitude: float) -> float:
        latitude = _require_coordinate("latitude", latitude)
        longitude = _require_coordinate("longitude", longitude)
        return self._distance_fn(latitude, longitude, self.pivot_lat, self.pivot_lon)

    def locate(self, distance: float) -> int:
        """Position of the bucket nearest ``distance`` (index must be non-empty)."""
        return binary_closest(self._buckets, distance)

    def add(self, latitude: float, longitude: float, payload: Any = None) -> None:
        """Place a record in the bucket within ``min_distance``, or in a new one."""
        distance = self.distance_to_pivot(latitude, longitude)
        record = Record(latitude=latitude, longitude=longitude, distance=distance, payload=payload)

        if not self._buckets:
            self._buckets.append(Bucket(distance=distance, records=[record]))
            logger.debug("Created first bucket at %.6f", distance)
            return

        pos = self.locate(distance)
        closest = self._buckets[pos]

        if abs(closest.distance - distance) <= self.min_distance:
            closest.records.append(record)
            logger.debug(
                "Merged record into bucket %d at %.6f (%d records)",
                pos, closest.distance, len(closest.records),
            )
            return

        # The located bucket is the nearest one, so the new bucket belongs
        # directly beside it on whichever side keeps the order ascending.
        insert_at = pos if distance < closest.distance else pos + 1
        self._buckets.insert(insert_at, Bucket(distance=distance, records=[record]))
        logger.debug("Created bucket %d at %.6f", insert_at, distance)

    def delete(self, latitude: float, longitude: float, payload: Any = None) -> None:
        """Remove records at exactly these coordinates (and payload, if given).

        Only the bucket nearest the coordinates' distance is searched. A bucket
        left without records is dropped from the index.
        """
        distance = self.distance_to_pivot(latitude, longitude)
        if not self._buckets:
            return

        pos = self.locate(distance)
        bucket = self._buckets[pos]
        if not bucket.records:
            return

        kept = [r for r in bucket.records if not r.matches(latitude, longitude, payload)]
        removed = len(bucket.records) - len(kept)
        if not removed:
            return

        bucket.records[:] = kept
        logger.debug("Removed %d record(s) from bucket %d", removed, pos)

        if not bucket.records:
            del self._buckets[pos]
            logger.debug("Pruned empty bucket at %.6f", bucket.distance)

    def find_closest(
        self,
        latitude: float,
        longitude: float,
        ignore_minimum: bool = False,
    ) -> Optional[Bucket]:
        """Bucket nearest the coordinates' distance from the pivot.

        Without ``ignore_minimum`` the bucket is only returned when its
        distance is within ``min_distance`` of the query. Returns ``None``
        on an empty index either way.
        """
        distance = self.distance_to_pivot(latitude, longitude)
        if not self._buckets:
            return None

        bucket = self._buckets[self.locate(distance)]
        if ignore_minimum or abs(bucket.distance - distance) <= self.min_distance:
            return bucket.copy()
        return None

    def list(self) -> tuple[Bucket, ...]:
        """Snapshot of all buckets in ascending distance order."""
        return tuple(b.copy() for b in self._buckets)


def create(
    options: Union[IndexConfig, Mapping[str, Any], None] = None,
    distance_fn: Optional[DistanceFn] = None,
) -> DistanceBucketIndex:
    """Build an index from an ``IndexConfig`` or a ``{lat, lon, minDistance}`` mapping."""
    if options is None:
        config = IndexConfig()
    elif isinstance(options, IndexConfig):
        config = options
    else:
        config = IndexConfig.from_mapping(options)
    return DistanceBucketIndex(config=config, distance_fn=distance_fn)
