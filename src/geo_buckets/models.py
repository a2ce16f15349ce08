"""Data models for the distance-bucket index."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass(frozen=True)
class Record:
    """A geolocated entry placed in the index."""

    latitude: float
    longitude: float
    distance: float             # From the pivot, computed once on insert
    payload: Optional[Any] = None

    def matches(self, latitude: float, longitude: float, payload: Any = None) -> bool:
        """Exact coordinate match, narrowed by payload when one is given."""
        if self.latitude != latitude or self.longitude != longitude:
            return False
        return payload is None or self.payload == payload

    def to_dict(self) -> dict:
        return {
            "latitude": self.latitude,
            "longitude": self.longitude,
            "distance": self.distance,
            "payload": self.payload,
        }


@dataclass
class Bucket:
    """Cluster of records whose pivot distances lie within ``min_distance``.

    ``distance`` is the distance of the first record placed in the bucket and
    is never updated afterwards. Records keep insertion order.
    """

    distance: float
    records: list[Record] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.records)

    @property
    def payloads(self) -> list[Any]:
        return [r.payload for r in self.records]

    def copy(self) -> Bucket:
        return Bucket(distance=self.distance, records=list(self.records))

    def to_dict(self) -> dict:
        return {
            "distance": self.distance,
            "records": [r.to_dict() for r in self.records],
        }
