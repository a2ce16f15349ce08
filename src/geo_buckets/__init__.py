"""Group geolocated records by their distance from a pivot point."""

from geo_buckets.config import IndexConfig
from geo_buckets.errors import InvalidInput
from geo_buckets.geo import haversine_km, haversine_miles
from geo_buckets.index import DistanceBucketIndex, binary_closest, create
from geo_buckets.models import Bucket, Record

__all__ = [
    "Bucket",
    "DistanceBucketIndex",
    "IndexConfig",
    "InvalidInput",
    "Record",
    "binary_closest",
    "create",
    "haversine_km",
    "haversine_miles",
]
