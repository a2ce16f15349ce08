"""Shared pytest fixtures for the geo-buckets test suite."""

import pytest

from geo_buckets.index import DistanceBucketIndex, create

RALEIGH_PIVOT = {"lat": 35.73265, "lon": -78.85029, "minDistance": 50}


def latitude_distance(lat, lon, pivot_lat, pivot_lon):
    """Distance equal to the latitude offset, so bucket maths is exact."""
    return abs(lat - pivot_lat)


@pytest.fixture
def raleigh_index():
    """Haversine index around Raleigh, NC with 50 mile buckets."""
    return create(RALEIGH_PIVOT)


@pytest.fixture
def austin_index(raleigh_index):
    """Raleigh index already holding the 'Austin' record."""
    raleigh_index.add(35.73, -78.85, "Austin")
    return raleigh_index


@pytest.fixture
def linear_index():
    """Index whose distance is the latitude itself, 5 units per bucket."""
    return DistanceBucketIndex(lat=0, lon=0, min_distance=5, distance_fn=latitude_distance)
