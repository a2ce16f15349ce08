"""Exceptions raised by geo_buckets."""

from __future__ import annotations


class InvalidInput(ValueError):
    """Raised when a coordinate or configuration value is missing or unusable."""

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(f"{field}: {message}")
