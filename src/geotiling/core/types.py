"""Shared value types for geotiling.

Angles are radians unless a name says otherwise. Every type here is an
immutable tuple so results can be used directly as cache keys.
"""

from __future__ import annotations

import math
from typing import NamedTuple

import numpy as np

#: Longitude slack when testing rectangle edges
_EDGE_EPSILON = 1e-14

_TWO_PI = 2.0 * math.pi


class Cartographic(NamedTuple):
    """A geographic position.

    Attributes:
        longitude: Longitude in radians
        latitude: Latitude in radians
        height: Height above the ellipsoid in meters
    """

    longitude: float
    latitude: float
    height: float = 0.0

    @classmethod
    def from_degrees(cls, longitude: float, latitude: float, height: float = 0.0) -> Cartographic:
        return cls(math.radians(longitude), math.radians(latitude), height)

    def to_degrees(self) -> tuple[float, float]:
        """Return (longitude, latitude) in degrees."""
        return math.degrees(self.longitude), math.degrees(self.latitude)


class ProjectedPoint(NamedTuple):
    """A point in a projection's native plane (usually meters)."""

    x: float
    y: float


class TileAddress(NamedTuple):
    """Address of a tile in a scheme's grid.

    Attributes:
        x: Column index, increasing eastward
        y: Row index, increasing southward from the scheme's origin
        level: Logical zoom level (before any zoom offset)
    """

    x: int
    y: int
    level: int


class Rectangle(NamedTuple):
    """An axis-aligned rectangle, in radians or in a scheme's native units."""

    west: float
    south: float
    east: float
    north: float

    @classmethod
    def from_degrees(cls, west: float, south: float, east: float, north: float) -> Rectangle:
        return cls(
            math.radians(west), math.radians(south), math.radians(east), math.radians(north)
        )

    def to_degrees(self) -> Rectangle:
        return Rectangle(
            math.degrees(self.west),
            math.degrees(self.south),
            math.degrees(self.east),
            math.degrees(self.north),
        )

    @property
    def width(self) -> float:
        east = self.east
        if east < self.west:
            east += _TWO_PI
        return east - self.west

    @property
    def height(self) -> float:
        return self.north - self.south

    @property
    def center(self) -> tuple[float, float]:
        """Center as (x, y); longitude-wrapped for rectangles crossing the antimeridian."""
        y = (self.south + self.north) * 0.5
        if self.east >= self.west:
            return (self.west + self.east) * 0.5, y
        x = (self.west + self.east + _TWO_PI) * 0.5
        if x > math.pi:
            x -= _TWO_PI
        return x, y

    def contains(self, position: Cartographic) -> bool:
        """Inclusive test of a radian position against this radian rectangle."""
        return bool(self.contains_many(position.longitude, position.latitude))

    def contains_many(self, longitudes, latitudes) -> np.ndarray:
        """Vectorised inclusive containment test.

        Edges count as inside. A rectangle whose east edge is less than its
        west edge is treated as crossing the antimeridian.
        """
        lon = np.asarray(longitudes, dtype=np.float64)
        lat = np.asarray(latitudes, dtype=np.float64)
        west = self.west
        east = self.east
        if east < west:
            east += _TWO_PI
            lon = np.where(lon < 0.0, lon + _TWO_PI, lon)
        inside_west = (lon > west) | (np.abs(lon - west) <= _EDGE_EPSILON)
        inside_east = (lon < east) | (np.abs(lon - east) <= _EDGE_EPSILON)
        return inside_west & inside_east & (lat >= self.south) & (lat <= self.north)


#: Sentinel returned when a tile has no defined extent
MAX_RECTANGLE = Rectangle(-math.pi, -math.pi / 2.0, math.pi, math.pi / 2.0)
