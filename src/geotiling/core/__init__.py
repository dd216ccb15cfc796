"""Value types and reference ellipsoids."""

from .ellipsoid import CGCS2000, WGS84, Ellipsoid
from .types import MAX_RECTANGLE, Cartographic, ProjectedPoint, Rectangle, TileAddress

__all__ = [
    "Ellipsoid",
    "WGS84",
    "CGCS2000",
    "Cartographic",
    "ProjectedPoint",
    "Rectangle",
    "TileAddress",
    "MAX_RECTANGLE",
]
