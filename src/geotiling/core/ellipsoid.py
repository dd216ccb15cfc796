"""Reference ellipsoids."""

from __future__ import annotations

import math
from dataclasses import dataclass

from geotiling.errors import ConfigurationError


@dataclass(frozen=True)
class Ellipsoid:
    """A triaxial reference ellipsoid, radii in meters."""

    radii_x: float
    radii_y: float
    radii_z: float

    def __post_init__(self) -> None:
        for name in ("radii_x", "radii_y", "radii_z"):
            value = getattr(self, name)
            if not isinstance(value, (int, float)) or not math.isfinite(value) or value <= 0:
                raise ConfigurationError(f"Ellipsoid {name} must be a positive number, got {value!r}")

    @property
    def maximum_radius(self) -> float:
        return max(self.radii_x, self.radii_y, self.radii_z)

    @property
    def minimum_radius(self) -> float:
        return min(self.radii_x, self.radii_y, self.radii_z)


WGS84 = Ellipsoid(6378137.0, 6378137.0, 6356752.3142451793)

#: China Geodetic Coordinate System 2000
CGCS2000 = Ellipsoid(6378137.0, 6378137.0, 6356752.31414035585)


def require_ellipsoid(ellipsoid: Ellipsoid | None, owner: str) -> Ellipsoid:
    """Return ``ellipsoid`` or raise ConfigurationError naming ``owner``."""
    if ellipsoid is None:
        raise ConfigurationError(f"{owner} requires an ellipsoid")
    if not isinstance(ellipsoid, Ellipsoid):
        raise ConfigurationError(f"{owner} expected an Ellipsoid, got {type(ellipsoid).__name__}")
    return ellipsoid
