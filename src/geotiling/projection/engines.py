"""Map projections and their composition with coordinate correctors.

A base projection maps radian positions onto a plane. Tiling schemes never
hold a base projection directly; they hold one of two strategies chosen at
construction:

- :class:`PlainProjection` delegates to the base projection.
- :class:`CorrectedProjection` runs a :class:`CoordinateCorrector` before the
  base projection and its inverse after the base unprojection.

Each projection implements the array kernels ``project_arrays`` and
``unproject_arrays``; the scalar ``project``/``unproject`` calls go through
the same kernels.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass

import numpy as np

from geotiling import config
from geotiling.core.ellipsoid import WGS84, Ellipsoid, require_ellipsoid
from geotiling.core.types import Cartographic, ProjectedPoint
from geotiling.correction import CoordinateCorrector
from geotiling.errors import ConfigurationError

_MAX_MERCATOR_LATITUDE = math.radians(config.WEB_MERCATOR_MAX_LATITUDE)


class Projection(ABC):
    """Base class for everything that maps radians onto a plane."""

    ellipsoid: Ellipsoid

    @property
    @abstractmethod
    def latitude_band(self) -> tuple[float, float]:
        """Valid (south, north) input latitudes in degrees."""

    @abstractmethod
    def project_arrays(self, longitudes, latitudes) -> tuple[np.ndarray, np.ndarray]:
        """Project radian longitudes/latitudes to native x/y arrays."""

    @abstractmethod
    def unproject_arrays(self, xs, ys) -> tuple[np.ndarray, np.ndarray]:
        """Unproject native x/y to radian longitude/latitude arrays."""

    def project(self, position: Cartographic) -> ProjectedPoint:
        x, y = self.project_arrays(position.longitude, position.latitude)
        return ProjectedPoint(float(x), float(y))

    def unproject(self, point: ProjectedPoint) -> Cartographic:
        longitude, latitude = self.unproject_arrays(point.x, point.y)
        return Cartographic(float(longitude), float(latitude), 0.0)


class GeographicProjection(Projection):
    """Plate carrée: longitude and latitude scaled by the semi-major axis."""

    def __init__(self, ellipsoid: Ellipsoid = WGS84) -> None:
        self.ellipsoid = require_ellipsoid(ellipsoid, "GeographicProjection")
        self._semimajor_axis = self.ellipsoid.maximum_radius

    @property
    def latitude_band(self) -> tuple[float, float]:
        return (-90.0, 90.0)

    def project_arrays(self, longitudes, latitudes):
        lon = np.asarray(longitudes, dtype=np.float64)
        lat = np.asarray(latitudes, dtype=np.float64)
        return lon * self._semimajor_axis, lat * self._semimajor_axis

    def unproject_arrays(self, xs, ys):
        x = np.asarray(xs, dtype=np.float64)
        y = np.asarray(ys, dtype=np.float64)
        return x / self._semimajor_axis, y / self._semimajor_axis


class WebMercatorProjection(Projection):
    """Spherical Mercator on the ellipsoid's semi-major axis (EPSG:3857).

    Latitudes beyond :data:`geotiling.config.WEB_MERCATOR_MAX_LATITUDE` are
    clamped, which makes the projected world square.
    """

    def __init__(self, ellipsoid: Ellipsoid = WGS84) -> None:
        self.ellipsoid = require_ellipsoid(ellipsoid, "WebMercatorProjection")
        self._semimajor_axis = self.ellipsoid.maximum_radius
        self._half_world = math.pi * self._semimajor_axis

    @property
    def latitude_band(self) -> tuple[float, float]:
        return (-config.WEB_MERCATOR_MAX_LATITUDE, config.WEB_MERCATOR_MAX_LATITUDE)

    def project_arrays(self, longitudes, latitudes):
        lon = np.asarray(longitudes, dtype=np.float64)
        lat = np.clip(
            np.asarray(latitudes, dtype=np.float64),
            -_MAX_MERCATOR_LATITUDE,
            _MAX_MERCATOR_LATITUDE,
        )
        sin_latitude = np.sin(lat)
        mercator_angle = 0.5 * np.log((1.0 + sin_latitude) / (1.0 - sin_latitude))
        # The world edge must land exactly on the tile grid edge
        y = np.clip(mercator_angle * self._semimajor_axis, -self._half_world, self._half_world)
        return lon * self._semimajor_axis, y

    def unproject_arrays(self, xs, ys):
        x = np.asarray(xs, dtype=np.float64)
        y = np.asarray(ys, dtype=np.float64)
        one_over_axis = 1.0 / self._semimajor_axis
        longitude = x * one_over_axis
        latitude = math.pi / 2.0 - 2.0 * np.arctan(np.exp(-y * one_over_axis))
        return longitude, latitude


@dataclass(frozen=True)
class PlainProjection:
    """Strategy that applies a base projection unchanged."""

    base: Projection

    @property
    def ellipsoid(self) -> Ellipsoid:
        return self.base.ellipsoid

    def project_arrays(self, longitudes, latitudes):
        return self.base.project_arrays(longitudes, latitudes)

    def unproject_arrays(self, xs, ys):
        return self.base.unproject_arrays(xs, ys)

    def project(self, position: Cartographic) -> ProjectedPoint:
        return self.base.project(position)

    def unproject(self, point: ProjectedPoint) -> Cartographic:
        return self.base.unproject(point)


@dataclass(frozen=True)
class CorrectedProjection:
    """Strategy that corrects positions before projecting them.

    ``project`` is correct -> clamp -> base project; ``unproject`` is base
    unproject -> inverse correction. The clamp keeps corrected positions in
    the base projection's latitude band, outside which the correction and
    projection polynomials diverge.
    """

    base: Projection
    corrector: CoordinateCorrector

    def __post_init__(self) -> None:
        if not isinstance(self.corrector, CoordinateCorrector):
            raise ConfigurationError(
                f"CorrectedProjection expected a CoordinateCorrector, got {type(self.corrector).__name__}"
            )

    @property
    def ellipsoid(self) -> Ellipsoid:
        return self.base.ellipsoid

    def project_arrays(self, longitudes, latitudes):
        lng, lat = self.corrector.forward(
            np.degrees(np.asarray(longitudes, dtype=np.float64)),
            np.degrees(np.asarray(latitudes, dtype=np.float64)),
        )
        south, north = self.base.latitude_band
        lng = np.clip(lng, -180.0, 180.0)
        lat = np.clip(lat, south, north)
        return self.base.project_arrays(np.radians(lng), np.radians(lat))

    def unproject_arrays(self, xs, ys):
        longitude, latitude = self.base.unproject_arrays(xs, ys)
        lng, lat = self.corrector.inverse(np.degrees(longitude), np.degrees(latitude))
        return np.radians(lng), np.radians(lat)

    def project(self, position: Cartographic) -> ProjectedPoint:
        x, y = self.project_arrays(position.longitude, position.latitude)
        return ProjectedPoint(float(x), float(y))

    def unproject(self, point: ProjectedPoint) -> Cartographic:
        longitude, latitude = self.unproject_arrays(point.x, point.y)
        return Cartographic(float(longitude), float(latitude), 0.0)


ProjectionStrategy = PlainProjection | CorrectedProjection


def compose_projection(base: Projection, corrector: CoordinateCorrector | None = None) -> ProjectionStrategy:
    """Pick the strategy for ``base`` once, at scheme construction."""
    if not isinstance(base, Projection):
        raise ConfigurationError(f"Expected a Projection, got {type(base).__name__}")
    if corrector is None:
        return PlainProjection(base)
    return CorrectedProjection(base, corrector)
