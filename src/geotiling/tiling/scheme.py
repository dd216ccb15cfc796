"""Tiling schemes: tile address <-> rectangle and position <-> tile address.

Two families cover every supported provider grid:

- :class:`GeographicTiling` cuts tiles in degrees (plate carrée), optionally
  after a coordinate correction.
- :class:`MercatorTiling` cuts tiles in projected meters, through a plain or
  corrected projection.

Both take a :class:`TilingSchemeConfig` with an origin (the native
north-west corner of tile (0, 0)), a per-level resolution table in native
units per pixel, a tile size and a zoom offset. For a logical level ``L``
the tile span is ``resolutions[L + zoom_offset] * tile_size``, and tile rows
count southward from the origin.

Out-of-range input never raises: positions outside the bounding rectangle
and levels without a resolution produce ``None`` (or :data:`MAX_RECTANGLE`).
"""

from __future__ import annotations

import logging
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from numbers import Real

import numpy as np

from geotiling import config
from geotiling.core.ellipsoid import CGCS2000, WGS84, Ellipsoid, require_ellipsoid
from geotiling.core.types import (
    MAX_RECTANGLE,
    Cartographic,
    ProjectedPoint,
    Rectangle,
    TileAddress,
)
from geotiling.correction import CoordinateCorrector
from geotiling.errors import ConfigurationError
from geotiling.projection import Projection, ProjectionStrategy, WebMercatorProjection, compose_projection

logger = logging.getLogger(__name__)

#: EPSG code of the CGCS2000 geographic CRS in ArcGIS spatial references
CGCS2000_WKID = 4490


def _default_tile_size() -> int:
    return config.DEFAULT_TILE_SIZE


@dataclass(frozen=True)
class TilingSchemeConfig:
    """Parameters of a tiling scheme.

    Fields left as ``None`` are filled with the defaults of the family the
    config is given to.

    Attributes:
        origin: Native (x, y) of the north-west corner of tile (0, 0)
        zoom_offset: Added to the logical level before indexing ``resolutions``
        tile_size: Tile edge length in pixels
        resolutions: Native units per pixel, one entry per native level
        ellipsoid: Reference body for the projection step
        bounding_rectangle: Valid domain in radians
        number_of_level_zero_tiles_x: Columns at level 0
        number_of_level_zero_tiles_y: Rows at level 0
    """

    origin: tuple[float, float] | None = None
    zoom_offset: int = 0
    tile_size: int = field(default_factory=_default_tile_size)
    resolutions: tuple[float, ...] | None = None
    ellipsoid: Ellipsoid | None = WGS84
    bounding_rectangle: Rectangle | None = None
    number_of_level_zero_tiles_x: int | None = None
    number_of_level_zero_tiles_y: int | None = None

    @classmethod
    def from_tile_info(
        cls,
        tile_info: dict,
        number_of_level_zero_tiles_x: int = 4,
        number_of_level_zero_tiles_y: int = 2,
    ) -> TilingSchemeConfig:
        """Build a geographic config from an ArcGIS MapServer ``tileInfo`` block.

        ``origin`` gives the north-west corner in degrees, ``rows`` the tile
        size and ``lods`` one resolution per level. Lods are ordered by their
        ``level`` field, which must run without gaps; a first level ``n``
        becomes ``zoom_offset = -n``. Spatial reference 4490 selects the
        CGCS2000 ellipsoid, anything else WGS84.

        Raises:
            ConfigurationError: If a required key is missing or malformed.
        """
        try:
            origin = (tile_info["origin"]["x"], tile_info["origin"]["y"])
            rows, cols = tile_info["rows"], tile_info["cols"]
            lods = sorted(tile_info["lods"], key=lambda lod: lod["level"])
            levels = [lod["level"] for lod in lods]
            resolutions = tuple(lod["resolution"] for lod in lods)
        except (KeyError, TypeError) as e:
            raise ConfigurationError(f"Malformed tileInfo: missing or invalid {e}") from None

        if rows != cols:
            raise ConfigurationError(f"tileInfo tiles must be square, got rows={rows!r} cols={cols!r}")
        if not levels:
            raise ConfigurationError("tileInfo must list at least one lod")
        if not all(_is_int(level) for level in levels):
            raise ConfigurationError(f"tileInfo lod levels must be integers, got {levels!r}")
        if levels != list(range(levels[0], levels[0] + len(levels))):
            raise ConfigurationError(f"tileInfo lod levels must be consecutive, got {levels!r}")

        wkid = (tile_info.get("spatialReference") or {}).get("wkid")
        logger.debug("tileInfo: wkid=%s, levels %d..%d, tile size %s", wkid, levels[0], levels[-1], rows)
        return cls(
            origin=origin,
            zoom_offset=-levels[0],
            tile_size=rows,
            resolutions=resolutions,
            ellipsoid=CGCS2000 if wkid == CGCS2000_WKID else WGS84,
            number_of_level_zero_tiles_x=number_of_level_zero_tiles_x,
            number_of_level_zero_tiles_y=number_of_level_zero_tiles_y,
        )


def _is_int(value) -> bool:
    return isinstance(value, (int, np.integer)) and not isinstance(value, bool)


def _is_finite_number(value) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool) and math.isfinite(value)


def _validate_resolutions(resolutions) -> tuple[float, ...]:
    if resolutions is None or isinstance(resolutions, (str, bytes)):
        raise ConfigurationError(f"resolutions must be a sequence of numbers, got {resolutions!r}")
    try:
        table = tuple(resolutions)
    except TypeError:
        raise ConfigurationError(
            f"resolutions must be a sequence of numbers, got {type(resolutions).__name__}"
        ) from None
    if not table:
        raise ConfigurationError("resolutions must contain at least one level")
    for level, value in enumerate(table):
        if not _is_finite_number(value):
            raise ConfigurationError(f"resolutions[{level}] is not a finite number: {value!r}")
        if value <= 0:
            raise ConfigurationError(f"resolutions[{level}] must be positive, got {value!r}")
    return tuple(float(value) for value in table)


def _validate_pair(value, name: str = "origin") -> tuple[float, float]:
    try:
        x, y = value
    except (TypeError, ValueError):
        raise ConfigurationError(f"{name} must be an (x, y) pair, got {value!r}") from None
    if not (_is_finite_number(x) and _is_finite_number(y)):
        raise ConfigurationError(f"{name} must hold finite numbers, got {value!r}")
    return float(x), float(y)


def _validate_rectangle(rectangle) -> Rectangle:
    try:
        west, south, east, north = rectangle
    except (TypeError, ValueError):
        raise ConfigurationError(
            f"bounding_rectangle must be (west, south, east, north), got {rectangle!r}"
        ) from None
    values = (west, south, east, north)
    if not all(_is_finite_number(v) for v in values):
        raise ConfigurationError(f"bounding_rectangle must hold finite numbers, got {rectangle!r}")
    if south > north:
        raise ConfigurationError(f"bounding_rectangle south {south} is north of north {north}")
    return Rectangle(*(float(v) for v in values))


def _validate_config(scheme_config: TilingSchemeConfig) -> TilingSchemeConfig:
    """Check every field and normalise containers to tuples of floats."""
    require_ellipsoid(scheme_config.ellipsoid, "TilingScheme")

    if not _is_int(scheme_config.tile_size) or scheme_config.tile_size <= 0:
        raise ConfigurationError(f"tile_size must be a positive integer, got {scheme_config.tile_size!r}")
    if not _is_int(scheme_config.zoom_offset):
        raise ConfigurationError(f"zoom_offset must be an integer, got {scheme_config.zoom_offset!r}")
    for name in ("number_of_level_zero_tiles_x", "number_of_level_zero_tiles_y"):
        value = getattr(scheme_config, name)
        if not _is_int(value) or value < 1:
            raise ConfigurationError(f"{name} must be a positive integer, got {value!r}")

    return replace(
        scheme_config,
        origin=_validate_pair(scheme_config.origin),
        resolutions=_validate_resolutions(scheme_config.resolutions),
        bounding_rectangle=_validate_rectangle(scheme_config.bounding_rectangle),
        tile_size=int(scheme_config.tile_size),
        zoom_offset=int(scheme_config.zoom_offset),
    )


def _levels(levels: int | None) -> int:
    return config.DEFAULT_MAX_LEVEL + 1 if levels is None else levels


def geographic_resolutions(
    tile_size: int, levels: int | None = None, level_zero_tiles_x: int = 2
) -> tuple[float, ...]:
    """Degrees per pixel of a quadtree whose level 0 splits 360° into ``level_zero_tiles_x`` columns."""
    span = 360.0 / level_zero_tiles_x
    return tuple(span / tile_size / 2**level for level in range(_levels(levels)))


def web_mercator_resolutions(
    tile_size: int,
    levels: int | None = None,
    ellipsoid: Ellipsoid = WGS84,
    level_zero_tiles_x: int = 1,
) -> tuple[float, ...]:
    """Meters per pixel of the standard Web Mercator quadtree."""
    span = 2.0 * math.pi * ellipsoid.maximum_radius / level_zero_tiles_x
    return tuple(span / tile_size / 2**level for level in range(_levels(levels)))


class TilingScheme(ABC):
    """Base class of the geographic and Mercator tiling families.

    Subclasses supply family defaults and the conversion between radian
    positions and native coordinates; everything else lives here.
    """

    #: When True, negative tile indices from position lookups are clamped to 0
    clamps_negative_indices: bool = False

    def __init__(self, scheme_config: TilingSchemeConfig | None = None) -> None:
        if scheme_config is None:
            scheme_config = TilingSchemeConfig()
        if not isinstance(scheme_config, TilingSchemeConfig):
            raise ConfigurationError(
                f"Expected a TilingSchemeConfig, got {type(scheme_config).__name__}"
            )
        require_ellipsoid(scheme_config.ellipsoid, type(self).__name__)
        self._config = _validate_config(self._apply_defaults(scheme_config))
        self._is_monotonic = self._check_monotonic()
        logger.debug(
            "Created %s: origin=%s, tile_size=%d, zoom_offset=%d, %d levels",
            type(self).__name__,
            self._config.origin,
            self._config.tile_size,
            self._config.zoom_offset,
            len(self._config.resolutions),
        )

    # ------------------------------------------------------------------
    # Family hooks
    # ------------------------------------------------------------------

    @abstractmethod
    def _apply_defaults(self, scheme_config: TilingSchemeConfig) -> TilingSchemeConfig:
        """Fill ``None`` fields with the family defaults."""

    @abstractmethod
    def _to_native_arrays(self, longitudes: np.ndarray, latitudes: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
        """Radian positions -> native coordinates."""

    @abstractmethod
    def _from_native_arrays(self, xs: np.ndarray, ys: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
        """Native coordinates -> radian positions."""

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def config(self) -> TilingSchemeConfig:
        return self._config

    @property
    def rectangle(self) -> Rectangle:
        """Bounding rectangle of the scheme in radians."""
        return self._config.bounding_rectangle

    @property
    def ellipsoid(self) -> Ellipsoid:
        return self._config.ellipsoid

    @property
    def origin(self) -> tuple[float, float]:
        return self._config.origin

    @property
    def tile_size(self) -> int:
        return self._config.tile_size

    @property
    def zoom_offset(self) -> int:
        return self._config.zoom_offset

    @property
    def resolutions(self) -> tuple[float, ...]:
        return self._config.resolutions

    @property
    def projection(self) -> ProjectionStrategy | None:
        return None

    @property
    def is_monotonic(self) -> bool:
        """Whether tile spans strictly shrink as the level increases."""
        return self._is_monotonic

    def _check_monotonic(self) -> bool:
        resolutions = self._config.resolutions
        for level, (coarser, finer) in enumerate(zip(resolutions, resolutions[1:])):
            if not finer < coarser:
                logger.warning(
                    "Resolution table of %s is not strictly decreasing at native level %d (%g -> %g)",
                    type(self).__name__,
                    level + 1,
                    coarser,
                    finer,
                )
                return False
        return True

    # ------------------------------------------------------------------
    # Tile grid
    # ------------------------------------------------------------------

    def tile_span(self, level: int) -> float | None:
        """Native extent of one tile at ``level``, or None if the level is undefined."""
        index = level + self._config.zoom_offset
        if index < 0 or index >= len(self._config.resolutions):
            return None
        return self._config.resolutions[index] * self._config.tile_size

    def get_number_of_x_tiles_at_level(self, level: int) -> int:
        if level < 0:
            return 0
        return self._config.number_of_level_zero_tiles_x << level

    def get_number_of_y_tiles_at_level(self, level: int) -> int:
        if level < 0:
            return 0
        return self._config.number_of_level_zero_tiles_y << level

    def tile_xy_to_native_rectangle(self, x: int, y: int, level: int) -> Rectangle:
        """Native extent of tile (x, y) at ``level``; MAX_RECTANGLE if the level is undefined."""
        span = self.tile_span(level)
        if span is None:
            return MAX_RECTANGLE
        origin_x, origin_y = self._config.origin
        west = origin_x + x * span
        east = origin_x + (x + 1) * span
        north = origin_y - y * span
        south = origin_y - (y + 1) * span
        return Rectangle(west, south, east, north)

    def tile_xy_to_rectangle(self, x: int, y: int, level: int) -> Rectangle:
        """Extent of tile (x, y) at ``level`` in radians."""
        native = self.tile_xy_to_native_rectangle(x, y, level)
        if native is MAX_RECTANGLE:
            return MAX_RECTANGLE
        longitudes, latitudes = self._from_native_arrays(
            np.array([native.west, native.east]), np.array([native.south, native.north])
        )
        return Rectangle(
            float(longitudes[0]), float(latitudes[0]), float(longitudes[1]), float(latitudes[1])
        )

    def _native_to_tile_arrays(self, xs, ys, level: int) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
        xs = np.asarray(xs, dtype=np.float64)
        ys = np.asarray(ys, dtype=np.float64)
        shape = np.broadcast(xs, ys).shape
        span = self.tile_span(level)
        if span is None:
            zeros = np.zeros(shape, dtype=np.int64)
            return zeros, zeros.copy(), np.zeros(shape, dtype=bool)

        origin_x, origin_y = self._config.origin
        tile_x = np.floor((xs - origin_x) / span)
        tile_y = np.floor((origin_y - ys) / span)
        valid = np.isfinite(tile_x) & np.isfinite(tile_y)
        tile_x = np.where(valid, tile_x, 0.0).astype(np.int64)
        tile_y = np.where(valid, tile_y, 0.0).astype(np.int64)
        if self.clamps_negative_indices:
            tile_x = np.maximum(tile_x, 0)
            tile_y = np.maximum(tile_y, 0)
        return tile_x, tile_y, valid

    def native_to_tile_xy(self, x: float, y: float, level: int) -> TileAddress | None:
        """Address of the tile containing native point (x, y), or None if the level is undefined."""
        tile_x, tile_y, valid = self._native_to_tile_arrays(x, y, level)
        if not bool(valid):
            return None
        return TileAddress(int(tile_x), int(tile_y), level)

    # ------------------------------------------------------------------
    # Positions
    # ------------------------------------------------------------------

    def position_to_native(self, position: Cartographic) -> ProjectedPoint:
        x, y = self._to_native_arrays(
            np.asarray(position.longitude, dtype=np.float64),
            np.asarray(position.latitude, dtype=np.float64),
        )
        return ProjectedPoint(float(x), float(y))

    def native_to_position(self, point: ProjectedPoint) -> Cartographic:
        longitude, latitude = self._from_native_arrays(
            np.asarray(point.x, dtype=np.float64), np.asarray(point.y, dtype=np.float64)
        )
        return Cartographic(float(longitude), float(latitude), 0.0)

    def position_to_tile_xy(self, position: Cartographic, level: int) -> TileAddress | None:
        """Address of the tile containing ``position`` at ``level``.

        Returns None when the position lies outside :attr:`rectangle` (edges
        count as inside) or when the level has no resolution.
        """
        if not self.rectangle.contains(position):
            return None
        if self.tile_span(level) is None:
            return None
        native = self.position_to_native(position)
        return self.native_to_tile_xy(native.x, native.y, level)

    def positions_to_tile_xy(
        self, longitudes, latitudes, level: int
    ) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
        """Batch form of :meth:`position_to_tile_xy` for radian arrays.

        Returns:
            Tuple of (x, y, valid). ``x`` and ``y`` are int64 arrays; entries
            where ``valid`` is False carry no address.
        """
        lon = np.asarray(longitudes, dtype=np.float64)
        lat = np.asarray(latitudes, dtype=np.float64)
        inside = self.rectangle.contains_many(lon, lat)
        native_x, native_y = self._to_native_arrays(lon, lat)
        tile_x, tile_y, valid = self._native_to_tile_arrays(native_x, native_y, level)
        valid = valid & inside
        return np.where(valid, tile_x, 0), np.where(valid, tile_y, 0), valid

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(origin={self._config.origin}, tile_size={self._config.tile_size}, "
            f"zoom_offset={self._config.zoom_offset}, levels={len(self._config.resolutions)})"
        )


class GeographicTiling(TilingScheme):
    """Tiles cut in degrees of longitude/latitude.

    Native coordinates are degrees, after ``corrector.forward`` when a
    corrector is given. Negative indices from position lookups are clamped
    to 0.
    """

    clamps_negative_indices = True

    def __init__(
        self,
        scheme_config: TilingSchemeConfig | None = None,
        corrector: CoordinateCorrector | None = None,
    ) -> None:
        if corrector is not None and not isinstance(corrector, CoordinateCorrector):
            raise ConfigurationError(
                f"Expected a CoordinateCorrector, got {type(corrector).__name__}"
            )
        self._corrector = corrector
        super().__init__(scheme_config)

    @property
    def corrector(self) -> CoordinateCorrector | None:
        return self._corrector

    def _apply_defaults(self, scheme_config: TilingSchemeConfig) -> TilingSchemeConfig:
        tiles_x = scheme_config.number_of_level_zero_tiles_x
        if tiles_x is None:
            tiles_x = 2
        tiles_y = scheme_config.number_of_level_zero_tiles_y
        if tiles_y is None:
            tiles_y = 1
        resolutions = scheme_config.resolutions
        if resolutions is None and _is_int(tiles_x) and tiles_x > 0 and _is_int(scheme_config.tile_size) \
                and scheme_config.tile_size > 0:
            resolutions = geographic_resolutions(scheme_config.tile_size, level_zero_tiles_x=tiles_x)
        return replace(
            scheme_config,
            origin=scheme_config.origin if scheme_config.origin is not None else (-180.0, 90.0),
            resolutions=resolutions,
            bounding_rectangle=(
                scheme_config.bounding_rectangle
                if scheme_config.bounding_rectangle is not None
                else MAX_RECTANGLE
            ),
            number_of_level_zero_tiles_x=tiles_x,
            number_of_level_zero_tiles_y=tiles_y,
        )

    def _to_native_arrays(self, longitudes, latitudes):
        lng = np.degrees(longitudes)
        lat = np.degrees(latitudes)
        if self._corrector is not None:
            lng, lat = self._corrector.forward(lng, lat)
        return np.asarray(lng, dtype=np.float64), np.asarray(lat, dtype=np.float64)

    def _from_native_arrays(self, xs, ys):
        lng = np.asarray(xs, dtype=np.float64)
        lat = np.asarray(ys, dtype=np.float64)
        if self._corrector is not None:
            lng, lat = self._corrector.inverse(lng, lat)
        return np.radians(lng), np.radians(lat)


class MercatorTiling(TilingScheme):
    """Tiles cut in projected meters.

    ``projection`` is the base projection (Web Mercator on the config's
    ellipsoid by default); with a ``corrector`` it is wrapped in a
    :class:`~geotiling.projection.CorrectedProjection`. Tile indices from
    position lookups keep their sign: only the bounding-rectangle test
    guards the domain, since grids with a central origin (Baidu) address
    half of the world with negative indices.

    ``rectangle_southwest_in_meters``/``rectangle_northeast_in_meters``
    give the bounding rectangle in spherical Web Mercator meters instead of
    radians, whatever the base projection.
    """

    def __init__(
        self,
        scheme_config: TilingSchemeConfig | None = None,
        projection: Projection | None = None,
        corrector: CoordinateCorrector | None = None,
        rectangle_southwest_in_meters: tuple[float, float] | None = None,
        rectangle_northeast_in_meters: tuple[float, float] | None = None,
    ) -> None:
        if scheme_config is None:
            scheme_config = TilingSchemeConfig()
        if not isinstance(scheme_config, TilingSchemeConfig):
            raise ConfigurationError(
                f"Expected a TilingSchemeConfig, got {type(scheme_config).__name__}"
            )
        ellipsoid = require_ellipsoid(scheme_config.ellipsoid, "MercatorTiling")
        base = projection if projection is not None else WebMercatorProjection(ellipsoid)
        self._projection = compose_projection(base, corrector)
        if (rectangle_southwest_in_meters is None) != (rectangle_northeast_in_meters is None):
            raise ConfigurationError(
                "rectangle_southwest_in_meters and rectangle_northeast_in_meters must be given together"
            )
        self._corners_in_meters = (rectangle_southwest_in_meters, rectangle_northeast_in_meters)
        super().__init__(scheme_config)

    @property
    def projection(self) -> ProjectionStrategy:
        return self._projection

    def _default_rectangle(self, ellipsoid: Ellipsoid) -> Rectangle:
        southwest, northeast = self._corners_in_meters
        if southwest is None:
            latitude = math.radians(config.WEB_MERCATOR_MAX_LATITUDE)
            return Rectangle(-math.pi, -latitude, math.pi, latitude)
        west, south = _validate_pair(southwest, "rectangle_southwest_in_meters")
        east, north = _validate_pair(northeast, "rectangle_northeast_in_meters")
        longitudes, latitudes = WebMercatorProjection(ellipsoid).unproject_arrays(
            np.array([west, east]), np.array([south, north])
        )
        return Rectangle(
            float(longitudes[0]), float(latitudes[0]), float(longitudes[1]), float(latitudes[1])
        )

    def _apply_defaults(self, scheme_config: TilingSchemeConfig) -> TilingSchemeConfig:
        semimajor_axis = scheme_config.ellipsoid.maximum_radius
        tiles_x = scheme_config.number_of_level_zero_tiles_x
        if tiles_x is None:
            tiles_x = 1
        tiles_y = scheme_config.number_of_level_zero_tiles_y
        if tiles_y is None:
            tiles_y = 1
        resolutions = scheme_config.resolutions
        if resolutions is None and _is_int(tiles_x) and tiles_x > 0 and _is_int(scheme_config.tile_size) \
                and scheme_config.tile_size > 0:
            resolutions = web_mercator_resolutions(
                scheme_config.tile_size, ellipsoid=scheme_config.ellipsoid, level_zero_tiles_x=tiles_x
            )
        origin = scheme_config.origin
        if origin is None:
            origin = (-math.pi * semimajor_axis, math.pi * semimajor_axis)
        rectangle = scheme_config.bounding_rectangle
        if rectangle is None:
            rectangle = self._default_rectangle(scheme_config.ellipsoid)
        return replace(
            scheme_config,
            origin=origin,
            resolutions=resolutions,
            bounding_rectangle=rectangle,
            number_of_level_zero_tiles_x=tiles_x,
            number_of_level_zero_tiles_y=tiles_y,
        )

    def _to_native_arrays(self, longitudes, latitudes):
        return self._projection.project_arrays(longitudes, latitudes)

    def _from_native_arrays(self, xs, ys):
        return self._projection.unproject_arrays(xs, ys)
