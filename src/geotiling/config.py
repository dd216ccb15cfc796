"""Centralized configuration for geotiling.

All tunable parameters are defined here with sensible defaults.
Values can be overridden via environment variables.

Environment Variables:
    GEOTILING_TILE_SIZE: Default tile edge length in pixels (default: 256)
    GEOTILING_MAX_LEVEL: Deepest level of the generated default resolution tables (default: 22)
    GEOTILING_GCJ02_PRECISION: Convergence threshold of the iterative GCJ-02 inverse, in degrees (default: 1e-6)
    GEOTILING_GCJ02_MAX_ITERATIONS: Iteration cap of the iterative GCJ-02 inverse (default: 30)
"""

from __future__ import annotations

import logging
import math
import os

logger = logging.getLogger(__name__)


def _get_env_int(name: str, default: int) -> int:
    """Get an integer from environment variable with fallback."""
    value = os.environ.get(name)
    if value is not None:
        try:
            return int(value)
        except ValueError:
            logger.warning(
                "Invalid integer for %s: %r, using default %d", name, value, default
            )
    return default


def _get_env_float(name: str, default: float) -> float:
    """Get a float from environment variable with fallback."""
    value = os.environ.get(name)
    if value is not None:
        try:
            return float(value)
        except ValueError:
            logger.warning(
                "Invalid float for %s: %r, using default %g", name, value, default
            )
    return default


# =============================================================================
# Tile Grid Defaults
# =============================================================================

#: Default tile size in pixels
DEFAULT_TILE_SIZE: int = _get_env_int("GEOTILING_TILE_SIZE", 256)

#: Deepest level generated for the default quadtree resolution tables
DEFAULT_MAX_LEVEL: int = _get_env_int("GEOTILING_MAX_LEVEL", 22)

#: Deepest native level of the Baidu tile pyramid
BAIDU_MAX_LEVEL: int = 18


# =============================================================================
# Projection Limits
# =============================================================================

#: Latitude (degrees) where spherical Web Mercator becomes a square world
WEB_MERCATOR_MAX_LATITUDE: float = math.degrees(2.0 * math.atan(math.exp(math.pi)) - math.pi / 2.0)

#: Valid BD-09 latitude band (degrees) of the Baidu Mercator polynomials
BAIDU_LATITUDE_BAND: tuple[float, float] = (-71.988531, 74.000022)

#: Baidu tile domain corners in meters, unprojected with spherical Web Mercator
BAIDU_RECTANGLE_SOUTHWEST_IN_METERS: tuple[float, float] = (-20037726.37, -12474104.17)
BAIDU_RECTANGLE_NORTHEAST_IN_METERS: tuple[float, float] = (20037726.37, 12474104.17)


# =============================================================================
# Regional Correction
# =============================================================================

#: (min_lng, min_lat, max_lng, max_lat) outside of which GCJ-02 is the identity
CHINA_BOUNDS: tuple[float, float, float, float] = (72.004, 0.8293, 137.8347, 55.8271)

#: Convergence threshold of the iterative GCJ-02 inverse (degrees)
GCJ02_PRECISION: float = _get_env_float("GEOTILING_GCJ02_PRECISION", 1e-6)

#: Iteration cap of the iterative GCJ-02 inverse
GCJ02_MAX_ITERATIONS: int = _get_env_int("GEOTILING_GCJ02_MAX_ITERATIONS", 30)


# =============================================================================
# Validation
# =============================================================================


def _validate_config() -> None:
    """Validate configuration values and log warnings for out-of-range settings."""
    global DEFAULT_TILE_SIZE, DEFAULT_MAX_LEVEL, GCJ02_PRECISION, GCJ02_MAX_ITERATIONS

    if DEFAULT_TILE_SIZE < 1:
        logger.warning(
            "DEFAULT_TILE_SIZE=%d is too low, using 256", DEFAULT_TILE_SIZE
        )
        DEFAULT_TILE_SIZE = 256

    if DEFAULT_MAX_LEVEL < 0:
        logger.warning(
            "DEFAULT_MAX_LEVEL=%d is negative, clamping to 0", DEFAULT_MAX_LEVEL
        )
        DEFAULT_MAX_LEVEL = 0

    if not GCJ02_PRECISION > 0.0:
        logger.warning(
            "GCJ02_PRECISION=%r is not positive, using 1e-6", GCJ02_PRECISION
        )
        GCJ02_PRECISION = 1e-6

    if GCJ02_MAX_ITERATIONS < 1:
        logger.warning(
            "GCJ02_MAX_ITERATIONS=%d is too low, clamping to 1", GCJ02_MAX_ITERATIONS
        )
        GCJ02_MAX_ITERATIONS = 1


_validate_config()
