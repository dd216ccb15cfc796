"""Empirical corrections between WGS84, GCJ-02 and BD-09.

GCJ-02 is the obfuscated datum mandated for published maps of mainland
China; BD-09 is Baidu's further offset on top of GCJ-02. Both are defined by
published closed-form offset functions in degrees. The coefficients below
must match the published algorithm exactly, since tile alignment with the
providers that use these systems depends on it.

Every function accepts scalars or numpy arrays and shares one evaluation
path for both, so a scalar result is bit-identical to the matching element
of an array result. Scalar inputs come back as Python floats.

Forward transforms are exact by definition. The inverses are approximate:
the closed forms are good to a couple of meters, the iterative
:func:`gcj02_to_wgs84_precise` to :data:`geotiling.config.GCJ02_PRECISION`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

import numpy as np

from geotiling import config
from geotiling.errors import ConfigurationError

logger = logging.getLogger(__name__)

_PI = 3.1415926535897932384626
_X_PI = 3.14159265358979324 * 3000.0 / 180.0

# Krasovsky 1940
_A = 6378245.0
_EE = 0.00669342162296594323

WGS84 = "wgs84"
GCJ02 = "gcj02"
BD09 = "bd09"

#: Systems ordered along the correction chain
COORDINATE_SYSTEMS: tuple[str, ...] = (WGS84, GCJ02, BD09)


def _as_output(lng: np.ndarray, lat: np.ndarray):
    if lng.ndim == 0 and lat.ndim == 0:
        return float(lng), float(lat)
    return lng, lat


def _as_input(lng, lat) -> tuple[np.ndarray, np.ndarray]:
    return np.asarray(lng, dtype=np.float64), np.asarray(lat, dtype=np.float64)


def out_of_china(lng, lat):
    """True where a position lies outside the region GCJ-02 applies to."""
    lng, lat = _as_input(lng, lat)
    min_lng, min_lat, max_lng, max_lat = config.CHINA_BOUNDS
    result = (lng < min_lng) | (lng > max_lng) | (lat < min_lat) | (lat > max_lat)
    return bool(result) if result.ndim == 0 else result


def _transform_lat(x: np.ndarray, y: np.ndarray) -> np.ndarray:
    ret = -100.0 + 2.0 * x + 3.0 * y + 0.2 * y * y + 0.1 * x * y + 0.2 * np.sqrt(np.abs(x))
    ret += (20.0 * np.sin(6.0 * x * _PI) + 20.0 * np.sin(2.0 * x * _PI)) * 2.0 / 3.0
    ret += (20.0 * np.sin(y * _PI) + 40.0 * np.sin(y / 3.0 * _PI)) * 2.0 / 3.0
    ret += (160.0 * np.sin(y / 12.0 * _PI) + 320 * np.sin(y * _PI / 30.0)) * 2.0 / 3.0
    return ret


def _transform_lng(x: np.ndarray, y: np.ndarray) -> np.ndarray:
    ret = 300.0 + x + 2.0 * y + 0.1 * x * x + 0.1 * x * y + 0.1 * np.sqrt(np.abs(x))
    ret += (20.0 * np.sin(6.0 * x * _PI) + 20.0 * np.sin(2.0 * x * _PI)) * 2.0 / 3.0
    ret += (20.0 * np.sin(x * _PI) + 40.0 * np.sin(x / 3.0 * _PI)) * 2.0 / 3.0
    ret += (150.0 * np.sin(x / 12.0 * _PI) + 300.0 * np.sin(x / 30.0 * _PI)) * 2.0 / 3.0
    return ret


def _gcj02_offset(lng: np.ndarray, lat: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    """Return the GCJ-02 position for a WGS84 position, ignoring the China bounds."""
    dlat = _transform_lat(lng - 105.0, lat - 35.0)
    dlng = _transform_lng(lng - 105.0, lat - 35.0)
    radlat = lat / 180.0 * _PI
    magic = np.sin(radlat)
    magic = 1 - _EE * magic * magic
    sqrtmagic = np.sqrt(magic)
    # Poles divide by cos(lat) == 0; those positions are outside China anyway
    with np.errstate(divide="ignore", invalid="ignore"):
        dlat = (dlat * 180.0) / ((_A * (1 - _EE)) / (magic * sqrtmagic) * _PI)
        dlng = (dlng * 180.0) / (_A / sqrtmagic * np.cos(radlat) * _PI)
    return lng + dlng, lat + dlat


def wgs84_to_gcj02(lng, lat):
    """WGS84 -> GCJ-02. Positions outside China are returned unchanged."""
    lng, lat = _as_input(lng, lat)
    mglng, mglat = _gcj02_offset(lng, lat)
    outside = out_of_china(lng, lat)
    return _as_output(np.where(outside, lng, mglng), np.where(outside, lat, mglat))


def gcj02_to_wgs84(lng, lat):
    """GCJ-02 -> WGS84, closed-form approximation (about 1-2 m)."""
    lng, lat = _as_input(lng, lat)
    mglng, mglat = _gcj02_offset(lng, lat)
    outside = out_of_china(lng, lat)
    return _as_output(
        np.where(outside, lng, lng * 2 - mglng),
        np.where(outside, lat, lat * 2 - mglat),
    )


def gcj02_to_wgs84_precise(lng, lat, precision: float | None = None, max_iterations: int | None = None):
    """GCJ-02 -> WGS84 by fixed-point iteration.

    Starting from the GCJ-02 position itself, repeatedly subtracts the
    residual of the forward transform until every residual is below
    ``precision`` degrees or ``max_iterations`` is reached.
    """
    if precision is None:
        precision = config.GCJ02_PRECISION
    if max_iterations is None:
        max_iterations = config.GCJ02_MAX_ITERATIONS

    lng, lat = _as_input(lng, lat)
    wgs_lng = lng.copy()
    wgs_lat = lat.copy()
    for _ in range(max_iterations):
        mglng, mglat = _gcj02_offset(wgs_lng, wgs_lat)
        dlng = mglng - lng
        dlat = mglat - lat
        if np.all(np.abs(dlng) < precision) and np.all(np.abs(dlat) < precision):
            break
        wgs_lng = wgs_lng - dlng
        wgs_lat = wgs_lat - dlat
    else:
        logger.debug(
            "GCJ-02 inverse stopped after %d iterations above precision %g", max_iterations, precision
        )

    outside = out_of_china(lng, lat)
    return _as_output(np.where(outside, lng, wgs_lng), np.where(outside, lat, wgs_lat))


def gcj02_to_bd09(lng, lat):
    """GCJ-02 -> BD-09."""
    lng, lat = _as_input(lng, lat)
    z = np.sqrt(lng * lng + lat * lat) + 0.00002 * np.sin(lat * _X_PI)
    theta = np.arctan2(lat, lng) + 0.000003 * np.cos(lng * _X_PI)
    return _as_output(z * np.cos(theta) + 0.0065, z * np.sin(theta) + 0.006)


def bd09_to_gcj02(lng, lat):
    """BD-09 -> GCJ-02, closed-form approximation."""
    lng, lat = _as_input(lng, lat)
    x = lng - 0.0065
    y = lat - 0.006
    z = np.sqrt(x * x + y * y) - 0.00002 * np.sin(y * _X_PI)
    theta = np.arctan2(y, x) - 0.000003 * np.cos(x * _X_PI)
    return _as_output(z * np.cos(theta), z * np.sin(theta))


@dataclass(frozen=True)
class CorrectionStep:
    """One named transform between two coordinate systems and its inverse."""

    source: str
    target: str
    forward: Callable
    inverse: Callable


WGS84_TO_GCJ02 = CorrectionStep(WGS84, GCJ02, wgs84_to_gcj02, gcj02_to_wgs84)
GCJ02_TO_BD09 = CorrectionStep(GCJ02, BD09, gcj02_to_bd09, bd09_to_gcj02)

_CHAIN: tuple[CorrectionStep, ...] = (WGS84_TO_GCJ02, GCJ02_TO_BD09)


@dataclass(frozen=True)
class CoordinateCorrector:
    """A chain of correction steps applied in degrees.

    ``inverse`` is built from the same steps as ``forward``: it applies each
    step's inverse in reverse order.
    """

    steps: tuple[CorrectionStep, ...]

    def __post_init__(self) -> None:
        steps = tuple(self.steps)
        if not steps:
            raise ConfigurationError("CoordinateCorrector needs at least one step")
        for previous, current in zip(steps, steps[1:]):
            if previous.target != current.source:
                raise ConfigurationError(
                    f"Correction steps do not chain: {previous.source}->{previous.target} "
                    f"then {current.source}->{current.target}"
                )
        object.__setattr__(self, "steps", steps)

    @property
    def source(self) -> str:
        return self.steps[0].source

    @property
    def target(self) -> str:
        return self.steps[-1].target

    @property
    def name(self) -> str:
        return f"{self.source}->{self.target}"

    def forward(self, lng, lat):
        for step in self.steps:
            lng, lat = step.forward(lng, lat)
        return lng, lat

    def inverse(self, lng, lat):
        for step in reversed(self.steps):
            lng, lat = step.inverse(lng, lat)
        return lng, lat


GCJ02_CORRECTOR = CoordinateCorrector((WGS84_TO_GCJ02,))
BD09_CORRECTOR = CoordinateCorrector((WGS84_TO_GCJ02, GCJ02_TO_BD09))


def _system_index(name: str) -> int:
    try:
        return COORDINATE_SYSTEMS.index(name.lower())
    except ValueError:
        raise ConfigurationError(
            f"Unknown coordinate system {name!r}; expected one of {', '.join(COORDINATE_SYSTEMS)}"
        ) from None


def convert(lng, lat, source: str, target: str):
    """Convert degree coordinates between any two of wgs84, gcj02 and bd09."""
    start = _system_index(source)
    end = _system_index(target)
    if start == end:
        return _as_output(*_as_input(lng, lat))
    if start < end:
        return CoordinateCorrector(_CHAIN[start:end]).forward(lng, lat)
    return CoordinateCorrector(_CHAIN[end:start]).inverse(lng, lat)
