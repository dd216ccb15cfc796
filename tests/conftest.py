"""Test fixtures for geotiling tests."""

from __future__ import annotations

import numpy as np
import pytest

from geotiling.core.types import Cartographic
from geotiling.tiling import (
    GeographicTiling,
    MercatorTiling,
    TilingScheme,
    create_tiling_scheme,
)


@pytest.fixture
def geographic() -> GeographicTiling:
    """Default WGS84 geographic scheme (2x1 tiles at level 0)."""
    return GeographicTiling()


@pytest.fixture
def web_mercator() -> MercatorTiling:
    """Default Web Mercator scheme."""
    return MercatorTiling()


@pytest.fixture
def gcj02_mercator() -> TilingScheme:
    return create_tiling_scheme("gcj02_web_mercator")


@pytest.fixture
def baidu() -> TilingScheme:
    return create_tiling_scheme("bd09_mercator")


@pytest.fixture
def beijing() -> Cartographic:
    """Tiananmen, WGS84."""
    return Cartographic.from_degrees(116.404, 39.915)


@pytest.fixture
def world_positions() -> tuple[np.ndarray, np.ndarray]:
    """Random radian positions spread over the Web Mercator domain."""
    rng = np.random.default_rng(42)
    longitudes = np.radians(rng.uniform(-179.0, 179.0, size=200))
    latitudes = np.radians(rng.uniform(-84.0, 84.0, size=200))
    return longitudes, latitudes


@pytest.fixture
def china_positions() -> tuple[np.ndarray, np.ndarray]:
    """Random radian positions inside mainland China."""
    rng = np.random.default_rng(7)
    longitudes = np.radians(rng.uniform(75.0, 134.0, size=200))
    latitudes = np.radians(rng.uniform(18.0, 53.0, size=200))
    return longitudes, latitudes
