"""Tests for the geographic and Mercator tiling schemes."""

from __future__ import annotations

import logging
import math

import numpy as np
import pytest

from geotiling import config
from geotiling.core.ellipsoid import CGCS2000, WGS84
from geotiling.core.types import MAX_RECTANGLE, Cartographic, ProjectedPoint, TileAddress
from geotiling.correction import GCJ02_CORRECTOR, wgs84_to_gcj02
from geotiling.errors import ConfigurationError
from geotiling.projection import (
    BaiduMercatorProjection,
    CorrectedProjection,
    PlainProjection,
    WebMercatorProjection,
)
from geotiling.tiling import (
    GeographicTiling,
    MercatorTiling,
    TilingSchemeConfig,
    geographic_resolutions,
    web_mercator_resolutions,
)

HALF_WORLD = math.pi * 6378137.0
MAX_LATITUDE = math.radians(config.WEB_MERCATOR_MAX_LATITUDE)


# ------------------------------------------------------------------
# Configuration
# ------------------------------------------------------------------


INVALID_CONFIGS = [
    pytest.param({"tile_size": 0}, id="tile-size-zero"),
    pytest.param({"tile_size": -256}, id="tile-size-negative"),
    pytest.param({"tile_size": 256.5}, id="tile-size-float"),
    pytest.param({"tile_size": True}, id="tile-size-bool"),
    pytest.param({"tile_size": "256"}, id="tile-size-string"),
    pytest.param({"resolutions": ()}, id="resolutions-empty"),
    pytest.param({"resolutions": (1.0, 0.0)}, id="resolutions-zero"),
    pytest.param({"resolutions": (1.0, -0.5)}, id="resolutions-negative"),
    pytest.param({"resolutions": (1.0, float("nan"))}, id="resolutions-nan"),
    pytest.param({"resolutions": (float("inf"),)}, id="resolutions-inf"),
    pytest.param({"resolutions": ("1.0",)}, id="resolutions-string-entry"),
    pytest.param({"resolutions": "1.0"}, id="resolutions-string"),
    pytest.param({"resolutions": 5}, id="resolutions-scalar"),
    pytest.param({"origin": (1.0,)}, id="origin-short"),
    pytest.param({"origin": (float("nan"), 0.0)}, id="origin-nan"),
    pytest.param({"origin": (0.0, "north")}, id="origin-string"),
    pytest.param({"ellipsoid": None}, id="ellipsoid-missing"),
    pytest.param({"ellipsoid": "WGS84"}, id="ellipsoid-string"),
    pytest.param({"bounding_rectangle": (0.0, 1.0, 1.0, 0.0)}, id="rectangle-inverted"),
    pytest.param({"bounding_rectangle": (0.0, 0.0, 1.0)}, id="rectangle-short"),
    pytest.param({"number_of_level_zero_tiles_x": 0}, id="tiles-x-zero"),
    pytest.param({"number_of_level_zero_tiles_y": 1.5}, id="tiles-y-float"),
    pytest.param({"zoom_offset": 0.5}, id="zoom-offset-float"),
]


class TestConfiguration:
    """Construction-time validation."""

    @pytest.mark.parametrize("overrides", INVALID_CONFIGS)
    @pytest.mark.parametrize("family", [GeographicTiling, MercatorTiling], ids=["geographic", "mercator"])
    def test_invalid_config_rejected(self, family, overrides):
        with pytest.raises(ConfigurationError):
            family(TilingSchemeConfig(**overrides))

    @pytest.mark.parametrize("family", [GeographicTiling, MercatorTiling], ids=["geographic", "mercator"])
    def test_non_config_rejected(self, family):
        with pytest.raises(ConfigurationError, match="TilingSchemeConfig"):
            family({"tile_size": 256})

    def test_geographic_rejects_non_corrector(self):
        with pytest.raises(ConfigurationError, match="CoordinateCorrector"):
            GeographicTiling(corrector="gcj02")

    def test_mercator_rejects_non_projection(self):
        with pytest.raises(ConfigurationError, match="Projection"):
            MercatorTiling(projection="EPSG:3857")

    def test_meter_corners_must_be_paired(self):
        with pytest.raises(ConfigurationError, match="together"):
            MercatorTiling(rectangle_southwest_in_meters=(0.0, 0.0))

    def test_resolutions_normalised_to_floats(self):
        scheme = MercatorTiling(TilingSchemeConfig(resolutions=[4, 2, 1]))
        assert scheme.resolutions == (4.0, 2.0, 1.0)
        assert all(type(value) is float for value in scheme.resolutions)

    def test_numpy_resolutions_accepted(self):
        scheme = GeographicTiling(TilingSchemeConfig(resolutions=np.array([1.0, 0.5])))
        assert scheme.resolutions == (1.0, 0.5)

    def test_tile_size_default_follows_config(self, monkeypatch):
        monkeypatch.setattr(config, "DEFAULT_TILE_SIZE", 512)
        assert TilingSchemeConfig().tile_size == 512
        assert MercatorTiling().resolutions[0] == pytest.approx(2 * HALF_WORLD / 512)

    def test_default_table_length_follows_config(self, monkeypatch):
        monkeypatch.setattr(config, "DEFAULT_MAX_LEVEL", 5)
        assert len(GeographicTiling().resolutions) == 6
        assert len(MercatorTiling().resolutions) == 6

    def test_config_is_frozen(self):
        with pytest.raises(AttributeError):
            TilingSchemeConfig().tile_size = 512


class TestMonotonicity:
    """Non-monotonic resolution tables are accepted with a warning."""

    def test_default_tables_are_monotonic(self, geographic, web_mercator):
        assert geographic.is_monotonic
        assert web_mercator.is_monotonic

    @pytest.mark.parametrize("resolutions", [
        (1.0, 2.0, 0.5),
        (1.0, 1.0),
    ], ids=["increasing", "flat"])
    def test_warning(self, caplog, resolutions):
        with caplog.at_level(logging.WARNING, logger="geotiling.tiling.scheme"):
            scheme = MercatorTiling(TilingSchemeConfig(resolutions=resolutions))
        assert not scheme.is_monotonic
        assert "not strictly decreasing" in caplog.text

    def test_no_warning_for_decreasing_table(self, caplog):
        with caplog.at_level(logging.WARNING, logger="geotiling.tiling.scheme"):
            scheme = GeographicTiling(TilingSchemeConfig(resolutions=(2.0, 1.0, 0.5)))
        assert scheme.is_monotonic
        assert "not strictly decreasing" not in caplog.text

    def test_non_monotonic_scheme_still_works(self):
        scheme = MercatorTiling(TilingSchemeConfig(resolutions=(1000.0, 5000.0)))
        assert scheme.tile_span(1) == pytest.approx(5000.0 * 256)
        assert scheme.position_to_tile_xy(Cartographic(0.0, 0.0), 1) is not None


# ------------------------------------------------------------------
# Defaults
# ------------------------------------------------------------------


class TestDefaults:
    """Family defaults."""

    def test_geographic(self, geographic):
        assert geographic.origin == (-180.0, 90.0)
        assert geographic.tile_size == 256
        assert geographic.zoom_offset == 0
        assert geographic.ellipsoid is WGS84
        assert geographic.rectangle == MAX_RECTANGLE
        assert geographic.resolutions[0] == pytest.approx(180.0 / 256)
        assert len(geographic.resolutions) == config.DEFAULT_MAX_LEVEL + 1
        assert geographic.projection is None

    def test_mercator(self, web_mercator):
        assert web_mercator.origin == pytest.approx((-HALF_WORLD, HALF_WORLD))
        assert web_mercator.resolutions[0] == pytest.approx(156543.03392804097)
        assert web_mercator.rectangle == pytest.approx((-math.pi, -MAX_LATITUDE, math.pi, MAX_LATITUDE))
        assert isinstance(web_mercator.projection, PlainProjection)

    def test_mercator_with_corrector(self, gcj02_mercator):
        assert isinstance(gcj02_mercator.projection, CorrectedProjection)
        assert gcj02_mercator.projection.corrector is GCJ02_CORRECTOR

    def test_rectangle_from_meters(self):
        scheme = MercatorTiling(
            rectangle_southwest_in_meters=(0.0, 0.0),
            rectangle_northeast_in_meters=(HALF_WORLD, HALF_WORLD),
        )
        assert scheme.rectangle == pytest.approx((0.0, 0.0, math.pi, MAX_LATITUDE))

    def test_rectangle_from_meters_uses_web_mercator(self):
        """Meter corners are unprojected with Web Mercator even over another base projection."""
        scheme = MercatorTiling(
            projection=BaiduMercatorProjection(),
            rectangle_southwest_in_meters=(-20037726.37, -12474104.17),
            rectangle_northeast_in_meters=(20037726.37, 12474104.17),
        )
        longitude = 20037726.37 / 6378137.0
        latitude = 2.0 * math.atan(math.exp(12474104.17 / 6378137.0)) - math.pi / 2.0
        assert scheme.rectangle == pytest.approx((-longitude, -latitude, longitude, latitude))
        assert math.degrees(latitude) == pytest.approx(73.89707, abs=1e-4)


    def test_explicit_config_kept(self):
        scheme_config = TilingSchemeConfig(
            origin=(10.0, 20.0), tile_size=512, resolutions=(8.0, 4.0), zoom_offset=1
        )
        scheme = GeographicTiling(scheme_config)
        assert scheme.origin == (10.0, 20.0)
        assert scheme.tile_size == 512
        assert scheme.resolutions == (8.0, 4.0)
        assert scheme.config.zoom_offset == 1

    def test_resolution_helpers(self):
        assert geographic_resolutions(256, levels=3) == pytest.approx((180 / 256, 90 / 256, 45 / 256))
        table = web_mercator_resolutions(512, levels=2)
        assert table == pytest.approx((2 * HALF_WORLD / 512, HALF_WORLD / 512))

    def test_repr(self, web_mercator):
        assert "MercatorTiling" in repr(web_mercator)


# ------------------------------------------------------------------
# Tile grid
# ------------------------------------------------------------------


class TestTileGrid:
    """Tile spans, counts, and rectangles."""

    @pytest.mark.parametrize("level, expected_x, expected_y", [
        (0, 2, 1),
        (1, 4, 2),
        (5, 64, 32),
        (-1, 0, 0),
    ], ids=["level-0", "level-1", "level-5", "negative"])
    def test_geographic_tile_counts(self, geographic, level, expected_x, expected_y):
        assert geographic.get_number_of_x_tiles_at_level(level) == expected_x
        assert geographic.get_number_of_y_tiles_at_level(level) == expected_y

    @pytest.mark.parametrize("level, expected", [
        (0, 1), (3, 8), (10, 1024), (-2, 0),
    ], ids=["level-0", "level-3", "level-10", "negative"])
    def test_mercator_tile_counts(self, web_mercator, level, expected):
        assert web_mercator.get_number_of_x_tiles_at_level(level) == expected
        assert web_mercator.get_number_of_y_tiles_at_level(level) == expected

    def test_tile_span(self, web_mercator):
        assert web_mercator.tile_span(0) == pytest.approx(2 * HALF_WORLD)
        assert web_mercator.tile_span(3) == pytest.approx(2 * HALF_WORLD / 8)

    def test_tile_span_undefined(self, web_mercator):
        assert web_mercator.tile_span(-1) is None
        assert web_mercator.tile_span(len(web_mercator.resolutions)) is None

    def test_positive_zoom_offset(self):
        scheme = MercatorTiling(TilingSchemeConfig(zoom_offset=2))
        assert scheme.tile_span(0) == pytest.approx(scheme.resolutions[2] * 256)
        assert scheme.tile_span(len(scheme.resolutions) - 2) is None

    def test_negative_zoom_offset_never_wraps(self):
        scheme = MercatorTiling(TilingSchemeConfig(zoom_offset=-1))
        assert scheme.tile_span(0) is None
        assert scheme.tile_span(1) == pytest.approx(scheme.resolutions[0] * 256)

    def test_world_extent_example(self):
        scheme = MercatorTiling(TilingSchemeConfig(
            origin=(-20037508.3427892, 20037508.3427892),
            resolutions=(156543.033928,),
            tile_size=256,
        ))
        rect = scheme.tile_xy_to_native_rectangle(0, 0, 0)
        expected = (-20037508.3427892, -20037508.3427892, 20037508.3427892, 20037508.3427892)
        assert rect == pytest.approx(expected, abs=0.01)

    def test_mercator_native_rectangle(self, web_mercator):
        rect = web_mercator.tile_xy_to_native_rectangle(0, 0, 1)
        assert rect == pytest.approx((-HALF_WORLD, 0.0, 0.0, HALF_WORLD))

    def test_mercator_rectangle_radians(self, web_mercator):
        rect = web_mercator.tile_xy_to_rectangle(0, 0, 0)
        assert rect == pytest.approx((-math.pi, -MAX_LATITUDE, math.pi, MAX_LATITUDE))

    def test_geographic_rectangles(self, geographic):
        assert geographic.tile_xy_to_rectangle(1, 0, 0) == pytest.approx(
            (0.0, -math.pi / 2, math.pi, math.pi / 2)
        )
        assert geographic.tile_xy_to_native_rectangle(3, 1, 1) == pytest.approx((90.0, -90.0, 180.0, 0.0))

    def test_adjacent_tiles_share_edges(self, web_mercator):
        left = web_mercator.tile_xy_to_native_rectangle(5, 7, 4)
        right = web_mercator.tile_xy_to_native_rectangle(6, 7, 4)
        below = web_mercator.tile_xy_to_native_rectangle(5, 8, 4)
        assert left.east == right.west
        assert left.south == below.north

    def test_undefined_level_rectangle(self, web_mercator):
        assert web_mercator.tile_xy_to_native_rectangle(0, 0, 99) is MAX_RECTANGLE
        assert web_mercator.tile_xy_to_rectangle(0, 0, 99) is MAX_RECTANGLE


# ------------------------------------------------------------------
# Positions
# ------------------------------------------------------------------


class TestPositionToTile:
    """position_to_tile_xy and its edge cases."""

    def test_mercator_null_island(self, web_mercator):
        assert web_mercator.position_to_tile_xy(Cartographic(0.0, 0.0), 1) == TileAddress(1, 1, 1)

    def test_mercator_beijing(self, web_mercator, beijing):
        assert web_mercator.position_to_tile_xy(beijing, 10) == TileAddress(843, 387, 10)
        assert web_mercator.position_to_tile_xy(beijing, 12) == TileAddress(3372, 1551, 12)

    def test_geographic_null_island(self, geographic):
        assert geographic.position_to_tile_xy(Cartographic(0.0, 0.0), 0) == TileAddress(1, 0, 0)

    def test_geographic_beijing(self, geographic, beijing):
        assert geographic.position_to_tile_xy(beijing, 3) == TileAddress(13, 2, 3)

    def test_outside_mercator_band(self, web_mercator):
        assert web_mercator.position_to_tile_xy(Cartographic.from_degrees(0.0, 86.0), 3) is None
        assert web_mercator.position_to_tile_xy(Cartographic.from_degrees(0.0, -86.0), 3) is None

    def test_outside_geographic_rectangle(self, geographic):
        assert geographic.position_to_tile_xy(Cartographic(4.0, 0.0), 0) is None

    def test_undefined_level(self, web_mercator, geographic, beijing):
        assert web_mercator.position_to_tile_xy(beijing, 99) is None
        assert geographic.position_to_tile_xy(beijing, -1) is None
        assert web_mercator.native_to_tile_xy(0.0, 0.0, 99) is None

    def test_mercator_north_west_corner(self, web_mercator):
        corner = Cartographic(-math.pi, web_mercator.rectangle.north)
        assert web_mercator.position_to_tile_xy(corner, 0) == TileAddress(0, 0, 0)
        assert web_mercator.position_to_tile_xy(corner, 5) == TileAddress(0, 0, 5)

    def test_geographic_north_west_corner(self, geographic):
        corner = Cartographic(-math.pi, math.pi / 2)
        assert geographic.position_to_tile_xy(corner, 2) == TileAddress(0, 0, 2)

    def test_south_east_corner_is_inside(self, web_mercator, geographic):
        assert web_mercator.position_to_tile_xy(Cartographic(math.pi, -MAX_LATITUDE), 2) is not None
        assert geographic.position_to_tile_xy(Cartographic(math.pi, -math.pi / 2), 2) is not None

    def test_gcj02_uses_corrected_position(self, gcj02_mercator, beijing):
        lng, lat = wgs84_to_gcj02(*beijing.to_degrees())
        expected = WebMercatorProjection().project(Cartographic.from_degrees(lng, lat))
        native = gcj02_mercator.position_to_native(beijing)
        assert native == pytest.approx(expected, abs=1e-6)
        assert gcj02_mercator.position_to_tile_xy(beijing, 16) == gcj02_mercator.native_to_tile_xy(
            expected.x, expected.y, 16
        )

    def test_native_position_round_trip(self, web_mercator, beijing):
        back = web_mercator.native_to_position(web_mercator.position_to_native(beijing))
        assert back.longitude == pytest.approx(beijing.longitude, abs=1e-12)
        assert back.latitude == pytest.approx(beijing.latitude, abs=1e-12)

    def test_native_to_position_returns_cartographic(self, geographic):
        position = geographic.native_to_position(ProjectedPoint(90.0, 45.0))
        assert position == pytest.approx((math.pi / 2, math.pi / 4, 0.0))


class TestIndexPolicy:
    """Geographic schemes clamp negative indices, Mercator schemes keep them."""

    def test_geographic_clamps(self):
        scheme = GeographicTiling(TilingSchemeConfig(origin=(0.0, 0.0)))
        address = scheme.position_to_tile_xy(Cartographic.from_degrees(-10.0, 10.0), 0)
        assert address == TileAddress(0, 0, 0)
        assert scheme.native_to_tile_xy(-200.0, 100.0, 0) == TileAddress(0, 0, 0)

    def test_mercator_keeps_sign(self):
        scheme = MercatorTiling(TilingSchemeConfig(origin=(0.0, 0.0)))
        address = scheme.position_to_tile_xy(Cartographic.from_degrees(-10.0, 10.0), 0)
        assert address == TileAddress(-1, -1, 0)

    def test_baidu_signed_rows(self, baidu, beijing):
        assert baidu.position_to_tile_xy(beijing, 10) == TileAddress(197, -74, 10)


class TestRoundTrip:
    """A position lies inside the rectangle of the tile it maps to."""

    @pytest.mark.parametrize("level", [0, 4, 12, 20])
    def test_web_mercator(self, web_mercator, world_positions, level):
        lon, lat = world_positions
        for i in range(0, len(lon), 10):
            position = Cartographic(lon[i], lat[i])
            address = web_mercator.position_to_tile_xy(position, level)
            assert address is not None
            assert web_mercator.tile_xy_to_rectangle(*address).contains(position)

    @pytest.mark.parametrize("level", [0, 4, 12, 20])
    def test_geographic(self, geographic, world_positions, level):
        lon, lat = world_positions
        for i in range(0, len(lon), 10):
            position = Cartographic(lon[i], lat[i])
            address = geographic.position_to_tile_xy(position, level)
            assert address is not None
            assert geographic.tile_xy_to_rectangle(*address).contains(position)

    def test_baidu_beijing(self, baidu, beijing):
        address = baidu.position_to_tile_xy(beijing, 10)
        assert baidu.tile_xy_to_rectangle(*address).contains(beijing)

    @pytest.mark.parametrize("scheme_fixture, level", [
        ("gcj02_mercator", 14),
        ("baidu", 14),
    ], ids=["gcj02", "bd09"])
    def test_corrected_tile_centers(self, request, china_positions, scheme_fixture, level):
        """Tile center -> position -> tile returns the same tile despite approximate inverses."""
        scheme = request.getfixturevalue(scheme_fixture)
        lon, lat = china_positions
        for i in range(0, len(lon), 10):
            address = scheme.position_to_tile_xy(Cartographic(lon[i], lat[i]), level)
            assert address is not None
            center = ProjectedPoint(*scheme.tile_xy_to_native_rectangle(*address).center)
            assert scheme.position_to_tile_xy(scheme.native_to_position(center), level) == address


class TestBatch:
    """positions_to_tile_xy matches the scalar path element by element."""

    @pytest.mark.parametrize("scheme_fixture", [
        "geographic", "web_mercator", "gcj02_mercator", "baidu",
    ])
    def test_matches_scalar(self, request, world_positions, scheme_fixture):
        scheme = request.getfixturevalue(scheme_fixture)
        lon, lat = world_positions
        xs, ys, valid = scheme.positions_to_tile_xy(lon, lat, 8)
        assert xs.dtype == np.int64
        assert valid.dtype == bool
        for i in range(len(lon)):
            address = scheme.position_to_tile_xy(Cartographic(lon[i], lat[i]), 8)
            if address is None:
                assert not valid[i]
            else:
                assert valid[i]
                assert (int(xs[i]), int(ys[i])) == (address.x, address.y)

    def test_invalid_entries(self, web_mercator):
        lon = np.array([0.0, np.nan, 0.0])
        lat = np.array([0.0, 0.0, math.radians(89.0)])
        xs, ys, valid = web_mercator.positions_to_tile_xy(lon, lat, 2)
        np.testing.assert_array_equal(valid, [True, False, False])
        np.testing.assert_array_equal(xs, [2, 0, 0])
        np.testing.assert_array_equal(ys, [2, 0, 0])

    def test_undefined_level(self, web_mercator, world_positions):
        _, _, valid = web_mercator.positions_to_tile_xy(*world_positions, 99)
        assert not valid.any()


# ------------------------------------------------------------------
# Corrected geographic grids
# ------------------------------------------------------------------


class TestCorrectedGeographic:
    """GeographicTiling cutting tiles in GCJ-02 degrees."""

    @pytest.fixture
    def scheme(self) -> GeographicTiling:
        return GeographicTiling(corrector=GCJ02_CORRECTOR)

    def test_corrector_exposed(self, scheme):
        assert scheme.corrector is GCJ02_CORRECTOR
        assert GeographicTiling().corrector is None

    def test_native_is_corrected_degrees(self, scheme, beijing):
        expected = wgs84_to_gcj02(*beijing.to_degrees())
        assert scheme.position_to_native(beijing) == pytest.approx(expected, abs=1e-12)

    def test_tile_uses_corrected_position(self, scheme, beijing):
        lng, lat = wgs84_to_gcj02(*beijing.to_degrees())
        assert scheme.position_to_tile_xy(beijing, 18) == scheme.native_to_tile_xy(lng, lat, 18)

    def test_rectangle_corners_are_uncorrected(self, scheme, beijing):
        address = scheme.position_to_tile_xy(beijing, 12)
        native = scheme.tile_xy_to_native_rectangle(*address)
        lng, lat = GCJ02_CORRECTOR.inverse(
            np.array([native.west, native.east]), np.array([native.south, native.north])
        )
        expected = (
            math.radians(lng[0]), math.radians(lat[0]), math.radians(lng[1]), math.radians(lat[1])
        )
        assert scheme.tile_xy_to_rectangle(*address) == pytest.approx(expected, abs=1e-12)

    def test_outside_china_is_uncorrected(self, scheme):
        paris = Cartographic.from_degrees(2.3522, 48.8566)
        assert scheme.position_to_native(paris) == pytest.approx((2.3522, 48.8566), abs=1e-12)
        assert scheme.position_to_tile_xy(paris, 10) == GeographicTiling().position_to_tile_xy(paris, 10)

    @pytest.mark.parametrize("level", [10, 16, 20])
    def test_tile_center_round_trip(self, scheme, china_positions, level):
        """Tile center -> position -> tile returns the same tile within the inverse's error."""
        lon, lat = china_positions
        for i in range(0, len(lon), 10):
            address = scheme.position_to_tile_xy(Cartographic(lon[i], lat[i]), level)
            assert address is not None
            center = ProjectedPoint(*scheme.tile_xy_to_native_rectangle(*address).center)
            assert scheme.position_to_tile_xy(scheme.native_to_position(center), level) == address


# ------------------------------------------------------------------
# ArcGIS tileInfo
# ------------------------------------------------------------------


def _tile_info(**changes) -> dict:
    """A CGCS2000 MapServer tileInfo whose lods start at level 1."""
    tile_info = {
        "rows": 256,
        "cols": 256,
        "origin": {"x": -180.0, "y": 90.0},
        "spatialReference": {"wkid": 4490, "latestWkid": 4490},
        "lods": [
            {"level": 3, "resolution": 0.17578125, "scale": 73874398.74},
            {"level": 1, "resolution": 0.703125, "scale": 295497593.59},
            {"level": 2, "resolution": 0.3515625, "scale": 147748796.80},
        ],
    }
    tile_info.update(changes)
    return tile_info


class TestTileInfo:
    """TilingSchemeConfig.from_tile_info."""

    def test_fields(self):
        scheme_config = TilingSchemeConfig.from_tile_info(_tile_info())
        assert scheme_config.origin == (-180.0, 90.0)
        assert scheme_config.tile_size == 256
        assert scheme_config.zoom_offset == -1
        assert scheme_config.resolutions == (0.703125, 0.3515625, 0.17578125)
        assert scheme_config.ellipsoid is CGCS2000
        assert scheme_config.number_of_level_zero_tiles_x == 4
        assert scheme_config.number_of_level_zero_tiles_y == 2

    def test_other_wkid_uses_wgs84(self):
        scheme_config = TilingSchemeConfig.from_tile_info(_tile_info(spatialReference={"wkid": 4326}))
        assert scheme_config.ellipsoid is WGS84
        tile_info = _tile_info()
        del tile_info["spatialReference"]
        assert TilingSchemeConfig.from_tile_info(tile_info).ellipsoid is WGS84

    @pytest.mark.parametrize("level, expected", [
        (1, TileAddress(1, 0, 1)),
        (2, TileAddress(3, 0, 2)),
        (3, TileAddress(6, 1, 3)),
    ])
    def test_beijing_tiles(self, beijing, level, expected):
        scheme = GeographicTiling(TilingSchemeConfig.from_tile_info(_tile_info()))
        assert scheme.position_to_tile_xy(beijing, level) == expected

    def test_levels_outside_lods_are_undefined(self, beijing):
        scheme = GeographicTiling(TilingSchemeConfig.from_tile_info(_tile_info()))
        assert scheme.position_to_tile_xy(beijing, 0) is None
        assert scheme.position_to_tile_xy(beijing, 4) is None

    def test_rectangle(self):
        scheme = GeographicTiling(TilingSchemeConfig.from_tile_info(_tile_info()))
        assert scheme.tile_xy_to_rectangle(6, 1, 3).to_degrees() == pytest.approx((90.0, 0.0, 135.0, 45.0))

    @pytest.mark.parametrize("tile_info, message", [
        pytest.param(_tile_info(lods=[]), "at least one", id="no-lods"),
        pytest.param(_tile_info(cols=512), "square", id="not-square"),
        pytest.param(
            _tile_info(lods=[{"level": 0, "resolution": 1.0}, {"level": 2, "resolution": 0.25}]),
            "consecutive",
            id="level-gap",
        ),
        pytest.param(_tile_info(lods=[{"level": 0}]), "Malformed", id="lod-without-resolution"),
        pytest.param({"rows": 256, "cols": 256, "lods": []}, "Malformed", id="no-origin"),
    ])
    def test_malformed(self, tile_info, message):
        with pytest.raises(ConfigurationError, match=message):
            TilingSchemeConfig.from_tile_info(tile_info)

    def test_bad_resolution_rejected_by_scheme(self):
        scheme_config = TilingSchemeConfig.from_tile_info(
            _tile_info(lods=[{"level": 0, "resolution": -1.0}])
        )
        with pytest.raises(ConfigurationError, match="positive"):
            GeographicTiling(scheme_config)
