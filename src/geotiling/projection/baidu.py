"""Baidu Mercator (BD-09 lon/lat <-> BD-09 Mercator meters).

Baidu does not use spherical Mercator. Its tiles are cut from a plane
defined by six latitude bands, each with a fitted polynomial in each
direction. The tables are Baidu's published values; the forward and inverse
tables are separate fits, so the round trip is close but not exact.

Southern latitudes always select the equatorial band of the forward table.
That is how the published algorithm behaves and tile alignment depends on it.
"""

from __future__ import annotations

import numpy as np

from geotiling import config
from geotiling.core.ellipsoid import WGS84, Ellipsoid, require_ellipsoid

from .engines import Projection

_MCBAND = (12890594.86, 8362377.87, 5591021, 3481989.83, 1678043.12, 0)
_LLBAND = (75, 60, 45, 30, 15, 0)

_MC2LL = np.array([
    [1.410526172116255e-8, 0.00000898305509648872, -1.9939833816331, 200.9824383106796, -187.2403703815547,
     91.6087516669843, -23.38765649603339, 2.57121317296198, -0.03801003308653, 17337981.2],
    [-7.435856389565537e-9, 0.000008983055097726239, -0.78625201886289, 96.32687599759846, -1.85204757529826,
     -59.36935905485877, 47.40033549296737, -16.50741931063887, 2.28786674699375, 10260144.86],
    [-3.030883460898826e-8, 0.00000898305509983578, 0.30071316287616, 59.74293618442277, 7.357984074871,
     -25.38371002664745, 13.45380521110908, -3.29883767235584, 0.32710905363475, 6856817.37],
    [-1.981981304930552e-8, 0.000008983055099779535, 0.03278182852591, 40.31678527705744, 0.65659298677277,
     -4.44255534477492, 0.85341911805263, 0.12923347998204, -0.04625736007561, 4482777.06],
    [3.09191371068437e-9, 0.000008983055096812155, 0.00006995724062, 23.10934304144901, -0.00023663490511,
     -0.6321817810242, -0.00663494467273, 0.03430082397953, -0.00466043876332, 2555164.4],
    [2.890871144776878e-9, 0.000008983055095805407, -3.068298e-8, 7.47137025468032, -0.00000353937994,
     -0.02145144861037, -0.00001234426596, 0.00010322952773, -0.00000323890364, 826088.5],
], dtype=np.float64)

_LL2MC = np.array([
    [-0.0015702102444, 111320.7020616939, 1704480524535203, -10338987376042340, 26112667856603880,
     -35149669176653700, 26595700718403920, -10725012454188240, 1800819912950474, 82.5],
    [0.0008277824516172526, 111320.7020463578, 647795574.6671607, -4082003173.641316, 10774905663.51142,
     -15171875531.51559, 12053065338.62167, -5124939663.577472, 913311935.9512032, 67.5],
    [0.00337398766765, 111320.7020202162, 4481351.045890365, -23393751.19931662, 79682215.47186455,
     -115964993.2797253, 97236711.15602145, -43661946.33752821, 8477230.501135234, 52.5],
    [0.00220636496208, 111320.7020209128, 51751.86112841131, 3796837.749470245, 992013.7397791013,
     -1221952.21711287, 1340652.697009075, -620943.6990984312, 144416.9293806241, 37.5],
    [-0.0003441963504368392, 111320.7020576856, 278.2353980772752, 2485758.690035394, 6070.750963243378,
     54821.18345352118, 9540.606633304236, -2710.55326746645, 1405.483844121726, 22.5],
    [-0.0003218135878613132, 111320.7020701615, 0.00369383431289, 823725.6402795718, 0.46104986909093,
     2351.343141331292, 1.58060784298199, 8.77738589078284, 0.37238884252424, 7.45],
], dtype=np.float64)

#: Forward latitudes are clamped to this band before band selection
_LL2MC_LATITUDE_LIMIT = 74.0


def _convert(x: np.ndarray, y: np.ndarray, factors: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    """Evaluate one band polynomial per element, in the published term order."""
    out_x = factors[..., 0] + factors[..., 1] * np.abs(x)
    c = np.abs(y) / factors[..., 9]
    out_y = (
        factors[..., 2]
        + factors[..., 3] * c
        + factors[..., 4] * c * c
        + factors[..., 5] * c * c * c
        + factors[..., 6] * c * c * c * c
        + factors[..., 7] * c * c * c * c * c
        + factors[..., 8] * c * c * c * c * c * c
    )
    out_x = out_x * np.where(x < 0, -1.0, 1.0)
    out_y = out_y * np.where(y < 0, -1.0, 1.0)
    return out_x, out_y


def _wrap_longitude(lng: np.ndarray) -> np.ndarray:
    wrapped = np.mod(lng + 180.0, 360.0) - 180.0
    return np.where((lng < -180.0) | (lng > 180.0), wrapped, lng)


def _ll2mc_band(lat: np.ndarray) -> np.ndarray:
    band = np.full(lat.shape, -1, dtype=np.intp)
    for i, limit in enumerate(_LLBAND):
        band = np.where((band < 0) & (lat >= limit), i, band)
    for i in reversed(range(len(_LLBAND))):
        band = np.where((band < 0) & (lat <= -_LLBAND[i]), i, band)
    return np.where(band < 0, len(_LLBAND) - 1, band)


def _mc2ll_band(y: np.ndarray) -> np.ndarray:
    abs_y = np.abs(y)
    band = np.full(abs_y.shape, -1, dtype=np.intp)
    for i, limit in enumerate(_MCBAND):
        band = np.where((band < 0) & (abs_y >= limit), i, band)
    return np.where(band < 0, len(_MCBAND) - 1, band)


def bd09_to_mercator(lng, lat) -> tuple[np.ndarray, np.ndarray]:
    """BD-09 degrees -> BD-09 Mercator meters."""
    lng = _wrap_longitude(np.asarray(lng, dtype=np.float64))
    lat = np.clip(np.asarray(lat, dtype=np.float64), -_LL2MC_LATITUDE_LIMIT, _LL2MC_LATITUDE_LIMIT)
    return _convert(lng, lat, _LL2MC[_ll2mc_band(lat)])


def mercator_to_bd09(x, y) -> tuple[np.ndarray, np.ndarray]:
    """BD-09 Mercator meters -> BD-09 degrees."""
    x = np.asarray(x, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)
    return _convert(x, y, _MC2LL[_mc2ll_band(y)])


class BaiduMercatorProjection(Projection):
    """Projection from BD-09 positions (radians) to Baidu Mercator meters."""

    def __init__(self, ellipsoid: Ellipsoid = WGS84) -> None:
        # The polynomials are fitted; the ellipsoid is carried for scheme metadata only
        self.ellipsoid = require_ellipsoid(ellipsoid, "BaiduMercatorProjection")

    @property
    def latitude_band(self) -> tuple[float, float]:
        return config.BAIDU_LATITUDE_BAND

    def project_arrays(self, longitudes, latitudes):
        return bd09_to_mercator(
            np.degrees(np.asarray(longitudes, dtype=np.float64)),
            np.degrees(np.asarray(latitudes, dtype=np.float64)),
        )

    def unproject_arrays(self, xs, ys):
        lng, lat = mercator_to_bd09(xs, ys)
        return np.radians(lng), np.radians(lat)
