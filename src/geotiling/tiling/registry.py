"""Named tiling-scheme presets.

Presets are declarative descriptions; each :meth:`SchemeRegistry.create`
call builds a fresh scheme from one.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, fields, replace
from typing import Callable

from geotiling import config
from geotiling.core.ellipsoid import CGCS2000, Ellipsoid, require_ellipsoid
from geotiling.correction import BD09_CORRECTOR, GCJ02_CORRECTOR, CoordinateCorrector
from geotiling.errors import ConfigurationError
from geotiling.projection import BaiduMercatorProjection, Projection

from .scheme import GeographicTiling, MercatorTiling, TilingScheme, TilingSchemeConfig

logger = logging.getLogger(__name__)

GEOGRAPHIC = "geographic"
MERCATOR = "mercator"

_CONFIG_FIELDS = frozenset(f.name for f in fields(TilingSchemeConfig))


@dataclass(frozen=True)
class SchemePreset:
    """Everything needed to build one kind of tiling scheme.

    Attributes:
        name: Registry key
        family: ``"geographic"`` or ``"mercator"``
        description: One-line summary shown by the CLI
        config: Base configuration; ``create`` overrides replace its fields
        projection: Factory for the base projection, given the final ellipsoid
        corrector: Correction applied before tiling, if any
        rectangle_in_meters: Mercator domain as (southwest, northeast) corners
            in Web Mercator meters, used when the config has no rectangle
    """

    name: str
    family: str
    description: str
    config: TilingSchemeConfig = field(default_factory=TilingSchemeConfig)
    projection: Callable[[Ellipsoid], Projection] | None = None
    corrector: CoordinateCorrector | None = None
    rectangle_in_meters: tuple[tuple[float, float], tuple[float, float]] | None = None

    def __post_init__(self) -> None:
        if self.family not in (GEOGRAPHIC, MERCATOR):
            raise ConfigurationError(
                f"Preset {self.name!r} has unknown family {self.family!r}"
            )
        if self.family == GEOGRAPHIC and self.projection is not None:
            raise ConfigurationError(
                f"Geographic preset {self.name!r} cannot take a projection"
            )
        if self.family == GEOGRAPHIC and self.rectangle_in_meters is not None:
            raise ConfigurationError(
                f"Geographic preset {self.name!r} cannot take a rectangle in meters"
            )

    def build(self, **overrides) -> TilingScheme:
        """Build a scheme, replacing config fields with ``overrides``."""
        unknown = sorted(set(overrides) - _CONFIG_FIELDS)
        if unknown:
            raise ConfigurationError(
                f"Unknown tiling scheme option(s) for {self.name!r}: {', '.join(unknown)}"
            )
        scheme_config = replace(self.config, **overrides)

        if self.family == GEOGRAPHIC:
            return GeographicTiling(scheme_config, corrector=self.corrector)

        ellipsoid = require_ellipsoid(scheme_config.ellipsoid, self.name)
        projection = self.projection(ellipsoid) if self.projection is not None else None
        southwest, northeast = self.rectangle_in_meters or (None, None)
        return MercatorTiling(
            scheme_config,
            projection=projection,
            corrector=self.corrector,
            rectangle_southwest_in_meters=southwest,
            rectangle_northeast_in_meters=northeast,
        )


class SchemeRegistry:
    """Registers and builds tiling-scheme presets by name."""

    def __init__(self) -> None:
        self._presets: dict[str, SchemePreset] = {}

    def register(self, preset: SchemePreset) -> None:
        """Register a preset, replacing any preset with the same name."""
        if preset.name in self._presets:
            logger.debug("Replacing tiling scheme preset %s", preset.name)
        self._presets[preset.name] = preset

    def unregister(self, name: str) -> SchemePreset | None:
        """Remove a preset by name. Returns the removed preset or None."""
        return self._presets.pop(name, None)

    def get(self, name: str) -> SchemePreset | None:
        """Retrieve a preset by name."""
        return self._presets.get(name)

    def create(self, name: str, **overrides) -> TilingScheme:
        """Build the scheme registered as ``name``.

        Raises:
            ConfigurationError: If ``name`` is unknown or an override is invalid.
        """
        preset = self._presets.get(name)
        if preset is None:
            raise ConfigurationError(
                f"Unknown tiling scheme {name!r}; registered: {', '.join(self.names) or 'none'}"
            )
        return preset.build(**overrides)

    @property
    def presets(self) -> dict[str, SchemePreset]:
        """All registered presets (read-only view)."""
        return dict(self._presets)

    @property
    def names(self) -> list[str]:
        return sorted(self._presets)

    @property
    def count(self) -> int:
        return len(self._presets)

    def __contains__(self, name: object) -> bool:
        return name in self._presets


def baidu_resolutions() -> tuple[float, ...]:
    """Meters per pixel of Baidu levels 0..18 (one pixel is one meter at level 18)."""
    return tuple(2.0 ** (config.BAIDU_MAX_LEVEL - level) for level in range(config.BAIDU_MAX_LEVEL + 1))


def _baidu_projection(ellipsoid: Ellipsoid) -> Projection:
    return BaiduMercatorProjection(ellipsoid)


def _default_presets() -> list[SchemePreset]:
    return [
        SchemePreset(
            name="geographic",
            family=GEOGRAPHIC,
            description="WGS84 plate carrée, 2x1 tiles at level 0",
        ),
        SchemePreset(
            name="cgcs2000_geographic",
            family=GEOGRAPHIC,
            description="CGCS2000 plate carrée (national geodetic grid), 4x2 tiles at level 0",
            config=TilingSchemeConfig(
                ellipsoid=CGCS2000,
                number_of_level_zero_tiles_x=4,
                number_of_level_zero_tiles_y=2,
            ),
        ),
        SchemePreset(
            name="web_mercator",
            family=MERCATOR,
            description="Spherical Web Mercator (EPSG:3857)",
        ),
        SchemePreset(
            name="gcj02_web_mercator",
            family=MERCATOR,
            description="Web Mercator over GCJ-02 positions (AMap, Tencent, Google China)",
            corrector=GCJ02_CORRECTOR,
        ),
        SchemePreset(
            name="bd09_mercator",
            family=MERCATOR,
            description="Baidu Mercator over BD-09 positions, origin at (0, 0)",
            config=TilingSchemeConfig(
                origin=(0.0, 0.0),
                tile_size=256,
                resolutions=baidu_resolutions(),
            ),
            projection=_baidu_projection,
            corrector=BD09_CORRECTOR,
            rectangle_in_meters=(
                config.BAIDU_RECTANGLE_SOUTHWEST_IN_METERS,
                config.BAIDU_RECTANGLE_NORTHEAST_IN_METERS,
            ),
        ),
    ]


def _build_default_registry() -> SchemeRegistry:
    registry = SchemeRegistry()
    for preset in _default_presets():
        registry.register(preset)
    return registry


#: Registry holding the built-in presets
default_registry = _build_default_registry()


def create_tiling_scheme(name: str, **overrides) -> TilingScheme:
    """Build a built-in (or registered) scheme by name."""
    return default_registry.create(name, **overrides)
