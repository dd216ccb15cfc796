"""Tiling schemes and the preset registry."""

from .registry import (
    SchemePreset,
    SchemeRegistry,
    baidu_resolutions,
    create_tiling_scheme,
    default_registry,
)
from .scheme import (
    GeographicTiling,
    MercatorTiling,
    TilingScheme,
    TilingSchemeConfig,
    geographic_resolutions,
    web_mercator_resolutions,
)

__all__ = [
    "TilingSchemeConfig",
    "TilingScheme",
    "GeographicTiling",
    "MercatorTiling",
    "geographic_resolutions",
    "web_mercator_resolutions",
    "baidu_resolutions",
    "SchemePreset",
    "SchemeRegistry",
    "default_registry",
    "create_tiling_scheme",
]
