"""geotiling - Tiling schemes and coordinate projections for web map tiles."""

__version__ = "0.1.0"

from .core import (
    CGCS2000,
    MAX_RECTANGLE,
    WGS84,
    Cartographic,
    Ellipsoid,
    ProjectedPoint,
    Rectangle,
    TileAddress,
)
from .correction import (
    BD09_CORRECTOR,
    GCJ02_CORRECTOR,
    CoordinateCorrector,
    CorrectionStep,
    bd09_to_gcj02,
    convert,
    gcj02_to_bd09,
    gcj02_to_wgs84,
    gcj02_to_wgs84_precise,
    wgs84_to_gcj02,
)
from .errors import ConfigurationError
from .projection import (
    BaiduMercatorProjection,
    CorrectedProjection,
    GeographicProjection,
    PlainProjection,
    WebMercatorProjection,
    compose_projection,
)
from .tiling import (
    GeographicTiling,
    MercatorTiling,
    SchemeRegistry,
    TilingScheme,
    TilingSchemeConfig,
    create_tiling_scheme,
    default_registry,
)
