"""Map projections and corrected-projection composition."""

from .baidu import BaiduMercatorProjection, bd09_to_mercator, mercator_to_bd09
from .engines import (
    CorrectedProjection,
    GeographicProjection,
    PlainProjection,
    Projection,
    ProjectionStrategy,
    WebMercatorProjection,
    compose_projection,
)

__all__ = [
    "Projection",
    "GeographicProjection",
    "WebMercatorProjection",
    "BaiduMercatorProjection",
    "PlainProjection",
    "CorrectedProjection",
    "ProjectionStrategy",
    "compose_projection",
    "bd09_to_mercator",
    "mercator_to_bd09",
]
