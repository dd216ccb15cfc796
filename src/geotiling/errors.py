"""Exception types for geotiling.

Only construction can fail. Per-call edge cases (a position outside the
scheme, a level without a resolution) are encoded in return values.
"""

from __future__ import annotations


class ConfigurationError(ValueError):
    """A tiling scheme, projection or corrector was configured incorrectly."""
