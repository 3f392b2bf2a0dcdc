"""
Normalization of raw layers into their canonical form.

Attribute renaming lives in `columns`; geometry repair, coercion and
clipping live in `geometry`.
"""

from bclayers.normalization.columns import missing_columns, rename_columns
from bclayers.normalization.geometry import (
    cast_to_multipolygon,
    clip_to_aoi,
    parse_aoi,
    rename_geometry,
    repair_geometries,
    to_multipolygon,
)

__all__ = [
    "cast_to_multipolygon",
    "clip_to_aoi",
    "missing_columns",
    "parse_aoi",
    "rename_columns",
    "rename_geometry",
    "repair_geometries",
    "to_multipolygon",
]
