"""
Pandera schemas for normalized layers.

The geometry contract depends on the layer kind, so schemas are built
from the LayerSpec table rather than declared per layer.
"""

from functools import cache

import numpy as np
import pandas as pd
import pandera.pandas as pa
import shapely

from bclayers.schemas.layers import LayerKind, LayerSpec, get_layer_spec

MULTIPOLYGON_TYPE_ID = 6


def _as_geometry_array(series: pd.Series) -> np.ndarray:
    return np.asarray(series, dtype=object)


def valid_geometries(series: pd.Series) -> pd.Series:
    """Every present geometry is topologically valid."""
    geoms = _as_geometry_array(series)
    ok = shapely.is_missing(geoms) | shapely.is_valid(geoms)
    return pd.Series(ok, index=series.index)


def multipolygon_geometries(series: pd.Series) -> pd.Series:
    """Every present geometry is a MultiPolygon (empty ones included)."""
    geoms = _as_geometry_array(series)
    ok = shapely.is_missing(geoms) | (shapely.get_type_id(geoms) == MULTIPOLYGON_TYPE_ID)
    return pd.Series(ok, index=series.index)


def build_layer_schema(spec: LayerSpec) -> pa.DataFrameSchema:
    """
    Build the output schema for one layer kind.

    Args:
        spec: Layer specification.

    Returns:
        Schema requiring the canonical geometry column with valid
        geometries, and MultiPolygons where the kind forces that type.
    """
    checks = [pa.Check(valid_geometries, error="invalid geometry")]
    if spec.force_multipolygon:
        checks.append(pa.Check(multipolygon_geometries, error="not a MultiPolygon"))

    return pa.DataFrameSchema(
        columns={
            spec.geometry_column: pa.Column(
                dtype=None,
                checks=checks,
                nullable=True,
                required=True,
            ),
        },
        name=f"{spec.kind.name}LayerSchema",
        strict=False,  # attributes vary by source
        coerce=False,
    )


@cache
def layer_schema(kind: LayerKind) -> pa.DataFrameSchema:
    """Cached schema for a layer kind."""
    return build_layer_schema(get_layer_spec(kind))
