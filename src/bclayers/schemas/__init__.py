"""
Layer definitions and output contracts.

LAYER_SPECS describes every supported layer; the pandera schemas in
`output` enforce the normalized shape of ingested layers.
"""

from bclayers.schemas.layers import (
    LAYER_SPECS,
    VRI_COLUMN_MAPPING,
    LayerKind,
    LayerSpec,
    get_layer_spec,
)
from bclayers.schemas.output import build_layer_schema, layer_schema

__all__ = [
    "LAYER_SPECS",
    "VRI_COLUMN_MAPPING",
    "LayerKind",
    "LayerSpec",
    "build_layer_schema",
    "get_layer_spec",
    "layer_schema",
]
