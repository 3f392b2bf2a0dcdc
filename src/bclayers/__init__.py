"""
bclayers: BC vector layer ingestion.

Reads vegetation inventory, ecosystem mapping, wetlands, rivers and
cutblock layers from the BC Data Catalogue or from local datasets and
normalizes them into analysis-ready GeoDataFrames.
"""

from importlib.metadata import version

from bclayers.errors import GeometryError, IngestError, RetrievalError, SourceError
from bclayers.ingestion.ingestor import (
    LayerRequest,
    ingest,
    ingest_many,
    read_bem,
    read_ccb,
    read_rivers,
    read_vri,
    read_wetlands,
)
from bclayers.schemas.layers import LayerKind

__version__ = version("bclayers")

__all__ = [
    "GeometryError",
    "IngestError",
    "LayerKind",
    "LayerRequest",
    "RetrievalError",
    "SourceError",
    "__version__",
    "ingest",
    "ingest_many",
    "read_bem",
    "read_ccb",
    "read_rivers",
    "read_vri",
    "read_wetlands",
]
