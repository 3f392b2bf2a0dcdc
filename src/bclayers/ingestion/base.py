"""
Layer sources.

A layer is retrieved either from a local dataset or from the BC Data
Catalogue. Both are LayerSource implementations, chosen once per
ingestion, so the rest of the pipeline never branches on the origin.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING

from shapely.geometry.base import BaseGeometry

from bclayers.errors import IngestError, RetrievalError
from bclayers.ingestion.catalog import CatalogClient, intersects
from bclayers.ingestion.local import LocalReader
from bclayers.schemas.layers import LayerSpec
from bclayers.utils.logging import get_logger

if TYPE_CHECKING:
    import geopandas as gpd

log = get_logger(__name__)


class LayerSource(ABC):
    """
    Abstract origin of raw layer features.

    Subclasses implement `_load_raw`; `load` adds logging and turns any
    collaborator failure into a RetrievalError.
    """

    def __init__(self, spec: LayerSpec) -> None:
        """
        Initialize layer source.

        Args:
            spec: Static configuration of the layer being read.
        """
        self.spec = spec

    @property
    @abstractmethod
    def label(self) -> str:
        """Human-readable description of the origin."""
        ...

    @abstractmethod
    def _load_raw(self, aoi: BaseGeometry | None) -> "gpd.GeoDataFrame":
        """Retrieve raw features. Implemented by subclasses."""
        ...

    def load(self, aoi: BaseGeometry | None = None) -> "gpd.GeoDataFrame":
        """
        Retrieve raw features, optionally filtered by an area of interest.

        The AOI only filters; it never clips geometries.

        Args:
            aoi: Optional area of interest.

        Returns:
            Raw GeoDataFrame as delivered by the collaborator.

        Raises:
            RetrievalError: If the reader or catalogue fails.
        """
        log.info("Loading layer", layer=self.spec.kind.value, source=self.label)

        try:
            gdf = self._load_raw(aoi)
        except IngestError:
            raise
        except Exception as e:
            msg = f"Could not retrieve {self.spec.kind.name} from {self.label}: {e}"
            raise RetrievalError(msg, kind=self.spec.kind) from e

        log.info("Loaded raw features", rows=len(gdf), columns=list(gdf.columns))
        return gdf


class LocalDatasetSource(LayerSource):
    """Layer read from a local dataset."""

    def __init__(
        self,
        spec: LayerSpec,
        reader: LocalReader,
        source: str | Path,
        layer: str | None = None,
    ) -> None:
        """
        Initialize local source.

        Args:
            spec: Layer specification.
            reader: Vector reader.
            source: Dataset locator.
            layer: Layer name (defaults to the kind's default layer).
        """
        super().__init__(spec)
        self.reader = reader
        self.source = source
        self.layer = layer or spec.default_layer

    @property
    def label(self) -> str:
        return f"{self.source}:{self.layer}"

    def _load_raw(self, aoi: BaseGeometry | None) -> "gpd.GeoDataFrame":
        return self.reader.read(self.source, self.layer, mask=aoi)


class RemoteCatalogSource(LayerSource):
    """Layer fetched from the BC Data Catalogue."""

    def __init__(self, spec: LayerSpec, catalog: CatalogClient) -> None:
        """
        Initialize catalogue source.

        Args:
            spec: Layer specification; must have a record id.
            catalog: Catalogue client.

        Raises:
            ValueError: If the layer kind has no catalogue record.
        """
        if spec.record_id is None:
            msg = f"{spec.kind.name} has no catalogue record"
            raise ValueError(msg)
        super().__init__(spec)
        self.catalog = catalog
        self.record_id = spec.record_id

    @property
    def label(self) -> str:
        return f"catalogue:{self.record_id}"

    def _load_raw(self, aoi: BaseGeometry | None) -> "gpd.GeoDataFrame":
        query = self.catalog.query(self.record_id).select(self.spec.remote_columns)
        if aoi is not None:
            query = query.filter(intersects(aoi))
        return query.collect()
