"""Test doubles and geometry builders shared across test modules."""

from pathlib import Path
from typing import Any

import geopandas as gpd
from shapely.geometry import Polygon
from shapely.geometry.base import BaseGeometry

from bclayers.ingestion.catalog import CatalogQuery

CRS = "EPSG:3005"


def bowtie(x0: float = 0.0, y0: float = 0.0, size: float = 8.0) -> Polygon:
    """Self-intersecting polygon (invalid)."""
    return Polygon(
        [
            (x0, y0),
            (x0 + size, y0 + size),
            (x0 + size, y0),
            (x0, y0 + size),
            (x0, y0),
        ]
    )


class FakeReader:
    """Local reader returning a fixed layer and recording calls."""

    def __init__(self, gdf: gpd.GeoDataFrame) -> None:
        self.gdf = gdf
        self.calls: list[dict[str, Any]] = []

    def read(
        self,
        source: str | Path,
        layer: str,
        mask: BaseGeometry | None = None,
    ) -> gpd.GeoDataFrame:
        self.calls.append({"source": source, "layer": layer, "mask": mask})
        return self.gdf.copy()


class FakeCatalog:
    """Catalogue client returning a fixed layer and recording queries."""

    def __init__(self, gdf: gpd.GeoDataFrame) -> None:
        self.gdf = gdf
        self.queries: list[CatalogQuery] = []

    def query(self, record_id: str) -> CatalogQuery:
        return CatalogQuery(client=self, record_id=record_id)

    def collect(self, query: CatalogQuery) -> gpd.GeoDataFrame:
        self.queries.append(query)
        return self.gdf.copy()
