"""
Layer ingestion pipeline.

Turns a layer request into a normalized GeoDataFrame:

1. choose the source (local dataset or catalogue) and retrieve features,
2. rename attributes to their short names (VRI),
3. rename the geometry column to the layer's canonical name,
4. repair invalid geometries,
5. coerce to MultiPolygon (VRI, CCB),
6. clip to the area of interest and coerce again (VRI only).

Only VRI is hard-clipped. The other layers are filtered by the AOI at
retrieval and may extend beyond it.
"""

from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any

from pandera.errors import SchemaError
from shapely.geometry.base import BaseGeometry

from bclayers.config.settings import IngestConfig
from bclayers.errors import GeometryError, SourceError
from bclayers.ingestion.base import LayerSource, LocalDatasetSource, RemoteCatalogSource
from bclayers.ingestion.catalog import BCDataCatalogue, CatalogClient
from bclayers.ingestion.local import LocalReader, PyogrioReader
from bclayers.normalization.columns import missing_columns, rename_columns
from bclayers.normalization.geometry import (
    cast_to_multipolygon,
    clip_to_aoi,
    parse_aoi,
    rename_geometry,
    repair_geometries,
)
from bclayers.schemas.layers import LayerKind, LayerSpec, get_layer_spec
from bclayers.schemas.output import layer_schema
from bclayers.utils.logging import get_logger, log_context

if TYPE_CHECKING:
    import geopandas as gpd

log = get_logger(__name__)


@dataclass(frozen=True)
class LayerRequest:
    """A single layer to ingest.

    `source=None` means the layer is fetched from the catalogue.
    """

    kind: LayerKind
    source: str | Path | None = None
    layer: str | None = None
    aoi: str | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.kind, LayerKind):
            object.__setattr__(self, "kind", LayerKind.from_string(str(self.kind)))


def select_source(
    spec: LayerSpec,
    source: str | Path | None,
    layer: str | None,
    *,
    reader: LocalReader | None = None,
    catalog: CatalogClient | None = None,
) -> LayerSource:
    """
    Choose where a layer is read from.

    Args:
        spec: Layer specification.
        source: Dataset locator, or None for the catalogue.
        layer: Layer name inside the dataset.
        reader: Local reader (defaults to PyogrioReader).
        catalog: Catalogue client (defaults to BCDataCatalogue).

    Returns:
        LocalDatasetSource or RemoteCatalogSource.

    Raises:
        SourceError: If no source is given and the kind is local-only.
    """
    if source is not None:
        return LocalDatasetSource(spec, reader or PyogrioReader(), source, layer)

    if not spec.supports_remote:
        msg = f"{spec.kind.name} is not available from the catalogue; a source is required"
        raise SourceError(msg, kind=spec.kind)

    return RemoteCatalogSource(spec, catalog or BCDataCatalogue())


def normalize_layer(
    gdf: "gpd.GeoDataFrame",
    spec: LayerSpec,
    aoi: BaseGeometry | None = None,
) -> "gpd.GeoDataFrame":
    """
    Bring a raw layer into its canonical form.

    Args:
        gdf: Raw layer from a LayerSource.
        spec: Layer specification.
        aoi: Optional area of interest, used for clipping where the
            layer kind clips.

    Returns:
        Normalized GeoDataFrame.

    Raises:
        GeometryError: If a geometry operation fails.
    """
    if spec.column_mapping:
        absent = missing_columns(gdf, spec.column_mapping)
        if absent:
            log.debug("Source lacks mapped columns", missing=absent)
        gdf = rename_columns(gdf, spec.column_mapping)

    gdf = rename_geometry(gdf, spec.geometry_column)
    gdf = repair_geometries(gdf)

    if spec.force_multipolygon:
        gdf = cast_to_multipolygon(gdf)

    if aoi is not None and spec.clip_to_aoi:
        gdf = clip_to_aoi(gdf, aoi)
        gdf = cast_to_multipolygon(gdf)

    return gdf


def validate_layer(gdf: "gpd.GeoDataFrame", spec: LayerSpec) -> None:
    """
    Check a normalized layer against its output schema.

    Raises:
        GeometryError: If the layer violates its geometry contract.
    """
    try:
        layer_schema(spec.kind).validate(gdf)
    except SchemaError as e:
        msg = f"{spec.kind.name} output failed validation: {e}"
        raise GeometryError(msg, kind=spec.kind) from e


def ingest(
    kind: LayerKind | str,
    source: str | Path | None = None,
    layer: str | None = None,
    aoi: str | None = None,
    *,
    reader: LocalReader | None = None,
    catalog: CatalogClient | None = None,
    validate: bool = True,
) -> "gpd.GeoDataFrame":
    """
    Ingest one layer.

    Args:
        kind: Layer kind.
        source: Dataset locator; None fetches from the catalogue.
        layer: Layer name inside the dataset (defaults per kind).
        aoi: Optional area of interest as WKT, in the layer's CRS.
        reader: Local reader override.
        catalog: Catalogue client override.
        validate: Whether to check the output schema.

    Returns:
        Normalized GeoDataFrame.

    Raises:
        SourceError: If the kind needs a source and none was given.
        RetrievalError: If reading or fetching fails.
        GeometryError: If the AOI or geometry normalization fails.
    """
    spec = get_layer_spec(kind)

    with log_context(layer=spec.kind.value):
        layer_source = select_source(
            spec, source, layer, reader=reader, catalog=catalog
        )
        try:
            aoi_geom = parse_aoi(aoi) if aoi else None
            raw = layer_source.load(aoi_geom)
            gdf = normalize_layer(raw, spec, aoi_geom)
            if validate:
                validate_layer(gdf, spec)
        except GeometryError as e:
            if e.kind is None:
                e.kind = spec.kind
            raise

        log.info(
            "Layer ingested",
            rows=len(gdf),
            geometry_column=gdf.geometry.name,
            clipped=aoi_geom is not None and spec.clip_to_aoi,
        )

    return gdf


def ingest_request(request: LayerRequest, **kwargs: Any) -> "gpd.GeoDataFrame":
    """Ingest a LayerRequest; keyword arguments are passed to ingest()."""
    return ingest(
        request.kind, request.source, request.layer, request.aoi, **kwargs
    )


def ingest_many(
    requests: Iterable[LayerRequest],
    *,
    max_workers: int | None = None,
    reader: LocalReader | None = None,
    catalog: CatalogClient | None = None,
    validate: bool = True,
) -> dict[LayerKind, "gpd.GeoDataFrame"]:
    """
    Ingest several layers, one task per layer.

    Args:
        requests: Layers to ingest; each kind at most once.
        max_workers: Thread count (None = one per layer, 1 = sequential).
        reader: Local reader override.
        catalog: Catalogue client override.
        validate: Whether to check output schemas.

    Returns:
        Normalized layers keyed by kind, in request order.

    Raises:
        ValueError: If a kind is requested twice.
        IngestError: The first failure; remaining results are discarded.
    """
    requests = list(requests)
    kinds = [r.kind for r in requests]
    if len(set(kinds)) != len(kinds):
        msg = f"Each layer kind may be requested once, got: {[k.value for k in kinds]}"
        raise ValueError(msg)

    kwargs: dict[str, Any] = {"reader": reader, "catalog": catalog, "validate": validate}
    results: dict[LayerKind, gpd.GeoDataFrame] = {}

    if max_workers == 1 or len(requests) <= 1:
        for request in requests:
            results[request.kind] = ingest_request(request, **kwargs)
        return results

    log.info("Ingesting layers in parallel", layers=[k.value for k in kinds])

    with ThreadPoolExecutor(max_workers=max_workers or len(requests)) as executor:
        futures = {
            executor.submit(ingest_request, request, **kwargs): request.kind
            for request in requests
        }

        for future in as_completed(futures):
            kind = futures[future]
            try:
                results[kind] = future.result()
                log.debug(f"Ingested {kind.value} successfully")
            except Exception as e:
                log.error(f"Failed to ingest {kind.value}", error=str(e))
                raise

    return {kind: results[kind] for kind in kinds}


def build_requests(config: IngestConfig) -> list[LayerRequest]:
    """Layer requests for every enabled layer of a run configuration."""
    return [
        LayerRequest(
            kind=layer.kind,
            source=config.resolve_source(layer),
            layer=layer.layer,
            aoi=config.aoi,
        )
        for layer in config.enabled_layers
    ]


def read_vri(
    source: str | Path | None = None,
    layer: str = "VEG_R1_PLY_polygon",
    aoi: str | None = None,
    **kwargs: Any,
) -> "gpd.GeoDataFrame":
    """
    Read the vegetation resources inventory (VRI).

    Fetched from the catalogue when `source` is None. With an AOI the
    polygons are clipped to it.
    """
    return ingest(LayerKind.VRI, source, layer, aoi, **kwargs)


def read_bem(
    source: str | Path | None,
    layer: str = "BEM",
    aoi: str | None = None,
    **kwargs: Any,
) -> "gpd.GeoDataFrame":
    """Read broad ecosystem mapping (BEM). Only local datasets are supported."""
    return ingest(LayerKind.BEM, source, layer, aoi, **kwargs)


def read_wetlands(
    source: str | Path | None = None,
    layer: str = "FWA_WETLANDS_POLY",
    aoi: str | None = None,
    **kwargs: Any,
) -> "gpd.GeoDataFrame":
    """Read Freshwater Atlas wetland polygons."""
    return ingest(LayerKind.WETLANDS, source, layer, aoi, **kwargs)


def read_rivers(
    source: str | Path | None = None,
    layer: str = "FWA_RIVERS_POLY",
    aoi: str | None = None,
    **kwargs: Any,
) -> "gpd.GeoDataFrame":
    """Read Freshwater Atlas river polygons (geometry column GEOMETRY)."""
    return ingest(LayerKind.RIVERS, source, layer, aoi, **kwargs)


def read_ccb(
    source: str | Path | None = None,
    layer: str = "CNS_CUT_BL_polygon",
    aoi: str | None = None,
    **kwargs: Any,
) -> "gpd.GeoDataFrame":
    """Read consolidated cutblocks (CCB)."""
    return ingest(LayerKind.CCB, source, layer, aoi, **kwargs)
