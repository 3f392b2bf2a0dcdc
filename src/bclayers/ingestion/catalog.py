"""
BC Data Catalogue client.

Resolves catalogue record ids to DataBC WFS layers and fetches features
with an optional attribute projection and CQL filters. Queries are built
with a small immutable builder:

    catalogue.query(record_id).select(["HARVEST_YEAR"]).filter(intersects(aoi)).collect()
"""

import json
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

import requests
import shapely
from shapely.geometry.base import BaseGeometry

from bclayers.config.settings import CatalogConfig
from bclayers.utils.logging import get_logger

if TYPE_CHECKING:
    import geopandas as gpd

log = get_logger(__name__)

# Geometry attribute of every DataBC WFS layer
WFS_GEOMETRY_COLUMN = "GEOMETRY"

# Long CQL filters (detailed AOI polygons) exceed URL limits
MAX_GET_FILTER_LENGTH = 5000

# Unique key columns of DataBC layers, in order of preference
SORT_KEY_CANDIDATES = ("OBJECTID", "SEQUENCE_ID", "FEATURE_ID")
DEFAULT_SORT_KEY = "OBJECTID"


@dataclass(frozen=True)
class CatalogLayer:
    """WFS layer behind a catalogue record."""

    type_name: str
    sort_key: str = DEFAULT_SORT_KEY


def _detail_columns(details: Any) -> list[str]:
    """Column names from a catalogue `details` entry (JSON text or list)."""
    if isinstance(details, str):
        try:
            details = json.loads(details)
        except json.JSONDecodeError:
            return []
    if not isinstance(details, list):
        return []
    return [
        str(d["column_name"]) for d in details if isinstance(d, dict) and d.get("column_name")
    ]


def _sort_key(columns: list[str]) -> str:
    """Pick a unique key column for stable paging."""
    for candidate in SORT_KEY_CANDIDATES:
        if candidate in columns:
            return candidate
    return DEFAULT_SORT_KEY


@dataclass(frozen=True)
class Intersects:
    """Spatial predicate: feature geometry intersects `geometry`."""

    geometry: BaseGeometry

    def to_cql(self, geometry_column: str = WFS_GEOMETRY_COLUMN) -> str:
        """Render as an ECQL expression."""
        return f"INTERSECTS({geometry_column}, {shapely.to_wkt(self.geometry)})"


def intersects(geometry: BaseGeometry | str) -> Intersects:
    """
    Build an INTERSECTS predicate.

    Args:
        geometry: Shapely geometry or WKT, in the catalogue request CRS.

    Returns:
        Predicate usable with CatalogQuery.filter().
    """
    if isinstance(geometry, str):
        geometry = shapely.from_wkt(geometry)
    return Intersects(geometry)


@dataclass(frozen=True)
class CatalogQuery:
    """Immutable catalogue query. Every builder call returns a new query."""

    client: "CatalogClient"
    record_id: str
    columns: tuple[str, ...] | None = None
    filters: tuple[Intersects, ...] = ()

    def select(self, columns: list[str] | tuple[str, ...]) -> "CatalogQuery":
        """Restrict the returned attributes (geometry is always returned)."""
        return replace(self, columns=tuple(columns))

    def filter(self, predicate: Intersects) -> "CatalogQuery":
        """Add a predicate; multiple predicates are combined with AND."""
        return replace(self, filters=(*self.filters, predicate))

    def collect(self) -> "gpd.GeoDataFrame":
        """Execute the query and return all matching features."""
        return self.client.collect(self)


@runtime_checkable
class CatalogClient(Protocol):
    """Interface for a remote geospatial catalogue."""

    def query(self, record_id: str) -> CatalogQuery:
        """Start a query for a catalogue record."""
        ...

    def collect(self, query: CatalogQuery) -> "gpd.GeoDataFrame":
        """Materialize a query."""
        ...


class BCDataCatalogue:
    """BC Data Catalogue client backed by the DataBC WFS service."""

    def __init__(
        self,
        config: CatalogConfig | None = None,
        session: requests.Session | None = None,
    ) -> None:
        """
        Initialize the catalogue client.

        Args:
            config: Endpoint and paging configuration.
            session: Optional requests session. Module-level requests
                functions are used when omitted.
        """
        self.config = config or CatalogConfig()
        self._http: Any = session if session is not None else requests

    def query(self, record_id: str) -> CatalogQuery:
        """Start a query for a catalogue record id."""
        return CatalogQuery(client=self, record_id=record_id)

    def resolve_layer(self, record_id: str) -> CatalogLayer:
        """
        Resolve a catalogue record id to its WFS layer and paging key.

        Args:
            record_id: Catalogue record (package) id.

        Returns:
            CatalogLayer with the type name, e.g.
            "WHSE_BASEMAPPING.FWA_WETLANDS_POLY", and its sort key.

        Raises:
            requests.HTTPError: If the catalogue request fails.
            LookupError: If the record has no WFS-backed resource.
        """
        response = self._http.get(
            f"{self.config.catalogue_url}/package_show",
            params={"id": record_id},
            timeout=self.config.timeout,
        )
        response.raise_for_status()
        result = response.json().get("result") or {}

        for resource in result.get("resources", []):
            object_name = resource.get("object_name")
            if object_name:
                columns = _detail_columns(resource.get("details"))
                return CatalogLayer(str(object_name), _sort_key(columns))

        if result.get("object_name"):
            columns = _detail_columns(result.get("details"))
            return CatalogLayer(str(result["object_name"]), _sort_key(columns))

        msg = f"Catalogue record {record_id} has no WFS layer"
        raise LookupError(msg)

    def resolve_type_name(self, record_id: str) -> str:
        """Resolve a catalogue record id to its WFS type name."""
        return self.resolve_layer(record_id).type_name

    def build_params(
        self,
        type_name: str,
        query: CatalogQuery,
        sort_key: str | None = None,
    ) -> dict[str, Any]:
        """Build the WFS GetFeature parameters for a query (without paging)."""
        params: dict[str, Any] = {
            "service": "WFS",
            "version": "2.0.0",
            "request": "GetFeature",
            "typeNames": type_name,
            "outputFormat": "application/json",
            "SRSNAME": self.config.crs,
        }
        if sort_key is not None:
            params["sortBy"] = sort_key
        if query.columns is not None:
            columns = [c for c in query.columns if c != WFS_GEOMETRY_COLUMN]
            params["propertyName"] = ",".join([*columns, WFS_GEOMETRY_COLUMN])
        if query.filters:
            params["CQL_FILTER"] = " AND ".join(f.to_cql() for f in query.filters)
        return params

    def _get_page(self, params: dict[str, Any]) -> dict[str, Any]:
        """Request one page of features."""
        cql = params.get("CQL_FILTER", "")
        if len(cql) > MAX_GET_FILTER_LENGTH:
            response = self._http.post(
                self.config.wfs_url, data=params, timeout=self.config.timeout
            )
        else:
            response = self._http.get(
                self.config.wfs_url, params=params, timeout=self.config.timeout
            )
        response.raise_for_status()
        return response.json()

    def collect(self, query: CatalogQuery) -> "gpd.GeoDataFrame":
        """
        Fetch every feature matching a query.

        Pages through the WFS with startIndex/count until a short page,
        sorted by the layer's key column so pages neither overlap nor skip.

        Args:
            query: Query to execute.

        Returns:
            GeoDataFrame in the configured CRS with a `geometry` column.

        Raises:
            requests.HTTPError: If a request fails.
        """
        import geopandas as gpd

        layer = self.resolve_layer(query.record_id)
        params = self.build_params(layer.type_name, query, sort_key=layer.sort_key)
        page_size = self.config.page_size

        log.info(
            "Querying catalogue",
            record_id=query.record_id,
            type_name=layer.type_name,
            sort_key=layer.sort_key,
            columns=list(query.columns) if query.columns is not None else "all",
            n_filters=len(query.filters),
        )

        features: list[dict[str, Any]] = []
        start = 0
        while True:
            page = self._get_page({**params, "startIndex": start, "count": page_size})
            batch = page.get("features", [])
            features.extend(batch)
            if len(batch) < page_size:
                break
            start += len(batch)
            log.debug("Fetched page", record_id=query.record_id, rows_loaded=start)

        log.info("Catalogue query complete", record_id=query.record_id, rows=len(features))

        if not features:
            columns = [c for c in (query.columns or ()) if c != WFS_GEOMETRY_COLUMN]
            return gpd.GeoDataFrame(
                {c: [] for c in columns},
                geometry=gpd.GeoSeries([], crs=self.config.crs),
            )

        return gpd.GeoDataFrame.from_features(features, crs=self.config.crs)
