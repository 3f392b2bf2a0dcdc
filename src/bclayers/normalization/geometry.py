"""
Geometry normalization for ingested layers.

Renames the geometry column, repairs invalid geometries, coerces
polygonal layers to MultiPolygon and clips layers to an area of interest.
Layers are repaired before any overlay operation.
"""

from typing import TYPE_CHECKING

import shapely
from shapely.errors import GEOSException
from shapely.geometry import MultiPolygon, Polygon
from shapely.geometry.base import BaseGeometry

from bclayers.errors import GeometryError
from bclayers.utils.logging import get_logger

if TYPE_CHECKING:
    import geopandas as gpd

log = get_logger(__name__)


def parse_aoi(wkt: str) -> BaseGeometry:
    """
    Parse an area of interest given as well-known text.

    Args:
        wkt: WKT geometry.

    Returns:
        Shapely geometry.

    Raises:
        GeometryError: If the text is not valid WKT or the geometry is empty.
    """
    try:
        aoi = shapely.from_wkt(wkt)
    except (GEOSException, TypeError) as e:
        msg = f"Could not parse area of interest WKT: {wkt[:80]!r}"
        raise GeometryError(msg) from e

    if aoi is None or aoi.is_empty:
        msg = "Area of interest is empty"
        raise GeometryError(msg)

    if not aoi.is_valid:
        log.warning("Area of interest is invalid, repairing", wkt=wkt[:80])
        aoi = shapely.make_valid(aoi)

    return aoi


def rename_geometry(gdf: "gpd.GeoDataFrame", name: str) -> "gpd.GeoDataFrame":
    """
    Rename the active geometry column.

    Args:
        gdf: Layer to rename.
        name: Canonical geometry column name.

    Returns:
        GeoDataFrame whose active geometry column is `name`.

    Raises:
        GeometryError: If the layer has no geometry column or an attribute
            already uses the target name.
    """
    try:
        current = gdf.geometry.name
    except AttributeError as e:
        msg = "Layer has no active geometry column"
        raise GeometryError(msg) from e

    if current == name:
        return gdf

    if name in gdf.columns:
        msg = f"Cannot rename geometry column {current!r}: {name!r} already exists"
        raise GeometryError(msg)

    log.debug("Renaming geometry column", old=current, new=name)
    return gdf.rename_geometry(name)


def repair_geometries(gdf: "gpd.GeoDataFrame") -> "gpd.GeoDataFrame":
    """
    Make every geometry in the active geometry column valid.

    Args:
        gdf: Layer to repair.

    Returns:
        Copy of the layer with repaired geometries. Missing geometries stay missing.

    Raises:
        GeometryError: If GEOS fails to repair a geometry.
    """
    result = gdf.copy()
    column = result.geometry.name
    n_invalid = int((~result.geometry.is_valid & result.geometry.notna()).sum())

    try:
        result[column] = result.geometry.make_valid()
    except GEOSException as e:
        msg = f"Geometry repair failed: {e}"
        raise GeometryError(msg) from e

    if n_invalid:
        log.info("Repaired invalid geometries", repaired=n_invalid, total=len(result))

    return result


def _polygonal_parts(geom: BaseGeometry) -> list[Polygon]:
    """Non-empty polygons of a geometry, flattening multi-part and collections."""
    if isinstance(geom, Polygon):
        return [] if geom.is_empty else [geom]
    if isinstance(geom, MultiPolygon):
        return [p for p in geom.geoms if not p.is_empty]
    if hasattr(geom, "geoms"):
        return [p for part in geom.geoms for p in _polygonal_parts(part)]
    return []


def to_multipolygon(geom: BaseGeometry | None) -> MultiPolygon | None:
    """
    Coerce a single geometry to MultiPolygon.

    Polygons are wrapped, collections keep only their polygonal parts,
    and geometries without any area become an empty MultiPolygon.

    Args:
        geom: Geometry to coerce.

    Returns:
        MultiPolygon, or None for a missing geometry.
    """
    if geom is None:
        return None
    if isinstance(geom, MultiPolygon):
        return geom
    return MultiPolygon(_polygonal_parts(geom))


def cast_to_multipolygon(gdf: "gpd.GeoDataFrame") -> "gpd.GeoDataFrame":
    """
    Coerce the active geometry column to MultiPolygon.

    Args:
        gdf: Layer to coerce.

    Returns:
        Copy of the layer with MultiPolygon geometries.

    Raises:
        GeometryError: If a geometry cannot be coerced.
    """
    import geopandas as gpd

    result = gdf.copy()
    column = result.geometry.name

    try:
        cast = [to_multipolygon(geom) for geom in result.geometry]
    except (GEOSException, ValueError) as e:
        msg = f"MultiPolygon coercion failed: {e}"
        raise GeometryError(msg) from e

    result[column] = gpd.GeoSeries(cast, index=result.index, crs=result.crs)
    return result


def clip_to_aoi(gdf: "gpd.GeoDataFrame", aoi: BaseGeometry) -> "gpd.GeoDataFrame":
    """
    Intersect every geometry with the area of interest.

    Features that do not intersect the AOI are dropped, the others are
    replaced by their intersection with it. A feature that only touches
    the AOI keeps an empty (or lower-dimensional) geometry, which the
    caller may coerce further.

    Args:
        gdf: Layer with valid geometries.
        aoi: Area of interest in the layer's CRS.

    Returns:
        Clipped copy of the layer.

    Raises:
        GeometryError: If GEOS fails to compute an intersection.
    """
    try:
        mask = gdf.geometry.intersects(aoi)
        result = gdf[mask].copy()
        result[result.geometry.name] = result.geometry.intersection(aoi)
    except GEOSException as e:
        msg = f"Clipping to area of interest failed: {e}"
        raise GeometryError(msg) from e

    log.info(
        "Clipped to area of interest",
        kept=len(result),
        dropped=int(len(gdf) - len(result)),
    )
    return result
