"""
Writing normalized layers to disk.
"""

from pathlib import Path
from typing import TYPE_CHECKING, Any

from bclayers.utils.logging import get_logger

if TYPE_CHECKING:
    import geopandas as gpd

log = get_logger(__name__)

# Drivers that store several named layers in one file
MULTI_LAYER_DRIVERS = {"GPKG"}


def write_layer(
    gdf: "gpd.GeoDataFrame",
    path: Path,
    *,
    driver: str = "GPKG",
    layer: str | None = None,
) -> Path:
    """
    Write a normalized layer with pyogrio.

    For GeoPackages the geometry column keeps its canonical name
    ("Shape"/"GEOMETRY") instead of the driver default.

    Args:
        gdf: Layer to write.
        path: Output file; parent directories are created.
        driver: OGR driver name.
        layer: Layer name inside multi-layer containers.

    Returns:
        The written path.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    kwargs: dict[str, Any] = {}
    if driver in MULTI_LAYER_DRIVERS:
        if layer is not None:
            kwargs["layer"] = layer
        kwargs["layer_options"] = {"GEOMETRY_NAME": gdf.geometry.name}

    gdf.to_file(path, driver=driver, engine="pyogrio", **kwargs)
    log.info("Wrote layer", path=str(path), rows=len(gdf), driver=driver, layer=layer)
    return path
