"""
Local vector dataset reader.

Reads a named layer from any OGR-readable dataset (file geodatabase,
GeoPackage, shapefile folder, ...) through pyogrio.
"""

from pathlib import Path
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from shapely.geometry.base import BaseGeometry

from bclayers.utils.logging import get_logger

if TYPE_CHECKING:
    import geopandas as gpd

log = get_logger(__name__)


@runtime_checkable
class LocalReader(Protocol):
    """Interface for reading a layer from a local dataset."""

    def read(
        self,
        source: str | Path,
        layer: str,
        mask: BaseGeometry | None = None,
    ) -> "gpd.GeoDataFrame":
        """Read `layer` from `source`, optionally pre-filtered by `mask`."""
        ...


class PyogrioReader:
    """Reads layers with geopandas using the pyogrio engine."""

    def read(
        self,
        source: str | Path,
        layer: str,
        mask: BaseGeometry | None = None,
    ) -> "gpd.GeoDataFrame":
        """
        Read a layer.

        The mask is handed to OGR as a spatial filter; depending on the
        driver it may only compare bounding boxes, so features outside
        the exact mask can be returned.

        Args:
            source: Dataset locator.
            layer: Layer name inside the dataset.
            mask: Optional geometry in the dataset's CRS.

        Returns:
            Raw GeoDataFrame.

        Raises:
            FileNotFoundError: If a filesystem source does not exist.
        """
        import geopandas as gpd

        locator = str(source)
        is_virtual = "://" in locator or locator.startswith("/vsi")
        if not is_virtual and not Path(locator).exists():
            msg = f"Dataset not found: {locator}"
            raise FileNotFoundError(msg)

        log.info("Reading local layer", source=str(source), layer=layer, masked=mask is not None)
        return gpd.read_file(source, layer=layer, mask=mask, engine="pyogrio")
