"""
Typed configuration models using Pydantic.

Describes which layers to ingest, where their data lives, the area of
interest, and how to reach the BC Data Catalogue.
"""

from pathlib import Path
from typing import Any

import shapely
from pydantic import BaseModel, ConfigDict, Field, field_validator
from shapely.errors import GEOSException

from bclayers.schemas.layers import LayerKind

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

# OGR driver -> file extension for written layers
DRIVER_EXTENSIONS: dict[str, str] = {
    "GPKG": ".gpkg",
    "FlatGeobuf": ".fgb",
    "ESRI Shapefile": ".shp",
    "GeoJSON": ".geojson",
}


def driver_for_path(path: Path) -> str:
    """
    Pick the OGR driver for an output file from its extension.

    Raises:
        ValueError: If the extension is not one of DRIVER_EXTENSIONS.
    """
    suffix = path.suffix.lower()
    for driver, extension in DRIVER_EXTENSIONS.items():
        if suffix == extension:
            return driver
    msg = (
        f"Cannot infer output format from {path.name!r}. "
        f"Valid extensions: {sorted(DRIVER_EXTENSIONS.values())}"
    )
    raise ValueError(msg)


class CatalogConfig(BaseModel):
    """BC Data Catalogue endpoints and request settings."""

    model_config = ConfigDict(frozen=True)

    catalogue_url: str = Field(
        default="https://catalogue.data.gov.bc.ca/api/3/action",
        description="CKAN action API used to resolve record ids",
    )
    wfs_url: str = Field(
        default="https://openmaps.gov.bc.ca/geo/pub/wfs",
        description="DataBC WFS endpoint",
    )
    crs: str = Field(default="EPSG:3005", description="CRS of requested features")
    page_size: int = Field(
        default=10000, ge=1, le=10000, description="Features per WFS request"
    )
    timeout: float = Field(default=120.0, gt=0, description="HTTP timeout in seconds")


class LayerSourceConfig(BaseModel):
    """One layer to ingest.

    A missing `source` means the layer is fetched from the catalogue.
    """

    model_config = ConfigDict(frozen=True)

    kind: LayerKind
    source: str | None = Field(
        default=None, description="Dataset locator (file, folder or GDAL path)"
    )
    layer: str | None = Field(
        default=None, description="Layer name inside the dataset (defaults per kind)"
    )
    enabled: bool = Field(default=True)

    @field_validator("kind", mode="before")
    @classmethod
    def parse_kind(cls, v: Any) -> LayerKind:
        """Accept layer kinds by name or value, ignoring case."""
        if isinstance(v, LayerKind):
            return v
        return LayerKind.from_string(str(v))


class OutputConfig(BaseModel):
    """Where normalized layers are written.

    Structure: {output_root}/{project}/{kind}{extension}
    """

    model_config = ConfigDict(frozen=True)

    output_root: Path = Field(default=Path("./output"))
    driver: str = Field(default="GPKG", description="OGR driver for written layers")

    @field_validator("driver")
    @classmethod
    def validate_driver(cls, v: str) -> str:
        """Ensure the driver is one we know an extension for."""
        if v not in DRIVER_EXTENSIONS:
            msg = f"Unsupported output driver: {v!r}. Valid: {list(DRIVER_EXTENSIONS)}"
            raise ValueError(msg)
        return v

    @property
    def extension(self) -> str:
        """File extension matching the driver."""
        return DRIVER_EXTENSIONS[self.driver]


class LoggingConfig(BaseModel):
    """Logging configuration."""

    model_config = ConfigDict(frozen=True)

    level: str = Field(default="INFO")
    json_output: bool = Field(default=False)

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Normalize and check the log level name."""
        level = v.upper()
        if level not in LOG_LEVELS:
            msg = f"Invalid log level: {v!r}. Valid: {list(LOG_LEVELS)}"
            raise ValueError(msg)
        return level


class IngestConfig(BaseModel):
    """Complete ingestion run configuration."""

    model_config = ConfigDict(frozen=True)

    project: str = Field(description="Project identifier (e.g., 'kamloops-2024')")
    aoi: str | None = Field(default=None, description="Area of interest as WKT")
    data_root: Path = Field(
        default=Path("./data"), description="Root for relative layer sources"
    )
    layers: list[LayerSourceConfig] = Field(default_factory=list)
    catalog: CatalogConfig = Field(default_factory=CatalogConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    max_workers: int | None = Field(
        default=None, ge=1, description="Concurrent layer ingestions (None = one per layer)"
    )

    @field_validator("aoi")
    @classmethod
    def validate_aoi(cls, v: str | None) -> str | None:
        """Ensure the area of interest is parseable WKT."""
        if v is None or not v.strip():
            return None
        try:
            geom = shapely.from_wkt(v)
        except (GEOSException, TypeError) as e:
            msg = f"aoi is not valid WKT: {e}"
            raise ValueError(msg) from e
        if geom is None or geom.is_empty:
            msg = "aoi must be a non-empty geometry"
            raise ValueError(msg)
        return v.strip()

    @field_validator("layers")
    @classmethod
    def validate_unique_layers(
        cls, v: list[LayerSourceConfig]
    ) -> list[LayerSourceConfig]:
        """Each layer kind may be configured once."""
        kinds = [layer.kind for layer in v]
        duplicates = sorted({k.value for k in kinds if kinds.count(k) > 1})
        if duplicates:
            msg = f"Layer kinds configured more than once: {duplicates}"
            raise ValueError(msg)
        return v

    @property
    def enabled_layers(self) -> list[LayerSourceConfig]:
        """Layers to ingest in this run."""
        return [layer for layer in self.layers if layer.enabled]

    def resolve_source(self, layer: LayerSourceConfig) -> str | None:
        """
        Resolve a layer source against data_root.

        Absolute paths, URLs and GDAL virtual paths are returned as-is.
        """
        if layer.source is None:
            return None
        if "://" in layer.source or layer.source.startswith("/vsi"):
            return layer.source
        path = Path(layer.source)
        if path.is_absolute():
            return str(path)
        return str(self.data_root / path)

    @property
    def project_dir(self) -> Path:
        """Output directory for this project."""
        return self.output.output_root / self.project

    def output_path(self, kind: LayerKind) -> Path:
        """Output file for a normalized layer."""
        return self.project_dir / f"{kind.value}{self.output.extension}"
