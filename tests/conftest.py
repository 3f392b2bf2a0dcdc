"""Pytest configuration and shared fixtures."""

from pathlib import Path

import geopandas as gpd
import pytest
from helpers import CRS, bowtie
from shapely.geometry import MultiPolygon, box
from shapely.geometry.base import BaseGeometry


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def raw_vri() -> gpd.GeoDataFrame:
    """
    Ten VRI polygons in a row along the x axis, as delivered by the source.

    Feature 3 is a self-intersecting bow-tie. The extent is x 0..98, y 0..8.
    """
    geoms: list[BaseGeometry] = []
    for i in range(10):
        x0 = i * 10.0
        geoms.append(bowtie(x0) if i == 3 else box(x0, 0.0, x0 + 8.0, 8.0))

    return gpd.GeoDataFrame(
        {
            "FEATURE_ID": list(range(10)),
            "BCLCS_LEVEL_1": ["V"] * 10,
            "BCLCS_LEVEL_2": ["T"] * 10,
            "SPECIES_CD_1": ["FDI", "PL", "SX", "AT", "FDI", "PL", "SX", "AT", "FDI", "PL"],
            "SPECIES_PCT_1": [80.0, 70.0, 60.0, 100.0, 50.0, 90.0, 40.0, 30.0, 20.0, 10.0],
            "CROWN_CLOSURE": [40, 50, 60, 70, 20, 30, 45, 55, 65, 35],
            "HARVEST_DATE": ["2001-06-15"] * 10,
            "PROJ_AGE_1": [120, 80, 60, 40, 150, 90, 30, 20, 10, 5],
        },
        geometry=geoms,
        crs=CRS,
    )


@pytest.fixture
def raw_polygons() -> gpd.GeoDataFrame:
    """Generic polygon layer: a polygon, a multipolygon and a bow-tie."""
    return gpd.GeoDataFrame(
        {
            "HARVEST_YEAR": [1995, 2004, 2018],
        },
        geometry=[
            box(0.0, 0.0, 10.0, 10.0),
            MultiPolygon([box(20.0, 0.0, 25.0, 5.0), box(30.0, 0.0, 35.0, 5.0)]),
            bowtie(40.0),
        ],
        crs=CRS,
    )


@pytest.fixture
def valid_polygons(raw_polygons: gpd.GeoDataFrame) -> gpd.GeoDataFrame:
    """raw_polygons without the invalid feature."""
    return raw_polygons.iloc[:2].copy()


@pytest.fixture
def western_half() -> str:
    """AOI covering the western half of the raw_vri extent."""
    return box(-1.0, -1.0, 49.0, 9.0).wkt


@pytest.fixture
def vri_gpkg(tmp_path: Path, raw_vri: gpd.GeoDataFrame) -> Path:
    """raw_vri written to a GeoPackage under its default layer name."""
    path = tmp_path / "vri.gpkg"
    raw_vri.to_file(path, layer="VEG_R1_PLY_polygon", driver="GPKG", engine="pyogrio")
    return path
