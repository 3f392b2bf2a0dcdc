"""
Per-layer-kind configuration.

Static, read-only description of every supported layer: where it comes
from, what it is called, and what shape its output must have. The
ingestor reads this table instead of branching on the layer kind.
"""

from dataclasses import dataclass
from enum import Enum


class LayerKind(str, Enum):
    """Supported vector layers."""

    VRI = "vri"  # Vegetation Resources Inventory
    BEM = "bem"  # Broad Ecosystem Mapping
    WETLANDS = "wetlands"  # Freshwater Atlas wetlands
    RIVERS = "rivers"  # Freshwater Atlas river polygons
    CCB = "ccb"  # Consolidated cutblocks

    @classmethod
    def from_string(cls, value: str) -> "LayerKind":
        """Create LayerKind from a name or value, ignoring case."""
        for kind in cls:
            if value.lower() in (kind.value, kind.name.lower()):
                return kind
        msg = f"Unknown layer kind: {value}. Valid: {[k.value for k in cls]}"
        raise ValueError(msg)


# VRI source field -> short field name used by downstream consumers
VRI_COLUMN_MAPPING: tuple[tuple[str, str], ...] = (
    ("BCLCS_LEVEL_1", "BCLCS_LV_1"),
    ("BCLCS_LEVEL_2", "BCLCS_LV_2"),
    ("BCLCS_LEVEL_3", "BCLCS_LV_3"),
    ("BCLCS_LEVEL_4", "BCLCS_LV_4"),
    ("BCLCS_LEVEL_5", "BCLCS_LV_5"),
    ("SPECIES_CD_1", "SPEC_CD_1"),
    ("SPECIES_CD_2", "SPEC_CD_2"),
    ("SPECIES_CD_3", "SPEC_CD_3"),
    ("SPECIES_CD_4", "SPEC_CD_4"),
    ("SPECIES_CD_5", "SPEC_CD_5"),
    ("SPECIES_CD_6", "SPEC_CD_6"),
    ("SPECIES_PCT_1", "SPEC_PCT_1"),
    ("SPECIES_PCT_2", "SPEC_PCT_2"),
    ("SPECIES_PCT_3", "SPEC_PCT_3"),
    ("SPECIES_PCT_4", "SPEC_PCT_4"),
    ("SPECIES_PCT_5", "SPEC_PCT_5"),
    ("SPECIES_PCT_6", "SPEC_PCT_6"),
    ("CROWN_CLOSURE", "CR_CLOSURE"),
    ("LAND_COVER_CLASS_CD_1", "LAND_CD_1"),
    ("EST_COVERAGE_PCT_1", "COV_PCT_1"),
    ("LINE_5_VEGETATION_COVER", "LBL_VEGCOV"),
    ("HARVEST_DATE", "HRVSTDT"),
)

# Fields requested from the catalogue for VRI (renamed fields + projected age)
VRI_REMOTE_COLUMNS: tuple[str, ...] = (
    *(old for old, _ in VRI_COLUMN_MAPPING),
    "PROJ_AGE_1",
)


@dataclass(frozen=True)
class LayerSpec:
    """Static description of one layer kind."""

    kind: LayerKind
    default_layer: str
    geometry_column: str
    description: str
    record_id: str | None = None
    remote_columns: tuple[str, ...] = ()
    force_multipolygon: bool = False
    clip_to_aoi: bool = False
    column_mapping: tuple[tuple[str, str], ...] = ()

    @property
    def supports_remote(self) -> bool:
        """Whether the layer can be fetched from the BC Data Catalogue."""
        return self.record_id is not None


LAYER_SPECS: dict[LayerKind, LayerSpec] = {
    LayerKind.VRI: LayerSpec(
        kind=LayerKind.VRI,
        default_layer="VEG_R1_PLY_polygon",
        geometry_column="Shape",
        description="Vegetation Resources Inventory (rank 1 polygons)",
        record_id="2ebb35d8-c82f-4a17-9c96-612ac3532d55",
        remote_columns=VRI_REMOTE_COLUMNS,
        force_multipolygon=True,
        clip_to_aoi=True,
        column_mapping=VRI_COLUMN_MAPPING,
    ),
    LayerKind.BEM: LayerSpec(
        kind=LayerKind.BEM,
        default_layer="BEM",
        geometry_column="Shape",
        description="Broad Ecosystem Mapping (local datasets only)",
    ),
    LayerKind.WETLANDS: LayerSpec(
        kind=LayerKind.WETLANDS,
        default_layer="FWA_WETLANDS_POLY",
        geometry_column="Shape",
        description="Freshwater Atlas wetland polygons",
        record_id="93b413d8-1840-4770-9629-641d74bd1cc6",
    ),
    LayerKind.RIVERS: LayerSpec(
        kind=LayerKind.RIVERS,
        default_layer="FWA_RIVERS_POLY",
        geometry_column="GEOMETRY",
        description="Freshwater Atlas river polygons",
        record_id="f7dac054-efbf-402f-ab62-6fc4b32a619e",
    ),
    LayerKind.CCB: LayerSpec(
        kind=LayerKind.CCB,
        default_layer="CNS_CUT_BL_polygon",
        geometry_column="Shape",
        description="Consolidated cutblocks",
        record_id="b1b647a6-f271-42e0-9cd0-89ec24bce9f7",
        remote_columns=("HARVEST_YEAR",),
        force_multipolygon=True,
    ),
}


def get_layer_spec(kind: LayerKind | str) -> LayerSpec:
    """
    Look up the static configuration of a layer kind.

    Args:
        kind: Layer kind or its name/value.

    Returns:
        The layer's LayerSpec.
    """
    if not isinstance(kind, LayerKind):
        kind = LayerKind.from_string(kind)
    return LAYER_SPECS[kind]
