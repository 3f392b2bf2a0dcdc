"""Tests for configuration system."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from bclayers.config import (
    CatalogConfig,
    IngestConfig,
    LayerSourceConfig,
    LoggingConfig,
    OutputConfig,
    load_config,
)
from bclayers.config.settings import driver_for_path
from bclayers.schemas.layers import LayerKind

AOI = "POLYGON ((0 0, 10 0, 10 10, 0 10, 0 0))"


def _write(path: Path, content: str) -> Path:
    path.write_text(content, encoding="utf-8")
    return path


class TestLayerSourceConfig:
    """Tests for single layer entries."""

    def test_kind_parsed_from_string(self) -> None:
        """Test that kinds are accepted by name, ignoring case."""
        config = LayerSourceConfig(kind="Wetlands")
        assert config.kind is LayerKind.WETLANDS
        assert config.source is None
        assert config.enabled

    def test_unknown_kind(self) -> None:
        """Test that unknown kinds are rejected."""
        with pytest.raises(ValidationError, match="Unknown layer kind"):
            LayerSourceConfig(kind="roads")


class TestOutputConfig:
    """Tests for OutputConfig."""

    def test_extension_follows_driver(self) -> None:
        """Test extension derivation."""
        assert OutputConfig().extension == ".gpkg"
        assert OutputConfig(driver="FlatGeobuf").extension == ".fgb"

    def test_unsupported_driver(self) -> None:
        """Test that unknown drivers raise error."""
        with pytest.raises(ValidationError, match="Unsupported output driver"):
            OutputConfig(driver="DXF")

    @pytest.mark.parametrize(
        ("name", "driver"),
        [
            ("vri.gpkg", "GPKG"),
            ("vri.FGB", "FlatGeobuf"),
            ("vri.shp", "ESRI Shapefile"),
            ("vri.geojson", "GeoJSON"),
        ],
    )
    def test_driver_for_path(self, name: str, driver: str) -> None:
        """Test driver inference from output file extensions."""
        assert driver_for_path(Path(name)) == driver

    def test_driver_for_unknown_extension(self) -> None:
        """Test that unknown extensions raise error."""
        with pytest.raises(ValueError, match="Cannot infer output format"):
            driver_for_path(Path("vri.dxf"))


class TestLoggingConfig:
    """Tests for LoggingConfig."""

    def test_level_normalized(self) -> None:
        """Test that level names are upper-cased."""
        assert LoggingConfig(level="debug").level == "DEBUG"

    def test_invalid_level(self) -> None:
        """Test that unknown levels raise error."""
        with pytest.raises(ValidationError, match="Invalid log level"):
            LoggingConfig(level="chatty")


class TestCatalogConfig:
    """Tests for CatalogConfig."""

    def test_defaults(self) -> None:
        """Test default endpoints and request CRS."""
        config = CatalogConfig()
        assert config.crs == "EPSG:3005"
        assert config.page_size == 10000
        assert config.wfs_url.endswith("/wfs")

    def test_page_size_bounds(self) -> None:
        """Test that page size is limited by the service maximum."""
        with pytest.raises(ValidationError):
            CatalogConfig(page_size=20000)
        with pytest.raises(ValidationError):
            CatalogConfig(page_size=0)


class TestIngestConfig:
    """Tests for IngestConfig."""

    def test_valid_aoi(self) -> None:
        """Test that a WKT AOI is accepted."""
        config = IngestConfig(project="p", aoi=f"  {AOI}  ")
        assert config.aoi == AOI

    def test_blank_aoi_becomes_none(self) -> None:
        """Test that an empty string means no AOI."""
        assert IngestConfig(project="p", aoi="").aoi is None

    def test_invalid_aoi(self) -> None:
        """Test that unparseable WKT raises error."""
        with pytest.raises(ValidationError, match="not valid WKT"):
            IngestConfig(project="p", aoi="POLYGON ((0 0, 1")

    def test_empty_aoi_geometry(self) -> None:
        """Test that an empty geometry raises error."""
        with pytest.raises(ValidationError, match="non-empty"):
            IngestConfig(project="p", aoi="POLYGON EMPTY")

    def test_duplicate_layers(self) -> None:
        """Test that a kind may only be configured once."""
        with pytest.raises(ValidationError, match="more than once"):
            IngestConfig(
                project="p",
                layers=[LayerSourceConfig(kind="vri"), LayerSourceConfig(kind="VRI")],
            )

    def test_enabled_layers(self) -> None:
        """Test filtering of disabled layers."""
        config = IngestConfig(
            project="p",
            layers=[
                LayerSourceConfig(kind="vri"),
                LayerSourceConfig(kind="ccb", enabled=False),
            ],
        )
        assert [layer.kind for layer in config.enabled_layers] == [LayerKind.VRI]

    def test_resolve_source(self) -> None:
        """Test source resolution against data_root."""
        config = IngestConfig(project="p", data_root=Path("/data/bc"))

        relative = LayerSourceConfig(kind="vri", source="vri/VEG.gdb")
        absolute = LayerSourceConfig(kind="bem", source="/mnt/bem.gdb")
        remote = LayerSourceConfig(kind="ccb", source="https://example.org/ccb.fgb")
        virtual = LayerSourceConfig(kind="rivers", source="/vsizip/fwa.zip")
        catalogue = LayerSourceConfig(kind="wetlands")

        assert config.resolve_source(relative) == str(Path("/data/bc/vri/VEG.gdb"))
        assert config.resolve_source(absolute) == str(Path("/mnt/bem.gdb"))
        assert config.resolve_source(remote) == "https://example.org/ccb.fgb"
        assert config.resolve_source(virtual) == "/vsizip/fwa.zip"
        assert config.resolve_source(catalogue) is None

    def test_output_paths_derived_from_project(self) -> None:
        """Test that output files are placed under the project directory."""
        config = IngestConfig(
            project="kamloops",
            output=OutputConfig(output_root=Path("./out"), driver="FlatGeobuf"),
        )
        assert config.project_dir == Path("./out/kamloops")
        assert config.output_path(LayerKind.RIVERS) == Path("./out/kamloops/rivers.fgb")


class TestLoadConfig:
    """Tests for config loading."""

    def test_load_minimal_config(self, tmp_path: Path) -> None:
        """Test loading a config with only a project and layer names."""
        config_content = """
project: minimal
layers:
  - vri
  - wetlands
"""
        config = load_config(_write(tmp_path / "minimal.yaml", config_content))

        assert config.project == "minimal"
        assert [layer.kind for layer in config.layers] == [
            LayerKind.VRI,
            LayerKind.WETLANDS,
        ]
        assert all(layer.source is None for layer in config.layers)
        assert config.aoi is None
        assert config.output.driver == "GPKG"
        assert config.logging.level == "INFO"

    def test_load_full_config(self, tmp_path: Path) -> None:
        """Test loading every section."""
        config_content = f"""
project: full
aoi: "{AOI}"
max_workers: 2
data:
  root: /data/bc
catalog:
  page_size: 500
  timeout: 30
output:
  root: ./results
  driver: FlatGeobuf
logging:
  level: debug
  json: true
layers:
  - kind: vri
    source: VEG_COMP_LYR_R1_POLY.gdb
  - kind: bem
    source: BEM.gdb
    layer: BEM_PROJECTS
  - kind: ccb
    enabled: false
"""
        config = load_config(_write(tmp_path / "full.yaml", config_content))

        assert config.aoi == AOI
        assert config.max_workers == 2
        assert config.data_root == Path("/data/bc")
        assert config.catalog.page_size == 500
        assert config.catalog.timeout == 30
        assert config.output.output_root == Path("./results")
        assert config.logging.level == "DEBUG"
        assert config.logging.json_output
        assert config.layers[1].layer == "BEM_PROJECTS"
        assert [layer.kind for layer in config.enabled_layers] == [
            LayerKind.VRI,
            LayerKind.BEM,
        ]

    def test_layers_as_mapping(self, tmp_path: Path) -> None:
        """Test the mapping form of the layers section."""
        config_content = """
project: mapping
layers:
  vri:
    source: vri.gpkg
  rivers:
"""
        config = load_config(_write(tmp_path / "mapping.yaml", config_content))

        assert config.layers[0].kind is LayerKind.VRI
        assert config.layers[0].source == "vri.gpkg"
        assert config.layers[1].kind is LayerKind.RIVERS
        assert config.layers[1].source is None

    def test_env_var_interpolation(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test environment variable interpolation with defaults."""
        monkeypatch.setenv("BC_DATA_ROOT", "/srv/bcgw")
        monkeypatch.delenv("BC_OUTPUT_ROOT", raising=False)
        config_content = """
project: env
data:
  root: ${BC_DATA_ROOT}
output:
  root: ${BC_OUTPUT_ROOT:./fallback}
"""
        config = load_config(_write(tmp_path / "env.yaml", config_content))

        assert config.data_root == Path("/srv/bcgw")
        assert config.output.output_root == Path("./fallback")

    def test_base_config_inherited(self, tmp_path: Path) -> None:
        """Test that a sibling base.yaml is merged underneath."""
        _write(
            tmp_path / "base.yaml",
            """
project: base
catalog:
  page_size: 1000
  timeout: 60
logging:
  level: WARNING
""",
        )
        config_content = """
project: derived
catalog:
  page_size: 250
layers: [ccb]
"""
        config = load_config(_write(tmp_path / "derived.yaml", config_content))

        assert config.project == "derived"
        assert config.catalog.page_size == 250
        assert config.catalog.timeout == 60
        assert config.logging.level == "WARNING"

    def test_missing_project(self, tmp_path: Path) -> None:
        """Test that a config without a project raises error."""
        path = _write(tmp_path / "noproject.yaml", "layers: [vri]\n")
        with pytest.raises(ValueError, match="project"):
            load_config(path)

    def test_invalid_layers_section(self, tmp_path: Path) -> None:
        """Test that a scalar layers section raises error."""
        path = _write(tmp_path / "scalar.yaml", "project: p\nlayers: vri\n")
        with pytest.raises(ValueError, match="list or mapping"):
            load_config(path)

    def test_duplicate_layers(self, tmp_path: Path) -> None:
        """Test that duplicate kinds are rejected on load."""
        path = _write(tmp_path / "dupes.yaml", "project: p\nlayers: [vri, VRI]\n")
        with pytest.raises(ValueError, match="more than once"):
            load_config(path)
