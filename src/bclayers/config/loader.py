"""
Configuration loading utilities.

Supports environment variable interpolation and config inheritance.
Minimal configs only need: project, and a list of layers.
"""

import os
import re
from pathlib import Path
from typing import Any

import yaml

from bclayers.config.settings import (
    CatalogConfig,
    IngestConfig,
    LayerSourceConfig,
    LoggingConfig,
    OutputConfig,
)


def _interpolate_env_vars(value: str) -> str:
    """
    Interpolate environment variables in string values.

    Supports ${VAR} and ${VAR:default} syntax.
    """
    pattern = r"\$\{([^}:]+)(?::([^}]*))?\}"

    def replacer(match: re.Match[str]) -> str:
        var_name = match.group(1)
        default = match.group(2)
        return os.environ.get(var_name, default if default is not None else "")

    return re.sub(pattern, replacer, value)


def _process_config_values(obj: Any) -> Any:
    """Recursively process config values for env var interpolation."""
    if isinstance(obj, str):
        return _interpolate_env_vars(obj)
    if isinstance(obj, dict):
        return {k: _process_config_values(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_process_config_values(item) for item in obj]
    return obj


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries, with override taking precedence."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _parse_layers(raw: Any) -> list[LayerSourceConfig]:
    """
    Parse the `layers` section.

    Accepts either a list of mappings with a `kind` key, or a mapping
    keyed by kind (`{vri: {source: ...}, wetlands: null}`).
    """
    if raw is None:
        return []

    if isinstance(raw, dict):
        entries = [
            {"kind": kind, **(options or {})} for kind, options in raw.items()
        ]
    elif isinstance(raw, list):
        entries = [
            {"kind": item} if isinstance(item, str) else item for item in raw
        ]
    else:
        msg = f"'layers' must be a list or mapping, got {type(raw).__name__}"
        raise ValueError(msg)

    return [LayerSourceConfig(**entry) for entry in entries]


def load_yaml(path: Path) -> dict[str, Any]:
    """Load a YAML file and process environment variables."""
    with path.open(encoding="utf-8") as f:
        data = yaml.safe_load(f)
    return _process_config_values(data) if data else {}


def load_config(
    config_path: Path,
    base_path: Path | None = None,
) -> IngestConfig:
    """
    Load ingestion configuration from YAML file(s).

    Minimal config requires only:
        - project: str
        - layers: list of layer kinds (remote) or {kind, source, layer} mappings

    Args:
        config_path: Path to the main configuration file.
        base_path: Optional path to base configuration for inheritance.

    Returns:
        Fully validated IngestConfig instance.
    """
    if base_path is not None:
        base_data = load_yaml(base_path)
    else:
        # Try to find base.yaml in same directory
        potential_base = config_path.parent / "base.yaml"
        has_base = potential_base.exists() and potential_base != config_path
        base_data = load_yaml(potential_base) if has_base else {}

    main_data = load_yaml(config_path)
    merged = _deep_merge(base_data, main_data)

    project = merged.get("project")
    if not project:
        msg = "Config must specify 'project' name"
        raise ValueError(msg)

    data_data = merged.get("data", {})
    catalog_data = merged.get("catalog", {})
    output_data = merged.get("output", {})
    logging_data = merged.get("logging", {})

    catalog = CatalogConfig(**catalog_data)

    output = OutputConfig(
        output_root=Path(output_data.get("root", "./output")),
        driver=output_data.get("driver", "GPKG"),
    )

    logging_config = LoggingConfig(
        level=logging_data.get("level", "INFO"),
        json_output=logging_data.get("json", False),
    )

    return IngestConfig(
        project=project,
        aoi=merged.get("aoi"),
        data_root=Path(data_data.get("root", "./data")),
        layers=_parse_layers(merged.get("layers")),
        catalog=catalog,
        output=output,
        logging=logging_config,
        max_workers=merged.get("max_workers"),
    )
