"""
Configuration management with typed Pydantic models.

Provides layer source selection, area-of-interest and catalogue
settings, and YAML configuration loading.
"""

from bclayers.config.loader import load_config
from bclayers.config.settings import (
    CatalogConfig,
    IngestConfig,
    LayerSourceConfig,
    LoggingConfig,
    OutputConfig,
)

__all__ = [
    "CatalogConfig",
    "IngestConfig",
    "LayerSourceConfig",
    "LoggingConfig",
    "OutputConfig",
    "load_config",
]
