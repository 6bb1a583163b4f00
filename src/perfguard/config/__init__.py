"""Configuration file support for perfguard."""

from perfguard.config.loader import (
    ConfigLoader,
    FileConfig,
    ProvenanceConfig,
    ReportsConfig,
    StorageConfig,
    load_config,
)

__all__ = [
    "ConfigLoader",
    "FileConfig",
    "ProvenanceConfig",
    "ReportsConfig",
    "StorageConfig",
    "load_config",
]
