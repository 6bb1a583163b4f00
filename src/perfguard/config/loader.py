"""Configuration file loader.

Handles discovery, parsing, and merging of YAML configuration files.
"""

import os
import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

from perfguard.analysis.models import AnalysisThresholds
from perfguard.exceptions import ConfigurationError
from perfguard.models.metrics import Provenance
from perfguard.persistence import DEFAULT_HISTORY_DIR, DEFAULT_MAX_ENTRIES

# Pattern matches ${VAR} or ${VAR:-default}
ENV_VAR_PATTERN = re.compile(r"\$\{([^}:-]+)(?::-([^}]*))?\}")

# Default config file names in priority order
CONFIG_FILE_NAMES = ["perfguard.yaml", ".perfguard.yaml", "perfguard.yml", ".perfguard.yml"]

DEFAULT_REPORTS_DIR = "performance-reports"


class StorageConfig(BaseModel):
    """Configuration for history and baseline storage."""

    dir: str = DEFAULT_HISTORY_DIR
    max_entries: int = Field(default=DEFAULT_MAX_ENTRIES, ge=1)


class ProvenanceConfig(BaseModel):
    """Build metadata overrides. Unset fields fall back to the environment."""

    git_commit: str | None = None
    build_number: str | None = None
    environment: str | None = None


class ReportsConfig(BaseModel):
    """Configuration for rendered report output."""

    dir: str = DEFAULT_REPORTS_DIR


class FileConfig(BaseModel):
    """Schema for perfguard.yaml configuration file."""

    storage: StorageConfig = Field(default_factory=StorageConfig)
    thresholds: AnalysisThresholds = Field(default_factory=AnalysisThresholds)
    provenance: ProvenanceConfig = Field(default_factory=ProvenanceConfig)
    reports: ReportsConfig = Field(default_factory=ReportsConfig)


class ConfigLoader:
    """Load and merge configuration from files and CLI arguments."""

    @staticmethod
    def discover_config_file(explicit_path: Path | None = None) -> Path | None:
        """Find configuration file in priority order.

        Args:
            explicit_path: Explicitly provided config file path.

        Returns:
            Path to config file, or None if not found.

        Raises:
            ConfigurationError: If explicit path doesn't exist.
        """
        if explicit_path is not None:
            if not explicit_path.exists():
                msg = f"Configuration file not found: {explicit_path}"
                raise ConfigurationError(msg)
            return explicit_path

        cwd = Path.cwd()
        for filename in CONFIG_FILE_NAMES:
            config_path = cwd / filename
            if config_path.exists():
                return config_path

        return None

    @staticmethod
    def load_yaml(path: Path) -> dict[str, Any]:
        """Load and parse YAML configuration file.

        Raises:
            ConfigurationError: If file cannot be read or parsed.
        """
        try:
            with path.open() as f:
                content = yaml.safe_load(f)
        except yaml.YAMLError as e:
            msg = f"Failed to parse configuration file {path}: {e}"
            raise ConfigurationError(msg) from e
        except OSError as e:
            msg = f"Failed to read configuration file {path}: {e}"
            raise ConfigurationError(msg) from e

        if content is None:
            return {}
        if not isinstance(content, dict):
            msg = f"Configuration file {path} must contain a mapping"
            raise ConfigurationError(msg)
        return content

    @staticmethod
    def interpolate_env_vars(value: Any) -> Any:
        """Recursively interpolate environment variables in configuration.

        Supports two syntaxes:
        - ${VAR} - Required variable, raises error if not set
        - ${VAR:-default} - Optional variable with default value

        Raises:
            ConfigurationError: If required environment variable is not set.
        """
        if isinstance(value, str):

            def replace(match: re.Match[str]) -> str:
                var_name = match.group(1)
                default_value = match.group(2)
                env_value = os.environ.get(var_name)
                if env_value is not None:
                    return env_value
                if default_value is not None:
                    return default_value
                msg = f"Environment variable {var_name} is not set"
                raise ConfigurationError(msg)

            return ENV_VAR_PATTERN.sub(replace, value)
        elif isinstance(value, dict):
            return {k: ConfigLoader.interpolate_env_vars(v) for k, v in value.items()}
        elif isinstance(value, list):
            return [ConfigLoader.interpolate_env_vars(item) for item in value]
        return value

    @staticmethod
    def load_config(explicit_path: Path | None = None) -> FileConfig | None:
        """Discover, load, and parse configuration file.

        Returns:
            Parsed FileConfig, or None if no config file found.

        Raises:
            ConfigurationError: If config file exists but is invalid.
        """
        config_path = ConfigLoader.discover_config_file(explicit_path)
        if config_path is None:
            return None

        raw_config = ConfigLoader.load_yaml(config_path)
        interpolated = ConfigLoader.interpolate_env_vars(raw_config)

        try:
            return FileConfig.model_validate(interpolated)
        except Exception as e:
            msg = f"Invalid configuration in {config_path}: {e}"
            raise ConfigurationError(msg) from e

    @staticmethod
    def resolve_storage_config(
        file_config: FileConfig | None,
        *,
        cli_dir: str | None = None,
        cli_max_entries: int | None = None,
    ) -> StorageConfig:
        """Resolve storage configuration.

        Priority order: CLI arguments, config file, defaults.
        """
        storage_dir = DEFAULT_HISTORY_DIR
        max_entries = DEFAULT_MAX_ENTRIES

        if file_config:
            storage_dir = file_config.storage.dir
            max_entries = file_config.storage.max_entries

        if cli_dir is not None:
            storage_dir = cli_dir
        if cli_max_entries is not None:
            max_entries = cli_max_entries

        return StorageConfig(dir=storage_dir, max_entries=max_entries)

    @staticmethod
    def resolve_reports_config(
        file_config: FileConfig | None,
        *,
        cli_dir: str | None = None,
    ) -> ReportsConfig:
        """Resolve report output configuration."""
        reports_dir = file_config.reports.dir if file_config else DEFAULT_REPORTS_DIR
        if cli_dir is not None:
            reports_dir = cli_dir
        return ReportsConfig(dir=reports_dir)

    @staticmethod
    def resolve_thresholds(file_config: FileConfig | None) -> AnalysisThresholds:
        """Resolve regression thresholds."""
        if file_config:
            return file_config.thresholds
        return AnalysisThresholds()

    @staticmethod
    def resolve_provenance(file_config: FileConfig | None) -> Provenance:
        """Resolve build metadata: config file values over environment over defaults."""
        provenance = Provenance.from_env()
        if file_config is None:
            return provenance

        overrides = file_config.provenance.model_dump(exclude_none=True)
        return provenance.model_copy(update=overrides)


def load_config(explicit_path: Path | None = None) -> FileConfig | None:
    """Convenience function to load configuration."""
    return ConfigLoader.load_config(explicit_path)
