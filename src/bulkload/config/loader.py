"""
Configuration loading utilities.

Supports environment variable interpolation and config inheritance.
Minimal configs only need: project, variant, database.url
"""

import os
import re
from pathlib import Path
from typing import Any

import yaml

from bulkload.config.settings import (
    BulkLoadConfig,
    DatabaseConfig,
    DatasetConfig,
    LoaderConfig,
    LoggingConfig,
    SourceConfig,
)
from bulkload.schemas.registry import SchemaRegistry


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


def load_yaml(path: Path) -> dict[str, Any]:
    """Load a YAML file and process environment variables."""
    with path.open(encoding="utf-8") as f:
        data = yaml.safe_load(f)
    return _process_config_values(data) if data else {}


def _build_datasets(variant: str, entries: list[Any] | None) -> list[DatasetConfig]:
    """
    Build the dataset list, falling back to the variant's defaults.

    Entries may be mappings (table, file, delimiter) or "table: file" pairs.
    """
    if not entries:
        return [
            DatasetConfig(table=table, file=Path(file))
            for table, file in SchemaRegistry.get(variant).datasets
        ]

    datasets = []
    for entry in entries:
        if not isinstance(entry, dict):
            msg = f"Dataset entries must be mappings, got: {entry!r}"
            raise ValueError(msg)
        if "table" in entry:
            datasets.append(DatasetConfig(**entry))
        elif len(entry) == 1:
            ((table, file),) = entry.items()
            datasets.append(DatasetConfig(table=table, file=Path(file)))
        else:
            msg = f"Dataset entry needs 'table' and 'file': {entry!r}"
            raise ValueError(msg)
    return datasets


def load_config(
    config_path: Path,
    base_path: Path | None = None,
) -> BulkLoadConfig:
    """
    Load bulk load configuration from YAML file(s).

    Minimal config requires only:
        - project: str
        - variant: str (cricket, loan)
        - database.url: SQLAlchemy URL

    Args:
        config_path: Path to the main configuration file.
        base_path: Optional path to base configuration for inheritance.

    Returns:
        Fully validated BulkLoadConfig instance.
    """
    # Load base config if provided
    if base_path is not None:
        base_data = load_yaml(base_path)
    else:
        potential_base = config_path.parent / "base.yaml"
        if potential_base.exists() and potential_base != config_path:
            base_data = load_yaml(potential_base)
        else:
            base_data = {}

    main_data = load_yaml(config_path)
    merged = _deep_merge(base_data, main_data)

    project = merged.get("project")
    if not project:
        msg = "Config must specify 'project' name"
        raise ValueError(msg)

    variant = merged.get("variant")
    if not variant:
        msg = "Config must specify 'variant' (e.g. cricket, loan)"
        raise ValueError(msg)
    if variant not in SchemaRegistry.list_variants():
        available = ", ".join(SchemaRegistry.list_variants())
        msg = f"Unknown variant '{variant}'. Available: {available}"
        raise ValueError(msg)

    database_data = merged.get("database", {})
    if not database_data.get("url"):
        msg = "Config must specify 'database.url'"
        raise ValueError(msg)
    database = DatabaseConfig(**database_data)

    source = SourceConfig(**merged.get("source", {}))
    loader = LoaderConfig(**merged.get("loader", {}))
    logging_config = LoggingConfig(**merged.get("logging", {}))
    datasets = _build_datasets(variant, merged.get("datasets"))

    return BulkLoadConfig(
        project=project,
        variant=variant,
        database=database,
        source=source,
        loader=loader,
        datasets=datasets,
        logging=logging_config,
    )
