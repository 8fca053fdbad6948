"""Configuration management for cogreduce."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from cogreduce.exceptions import ConfigError

COGREDUCE_DIR = ".cogreduce"
CONFIG_FILE = "config.json"

# Default threshold used by SonarQube's cognitive complexity rule
DEFAULT_MAX_COMPLEXITY = 15


class SearchConfig(BaseModel):
    """Search behavior configuration."""

    max_complexity: int = DEFAULT_MAX_COMPLEXITY
    max_candidates: int = 100_000
    strategy: str = "long_sequence_first"


class OutputConfig(BaseModel):
    """Where and what to write after a search."""

    output_dir: str = "output"
    write_cache_csv: bool = True
    write_graphs: bool = True


class ProjectConfig(BaseModel):
    """Full project configuration."""

    name: str = ""
    search: SearchConfig = Field(default_factory=SearchConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)


def find_project_root(start: Path | None = None) -> Path | None:
    """Walk up from `start` looking for a .cogreduce directory."""
    current = (start or Path.cwd()).resolve()
    while current != current.parent:
        if (current / COGREDUCE_DIR).is_dir():
            return current
        current = current.parent
    if (current / COGREDUCE_DIR).is_dir():
        return current
    return None


def get_cogreduce_dir(root: Path) -> Path:
    """Get the .cogreduce directory for a project root."""
    return root / COGREDUCE_DIR


def load_config(root: Path) -> ProjectConfig:
    """Load configuration from .cogreduce/config.json."""
    config_path = get_cogreduce_dir(root) / CONFIG_FILE
    if config_path.exists():
        try:
            data = json.loads(config_path.read_text())
            return ProjectConfig(**data)
        except (json.JSONDecodeError, ValidationError) as e:
            raise ConfigError(f"Invalid configuration in {config_path}: {e}") from e
    return ProjectConfig(name=root.name)


def save_config(root: Path, config: ProjectConfig) -> None:
    """Save configuration to .cogreduce/config.json."""
    cr_dir = get_cogreduce_dir(root)
    cr_dir.mkdir(parents=True, exist_ok=True)
    config_path = cr_dir / CONFIG_FILE
    config_path.write_text(json.dumps(config.model_dump(), indent=2))


def set_config_value(config: ProjectConfig, key: str, value: Any) -> ProjectConfig:
    """Set a nested config value using dot notation (e.g., 'search.max_complexity')."""
    parts = key.split(".")
    data = config.model_dump()
    target = data
    for part in parts[:-1]:
        if part not in target or not isinstance(target[part], dict):
            raise KeyError(f"Invalid config key: {key}")
        target = target[part]
    if parts[-1] not in target:
        raise KeyError(f"Invalid config key: {key}")
    target[parts[-1]] = value
    return ProjectConfig(**data)
