"""
Typed configuration for the curriculum ordering pipeline.

A pipeline config is a small YAML document. Every section is optional; the
defaults point at the conventional file names inside a ``curriculum/``
directory::

    curriculum_dir: data/curriculum
    paths:
      aggregated_items_path: data/clusters/aggregated-items.json
    ordering:
      default_relevance: 5
    log_level: DEBUG
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Literal, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

DEFAULT_CURRICULUM_DIR = Path("curriculum")
DATABASE_FILENAME = "database.json"
METADATA_FILENAME = "metadata.json"
GRAPHS_FILENAME = "graphs.json"
AGGREGATED_ITEMS_FILENAME = "aggregated-items.json"
ORDERED_ITEMS_FILENAME = "ordered-items.json"

_PATH_KEYS = (
    "curriculum_dir",
    "database_path",
    "metadata_path",
    "graph_path",
    "aggregated_items_path",
    "output_dir",
)
_DERIVED_FILENAMES = {
    "database_path": DATABASE_FILENAME,
    "metadata_path": METADATA_FILENAME,
    "graph_path": GRAPHS_FILENAME,
    "aggregated_items_path": AGGREGATED_ITEMS_FILENAME,
    "output_dir": None,
}


class CurriculumPathsConfig(BaseModel):
    """Locations of every artifact the pipeline reads or writes."""

    model_config = ConfigDict()

    curriculum_dir: Path = Field(default=DEFAULT_CURRICULUM_DIR, description="Directory holding the curriculum artifacts.")
    database_path: Optional[Path] = Field(default=None, description="Raw content pool consumed by metadata extraction.")
    metadata_path: Optional[Path] = Field(default=None, description="Metadata store written by extraction.")
    graph_path: Optional[Path] = Field(default=None, description="Dependency graph file.")
    aggregated_items_path: Optional[Path] = Field(default=None, description="Module-assigned items to order.")
    output_dir: Optional[Path] = Field(default=None, description="Directory receiving ordered-items.json.")

    @field_validator(*_PATH_KEYS, mode="before")
    @classmethod
    def coerce_path(cls, value: Any) -> Any:
        if value is None or value == "":
            return None
        return Path(value).expanduser()

    @model_validator(mode="after")
    def fill_missing_paths(self) -> "CurriculumPathsConfig":
        base = self.curriculum_dir
        if self.database_path is None:
            self.database_path = base / DATABASE_FILENAME
        if self.metadata_path is None:
            self.metadata_path = base / METADATA_FILENAME
        if self.graph_path is None:
            self.graph_path = base / GRAPHS_FILENAME
        if self.aggregated_items_path is None:
            self.aggregated_items_path = base / AGGREGATED_ITEMS_FILENAME
        if self.output_dir is None:
            self.output_dir = base
        return self

    @property
    def ordered_items_path(self) -> Path:
        return self.output_dir / ORDERED_ITEMS_FILENAME


class OrderingSettings(BaseModel):
    """Fallback values used when an item has no usable metadata."""

    model_config = ConfigDict(extra="forbid")

    default_module: str = Field(default="default", min_length=1)
    default_complexity: int = Field(default=1, ge=1, le=10)
    default_relevance: int = Field(default=5, ge=1, le=10)


class PipelineConfig(BaseModel):
    """Top-level configuration for a pipeline run."""

    paths: CurriculumPathsConfig = Field(default_factory=CurriculumPathsConfig)
    ordering: OrderingSettings = Field(default_factory=OrderingSettings)
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    @field_validator("log_level", mode="before")
    @classmethod
    def upper_log_level(cls, value: Any) -> Any:
        return value.upper() if isinstance(value, str) else value

    @model_validator(mode="before")
    @classmethod
    def promote_curriculum_dir(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        payload = dict(data)
        # A top-level ``curriculum_dir`` is shorthand for ``paths.curriculum_dir``.
        shorthand = payload.pop("curriculum_dir", None)
        if shorthand is not None:
            paths = dict(payload.get("paths") or {})
            paths.setdefault("curriculum_dir", shorthand)
            payload["paths"] = paths
        return payload


def read_yaml_file(path: Path) -> Dict[str, Any]:
    """Load a YAML file and return a dictionary."""
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Expected mapping at root of {path}, received {type(data)}")
    return data


def _resolve_config_path(value: Any, base_dir: Path) -> str:
    path = Path(value).expanduser()
    if not path.is_absolute():
        path = base_dir / path
    return str(path.resolve())


def _absolutize_paths(data: Dict[str, Any], base_dir: Path) -> None:
    if data.get("curriculum_dir"):
        data["curriculum_dir"] = _resolve_config_path(data["curriculum_dir"], base_dir)
    paths = data.get("paths")
    if isinstance(paths, dict):
        for key in _PATH_KEYS:
            if paths.get(key):
                paths[key] = _resolve_config_path(paths[key], base_dir)
        if not paths.get("curriculum_dir") and not data.get("curriculum_dir"):
            paths["curriculum_dir"] = _resolve_config_path(DEFAULT_CURRICULUM_DIR, base_dir)
    elif not data.get("curriculum_dir"):
        data["paths"] = {"curriculum_dir": _resolve_config_path(DEFAULT_CURRICULUM_DIR, base_dir)}


def load_pipeline_config(path: Path, *, base_dir: Path | None = None) -> PipelineConfig:
    """Load a pipeline config, resolving relative paths against ``base_dir``.

    ``base_dir`` defaults to the directory holding the config file.
    """
    path = path.expanduser().resolve()
    data = read_yaml_file(path)
    _absolutize_paths(data, (base_dir or path.parent).resolve())
    try:
        return PipelineConfig.model_validate(data)
    except ValidationError as exc:
        raise ValueError(f"Invalid pipeline config in {path}") from exc


def default_pipeline_config(curriculum_dir: Path | str | None = None) -> PipelineConfig:
    """Config used when no YAML file is supplied."""
    target = Path(curriculum_dir).expanduser() if curriculum_dir else DEFAULT_CURRICULUM_DIR
    return PipelineConfig(paths=CurriculumPathsConfig(curriculum_dir=target.resolve()))


def merge_path_overrides(config: PipelineConfig, overrides: Dict[str, Any]) -> PipelineConfig:
    """Return a new config with the given path fields replaced.

    Paths derived from ``curriculum_dir`` are recomputed unless they were set
    explicitly in the original config or in ``overrides``.
    """
    cleaned = {key: value for key, value in overrides.items() if value is not None}
    if not cleaned:
        return config
    unknown = sorted(set(cleaned) - set(_PATH_KEYS))
    if unknown:
        raise ValueError(f"Unknown path overrides: {', '.join(unknown)}")
    current = config.paths
    payload = current.model_dump()
    if "curriculum_dir" in cleaned:
        for key, filename in _DERIVED_FILENAMES.items():
            derived = current.curriculum_dir / filename if filename else current.curriculum_dir
            if payload.get(key) == derived:
                payload.pop(key)
    payload.update(cleaned)
    try:
        paths = CurriculumPathsConfig.model_validate(payload)
    except ValidationError as exc:
        raise ValueError("Invalid path overrides") from exc
    return config.model_copy(update={"paths": paths})


__all__ = [
    "AGGREGATED_ITEMS_FILENAME",
    "CurriculumPathsConfig",
    "DATABASE_FILENAME",
    "DEFAULT_CURRICULUM_DIR",
    "GRAPHS_FILENAME",
    "METADATA_FILENAME",
    "ORDERED_ITEMS_FILENAME",
    "OrderingSettings",
    "PipelineConfig",
    "default_pipeline_config",
    "load_pipeline_config",
    "merge_path_overrides",
    "read_yaml_file",
]
