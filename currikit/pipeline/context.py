"""Shared context objects for a curriculum pipeline run."""

from __future__ import annotations

from pathlib import Path
from typing import Dict

from pydantic import BaseModel, ConfigDict, Field, field_validator

from currikit.core.config import PipelineConfig
from currikit.core.provenance import ProvenanceLogger


class PipelinePaths(BaseModel):
    """Directories used during a pipeline run."""

    repo_root: Path
    output_dir: Path
    logs_dir: Path

    model_config = ConfigDict(arbitrary_types_allowed=True)

    @field_validator("repo_root", "output_dir", "logs_dir", mode="before")
    @classmethod
    def _expand(cls, value: Path | str) -> Path:
        return Path(value).expanduser().resolve()

    def ensure_directories(self) -> None:
        for path in (self.output_dir, self.logs_dir):
            path.mkdir(parents=True, exist_ok=True)

    @property
    def provenance_path(self) -> Path:
        return self.logs_dir / "provenance.jsonl"


class PipelineContext(BaseModel):
    """Aggregated runtime context for a pipeline run."""

    config: PipelineConfig
    paths: PipelinePaths
    env: Dict[str, str] = Field(default_factory=dict)
    provenance: ProvenanceLogger

    model_config = ConfigDict(arbitrary_types_allowed=True)
