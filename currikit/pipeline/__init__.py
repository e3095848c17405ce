"""Pipeline bootstrap and stage runner for curriculum ordering."""

from __future__ import annotations

from .bootstrap import bootstrap_pipeline
from .context import PipelineContext, PipelinePaths
from .runtime import STAGES, PipelineRunArtifacts, PipelineStageError, run_pipeline

__all__ = [
    "PipelineContext",
    "PipelinePaths",
    "PipelineRunArtifacts",
    "PipelineStageError",
    "STAGES",
    "bootstrap_pipeline",
    "run_pipeline",
]
