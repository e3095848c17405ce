"""
Configuration, validation and provenance helpers shared by every pipeline stage.
"""

from .config import CurriculumPathsConfig, OrderingSettings, PipelineConfig, load_pipeline_config
from .provenance import ProvenanceEvent, ProvenanceLogger
from .validation import InputNotFoundError, InputParseError

__all__ = [
    "CurriculumPathsConfig",
    "InputNotFoundError",
    "InputParseError",
    "OrderingSettings",
    "PipelineConfig",
    "ProvenanceEvent",
    "ProvenanceLogger",
    "load_pipeline_config",
]
