"""Bootstrap helpers for the curriculum pipeline."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Dict

from dotenv import load_dotenv

from currikit.core.config import (
    DEFAULT_CURRICULUM_DIR,
    PipelineConfig,
    default_pipeline_config,
    load_pipeline_config,
    merge_path_overrides,
)
from currikit.core.provenance import ProvenanceEvent, ProvenanceLogger

from .context import PipelineContext, PipelinePaths

CURRICULUM_DIR_ENV = "CURRIKIT_CURRICULUM_DIR"
LOG_LEVEL_ENV = "CURRIKIT_LOG_LEVEL"
LOGGER = logging.getLogger(__name__)


def _capture_env(keys: tuple[str, ...]) -> Dict[str, str]:
    """Return a filtered snapshot of environment variables for provenance."""
    snapshot: Dict[str, str] = {}
    for key in keys:
        value = os.getenv(key)
        if value is not None:
            snapshot[key] = value
    return snapshot


def _resolve(value: Path | str, base: Path) -> Path:
    candidate = Path(value).expanduser()
    if not candidate.is_absolute():
        candidate = base / candidate
    return candidate.resolve()


def bootstrap_pipeline(
    config_path: Path | None = None,
    *,
    repo_root: Path | None = None,
    curriculum_dir: Path | None = None,
    database_path: Path | None = None,
    metadata_path: Path | None = None,
    graph_path: Path | None = None,
    aggregated_items_path: Path | None = None,
    output_dir: Path | None = None,
    log_level: str | None = None,
    env_keys: tuple[str, ...] = (CURRICULUM_DIR_ENV, LOG_LEVEL_ENV),
) -> PipelineContext:
    """
    Load configuration and environment, then construct the pipeline context.

    Parameters
    ----------
    config_path:
        Optional pipeline YAML. Without one every artifact lives under
        ``<repo_root>/curriculum``.
    repo_root:
        Anchor for relative paths and the ``.env`` file. Defaults to ``Path.cwd()``.
    curriculum_dir:
        Overrides the curriculum directory; otherwise ``CURRIKIT_CURRICULUM_DIR``
        is honoured when set.
    database_path, metadata_path, graph_path, aggregated_items_path, output_dir:
        Per-artifact overrides applied on top of the config.
    log_level:
        Overrides ``config.log_level``; otherwise ``CURRIKIT_LOG_LEVEL`` is honoured.
    """

    repo_root = (repo_root or Path.cwd()).expanduser().resolve()
    load_dotenv(repo_root / ".env")

    if config_path is not None:
        config: PipelineConfig = load_pipeline_config(_resolve(config_path, repo_root))
    else:
        config = default_pipeline_config(repo_root / DEFAULT_CURRICULUM_DIR)

    env_curriculum_dir = os.getenv(CURRICULUM_DIR_ENV)
    if curriculum_dir is None and env_curriculum_dir:
        curriculum_dir = Path(env_curriculum_dir)

    overrides = {
        "curriculum_dir": curriculum_dir,
        "database_path": database_path,
        "metadata_path": metadata_path,
        "graph_path": graph_path,
        "aggregated_items_path": aggregated_items_path,
        "output_dir": output_dir,
    }
    config = merge_path_overrides(
        config,
        {key: _resolve(value, repo_root) for key, value in overrides.items() if value is not None},
    )

    level = log_level or os.getenv(LOG_LEVEL_ENV)
    if level:
        try:
            config = PipelineConfig.model_validate({**config.model_dump(), "log_level": level})
        except ValueError as exc:
            raise ValueError(f"Invalid log level {level!r}") from exc

    paths = PipelinePaths(
        repo_root=repo_root,
        output_dir=config.paths.output_dir,
        logs_dir=config.paths.output_dir / "logs",
    )
    paths.ensure_directories()
    provenance = ProvenanceLogger(paths.provenance_path)

    ctx = PipelineContext(
        config=config,
        paths=paths,
        env=_capture_env(env_keys),
        provenance=provenance,
    )
    ctx.provenance.log(
        ProvenanceEvent(
            stage="bootstrap",
            message="Pipeline configuration loaded",
            payload={
                "config_path": str(config_path) if config_path else None,
                "curriculum_dir": str(config.paths.curriculum_dir),
                "output_dir": str(config.paths.output_dir),
            },
        )
    )
    LOGGER.debug("Pipeline bootstrapped with curriculum dir %s", config.paths.curriculum_dir)
    return ctx
