"""Run the curriculum stages in order and record their outcome."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence, TypeVar

from currikit.core.provenance import ProvenanceEvent
from currikit.curriculum.extractor import MetadataExtractor
from currikit.curriculum.graph_builder import BuiltGraph, DependencyGraphBuilder
from currikit.curriculum.models import MetadataStore, OrderingResult
from currikit.curriculum.orderer import RuleBasedOrderer

from .context import PipelineContext

LOGGER = logging.getLogger(__name__)

EXTRACT_STAGE = "extract"
GRAPH_STAGE = "build-graph"
ORDER_STAGE = "order"
STAGES = (EXTRACT_STAGE, GRAPH_STAGE, ORDER_STAGE)

T = TypeVar("T")


class PipelineStageError(RuntimeError):
    """A stage failed; ``stage`` names it and ``__cause__`` holds the error."""

    def __init__(self, stage: str, error: BaseException) -> None:
        self.stage = stage
        self.error = error
        super().__init__(f"stage '{stage}' failed: {error}")


@dataclass
class PipelineRunArtifacts:
    """What each executed stage produced."""

    metadata: Optional[MetadataStore] = None
    graph: Optional[BuiltGraph] = None
    ordering: Optional[OrderingResult] = None
    completed: List[str] = field(default_factory=list)


def _run_stage(
    ctx: PipelineContext,
    stage: str,
    action: Callable[[], T],
    summarize: Callable[[T], Dict[str, Any]],
    *,
    degraded: Callable[[T], bool] = lambda _result: False,
) -> T:
    ctx.provenance.log(ProvenanceEvent(stage=stage, status="started", message=f"{stage} started"))
    try:
        result = action()
    except Exception as exc:
        LOGGER.error("Stage %s failed: %s", stage, exc)
        ctx.provenance.log(
            ProvenanceEvent(
                stage=stage,
                status="failed",
                message=str(exc),
                payload={"error_type": type(exc).__name__},
            )
        )
        raise PipelineStageError(stage, exc) from exc

    status = "degraded" if degraded(result) else "completed"
    ctx.provenance.log(
        ProvenanceEvent(stage=stage, status=status, message=f"{stage} {status}", payload=summarize(result))
    )
    return result


def _summarize_ordering(result: OrderingResult) -> Dict[str, Any]:
    return {
        "items": len(result.items),
        "modules": len(result.modules),
        "defaulted_items": [warning.model_dump(by_alias=True) for warning in result.warnings],
        "unresolved": {module.module_id: module.unresolved for module in result.modules if module.unresolved},
        "output_path": result.output_path,
    }


def run_pipeline(ctx: PipelineContext, *, stages: Sequence[str] = STAGES) -> PipelineRunArtifacts:
    """Execute ``stages`` (a subset of ``STAGES``) in pipeline order.

    Any fatal error stops the run and is re-raised as ``PipelineStageError``.
    """
    unknown = [stage for stage in stages if stage not in STAGES]
    if unknown:
        raise ValueError(f"Unknown stage(s) {', '.join(unknown)}. Valid options: {', '.join(STAGES)}")

    paths = ctx.config.paths
    artifacts = PipelineRunArtifacts()
    for stage in STAGES:
        if stage not in stages:
            continue
        if stage == EXTRACT_STAGE:
            extractor = MetadataExtractor(paths.database_path, paths.metadata_path)
            artifacts.metadata = _run_stage(
                ctx,
                stage,
                extractor.extract,
                lambda store: store.stats.model_dump(by_alias=True),
            )
        elif stage == GRAPH_STAGE:
            builder = DependencyGraphBuilder(paths.metadata_path, paths.graph_path)
            artifacts.graph = _run_stage(
                ctx,
                stage,
                builder.build,
                lambda graph: {"nodes": len(graph.nodes), "edges": len(graph.edges)},
            )
        else:
            orderer = RuleBasedOrderer.from_config(ctx.config)
            artifacts.ordering = _run_stage(
                ctx,
                stage,
                orderer.order,
                _summarize_ordering,
                degraded=lambda result: result.degraded,
            )
        artifacts.completed.append(stage)
    return artifacts


__all__ = ["PipelineRunArtifacts", "PipelineStageError", "STAGES", "run_pipeline"]
