"""Rule-based ordering of items within each module.

Each module is ordered independently with Kahn's algorithm over the
prerequisite edges that stay inside the module. Whenever several items are
ready at once the cascade below picks the next one:

1. lower complexity
2. higher relevance score (``interviewRelevance``, else ``interviewFrequency``)
3. higher ``interviewFrequency``
4. more tags
5. the order in which the items became ready

Items that never become ready (cycles, self-prerequisites, items without an
id) follow the resolved prefix sorted by complexity alone, so a module's
output always has exactly as many items as its input.
"""

from __future__ import annotations

import heapq
import itertools
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from currikit.core.config import (
    GRAPHS_FILENAME,
    METADATA_FILENAME,
    OrderingSettings,
    PipelineConfig,
)
from currikit.curriculum.grouping import flatten_modules, group_items_by_module
from currikit.curriculum.loaders import (
    DependencyGraph,
    MetadataIndex,
    load_aggregated_items,
    load_dependency_graph,
    load_metadata_index,
)
from currikit.curriculum.models import (
    AggregatedItem,
    DataIntegrityWarning,
    ModuleGroup,
    ModuleSummary,
    OrderingResult,
)
from currikit.curriculum.writer import OrderedItemsWriter
from currikit.utils.fields import unique_in_order

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ItemProfile:
    """Ordering attributes of one item after metadata enrichment."""

    complexity: float
    relevance: float
    frequency: float
    tag_count: int
    prerequisites: Tuple[str, ...] = ()
    defaulted: bool = False

    @property
    def priority(self) -> Tuple[float, float, float, int]:
        return (self.complexity, -self.relevance, -self.frequency, -self.tag_count)


def build_profile(
    item: AggregatedItem,
    metadata: MetadataIndex,
    settings: OrderingSettings,
) -> ItemProfile:
    """Combine an item with its metadata record, falling back to defaults."""
    fallback_complexity = item.complexity if item.complexity is not None else settings.default_complexity
    key = item.key
    record = metadata.get(key) if key is not None else None
    if record is None:
        return ItemProfile(
            complexity=fallback_complexity,
            relevance=settings.default_relevance,
            frequency=settings.default_relevance,
            tag_count=0,
            defaulted=True,
        )

    complexity = record.complexity if record.complexity is not None else fallback_complexity
    relevance = record.interview_relevance
    if relevance is None:
        relevance = record.interview_frequency
    if relevance is None:
        relevance = settings.default_relevance
    frequency = record.interview_frequency
    if frequency is None:
        frequency = settings.default_relevance
    return ItemProfile(
        complexity=complexity,
        relevance=relevance,
        frequency=frequency,
        tag_count=len(record.tags),
        prerequisites=tuple(record.prerequisites),
    )


def order_module(
    items: Sequence[AggregatedItem],
    profiles: Sequence[ItemProfile],
    dependency_graph: Mapping[str, Sequence[str]],
) -> Tuple[List[AggregatedItem], List[AggregatedItem]]:
    """Topologically order one module's items.

    Returns ``(resolved, unresolved)``; their concatenation is the module's
    final order. Nodes are item positions, so repeated ids never collapse
    two items into one.
    """
    positions_by_id: Dict[str, List[int]] = {}
    for position, item in enumerate(items):
        if item.key is not None:
            positions_by_id.setdefault(item.key, []).append(position)

    successors: List[List[int]] = [[] for _ in items]
    in_degree = [0] * len(items)
    for position, item in enumerate(items):
        key = item.key
        if key is None:
            continue
        declared = unique_in_order([*profiles[position].prerequisites, *dependency_graph.get(key, ())])
        for prerequisite_id in declared:
            # prerequisites outside this module are not enforced here
            for prerequisite_position in positions_by_id.get(prerequisite_id, ()):
                successors[prerequisite_position].append(position)
                in_degree[position] += 1

    sequence = itertools.count()
    ready: List[Tuple[Tuple[float, float, float, int], int, int]] = []
    for position, item in enumerate(items):
        if item.key is not None and in_degree[position] == 0:
            heapq.heappush(ready, (profiles[position].priority, next(sequence), position))

    placed = [False] * len(items)
    resolved: List[AggregatedItem] = []
    while ready:
        _, _, position = heapq.heappop(ready)
        placed[position] = True
        resolved.append(items[position])
        for successor in successors[position]:
            in_degree[successor] -= 1
            if in_degree[successor] == 0:
                heapq.heappush(ready, (profiles[successor].priority, next(sequence), successor))

    leftover = [position for position in range(len(items)) if not placed[position]]
    leftover.sort(key=lambda position: profiles[position].complexity)
    return resolved, [items[position] for position in leftover]


class RuleBasedOrderer:
    """Load aggregated items, order every module and write the result."""

    def __init__(
        self,
        items_path: Path,
        output_dir: Path,
        *,
        metadata_path: Optional[Path] = None,
        graph_path: Optional[Path] = None,
        settings: Optional[OrderingSettings] = None,
    ) -> None:
        self.items_path = Path(items_path)
        base_dir = self.items_path.parent
        self.metadata_path = Path(metadata_path) if metadata_path else base_dir / METADATA_FILENAME
        self.graph_path = Path(graph_path) if graph_path else base_dir / GRAPHS_FILENAME
        self.settings = settings or OrderingSettings()
        self.writer = OrderedItemsWriter(output_dir)

    @classmethod
    def from_config(cls, config: PipelineConfig) -> "RuleBasedOrderer":
        paths = config.paths
        return cls(
            paths.aggregated_items_path,
            paths.output_dir,
            metadata_path=paths.metadata_path,
            graph_path=paths.graph_path,
            settings=config.ordering,
        )

    def order(self) -> OrderingResult:
        """Run the full ordering stage and persist ``ordered-items.json``."""
        LOGGER.info("Starting rule-based ordering of %s", self.items_path)
        items = load_aggregated_items(self.items_path)
        groups = group_items_by_module(items, default_module=self.settings.default_module)
        LOGGER.info("Grouped %d items into %d modules", len(items), len(groups))

        metadata = load_metadata_index(self.metadata_path)
        dependency_graph = load_dependency_graph(self.graph_path)

        result = self.order_groups(groups, metadata, dependency_graph)
        result.output_path = str(self.writer.write(result.items))
        LOGGER.info("Final ordered curriculum has %d items", len(result.items))
        return result

    def order_groups(
        self,
        groups: Sequence[ModuleGroup],
        metadata: MetadataIndex,
        dependency_graph: DependencyGraph,
    ) -> OrderingResult:
        """Order already-grouped items without touching disk."""
        ordered_groups: List[ModuleGroup] = []
        summaries: List[ModuleSummary] = []
        warnings: List[DataIntegrityWarning] = []

        for group in groups:
            profiles = []
            for item in group.items:
                profile = build_profile(item, metadata, self.settings)
                if profile.defaulted:
                    warning = DataIntegrityWarning(
                        index=item.index,
                        id=item.key,
                        module_id=group.module_id,
                        reason="missing_id" if item.key is None else "missing_metadata",
                    )
                    LOGGER.warning(warning.message)
                    warnings.append(warning)
                profiles.append(profile)

            resolved, unresolved = order_module(group.items, profiles, dependency_graph)
            if unresolved:
                LOGGER.warning(
                    "Module %s: %d items could not be placed by prerequisites (cycle or missing id); appended by complexity",
                    group.module_id,
                    len(unresolved),
                )
            LOGGER.debug("Ordered module %s with %d items", group.module_id, len(group.items))
            ordered_groups.append(ModuleGroup(module_id=group.module_id, items=resolved + unresolved))
            summaries.append(
                ModuleSummary(
                    module_id=group.module_id,
                    item_count=len(group.items),
                    resolved_count=len(resolved),
                    unresolved=[item.key for item in unresolved],
                )
            )

        return OrderingResult(items=flatten_modules(ordered_groups), modules=summaries, warnings=warnings)


__all__ = ["ItemProfile", "RuleBasedOrderer", "build_profile", "order_module"]
