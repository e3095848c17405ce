"""Build the prerequisite graph consumed by the orderer from the metadata store."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Literal

from pydantic import ValidationError

from currikit.core.validation import InputParseError, load_json_file
from currikit.curriculum.models import MetadataRecord
from currikit.curriculum.writer import write_json_atomic
from currikit.utils.fields import unique_in_order

LOGGER = logging.getLogger(__name__)
STAGE = "build-graph"

EdgeType = Literal["prerequisite", "requiredFor"]


@dataclass(frozen=True)
class DependencyEdge:
    source: str
    target: str
    type: EdgeType

    def to_json(self) -> Dict[str, str]:
        return {"source": self.source, "target": self.target, "type": self.type}


@dataclass
class BuiltGraph:
    nodes: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    edges: List[DependencyEdge] = field(default_factory=list)

    def to_json(self) -> Dict[str, Any]:
        return {
            "dependency": {
                "nodes": self.nodes,
                "edges": [edge.to_json() for edge in self.edges],
            },
            "stats": {"nodeCount": len(self.nodes), "edgeCount": len(self.edges)},
        }


class DependencyGraphBuilder:
    """Derive ``graphs.json`` from declared prerequisites and ``requiredFor`` links.

    A ``prerequisites`` entry on item B naming A yields ``A -> B``; a
    ``requiredFor`` entry on A naming B yields the same edge, inferred from
    the other side. Links to ids absent from the store are dropped.
    """

    def __init__(self, metadata_path: Path, output_path: Path) -> None:
        self.metadata_path = Path(metadata_path)
        self.output_path = Path(output_path)

    def build(self) -> BuiltGraph:
        LOGGER.info("Building dependency graph from %s", self.metadata_path)
        records = self._load_records()
        graph = self.build_from_records(records)
        write_json_atomic(self.output_path, graph.to_json())
        LOGGER.info(
            "Dependency graph with %d nodes and %d edges saved to %s",
            len(graph.nodes),
            len(graph.edges),
            self.output_path,
        )
        return graph

    def build_from_records(self, records: List[MetadataRecord]) -> BuiltGraph:
        graph = BuiltGraph()
        known: Dict[str, MetadataRecord] = {}
        for record in records:
            if record.id is None or record.id in known:
                continue
            known[record.id] = record

        prerequisites: Dict[str, List[str]] = {node_id: [] for node_id in known}
        seen_edges: set[tuple[str, str]] = set()

        def add_edge(source: str, target: str, edge_type: EdgeType) -> None:
            if source not in known or target not in known or (source, target) in seen_edges:
                return
            seen_edges.add((source, target))
            graph.edges.append(DependencyEdge(source=source, target=target, type=edge_type))
            prerequisites[target].append(source)

        for node_id, record in known.items():
            for prerequisite_id in record.prerequisites:
                add_edge(prerequisite_id, node_id, "prerequisite")
        for node_id, record in known.items():
            for target_id in record.required_for or ():
                add_edge(node_id, target_id, "requiredFor")

        for node_id, record in known.items():
            graph.nodes[node_id] = {
                "id": node_id,
                "type": record.type,
                "title": record.title,
                "index": record.original_index,
                "prerequisites": unique_in_order(prerequisites[node_id]),
            }
        return graph

    def _load_records(self) -> List[MetadataRecord]:
        store = load_json_file(self.metadata_path, stage=STAGE, expected=dict)
        entries = store.get("items")
        if isinstance(entries, dict):
            entries = [{"id": key, **value} if isinstance(value, dict) else value for key, value in entries.items()]
        if not isinstance(entries, list):
            raise InputParseError(self.metadata_path, "metadata store has no 'items' list", stage=STAGE)
        records: List[MetadataRecord] = []
        for position, entry in enumerate(entries):
            if not isinstance(entry, dict):
                raise InputParseError(self.metadata_path, f"record {position} must be an object", stage=STAGE)
            try:
                records.append(MetadataRecord.model_validate(entry))
            except ValidationError as exc:
                raise InputParseError(self.metadata_path, f"record {position} is malformed: {exc}", stage=STAGE) from exc
        return records


__all__ = ["BuiltGraph", "DependencyEdge", "DependencyGraphBuilder"]
