"""Readers for the inputs of the ordering stage.

Only the aggregated items file is mandatory. The metadata store and the
dependency graph enrich the ordering; when either is missing or unreadable
the loader logs a warning and returns an empty structure.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Tuple

from pydantic import ValidationError

from currikit.core.validation import InputParseError, inspect_json_file, load_json_file
from currikit.curriculum.models import AggregatedItem, MetadataRecord
from currikit.utils.fields import list_field, unique_in_order

LOGGER = logging.getLogger(__name__)

DependencyGraph = Dict[str, Tuple[str, ...]]
MetadataIndex = Dict[str, MetadataRecord]

ITEMS_STAGE = "load-items"
METADATA_STAGE = "load-metadata"
GRAPH_STAGE = "load-graph"


def load_aggregated_items(path: Path) -> List[AggregatedItem]:
    """Read the module-assigned item list. Missing or malformed input is fatal."""
    raw_items = load_json_file(path, stage=ITEMS_STAGE, expected=list)
    items: List[AggregatedItem] = []
    for position, raw in enumerate(raw_items):
        if not isinstance(raw, dict):
            raise InputParseError(
                path,
                f"item {position} must be an object, got {type(raw).__name__}",
                stage=ITEMS_STAGE,
            )
        try:
            items.append(AggregatedItem.from_source(raw))
        except ValidationError as exc:
            raise InputParseError(path, f"item {position} is malformed: {exc}", stage=ITEMS_STAGE) from exc
    LOGGER.info("Loaded %d aggregated items from %s", len(items), path)
    return items


def load_metadata_index(path: Path) -> MetadataIndex:
    """Return metadata records keyed by item id.

    Accepts the extractor's ``{"items": [...]}`` layout as well as an
    ``{"items": {id: record}}`` mapping. The first record wins when an id
    repeats.
    """
    result = inspect_json_file(path, stage=METADATA_STAGE, expected=dict)
    if not result.valid:
        for message in result.warnings + result.errors:
            LOGGER.warning("%s; ordering falls back to default metadata", message)
        return {}

    entries = result.data.get("items")
    if isinstance(entries, dict):
        pairs: Iterable[Tuple[Any, Any]] = entries.items()
    elif isinstance(entries, list):
        pairs = ((None, entry) for entry in entries)
    else:
        LOGGER.warning("Metadata store %s has no usable 'items' collection; using defaults", path)
        return {}

    index: MetadataIndex = {}
    skipped = 0
    duplicates = 0
    for key, entry in pairs:
        if not isinstance(entry, dict):
            skipped += 1
            continue
        payload = dict(entry)
        if key is not None and not payload.get("id"):
            payload["id"] = key
        try:
            record = MetadataRecord.model_validate(payload)
        except ValidationError as exc:
            skipped += 1
            LOGGER.debug("Skipping malformed metadata record %r: %s", payload.get("id"), exc)
            continue
        if record.id is None:
            skipped += 1
            continue
        if record.id in index:
            duplicates += 1
            continue
        index[record.id] = record

    if skipped:
        LOGGER.warning("Skipped %d unusable metadata records in %s", skipped, path)
    if duplicates:
        LOGGER.warning("Ignored %d duplicate metadata ids in %s", duplicates, path)
    LOGGER.info("Loaded metadata for %d items from %s", len(index), path)
    return index


def load_dependency_graph(path: Path) -> DependencyGraph:
    """Return ``{item_id: prerequisite_ids}`` from a ``graphs.json`` document.

    Reads ``dependency.nodes[id].prerequisites`` and, when present,
    ``dependency.edges`` (``source`` is a prerequisite of ``target``).
    """
    result = inspect_json_file(path, stage=GRAPH_STAGE, expected=dict)
    if not result.valid:
        for message in result.warnings + result.errors:
            LOGGER.warning("%s; prerequisites come from metadata only", message)
        return {}

    dependency = result.data.get("dependency")
    if not isinstance(dependency, dict):
        LOGGER.warning("Dependency graph %s has no 'dependency' section; ignoring it", path)
        return {}

    collected: Dict[str, List[str]] = {}
    nodes = dependency.get("nodes")
    if isinstance(nodes, dict):
        for node_id, node in nodes.items():
            prerequisites = node.get("prerequisites") if isinstance(node, dict) else None
            collected.setdefault(str(node_id), []).extend(list_field(prerequisites))
    elif nodes is not None:
        LOGGER.warning("Dependency graph %s: 'nodes' must be an object keyed by item id", path)

    edges = dependency.get("edges")
    if isinstance(edges, list):
        for edge in edges:
            if not isinstance(edge, dict):
                continue
            source, target = edge.get("source"), edge.get("target")
            if source in (None, "") or target in (None, ""):
                continue
            collected.setdefault(str(target), []).append(str(source))

    graph = {node_id: tuple(unique_in_order(prereqs)) for node_id, prereqs in collected.items()}
    LOGGER.info("Loaded dependencies for %d items from %s", len(graph), path)
    return graph


__all__ = [
    "DependencyGraph",
    "MetadataIndex",
    "load_aggregated_items",
    "load_dependency_graph",
    "load_metadata_index",
]
