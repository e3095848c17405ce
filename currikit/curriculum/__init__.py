"""Curriculum ordering stages: extraction, graph building, grouping, ordering, writing."""

from __future__ import annotations

from .extractor import MetadataExtractor, extract_metadata
from .graph_builder import DependencyGraphBuilder
from .grouping import group_items_by_module
from .loaders import load_aggregated_items, load_dependency_graph, load_metadata_index
from .models import AggregatedItem, DataIntegrityWarning, MetadataRecord, ModuleGroup, OrderingResult
from .orderer import RuleBasedOrderer, order_module
from .writer import OrderedItemsWriter

__all__ = [
    "AggregatedItem",
    "DataIntegrityWarning",
    "DependencyGraphBuilder",
    "MetadataExtractor",
    "MetadataRecord",
    "ModuleGroup",
    "OrderedItemsWriter",
    "OrderingResult",
    "RuleBasedOrderer",
    "extract_metadata",
    "group_items_by_module",
    "load_aggregated_items",
    "load_dependency_graph",
    "load_metadata_index",
    "order_module",
]
