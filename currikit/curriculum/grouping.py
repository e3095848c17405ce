"""Partition aggregated items by module."""

from __future__ import annotations

from typing import Dict, Iterable, List

from currikit.curriculum.models import AggregatedItem, ModuleGroup

DEFAULT_MODULE_ID = "default"


def group_items_by_module(
    items: Iterable[AggregatedItem],
    *,
    default_module: str = DEFAULT_MODULE_ID,
) -> List[ModuleGroup]:
    """Group items by ``moduleId`` in first-seen module order.

    Items without a module id land in ``default_module``. Every item ends up
    in exactly one group and keeps its input position within that group.
    """
    buckets: Dict[str, List[AggregatedItem]] = {}
    for item in items:
        module_id = item.module_key or default_module
        buckets.setdefault(module_id, []).append(item)
    return [ModuleGroup(module_id=module_id, items=members) for module_id, members in buckets.items()]


def flatten_modules(groups: Iterable[ModuleGroup]) -> List[AggregatedItem]:
    """Concatenate module item lists, preserving module order."""
    return [item for group in groups for item in group.items]


__all__ = ["DEFAULT_MODULE_ID", "flatten_modules", "group_items_by_module"]
