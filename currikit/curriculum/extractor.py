"""Derive the metadata store from the raw content pool."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Iterator, List, Tuple

from pydantic import ValidationError

from currikit.core.validation import InputParseError, load_json_file
from currikit.curriculum.models import (
    CONTENT_VARIANTS,
    ContentItem,
    ExtractionStats,
    MetadataRecord,
    MetadataStore,
)
from currikit.curriculum.writer import write_json_atomic

LOGGER = logging.getLogger(__name__)
STAGE = "extract"


class MetadataExtractor:
    """Scan ``database.json`` and write one metadata record per relevant item.

    ``originalIndex`` is a running counter over every item visited in pool
    order (containers in order; theory, then questions, then tasks), so it is
    unique however many items a container holds.
    """

    def __init__(self, database_path: Path, output_path: Path) -> None:
        self.database_path = Path(database_path)
        self.output_path = Path(output_path)

    def extract(self) -> MetadataStore:
        """Read the pool, build the store and overwrite ``output_path``."""
        LOGGER.info("Extracting metadata from %s", self.database_path)
        pool = load_json_file(self.database_path, stage=STAGE, expected=list)
        LOGGER.info("Content pool holds %d containers", len(pool))

        store = self.extract_from_pool(pool)
        write_json_atomic(self.output_path, store.to_json())
        stats = store.stats
        LOGGER.info(
            "Extracted %d theory, %d question and %d task items (%d total) to %s",
            stats.theory_items,
            stats.question_items,
            stats.task_items,
            stats.total_items,
            self.output_path,
        )
        return store

    def extract_from_pool(self, pool: List[Any]) -> MetadataStore:
        """Build the store from an already-parsed pool without touching disk."""
        records: List[MetadataRecord] = []
        stats = ExtractionStats()
        missing_ids = 0
        for original_index, (container_index, item_index, item) in enumerate(self._iter_items(pool)):
            if item.irrelevant:
                continue
            record = item.project(
                original_index=original_index,
                container_index=container_index,
                item_index=item_index,
            )
            if record.id is None:
                missing_ids += 1
                LOGGER.warning(
                    "%s item %d in container %d has no id; it cannot be ordered by prerequisites",
                    item.kind,
                    item_index,
                    container_index,
                )
            records.append(record)
            stats.count(item.kind)
        if missing_ids:
            LOGGER.warning("%d extracted items have no id", missing_ids)
        return MetadataStore(items=records, stats=stats)

    def _iter_items(self, pool: List[Any]) -> Iterator[Tuple[int, int, ContentItem]]:
        for container_index, container in enumerate(pool):
            if not isinstance(container, dict):
                raise InputParseError(
                    self.database_path,
                    f"container {container_index} must be an object, got {type(container).__name__}",
                    stage=STAGE,
                )
            content = container.get("content")
            if content is None:
                continue
            if not isinstance(content, dict):
                raise InputParseError(
                    self.database_path,
                    f"container {container_index} has non-object content",
                    stage=STAGE,
                )
            for variant in CONTENT_VARIANTS:
                entries = content.get(variant.section)
                if not isinstance(entries, list):
                    continue
                for item_index, raw in enumerate(entries):
                    yield container_index, item_index, self._parse_item(variant, raw, container_index, item_index)

    def _parse_item(
        self,
        variant: type[ContentItem],
        raw: Any,
        container_index: int,
        item_index: int,
    ) -> ContentItem:
        location = f"container {container_index} {variant.section}[{item_index}]"
        if not isinstance(raw, dict):
            raise InputParseError(
                self.database_path,
                f"{location} must be an object, got {type(raw).__name__}",
                stage=STAGE,
            )
        try:
            return variant.model_validate(raw)
        except ValidationError as exc:
            raise InputParseError(self.database_path, f"{location} is malformed: {exc}", stage=STAGE) from exc


def extract_metadata(database_path: Path, output_path: Path) -> MetadataStore:
    """Convenience wrapper around ``MetadataExtractor.extract``."""
    return MetadataExtractor(database_path, output_path).extract()


__all__ = ["MetadataExtractor", "extract_metadata"]
