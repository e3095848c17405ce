"""Persist pipeline artifacts as indented JSON."""

from __future__ import annotations

import contextlib
import json
import logging
import tempfile
from pathlib import Path
from typing import Any, Sequence

from currikit.core.config import ORDERED_ITEMS_FILENAME
from currikit.curriculum.models import AggregatedItem

LOGGER = logging.getLogger(__name__)


def write_json_atomic(path: Path, payload: Any) -> Path:
    """Serialise ``payload`` to ``path``, replacing any previous file.

    The document is written to a sibling temporary file first so a failure
    mid-write never leaves a truncated artifact behind.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    text = json.dumps(payload, indent=2, ensure_ascii=False) + "\n"
    temp_path: Path | None = None
    try:
        with tempfile.NamedTemporaryFile(
            "w",
            encoding="utf-8",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
        ) as handle:
            temp_path = Path(handle.name)
            handle.write(text)
        temp_path.replace(path)
    except Exception:
        if temp_path is not None:
            with contextlib.suppress(OSError):
                temp_path.unlink()
        raise
    return path


class OrderedItemsWriter:
    """Writes the flattened curriculum to ``<output_dir>/ordered-items.json``."""

    def __init__(self, output_dir: Path, *, filename: str = ORDERED_ITEMS_FILENAME) -> None:
        self.output_dir = Path(output_dir)
        self.filename = filename

    @property
    def output_path(self) -> Path:
        return self.output_dir / self.filename

    def write(self, items: Sequence[AggregatedItem]) -> Path:
        path = write_json_atomic(self.output_path, [item.to_json() for item in items])
        LOGGER.info("Saved %d ordered items to %s", len(items), path)
        return path


__all__ = ["OrderedItemsWriter", "write_json_atomic"]
