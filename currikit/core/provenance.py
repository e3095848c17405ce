"""Append-only JSONL record of pipeline stage activity."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Literal

from pydantic import BaseModel, Field


class ProvenanceEvent(BaseModel):
    """One stage transition of a pipeline run."""

    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    stage: str = Field(..., description="Pipeline stage, e.g. 'extract' or 'order'.")
    status: Literal["started", "completed", "failed", "degraded"] = "completed"
    message: str = Field(..., description="Human-readable description of the event.")
    payload: Dict[str, Any] = Field(default_factory=dict)


class ProvenanceLogger:
    """Writes ``ProvenanceEvent`` records, one JSON document per line."""

    def __init__(self, output_path: Path):
        self.output_path = output_path
        self.output_path.parent.mkdir(parents=True, exist_ok=True)

    def log(self, event: ProvenanceEvent | Dict[str, Any]) -> ProvenanceEvent:
        """Write a single event to disk and return the normalized object."""
        if not isinstance(event, ProvenanceEvent):
            event = ProvenanceEvent(**event)
        with self.output_path.open("a", encoding="utf-8") as handle:
            handle.write(event.model_dump_json() + "\n")
        return event

    def extend(self, events: Iterable[ProvenanceEvent | Dict[str, Any]]) -> None:
        for event in events:
            self.log(event)

    def read(self) -> List[ProvenanceEvent]:
        """Return every event recorded so far."""
        if not self.output_path.exists():
            return []
        lines = self.output_path.read_text(encoding="utf-8").splitlines()
        return [ProvenanceEvent.model_validate_json(line) for line in lines if line.strip()]


__all__ = ["ProvenanceEvent", "ProvenanceLogger"]
