"""Typed records exchanged between the curriculum pipeline stages.

JSON artifacts use camelCase keys (``moduleId``, ``interviewRelevance``); the
models expose snake_case attributes and accept either spelling on input.
"""

from __future__ import annotations

from typing import Any, ClassVar, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, field_validator
from pydantic.alias_generators import to_camel

from currikit.utils.fields import list_field, unique_in_order

LearningPath = Literal["beginner", "intermediate", "advanced", "expert"]
ContentKind = Literal["theory", "question", "task"]
Score = Union[int, float]
Identifier = Union[str, int]

_LEARNING_PATHS = ("beginner", "intermediate", "advanced", "expert")


def _coerce_identifier(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, str):
        return value.strip() or None
    return value


def _coerce_score(value: Any) -> Optional[Score]:
    """Keep numeric scores, drop anything that cannot be read as a number."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            number = float(text)
        except ValueError:
            return None
        return int(number) if number.is_integer() else number
    return None


def _coerce_text(value: Any) -> Optional[str]:
    """Read a display field leniently; scalars become strings, structures are dropped."""
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, (bool, int, float)):
        return str(value)
    return None


def _coerce_learning_path(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    normalized = value.strip().lower()
    return normalized if normalized in _LEARNING_PATHS else None


class _ContentFields(BaseModel):
    """Metadata-relevant fields shared by raw items and metadata records."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    complexity: Optional[Score] = None
    learning_path: Optional[LearningPath] = None
    prerequisites: List[str] = Field(default_factory=list)

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, value: Any) -> Any:
        return _coerce_identifier(value)

    @field_validator("tags", mode="before")
    @classmethod
    def coerce_tags(cls, value: Any) -> List[str]:
        return list_field(value)

    @field_validator("prerequisites", mode="before")
    @classmethod
    def coerce_prerequisites(cls, value: Any) -> List[str]:
        return unique_in_order(list_field(value))

    @field_validator("complexity", mode="before")
    @classmethod
    def coerce_complexity(cls, value: Any) -> Optional[Score]:
        return _coerce_score(value)

    @field_validator("learning_path", mode="before")
    @classmethod
    def coerce_learning_path(cls, value: Any) -> Optional[str]:
        return _coerce_learning_path(value)


# ---------------------------------------------------------------------------
# Raw content pool


class ContentItem(_ContentFields):
    """One authored item in the raw pool. Payload fields are kept as extras."""

    model_config = ConfigDict(extra="allow")

    kind: ClassVar[ContentKind]
    section: ClassVar[str]

    irrelevant: bool = False

    @field_validator("irrelevant", mode="before")
    @classmethod
    def only_literal_true(cls, value: Any) -> bool:
        # Only an explicit JSON ``true`` marks an item irrelevant.
        return value is True

    def project(self, *, original_index: int, container_index: int, item_index: int) -> "MetadataRecord":
        """Project the ordering-relevant fields into a metadata record."""
        return MetadataRecord(
            id=self.id,
            type=self.kind,
            tags=list(self.tags),
            complexity=self.complexity,
            learning_path=self.learning_path,
            prerequisites=list(self.prerequisites),
            original_index=original_index,
            container_index=container_index,
            item_index=item_index,
            **self._variant_fields(),
        )

    def _variant_fields(self) -> Dict[str, Any]:
        return {}


class TheoryItem(ContentItem):
    kind: ClassVar[ContentKind] = "theory"
    section: ClassVar[str] = "theory"

    title: Optional[str] = None
    interview_relevance: Optional[Score] = None
    related_questions: List[str] = Field(default_factory=list)
    related_tasks: List[str] = Field(default_factory=list)
    required_for: List[str] = Field(default_factory=list)
    technology: Any = None

    @field_validator("title", mode="before")
    @classmethod
    def coerce_title(cls, value: Any) -> Optional[str]:
        return _coerce_text(value)

    @field_validator("related_questions", "related_tasks", "required_for", mode="before")
    @classmethod
    def coerce_links(cls, value: Any) -> List[str]:
        return list_field(value)

    @field_validator("interview_relevance", mode="before")
    @classmethod
    def coerce_relevance(cls, value: Any) -> Optional[Score]:
        return _coerce_score(value)

    def _variant_fields(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "interview_relevance": self.interview_relevance,
            "related_questions": list(self.related_questions),
            "related_tasks": list(self.related_tasks),
            "required_for": list(self.required_for),
            "technology": self.technology,
        }


class QuestionItem(ContentItem):
    kind: ClassVar[ContentKind] = "question"
    section: ClassVar[str] = "questions"

    topic: Optional[str] = None
    level: Any = None
    question_type: Optional[str] = Field(default=None, alias="type")
    interview_frequency: Optional[Score] = None
    analysis_points: List[Any] = Field(default_factory=list)
    key_concepts: List[Any] = Field(default_factory=list)
    evaluation_criteria: List[Any] = Field(default_factory=list)

    @field_validator("topic", "question_type", mode="before")
    @classmethod
    def coerce_text(cls, value: Any) -> Optional[str]:
        return _coerce_text(value)

    @field_validator("analysis_points", "key_concepts", "evaluation_criteria", mode="before")
    @classmethod
    def coerce_lists(cls, value: Any) -> List[Any]:
        if value is None:
            return []
        return list(value) if isinstance(value, (list, tuple)) else [value]

    @field_validator("interview_frequency", mode="before")
    @classmethod
    def coerce_frequency(cls, value: Any) -> Optional[Score]:
        return _coerce_score(value)

    def _variant_fields(self) -> Dict[str, Any]:
        return {
            "topic": self.topic,
            "level": self.level,
            "question_type": self.question_type,
            "interview_frequency": self.interview_frequency,
            "analysis_points": list(self.analysis_points),
            "key_concepts": list(self.key_concepts),
            "evaluation_criteria": list(self.evaluation_criteria),
        }


class TaskItem(ContentItem):
    kind: ClassVar[ContentKind] = "task"
    section: ClassVar[str] = "tasks"

    title: Optional[str] = None
    difficulty: Any = None
    interview_relevance: Optional[Score] = None
    related_concepts: List[str] = Field(default_factory=list)

    @field_validator("title", mode="before")
    @classmethod
    def coerce_title(cls, value: Any) -> Optional[str]:
        return _coerce_text(value)

    @field_validator("related_concepts", mode="before")
    @classmethod
    def coerce_concepts(cls, value: Any) -> List[str]:
        return list_field(value)

    @field_validator("interview_relevance", mode="before")
    @classmethod
    def coerce_relevance(cls, value: Any) -> Optional[Score]:
        return _coerce_score(value)

    def _variant_fields(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "difficulty": self.difficulty,
            "interview_relevance": self.interview_relevance,
            "related_concepts": list(self.related_concepts),
        }


CONTENT_VARIANTS: tuple[type[ContentItem], ...] = (TheoryItem, QuestionItem, TaskItem)


# ---------------------------------------------------------------------------
# Metadata store


class MetadataRecord(_ContentFields):
    """Ordering-relevant projection of one non-irrelevant content item."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    type: Optional[ContentKind] = None
    original_index: Optional[int] = Field(default=None, ge=0)
    container_index: Optional[int] = None
    item_index: Optional[int] = None
    title: Optional[str] = None
    interview_relevance: Optional[Score] = None
    interview_frequency: Optional[Score] = None
    # theory
    related_questions: Optional[List[str]] = None
    related_tasks: Optional[List[str]] = None
    required_for: Optional[List[str]] = None
    technology: Any = None
    # question
    topic: Optional[str] = None
    level: Any = None
    question_type: Optional[str] = None
    analysis_points: Optional[List[Any]] = None
    key_concepts: Optional[List[Any]] = None
    evaluation_criteria: Optional[List[Any]] = None
    # task
    difficulty: Any = None
    related_concepts: Optional[List[str]] = None

    @field_validator("interview_relevance", "interview_frequency", mode="before")
    @classmethod
    def coerce_scores(cls, value: Any) -> Optional[Score]:
        return _coerce_score(value)

    @field_validator("title", "topic", "question_type", mode="before")
    @classmethod
    def coerce_text(cls, value: Any) -> Optional[str]:
        return _coerce_text(value)

    def to_json(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class ExtractionStats(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    theory_items: int = 0
    question_items: int = 0
    task_items: int = 0
    total_items: int = 0

    def count(self, kind: ContentKind) -> None:
        if kind == "theory":
            self.theory_items += 1
        elif kind == "question":
            self.question_items += 1
        else:
            self.task_items += 1
        self.total_items += 1


class MetadataStore(BaseModel):
    """Output of metadata extraction."""

    items: List[MetadataRecord] = Field(default_factory=list)
    stats: ExtractionStats = Field(default_factory=ExtractionStats)

    def to_json(self) -> Dict[str, Any]:
        return {
            "items": [record.to_json() for record in self.items],
            "stats": self.stats.model_dump(by_alias=True),
        }


# ---------------------------------------------------------------------------
# Ordering


class AggregatedItem(BaseModel):
    """An item already assigned to a module, as produced by clustering.

    Unknown keys are preserved; ``to_json`` returns the source mapping
    unchanged when the item was loaded from disk.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    index: int
    id: Optional[Identifier] = None
    module_id: Optional[Identifier] = Field(default=None, alias="moduleId")
    complexity: Optional[Score] = None

    _source: Optional[Dict[str, Any]] = PrivateAttr(default=None)

    @classmethod
    def from_source(cls, raw: Dict[str, Any]) -> "AggregatedItem":
        item = cls.model_validate(raw)
        item._source = dict(raw)
        return item

    @property
    def key(self) -> Optional[str]:
        """Identifier used for metadata and graph lookups, if any."""
        return _coerce_identifier(self.id)

    @property
    def module_key(self) -> Optional[str]:
        return _coerce_identifier(self.module_id)

    def to_json(self) -> Dict[str, Any]:
        if self._source is not None:
            return dict(self._source)
        return self.model_dump(mode="json", by_alias=True, exclude_unset=True)


class ModuleGroup(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    module_id: str = Field(..., alias="moduleId")
    items: List[AggregatedItem] = Field(default_factory=list)


class DataIntegrityWarning(BaseModel):
    """An item that was ordered with default values instead of its metadata."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    index: int
    id: Optional[str] = None
    module_id: str
    reason: Literal["missing_id", "missing_metadata"]

    @property
    def message(self) -> str:
        if self.reason == "missing_id":
            return f"item at index {self.index} in module {self.module_id} has no id; using default metadata"
        return f"no metadata for item {self.id} (index {self.index}); using default metadata"


class ModuleSummary(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    module_id: str
    item_count: int
    resolved_count: int
    unresolved: List[Optional[str]] = Field(default_factory=list)


class OrderingResult(BaseModel):
    """Outcome of ``RuleBasedOrderer.order``."""

    items: List[AggregatedItem] = Field(default_factory=list)
    modules: List[ModuleSummary] = Field(default_factory=list)
    warnings: List[DataIntegrityWarning] = Field(default_factory=list)
    output_path: Optional[str] = None

    @property
    def degraded(self) -> bool:
        return bool(self.warnings) or any(module.unresolved for module in self.modules)


__all__ = [
    "AggregatedItem",
    "CONTENT_VARIANTS",
    "ContentItem",
    "DataIntegrityWarning",
    "ExtractionStats",
    "MetadataRecord",
    "MetadataStore",
    "ModuleGroup",
    "ModuleSummary",
    "OrderingResult",
    "QuestionItem",
    "TaskItem",
    "TheoryItem",
]
