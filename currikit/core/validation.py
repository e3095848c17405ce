"""Error taxonomy and JSON input validation for the curriculum pipeline."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Optional, Tuple, Type

LOGGER = logging.getLogger(__name__)


class InputNotFoundError(FileNotFoundError):
    """Raised when a required input artifact does not exist."""

    def __init__(self, path: Path | str, *, stage: str) -> None:
        self.path = Path(path)
        self.stage = stage
        super().__init__(f"[{stage}] input file not found: {self.path}")


class InputParseError(ValueError):
    """Raised when an input artifact is not valid JSON or has the wrong shape."""

    def __init__(self, path: Path | str, detail: str, *, stage: str) -> None:
        self.path = Path(path)
        self.stage = stage
        self.detail = detail
        super().__init__(f"[{stage}] cannot parse {self.path}: {detail}")


@dataclass
class ValidationResult:
    """Result of inspecting an optional input."""

    valid: bool
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    data: Any = None

    @property
    def has_warnings(self) -> bool:
        return len(self.warnings) > 0


def _describe(expected: Type[Any] | Tuple[Type[Any], ...]) -> str:
    if isinstance(expected, tuple):
        return " or ".join(kind.__name__ for kind in expected)
    return expected.__name__


def load_json_file(
    path: Path | str,
    *,
    stage: str,
    expected: Optional[Type[Any] | Tuple[Type[Any], ...]] = None,
) -> Any:
    """Load a mandatory JSON artifact.

    Raises ``InputNotFoundError`` when the file is absent and ``InputParseError``
    when it is not UTF-8, empty or not valid JSON, or when its root is not of
    the ``expected`` type.
    """
    path_obj = Path(path)
    if not path_obj.is_file():
        raise InputNotFoundError(path_obj, stage=stage)

    try:
        content = path_obj.read_text(encoding="utf-8-sig")
    except UnicodeDecodeError as exc:
        raise InputParseError(path_obj, f"not valid UTF-8 ({exc})", stage=stage) from exc
    if not content.strip():
        raise InputParseError(path_obj, "file is empty", stage=stage)
    try:
        data = json.loads(content)
    except json.JSONDecodeError as exc:
        raise InputParseError(path_obj, f"invalid JSON ({exc})", stage=stage) from exc

    if expected is not None and not isinstance(data, expected):
        raise InputParseError(
            path_obj,
            f"expected {_describe(expected)} at the root, got {type(data).__name__}",
            stage=stage,
        )
    LOGGER.debug("%s: loaded JSON from %s", stage, path_obj)
    return data


def inspect_json_file(
    path: Path | str,
    *,
    stage: str,
    expected: Optional[Type[Any] | Tuple[Type[Any], ...]] = None,
) -> ValidationResult:
    """Load an optional JSON artifact without raising.

    Absence is reported as a warning, unreadable content as an error. Callers
    decide which default to fall back to.
    """
    try:
        data = load_json_file(path, stage=stage, expected=expected)
    except InputNotFoundError as exc:
        return ValidationResult(valid=False, warnings=[str(exc)])
    except InputParseError as exc:
        return ValidationResult(valid=False, errors=[str(exc)])
    return ValidationResult(valid=True, data=data)


__all__ = [
    "InputNotFoundError",
    "InputParseError",
    "ValidationResult",
    "inspect_json_file",
    "load_json_file",
]
