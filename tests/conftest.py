from __future__ import annotations

from pathlib import Path

import pytest

from tests.helpers import write_json


@pytest.fixture
def curriculum_dir(tmp_path: Path) -> Path:
    """A raw pool plus aggregated items for the ``css_beginner`` module."""
    target = tmp_path / "curriculum"
    write_json(
        target / "database.json",
        [
            {
                "content": {
                    "theory": [
                        {"id": "x1", "title": "Selectors", "complexity": 3, "tags": ["css"]},
                        {
                            "id": "x2",
                            "title": "Specificity",
                            "complexity": 2,
                            "prerequisites": ["x1"],
                            "tags": ["css"],
                        },
                    ],
                    "tasks": [{"id": "x3", "title": "Style a button", "complexity": 1}],
                }
            }
        ],
    )
    write_json(
        target / "aggregated-items.json",
        [
            {"index": 0, "id": "x1", "moduleId": "css_beginner", "title": "Selectors"},
            {"index": 1, "id": "x2", "moduleId": "css_beginner", "title": "Specificity"},
            {"index": 2, "id": "x3", "moduleId": "css_beginner", "title": "Style a button"},
        ],
    )
    return target
