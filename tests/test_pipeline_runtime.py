from __future__ import annotations

import json
from pathlib import Path

import pytest

from currikit.pipeline import STAGES, PipelineStageError, bootstrap_pipeline, run_pipeline
from currikit.pipeline.bootstrap import CURRICULUM_DIR_ENV, LOG_LEVEL_ENV


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(CURRICULUM_DIR_ENV, raising=False)
    monkeypatch.delenv(LOG_LEVEL_ENV, raising=False)


def test_bootstrap_defaults_to_curriculum_under_repo_root(tmp_path: Path) -> None:
    ctx = bootstrap_pipeline(repo_root=tmp_path)

    assert ctx.config.paths.curriculum_dir == tmp_path.resolve() / "curriculum"
    assert ctx.paths.logs_dir == tmp_path.resolve() / "curriculum" / "logs"
    assert ctx.paths.logs_dir.is_dir()
    events = ctx.provenance.read()
    assert [event.stage for event in events] == ["bootstrap"]


def test_bootstrap_honours_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(CURRICULUM_DIR_ENV, "elsewhere")
    monkeypatch.setenv(LOG_LEVEL_ENV, "warning")

    ctx = bootstrap_pipeline(repo_root=tmp_path)

    assert ctx.config.paths.curriculum_dir == tmp_path.resolve() / "elsewhere"
    assert ctx.config.log_level == "WARNING"
    assert ctx.env[CURRICULUM_DIR_ENV] == "elsewhere"


def test_bootstrap_reads_config_file(tmp_path: Path) -> None:
    config_path = tmp_path / "configs" / "pipeline.yaml"
    config_path.parent.mkdir()
    config_path.write_text("curriculum_dir: ../data\nordering:\n  default_module: misc\n", encoding="utf-8")

    ctx = bootstrap_pipeline(Path("configs/pipeline.yaml"), repo_root=tmp_path, output_dir=Path("build"))

    assert ctx.config.paths.curriculum_dir == tmp_path.resolve() / "data"
    assert ctx.config.paths.output_dir == tmp_path.resolve() / "build"
    assert ctx.config.ordering.default_module == "misc"


def test_bootstrap_rejects_bad_log_level(tmp_path: Path) -> None:
    with pytest.raises(ValueError):
        bootstrap_pipeline(repo_root=tmp_path, log_level="chatty")


def test_run_pipeline_end_to_end(tmp_path: Path, curriculum_dir: Path) -> None:
    ctx = bootstrap_pipeline(repo_root=tmp_path, curriculum_dir=curriculum_dir)

    artifacts = run_pipeline(ctx)

    assert artifacts.completed == list(STAGES)
    assert artifacts.metadata.stats.total_items == 3
    assert len(artifacts.graph.edges) == 1
    ordered = json.loads((curriculum_dir / "ordered-items.json").read_text(encoding="utf-8"))
    assert [item["id"] for item in ordered] == ["x3", "x1", "x2"]
    assert (curriculum_dir / "metadata.json").exists()
    assert (curriculum_dir / "graphs.json").exists()

    events = [(event.stage, event.status) for event in ctx.provenance.read()]
    assert events == [
        ("bootstrap", "completed"),
        ("extract", "started"),
        ("extract", "completed"),
        ("build-graph", "started"),
        ("build-graph", "completed"),
        ("order", "started"),
        ("order", "completed"),
    ]


def test_order_stage_alone_is_degraded_without_metadata(tmp_path: Path, curriculum_dir: Path) -> None:
    ctx = bootstrap_pipeline(repo_root=tmp_path, curriculum_dir=curriculum_dir)

    artifacts = run_pipeline(ctx, stages=["order"])

    assert artifacts.completed == ["order"]
    assert artifacts.ordering.degraded
    assert len(artifacts.ordering.warnings) == 3
    last = ctx.provenance.read()[-1]
    assert last.status == "degraded"
    assert len(last.payload["defaulted_items"]) == 3


def test_failed_stage_is_recorded(tmp_path: Path, curriculum_dir: Path) -> None:
    (curriculum_dir / "database.json").unlink()
    ctx = bootstrap_pipeline(repo_root=tmp_path, curriculum_dir=curriculum_dir)

    with pytest.raises(PipelineStageError) as excinfo:
        run_pipeline(ctx)

    assert excinfo.value.stage == "extract"
    assert isinstance(excinfo.value.__cause__, FileNotFoundError)
    last = ctx.provenance.read()[-1]
    assert (last.stage, last.status) == ("extract", "failed")
    assert last.payload["error_type"] == "InputNotFoundError"
    assert not (curriculum_dir / "ordered-items.json").exists()


def test_unknown_stage_rejected(tmp_path: Path) -> None:
    ctx = bootstrap_pipeline(repo_root=tmp_path)

    with pytest.raises(ValueError):
        run_pipeline(ctx, stages=["extract", "publish"])
