"""Command-line entry point for the curriculum ordering pipeline."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Sequence

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from currikit import get_version
from currikit.pipeline import (
    STAGES,
    PipelineContext,
    PipelineRunArtifacts,
    PipelineStageError,
    bootstrap_pipeline,
    run_pipeline,
)

app = typer.Typer(help="Extract metadata, build the prerequisite graph and order the curriculum.")
console = Console()

ConfigOption = typer.Option(None, "--config", "-c", help="Pipeline YAML (optional).")
RepoRootOption = typer.Option(None, "--repo-root", help="Anchor for relative paths and .env (default: cwd).")
CurriculumDirOption = typer.Option(
    None, "--curriculum-dir", help="Directory holding database.json, metadata.json, graphs.json, ..."
)
OutputDirOption = typer.Option(None, "--output-dir", help="Directory receiving ordered-items.json.")
LogLevelOption = typer.Option(None, "--log-level", help="DEBUG, INFO, WARNING or ERROR.")


def _bootstrap(
    config: Optional[Path],
    repo_root: Optional[Path],
    curriculum_dir: Optional[Path],
    output_dir: Optional[Path],
    log_level: Optional[str],
) -> PipelineContext:
    try:
        ctx = bootstrap_pipeline(
            config,
            repo_root=repo_root,
            curriculum_dir=curriculum_dir,
            output_dir=output_dir,
            log_level=log_level,
        )
    except (FileNotFoundError, ValueError) as exc:
        console.print(f"[bold red]configuration error:[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=2) from exc
    logging.basicConfig(
        level=getattr(logging, ctx.config.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    return ctx


def _execute(ctx: PipelineContext, stages: Sequence[str]) -> PipelineRunArtifacts:
    try:
        return run_pipeline(ctx, stages=stages)
    except PipelineStageError as exc:
        console.print(f"[bold red]{exc.stage} failed:[/bold red] {escape(str(exc.error))}")
        raise typer.Exit(code=1) from exc


def _print_summary(artifacts: PipelineRunArtifacts) -> None:
    table = Table(title="Curriculum Pipeline", show_header=True)
    table.add_column("Stage")
    table.add_column("Result")

    if artifacts.metadata is not None:
        stats = artifacts.metadata.stats
        table.add_row(
            "extract",
            f"{stats.total_items} items ({stats.theory_items} theory, "
            f"{stats.question_items} questions, {stats.task_items} tasks)",
        )
    if artifacts.graph is not None:
        table.add_row("build-graph", f"{len(artifacts.graph.nodes)} nodes, {len(artifacts.graph.edges)} edges")
    if artifacts.ordering is not None:
        ordering = artifacts.ordering
        table.add_row("order", f"{len(ordering.items)} items in {len(ordering.modules)} modules")
        if ordering.warnings:
            table.add_row("defaults", f"{len(ordering.warnings)} items ordered with default metadata", style="yellow")
        unresolved = sum(len(module.unresolved) for module in ordering.modules)
        if unresolved:
            table.add_row("unresolved", f"{unresolved} items appended after prerequisite order", style="yellow")
        table.add_row("output", escape(str(ordering.output_path)))
    console.print(table)


@app.command()
def extract(
    config: Optional[Path] = ConfigOption,
    repo_root: Optional[Path] = RepoRootOption,
    curriculum_dir: Optional[Path] = CurriculumDirOption,
    log_level: Optional[str] = LogLevelOption,
) -> None:
    """Write metadata.json from the raw content pool."""
    ctx = _bootstrap(config, repo_root, curriculum_dir, None, log_level)
    _print_summary(_execute(ctx, ["extract"]))


@app.command("build-graph")
def build_graph(
    config: Optional[Path] = ConfigOption,
    repo_root: Optional[Path] = RepoRootOption,
    curriculum_dir: Optional[Path] = CurriculumDirOption,
    log_level: Optional[str] = LogLevelOption,
) -> None:
    """Write graphs.json from the metadata store."""
    ctx = _bootstrap(config, repo_root, curriculum_dir, None, log_level)
    _print_summary(_execute(ctx, ["build-graph"]))


@app.command()
def order(
    config: Optional[Path] = ConfigOption,
    repo_root: Optional[Path] = RepoRootOption,
    curriculum_dir: Optional[Path] = CurriculumDirOption,
    output_dir: Optional[Path] = OutputDirOption,
    log_level: Optional[str] = LogLevelOption,
) -> None:
    """Order aggregated-items.json module by module."""
    ctx = _bootstrap(config, repo_root, curriculum_dir, output_dir, log_level)
    _print_summary(_execute(ctx, ["order"]))


@app.command()
def run(
    config: Optional[Path] = ConfigOption,
    repo_root: Optional[Path] = RepoRootOption,
    curriculum_dir: Optional[Path] = CurriculumDirOption,
    output_dir: Optional[Path] = OutputDirOption,
    log_level: Optional[str] = LogLevelOption,
    skip_graph: bool = typer.Option(False, "--skip-graph", help="Keep an existing graphs.json."),
) -> None:
    """Run extraction, graph building and ordering in sequence."""
    ctx = _bootstrap(config, repo_root, curriculum_dir, output_dir, log_level)
    stages = [stage for stage in STAGES if not (skip_graph and stage == "build-graph")]
    _print_summary(_execute(ctx, stages))


@app.command()
def version() -> None:
    """Print the installed version."""
    console.print(get_version())


if __name__ == "__main__":
    app()
