"""nb pipeline commands - dockerfile, build, release and deploy."""

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from ...config import load_settings
from ...exceptions import NaisBuildError
from ...pipeline import Pipeline, Stage

log = logging.getLogger(__name__)

console = Console(stderr=True)


def _prepare(options, stage: Stage, wait: bool = True) -> Pipeline:
    source_directory = Path(options.source_directory)
    settings = load_settings(options.config, source_directory)
    return Pipeline.prepare(
        settings,
        source_directory,
        stage,
        image_override=options.image,
        wait=wait,
    )


def run_stage(
    options, stage: Stage, cluster: Optional[str] = None, wait: bool = True
) -> Optional[str]:
    """
    Prepare and run the pipeline up to the given stage.

    Every reported error is rendered as a single message and exits with
    status 1.
    """
    try:
        pipeline = _prepare(options, stage, wait)
        result = pipeline.run(stage, cluster=cluster)
    except KeyboardInterrupt:
        console.print("\n[yellow]Cancelled by user[/yellow]")
        raise typer.Exit(1)
    except NaisBuildError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    _display_summary(pipeline, stage, cluster)
    return result


def dockerfile_command(options):
    """Print the generated Dockerfile on stdout."""
    dockerfile = run_stage(options, Stage.DOCKERFILE)
    typer.echo(dockerfile)


def build_command(options):
    run_stage(options, Stage.BUILD)


def release_command(options):
    run_stage(options, Stage.RELEASE)


def deploy_command(options, cluster: str, wait: bool = True):
    run_stage(options, Stage.DEPLOY, cluster=cluster, wait=wait)


def _display_summary(pipeline: Pipeline, stage: Stage, cluster: Optional[str]):
    if stage == Stage.DOCKERFILE:
        console.print(f"Will be built as: {escape(pipeline.image_name)}")
        return

    done = {
        Stage.BUILD: "built",
        Stage.RELEASE: "released",
        Stage.DEPLOY: f"deployed to {cluster}",
    }[stage]
    console.print(
        Panel(
            f"[bold]{escape(pipeline.image_name)}[/bold] {escape(done)}",
            title="✓ Complete",
            expand=False,
            border_style="green",
        )
    )
