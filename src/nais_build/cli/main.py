"""Main CLI entry point for nb."""

from dataclasses import dataclass
from importlib import metadata
from typing import Optional

import typer
from rich.console import Console

from ..logger import enable_debug_logging

console = Console(stderr=True)


def get_version() -> str:
    """Get the package version from metadata."""
    try:
        return metadata.version("nais-build")
    except metadata.PackageNotFoundError:
        return "unknown"


@dataclass
class GlobalOptions:
    """Options shared by every pipeline command."""

    source_directory: str = "."
    config: Optional[str] = None
    image: Optional[str] = None


# command: nb
app = typer.Typer(
    name="nb",
    help="NAIS build - build, release and deploy your application",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

# command: nb <command>


@app.command("dockerfile")
def dockerfile_cmd(ctx: typer.Context):
    """Detect build parameters and print your Dockerfile."""
    from .commands.pipeline import dockerfile_command

    return dockerfile_command(ctx.obj)


@app.command("build")
def build_cmd(ctx: typer.Context):
    """Build your project into a Docker image."""
    from .commands.pipeline import build_command

    return build_command(ctx.obj)


@app.command("release")
def release_cmd(ctx: typer.Context):
    """Build and push the Docker image to the registry."""
    from .commands.pipeline import release_command

    return release_command(ctx.obj)


@app.command("deploy")
def deploy_cmd(
    ctx: typer.Context,
    cluster: str = typer.Argument(..., help="Cluster to deploy to, e.g. dev-gcp"),
    no_wait: bool = typer.Option(
        False, "--no-wait", help="Do not wait for the deployment to complete"
    ),
):
    """Build, release and deploy your application to a cluster."""
    from .commands.pipeline import deploy_command

    return deploy_command(ctx.obj, cluster, wait=not no_wait)


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    source_directory: str = typer.Option(
        ".", "--source-directory", "-s", help="Root of the source code tree"
    ),
    config: Optional[str] = typer.Option(
        None, "--config", "-c", help="Path to the NAIS build configuration file"
    ),
    image: Optional[str] = typer.Option(
        None,
        "--image",
        help="Use this prebuilt image instead of building one",
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging"),
    version: bool = typer.Option(False, "--version", "-v", help="Show version"),
):
    """NAIS build - build, release and deploy your application."""
    if version:
        console.print(f"NAIS build v{get_version()}")
        raise typer.Exit()

    if verbose:
        enable_debug_logging()

    ctx.obj = GlobalOptions(
        source_directory=source_directory, config=config, image=image
    )


if __name__ == "__main__":
    app()
