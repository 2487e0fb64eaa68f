#!/usr/bin/env python3
"""
Run command for dockhand CLI
"""

from typing import Annotated, List, Optional

import typer
from rich.panel import Panel

from dockhand.core.errors import DockhandError
from dockhand.execution.container_runner import ContainerRunner

from ..constants import (
    ExitCode,
    DEFAULT_DESTINATION_DIR,
    DEFAULT_LOCATION,
    DEFAULT_SOURCE_DIR,
)
from ..utils import console, exit_with_error, prepare


def run(
    image: Annotated[str, typer.Argument(help="Image to run the command in")],
    command: Annotated[str, typer.Argument(help="Shell command to run in the container")],
    input_paths: Annotated[
        List[str],
        typer.Option("--input", "-i", help="Host path to copy into the container (can specify multiple)"),
    ] = [],
    output_paths: Annotated[
        List[str],
        typer.Option("--output", "-o", help="Container path to copy back to the host (can specify multiple)"),
    ] = [],
    location: Annotated[
        Optional[str],
        typer.Option("--location", help=f"Working directory inside the container [default: {DEFAULT_LOCATION}]"),
    ] = None,
    source_dir: Annotated[
        str, typer.Option("--source-dir", help="Host directory input paths are relative to")
    ] = DEFAULT_SOURCE_DIR,
    destination_dir: Annotated[
        str, typer.Option("--destination-dir", help="Host directory outputs are copied to")
    ] = DEFAULT_DESTINATION_DIR,
    commit: Annotated[
        Optional[str],
        typer.Option("--commit", help="Commit the container to this image on success"),
    ] = None,
    no_pull: Annotated[
        bool, typer.Option("--no-pull", help="Fail instead of pulling a missing image")
    ] = False,
    shell: Annotated[
        bool, typer.Option("--shell", help="Open a shell in the container after the command")
    ] = False,
    engine: Annotated[
        Optional[str], typer.Option("--engine", help="Container engine binary")
    ] = None,
    config_file: Annotated[
        Optional[str], typer.Option("--config", help="Settings file (JSON or YAML)")
    ] = None,
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Enable verbose logging")
    ] = False,
) -> None:
    """
    🚀 Run a command in a throwaway container.

    Inputs are copied into the container's working location before the command
    runs and outputs are copied back afterwards. The container is always
    removed at the end.

    Examples:
        dockhand run alpine 'make' -i src -i Makefile -o build
        dockhand run alpine 'make install' --commit myimage:built
    """
    docker, running, settings = prepare(
        config_file, verbose, engine=engine, location=location
    )

    console.print(
        Panel(
            f"🚀 [bold cyan]Running in {image}[/bold cyan]\n"
            f"Location: [yellow]{settings.location}[/yellow]\n"
            f"Inputs: [yellow]{', '.join(input_paths) or 'none'}[/yellow]\n"
            f"Outputs: [yellow]{', '.join(output_paths) or 'none'}[/yellow]",
            title="Container Run",
            border_style="blue",
        )
    )

    runner = ContainerRunner(docker, running, location=settings.location)
    try:
        result = runner.run(
            image,
            command,
            input_paths=list(input_paths),
            output_paths=list(output_paths),
            source_dir=source_dir,
            destination_dir=destination_dir,
            commit=commit,
            pull=not no_pull,
            shell=shell,
        )
    except DockhandError as e:
        exit_with_error(e, running, "run", ExitCode.RUN_FAILURE)

    if result.copied:
        console.print(f"📦 Copied [cyan]{', '.join(result.copied)}[/cyan] to [cyan]{destination_dir}[/cyan]")
    if result.image:
        console.print(f"💾 Committed container to [cyan]{result.image}[/cyan]")
    console.print("🎉 [bold green]Run completed successfully![/bold green]")
