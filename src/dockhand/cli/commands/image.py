#!/usr/bin/env python3
"""
Image commands for dockhand CLI

This module provides commands to check, pull, push, and delete images, and
to generate fresh image tags.
"""

from typing import Annotated, Optional

import typer

from dockhand.core.docker import random_tag
from dockhand.core.errors import DockhandError

from ..constants import ExitCode
from ..utils import console, exit_with_error, prepare


# Create a sub-app for image commands
image_app = typer.Typer(
    name="image",
    help="🖼️  Manage images",
    rich_markup_mode="rich",
    no_args_is_help=True,
)

ImageArgument = Annotated[str, typer.Argument(help="Image reference")]
EngineOption = Annotated[
    Optional[str], typer.Option("--engine", help="Container engine binary")
]
ConfigOption = Annotated[
    Optional[str], typer.Option("--config", help="Settings file (JSON or YAML)")
]
VerboseOption = Annotated[
    bool, typer.Option("--verbose", "-v", help="Enable verbose logging")
]


@image_app.command("exists")
def exists(
    image: ImageArgument,
    engine: EngineOption = None,
    config_file: ConfigOption = None,
    verbose: VerboseOption = False,
) -> None:
    """
    🔍 Check whether an image exists locally. Exits 1 if it does not.
    """
    docker, running, _ = prepare(config_file, verbose, engine=engine)
    try:
        found = docker.image_exists(image, running)
    except DockhandError as e:
        exit_with_error(e, running, "image exists")

    if found:
        console.print(f"✅ Image [cyan]{image}[/cyan] exists")
    else:
        console.print(f"❌ Image [cyan]{image}[/cyan] does not exist")
        raise typer.Exit(ExitCode.FAILURE)


@image_app.command("pull")
def pull(
    image: ImageArgument,
    engine: EngineOption = None,
    config_file: ConfigOption = None,
    verbose: VerboseOption = False,
) -> None:
    """
    ⬇️  Pull an image.
    """
    docker, running, _ = prepare(config_file, verbose, engine=engine)
    try:
        docker.pull_image(image, running)
    except DockhandError as e:
        exit_with_error(e, running, "image pull")
    console.print(f"✅ Pulled [cyan]{image}[/cyan]")


@image_app.command("push")
def push(
    image: ImageArgument,
    engine: EngineOption = None,
    config_file: ConfigOption = None,
    verbose: VerboseOption = False,
) -> None:
    """
    ⬆️  Push an image.
    """
    docker, running, _ = prepare(config_file, verbose, engine=engine)
    try:
        docker.push_image(image, running)
    except DockhandError as e:
        exit_with_error(e, running, "image push")
    console.print(f"✅ Pushed [cyan]{image}[/cyan]")


@image_app.command("rm")
def rm(
    image: ImageArgument,
    engine: EngineOption = None,
    config_file: ConfigOption = None,
    verbose: VerboseOption = False,
) -> None:
    """
    🗑️  Delete an image.
    """
    docker, running, _ = prepare(config_file, verbose, engine=engine)
    try:
        docker.delete_image(image, running)
    except DockhandError as e:
        exit_with_error(e, running, "image rm")
    console.print(f"✅ Deleted [cyan]{image}[/cyan]")


def tag() -> None:
    """
    🏷️  Print a fresh random image tag.
    """
    console.print(random_tag(), highlight=False)
