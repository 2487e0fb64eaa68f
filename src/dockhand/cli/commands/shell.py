#!/usr/bin/env python3
"""
Shell command for dockhand CLI
"""

from typing import Annotated, Optional

import typer

from dockhand.core.errors import DockhandError

from ..utils import exit_with_error, prepare


def shell(
    image: Annotated[str, typer.Argument(help="Image to open a shell in")],
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
    🐚 Open an interactive shell in a throwaway container.
    """
    docker, running, _ = prepare(config_file, verbose, engine=engine)
    try:
        docker.spawn_shell(image, running)
    except DockhandError as e:
        exit_with_error(e, running, "shell")
