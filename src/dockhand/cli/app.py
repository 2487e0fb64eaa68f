#!/usr/bin/env python3
"""
Main CLI Application for dockhand

This module contains the main Typer app and entry point for the dockhand CLI.
"""

import sys
from typing import Annotated

import typer

from dockhand import __version__
from dockhand.core.errors import (
    DockhandError,
    ErrorCategory,
    ErrorHandler,
    get_error_handler,
    handle_error,
    set_error_handler,
)
from dockhand.core.progress import rich_console
from .commands import image_app, run, shell, tag
from .constants import ExitCode
from .utils import console


# Initialize the main Typer app
app = typer.Typer(
    name="dockhand",
    help="🐳 dockhand - Run commands in throwaway containers through the engine CLI",
    rich_markup_mode="rich",
    add_completion=False,
    no_args_is_help=True,
)

# Register commands
app.command()(run)
app.command()(shell)
app.command()(tag)
app.add_typer(image_app, name="image")


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: Annotated[
        bool, typer.Option("--version", help="Show version and exit")
    ] = False,
) -> None:
    """
    🐳 dockhand

    Create a container from an image, copy files in, run a command, copy
    files out, and clean up.
    """
    if version:
        console.print(
            f"🐳 [bold cyan]dockhand[/bold cyan] version [green]{__version__}[/green]"
        )
        raise typer.Exit()

    # If no command is provided, show help
    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())
        ctx.exit()


def cli_main() -> None:
    """Entry point for the CLI application."""
    try:
        app()
    except KeyboardInterrupt:
        console.print("\n🛑 [yellow]Operation cancelled by user[/yellow]")
        sys.exit(ExitCode.INTERRUPTED)
    except Exception as e:
        # Failures before a command set up logging still get a panel.
        if get_error_handler() is None:
            set_error_handler(ErrorHandler(console=rich_console))
        handle_error(
            DockhandError(f"Unexpected error: {e}", ErrorCategory.RUNTIME, cause=e),
            show_traceback=True,
        )
        sys.exit(ExitCode.FAILURE)


if __name__ == "__main__":
    cli_main()
