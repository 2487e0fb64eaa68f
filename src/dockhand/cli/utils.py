#!/usr/bin/env python3
"""
Utility functions for dockhand CLI
"""

import logging
import signal
from typing import NoReturn, Optional, Tuple

import typer
from rich.console import Console
from rich.logging import RichHandler

from dockhand.core.cancellation import CancellationFlag
from dockhand.core.config import ConfigLoader, EngineSettings
from dockhand.core.docker import Docker, docker_from_settings
from dockhand.core.errors import (
    CancellationError,
    DockhandError,
    ErrorHandler,
    create_error_context,
    handle_error,
    set_error_handler,
)
from dockhand.core.progress import rich_console
from .constants import ExitCode


# Initialize Rich console for command output
console = Console()


def setup_logging(verbose: bool = False) -> None:
    """Setup Rich logging configuration and unified error handler."""
    log_level = logging.DEBUG if verbose else logging.INFO

    # Log through the spinner's console so records print above a live spinner
    rich_handler = RichHandler(
        console=rich_console,
        show_time=True,
        show_path=verbose,
        markup=False,
        rich_tracebacks=True,
    )

    logging.basicConfig(
        level=log_level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[rich_handler],
        force=True,
    )

    # Setup unified error handler
    error_handler = ErrorHandler(console=rich_console, verbose=verbose)
    set_error_handler(error_handler)


def install_interrupt_handler(running: CancellationFlag) -> None:
    """Latch the cancellation flag when the user presses Ctrl+C.

    The engine child shares our process group and receives the same signal.
    """

    def on_interrupt(signum, frame):
        running.cancel()

    signal.signal(signal.SIGINT, on_interrupt)


def prepare(
    config_file: Optional[str] = None, verbose: bool = False, **overrides
) -> Tuple[Docker, CancellationFlag, EngineSettings]:
    """Set up logging, settings, the engine, and the cancellation flag for a command."""
    setup_logging(verbose)
    try:
        settings = ConfigLoader.load(config_file, overrides=overrides)
    except DockhandError as e:
        handle_error(e, context=create_error_context("load_config", file_path=config_file))
        raise typer.Exit(ExitCode.INVALID_ARGS)

    running = CancellationFlag()
    install_interrupt_handler(running)
    return docker_from_settings(settings), running, settings


def exit_with_error(
    error: DockhandError, running: CancellationFlag, operation: str, exit_code: int = ExitCode.FAILURE
) -> NoReturn:
    """Report a failed command and exit.

    Once the run has been cancelled, secondary failures are not reported.
    """
    if isinstance(error, CancellationError) or not running.running:
        console.print("🛑 [yellow]Operation cancelled by user[/yellow]")
        raise typer.Exit(ExitCode.INTERRUPTED)

    handle_error(error, context=create_error_context(operation, component="cli"))
    raise typer.Exit(exit_code)
