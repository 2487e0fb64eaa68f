#!/usr/bin/env python3
"""
CLI Package for dockhand
"""

from .app import app, cli_main
from .constants import (
    ExitCode,
    DEFAULT_DESTINATION_DIR,
    DEFAULT_LOCATION,
    DEFAULT_SOURCE_DIR,
)
from .utils import (
    console,
    exit_with_error,
    install_interrupt_handler,
    prepare,
    setup_logging,
)

__all__ = [
    "app",
    "cli_main",
    "ExitCode",
    "DEFAULT_DESTINATION_DIR",
    "DEFAULT_LOCATION",
    "DEFAULT_SOURCE_DIR",
    "console",
    "exit_with_error",
    "install_interrupt_handler",
    "prepare",
    "setup_logging",
]
