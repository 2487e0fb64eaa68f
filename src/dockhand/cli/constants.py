#!/usr/bin/env python3
"""
Constants and configuration for dockhand CLI
"""


# Exit codes
class ExitCode:
    """Exit codes for CLI commands."""

    SUCCESS = 0
    FAILURE = 1
    RUN_FAILURE = 3
    INVALID_ARGS = 4
    INTERRUPTED = 130


# Default values
DEFAULT_LOCATION = "/scratch"
DEFAULT_SOURCE_DIR = "."
DEFAULT_DESTINATION_DIR = "."
