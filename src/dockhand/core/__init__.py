"""Core engine plumbing: cancellation, spinners, process execution, and transfers."""

from .cancellation import CancellationFlag
from .console import Console
from .docker import Docker, docker_from_settings, random_tag
from .errors import (
    INTERRUPT_MESSAGE,
    CancellationError,
    ConfigurationError,
    DockhandError,
    EngineError,
    TransferError,
    ValidationError,
)

__all__ = [
    "CancellationFlag",
    "Console",
    "Docker",
    "docker_from_settings",
    "random_tag",
    "INTERRUPT_MESSAGE",
    "CancellationError",
    "ConfigurationError",
    "DockhandError",
    "EngineError",
    "TransferError",
    "ValidationError",
]
