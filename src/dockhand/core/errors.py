#!/usr/bin/env python3
"""
Unified error handling for dockhand

Every failure in dockhand surfaces as a DockhandError subclass whose string
form is the text shown to the user. The ErrorHandler renders those errors as
Rich panels for the CLI.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

from rich.console import Console
from rich.panel import Panel
from rich.text import Text


# Message reported whenever a child process was killed by a signal.
INTERRUPT_MESSAGE = "Interrupted."


class ErrorCategory(Enum):
    """Error categories for consistent handling."""

    ENGINE = "engine"
    CANCELLATION = "cancellation"
    TRANSFER = "transfer"
    CONFIGURATION = "configuration"
    VALIDATION = "validation"
    RUNTIME = "runtime"


@dataclass
class ErrorContext:
    """Context information attached to an error."""

    operation: str
    phase: Optional[str] = None
    component: Optional[str] = None
    image: Optional[str] = None
    container: Optional[str] = None
    file_path: Optional[str] = None
    additional_info: Optional[Dict[str, Any]] = None


class DockhandError(Exception):
    """Base class for all dockhand errors."""

    def __init__(
        self,
        message: str,
        category: ErrorCategory,
        context: Optional[ErrorContext] = None,
        recoverable: bool = False,
        suggestions: Optional[List[str]] = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category
        self.context = context
        self.recoverable = recoverable
        self.suggestions = suggestions or []
        self.cause = cause


class EngineError(DockhandError):
    """The container engine failed or could not be launched."""

    def __init__(self, message: str, **kwargs):
        super().__init__(message, ErrorCategory.ENGINE, recoverable=False, **kwargs)


class CancellationError(DockhandError):
    """The run was interrupted by a signal."""

    def __init__(self, message: str = INTERRUPT_MESSAGE, **kwargs):
        super().__init__(
            message, ErrorCategory.CANCELLATION, recoverable=False, **kwargs
        )


class TransferError(DockhandError):
    """Moving files between the host and a container failed."""

    def __init__(self, message: str, **kwargs):
        super().__init__(message, ErrorCategory.TRANSFER, recoverable=False, **kwargs)


class ConfigurationError(DockhandError):
    """Invalid or unreadable configuration."""

    def __init__(self, message: str, **kwargs):
        super().__init__(
            message, ErrorCategory.CONFIGURATION, recoverable=True, **kwargs
        )


class ValidationError(DockhandError):
    """Invalid user input."""

    def __init__(self, message: str, **kwargs):
        super().__init__(message, ErrorCategory.VALIDATION, recoverable=True, **kwargs)


class ErrorHandler:
    """Render errors on a Rich console and log them."""

    _STYLES = {
        ErrorCategory.ENGINE: ("🐳", "Engine Error", "red"),
        ErrorCategory.CANCELLATION: ("🛑", "Cancelled", "yellow"),
        ErrorCategory.TRANSFER: ("📦", "Transfer Error", "red"),
        ErrorCategory.CONFIGURATION: ("⚙️", "Configuration Error", "yellow"),
        ErrorCategory.VALIDATION: ("⚠️", "Validation Error", "yellow"),
        ErrorCategory.RUNTIME: ("💥", "Runtime Error", "red"),
    }

    def __init__(self, console: Optional[Console] = None, verbose: bool = False):
        """Initialize the handler.

        Args:
            console: Rich console to print to.
            verbose: Print tracebacks for handled errors.
        """
        self.console = console or Console(stderr=True)
        self.verbose = verbose
        self.logger = logging.getLogger(__name__)

    def handle_error(
        self,
        error: BaseException,
        context: Optional[ErrorContext] = None,
        show_traceback: Optional[bool] = None,
    ) -> None:
        """Display an error panel and log the error.

        Args:
            error: The error to report.
            context: Context to show when the error carries none of its own.
            show_traceback: Override the handler's verbose setting.
        """
        if isinstance(error, DockhandError):
            emoji, title, style = self._STYLES[error.category]
            context = error.context or context
            suggestions = error.suggestions
            cause = error.cause
        else:
            emoji, title, style = "❌", type(error).__name__, "red"
            suggestions = []
            cause = error.__cause__

        body = Text(str(error))
        if context is not None:
            body.append(f"\n\nOperation: {context.operation}", style="dim")
            for label, value in (
                ("Phase", context.phase),
                ("Component", context.component),
                ("Image", context.image),
                ("Container", context.container),
                ("File", context.file_path),
            ):
                if value:
                    body.append(f"\n{label}: {value}", style="dim")
        if cause is not None:
            body.append(f"\n\nCaused by: {cause}", style="dim")
        if suggestions:
            body.append("\n\nSuggestions:", style="bold")
            for suggestion in suggestions:
                body.append(f"\n  • {suggestion}")

        self.console.print(
            Panel(body, title=f"{emoji} {title}", border_style=style, expand=False)
        )
        self.logger.debug(f"Handled {type(error).__name__}: {error}")

        if show_traceback is None:
            show_traceback = self.verbose
        if show_traceback:
            self.console.print_exception()


_error_handler: Optional[ErrorHandler] = None


def set_error_handler(handler: Optional[ErrorHandler]) -> None:
    """Install the global error handler."""
    global _error_handler
    _error_handler = handler


def get_error_handler() -> Optional[ErrorHandler]:
    """Return the global error handler, if any."""
    return _error_handler


def handle_error(
    error: BaseException,
    context: Optional[ErrorContext] = None,
    show_traceback: Optional[bool] = None,
) -> None:
    """Report an error through the global handler, or the log as a fallback."""
    if _error_handler is None:
        logging.error(f"{type(error).__name__}: {error}")
        return
    _error_handler.handle_error(error, context=context, show_traceback=show_traceback)


def create_error_context(operation: str, **kwargs) -> ErrorContext:
    """Convenience constructor for ErrorContext."""
    return ErrorContext(operation=operation, **kwargs)
