#!/usr/bin/env python3
"""
Unit tests for dockhand unified error handling.

Tests error types, context management, and Rich console rendering.
"""

import json
from unittest.mock import Mock, patch

import pytest
from rich.console import Console

from dockhand.core.errors import (
    INTERRUPT_MESSAGE,
    CancellationError,
    ConfigurationError,
    DockhandError,
    EngineError,
    ErrorCategory,
    ErrorContext,
    ErrorHandler,
    TransferError,
    ValidationError,
    create_error_context,
    get_error_handler,
    handle_error,
    set_error_handler,
)


@pytest.fixture(autouse=True)
def reset_global_handler():
    previous = get_error_handler()
    yield
    set_error_handler(previous)


class TestErrorContext:
    """Test error context data structure."""

    def test_error_context_creation(self):
        context = ErrorContext(operation="copy", phase="stage")

        assert context.operation == "copy"
        assert context.phase == "stage"
        assert context.container is None
        assert context.file_path is None
        assert context.additional_info is None

    def test_create_error_context_function(self):
        context = create_error_context("run", image="alpine", container="c0ffee")

        assert isinstance(context, ErrorContext)
        assert context.operation == "run"
        assert context.image == "alpine"
        assert context.container == "c0ffee"

    def test_context_is_serializable(self):
        context = create_error_context("copy", file_path="out/a", additional_info={"n": 1})

        json_str = json.dumps(ValidationError("x", context=context).context.__dict__)

        assert "out/a" in json_str


class TestErrorHierarchy:
    """Test the dockhand error class hierarchy."""

    def test_base_error(self):
        context = ErrorContext(operation="test")
        error = DockhandError(
            "Test error",
            ErrorCategory.RUNTIME,
            context=context,
            recoverable=True,
            suggestions=["Try again"],
        )

        assert str(error) == "Test error"
        assert error.message == "Test error"
        assert error.category == ErrorCategory.RUNTIME
        assert error.context == context
        assert error.recoverable is True
        assert error.suggestions == ["Try again"]
        assert error.cause is None

    @pytest.mark.parametrize("error_class,category,recoverable", [
        (EngineError, ErrorCategory.ENGINE, False),
        (TransferError, ErrorCategory.TRANSFER, False),
        (ConfigurationError, ErrorCategory.CONFIGURATION, True),
        (ValidationError, ErrorCategory.VALIDATION, True),
    ])
    def test_error_types(self, error_class, category, recoverable):
        error = error_class("Something failed")

        assert isinstance(error, DockhandError)
        assert error.category == category
        assert error.recoverable is recoverable
        assert str(error) == "Something failed"

    def test_cancellation_default_message(self):
        error = CancellationError()

        assert str(error) == INTERRUPT_MESSAGE == "Interrupted."
        assert error.category == ErrorCategory.CANCELLATION
        assert error.recoverable is False

    def test_error_with_cause(self):
        original = OSError("disk full")
        error = TransferError("Unable to move file.", cause=original)

        assert error.cause is original
        assert str(error) == "Unable to move file."


class TestErrorHandler:
    """Test ErrorHandler rendering."""

    def setup_method(self):
        self.mock_console = Mock(spec=Console)
        self.error_handler = ErrorHandler(console=self.mock_console, verbose=False)

    def test_error_handler_creation(self):
        assert self.error_handler.console == self.mock_console
        assert self.error_handler.verbose is False
        assert self.error_handler.logger is not None

    def test_handle_dockhand_error(self):
        context = create_error_context("run", container="c0ffee")
        error = ValidationError("Bad input", context=context, suggestions=["Fix it"])

        self.error_handler.handle_error(error)

        panel = self.mock_console.print.call_args[0][0]
        assert "Validation Error" in panel.title
        assert "Bad input" in str(panel.renderable)
        assert "Container: c0ffee" in str(panel.renderable)
        assert "Fix it" in str(panel.renderable)
        self.mock_console.print_exception.assert_not_called()

    def test_handle_generic_error(self):
        self.error_handler.handle_error(
            ValueError("Generic error"), context=create_error_context("test_op")
        )

        panel = self.mock_console.print.call_args[0][0]
        assert "ValueError" in panel.title
        assert "Operation: test_op" in str(panel.renderable)

    def test_handle_error_verbose_mode(self):
        verbose_handler = ErrorHandler(console=self.mock_console, verbose=True)

        verbose_handler.handle_error(EngineError("Unable to start container."))

        self.mock_console.print.assert_called_once()
        self.mock_console.print_exception.assert_called_once()

    def test_show_traceback_overrides_verbose(self):
        self.error_handler.handle_error(EngineError("boom"), show_traceback=True)

        self.mock_console.print_exception.assert_called_once()

    @pytest.mark.parametrize("error,emoji,title", [
        (EngineError("Engine failed"), "🐳", "Engine Error"),
        (CancellationError(), "🛑", "Cancelled"),
        (TransferError("Copy failed"), "📦", "Transfer Error"),
        (ValidationError("Bad input"), "⚠️", "Validation Error"),
    ])
    def test_error_categorization_display(self, error, emoji, title):
        self.error_handler.handle_error(error)

        panel = self.mock_console.print.call_args[0][0]
        assert emoji in panel.title
        assert title in panel.title


class TestGlobalErrorHandler:
    """Test the global error handler."""

    def test_set_and_get_error_handler(self):
        handler = ErrorHandler(console=Mock(spec=Console))

        set_error_handler(handler)

        assert get_error_handler() is handler

    def test_handle_error_function(self):
        mock_console = Mock(spec=Console)
        set_error_handler(ErrorHandler(console=mock_console))

        handle_error(ValidationError("Test error"))

        mock_console.print.assert_called()

    def test_handle_error_no_global_handler(self):
        set_error_handler(None)

        with patch("dockhand.core.errors.logging") as mock_logging:
            handle_error(ValueError("Test error"))

            mock_logging.error.assert_called_once()
