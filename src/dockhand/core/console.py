#!/usr/bin/env python3
"""Module to run container engine commands.

This module provides the Console class, which launches the container engine
binary in one of four I/O modes and classifies the outcome as success, an
engine-reported failure, or a cancellation.
"""
# built-in modules
import logging
import subprocess
import typing
from contextlib import nullcontext
# user-defined modules
from dockhand.core.cancellation import CancellationFlag
from dockhand.core.errors import CancellationError, DockhandError, EngineError
from dockhand.core.progress import ProgressService, get_progress_service


LOGGER = logging.getLogger(__name__)

# Receives the child's standard input pipe (a binary file object).
StdinWriter = typing.Callable[[typing.BinaryIO], None]


class Console:
    """Class to run container engine commands.

    Attributes:
        engine (str): The container engine binary.
        spinner (bool): Whether captured commands show a spinner.
    """

    def __init__(
            self,
            engine: str = "docker",
            spinner: bool = True,
            progress: typing.Optional[ProgressService] = None,
        ) -> None:
        """Constructor of the Console class.

        Args:
            engine (str): The container engine binary.
            spinner (bool): Show a spinner while captured commands run.
            progress (ProgressService): Spinner service; the process-wide
                service is used when omitted.
        """
        self.engine = engine
        self.spinner = spinner
        self._progress = progress

    def command(self, args: typing.Sequence[str]) -> typing.List[str]:
        """Build the full argument vector for an engine sub-command."""
        return [self.engine, *args]

    def run_quiet(
            self,
            spinner_message: str,
            error: str,
            args: typing.Sequence[str],
            running: CancellationFlag,
        ) -> str:
        """Run a command with captured output and return its standard output.

        Standard input is empty. Standard error is captured and reported if
        the command fails.

        Args:
            spinner_message (str): Message shown next to the spinner.
            error (str): Description of the failure, used in error messages.
            args (list): The engine sub-command and its arguments.
            running (CancellationFlag): The shared cancellation flag.

        Returns:
            str: The standard output, decoded lossily.

        Raises:
            EngineError: If the engine fails or cannot be launched.
            CancellationError: If the engine was killed by a signal.
        """
        with self._spin(spinner_message):
            try:
                proc = subprocess.run(
                    self.command(args),
                    stdin=subprocess.DEVNULL,
                    stdout=subprocess.PIPE,
                    stderr=subprocess.PIPE,
                )
            except OSError as e:
                raise EngineError(f"{error}\nDetails: {e}", cause=e) from e

        return self._captured_result(error, proc.returncode, proc.stdout, proc.stderr, running)

    def run_quiet_stdin(
            self,
            spinner_message: str,
            error: str,
            args: typing.Sequence[str],
            writer: StdinWriter,
            running: CancellationFlag,
        ) -> str:
        """Run a command with captured output, feeding its standard input.

        The writer receives the child's standard input pipe before the engine
        waits for the child to exit; the pipe is closed afterwards.

        Args:
            spinner_message (str): Message shown next to the spinner.
            error (str): Description of the failure, used in error messages.
            args (list): The engine sub-command and its arguments.
            writer (callable): Writes the child's standard input.
            running (CancellationFlag): The shared cancellation flag.

        Returns:
            str: The standard output, decoded lossily.

        Raises:
            EngineError: If the engine fails, cannot be launched, or the
                standard input pipe cannot be written.
            CancellationError: If the engine was killed by a signal.
        """
        with self._spin(spinner_message):
            try:
                with subprocess.Popen(
                    self.command(args),
                    stdin=subprocess.PIPE,
                    stdout=subprocess.PIPE,
                    stderr=subprocess.PIPE,
                ) as proc:
                    self._feed(proc, writer, error)
                    stdout, stderr = proc.communicate()
            except OSError as e:
                raise EngineError(f"{error}\nDetails: {e}", cause=e) from e

        return self._captured_result(error, proc.returncode, stdout, stderr, running)

    def run_loud_stdin(
            self,
            error: str,
            args: typing.Sequence[str],
            writer: StdinWriter,
            running: CancellationFlag,
        ) -> None:
        """Run a command whose output goes straight to the terminal.

        Standard input is piped and fed by the writer; standard output and
        standard error are inherited.

        Args:
            error (str): Message of the error raised on failure.
            args (list): The engine sub-command and its arguments.
            writer (callable): Writes the child's standard input.
            running (CancellationFlag): The shared cancellation flag.

        Raises:
            EngineError: If the engine fails or cannot be launched.
            CancellationError: If the engine was killed by a signal.
        """
        try:
            with subprocess.Popen(self.command(args), stdin=subprocess.PIPE) as proc:
                self._feed(proc, writer, error)
                proc.stdin.close()
                returncode = proc.wait()
        except OSError as e:
            raise EngineError(f"{error}\nDetails: {e}", cause=e) from e

        self._attached_result(error, returncode, running)

    def run_attach(
            self,
            error: str,
            args: typing.Sequence[str],
            running: CancellationFlag,
        ) -> None:
        """Run a command attached to the terminal's input, output, and error.

        Args:
            error (str): Message of the error raised on failure.
            args (list): The engine sub-command and its arguments.
            running (CancellationFlag): The shared cancellation flag.

        Raises:
            EngineError: If the engine fails or cannot be launched.
            CancellationError: If the engine was killed by a signal.
        """
        try:
            returncode = subprocess.call(self.command(args))
        except OSError as e:
            raise EngineError(f"{error}\nDetails: {e}", cause=e) from e

        self._attached_result(error, returncode, running)

    def _spin(self, message: str):
        if not self.spinner:
            return nullcontext()
        progress = self._progress or get_progress_service()
        return progress.spin(message)

    @staticmethod
    def _feed(proc: subprocess.Popen, writer: StdinWriter, error: str) -> None:
        try:
            writer(proc.stdin)
        except DockhandError:
            raise
        except OSError as e:
            raise EngineError(f"{error}\nDetails: {e}", cause=e) from e

    @staticmethod
    def _interrupted(returncode: int, running: CancellationFlag) -> bool:
        # A negative return code means the child was killed by a signal and
        # has no exit code of its own.
        if returncode < 0:
            LOGGER.debug(f"Engine terminated by signal {-returncode}.")
            running.cancel()
            return True
        return False

    def _captured_result(
            self,
            error: str,
            returncode: int,
            stdout: bytes,
            stderr: bytes,
            running: CancellationFlag,
        ) -> str:
        if returncode == 0:
            return stdout.decode("utf-8", errors="replace")
        if self._interrupted(returncode, running):
            raise CancellationError()
        raise EngineError(
            f"{error}\nDetails: {stderr.decode('utf-8', errors='replace')}"
        )

    def _attached_result(
            self, error: str, returncode: int, running: CancellationFlag
        ) -> None:
        if returncode == 0:
            return
        if self._interrupted(returncode, running):
            raise CancellationError()
        raise EngineError(error)
