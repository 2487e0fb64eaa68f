#!/usr/bin/env python3
"""Module to run container engine verbs.

This module provides the Docker class, which maps each image and container
operation onto an engine sub-command and the execution mode it needs.
"""
# built-in modules
import logging
import shutil
import typing
import uuid
# user-defined modules
from dockhand.core import transfer
from dockhand.core.cancellation import CancellationFlag
from dockhand.core.config import EngineSettings
from dockhand.core.console import Console
from dockhand.core.errors import CancellationError, EngineError
from dockhand.core.progress import get_progress_service


LOGGER = logging.getLogger(__name__)


def random_tag() -> str:
    """Construct a random image tag."""
    return uuid.uuid4().hex


class Docker:
    """Class to drive images and containers through the engine CLI.

    Attributes:
        console (Console): The console used to run engine commands.
        create_command (str): Program a new container runs; commands are fed
            to it on standard input.
        shell_command (str): Program run for interactive shells.
    """

    def __init__(
        self,
        console: typing.Optional[Console] = None,
        create_command: str = "/bin/sh",
        shell_command: str = "/bin/su",
    ) -> None:
        """Constructor of the Docker class.

        Args:
            console (Console): The console object.
            create_command (str): Program a new container runs.
            shell_command (str): Program run for interactive shells. The
                default, ``su``, gives the root user's login shell.
        """
        self.console = console or Console()
        self.create_command = create_command
        self.shell_command = shell_command

    def image_exists(self, image: str, running: CancellationFlag) -> bool:
        """Query whether an image exists locally.

        A failed inspect means the image is missing, unless the run has been
        cancelled in the meantime.

        Raises:
            CancellationError: If the run was cancelled.
        """
        LOGGER.debug(f"Checking existence of image `{image}`…")
        try:
            self.console.run_quiet(
                "Checking existence of image...",
                "The image doesn't exist.",
                ["image", "inspect", image],
                running,
            )
        except (EngineError, CancellationError) as e:
            if running.running:
                return False
            if isinstance(e, CancellationError):
                raise
            raise CancellationError() from e
        return True

    def push_image(self, image: str, running: CancellationFlag) -> None:
        """Push an image."""
        LOGGER.debug(f"Pushing image `{image}`…")
        self.console.run_quiet(
            "Pushing image...",
            "Unable to push image.",
            ["image", "push", image],
            running,
        )

    def pull_image(self, image: str, running: CancellationFlag) -> None:
        """Pull an image."""
        LOGGER.debug(f"Pulling image `{image}`…")
        self.console.run_quiet(
            "Pulling image...",
            "Unable to pull image.",
            ["image", "pull", image],
            running,
        )

    def delete_image(self, image: str, running: CancellationFlag) -> None:
        """Delete an image."""
        LOGGER.debug(f"Deleting image `{image}`…")
        self.console.run_quiet(
            "Deleting image...",
            "Unable to delete image.",
            ["image", "rm", "--force", image],
            running,
        )

    def create_container(self, image: str, running: CancellationFlag) -> str:
        """Create a container and return its ID.

        ``--init`` runs a minimal init process as PID 1. It reaps orphaned
        zombies, which the shell may not do, and forwards SIGINT and SIGTERM
        so the shell's default signal handling works.
        """
        LOGGER.debug(f"Creating container from image `{image}`…")
        output = self.console.run_quiet(
            "Creating container...",
            "Unable to create container.",
            ["container", "create", "--init", "--interactive", image, self.create_command],
            running,
        )
        return output.strip()

    def copy_into_container(
        self, container: str, tar: typing.BinaryIO, running: CancellationFlag
    ) -> None:
        """Copy files into a container by streaming a tar archive to it."""
        LOGGER.debug(f"Copying files into container `{container}`…")
        self.console.run_quiet_stdin(
            "Copying files into container...",
            "Unable to copy files into the container.",
            ["container", "cp", "-", f"{container}:/"],
            lambda stdin: shutil.copyfileobj(tar, stdin),
            running,
        )

    def copy_from_container(
        self,
        container: str,
        paths: typing.Iterable[transfer.PathLike],
        source_dir: transfer.PathLike,
        destination_dir: transfer.PathLike,
        running: CancellationFlag,
    ) -> None:
        """Copy files from a container. See transfer.copy_from_container."""
        transfer.copy_from_container(
            self.console, container, paths, source_dir, destination_dir, running
        )

    def start_container(
        self, container: str, command: str, running: CancellationFlag
    ) -> None:
        """Start a container and feed a command to its shell.

        The container's output is shown live.
        """
        LOGGER.debug(f"Starting container `{container}`…")

        def send_command(stdin: typing.BinaryIO) -> None:
            try:
                stdin.write(command.encode("utf-8"))
            except OSError as e:
                raise EngineError(
                    f"Unable to send command `{command}` to the container. "
                    f"Details: {e}",
                    cause=e,
                ) from e

        self.console.run_loud_stdin(
            "Unable to start container.",
            ["container", "start", "--attach", "--interactive", container],
            send_command,
            running,
        )

    def stop_container(self, container: str, running: CancellationFlag) -> None:
        """Stop a container."""
        LOGGER.debug(f"Stopping container `{container}`…")
        self.console.run_quiet(
            "Stopping container...",
            "Unable to stop container.",
            ["container", "stop", container],
            running,
        )

    def commit_container(
        self, container: str, image: str, running: CancellationFlag
    ) -> None:
        """Commit a container to an image."""
        LOGGER.debug(f"Committing container `{container}` to image `{image}`…")
        self.console.run_quiet(
            "Committing container...",
            "Unable to commit container.",
            ["container", "commit", container, image],
            running,
        )

    def delete_container(self, container: str, running: CancellationFlag) -> None:
        """Delete a container."""
        LOGGER.debug(f"Deleting container `{container}`…")
        self.console.run_quiet(
            "Deleting container...",
            "Unable to delete container.",
            ["container", "rm", "--force", container],
            running,
        )

    def spawn_shell(self, image: str, running: CancellationFlag) -> None:
        """Run an interactive shell in a throwaway container."""
        LOGGER.debug(f"Spawning an interactive shell for image `{image}`…")
        self.console.run_attach(
            "The shell exited with a failure.",
            [
                "container",
                "run",
                "--rm",
                "--interactive",
                "--tty",
                "--init",
                image,
                self.shell_command,
            ],
            running,
        )


def docker_from_settings(settings: EngineSettings) -> Docker:
    """Build a Docker object configured by EngineSettings."""
    if settings.spinner:
        get_progress_service(
            fast_interval=settings.spinner_fast_interval,
            slow_interval=settings.spinner_slow_interval,
            fast_window=settings.spinner_fast_window,
        )
    console = Console(engine=settings.engine, spinner=settings.spinner)
    return Docker(
        console=console,
        create_command=settings.create_command,
        shell_command=settings.shell_command,
    )
