#!/usr/bin/env python3
"""
Container Runner Module for dockhand

This module strings the engine verbs together into one sandboxed run: make
sure the image is present, create a container, copy inputs in, run the
command, copy outputs out, optionally commit the result, and always remove
the container afterwards.
"""

import logging
import shlex
import typing
from dataclasses import dataclass, field

from dockhand.core import transfer
from dockhand.core.cancellation import CancellationFlag
from dockhand.core.docker import Docker, random_tag
from dockhand.core.errors import CancellationError, DockhandError, ValidationError


LOGGER = logging.getLogger(__name__)


@dataclass
class RunResult:
    """Outcome of a container run."""

    container: str
    image: typing.Optional[str] = None
    copied: typing.List[str] = field(default_factory=list)


class ContainerRunner:
    """Class responsible for running a command in a throwaway container."""

    def __init__(
        self,
        docker: Docker,
        running: CancellationFlag,
        location: str = "/scratch",
    ):
        """Initialize the Container Runner.

        Args:
            docker: Engine verbs to use
            running: The shared cancellation flag
            location: Working directory for the command inside the container
        """
        self.docker = docker
        self.running = running
        self.location = location

    def build_script(self, command: str) -> str:
        """Wrap a command so it runs from the working location and stops on errors."""
        location = shlex.quote(self.location)
        return f"set -eu\nmkdir -p {location}\ncd {location}\n{command}\n"

    def ensure_image(self, image: str, pull: bool = True) -> None:
        """Make sure an image is available locally, pulling it if allowed.

        Raises:
            ValidationError: If the image is missing and pulling is disabled.
        """
        if self.docker.image_exists(image, self.running):
            return
        if not pull:
            raise ValidationError(
                f"Image {image} does not exist locally.",
                suggestions=["Pull the image first or allow pulling"],
            )
        self.docker.pull_image(image, self.running)

    def run(
        self,
        image: str,
        command: str,
        input_paths: typing.Sequence[str] = (),
        output_paths: typing.Sequence[str] = (),
        source_dir: str = ".",
        destination_dir: str = ".",
        commit: typing.Optional[str] = None,
        pull: bool = True,
        shell: bool = False,
    ) -> RunResult:
        """Run a command in a fresh container built from an image.

        Args:
            image: Image to create the container from
            command: Shell command to run inside the container
            input_paths: Host paths (relative to source_dir) copied to the location
            output_paths: Paths (relative to the location) copied back to destination_dir
            source_dir: Host directory input paths are relative to
            destination_dir: Host directory outputs are placed in
            commit: Image name to commit the container to on success
            pull: Pull the image if it is missing
            shell: Open an interactive shell in the container's final state

        Returns:
            RunResult describing the container and any committed image

        Raises:
            CancellationError: If the run is cancelled between steps
            DockhandError: If any step fails
        """
        self._check_running()
        self.ensure_image(image, pull=pull)
        self._check_running()
        container = self.docker.create_container(image, self.running)
        result = RunResult(container=container)

        try:
            if input_paths:
                with transfer.create_archive(
                    input_paths, source_dir, self.location
                ) as archive:
                    self._check_running()
                    self.docker.copy_into_container(container, archive, self.running)

            self._check_running()
            try:
                self.docker.start_container(
                    container, self.build_script(command), self.running
                )
            except DockhandError:
                if shell and self.running.running:
                    self._shell_after_failure(container)
                raise
            if shell:
                self._check_running()
                self.shell_into(container)

            if output_paths:
                self._check_running()
                self.docker.copy_from_container(
                    container,
                    output_paths,
                    self.location,
                    destination_dir,
                    self.running,
                )
                result.copied = list(output_paths)

            if commit:
                self._check_running()
                self.docker.commit_container(container, commit, self.running)
                result.image = commit
        finally:
            self._cleanup(container)

        return result

    def shell_into(self, container: str) -> None:
        """Open an interactive shell on a snapshot of a container."""
        image = random_tag()
        self.docker.commit_container(container, image, self.running)
        try:
            self.docker.spawn_shell(image, self.running)
        finally:
            self.docker.delete_image(image, self.running)

    def _check_running(self) -> None:
        if not self.running.running:
            raise CancellationError()

    def _shell_after_failure(self, container: str) -> None:
        # The command's own failure is the one reported.
        try:
            self.shell_into(container)
        except DockhandError as e:
            LOGGER.warning(f"Unable to open a shell in container {container}: {e}")

    def _cleanup(self, container: str) -> None:
        try:
            self.docker.delete_container(container, self.running)
        except DockhandError as e:
            if self.running.running:
                LOGGER.warning(f"Unable to delete container {container}: {e}")
            else:
                LOGGER.debug(f"Skipped deleting container {container}: {e}")
