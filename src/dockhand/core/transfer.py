#!/usr/bin/env python3
"""Moving files between the host and a container's filesystem.

``container cp`` is not idempotent. Suppose ``/foo`` is a directory in the
container and ``/bar`` does not exist on the host. The first
``container cp c:/foo /bar`` creates ``/bar`` holding the contents of
``/foo``; running it again copies into the now-existing ``/bar`` and leaves
``/bar/foo``. copy_from_container therefore always copies into a fresh
temporary directory, where the target cannot exist yet, and then moves the
result into place itself.
"""

import logging
import os
import stat
import tarfile
import tempfile
import typing
from pathlib import Path, PurePosixPath

from dockhand.core.cancellation import CancellationFlag
from dockhand.core.console import Console
from dockhand.core.errors import TransferError, create_error_context


LOGGER = logging.getLogger(__name__)

PathLike = typing.Union[str, os.PathLike]

# Archives larger than this are spooled to disk rather than kept in memory.
_SPOOL_LIMIT = 16 * 1024 * 1024


def copy_from_container(
    console: Console,
    container: str,
    paths: typing.Iterable[PathLike],
    source_dir: PathLike,
    destination_dir: PathLike,
    running: CancellationFlag,
) -> None:
    """Copy paths from a container to the host, idempotently.

    Each path is looked up at ``source_dir/path`` in the container and placed
    at ``destination_dir/path`` on the host. Paths already copied stay in
    place if a later one fails.

    Args:
        console: Engine console used to run ``container cp``.
        container: ID or name of the container.
        paths: Paths relative to ``source_dir``.
        source_dir: Directory in the container the paths are relative to.
        destination_dir: Directory on the host to mirror them into.
        running: The shared cancellation flag.

    Raises:
        TransferError: If staging or moving the files fails.
        EngineError: If the engine fails to copy.
        CancellationError: If the engine was killed by a signal.
    """
    for path in paths:
        LOGGER.debug(f"Copying `{path}` from container `{container}`…")

        try:
            staging = tempfile.TemporaryDirectory()
        except OSError as e:
            raise TransferError(
                f"Unable to create temporary directory. Details: {e}", cause=e
            ) from e

        with staging as temp_dir:
            source = PurePosixPath(source_dir) / PurePosixPath(path)
            intermediate = Path(temp_dir) / "data"
            destination = Path(destination_dir) / path

            console.run_quiet(
                "Copying files from the container...",
                "Unable to copy files from the container.",
                ["container", "cp", f"{container}:{source}", str(intermediate)],
                running,
            )

            try:
                mode = os.lstat(intermediate).st_mode
            except OSError as e:
                raise TransferError(
                    f"Unable to retrieve filesystem metadata for path "
                    f"`{intermediate}`. Details: {e}",
                    context=create_error_context(
                        "copy_from_container", container=container, file_path=str(path)
                    ),
                    cause=e,
                ) from e

            # A symlink is moved as a link, never followed.
            if stat.S_ISDIR(mode):
                _relocate_tree(intermediate, destination)
            else:
                _make_dirs(destination.parent)
                _move(intermediate, destination)


def create_archive(
    paths: typing.Iterable[PathLike],
    source_dir: PathLike,
    destination_dir: PathLike,
) -> typing.BinaryIO:
    """Pack host paths into a tar stream for ``container cp -``.

    Each ``source_dir/path`` on the host is stored under
    ``destination_dir/path`` relative to the container's root, so the archive
    can be extracted at ``/``. Directories are added recursively and symlinks
    are stored as links.

    Returns:
        A rewound binary file object holding the archive.

    Raises:
        TransferError: If a path is missing or cannot be read.
    """
    archive = tempfile.SpooledTemporaryFile(max_size=_SPOOL_LIMIT)
    try:
        with tarfile.open(fileobj=archive, mode="w") as tar:
            for path in paths:
                source = Path(source_dir) / path
                arcname = str(PurePosixPath(destination_dir) / PurePosixPath(path)).lstrip("/")
                if not os.path.lexists(source):
                    raise TransferError(
                        f"Unable to add `{source}` to the archive. Details: "
                        f"No such file or directory."
                    )
                LOGGER.debug(f"Adding `{source}` to the archive as `/{arcname}`…")
                try:
                    tar.add(str(source), arcname=arcname)
                except OSError as e:
                    raise TransferError(
                        f"Unable to add `{source}` to the archive. Details: {e}",
                        cause=e,
                    ) from e
    except BaseException:
        archive.close()
        raise

    archive.seek(0)
    return archive


def _relocate_tree(root: Path, destination: Path) -> None:
    def on_error(e: OSError) -> None:
        raise TransferError(
            f"Unable to traverse directory `{root}`. Details: {e}", cause=e
        ) from e

    for dirpath, dirnames, filenames in os.walk(root, onerror=on_error):
        current = Path(dirpath)
        target = destination / current.relative_to(root)
        _make_dirs(target)

        # os.walk lists symlinks to directories with the directories. They are
        # moved like files and pruned from the walk.
        links = [name for name in dirnames if (current / name).is_symlink()]
        dirnames[:] = [name for name in dirnames if name not in links]
        for name in links + filenames:
            _move(current / name, target / name)


def _make_dirs(path: Path) -> None:
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise TransferError(
            f"Unable to create directory `{path}`. Details: {e}", cause=e
        ) from e


def _move(source: Path, destination: Path) -> None:
    try:
        os.replace(source, destination)
    except OSError as e:
        raise TransferError(
            f"Unable to move file `{source}` to destination `{destination}`. "
            f"Details: {e}",
            cause=e,
        ) from e
