"""
Pytest configuration and shared fixtures for dockhand tests.

Provides a cancellation flag, a recording spinner renderer, fake engine
binaries written as shell scripts, and mock engine verbs.
"""

import threading
from unittest.mock import MagicMock

import pytest

from dockhand.core.cancellation import CancellationFlag
from dockhand.core.console import Console
from dockhand.core.docker import Docker
from dockhand.core.progress import ProgressService

from tests.fixtures.utils import write_engine


# ============================================================================
# Cancellation and spinner fixtures
# ============================================================================

@pytest.fixture
def running():
    """A fresh cancellation flag that is still running."""
    return CancellationFlag()


class RecordingRenderer:
    """Spinner renderer that records its life cycle in a shared journal."""

    def __init__(self, journal, message):
        self.journal = journal
        self.message = message
        self.ticks = 0
        self.cleared = False
        journal.start(self)

    def tick(self):
        self.ticks += 1

    def finish_and_clear(self):
        self.cleared = True
        self.journal.stop(self)


class SpinnerJournal:
    """Thread-safe record of spinner starts and stops."""

    def __init__(self):
        self._lock = threading.Lock()
        self.events = []
        self.renderers = []
        self.active = 0
        self.max_active = 0

    def start(self, renderer):
        with self._lock:
            self.active += 1
            self.max_active = max(self.max_active, self.active)
            self.events.append(("start", renderer.message))
            self.renderers.append(renderer)

    def stop(self, renderer):
        with self._lock:
            self.active -= 1
            self.events.append(("stop", renderer.message))

    def factory(self, message):
        return RecordingRenderer(self, message)


@pytest.fixture
def spinner_journal():
    """Journal for a recording progress service."""
    return SpinnerJournal()


@pytest.fixture
def progress_service(spinner_journal):
    """A progress service that renders into the spinner journal."""
    return ProgressService(
        renderer_factory=spinner_journal.factory,
        fast_interval=0.001,
        slow_interval=0.002,
        fast_window=0.005,
    )


# ============================================================================
# Engine fixtures
# ============================================================================

@pytest.fixture
def sh_console():
    """Console whose engine binary is /bin/sh, without spinners."""
    return Console(engine="sh", spinner=False)


@pytest.fixture
def container_root(tmp_path):
    """Host directory standing in for a container's filesystem."""
    root = tmp_path / "container"
    root.mkdir()
    return root


@pytest.fixture
def cp_engine(tmp_path, container_root):
    """Fake engine whose ``container cp C:SRC DEST`` behaves like ``cp -R``.

    Like the real command, copying a directory onto an existing directory
    nests it one level deeper.
    """
    return write_engine(
        tmp_path,
        f"""
        if [ "$1" = container ] && [ "$2" = cp ]; then
            src="${{3#*:}}"
            exec cp -R "{container_root}$src" "$4"
        fi
        exit 1
        """,
    )


@pytest.fixture
def mock_docker():
    """Docker verbs backed by a mock."""
    docker = MagicMock(spec=Docker)
    docker.create_container.return_value = "c0ffee"
    docker.image_exists.return_value = True
    return docker
