#!/usr/bin/env python3
"""Spinner-as-a-service.

A single background thread renders at most one spinner at a time. Callers ask
the service for a spinner with ``spin(message)`` and get back a SpinnerHandle;
leaving the handle's ``with`` block stops the spinner and waits until the worker has
cleared it from the terminal, so later output never interleaves with stale
spinner frames.
"""

import logging
import queue
import threading
import time
import typing

from rich.console import Console as RichConsole
from rich.progress import Progress, SpinnerColumn, TextColumn


LOGGER = logging.getLogger(__name__)


# Console used for spinners and log output.
rich_console = RichConsole(stderr=True)

DEFAULT_FAST_INTERVAL = 0.016
DEFAULT_SLOW_INTERVAL = 0.1
DEFAULT_FAST_WINDOW = 0.1


class RichSpinner:
    """Transient Rich progress display showing one spinner and a message."""

    def __init__(self, message: str, console: RichConsole = rich_console) -> None:
        self._progress = Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
            transient=True,
            auto_refresh=False,
        )
        self._progress.add_task(message, total=None)
        self._progress.start()

    def tick(self) -> None:
        self._progress.refresh()

    def finish_and_clear(self) -> None:
        self._progress.stop()


class _Channel:
    """Zero-capacity channel: send() returns only once the receiver took the item."""

    def __init__(self) -> None:
        self._ready = threading.Semaphore(0)
        self._slot: queue.Queue = queue.Queue(maxsize=1)

    def send(self, item: typing.Any) -> None:
        self._ready.acquire()
        self._slot.put(item)

    def recv(self) -> typing.Any:
        self._ready.release()
        return self._slot.get()


class SpinnerHandle:
    """Scope guard for a running spinner.

    Use as a context manager, or call release() explicitly. Releasing more
    than once is a no-op.
    """

    def __init__(self, spinning: threading.Event, response: queue.Queue) -> None:
        self._spinning = spinning
        self._response = response
        self._released = False

    def release(self) -> None:
        if self._released:
            return
        self._released = True

        # Tell the worker to stop, then wait until the spinner is cleared.
        self._spinning.clear()
        self._response.get()

    def __enter__(self) -> "SpinnerHandle":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.release()


class ProgressService:
    """Background worker that renders spinner requests one at a time.

    Attributes:
        fast_interval (float): Tick interval during the fast window, in seconds.
        slow_interval (float): Tick interval after the fast window, in seconds.
        fast_window (float): How long to animate at the fast rate, in seconds.
    """

    def __init__(
        self,
        renderer_factory: typing.Optional[typing.Callable[[str], typing.Any]] = None,
        fast_interval: float = DEFAULT_FAST_INTERVAL,
        slow_interval: float = DEFAULT_SLOW_INTERVAL,
        fast_window: float = DEFAULT_FAST_WINDOW,
    ) -> None:
        """Start the worker thread.

        Args:
            renderer_factory: Builds a renderer for a message. The renderer
                must provide tick() and finish_and_clear().
            fast_interval: Tick interval during the fast window.
            slow_interval: Tick interval after the fast window.
            fast_window: Duration of the fast window.
        """
        self.renderer_factory = renderer_factory or RichSpinner
        self.fast_interval = fast_interval
        self.slow_interval = slow_interval
        self.fast_window = fast_window
        self._requests = _Channel()
        self._thread = threading.Thread(
            target=self._serve, name="dockhand-spinner", daemon=True
        )
        self._thread.start()

    def spin(self, message: str) -> SpinnerHandle:
        """Start a spinner and return the handle that stops it.

        Blocks until the worker is idle, so only one spinner is ever live.
        """
        spinning = threading.Event()
        spinning.set()
        response: queue.Queue = queue.Queue(maxsize=1)
        self._requests.send((message, spinning, response))
        return SpinnerHandle(spinning, response)

    def _serve(self) -> None:
        while True:
            message, spinning, response = self._requests.recv()
            try:
                self._render(message, spinning)
            except Exception:
                LOGGER.exception(f"Spinner for `{message}` failed.")
            finally:
                # Always acknowledge, or the handle's release would block forever.
                response.put(None)

    def _render(self, message: str, spinning: threading.Event) -> None:
        renderer = self.renderer_factory(message)
        started = time.monotonic()
        try:
            while spinning.is_set():
                renderer.tick()

                # Animate quickly at first so instant work stops promptly,
                # then slow down.
                if time.monotonic() - started < self.fast_window:
                    time.sleep(self.fast_interval)
                else:
                    time.sleep(self.slow_interval)
        finally:
            renderer.finish_and_clear()


_service: typing.Optional[ProgressService] = None
_service_lock = threading.Lock()


def get_progress_service(**options: float) -> ProgressService:
    """Return the process-wide ProgressService, creating it on first use.

    Keyword options (fast_interval, slow_interval, fast_window) are applied
    to the service whether or not it already exists.
    """
    global _service
    if _service is None:
        with _service_lock:
            if _service is None:
                _service = ProgressService(**options)
                return _service
    for name, value in options.items():
        setattr(_service, name, value)
    return _service
