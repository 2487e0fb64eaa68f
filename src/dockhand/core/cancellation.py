#!/usr/bin/env python3
"""Cooperative cancellation flag shared by every engine invocation.

The flag starts out "running". It is latched to "not running" exactly once,
either when a child process is found to have been killed by a signal or when
the CLI's interrupt handler fires, and it is never reset afterwards.
"""

import threading


class CancellationFlag:
    """Process-wide "still running" cell.

    Readers poll ``running`` at decision points; nobody blocks on it.
    """

    def __init__(self) -> None:
        self._stopped = threading.Event()

    @property
    def running(self) -> bool:
        """True until cancel() has been called."""
        return not self._stopped.is_set()

    def cancel(self) -> None:
        """Latch the flag to "not running". Idempotent."""
        self._stopped.set()

    def __bool__(self) -> bool:
        return self.running

    def __repr__(self) -> str:
        return f"CancellationFlag(running={self.running})"
