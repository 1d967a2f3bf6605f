"""
Cooperative cancellation for compilation runs.
"""

from __future__ import annotations

import threading

from replaygen.core.errors import CompilationCancelled


class CancellationToken:
    """
    A shared cancellation signal.

    The compilers call ``raise_if_cancelled`` at node entry, before
    recursing into children and before every part edge. The signal may be
    set from any thread.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        self._event.set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise CompilationCancelled()
