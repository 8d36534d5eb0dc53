"""
Cooperative cancellation between pipeline stages.
"""

import threading

from pattern_vectorizer.shared.errors import PipelineCancelledError


class CancellationToken:
    """Thread-safe flag checked by the pipeline before each stage."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self, stage: str) -> None:
        """Raise PipelineCancelledError naming the stage about to start."""
        if self._event.is_set():
            raise PipelineCancelledError(stage)
