"""Runs backend calls on the thread pool and reports the outcome back through Qt signals."""
from __future__ import annotations

import logging
from typing import Any, Callable, Hashable

from PyQt6.QtCore import QObject, QRunnable, pyqtSignal

from field_client.services.transport import TransportError

LOGGER = logging.getLogger("FieldPlacer.Client")


class TransportJob:
    """A single backend call plus the handlers for its two outcomes.

    ``tag`` is handed back to both handlers so the caller can tell which
    request finished. Only :class:`TransportError` is reported as a failure;
    anything else is a bug and propagates.
    """

    def __init__(
        self,
        tag: Hashable,
        call: Callable[[], Any],
        on_success: Callable[[Hashable, Any], None],
        on_failure: Callable[[Hashable, TransportError], None],
    ) -> None:
        self.tag = tag
        self._call = call
        self._on_success = on_success
        self._on_failure = on_failure

    def run(self) -> None:
        try:
            result = self._call()
        except TransportError as exc:
            LOGGER.debug("Backend call %r failed: %s", self.tag, exc)
            self._on_failure(self.tag, exc)
            return
        self._on_success(self.tag, result)


class TransportSignals(QObject):
    succeeded = pyqtSignal(object, object)
    failed = pyqtSignal(object, object)
    finished = pyqtSignal(object)


class TransportTask(QRunnable):
    """Thread-pool wrapper around :class:`TransportJob`.

    Create it on the GUI thread: the signals object then lives there and
    slots on GUI objects receive the outcome through queued connections.
    """

    def __init__(self, tag: Hashable, call: Callable[[], Any]) -> None:
        super().__init__()
        # The owner keeps the task alive until finished is delivered.
        self.setAutoDelete(False)
        self.tag = tag
        self.signals = TransportSignals()
        self._job = TransportJob(tag, call, self.signals.succeeded.emit, self.signals.failed.emit)

    def run(self) -> None:
        try:
            self._job.run()
        except Exception:
            LOGGER.exception("Unexpected error in backend call %r", self._job.tag)
            self.signals.failed.emit(self._job.tag, TransportError("Unexpected error talking to the backend"))
        finally:
            self.signals.finished.emit(self._job.tag)
