"""Run a callable on a fixed interval in a background thread."""

from __future__ import annotations

import logging
import threading
from typing import Callable

logger = logging.getLogger(__name__)


class PeriodicJob:
    """Invoke ``target`` every ``interval`` seconds until stopped.

    Invocations never overlap: the next one is scheduled only after the
    previous returned. Exceptions raised by ``target`` are logged and the loop
    keeps running.
    """

    def __init__(
        self,
        name: str,
        target: Callable[[], object],
        interval: float,
        *,
        run_immediately: bool = True,
    ) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.name = name
        self.interval = interval
        self._target = target
        self._run_immediately = run_immediately
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self._lock = threading.Lock()

    @property
    def running(self) -> bool:
        thread = self._thread
        return thread is not None and thread.is_alive()

    def start(self) -> None:
        """Start the background thread; calling it twice is a no-op."""

        with self._lock:
            if self.running:
                return
            self._stop_event.clear()
            self._thread = threading.Thread(
                target=self._run, name=f"periodic-{self.name}", daemon=True
            )
            self._thread.start()
        logger.info("Started %s job (every %ss)", self.name, self.interval)

    def stop(self, timeout: float | None = None) -> None:
        """Signal the loop to exit and wait up to ``timeout`` seconds for it."""

        with self._lock:
            thread = self._thread
            self._thread = None
            self._stop_event.set()
        if thread is None:
            return
        thread.join(timeout)
        if thread.is_alive():
            logger.warning("%s job did not stop within %ss", self.name, timeout)
        else:
            logger.info("Stopped %s job", self.name)

    def _run(self) -> None:
        if self._run_immediately:
            self._invoke()
        while not self._stop_event.wait(self.interval):
            self._invoke()

    def _invoke(self) -> None:
        try:
            self._target()
        except Exception:  # noqa: BLE001 - the loop must outlive a failed run
            logger.exception("%s job run failed", self.name)


__all__ = ["PeriodicJob"]
