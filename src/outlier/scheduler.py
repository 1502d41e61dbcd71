"""
Fixed-delay background scheduler.
"""

import threading
from collections.abc import Callable

import structlog

logger = structlog.get_logger(__name__)


class FixedDelayScheduler:
    """Runs a task on a daemon thread, waiting a fixed delay between runs.

    The next run is scheduled only after the previous one returned, so a slow
    run pushes later runs back instead of overlapping them.
    """

    def __init__(self, name: str, interval_seconds: float, task: Callable[[], object]):
        if not interval_seconds > 0:
            raise ValueError("interval_seconds must be positive")
        self.name = name
        self.interval_seconds = interval_seconds
        self.task = task
        self.runs = 0
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self._thread is not None:
            raise RuntimeError(f"Scheduler {self.name} already started")

        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run, name=self.name, daemon=True)
        self._thread.start()
        logger.debug("Scheduler started", scheduler=self.name, interval=self.interval_seconds)

    def stop(self, timeout: float | None = None) -> None:
        """Stop scheduling further runs and wait for an in-flight run to finish"""
        thread = self._thread
        if thread is None:
            return

        self._stop_event.set()
        if thread is not threading.current_thread():
            thread.join(timeout)
        self._thread = None
        logger.debug("Scheduler stopped", scheduler=self.name, runs=self.runs)

    def _run(self) -> None:
        while not self._stop_event.wait(self.interval_seconds):
            try:
                self.task()
            except Exception as e:
                logger.error(
                    "Scheduled task failed", scheduler=self.name, error=str(e), exc_info=True
                )
            self.runs += 1
