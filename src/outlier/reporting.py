"""
Periodic reporting sinks for group rates.

A reporter polls a snapshot callable on its own schedule, independent of
the classification sweep, and writes what it sees to a channel.
"""

import sys
from abc import ABC, abstractmethod
from collections.abc import Callable
from datetime import UTC, datetime
from typing import TextIO

import structlog

from .models import GroupSnapshot, ReportingChannel, ReportingInterval
from .scheduler import FixedDelayScheduler

logger = structlog.get_logger(__name__)

SnapshotSource = Callable[[], list[GroupSnapshot]]


class GroupReporter(ABC):
    """Base class for scheduled group rate reporters"""

    def __init__(self, snapshot: SnapshotSource, interval: ReportingInterval):
        self.snapshot = snapshot
        self.interval = interval
        self._scheduler = FixedDelayScheduler(
            self.__class__.__name__, interval.seconds, self.report_once
        )

    def start(self) -> None:
        self._scheduler.start()

    def stop(self) -> None:
        self._scheduler.stop()

    def report_once(self) -> None:
        """Poll the source and report the current snapshot"""
        self.report(self.snapshot())

    @abstractmethod
    def report(self, snapshots: list[GroupSnapshot]) -> None:
        """Write one report"""
        pass


class ConsoleReporter(GroupReporter):
    """Writes a plain table of group rates to a text stream"""

    def __init__(
        self,
        snapshot: SnapshotSource,
        interval: ReportingInterval,
        stream: TextIO | None = None,
    ):
        super().__init__(snapshot, interval)
        self.stream = stream or sys.stdout

    def report(self, snapshots: list[GroupSnapshot]) -> None:
        timestamp = datetime.now(UTC).isoformat(timespec="seconds")
        lines = [
            f"{timestamp} " + "=" * 40,
            f"{'group':<20} {'status':<13} {'rate':>10} {'actual':>10} {'ema':>10}",
        ]
        for s in snapshots:
            lines.append(
                f"{s.group_id:<20} {s.status.name:<13} "
                f"{s.rate:>10.3f} {s.actual_rate:>10.3f} {s.ema_rate:>10.3f}"
            )
        if not snapshots:
            lines.append("(no groups)")
        self.stream.write("\n".join(lines) + "\n\n")
        self.stream.flush()


class LogReporter(GroupReporter):
    """Emits one structured log event per group"""

    def __init__(
        self,
        snapshot: SnapshotSource,
        interval: ReportingInterval,
        logger_name: str = "src.outlier.metrics",
    ):
        super().__init__(snapshot, interval)
        self.metrics_logger = structlog.get_logger(logger_name)

    def report(self, snapshots: list[GroupSnapshot]) -> None:
        for s in snapshots:
            self.metrics_logger.info(
                "Group rates",
                group_id=s.group_id,
                status=s.status.name,
                rate=round(s.rate, 3),
                actual_rate=round(s.actual_rate, 3),
                ema_rate=round(s.ema_rate, 3),
            )


# Registry of available reporting channels
REPORTER_REGISTRY: dict[ReportingChannel, type[GroupReporter]] = {
    ReportingChannel.CONSOLE: ConsoleReporter,
    ReportingChannel.LOG: LogReporter,
}


def get_reporter(
    channel: ReportingChannel, snapshot: SnapshotSource, interval: ReportingInterval
) -> GroupReporter | None:
    """Factory to create the reporter for a channel

    Returns:
        A reporter instance, or None for ReportingChannel.NONE

    Raises:
        ValueError: If the channel has no registered reporter
    """
    if channel == ReportingChannel.NONE:
        return None
    if channel not in REPORTER_REGISTRY:
        available = ", ".join(c.value for c in REPORTER_REGISTRY)
        raise ValueError(f"Unknown reporting channel '{channel}'. Available channels: {available}")

    reporter_class = REPORTER_REGISTRY[channel]
    logger.debug("Reporter created", channel=channel.value, interval=interval.seconds)
    return reporter_class(snapshot, interval)
