"""
Concurrent registry of monitored groups.
"""

from collections.abc import Callable

import structlog

from .exceptions import UnsupportedAlgorithmError
from .models import EventRateAlgorithm, Status
from .rates import ExponentialMovingAverage, SlidingWindowRate

logger = structlog.get_logger(__name__)


class GroupStats:
    """Rate statistics and classification status of a single group"""

    def __init__(
        self,
        group_id: str,
        actual: SlidingWindowRate,
        ema: ExponentialMovingAverage,
    ):
        self.group_id = group_id
        self.actual = actual
        self.ema = ema
        # Written only by the classifier sweep
        self.status = Status.GOOD_CITIZEN

    def mark(self, n: int = 1) -> None:
        """Mark the occurrence of n events"""
        self.ema.observe(n)
        self.actual.observe(n)

    def rate(self, algorithm: EventRateAlgorithm) -> float:
        """Event rate in events/sec under the given algorithm"""
        if algorithm == EventRateAlgorithm.ACTUAL_RATE_PER_SEC:
            return self.actual.rate()
        if algorithm == EventRateAlgorithm.EMA_RATE_PER_MINUTE:
            return self.ema.rate()
        raise UnsupportedAlgorithmError(algorithm)

    def __repr__(self) -> str:
        return f"GroupStats(group_id={self.group_id!r}, status={self.status.name})"


class GroupRegistry:
    """Insertion-ordered mapping from group id to its GroupStats.

    Creation is lazy and lock-free: two threads racing on an unseen id may
    both build a record, ``dict.setdefault`` keeps exactly one and the other
    is discarded before it has observed any event.
    """

    def __init__(self, factory: Callable[[str], GroupStats]):
        self._factory = factory
        self._groups: dict[str, GroupStats] = {}

    def get(self, group_id: str) -> GroupStats | None:
        return self._groups.get(group_id)

    def get_or_create(self, group_id: str) -> GroupStats:
        """Return the record for group_id, creating it on first use"""
        stats = self._groups.get(group_id)
        if stats is None:
            candidate = self._factory(group_id)
            stats = self._groups.setdefault(group_id, candidate)
            if stats is candidate:
                logger.debug("Group registered", group_id=group_id, groups=len(self._groups))
        return stats

    def snapshot_all(self) -> list[GroupStats]:
        """Copy of all records in insertion order"""
        return list(self._groups.values())

    def size(self) -> int:
        return len(self._groups)

    def clear(self) -> None:
        self._groups.clear()

    def __len__(self) -> int:
        return len(self._groups)

    def __contains__(self, group_id: str) -> bool:
        return group_id in self._groups
