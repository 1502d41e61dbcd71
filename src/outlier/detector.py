"""
Outlier detector.

Classifies every group that has emitted events as either GOOD_CITIZEN or
OUTLIER based on its event rate, with a cap on how many groups may be
OUTLIER at once. The cap keeps a bursty majority from moving every group
off the normal processing path. Set ``max_outlier_percent`` to 1.0 to
allow every group to become an outlier.

Classification happens in a periodic sweep over all groups in
registration order:
- A group at or below the threshold is demoted to GOOD_CITIZEN
- A group above the threshold is promoted while the outlier fraction is under the cap
- Once the cap is reached, a group above the threshold replaces the weakest
  current outlier if its rate is strictly higher

The outlier fraction is recomputed before each group's decision, so
promotions made earlier in a pass count against later groups of the same pass.
"""

import logging
import time
from collections.abc import Callable

import structlog

from .exceptions import NoGroupsRegisteredError, UnknownGroupError
from .models import DetectorConfig, GroupSnapshot, Status
from .rates import ExponentialMovingAverage, SlidingWindowRate
from .registry import GroupRegistry, GroupStats
from .reporting import GroupReporter, get_reporter
from .scheduler import FixedDelayScheduler

logger = structlog.get_logger(__name__)
_stdlib_logger = logging.getLogger(__name__)


class OutlierDetector:
    """Rate-based outlier classification of event producing groups"""

    def __init__(
        self,
        config: DetectorConfig | None = None,
        clock: Callable[[], float] = time.monotonic,
        reporter: GroupReporter | None = None,
    ):
        self.config = config or DetectorConfig()
        self.clock = clock
        self.registry = GroupRegistry(self._new_group)

        self._sweeper = FixedDelayScheduler(
            "outlier-sweep", self.config.sweep_interval_seconds, self.detect_outliers
        )
        if reporter is None:
            reporter = get_reporter(
                self.config.reporting_channel, self.snapshot, self.config.reporting_interval
            )
        self.reporter = reporter

        logger.info(
            "Outlier detector initialized",
            threshold=self.config.outlier_rate_threshold,
            max_outlier_percent=self.config.max_outlier_percent,
            algorithm=self.config.rate_algorithm.value,
            channel=self.config.reporting_channel.value,
        )

    # ========================================
    # Lifecycle
    # ========================================

    def init(self) -> None:
        """Start the periodic sweep and the reporting sink"""
        if self._sweeper.is_running:
            raise RuntimeError("Outlier detector already running")

        if self.reporter is not None:
            self.reporter.start()
        self._sweeper.start()
        logger.info("Outlier detector started", sweep_interval=self.config.sweep_interval_seconds)

    def shutdown(self) -> None:
        """Stop sweeping and reporting, then discard all groups"""
        self._sweeper.stop()
        if self.reporter is not None:
            self.reporter.stop()
        groups = self.registry.size()
        self.registry.clear()
        logger.info("Outlier detector stopped", discarded_groups=groups)

    @property
    def is_running(self) -> bool:
        return self._sweeper.is_running

    @property
    def group_count(self) -> int:
        return self.registry.size()

    def __enter__(self) -> "OutlierDetector":
        self.init()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown()

    # ========================================
    # Ingestion and queries
    # ========================================

    def mark(self, group_id: str, n: int = 1) -> None:
        """Record n events for group_id, registering the group on first use"""
        if n < 1:
            raise ValueError(f"Event count must be >= 1, got {n}")
        self.registry.get_or_create(group_id).mark(n)

    def get_status(self, group_id: str) -> Status:
        """Status decided by the last sweep"""
        return self._require(group_id).status

    def is_outlier(self, group_id: str) -> bool:
        return self.get_status(group_id) == Status.OUTLIER

    def get_event_rate(self, group_id: str) -> float:
        """Event rate in events/sec under the configured algorithm"""
        return self._require(group_id).rate(self.config.rate_algorithm)

    def get_actual_rate(self, group_id: str) -> float:
        """Windowed rate, irrespective of the configured algorithm"""
        return self._require(group_id).actual.rate()

    def get_ema_rate(self, group_id: str) -> float:
        """Decayed average rate, irrespective of the configured algorithm"""
        return self._require(group_id).ema.rate()

    def exceeds_threshold(self, group_id: str) -> bool:
        """True if the group's rate is strictly above the threshold"""
        if self.registry.size() == 0:
            raise NoGroupsRegisteredError(group_id)
        stats = self._require(group_id)
        return self._exceeds(stats, stats.rate(self.config.rate_algorithm))

    def snapshot(self) -> list[GroupSnapshot]:
        """Live view of every group for reporting sinks"""
        algorithm = self.config.rate_algorithm
        return [
            GroupSnapshot(
                group_id=g.group_id,
                status=g.status,
                rate=g.rate(algorithm),
                actual_rate=g.actual.rate(),
                ema_rate=g.ema.rate(),
            )
            for g in self.registry.snapshot_all()
        ]

    # ========================================
    # Classification sweep
    # ========================================

    def detect_outliers(self) -> dict:
        """Run one classification pass over all groups

        Returns:
            Dictionary with pass statistics
        """
        groups = self.registry.snapshot_all()
        stats = {
            "groups": len(groups),
            "outliers": 0,
            "promoted": 0,
            "demoted": 0,
            "swapped": 0,
            "failed": 0,
        }

        for group in groups:
            try:
                self._classify(group, stats)
            except Exception as e:
                stats["failed"] += 1
                logger.error(
                    "Failed to classify group",
                    group_id=group.group_id,
                    error=str(e),
                    exc_info=True,
                )

        stats["outliers"] = sum(1 for g in groups if g.status == Status.OUTLIER)
        logger.debug("Sweep completed", **stats)
        return stats

    def _classify(self, group: GroupStats, stats: dict) -> None:
        if self.registry.size() == 0:
            raise NoGroupsRegisteredError(group.group_id)

        rate = group.rate(self.config.rate_algorithm)
        exceeds = self._exceeds(group, rate)
        outlier_fraction = self._outlier_fraction()
        previous = group.status

        if not exceeds:
            group.status = Status.GOOD_CITIZEN
            if previous == Status.OUTLIER:
                stats["demoted"] += 1
                logger.info("Group demoted to GOOD_CITIZEN", group_id=group.group_id, rate=rate)

        if exceeds and outlier_fraction < self.config.max_outlier_percent:
            group.status = Status.OUTLIER
            if previous == Status.GOOD_CITIZEN:
                stats["promoted"] += 1
                logger.info(
                    "Group promoted to OUTLIER",
                    group_id=group.group_id,
                    rate=rate,
                    outlier_fraction=round(outlier_fraction, 3),
                )

        # Cap reached: bump the weakest outlier if this group is stronger
        if (
            group.status == Status.GOOD_CITIZEN
            and exceeds
            and outlier_fraction >= self.config.max_outlier_percent
        ):
            weakest = self._weakest_outlier()
            if weakest is not None and weakest[1] < rate:
                current, current_rate = weakest
                logger.info(
                    "Swapping outlier",
                    demoted_group=current.group_id,
                    demoted_rate=current_rate,
                    promoted_group=group.group_id,
                    promoted_rate=rate,
                )
                current.status = Status.GOOD_CITIZEN
                group.status = Status.OUTLIER
                stats["swapped"] += 1

    def _exceeds(self, group: GroupStats, rate: float) -> bool:
        if _stdlib_logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "Group rate evaluated",
                group_id=group.group_id,
                current_rate=round(rate, 3),
                actual_rate=round(group.actual.rate(), 3),
                ema_rate=round(group.ema.rate(), 3),
            )
        return rate > self.config.outlier_rate_threshold

    def _outlier_fraction(self) -> float:
        groups = self.registry.snapshot_all()
        if not groups:
            return 0.0
        outliers = sum(1 for g in groups if g.status == Status.OUTLIER)
        return outliers / len(groups)

    def _weakest_outlier(self) -> tuple[GroupStats, float] | None:
        """Lowest-rate current outlier, earliest registered on equal rates"""
        algorithm = self.config.rate_algorithm
        candidates = [
            (index, g, g.rate(algorithm))
            for index, g in enumerate(self.registry.snapshot_all())
            if g.status == Status.OUTLIER
        ]
        if not candidates:
            return None
        _, group, rate = min(candidates, key=lambda c: (c[2], c[0]))
        return group, rate

    # ========================================
    # Helpers
    # ========================================

    def _new_group(self, group_id: str) -> GroupStats:
        return GroupStats(
            group_id,
            actual=SlidingWindowRate(self.config.actual_rate_window_seconds, clock=self.clock),
            ema=ExponentialMovingAverage(
                self.config.ema_window_seconds, self.config.ema_tick_seconds, clock=self.clock
            ),
        )

    def _require(self, group_id: str) -> GroupStats:
        stats = self.registry.get(group_id)
        if stats is None:
            raise UnknownGroupError(group_id)
        return stats
