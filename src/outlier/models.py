"""
Data models and configuration for the outlier detector.
"""

from dataclasses import dataclass, field
from enum import Enum

from .exceptions import UnsupportedAlgorithmError


class Status(Enum):
    """Classification of a group"""

    GOOD_CITIZEN = "good_citizen"
    OUTLIER = "outlier"


class EventRateAlgorithm(Enum):
    """Which rate signal drives classification"""

    # Events counted in the trailing window. Choppy: groups flip status on small variations.
    ACTUAL_RATE_PER_SEC = "actual_rate_per_sec"
    # One-minute exponentially decayed average. Smoother, only large variations cause swaps.
    EMA_RATE_PER_MINUTE = "ema_rate_per_minute"

    @classmethod
    def parse(cls, value: "EventRateAlgorithm | str") -> "EventRateAlgorithm":
        """Coerce an enum member, value or name into an algorithm"""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            for algorithm in cls:
                if value.lower() in (algorithm.value, algorithm.name.lower()):
                    return algorithm
        raise UnsupportedAlgorithmError(value)


class ReportingChannel(Enum):
    """Where periodic rate reports are written"""

    CONSOLE = "console"
    LOG = "log"
    NONE = "none"


@dataclass(frozen=True)
class ReportingInterval:
    """How often the reporting sink polls the detector"""

    seconds: float

    def __post_init__(self):
        if not self.seconds > 0:
            raise ValueError(f"Reporting interval must be positive, got {self.seconds}")


ReportingInterval.PER_SEC = ReportingInterval(1.0)
ReportingInterval.PER_5_SEC = ReportingInterval(5.0)
ReportingInterval.PER_10_SEC = ReportingInterval(10.0)
ReportingInterval.PER_30_SEC = ReportingInterval(30.0)
ReportingInterval.PER_MIN = ReportingInterval(60.0)


@dataclass
class DetectorConfig:
    """Configuration for the outlier detector"""

    # Classification
    outlier_rate_threshold: float = 40.0  # events/sec, strictly greater is an outlier
    max_outlier_percent: float = 0.3  # 1.0 effectively disables the cap
    rate_algorithm: EventRateAlgorithm = EventRateAlgorithm.ACTUAL_RATE_PER_SEC

    # Reporting sink
    reporting_channel: ReportingChannel = ReportingChannel.LOG
    reporting_interval: ReportingInterval = field(
        default_factory=lambda: ReportingInterval.PER_5_SEC
    )

    # Scheduling and estimators
    sweep_interval_seconds: float = 1.0
    actual_rate_window_seconds: float = 1.0
    ema_window_seconds: float = 60.0
    ema_tick_seconds: float = 5.0

    def __post_init__(self):
        self.rate_algorithm = EventRateAlgorithm.parse(self.rate_algorithm)
        if not isinstance(self.reporting_channel, ReportingChannel):
            self.reporting_channel = ReportingChannel(str(self.reporting_channel).lower())
        if not isinstance(self.reporting_interval, ReportingInterval):
            self.reporting_interval = ReportingInterval(float(self.reporting_interval))

        if not self.outlier_rate_threshold > 0:
            raise ValueError(
                f"outlier_rate_threshold must be positive, got {self.outlier_rate_threshold}"
            )
        if not 0.0 <= self.max_outlier_percent <= 1.0:
            raise ValueError(
                f"max_outlier_percent must be within [0.0, 1.0], got {self.max_outlier_percent}"
            )
        for name in (
            "sweep_interval_seconds",
            "actual_rate_window_seconds",
            "ema_window_seconds",
            "ema_tick_seconds",
        ):
            if not getattr(self, name) > 0:
                raise ValueError(f"{name} must be positive, got {getattr(self, name)}")


@dataclass
class GroupSnapshot:
    """Point-in-time view of one group, consumed by reporting sinks"""

    group_id: str
    status: Status
    rate: float
    actual_rate: float
    ema_rate: float

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization"""
        return {
            "group_id": self.group_id,
            "status": self.status.value,
            "rate": self.rate,
            "actual_rate": self.actual_rate,
            "ema_rate": self.ema_rate,
        }
