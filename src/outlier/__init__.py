"""
Rate-based Outlier Detection

Continuously classifies named event producers ("groups") as GOOD_CITIZEN or
OUTLIER from their observed event rate, with a global cap on how many groups
may be flagged at once.

Usage:
    detector = OutlierDetector(DetectorConfig(outlier_rate_threshold=40, max_outlier_percent=0.3))
    detector.init()
    detector.mark("tenant-289")
    if detector.is_outlier("tenant-289"):
        ...
    detector.shutdown()
"""

from .detector import OutlierDetector
from .exceptions import (
    NoGroupsRegisteredError,
    OutlierDetectorError,
    UnknownGroupError,
    UnsupportedAlgorithmError,
)
from .models import (
    DetectorConfig,
    EventRateAlgorithm,
    GroupSnapshot,
    ReportingChannel,
    ReportingInterval,
    Status,
)

__all__ = [
    "OutlierDetector",
    "DetectorConfig",
    "EventRateAlgorithm",
    "GroupSnapshot",
    "ReportingChannel",
    "ReportingInterval",
    "Status",
    "OutlierDetectorError",
    "UnknownGroupError",
    "NoGroupsRegisteredError",
    "UnsupportedAlgorithmError",
]
