"""
Pytest configuration and shared fixtures.
"""

import pytest

from src.consumers.rate.models import RateConsumerConfig
from src.generator.models import GeneratorConfig
from src.outlier.detector import OutlierDetector
from src.outlier.models import DetectorConfig, EventRateAlgorithm, ReportingChannel


class FakeClock:
    """Manually advanced monotonic clock"""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    """Deterministic clock shared by a detector and its estimators."""
    return FakeClock()


# Detector fixtures
@pytest.fixture
def detector_config():
    """Threshold 40 events/sec, 30% outlier cap, no reporting sink."""
    return DetectorConfig(
        outlier_rate_threshold=40,
        max_outlier_percent=0.3,
        rate_algorithm=EventRateAlgorithm.ACTUAL_RATE_PER_SEC,
        reporting_channel=ReportingChannel.NONE,
    )


@pytest.fixture
def detector(detector_config, clock):
    """Detector driven by the fake clock, sweeps run manually."""
    return OutlierDetector(detector_config, clock=clock)


@pytest.fixture
def mark_rates():
    """Mark one second worth of events per group, in the given order."""

    def _mark(detector: OutlierDetector, rates: dict[str, int]) -> None:
        for group_id, rate in rates.items():
            detector.mark(group_id, rate)

    return _mark


# Consumer fixtures
@pytest.fixture
def consumer_config():
    """Basic rate consumer configuration for testing."""
    return RateConsumerConfig(
        kafka_bootstrap_servers="localhost:9092",
        kafka_topic="test-topic",
        kafka_group_id="test-group",
        stats_interval_seconds=3600.0,
        detector=DetectorConfig(reporting_channel=ReportingChannel.NONE),
    )


# Generator fixtures
@pytest.fixture
def generator_config():
    """Small steady traffic without randomness."""
    return GeneratorConfig(
        kafka_bootstrap_servers="localhost:9092",
        kafka_topic="test-topic",
        group_rates={"A": 99.0, "B": 65.0, "C": 50.0, "D": 1.0},
        event_interval_seconds=1.0,
    )
