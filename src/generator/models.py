"""
Data models for the synthetic group traffic generator.
"""

from dataclasses import dataclass
from enum import Enum


class DeliveryMode(Enum):
    """Where generated events are delivered"""

    LOCAL = "local"  # marked on an in-process detector
    KAFKA = "kafka"  # published to a Kafka topic


@dataclass
class GeneratorConfig:
    """Configuration for the traffic generator"""

    # Kafka settings
    kafka_bootstrap_servers: str = "localhost:9092"
    kafka_topic: str = "group-events"

    # Traffic shape: events/sec per group, emitted in registration order
    group_rates: dict[str, float] | None = None
    event_interval_seconds: float = 1.0
    jitter: float = 0.0  # relative +/- variation of each round's count

    # Bursts
    burst_probability: float = 0.0  # chance per round that a group starts a burst
    burst_multiplier: float = 4.0

    # Stop emitting after this many rounds (None emits forever)
    active_rounds: int | None = None

    def __post_init__(self):
        if self.group_rates is None:
            self.group_rates = {"289": 99.0, "3434": 49.0, "3231": 64.0, "5643": 1.0}
        if not all(rate >= 0 for rate in self.group_rates.values()):
            raise ValueError("Group rates must be non-negative")
        if not 0.0 <= self.jitter < 1.0:
            raise ValueError("jitter must be within [0.0, 1.0)")
        if not 0.0 <= self.burst_probability <= 1.0:
            raise ValueError("burst_probability must be within [0.0, 1.0]")
