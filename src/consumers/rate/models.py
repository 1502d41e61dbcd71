"""
Configuration for the Kafka rate consumer.
"""

from dataclasses import dataclass, field

from src.outlier.models import DetectorConfig


@dataclass
class RateConsumerConfig:
    """Configuration for the rate consumer"""

    # Kafka settings
    kafka_bootstrap_servers: str = "localhost:9092"
    kafka_topic: str = "group-events"
    kafka_group_id: str = "outlier-rate-consumer-group"
    kafka_auto_offset_reset: str = "latest"  # only rates of new traffic matter
    max_poll_records: int = 500

    # Message layout
    group_field: str = "group_id"
    count_field: str = "count"

    # Consumer behavior
    stats_interval_seconds: float = 10.0

    # Classification
    detector: DetectorConfig = field(default_factory=DetectorConfig)
