"""
Synthetic Group Traffic Generator
Emits per-group event traffic with configurable rates and bursts, either to
an in-process outlier detector or to a Kafka topic.
"""

from .config import BURSTY_CONFIG, DEV_CONFIG, GETTING_STARTED_CONFIG, SCENARIO_A_CONFIG
from .generator import DetectorSink, KafkaEventSink, TrafficGenerator
from .group_state import GroupTraffic
from .models import DeliveryMode, GeneratorConfig

__all__ = [
    "DeliveryMode",
    "GeneratorConfig",
    "GroupTraffic",
    "TrafficGenerator",
    "DetectorSink",
    "KafkaEventSink",
    "SCENARIO_A_CONFIG",
    "GETTING_STARTED_CONFIG",
    "BURSTY_CONFIG",
    "DEV_CONFIG",
]

__version__ = "1.0.0"
