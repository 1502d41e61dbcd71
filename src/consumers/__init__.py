"""
Kafka consumers for group event processing.
"""

# Rate consumer (Kafka → OutlierDetector)
from .rate import RateConsumer, RateConsumerConfig

__all__ = ["RateConsumer", "RateConsumerConfig"]
