"""
Kafka ingestion of group events into the outlier detector.

Usage:
    python -m src.consumers.rate.detect
"""

from .consumer import RateConsumer
from .models import RateConsumerConfig

__all__ = ["RateConsumer", "RateConsumerConfig"]
