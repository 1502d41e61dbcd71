"""
Synthetic group traffic generator feeding an outlier detector or Kafka.
"""

import json
import random
import time
from collections.abc import Callable
from datetime import UTC, datetime

import structlog
from kafka import KafkaProducer

from src.outlier import OutlierDetector

from .group_state import GroupTraffic
from .models import GeneratorConfig

logger = structlog.get_logger(__name__)

EventSink = Callable[[str, int], None]


class DetectorSink:
    """Delivers events straight to an in-process detector"""

    def __init__(self, detector: OutlierDetector):
        self.detector = detector

    def __call__(self, group_id: str, count: int) -> None:
        self.detector.mark(group_id, count)

    def flush(self) -> None:
        pass

    def close(self) -> None:
        pass


class KafkaEventSink:
    """Publishes events as JSON messages to a Kafka topic"""

    def __init__(self, config: GeneratorConfig):
        self.topic = config.kafka_topic
        try:
            self.producer = KafkaProducer(
                bootstrap_servers=config.kafka_bootstrap_servers,
                value_serializer=lambda v: json.dumps(v).encode("utf-8"),
                compression_type="gzip",
            )
            logger.info(
                "Kafka producer initialized",
                bootstrap_servers=config.kafka_bootstrap_servers,
                topic=config.kafka_topic,
            )
        except Exception as e:
            logger.error("Failed to initialize Kafka producer", error=str(e))
            raise

    def __call__(self, group_id: str, count: int) -> None:
        self.producer.send(
            self.topic,
            value={
                "type": "group_event",
                "timestamp": datetime.now(UTC).isoformat(),
                "group_id": group_id,
                "count": count,
            },
        )

    def flush(self) -> None:
        self.producer.flush()

    def close(self) -> None:
        self.producer.close()


class TrafficGenerator:
    """Emits one round of events per group every interval"""

    def __init__(self, config: GeneratorConfig, sink: EventSink):
        self.config = config
        self.sink = sink
        self.groups = [GroupTraffic(g, rate) for g, rate in config.group_rates.items()]
        self.rounds = 0

        logger.info(
            "Traffic generator initialized",
            groups=len(self.groups),
            interval=config.event_interval_seconds,
            active_rounds=config.active_rounds,
        )

    @property
    def active(self) -> bool:
        return self.config.active_rounds is None or self.rounds < self.config.active_rounds

    def generate_round(self) -> int:
        """Generate and deliver one round of events

        Returns:
            Total number of events delivered
        """
        total = 0
        if self.active:
            for group in self.groups:
                if not group.in_burst and random.random() < self.config.burst_probability:
                    group.start_burst(self.config.burst_multiplier)
                    logger.warning(
                        "Burst started",
                        group_id=group.group_id,
                        multiplier=self.config.burst_multiplier,
                        rounds=group.burst_duration,
                    )

                count = group.events_for_round(
                    self.config.event_interval_seconds, self.config.jitter
                )
                if count > 0:
                    self.sink(group.group_id, count)
                    total += count

            flush = getattr(self.sink, "flush", None)
            if flush is not None:
                flush()

        self.rounds += 1
        return total

    def run(
        self,
        duration_seconds: int = None,
        on_round: Callable[[int], None] | None = None,
    ):
        """Run the generator continuously or for a specified duration

        Args:
            duration_seconds: Optional duration in seconds. If None, runs indefinitely.
            on_round: Optional callback invoked with the round number after each round.
        """
        logger.info(
            "Starting traffic generator",
            duration=duration_seconds if duration_seconds else "indefinite",
        )

        start_time = time.time()
        event_count = 0

        try:
            while True:
                event_count += self.generate_round()
                if on_round is not None:
                    on_round(self.rounds)

                elapsed = time.time() - start_time
                if duration_seconds and elapsed >= duration_seconds:
                    logger.info("Duration limit reached", duration_seconds=duration_seconds)
                    break

                time.sleep(self.config.event_interval_seconds)

        except KeyboardInterrupt:
            logger.info("Received interrupt signal, stopping generator")

        except Exception as e:
            logger.error("Generator error", error=str(e), exc_info=True)
            raise

        finally:
            elapsed = time.time() - start_time
            close = getattr(self.sink, "close", None)
            if close is not None:
                close()
            logger.info(
                "Generator stopped",
                rounds=self.rounds,
                total_events=event_count,
                elapsed_sec=round(elapsed, 1),
            )
