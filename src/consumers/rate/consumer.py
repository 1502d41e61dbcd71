"""
Rate consumer that feeds Kafka group events into the outlier detector.
"""

import json
import time
from typing import Any

import structlog
from kafka import KafkaConsumer

from src.outlier import OutlierDetector, Status

from .models import RateConsumerConfig

logger = structlog.get_logger(__name__)


class RateConsumer:
    """Consumes group events from Kafka and marks them on an OutlierDetector"""

    def __init__(self, config: RateConsumerConfig, detector: OutlierDetector | None = None):
        self.config = config
        logger.info("Initializing rate consumer", config=config)

        self.detector = detector or OutlierDetector(config.detector)

        try:
            self.consumer = KafkaConsumer(
                config.kafka_topic,
                bootstrap_servers=config.kafka_bootstrap_servers,
                group_id=config.kafka_group_id,
                auto_offset_reset=config.kafka_auto_offset_reset,
                max_poll_records=config.max_poll_records,
                value_deserializer=lambda m: json.loads(m.decode("utf-8")),
            )
            logger.info(
                "Kafka consumer initialized",
                bootstrap_servers=config.kafka_bootstrap_servers,
                topic=config.kafka_topic,
                group_id=config.kafka_group_id,
            )
        except Exception as e:
            logger.error("Failed to initialize Kafka consumer", error=str(e))
            raise

        self.stats = {
            "total_consumed": 0,
            "total_events": 0,
            "missing_group": 0,
            "parse_errors": 0,
        }

    def _process_message(self, message: dict[str, Any]) -> bool:
        """Mark the events carried by one message"""
        try:
            group_id = message.get(self.config.group_field)
            if group_id is None:
                logger.warning("Message without group id", message=message)
                self.stats["missing_group"] += 1
                return False

            count = int(message.get(self.config.count_field, 1))
            self.detector.mark(str(group_id), count)
            self.stats["total_events"] += count
            return True

        except Exception as e:
            logger.error("Failed to process message", error=str(e), message=message)
            self.stats["parse_errors"] += 1
            return False

    def current_outliers(self) -> list[str]:
        """Group ids currently classified as OUTLIER"""
        return [s.group_id for s in self.detector.snapshot() if s.status == Status.OUTLIER]

    def _log_stats(self, elapsed: float):
        rate = self.stats["total_consumed"] / elapsed if elapsed > 0 else 0
        logger.info(
            "Consumer stats",
            total_consumed=self.stats["total_consumed"],
            total_events=self.stats["total_events"],
            missing_group=self.stats["missing_group"],
            parse_errors=self.stats["parse_errors"],
            groups=self.detector.group_count,
            outliers=self.current_outliers(),
            rate_per_sec=round(rate, 1),
            elapsed_sec=round(elapsed, 1),
        )

    def run(self, duration_seconds: int = None):
        """Run the consumer continuously or for a specified duration

        Args:
            duration_seconds: Optional duration in seconds. If None, runs indefinitely.
        """
        logger.info(
            "Starting rate consumer",
            topic=self.config.kafka_topic,
            duration=duration_seconds if duration_seconds else "indefinite",
        )

        self.detector.init()
        start_time = time.time()
        last_log_time = start_time

        try:
            for message in self.consumer:
                self.stats["total_consumed"] += 1

                self._process_message(message.value)

                elapsed = time.time() - start_time
                if time.time() - last_log_time >= self.config.stats_interval_seconds:
                    self._log_stats(elapsed)
                    last_log_time = time.time()

                if duration_seconds and elapsed >= duration_seconds:
                    logger.info("Duration limit reached", duration_seconds=duration_seconds)
                    break

        except KeyboardInterrupt:
            logger.info("Received interrupt signal, stopping consumer")

        except Exception as e:
            logger.error("Consumer error", error=str(e), exc_info=True)
            raise

        finally:
            elapsed = time.time() - start_time
            self._log_stats(elapsed)

            self.consumer.close()
            self.detector.shutdown()

            logger.info(
                "Consumer stopped",
                total_consumed=self.stats["total_consumed"],
                total_events=self.stats["total_events"],
                elapsed_sec=round(elapsed, 1),
            )
