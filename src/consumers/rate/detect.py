"""
CLI for the Kafka-fed outlier detector.

Usage:
    python -m src.consumers.rate.detect [options]
"""

import argparse
import logging
import os
import sys

import structlog

from src.core.logger import setup_logging
from src.outlier.models import (
    DetectorConfig,
    EventRateAlgorithm,
    ReportingChannel,
    ReportingInterval,
)

from .consumer import RateConsumer
from .models import RateConsumerConfig

logger = structlog.get_logger(__name__)


def parse_arguments(argv: list[str] | None = None):
    """Parse command-line arguments"""
    parser = argparse.ArgumentParser(
        description="Outlier detection over Kafka group events",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
        Examples:
        # Basic usage
        python -m src.consumers.rate.detect

        # Smoother classification with the one-minute average
        python -m src.consumers.rate.detect --algorithm ema_rate_per_minute

        # Custom threshold and cap, report to the console every 10 seconds
        python -m src.consumers.rate.detect \\
            --threshold 100 --max-outlier-percent 0.2 \\
            --reporting-channel console --reporting-interval 10
        """,
    )

    # Kafka settings
    parser.add_argument(
        "--kafka-servers",
        default=os.getenv("KAFKA_BOOTSTRAP_SERVERS", "localhost:9092"),
        help="Kafka bootstrap servers (default: localhost:9092)",
    )
    parser.add_argument(
        "--topic",
        default=os.getenv("KAFKA_TOPIC", "group-events"),
        help="Kafka topic (default: group-events)",
    )
    parser.add_argument(
        "--group-id",
        default="outlier-rate-consumer-group",
        help="Kafka consumer group ID",
    )
    parser.add_argument(
        "--offset-reset",
        choices=["earliest", "latest"],
        default="latest",
        help="Auto offset reset (default: latest - only new messages)",
    )
    parser.add_argument(
        "--group-field",
        default="group_id",
        help="Message field holding the group id (default: group_id)",
    )
    parser.add_argument(
        "--count-field",
        default="count",
        help="Message field holding the event count (default: count)",
    )

    # Classification
    parser.add_argument(
        "--threshold",
        type=float,
        default=float(os.getenv("OUTLIER_RATE_THRESHOLD", "40")),
        help="Outlier rate threshold in events/sec (default: 40)",
    )
    parser.add_argument(
        "--max-outlier-percent",
        type=float,
        default=float(os.getenv("MAX_OUTLIER_PERCENT", "0.3")),
        help="Maximum fraction of groups flagged as outliers, 0.0 to 1.0 (default: 0.3)",
    )
    parser.add_argument(
        "--algorithm",
        choices=[a.value for a in EventRateAlgorithm],
        default=os.getenv("RATE_ALGORITHM", EventRateAlgorithm.ACTUAL_RATE_PER_SEC.value),
        help="Rate algorithm (default: actual_rate_per_sec)",
    )
    parser.add_argument(
        "--sweep-interval",
        type=float,
        default=1.0,
        help="Seconds between classification sweeps (default: 1)",
    )

    # Reporting
    parser.add_argument(
        "--reporting-channel",
        choices=[c.value for c in ReportingChannel],
        default="log",
        help="Where group rates are reported (default: log)",
    )
    parser.add_argument(
        "--reporting-interval",
        type=float,
        default=5.0,
        help="Seconds between rate reports (default: 5)",
    )

    # Runtime
    parser.add_argument(
        "--duration", type=int, help="Duration to run in seconds (default: infinite)"
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=os.getenv("LOG_LEVEL", "INFO"),
        help="Logging level (default: INFO)",
    )

    return parser.parse_args(argv)


def build_config(args) -> RateConsumerConfig:
    """Build configuration from arguments"""
    return RateConsumerConfig(
        kafka_bootstrap_servers=args.kafka_servers,
        kafka_topic=args.topic,
        kafka_group_id=args.group_id,
        kafka_auto_offset_reset=args.offset_reset,
        group_field=args.group_field,
        count_field=args.count_field,
        detector=DetectorConfig(
            outlier_rate_threshold=args.threshold,
            max_outlier_percent=args.max_outlier_percent,
            rate_algorithm=args.algorithm,
            reporting_channel=ReportingChannel(args.reporting_channel),
            reporting_interval=ReportingInterval(args.reporting_interval),
            sweep_interval_seconds=args.sweep_interval,
        ),
    )


def main(argv: list[str] | None = None):
    """Main entry point"""
    args = parse_arguments(argv)

    log_level = getattr(logging, args.log_level)
    setup_logging(level=log_level)

    logger.info("Starting outlier rate consumer")

    try:
        config = build_config(args)

        consumer = RateConsumer(config)
        consumer.run(duration_seconds=args.duration)

        logger.info("Consumer completed successfully")
        return 0

    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 0

    except Exception as e:
        logger.error("Consumer failed", error=str(e), exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
