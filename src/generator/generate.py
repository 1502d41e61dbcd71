"""
Group Traffic Generator - CLI Entry Point
Feeds synthetic per-group event traffic to an outlier detector or to Kafka
"""

import argparse
import sys

import structlog

from src.core.logger import setup_logging
from src.generator import (
    BURSTY_CONFIG,
    DEV_CONFIG,
    GETTING_STARTED_CONFIG,
    SCENARIO_A_CONFIG,
    DeliveryMode,
    DetectorSink,
    GeneratorConfig,
    KafkaEventSink,
    TrafficGenerator,
)
from src.outlier import DetectorConfig, EventRateAlgorithm, OutlierDetector, ReportingChannel

logger = structlog.get_logger(__name__)


# Predefined configurations
CONFIGS = {
    "scenario-a": SCENARIO_A_CONFIG,
    "getting-started": GETTING_STARTED_CONFIG,
    "bursty": BURSTY_CONFIG,
    "dev": DEV_CONFIG,
}


def parse_group_rate(value: str) -> tuple[str, float]:
    """Parse a GROUP=RATE pair"""
    group_id, sep, rate = value.partition("=")
    if not sep or not group_id:
        raise argparse.ArgumentTypeError(f"Expected GROUP=RATE, got '{value}'")
    try:
        return group_id, float(rate)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid rate in '{value}'") from None


def parse_arguments(argv: list[str] | None = None):
    """Parse command-line arguments"""
    parser = argparse.ArgumentParser(
        description="Synthetic group traffic generator",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
            Examples:
            # Run the getting-started demo against an in-process detector
            python -m src.generator.generate --config getting-started

            # Custom groups with the one-minute average
            python -m src.generator.generate --groups A=99 B=65 C=50 D=1 --algorithm ema_rate_per_minute

            # Publish bursty traffic to Kafka for the rate consumer
            python -m src.generator.generate --mode kafka --config bursty --kafka-servers kafka:9092
        """,
    )

    parser.add_argument(
        "--config", choices=list(CONFIGS.keys()), help="Use a predefined configuration"
    )
    parser.add_argument(
        "--mode",
        choices=[m.value for m in DeliveryMode],
        default=DeliveryMode.LOCAL.value,
        help="Deliver events to a local detector or to Kafka (default: local)",
    )

    # Kafka settings
    parser.add_argument(
        "--kafka-servers",
        default="localhost:9092",
        help="Kafka bootstrap servers (default: localhost:9092)",
    )
    parser.add_argument(
        "--topic",
        default="group-events",
        help="Kafka topic name (default: group-events)",
    )

    # Traffic settings
    parser.add_argument(
        "--groups",
        nargs="+",
        type=parse_group_rate,
        metavar="GROUP=RATE",
        help="Groups and their rates in events/sec",
    )
    parser.add_argument("--interval", type=float, help="Interval between rounds in seconds")
    parser.add_argument("--jitter", type=float, help="Relative variation of each round (0.0 to 1.0)")
    parser.add_argument("--burst-prob", type=float, help="Probability of a burst per group and round")
    parser.add_argument("--active-rounds", type=int, help="Stop emitting after this many rounds")

    # Local detector settings
    parser.add_argument(
        "--threshold", type=float, default=40.0, help="Outlier rate threshold (default: 40)"
    )
    parser.add_argument(
        "--max-outlier-percent",
        type=float,
        default=0.3,
        help="Maximum fraction of outliers (default: 0.3)",
    )
    parser.add_argument(
        "--algorithm",
        choices=[a.value for a in EventRateAlgorithm],
        default=EventRateAlgorithm.ACTUAL_RATE_PER_SEC.value,
        help="Rate algorithm (default: actual_rate_per_sec)",
    )

    # Runtime settings
    parser.add_argument(
        "--duration", type=int, help="Duration to run in seconds (default: infinite)"
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default="INFO",
        help="Logging level (default: INFO)",
    )

    return parser.parse_args(argv)


def build_config_from_args(args) -> GeneratorConfig:
    """Build a GeneratorConfig from command-line arguments"""

    if args.config:
        preset = CONFIGS[args.config]
        config = GeneratorConfig(**{**vars(preset), "group_rates": dict(preset.group_rates)})
        logger.info("Using predefined configuration", config_name=args.config)
    else:
        config = GeneratorConfig()
        logger.info("Using default configuration")

    config.kafka_bootstrap_servers = args.kafka_servers
    config.kafka_topic = args.topic
    if args.groups:
        config.group_rates = dict(args.groups)
    if args.interval:
        config.event_interval_seconds = args.interval
    if args.jitter is not None:
        config.jitter = args.jitter
    if args.burst_prob is not None:
        config.burst_probability = args.burst_prob
    if args.active_rounds is not None:
        config.active_rounds = args.active_rounds

    return config


def log_statuses(detector: OutlierDetector, group_ids: list[str]) -> None:
    """Log the current status of every group"""
    for group_id in group_ids:
        if group_id not in detector.registry:
            continue
        logger.info(
            "Group status",
            group_id=group_id,
            status=detector.get_status(group_id).name,
            rate=round(detector.get_event_rate(group_id), 3),
        )


def main(argv: list[str] | None = None):
    """Main entry point"""
    args = parse_arguments(argv)

    log_level = getattr(structlog.stdlib.logging, args.log_level)
    setup_logging(level=log_level)

    logger.info("Starting group traffic generator")

    try:
        config = build_config_from_args(args)

        if DeliveryMode(args.mode) == DeliveryMode.KAFKA:
            generator = TrafficGenerator(config, KafkaEventSink(config))
            generator.run(duration_seconds=args.duration)
        else:
            detector = OutlierDetector(
                DetectorConfig(
                    outlier_rate_threshold=args.threshold,
                    max_outlier_percent=args.max_outlier_percent,
                    rate_algorithm=args.algorithm,
                    reporting_channel=ReportingChannel.NONE,
                )
            )
            group_ids = list(config.group_rates)
            with detector:
                generator = TrafficGenerator(config, DetectorSink(detector))
                generator.run(
                    duration_seconds=args.duration,
                    on_round=lambda _: log_statuses(detector, group_ids),
                )

        logger.info("Generator completed successfully")
        return 0

    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 0

    except Exception as e:
        logger.error("Generator failed", error=str(e), exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
