"""
Tests for RateConsumer class.
"""

from unittest.mock import MagicMock, patch

import pytest

from src.consumers.rate.consumer import RateConsumer
from src.outlier.detector import OutlierDetector
from src.outlier.models import GroupSnapshot, Status


def kafka_messages(*values):
    return [MagicMock(value=v) for v in values]


class TestRateConsumer:
    """Tests for RateConsumer class."""

    @patch("src.consumers.rate.consumer.KafkaConsumer")
    def test_initialization(self, mock_kafka_class, consumer_config):
        """Test consumer initialization."""
        consumer = RateConsumer(consumer_config)

        mock_kafka_class.assert_called_once()
        args, kwargs = mock_kafka_class.call_args
        assert args == ("test-topic",)
        assert kwargs["bootstrap_servers"] == "localhost:9092"
        assert kwargs["group_id"] == "test-group"

        assert isinstance(consumer.detector, OutlierDetector)
        assert consumer.stats["total_consumed"] == 0
        assert consumer.stats["total_events"] == 0

    @patch("src.consumers.rate.consumer.KafkaConsumer")
    def test_initialization_fails_on_kafka_error(self, mock_kafka_class, consumer_config):
        mock_kafka_class.side_effect = Exception("No brokers available")

        with pytest.raises(Exception, match="No brokers available"):
            RateConsumer(consumer_config)

    @patch("src.consumers.rate.consumer.KafkaConsumer")
    def test_process_message_marks_group(self, mock_kafka_class, consumer_config):
        consumer = RateConsumer(consumer_config)

        result = consumer._process_message({"group_id": "289", "count": 5})

        assert result is True
        assert consumer.detector.get_actual_rate("289") == 5
        assert consumer.stats["total_events"] == 5

    @patch("src.consumers.rate.consumer.KafkaConsumer")
    def test_process_message_defaults_to_one_event(self, mock_kafka_class, consumer_config):
        consumer = RateConsumer(consumer_config)

        consumer._process_message({"group_id": 42})

        assert consumer.detector.get_actual_rate("42") == 1

    @patch("src.consumers.rate.consumer.KafkaConsumer")
    def test_custom_fields(self, mock_kafka_class, consumer_config):
        consumer_config.group_field = "tenant"
        consumer_config.count_field = "n"
        consumer = RateConsumer(consumer_config)

        consumer._process_message({"tenant": "t1", "n": 3})

        assert consumer.detector.get_actual_rate("t1") == 3

    @patch("src.consumers.rate.consumer.KafkaConsumer")
    def test_missing_group(self, mock_kafka_class, consumer_config):
        consumer = RateConsumer(consumer_config)

        result = consumer._process_message({"count": 3})

        assert result is False
        assert consumer.stats["missing_group"] == 1
        assert consumer.detector.group_count == 0

    @pytest.mark.parametrize("count", ["many", 0, -2])
    @patch("src.consumers.rate.consumer.KafkaConsumer")
    def test_invalid_count(self, mock_kafka_class, count, consumer_config):
        consumer = RateConsumer(consumer_config)

        result = consumer._process_message({"group_id": "g", "count": count})

        assert result is False
        assert consumer.stats["parse_errors"] == 1

    @patch("src.consumers.rate.consumer.KafkaConsumer")
    def test_current_outliers(self, mock_kafka_class, consumer_config):
        detector = MagicMock()
        detector.snapshot.return_value = [
            GroupSnapshot("a", Status.OUTLIER, 99.0, 99.0, 0.0),
            GroupSnapshot("b", Status.GOOD_CITIZEN, 1.0, 1.0, 0.0),
        ]
        consumer = RateConsumer(consumer_config, detector=detector)

        assert consumer.current_outliers() == ["a"]

    @patch("src.consumers.rate.consumer.KafkaConsumer")
    def test_run_marks_all_messages(self, mock_kafka_class, consumer_config):
        mock_kafka = MagicMock()
        mock_kafka.__iter__.return_value = iter(
            kafka_messages(
                {"group_id": "a", "count": 2},
                {"group_id": "b"},
                {"no_group": True},
            )
        )
        mock_kafka_class.return_value = mock_kafka
        detector = MagicMock()
        detector.snapshot.return_value = []

        consumer = RateConsumer(consumer_config, detector=detector)
        consumer.run()

        detector.init.assert_called_once()
        assert detector.mark.call_args_list[0].args == ("a", 2)
        assert detector.mark.call_args_list[1].args == ("b", 1)
        assert consumer.stats["total_consumed"] == 3
        assert consumer.stats["missing_group"] == 1

        mock_kafka.close.assert_called_once()
        detector.shutdown.assert_called_once()

    @patch("src.consumers.rate.consumer.KafkaConsumer")
    def test_run_shuts_down_on_error(self, mock_kafka_class, consumer_config):
        mock_kafka = MagicMock()
        mock_kafka.__iter__.side_effect = RuntimeError("broker lost")
        mock_kafka_class.return_value = mock_kafka
        detector = MagicMock()
        detector.snapshot.return_value = []

        consumer = RateConsumer(consumer_config, detector=detector)

        with pytest.raises(RuntimeError, match="broker lost"):
            consumer.run()

        mock_kafka.close.assert_called_once()
        detector.shutdown.assert_called_once()
