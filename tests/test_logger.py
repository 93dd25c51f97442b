"""
Tests for logger functionality.
"""

import threading

import pytest

from walkscore.logger import StructuredLogger, get_logger, reset_logger


@pytest.fixture
def logger(tmp_path):
    return StructuredLogger(name="walkscore-test", log_dir=tmp_path, enable_console=False)


class TestStructuredLogger:
    """Test structured logging functionality."""

    def test_logger_creation(self, logger):
        assert logger.logger.name == "walkscore-test"
        assert logger.metrics["provider_calls"] == 0
        assert logger.metrics["batches_degraded"] == 0

    def test_log_methods(self, logger):
        """All log level methods should work."""
        logger.debug("Debug message")
        logger.info("Info message")
        logger.warning("Warning message")
        logger.error("Error message")
        logger.critical("Critical message")

    def test_context_written_as_json(self, logger, tmp_path):
        logger.info("Retrieved places", origin="1 Main St", places=3)

        content = next(tmp_path.glob("*.log")).read_text()
        assert 'Retrieved places | Context: {"origin": "1 Main St", "places": 3}' in content

    def test_lookup_metrics(self, logger):
        logger.record_provider_call()
        logger.record_provider_call()
        assert logger.metrics["provider_calls"] == 2

        logger.record_lookup_attempt("park")
        logger.record_lookup_success("park")

        logger.record_lookup_attempt("gym")
        logger.record_lookup_failure("gym", "ProviderError")

        metrics = logger.get_metrics()

        assert metrics["lookups_attempted"] == 2
        assert metrics["lookups_successful"] == 1
        assert metrics["lookups_failed"] == 1
        assert metrics["errors_by_type"]["ProviderError"] == 1
        assert metrics["category_success_rate"]["park"]["success_rate"] == 1.0
        assert metrics["category_success_rate"]["gym"]["success_rate"] == 0.0

    def test_batch_metrics(self, logger):
        logger.record_batch(verified=True)
        logger.record_batch(verified=True)
        logger.record_batch(verified=False, error_type="Timeout")

        metrics = logger.get_metrics()

        assert metrics["batches_verified"] == 2
        assert metrics["batches_degraded"] == 1
        assert metrics["errors_by_type"] == {"Timeout": 1}

    def test_success_rate_calculation(self, logger):
        for _ in range(3):
            logger.record_lookup_attempt("restaurant")
        logger.record_lookup_success("restaurant")
        logger.record_lookup_success("restaurant")

        rate = logger.get_metrics()["category_success_rate"]["restaurant"]["success_rate"]
        assert rate == pytest.approx(0.667, rel=0.01)

    def test_metrics_snapshot_is_a_copy(self, logger):
        logger.record_error("HTTPError")
        snapshot = logger.get_metrics()
        snapshot["errors_by_type"]["HTTPError"] = 99

        assert logger.metrics["errors_by_type"]["HTTPError"] == 1

    def test_concurrent_updates(self, logger):
        """Worker threads report at the same time without losing counts."""

        def work():
            for _ in range(200):
                logger.record_lookup_attempt("school")
                logger.record_lookup_success("school")

        threads = [threading.Thread(target=work) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        metrics = logger.get_metrics()
        assert metrics["lookups_attempted"] == 1600
        assert metrics["category_success_rate"]["school"]["successes"] == 1600

    def test_metrics_summary(self, logger, tmp_path):
        logger.record_lookup_attempt("park")
        logger.record_lookup_success("park")
        logger.record_batch(verified=False, error_type="ConnectionError")
        logger.log_metrics_summary()

        content = next(tmp_path.glob("*.log")).read_text()
        assert "Lookups: 1/1 (100.0% success)" in content
        assert "Distance batches: 0 verified, 1 degraded" in content
        assert "ConnectionError: 1" in content

    def test_log_file_creation(self, logger, tmp_path):
        logger.info("Test message")

        log_files = list(tmp_path.glob("walkscore_*.log"))
        assert len(log_files) == 1
        assert "Test message" in log_files[0].read_text()

    def test_file_logging_disabled(self, tmp_path):
        quiet = StructuredLogger(
            name="walkscore-quiet", log_dir=tmp_path / "none", enable_file=False, enable_console=False
        )
        quiet.info("nowhere")
        assert not (tmp_path / "none").exists()


class TestGlobalLogger:
    """Test global logger singleton."""

    def test_get_logger_singleton(self, tmp_path):
        reset_logger()

        logger1 = get_logger(log_dir=tmp_path, enable_console=False)
        logger2 = get_logger()

        assert logger1 is logger2

    def test_reset_logger(self, tmp_path):
        """reset_logger should create a new instance with fresh metrics."""
        reset_logger()

        logger1 = get_logger(log_dir=tmp_path, enable_console=False)
        logger1.record_provider_call()

        reset_logger()

        logger2 = get_logger(log_dir=tmp_path, enable_console=False)
        assert logger2 is not logger1
        assert logger2.metrics["provider_calls"] == 0
