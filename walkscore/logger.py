"""
Structured logging for walkscore.

Provides centralized logging with console and file outputs, plus metrics
tracking for provider health (category lookups, distance batches, errors).
"""

import logging
import sys
import threading
from pathlib import Path
from typing import Optional
from datetime import datetime
import json


class StructuredLogger:
    """
    Centralized logger with support for console and file outputs.
    Tracks metrics for monitoring provider performance.

    Metric updates are guarded by a lock because category lookups and
    distance batches report from worker threads.
    """

    def __init__(
        self,
        name: str = "walkscore",
        level: str = "INFO",
        log_dir: Optional[Path] = None,
        enable_file: bool = True,
        enable_console: bool = True,
    ):
        """
        Initialize the structured logger.

        Args:
            name: Logger name
            level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            log_dir: Directory for log files (default: logs/)
            enable_file: Write logs to file
            enable_console: Output logs to console
        """
        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, level.upper()))
        self.logger.handlers.clear()
        self.logger.propagate = False

        self._lock = threading.Lock()
        self.metrics = {
            "provider_calls": 0,
            "lookups_attempted": 0,
            "lookups_successful": 0,
            "lookups_failed": 0,
            "batches_verified": 0,
            "batches_degraded": 0,
            "errors_by_type": {},
            "category_success_rate": {},
        }

        if enable_console:
            # stderr keeps stdout clean for --json output
            console_handler = logging.StreamHandler(sys.stderr)
            console_handler.setLevel(getattr(logging, level.upper()))
            console_formatter = logging.Formatter(
                fmt='%(asctime)s | %(levelname)-8s | %(name)s | %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )
            console_handler.setFormatter(console_formatter)
            self.logger.addHandler(console_handler)

        if enable_file:
            if log_dir is None:
                log_dir = Path("logs")
            log_dir.mkdir(parents=True, exist_ok=True)

            log_file = log_dir / f"walkscore_{datetime.now().strftime('%Y%m%d')}.log"
            file_handler = logging.FileHandler(log_file, encoding='utf-8')
            file_handler.setLevel(logging.DEBUG)  # Always log everything to file
            file_formatter = logging.Formatter(
                fmt='%(asctime)s | %(levelname)-8s | %(name)s | %(threadName)s | %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )
            file_handler.setFormatter(file_formatter)
            self.logger.addHandler(file_handler)

    def debug(self, message: str, **kwargs):
        """Log debug message with optional context."""
        self._log(logging.DEBUG, message, kwargs)

    def info(self, message: str, **kwargs):
        """Log info message with optional context."""
        self._log(logging.INFO, message, kwargs)

    def warning(self, message: str, **kwargs):
        """Log warning message with optional context."""
        self._log(logging.WARNING, message, kwargs)

    def error(self, message: str, **kwargs):
        """Log error message with optional context."""
        self._log(logging.ERROR, message, kwargs)

    def critical(self, message: str, **kwargs):
        """Log critical message with optional context."""
        self._log(logging.CRITICAL, message, kwargs)

    def _log(self, level: int, message: str, context: dict):
        if context:
            message = f"{message} | Context: {json.dumps(context, default=str)}"
        self.logger.log(level, message)

    # Metric tracking methods

    def record_provider_call(self):
        """Increment the outbound provider request counter."""
        with self._lock:
            self.metrics["provider_calls"] += 1

    def record_lookup_attempt(self, category: str):
        """Record a candidate lookup for a category."""
        with self._lock:
            self.metrics["lookups_attempted"] += 1
            stats = self.metrics["category_success_rate"].setdefault(
                category, {"attempts": 0, "successes": 0}
            )
            stats["attempts"] += 1

    def record_lookup_success(self, category: str):
        with self._lock:
            self.metrics["lookups_successful"] += 1
            if category in self.metrics["category_success_rate"]:
                self.metrics["category_success_rate"][category]["successes"] += 1

    def record_lookup_failure(self, category: str, error_type: str):
        with self._lock:
            self.metrics["lookups_failed"] += 1
            self._count_error(error_type)

    def record_batch(self, verified: bool, error_type: Optional[str] = None):
        """Record a distance batch outcome; degraded batches passed through unverified."""
        with self._lock:
            if verified:
                self.metrics["batches_verified"] += 1
            else:
                self.metrics["batches_degraded"] += 1
                if error_type:
                    self._count_error(error_type)

    def record_error(self, error_type: str):
        with self._lock:
            self._count_error(error_type)

    def _count_error(self, error_type: str):
        errors = self.metrics["errors_by_type"]
        errors[error_type] = errors.get(error_type, 0) + 1

    def get_metrics(self) -> dict:
        """Return a snapshot of current metrics with success rates filled in."""
        with self._lock:
            metrics_copy = json.loads(json.dumps(self.metrics))
        for category, stats in metrics_copy["category_success_rate"].items():
            if stats["attempts"] > 0:
                stats["success_rate"] = round(
                    stats["successes"] / stats["attempts"], 3
                )
        return metrics_copy

    def log_metrics_summary(self):
        """Log a summary of current metrics."""
        metrics = self.get_metrics()

        total_attempts = metrics["lookups_attempted"]
        total_successes = metrics["lookups_successful"]
        overall_rate = 0
        if total_attempts > 0:
            overall_rate = round(total_successes / total_attempts * 100, 1)

        self.info("=== Provider Metrics ===")
        self.info(f"Provider calls: {metrics['provider_calls']}")
        self.info(f"Lookups: {total_successes}/{total_attempts} ({overall_rate}% success)")
        self.info(
            f"Distance batches: {metrics['batches_verified']} verified, "
            f"{metrics['batches_degraded']} degraded"
        )

        if metrics["category_success_rate"]:
            self.info("Category Success Rates:")
            for category, stats in metrics["category_success_rate"].items():
                rate = stats.get("success_rate", 0) * 100
                self.info(f"  {category}: {stats['successes']}/{stats['attempts']} ({rate:.1f}%)")

        if metrics["errors_by_type"]:
            self.info("Error Types:")
            for error_type, count in metrics["errors_by_type"].items():
                self.info(f"  {error_type}: {count}")


_global_logger: Optional[StructuredLogger] = None
_global_lock = threading.Lock()


def get_logger(
    name: str = "walkscore",
    level: str = "INFO",
    **kwargs
) -> StructuredLogger:
    """
    Get or create the global logger instance.

    Args:
        name: Logger name
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        **kwargs: Additional arguments passed to StructuredLogger

    Returns:
        StructuredLogger instance
    """
    global _global_logger

    with _global_lock:
        if _global_logger is None:
            _global_logger = StructuredLogger(name=name, level=level, **kwargs)
        return _global_logger


def reset_logger():
    """Reset the global logger (useful for testing)."""
    global _global_logger
    with _global_lock:
        if _global_logger is not None:
            for handler in list(_global_logger.logger.handlers):
                handler.close()
            _global_logger.logger.handlers.clear()
        _global_logger = None
