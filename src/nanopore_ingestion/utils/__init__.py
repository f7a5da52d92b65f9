"""
Utility modules for the nanopore ingestion engine.
"""

from .exceptions import (
    NanoporeIngestionError,
    ExtractionError,
    ExternalServiceError,
    ParseError,
    ValidationError,
    ConfigurationError,
    JobNotFoundError,
    InvalidJobTransitionError,
)

from .logging import (
    setup_logging,
    JsonFormatter,
    LogContext,
    log_performance,
)

from .metrics import (
    MetricsCollector,
    Timer,
    PerformanceTracker,
)

__all__ = [
    # Exceptions
    'NanoporeIngestionError',
    'ExtractionError',
    'ExternalServiceError',
    'ParseError',
    'ValidationError',
    'ConfigurationError',
    'JobNotFoundError',
    'InvalidJobTransitionError',
    # Logging
    'setup_logging',
    'JsonFormatter',
    'LogContext',
    'log_performance',
    # Metrics
    'MetricsCollector',
    'Timer',
    'PerformanceTracker',
]
