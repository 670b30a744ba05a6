"""
Utility modules for logging and metrics.
"""

from polyast.utils.logging import (
    JSONFormatter,
    LogContext,
    get_logger,
    log_error_with_context,
    log_lifecycle_transition,
    log_parse_event,
    setup_logging,
)
from polyast.utils.metrics import (
    ParseMetricsCollector,
    emit_metric,
    track_initialization,
)

__all__ = [
    "JSONFormatter",
    "LogContext",
    "get_logger",
    "setup_logging",
    "log_parse_event",
    "log_lifecycle_transition",
    "log_error_with_context",
    "ParseMetricsCollector",
    "track_initialization",
    "emit_metric",
]
