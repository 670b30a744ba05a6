"""
Metrics collection for parser adapters.

This module tracks, per language:
- Parse call counts and failures
- Parse latency
- Grammar initialization time
"""

import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from polyast.utils.logging import get_logger

logger = get_logger(__name__)


class ParseMetricsCollector:
    """
    Collects parse metrics across one or more parser adapters.

    Tracks:
    - Parse calls and failures per language
    - Parse latencies per language
    - Initialization durations per language
    """

    def __init__(self):
        self.created_at = datetime.now(timezone.utc)

        self.parse_counts: Dict[str, int] = {}
        self.failure_counts: Dict[str, int] = {}
        self.parse_latencies: Dict[str, List[float]] = {}
        self.initialization_ms: Dict[str, float] = {}
        self.nodes_parsed: int = 0

    def record_parse(
        self,
        language: str,
        duration_ms: float,
        success: bool = True,
        node_count: int = 0,
    ) -> None:
        """
        Record one parse call.

        Args:
            language: Language of the parser
            duration_ms: Call duration in milliseconds
            success: Whether the parse produced a tree
            node_count: Number of nodes in the produced tree
        """
        self.parse_counts[language] = self.parse_counts.get(language, 0) + 1
        if not success:
            self.failure_counts[language] = self.failure_counts.get(language, 0) + 1
        self.parse_latencies.setdefault(language, []).append(duration_ms)
        self.nodes_parsed += node_count

    def record_initialization(self, language: str, duration_ms: float) -> None:
        """
        Record grammar initialization time.

        Args:
            language: Language of the parser
            duration_ms: Initialization duration in milliseconds
        """
        self.initialization_ms[language] = duration_ms

    def get_metrics_summary(self) -> Dict[str, Any]:
        """
        Get summary of collected metrics.

        Returns:
            Dictionary of metrics
        """
        summary: Dict[str, Any] = {
            "created_at": self.created_at.isoformat(),
            "parse_counts": dict(self.parse_counts),
            "failure_counts": dict(self.failure_counts),
            "initialization_ms": {
                language: round(duration, 2)
                for language, duration in self.initialization_ms.items()
            },
            "nodes_parsed": self.nodes_parsed,
        }

        if self.parse_latencies:
            latency_stats = {}
            for language, latencies in self.parse_latencies.items():
                if latencies:
                    latency_stats[language] = {
                        "count": len(latencies),
                        "min_ms": round(min(latencies), 2),
                        "max_ms": round(max(latencies), 2),
                        "avg_ms": round(sum(latencies) / len(latencies), 2),
                    }
            summary["parse_latencies"] = latency_stats

        return summary


@asynccontextmanager
async def track_initialization(
    metrics_collector: Optional[ParseMetricsCollector],
    language: str,
):
    """
    Context manager to time a grammar initialization.

    Usage:
        async with track_initialization(metrics, "java") as timing:
            await load_grammar()

    The duration is recorded even when the block raises.

    Yields:
        Dict that receives ``duration_ms`` when the block exits
    """
    timing: Dict[str, float] = {}
    start_time = time.perf_counter()
    try:
        yield timing
    finally:
        timing["duration_ms"] = (time.perf_counter() - start_time) * 1000
        if metrics_collector is not None:
            metrics_collector.record_initialization(language, timing["duration_ms"])


def emit_metric(metric_name: str, value: float, **tags: Any) -> None:
    """
    Emit a metric as a structured log line.

    Args:
        metric_name: Metric name
        value: Metric value
        **tags: Metric tags/labels
    """
    logger.info(
        f"Metric: {metric_name}",
        extra={
            "metric_name": metric_name,
            "metric_value": value,
            "metric_tags": tags,
        },
    )
