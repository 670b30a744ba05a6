"""
Unit tests for metrics collection utilities.
"""

import logging
from datetime import datetime

import pytest

from polyast.utils.metrics import ParseMetricsCollector, emit_metric, track_initialization


def test_metrics_collector_initialization():
    """Test metrics collector initialization."""
    collector = ParseMetricsCollector()

    assert isinstance(collector.created_at, datetime)
    assert collector.parse_counts == {}
    assert collector.failure_counts == {}
    assert collector.nodes_parsed == 0


def test_record_parse():
    """Test recording successful and failed parses."""
    collector = ParseMetricsCollector()

    collector.record_parse("java", 5.0, success=True, node_count=10)
    collector.record_parse("java", 15.0, success=False)
    collector.record_parse("python", 1.0, node_count=3)

    assert collector.parse_counts == {"java": 2, "python": 1}
    assert collector.failure_counts == {"java": 1}
    assert collector.parse_latencies["java"] == [5.0, 15.0]
    assert collector.nodes_parsed == 13


def test_metrics_summary():
    """Test getting metrics summary."""
    collector = ParseMetricsCollector()
    collector.record_parse("java", 10.0)
    collector.record_parse("java", 20.0)
    collector.record_initialization("java", 42.123)

    summary = collector.get_metrics_summary()

    assert summary["parse_counts"] == {"java": 2}
    assert summary["initialization_ms"] == {"java": 42.12}
    latency = summary["parse_latencies"]["java"]
    assert latency["count"] == 2
    assert latency["min_ms"] == 10.0
    assert latency["max_ms"] == 20.0
    assert latency["avg_ms"] == 15.0
    assert "created_at" in summary


def test_metrics_summary_without_parses():
    summary = ParseMetricsCollector().get_metrics_summary()

    assert "parse_latencies" not in summary


@pytest.mark.asyncio
async def test_track_initialization():
    """Test tracking an initialization with the context manager."""
    collector = ParseMetricsCollector()

    async with track_initialization(collector, "java") as timing:
        pass

    assert timing["duration_ms"] >= 0
    assert collector.initialization_ms["java"] == timing["duration_ms"]


@pytest.mark.asyncio
async def test_track_initialization_records_on_error():
    """Test the duration is recorded when the block raises."""
    collector = ParseMetricsCollector()

    with pytest.raises(ImportError):
        async with track_initialization(collector, "java"):
            raise ImportError("missing grammar")

    assert "java" in collector.initialization_ms


@pytest.mark.asyncio
async def test_track_initialization_without_collector():
    async with track_initialization(None, "java") as timing:
        pass

    assert "duration_ms" in timing


def test_emit_metric(caplog):
    """Test emitting a metric logs it."""
    with caplog.at_level(logging.INFO, logger="polyast.utils.metrics"):
        emit_metric("parse_duration_ms", 12.5, language="java")

    record = caplog.records[-1]
    assert record.metric_name == "parse_duration_ms"
    assert record.metric_value == 12.5
    assert record.metric_tags == {"language": "java"}
