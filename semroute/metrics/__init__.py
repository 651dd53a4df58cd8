"""
Metrics Module: Match Statistics

Components:
    MetricsStore: Thread-safe in-memory metrics aggregation
    MatchMetric: Individual match metric record
    AggregatedMetrics: Pre-computed aggregates for reporting

Usage:
    from semroute.metrics import get_metrics_store, MatchMetric

    get_metrics_store().record(MatchMetric(
        timestamp=time.time(),
        route_name="weather",
        score=0.87,
        latency_ms=14.2,
    ))
"""

from semroute.metrics.store import (
    OUTCOME_ERROR,
    OUTCOME_MATCHED,
    OUTCOME_NO_ROUTE,
    AggregatedMetrics,
    MatchMetric,
    MetricsStore,
    get_metrics_store,
)

__all__ = [
    "OUTCOME_ERROR",
    "OUTCOME_MATCHED",
    "OUTCOME_NO_ROUTE",
    "AggregatedMetrics",
    "MatchMetric",
    "MetricsStore",
    "get_metrics_store",
]
