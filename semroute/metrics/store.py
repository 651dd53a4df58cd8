"""
Metrics Store for Match Tracking

Aggregates per-match metrics for analysis and reporting. Uses in-memory
storage; multi-process deployments should export to a time-series
database instead.

The store is thread-safe using threading.Lock to handle
concurrent requests in FastAPI's async environment.
"""

import threading
from dataclasses import dataclass, field
from collections import defaultdict


OUTCOME_MATCHED = "matched"
OUTCOME_NO_ROUTE = "no_route"
OUTCOME_ERROR = "error"


@dataclass
class MatchMetric:
    """
    Individual match metric record.

    Attributes:
        timestamp: Unix timestamp when the match was processed
        route_name: Winning route, None unless outcome is "matched"
        score: Weighted score of the winning utterance (0.0 otherwise)
        latency_ms: Time for the match in milliseconds
        outcome: "matched", "no_route" or "error"
        query_length: Number of characters in the query
    """

    timestamp: float
    route_name: str | None
    score: float
    latency_ms: float
    outcome: str = OUTCOME_MATCHED
    query_length: int = 0


@dataclass
class _RouteAggregate:
    """Internal aggregate for per-route metrics."""

    count: int = 0
    scores: list[float] = field(default_factory=list)
    latencies: list[float] = field(default_factory=list)

    @property
    def avg_score(self) -> float:
        return sum(self.scores) / len(self.scores) if self.scores else 0.0

    @property
    def avg_latency_ms(self) -> float:
        return sum(self.latencies) / len(self.latencies) if self.latencies else 0.0


@dataclass
class AggregatedMetrics:
    """
    Aggregated metrics snapshot for reporting.

    Attributes:
        total_requests: Total number of matches attempted
        requests_by_route: Count, scores and latencies per winning route
        outcomes: Count of each outcome type
        latencies: Latencies of every recorded match
    """

    total_requests: int = 0
    requests_by_route: dict[str, _RouteAggregate] = field(default_factory=dict)
    outcomes: dict[str, int] = field(default_factory=dict)
    latencies: list[float] = field(default_factory=list)

    @property
    def avg_latency_ms(self) -> float:
        return sum(self.latencies) / len(self.latencies) if self.latencies else 0.0


class MetricsStore:
    """
    Thread-safe in-memory metrics storage.

    Example:
        store = MetricsStore()
        store.record(MatchMetric(
            timestamp=time.time(),
            route_name="chitchat",
            score=0.91,
            latency_ms=12.5,
        ))
        aggregated = store.get_aggregated()
        print(f"Total requests: {aggregated.total_requests}")
    """

    def __init__(self, max_history: int = 10000):
        """
        Initialize the metrics store.

        Args:
            max_history: Maximum individual metrics to retain.
                         Older metrics are discarded when limit is reached.
                         Counts are preserved regardless of this limit.
        """
        self._lock = threading.Lock()
        self._metrics: list[MatchMetric] = []
        self._max_history = max_history

        self._total_requests: int = 0
        self._by_route: dict[str, _RouteAggregate] = defaultdict(_RouteAggregate)
        self._outcomes: dict[str, int] = defaultdict(int)
        self._latencies: list[float] = []

    def record(self, metric: MatchMetric) -> None:
        """
        Record a new match metric.

        Thread-safe. Updates both raw history and pre-computed aggregates.
        """
        with self._lock:
            self._metrics.append(metric)
            if len(self._metrics) > self._max_history:
                self._metrics = self._metrics[-self._max_history :]

            self._total_requests += 1
            self._outcomes[metric.outcome] += 1

            if metric.route_name is not None:
                route_agg = self._by_route[metric.route_name]
                route_agg.count += 1
                route_agg.scores.append(metric.score)
                route_agg.latencies.append(metric.latency_ms)

            self._latencies.append(metric.latency_ms)
            if len(self._latencies) > self._max_history:
                self._latencies = self._latencies[-self._max_history :]

    def get_aggregated(self) -> AggregatedMetrics:
        """
        Get current aggregated metrics.

        Thread-safe. The returned object is a copy and safe to use
        outside the lock.
        """
        with self._lock:
            by_route_copy = {
                route: _RouteAggregate(
                    count=agg.count,
                    scores=list(agg.scores),
                    latencies=list(agg.latencies),
                )
                for route, agg in self._by_route.items()
            }

            return AggregatedMetrics(
                total_requests=self._total_requests,
                requests_by_route=by_route_copy,
                outcomes=dict(self._outcomes),
                latencies=list(self._latencies),
            )

    def get_recent(self, count: int = 100) -> list[MatchMetric]:
        """
        Get most recent match metrics.

        Thread-safe. Returns copies of the most recent metrics.
        """
        with self._lock:
            return list(self._metrics[-count:])

    def reset(self) -> None:
        """
        Reset all metrics.

        Thread-safe. Primarily used for testing.
        """
        with self._lock:
            self._metrics.clear()
            self._total_requests = 0
            self._by_route.clear()
            self._outcomes.clear()
            self._latencies.clear()


_store: MetricsStore | None = None


def get_metrics_store() -> MetricsStore:
    """
    Get the global metrics store instance.

    Returns:
        Singleton MetricsStore instance
    """
    global _store
    if _store is None:
        _store = MetricsStore()
    return _store
