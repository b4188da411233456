"""
Defines the Prometheus metrics sink used by the cleanup pipeline.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional, Protocol, Sequence, runtime_checkable

from prometheus_client import REGISTRY as _PROM_REGISTRY
from prometheus_client import Counter as _OrigCounter
from prometheus_client import Histogram as _OrigHistogram

# ---------------------------------------------------------------------------
# Duplicate-safe Prometheus metric wrappers
# ---------------------------------------------------------------------------
# Metric names come from configuration, so the same collector can be requested
# by several sinks (and by every test). The factories hand back the already
# registered collector instead of raising on duplicate registration.


def _duplicate_safe_factory(metric_cls):
    """Return a factory that reuses an existing collector if already present."""

    def _factory(name: str, documentation: str, *args, **kwargs):  # type: ignore[override]
        existing = _lookup(name)
        if existing is not None:
            return existing  # type: ignore[return-value]

        try:
            return metric_cls(name, documentation, *args, **kwargs)  # type: ignore[call-arg]
        except ValueError:
            # Registration lost the race – fall back to the now-existing collector.
            return _lookup(name)  # type: ignore[return-value]

    return _factory


def _lookup(name: str) -> Any:
    collectors = _PROM_REGISTRY._names_to_collectors
    # Counters register under both "x" and "x_total"
    return collectors.get(name) or collectors.get(name.removesuffix("_total"))


Counter = _duplicate_safe_factory(_OrigCounter)  # type: ignore[assignment]
Histogram = _duplicate_safe_factory(_OrigHistogram)  # type: ignore[assignment]

# HTML documents range from a few hundred characters to a few megabytes
SIZE_BUCKETS: Sequence[float] = (
    500,
    1_000,
    5_000,
    10_000,
    25_000,
    50_000,
    100_000,
    250_000,
    500_000,
    1_000_000,
    2_500_000,
)

# Collectors created by PrometheusMetricsSink, keyed by metric name
METRICS: Dict[str, Any] = {}


@runtime_checkable
class MetricsSink(Protocol):
    """Fire-and-forget destination for pipeline metrics."""

    def increment(self, name: str, labels: Optional[Mapping[str, str]] = None) -> None:
        ...

    def observe(self, name: str, value: float) -> None:
        ...


class NullMetricsSink:
    """Sink that drops everything."""

    def increment(self, name: str, labels: Optional[Mapping[str, str]] = None) -> None:
        return None

    def observe(self, name: str, value: float) -> None:
        return None


class PrometheusMetricsSink:
    """
    Publishes counters and histograms to the default Prometheus registry.

    Collectors are created on first use. A counter's label names are fixed by
    the labels passed the first time it is incremented.
    """

    def __init__(self, size_buckets: Sequence[float] = SIZE_BUCKETS) -> None:
        self.size_buckets = tuple(size_buckets)

    def increment(self, name: str, labels: Optional[Mapping[str, str]] = None) -> None:
        labels = dict(labels or {})
        metric = METRICS.get(name)
        if metric is None:
            metric = Counter(name, f"Number of {name.removesuffix('_total')} events", sorted(labels))
            METRICS[name] = metric
        if labels:
            metric.labels(**labels).inc()
        else:
            metric.inc()

    def observe(self, name: str, value: float) -> None:
        metric = METRICS.get(name)
        if metric is None:
            metric = Histogram(name, f"Distribution of {name}", buckets=self.size_buckets)
            METRICS[name] = metric
        metric.observe(value)
