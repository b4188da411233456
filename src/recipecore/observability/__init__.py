"""Logging and metrics for the cleanup pipeline."""

from __future__ import annotations

from .logging import configure_logging
from .metrics import METRICS, MetricsSink, NullMetricsSink, PrometheusMetricsSink

__all__ = ["configure_logging", "METRICS", "MetricsSink", "NullMetricsSink", "PrometheusMetricsSink"]
