"""
Helpers for validating metric value changes during tests.

Provides context managers to ensure metrics are properly updated by the code under test.
Values are read from the default Prometheus registry by sample name, so they
work for collectors created lazily by the code under test.
"""

from contextlib import contextmanager
from typing import Dict, Optional

from prometheus_client import REGISTRY


def sample_value(name: str, labels: Optional[Dict[str, str]] = None) -> float:
    """Current value of a registry sample, 0.0 when it does not exist yet."""
    value = REGISTRY.get_sample_value(name, labels or {})
    return value if value is not None else 0.0


@contextmanager
def metric_delta(name: str, expected_delta=1, labels: Optional[Dict[str, str]] = None):
    """
    Context manager to validate metric value changes.

    Args:
        name: Sample name, e.g. ``recipecore_cleanup_strategy_total``
        expected_delta: Expected change in the sample value
        labels: Label values selecting the sample

    Usage:
        with metric_delta("cleanup_strategy_total", labels={"strategy": "FALLBACK"}):
            # Code that should increment counter by 1
            pass
    """
    initial_value = sample_value(name, labels)

    yield

    final_value = sample_value(name, labels)
    actual_delta = final_value - initial_value

    if actual_delta != expected_delta:
        raise AssertionError(
            f"Expected metric to change by {expected_delta}, "
            f"but it changed by {actual_delta} "
            f"(from {initial_value} to {final_value})"
        )


def get_histogram_count(name: str) -> float:
    """Get the current observation count for a histogram."""
    return sample_value(f"{name}_count")


@contextmanager
def histogram_observes(name: str, min_observations=1):
    """
    Context manager to validate histogram observations.

    Args:
        name: Histogram name
        min_observations: Minimum number of observations expected
    """
    initial_count = get_histogram_count(name)

    yield

    final_count = get_histogram_count(name)
    actual_observations = final_count - initial_count

    if actual_observations < min_observations:
        raise AssertionError(
            f"Expected at least {min_observations} histogram observations, "
            f"but got {actual_observations} "
            f"(count went from {initial_count} to {final_count})"
        )
