"""
Protocols for pluggable HTML cleanup strategies.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from .models import Document, Strategy, StrategyOutcome


@runtime_checkable
class CleanupStrategy(Protocol):
    """Pluggable Document-to-StrategyOutcome strategy."""

    name: Strategy
    enabled: bool

    def evaluate(self, document: Document) -> StrategyOutcome:
        """Reduce a document and judge the result against this strategy's threshold.

        Args:
            document: Raw page to reduce

        Returns:
            StrategyOutcome; ``accepted`` is False when the strategy found
            nothing usable.
        """
        ...
