"""
Data models for the cleanup pipeline.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Dict, Tuple


class Strategy(str, Enum):
    """Strategy that produced a cleanup result."""

    STRUCTURED_DATA = "STRUCTURED_DATA"
    SECTION_BASED = "SECTION_BASED"
    CONTENT_FILTER = "CONTENT_FILTER"
    FALLBACK = "FALLBACK"
    DISABLED = "DISABLED"

    @classmethod
    def adaptive_order(cls) -> Tuple[Strategy, ...]:
        """Strategies from most to least restrictive."""
        return (cls.STRUCTURED_DATA, cls.SECTION_BASED, cls.CONTENT_FILTER, cls.FALLBACK)

    def relaxations(self) -> Tuple[Strategy, ...]:
        """Less restrictive strategies to try after this one, in order."""
        order = self.adaptive_order()
        if self not in order:
            return order
        return order[order.index(self) + 1 :]


@dataclass(slots=True, frozen=True)
class Document:
    """Raw page handed to the pipeline."""

    html: str
    source_label: str = ""


@dataclass(slots=True, frozen=True)
class StrategyOutcome:
    """What a single strategy made of a document.

    ``score`` is local to the strategy (0-100) and only compared against that
    strategy's own threshold.
    """

    accepted: bool
    html: str
    score: float
    reason: str

    @classmethod
    def rejected(cls, reason: str, html: str = "", score: float = 0.0) -> StrategyOutcome:
        return cls(accepted=False, html=html, score=score, reason=reason)


@dataclass(slots=True, frozen=True)
class CleanupResult:
    """Result of HTML cleanup returned to the caller."""

    strategy_used: Strategy
    original_size: int
    cleaned_size: int
    reduction_ratio: float
    cleaned_html: str
    metrics_message: str

    def __post_init__(self) -> None:
        """Validate the result."""
        if self.cleaned_size != len(self.cleaned_html):
            raise ValueError("cleaned_size must equal len(cleaned_html)")
        if self.original_size < 0:
            raise ValueError("original_size must not be negative")

    @classmethod
    def build(cls, strategy: Strategy, cleaned_html: str, original_size: int) -> CleanupResult:
        cleaned_size = len(cleaned_html)
        reduction_ratio = (original_size - cleaned_size) / original_size if original_size > 0 else 0.0
        message = (
            f"Strategy: {strategy.value}, {original_size} → {cleaned_size} chars "
            f"({reduction_ratio * 100:.1f}% reduction)"
        )
        return cls(
            strategy_used=strategy,
            original_size=original_size,
            cleaned_size=cleaned_size,
            reduction_ratio=reduction_ratio,
            cleaned_html=cleaned_html,
            metrics_message=message,
        )

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["strategy_used"] = self.strategy_used.value
        return data
