"""
HtmlCleaner: orchestrates the cleanup strategy cascade.

Strategies run in a fixed order and the first one that accepts its own output
wins. When none does, the raw HTML is returned unchanged.
"""

from __future__ import annotations

from typing import Iterator, Optional, Sequence, Tuple

import structlog

from ..config.config import HtmlCleanupConfig
from ..observability.metrics import MetricsSink, NullMetricsSink
from .content_filter import ContentFilterStrategy
from .models import CleanupResult, Document, Strategy, StrategyOutcome
from .protocols import CleanupStrategy
from .section_based import SectionBasedStrategy
from .structured_data import StructuredDataStrategy

logger = structlog.get_logger(__name__)


def default_strategies(config: HtmlCleanupConfig) -> Tuple[CleanupStrategy, ...]:
    """Structured data, then sections, then the generic content filter."""
    return (
        StructuredDataStrategy(config.structured_data),
        SectionBasedStrategy(config.section_based, min_output_size=config.content_filter.min_output_size),
        ContentFilterStrategy(config.content_filter),
    )


class HtmlCleaner:
    """
    Reduces recipe-page HTML before it is handed to the language model.

    Features:
    - Fixed strategy order with per-strategy acceptance thresholds
    - Failing strategies are downgraded to rejections
    - Raw-HTML fallback when nothing produces a safely sized result
    - Strategy usage and size metrics on every call

    The cleaner holds no per-call state; one instance can serve concurrent
    callers.
    """

    def __init__(
        self,
        config: HtmlCleanupConfig,
        metrics: Optional[MetricsSink] = None,
        strategies: Optional[Sequence[CleanupStrategy]] = None,
    ) -> None:
        """
        Initialize the HtmlCleaner.

        Args:
            config: Cleanup configuration, read-only
            metrics: Destination for usage and size metrics; dropped when None
            strategies: Strategy chain in priority order; built from config when None
        """
        self.config = config
        self.metrics: MetricsSink = metrics if metrics is not None else NullMetricsSink()
        self.strategies: Tuple[CleanupStrategy, ...] = (
            tuple(strategies) if strategies is not None else default_strategies(config)
        )
        self.logger = logger.bind(component="HtmlCleaner")

    def process(self, html: Optional[str], source_label: str = "") -> CleanupResult:
        """
        Clean HTML with the first strategy that accepts it.

        Args:
            html: Raw page HTML; None and "" are allowed
            source_label: Page URL or other label used in logs only

        Returns:
            CleanupResult; never raises
        """
        short_circuit = self._short_circuit(html, source_label)
        if short_circuit is not None:
            return short_circuit
        assert html is not None

        document = Document(html=html, source_label=source_label)
        best_effort: Optional[StrategyOutcome] = None

        for strategy in self.strategies:
            if not strategy.enabled:
                continue
            outcome = self._evaluate(strategy, document)
            if outcome.accepted:
                return self._finish(strategy.name, outcome.html, len(html), source_label, outcome)
            if strategy.name is Strategy.CONTENT_FILTER:
                best_effort = outcome

        return self._fall_back(html, source_label, best_effort)

    def process_with_strategy(self, html: Optional[str], source_label: str, strategy: Strategy) -> CleanupResult:
        """
        Clean HTML with one named strategy only.

        The strategy runs even when its own enabled flag is off. A rejection
        yields FALLBACK; FALLBACK returns the input unchanged.
        """
        short_circuit = self._short_circuit(html, source_label)
        if short_circuit is not None:
            return short_circuit
        assert html is not None

        if strategy in (Strategy.FALLBACK, Strategy.DISABLED):
            return self._finish(strategy, html, len(html), source_label)

        selected = next((s for s in self.strategies if s.name is strategy), None)
        if selected is None:
            self.logger.warning("Strategy not configured", strategy=strategy.value, source=source_label)
            return self._finish(Strategy.FALLBACK, html, len(html), source_label)

        outcome = self._evaluate(selected, Document(html=html, source_label=source_label))
        if outcome.accepted:
            return self._finish(strategy, outcome.html, len(html), source_label, outcome)
        best_effort = outcome if strategy is Strategy.CONTENT_FILTER else None
        return self._fall_back(html, source_label, best_effort)

    def relax(self, html: Optional[str], source_label: str, after: Strategy) -> Iterator[CleanupResult]:
        """
        Yield results for each strategy less restrictive than ``after``.

        Used when the downstream model suspects the page was over-cleaned.
        Results identical to one already yielded are skipped.
        """
        seen = set()
        for strategy in after.relaxations():
            result = self.process_with_strategy(html, source_label, strategy)
            if result.cleaned_html in seen:
                continue
            seen.add(result.cleaned_html)
            yield result

    # --- Internals ---

    def _short_circuit(self, html: Optional[str], source_label: str) -> Optional[CleanupResult]:
        """Results that need no strategy: disabled cleanup and empty input."""
        if not self.config.enabled:
            text = html or ""
            return self._finish(Strategy.DISABLED, text, len(text), source_label)

        if not html:
            self.logger.warning("Empty HTML input", source=source_label)
            return self._finish(Strategy.FALLBACK, "", 0, source_label)

        if not html.strip():
            self.logger.warning("Blank HTML input", source=source_label, original_size=len(html))
            return self._finish(Strategy.FALLBACK, html, len(html), source_label)

        return None

    def _evaluate(self, strategy: CleanupStrategy, document: Document) -> StrategyOutcome:
        try:
            outcome = strategy.evaluate(document)
        except Exception as e:
            self.logger.error(
                "Cleanup strategy failed",
                event_type="strategy_failed",
                strategy=strategy.name.value,
                source=document.source_label,
                error=str(e),
                error_type=type(e).__name__,
            )
            return StrategyOutcome.rejected(f"{type(e).__name__}: {e}")

        self.logger.debug(
            "Strategy evaluated",
            strategy=strategy.name.value,
            source=document.source_label,
            accepted=outcome.accepted,
            score=round(outcome.score, 1),
            reason=outcome.reason,
        )
        return outcome

    def _fall_back(self, html: str, source_label: str, best_effort: Optional[StrategyOutcome]) -> CleanupResult:
        min_safe_size = self.config.fallback.min_safe_size
        if best_effort is not None and best_effort.html and len(best_effort.html) >= min_safe_size:
            return self._finish(Strategy.CONTENT_FILTER, best_effort.html, len(html), source_label, best_effort)

        self.logger.debug(
            "Falling back to raw HTML",
            source=source_label,
            best_effort_size=len(best_effort.html) if best_effort is not None else 0,
            min_safe_size=min_safe_size,
        )
        return self._finish(Strategy.FALLBACK, html, len(html), source_label)

    def _finish(
        self,
        strategy: Strategy,
        cleaned_html: str,
        original_size: int,
        source_label: str,
        outcome: Optional[StrategyOutcome] = None,
    ) -> CleanupResult:
        result = CleanupResult.build(strategy, cleaned_html, original_size)
        self._emit_metrics(result)
        self.logger.info(
            "HTML cleanup completed",
            source=source_label,
            strategy=strategy.value,
            original_size=result.original_size,
            cleaned_size=result.cleaned_size,
            reduction_ratio=round(result.reduction_ratio, 3),
            score=round(outcome.score, 1) if outcome is not None else None,
        )
        return result

    def _emit_metrics(self, result: CleanupResult) -> None:
        names = self.config.metrics
        try:
            self.metrics.increment(names.strategy_counter, {"strategy": result.strategy_used.value})
            self.metrics.observe(names.original_size, result.original_size)
            self.metrics.observe(names.cleaned_size, result.cleaned_size)
        except Exception as e:
            self.logger.warning(
                "Failed to emit cleanup metrics",
                event_type="metrics_failed",
                error=str(e),
                error_type=type(e).__name__,
            )
