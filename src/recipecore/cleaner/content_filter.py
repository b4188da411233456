"""
Generic noise filter used when no recipe structure is recognised.
"""

from __future__ import annotations

import logging

from ..config.config import ContentFilterConfig
from . import html_utils
from .models import Document, Strategy, StrategyOutcome
from .protocols import CleanupStrategy

logger = logging.getLogger(__name__)


class ContentFilterStrategy(CleanupStrategy):
    """Strips scripts, layout chrome, ads and tracking attributes; keeps everything else."""

    name = Strategy.CONTENT_FILTER

    def __init__(self, config: ContentFilterConfig) -> None:
        self.config = config
        self.enabled = config.enabled

    def evaluate(self, document: Document) -> StrategyOutcome:
        cleaned = self.filter(document.html)
        size = len(cleaned)
        logger.debug("Content filtering applied, size: %d chars", size)

        minimum = self.config.min_output_size
        score = 100.0 if minimum == 0 else min(100.0, size * 100.0 / minimum)
        if size < minimum:
            # The best-effort output is kept for the orchestrator's safe-size check
            return StrategyOutcome.rejected(f"output {size} chars below {minimum}", html=cleaned, score=score)
        return StrategyOutcome(accepted=True, html=cleaned, score=score, reason=f"{size} chars kept")

    def filter(self, html: str) -> str:
        soup = html_utils.parse(html)
        html_utils.remove_non_content(soup)
        html_utils.remove_boilerplate(soup)
        html_utils.strip_tracking_attributes(soup)
        html_utils.collapse_whitespace(soup)

        if soup.body is not None:
            return html_utils.inner_html(soup.body)

        # Fragment or body-less page: keep everything outside <head>
        html_utils.remove_all(soup.find_all(["head", "title", "meta", "link"]))
        root = soup.html if soup.html is not None else soup
        return html_utils.inner_html(root)
