"""
recipecore HTML cleanup - Multi-Strategy Cascade

Reduces a recipe page to the part worth sending to a language model:
1. Structured data: schema.org/Recipe JSON-LD, serialised compactly
2. Section-based: recipe-shaped sections found by keyword density and structure
3. Content filter: the page without scripts, layout chrome, ads and tracking
4. Fallback: the original HTML, unchanged
"""

from .cleaner import HtmlCleaner, default_strategies
from .content_filter import ContentFilterStrategy
from .models import CleanupResult, Document, Strategy, StrategyOutcome
from .protocols import CleanupStrategy
from .section_based import SectionBasedStrategy
from .structured_data import GraphOfEntries, SingleEntry, StructuredDataStrategy

__all__ = [
    "HtmlCleaner",
    "default_strategies",
    "CleanupResult",
    "CleanupStrategy",
    "ContentFilterStrategy",
    "Document",
    "GraphOfEntries",
    "SectionBasedStrategy",
    "SingleEntry",
    "Strategy",
    "StrategyOutcome",
    "StructuredDataStrategy",
]
