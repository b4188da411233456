"""
recipecore - Recipe-page HTML reduction for LLM extraction.
"""

from __future__ import annotations

__version__ = "0.1.0"

from .cleaner import CleanupResult, HtmlCleaner, Strategy
from .config import Config, HtmlCleanupConfig

__all__ = ["__version__", "CleanupResult", "Config", "HtmlCleaner", "HtmlCleanupConfig", "Strategy"]
