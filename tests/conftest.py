"""
Shared test configuration for recipecore.

Provides the cleanup configuration used across the suite and a set of
representative recipe pages.
"""

# Standard library imports
import logging
from typing import Dict, List, Mapping, Optional, Tuple

# Third-party imports
import pytest
import structlog

# Local imports
from recipecore.cleaner import HtmlCleaner
from recipecore.config import (
    ContentFilterConfig,
    FallbackConfig,
    HtmlCleanupConfig,
    SectionBasedConfig,
    StructuredDataConfig,
)

# ============================================================================
# Pytest Configuration
# ============================================================================


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests for individual components")
    config.addinivalue_line("markers", "integration: Tests across the whole cleanup cascade")
    config.addinivalue_line("markers", "performance: Timing checks on large or deeply nested pages")


@pytest.fixture(autouse=True)
def reset_logging():
    """Undo any structlog/stdlib logging configuration a test installed."""
    yield
    structlog.reset_defaults()
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)


# ============================================================================
# Configuration Fixtures
# ============================================================================


@pytest.fixture
def cleanup_config() -> HtmlCleanupConfig:
    """Thresholds used by the production deployment."""
    return HtmlCleanupConfig(
        enabled=True,
        structured_data=StructuredDataConfig(enabled=True, min_completeness=70),
        section_based=SectionBasedConfig(enabled=True, min_confidence=70),
        content_filter=ContentFilterConfig(min_output_size=100),
        fallback=FallbackConfig(min_safe_size=300),
    )


class RecordingMetricsSink:
    """In-memory metrics sink."""

    def __init__(self) -> None:
        self.increments: List[Tuple[str, Dict[str, str]]] = []
        self.observations: List[Tuple[str, float]] = []

    def increment(self, name: str, labels: Optional[Mapping[str, str]] = None) -> None:
        self.increments.append((name, dict(labels or {})))

    def observe(self, name: str, value: float) -> None:
        self.observations.append((name, value))


@pytest.fixture
def metrics_sink() -> RecordingMetricsSink:
    return RecordingMetricsSink()


@pytest.fixture
def cleaner(cleanup_config, metrics_sink) -> HtmlCleaner:
    return HtmlCleaner(cleanup_config, metrics=metrics_sink)


# ============================================================================
# Sample Pages
# ============================================================================


@pytest.fixture
def structured_recipe_html() -> str:
    return """
    <html>
    <head>
    <script type="application/ld+json">
    {
      "@context": "https://schema.org",
      "@type": "Recipe",
      "name": "Chocolate Cake",
      "description": "A delicious chocolate cake recipe",
      "recipeIngredient": ["flour", "sugar", "cocoa"],
      "recipeInstructions": "Mix ingredients and bake at 350°F for 30 minutes",
      "totalTime": "PT45M"
    }
    </script>
    </head>
    <body>
        <nav>Navigation menu</nav>
        <article>
            <h1>Chocolate Cake Recipe</h1>
            <p>Lots of content here that will be ignored...</p>
        </article>
        <footer>Footer content</footer>
    </body>
    </html>
    """


@pytest.fixture
def sectioned_recipe_html() -> str:
    return """
    <html>
    <body>
        <nav>Skip this navigation</nav>
        <article class="recipe-content">
            <h2>Amazing Cookie Recipe</h2>
            <h3>Ingredients</h3>
            <ul>
                <li>2 cups flour</li>
                <li>1 cup sugar</li>
                <li>1 cup butter</li>
                <li>2 cups chocolate chips</li>
            </ul>
            <h3>Preparation Steps</h3>
            <ol>
                <li>Mix ingredients together thoroughly</li>
                <li>Cook the dough into small balls</li>
                <li>Bake at 350°F for 12 minutes until golden</li>
                <li>Cool and serve your delicious cookies</li>
            </ol>
            <p>This is a delicious recipe for chocolate chip cookies that everyone will love!
            Follow these directions carefully for the best results. The preparation method is simple.</p>
        </article>
        <aside class="sidebar">Advertisements and other content</aside>
        <footer>Footer content</footer>
    </body>
    </html>
    """


@pytest.fixture
def headings_only_recipe_html() -> str:
    """Ingredient and instruction lists directly under <body>, no container."""
    return """
    <html>
    <body>
        <nav><a href="/">Home</a> <a href="/recipes">All recipes</a></nav>
        <h2>Ingredients</h2>
        <ul>
            <li>2 cups flour for the recipe</li>
            <li>1 cup sugar, sifted before you bake</li>
            <li>3 eggs at room temperature for preparation</li>
        </ul>
        <h2>Instructions</h2>
        <ol>
            <li>Preheat the oven and bake for 30 minutes</li>
            <li>Cook the sauce over low heat, following the directions</li>
            <li>Repeat these steps for the second batch</li>
        </ol>
        <footer>Copyright Footer Site</footer>
    </body>
    </html>
    """


@pytest.fixture
def generic_article_html() -> str:
    return """
    <html>
    <head>
        <script>console.log('test');</script>
        <style>body { margin: 0; }</style>
    </head>
    <body>
        <nav class="main-nav">Navigation</nav>
        <div>
            <p>Some content without any of the watched words, but enough text to pass the minimum size check.
            This paragraph contains sufficient content to ensure we meet the minimum output size
            requirement for the content filter strategy. Adding more text here to make
            sure we have enough content. More words, more sentences, more characters to fill
            the space and ensure the test passes correctly. This is important for validating
            the content filter strategy works as expected when there are no matching sections.</p>
        </div>
        <footer>Footer content</footer>
        <div class="ads">Advertisement</div>
    </body>
    </html>
    """


@pytest.fixture
def tiny_html() -> str:
    return "<html><body><p>tiny</p></body></html>"


@pytest.fixture
def diluted_article_html() -> str:
    """A long story with a small recipe card inside the same <article>."""
    filler = "The weather in the valley was mild and the garden looked lovely this year. " * 40
    return f"""
    <html>
    <body>
        <article>
            <p>{filler}</p>
            <h3>Ingredients</h3>
            <ul>
                <li>2 cups flour</li>
                <li>1 cup sugar</li>
                <li>3 eggs</li>
            </ul>
            <h3>Instructions</h3>
            <ol>
                <li>Mix well</li>
                <li>Bake for 30 minutes</li>
                <li>Cool before serving</li>
            </ol>
        </article>
    </body>
    </html>
    """


