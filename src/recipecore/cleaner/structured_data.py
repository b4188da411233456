"""
JSON-LD (schema.org/Recipe) extraction strategy.
"""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union

from ..config.config import StructuredDataConfig
from . import html_utils
from .models import Document, Strategy, StrategyOutcome
from .protocols import CleanupStrategy

logger = logging.getLogger(__name__)

RECIPE_TYPE = "Recipe"
JSON_LD_MIME = "application/ld+json"

# Fields counted for completeness; each present, non-empty field is worth the same
EXPECTED_FIELDS: Tuple[str, ...] = (
    "name",
    "description",
    "recipeIngredient",
    "recipeInstructions",
    "totalTime",
    "recipeYield",
    "image",
)


@dataclass(frozen=True)
class SingleEntry:
    """A JSON-LD block holding one object."""

    entry: Dict[str, Any]


@dataclass(frozen=True)
class GraphOfEntries:
    """A JSON-LD block wrapping several objects (``@graph`` or a top-level array)."""

    entries: Tuple[Dict[str, Any], ...]


JsonLdBlock = Union[SingleEntry, GraphOfEntries]


def parse_block(raw: str) -> JsonLdBlock:
    """Parse one JSON-LD script body.

    Raises:
        ValueError: if the body is not valid JSON (including NaN, Infinity or
            out-of-range numbers) or holds no objects.
    """
    data = json.loads(raw, parse_constant=_reject_constant, parse_float=_finite_float)
    if isinstance(data, dict) and not isinstance(data.get("@graph"), list):
        return SingleEntry(data)
    entries = tuple(_flatten(data))
    if not entries and not isinstance(data, (dict, list)):
        raise ValueError(f"JSON-LD block is a {type(data).__name__}, expected an object or array")
    return GraphOfEntries(entries)


def _reject_constant(name: str) -> Any:
    raise ValueError(f"non-standard JSON constant {name}")


def _finite_float(literal: str) -> float:
    value = float(literal)
    if not math.isfinite(value):
        raise ValueError(f"number out of range: {literal}")
    return value


def _flatten(node: Any) -> Iterator[Dict[str, Any]]:
    if isinstance(node, list):
        for item in node:
            yield from _flatten(item)
    elif isinstance(node, dict):
        graph = node.get("@graph")
        if isinstance(graph, list):
            yield from _flatten(graph)
        else:
            yield node


def entries_of(block: JsonLdBlock) -> Tuple[Dict[str, Any], ...]:
    if isinstance(block, SingleEntry):
        return (block.entry,)
    return block.entries


def is_recipe(entry: Dict[str, Any]) -> bool:
    """True when ``@type`` names Recipe, as a string or inside a list."""
    declared = entry.get("@type")
    types = declared if isinstance(declared, list) else [declared]
    for value in types:
        if not isinstance(value, str):
            continue
        # "Recipe", "schema:Recipe" and "https://schema.org/Recipe" all qualify
        local_name = value.rsplit("/", 1)[-1].rsplit(":", 1)[-1].strip()
        if local_name == RECIPE_TYPE:
            return True
    return False


def _is_present(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    if isinstance(value, (list, dict)):
        return bool(value)
    return True


def completeness(entry: Dict[str, Any]) -> float:
    """Share of EXPECTED_FIELDS present and non-empty, as 0-100."""
    present = sum(1 for field in EXPECTED_FIELDS if _is_present(entry.get(field)))
    return present / len(EXPECTED_FIELDS) * 100


def compact_json(entry: Dict[str, Any]) -> str:
    """Serialise an entry as strict, whitespace-free JSON."""
    return json.dumps(entry, ensure_ascii=False, allow_nan=False, separators=(",", ":"))


class StructuredDataStrategy(CleanupStrategy):
    """Uses embedded JSON-LD recipe metadata in place of the page."""

    name = Strategy.STRUCTURED_DATA

    def __init__(self, config: StructuredDataConfig) -> None:
        self.config = config
        self.enabled = config.enabled

    def evaluate(self, document: Document) -> StrategyOutcome:
        blocks = self.find_blocks(document.html)
        if not blocks:
            return StrategyOutcome.rejected("no parsable JSON-LD blocks")

        best: Optional[Dict[str, Any]] = None
        best_score = -1.0
        for block in blocks:
            for entry in entries_of(block):
                if not is_recipe(entry):
                    continue
                score = completeness(entry)
                if score > best_score:
                    best, best_score = entry, score

        if best is None:
            return StrategyOutcome.rejected("no Recipe entry in JSON-LD")

        if best_score < self.config.min_completeness:
            logger.debug(
                "Structured recipe data incomplete: %.0f%% < %d%%", best_score, self.config.min_completeness
            )
            return StrategyOutcome.rejected(
                f"completeness {best_score:.0f} below {self.config.min_completeness}", score=best_score
            )

        logger.debug("Found structured recipe data, completeness: %.0f%%", best_score)
        return StrategyOutcome(
            accepted=True,
            html=compact_json(best),
            score=best_score,
            reason=f"completeness {best_score:.0f}",
        )

    def find_blocks(self, html: str) -> List[JsonLdBlock]:
        """Parse every JSON-LD script in the page, skipping malformed ones."""
        soup = html_utils.parse(html)
        blocks: List[JsonLdBlock] = []
        for script in soup.find_all("script"):
            mime = str(script.get("type", "")).split(";", 1)[0].strip().lower()
            if mime != JSON_LD_MIME:
                continue
            raw = script.get_text().strip()
            if not raw:
                continue
            try:
                blocks.append(parse_block(raw))
            except ValueError as e:
                # json.JSONDecodeError is a ValueError
                logger.debug("Invalid JSON-LD in script tag, skipping: %s", e)
        return blocks
