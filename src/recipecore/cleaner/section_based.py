"""
Section-based recipe extraction.

Splits the page into candidate sections (semantic containers and heading
groups), scores each one for recipe relevance and keeps only the best
matching sections.

Score (0-100) for a section is made of:

- keyword density: keyword occurrences per 100 words, times
  ``DENSITY_WEIGHT``, capped at ``DENSITY_CAP``;
- keyword coverage: ``COVERAGE_POINTS`` per distinct keyword, capped at
  ``COVERAGE_CAP``;
- heading/list structure: ``HEADING_LIST_POINTS`` for every heading that
  mentions a keyword and is followed by a list of at least two items, capped
  at ``HEADING_LIST_CAP``;
- ``MULTI_LIST_POINTS`` when the section holds two or more lists.

Word counts, keyword hits, lists and keyword headings are aggregated for
every element in a single walk of the tree (``TreeIndex``), so nested
containers are scored without re-reading their subtrees.
"""

from __future__ import annotations

import bisect
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from bs4 import BeautifulSoup, Tag

from ..config.config import SectionBasedConfig
from . import html_utils
from .models import Document, Strategy, StrategyOutcome
from .protocols import CleanupStrategy

logger = logging.getLogger(__name__)

DENSITY_WEIGHT = 4.0
DENSITY_CAP = 40.0
COVERAGE_POINTS = 5.0
COVERAGE_CAP = 25.0
HEADING_LIST_POINTS = 15.0
HEADING_LIST_CAP = 30.0
MULTI_LIST_POINTS = 5.0
MIN_LIST_ITEMS = 2

CONTAINER_TAGS = ["article", "section", "main"]
CONTAINER = "container"
HEADING = "heading"

# Heading level used for subtrees without any heading
NO_HEADING = 7


@dataclass
class ElementStats:
    """Aggregates for one element and everything below it."""

    start: int
    end: int = 0
    words: int = 0
    hits: List[int] = field(default_factory=list)
    lists: int = 0
    list_items: int = 0
    keyword_lists: int = 0
    top_heading: int = NO_HEADING
    first_list: Optional[Tag] = None


class TreeIndex:
    """
    Per-element statistics computed in one post-order walk.

    ``start``/``end`` are document-order numbers: an element's subtree covers
    exactly the elements numbered ``start..end``.
    """

    def __init__(self, root: Tag, keywords: Sequence[str]) -> None:
        self.keywords = tuple(keywords)
        self._stats: Dict[int, ElementStats] = {}
        self._walk(root)

    def __getitem__(self, tag: Tag) -> ElementStats:
        return self._stats[id(tag)]

    def count(self, text: str) -> Tuple[int, List[int]]:
        """Word count and per-keyword hit counts of a text."""
        lowered = text.lower()
        return len(lowered.split()), [lowered.count(keyword) for keyword in self.keywords]

    def _walk(self, root: Tag) -> None:
        counter = 0
        stack: List[Tuple[Tag, bool]] = [(root, False)]
        while stack:
            tag, finished = stack.pop()
            if finished:
                self._finish(tag)
                continue
            self._stats[id(tag)] = ElementStats(start=counter, hits=[0] * len(self.keywords))
            counter += 1
            stack.append((tag, True))
            children = [child for child in tag.children if isinstance(child, Tag)]
            stack.extend((child, False) for child in reversed(children))

    def _finish(self, tag: Tag) -> None:
        stats = self[tag]
        stats.end = stats.start
        is_list = tag.name in html_utils.LIST_TAGS
        stats.lists = int(is_list)
        stats.list_items = int(tag.name == "li")
        stats.top_heading = html_utils.heading_level(tag) or NO_HEADING
        stats.first_list = tag if is_list else None

        children: List[Tag] = []
        for child in tag.children:
            if isinstance(child, Tag):
                children.append(child)
            elif html_utils.is_text(child):
                words, hits = self.count(str(child))
                stats.words += words
                stats.hits = [a + b for a, b in zip(stats.hits, hits)]

        # Children are complete; their keyword-heading flags depend on their siblings
        self._flag_keyword_headings(children)

        for child in children:
            child_stats = self[child]
            stats.end = child_stats.end
            stats.words += child_stats.words
            stats.hits = [a + b for a, b in zip(stats.hits, child_stats.hits)]
            stats.lists += child_stats.lists
            stats.list_items += child_stats.list_items
            stats.keyword_lists += child_stats.keyword_lists
            stats.top_heading = min(stats.top_heading, child_stats.top_heading)
            if stats.first_list is None:
                stats.first_list = child_stats.first_list

    def _flag_keyword_headings(self, siblings: List[Tag]) -> None:
        for index, heading in enumerate(siblings):
            if heading.name not in html_utils.HEADING_TAGS:
                continue
            title = html_utils.text_of(heading).lower()
            if not any(keyword in title for keyword in self.keywords):
                continue
            items = self._list_after(siblings, index + 1)
            if items is not None and self[items].list_items >= MIN_LIST_ITEMS:
                self[heading].keyword_lists += 1

    def _list_after(self, siblings: Sequence[Tag], start: int) -> Optional[Tag]:
        """First list among ``siblings[start:]``, before the next heading."""
        for position in range(start, len(siblings)):
            sibling = siblings[position]
            if sibling.name in html_utils.HEADING_TAGS:
                return None
            stats = self[sibling]
            if stats.first_list is not None:
                return stats.first_list
            if stats.top_heading != NO_HEADING:
                return None
        return None


@dataclass
class Section:
    """A scoring unit: one container element, or a heading plus its following siblings."""

    kind: str
    elements: Tuple[Tag, ...]
    position: int
    end: int
    words: int
    hits: List[int]
    list_count: int
    keyword_lists: int
    score: float = 0.0

    def overlaps(self, other: Section) -> bool:
        """True when either section contains (or is) part of the other."""
        return self.position <= other.end and other.position <= self.end

    def render(self) -> str:
        return "".join(str(element) for element in self.elements)


class SectionBasedStrategy(CleanupStrategy):
    """Keeps the recipe-shaped sections of a page."""

    name = Strategy.SECTION_BASED

    def __init__(self, config: SectionBasedConfig, min_output_size: int = 0) -> None:
        self.config = config
        self.enabled = config.enabled
        self.keywords: Tuple[str, ...] = tuple(config.keywords)
        self.min_output_size = min_output_size

    def evaluate(self, document: Document) -> StrategyOutcome:
        soup = html_utils.parse(document.html)
        html_utils.remove_non_content(soup)
        html_utils.remove_boilerplate(soup)

        sections = self.partition(soup)
        if not sections:
            return StrategyOutcome.rejected("no candidate sections")

        for section in sections:
            section.score = self.score_counts(section.words, section.hits, section.list_count, section.keyword_lists)

        selection, score = self.select(sections)
        if score < self.config.min_confidence:
            logger.debug("Best section score %.1f below %d", score, self.config.min_confidence)
            return StrategyOutcome.rejected(
                f"confidence {score:.0f} below {self.config.min_confidence}", score=score
            )

        html_utils.strip_tracking_attributes(soup)
        html_utils.collapse_whitespace(soup)
        html = "\n".join(section.render() for section in sorted(selection, key=lambda s: s.position)).strip()

        if len(html) < self.min_output_size:
            return StrategyOutcome.rejected(
                f"output {len(html)} chars below {self.min_output_size}", html=html, score=score
            )

        logger.debug(
            "Section-based extraction, score: %.1f, sections: %d, size: %d chars", score, len(selection), len(html)
        )
        return StrategyOutcome(
            accepted=True,
            html=html,
            score=score,
            reason=f"confidence {score:.0f} from {len(selection)} section(s)",
        )

    # --- Partitioning ---

    def partition(self, soup: BeautifulSoup) -> List[Section]:
        """Containers first (document order), then heading groups."""
        index = TreeIndex(soup, self.keywords)

        sections: List[Section] = []
        seen: set[int] = set()
        for tag in self._containers(soup):
            if id(tag) in seen:
                continue
            seen.add(id(tag))
            sections.append(self._make_section(CONTAINER, (tag,), index))

        for heading in soup.find_all(html_utils.HEADING_TAGS):
            elements = self._heading_group(heading, index)
            if len(elements) > 1:
                sections.append(self._make_section(HEADING, elements, index))

        return sections

    def _containers(self, soup: BeautifulSoup) -> List[Tag]:
        containers = soup.find_all(CONTAINER_TAGS)
        containers.extend(soup.find_all(attrs={"role": "main"}))
        containers.extend(div for div in soup.find_all("div") if self._mentions_recipe(div))
        return containers

    @staticmethod
    def _mentions_recipe(tag: Tag) -> bool:
        return any("recipe" in token for token in html_utils.marker_tokens(tag))

    @staticmethod
    def _heading_group(heading: Tag, index: TreeIndex) -> Tuple[Tag, ...]:
        """The heading and its following siblings up to the next heading of the same or higher level."""
        level = html_utils.heading_level(heading)
        elements = [heading]
        for sibling in heading.next_siblings:
            if not isinstance(sibling, Tag):
                continue
            if index[sibling].top_heading <= level:
                break
            elements.append(sibling)
        return tuple(elements)

    @staticmethod
    def _make_section(kind: str, elements: Tuple[Tag, ...], index: TreeIndex) -> Section:
        stats = [index[element] for element in elements]
        hits = [0] * len(index.keywords)
        for element_stats in stats:
            hits = [a + b for a, b in zip(hits, element_stats.hits)]
        return Section(
            kind=kind,
            elements=elements,
            position=stats[0].start,
            end=stats[-1].end,
            words=sum(s.words for s in stats),
            hits=hits,
            list_count=sum(s.lists for s in stats),
            keyword_lists=sum(s.keyword_lists for s in stats),
        )

    # --- Scoring ---

    def score(self, text: str, list_count: int, keyword_lists: int) -> float:
        lowered = text.lower()
        hits = [lowered.count(keyword) for keyword in self.keywords]
        return self.score_counts(len(lowered.split()), hits, list_count, keyword_lists)

    @staticmethod
    def score_counts(words: int, hits: Sequence[int], list_count: int, keyword_lists: int) -> float:
        if words == 0:
            return 0.0

        occurrences = sum(hits)
        distinct = sum(1 for count in hits if count)

        density = occurrences * 100.0 / words
        score = min(DENSITY_CAP, density * DENSITY_WEIGHT)
        score += min(COVERAGE_CAP, COVERAGE_POINTS * distinct)
        score += min(HEADING_LIST_CAP, HEADING_LIST_POINTS * keyword_lists)
        if list_count >= 2:
            score += MULTI_LIST_POINTS
        return min(100.0, score)

    def score_selection(self, selection: Sequence[Section]) -> float:
        if len(selection) == 1:
            return selection[0].score
        hits = [0] * len(self.keywords)
        for section in selection:
            hits = [a + b for a, b in zip(hits, section.hits)]
        return self.score_counts(
            sum(section.words for section in selection),
            hits,
            sum(section.list_count for section in selection),
            sum(section.keyword_lists for section in selection),
        )

    # --- Selection ---

    def select(self, sections: Sequence[Section]) -> Tuple[List[Section], float]:
        """Pick the best-scoring section, grown with disjoint recipe-shaped sections.

        Three selections compete on their combined score: the best section
        alone, the best section plus every disjoint keyword-heading or
        above-threshold section, and the keyword-heading groups alone (recipe
        cards inside long, diluted containers).
        """
        ranked = sorted(sections, key=lambda s: (-s.score, s.kind != CONTAINER, s.position))
        best = ranked[0]

        chosen: List[Section] = [best]
        chosen_score = best.score
        for selection in (
            self._grow([best], ranked),
            self._grow([], [s for s in ranked if s.kind == HEADING and s.keyword_lists]),
        ):
            if not selection:
                continue
            combined = self.score_selection(selection)
            if combined > chosen_score or (combined == chosen_score and len(selection) > len(chosen)):
                chosen, chosen_score = selection, combined
        return chosen, chosen_score

    def _grow(self, selection: List[Section], ranked: Sequence[Section]) -> List[Section]:
        selection = list(selection)
        # Selected sections are disjoint, so sorted by start they are also sorted by end
        starts = sorted(section.position for section in selection)
        ends = sorted(section.end for section in selection)
        for section in ranked:
            if not (section.keyword_lists or section.score >= self.config.min_confidence):
                continue
            slot = bisect.bisect_right(starts, section.end)
            if slot and ends[slot - 1] >= section.position:
                continue
            starts.insert(slot, section.position)
            ends.insert(slot, section.end)
            selection.append(section)
        return selection
