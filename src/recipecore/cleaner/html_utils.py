"""
BeautifulSoup helpers shared by the cleanup strategies.

Every helper mutates the tree it is given; strategies call them on their own
freshly parsed copy of the document.
"""

from __future__ import annotations

import re
from typing import Iterable, List

from bs4 import BeautifulSoup, CData, Comment, Declaration, Doctype, NavigableString, ProcessingInstruction, Tag
from bs4.element import PageElement

PARSER = "html.parser"

HEADING_TAGS = ["h1", "h2", "h3", "h4", "h5", "h6"]
LIST_TAGS = ["ul", "ol"]
PREFORMATTED_TAGS = ["pre", "textarea"]

NON_CONTENT_TAGS = ["script", "style", "noscript", "template"]
LAYOUT_TAGS = ["nav", "header", "footer", "aside"]
EMBED_TAGS = ["iframe", "embed", "object", "form"]

# class/id tokens (split on "-", "_" and whitespace) that mark boilerplate
AD_TOKENS = frozenset({"ad", "ads", "advert", "adverts", "advertisement", "adsbygoogle", "sponsored", "promo"})
SOCIAL_TOKENS = frozenset({"social", "share", "sharing", "sharebar"})
COMMENT_TOKENS = frozenset({"comment", "comments", "disqus"})
SIDEBAR_TOKENS = frozenset({"sidebar", "widget", "newsletter", "popup", "cookie", "cookies", "consent"})

TRACKING_ATTRIBUTES = frozenset({"style", "class", "id"})

_HIDDEN_STYLE = re.compile(r"display\s*:\s*none|visibility\s*:\s*hidden", re.IGNORECASE)
_TOKEN_SPLIT = re.compile(r"[-_\s]+")
_WHITESPACE = re.compile(r"\s+")
_SKIP_STRINGS = (Comment, CData, Declaration, Doctype, ProcessingInstruction)


def parse(html: str) -> BeautifulSoup:
    """Parse permissively; html.parser never rejects malformed markup."""
    return BeautifulSoup(html, PARSER)


def remove_all(tags: Iterable[Tag]) -> int:
    """Decompose tags, skipping ones already removed with an ancestor."""
    removed = 0
    for tag in list(tags):
        if tag.decomposed:
            continue
        tag.decompose()
        removed += 1
    return removed


def marker_tokens(tag: Tag) -> List[str]:
    """Lower-cased class and id tokens of a tag."""
    values: List[str] = []
    classes = tag.get("class") or []
    if isinstance(classes, str):
        classes = [classes]
    values.extend(classes)
    element_id = tag.get("id")
    if isinstance(element_id, str):
        values.append(element_id)
    tokens: List[str] = []
    for value in values:
        tokens.extend(token for token in _TOKEN_SPLIT.split(value.lower()) if token)
    return tokens


def has_marker(tag: Tag, markers: Iterable[str]) -> bool:
    markers = frozenset(markers)
    return any(token in markers for token in marker_tokens(tag))


def is_hidden(tag: Tag) -> bool:
    """True for elements hidden inline or via hidden/aria-hidden attributes."""
    style = tag.get("style")
    if isinstance(style, str) and _HIDDEN_STYLE.search(style):
        return True
    if tag.has_attr("hidden"):
        return True
    return str(tag.get("aria-hidden", "")).lower() == "true"


def remove_non_content(root: Tag) -> int:
    """Drop script/style blocks, hidden elements and HTML comments."""
    removed = remove_all(root.find_all(NON_CONTENT_TAGS))
    removed += remove_all(tag for tag in root.find_all(True) if is_hidden(tag))
    for comment in root.find_all(string=lambda s: isinstance(s, Comment)):
        comment.extract()
    return removed


def remove_boilerplate(root: Tag) -> int:
    """Drop navigation, footers, embeds, ads, social widgets, cookie banners and comment blocks."""
    markers = AD_TOKENS | SOCIAL_TOKENS | COMMENT_TOKENS | SIDEBAR_TOKENS
    removed = remove_all(root.find_all(LAYOUT_TAGS + EMBED_TAGS))
    removed += remove_all(tag for tag in root.find_all(True) if has_marker(tag, markers))
    return removed


def is_tracking_attribute(name: str) -> bool:
    name = name.lower()
    return name in TRACKING_ATTRIBUTES or name.startswith("data-") or name.startswith("on")


def strip_tracking_attributes(root: Tag) -> None:
    """Remove style/class/id, data-* and on* event attributes in place."""
    tags = [] if isinstance(root, BeautifulSoup) else [root]
    tags.extend(root.find_all(True))
    for tag in tags:
        tag.attrs = {name: value for name, value in tag.attrs.items() if not is_tracking_attribute(name)}


def is_text(node: PageElement) -> bool:
    """True for visible text nodes (not comments, doctypes or processing instructions)."""
    return isinstance(node, NavigableString) and not isinstance(node, _SKIP_STRINGS)


def collapse_whitespace(root: Tag) -> None:
    """Squash runs of whitespace in text nodes outside <pre>/<textarea>."""
    stack = [(root, False)]
    while stack:
        tag, preformatted = stack.pop()
        preformatted = preformatted or tag.name in PREFORMATTED_TAGS
        for child in list(tag.children):
            if isinstance(child, Tag):
                stack.append((child, preformatted))
            elif not preformatted and is_text(child):
                squashed = _WHITESPACE.sub(" ", str(child))
                if squashed != child:
                    child.replace_with(NavigableString(squashed))


def inner_html(root: Tag) -> str:
    return root.decode_contents().strip()


def heading_level(tag: Tag) -> int:
    return int(tag.name[1]) if tag.name in HEADING_TAGS else 0


def text_of(tag: Tag) -> str:
    return tag.get_text(" ", strip=True)
