"""
Tolerant HTML extraction helpers shared by the board connectors.

Every lookup is a fallback chain: the most specific CSS selector first,
looser selectors next, then a regex over the row text, then a default
literal. None of these raise on a miss.
"""

from bs4 import BeautifulSoup
from utils.text_cleaner import TextCleaner
from typing import List, Optional, Sequence, Tuple
import re
import logging

logger = logging.getLogger(__name__)

# Attributes consulted when a matched cell renders no text (avatars, icons)
TEXT_ATTRS = ("title", "aria-label", "alt", "data-value")

DATE_PATTERNS = [
    r"\b(\d{4}-\d{2}-\d{2})\b",
    r"\b(\d{1,2}/\d{1,2}/\d{2,4})\b",
    r"\b((?:Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Sept|Oct|Nov|Dec)[a-z]*\.? \d{1,2}(?:, \d{4})?)\b",
]


def parse_html(html: str) -> BeautifulSoup:
    return BeautifulSoup(html or "", "lxml")


def node_text(node) -> str:
    if node is None:
        return ""
    text = TextCleaner.clean(node.get_text(" "))
    if text:
        return text
    for attr in TEXT_ATTRS:
        value = node.get(attr)
        if value:
            return TextCleaner.clean(value)
    # Avatars usually carry the name on a nested image
    image = node.find("img")
    if image is not None and image.get("alt"):
        return TextCleaner.clean(image.get("alt"))
    return ""


def select_rows(soup, selectors: Sequence[str]) -> Tuple[Optional[str], List]:
    """Rows from the first selector that matches anything

    Returns:
        (selector used, rows); (None, []) when no selector matched
    """
    for selector in selectors:
        try:
            rows = soup.select(selector)
        except Exception as e:
            logger.debug(f"Row selector '{selector}' failed: {e}")
            continue
        if rows:
            return selector, rows
    return None, []


def first_text(node, selectors: Sequence[str], default: Optional[str] = None) -> Optional[str]:
    """Text of the first selector hit with non-empty content"""
    for selector in selectors:
        try:
            match = node.select_one(selector)
        except Exception:
            continue
        text = node_text(match)
        if text:
            return text
    return default


def first_match(text: str, patterns: Sequence[str], default: Optional[str] = None) -> Optional[str]:
    """First regex hit in text (group 1 when the pattern has one)"""
    for pattern in patterns:
        match = re.search(pattern, text or "", re.IGNORECASE)
        if match:
            return match.group(1) if match.groups() else match.group(0)
    return default


def first_attr(node, attrs: Sequence[str], pattern: str = None) -> Optional[str]:
    """First attribute value present on node, optionally narrowed by a regex"""
    if node is None:
        return None
    for attr in attrs:
        value = node.get(attr)
        if not value:
            continue
        if pattern is None:
            return str(value)
        match = re.search(pattern, str(value))
        if match:
            return match.group(1) if match.groups() else match.group(0)
    return None


def first_link_match(node, pattern: str) -> Optional[str]:
    """Capture group of the first <a href> under node matching pattern"""
    if node is None:
        return None
    for link in node.find_all("a", href=True):
        match = re.search(pattern, link["href"])
        if match:
            return match.group(1)
    return None


def first_href(node) -> Optional[str]:
    if node is None:
        return None
    link = node.find("a", href=True)
    return link["href"] if link else None
