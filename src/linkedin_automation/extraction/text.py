"""Text helpers shared by the search and detail pipelines."""

import re
from typing import Iterable, Optional

from bs4 import BeautifulSoup, Tag

from ..constants import ELLIPSIS

_WHITESPACE = re.compile(r"[ \t\r\f\v]+")
_BLANK_LINES = re.compile(r"\n\s*\n+")


def truncate(text: Optional[str], limit: int) -> str:
    """
    Bound text to `limit` characters, appending the ellipsis marker when cut.

    Text of length <= limit is returned unchanged; longer text becomes its
    first `limit` characters followed by "...".
    """
    if not text:
        return ""
    if len(text) <= limit:
        return text
    return text[:limit] + ELLIPSIS


def clean_text(text: Optional[str]) -> str:
    """Collapse runs of spaces and blank lines, keeping paragraph breaks."""
    if not text:
        return ""
    lines = [_WHITESPACE.sub(" ", line).strip() for line in text.splitlines()]
    joined = "\n".join(lines)
    return _BLANK_LINES.sub("\n\n", joined).strip()


def single_line(text: Optional[str]) -> str:
    """Collapse all whitespace (including newlines) to single spaces."""
    if not text:
        return ""
    return " ".join(text.split())


def parse_document(html: Optional[str]) -> BeautifulSoup:
    return BeautifulSoup(html or "", "html.parser")


def select_first(node: Tag, selectors: Iterable[str]) -> Optional[Tag]:
    """Return the first element matched by the ordered fallback selectors."""
    for selector in selectors:
        found = node.select_one(selector)
        if found is not None:
            return found
    return None


def element_text(element: Optional[Tag], multiline: bool = False) -> Optional[str]:
    """
    Visible text of an element, or None if absent or blank.

    Args:
        element: Parsed element
        multiline: Keep line structure (descriptions) instead of one line
    """
    if element is None:
        return None
    if multiline:
        text = clean_text(element.get_text("\n"))
    else:
        text = single_line(element.get_text(" "))
    return text or None


def first_text(node: Tag, selectors: Iterable[str], multiline: bool = False) -> Optional[str]:
    """Text of the first matching element that has any text."""
    for selector in selectors:
        for element in node.select(selector):
            text = element_text(element, multiline=multiline)
            if text:
                return text
    return None
