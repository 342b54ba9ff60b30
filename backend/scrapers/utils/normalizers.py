"""
Data normalization utilities for scrapers.

These functions standardize scraped values into consistent formats.
"""

import re

from ..base import NONE_VALUE


def clean_text(text: str) -> str:
    """
    Collapse whitespace inside each line and drop blank lines.

    Examples:
        "  Joe's   Plumbing \\n" -> "Joe's Plumbing"
        "Open\\n\\n  24 hours" -> "Open\\n24 hours"
        "   " -> "NONE"
    """
    if not text:
        return NONE_VALUE
    lines = [' '.join(line.split()) for line in text.splitlines()]
    cleaned = '\n'.join(line for line in lines if line)
    return cleaned or NONE_VALUE


def clean_html(markup: str) -> str:
    """
    Trim markup and collapse runs of whitespace between tags.

    Examples:
        " 020 7946 0000 " -> "020 7946 0000"
        "<span>a</span>   <b>b</b>" -> "<span>a</span> <b>b</b>"
    """
    if not markup:
        return NONE_VALUE
    cleaned = re.sub(r'\s+', ' ', markup).strip()
    return cleaned or NONE_VALUE
