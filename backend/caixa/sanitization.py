"""
Sanitization helpers for user supplied text.

Validation rejects obviously malicious input; these helpers additionally
neutralize markup on every free-text field before it is stored.
"""

import html
import re
from typing import Optional

import nh3

_WHITESPACE_RE = re.compile(r"\s+")


def sanitize_string(value: Optional[str]) -> Optional[str]:
    """Strip all HTML, trim, and collapse runs of whitespace."""
    if not value:
        return value
    cleaned = nh3.clean(value, tags=set())
    return _WHITESPACE_RE.sub(" ", cleaned.strip())


def sanitize_optional(value: Optional[str]) -> Optional[str]:
    """Like :func:`sanitize_string` but maps empty results to ``None``."""
    cleaned = sanitize_string(value)
    return cleaned or None


def escape_html(value: Optional[str]) -> Optional[str]:
    """Escape markup characters instead of removing them."""
    if not value:
        return value
    return html.escape(value)
