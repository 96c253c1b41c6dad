"""
Text Utilities

Helper functions for text processing and cleanup.
"""

import re

_NON_SLUG_RE = re.compile(r'[^a-z0-9]+')
_NON_PRICE_RE = re.compile(r'[^0-9.]')
# Currency signs that contain a dot ("ر.س" = Saudi riyal)
CURRENCY_TOKENS = ('ر.س',)


def slugify(text: str) -> str:
    """
    Build the slug part of a url_key.

    Lowercases the text and collapses every run of characters outside
    [a-z0-9] into a single hyphen. Leading/trailing hyphens are kept, so
    a fully non-Latin name becomes "-".

    Example:
        >>> slugify("Wall Mirror 60x90")
        'wall-mirror-60x90'
    """
    if not text:
        return ''
    return _NON_SLUG_RE.sub('-', text.lower())


def clean_price(text: str) -> str:
    """
    Strip everything except digits and dots.

    Currency signs are removed first so their dots do not leak into the
    number; a trailing dot is dropped, a leading one (".5") is kept.
    """
    if not text:
        return ''
    for token in CURRENCY_TOKENS:
        text = text.replace(token, '')
    return _NON_PRICE_RE.sub('', text).rstrip('.')
