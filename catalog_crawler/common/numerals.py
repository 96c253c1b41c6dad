"""
Arabic-Indic Numeral Utilities

Converts Arabic-Indic digits (as rendered by the Arabic storefront) to
ASCII digits so page labels, stock counts and prices can be parsed.
"""

import re
from typing import Optional

# Arabic-Indic digits U+0660..U+0669 to ASCII
NUMERAL_MAP = {
    '٠': '0', '١': '1', '٢': '2', '٣': '3', '٤': '4',
    '٥': '5', '٦': '6', '٧': '7', '٨': '8', '٩': '9',
}

_TRANSLATION_TABLE = str.maketrans(NUMERAL_MAP)

_LEADING_INT_RE = re.compile(r'\s*([+-]?[0-9]+)')


def convert_arabic_numerals(text: Optional[str]) -> str:
    """
    Replace Arabic-Indic digits with their ASCII equivalents.

    Args:
        text: Text that may contain Arabic-Indic digits

    Returns:
        Text with every Arabic-Indic digit replaced; other characters untouched.
        Empty string for None or empty input.

    Example:
        >>> convert_arabic_numerals("تبقى ١٢")
        'تبقى 12'
    """
    if not text:
        return ''
    return text.translate(_TRANSLATION_TABLE)


def parse_int(text: Optional[str]) -> Optional[int]:
    """
    Parse the leading integer of a label after numeral conversion.

    Leading whitespace is skipped and parsing stops at the first non-digit,
    so "٣ " and "12abc" parse while "Page 3" does not.

    Returns:
        Parsed integer or None
    """
    match = _LEADING_INT_RE.match(convert_arabic_numerals(text))
    if not match:
        return None
    return int(match.group(1))
