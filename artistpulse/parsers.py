"""Raw-text parsers applied to extracted field values.

Parsers are pure functions from the raw string read off a node to a typed
value. A parser signals "use the default" by raising ``ValueError``; the
field extractor turns that into the field's default.
"""

import re
from typing import Callable

_NON_DIGITS = re.compile(r"[^0-9]")


def parse_count(raw: str) -> int:
    """Keep only the digits of ``raw`` and convert them to an int.

    Handles the formats counts are rendered in:
    - "1,234 listeners" -> 1234
    - "12.345.678" -> 12345678
    - "no data" -> 0
    """
    digits = _NON_DIGITS.sub("", raw)
    if not digits:
        return 0
    return int(digits)


def parse_text(raw: str) -> str:
    """Collapse internal whitespace and strip the ends.

    Raises:
        ValueError: If nothing remains after cleaning.
    """
    cleaned = " ".join(raw.split())
    if not cleaned:
        raise ValueError("Text is empty after whitespace normalization")
    return cleaned


def strip_prefix(prefix: str) -> Callable[[str], str]:
    """Build a text parser that also removes a leading label such as "Posted By "."""

    def _parse(raw: str) -> str:
        text = parse_text(raw)
        if text.startswith(prefix):
            text = text[len(prefix):]
        return parse_text(text)

    return _parse


def parse_attribute(raw: str) -> str:
    """Attribute values (URLs) are kept verbatim apart from surrounding whitespace."""
    value = raw.strip()
    if not value:
        raise ValueError("Attribute value is empty")
    return value
