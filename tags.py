import re
from typing import NamedTuple

from models import Priority

PRIORITY_MARKER = re.compile(r"\s*!([123]|high|med(?:ium)?|low)\b", re.IGNORECASE)
CATEGORY_MARKER = re.compile(r"\s*#(\w+)\b")
_WHITESPACE_RUN = re.compile(r"\s{2,}")


class ParsedTags(NamedTuple):
    text: str
    category: str
    priority: Priority


def _priority_from(token: str) -> Priority:
    token = token.lower()
    if token in ("1", "high"):
        return Priority.HIGH
    if token == "2" or token.startswith("med"):
        return Priority.MEDIUM
    return Priority.LOW


def parse_tags(raw: str) -> ParsedTags:
    """
    Pull the first `!priority` and the first `#category` marker out of raw
    task text.

    Both markers are searched on the untouched input, then their spans are
    cut out. Leftover whitespace is trimmed and runs of two or more
    whitespace characters collapse to one space.
    """
    priority = Priority.LOW
    category = ""
    spans = []

    match = PRIORITY_MARKER.search(raw)
    if match:
        priority = _priority_from(match.group(1))
        spans.append(match.span())

    match = CATEGORY_MARKER.search(raw)
    if match:
        category = match.group(1).lower()
        spans.append(match.span())

    text = raw
    # Cut from the right so earlier offsets stay valid.
    for start, end in sorted(spans, reverse=True):
        text = text[:start] + text[end:]

    text = _WHITESPACE_RUN.sub(" ", text.strip())
    return ParsedTags(text, category, priority)
