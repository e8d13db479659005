"""Extraction of taught vocabulary from persona replies.

The persona teaches words as `**한글** (romanization)`. Older replies may
carry an English meaning as well:

    **한글** (romanization) English meaning
    **한글** (romanization) - English meaning
    **한글** (romanization, English meaning)
"""

import re

from .config import (
    MAX_PARSE_INPUT_LENGTH, MAX_PARSED_ITEMS, MAX_KOREAN_LENGTH, MAX_ROMANIZATION_LENGTH
)
from .utils import contains_hangul, strip_html

ITEM_RE = re.compile(
    r'\*\*([^*]+)\*\*\s*\(([^)]+)\)(?:\s*[—–:\-]\s*([^\n*]+)|\s*([^\n*]*))?'
)
HAS_ITEM_RE = re.compile(r'\*\*[^*]+\*\*\s*\([^)]+\)')
TRAILING_PUNCT_RE = re.compile(r'[.!?,;:]+$')


def _split_parenthesized(content: str) -> tuple[str, str]:
    """Split '(romanization, english)' into its parts. Either may be empty."""
    comma = content.find(',')
    if comma > 0:
        before = content[:comma].strip()
        after = content[comma + 1:].strip()
        if after and not contains_hangul(after) and not contains_hangul(before):
            return before, after
        if not contains_hangul(before):
            return before, ''
        return content, ''
    if not contains_hangul(content):
        return content, ''
    return '', ''


def parse_vocabulary(content: str) -> list[dict]:
    """Extract {korean, romanization, english} items from a reply.

    English is optional. Items are unique by their Korean text and capped
    at MAX_PARSED_ITEMS; oversized input is truncated first.
    """
    if not content:
        return []

    results = []
    seen = set()
    for match in ITEM_RE.finditer(content[:MAX_PARSE_INPUT_LENGTH]):
        if len(results) >= MAX_PARSED_ITEMS:
            break

        korean = strip_html(match.group(1).strip())
        if not contains_hangul(korean) or korean in seen:
            continue

        romanization, english = _split_parenthesized(strip_html(match.group(2).strip()))

        if not english:
            trailing = match.group(3) or match.group(4) or ''
            cleaned = TRAILING_PUNCT_RE.sub('', strip_html(trailing.strip())).strip()
            if cleaned and not contains_hangul(cleaned):
                english = cleaned
        english = TRAILING_PUNCT_RE.sub('', english).strip()

        if (not korean or not romanization
                or len(korean) > MAX_KOREAN_LENGTH
                or len(romanization) > MAX_ROMANIZATION_LENGTH):
            continue

        seen.add(korean)
        results.append({'korean': korean, 'romanization': romanization, 'english': english})

    return results


def has_vocabulary(content: str) -> bool:
    """Cheap check for at least one teachable item."""
    if not content:
        return False
    return bool(HAS_ITEM_RE.search(content))
