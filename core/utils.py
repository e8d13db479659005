"""Utility functions for nunchi application."""

import random
import re
import time
import uuid
from datetime import datetime, timezone

from .config import MAX_CONTENT_LENGTH
from .interfaces import Clock, IdGenerator, KeyValueStore

HANGUL_SYLLABLE_RE = re.compile(r'[\uAC00-\uD7AF]')
HANGUL_ANY_RE = re.compile(r'[\uAC00-\uD7AF\u1100-\u11FF\u3130-\u318F]')
WHITESPACE_RE = re.compile(r'\s')
TAG_RE = re.compile(r'<[^>]*>')
# Control characters except \t \n \r
CONTROL_RE = re.compile(r'[\x00-\x08\x0B\x0C\x0E-\x1F]')
MARKDOWN_RES = (
    re.compile(r'\*\*(.+?)\*\*'),
    re.compile(r'__(.+?)__'),
    re.compile(r'\*(.+?)\*'),
    re.compile(r'_(.+?)_'),
)


def is_hangul(ch: str) -> bool:
    """True for a character in the Hangul syllables block."""
    return bool(HANGUL_SYLLABLE_RE.fullmatch(ch))


def contains_hangul(text: str) -> bool:
    """True if text has any Hangul syllable or jamo."""
    return bool(HANGUL_ANY_RE.search(text))


def strip_whitespace(text: str) -> str:
    return WHITESPACE_RE.sub('', text)


def count_hangul(text: str) -> int:
    return len(HANGUL_SYLLABLE_RE.findall(text))


def hangul_ratio(text: str) -> float:
    """Fraction of non-whitespace characters that are Hangul syllables."""
    compact = strip_whitespace(text)
    if not compact:
        return 0.0
    return count_hangul(compact) / len(compact)


def strip_html(text: str) -> str:
    """Remove tag-shaped substrings, keeping the text between them."""
    return TAG_RE.sub('', text)


def strip_markdown(text: str) -> str:
    """Remove bold/italic emphasis markers for plain-text display."""
    for pattern in MARKDOWN_RES:
        text = pattern.sub(r'\1', text)
    return text


def sanitize_text_input(value) -> str:
    """Clean free text from a client: tags, control chars, length."""
    if not isinstance(value, str):
        return ''
    text = strip_html(value)
    text = CONTROL_RE.sub('', text)
    return text.strip()[:MAX_CONTENT_LENGTH]


def message_text(message) -> str:
    """Text of a chat message given as a dict or an object."""
    if isinstance(message, dict):
        text = message.get('content')
        if text is None:
            text = message.get('text')
    else:
        text = getattr(message, 'content', None)
        if text is None:
            text = getattr(message, 'text', None)
    return text if isinstance(text, str) else ''


def message_role(message) -> str | None:
    if isinstance(message, dict):
        return message.get('role')
    return getattr(message, 'role', None)


class SystemClock(Clock):
    """Wall clock in the local timezone."""

    def now(self) -> datetime:
        return datetime.now().astimezone()


class UuidGenerator(IdGenerator):
    """Random UUIDs, with a time+random fallback."""

    def new_id(self) -> str:
        try:
            return str(uuid.uuid4())
        except Exception:
            # os.urandom unavailable
            return f"{int(time.time() * 1000)}-{random.random()}"


class MemoryStore(KeyValueStore):
    """Dict-backed store for tests and ephemeral sessions."""

    def __init__(self, items: dict | None = None):
        self.items = dict(items or {})

    def get_item(self, key: str) -> str | None:
        return self.items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self.items[key] = value

    def remove_item(self, key: str) -> None:
        self.items.pop(key, None)


def iso_timestamp(moment: datetime) -> str:
    """UTC ISO-8601 timestamp with millisecond precision, e.g. 2024-03-01T12:00:00.000Z."""
    return moment.astimezone(timezone.utc).isoformat(timespec='milliseconds').replace('+00:00', 'Z')
