"""Schema validation for persisted JSON before it is trusted.

Every validator takes the output of `json.loads` and returns a
`ValidationResult`. Collections are all-or-nothing: one bad element
invalidates the whole collection.
"""

from __future__ import annotations

import logging
import math
import re
from datetime import datetime, timezone
from typing import Annotated, Any, Literal, Union

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, model_validator

from .config import (
    MAX_XP, MAX_STREAK, MAX_XP_HISTORY, MAX_XP_PER_EVENT, XP_ACTIONS
)
from .models import GamificationData, SavedConversation, SessionStats, StreakData, VocabularyItem, XPEvent

logger = logging.getLogger(__name__)

# Keys that carry prototype pollution when the same JSON reaches a JavaScript client
FORBIDDEN_KEYS = frozenset({'__proto__', 'constructor', 'prototype'})

DATE_RE = re.compile(r'^\d{4}-\d{2}-\d{2}$')


class ValidationResult:
    """Either a trusted value or the reason it was rejected."""

    __slots__ = ('value', 'error')

    def __init__(self, value: Any = None, error: str | None = None):
        self.value = value
        self.error = error

    @classmethod
    def valid(cls, value: Any) -> 'ValidationResult':
        return cls(value=value)

    @classmethod
    def invalid(cls, error: str) -> 'ValidationResult':
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    def __bool__(self) -> bool:
        return self.ok

    def __repr__(self) -> str:
        if self.ok:
            return f"ValidationResult.valid({self.value!r})"
        return f"ValidationResult.invalid({self.error!r})"


def _non_negative(value: float) -> float:
    if math.isnan(value) or value < 0:
        raise ValueError('must be a non-negative number')
    return value


NonNegativeNumber = Annotated[Union[int, float], AfterValidator(_non_negative)]
NonNegativeInt = Annotated[int, Field(ge=0)]


class _Record(BaseModel):
    """Strict JSON object: no coercion, unknown keys ignored, no dangerous keys."""

    model_config = ConfigDict(strict=True, extra='ignore')

    @model_validator(mode='before')
    @classmethod
    def _reject_forbidden_keys(cls, data: Any) -> Any:
        if isinstance(data, dict):
            bad = FORBIDDEN_KEYS.intersection(data)
            if bad:
                raise ValueError(f"forbidden keys: {sorted(bad)}")
        return data


# Vocabulary / lesson history

class VocabularyItemSchema(_Record):
    id: str
    korean: str
    romanization: str
    english: str
    saved_at: str = Field(alias='savedAt')


class SavedMessageSchema(_Record):
    role: Literal['user', 'assistant']
    text: str


class SavedConversationSchema(_Record):
    id: str
    saved_at: str = Field(alias='savedAt')
    preview: str
    message_count: NonNegativeInt = Field(alias='messageCount')
    messages: list[SavedMessageSchema]


_vocabulary_adapter = TypeAdapter(list[VocabularyItemSchema])
_history_adapter = TypeAdapter(list[SavedConversationSchema])


def _first_error(exc: ValidationError) -> str:
    err = exc.errors()[0]
    loc = '.'.join(str(part) for part in err['loc'])
    return f"{loc}: {err['msg']}" if loc else err['msg']


def is_valid_vocabulary_item(item: Any) -> bool:
    try:
        VocabularyItemSchema.model_validate(item, strict=True)
    except ValidationError:
        return False
    return True


def validate_vocabulary(data: Any) -> ValidationResult:
    """Validate a stored vocabulary list. Value is a list of VocabularyItem."""
    try:
        items = _vocabulary_adapter.validate_python(data, strict=True)
    except ValidationError as e:
        return ValidationResult.invalid(_first_error(e))
    return ValidationResult.valid([
        VocabularyItem(i.id, i.korean, i.romanization, i.english, i.saved_at) for i in items
    ])


def validate_lesson_history(data: Any) -> ValidationResult:
    """Validate a stored lesson history list. Value is a list of SavedConversation."""
    try:
        conversations = _history_adapter.validate_python(data, strict=True)
    except ValidationError as e:
        return ValidationResult.invalid(_first_error(e))
    return ValidationResult.valid([
        SavedConversation.from_dict(c.model_dump(by_alias=True)) for c in conversations
    ])


# Gamification

class _XPShape(_Record):
    total_xp: NonNegativeNumber = Field(alias='totalXP')
    history: list[Any]


class _StreakShape(_Record):
    current_streak: NonNegativeNumber = Field(alias='currentStreak')
    longest_streak: NonNegativeNumber = Field(alias='longestStreak')
    last_practice_date: str = Field(alias='lastPracticeDate')


class _StatsShape(_Record):
    total_messages: NonNegativeNumber = Field(alias='totalMessages')
    total_flashcard_sessions: NonNegativeNumber = Field(alias='totalFlashcardSessions')
    total_translations: NonNegativeNumber = Field(alias='totalTranslations')
    messages_without_translate: NonNegativeNumber = Field(alias='messagesWithoutTranslate')


class GamificationShape(_Record):
    """Structural shape of persisted GamificationData."""

    xp: _XPShape
    streak: _StreakShape
    stats: _StatsShape


class _XPStrict(_Record):
    total_xp: NonNegativeInt = Field(alias='totalXP')
    history: list[Any]


class _StreakStrict(_Record):
    current_streak: NonNegativeInt = Field(alias='currentStreak')
    longest_streak: NonNegativeInt = Field(alias='longestStreak')
    last_practice_date: str = Field(alias='lastPracticeDate')


class _StatsStrict(_Record):
    total_messages: NonNegativeInt = Field(alias='totalMessages')
    total_flashcard_sessions: NonNegativeInt = Field(alias='totalFlashcardSessions')
    total_translations: NonNegativeInt = Field(alias='totalTranslations')
    messages_without_translate: NonNegativeInt = Field(alias='messagesWithoutTranslate')


class GamificationStrict(_Record):
    """Load-time shape: integer counters only."""

    xp: _XPStrict
    streak: _StreakStrict
    stats: _StatsStrict


class XPEventSchema(_Record):
    action: Literal[XP_ACTIONS]
    amount: Annotated[int, Field(gt=0, le=MAX_XP_PER_EVENT)]
    timestamp: str


def parse_timestamp(value: str) -> datetime | None:
    """Parse an ISO-8601 timestamp, or None if it is not one.

    Timestamps without an offset are taken as UTC.
    """
    try:
        moment = datetime.fromisoformat(value.replace('Z', '+00:00'))
    except (AttributeError, ValueError):
        return None
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment


def is_valid_gamification_data(data: Any) -> bool:
    """Quick structural check of persisted progression data."""
    try:
        GamificationShape.model_validate(data, strict=True)
    except ValidationError:
        return False
    return True


def _valid_events(entries: list) -> list[XPEvent]:
    events = []
    for entry in entries[-MAX_XP_HISTORY:]:
        try:
            event = XPEventSchema.model_validate(entry, strict=True)
        except ValidationError:
            continue
        if parse_timestamp(event.timestamp) is None:
            continue
        events.append(XPEvent(event.action, event.amount, event.timestamp))
    return events


def validate_gamification_data(data: Any) -> ValidationResult:
    """Validate and sanitize persisted progression data.

    Counters must be integers and the practice date empty or YYYY-MM-DD.
    XP and streaks are capped, the event history is trimmed and invalid
    events are dropped. Value is a fresh GamificationData.
    """
    try:
        shape = GamificationStrict.model_validate(data, strict=True)
    except ValidationError as e:
        return ValidationResult.invalid(_first_error(e))

    last_date = shape.streak.last_practice_date
    if last_date and not DATE_RE.match(last_date):
        return ValidationResult.invalid(f"streak.lastPracticeDate: bad date {last_date!r}")

    history = _valid_events(shape.xp.history)
    dropped = min(len(shape.xp.history), MAX_XP_HISTORY) - len(history)
    if dropped:
        logger.warning(f"Dropped {dropped} invalid XP events from stored history")

    return ValidationResult.valid(GamificationData(
        total_xp=min(shape.xp.total_xp, MAX_XP),
        history=history,
        streak=StreakData(
            min(shape.streak.current_streak, MAX_STREAK),
            min(shape.streak.longest_streak, MAX_STREAK),
            last_date
        ),
        stats=SessionStats(
            shape.stats.total_messages,
            shape.stats.total_flashcard_sessions,
            shape.stats.total_translations,
            shape.stats.messages_without_translate
        )
    ))
