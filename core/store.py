"""Bounded, validated collections persisted in a key-value store."""

import json
import logging

from .config import (
    LESSON_HISTORY_KEY, MAX_CONVERSATIONS, MAX_HISTORY_BYTES, PREVIEW_LENGTH,
    VOCABULARY_KEY, MAX_WORDS, MAX_VOCABULARY_BYTES
)
from .interfaces import Clock, IdGenerator, KeyValueStore
from .models import SavedConversation, SavedMessage, VocabularyItem
from .utils import (
    SystemClock, UuidGenerator, iso_timestamp, message_role, message_text,
    strip_html, strip_markdown
)
from .validation import ValidationResult, validate_lesson_history, validate_vocabulary

logger = logging.getLogger(__name__)


class PersistentState:
    """JSON state stored under one key with a serialized size budget.

    Loading never raises: a missing, unreadable, unparseable or invalid
    value loads as nothing. Persisting never raises either: oversized
    payloads and store failures skip the write and keep memory as is.
    """

    key: str = None
    max_bytes: int = None

    def __init__(self, store: KeyValueStore, clock: Clock = None, id_generator: IdGenerator = None):
        self.store = store
        self.clock = clock or SystemClock()
        self.id_generator = id_generator or UuidGenerator()

    def validate(self, data) -> ValidationResult:
        raise NotImplementedError

    def to_json(self):
        raise NotImplementedError

    def now_iso(self) -> str:
        return iso_timestamp(self.clock.now())

    def load(self):
        """Return the validated stored value, or None."""
        try:
            raw = self.store.get_item(self.key)
        except Exception as e:
            logger.warning(f"Could not read {self.key}: {e}")
            return None
        if not raw:
            return None
        try:
            data = json.loads(raw)
        except (TypeError, ValueError, RecursionError) as e:
            logger.warning(f"Discarding unparseable {self.key}: {e}")
            return None
        result = self.validate(data)
        if not result.ok:
            logger.warning(f"Discarding invalid {self.key}: {result.error}")
            return None
        return result.value

    def persist(self) -> bool:
        """Write the current state back. Returns True if it was committed."""
        serialized = json.dumps(self.to_json(), ensure_ascii=False)
        size = len(serialized.encode('utf-8'))
        if size > self.max_bytes:
            logger.warning(f"Not persisting {self.key}: {size} bytes exceeds {self.max_bytes}")
            return False
        try:
            self.store.set_item(self.key, serialized)
        except Exception as e:
            logger.warning(f"Could not write {self.key}: {e}")
            return False
        return True


def make_preview(messages: list[SavedMessage]) -> str:
    """Plain-text excerpt of the first assistant message, else the first message."""
    source = next((m for m in messages if m.role == 'assistant'), messages[0])
    raw = source.text[:PREVIEW_LENGTH + 20].replace('\n', ' ')
    return strip_markdown(raw)[:PREVIEW_LENGTH]


class LessonHistory(PersistentState):
    """Saved lesson transcripts, newest first, evicted oldest first."""

    key = LESSON_HISTORY_KEY
    max_bytes = MAX_HISTORY_BYTES
    capacity = MAX_CONVERSATIONS

    def __init__(self, store: KeyValueStore, clock: Clock = None, id_generator: IdGenerator = None):
        super().__init__(store, clock, id_generator)
        self.conversations: list[SavedConversation] = self.load() or []

    def validate(self, data) -> ValidationResult:
        return validate_lesson_history(data)

    def to_json(self) -> list[dict]:
        return [c.to_dict() for c in self.conversations]

    def __len__(self) -> int:
        return len(self.conversations)

    def get(self, conversation_id: str) -> SavedConversation | None:
        for conversation in self.conversations:
            if conversation.id == conversation_id:
                return conversation
        return None

    def save_conversation(self, messages) -> SavedConversation | None:
        """Save a transcript of user/assistant turns.

        Returns the new record, or None when nothing conversational was given.
        """
        saved = [
            SavedMessage(message_role(m), strip_html(message_text(m)))
            for m in messages
            if message_role(m) in ('user', 'assistant')
        ]
        if not saved:
            logger.debug("Ignoring save of empty conversation")
            return None

        conversation = SavedConversation(
            id=self.id_generator.new_id(),
            saved_at=self.now_iso(),
            preview=make_preview(saved),
            messages=saved
        )
        self.conversations.insert(0, conversation)
        evicted = self.conversations[self.capacity:]
        if evicted:
            del self.conversations[self.capacity:]
            logger.info(f"Evicted {len(evicted)} oldest lesson(s) from history")
        self.persist()
        return conversation

    def delete_conversation(self, conversation_id: str) -> bool:
        """Delete by id. Returns False (and changes nothing) if it was not there."""
        remaining = [c for c in self.conversations if c.id != conversation_id]
        if len(remaining) == len(self.conversations):
            return False
        self.conversations = remaining
        self.persist()
        return True


class VocabularyBook(PersistentState):
    """Saved words, unique by their Korean text, in save order."""

    key = VOCABULARY_KEY
    max_bytes = MAX_VOCABULARY_BYTES
    capacity = MAX_WORDS

    def __init__(self, store: KeyValueStore, clock: Clock = None, id_generator: IdGenerator = None):
        super().__init__(store, clock, id_generator)
        self.words: list[VocabularyItem] = self.load() or []
        self.unseen_count = 0

    def validate(self, data) -> ValidationResult:
        return validate_vocabulary(data)

    def to_json(self) -> list[dict]:
        return [w.to_dict() for w in self.words]

    def __len__(self) -> int:
        return len(self.words)

    def is_word_saved(self, korean: str) -> bool:
        return any(w.korean == korean for w in self.words)

    @property
    def studyable_count(self) -> int:
        """Words with an English meaning, the ones a flashcard deck can use."""
        return sum(1 for w in self.words if w.english)

    def add_words(self, words) -> list[VocabularyItem]:
        """Save new words; duplicates and anything past capacity are skipped.

        Args:
            words: mappings with korean, romanization and english keys

        Returns the items that were actually added, in input order.
        """
        words = list(words)
        headroom = self.capacity - len(self.words)
        if headroom <= 0:
            logger.info(f"Vocabulary full ({self.capacity} words), ignoring {len(words)} new word(s)")
            return []

        seen = {w.korean for w in self.words}
        added = []
        for word in words:
            if len(added) >= headroom:
                break
            korean = strip_html(_field(word, 'korean'))
            if not korean or korean in seen:
                continue
            seen.add(korean)
            added.append(VocabularyItem(
                id=self.id_generator.new_id(),
                korean=korean,
                romanization=strip_html(_field(word, 'romanization')),
                english=strip_html(_field(word, 'english')),
                saved_at=self.now_iso()
            ))

        if not added:
            return []
        self.words.extend(added)
        self.unseen_count += len(added)
        self.persist()
        return added

    def remove_word(self, word_id: str) -> bool:
        """Delete by id. Returns False (and changes nothing) if it was not there."""
        remaining = [w for w in self.words if w.id != word_id]
        if len(remaining) == len(self.words):
            return False
        self.words = remaining
        self.persist()
        return True

    def mark_seen(self) -> None:
        self.unseen_count = 0


def _field(word, name: str) -> str:
    value = word.get(name) if isinstance(word, dict) else getattr(word, name, None)
    return value if isinstance(value, str) else ''
