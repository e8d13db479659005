"""Per-learner session tying the engines to one key-value store."""

import logging

from .config import MIN_FLASHCARD_DECK
from .gamification import ProgressTracker
from .interfaces import Clock, IdGenerator, KeyValueStore
from .models import VocabularyItem, XPEvent
from .store import LessonHistory, VocabularyBook
from .utils import SystemClock, UuidGenerator

logger = logging.getLogger(__name__)


class LearnerSession:
    """Explicit state handle for one learner.

    Built once per learner and passed to whatever needs it; the three
    persisted records are loaded on construction.
    """

    def __init__(self, store: KeyValueStore, clock: Clock = None, id_generator: IdGenerator = None):
        self.store = store
        self.clock = clock or SystemClock()
        self.id_generator = id_generator or UuidGenerator()
        self.progress = ProgressTracker(store, self.clock, self.id_generator)
        self.lessons = LessonHistory(store, self.clock, self.id_generator)
        self.vocabulary = VocabularyBook(store, self.clock, self.id_generator)

    @property
    def vocab_count(self) -> int:
        return len(self.vocabulary)

    def record_message(self, content: str) -> list[XPEvent]:
        return self.progress.record_message(content)

    def record_translation(self) -> None:
        self.progress.record_translation()

    def record_flashcard_session(self, total: int, again: int) -> list[XPEvent]:
        """Count a finished flashcard session over `total` saved words.

        Raises:
            ValueError: the deck size is not one this learner could have studied
        """
        studyable = self.vocabulary.studyable_count
        if not MIN_FLASHCARD_DECK <= total <= studyable:
            raise ValueError(f"Deck of {total} card(s) not possible with {studyable} studyable word(s), "
                             f"need at least {MIN_FLASHCARD_DECK}")
        if not 0 <= again <= total:
            raise ValueError(f"again ({again}) must be between 0 and total ({total})")
        return self.progress.record_flashcard_session(total, again)

    def save_words(self, words) -> list[VocabularyItem]:
        """Save words to the vocabulary and award XP for the ones that were new."""
        added = self.vocabulary.add_words(words)
        if added:
            self.progress.record_words_saved(len(added))
            logger.info(f"Saved {len(added)} new word(s), {self.vocab_count} total")
        return added

    def status(self) -> dict:
        vocab_count = self.vocab_count
        stats = self.progress.stats
        return {
            **self.progress.snapshot(vocab_count),
            'stats': {
                'total_messages': stats.total_messages,
                'total_flashcard_sessions': stats.total_flashcard_sessions,
                'total_translations': stats.total_translations,
                'messages_without_translate': stats.messages_without_translate
            },
            'vocab_count': vocab_count,
            'unseen_words': self.vocabulary.unseen_count,
            'lesson_count': len(self.lessons)
        }
