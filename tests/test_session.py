"""Tests for the per-learner session."""

import unittest
from datetime import datetime, timezone

from core.interfaces import Clock, IdGenerator
from core.session import LearnerSession
from core.utils import MemoryStore


class FixedClock(Clock):
    def now(self) -> datetime:
        return datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


class SequentialIds(IdGenerator):
    def __init__(self):
        self.count = 0

    def new_id(self) -> str:
        self.count += 1
        return f"id-{self.count}"


class TestLearnerSession(unittest.TestCase):

    def setUp(self):
        self.store = MemoryStore()
        self.session = LearnerSession(self.store, FixedClock(), SequentialIds())

    def test_fresh_status(self):
        status = self.session.status()
        self.assertEqual(status['total_xp'], 0)
        self.assertEqual(status['rank']['id'], 'new_resident')
        self.assertEqual(status['rank']['minXP'], 0)
        self.assertEqual(status['vocab_count'], 0)
        self.assertEqual(status['lesson_count'], 0)
        self.assertEqual(status['stats']['total_messages'], 0)

    def test_save_words_awards_xp_for_new_words_only(self):
        words = [{'korean': '물', 'romanization': 'mul', 'english': 'water'},
                 {'korean': '밥', 'romanization': 'bap', 'english': 'rice'}]
        self.assertEqual(len(self.session.save_words(words)), 2)
        self.assertEqual(self.session.progress.total_xp, 6)
        self.assertEqual(self.session.save_words(words), [])
        self.assertEqual(self.session.progress.total_xp, 6)
        self.assertEqual(self.session.vocab_count, 2)

    def test_rank_needs_vocabulary(self):
        self.session.progress.data.total_xp = 150
        self.assertEqual(self.session.status()['rank']['id'], 'new_resident')
        words = [{'korean': chr(0xAC00 + i), 'romanization': 'r', 'english': ''} for i in range(10)]
        self.session.save_words(words)
        self.assertEqual(self.session.status()['rank']['id'], 'quiet_tenant')

    def test_state_shared_through_store(self):
        self.session.record_message('안녕하세요')
        self.session.lessons.save_conversation([{'role': 'user', 'content': '안녕하세요'}])
        other = LearnerSession(self.store, FixedClock(), SequentialIds())
        status = other.status()
        self.assertEqual(status['total_xp'], 15)
        self.assertEqual(status['current_streak'], 1)
        self.assertEqual(status['lesson_count'], 1)

    def save_studyable(self, count: int):
        self.session.save_words([
            {'korean': chr(0xAC00 + i), 'romanization': 'r', 'english': f'meaning {i}'} for i in range(count)
        ])

    def test_flashcard_session(self):
        self.save_studyable(3)
        xp_before = self.session.progress.total_xp
        events = self.session.record_flashcard_session(3, 0)
        self.assertEqual([e.action for e in events], ['flashcard_session', 'flashcard_perfect'])
        self.assertEqual(self.session.progress.total_xp, xp_before + 30)

    def test_flashcard_deck_too_small(self):
        self.save_studyable(3)
        for total in (0, 1):
            with self.assertRaises(ValueError):
                self.session.record_flashcard_session(total, 0)
        self.assertEqual(self.session.progress.stats.total_flashcard_sessions, 0)

    def test_flashcard_deck_larger_than_studyable_words(self):
        self.save_studyable(2)
        self.session.save_words([{'korean': '물', 'romanization': 'mul', 'english': ''}])
        with self.assertRaises(ValueError):
            self.session.record_flashcard_session(3, 0)
        self.assertEqual(len(self.session.record_flashcard_session(2, 1)), 1)

    def test_flashcard_again_exceeds_total(self):
        self.save_studyable(2)
        with self.assertRaises(ValueError):
            self.session.record_flashcard_session(2, 3)

    def test_status_unseen_words(self):
        self.session.save_words([{'korean': '물', 'romanization': 'mul', 'english': ''}])
        self.assertEqual(self.session.status()['unseen_words'], 1)
        self.session.vocabulary.mark_seen()
        self.assertEqual(self.session.status()['unseen_words'], 0)


if __name__ == '__main__':
    unittest.main()
