"""Unit tests for persisted-data validation."""

import unittest

from core.validation import (
    ValidationResult, is_valid_gamification_data, is_valid_vocabulary_item, parse_timestamp,
    validate_gamification_data, validate_lesson_history, validate_vocabulary
)


def word(**overrides) -> dict:
    item = {'id': 'w1', 'korean': '물', 'romanization': 'mul', 'english': 'water',
            'savedAt': '2024-03-01T12:00:00.000Z'}
    item.update(overrides)
    return item


def lesson(**overrides) -> dict:
    item = {'id': 'l1', 'savedAt': '2024-03-01T12:00:00.000Z', 'preview': '안녕',
            'messageCount': 1, 'messages': [{'role': 'assistant', 'text': '안녕'}]}
    item.update(overrides)
    return item


def event(**overrides) -> dict:
    item = {'action': 'word_saved', 'amount': 3, 'timestamp': '2024-03-01T12:00:00.000Z'}
    item.update(overrides)
    return item


def progression(total_xp=10, history=None, streak=None, stats=None) -> dict:
    return {
        'xp': {'totalXP': total_xp, 'history': history if history is not None else [event()]},
        'streak': streak or {'currentStreak': 2, 'longestStreak': 4, 'lastPracticeDate': '2024-03-01'},
        'stats': stats or {'totalMessages': 3, 'totalFlashcardSessions': 1,
                           'totalTranslations': 0, 'messagesWithoutTranslate': 3}
    }


class TestValidationResult(unittest.TestCase):

    def test_valid(self):
        result = ValidationResult.valid([])
        self.assertTrue(result)
        self.assertEqual(result.value, [])

    def test_invalid(self):
        result = ValidationResult.invalid('bad')
        self.assertFalse(result)
        self.assertIsNone(result.value)
        self.assertEqual(result.error, 'bad')


class TestVocabularyValidation(unittest.TestCase):

    def test_valid_list(self):
        result = validate_vocabulary([word(), word(id='w2', korean='밥')])
        self.assertTrue(result.ok)
        self.assertEqual([w.korean for w in result.value], ['물', '밥'])
        self.assertEqual(result.value[0].saved_at, '2024-03-01T12:00:00.000Z')

    def test_empty_list(self):
        self.assertEqual(validate_vocabulary([]).value, [])

    def test_extra_keys_ignored(self):
        result = validate_vocabulary([word(note='hi')])
        self.assertTrue(result.ok)
        self.assertFalse(hasattr(result.value[0], 'note'))

    def test_not_a_list(self):
        self.assertFalse(validate_vocabulary({'0': word()}).ok)
        self.assertFalse(validate_vocabulary(None).ok)

    def test_missing_field_rejects_all(self):
        bad = word()
        del bad['english']
        self.assertFalse(validate_vocabulary([word(), bad]).ok)

    def test_no_coercion(self):
        self.assertFalse(validate_vocabulary([word(id=1)]).ok)
        self.assertFalse(is_valid_vocabulary_item(word(korean=None)))

    def test_forbidden_keys(self):
        self.assertFalse(is_valid_vocabulary_item(word(__proto__={})))
        self.assertFalse(validate_vocabulary([word(constructor='x')]).ok)

    def test_single_item(self):
        self.assertTrue(is_valid_vocabulary_item(word()))
        self.assertFalse(is_valid_vocabulary_item('물'))


class TestLessonHistoryValidation(unittest.TestCase):

    def test_valid(self):
        result = validate_lesson_history([lesson()])
        self.assertTrue(result.ok)
        self.assertEqual(result.value[0].messages[0].text, '안녕')
        self.assertEqual(result.value[0].message_count, 1)

    def test_bad_role(self):
        bad = lesson(messages=[{'role': 'system', 'text': 'x'}])
        self.assertFalse(validate_lesson_history([lesson(), bad]).ok)

    def test_negative_count(self):
        self.assertFalse(validate_lesson_history([lesson(messageCount=-1)]).ok)

    def test_bool_count(self):
        self.assertFalse(validate_lesson_history([lesson(messageCount=True)]).ok)

    def test_forbidden_key_in_message(self):
        bad = lesson(messages=[{'role': 'user', 'text': 'x', 'prototype': {}}])
        self.assertFalse(validate_lesson_history([bad]).ok)


class TestParseTimestamp(unittest.TestCase):

    def test_utc_suffix(self):
        self.assertEqual(parse_timestamp('2024-03-01T12:00:00.000Z').utcoffset().total_seconds(), 0)

    def test_missing_offset_is_utc(self):
        self.assertEqual(parse_timestamp('2024-03-01T12:00:00'),
                         parse_timestamp('2024-03-01T12:00:00.000Z'))

    def test_garbage(self):
        self.assertIsNone(parse_timestamp('yesterday'))
        self.assertIsNone(parse_timestamp(None))


class TestGamificationValidation(unittest.TestCase):

    def test_valid(self):
        result = validate_gamification_data(progression())
        self.assertTrue(result.ok)
        data = result.value
        self.assertEqual(data.total_xp, 10)
        self.assertEqual(data.streak.current_streak, 2)
        self.assertEqual(data.stats.messages_without_translate, 3)
        self.assertEqual(data.history[0].action, 'word_saved')

    def test_shape_check_accepts_numbers(self):
        self.assertTrue(is_valid_gamification_data(progression(total_xp=10.5)))
        self.assertFalse(is_valid_gamification_data(progression(total_xp=-1)))
        self.assertFalse(is_valid_gamification_data(progression(total_xp='10')))
        self.assertFalse(is_valid_gamification_data({'xp': {'totalXP': 0, 'history': []}}))

    def test_strict_rejects_fractions(self):
        self.assertFalse(validate_gamification_data(progression(total_xp=10.5)).ok)

    def test_bad_date(self):
        streak = {'currentStreak': 1, 'longestStreak': 1, 'lastPracticeDate': '03/01/2024'}
        self.assertFalse(validate_gamification_data(progression(streak=streak)).ok)

    def test_empty_date_allowed(self):
        streak = {'currentStreak': 0, 'longestStreak': 0, 'lastPracticeDate': ''}
        self.assertTrue(validate_gamification_data(progression(streak=streak)).ok)

    def test_caps(self):
        streak = {'currentStreak': 9999, 'longestStreak': 9999, 'lastPracticeDate': '2024-03-01'}
        data = validate_gamification_data(progression(total_xp=10**9, streak=streak)).value
        self.assertEqual(data.total_xp, 999_999)
        self.assertEqual(data.streak.current_streak, 3650)
        self.assertEqual(data.streak.longest_streak, 3650)

    def test_invalid_events_dropped(self):
        history = [
            event(),
            event(action='hacking'),
            event(amount=101),
            event(amount=0),
            event(timestamp='yesterday'),
            'not an event',
        ]
        data = validate_gamification_data(progression(history=history)).value
        self.assertEqual(len(data.history), 1)

    def test_history_trimmed(self):
        data = validate_gamification_data(progression(history=[event()] * 1500)).value
        self.assertEqual(len(data.history), 1000)

    def test_forbidden_key(self):
        value = progression()
        value['stats']['__proto__'] = {'admin': True}
        self.assertFalse(validate_gamification_data(value).ok)

    def test_not_an_object(self):
        self.assertFalse(validate_gamification_data([]).ok)
        self.assertFalse(validate_gamification_data('{}').ok)


if __name__ == '__main__':
    unittest.main()
