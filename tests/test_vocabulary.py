"""Unit tests for vocabulary extraction from persona replies."""

import unittest

from core.vocabulary import has_vocabulary, parse_vocabulary


class TestParseVocabulary(unittest.TestCase):

    def test_romanization_only(self):
        self.assertEqual(
            parse_vocabulary('오늘은 **집** (jip)'),
            [{'korean': '집', 'romanization': 'jip', 'english': ''}]
        )

    def test_trailing_english(self):
        self.assertEqual(
            parse_vocabulary('**안녕하세요** (annyeonghaseyo) Hello.'),
            [{'korean': '안녕하세요', 'romanization': 'annyeonghaseyo', 'english': 'Hello'}]
        )

    def test_dash_separated_english(self):
        result = parse_vocabulary('**감사합니다** (gamsahamnida) - thank you')
        self.assertEqual(result[0]['english'], 'thank you')

    def test_english_inside_parentheses(self):
        result = parse_vocabulary('**물** (mul, water)')
        self.assertEqual(result, [{'korean': '물', 'romanization': 'mul', 'english': 'water'}])

    def test_korean_after_item_is_not_english(self):
        result = parse_vocabulary('**물** (mul) 드세요')
        self.assertEqual(result[0]['english'], '')

    def test_multiple_items(self):
        reply = '**물** (mul) 하고 **밥** (bap) 있어요.'
        self.assertEqual([w['korean'] for w in parse_vocabulary(reply)], ['물', '밥'])

    def test_duplicates_once(self):
        reply = '**물** (mul) ... **물** (mul)'
        self.assertEqual(len(parse_vocabulary(reply)), 1)

    def test_non_korean_bold_ignored(self):
        self.assertEqual(parse_vocabulary('**Note** (important)'), [])

    def test_markup_stripped(self):
        result = parse_vocabulary('**<b>물</b>** (<i>mul</i>)')
        self.assertEqual(result[0]['korean'], '물')
        self.assertEqual(result[0]['romanization'], 'mul')

    def test_missing_romanization(self):
        self.assertEqual(parse_vocabulary('**물** (물)'), [])

    def test_item_cap(self):
        reply = ' '.join(f'**{chr(0xAC00 + i)}** (r{i})' for i in range(60))
        self.assertEqual(len(parse_vocabulary(reply)), 50)

    def test_oversized_korean_skipped(self):
        self.assertEqual(parse_vocabulary(f"**{'가' * 101}** (ga)"), [])

    def test_empty(self):
        self.assertEqual(parse_vocabulary(''), [])
        self.assertEqual(parse_vocabulary(None), [])
        self.assertEqual(parse_vocabulary('그냥 대화'), [])


class TestHasVocabulary(unittest.TestCase):

    def test_detects_item(self):
        self.assertTrue(has_vocabulary('**물** (mul)'))

    def test_plain_text(self):
        self.assertFalse(has_vocabulary('물 주세요'))
        self.assertFalse(has_vocabulary(''))


if __name__ == '__main__':
    unittest.main()
