"""Tests for the console client, with the API client mocked out."""

import unittest
from unittest.mock import MagicMock

from cli.__main__ import build_parser
from cli.console import ConsoleUI


class TestArguments(unittest.TestCase):

    def test_defaults(self):
        args = build_parser().parse_args([])
        self.assertEqual(args.server, 'http://localhost:8000')
        self.assertEqual(args.user, 'default')

    def test_help_lists_chat_commands(self):
        help_text = build_parser().format_help()
        for command in ('status', 'words', 'keep', 'translate', 'save', 'exit'):
            self.assertIn(command, help_text)


class TestConsoleUI(unittest.TestCase):

    def setUp(self):
        self.client = MagicMock()
        self.ui = ConsoleUI(self.client)

    def test_keep_saves_last_reply_words(self):
        self.ui.last_vocabulary = [{'korean': '물', 'romanization': 'mul', 'english': ''}]
        self.client.save_words.return_value = {'added': [{'korean': '물'}], 'count': 1}
        self.ui.keep_words()
        self.client.save_words.assert_called_once_with([{'korean': '물', 'romanization': 'mul', 'english': ''}])
        self.assertEqual(self.ui.last_vocabulary, [])

    def test_keep_without_words(self):
        self.ui.keep_words()
        self.client.save_words.assert_not_called()

    def test_save_lesson_sends_transcript(self):
        self.ui.messages = [{'role': 'user', 'content': '안녕'}, {'role': 'assistant', 'content': '네'}]
        self.client.save_lesson.return_value = {'saved': True, 'lesson': {'preview': '네'}, 'count': 1}
        self.ui.save_lesson()
        self.client.save_lesson.assert_called_once_with(
            [{'role': 'user', 'text': '안녕'}, {'role': 'assistant', 'text': '네'}]
        )


if __name__ == '__main__':
    unittest.main()
