"""Tests for the file-backed key-value store."""

import json
import os
import shutil
import tempfile
import unittest

from core.session import LearnerSession
from server.file_storage import FileStorage, load_config


class TestFileStorage(unittest.TestCase):

    def setUp(self):
        self.state_dir = tempfile.mkdtemp()

    def tearDown(self):
        shutil.rmtree(self.state_dir)

    def test_round_trip(self):
        storage = FileStorage('alice', self.state_dir)
        self.assertIsNone(storage.get_item('k'))
        storage.set_item('k', '값')
        self.assertEqual(FileStorage('alice', self.state_dir).get_item('k'), '값')
        storage.remove_item('k')
        self.assertIsNone(storage.get_item('k'))

    def test_state_file_names(self):
        self.assertTrue(FileStorage('default', self.state_dir).state_file.endswith('nunchi_state.json'))
        self.assertTrue(FileStorage('bob', self.state_dir).state_file.endswith('nunchi_state_bob.json'))

    def test_invalid_user_id(self):
        for user_id in ('', '../x', 'a b', 'x' * 65):
            with self.assertRaises(ValueError):
                FileStorage(user_id, self.state_dir)

    def test_corrupt_file_replaced_on_write(self):
        storage = FileStorage('alice', self.state_dir)
        with open(storage.state_file, 'w') as f:
            f.write('[1, 2]')
        with self.assertRaises(ValueError):
            storage.get_item('k')
        storage.set_item('k', 'v')
        self.assertEqual(storage.get_item('k'), 'v')

    def test_session_survives_corrupt_file(self):
        storage = FileStorage('alice', self.state_dir)
        with open(storage.state_file, 'w') as f:
            f.write('{broken')
        session = LearnerSession(storage)
        self.assertEqual(session.status()['total_xp'], 0)
        session.record_message('안녕하세요')
        self.assertEqual(LearnerSession(FileStorage('alice', self.state_dir)).progress.total_xp, 15)


class TestLoadConfig(unittest.TestCase):

    def test_missing(self):
        with self.assertRaises(FileNotFoundError):
            load_config('/nonexistent/nunchi/config.json')

    def test_load(self):
        with tempfile.NamedTemporaryFile('w', suffix='.json', delete=False) as f:
            json.dump({'gemini_api_key': 'abc'}, f)
        try:
            self.assertEqual(load_config(f.name), {'gemini_api_key': 'abc'})
        finally:
            os.remove(f.name)


if __name__ == '__main__':
    unittest.main()
