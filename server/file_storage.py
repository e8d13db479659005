"""File-based storage implementation."""

import json
import logging
import os
import re

from core.interfaces import KeyValueStore

logger = logging.getLogger(__name__)

USER_ID_RE = re.compile(r'^[A-Za-z0-9_-]{1,64}$')
DEFAULT_CONFIG_FILE = '~/.config/nunchi/config.json'


def load_config(config_file: str = None) -> dict:
    """Load the JSON config file, e.g. {"gemini_api_key": "..."}."""
    config_file = os.path.expanduser(config_file or DEFAULT_CONFIG_FILE)
    if not os.path.exists(config_file):
        raise FileNotFoundError(
            f"Config file not found at {config_file}\n"
            f'Please create it with: {{"gemini_api_key": "YOUR_API_KEY_HERE"}}'
        )
    with open(config_file, 'r') as f:
        return json.load(f)


class FileStorage(KeyValueStore):
    """One JSON document per user mapping keys to serialized values."""

    def __init__(self, user_id: str = "default", state_dir: str = None):
        if not USER_ID_RE.match(user_id):
            raise ValueError(f"Invalid user id: {user_id!r}")
        self.user_id = user_id
        # Project root is one level up from server/
        project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
        self.state_dir = state_dir or project_root

    @property
    def state_file(self) -> str:
        if self.user_id == "default":
            return os.path.join(self.state_dir, 'nunchi_state.json')
        return os.path.join(self.state_dir, f'nunchi_state_{self.user_id}.json')

    def _load_items(self) -> dict:
        if not os.path.exists(self.state_file):
            return {}
        with open(self.state_file, 'r', encoding='utf-8') as f:
            items = json.load(f)
        if not isinstance(items, dict):
            raise ValueError(f"Corrupt state file {self.state_file}")
        return items

    def _save_items(self, items: dict) -> None:
        os.makedirs(self.state_dir, exist_ok=True)
        tmp_file = self.state_file + '.tmp'
        with open(tmp_file, 'w', encoding='utf-8') as f:
            json.dump(items, f, indent=2, ensure_ascii=False)
        os.replace(tmp_file, self.state_file)

    def get_item(self, key: str) -> str | None:
        value = self._load_items().get(key)
        return value if isinstance(value, str) else None

    def set_item(self, key: str, value: str) -> None:
        try:
            items = self._load_items()
        except ValueError as e:
            logger.warning(f"Replacing unreadable state file: {e}")
            items = {}
        items[key] = value
        self._save_items(items)

    def remove_item(self, key: str) -> None:
        items = self._load_items()
        if key in items:
            del items[key]
            self._save_items(items)

