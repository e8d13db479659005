"""REST API client for nunchi server."""

import requests


class NunchiAPIClient:
    """Client for communicating with the nunchi REST API."""

    def __init__(self, base_url: str = "http://localhost:8000", user_id: str = "default"):
        self.base_url = base_url.rstrip('/')
        self.user_id = user_id
        self.session = requests.Session()

    def _get(self, endpoint: str, params: dict = None) -> dict:
        """Make a GET request."""
        if params is None:
            params = {}
        params['user_id'] = self.user_id
        response = self.session.get(f"{self.base_url}{endpoint}", params=params)
        response.raise_for_status()
        return response.json()

    def _post(self, endpoint: str, data: dict) -> dict:
        """Make a POST request."""
        data['user_id'] = self.user_id
        response = self.session.post(f"{self.base_url}{endpoint}", json=data)
        response.raise_for_status()
        return response.json()

    def _delete(self, endpoint: str) -> dict:
        response = self.session.delete(f"{self.base_url}{endpoint}", params={'user_id': self.user_id})
        response.raise_for_status()
        return response.json()

    def health_check(self) -> dict:
        """Check if the server is running."""
        response = self.session.get(f"{self.base_url}/")
        response.raise_for_status()
        return response.json()

    def get_status(self) -> dict:
        """Get XP, streak and rank."""
        return self._get("/api/status")

    def chat(self, messages: list[dict]) -> dict:
        """Send the conversation so far and get the persona's reply."""
        return self._post("/api/chat", {'messages': messages})

    def get_mood(self, messages: list[dict]) -> dict:
        response = self.session.post(f"{self.base_url}/api/mood", json={'messages': messages})
        response.raise_for_status()
        return response.json()

    def record_translation(self) -> dict:
        return self._post("/api/translation", {})

    def record_flashcards(self, total: int, again: int) -> dict:
        return self._post("/api/flashcards", {'total': total, 'again': again})

    def list_lessons(self) -> dict:
        return self._get("/api/lessons")

    def get_lesson(self, lesson_id: str) -> dict:
        return self._get(f"/api/lessons/{lesson_id}")

    def save_lesson(self, messages: list[dict]) -> dict:
        """Save a transcript; messages use role/text keys."""
        return self._post("/api/lessons", {'messages': messages})

    def delete_lesson(self, lesson_id: str) -> dict:
        return self._delete(f"/api/lessons/{lesson_id}")

    def list_vocabulary(self, mark_seen: bool = False) -> dict:
        return self._get("/api/vocabulary", {'mark_seen': str(mark_seen).lower()})

    def save_words(self, words: list[dict]) -> dict:
        return self._post("/api/vocabulary", {'words': words})

    def delete_word(self, word_id: str) -> dict:
        return self._delete(f"/api/vocabulary/{word_id}")
