"""Domain models for nunchi application.

Records are persisted as JSON with camelCase keys; Python attributes use
snake_case. `to_dict` / `from_dict` convert between the two and assume
the data has already passed `core.validation`.
"""


class RankInfo:
    """A rung of the resident rank ladder."""

    def __init__(self, id: str, korean: str, english: str, description: str,
                 min_xp: int, min_vocab: int):
        self.id = id
        self.korean = korean
        self.english = english
        self.description = description
        self.min_xp = min_xp
        self.min_vocab = min_vocab

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'korean': self.korean,
            'english': self.english,
            'description': self.description,
            'minXP': self.min_xp,
            'minVocab': self.min_vocab
        }

    def __repr__(self) -> str:
        return f"RankInfo({self.id!r})"


class XPEvent:
    """A single XP award. Appended to the history, never removed by hand."""

    def __init__(self, action: str, amount: int, timestamp: str):
        self.action = action
        self.amount = amount
        self.timestamp = timestamp

    def to_dict(self) -> dict:
        return {'action': self.action, 'amount': self.amount, 'timestamp': self.timestamp}

    @classmethod
    def from_dict(cls, data: dict) -> 'XPEvent':
        return cls(data['action'], data['amount'], data['timestamp'])


class StreakData:
    """Consecutive-day practice counter."""

    def __init__(self, current_streak: int = 0, longest_streak: int = 0,
                 last_practice_date: str = ''):
        self.current_streak = current_streak
        self.longest_streak = longest_streak
        self.last_practice_date = last_practice_date

    def to_dict(self) -> dict:
        return {
            'currentStreak': self.current_streak,
            'longestStreak': self.longest_streak,
            'lastPracticeDate': self.last_practice_date
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'StreakData':
        return cls(data['currentStreak'], data['longestStreak'], data['lastPracticeDate'])

    def __repr__(self) -> str:
        return (f"StreakData(current={self.current_streak}, longest={self.longest_streak}, "
                f"last={self.last_practice_date!r})")


class SessionStats:
    """Running activity counters."""

    def __init__(self, total_messages: int = 0, total_flashcard_sessions: int = 0,
                 total_translations: int = 0, messages_without_translate: int = 0):
        self.total_messages = total_messages
        self.total_flashcard_sessions = total_flashcard_sessions
        self.total_translations = total_translations
        self.messages_without_translate = messages_without_translate

    def to_dict(self) -> dict:
        return {
            'totalMessages': self.total_messages,
            'totalFlashcardSessions': self.total_flashcard_sessions,
            'totalTranslations': self.total_translations,
            'messagesWithoutTranslate': self.messages_without_translate
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'SessionStats':
        return cls(
            data['totalMessages'],
            data['totalFlashcardSessions'],
            data['totalTranslations'],
            data['messagesWithoutTranslate']
        )


class GamificationData:
    """Aggregate root for a learner's progression."""

    def __init__(self, total_xp: int = 0, history: list[XPEvent] | None = None,
                 streak: StreakData | None = None, stats: SessionStats | None = None):
        self.total_xp = total_xp
        self.history = list(history) if history is not None else []
        self.streak = streak if streak is not None else StreakData()
        self.stats = stats if stats is not None else SessionStats()

    def to_dict(self) -> dict:
        return {
            'xp': {
                'totalXP': self.total_xp,
                'history': [e.to_dict() for e in self.history]
            },
            'streak': self.streak.to_dict(),
            'stats': self.stats.to_dict()
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'GamificationData':
        return cls(
            total_xp=data['xp']['totalXP'],
            history=[XPEvent.from_dict(e) for e in data['xp']['history']],
            streak=StreakData.from_dict(data['streak']),
            stats=SessionStats.from_dict(data['stats'])
        )


class VocabularyItem:
    """A saved word. Deduplicated on `korean`, deleted by `id`."""

    def __init__(self, id: str, korean: str, romanization: str, english: str, saved_at: str):
        self.id = id
        self.korean = korean
        self.romanization = romanization
        self.english = english
        self.saved_at = saved_at

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'korean': self.korean,
            'romanization': self.romanization,
            'english': self.english,
            'savedAt': self.saved_at
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'VocabularyItem':
        return cls(data['id'], data['korean'], data['romanization'], data['english'], data['savedAt'])


class SavedMessage:
    def __init__(self, role: str, text: str):
        self.role = role
        self.text = text

    def to_dict(self) -> dict:
        return {'role': self.role, 'text': self.text}

    @classmethod
    def from_dict(cls, data: dict) -> 'SavedMessage':
        return cls(data['role'], data['text'])


class SavedConversation:
    """A saved lesson transcript."""

    def __init__(self, id: str, saved_at: str, preview: str, messages: list[SavedMessage],
                 message_count: int | None = None):
        self.id = id
        self.saved_at = saved_at
        self.preview = preview
        self.messages = list(messages)
        self.message_count = len(self.messages) if message_count is None else message_count

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'savedAt': self.saved_at,
            'preview': self.preview,
            'messageCount': self.message_count,
            'messages': [m.to_dict() for m in self.messages]
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'SavedConversation':
        return cls(
            data['id'],
            data['savedAt'],
            data['preview'],
            [SavedMessage.from_dict(m) for m in data['messages']],
            data['messageCount']
        )
