from .models import (
    RankInfo, XPEvent, StreakData, SessionStats, GamificationData,
    VocabularyItem, SavedMessage, SavedConversation
)
from .interfaces import KeyValueStore, Clock, IdGenerator, ReplyGenerator
from .utils import (
    hangul_ratio, strip_html, strip_markdown, sanitize_text_input,
    SystemClock, UuidGenerator, MemoryStore
)
from .mood import (
    compute_korean_ratio, get_mood_level, get_mood_directive, generate_mood_system_addendum
)
from .gamification import (
    RANK_LADDER, compute_message_xp, update_streak, compute_rank, get_next_rank,
    compute_rank_progress, create_default_gamification_data, is_valid_gamification_data,
    ProgressTracker
)
from .validation import (
    ValidationResult, validate_vocabulary, validate_lesson_history, validate_gamification_data
)
from .store import LessonHistory, VocabularyBook
from .session import LearnerSession
from .vocabulary import parse_vocabulary, has_vocabulary
from .config import XP_VALUES, MAX_CONVERSATIONS, MAX_WORDS

__all__ = [
    'RankInfo', 'XPEvent', 'StreakData', 'SessionStats', 'GamificationData',
    'VocabularyItem', 'SavedMessage', 'SavedConversation',
    'KeyValueStore', 'Clock', 'IdGenerator', 'ReplyGenerator',
    'hangul_ratio', 'strip_html', 'strip_markdown', 'sanitize_text_input',
    'SystemClock', 'UuidGenerator', 'MemoryStore',
    'compute_korean_ratio', 'get_mood_level', 'get_mood_directive', 'generate_mood_system_addendum',
    'RANK_LADDER', 'compute_message_xp', 'update_streak', 'compute_rank', 'get_next_rank',
    'compute_rank_progress', 'create_default_gamification_data', 'is_valid_gamification_data',
    'ProgressTracker',
    'ValidationResult', 'validate_vocabulary', 'validate_lesson_history', 'validate_gamification_data',
    'LessonHistory', 'VocabularyBook', 'LearnerSession',
    'parse_vocabulary', 'has_vocabulary',
    'XP_VALUES', 'MAX_CONVERSATIONS', 'MAX_WORDS'
]
