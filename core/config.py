"""Configuration constants for nunchi application."""

from types import MappingProxyType

# XP awarded per action
XP_VALUES = MappingProxyType({
    'message_korean': 5,
    'message_full_korean': 15,
    'flashcard_session': 20,
    'flashcard_perfect': 10,
    'word_saved': 3,
    'no_translate': 8,
})
XP_ACTIONS = tuple(XP_VALUES)

# Message XP bands (Hangul ratio, inclusive lower edge)
FULL_KOREAN_RATIO = 0.8       # message_full_korean
KOREAN_RATIO = 0.1            # message_korean; below this no XP

NO_TRANSLATE_MILESTONE = 5    # every Nth message without translating earns no_translate
MIN_FLASHCARD_DECK = 2        # studyable words (with an English meaning) needed for a session

# Mood bands (Hangul ratio, inclusive lower edge)
MOOD_NEUTRAL_RATIO = 0.2
MOOD_WARM_RATIO = 0.5
MOOD_IMPRESSED_RATIO = 0.8

# Persistence keys
GAMIFICATION_KEY = 'nunchi-gamification'
LESSON_HISTORY_KEY = 'nunchi-lesson-history'
VOCABULARY_KEY = 'nunchi-vocabulary'

# Collection capacities and serialized byte budgets
MAX_CONVERSATIONS = 20
MAX_HISTORY_BYTES = 2_000_000
MAX_WORDS = 5000
MAX_VOCABULARY_BYTES = 1_000_000
MAX_GAMIFICATION_BYTES = 500_000
PREVIEW_LENGTH = 60

# Tamper limits for progression data
MAX_XP = 999_999
MAX_STREAK = 3650
MAX_XP_HISTORY = 1000
MAX_XP_PER_EVENT = 100
MAX_XP_EVENTS_PER_MINUTE = 20

# Chat input limits
MAX_MESSAGES = 50
MAX_CONTENT_LENGTH = 2000
RATE_LIMIT_WINDOW_SECONDS = 60
RATE_LIMIT_MAX_REQUESTS = 10

# Vocabulary extraction limits
MAX_PARSE_INPUT_LENGTH = 10_000
MAX_PARSED_ITEMS = 50
MAX_KOREAN_LENGTH = 100
MAX_ROMANIZATION_LENGTH = 200
