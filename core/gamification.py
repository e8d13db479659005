"""Gamification: XP, streaks and resident rank.

The module-level functions are pure. `ProgressTracker` owns one learner's
GamificationData and persists it after every change.
"""

import logging
from datetime import date, datetime, timedelta

from .config import (
    XP_VALUES, FULL_KOREAN_RATIO, KOREAN_RATIO, NO_TRANSLATE_MILESTONE,
    GAMIFICATION_KEY, MAX_GAMIFICATION_BYTES,
    MAX_XP, MAX_XP_HISTORY, MAX_XP_PER_EVENT, MAX_XP_EVENTS_PER_MINUTE
)
from .interfaces import Clock, IdGenerator, KeyValueStore
from .models import GamificationData, RankInfo, SessionStats, StreakData, XPEvent
from .store import PersistentState
from .utils import SystemClock, hangul_ratio, iso_timestamp
from .validation import (
    DATE_RE, ValidationResult, is_valid_gamification_data, parse_timestamp, validate_gamification_data
)

logger = logging.getLogger(__name__)

RANK_LADDER = (
    RankInfo('new_resident', '새 입주자', 'New Resident',
             'You just moved in. The walls are thin.', 0, 0),
    RankInfo('quiet_tenant', '조용한 세입자', 'Quiet Tenant',
             'Moon-jo has noticed.', 100, 10),
    RankInfo('regular', '단골', 'Regular',
             'You know which stairs creak.', 500, 30),
    RankInfo('trusted_neighbor', '믿을 만한 이웃', 'Trusted Neighbor',
             'Moon-jo shares secrets with you now.', 1500, 75),
    RankInfo('floor_senior', '층 선배', 'Floor Senior',
             'You belong here. Moon-jo smiles.', 5000, 150),
)


# XP

def compute_message_xp(korean_ratio: float) -> tuple[str, int] | None:
    """XP earned by a message with the given Hangul ratio.

    Returns (action, amount), or None when the message used too little
    Korean to count.
    """
    if korean_ratio >= FULL_KOREAN_RATIO:
        return ('message_full_korean', XP_VALUES['message_full_korean'])
    if korean_ratio >= KOREAN_RATIO:
        return ('message_korean', XP_VALUES['message_korean'])
    return None


def is_reasonable_xp_rate(history: list[XPEvent], now: datetime) -> bool:
    """False if more than MAX_XP_EVENTS_PER_MINUTE events fall in the last minute."""
    cutoff = now - timedelta(seconds=60)
    recent = 0
    for event in reversed(history):
        moment = parse_timestamp(event.timestamp)
        if moment is None or moment < cutoff:
            break
        recent += 1
        if recent > MAX_XP_EVENTS_PER_MINUTE:
            return False
    return True


# Streak

def local_date_string(moment: datetime = None) -> str:
    """YYYY-MM-DD in the moment's own timezone (local time by default)."""
    moment = moment or datetime.now().astimezone()
    return moment.strftime('%Y-%m-%d')


def _parse_date(value: str) -> date:
    if not isinstance(value, str) or not DATE_RE.match(value):
        raise ValueError(f"Invalid date {value!r}, expected YYYY-MM-DD")
    return date.fromisoformat(value)


def previous_day(date_string: str) -> str:
    """The calendar day before date_string."""
    return (_parse_date(date_string) - timedelta(days=1)).isoformat()


def update_streak(streak: StreakData, today: str = None, clock: Clock = None) -> StreakData:
    """Apply a practice on `today` to the streak.

    Same day returns the very same object. The day after the last practice
    extends the streak; anything else (a gap, no previous practice, or a
    `today` earlier than the last practice) restarts it at 1.

    Raises:
        ValueError: today is not a YYYY-MM-DD date
    """
    if today is None:
        today = local_date_string((clock or SystemClock()).now())
    _parse_date(today)

    if streak.last_practice_date == today:
        return streak

    if streak.last_practice_date == previous_day(today):
        current = streak.current_streak + 1
        return StreakData(current, max(streak.longest_streak, current), today)

    return StreakData(1, max(streak.longest_streak, 1), today)


# Rank

def _rank_index(total_xp: int, vocab_count: int) -> int:
    for i in range(len(RANK_LADDER) - 1, -1, -1):
        rank = RANK_LADDER[i]
        if total_xp >= rank.min_xp and vocab_count >= rank.min_vocab:
            return i
    return 0


def compute_rank(total_xp: int, vocab_count: int) -> RankInfo:
    """Highest rank whose XP and vocabulary thresholds are both met."""
    return RANK_LADDER[_rank_index(total_xp, vocab_count)]


def get_next_rank(total_xp: int, vocab_count: int) -> RankInfo | None:
    idx = _rank_index(total_xp, vocab_count)
    if idx < len(RANK_LADDER) - 1:
        return RANK_LADDER[idx + 1]
    return None


def _fraction(value: float, low: float, high: float) -> float:
    span = high - low
    if span <= 0:
        return 1.0
    return min(max((value - low) / span, 0.0), 1.0)


def compute_rank_progress(total_xp: int, vocab_count: int) -> float:
    """Progress (0-1) toward the next rank, limited by the lagging resource."""
    current = compute_rank(total_xp, vocab_count)
    upcoming = get_next_rank(total_xp, vocab_count)
    if upcoming is None:
        return 1.0
    xp_progress = _fraction(total_xp, current.min_xp, upcoming.min_xp)
    vocab_progress = _fraction(vocab_count, current.min_vocab, upcoming.min_vocab)
    return min(xp_progress, vocab_progress)


def create_default_gamification_data() -> GamificationData:
    return GamificationData(0, [], StreakData(0, 0, ''), SessionStats())


class ProgressTracker(PersistentState):
    """One learner's XP, streak and activity counters."""

    key = GAMIFICATION_KEY
    max_bytes = MAX_GAMIFICATION_BYTES

    def __init__(self, store: KeyValueStore, clock: Clock = None, id_generator: IdGenerator = None):
        super().__init__(store, clock, id_generator)
        self.data: GamificationData = self.load() or create_default_gamification_data()

    def validate(self, data) -> ValidationResult:
        return validate_gamification_data(data)

    def to_json(self) -> dict:
        return self.data.to_dict()

    @property
    def total_xp(self) -> int:
        return self.data.total_xp

    @property
    def streak(self) -> StreakData:
        return self.data.streak

    @property
    def stats(self) -> SessionStats:
        return self.data.stats

    def _award(self, action: str, amount: int) -> XPEvent | None:
        now = self.clock.now()
        event = XPEvent(action, amount, iso_timestamp(now))
        history = (self.data.history + [event])[-MAX_XP_HISTORY:]
        if not is_reasonable_xp_rate(history, now):
            logger.warning(f"XP rate limit hit, not awarding {amount} XP for {action}")
            return None
        self.data.history = history
        self.data.total_xp = min(self.data.total_xp + amount, MAX_XP)
        self.data.streak = update_streak(self.data.streak, local_date_string(now))
        return event

    def record_message(self, content: str) -> list[XPEvent]:
        """Count a student message and award XP for its Korean usage."""
        stats = self.data.stats
        stats.total_messages += 1
        stats.messages_without_translate += 1

        events = []
        gain = compute_message_xp(hangul_ratio(content))
        if gain:
            events.append(self._award(*gain))
        if stats.messages_without_translate % NO_TRANSLATE_MILESTONE == 0:
            events.append(self._award('no_translate', XP_VALUES['no_translate']))

        self.persist()
        return [e for e in events if e is not None]

    def record_translation(self) -> None:
        self.data.stats.total_translations += 1
        self.data.stats.messages_without_translate = 0
        self.persist()

    def record_flashcard_session(self, total: int, again: int) -> list[XPEvent]:
        """Count a finished flashcard session; a session with no misses earns a bonus."""
        self.data.stats.total_flashcard_sessions += 1
        events = [self._award('flashcard_session', XP_VALUES['flashcard_session'])]
        if again == 0 and total > 0:
            events.append(self._award('flashcard_perfect', XP_VALUES['flashcard_perfect']))
        self.persist()
        return [e for e in events if e is not None]

    def record_words_saved(self, count: int) -> XPEvent | None:
        if count <= 0:
            return None
        event = self._award('word_saved', min(XP_VALUES['word_saved'] * count, MAX_XP_PER_EVENT))
        self.persist()
        return event

    def rank(self, vocab_count: int) -> RankInfo:
        return compute_rank(self.data.total_xp, vocab_count)

    def next_rank(self, vocab_count: int) -> RankInfo | None:
        return get_next_rank(self.data.total_xp, vocab_count)

    def rank_progress(self, vocab_count: int) -> float:
        return compute_rank_progress(self.data.total_xp, vocab_count)

    def snapshot(self, vocab_count: int) -> dict:
        """XP, streak and rank figures for display."""
        streak = self.data.streak
        next_rank = self.next_rank(vocab_count)
        return {
            'total_xp': self.data.total_xp,
            'current_streak': streak.current_streak,
            'longest_streak': streak.longest_streak,
            'last_practice_date': streak.last_practice_date,
            'rank': self.rank(vocab_count).to_dict(),
            'next_rank': next_rank.to_dict() if next_rank else None,
            'rank_progress': self.rank_progress(vocab_count),
        }
