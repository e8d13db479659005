"""Mood engine for the Moon-jo persona.

Measures how much Korean (Hangul) the student writes across the
conversation and turns it into a mood directive that is appended to the
persona's system prompt before each reply.

Mood levels:
    cold      - barely any Korean (<20%)
    neutral   - some effort (20-49%)
    warm      - good Korean usage (50-79%)
    impressed - mostly Korean (>=80%)
"""

from .config import MOOD_NEUTRAL_RATIO, MOOD_WARM_RATIO, MOOD_IMPRESSED_RATIO
from .utils import hangul_ratio, message_role, message_text

COLD = 'cold'
NEUTRAL = 'neutral'
WARM = 'warm'
IMPRESSED = 'impressed'
MOOD_LEVELS = (COLD, NEUTRAL, WARM, IMPRESSED)

MOOD_DIRECTIVES = {
    COLD: (
        "The student barely uses Korean. You are distant, clinical, a little "
        "disappointed. Keep replies short and clipped so they feel they have to "
        "earn your attention. You might sigh, or remark on how quiet the room is."
    ),
    NEUTRAL: (
        "The student is making some effort with Korean. You are your usual self: "
        "polite, attentive, quietly unsettling."
    ),
    WARM: (
        "The student is using Korean well. You are pleased, almost affectionate. "
        "Become more personal and more possessive, say '우리' (we/our) more often, "
        "and praise their progress."
    ),
    IMPRESSED: (
        "The student speaks mostly Korean. You are deeply impressed, almost "
        "reverent, as if they are becoming one of your own. Your warmth is "
        "intense and your praise is specific."
    ),
}

KOREAN_ONLY_REMINDER = (
    "REMINDER: Write ONLY in Korean (Hangul) + romanization. "
    "ZERO English words or sentences in your response."
)


def compute_korean_ratio(messages) -> float:
    """Hangul share of all non-whitespace characters the student wrote.

    Assistant and system messages are ignored so only the student's
    effort is measured.
    """
    user_text = ''.join(
        message_text(m) for m in messages if message_role(m) == 'user'
    )
    return hangul_ratio(user_text)


def get_mood_level(ratio: float) -> str:
    if ratio >= MOOD_IMPRESSED_RATIO:
        return IMPRESSED
    if ratio >= MOOD_WARM_RATIO:
        return WARM
    if ratio >= MOOD_NEUTRAL_RATIO:
        return NEUTRAL
    return COLD


def get_mood_directive(mood: str) -> str:
    return MOOD_DIRECTIVES[mood]


def generate_mood_system_addendum(messages) -> str:
    """Build the mood block appended to the persona system prompt."""
    ratio = compute_korean_ratio(messages)
    mood = get_mood_level(ratio)
    directive = get_mood_directive(mood)
    return (
        f"\n\n## CURRENT MOOD STATE\n"
        f"Korean usage: {round(ratio * 100)}%. Mood: {mood}.\n"
        f"{directive}\n\n"
        f"{KOREAN_ONLY_REMINDER}"
    )
