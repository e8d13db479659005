"""FastAPI server for nunchi application."""

import asyncio
import logging
import math
import os
import time
from typing import Callable, Optional

from fastapi import APIRouter, FastAPI, HTTPException, Query, Request
from pydantic import BaseModel, Field

from core.config import (
    MAX_MESSAGES, MAX_CONTENT_LENGTH, RATE_LIMIT_WINDOW_SECONDS, RATE_LIMIT_MAX_REQUESTS
)
from core.interfaces import Clock, IdGenerator, KeyValueStore, ReplyGenerator
from core.mood import compute_korean_ratio, get_mood_level, generate_mood_system_addendum
from core.session import LearnerSession
from core.utils import sanitize_text_input
from core.vocabulary import parse_vocabulary

from server.file_storage import FileStorage, load_config
from server.gemini_provider import GeminiProvider, PERSONA_SYSTEM_PROMPT

logger = logging.getLogger(__name__)

USER_ID_PATTERN = r'^[A-Za-z0-9_-]{1,64}$'
VALID_ROLES = ('user', 'assistant', 'system')


# Pydantic models for API
class ChatMessage(BaseModel):
    role: str
    content: str = ''


class MoodRequest(BaseModel):
    messages: list[ChatMessage]


class MoodResponse(BaseModel):
    korean_ratio: float
    mood: str
    addendum: str


class ChatRequest(BaseModel):
    messages: list[ChatMessage]
    user_id: str = Field("default", pattern=USER_ID_PATTERN)


class ChatResponse(BaseModel):
    reply: str
    generate_ms: int
    mood: str
    korean_ratio: float
    xp_events: list[dict]
    vocabulary: list[dict]


class UserRequest(BaseModel):
    user_id: str = Field("default", pattern=USER_ID_PATTERN)


class FlashcardRequest(UserRequest):
    total: int = Field(ge=0)
    again: int = Field(ge=0)


class LessonMessage(BaseModel):
    role: str
    text: str = ''


class SaveLessonRequest(UserRequest):
    messages: list[LessonMessage]


class WordInput(BaseModel):
    korean: str
    romanization: str = ''
    english: str = ''


class SaveWordsRequest(UserRequest):
    words: list[WordInput] = Field(max_length=500)


class RankResponse(BaseModel):
    id: str
    korean: str
    english: str
    description: str
    minXP: int
    minVocab: int


class StatusResponse(BaseModel):
    total_xp: int
    current_streak: int
    longest_streak: int
    last_practice_date: str
    rank: RankResponse
    next_rank: Optional[RankResponse]
    rank_progress: float
    stats: dict
    vocab_count: int
    unseen_words: int
    lesson_count: int


class RateLimiter:
    """Fixed-window request counter per client."""

    def __init__(self, max_requests: int = RATE_LIMIT_MAX_REQUESTS,
                 window_seconds: float = RATE_LIMIT_WINDOW_SECONDS,
                 time_fn: Callable[[], float] = time.monotonic):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.time_fn = time_fn
        self._windows: dict[str, list] = {}  # client -> [count, reset_at]

    def check(self, client: str) -> float | None:
        """Count a request. Returns seconds to wait if over the limit, else None."""
        now = self.time_fn()
        window = self._windows.get(client)
        if window is None or now > window[1]:
            self._prune(now)
            self._windows[client] = [1, now + self.window_seconds]
            return None
        if window[0] >= self.max_requests:
            return window[1] - now
        window[0] += 1
        return None

    def _prune(self, now: float) -> None:
        expired = [c for c, (_, reset_at) in self._windows.items() if now > reset_at]
        for client in expired:
            del self._windows[client]


def validate_messages(messages: list[ChatMessage]) -> str | None:
    """Check an inbound conversation. Returns an error message or None."""
    if not messages:
        return "messages must not be empty"
    if len(messages) > MAX_MESSAGES:
        return f"Too many messages (max {MAX_MESSAGES}). Please start a new conversation."
    for message in messages:
        if message.role not in VALID_ROLES:
            return f"Invalid role: {message.role}"
    last = messages[-1]
    if last.role == 'user' and len(last.content) > MAX_CONTENT_LENGTH:
        return f"Message too long (max {MAX_CONTENT_LENGTH} characters)."
    return None


def configure_storage() -> Callable[[str], KeyValueStore]:
    """Pick the storage backend from the environment.

    NUNCHI_STORAGE=file (default) keeps one JSON file per user in
    NUNCHI_STATE_DIR; NUNCHI_STORAGE=postgres uses DATABASE_URL.
    """
    storage_type = os.environ.get('NUNCHI_STORAGE', 'file')
    if storage_type == 'postgres':
        from server.postgres_storage import PostgresDatabase
        database = PostgresDatabase()
        logger.info("Using PostgreSQL storage")
        return database.for_user
    state_dir = os.environ.get('NUNCHI_STATE_DIR')
    logger.info(f"Using file storage in {state_dir or 'project root'}")
    return lambda user_id: FileStorage(user_id, state_dir)


def configure_reply_generator() -> ReplyGenerator | None:
    """Gemini provider from GEMINI_API_KEY or the config file, if a key exists."""
    api_key = os.environ.get('GEMINI_API_KEY')
    if not api_key:
        try:
            api_key = load_config().get('gemini_api_key')
        except FileNotFoundError:
            pass
    if not api_key:
        logger.warning("GEMINI_API_KEY not set and no config file; chat replies are disabled")
        return None
    model_name = os.environ.get('NUNCHI_MODEL', 'gemini-2.0-flash')
    logger.info(f"Reply generation via {model_name}")
    return GeminiProvider(api_key, model_name=model_name)


def get_session(request: Request, user_id: str) -> LearnerSession:
    """Get or create the session for a user."""
    state = request.app.state
    if user_id not in state.sessions:
        state.sessions[user_id] = LearnerSession(
            state.store_factory(user_id), state.clock, state.id_generator
        )
    return state.sessions[user_id]


router = APIRouter()


@router.get("/")
async def root():
    return {"status": "ok", "service": "nunchi"}


@router.post("/api/mood", response_model=MoodResponse)
async def get_mood(body: MoodRequest):
    """Mood for a conversation. Touches no state."""
    messages = [m.model_dump() for m in body.messages]
    ratio = compute_korean_ratio(messages)
    return MoodResponse(
        korean_ratio=ratio,
        mood=get_mood_level(ratio),
        addendum=generate_mood_system_addendum(messages)
    )


@router.post("/api/chat", response_model=ChatResponse)
async def chat(request: Request, body: ChatRequest):
    """Score the student's latest message and get the persona's reply."""
    client = request.client.host if request.client else "unknown"
    retry_after = request.app.state.rate_limiter.check(client)
    if retry_after is not None:
        raise HTTPException(
            status_code=429,
            detail="Too many requests. Please wait.",
            headers={"Retry-After": str(max(1, math.ceil(retry_after)))}
        )

    error = validate_messages(body.messages)
    if error:
        raise HTTPException(status_code=400, detail=error)

    generator = request.app.state.reply_generator
    if generator is None:
        raise HTTPException(status_code=503, detail="Reply generation is not configured")

    session = get_session(request, body.user_id)
    last = body.messages[-1]
    xp_events = session.record_message(sanitize_text_input(last.content)) if last.role == 'user' else []

    messages = [m.model_dump() for m in body.messages]
    ratio = compute_korean_ratio(messages)
    system_prompt = PERSONA_SYSTEM_PROMPT + generate_mood_system_addendum(messages)
    conversation = [m for m in messages if m['role'] != 'system']

    try:
        loop = asyncio.get_running_loop()
        reply, ms = await loop.run_in_executor(
            None,
            lambda: generator.generate_reply(conversation, system_prompt)
        )
    except Exception as e:
        logger.error(f"Reply generation failed for {body.user_id}: {type(e).__name__}: {e}")
        raise HTTPException(status_code=502, detail="Reply generation failed")

    return ChatResponse(
        reply=reply,
        generate_ms=ms,
        mood=get_mood_level(ratio),
        korean_ratio=ratio,
        xp_events=[e.to_dict() for e in xp_events],
        vocabulary=parse_vocabulary(reply)
    )


@router.get("/api/status", response_model=StatusResponse)
async def get_status(request: Request, user_id: str = Query("default", pattern=USER_ID_PATTERN)):
    """Get XP, streak and rank for a user."""
    return StatusResponse(**get_session(request, user_id).status())


@router.post("/api/translation")
async def record_translation(request: Request, body: UserRequest):
    """The student used the translate button."""
    session = get_session(request, body.user_id)
    session.record_translation()
    return {"messages_without_translate": session.progress.stats.messages_without_translate}


@router.post("/api/flashcards")
async def record_flashcards(request: Request, body: FlashcardRequest):
    try:
        events = get_session(request, body.user_id).record_flashcard_session(body.total, body.again)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"xp_events": [e.to_dict() for e in events]}


# Lesson history

@router.get("/api/lessons")
async def list_lessons(request: Request, user_id: str = Query("default", pattern=USER_ID_PATTERN)):
    lessons = get_session(request, user_id).lessons.conversations
    return {"lessons": [
        {k: v for k, v in c.to_dict().items() if k != 'messages'} for c in lessons
    ]}


@router.post("/api/lessons")
async def save_lesson(request: Request, body: SaveLessonRequest):
    lessons = get_session(request, body.user_id).lessons
    saved = lessons.save_conversation([m.model_dump() for m in body.messages])
    return {"saved": saved is not None, "lesson": saved.to_dict() if saved else None, "count": len(lessons)}


@router.get("/api/lessons/{lesson_id}")
async def get_lesson(request: Request, lesson_id: str, user_id: str = Query("default", pattern=USER_ID_PATTERN)):
    lesson = get_session(request, user_id).lessons.get(lesson_id)
    if lesson is None:
        raise HTTPException(status_code=404, detail="Lesson not found")
    return lesson.to_dict()


@router.delete("/api/lessons/{lesson_id}")
async def delete_lesson(request: Request, lesson_id: str, user_id: str = Query("default", pattern=USER_ID_PATTERN)):
    deleted = get_session(request, user_id).lessons.delete_conversation(lesson_id)
    return {"deleted": deleted}


# Vocabulary

@router.get("/api/vocabulary")
async def list_vocabulary(request: Request, user_id: str = Query("default", pattern=USER_ID_PATTERN), mark_seen: bool = False):
    vocabulary = get_session(request, user_id).vocabulary
    unseen = vocabulary.unseen_count
    if mark_seen:
        vocabulary.mark_seen()
    return {"words": [w.to_dict() for w in vocabulary.words], "count": len(vocabulary), "unseen": unseen}


@router.post("/api/vocabulary")
async def save_vocabulary(request: Request, body: SaveWordsRequest):
    session = get_session(request, body.user_id)
    added = session.save_words([w.model_dump() for w in body.words])
    return {"added": [w.to_dict() for w in added], "count": session.vocab_count}


@router.delete("/api/vocabulary/{word_id}")
async def delete_word(request: Request, word_id: str, user_id: str = Query("default", pattern=USER_ID_PATTERN)):
    deleted = get_session(request, user_id).vocabulary.remove_word(word_id)
    return {"deleted": deleted}


def create_app(store_factory: Callable[[str], KeyValueStore] = None,
               reply_generator: ReplyGenerator = None,
               clock: Clock = None,
               id_generator: IdGenerator = None,
               rate_limiter: RateLimiter = None) -> FastAPI:
    """Build the API app.

    Collaborators left as None are configured from the environment (the
    reply generator only when no store_factory is given either).
    """
    app = FastAPI(title="Nunchi API", description="Korean conversation practice API")
    if store_factory is None:
        store_factory = configure_storage()
        if reply_generator is None:
            reply_generator = configure_reply_generator()
    app.state.store_factory = store_factory
    app.state.reply_generator = reply_generator
    app.state.clock = clock
    app.state.id_generator = id_generator
    app.state.rate_limiter = rate_limiter or RateLimiter()
    app.state.sessions = {}
    app.include_router(router)
    return app
