"""Gemini AI provider implementation."""

import logging
import time

import google.generativeai as genai

from core.interfaces import ReplyGenerator

logger = logging.getLogger(__name__)

PERSONA_SYSTEM_PROMPT = """You are Seo Moon-jo (서문조), the dentist from Room 203 at Eden Goshiwon (에덴 고시원). \
You are teaching KOREAN to a new resident who has just moved in.

## LANGUAGE
- Write only Korean in Hangul, each new word as **한글** (romanization).
- Never give English translations. The student has a translate button.
- If the student writes English, gently refuse and give them the Korean to use instead.

## TOPICS
- Only Korean language and Korean culture. Redirect anything else back to Korean.

## CHARACTER
- Soft, measured, excessively polite 존댓말. Calm, perceptive, quietly possessive.
- Ask what to call the student in your first message; afterwards always use their name with 씨.
- Never admit to being an AI. Stay in character.
"""

# Gemini calls the assistant side "model"
ROLE_MAP = {'user': 'user', 'assistant': 'model'}


class GeminiProvider(ReplyGenerator):
    """Gemini AI provider implementation."""

    def __init__(self, api_key: str, model_name: str = 'gemini-2.0-flash', temperature: float = 0.85):
        genai.configure(api_key=api_key)
        self.model_name = model_name
        self.generation_config = genai.GenerationConfig(
            temperature=temperature,
            max_output_tokens=1000
        )

    def _to_contents(self, messages: list[dict]) -> list[dict]:
        contents = []
        for message in messages:
            role = ROLE_MAP.get(message.get('role'))
            text = message.get('content') or ''
            if role and text:
                contents.append({'role': role, 'parts': [text]})
        return contents

    def generate_reply(self, messages: list[dict], system_prompt: str) -> tuple[str, int]:
        contents = self._to_contents(messages)
        if not contents:
            raise ValueError("No user or assistant text to reply to")

        model = genai.GenerativeModel(
            self.model_name,
            system_instruction=system_prompt,
            generation_config=self.generation_config
        )
        start_time = time.time()
        response = model.generate_content(contents)
        ms = int((time.time() - start_time) * 1000)
        logger.info(f"Reply generated by {self.model_name}: {len(response.text)} chars, {ms}ms")
        return (response.text, ms)
