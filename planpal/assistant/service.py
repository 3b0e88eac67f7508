# service.py
import uuid
import logging
import asyncio
from typing import Dict, List, Optional

from openai import OpenAI

from . import config
from .schema import AssistantResult, ChatMessage, Location, Outcome
from .session import ChatSession
from .utils import (
    SUGGESTION_SCHEMA,
    is_suggestion_request,
    normalize_messages,
    parse_suggestions,
    suggestion_prompt,
    trim_for_token_limit,
    with_location,
)

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)

if not config.OPENAI_API_KEY:
    logger.warning("OPENAI_API_KEY not set — assistant will answer with the fallback message")


def fresh_id() -> str:
    return uuid.uuid4().hex


class PlanPalBot:
    """Turns one user utterance into exactly one bot ChatMessage."""

    def __init__(self, client=None, model: str = None, temperature: float = None):
        self.client = client
        self.model = model or config.MODEL_NAME
        self.temperature = config.TEMPERATURE if temperature is None else temperature

    def _get_client(self):
        """Lazy client init so a missing key surfaces as a failed call, not an import error."""
        if self.client is None:
            self.client = OpenAI(
                api_key=config.OPENAI_API_KEY,
                base_url=config.OPENAI_BASE_URL,
                timeout=config.REQUEST_TIMEOUT_SECONDS,
                max_retries=config.MAX_RETRIES,
            )
        return self.client

    async def call_model(self, messages: List[Dict[str, str]], **kwargs) -> str:
        """
        Call the chat completions API in a thread to avoid blocking.
        """
        client = self._get_client()

        def sync_call():
            return client.chat.completions.create(
                model=self.model,
                messages=messages,
                temperature=self.temperature,
                **kwargs,
            )

        completion = await asyncio.to_thread(sync_call)
        try:
            content = completion.choices[0].message.content
        except (AttributeError, IndexError) as e:
            raise RuntimeError("Model returned unexpected structure") from e
        if content is None:
            raise RuntimeError("Model returned no content")

        logger.debug("Raw model reply: %s", content[:1000])
        return content

    async def suggest(self, full_message: str) -> ChatMessage:
        messages = [{"role": "user", "content": suggestion_prompt(full_message)}]
        raw = await self.call_model(
            messages,
            response_format={
                "type": "json_schema",
                "json_schema": {"name": "suggestions", "schema": SUGGESTION_SCHEMA},
            },
        )
        suggestions = parse_suggestions(raw)
        return ChatMessage(id=fresh_id(), sender="bot", suggestions=suggestions)

    async def converse(self, full_message: str, session: ChatSession) -> ChatMessage:
        async with session.lock:
            history = normalize_messages(await session.history())
            messages = [{"role": "system", "content": config.PERSONA}]
            messages.extend(history)
            messages.append({"role": "user", "content": full_message})
            messages = trim_for_token_limit(messages)

            logger.info("Calling model for session %s with %d messages", session.session_id, len(messages))
            text = await self.call_model(messages)

            await session.record_turn(full_message, text)
        return ChatMessage(id=fresh_id(), sender="bot", text=text)

    async def send_message(
        self,
        message: str,
        session: ChatSession,
        location: Optional[Location] = None,
    ) -> AssistantResult:
        """
        Route the message to the suggestion or conversational path.
        Never raises: any failure becomes the fallback apology.
        """
        full_message = with_location(message, location)

        try:
            if is_suggestion_request(message):
                reply = await self.suggest(full_message)
                return AssistantResult(outcome=Outcome.SUGGESTIONS, message=reply)
            reply = await self.converse(full_message, session)
            return AssistantResult(outcome=Outcome.TEXT, message=reply)
        except Exception:
            logger.exception("Error communicating with the model API")
            fallback = ChatMessage(id=fresh_id(), sender="bot", text=config.FALLBACK_TEXT)
            return AssistantResult(outcome=Outcome.FALLBACK, message=fallback)
