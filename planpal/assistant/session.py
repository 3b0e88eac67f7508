# session.py
import json
import time
import uuid
import asyncio
import logging
from typing import Any, Dict, List, Optional

import redis.asyncio as aioredis

from . import config
from .utils import fold_history

logger = logging.getLogger(__name__)


class InMemoryHistoryStore:
    """
    Conversation turns kept in process memory, one list per session.
    Sessions idle longer than ttl seconds are dropped, like the Redis key TTL.
    """

    def __init__(self, max_messages: int = None, ttl: int = None):
        self.max_messages = max_messages or config.MAX_HISTORY_MESSAGES
        self.ttl = ttl or config.MEMORY_SESSION_TTL_SECONDS
        self._turns: Dict[str, List[Dict[str, str]]] = {}
        self._touched: Dict[str, float] = {}

    def _purge_expired(self) -> None:
        cutoff = time.monotonic() - self.ttl
        for session_id in [sid for sid, ts in self._touched.items() if ts < cutoff]:
            self._turns.pop(session_id, None)
            self._touched.pop(session_id, None)

    async def load(self, session_id: str) -> List[Dict[str, Any]]:
        self._purge_expired()
        return list(self._turns.get(session_id, []))

    async def append(self, session_id: str, role: str, content: str) -> None:
        self._purge_expired()
        turns = self._turns.setdefault(session_id, [])
        turns.append({"role": role, "content": content})
        if len(turns) > self.max_messages:
            self._turns[session_id] = fold_history(turns, self.max_messages)
        self._touched[session_id] = time.monotonic()

    async def clear(self, session_id: str) -> None:
        self._turns.pop(session_id, None)
        self._touched.pop(session_id, None)


class RedisHistoryStore:
    """Conversation turns kept in a Redis list per session, refreshed TTL on every write."""

    def __init__(self, client, prefix: str = None, ttl: int = None, max_messages: int = None):
        self.client = client
        self.prefix = prefix or config.REDIS_PREFIX
        self.ttl = ttl or config.SESSION_TTL_SECONDS
        self.max_messages = max_messages or config.MAX_HISTORY_MESSAGES

    def make_key(self, session_id: str) -> str:
        return f"{self.prefix}:{session_id}"

    async def load(self, session_id: str) -> List[Dict[str, Any]]:
        str_list = await self.client.lrange(self.make_key(session_id), 0, -1)
        history = []
        for s in str_list:
            try:
                history.append(json.loads(s))
            except json.JSONDecodeError:
                history.append({"role": "system", "content": s})
        return history

    async def append(self, session_id: str, role: str, content: str) -> None:
        key = self.make_key(session_id)
        await self.client.rpush(key, json.dumps({"role": role, "content": content}))
        await self.client.expire(key, self.ttl)

        length = await self.client.llen(key)
        if length > self.max_messages:
            history = await self.load(session_id)
            await self._save(session_id, fold_history(history, self.max_messages))

    async def _save(self, session_id: str, history: List[Dict[str, str]]) -> None:
        key = self.make_key(session_id)
        await self.client.delete(key)
        for msg in history:
            await self.client.rpush(key, json.dumps(msg))
        await self.client.expire(key, self.ttl)

    async def clear(self, session_id: str) -> None:
        await self.client.delete(self.make_key(session_id))


def create_history_store():
    if config.SESSION_BACKEND == "redis":
        client = aioredis.Redis.from_url(config.REDIS_URL, decode_responses=True)
        return RedisHistoryStore(client)
    elif config.SESSION_BACKEND == "memory":
        return InMemoryHistoryStore()
    else:
        raise ValueError(f"Unsupported SESSION_BACKEND: {config.SESSION_BACKEND}")


class ChatSession:
    """
    Conversation handle passed into each conversational call.
    The lock serializes turns so concurrent requests cannot interleave history.
    """

    def __init__(self, session_id: str, store):
        self.session_id = session_id
        self.store = store
        self.lock = asyncio.Lock()

    async def history(self) -> List[Dict[str, Any]]:
        return await self.store.load(self.session_id)

    async def record_turn(self, user_content: str, assistant_content: str) -> None:
        await self.store.append(self.session_id, "user", user_content)
        await self.store.append(self.session_id, "assistant", assistant_content)


class SessionRegistry:
    """
    One ChatSession per caller-supplied id; the caller owns the lifecycle.
    Handles idle longer than ttl seconds are forgotten unless a turn is in flight.
    """

    def __init__(self, store=None, ttl: int = None):
        self.store = store if store is not None else create_history_store()
        self.ttl = ttl or config.MEMORY_SESSION_TTL_SECONDS
        self._sessions: Dict[str, ChatSession] = {}
        self._last_used: Dict[str, float] = {}

    def _purge_idle(self) -> None:
        cutoff = time.monotonic() - self.ttl
        for session_id, last_used in list(self._last_used.items()):
            session = self._sessions.get(session_id)
            if last_used < cutoff and (session is None or not session.lock.locked()):
                self._sessions.pop(session_id, None)
                self._last_used.pop(session_id, None)

    def get_or_create(self, session_id: Optional[str] = None) -> ChatSession:
        self._purge_idle()
        if not session_id:
            session_id = str(uuid.uuid4())
        session = self._sessions.get(session_id)
        if session is None:
            session = ChatSession(session_id, self.store)
            self._sessions[session_id] = session
            logger.info("Created chat session %s", session_id)
        self._last_used[session_id] = time.monotonic()
        return session

    async def clear(self, session_id: str) -> None:
        session = self._sessions.get(session_id)
        if session is None:
            await self.store.clear(session_id)
            return
        # Wait for an in-flight turn so it cannot write history back after the clear
        async with session.lock:
            await self.store.clear(session_id)
            self._sessions.pop(session_id, None)
            self._last_used.pop(session_id, None)
