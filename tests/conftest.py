"""Shared fixtures: a fake chat-completions client and fresh in-memory state."""

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from planpal.assistant.service import PlanPalBot
from planpal.assistant.session import InMemoryHistoryStore, SessionRegistry
from planpal.planning.store import PlanningStore


class WordEncoding:
    """Whitespace tokenizer standing in for tiktoken."""

    def encode(self, text):
        return text.split()

    def decode(self, tokens):
        return " ".join(tokens)


def make_completion(content):
    """Build an object shaped like an OpenAI chat completion."""
    return SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(role="assistant", content=content))]
    )


@pytest.fixture
def fake_client():
    client = MagicMock()
    client.chat.completions.create.return_value = make_completion("Namaste! 🎉")
    return client


@pytest.fixture
def bot(fake_client):
    return PlanPalBot(client=fake_client, model="test-model")


@pytest.fixture
def registry():
    return SessionRegistry(store=InMemoryHistoryStore(max_messages=10))


@pytest.fixture
def session(registry):
    return registry.get_or_create("test-session")


@pytest.fixture
def store():
    return PlanningStore()
