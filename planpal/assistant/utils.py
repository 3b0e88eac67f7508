# utils.py
import json
import logging
from functools import lru_cache
from typing import Any, Dict, List, Optional

from tiktoken import get_encoding

from . import config
from .schema import Location, Suggestion

logger = logging.getLogger(__name__)


def is_suggestion_request(message: str) -> bool:
    """Keyword heuristic: "no suggestions needed" still counts as a request."""
    lowered = message.lower()
    return any(keyword in lowered for keyword in config.SUGGESTION_KEYWORDS)


def with_location(message: str, location: Optional[Location] = None) -> str:
    if location is None:
        return message
    return (
        f"{message} (My current location is latitude: {location.latitude}, "
        f"longitude: {location.longitude})"
    )


def suggestion_prompt(full_message: str) -> str:
    return f'Based on this request, provide some suggestions: "{full_message}"'


def parse_suggestions(text: str) -> List[Suggestion]:
    """
    Parse the model's structured output into suggestions.
    Accepts a bare JSON array or an object holding it under "suggestions".
    Raises ValueError on anything else.
    """
    if not text or not text.strip():
        raise ValueError("Empty model response")

    parsed = json.loads(text.strip())
    if isinstance(parsed, dict):
        parsed = parsed.get("suggestions")
    if not isinstance(parsed, list):
        raise ValueError("Model response is not a suggestion list")

    return [Suggestion.model_validate(item) for item in parsed]


def normalize_messages(history: List[Dict[str, Any]]) -> List[Dict[str, str]]:
    """
    Ensure all messages follow the {role, content} format and are strings.
    """
    normalized = []
    for m in history:
        if "role" in m and "content" in m:
            normalized.append({
                "role": str(m["role"]).strip(),
                "content": str(m["content"]).strip()
            })
    return normalized


SUMMARY_PREFIX = "Summary of earlier conversation: "


def fold_history(history: List[Dict[str, str]], max_messages: int,
                 summary_limit: int = None) -> List[Dict[str, str]]:
    """
    Collapse everything but the newest turns into a single summary message
    so the result holds at most max_messages entries.
    A previous summary is merged in, not nested, and the text is capped at summary_limit tokens.
    """
    if len(history) <= max_messages:
        return history
    old_count = len(history) - max_messages + 1
    old, recent = history[:old_count], history[old_count:]

    parts = []
    for m in old:
        content = m.get("content")
        if not content:
            continue
        if m.get("role") == "system" and content.startswith(SUMMARY_PREFIX):
            content = content[len(SUMMARY_PREFIX):]
        parts.append(content)

    summary_text = truncate_tokens(" ".join(parts), summary_limit or config.SUMMARY_TOKEN_LIMIT)
    summary_msg = {"role": "system", "content": f"{SUMMARY_PREFIX}{summary_text}"}
    return [summary_msg] + recent


@lru_cache(maxsize=1)
def _encoding():
    return get_encoding("cl100k_base")


def truncate_tokens(text: str, max_tokens: int) -> str:
    """Keep the newest max_tokens tokens of text."""
    # A BPE token covers at least one byte
    if len(text.encode("utf-8")) <= max_tokens:
        return text
    enc = _encoding()
    tokens = enc.encode(text)
    if len(tokens) <= max_tokens:
        return text
    return enc.decode(tokens[-max_tokens:])


def count_tokens(messages: List[Dict[str, str]]) -> int:
    """Count tokens in the messages list using tiktoken."""
    enc = _encoding()
    return sum(len(enc.encode(m.get("content", ""))) for m in messages)


def trim_for_token_limit(messages: List[Dict[str, str]], limit: int = None) -> List[Dict[str, str]]:
    """
    Drop the earliest non-system messages until the list fits in the token limit.
    The last message (the current user turn) is never dropped; if the system
    messages plus that turn still exceed the limit, ValueError is raised.
    """
    limit = limit or config.TOKEN_LIMIT

    # A BPE token covers at least one byte
    if sum(len(m.get("content", "").encode("utf-8")) for m in messages) <= limit:
        return messages

    while count_tokens(messages) > limit:
        for i, msg in enumerate(messages[:-1]):
            if msg.get("role") != "system":
                messages.pop(i)
                break
        else:
            raise ValueError("Message does not fit in the token limit")
    return messages


SUGGESTION_SCHEMA = {
    "type": "object",
    "properties": {
        "suggestions": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "name": {
                        "type": "string",
                        "description": "Name of the place, movie, or activity.",
                    },
                    "type": {
                        "type": "string",
                        "enum": ["Restaurant", "Movie", "Hangout Spot", "Other"],
                        "description": "The category of the suggestion.",
                    },
                    "rating": {
                        "type": "number",
                        "description": "A rating out of 5, e.g., 4.5",
                    },
                    "reason": {
                        "type": "string",
                        "description": "A short, compelling reason why this is a good suggestion for the group.",
                    },
                    "address": {
                        "type": "string",
                        "description": "A plausible physical address. Only for 'Restaurant' or 'Hangout Spot'.",
                    },
                    "posterUrl": {
                        "type": "string",
                        "description": (
                            "A plausible placeholder image URL for the movie poster from a service like "
                            "https://image.tmdb.org/t/p/w500/.... Only for 'Movie'."
                        ),
                    },
                },
                "required": ["name", "type", "rating", "reason"],
            },
        }
    },
    "required": ["suggestions"],
}
