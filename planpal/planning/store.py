"""
In-memory planning data: groups, events, polls and per-session chat logs.
"""
import time
import logging
from typing import Dict, List, Optional

from planpal.assistant import config
from planpal.assistant.schema import ChatMessage
from .schema import Event, Group, Poll, PollOption, RSVP, User

logger = logging.getLogger(__name__)

LOADING_ID = "loading"

GREETING = (
    "Chalo, let's plan something awesome! How can I help you today? "
    "Try asking me to 'suggest some chill cafes in Mumbai'!"
)


class NotFoundError(LookupError):
    """Raised when an id does not refer to a known group, poll, option or user."""


def _seed_users() -> List[User]:
    return [
        User(id="u1", name="Rohan", avatar_url="https://i.pravatar.cc/150?u=rohan"),
        User(id="u2", name="Priya", avatar_url="https://i.pravatar.cc/150?u=priya"),
        User(id="u3", name="Aarav", avatar_url="https://i.pravatar.cc/150?u=aarav"),
        User(id="u4", name="Saanvi", avatar_url="https://i.pravatar.cc/150?u=saanvi"),
    ]


def _seed_groups(users: List[User]) -> List[Group]:
    u = {user.id: user for user in users}
    return [
        Group(id="g1", name="Weekend Warriors", members=[u["u1"], u["u2"], u["u4"]]),
        Group(id="g2", name="Foodie Fam", members=[u["u1"], u["u3"], u["u4"]]),
        Group(id="g3", name="Movie Buffs", members=[u["u1"], u["u2"], u["u3"]]),
    ]


def _seed_events() -> List[Event]:
    return [
        Event(
            id="e1", group_id="g1", title="Trip to Jaipur", date="Sat, Nov 16",
            location="Jaipur, Rajasthan",
            rsvps=[
                RSVP(user_id="u1", status="going"),
                RSVP(user_id="u2", status="going"),
                RSVP(user_id="u4", status="maybe"),
            ],
        ),
        Event(
            id="e2", group_id="g2", title="Dilli Chaat Crawl", date="Sun, Nov 10",
            location="Chandni Chowk, Delhi",
            rsvps=[
                RSVP(user_id="u1", status="going"),
                RSVP(user_id="u3", status="going"),
            ],
        ),
    ]


def _seed_polls() -> List[Poll]:
    return [
        Poll(
            id="p1", group_id="g3", question="What movie should we watch this Friday?",
            options=[
                PollOption(id="o1", text="Jawan 🎬", votes=["u1", "u3"]),
                PollOption(id="o2", text="RRR (rewatch!) 🔥", votes=["u2"]),
                PollOption(id="o3", text="3 Idiots (classic!) 😂", votes=[]),
            ],
        ),
        Poll(
            id="p2", group_id="g1", question="Best time for the trip?",
            options=[
                PollOption(id="o4", text="Early Morning (6 AM)", votes=["u2"]),
                PollOption(id="o5", text="Afternoon (1 PM)", votes=["u1", "u4"]),
            ],
        ),
    ]


class PlanningStore:
    def __init__(self, chat_ttl: int = None):
        self.users = _seed_users()
        self.current_user = self.users[0]
        self.groups = _seed_groups(self.users)
        self.events = _seed_events()
        self.polls = _seed_polls()
        self.selected_group_id: Optional[str] = self.groups[0].id if self.groups else None
        self._chats: Dict[str, List[ChatMessage]] = {}
        self._chat_touched: Dict[str, float] = {}
        self.chat_ttl = chat_ttl or config.MEMORY_SESSION_TTL_SECONDS

    # Groups, events, polls

    def list_groups(self) -> List[Group]:
        return list(self.groups)

    def get_group(self, group_id: str) -> Group:
        for group in self.groups:
            if group.id == group_id:
                return group
        raise NotFoundError(f"Unknown group: {group_id}")

    def get_user(self, user_id: str) -> User:
        for user in self.users:
            if user.id == user_id:
                return user
        raise NotFoundError(f"Unknown user: {user_id}")

    def select_group(self, group_id: str) -> Group:
        group = self.get_group(group_id)
        self.selected_group_id = group.id
        return group

    def selected_group(self) -> Optional[Group]:
        if self.selected_group_id is None:
            return None
        return self.get_group(self.selected_group_id)

    def filtered_events(self, group_id: str) -> List[Event]:
        return [e for e in self.events if e.group_id == group_id]

    def filtered_polls(self, group_id: str) -> List[Poll]:
        return [p for p in self.polls if p.group_id == group_id]

    def get_poll(self, poll_id: str) -> Poll:
        for poll in self.polls:
            if poll.id == poll_id:
                return poll
        raise NotFoundError(f"Unknown poll: {poll_id}")

    def vote(self, poll_id: str, option_id: str, user_id: str) -> Poll:
        """
        Cast, move or withdraw a user's single vote on a poll.
        Voting again for the option the user already holds withdraws the vote.
        """
        poll = self.get_poll(poll_id)
        self.get_user(user_id)
        target = next((o for o in poll.options if o.id == option_id), None)
        if target is None:
            raise NotFoundError(f"Unknown option {option_id} for poll {poll_id}")

        already_voted = user_id in target.votes
        for option in poll.options:
            option.votes = [voter for voter in option.votes if voter != user_id]
        if not already_voted:
            target.votes.append(user_id)

        logger.info("User %s %s option %s on poll %s",
                    user_id, "withdrew from" if already_voted else "voted for", option_id, poll_id)
        return poll

    # Chat log

    def _greeting(self) -> ChatMessage:
        return ChatMessage(id="1", sender="bot", text=GREETING)

    def _purge_idle_chats(self) -> None:
        cutoff = time.monotonic() - self.chat_ttl
        for session_id in [sid for sid, ts in self._chat_touched.items() if ts < cutoff]:
            self._chats.pop(session_id, None)
            self._chat_touched.pop(session_id, None)

    def _chat_log(self, session_id: str) -> List[ChatMessage]:
        self._purge_idle_chats()
        if session_id not in self._chats:
            self._chats[session_id] = [self._greeting()]
        self._chat_touched[session_id] = time.monotonic()
        return self._chats[session_id]

    def chat_history(self, session_id: str) -> List[ChatMessage]:
        """Read-only view; an unknown session shows the greeting without being stored."""
        self._purge_idle_chats()
        if session_id not in self._chats:
            return [self._greeting()]
        return list(self._chats[session_id])

    def append_chat_message(self, session_id: str, message: ChatMessage) -> ChatMessage:
        self._chat_log(session_id).append(message)
        return message

    def add_loading_placeholder(self, session_id: str) -> ChatMessage:
        placeholder = ChatMessage(id=LOADING_ID, sender="bot", is_loading=True)
        return self.append_chat_message(session_id, placeholder)

    def resolve_placeholder(self, session_id: str, message: ChatMessage) -> ChatMessage:
        """Remove the loading placeholder and append the real reply."""
        history = self._chat_log(session_id)
        history[:] = [m for m in history if m.id != LOADING_ID]
        history.append(message)
        return message

    def clear_chat(self, session_id: str) -> None:
        self._chats.pop(session_id, None)
        self._chat_touched.pop(session_id, None)
