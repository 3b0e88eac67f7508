# dependencies.py
from functools import lru_cache

from planpal.assistant.service import PlanPalBot
from planpal.assistant.session import SessionRegistry
from planpal.planning.store import PlanningStore


@lru_cache()
def get_store() -> PlanningStore:
    return PlanningStore()


@lru_cache()
def get_registry() -> SessionRegistry:
    return SessionRegistry()


@lru_cache()
def get_bot() -> PlanPalBot:
    return PlanPalBot()
