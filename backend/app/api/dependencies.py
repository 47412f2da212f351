# backend/app/api/dependencies.py

from functools import lru_cache

from app.agents.turn_dispatcher import TurnDispatcher
from app.db.conversation_log import ConversationLog


@lru_cache
def get_conversation_log() -> ConversationLog:
    return ConversationLog()


@lru_cache
def get_dispatcher() -> TurnDispatcher:
    return TurnDispatcher(get_conversation_log())
