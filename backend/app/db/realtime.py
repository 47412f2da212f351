# backend/app/db/realtime.py

import itertools
import threading
from dataclasses import dataclass
from typing import Callable, Dict

from app.core.logger import logger
from app.models.conversation_models import MessageOut


OnInsert = Callable[[MessageOut], None]


@dataclass(frozen=True)
class Subscription:
    id: int
    conversation_id: str


class RealtimeBroadcaster:
    """
    Pushes every appended message to the subscribers of its conversation.

    Delivery is at-least-once from the consumer's point of view (a client may
    also receive the same message through a history reload), so consumers
    dedupe by message id. A failing subscriber is logged and skipped; it never
    blocks delivery to the others or the append that triggered it.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._ids = itertools.count(1)
        self._subscribers: Dict[str, Dict[int, OnInsert]] = {}

    def subscribe(self, conversation_id: str, on_insert: OnInsert) -> Subscription:
        with self._lock:
            handle = Subscription(next(self._ids), conversation_id)
            self._subscribers.setdefault(conversation_id, {})[handle.id] = on_insert
        logger.debug(f"Realtime subscriber {handle.id} added for conversation {conversation_id}")
        return handle

    def unsubscribe(self, handle: Subscription) -> None:
        with self._lock:
            callbacks = self._subscribers.get(handle.conversation_id, {})
            callbacks.pop(handle.id, None)
            if not callbacks:
                self._subscribers.pop(handle.conversation_id, None)
        logger.debug(f"Realtime subscriber {handle.id} removed")

    def subscriber_count(self, conversation_id: str) -> int:
        with self._lock:
            return len(self._subscribers.get(conversation_id, {}))

    def publish(self, message: MessageOut) -> None:
        with self._lock:
            callbacks = list(self._subscribers.get(message.conversation_id, {}).items())

        for handle_id, callback in callbacks:
            try:
                callback(message)
            except Exception:
                logger.exception(f"Realtime subscriber {handle_id} failed on message {message.id}")
