# backend/app/client/cancellation.py

import asyncio
from typing import Awaitable, Optional, TypeVar
from uuid import uuid4

from app.core.errors import TurnCancelled


T = TypeVar("T")


class CancellationToken:
    """
    Client-local flag for one dispatched turn.

    Cancelling only stops the local side from waiting on (and acting on) the
    turn. Nothing is sent to the server: the remote turn may still run to
    completion and persist its messages.
    """

    def __init__(self, turn_id: Optional[str] = None):
        self.turn_id = turn_id or uuid4().hex
        self._event = asyncio.Event()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        self._event.set()

    def raise_if_cancelled(self) -> None:
        if self.cancelled:
            raise TurnCancelled(f"turn {self.turn_id} cancelled")

    async def guard(self, awaitable: Awaitable[T]) -> T:
        """
        Await `awaitable` unless the token is cancelled first.

        Raises TurnCancelled if the token was cancelled before, during, or at
        the same moment the awaitable finished; its result is then discarded.
        """
        self.raise_if_cancelled()

        task = asyncio.ensure_future(awaitable)
        waiter = asyncio.ensure_future(self._event.wait())
        try:
            await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            waiter.cancel()
            if not task.done():
                task.cancel()

        if self.cancelled:
            if task.done() and not task.cancelled():
                task.exception()  # mark retrieved; the outcome is discarded
            raise TurnCancelled(f"turn {self.turn_id} cancelled")

        return task.result()
