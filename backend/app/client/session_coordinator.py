# backend/app/client/session_coordinator.py

import asyncio
import bisect
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Set, Tuple

from app.client.cancellation import CancellationToken
from app.client.travel_agent_client import TravelAgentClient
from app.core.errors import DispatchError, PersistenceError, TurnCancelled
from app.core.logger import get_logger
from app.models.agent_models import AgentStatus, AgentType
from app.models.conversation_models import ChatResponse, MessageOut
from app.models.result_models import ResultMetadata
from app.utils.structured_content import split_message_content


logger = get_logger("client")


class SessionState(str, Enum):
    IDLE = "idle"
    IN_FLIGHT = "in_flight"


@dataclass
class Notification:
    title: str
    description: str
    variant: str = "default"   # default | destructive


def _log_notification(notification: Notification) -> None:
    logger.info(f"[{notification.variant}] {notification.title}: {notification.description}")


class ClientSessionCoordinator:
    """
    Client state for one open conversation view.

    At most one turn is awaited at a time. send() while a turn is in flight
    interrupts it first; interrupt() is purely local (see CancellationToken).
    The direct dispatch response and the realtime push channel are independent
    and may arrive in either order: pushes only ever add messages and update
    the displayed agent/status, they never put the session back in flight.
    """

    def __init__(
        self,
        conversation_id: str,
        transport: TravelAgentClient,
        notify: Optional[Callable[[Notification], None]] = None,
    ):
        self.conversation_id = conversation_id
        self.transport = transport
        self.notify = notify or _log_notification

        self.state = SessionState.IDLE
        self.current_token: Optional[CancellationToken] = None
        self.messages: List[MessageOut] = []
        self._message_ids: Set[str] = set()

        self.active_agent: Optional[AgentType] = None
        self.agent_status: Optional[AgentStatus] = None

        self._realtime_task: Optional[asyncio.Task] = None
        self._realtime_wanted = False

    @property
    def is_processing(self) -> bool:
        return self.state is SessionState.IN_FLIGHT

    # ------------------------------------------------------------
    # Message list
    # ------------------------------------------------------------
    def _insert(self, message: MessageOut) -> None:
        # created_at ascending; equal timestamps keep arrival order
        keys = [m.created_at for m in self.messages]
        self.messages.insert(bisect.bisect_right(keys, message.created_at), message)
        self._message_ids.add(message.id)

    def apply_push(self, message: MessageOut) -> bool:
        """Realtime insert event. Returns False for duplicates and foreign conversations."""
        if message.conversation_id != self.conversation_id or message.id in self._message_ids:
            return False

        self._insert(message)

        if message.agent_type:
            # Display only: the turn behind this push may already be cancelled
            self.active_agent = message.agent_type
            self.agent_status = message.agent_status
        return True

    @staticmethod
    def message_view(message: MessageOut) -> Tuple[Optional[ResultMetadata], str]:
        """(structured results, display text); unparseable blocks fall back to plain text."""
        return split_message_content(message.content, message.metadata)

    async def load(self) -> bool:
        """Full history reload, merged with anything pushed in the meantime."""
        try:
            loaded = await self.transport.load_messages(self.conversation_id)
        except PersistenceError as e:
            logger.error(f"Error loading messages: {e}")
            self.notify(Notification("Error", "Failed to load messages", "destructive"))
            return False

        pushed = self.messages
        self.messages = []
        self._message_ids = set()
        for message in loaded:
            if message.id not in self._message_ids:
                self._insert(message)
        for message in pushed:
            if message.id not in self._message_ids:
                self._insert(message)
        return True

    # ------------------------------------------------------------
    # Turns
    # ------------------------------------------------------------
    def _clear_agent(self) -> None:
        self.active_agent = None
        self.agent_status = None

    def _finish(self, token: CancellationToken) -> None:
        if token is self.current_token:
            self.current_token = None
            self.state = SessionState.IDLE
            self._clear_agent()

    async def send(self, text: str) -> Optional[ChatResponse]:
        """
        Dispatch one turn. Returns the direct response, or None when the turn
        failed or was interrupted before it resolved.
        """
        if self.state is SessionState.IN_FLIGHT:
            self.interrupt()

        token = CancellationToken()
        self.current_token = token
        self.state = SessionState.IN_FLIGHT

        try:
            result = await token.guard(self.transport.dispatch(text, self.conversation_id))
        except TurnCancelled:
            logger.info("Request was interrupted")
            return None
        except DispatchError as e:
            if token.cancelled:
                return None
            logger.error(f"Error sending message: {e}")
            self.notify(Notification("Error", "Failed to send message", "destructive"))
            self._finish(token)
            return None

        if token.cancelled or token is not self.current_token:
            return None

        if not self.conversation_id:
            self.conversation_id = result.conversation_id
            self._resubscribe()
        self._finish(token)
        return result

    def interrupt(self) -> bool:
        token = self.current_token
        if token is None:
            return False

        token.cancel()
        self.current_token = None
        self.state = SessionState.IDLE
        self._clear_agent()
        self.notify(Notification("Request Interrupted", "Previous request was cancelled"))
        return True

    # ------------------------------------------------------------
    # Realtime subscription
    # ------------------------------------------------------------
    async def _consume_realtime(self) -> None:
        try:
            async for message in self.transport.stream_messages(self.conversation_id):
                self.apply_push(message)
        except PersistenceError as e:
            logger.warning(f"Realtime stream for {self.conversation_id} ended: {e}")

    def start(self) -> None:
        self._realtime_wanted = True
        if not self.conversation_id:
            # Subscribed once the first turn assigns the conversation
            logger.debug("No conversation yet, deferring realtime subscription")
            return
        if self._realtime_task is None or self._realtime_task.done():
            self._realtime_task = asyncio.create_task(self._consume_realtime())

    def _resubscribe(self) -> None:
        if not self._realtime_wanted:
            return
        if self._realtime_task is not None:
            self._realtime_task.cancel()
            self._realtime_task = None
        self.start()

    async def close(self) -> None:
        self._realtime_wanted = False
        if self._realtime_task is not None:
            self._realtime_task.cancel()
            try:
                await self._realtime_task
            except asyncio.CancelledError:
                pass
            self._realtime_task = None
