# backend/app/agents/turn_dispatcher.py

from typing import Callable, List, Optional

from app.agents.agent_router import AgentRouter
from app.agents.base_agent import DispatchContext
from app.agents.intent_classifier import classify
from app.core.config_loader import settings
from app.core.errors import ConfigurationError, UpstreamError
from app.core.logger import logger
from app.db.conversation_log import ConversationLog
from app.models.agent_models import AgentStatus, DispatchConfig, HistoryEntry, Role
from app.models.conversation_models import ChatResponse, MessageOut, NewMessage


CONVERSATION_ROLES = (Role.USER, Role.ASSISTANT)


def history_for_model(messages: List[MessageOut]) -> List[HistoryEntry]:
    # Interim role=agent status lines are progress markers, not conversation
    return [
        HistoryEntry(role=m.role.value, content=m.content)
        for m in messages
        if m.role in CONVERSATION_ROLES
    ]


class TurnDispatcher:
    """
    Runs one turn end to end and is the only writer to the conversation log:

        user message -> classify -> route -> interim status
        -> handler (flight lookup, generation) -> terminal assistant message

    Execution is strictly sequential. A generation failure propagates after
    the interim status has been written; no terminal message is written for
    that turn. The `interrupt` flag of a request is never acted on here,
    interruption is a client-side concern.
    """

    def __init__(
        self,
        log: ConversationLog,
        router: Optional[AgentRouter] = None,
        config: Optional[DispatchConfig] = None,
        context_factory: Optional[Callable[[DispatchConfig, str], DispatchContext]] = None,
    ):
        self.log = log
        self.router = router or AgentRouter()
        self.config = config or DispatchConfig.from_settings(settings)
        self.context_factory = context_factory or (
            lambda config, conversation_id: DispatchContext(config=config, conversation_id=conversation_id)
        )

    async def dispatch(self, message: str, conversation_id: Optional[str], user_id: str) -> ChatResponse:
        conversation = self.log.ensure_conversation(conversation_id, user_id)
        prior = self.log.get_messages(conversation.id)

        self.log.append(NewMessage(
            conversation_id=conversation.id,
            role=Role.USER,
            content=message,
        ))

        intents = classify(message)
        handler = self.router.select(intents)
        logger.info(
            f"Detected intent: {sorted(i.value for i in intents)} -> {handler.agent_type.value} agent "
            f"(conversation {conversation.id})"
        )

        status = handler.status
        self.log.append(NewMessage(
            conversation_id=conversation.id,
            role=Role.AGENT,
            content=status.content,
            agent_type=status.agent_type,
            agent_status=status.agent_status,
        ))

        context = self.context_factory(self.config, conversation.id)
        try:
            result = await handler.handle(message, history_for_model(prior), context)
        except (ConfigurationError, UpstreamError) as e:
            logger.error(f"{handler.agent_type.value} agent failed for conversation {conversation.id}: {e}")
            raise

        self.log.append(NewMessage(
            conversation_id=conversation.id,
            role=Role.ASSISTANT,
            content=result.response,
            agent_type=result.agent_type,
            agent_status=AgentStatus.COMPLETED,
            metadata=result.metadata,
        ))

        return ChatResponse(
            response=result.response,
            agent=result.agent_type,
            conversation_id=conversation.id,
        )
