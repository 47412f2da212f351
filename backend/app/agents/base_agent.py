# backend/app/agents/base_agent.py

from dataclasses import dataclass, field
from datetime import date
from typing import Callable, List, Optional

from app.core.llm import AdvisoryModel
from app.models.agent_models import AgentType, DispatchConfig, HandlerResult, HistoryEntry, StatusRecord
from app.services.flight_service import FlightService
from app.utils.time_utils import today_in


@dataclass
class DispatchContext:
    """
    Everything a handler may touch during one turn.

    Built per dispatch from an explicit DispatchConfig; handlers never read
    settings or the environment themselves, and never persist anything.
    """

    config: DispatchConfig
    model: Optional[AdvisoryModel] = None
    flight_service_factory: Optional[Callable[[DispatchConfig], FlightService]] = None
    clock: Optional[Callable[[], date]] = None
    conversation_id: Optional[str] = None

    def __post_init__(self):
        if self.model is None:
            self.model = AdvisoryModel(self.config)
        if self.flight_service_factory is None:
            self.flight_service_factory = FlightService

    def flight_service(self) -> FlightService:
        # New gateway (and provider token) for every dispatch
        return self.flight_service_factory(self.config)

    def today(self) -> date:
        if self.clock is not None:
            return self.clock()
        return today_in(self.config.search_timezone)


class BaseAgent:
    agent_type: AgentType
    status: StatusRecord
    system_prompt: str = ""

    async def handle(self, message: str, history: List[HistoryEntry], context: DispatchContext) -> HandlerResult:
        response = await context.model.generate(self.system_prompt, history, message)
        return HandlerResult(response=response, agent_type=self.agent_type)
