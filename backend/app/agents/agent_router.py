# backend/app/agents/agent_router.py

from typing import Dict, Iterable, Optional

from app.agents.coordinator_agent import CoordinatorAgent
from app.agents.flight_agent import FlightAgent
from app.agents.hotel_agent import HotelAgent
from app.models.agent_models import AgentType, Intent


def route(intents: Iterable[Intent]) -> AgentType:
    """
    Stateless per-turn decision table:
    both flight and hotel -> coordinator, flight -> flight,
    hotel -> hotel, anything else -> coordinator.
    """
    intents = set(intents)

    if Intent.BOTH in intents or {Intent.FLIGHT, Intent.HOTEL} <= intents:
        return AgentType.COORDINATOR
    if Intent.FLIGHT in intents:
        return AgentType.FLIGHT
    if Intent.HOTEL in intents:
        return AgentType.HOTEL
    return AgentType.COORDINATOR


class AgentRouter:

    def __init__(self, handlers: Optional[Dict[AgentType, object]] = None):
        self.handlers = handlers or {
            AgentType.COORDINATOR: CoordinatorAgent(),
            AgentType.FLIGHT: FlightAgent(),
            AgentType.HOTEL: HotelAgent(),
        }

    def select(self, intents: Iterable[Intent]):
        return self.handlers[route(intents)]
