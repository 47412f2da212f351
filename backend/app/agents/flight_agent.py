# backend/app/agents/flight_agent.py

import asyncio
from typing import List

from app.agents.base_agent import BaseAgent, DispatchContext
from app.core.errors import TravelAgentError
from app.core.logger import logger
from app.models.agent_models import AgentStatus, AgentType, HandlerResult, HistoryEntry, StatusRecord
from app.models.result_models import FlightResults
from app.services.flight_service import FlightOffer
from app.utils.flight_query_extractor import extract_flight_query
from app.utils.structured_content import embed_structured_block


SHOWN_OFFERS = 3

LIVE_RESULTS_PROMPT = """You are a Flight Search Specialist. Here are real-time flight results from Amadeus:

{results}

Present these results in a clear, brief format. Add any relevant travel tips or recommendations."""

NO_LIVE_DATA_PROMPT = """You are a Flight Search Specialist. Be brief and focused.

Format:
## Flights: [Origin] → [Destination]

**Option 1** - [Airline]
- **$XXX** | Xh Xm | Direct/1 stop

Keep responses under 150 words. List 2-3 best options with only essential details: price, duration, stops. Skip verbose descriptions."""


class FlightAgent(BaseAgent):
    """
    Flight answers, enriched with live Amadeus offers when the message names a
    route. Any gateway failure means "no live data": the agent answers from
    the generation provider alone and the user never sees the failure.
    """

    agent_type = AgentType.FLIGHT
    status = StatusRecord(
        agent_type=AgentType.FLIGHT,
        agent_status=AgentStatus.SEARCHING,
        content="Searching for flights...",
    )

    def live_offers(self, message: str, context: DispatchContext) -> List[FlightOffer]:
        query = extract_flight_query(message, context.today())
        if query is None:
            logger.info("No route found in message, skipping live flight search")
            return []

        try:
            service = context.flight_service()
            offers = service.search_offers(query.origin, query.destination, query.date, query.adults)
        except TravelAgentError as e:
            logger.warning(f"Flight gateway unavailable, answering without live data: {e}")
            return []

        if not offers:
            logger.info(f"No offers for {query.origin} -> {query.destination} on {query.date}")
        return offers[:SHOWN_OFFERS]

    async def handle(self, message: str, history: List[HistoryEntry], context: DispatchContext) -> HandlerResult:
        offers = await asyncio.to_thread(self.live_offers, message, context)

        if offers:
            prompt = LIVE_RESULTS_PROMPT.format(results="\n\n".join(offer.summary() for offer in offers))
        else:
            prompt = NO_LIVE_DATA_PROMPT

        response = await context.model.generate(prompt, history, message)

        if not offers:
            return HandlerResult(response=response, agent_type=self.agent_type)

        metadata = FlightResults(results=[offer.to_result() for offer in offers])
        return HandlerResult(
            response=embed_structured_block(response, metadata),
            agent_type=self.agent_type,
            metadata=metadata,
        )
