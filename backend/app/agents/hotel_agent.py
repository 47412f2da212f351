# backend/app/agents/hotel_agent.py

from app.agents.base_agent import BaseAgent
from app.models.agent_models import AgentStatus, AgentType, StatusRecord


SYSTEM_PROMPT = """You are a Hotel Search Specialist. Be brief and direct.

Format:
## Hotels in [Location]

**[Hotel]** ⭐⭐⭐⭐
- **$XXX/night** | [Area]
- WiFi, Pool, Gym

Keep responses under 150 words. List 2-3 best options with only essential info: price, location, key amenities. No lengthy descriptions."""


class HotelAgent(BaseAgent):
    agent_type = AgentType.HOTEL
    status = StatusRecord(
        agent_type=AgentType.HOTEL,
        agent_status=AgentStatus.SEARCHING,
        content="Searching for hotels...",
    )
    system_prompt = SYSTEM_PROMPT
