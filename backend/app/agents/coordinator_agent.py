# backend/app/agents/coordinator_agent.py

from app.agents.base_agent import BaseAgent
from app.models.agent_models import AgentStatus, AgentType, StatusRecord


SYSTEM_PROMPT = """You are a Travel Planning Coordinator. Be brief and direct.

Format rules:
- Keep responses under 100 words when possible
- Use **bold** for key details only
- Use bullet points for options
- Use ## for section headings
- Get straight to the point

Provide clear, actionable advice without extra explanations."""


class CoordinatorAgent(BaseAgent):
    """General trip planning, and any turn that touches both flights and hotels."""

    agent_type = AgentType.COORDINATOR
    status = StatusRecord(
        agent_type=AgentType.COORDINATOR,
        agent_status=AgentStatus.THINKING,
        content="Analyzing your request...",
    )
    system_prompt = SYSTEM_PROMPT
