# backend/app/models/agent_models.py

from enum import Enum
from typing import Optional

from pydantic import BaseModel

from app.models.result_models import ResultMetadata


class Intent(str, Enum):
    FLIGHT = "flight"
    HOTEL = "hotel"
    GENERAL = "general"
    BOTH = "both"   # never produced by keyword classification; routes to coordinator


class AgentType(str, Enum):
    COORDINATOR = "coordinator"
    FLIGHT = "flight"
    HOTEL = "hotel"


class AgentStatus(str, Enum):
    THINKING = "thinking"
    SEARCHING = "searching"
    COMPLETED = "completed"
    INTERRUPTED = "interrupted"


class Role(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"
    AGENT = "agent"


# ----------------------------------------------------------
# EXPLICIT CONFIGURATION RECORD (handed to every handler)
# ----------------------------------------------------------
class DispatchConfig(BaseModel):
    amadeus_api_key: str = ""
    amadeus_api_secret: str = ""
    amadeus_base_url: str = "https://test.api.amadeus.com"
    flight_timeout_seconds: float = 20.0

    llm_api_key: str = ""
    llm_base_url: Optional[str] = None
    llm_model: str = "gpt-4o-mini"
    llm_timeout_seconds: float = 30.0

    search_timezone: str = "UTC"

    @classmethod
    def from_settings(cls, settings) -> "DispatchConfig":
        return cls(
            amadeus_api_key=settings.AMADEUS_API_KEY,
            amadeus_api_secret=settings.AMADEUS_API_SECRET,
            amadeus_base_url=settings.AMADEUS_BASE_URL,
            flight_timeout_seconds=settings.FLIGHT_TIMEOUT_SECONDS,
            llm_api_key=settings.LLM_API_KEY,
            llm_base_url=settings.LLM_BASE_URL,
            llm_model=settings.LLM_MODEL,
            llm_timeout_seconds=settings.LLM_TIMEOUT_SECONDS,
            search_timezone=settings.SEARCH_TIMEZONE,
        )


class HistoryEntry(BaseModel):
    """Prior conversation message as the generation provider sees it."""
    role: str
    content: str


class StatusRecord(BaseModel):
    """Interim status a handler announces before it starts working."""
    agent_type: AgentType
    agent_status: AgentStatus
    content: str


class HandlerResult(BaseModel):
    response: str
    agent_type: AgentType
    metadata: Optional[ResultMetadata] = None
