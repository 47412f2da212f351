# backend/app/models/conversation_models.py

from pydantic import BaseModel, ConfigDict, Field
from typing import Optional

from app.models.agent_models import AgentStatus, AgentType, Role
from app.models.result_models import ResultMetadata


class ConversationOut(BaseModel):
    id: str
    user_id: str
    created_at: str


class NewMessage(BaseModel):
    """A message before the log assigns it an id and a timestamp."""
    conversation_id: str
    role: Role
    content: str
    agent_type: Optional[AgentType] = None
    agent_status: Optional[AgentStatus] = None
    metadata: Optional[ResultMetadata] = None


class MessageOut(NewMessage):
    id: str
    created_at: str


# --------------------------
# Dispatch endpoint
# --------------------------
class ChatRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str
    conversation_id: Optional[str] = Field(default=None, alias="conversationId")
    interrupt: bool = False


class ChatResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    response: str
    agent: AgentType
    conversation_id: str = Field(alias="conversationId")


class ErrorResponse(BaseModel):
    error: str
