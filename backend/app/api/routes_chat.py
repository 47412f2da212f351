# backend/app/api/routes_chat.py

from fastapi import APIRouter, Depends, Header
from fastapi.responses import JSONResponse
from typing import Optional

from app.agents.turn_dispatcher import TurnDispatcher
from app.api.dependencies import get_dispatcher
from app.core.errors import TravelAgentError
from app.core.logger import logger
from app.core.security import user_id_from_header
from app.models.conversation_models import ChatRequest, ChatResponse, ErrorResponse

router = APIRouter(tags=["chat"])


# -----------------------------
# Dispatch endpoint - one turn per call
# -----------------------------
@router.post(
    "/travel-agent",
    summary="Run one conversation turn",
    response_model=ChatResponse,
    response_model_by_alias=True,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def travel_agent(
    req: ChatRequest,
    authorization: Optional[str] = Header(None),
    dispatcher: TurnDispatcher = Depends(get_dispatcher),
):
    """
    Classifies the message, routes it to the coordinator, flight or hotel
    agent and returns the agent's answer. Interim status and the final answer
    are also persisted and pushed to realtime subscribers.
    """
    if not req.message or not req.message.strip():
        return JSONResponse(status_code=400, content={"error": "Message is required"})

    if req.interrupt:
        logger.info("Received interrupt flag; interruption is handled client-side")

    user_id = user_id_from_header(authorization)

    try:
        return await dispatcher.dispatch(req.message, req.conversation_id, user_id)
    except TravelAgentError as e:
        logger.error(f"Error in travel-agent turn: {e}")
        return JSONResponse(status_code=500, content={"error": str(e)})
    except Exception as e:
        # Answered here so the response still passes through the CORS middleware
        logger.exception("Unexpected error in travel-agent turn")
        return JSONResponse(status_code=500, content={"error": str(e) or "Unknown error occurred"})
