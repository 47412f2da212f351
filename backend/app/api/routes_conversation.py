# backend/app/api/routes_conversation.py

import asyncio
import json
from typing import List, Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Request
from fastapi.responses import StreamingResponse
from pydantic import BaseModel

from app.api.dependencies import get_conversation_log
from app.core.logger import logger
from app.core.security import user_id_from_header
from app.db.conversation_log import ConversationLog, utc_now_iso
from app.models.conversation_models import ConversationOut, MessageOut

router = APIRouter(prefix="/conversations", tags=["conversations"])

HEARTBEAT_SECONDS = 15


class SSEEvent(BaseModel):
    event: str
    data: str
    id: Optional[str] = None

    def format(self) -> str:
        lines = []
        if self.id:
            lines.append(f"id: {self.id}")
        lines.append(f"event: {self.event}")
        lines.append(f"data: {self.data}")
        return "\n".join(lines) + "\n\n"


def _require_conversation(log: ConversationLog, conversation_id: str) -> ConversationOut:
    conversation = log.get_conversation(conversation_id)
    if not conversation:
        raise HTTPException(404, "Conversation not found")
    return conversation


# --------------------------
# Create conversation
# --------------------------
@router.post("", response_model=ConversationOut)
def create_conversation(
    authorization: Optional[str] = Header(None),
    log: ConversationLog = Depends(get_conversation_log),
):
    return log.create_conversation(user_id_from_header(authorization))


# --------------------------
# Full history (reload)
# --------------------------
@router.get("/{conversation_id}/messages", response_model=List[MessageOut])
def get_messages(conversation_id: str, log: ConversationLog = Depends(get_conversation_log)):
    _require_conversation(log, conversation_id)
    return log.get_messages(conversation_id)


# --------------------------
# Realtime: every appended message as an SSE "message" event
# --------------------------
async def _event_stream(request: Request, log: ConversationLog, conversation_id: str):
    loop = asyncio.get_running_loop()
    queue: asyncio.Queue = asyncio.Queue()

    handle = log.subscribe(
        conversation_id,
        lambda message: loop.call_soon_threadsafe(queue.put_nowait, message),
    )
    logger.info(f"Realtime stream opened for conversation {conversation_id}")

    try:
        yield SSEEvent(event="connected", data=json.dumps({"conversation_id": conversation_id})).format()

        while True:
            if await request.is_disconnected():
                break
            try:
                message = await asyncio.wait_for(queue.get(), timeout=HEARTBEAT_SECONDS)
            except asyncio.TimeoutError:
                yield SSEEvent(event="heartbeat", data=json.dumps({"at": utc_now_iso()})).format()
                continue
            yield SSEEvent(event="message", data=message.model_dump_json(), id=message.id).format()
    finally:
        log.unsubscribe(handle)
        logger.info(f"Realtime stream closed for conversation {conversation_id}")


@router.get("/{conversation_id}/stream", response_class=StreamingResponse)
async def stream_messages(
    conversation_id: str,
    request: Request,
    log: ConversationLog = Depends(get_conversation_log),
):
    _require_conversation(log, conversation_id)
    return StreamingResponse(
        _event_stream(request, log, conversation_id),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )
