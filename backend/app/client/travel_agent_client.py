# backend/app/client/travel_agent_client.py

import json
from typing import AsyncIterator, Dict, List, Optional

import httpx
from pydantic import ValidationError

from app.core.errors import DispatchError, PersistenceError
from app.core.logger import get_logger
from app.models.conversation_models import ChatResponse, MessageOut


logger = get_logger("client.http")


class TravelAgentClient:
    """
    HTTP transport for the session coordinator: dispatch endpoint, history
    reload and the SSE realtime stream.
    """

    def __init__(
        self,
        base_url: str,
        access_token: Optional[str] = None,
        http: Optional[httpx.AsyncClient] = None,
        timeout: float = 60.0,
    ):
        headers = {"Authorization": f"Bearer {access_token}"} if access_token else {}
        self.http = http or httpx.AsyncClient(base_url=base_url.rstrip("/"), headers=headers, timeout=timeout)

    async def aclose(self) -> None:
        await self.http.aclose()

    async def dispatch(self, text: str, conversation_id: Optional[str]) -> ChatResponse:
        try:
            response = await self.http.post(
                "/travel-agent",
                json={"message": text, "conversationId": conversation_id or "", "interrupt": False},
            )
        except httpx.HTTPError as e:
            raise DispatchError(f"dispatch request failed: {e}") from e

        if response.is_error:
            try:
                reason = response.json().get("error", response.text)
            except ValueError:
                reason = response.text
            raise DispatchError(reason, response.status_code)

        try:
            return ChatResponse.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise DispatchError(f"unexpected dispatch response: {e}", response.status_code) from e

    async def load_messages(self, conversation_id: str) -> List[MessageOut]:
        try:
            response = await self.http.get(f"/conversations/{conversation_id}/messages")
            response.raise_for_status()
            return [MessageOut.model_validate(item) for item in response.json()]
        except (httpx.HTTPError, ValueError, ValidationError) as e:
            raise PersistenceError(f"could not load messages: {e}") from e

    async def stream_messages(self, conversation_id: str) -> AsyncIterator[MessageOut]:
        """Yield every message pushed on the conversation's SSE stream."""
        try:
            async with self.http.stream(
                "GET", f"/conversations/{conversation_id}/stream", timeout=None
            ) as response:
                response.raise_for_status()
                event: Dict[str, str] = {}
                async for line in response.aiter_lines():
                    if line:
                        field, _, value = line.partition(":")
                        event[field] = value.lstrip()
                        continue
                    if event.get("event") == "message" and "data" in event:
                        try:
                            yield MessageOut.model_validate(json.loads(event["data"]))
                        except (ValueError, ValidationError) as e:
                            logger.warning(f"Skipping malformed realtime event: {e}")
                    event = {}
        except httpx.HTTPError as e:
            raise PersistenceError(f"realtime stream failed: {e}") from e
