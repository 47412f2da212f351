# backend/app/core/llm.py

import asyncio
from typing import Any, Dict, List, Optional

import openai
from openai import OpenAI

from app.core.errors import ConfigurationError, UpstreamError
from app.core.logger import logger
from app.models.agent_models import DispatchConfig, HistoryEntry


# ---------------------------------------------------------------------------
# ADVISORY MODEL: hosted chat-completions provider
# ---------------------------------------------------------------------------
class AdvisoryModel:
    """
    Text generation for every specialist handler.

    The client is built from the explicit DispatchConfig handed to the
    dispatcher, never from process environment. Calls are bounded by
    config.llm_timeout_seconds and never retried: a timeout, a provider error
    or an empty completion is an UpstreamError(source="generation") and fails
    the turn.
    """

    def __init__(self, config: DispatchConfig, client: Optional[Any] = None):
        self.config = config
        self._client = client

    @property
    def client(self):
        if self._client is None:
            if not self.config.llm_api_key:
                raise ConfigurationError("LLM_API_KEY")
            self._client = OpenAI(
                api_key=self.config.llm_api_key,
                base_url=self.config.llm_base_url,
                timeout=self.config.llm_timeout_seconds,
                max_retries=0,
            )
        return self._client

    @staticmethod
    def build_messages(system_prompt: str, history: List[HistoryEntry], latest_message: str) -> List[Dict[str, str]]:
        messages = [{"role": "system", "content": system_prompt}]
        for entry in history:
            messages.append({"role": entry.role, "content": entry.content})
        messages.append({"role": "user", "content": latest_message})
        return messages

    def generate_sync(self, system_prompt: str, history: List[HistoryEntry], latest_message: str) -> str:
        messages = self.build_messages(system_prompt, history, latest_message)
        client = self.client

        try:
            completion = client.chat.completions.create(
                model=self.config.llm_model,
                messages=messages,
                temperature=0.7,
            )
        except openai.APITimeoutError as e:
            logger.error(f"Generation provider timed out after {self.config.llm_timeout_seconds}s")
            raise UpstreamError("generation", "timeout") from e
        except openai.APIStatusError as e:
            logger.error(f"Generation provider error: {e.status_code} {e.message}")
            raise UpstreamError("generation", "Failed to get response from AI", e.status_code) from e
        except openai.APIError as e:
            logger.error(f"Generation provider unreachable: {e}")
            raise UpstreamError("generation", "Failed to get response from AI") from e

        content = completion.choices[0].message.content if completion.choices else None
        if not content:
            logger.error("Generation provider returned an empty completion")
            raise UpstreamError("generation", "empty completion")
        return content

    async def generate(self, system_prompt: str, history: List[HistoryEntry], latest_message: str) -> str:
        return await asyncio.to_thread(self.generate_sync, system_prompt, history, latest_message)
