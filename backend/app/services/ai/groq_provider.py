"""
Groq Backend

Primary provider. Groq exposes an OpenAI-compatible chat completions API.
"""

import logging
from typing import Optional

import httpx

from app.core.config import settings
from app.core.errors import ProviderError
from app.services.ai.base import (
    GenerativeBackend,
    error_from_response,
    error_from_transport,
)

logger = logging.getLogger(__name__)


class GroqBackend(GenerativeBackend):
    name = "groq"

    def __init__(
        self,
        api_key: str,
        model: Optional[str] = None,
        base_url: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.model = model or settings.GROQ_MODEL
        self.base_url = (base_url or settings.GROQ_BASE_URL).rstrip("/")
        self.temperature = settings.AI_TEMPERATURE if temperature is None else temperature
        self.max_tokens = max_tokens or settings.AI_MAX_TOKENS
        self.timeout = timeout or settings.AI_REQUEST_TIMEOUT_SECONDS
        self._transport = transport

    async def complete(self, system_prompt: str, user_prompt: str) -> str:
        url = f"{self.base_url}/chat/completions"
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
        }

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport
            ) as client:
                response = await client.post(url, headers=headers, json=payload)
        except httpx.HTTPError as e:
            raise error_from_transport(self.name, e)

        if response.status_code >= 400:
            raise error_from_response(self.name, response)

        try:
            data = response.json()
            choices = data.get("choices") or []
            content = (choices[0].get("message") or {}).get("content") if choices else None
        except (ValueError, AttributeError) as e:
            raise ProviderError(f"groq returned an unreadable body: {e}", provider=self.name)

        if not content:
            raise ProviderError("groq returned an empty completion", provider=self.name)

        logger.debug(f"Groq completion received ({len(content)} chars)")
        return content
