"""
Gemini Backend

Secondary provider, called through the Generative Language REST API
(``models/{model}:generateContent``).
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


class GeminiBackend(GenerativeBackend):
    name = "gemini"

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
        self.model = model or settings.GEMINI_MODEL
        self.base_url = (base_url or settings.GEMINI_BASE_URL).rstrip("/")
        self.temperature = settings.AI_TEMPERATURE if temperature is None else temperature
        self.max_tokens = max_tokens or settings.AI_MAX_TOKENS
        self.timeout = timeout or settings.AI_REQUEST_TIMEOUT_SECONDS
        self._transport = transport

    async def complete(self, system_prompt: str, user_prompt: str) -> str:
        url = f"{self.base_url}/models/{self.model}:generateContent"
        headers = {
            "x-goog-api-key": self.api_key,
            "Content-Type": "application/json",
        }
        payload = {
            "systemInstruction": {"parts": [{"text": system_prompt}]},
            "contents": [{"role": "user", "parts": [{"text": user_prompt}]}],
            "generationConfig": {
                "temperature": self.temperature,
                "maxOutputTokens": self.max_tokens,
            },
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
        except ValueError as e:
            raise ProviderError(f"gemini returned an unreadable body: {e}", provider=self.name)

        candidates = data.get("candidates") or []
        if not candidates:
            reason = (data.get("promptFeedback") or {}).get("blockReason", "no candidates")
            raise ProviderError(f"gemini returned no candidates: {reason}", provider=self.name)

        parts = (candidates[0].get("content") or {}).get("parts") or []
        text = "".join(part.get("text", "") for part in parts)
        logger.debug(f"Gemini completion received ({len(text)} chars)")
        return text
