"""
AI Response Orchestrator

Turns a chat prompt into a response envelope. Providers are tried in order
(primary, then secondary) inside each attempt; failed attempts are
classified from the error message and either retried with exponential
backoff or turned into an error envelope.
"""

import asyncio
import logging
from typing import Awaitable, Callable, List, Optional

import httpx

from app.core.constants import (
    AI_AUTH_MARKERS,
    AI_EMPTY_PROMPT_REPLY,
    AI_ERROR_AUTH,
    AI_ERROR_NETWORK,
    AI_ERROR_QUOTA,
    AI_ERROR_UNKNOWN,
    AI_NETWORK_MARKERS,
    AI_QUOTA_MARKERS,
)
from app.core.errors import NoProviderConfiguredError, ProviderError
from app.core.metrics import ai_retries_total, track_ai_call
from app.schemas.ai import AIEnvelope, ChatEnvelope
from app.services.ai.base import GenerativeBackend
from app.services.ai.gemini_provider import GeminiBackend
from app.services.ai.groq_provider import GroqBackend
from app.services.ai.parsing import parse_envelope
from app.services.ai.prompts import SYSTEM_INSTRUCTION

logger = logging.getLogger(__name__)

QUOTA_EXCEEDED_REPLY = (
    "**API Quota Exceeded**\n\n"
    "All AI services are currently at their rate limit.\n"
    "Please try again in a few minutes."
)
AUTH_FAILED_REPLY = (
    "**API Key Error**\n\n"
    "Please check the AI API keys in the server configuration:\n"
    "- GROQ_API_KEY\n"
    "- GOOGLE_AI_KEY"
)
NETWORK_FAILED_REPLY = "**Network Error**\n\nThe AI service could not be reached."
UNKNOWN_FAILED_REPLY = (
    "**AI Service Error**\n\n"
    "The AI service is currently unavailable.\n"
    "Please try again later.\n\n"
    "Error: {error}"
)

SleepFunc = Callable[[float], Awaitable[None]]


def classify_error(message: str) -> str:
    """Map an upstream error message to quota, auth, network or unknown."""
    lowered = (message or "").lower()
    if any(marker in lowered for marker in AI_QUOTA_MARKERS):
        return AI_ERROR_QUOTA
    if any(marker in lowered for marker in AI_AUTH_MARKERS):
        return AI_ERROR_AUTH
    if any(marker in lowered for marker in AI_NETWORK_MARKERS):
        return AI_ERROR_NETWORK
    return AI_ERROR_UNKNOWN


class AIService:
    def __init__(
        self,
        primary: Optional[GenerativeBackend] = None,
        secondary: Optional[GenerativeBackend] = None,
        max_retries: int = 2,
        retry_base_seconds: float = 2.0,
        retry_max_seconds: float = 30.0,
        request_timeout: float = 60.0,
        mention_token: str = "@ai",
        system_prompt: str = SYSTEM_INSTRUCTION,
        sleep: SleepFunc = asyncio.sleep,
    ):
        self.primary = primary
        self.secondary = secondary
        self.max_retries = max(1, max_retries)
        self.retry_base_seconds = retry_base_seconds
        self.retry_max_seconds = retry_max_seconds
        self.request_timeout = request_timeout
        self.mention_token = mention_token
        self.system_prompt = system_prompt
        self._sleep = sleep

    @classmethod
    def from_settings(
        cls, settings, transport: Optional[httpx.AsyncBaseTransport] = None
    ) -> "AIService":
        """Build the service with whichever providers have an API key."""
        primary = None
        secondary = None
        if settings.GROQ_API_KEY:
            primary = GroqBackend(settings.GROQ_API_KEY, transport=transport)
        if settings.GOOGLE_AI_KEY:
            secondary = GeminiBackend(settings.GOOGLE_AI_KEY, transport=transport)
        if primary is None and secondary is None:
            logger.warning("No AI API keys configured; AI mentions will report an error")
        return cls(
            primary=primary,
            secondary=secondary,
            max_retries=settings.AI_MAX_RETRIES,
            retry_base_seconds=settings.AI_RETRY_BASE_SECONDS,
            retry_max_seconds=settings.AI_RETRY_MAX_SECONDS,
            request_timeout=settings.AI_REQUEST_TIMEOUT_SECONDS,
            mention_token=settings.AI_MENTION_TOKEN,
        )

    @property
    def backends(self) -> List[GenerativeBackend]:
        return [b for b in (self.primary, self.secondary) if b is not None]

    def mentions_ai(self, message: str) -> bool:
        return self.mention_token in message

    def extract_prompt(self, message: str) -> str:
        """Drop the first mention and trim what is left."""
        return message.replace(self.mention_token, "", 1).strip()

    def empty_prompt_reply(self) -> ChatEnvelope:
        return ChatEnvelope(text=AI_EMPTY_PROMPT_REPLY.format(mention=self.mention_token))

    def backoff_delay(self, attempt: int, retry_after: Optional[float] = None) -> float:
        """base * 2^attempt, or the provider's Retry-After hint; both capped."""
        if retry_after is not None:
            return min(retry_after, self.retry_max_seconds)
        return min(self.retry_base_seconds * (2**attempt), self.retry_max_seconds)

    async def generate(self, prompt: str) -> AIEnvelope:
        """
        Produce an envelope for the prompt.

        Never raises for upstream failures; those become chat envelopes with
        ``error=True``. Raises NoProviderConfiguredError if no backend exists.
        """
        if not prompt or not prompt.strip():
            return self.empty_prompt_reply()

        if not self.backends:
            raise NoProviderConfiguredError()

        for attempt in range(self.max_retries):
            is_last_attempt = attempt == self.max_retries - 1
            try:
                raw = await self._complete_with_fallback(prompt)
                return parse_envelope(raw)
            except Exception as e:
                message = str(e)
                error_type = classify_error(message)
                logger.error(
                    f"AI generation error (attempt {attempt + 1}/{self.max_retries}, "
                    f"{error_type}): {message}"
                )

                if error_type == AI_ERROR_AUTH:
                    return ChatEnvelope(
                        text=AUTH_FAILED_REPLY, error=True, error_type=AI_ERROR_AUTH
                    )

                if is_last_attempt:
                    return self._exhausted_reply(error_type, message)

                delay = self.backoff_delay(attempt, getattr(e, "retry_after", None))
                ai_retries_total.labels(error_type=error_type).inc()
                logger.info(f"Retrying AI request in {delay:.1f}s ({error_type})")
                await self._sleep(delay)

        # Unreachable: the last attempt always returns
        return self._exhausted_reply(AI_ERROR_UNKNOWN, "retries exhausted")

    def _exhausted_reply(self, error_type: str, message: str) -> ChatEnvelope:
        if error_type == AI_ERROR_QUOTA:
            return ChatEnvelope(
                text=QUOTA_EXCEEDED_REPLY, error=True, error_type=AI_ERROR_QUOTA
            )
        if error_type == AI_ERROR_NETWORK:
            return ChatEnvelope(
                text=NETWORK_FAILED_REPLY, error=True, error_type=AI_ERROR_NETWORK
            )
        return ChatEnvelope(
            text=UNKNOWN_FAILED_REPLY.format(error=message),
            error=True,
            error_type=AI_ERROR_UNKNOWN,
            error_message=message,
        )

    async def _complete_with_fallback(self, prompt: str) -> str:
        if self.primary is not None:
            try:
                return await self._call(self.primary, prompt)
            except Exception as e:
                if self.secondary is None:
                    raise
                logger.warning(
                    f"{self.primary.name} failed ({e}); falling back to {self.secondary.name}"
                )
        return await self._call(self.secondary, prompt)

    async def _call(self, backend: GenerativeBackend, prompt: str) -> str:
        with track_ai_call(backend.name):
            try:
                return await asyncio.wait_for(
                    backend.complete(self.system_prompt, prompt),
                    timeout=self.request_timeout,
                )
            except asyncio.TimeoutError:
                raise ProviderError(
                    f"{backend.name} network error: no answer within {self.request_timeout}s",
                    provider=backend.name,
                )
