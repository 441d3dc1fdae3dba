from abc import ABC, abstractmethod
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Optional

import httpx

from app.core.errors import ProviderError


class GenerativeBackend(ABC):
    """A text-generation provider. ``name`` labels logs and metrics."""

    name: str = "unknown"

    @abstractmethod
    async def complete(self, system_prompt: str, user_prompt: str) -> str:
        """
        Generate a completion.
        :param system_prompt: Instruction describing the expected JSON envelope
        :param user_prompt: The user's prompt with the mention removed
        :return: Raw model output text
        :raises ProviderError: on any upstream or transport failure
        """
        pass


def parse_retry_after(value: Optional[str]) -> Optional[float]:
    """Retry-After as seconds; accepts delta-seconds or an HTTP date."""
    if not value:
        return None
    try:
        return max(float(value), 0.0)
    except ValueError:
        pass
    try:
        when = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return None
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    return max((when - datetime.now(timezone.utc)).total_seconds(), 0.0)


def error_from_response(provider: str, response: httpx.Response) -> ProviderError:
    """
    Build a ProviderError for a non-2xx answer.

    The message keeps "HTTP <status>" and the upstream error text so the
    retry policy can classify it.
    """
    detail = ""
    try:
        body = response.json()
        error = body.get("error") if isinstance(body, dict) else None
        if isinstance(error, dict):
            detail = error.get("message") or ""
        elif isinstance(error, str):
            detail = error
    except ValueError:
        detail = response.text[:200]
    message = f"{provider} HTTP {response.status_code}"
    if detail:
        message = f"{message}: {detail}"
    return ProviderError(
        message,
        provider=provider,
        status_code=response.status_code,
        retry_after=parse_retry_after(response.headers.get("retry-after")),
    )


def error_from_transport(provider: str, exc: httpx.HTTPError) -> ProviderError:
    if isinstance(exc, httpx.TimeoutException):
        return ProviderError(f"{provider} network error: request timed out", provider=provider)
    return ProviderError(f"{provider} network error: {exc}", provider=provider)
