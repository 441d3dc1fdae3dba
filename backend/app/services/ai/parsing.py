import json
import logging
import re

from pydantic import ValidationError

from app.core.constants import AI_PARSE_NOTE
from app.schemas.ai import AIEnvelope, ChatEnvelope, envelope_adapter

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"```(?:json)?\n?")


def strip_fences(text: str) -> str:
    """Remove markdown code fences some models wrap around their JSON."""
    return _FENCE_RE.sub("", text).strip()


def parse_envelope(raw: str) -> AIEnvelope:
    """
    Turn raw model output into a validated envelope.

    Output that is not JSON, or JSON that does not match one of the
    envelope shapes, becomes a chat envelope carrying the raw text.
    """
    try:
        data = json.loads(strip_fences(raw))
        return envelope_adapter.validate_python(data)
    except (ValueError, ValidationError) as e:
        logger.warning(f"AI response did not match the envelope schema: {e}")
        return ChatEnvelope(text=raw, error=False, note=AI_PARSE_NOTE)
