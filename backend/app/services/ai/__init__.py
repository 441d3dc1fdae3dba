from app.services.ai.base import GenerativeBackend
from app.services.ai.gemini_provider import GeminiBackend
from app.services.ai.groq_provider import GroqBackend
from app.services.ai.parsing import parse_envelope
from app.services.ai.service import AIService, classify_error

__all__ = [
    "AIService",
    "GenerativeBackend",
    "GeminiBackend",
    "GroqBackend",
    "classify_error",
    "parse_envelope",
]
