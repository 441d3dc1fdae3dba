"""
Realtime Frame Schemas

Every WebSocket frame is a JSON object ``{"event": str, "data": any}``.
"""

from typing import Any

from pydantic import BaseModel, Field, StrictBool, StrictStr


class Frame(BaseModel):
    event: StrictStr
    data: Any = None


class ProjectMessageIn(BaseModel):
    # Non-string or empty messages must be rejected, not coerced
    message: StrictStr = Field(..., min_length=1)

    class Config:
        extra = "allow"


class TypingIn(BaseModel):
    is_typing: StrictBool = Field(..., alias="isTyping")

    class Config:
        populate_by_name = True
