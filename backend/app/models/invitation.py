from pydantic import BaseModel, Field, field_validator
from typing import Literal, Optional
from datetime import datetime, timezone
import uuid

from app.core import ensure_utc
from app.core.constants import INVITATION_STATUS_PENDING

class Invitation(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()), alias="_id")
    project_id: str
    sender_id: str
    recipient_id: str
    status: Literal["pending", "accepted", "rejected"] = INVITATION_STATUS_PENDING
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    responded_at: Optional[datetime] = None

    class Config:
        populate_by_name = True
        arbitrary_types_allowed = True

    @field_validator("created_at", "responded_at")
    @classmethod
    def as_utc(cls, v):
        return ensure_utc(v)

    @property
    def is_pending(self) -> bool:
        return self.status == INVITATION_STATUS_PENDING
