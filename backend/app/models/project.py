from pydantic import BaseModel, Field, field_validator
from typing import Any, Dict, List
from datetime import datetime, timezone
import uuid

from app.core import ensure_utc

class Project(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()), alias="_id")
    name: str
    owner_id: str
    # The owner is always part of member_ids
    member_ids: List[str] = []
    # {"<filename>": {"file": {"contents": "..."}}}
    file_tree: Dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    class Config:
        populate_by_name = True
        arbitrary_types_allowed = True

    @field_validator("created_at", "updated_at")
    @classmethod
    def as_utc(cls, v):
        return ensure_utc(v)

    def is_owner(self, user_id: str) -> bool:
        return self.owner_id == user_id

    def is_member(self, user_id: str) -> bool:
        """Owner or listed member."""
        return self.is_owner(user_id) or user_id in self.member_ids
