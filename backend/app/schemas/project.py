from datetime import datetime
from typing import Any, Dict, List

from pydantic import BaseModel, Field, field_validator

from app.core.constants import PROJECT_NAME_MAX_LENGTH, PROJECT_NAME_MIN_LENGTH


class ProjectCreate(BaseModel):
    name: str

    @field_validator("name")
    @classmethod
    def normalize_name(cls, v: str) -> str:
        v = v.strip().lower()
        if not PROJECT_NAME_MIN_LENGTH <= len(v) <= PROJECT_NAME_MAX_LENGTH:
            raise ValueError(
                f"Project name must be between {PROJECT_NAME_MIN_LENGTH} "
                f"and {PROJECT_NAME_MAX_LENGTH} characters"
            )
        return v


class ProjectAddMembers(BaseModel):
    user_ids: List[str] = Field(..., alias="userIds", min_length=1)

    class Config:
        populate_by_name = True


class FileTreeUpdate(BaseModel):
    file_tree: Dict[str, Any] = Field(..., alias="fileTree")

    class Config:
        populate_by_name = True


class ProjectMemberInfo(BaseModel):
    id: str = Field(..., alias="_id")
    email: str

    class Config:
        populate_by_name = True


class ProjectResponse(BaseModel):
    id: str = Field(..., alias="_id")
    name: str
    owner_id: str
    member_ids: List[str] = []
    members: List[ProjectMemberInfo] = []
    file_tree: Dict[str, Any] = Field(default_factory=dict)
    created_at: datetime
    updated_at: datetime

    class Config:
        populate_by_name = True
