from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from app.schemas.project import ProjectResponse


class InvitationCreate(BaseModel):
    project_id: str = Field(..., alias="projectId")
    recipient_id: str = Field(..., alias="recipientId")

    class Config:
        populate_by_name = True


class InvitationResponse(BaseModel):
    id: str = Field(..., alias="_id")
    project_id: str
    project_name: Optional[str] = None
    sender_id: str
    sender_email: Optional[str] = None
    recipient_id: str
    status: str
    created_at: datetime
    responded_at: Optional[datetime] = None

    class Config:
        populate_by_name = True


class InvitationAcceptResponse(BaseModel):
    invitation: InvitationResponse
    project: ProjectResponse
