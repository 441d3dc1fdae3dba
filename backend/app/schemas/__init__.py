"""
Schema Exports

Centralized export of the Pydantic models used across the application.
"""

from app.schemas.ai import (
    AIEnvelope,
    AIResultResponse,
    ChatEnvelope,
    CodeEnvelope,
    CommandSpec,
    ExplanationEnvelope,
    FileNode,
)
from app.schemas.auth import Identity, LogoutResponse, MessageResponse, TokenResponse
from app.schemas.invitation import (
    InvitationAcceptResponse,
    InvitationCreate,
    InvitationResponse,
)
from app.schemas.project import (
    FileTreeUpdate,
    ProjectAddMembers,
    ProjectCreate,
    ProjectResponse,
)
from app.schemas.realtime import Frame, ProjectMessageIn, TypingIn
from app.schemas.user import UserCreate, UserLogin, UserPublic

__all__ = [
    "AIEnvelope",
    "AIResultResponse",
    "ChatEnvelope",
    "CodeEnvelope",
    "CommandSpec",
    "ExplanationEnvelope",
    "FileNode",
    "Identity",
    "LogoutResponse",
    "MessageResponse",
    "TokenResponse",
    "InvitationAcceptResponse",
    "InvitationCreate",
    "InvitationResponse",
    "FileTreeUpdate",
    "ProjectAddMembers",
    "ProjectCreate",
    "ProjectResponse",
    "Frame",
    "ProjectMessageIn",
    "TypingIn",
    "UserCreate",
    "UserLogin",
    "UserPublic",
]
