"""
Repository Pattern for Database Access

Provides a clean abstraction layer over MongoDB collections,
centralizing database operations and reducing code duplication.
"""

from app.repositories.invitations import InvitationRepository
from app.repositories.projects import ProjectRepository
from app.repositories.users import UserRepository

__all__ = [
    "InvitationRepository",
    "ProjectRepository",
    "UserRepository",
]
