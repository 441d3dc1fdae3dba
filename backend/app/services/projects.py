"""
Project Service

Project lifecycle and membership. Authorization rules:
members may read and save the file tree, only the owner adds members or
deletes, anyone may remove themselves, and the owner cannot be removed.
"""

import logging
from typing import Any, Dict, List

from motor.motor_asyncio import AsyncIOMotorDatabase

from app.core.errors import (
    ForbiddenError,
    NotAuthorizedError,
    ProjectNotFoundError,
    UserNotFoundError,
    ValidationFailedError,
)
from app.models.project import Project
from app.repositories.invitations import InvitationRepository
from app.repositories.projects import ProjectRepository
from app.repositories.users import UserRepository

logger = logging.getLogger(__name__)


class ProjectService:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.projects = ProjectRepository(db)
        self.users = UserRepository(db)
        self.invitations = InvitationRepository(db)

    async def create(self, name: str, owner_id: str) -> Project:
        project = Project(name=name, owner_id=owner_id, member_ids=[owner_id])
        await self.projects.create(project)
        logger.info(f"Project {project.id} created by {owner_id}")
        return project

    async def list_for_user(self, user_id: str) -> List[Project]:
        return await self.projects.find_for_member(user_id)

    async def get_for_member(self, project_id: str, user_id: str) -> Project:
        """Fetch a project the user belongs to."""
        project = await self.projects.get_by_id(project_id)
        if project is None:
            raise ProjectNotFoundError()
        if not project.is_member(user_id):
            raise NotAuthorizedError()
        return project

    async def get_for_owner(self, project_id: str, user_id: str) -> Project:
        project = await self.get_for_member(project_id, user_id)
        if not project.is_owner(user_id):
            raise ForbiddenError("Only the project owner can do this")
        return project

    async def add_members(
        self, project_id: str, requester_id: str, user_ids: List[str]
    ) -> Project:
        project = await self.get_for_owner(project_id, requester_id)

        unique_ids = list(dict.fromkeys(user_ids))
        if await self.users.count_by_ids(unique_ids) != len(unique_ids):
            raise UserNotFoundError("One or more users not found")

        new_ids = [uid for uid in unique_ids if not project.is_member(uid)]
        if not new_ids:
            raise ValidationFailedError("All users are already members of this project")

        updated = await self.projects.add_members(project_id, new_ids)
        if updated is None:
            raise ProjectNotFoundError()
        logger.info(f"Added {len(new_ids)} member(s) to project {project_id}")
        return updated

    async def remove_member(
        self, project_id: str, requester_id: str, user_id: str
    ) -> Project:
        project = await self.get_for_member(project_id, requester_id)
        if project.is_owner(user_id):
            raise ValidationFailedError("The project owner cannot be removed")
        if requester_id != user_id and not project.is_owner(requester_id):
            raise ForbiddenError("Only the project owner can remove other members")
        if user_id not in project.member_ids:
            raise UserNotFoundError("User is not a member of this project")

        updated = await self.projects.remove_member(project_id, user_id)
        if updated is None:
            raise ProjectNotFoundError()
        logger.info(f"Removed user {user_id} from project {project_id}")
        return updated

    async def update_file_tree(
        self, project_id: str, user_id: str, file_tree: Dict[str, Any]
    ) -> Project:
        await self.get_for_member(project_id, user_id)
        updated = await self.projects.update_file_tree(project_id, file_tree)
        if updated is None:
            raise ProjectNotFoundError()
        return updated

    async def delete(self, project_id: str, user_id: str) -> None:
        await self.get_for_owner(project_id, user_id)
        await self.projects.delete(project_id)
        removed = await self.invitations.delete_by_project(project_id)
        logger.info(f"Deleted project {project_id} and {removed} invitation(s)")

    async def to_response(self, project: Project) -> Dict[str, Any]:
        """Project document with member emails resolved."""
        members = await self.users.find_by_ids(project.member_ids)
        data = project.model_dump(by_alias=True)
        data["members"] = members
        return data
