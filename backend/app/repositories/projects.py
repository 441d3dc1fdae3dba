"""
Project Repository

Centralizes all database operations for projects. Membership changes go
through single atomic updates ($addToSet / $pull) so concurrent accepts and
removals never lose writes.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from app.core.errors import ConflictError
from app.models.project import Project


class ProjectRepository:
    """Repository for project database operations."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db.projects

    async def get_by_id(self, project_id: str) -> Optional[Project]:
        """Get project by ID."""
        data = await self.collection.find_one({"_id": project_id})
        if data:
            return Project(**data)
        return None

    async def get_by_name(self, name: str) -> Optional[Project]:
        data = await self.collection.find_one({"name": name})
        if data:
            return Project(**data)
        return None

    async def create(self, project: Project) -> Project:
        """Create a new project. Raises ConflictError if the name is taken."""
        try:
            await self.collection.insert_one(project.model_dump(by_alias=True))
        except DuplicateKeyError:
            raise ConflictError("Project name already exists")
        return project

    async def find_for_member(
        self, user_id: str, skip: int = 0, limit: int = 100
    ) -> List[Project]:
        """Projects the user owns or is a member of, newest first."""
        query = {"$or": [{"owner_id": user_id}, {"member_ids": user_id}]}
        cursor = (
            self.collection.find(query)
            .sort("created_at", -1)
            .skip(skip)
            .limit(limit)
        )
        docs = await cursor.to_list(limit)
        return [Project(**doc) for doc in docs]

    async def add_members(self, project_id: str, user_ids: List[str]) -> Optional[Project]:
        """Add users to member_ids (set semantics). Returns the updated project."""
        data = await self.collection.find_one_and_update(
            {"_id": project_id},
            {
                "$addToSet": {"member_ids": {"$each": user_ids}},
                "$set": {"updated_at": datetime.now(timezone.utc)},
            },
            return_document=ReturnDocument.AFTER,
        )
        if data:
            return Project(**data)
        return None

    async def remove_member(self, project_id: str, user_id: str) -> Optional[Project]:
        """Pull a user from member_ids. The owner is never matched."""
        data = await self.collection.find_one_and_update(
            {"_id": project_id, "owner_id": {"$ne": user_id}},
            {
                "$pull": {"member_ids": user_id},
                "$set": {"updated_at": datetime.now(timezone.utc)},
            },
            return_document=ReturnDocument.AFTER,
        )
        if data:
            return Project(**data)
        return None

    async def update_file_tree(
        self, project_id: str, file_tree: Dict[str, Any]
    ) -> Optional[Project]:
        data = await self.collection.find_one_and_update(
            {"_id": project_id},
            {"$set": {"file_tree": file_tree, "updated_at": datetime.now(timezone.utc)}},
            return_document=ReturnDocument.AFTER,
        )
        if data:
            return Project(**data)
        return None

    async def delete(self, project_id: str) -> bool:
        """Delete project by ID."""
        result = await self.collection.delete_one({"_id": project_id})
        return result.deleted_count > 0
