"""
User Repository

Centralizes all database operations for users.
"""

from typing import Any, Dict, List, Optional
import re

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError

from app.core.errors import ConflictError
from app.models.user import User


class UserRepository:
    """Repository for user database operations."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db.users

    async def get_by_id(self, user_id: str) -> Optional[User]:
        """Get user by ID."""
        data = await self.collection.find_one({"_id": user_id})
        if data:
            return User(**data)
        return None

    async def get_by_email(self, email: str) -> Optional[User]:
        """Get user by email."""
        data = await self.collection.find_one({"email": email})
        if data:
            return User(**data)
        return None

    async def create(self, user: User) -> User:
        """Create a new user. Raises ConflictError if the email is taken."""
        try:
            await self.collection.insert_one(user.model_dump(by_alias=True))
        except DuplicateKeyError:
            raise ConflictError("User already exists")
        return user

    async def find_by_ids(self, user_ids: List[str]) -> List[Dict[str, Any]]:
        """Public fields (_id, email) for the given ids."""
        if not user_ids:
            return []
        cursor = self.collection.find({"_id": {"$in": user_ids}}, {"_id": 1, "email": 1})
        return await cursor.to_list(len(user_ids))

    async def count_by_ids(self, user_ids: List[str]) -> int:
        return await self.collection.count_documents({"_id": {"$in": user_ids}})

    async def find_all_except(
        self, user_id: str, skip: int = 0, limit: int = 100
    ) -> List[Dict[str, Any]]:
        """All users but one, sorted by email."""
        cursor = (
            self.collection.find({"_id": {"$ne": user_id}}, {"_id": 1, "email": 1})
            .sort("email", 1)
            .skip(skip)
            .limit(limit)
        )
        return await cursor.to_list(limit)

    async def search_by_email(
        self, term: str, exclude_ids: List[str], limit: int = 20
    ) -> List[Dict[str, Any]]:
        """Case-insensitive substring search on email, skipping exclude_ids."""
        query = {
            "email": {"$regex": re.escape(term), "$options": "i"},
            "_id": {"$nin": exclude_ids},
        }
        cursor = self.collection.find(query, {"_id": 1, "email": 1}).sort("email", 1).limit(limit)
        return await cursor.to_list(limit)
