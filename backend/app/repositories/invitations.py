"""
Invitation Repository

Centralizes all database operations for invitations. The partial unique
index on (project_id, recipient_id) where status is pending backs the
duplicate-pending check; transitions out of pending are conditional
updates so an invitation is answered at most once.
"""

from datetime import datetime, timezone
from typing import List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from app.core.constants import INVITATION_STATUS_PENDING
from app.core.errors import DuplicatePendingInvitationError
from app.models.invitation import Invitation


class InvitationRepository:
    """Repository for invitation database operations."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db.invitations

    async def get_by_id(self, invitation_id: str) -> Optional[Invitation]:
        data = await self.collection.find_one({"_id": invitation_id})
        if data:
            return Invitation(**data)
        return None

    async def create(self, invitation: Invitation) -> Invitation:
        """Insert a pending invitation. Raises DuplicatePendingInvitationError on index hit."""
        try:
            await self.collection.insert_one(invitation.model_dump(by_alias=True))
        except DuplicateKeyError:
            raise DuplicatePendingInvitationError()
        return invitation

    async def transition_from_pending(
        self, invitation_id: str, recipient_id: str, new_status: str
    ) -> Optional[Invitation]:
        """
        Move a pending invitation addressed to recipient_id into new_status.

        Returns None if no such pending invitation exists (missing, answered
        already, or addressed to somebody else).
        """
        data = await self.collection.find_one_and_update(
            {
                "_id": invitation_id,
                "recipient_id": recipient_id,
                "status": INVITATION_STATUS_PENDING,
            },
            {"$set": {"status": new_status, "responded_at": datetime.now(timezone.utc)}},
            return_document=ReturnDocument.AFTER,
        )
        if data:
            return Invitation(**data)
        return None

    async def find_pending_for_recipient(
        self, recipient_id: str, limit: int = 100
    ) -> List[Invitation]:
        """Pending invitations for a user, newest first."""
        cursor = (
            self.collection.find(
                {"recipient_id": recipient_id, "status": INVITATION_STATUS_PENDING}
            )
            .sort("created_at", -1)
            .limit(limit)
        )
        docs = await cursor.to_list(limit)
        return [Invitation(**doc) for doc in docs]

    async def find_pending_for_project(
        self, project_id: str, limit: int = 100
    ) -> List[Invitation]:
        cursor = (
            self.collection.find(
                {"project_id": project_id, "status": INVITATION_STATUS_PENDING}
            )
            .sort("created_at", -1)
            .limit(limit)
        )
        docs = await cursor.to_list(limit)
        return [Invitation(**doc) for doc in docs]

    async def delete_by_project(self, project_id: str) -> int:
        """Delete all invitations for a project."""
        result = await self.collection.delete_many({"project_id": project_id})
        return result.deleted_count
