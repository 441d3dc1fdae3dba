"""
Invitation Workflow

pending -> accepted | rejected. Terminal states are never left: answering
goes through a conditional update on ``status == pending``, and the
partial unique index keeps at most one pending invitation per
(project, recipient).
"""

import logging
from typing import Any, Dict, List, Tuple

from motor.motor_asyncio import AsyncIOMotorDatabase

from app.core.constants import (
    EVENT_NEW_INVITATION,
    INVITATION_STATUS_ACCEPTED,
    INVITATION_STATUS_REJECTED,
)
from app.core.errors import (
    AlreadyMemberError,
    InvitationNotFoundError,
    NotAuthorizedError,
    ProjectNotFoundError,
    SelfInvitationError,
    UserNotFoundError,
)
from app.core.metrics import invitations_total
from app.models.invitation import Invitation
from app.models.project import Project
from app.repositories.invitations import InvitationRepository
from app.repositories.projects import ProjectRepository
from app.repositories.users import UserRepository
from app.schemas.auth import Identity
from app.services.realtime.rooms import RoomBroker

logger = logging.getLogger(__name__)


class InvitationService:
    def __init__(self, db: AsyncIOMotorDatabase, broker: RoomBroker):
        self.invitations = InvitationRepository(db)
        self.projects = ProjectRepository(db)
        self.users = UserRepository(db)
        self.broker = broker

    async def create(
        self, project_id: str, sender: Identity, recipient_id: str
    ) -> Invitation:
        if sender.id == recipient_id:
            raise SelfInvitationError()

        project = await self.projects.get_by_id(project_id)
        if project is None:
            raise ProjectNotFoundError()
        if not project.is_member(sender.id):
            raise NotAuthorizedError()

        recipient = await self.users.get_by_id(recipient_id)
        if recipient is None:
            raise UserNotFoundError()
        if project.is_member(recipient_id):
            raise AlreadyMemberError()

        invitation = Invitation(
            project_id=project.id, sender_id=sender.id, recipient_id=recipient_id
        )
        await self.invitations.create(invitation)
        invitations_total.labels(action="created").inc()
        logger.info(
            f"Invitation {invitation.id} to project {project.id} sent to {recipient_id}"
        )

        await self.broker.emit_to_identity(
            recipient_id,
            EVENT_NEW_INVITATION,
            self.describe(invitation, project_name=project.name, sender_email=sender.email),
        )
        return invitation

    async def accept(self, invitation_id: str, user: Identity) -> Tuple[Invitation, Project]:
        invitation = await self.invitations.transition_from_pending(
            invitation_id, user.id, INVITATION_STATUS_ACCEPTED
        )
        if invitation is None:
            raise InvitationNotFoundError()

        project = await self.projects.add_members(invitation.project_id, [user.id])
        if project is None:
            # Project was deleted between invite and accept
            raise ProjectNotFoundError()
        invitations_total.labels(action="accepted").inc()
        logger.info(f"Invitation {invitation_id} accepted by {user.id}")
        return invitation, project

    async def reject(self, invitation_id: str, user: Identity) -> Invitation:
        invitation = await self.invitations.transition_from_pending(
            invitation_id, user.id, INVITATION_STATUS_REJECTED
        )
        if invitation is None:
            raise InvitationNotFoundError()
        invitations_total.labels(action="rejected").inc()
        logger.info(f"Invitation {invitation_id} rejected by {user.id}")
        return invitation

    async def list_pending(self, user: Identity) -> List[Dict[str, Any]]:
        """Pending invitations for the user, newest first, with project names."""
        invitations = await self.invitations.find_pending_for_recipient(user.id)
        described = []
        for invitation in invitations:
            project = await self.projects.get_by_id(invitation.project_id)
            sender = await self.users.get_by_id(invitation.sender_id)
            described.append(
                self.describe(
                    invitation,
                    project_name=project.name if project else None,
                    sender_email=sender.email if sender else None,
                )
            )
        return described

    async def list_sent(self, project_id: str, requester: Identity) -> List[Dict[str, Any]]:
        project = await self.projects.get_by_id(project_id)
        if project is None:
            raise ProjectNotFoundError()
        if not project.is_member(requester.id):
            raise NotAuthorizedError()
        invitations = await self.invitations.find_pending_for_project(project_id)
        return [self.describe(i, project_name=project.name) for i in invitations]

    @staticmethod
    def describe(invitation: Invitation, project_name=None, sender_email=None) -> Dict[str, Any]:
        data = invitation.model_dump(by_alias=True, mode="json")
        data["project_name"] = project_name
        data["sender_email"] = sender_email
        return data
