from typing import List

from fastapi import APIRouter, Depends, status

from app.api import deps
from app.api.v1.helpers.responses import RESP_400, RESP_409, RESP_AUTH_404
from app.schemas.auth import Identity
from app.schemas.invitation import (
    InvitationAcceptResponse,
    InvitationCreate,
    InvitationResponse,
)
from app.services.invitations import InvitationService
from app.services.projects import ProjectService

router = APIRouter()


@router.post(
    "/",
    response_model=InvitationResponse,
    status_code=status.HTTP_201_CREATED,
    responses={**RESP_AUTH_404, **RESP_400, **RESP_409},
)
async def create_invitation(
    invitation_in: InvitationCreate,
    current_user: Identity = Depends(deps.get_current_user),
    service: InvitationService = Depends(deps.get_invitation_service),
):
    """
    Invite a user to a project. The recipient is notified over their
    open sockets with a ``new-invitation`` event.
    """
    invitation = await service.create(
        invitation_in.project_id, current_user, invitation_in.recipient_id
    )
    return service.describe(invitation)


@router.get("/pending", response_model=List[InvitationResponse])
async def list_pending_invitations(
    current_user: Identity = Depends(deps.get_current_user),
    service: InvitationService = Depends(deps.get_invitation_service),
):
    """
    Pending invitations addressed to the caller, newest first.
    """
    return await service.list_pending(current_user)


@router.post(
    "/{invitation_id}/accept",
    response_model=InvitationAcceptResponse,
    responses={**RESP_AUTH_404},
)
async def accept_invitation(
    invitation_id: str,
    current_user: Identity = Depends(deps.get_current_user),
    service: InvitationService = Depends(deps.get_invitation_service),
    projects: ProjectService = Depends(deps.get_project_service),
):
    invitation, project = await service.accept(invitation_id, current_user)
    return {
        "invitation": service.describe(invitation, project_name=project.name),
        "project": await projects.to_response(project),
    }


@router.post(
    "/{invitation_id}/reject",
    response_model=InvitationResponse,
    responses={**RESP_AUTH_404},
)
async def reject_invitation(
    invitation_id: str,
    current_user: Identity = Depends(deps.get_current_user),
    service: InvitationService = Depends(deps.get_invitation_service),
):
    invitation = await service.reject(invitation_id, current_user)
    return service.describe(invitation)


@router.get(
    "/project/{project_id}",
    response_model=List[InvitationResponse],
    responses={**RESP_AUTH_404},
)
async def list_project_invitations(
    project_id: str,
    current_user: Identity = Depends(deps.get_current_user),
    service: InvitationService = Depends(deps.get_invitation_service),
):
    """
    Pending invitations sent for a project. Members only.
    """
    return await service.list_sent(project_id, current_user)
