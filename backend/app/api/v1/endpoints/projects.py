from typing import List

from fastapi import APIRouter, Depends, Response, status

from app.api import deps
from app.api.v1.helpers.responses import RESP_400, RESP_409, RESP_AUTH, RESP_AUTH_400_404, RESP_AUTH_404
from app.schemas.auth import Identity
from app.schemas.project import (
    FileTreeUpdate,
    ProjectAddMembers,
    ProjectCreate,
    ProjectResponse,
)
from app.services.projects import ProjectService

router = APIRouter()


@router.post(
    "/",
    response_model=ProjectResponse,
    status_code=status.HTTP_201_CREATED,
    responses={**RESP_AUTH, **RESP_400, **RESP_409},
)
async def create_project(
    project_in: ProjectCreate,
    current_user: Identity = Depends(deps.get_current_user),
    service: ProjectService = Depends(deps.get_project_service),
):
    project = await service.create(project_in.name, current_user.id)
    return await service.to_response(project)


@router.get("/", response_model=List[ProjectResponse], responses={**RESP_AUTH})
async def list_projects(
    current_user: Identity = Depends(deps.get_current_user),
    service: ProjectService = Depends(deps.get_project_service),
):
    """
    Projects the caller owns or is a member of.
    """
    projects = await service.list_for_user(current_user.id)
    return [await service.to_response(p) for p in projects]


@router.get("/{project_id}", response_model=ProjectResponse, responses={**RESP_AUTH_404})
async def get_project(
    project_id: str,
    current_user: Identity = Depends(deps.get_current_user),
    service: ProjectService = Depends(deps.get_project_service),
):
    project = await service.get_for_member(project_id, current_user.id)
    return await service.to_response(project)


@router.put(
    "/{project_id}/members",
    response_model=ProjectResponse,
    responses={**RESP_AUTH_400_404},
)
async def add_members(
    project_id: str,
    members_in: ProjectAddMembers,
    current_user: Identity = Depends(deps.get_current_user),
    service: ProjectService = Depends(deps.get_project_service),
):
    """
    Add users directly (owner only). Invitations are the usual route.
    """
    project = await service.add_members(project_id, current_user.id, members_in.user_ids)
    return await service.to_response(project)


@router.delete(
    "/{project_id}/members/{user_id}",
    response_model=ProjectResponse,
    responses={**RESP_AUTH_400_404},
)
async def remove_member(
    project_id: str,
    user_id: str,
    current_user: Identity = Depends(deps.get_current_user),
    service: ProjectService = Depends(deps.get_project_service),
):
    """
    Remove a member. The owner can remove anyone but themselves; members can leave.
    """
    project = await service.remove_member(project_id, current_user.id, user_id)
    return await service.to_response(project)


@router.put(
    "/{project_id}/file-tree",
    response_model=ProjectResponse,
    responses={**RESP_AUTH_404},
)
async def update_file_tree(
    project_id: str,
    tree_in: FileTreeUpdate,
    current_user: Identity = Depends(deps.get_current_user),
    service: ProjectService = Depends(deps.get_project_service),
):
    project = await service.update_file_tree(project_id, current_user.id, tree_in.file_tree)
    return await service.to_response(project)


@router.delete(
    "/{project_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={**RESP_AUTH_404},
)
async def delete_project(
    project_id: str,
    current_user: Identity = Depends(deps.get_current_user),
    service: ProjectService = Depends(deps.get_project_service),
):
    await service.delete(project_id, current_user.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
