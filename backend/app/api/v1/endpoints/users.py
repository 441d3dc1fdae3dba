from typing import List

from fastapi import APIRouter, Depends, Query, Request, Response, status

from app.api import deps
from app.api.v1.helpers.cookies import clear_token_cookie, set_token_cookie
from app.api.v1.helpers.responses import RESP_401, RESP_409, RESP_AUTH_404
from app.core.token_blacklist import TokenBlacklist
from app.schemas.auth import Identity, LogoutResponse, TokenResponse
from app.schemas.user import UserCreate, UserLogin, UserPublic
from app.services.users import UserService

router = APIRouter()


@router.post(
    "/register",
    response_model=TokenResponse,
    status_code=status.HTTP_201_CREATED,
    responses={**RESP_409},
)
async def register(
    user_in: UserCreate,
    response: Response,
    service: UserService = Depends(deps.get_user_service),
):
    """
    Create an account and log it in.
    """
    user, token = await service.register(user_in)
    set_token_cookie(response, token)
    return {"user": user.model_dump(by_alias=True), "token": token}


@router.post("/login", response_model=TokenResponse, responses={**RESP_401})
async def login(
    credentials: UserLogin,
    response: Response,
    service: UserService = Depends(deps.get_user_service),
):
    user, token = await service.login(credentials)
    set_token_cookie(response, token)
    return {"user": user.model_dump(by_alias=True), "token": token}


@router.get("/logout", response_model=LogoutResponse, responses={**RESP_401})
async def logout(
    request: Request,
    response: Response,
    current_user: Identity = Depends(deps.get_current_user),
    blacklist: TokenBlacklist = Depends(deps.get_token_blacklist),
):
    """
    Revoke the presented token and clear the cookie.
    """
    token = deps.get_request_token(request)
    await UserService.logout(token, blacklist)
    clear_token_cookie(response)
    return {"message": "Logged out successfully"}


@router.get("/profile", response_model=Identity, responses={**RESP_401})
async def profile(current_user: Identity = Depends(deps.get_current_user)):
    return current_user


@router.get("/all", response_model=List[UserPublic], responses={**RESP_401})
async def list_users(
    current_user: Identity = Depends(deps.get_current_user),
    service: UserService = Depends(deps.get_user_service),
):
    """
    All users except the caller.
    """
    return await service.list_others(current_user.id)


@router.get("/search", response_model=List[UserPublic], responses={**RESP_AUTH_404})
async def search_users(
    project_id: str = Query(..., alias="projectId"),
    q: str = Query("", max_length=100),
    current_user: Identity = Depends(deps.get_current_user),
    service: UserService = Depends(deps.get_user_service),
):
    """
    Find users to invite: matches on email and skips current members.
    """
    return await service.search_for_project(project_id, current_user.id, q)
