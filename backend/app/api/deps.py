from typing import Optional

from fastapi import Depends, Request
from motor.motor_asyncio import AsyncIOMotorDatabase

from app.core.constants import TOKEN_COOKIE_NAME
from app.core.errors import TokenRevokedError
from app.core.token_blacklist import TokenBlacklist, token_blacklist
from app.db.mongodb import get_database
from app.schemas.auth import Identity
from app.services.ai.service import AIService
from app.services.invitations import InvitationService
from app.services.projects import ProjectService
from app.services.realtime.rooms import RoomBroker, room_broker
from app.services.session import authenticate_token
from app.services.users import UserService


def get_token_blacklist() -> TokenBlacklist:
    return token_blacklist


def get_room_broker() -> RoomBroker:
    return room_broker


def get_ai_service(request: Request) -> AIService:
    return request.app.state.ai_service


def get_request_token(request: Request) -> Optional[str]:
    """Cookie first, then ``Authorization: Bearer``."""
    token = request.cookies.get(TOKEN_COOKIE_NAME)
    if token:
        return token
    authorization = request.headers.get("authorization") or ""
    scheme, _, credentials = authorization.partition(" ")
    if scheme.lower() == "bearer" and credentials.strip():
        return credentials.strip()
    return None


async def get_current_user(
    request: Request,
    blacklist: TokenBlacklist = Depends(get_token_blacklist),
) -> Identity:
    token = get_request_token(request)
    try:
        return await authenticate_token(token, blacklist)
    except TokenRevokedError as e:
        # Picked up by the error handler to clear the stale cookie
        request.state.clear_token_cookie = True
        raise e


def get_user_service(db: AsyncIOMotorDatabase = Depends(get_database)) -> UserService:
    return UserService(db)


def get_project_service(db: AsyncIOMotorDatabase = Depends(get_database)) -> ProjectService:
    return ProjectService(db)


def get_invitation_service(
    db: AsyncIOMotorDatabase = Depends(get_database),
    broker: RoomBroker = Depends(get_room_broker),
) -> InvitationService:
    return InvitationService(db, broker)
