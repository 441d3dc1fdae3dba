"""
Identity Service

Registration, login, logout and user lookups. Tokens are stateless JWTs;
logout revokes the presented token in the Redis blacklist.
"""

import logging
from typing import Any, Dict, List, Tuple

from motor.motor_asyncio import AsyncIOMotorDatabase

from app.core import security
from app.core.config import settings
from app.core.errors import NotAuthorizedError, ProjectNotFoundError, UnauthenticatedError
from app.core.metrics import auth_login_attempts_total
from app.core.token_blacklist import TokenBlacklist
from app.models.user import User
from app.repositories.projects import ProjectRepository
from app.repositories.users import UserRepository
from app.schemas.user import UserCreate, UserLogin

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.users = UserRepository(db)
        self.projects = ProjectRepository(db)

    async def register(self, user_in: UserCreate) -> Tuple[User, str]:
        user = User(
            email=user_in.email,
            hashed_password=security.get_password_hash(user_in.password),
        )
        await self.users.create(user)
        logger.info(f"Registered user {user.id}")
        return user, security.create_access_token(user.id, user.email)

    async def login(self, credentials: UserLogin) -> Tuple[User, str]:
        user = await self.users.get_by_email(credentials.email)
        if not user or not security.verify_password(credentials.password, user.hashed_password):
            auth_login_attempts_total.labels(status="failed").inc()
            raise UnauthenticatedError("Invalid credentials")
        auth_login_attempts_total.labels(status="success").inc()
        return user, security.create_access_token(user.id, user.email)

    @staticmethod
    async def logout(token: str, blacklist: TokenBlacklist) -> None:
        await blacklist.set(token, "logout", settings.TOKEN_BLACKLIST_TTL_SECONDS)

    async def list_others(self, user_id: str) -> List[Dict[str, Any]]:
        return await self.users.find_all_except(user_id)

    async def search_for_project(
        self, project_id: str, requester_id: str, term: str
    ) -> List[Dict[str, Any]]:
        """Users matching ``term`` who are not yet members of the project."""
        project = await self.projects.get_by_id(project_id)
        if project is None:
            raise ProjectNotFoundError()
        if not project.is_member(requester_id):
            raise NotAuthorizedError()
        exclude = list({project.owner_id, *project.member_ids})
        return await self.users.search_by_email(term.strip(), exclude)
