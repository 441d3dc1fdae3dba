"""
Room Authorization Handshake

Decides whether a socket may join a project room. Checks run in a fixed
order and the first failure wins, so clients get a stable reason for a
given situation.
"""

import logging
import uuid
from typing import Mapping, Optional, Tuple

from app.core.constants import TOKEN_COOKIE_NAME
from app.core.errors import (
    InvalidProjectError,
    NotAuthorizedError,
    ProjectNotFoundError,
    UnauthenticatedError,
    WorkspaceError,
)
from app.core.metrics import ws_handshake_failures_total
from app.core.token_blacklist import TokenBlacklist
from app.models.project import Project
from app.repositories.projects import ProjectRepository
from app.schemas.auth import Identity
from app.services.session import authenticate_token

logger = logging.getLogger(__name__)


def extract_token(
    headers: Mapping[str, str],
    cookies: Mapping[str, str],
) -> Optional[str]:
    """
    Token from a Bearer header, else the ``token`` cookie.

    Never read from the query string: URLs end up in access logs.
    """
    authorization = headers.get("authorization") or ""
    scheme, _, credentials = authorization.partition(" ")
    if scheme.lower() == "bearer" and credentials.strip():
        return credentials.strip()
    return cookies.get(TOKEN_COOKIE_NAME) or None


def normalize_project_id(project_id: Optional[str]) -> str:
    if not project_id:
        raise InvalidProjectError()
    try:
        return str(uuid.UUID(project_id))
    except (ValueError, AttributeError, TypeError):
        raise InvalidProjectError()


async def authorize_connection(
    project_id: Optional[str],
    token: Optional[str],
    projects: ProjectRepository,
    blacklist: TokenBlacklist,
) -> Tuple[Project, Identity]:
    """
    Run the handshake checks.

    1. project id is a UUID           -> InvalidProjectError
    2. project exists                 -> ProjectNotFoundError
    3. token present                  -> UnauthenticatedError
    4. token verifies, not revoked    -> UnauthenticatedError
    5. identity is owner or member    -> NotAuthorizedError
    """
    try:
        normalized_id = normalize_project_id(project_id)

        project = await projects.get_by_id(normalized_id)
        if project is None:
            raise ProjectNotFoundError()

        if not token:
            raise UnauthenticatedError()

        identity = await authenticate_token(token, blacklist)

        if not project.is_member(identity.id):
            raise NotAuthorizedError()
    except WorkspaceError as e:
        reason = type(e).__name__
        ws_handshake_failures_total.labels(reason=reason).inc()
        logger.info(f"Socket handshake refused for project {project_id!r}: {reason}")
        raise
    except Exception as e:
        # Storage failures close the socket with 4500 and a generic reason
        ws_handshake_failures_total.labels(reason="InternalError").inc()
        logger.exception(f"Socket handshake failed for project {project_id!r}: {e}")
        raise WorkspaceError() from e

    return project, identity
