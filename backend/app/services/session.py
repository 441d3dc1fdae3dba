"""
Credential & Session Gate

Single entry point for turning a raw token into an Identity. Used by the
HTTP dependencies and by the WebSocket handshake so both apply the same
revocation and verification rules.
"""

import logging
from typing import Optional

from app.core.errors import TokenRevokedError, UnauthenticatedError
from app.core.metrics import auth_token_validations_total
from app.core.security import decode_access_token
from app.core.token_blacklist import TokenBlacklist
from app.schemas.auth import Identity

logger = logging.getLogger(__name__)


async def authenticate_token(
    token: Optional[str], blacklist: TokenBlacklist
) -> Identity:
    """
    Validate a token and return the identity it carries.

    Order: presence, revocation, signature/expiry. Every failure raises an
    UnauthenticatedError with the same generic message; TokenRevokedError
    lets HTTP callers clear the cookie.
    """
    if not token:
        auth_token_validations_total.labels(result="missing").inc()
        raise UnauthenticatedError()

    try:
        revoked = await blacklist.is_blacklisted(token)
    except Exception as e:
        # Fail closed: without the revocation store we cannot tell a logged-out token apart
        logger.warning(f"Token revocation store unavailable, denying request: {e}")
        auth_token_validations_total.labels(result="store_error").inc()
        raise UnauthenticatedError()

    if revoked:
        auth_token_validations_total.labels(result="revoked").inc()
        raise TokenRevokedError()

    try:
        payload = decode_access_token(token)
    except UnauthenticatedError:
        auth_token_validations_total.labels(result="invalid").inc()
        raise

    auth_token_validations_total.labels(result="valid").inc()
    return Identity(id=payload["sub"], email=payload.get("email", ""))
