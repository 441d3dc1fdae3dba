"""
Error Taxonomy

Domain exceptions raised by services and the realtime layer.
Each carries the HTTP status used by the API exception handler and the
close code used when a WebSocket handshake is refused.
"""

from typing import Optional

# Application close codes (4000-4999 are reserved for applications)
WS_CLOSE_INVALID = 4400
WS_CLOSE_UNAUTHENTICATED = 4401
WS_CLOSE_FORBIDDEN = 4403
WS_CLOSE_NOT_FOUND = 4404
WS_CLOSE_INTERNAL = 4500


class WorkspaceError(Exception):
    """Base class for all domain errors."""

    status_code: int = 500
    close_code: int = WS_CLOSE_INTERNAL
    default_message: str = "Internal error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class UnauthenticatedError(WorkspaceError):
    status_code = 401
    close_code = WS_CLOSE_UNAUTHENTICATED
    default_message = "Unauthorized User"


class TokenRevokedError(UnauthenticatedError):
    """Token is well-formed but was blacklisted (e.g. after logout)."""


class ForbiddenError(WorkspaceError):
    status_code = 403
    close_code = WS_CLOSE_FORBIDDEN
    default_message = "Forbidden"


class NotAuthorizedError(ForbiddenError):
    default_message = "Project not found or user not authorized"


class NotFoundError(WorkspaceError):
    status_code = 404
    close_code = WS_CLOSE_NOT_FOUND
    default_message = "Not found"


class ProjectNotFoundError(NotFoundError):
    default_message = "Project not found"


class UserNotFoundError(NotFoundError):
    default_message = "User not found"


class InvitationNotFoundError(NotFoundError):
    default_message = "Invitation not found or already processed"


class ValidationFailedError(WorkspaceError):
    status_code = 400
    close_code = WS_CLOSE_INVALID
    default_message = "Invalid request"


class InvalidProjectError(ValidationFailedError):
    default_message = "Invalid projectId"


class InvalidMessageFormatError(ValidationFailedError):
    default_message = "Invalid message format"


class SelfInvitationError(ValidationFailedError):
    default_message = "You cannot invite yourself"


class ConflictError(WorkspaceError):
    status_code = 409
    default_message = "Conflict"


class AlreadyMemberError(ConflictError):
    default_message = "User is already a member of this project"


class DuplicatePendingInvitationError(ConflictError):
    default_message = "An invitation is already pending for this user"


class UpstreamUnavailableError(WorkspaceError):
    status_code = 503
    default_message = "AI service unavailable"


class NoProviderConfiguredError(UpstreamUnavailableError):
    default_message = "No AI API keys configured"


class ProviderError(UpstreamUnavailableError):
    """
    Failure reported by a generative backend.

    The message is what the retry policy classifies, so adapters must keep
    the upstream status code and wording in it.
    """

    def __init__(
        self,
        message: str,
        provider: str = "unknown",
        status_code: Optional[int] = None,
        retry_after: Optional[float] = None,
    ):
        super().__init__(message)
        self.provider = provider
        self.upstream_status = status_code
        self.retry_after = retry_after
