"""
Shared Constants

Centralized constants used across the application to ensure consistency.
"""

from typing import Dict

# =============================================================================
# Realtime events
# =============================================================================

EVENT_PROJECT_MESSAGE = "project-message"
EVENT_AI_TYPING = "ai-typing"
EVENT_TYPING = "typing"
EVENT_NEW_INVITATION = "new-invitation"
EVENT_ERROR = "error"

# Synthetic sender attached to every AI message in a room
AI_SENDER: Dict[str, str] = {"_id": "ai", "email": "AI"}

# Personal rooms are keyed by identity id; prefixed so they never collide with project ids
PERSONAL_ROOM_PREFIX = "user:"


def personal_room(identity_id: str) -> str:
    return f"{PERSONAL_ROOM_PREFIX}{identity_id}"


# =============================================================================
# Invitations
# =============================================================================

INVITATION_STATUS_PENDING = "pending"
INVITATION_STATUS_ACCEPTED = "accepted"
INVITATION_STATUS_REJECTED = "rejected"

INVITATION_STATUSES = [
    INVITATION_STATUS_PENDING,
    INVITATION_STATUS_ACCEPTED,
    INVITATION_STATUS_REJECTED,
]

# =============================================================================
# Projects / users
# =============================================================================

PROJECT_NAME_MIN_LENGTH = 3
PROJECT_NAME_MAX_LENGTH = 50
PASSWORD_MIN_LENGTH = 6

TOKEN_COOKIE_NAME = "token"

# =============================================================================
# AI envelope
# =============================================================================

AI_TYPE_CHAT = "chat"
AI_TYPE_EXPLANATION = "explanation"
AI_TYPE_CODE = "code"

AI_ERROR_QUOTA = "quota"
AI_ERROR_AUTH = "auth"
AI_ERROR_NETWORK = "network"
AI_ERROR_UNKNOWN = "unknown"
AI_ERROR_CONFIG = "config"

# Substrings (lowercase) used to classify upstream failures
AI_QUOTA_MARKERS = ("quota", "429", "rate limit")
AI_AUTH_MARKERS = ("api key", "401", "403")
AI_NETWORK_MARKERS = ("fetch", "network")

AI_EMPTY_PROMPT_REPLY = "Please provide a prompt after {mention}"
AI_PARSE_NOTE = "Response parsing issue"
AI_GENERIC_FAILURE_REPLY = (
    "Sorry, I encountered an error processing your request. Please try again."
)
