"""
API v1 Helper Functions

Shared helper functions extracted from endpoint modules for better
code organization and reusability.
"""

from app.api.v1.helpers.cookies import clear_token_cookie, set_token_cookie

__all__ = [
    "clear_token_cookie",
    "set_token_cookie",
]
