"""Shared slowapi limiter, keyed by the authenticated user when there is one."""

from fastapi import Depends, Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from config import RATE_LIMIT_ENABLED
from models.user import User
from services.auth import get_current_user


def get_user_id_from_request(request: Request) -> str:
    """Extract user ID for rate limiting key."""
    # Unauthenticated endpoints fall back to the client address
    if hasattr(request.state, "user_id"):
        return str(request.state.user_id)
    return get_remote_address(request)


limiter = Limiter(key_func=get_user_id_from_request, enabled=RATE_LIMIT_ENABLED)


def rate_limited_user(request: Request, current_user: User = Depends(get_current_user)) -> User:
    """get_current_user that also records the user id for the limiter key."""
    request.state.user_id = current_user.id
    return current_user
