"""API dependencies for authentication and common operations."""

from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.core.exceptions import AuthenticationError
from app.core.security import verify_token
from app.database import get_db

__all__ = ["get_current_user_id", "get_db", "security"]

# Missing credentials are reported by get_current_user_id as our own 401
security = HTTPBearer(auto_error=False)


async def get_current_user_id(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> str:
    """Get the authenticated caller's user id from the bearer token."""
    if not credentials:
        raise AuthenticationError("Authentication required")

    payload = verify_token(credentials.credentials, token_type="access")
    user_id = payload.get("sub")
    if not user_id:
        raise AuthenticationError("Invalid token payload")
    return str(user_id)
