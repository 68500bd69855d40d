"""FastAPI dependencies for authentication.

Provides dependency injection for:
- Current user extraction from JWT
- Membership gate
- Admin-only access
"""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from jose import JWTError
from pydantic import ValidationError

from invested.core.context import set_user_id

from .permissions import UserRole
from .schemas import UserIdentity
from .security import decode_access_token


def get_token_from_header(request: Request) -> str | None:
    """Extract Bearer token from the Authorization header."""
    auth_header = request.headers.get("Authorization")
    if not auth_header:
        return None

    expected_parts = 2
    parts = auth_header.split()
    if len(parts) != expected_parts or parts[0].lower() != "bearer":
        return None

    return parts[1]


async def get_current_user(
    token: Annotated[str | None, Depends(get_token_from_header)],
) -> UserIdentity:
    """Get current authenticated user from JWT token.

    Raises:
        HTTPException(401): If token is missing, invalid, or expired
    """
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication token is required",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        user = UserIdentity.from_token_payload(decode_access_token(token))
    except (JWTError, ValidationError, ValueError) as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token is invalid or has expired",
            headers={"WWW-Authenticate": "Bearer"},
        ) from e

    # Set user_id in context for logging
    set_user_id(user.id)
    return user


async def require_membership(
    user: Annotated[UserIdentity, Depends(get_current_user)],
) -> UserIdentity:
    """Require an active membership (admins always pass)."""
    if not user.is_member:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="An active membership is required",
        )
    return user


async def require_admin(
    user: Annotated[UserIdentity, Depends(get_current_user)],
) -> UserIdentity:
    """Require ADMIN role."""
    if user.role != UserRole.ADMIN:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Administrator privileges required",
        )
    return user


# Type aliases for cleaner route signatures
CurrentUser = Annotated[UserIdentity, Depends(get_current_user)]
MemberUser = Annotated[UserIdentity, Depends(require_membership)]
AdminUser = Annotated[UserIdentity, Depends(require_admin)]
