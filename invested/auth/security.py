"""JWT access token handling.

Tokens are issued by the account service; this API only validates them.
`create_access_token` mirrors the issuer's claim layout and is used by
tooling and tests.

Claims:
    sub: user id
    email: user email
    role: "admin" | "member"
    membership_expires_at: epoch seconds, null for lifetime; absent when
        the user has no membership
    type: "access"
"""

from datetime import UTC, datetime, timedelta
from typing import Any

from jose import JWTError, jwt

from invested.config.settings import get_settings


def create_access_token(
    data: dict[str, Any],
    expires_delta: timedelta | None = None,
) -> str:
    """Create a signed JWT access token.

    Args:
        data: Payload claims (typically sub, email, role, membership_expires_at)
        expires_delta: Token lifetime (default from settings)

    Returns:
        Encoded JWT string
    """
    settings = get_settings()

    to_encode = data.copy()
    now = datetime.now(UTC)
    expire = now + (
        expires_delta or timedelta(minutes=settings.auth_access_token_expire_minutes)
    )
    to_encode.update({"exp": expire, "iat": now, "type": "access"})

    return jwt.encode(
        to_encode,
        settings.auth_secret_key,
        algorithm=settings.auth_algorithm,
    )


def decode_access_token(token: str) -> dict[str, Any]:
    """Decode and validate an access token.

    Validates signature, expiration, and that the token type is "access".

    Raises:
        JWTError: If token is invalid, expired, or wrong type
    """
    settings = get_settings()

    payload = jwt.decode(
        token,
        settings.auth_secret_key,
        algorithms=[settings.auth_algorithm],
    )

    if payload.get("type") != "access":
        msg = "Invalid token type: expected 'access'"
        raise JWTError(msg)

    for claim in ("sub", "role"):
        if not payload.get(claim):
            msg = f"Missing required claim: {claim}"
            raise JWTError(msg)

    return payload
