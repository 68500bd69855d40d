"""Authenticated identity passed explicitly into every service call."""

from datetime import UTC, datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from .permissions import UserRole, has_active_membership


class UserIdentity(BaseModel):
    """Identity extracted from a validated access token."""

    model_config = ConfigDict(frozen=True)

    id: UUID
    email: str = ""
    role: UserRole = UserRole.MEMBER
    membership_granted: bool = False
    membership_expires_at: datetime | None = None

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @property
    def is_member(self) -> bool:
        """Whether the user currently holds an active membership."""
        return has_active_membership(
            self.role, self.membership_granted, self.membership_expires_at
        )

    @classmethod
    def from_token_payload(cls, payload: dict[str, Any]) -> "UserIdentity":
        """Build identity from decoded JWT claims."""
        expires = payload.get("membership_expires_at")
        return cls(
            id=UUID(str(payload["sub"])),
            email=payload.get("email", ""),
            role=UserRole(payload["role"]),
            membership_granted="membership_expires_at" in payload,
            membership_expires_at=(
                datetime.fromtimestamp(expires, tz=UTC) if expires is not None else None
            ),
        )
