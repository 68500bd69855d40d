"""Role-based access control (RBAC) for InvestEd.

Hierarchical permission system:
- ADMIN (level 1): Full access, bypasses the membership gate
- MEMBER (level 0): Registered user; paid areas need an active membership
"""

from datetime import UTC, datetime
from enum import Enum


class UserRole(str, Enum):
    """User roles with hierarchical levels."""

    MEMBER = "member"
    ADMIN = "admin"


# Role hierarchy mapping (role -> permission level)
ROLE_HIERARCHY: dict[UserRole, int] = {
    UserRole.MEMBER: 0,
    UserRole.ADMIN: 1,
}


def get_role_level(role: UserRole | str) -> int:
    """Get the permission level for a role.

    Unknown roles get the lowest level.
    """
    if isinstance(role, str):
        try:
            role = UserRole(role)
        except ValueError:
            return 0
    return ROLE_HIERARCHY.get(role, 0)


def has_permission(user_role: UserRole | str, required_role: UserRole | str) -> bool:
    """Check if user has at least the required permission level.

    Examples:
        >>> has_permission(UserRole.ADMIN, UserRole.MEMBER)
        True
        >>> has_permission("member", "admin")
        False
    """
    return get_role_level(user_role) >= get_role_level(required_role)


def has_active_membership(
    role: UserRole | str,
    membership_granted: bool,
    membership_expires_at: datetime | None,
    now: datetime | None = None,
) -> bool:
    """Check whether a user may use member-only features.

    Admins always pass. Otherwise the user needs a membership that is
    either lifetime (no expiry) or expires in the future.
    """
    if get_role_level(role) >= get_role_level(UserRole.ADMIN):
        return True
    if not membership_granted:
        return False
    if membership_expires_at is None:
        return True
    return membership_expires_at > (now or datetime.now(UTC))
