"""Tests for auth permissions."""

from datetime import UTC, datetime, timedelta

import pytest

from invested.auth.permissions import (
    ROLE_HIERARCHY,
    UserRole,
    get_role_level,
    has_active_membership,
    has_permission,
)


class TestUserRole:
    """Tests for UserRole enum."""

    def test_role_values(self) -> None:
        """Roles should have correct string values."""
        assert UserRole.MEMBER.value == "member"
        assert UserRole.ADMIN.value == "admin"

    def test_role_hierarchy(self) -> None:
        assert ROLE_HIERARCHY[UserRole.MEMBER] == 0
        assert ROLE_HIERARCHY[UserRole.ADMIN] == 1

    def test_all_roles_have_levels(self) -> None:
        for role in UserRole:
            assert role in ROLE_HIERARCHY


class TestGetRoleLevel:
    """Tests for get_role_level."""

    @pytest.mark.parametrize(
        ("role", "expected_level"),
        [(UserRole.MEMBER, 0), (UserRole.ADMIN, 1), ("member", 0), ("admin", 1)],
    )
    def test_levels(self, role, expected_level: int) -> None:
        assert get_role_level(role) == expected_level

    def test_invalid_role_returns_zero(self) -> None:
        assert get_role_level("superuser") == 0


class TestHasPermission:
    """Tests for has_permission."""

    def test_admin_has_all_permissions(self) -> None:
        assert has_permission(UserRole.ADMIN, UserRole.MEMBER)
        assert has_permission(UserRole.ADMIN, UserRole.ADMIN)

    def test_member_permissions(self) -> None:
        assert has_permission(UserRole.MEMBER, UserRole.MEMBER)
        assert not has_permission(UserRole.MEMBER, UserRole.ADMIN)

    def test_string_roles(self) -> None:
        assert has_permission("admin", "member")
        assert not has_permission("member", "admin")


class TestHasActiveMembership:
    """Tests for the membership gate."""

    NOW = datetime(2025, 6, 1, tzinfo=UTC)

    def test_admin_always_passes(self) -> None:
        assert has_active_membership(UserRole.ADMIN, False, None, now=self.NOW)

    def test_no_membership(self) -> None:
        assert not has_active_membership(UserRole.MEMBER, False, None, now=self.NOW)

    def test_lifetime_membership(self) -> None:
        assert has_active_membership(UserRole.MEMBER, True, None, now=self.NOW)

    def test_future_expiry(self) -> None:
        expires = self.NOW + timedelta(days=1)
        assert has_active_membership(UserRole.MEMBER, True, expires, now=self.NOW)

    def test_past_expiry(self) -> None:
        expires = self.NOW - timedelta(seconds=1)
        assert not has_active_membership(UserRole.MEMBER, True, expires, now=self.NOW)
