"""Tests for the role permission table."""
import pytest

from app.domains.users.permissions import (
    PERMISSIONS,
    Action,
    Explicit,
    Resource,
    Wildcard,
    has_permission,
)
from app.domains.users.roles import Role


class TestPermissionTable:
    def test_every_role_has_an_entry(self):
        assert set(PERMISSIONS) == set(Role)

    def test_super_admin_holds_wildcard(self):
        assert isinstance(PERMISSIONS[Role.SUPER_ADMIN], Wildcard)
        for role in (Role.ADMIN, Role.MANAGER, Role.STAFF):
            assert isinstance(PERMISSIONS[role], Explicit)

    @pytest.mark.parametrize("resource", list(Resource))
    @pytest.mark.parametrize("action", list(Action))
    def test_super_admin_allowed_everything(self, resource, action):
        assert has_permission(Role.SUPER_ADMIN, resource, action)

    def test_super_admin_allowed_unlisted_resource(self):
        assert has_permission("super_admin", "payroll", "purge")

    def test_table_is_read_only(self):
        with pytest.raises(TypeError):
            PERMISSIONS[Role.STAFF] = Wildcard()

    def test_grants_are_read_only(self):
        grants = PERMISSIONS[Role.MANAGER].grants
        with pytest.raises(TypeError):
            grants["users"] = frozenset({"approve"})


class TestHasPermission:
    @pytest.mark.parametrize(
        "role, resource, action",
        [
            (Role.MANAGER, Resource.TASKS, Action.ASSIGN),
            (Role.MANAGER, Resource.INSURANCE, Action.APPROVE),
            (Role.ADMIN, Resource.USERS, Action.APPROVE),
            (Role.ADMIN, Resource.REPORTS, Action.EXPORT),
            (Role.STAFF, Resource.TASKS, Action.UPDATE),
            (Role.STAFF, Resource.TRAILERS, Action.READ),
        ],
    )
    def test_granted(self, role, resource, action):
        assert has_permission(role, resource, action)

    @pytest.mark.parametrize(
        "role, resource, action",
        [
            (Role.STAFF, Resource.TRAILERS, Action.DELETE),
            (Role.STAFF, Resource.TASKS, Action.CREATE),
            (Role.STAFF, Resource.TASKS, Action.ASSIGN),
            (Role.STAFF, Resource.USERS, Action.READ),
            (Role.STAFF, Resource.INSURANCE, Action.APPROVE),
            (Role.MANAGER, Resource.USERS, Action.APPROVE),
            (Role.MANAGER, Resource.TASKS, Action.DELETE),
            (Role.MANAGER, Resource.REPORTS, Action.EXPORT),
            (Role.ADMIN, Resource.USERS, Action.REJECT),
        ],
    )
    def test_denied(self, role, resource, action):
        assert not has_permission(role, resource, action)

    def test_missing_resource_denies(self):
        assert not has_permission(Role.STAFF, Resource.REPORTS, Action.READ)

    @pytest.mark.parametrize("role", ["owner", "", None])
    def test_unknown_role_denied(self, role):
        assert not has_permission(role, Resource.TASKS, Action.READ)

    def test_role_missing_from_table_denied(self):
        table = {Role.SUPER_ADMIN: Wildcard()}
        assert not has_permission(Role.ADMIN, Resource.TASKS, Action.READ, table=table)

    def test_accepts_plain_strings(self):
        assert has_permission("manager", "tasks", "assign")
        assert not has_permission("manager", "tasks", "delete")
