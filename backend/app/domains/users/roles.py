"""
Role constants and the role hierarchy for the TrailerDesk application.

Every user holds exactly one role. Roles are totally ordered; a higher
level carries more authority.
"""
from enum import Enum


class Role(str, Enum):
    # Lowest level - works on tasks assigned to them
    STAFF = "staff"

    # Runs day-to-day operations and assigns work to staff
    MANAGER = "manager"

    # Administers the business and approves new users
    ADMIN = "admin"

    # Full access, including managing other admins
    SUPER_ADMIN = "super_admin"


# Lowest to highest; the index is the role level
ROLE_HIERARCHY: tuple[Role, ...] = (
    Role.STAFF,
    Role.MANAGER,
    Role.ADMIN,
    Role.SUPER_ADMIN,
)

ALL_ROLES = [role.value for role in ROLE_HIERARCHY]

# Default role for new registrations
DEFAULT_ROLE = Role.STAFF

UNKNOWN_ROLE_LEVEL = -1


def parse_role(role: "Role | str | None") -> Role | None:
    if isinstance(role, Role):
        return role
    try:
        return Role(role)
    except ValueError:
        return None


def level_of(role: Role | str | None) -> int:
    """Position of the role in ROLE_HIERARCHY, or -1 for anything unrecognized."""
    parsed = parse_role(role)
    if parsed is None:
        return UNKNOWN_ROLE_LEVEL
    return ROLE_HIERARCHY.index(parsed)


def can_assign_task_to(assigner_role: Role | str | None, target_role: Role | str | None) -> bool:
    """Tasks may go to the assigner's own level or any level below it."""
    return level_of(assigner_role) >= level_of(target_role)


def can_manage_user(manager_role: Role | str | None, target_role: Role | str | None) -> bool:
    """Whether manager_role may approve or reject a user holding target_role."""
    manager = parse_role(manager_role)
    if manager is Role.SUPER_ADMIN:
        return True
    if manager is Role.ADMIN and parse_role(target_role) is not None:
        return level_of(manager) > level_of(target_role)
    return False
