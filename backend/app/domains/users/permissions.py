"""
Role -> resource -> allowed actions.

The table is built once at import time and exposed read-only. A role either
holds the Wildcard (every action on every resource) or an Explicit mapping;
a resource missing from an Explicit mapping means no access.
"""
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Mapping

from app.domains.users.roles import Role, parse_role


class Action(str, Enum):
    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"
    ASSIGN = "assign"
    APPROVE = "approve"
    REJECT = "reject"
    EXPORT = "export"


class Resource(str, Enum):
    USERS = "users"
    TASKS = "tasks"
    TRAILERS = "trailers"
    CUSTOMERS = "customers"
    TRANSACTIONS = "transactions"
    REPORTS = "reports"
    STAFF = "staff"
    INSURANCE = "insurance"
    DOCUMENTS = "documents"


@dataclass(frozen=True)
class Wildcard:
    def allows(self, resource: str, action: str) -> bool:
        return True


@dataclass(frozen=True)
class Explicit:
    grants: Mapping[str, frozenset[str]]

    def allows(self, resource: str, action: str) -> bool:
        return action in self.grants.get(resource, frozenset())


PermissionSet = Wildcard | Explicit


def _explicit(grants: dict[Resource, list[Action]]) -> Explicit:
    return Explicit(
        MappingProxyType(
            {resource.value: frozenset(action.value for action in actions) for resource, actions in grants.items()}
        )
    )


CRUD = [Action.CREATE, Action.READ, Action.UPDATE, Action.DELETE]

PERMISSIONS: Mapping[Role, PermissionSet] = MappingProxyType(
    {
        Role.SUPER_ADMIN: Wildcard(),
        Role.ADMIN: _explicit(
            {
                # Admins approve users below them; rejection stays with super admins
                Resource.USERS: [Action.READ, Action.APPROVE],
                Resource.TASKS: [*CRUD, Action.ASSIGN],
                Resource.TRAILERS: CRUD,
                Resource.CUSTOMERS: CRUD,
                Resource.TRANSACTIONS: CRUD,
                Resource.REPORTS: [Action.READ, Action.EXPORT],
                Resource.STAFF: CRUD,
                Resource.INSURANCE: [*CRUD, Action.APPROVE, Action.REJECT],
                Resource.DOCUMENTS: CRUD,
            }
        ),
        Role.MANAGER: _explicit(
            {
                Resource.TASKS: [Action.CREATE, Action.READ, Action.UPDATE, Action.ASSIGN],
                Resource.TRAILERS: [Action.CREATE, Action.READ, Action.UPDATE],
                Resource.CUSTOMERS: [Action.CREATE, Action.READ, Action.UPDATE],
                Resource.TRANSACTIONS: [Action.CREATE, Action.READ, Action.UPDATE],
                Resource.REPORTS: [Action.READ],
                Resource.STAFF: [Action.READ, Action.UPDATE],
                Resource.INSURANCE: [Action.CREATE, Action.READ, Action.UPDATE, Action.APPROVE, Action.REJECT],
                Resource.DOCUMENTS: [Action.CREATE, Action.READ],
            }
        ),
        Role.STAFF: _explicit(
            {
                # Staff work their own tasks
                Resource.TASKS: [Action.READ, Action.UPDATE],
                Resource.TRAILERS: [Action.READ],
                Resource.CUSTOMERS: [Action.READ],
                Resource.INSURANCE: [Action.READ],
                Resource.DOCUMENTS: [Action.READ],
            }
        ),
    }
)


def has_permission(
    role: Role | str | None,
    resource: Resource | str,
    action: Action | str,
    table: Mapping[Role, PermissionSet] = PERMISSIONS,
) -> bool:
    """Fail-closed lookup of (role, resource, action) in the permission table."""
    parsed = parse_role(role)
    if parsed is None:
        return False
    permission_set = table.get(parsed)
    if permission_set is None:
        return False
    resource_name = resource.value if isinstance(resource, Resource) else resource
    action_name = action.value if isinstance(action, Action) else action
    return permission_set.allows(resource_name, action_name)
