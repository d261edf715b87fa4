"""
Task assignment policy.

Runs before a task is created or reassigned. The assignee's role comes from
the user linked to their staff record, never from the staff role label.
"""
import logging
from dataclasses import dataclass
from uuid import UUID

from sqlalchemy.orm import Session

from app.core.security import TokenPayload
from app.domains.staff.service import StaffService
from app.domains.users.roles import can_assign_task_to
from app.domains.users.service import UsersService

logger = logging.getLogger(__name__)

ASSIGNEE_NOT_FOUND = "assignee not found"
ASSIGN_UPWARD_DENIED = "You can only assign tasks to staff at your own role level or below"


@dataclass(frozen=True)
class AssignmentDecision:
    allowed: bool
    reason: str | None = None

    @classmethod
    def allow(cls) -> "AssignmentDecision":
        return cls(allowed=True)

    @classmethod
    def deny(cls, reason: str) -> "AssignmentDecision":
        return cls(allowed=False, reason=reason)


class TaskAssignmentPolicy:
    def __init__(self, db: Session):
        self.staff_service = StaffService(db)
        self.users_service = UsersService(db)

    def check_assignment(self, actor: TokenPayload, assignee_staff_id: UUID) -> AssignmentDecision:
        assignee = self.staff_service.get_staff(assignee_staff_id)
        if assignee is None or assignee.user_id is None:
            logger.info(f"Assignment by {actor.sub} denied: staff {assignee_staff_id} has no linked user")
            return AssignmentDecision.deny(ASSIGNEE_NOT_FOUND)

        assignee_user = self.users_service.get_user(assignee.user_id)
        if assignee_user is None:
            logger.info(f"Assignment by {actor.sub} denied: user {assignee.user_id} is missing")
            return AssignmentDecision.deny(ASSIGNEE_NOT_FOUND)

        if not can_assign_task_to(actor.role, assignee_user.role):
            logger.info(
                f"Assignment by {actor.sub} ({actor.role}) to staff {assignee_staff_id} "
                f"({assignee_user.role}) denied"
            )
            return AssignmentDecision.deny(ASSIGN_UPWARD_DENIED)

        return AssignmentDecision.allow()
