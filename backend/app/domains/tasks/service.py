import logging
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.core.errors import ServiceError, null_field_error
from app.core.security import TokenPayload
from app.domains.staff.service import StaffService
from app.domains.tasks.models import Task, TaskStatus
from app.domains.tasks.policy import TaskAssignmentPolicy
from app.domains.tasks.schemas import TaskCreate, TaskUpdate
from app.domains.users.permissions import Action, Resource, has_permission
from app.domains.users.roles import Role, level_of

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("title", "description", "status", "priority", "assigned_to")


def completed_at_for(status: str, now: datetime, current: datetime | None = None) -> datetime | None:
    """completed_at is set when a task becomes Completed and cleared for any other status."""
    if status != TaskStatus.COMPLETED.value:
        return None
    return current or now


class TasksService:
    def __init__(self, db: Session):
        self.db = db
        self.policy = TaskAssignmentPolicy(db)
        self.staff_service = StaffService(db)

    def get_tasks(
        self,
        q: str | None = None,
        status: str | None = None,
        priority: str | None = None,
        assigned_to: UUID | None = None,
        skip: int = 0,
        limit: int = 100,
    ) -> list[Task]:
        query = self.db.query(Task)

        if q:
            pattern = f"%{q}%"
            query = query.filter(or_(Task.title.ilike(pattern), Task.description.ilike(pattern)))
        if status:
            query = query.filter(Task.status == status)
        if priority:
            query = query.filter(Task.priority == priority)
        if assigned_to:
            query = query.filter(Task.assigned_to == assigned_to)

        return query.order_by(Task.created_at.desc()).offset(skip).limit(limit).all()

    def get_task(self, task_id: UUID) -> Task | None:
        return self.db.query(Task).filter(Task.id == task_id).first()

    def _works_on_own_tasks_only(self, actor: TokenPayload) -> bool:
        return level_of(actor.role) < level_of(Role.MANAGER)

    def _is_own_task(self, actor: TokenPayload, task: Task) -> bool:
        own_staff = self.staff_service.get_staff_by_user(UUID(actor.sub))
        return own_staff is not None and own_staff.id == task.assigned_to

    def create_task(self, actor: TokenPayload, task: TaskCreate) -> Task | ServiceError:
        decision = self.policy.check_assignment(actor, task.assigned_to)
        if not decision.allowed:
            return ServiceError.forbidden(decision.reason)

        now = datetime.now(timezone.utc)
        db_task = Task(**task.model_dump(), assigned_by=UUID(actor.sub))
        db_task.completed_at = completed_at_for(db_task.status, now)
        self.db.add(db_task)
        self.db.commit()
        self.db.refresh(db_task)
        logger.info(f"Task {db_task.id} assigned to staff {db_task.assigned_to} by {actor.sub}")
        return db_task

    def update_task(self, actor: TokenPayload, task_id: UUID, task: TaskUpdate) -> Task | ServiceError:
        db_task = self.get_task(task_id)
        if not db_task:
            return ServiceError.not_found("Task not found")
        if self._works_on_own_tasks_only(actor) and not self._is_own_task(actor, db_task):
            return ServiceError.forbidden("You can only update tasks assigned to you")

        update_data = task.model_dump(exclude_unset=True)
        update_data.pop("completed_at", None)
        error = null_field_error(update_data, REQUIRED_FIELDS)
        if error:
            return error

        new_assignee = update_data.get("assigned_to")
        if new_assignee is not None and new_assignee != db_task.assigned_to:
            if not has_permission(actor.role, Resource.TASKS, Action.ASSIGN):
                return ServiceError.forbidden(f"Role '{actor.role}' may not assign tasks")
            decision = self.policy.check_assignment(actor, new_assignee)
            if not decision.allowed:
                return ServiceError.forbidden(decision.reason)

        for field, value in update_data.items():
            setattr(db_task, field, value)
        if "status" in update_data:
            db_task.completed_at = completed_at_for(
                db_task.status, datetime.now(timezone.utc), db_task.completed_at
            )

        self.db.commit()
        self.db.refresh(db_task)
        return db_task

    def update_status(self, actor: TokenPayload, task_id: UUID, status: str) -> Task | ServiceError:
        db_task = self.get_task(task_id)
        if not db_task:
            return ServiceError.not_found("Task not found")
        if self._works_on_own_tasks_only(actor) and not self._is_own_task(actor, db_task):
            return ServiceError.forbidden("You can only update tasks assigned to you")

        db_task.status = status
        db_task.completed_at = completed_at_for(status, datetime.now(timezone.utc), db_task.completed_at)
        self.db.commit()
        self.db.refresh(db_task)
        return db_task

    def delete_task(self, task_id: UUID) -> bool:
        db_task = self.get_task(task_id)
        if not db_task:
            return False
        self.db.delete(db_task)
        self.db.commit()
        return True
