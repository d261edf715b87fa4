from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.core.dependencies import DbSession
from app.core.errors import raise_for_error
from app.core.security import TokenPayload, require_permission
from app.domains.tasks.schemas import TaskCreate, TaskResponse, TaskStatusUpdate, TaskUpdate
from app.domains.tasks.service import TasksService
from app.domains.users.permissions import Action, Resource

router = APIRouter()


@router.get("/", response_model=list[TaskResponse])
def list_tasks(
    db: DbSession,
    _: TokenPayload = Depends(require_permission(Resource.TASKS, Action.READ)),
    q: str | None = Query(None, description="Search title and description"),
    status: str | None = Query(None),
    priority: str | None = Query(None),
    assigned_to: UUID | None = Query(None),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
):
    service = TasksService(db)
    return service.get_tasks(
        q=q,
        status=None if status == "ALL" else status,
        priority=None if priority == "ALL" else priority,
        assigned_to=assigned_to,
        skip=skip,
        limit=limit,
    )


@router.get("/{task_id}", response_model=TaskResponse)
def get_task(
    task_id: UUID,
    db: DbSession,
    _: TokenPayload = Depends(require_permission(Resource.TASKS, Action.READ)),
):
    service = TasksService(db)
    task = service.get_task(task_id)
    if not task:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")
    return task


@router.post("/", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
def create_task(
    task: TaskCreate,
    db: DbSession,
    actor: TokenPayload = Depends(require_permission(Resource.TASKS, Action.CREATE)),
):
    """Create a task; the assignee must sit at the caller's role level or below."""
    service = TasksService(db)
    return raise_for_error(service.create_task(actor, task))


@router.put("/{task_id}", response_model=TaskResponse)
def update_task(
    task_id: UUID,
    task: TaskUpdate,
    db: DbSession,
    actor: TokenPayload = Depends(require_permission(Resource.TASKS, Action.UPDATE)),
):
    service = TasksService(db)
    return raise_for_error(service.update_task(actor, task_id, task))


@router.patch("/{task_id}/status", response_model=TaskResponse)
def update_task_status(
    task_id: UUID,
    request: TaskStatusUpdate,
    db: DbSession,
    actor: TokenPayload = Depends(require_permission(Resource.TASKS, Action.UPDATE)),
):
    service = TasksService(db)
    return raise_for_error(service.update_status(actor, task_id, request.status))


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_task(
    task_id: UUID,
    db: DbSession,
    _: TokenPayload = Depends(require_permission(Resource.TASKS, Action.DELETE)),
):
    service = TasksService(db)
    if not service.delete_task(task_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")
