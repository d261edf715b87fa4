from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from app.domains.tasks.models import TaskPriority, TaskStatus


class TaskBase(BaseModel):
    title: str = Field(min_length=1)
    description: str = Field(min_length=1)
    priority: TaskPriority = TaskPriority.MEDIUM
    due_date: datetime | None = None

    class Config:
        use_enum_values = True


class TaskCreate(TaskBase):
    assigned_to: UUID
    status: TaskStatus = TaskStatus.PENDING


class TaskUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=1)
    description: str | None = Field(default=None, min_length=1)
    status: TaskStatus | None = None
    priority: TaskPriority | None = None
    assigned_to: UUID | None = None
    due_date: datetime | None = None

    class Config:
        use_enum_values = True


class TaskStatusUpdate(BaseModel):
    status: TaskStatus

    class Config:
        use_enum_values = True


class TaskResponse(TaskBase):
    id: UUID
    status: str
    assigned_to: UUID
    assigned_by: UUID
    completed_at: datetime | None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
