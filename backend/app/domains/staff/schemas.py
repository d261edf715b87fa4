from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from app.domains.staff.models import Department


class StaffBase(BaseModel):
    name: str = Field(min_length=1)
    role_label: str = Field(min_length=1)
    department: Department
    contact: str = Field(min_length=1)
    active: bool = True

    class Config:
        use_enum_values = True


class StaffCreate(StaffBase):
    user_id: UUID | None = None


class StaffUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1)
    role_label: str | None = Field(default=None, min_length=1)
    department: Department | None = None
    contact: str | None = Field(default=None, min_length=1)
    active: bool | None = None

    class Config:
        use_enum_values = True


class StaffUserLink(BaseModel):
    """Link a staff record to a login, or unlink it with null."""
    user_id: UUID | None


class StaffResponse(StaffBase):
    id: UUID
    user_id: UUID | None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
