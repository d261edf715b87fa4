from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field

from app.domains.users.roles import Role


class UserBase(BaseModel):
    email: EmailStr
    full_name: str = Field(min_length=1)


class UserRegister(UserBase):
    role: Role
    phone: str | None = None
    address: str | None = None

    class Config:
        use_enum_values = True


class UserRejectRequest(BaseModel):
    reason: str | None = None


class UserResponse(UserBase):
    id: UUID
    role: str
    phone: str | None
    address: str | None
    approval_status: str
    approved_by: UUID | None
    approved_at: datetime | None
    rejection_reason: str | None
    is_active: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class UserListResponse(BaseModel):
    count: int
    users: list[UserResponse]
