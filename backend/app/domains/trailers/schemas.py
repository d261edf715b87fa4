from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from app.domains.trailers.models import TrailerStatus


class TrailerBase(BaseModel):
    trailer_no: str = Field(min_length=1)
    description: str = Field(min_length=1)
    vin_no: str = Field(min_length=1)
    license_plate: str = Field(min_length=1)
    registration_expiry: datetime
    old_license_plate: str | None = None
    value: float
    rent: float
    advance: float
    status: TrailerStatus = TrailerStatus.ACTIVE

    class Config:
        use_enum_values = True


class TrailerCreate(TrailerBase):
    pass


class TrailerUpdate(BaseModel):
    trailer_no: str | None = Field(default=None, min_length=1)
    description: str | None = None
    vin_no: str | None = None
    license_plate: str | None = None
    registration_expiry: datetime | None = None
    old_license_plate: str | None = None
    value: float | None = None
    rent: float | None = None
    advance: float | None = None
    status: TrailerStatus | None = None

    class Config:
        use_enum_values = True


class TrailerResponse(TrailerBase):
    id: UUID
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class TrailerSummary(BaseModel):
    id: UUID
    trailer_no: str
    description: str
    vin_no: str
    license_plate: str
    status: str

    class Config:
        from_attributes = True
