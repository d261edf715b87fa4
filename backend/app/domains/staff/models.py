import uuid
from datetime import datetime
from enum import Enum

from sqlalchemy import Boolean, DateTime, String, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base


class Department(str, Enum):
    OPERATIONS = "Operations"
    SALES = "Sales"
    HR = "HR"
    FINANCE = "Finance"
    DRIVERS = "Drivers"


class Staff(Base):
    """
    Business-facing personnel record.

    role_label is display text only; authorization always goes through the
    linked user's role. user_id references users.id by value, without a
    foreign key, so a staff record can exist before or after its login.
    """
    __tablename__ = "staff"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    role_label: Mapped[str] = mapped_column(String(100), nullable=False)
    department: Mapped[str] = mapped_column(String(50), nullable=False)
    contact: Mapped[str] = mapped_column(String(255), nullable=False)
    active: Mapped[bool] = mapped_column(Boolean, default=True, index=True)
    user_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True, unique=True, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
