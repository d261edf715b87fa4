import logging
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import ServiceError
from app.core.security import TokenPayload
from app.domains.staff.models import Department, Staff
from app.domains.staff.service import StaffService
from app.domains.users.models import ApprovalStatus, User
from app.domains.users.roles import Role, can_manage_user
from app.domains.users.schemas import UserRegister

logger = logging.getLogger(__name__)

DEFAULT_REJECTION_REASON = "Not specified"


class UsersService:
    def __init__(self, db: Session):
        self.db = db
        self.staff_service = StaffService(db)

    def get_users(self, approval_status: str | None = None, skip: int = 0, limit: int = 100) -> list[User]:
        query = self.db.query(User)
        if approval_status:
            query = query.filter(User.approval_status == approval_status)
        return query.order_by(User.created_at.desc()).offset(skip).limit(limit).all()

    def get_user(self, user_id: UUID) -> User | None:
        return self.db.query(User).filter(User.id == user_id).first()

    def get_user_by_email(self, email: str) -> User | None:
        return self.db.query(User).filter(User.email == email).first()

    def _is_super_admin_email(self, email: str) -> bool:
        """Check if the email matches the configured super admin."""
        return (
            settings.SUPER_ADMIN_EMAIL is not None
            and email.lower() == settings.SUPER_ADMIN_EMAIL.lower()
        )

    def register(self, registration: UserRegister) -> User | ServiceError:
        """
        Create a pending user together with an inactive staff record.

        The configured super admin email skips approval and is always
        provisioned as super_admin.
        """
        if self.get_user_by_email(registration.email):
            return ServiceError.conflict("User already exists")

        data = registration.model_dump()
        bootstrap = self._is_super_admin_email(registration.email)
        if bootstrap:
            data["role"] = Role.SUPER_ADMIN.value

        user = User(**data)
        if bootstrap:
            user.approval_status = ApprovalStatus.APPROVED.value
            user.approved_at = datetime.now(timezone.utc)
        else:
            user.approval_status = ApprovalStatus.PENDING.value
        self.db.add(user)
        self.db.flush()

        staff = Staff(
            name=user.full_name,
            role_label=user.role.replace("_", " "),
            department=Department.OPERATIONS.value,
            contact=user.email,
            user_id=user.id,
            active=bootstrap,
        )
        self.db.add(staff)
        self.db.commit()
        self.db.refresh(user)
        logger.info(f"Registered user {user.email} as {user.role} ({user.approval_status})")
        return user

    def approve_user(self, actor: TokenPayload, user_id: UUID) -> User | ServiceError:
        user = self.get_user(user_id)
        if not user:
            return ServiceError.not_found("User not found")
        if not can_manage_user(actor.role, user.role):
            return ServiceError.forbidden(f"Role '{actor.role}' cannot manage users with role '{user.role}'")
        if user.approval_status == ApprovalStatus.APPROVED.value:
            return ServiceError.validation("User is already approved")

        user.approval_status = ApprovalStatus.APPROVED.value
        user.approved_by = UUID(actor.sub)
        user.approved_at = datetime.now(timezone.utc)
        user.rejection_reason = None
        user.is_active = True
        self.staff_service.set_active_for_user(user.id, True)
        self.db.commit()
        self.db.refresh(user)
        logger.info(f"User {user.email} approved by {actor.sub}")
        return user

    def reject_user(self, actor: TokenPayload, user_id: UUID, reason: str | None = None) -> User | ServiceError:
        user = self.get_user(user_id)
        if not user:
            return ServiceError.not_found("User not found")
        if not can_manage_user(actor.role, user.role):
            return ServiceError.forbidden(f"Role '{actor.role}' cannot manage users with role '{user.role}'")

        user.approval_status = ApprovalStatus.REJECTED.value
        user.rejection_reason = reason or DEFAULT_REJECTION_REASON
        user.is_active = False
        self.staff_service.set_active_for_user(user.id, False)
        self.db.commit()
        self.db.refresh(user)
        logger.info(f"User {user.email} rejected by {actor.sub}: {user.rejection_reason}")
        return user
