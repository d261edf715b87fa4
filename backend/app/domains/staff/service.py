import logging
from uuid import UUID

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.errors import ServiceError, null_field_error
from app.core.security import TokenPayload
from app.domains.staff.models import Staff
from app.domains.staff.schemas import StaffCreate, StaffUpdate
from app.domains.users.models import User
from app.domains.users.roles import can_manage_user

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("name", "role_label", "department", "contact", "active")


class StaffService:
    def __init__(self, db: Session):
        self.db = db

    def list_staff(
        self,
        q: str | None = None,
        department: str | None = None,
        active: bool | None = None,
        skip: int = 0,
        limit: int = 100,
    ) -> list[Staff]:
        query = self.db.query(Staff)

        if q:
            pattern = f"%{q}%"
            query = query.filter(
                or_(
                    Staff.name.ilike(pattern),
                    Staff.role_label.ilike(pattern),
                    Staff.department.ilike(pattern),
                    Staff.contact.ilike(pattern),
                )
            )
        if department:
            query = query.filter(Staff.department == department)
        if active is not None:
            query = query.filter(Staff.active == active)

        return query.order_by(Staff.created_at.desc()).offset(skip).limit(limit).all()

    def get_staff(self, staff_id: UUID) -> Staff | None:
        return self.db.query(Staff).filter(Staff.id == staff_id).first()

    def get_staff_by_user(self, user_id: UUID) -> Staff | None:
        return self.db.query(Staff).filter(Staff.user_id == user_id).first()

    def create_staff(self, staff: StaffCreate) -> Staff | ServiceError:
        db_staff = Staff(**staff.model_dump())
        self.db.add(db_staff)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            return ServiceError.conflict("User is already linked to another staff record")
        self.db.refresh(db_staff)
        return db_staff

    def update_staff(self, staff_id: UUID, staff: StaffUpdate) -> Staff | ServiceError:
        db_staff = self.get_staff(staff_id)
        if not db_staff:
            return ServiceError.not_found("Staff not found")
        update_data = staff.model_dump(exclude_unset=True)
        error = null_field_error(update_data, REQUIRED_FIELDS)
        if error:
            return error
        for field, value in update_data.items():
            setattr(db_staff, field, value)
        self.db.commit()
        self.db.refresh(db_staff)
        return db_staff

    def link_user(self, actor: TokenPayload, staff_id: UUID, user_id: UUID | None) -> Staff | ServiceError:
        """
        Point a staff record at a different login, or detach it.

        The actor must be able to manage both the user being detached and
        the user being attached.
        """
        db_staff = self.get_staff(staff_id)
        if not db_staff:
            return ServiceError.not_found("Staff not found")
        if db_staff.user_id == user_id:
            return db_staff

        affected = [uid for uid in (db_staff.user_id, user_id) if uid is not None]
        for uid in affected:
            user = self.db.query(User).filter(User.id == uid).first()
            if not user:
                if uid == user_id:
                    return ServiceError.not_found("User not found")
                continue
            if not can_manage_user(actor.role, user.role):
                return ServiceError.forbidden(f"Role '{actor.role}' may not relink a {user.role} account")

        db_staff.user_id = user_id
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            return ServiceError.conflict("User is already linked to another staff record")
        self.db.refresh(db_staff)
        logger.info(f"Staff {db_staff.id} linked to user {user_id} by {actor.sub}")
        return db_staff

    def set_active_for_user(self, user_id: UUID, active: bool) -> Staff | None:
        """Activate or deactivate the staff record mirroring a user. Caller commits."""
        db_staff = self.get_staff_by_user(user_id)
        if db_staff:
            db_staff.active = active
            logger.info(f"Staff {db_staff.id} for user {user_id} set active={active}")
        return db_staff

    def delete_staff(self, staff_id: UUID) -> bool:
        db_staff = self.get_staff(staff_id)
        if not db_staff:
            return False
        # Tasks keep their assigned_to reference; orphans are tolerated
        self.db.delete(db_staff)
        self.db.commit()
        return True
