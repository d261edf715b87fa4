from uuid import UUID

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.errors import ServiceError, null_field_error
from app.domains.trailers.models import Trailer
from app.domains.trailers.schemas import TrailerCreate, TrailerUpdate

REQUIRED_FIELDS = (
    "trailer_no",
    "description",
    "vin_no",
    "license_plate",
    "registration_expiry",
    "value",
    "rent",
    "advance",
    "status",
)


class TrailersService:
    def __init__(self, db: Session):
        self.db = db

    def get_trailers(
        self,
        q: str | None = None,
        status: str | None = None,
        skip: int = 0,
        limit: int = 100,
    ) -> list[Trailer]:
        query = self.db.query(Trailer)
        if q:
            pattern = f"%{q}%"
            query = query.filter(
                or_(
                    Trailer.trailer_no.ilike(pattern),
                    Trailer.description.ilike(pattern),
                    Trailer.vin_no.ilike(pattern),
                    Trailer.license_plate.ilike(pattern),
                )
            )
        if status:
            query = query.filter(Trailer.status == status)
        return query.order_by(Trailer.created_at.desc()).offset(skip).limit(limit).all()

    def get_trailer(self, trailer_id: UUID) -> Trailer | None:
        return self.db.query(Trailer).filter(Trailer.id == trailer_id).first()

    def create_trailer(self, trailer: TrailerCreate) -> Trailer | ServiceError:
        db_trailer = Trailer(**trailer.model_dump())
        self.db.add(db_trailer)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            return ServiceError.conflict("Trailer number already exists")
        self.db.refresh(db_trailer)
        return db_trailer

    def update_trailer(self, trailer_id: UUID, trailer: TrailerUpdate) -> Trailer | ServiceError:
        db_trailer = self.get_trailer(trailer_id)
        if not db_trailer:
            return ServiceError.not_found("Trailer not found")
        update_data = trailer.model_dump(exclude_unset=True)
        error = null_field_error(update_data, REQUIRED_FIELDS)
        if error:
            return error
        for field, value in update_data.items():
            setattr(db_trailer, field, value)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            return ServiceError.conflict("Trailer number already exists")
        self.db.refresh(db_trailer)
        return db_trailer

    def delete_trailer(self, trailer_id: UUID) -> bool | ServiceError:
        db_trailer = self.get_trailer(trailer_id)
        if not db_trailer:
            return False
        self.db.delete(db_trailer)
        try:
            self.db.commit()
        except IntegrityError:
            # Insurance policies reference trailers with ON DELETE RESTRICT
            self.db.rollback()
            return ServiceError.conflict("Trailer has insurance policies and cannot be deleted")
        return True
