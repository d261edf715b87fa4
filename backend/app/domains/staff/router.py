from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.core.dependencies import DbSession
from app.core.errors import raise_for_error
from app.core.security import TokenPayload, require_permission
from app.domains.staff.schemas import StaffCreate, StaffResponse, StaffUpdate, StaffUserLink
from app.domains.staff.service import StaffService
from app.domains.users.permissions import Action, Resource

router = APIRouter()


@router.get("/", response_model=list[StaffResponse])
def list_staff(
    db: DbSession,
    _: TokenPayload = Depends(require_permission(Resource.STAFF, Action.READ)),
    q: str | None = Query(None, description="Search name, role label, department or contact"),
    department: str | None = Query(None),
    active: bool | None = Query(None),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
):
    service = StaffService(db)
    return service.list_staff(q=q, department=department, active=active, skip=skip, limit=limit)


@router.get("/{staff_id}", response_model=StaffResponse)
def get_staff(
    staff_id: UUID,
    db: DbSession,
    _: TokenPayload = Depends(require_permission(Resource.STAFF, Action.READ)),
):
    service = StaffService(db)
    staff = service.get_staff(staff_id)
    if not staff:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Staff not found")
    return staff


@router.post("/", response_model=StaffResponse, status_code=status.HTTP_201_CREATED)
def create_staff(
    staff: StaffCreate,
    db: DbSession,
    _: TokenPayload = Depends(require_permission(Resource.STAFF, Action.CREATE)),
):
    service = StaffService(db)
    return raise_for_error(service.create_staff(staff))


@router.put("/{staff_id}", response_model=StaffResponse)
def update_staff(
    staff_id: UUID,
    staff: StaffUpdate,
    db: DbSession,
    _: TokenPayload = Depends(require_permission(Resource.STAFF, Action.UPDATE)),
):
    service = StaffService(db)
    return raise_for_error(service.update_staff(staff_id, staff))


@router.put("/{staff_id}/user", response_model=StaffResponse)
def link_staff_user(
    staff_id: UUID,
    link: StaffUserLink,
    db: DbSession,
    actor: TokenPayload = Depends(require_permission(Resource.USERS, Action.APPROVE)),
):
    service = StaffService(db)
    return raise_for_error(service.link_user(actor, staff_id, link.user_id))


@router.delete("/{staff_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_staff(
    staff_id: UUID,
    db: DbSession,
    _: TokenPayload = Depends(require_permission(Resource.STAFF, Action.DELETE)),
):
    service = StaffService(db)
    if not service.delete_staff(staff_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Staff not found")
