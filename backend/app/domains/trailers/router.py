from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.core.dependencies import DbSession
from app.core.errors import raise_for_error
from app.core.security import TokenPayload, require_permission
from app.domains.trailers.schemas import TrailerCreate, TrailerResponse, TrailerUpdate
from app.domains.trailers.service import TrailersService
from app.domains.users.permissions import Action, Resource

router = APIRouter()


@router.get("/", response_model=list[TrailerResponse])
def list_trailers(
    db: DbSession,
    _: TokenPayload = Depends(require_permission(Resource.TRAILERS, Action.READ)),
    q: str | None = Query(None, description="Search trailer number, description, VIN or plate"),
    status: str | None = Query(None),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
):
    service = TrailersService(db)
    return service.get_trailers(q=q, status=status, skip=skip, limit=limit)


@router.get("/{trailer_id}", response_model=TrailerResponse)
def get_trailer(
    trailer_id: UUID,
    db: DbSession,
    _: TokenPayload = Depends(require_permission(Resource.TRAILERS, Action.READ)),
):
    service = TrailersService(db)
    trailer = service.get_trailer(trailer_id)
    if not trailer:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Trailer not found")
    return trailer


@router.post("/", response_model=TrailerResponse, status_code=status.HTTP_201_CREATED)
def create_trailer(
    trailer: TrailerCreate,
    db: DbSession,
    _: TokenPayload = Depends(require_permission(Resource.TRAILERS, Action.CREATE)),
):
    service = TrailersService(db)
    return raise_for_error(service.create_trailer(trailer))


@router.put("/{trailer_id}", response_model=TrailerResponse)
def update_trailer(
    trailer_id: UUID,
    trailer: TrailerUpdate,
    db: DbSession,
    _: TokenPayload = Depends(require_permission(Resource.TRAILERS, Action.UPDATE)),
):
    service = TrailersService(db)
    return raise_for_error(service.update_trailer(trailer_id, trailer))


@router.delete("/{trailer_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_trailer(
    trailer_id: UUID,
    db: DbSession,
    _: TokenPayload = Depends(require_permission(Resource.TRAILERS, Action.DELETE)),
):
    service = TrailersService(db)
    if not raise_for_error(service.delete_trailer(trailer_id)):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Trailer not found")
