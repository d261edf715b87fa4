from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.core.dependencies import CurrentUser, DbSession
from app.core.errors import raise_for_error
from app.core.security import TokenPayload, require_permission
from app.domains.users.models import ApprovalStatus
from app.domains.users.permissions import Action, Resource
from app.domains.users.schemas import UserListResponse, UserRegister, UserRejectRequest, UserResponse
from app.domains.users.service import UsersService

router = APIRouter()


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def register(registration: UserRegister, db: DbSession):
    """Register an identity. The account stays pending until an admin approves it."""
    service = UsersService(db)
    return raise_for_error(service.register(registration))


@router.get("/me", response_model=UserResponse)
def get_current_user(db: DbSession, current_user: CurrentUser):
    service = UsersService(db)
    user = service.get_user(UUID(current_user.sub))
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


@router.get("/", response_model=UserListResponse)
def list_users(
    db: DbSession,
    _: TokenPayload = Depends(require_permission(Resource.USERS, Action.READ)),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
):
    service = UsersService(db)
    users = service.get_users(skip=skip, limit=limit)
    return UserListResponse(count=len(users), users=users)


@router.get("/pending", response_model=UserListResponse)
def list_pending_users(
    db: DbSession,
    _: TokenPayload = Depends(require_permission(Resource.USERS, Action.READ)),
):
    service = UsersService(db)
    users = service.get_users(approval_status=ApprovalStatus.PENDING.value)
    return UserListResponse(count=len(users), users=users)


@router.put("/{user_id}/approve", response_model=UserResponse)
def approve_user(
    user_id: UUID,
    db: DbSession,
    actor: TokenPayload = Depends(require_permission(Resource.USERS, Action.APPROVE)),
):
    service = UsersService(db)
    return raise_for_error(service.approve_user(actor, user_id))


@router.put("/{user_id}/reject", response_model=UserResponse)
def reject_user(
    user_id: UUID,
    request: UserRejectRequest,
    db: DbSession,
    actor: TokenPayload = Depends(require_permission(Resource.USERS, Action.REJECT)),
):
    service = UsersService(db)
    return raise_for_error(service.reject_user(actor, user_id, request.reason))
