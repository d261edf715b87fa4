import logging
from datetime import datetime, timedelta, timezone

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from app.core.config import settings
from app.domains.users.permissions import Action, Resource, has_permission
from app.domains.users.roles import Role

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


class TokenPayload:
    """The authenticated actor: identity (sub) plus a single role."""

    def __init__(self, sub: str, exp: datetime, role: str, email: str | None = None):
        self.sub = sub
        self.exp = exp
        self.role = role
        self.email = email

    @property
    def identity(self) -> str:
        return self.sub


def create_access_token(
    subject: str,
    role: Role | str,
    email: str | None = None,
    expires_delta: timedelta | None = None,
) -> str:
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode = {
        "exp": expire,
        "sub": str(subject),
        "role": role.value if isinstance(role, Role) else role,
    }
    if email:
        to_encode["email"] = email
    encoded_jwt = jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)
    return encoded_jwt


def _unauthenticated() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )


def verify_token(credentials: HTTPAuthorizationCredentials | None = Depends(security)) -> TokenPayload:
    if credentials is None:
        raise _unauthenticated()
    try:
        payload = jwt.decode(credentials.credentials, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        raise _unauthenticated()

    if not payload.get("sub") or not payload.get("role"):
        raise _unauthenticated()

    return TokenPayload(
        sub=payload["sub"],
        exp=payload.get("exp"),
        role=payload["role"],
        email=payload.get("email"),
    )


def require_role(*allowed_roles: Role | str):
    """Guard that admits only the listed roles."""
    allowed = {role.value if isinstance(role, Role) else role for role in allowed_roles}

    def role_checker(token: TokenPayload = Depends(verify_token)) -> TokenPayload:
        if token.role in allowed:
            return token
        logger.info(f"Role {token.role!r} of user {token.sub} not in {sorted(allowed)}")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Insufficient permissions",
        )
    return role_checker


def require_permission(resource: Resource | str, action: Action | str):
    """Guard that consults the permission table before the handler runs."""

    def permission_checker(token: TokenPayload = Depends(verify_token)) -> TokenPayload:
        if has_permission(token.role, resource, action):
            return token
        resource_name = resource.value if isinstance(resource, Resource) else resource
        action_name = action.value if isinstance(action, Action) else action
        logger.info(f"Denied {action_name} on {resource_name} for user {token.sub} (role {token.role!r})")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Role '{token.role}' may not {action_name} {resource_name}",
        )
    return permission_checker
