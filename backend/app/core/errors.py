"""
Service-level error results.

Domain services return either their value or a ServiceError. Routers turn
the error into an HTTPException at the boundary with raise_for_error().
"""
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from typing import TypeVar

from fastapi import HTTPException, status


class ErrorKind(str, Enum):
    NOT_FOUND = "not_found"
    VALIDATION = "validation"
    FORBIDDEN = "forbidden"
    CONFLICT = "conflict"
    UPSTREAM = "upstream"


STATUS_BY_KIND = {
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.VALIDATION: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorKind.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.UPSTREAM: status.HTTP_503_SERVICE_UNAVAILABLE,
}


@dataclass(frozen=True)
class ServiceError:
    kind: ErrorKind
    message: str

    @classmethod
    def not_found(cls, message: str) -> "ServiceError":
        return cls(ErrorKind.NOT_FOUND, message)

    @classmethod
    def validation(cls, message: str) -> "ServiceError":
        return cls(ErrorKind.VALIDATION, message)

    @classmethod
    def forbidden(cls, message: str) -> "ServiceError":
        return cls(ErrorKind.FORBIDDEN, message)

    @classmethod
    def conflict(cls, message: str) -> "ServiceError":
        return cls(ErrorKind.CONFLICT, message)

    @classmethod
    def upstream(cls, message: str) -> "ServiceError":
        return cls(ErrorKind.UPSTREAM, message)


T = TypeVar("T")


def null_field_error(update_data: dict, required: Iterable[str]) -> ServiceError | None:
    """Explicit nulls for required columns are a validation failure, not a database error."""
    nulled = sorted(field for field in required if field in update_data and update_data[field] is None)
    if nulled:
        return ServiceError.validation(f"Fields cannot be null: {', '.join(nulled)}")
    return None


def raise_for_error(result: T | ServiceError) -> T:
    """Return the value, or raise the HTTPException matching the error kind."""
    if isinstance(result, ServiceError):
        raise HTTPException(status_code=STATUS_BY_KIND[result.kind], detail=result.message)
    return result
