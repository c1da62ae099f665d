from enum import Enum

from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError


class ErrorKind(str, Enum):
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    BAD_REQUEST = "BAD_REQUEST"
    CONFLICT = "CONFLICT"
    NOT_FOUND = "NOT_FOUND"


STATUS_BY_KIND = {
    ErrorKind.UNAUTHORIZED: 401,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.BAD_REQUEST: 400,
    ErrorKind.CONFLICT: 409,
    ErrorKind.NOT_FOUND: 404,
}


class ServiceError(HTTPException):
    """An HTTPException that also carries a stable error kind."""

    def __init__(self, kind: ErrorKind, detail: str):
        headers = {"WWW-Authenticate": "Bearer"} if kind is ErrorKind.UNAUTHORIZED else None
        super().__init__(status_code=STATUS_BY_KIND[kind], detail=detail, headers=headers)
        self.kind = kind


def unauthorized(detail: str = "Unauthorized") -> ServiceError:
    return ServiceError(ErrorKind.UNAUTHORIZED, detail)


def forbidden(detail: str = "You are not allowed to perform this action.") -> ServiceError:
    return ServiceError(ErrorKind.FORBIDDEN, detail)


def bad_request(detail: str) -> ServiceError:
    return ServiceError(ErrorKind.BAD_REQUEST, detail)


def conflict(detail: str) -> ServiceError:
    return ServiceError(ErrorKind.CONFLICT, detail)


def not_found(detail: str) -> ServiceError:
    return ServiceError(ErrorKind.NOT_FOUND, detail)


# ordered: the first fragment found in the driver message wins
_CONFLICT_MESSAGES = [
    ("domain", "That organization domain is already in use."),
    ("email", "An account already exists for that email address."),
    ("employee_code", "That employee code is already in use in this organization."),
    ("holidays", "This date is already marked as a holiday."),
    ("departments", "A department with that name already exists."),
    ("teams", "A team with that name already exists."),
]


def translate_integrity_error(exc: IntegrityError) -> ServiceError:
    message = str(getattr(exc, "orig", exc)).lower()
    for fragment, friendly in _CONFLICT_MESSAGES:
        if fragment in message:
            return conflict(friendly)
    return conflict("That record conflicts with an existing one.")


async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "code": exc.kind.value},
        headers=exc.headers,
    )
