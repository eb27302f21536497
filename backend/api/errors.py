"""Domain error -> HTTP status mapping"""
from fastapi import HTTPException, status

from domain.exceptions import (
    DomainError, ValidationError, DuplicateError, GenerationExhaustedError,
    CertificateNotFoundError, InvalidTransitionError, ImmutableCertificateError,
    DecodeFailedError, PermissionDeniedError, InvalidCredentialsError, UserNotFoundError,
)

STATUS_CODES = [
    (ValidationError, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (DecodeFailedError, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (DuplicateError, status.HTTP_409_CONFLICT),
    (InvalidTransitionError, status.HTTP_409_CONFLICT),
    (ImmutableCertificateError, status.HTTP_409_CONFLICT),
    (CertificateNotFoundError, status.HTTP_404_NOT_FOUND),
    (UserNotFoundError, status.HTTP_404_NOT_FOUND),
    (PermissionDeniedError, status.HTTP_403_FORBIDDEN),
    (InvalidCredentialsError, status.HTTP_401_UNAUTHORIZED),
    (GenerationExhaustedError, status.HTTP_503_SERVICE_UNAVAILABLE),
]


def status_code_for(exc: DomainError) -> int:
    for exc_type, code in STATUS_CODES:
        if isinstance(exc, exc_type):
            return code
    return status.HTTP_400_BAD_REQUEST


def error_detail(exc: DomainError):
    if isinstance(exc, ValidationError):
        return {"message": str(exc), "errors": exc.errors}
    if isinstance(exc, DuplicateError):
        return {"message": str(exc), "field": exc.field}
    return str(exc)


def to_http_exception(exc: DomainError) -> HTTPException:
    return HTTPException(status_code=status_code_for(exc), detail=error_detail(exc))
