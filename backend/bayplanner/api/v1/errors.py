"""Translation of scheduling errors into HTTP responses."""

from fastapi import HTTPException, status

from bayplanner.scheduling.errors import (
    ConflictError,
    NotFoundError,
    PersistenceError,
    SchedulingError,
    ValidationError,
)


def http_error(exc: SchedulingError) -> HTTPException:
    """HTTPException carrying the error's ``to_dict()`` as its detail."""
    if isinstance(exc, ConflictError):
        code = status.HTTP_409_CONFLICT
    elif isinstance(exc, NotFoundError):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, ValidationError):
        code = status.HTTP_422_UNPROCESSABLE_ENTITY
    elif isinstance(exc, PersistenceError):
        code = status.HTTP_503_SERVICE_UNAVAILABLE
    else:
        code = status.HTTP_400_BAD_REQUEST
    return HTTPException(status_code=code, detail=exc.to_dict())
