"""Translation of operation results into HTTP responses."""
from fastapi import HTTPException

from eventdesk.core.errors import (
    CapacityExceededError,
    NotFoundError,
    PreconditionFailedError,
    RemoteServiceError,
    StaleWriteError,
    ValidationError,
)
from eventdesk.service.module import OperationResult


def status_code_for(error: Exception) -> int:
    if isinstance(error, NotFoundError):
        return 404
    if isinstance(error, (CapacityExceededError, StaleWriteError)):
        return 409
    if isinstance(error, (ValidationError, PreconditionFailedError)):
        return 400
    if isinstance(error, RemoteServiceError):
        return 502
    return 500


def unwrap(result: OperationResult):
    """Return the result's value, or raise the matching HTTPException."""
    if result.cancelled:
        raise HTTPException(status_code=409, detail="Operation was cancelled")
    if not result.ok:
        raise HTTPException(status_code=status_code_for(result.error), detail=str(result.error))
    return result.value
