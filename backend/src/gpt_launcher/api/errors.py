from __future__ import annotations

from fastapi import HTTPException, status

from ..core.errors import (
    ClipboardUnavailable,
    LauncherError,
    MalformedSubmission,
    MissingRequiredField,
    PersistenceFailure,
)


_STATUS_BY_ERROR: dict[type[LauncherError], int] = {
    MissingRequiredField: 422,
    MalformedSubmission: status.HTTP_400_BAD_REQUEST,
    PersistenceFailure: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ClipboardUnavailable: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def as_http_exception(exc: LauncherError) -> HTTPException:
    """Map a typed launcher error onto a structured HTTP error body."""
    code = status.HTTP_400_BAD_REQUEST
    for error_type, mapped in _STATUS_BY_ERROR.items():
        if isinstance(exc, error_type):
            code = mapped
            break
    return HTTPException(status_code=code, detail=exc.to_detail())
