"""Translate service results into HTTP responses."""

from fastapi import HTTPException, status

from backend.app.core.errors import ServiceResult

ERROR_STATUS = {
    "validation": status.HTTP_400_BAD_REQUEST,
    "relationship": status.HTTP_400_BAD_REQUEST,
    "not_found": status.HTTP_404_NOT_FOUND,
    "constraint": status.HTTP_409_CONFLICT,
    "authentication": status.HTTP_401_UNAUTHORIZED,
    "unknown": status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def unwrap(result: ServiceResult):
    if result.ok:
        return result.data
    raise HTTPException(
        status_code=ERROR_STATUS.get(result.error_type, status.HTTP_500_INTERNAL_SERVER_ERROR),
        detail=result.error,
    )
