from fastapi import HTTPException, status

from timesync.scheduling.errors import (
    ConfirmationRequired,
    InvalidRange,
    NoMatchingSlot,
    NotFound,
    NotOwner,
    OracleUnavailable,
    OracleUnparseable,
    OverlapError,
    PastSlot,
    PersistenceError,
    SchedulingError,
)

ERROR_STATUS_CODES = {
    InvalidRange: status.HTTP_400_BAD_REQUEST,
    PastSlot: status.HTTP_400_BAD_REQUEST,
    ConfirmationRequired: status.HTTP_400_BAD_REQUEST,
    OracleUnparseable: status.HTTP_400_BAD_REQUEST,
    NotOwner: status.HTTP_403_FORBIDDEN,
    NotFound: status.HTTP_404_NOT_FOUND,
    NoMatchingSlot: status.HTTP_404_NOT_FOUND,
    OverlapError: status.HTTP_409_CONFLICT,
    OracleUnavailable: status.HTTP_503_SERVICE_UNAVAILABLE,
    PersistenceError: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def to_http_exception(exc: SchedulingError) -> HTTPException:
    status_code = ERROR_STATUS_CODES.get(type(exc), status.HTTP_400_BAD_REQUEST)
    if isinstance(exc, OverlapError):
        return HTTPException(
            status_code=status_code,
            detail={'message': exc.detail, 'conflicting_ids': list(exc.conflicting_ids)},
        )
    return HTTPException(status_code=status_code, detail=exc.detail)
