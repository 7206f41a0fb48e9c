"""Error taxonomy for the scheduling core.

Every error here is recoverable: the caller reports the reason and the stored
appointments are left exactly as they were before the failed call.
"""


class SchedulingError(Exception):
    """Base class for all scheduling failures."""

    default_detail = 'Scheduling request failed.'

    def __init__(self, detail: str | None = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class InvalidRange(SchedulingError):
    default_detail = 'End time must be after start time.'


class PastSlot(SchedulingError):
    default_detail = 'Cannot book in the past.'


class NotOwner(SchedulingError):
    default_detail = 'Only the owner can perform this action.'


class OverlapError(SchedulingError):
    default_detail = 'This time slot overlaps with an existing appointment.'

    def __init__(self, conflicting_ids: tuple[str, ...], detail: str | None = None):
        self.conflicting_ids = tuple(conflicting_ids)
        super().__init__(detail)


class NoMatchingSlot(SchedulingError):
    default_detail = 'There is no open slot available at that time. Please ask the owner to open this time.'


class NotFound(SchedulingError):
    default_detail = 'Appointment not found.'


class ConfirmationRequired(SchedulingError):
    default_detail = 'Deletion must be explicitly confirmed.'


class PersistenceError(SchedulingError):
    default_detail = 'Appointment storage unavailable. Verify DATABASE_URL.'


class OracleUnavailable(SchedulingError):
    default_detail = 'AI service is currently unavailable.'


class OracleUnparseable(SchedulingError):
    default_detail = (
        "I couldn't quite understand that date or time. "
        "Please try being more specific (e.g., 'Friday at 2pm')."
    )
