"""Turn an oracle guess into a pre-filled booking draft.

Oracle output is untrusted: any field may be missing or malformed, and a
malformed field is treated the same as a missing one.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from timesync.scheduling.errors import NoMatchingSlot, OracleUnparseable
from timesync.scheduling.overlap import BookAvailability, BookingIntent, CreateAvailability
from timesync.scheduling.store import AppointmentStore
from timesync.scheduling.workflow import DEFAULT_DURATION_MINUTES, DURATION_OPTIONS, Role, week_start

logger = logging.getLogger(__name__)


class BookingSuggestion(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    date: str | None = None
    start_time: str | None = Field(default=None, alias='startTime')
    duration_minutes: int | None = Field(default=None, alias='durationMinutes')
    title: str | None = None
    reasoning: str | None = None

    @field_validator('date', 'start_time', 'title', 'reasoning', mode='before')
    @classmethod
    def blank_to_none(cls, value):
        if value is None:
            return None
        if not isinstance(value, str):
            return None
        normalized = value.strip()
        return normalized or None

    @field_validator('duration_minutes', mode='before')
    @classmethod
    def validate_duration(cls, value):
        if isinstance(value, bool):
            return None
        try:
            minutes = int(value)
        except (TypeError, ValueError):
            return None
        return minutes if minutes > 0 else None


@dataclass(frozen=True)
class BookingDraft:
    start: datetime
    time: str
    duration_minutes: int
    title: str | None
    target_id: str | None
    intent: BookingIntent
    week_of: date
    reasoning: str | None = None


def parse_suggested_start(suggestion: BookingSuggestion) -> datetime | None:
    if not suggestion.date or not suggestion.start_time:
        return None
    try:
        return datetime.strptime(f'{suggestion.date} {suggestion.start_time}', '%Y-%m-%d %H:%M')
    except ValueError:
        logger.warning('Ignoring suggestion with malformed date/time: %s %s', suggestion.date, suggestion.start_time)
        return None


class SuggestionAdapter:
    def __init__(self, store: AppointmentStore):
        self.store = store

    def to_draft(self, role: Role, suggestion: BookingSuggestion | None) -> BookingDraft:
        if suggestion is None:
            raise OracleUnparseable()

        start = parse_suggested_start(suggestion)
        if start is None:
            raise OracleUnparseable()

        label = start.strftime('%H:%M')
        duration = suggestion.duration_minutes or DEFAULT_DURATION_MINUTES
        if duration not in DURATION_OPTIONS:
            duration = DEFAULT_DURATION_MINUTES

        if role is Role.COLLEAGUE:
            target = self.store.find_starting_at(start.date(), label)
            if target is None or not target.is_availability:
                raise NoMatchingSlot(
                    f'Sorry, there is no open slot available at {label} on {start.date().isoformat()}. '
                    'Please ask the owner to open this time.'
                )
            return BookingDraft(
                start=start,
                time=label,
                duration_minutes=duration,
                title=suggestion.title,
                target_id=target.id,
                intent=BookAvailability(target.id),
                week_of=week_start(start.date()),
                reasoning=suggestion.reasoning,
            )

        return BookingDraft(
            start=start,
            time=label,
            duration_minutes=duration,
            title=suggestion.title,
            target_id=None,
            intent=CreateAvailability(),
            week_of=week_start(start.date()),
            reasoning=suggestion.reasoning,
        )
