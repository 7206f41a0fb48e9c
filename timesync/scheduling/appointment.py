"""Appointment record and its wire format."""

import uuid
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, model_validator

from timesync.scheduling.interval import Interval


class AppointmentType(str, Enum):
    AVAILABILITY = 'availability'
    MEETING = 'meeting'


def new_appointment_id() -> str:
    return str(uuid.uuid4())


class Appointment(BaseModel):
    """A stored availability window or meeting."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(default_factory=new_appointment_id)
    title: str
    start: datetime
    end: datetime
    requester_name: str = Field(alias='requesterName')
    type: AppointmentType

    @model_validator(mode='after')
    def validate_range(self) -> 'Appointment':
        if self.start.tzinfo is not None or self.end.tzinfo is not None:
            raise ValueError('start and end must be local wall-clock times without a UTC offset')
        if self.end <= self.start:
            raise ValueError('end must be after start')
        return self

    @property
    def interval(self) -> Interval:
        return Interval(self.start, self.end)

    @property
    def duration_minutes(self) -> int:
        return self.interval.duration_minutes()

    @property
    def is_availability(self) -> bool:
        return self.type is AppointmentType.AVAILABILITY

    @property
    def start_label(self) -> str:
        return self.start.strftime('%H:%M')

    @classmethod
    def build(
        cls,
        *,
        title: str,
        interval: Interval,
        requester_name: str,
        type: AppointmentType,
        id: str | None = None,
    ) -> 'Appointment':
        return cls(
            id=id or new_appointment_id(),
            title=title,
            start=interval.start,
            end=interval.end,
            requester_name=requester_name,
            type=type,
        )


_appointment_list_adapter = TypeAdapter(list[Appointment])


def dump_appointments(appointments) -> str:
    return _appointment_list_adapter.dump_json(list(appointments), by_alias=True).decode('utf-8')


def load_appointments(payload: str | bytes) -> list[Appointment]:
    return _appointment_list_adapter.validate_json(payload)
