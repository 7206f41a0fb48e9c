"""Classify a candidate interval against the stored appointments.

The caller states its intent up front. Opening new availability may not touch
any stored record, booking an availability may overlap the record it is
consuming but nothing else, and editing a record may overlap only itself.
"""

from dataclasses import dataclass
from typing import Iterable, Union

from timesync.scheduling.appointment import Appointment
from timesync.scheduling.errors import NotFound
from timesync.scheduling.interval import Interval


@dataclass(frozen=True)
class CreateAvailability:
    pass


@dataclass(frozen=True)
class BookAvailability:
    target_id: str


@dataclass(frozen=True)
class EditExisting:
    appointment_id: str


BookingIntent = Union[CreateAvailability, BookAvailability, EditExisting]


@dataclass(frozen=True)
class Free:
    pass


@dataclass(frozen=True)
class Consumable:
    existing_id: str


@dataclass(frozen=True)
class Blocked:
    conflicting_ids: tuple[str, ...]

    @property
    def existing_id(self) -> str:
        return self.conflicting_ids[0]


Resolution = Union[Free, Consumable, Blocked]


def find_conflicts(
    candidate: Interval,
    appointments: Iterable[Appointment],
    exclude_id: str | None = None,
) -> tuple[str, ...]:
    return tuple(
        appointment.id
        for appointment in appointments
        if appointment.id != exclude_id and candidate.overlaps(appointment.interval)
    )


def resolve(candidate: Interval, appointments: Iterable[Appointment], intent: BookingIntent) -> Resolution:
    appointments = list(appointments)

    if isinstance(intent, CreateAvailability):
        conflicts = find_conflicts(candidate, appointments)
        return Blocked(conflicts) if conflicts else Free()

    if isinstance(intent, BookAvailability):
        target = next((a for a in appointments if a.id == intent.target_id), None)
        if target is None:
            raise NotFound(f'Appointment {intent.target_id} not found.')
        if not target.is_availability:
            return Blocked((target.id,))

        conflicts = find_conflicts(candidate, appointments, exclude_id=target.id)
        return Blocked(conflicts) if conflicts else Consumable(target.id)

    if isinstance(intent, EditExisting):
        if not any(a.id == intent.appointment_id for a in appointments):
            raise NotFound(f'Appointment {intent.appointment_id} not found.')

        conflicts = find_conflicts(candidate, appointments, exclude_id=intent.appointment_id)
        return Blocked(conflicts) if conflicts else Free()

    raise TypeError(f'Unsupported booking intent: {intent!r}')
