import logging
from datetime import date
from typing import Sequence

from pydantic import ValidationError

from timesync.scheduling.appointment import Appointment, dump_appointments, load_appointments
from timesync.scheduling.errors import NotFound, OverlapError
from timesync.scheduling.overlap import Blocked, BookingIntent, Consumable, resolve
from timesync.storage import KeyValueStore

logger = logging.getLogger(__name__)


class AppointmentStore:
    """Process-wide appointment collection persisted as one key-value blob.

    ``load`` is called once at start-up. Every successful mutation writes the
    full resulting collection before it replaces the in-memory snapshot, so a
    failed write leaves both copies as they were.
    """

    def __init__(self, backend: KeyValueStore, key: str):
        self._backend = backend
        self._key = key
        self._appointments: tuple[Appointment, ...] = ()

    def load(self) -> None:
        payload = self._backend.read(self._key)
        if not payload:
            self._appointments = ()
            return

        try:
            self._appointments = tuple(load_appointments(payload))
        except ValidationError:
            logger.exception('Failed to parse stored appointments under %s; starting empty.', self._key)
            self._appointments = ()
            return

        logger.info('Loaded %d appointments.', len(self._appointments))

    def list(self) -> tuple[Appointment, ...]:
        return self._appointments

    def get(self, appointment_id: str) -> Appointment:
        for appointment in self._appointments:
            if appointment.id == appointment_id:
                return appointment
        raise NotFound(f'Appointment {appointment_id} not found.')

    def find_starting_at(self, day: date, time_label: str) -> Appointment | None:
        return next(
            (
                appointment for appointment in self._appointments
                if appointment.start.date() == day and appointment.start_label == time_label
            ),
            None,
        )

    def upsert(self, appointment: Appointment, intent: BookingIntent) -> Appointment:
        resolution = resolve(appointment.interval, self._appointments, intent)

        if isinstance(resolution, Blocked):
            raise OverlapError(resolution.conflicting_ids)

        if isinstance(resolution, Consumable):
            updated = [a for a in self._appointments if a.id != resolution.existing_id]
            updated.append(appointment)
            logger.info('Consuming availability %s with %s %s.', resolution.existing_id, appointment.type.value, appointment.id)
        else:
            updated = list(self._appointments)
            index = next((i for i, a in enumerate(updated) if a.id == appointment.id), None)
            if index is None:
                updated.append(appointment)
            else:
                updated[index] = appointment
            logger.info('Saved %s %s.', appointment.type.value, appointment.id)

        self._commit(updated)
        return appointment

    def remove(self, appointment_id: str) -> bool:
        updated = [a for a in self._appointments if a.id != appointment_id]
        if len(updated) == len(self._appointments):
            return False

        self._commit(updated)
        logger.info('Removed appointment %s.', appointment_id)
        return True

    def _commit(self, appointments: Sequence[Appointment]) -> None:
        self._backend.write(self._key, dump_appointments(appointments))
        self._appointments = tuple(appointments)
