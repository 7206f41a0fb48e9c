import logging
import math
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from enum import Enum
from typing import Callable

from timesync.core import config
from timesync.scheduling.appointment import Appointment, AppointmentType
from timesync.scheduling.errors import ConfirmationRequired, NotFound, NotOwner, PastSlot
from timesync.scheduling.interval import Interval
from timesync.scheduling.overlap import BookAvailability, CreateAvailability, EditExisting
from timesync.scheduling.store import AppointmentStore

logger = logging.getLogger(__name__)

DEFAULT_DURATION_MINUTES = 30
DURATION_OPTIONS = (30, 45, 60, 90, 120)
DEFAULT_AVAILABILITY_TITLE = 'Open for Booking'
DEFAULT_OWNER_REQUESTER = 'Me'
WORK_WEEK_DAYS = 5


class Role(str, Enum):
    OWNER = 'owner'
    COLLEAGUE = 'colleague'


class CellState(str, Enum):
    EMPTY = 'empty'
    AVAILABLE = 'available'
    BOOKED = 'booked'
    COVERED = 'covered'


@dataclass(frozen=True)
class CellView:
    day: date
    time: str
    start: datetime
    state: CellState
    appointment: Appointment | None = None
    row_span: int = 1
    is_past: bool = False


@dataclass(frozen=True)
class CellRequest:
    title: str
    requester_name: str
    duration_minutes: int = DEFAULT_DURATION_MINUTES
    type: AppointmentType | None = None


def week_start(anchor: date) -> date:
    return anchor - timedelta(days=anchor.weekday())


def time_labels(
    start_hour: int | None = None,
    end_hour: int | None = None,
    step_minutes: int | None = None,
) -> list[str]:
    start_hour = config.WORKING_HOURS_START if start_hour is None else start_hour
    end_hour = config.WORKING_HOURS_END if end_hour is None else end_hour
    step_minutes = step_minutes or config.SLOT_DURATION_MINUTES

    labels: list[str] = []
    for hour in range(start_hour, end_hour):
        for minute in range(0, 60, step_minutes):
            labels.append(f'{hour:02d}:{minute:02d}')
    return labels


def parse_time_label(label: str) -> time:
    return datetime.strptime(label, '%H:%M').time()


def cell_start(day: date, label: str) -> datetime:
    return datetime.combine(day, parse_time_label(label))


class BookingWorkflow:
    """Role-gated transitions of calendar cells on top of the store."""

    def __init__(self, store: AppointmentStore, clock: Callable[[], datetime] = datetime.now):
        self.store = store
        self._clock = clock

    def cell_state(self, day: date, label: str) -> CellView:
        start = cell_start(day, label)
        is_past = start < self._clock()

        appointment = self.store.find_starting_at(day, label)
        if appointment is not None:
            state = CellState.AVAILABLE if appointment.is_availability else CellState.BOOKED
            row_span = max(1, math.ceil(appointment.duration_minutes / config.SLOT_DURATION_MINUTES))
            return CellView(day, label, start, state, appointment, row_span, is_past)

        covering = next(
            (
                a for a in self.store.list()
                if a.start.date() == day and a.start != start and a.interval.contains(start)
            ),
            None,
        )
        if covering is not None:
            return CellView(day, label, start, CellState.COVERED, covering, 1, is_past)

        return CellView(day, label, start, CellState.EMPTY, None, 1, is_past)

    def week_grid(self, anchor: date) -> list[CellView]:
        monday = week_start(anchor)
        labels = time_labels()
        return [
            self.cell_state(monday + timedelta(days=offset), label)
            for offset in range(WORK_WEEK_DAYS)
            for label in labels
        ]

    def open_slot(
        self,
        role: Role,
        start: datetime,
        duration_minutes: int = DEFAULT_DURATION_MINUTES,
        title: str = DEFAULT_AVAILABILITY_TITLE,
        requester_name: str = DEFAULT_OWNER_REQUESTER,
    ) -> Appointment:
        if role is not Role.OWNER:
            raise NotOwner('Only the owner can open new time slots. Please select an available slot.')
        self._ensure_not_past(start)

        availability = Appointment.build(
            title=title,
            interval=Interval.from_duration(start, duration_minutes),
            requester_name=requester_name,
            type=AppointmentType.AVAILABILITY,
        )
        return self.store.upsert(availability, CreateAvailability())

    def edit_slot(
        self,
        role: Role,
        appointment_id: str,
        title: str,
        requester_name: str,
        duration_minutes: int,
        type: AppointmentType | None = None,
    ) -> Appointment:
        if role is not Role.OWNER:
            raise NotOwner('Only the owner can edit a time slot.')

        existing = self.store.get(appointment_id)
        self._ensure_not_past(existing.start)

        replacement = Appointment.build(
            id=existing.id,
            title=title,
            interval=Interval.from_duration(existing.start, duration_minutes),
            requester_name=requester_name,
            type=type or existing.type,
        )
        return self.store.upsert(replacement, EditExisting(existing.id))

    def book_slot(
        self,
        role: Role,
        target_id: str,
        title: str,
        requester_name: str,
        duration_minutes: int | None = None,
    ) -> Appointment:
        target = self.store.get(target_id)
        self._ensure_not_past(target.start)

        meeting = Appointment.build(
            title=title,
            interval=Interval.from_duration(target.start, duration_minutes or target.duration_minutes),
            requester_name=requester_name,
            type=AppointmentType.MEETING,
        )
        booked = self.store.upsert(meeting, BookAvailability(target.id))
        logger.info('%s booked %s as meeting %s.', role.value, target.id, booked.id)
        return booked

    def act_on_cell(self, role: Role, day: date, label: str, request: CellRequest) -> Appointment | None:
        cell = self.cell_state(day, label)

        if cell.state is CellState.EMPTY:
            if role is not Role.OWNER:
                raise NotOwner("Only the owner can open new time slots. Please select an 'Available' slot.")
            return self.open_slot(
                role,
                cell.start,
                request.duration_minutes,
                request.title,
                request.requester_name,
            )

        if cell.state is CellState.AVAILABLE:
            if role is Role.OWNER:
                return self.edit_slot(
                    role,
                    cell.appointment.id,
                    request.title,
                    request.requester_name,
                    request.duration_minutes,
                    request.type,
                )
            return self.book_slot(
                role,
                cell.appointment.id,
                request.title,
                request.requester_name,
                request.duration_minutes,
            )

        return None

    def delete(self, role: Role, appointment_id: str, confirmed: bool = False) -> Appointment:
        if role is not Role.OWNER:
            raise NotOwner('Only the owner can remove a slot or meeting.')

        appointment = self.store.get(appointment_id)
        if not confirmed:
            raise ConfirmationRequired('Are you sure you want to remove this slot/meeting? Confirm to continue.')

        if not self.store.remove(appointment_id):
            raise NotFound(f'Appointment {appointment_id} not found.')
        return appointment

    def _ensure_not_past(self, start: datetime) -> None:
        if start < self._clock():
            raise PastSlot()
