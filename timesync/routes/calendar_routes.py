from datetime import date, datetime, time, timedelta

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, field_validator

from timesync.core import config
from timesync.routes.http_errors import to_http_exception
from timesync.scheduling.appointment import Appointment, AppointmentType
from timesync.scheduling.errors import SchedulingError
from timesync.scheduling.workflow import (
    DEFAULT_AVAILABILITY_TITLE,
    DEFAULT_DURATION_MINUTES,
    DEFAULT_OWNER_REQUESTER,
    DURATION_OPTIONS,
    BookingWorkflow,
    CellRequest,
    CellView,
    Role,
    WORK_WEEK_DAYS,
    time_labels,
    week_start,
)
from timesync.services import get_workflow

router = APIRouter(tags=['calendar'])


def _require_text(value: str) -> str:
    normalized = value.strip()
    if not normalized:
        raise ValueError('All fields are required.')
    return normalized


def _validate_duration(value: int) -> int:
    if value not in DURATION_OPTIONS:
        raise ValueError(f'Duration must be one of {", ".join(str(option) for option in DURATION_OPTIONS)} minutes.')
    return value


class AppointmentResponse(BaseModel):
    id: str
    title: str
    start: datetime
    end: datetime
    requester_name: str
    type: AppointmentType
    duration_minutes: int

    class Config:
        from_attributes = True


class CellResponse(BaseModel):
    date: date
    time: str
    start: datetime
    state: str
    row_span: int
    is_past: bool
    appointment: AppointmentResponse | None = None


class WeekResponse(BaseModel):
    week_of: date
    days: list[date]
    times: list[str]
    cells: list[CellResponse]


class DurationOptionResponse(BaseModel):
    duration_minutes: int
    label: str


class OwnerResponse(BaseModel):
    name: str


class OpenSlotRequest(BaseModel):
    role: Role
    date: date
    time: time
    duration_minutes: int = DEFAULT_DURATION_MINUTES
    title: str = DEFAULT_AVAILABILITY_TITLE
    requester_name: str = DEFAULT_OWNER_REQUESTER

    @field_validator('time')
    @classmethod
    def validate_time(cls, value: time) -> time:
        if value.tzinfo is not None or value.replace(second=0, microsecond=0) != value:
            raise ValueError('Time must be a calendar cell start (HH:mm).')
        if value.strftime('%H:%M') not in time_labels():
            raise ValueError('Time must be a calendar cell start (HH:mm).')
        return value

    @field_validator('title', 'requester_name')
    @classmethod
    def validate_text(cls, value: str) -> str:
        return _require_text(value)

    @field_validator('duration_minutes')
    @classmethod
    def validate_duration(cls, value: int) -> int:
        return _validate_duration(value)


class EditSlotRequest(BaseModel):
    role: Role
    title: str
    requester_name: str
    duration_minutes: int = DEFAULT_DURATION_MINUTES
    type: AppointmentType | None = None

    @field_validator('title', 'requester_name')
    @classmethod
    def validate_text(cls, value: str) -> str:
        return _require_text(value)

    @field_validator('duration_minutes')
    @classmethod
    def validate_duration(cls, value: int) -> int:
        return _validate_duration(value)


class BookSlotRequest(BaseModel):
    role: Role
    title: str
    requester_name: str
    duration_minutes: int | None = None

    @field_validator('title', 'requester_name')
    @classmethod
    def validate_text(cls, value: str) -> str:
        return _require_text(value)

    @field_validator('duration_minutes')
    @classmethod
    def validate_duration(cls, value: int | None) -> int | None:
        if value is None:
            return None
        return _validate_duration(value)


class CellActionRequest(BaseModel):
    role: Role
    date: date
    time: str
    title: str
    requester_name: str
    duration_minutes: int = DEFAULT_DURATION_MINUTES
    type: AppointmentType | None = None

    @field_validator('time')
    @classmethod
    def validate_time(cls, value: str) -> str:
        normalized = value.strip()
        if normalized not in time_labels():
            raise ValueError('Time must be a calendar cell start (HH:mm).')
        return normalized

    @field_validator('title', 'requester_name')
    @classmethod
    def validate_text(cls, value: str) -> str:
        return _require_text(value)

    @field_validator('duration_minutes')
    @classmethod
    def validate_duration(cls, value: int) -> int:
        return _validate_duration(value)


class CellActionResponse(BaseModel):
    status: str
    appointment: AppointmentResponse | None = None


def to_appointment_response(appointment: Appointment) -> AppointmentResponse:
    return AppointmentResponse(
        id=appointment.id,
        title=appointment.title,
        start=appointment.start,
        end=appointment.end,
        requester_name=appointment.requester_name,
        type=appointment.type,
        duration_minutes=appointment.duration_minutes,
    )


def to_cell_response(cell: CellView) -> CellResponse:
    return CellResponse(
        date=cell.day,
        time=cell.time,
        start=cell.start,
        state=cell.state.value,
        row_span=cell.row_span,
        is_past=cell.is_past,
        appointment=to_appointment_response(cell.appointment) if cell.appointment else None,
    )


def format_duration_label(minutes: int) -> str:
    if minutes < 60:
        return f'{minutes} Minutes'
    hours = minutes / 60
    if hours == 1:
        return '1 Hour'
    return f'{hours:g} Hours'


@router.get('/week', response_model=WeekResponse)
def get_week(
    anchor: date | None = Query(default=None),
    workflow: BookingWorkflow = Depends(get_workflow),
):
    monday = week_start(anchor or date.today())
    cells = workflow.week_grid(monday)

    return WeekResponse(
        week_of=monday,
        days=[monday + timedelta(days=offset) for offset in range(WORK_WEEK_DAYS)],
        times=time_labels(),
        cells=[to_cell_response(cell) for cell in cells],
    )


@router.get('/appointments', response_model=list[AppointmentResponse])
def list_appointments(workflow: BookingWorkflow = Depends(get_workflow)):
    appointments = sorted(workflow.store.list(), key=lambda appointment: appointment.start)
    return [to_appointment_response(appointment) for appointment in appointments]


@router.get('/appointments/{appointment_id}', response_model=AppointmentResponse)
def get_appointment(appointment_id: str, workflow: BookingWorkflow = Depends(get_workflow)):
    try:
        return to_appointment_response(workflow.store.get(appointment_id))
    except SchedulingError as exc:
        raise to_http_exception(exc) from exc


@router.get('/duration-options', response_model=list[DurationOptionResponse])
def list_duration_options():
    return [
        DurationOptionResponse(duration_minutes=minutes, label=format_duration_label(minutes))
        for minutes in DURATION_OPTIONS
    ]


@router.get('/owner', response_model=OwnerResponse)
def get_owner():
    return OwnerResponse(name=config.OWNER_NAME)


@router.post('/slots', response_model=AppointmentResponse, status_code=status.HTTP_201_CREATED)
def open_slot(data: OpenSlotRequest, workflow: BookingWorkflow = Depends(get_workflow)):
    try:
        availability = workflow.open_slot(
            data.role,
            datetime.combine(data.date, data.time),
            data.duration_minutes,
            data.title,
            data.requester_name,
        )
    except SchedulingError as exc:
        raise to_http_exception(exc) from exc

    return to_appointment_response(availability)


@router.put('/slots/{appointment_id}', response_model=AppointmentResponse)
def edit_slot(appointment_id: str, data: EditSlotRequest, workflow: BookingWorkflow = Depends(get_workflow)):
    try:
        appointment = workflow.edit_slot(
            data.role,
            appointment_id,
            data.title,
            data.requester_name,
            data.duration_minutes,
            data.type,
        )
    except SchedulingError as exc:
        raise to_http_exception(exc) from exc

    return to_appointment_response(appointment)


@router.post('/slots/{appointment_id}/book', response_model=AppointmentResponse, status_code=status.HTTP_201_CREATED)
def book_slot(appointment_id: str, data: BookSlotRequest, workflow: BookingWorkflow = Depends(get_workflow)):
    try:
        meeting = workflow.book_slot(
            data.role,
            appointment_id,
            data.title,
            data.requester_name,
            data.duration_minutes,
        )
    except SchedulingError as exc:
        raise to_http_exception(exc) from exc

    return to_appointment_response(meeting)


@router.post('/cells', response_model=CellActionResponse)
def act_on_cell(data: CellActionRequest, workflow: BookingWorkflow = Depends(get_workflow)):
    request = CellRequest(
        title=data.title,
        requester_name=data.requester_name,
        duration_minutes=data.duration_minutes,
        type=data.type,
    )
    try:
        appointment = workflow.act_on_cell(data.role, data.date, data.time, request)
    except SchedulingError as exc:
        raise to_http_exception(exc) from exc

    if appointment is None:
        return CellActionResponse(status='noop')
    return CellActionResponse(status='saved', appointment=to_appointment_response(appointment))


@router.delete('/appointments/{appointment_id}', status_code=status.HTTP_204_NO_CONTENT)
def delete_appointment(
    appointment_id: str,
    role: Role = Query(...),
    confirm: bool = Query(default=False),
    workflow: BookingWorkflow = Depends(get_workflow),
):
    try:
        workflow.delete(role, appointment_id, confirmed=confirm)
    except SchedulingError as exc:
        raise to_http_exception(exc) from exc
