from datetime import datetime

import pytest

from timesync.scheduling.appointment import Appointment, AppointmentType
from timesync.scheduling.errors import NotFound
from timesync.scheduling.interval import Interval
from timesync.scheduling.overlap import (
    Blocked,
    BookAvailability,
    Consumable,
    CreateAvailability,
    EditExisting,
    Free,
    resolve,
)


def make_appointment(
    appointment_id: str,
    start: datetime,
    end: datetime,
    type: AppointmentType = AppointmentType.AVAILABILITY,
) -> Appointment:
    return Appointment(
        id=appointment_id,
        title='Open for Booking' if type is AppointmentType.AVAILABILITY else 'Sync',
        start=start,
        end=end,
        requester_name='Me',
        type=type,
    )


@pytest.fixture
def tuesday_slots() -> list[Appointment]:
    return [
        make_appointment('avail-10', datetime(2024, 6, 4, 10, 0), datetime(2024, 6, 4, 10, 30)),
        make_appointment(
            'meeting-11',
            datetime(2024, 6, 4, 11, 0),
            datetime(2024, 6, 4, 11, 30),
            AppointmentType.MEETING,
        ),
        make_appointment('avail-12', datetime(2024, 6, 4, 12, 0), datetime(2024, 6, 4, 12, 30)),
    ]


def test_create_availability_on_empty_time_is_free(tuesday_slots) -> None:
    candidate = Interval(datetime(2024, 6, 4, 14, 0), datetime(2024, 6, 4, 14, 30))

    assert resolve(candidate, tuesday_slots, CreateAvailability()) == Free()


def test_create_availability_touching_existing_record_is_free(tuesday_slots) -> None:
    candidate = Interval(datetime(2024, 6, 4, 10, 30), datetime(2024, 6, 4, 11, 0))

    assert resolve(candidate, tuesday_slots, CreateAvailability()) == Free()


@pytest.mark.parametrize(
    ('start', 'end', 'expected_ids'),
    [
        (datetime(2024, 6, 4, 10, 15), datetime(2024, 6, 4, 10, 45), ('avail-10',)),
        (datetime(2024, 6, 4, 11, 15), datetime(2024, 6, 4, 11, 45), ('meeting-11',)),
        (datetime(2024, 6, 4, 10, 0), datetime(2024, 6, 4, 12, 15), ('avail-10', 'meeting-11', 'avail-12')),
    ],
)
def test_create_availability_blocks_on_any_overlap(tuesday_slots, start, end, expected_ids) -> None:
    resolution = resolve(Interval(start, end), tuesday_slots, CreateAvailability())

    assert resolution == Blocked(expected_ids)


def test_booking_targeted_availability_is_consumable(tuesday_slots) -> None:
    candidate = Interval(datetime(2024, 6, 4, 10, 0), datetime(2024, 6, 4, 10, 30))

    assert resolve(candidate, tuesday_slots, BookAvailability('avail-10')) == Consumable('avail-10')


def test_booking_longer_than_targeted_availability_is_still_consumable(tuesday_slots) -> None:
    candidate = Interval(datetime(2024, 6, 4, 10, 0), datetime(2024, 6, 4, 10, 45))

    assert resolve(candidate, tuesday_slots, BookAvailability('avail-10')) == Consumable('avail-10')


def test_booking_that_spills_into_meeting_is_blocked(tuesday_slots) -> None:
    candidate = Interval(datetime(2024, 6, 4, 10, 0), datetime(2024, 6, 4, 11, 15))

    assert resolve(candidate, tuesday_slots, BookAvailability('avail-10')) == Blocked(('meeting-11',))


def test_booking_that_spills_into_other_availability_is_blocked(tuesday_slots) -> None:
    candidate = Interval(datetime(2024, 6, 4, 12, 0), datetime(2024, 6, 4, 13, 0))
    slots = tuesday_slots + [
        make_appointment('avail-1230', datetime(2024, 6, 4, 12, 30), datetime(2024, 6, 4, 13, 0)),
    ]

    assert resolve(candidate, slots, BookAvailability('avail-12')) == Blocked(('avail-1230',))


def test_same_range_blocks_new_availability_but_consumes_when_booking(tuesday_slots) -> None:
    candidate = Interval(datetime(2024, 6, 4, 10, 0), datetime(2024, 6, 4, 10, 30))

    assert isinstance(resolve(candidate, tuesday_slots, CreateAvailability()), Blocked)
    assert isinstance(resolve(candidate, tuesday_slots, BookAvailability('avail-10')), Consumable)


def test_booking_a_meeting_is_blocked_by_the_meeting_itself(tuesday_slots) -> None:
    candidate = Interval(datetime(2024, 6, 4, 11, 0), datetime(2024, 6, 4, 11, 30))

    assert resolve(candidate, tuesday_slots, BookAvailability('meeting-11')) == Blocked(('meeting-11',))


def test_booking_unknown_target_raises_not_found(tuesday_slots) -> None:
    candidate = Interval(datetime(2024, 6, 4, 15, 0), datetime(2024, 6, 4, 15, 30))

    with pytest.raises(NotFound):
        resolve(candidate, tuesday_slots, BookAvailability('missing'))


def test_edit_existing_ignores_its_own_range(tuesday_slots) -> None:
    candidate = Interval(datetime(2024, 6, 4, 10, 0), datetime(2024, 6, 4, 11, 0))

    assert resolve(candidate, tuesday_slots, EditExisting('avail-10')) == Free()


def test_edit_existing_blocks_on_other_records(tuesday_slots) -> None:
    candidate = Interval(datetime(2024, 6, 4, 10, 0), datetime(2024, 6, 4, 11, 30))

    assert resolve(candidate, tuesday_slots, EditExisting('avail-10')) == Blocked(('meeting-11',))


def test_edit_unknown_record_raises_not_found(tuesday_slots) -> None:
    candidate = Interval(datetime(2024, 6, 4, 10, 0), datetime(2024, 6, 4, 10, 30))

    with pytest.raises(NotFound):
        resolve(candidate, tuesday_slots, EditExisting('missing'))


def test_blocked_exposes_first_conflict() -> None:
    assert Blocked(('a', 'b')).existing_id == 'a'
