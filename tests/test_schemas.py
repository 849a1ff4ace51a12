from datetime import date, datetime

import pytest
from pydantic import ValidationError as SchemaError

from ludoteca.app.schemas.bookings import AttendanceStatus, Booking, BookingStatus, BookingUpdate
from ludoteca.app.schemas.slots import EventSlot, MeetingSlot, RecurringSlot, SlotStatus

from tests.helpers import daycare_slot


class TestRecurringSlotWire:

    def test_camel_case_payload_is_normalised(self):
        slot = RecurringSlot.model_validate({
            "id": 7,
            "date": "2024-07-01T00:00:00.000Z",
            "openHour": "9:00",
            "closeHour": "2024-07-01T12:30:00.000Z",
            "capacity": 10,
            "availableSpots": 4,
            "status": "open",
        })
        assert slot.date == date(2024, 7, 1)
        assert slot.open_hour == "09:00"
        assert slot.close_hour == "12:30"
        assert slot.status == SlotStatus.OPEN
        assert slot.is_bookable
        assert not slot.is_fully_available

    def test_integer_hours(self):
        slot = RecurringSlot.model_validate({
            "id": 1, "date": "2024-07-01", "openHour": 9, "closeHour": 13,
            "capacity": 5, "availableSpots": 5,
        })
        assert (slot.open_hour, slot.close_hour) == ("09:00", "13:00")

    def test_close_before_open_rejected(self):
        with pytest.raises(SchemaError):
            RecurringSlot.model_validate({
                "id": 1, "date": "2024-07-01", "openHour": "09:00", "closeHour": "08:00",
                "capacity": 10, "availableSpots": 10,
            })


class TestCapacityBound:

    def test_available_above_capacity_rejected(self):
        with pytest.raises(SchemaError):
            daycare_slot(1, date(2024, 7, 1), capacity=5, available=6)

    def test_negative_available_rejected(self):
        with pytest.raises(SchemaError):
            daycare_slot(1, date(2024, 7, 1), capacity=5, available=-1)

    def test_reserve_and_release_stay_in_bounds(self):
        slot = daycare_slot(1, date(2024, 7, 1), capacity=3, available=3)

        slot = slot.reserve(2)
        assert slot.available_spots == 1
        slot = slot.release()
        assert slot.available_spots == 2

        with pytest.raises(ValueError):
            slot.reserve(3)
        with pytest.raises(ValueError):
            slot.release(2)
        assert 0 <= slot.available_spots <= slot.capacity

    def test_closed_slot_keeps_its_spots(self):
        slot = daycare_slot(1, date(2024, 7, 1), capacity=5, available=5, status="CLOSED")
        assert slot.available_spots == 5
        assert not slot.is_bookable


class TestEventSlotWire:

    def test_timezone_suffix_dropped_without_conversion(self):
        slot = EventSlot.model_validate({
            "id": 3,
            "date": "2024-06-03",
            "startTime": "2024-06-03T17:00:00.000Z",
            "endTime": "2024-06-03T19:00:00+02:00",
        })
        assert slot.start_time == datetime(2024, 6, 3, 17, 0)
        assert slot.end_time == datetime(2024, 6, 3, 19, 0)
        assert slot.start_time.tzinfo is None

    def test_embedded_booking_marks_slot_booked(self):
        slot = EventSlot.model_validate({
            "id": 3,
            "date": "2024-06-03",
            "startTime": "2024-06-03T17:00:00",
            "endTime": "2024-06-03T19:00:00",
            "booking": {"id": 11, "guest": "Ana"},
        })
        assert slot.booked
        assert slot.available_spots == 0
        assert not slot.is_bookable

    def test_closed_unbooked_slot(self):
        slot = EventSlot.model_validate({
            "id": 3, "date": "2024-06-03", "status": "CLOSED",
            "startTime": "2024-06-03T17:00:00", "endTime": "2024-06-03T19:00:00",
        })
        assert slot.capacity == 1
        assert slot.available_spots == 1
        assert not slot.is_bookable

    def test_end_not_after_start_rejected(self):
        with pytest.raises(SchemaError):
            EventSlot.model_validate({
                "id": 3, "date": "2024-06-03",
                "startTime": "2024-06-03T17:00:00", "endTime": "2024-06-03T17:00:00",
            })


class TestMeetingSlotWire:

    def test_missing_spots_default_to_capacity(self):
        slot = MeetingSlot.model_validate({
            "id": 5, "date": "2024-06-03T00:00:00.000Z", "capacity": 4,
            "startTime": "2024-06-03T10:00:00.000Z", "endTime": "2024-06-03T11:00:00.000Z",
        })
        assert slot.available_spots == 4
        assert slot.is_fully_available
        assert slot.sort_key == (date(2024, 6, 3), 600)

    def test_spots_over_capacity_rejected(self):
        with pytest.raises(SchemaError):
            MeetingSlot.model_validate({
                "id": 5, "date": "2024-06-03", "capacity": 2, "availableSpots": 3,
                "startTime": "2024-06-03T10:00:00", "endTime": "2024-06-03T11:00:00",
            })

    def test_full_visit_is_not_bookable(self):
        slot = MeetingSlot.model_validate({
            "id": 5, "date": "2024-06-03", "capacity": 2, "availableSpots": 0,
            "startTime": "2024-06-03T10:00:00", "endTime": "2024-06-03T11:00:00",
        })
        assert not slot.is_bookable


class TestBookingSchemas:

    def test_uppercase_status_normalised(self):
        booking = Booking.model_validate({
            "id": 1, "slotId": 3, "guest": "Ana", "contact_number": "600000000",
            "status": "CONFIRMED", "createdAt": "2024-06-01T10:00:00.000Z",
        })
        assert booking.status == BookingStatus.CONFIRMED
        assert booking.created_at == datetime(2024, 6, 1, 10, 0)

    def test_transitions(self):
        booking = Booking(id=1, status="cancelled")
        assert booking.can_transition(BookingStatus.PENDING)
        assert not booking.can_transition(BookingStatus.CONFIRMED)

    def test_update_diff_keeps_only_changes(self):
        booking = Booking(id=1, guest="Ana", contact_number="600", number_of_kids=5, pack="FIESTA")
        update = BookingUpdate.diff(booking, guest="Ana", phone="611", number_of_kids=5, pack="ALEGRIA")
        assert update.to_payload() == {"phone": "611", "pack": "ALEGRIA"}

    def test_visit_booking_fields(self):
        booking = Booking.model_validate({
            "id": 2, "slotId": 5, "name": "Ana", "email": "ana@example.com", "phone": "600",
            "status": "PENDING",
        })
        assert (booking.guest, booking.guest_email, booking.contact_number) == ("Ana", "ana@example.com", "600")

    def test_attendance_normalised(self):
        booking = Booking.model_validate({"id": 2, "attendanceStatus": "not_attended"})
        assert booking.attendance_status == AttendanceStatus.NOT_ATTENDED
        assert Booking(id=3).attendance_status is None
