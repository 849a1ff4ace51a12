from datetime import date

import pytest

from ludoteca.app.flows.client.booking import BookingFlow, BookingForm
from ludoteca.app.i18n.loader import t
from ludoteca.app.services.slots import BookingConfig
from ludoteca.app.errors import ValidationError


DAY = date(2024, 6, 3)


@pytest.fixture
def birthday_flow(event_store, booking_repo, notifier):
    return BookingFlow(event_store, booking_repo, notifier, lang="es")


@pytest.fixture
def daycare_flow(daycare_store, daycare_booking_repo, notifier):
    return BookingFlow(daycare_store, daycare_booking_repo, notifier, lang="es",
                       config=BookingConfig(max_comment_length=20))


def _form(slot_id, /, **overrides) -> BookingForm:
    values = {"slot_id": slot_id, "guest": "Ana", "phone": "600111222", "number_of_kids": 2}
    values.update(overrides)
    return BookingForm(**values)


class TestValidation:

    @pytest.mark.asyncio
    async def test_checks_run_in_order(self, backend, event_store, birthday_flow):
        open_id = backend.add_birthday("2024-06-03", "10:00", "12:00")
        closed_id = backend.add_birthday("2024-06-03", "13:00", "15:00", status="CLOSED")
        booked_id = backend.add_birthday("2024-06-03", "17:00", "19:00", booked=True)
        await event_store.load_month(2024, 6)

        cases = [
            (BookingForm(), "booking:select_slot"),
            (_form(999), "booking:slot_unavailable"),
            (_form(closed_id), "booking:slot_closed"),
            (_form(booked_id), "booking:slot_unavailable"),
            (_form(open_id, guest="  "), "booking:name_required"),
            (_form(open_id, phone=""), "booking:phone_required"),
            (_form(open_id, number_of_kids=0), "booking:kids_required"),
        ]
        for form, key in cases:
            with pytest.raises(ValidationError) as exc:
                birthday_flow.validate(form)
            assert exc.value.key == key

    @pytest.mark.asyncio
    async def test_recurring_spots_and_comment_limit(self, backend, daycare_store, daycare_flow):
        slot_id = backend.add_daycare("2024-07-01", "09:00", "10:00", 10, available=2)
        await daycare_store.load_month(2024, 7)

        with pytest.raises(ValidationError) as exc:
            daycare_flow.validate(_form(slot_id, number_of_kids=3))
        assert exc.value.key == "booking:not_enough_spots"
        assert exc.value.params == (2,)

        with pytest.raises(ValidationError) as exc:
            daycare_flow.validate(_form(slot_id, comments="x" * 21))
        assert exc.value.params == (20,)

        slot, request = daycare_flow.validate(_form(slot_id, comments=" ok "))
        assert slot.id == slot_id
        assert request.to_payload() == {
            "slotId": slot_id, "guest": "Ana", "phone": "600111222",
            "number_of_kids": 2, "comments": "ok",
        }

    @pytest.mark.asyncio
    async def test_selectable_slots_only_bookable(self, backend, event_store, birthday_flow):
        open_id = backend.add_birthday("2024-06-03", "10:00", "12:00")
        backend.add_birthday("2024-06-03", "13:00", "15:00", status="CLOSED")
        backend.add_birthday("2024-06-03", "17:00", "19:00", booked=True)
        await event_store.select_date(DAY)

        assert [s.id for s in birthday_flow.selectable_slots()] == [open_id]

    @pytest.mark.asyncio
    async def test_slot_choices_are_labelled(self, backend, daycare_store, daycare_flow):
        late = backend.add_daycare("2024-06-03", "10:00", "11:00", 10)
        early = backend.add_daycare("2024-06-03", "09:00", "10:00", 10)
        backend.add_daycare("2024-06-03", "11:00", "12:00", 10, available=0)
        await daycare_store.select_date(DAY)

        assert daycare_flow.slot_choices() == [
            (early, "Lun 03.06 09:00-10:00"),
            (late, "Lun 03.06 10:00-11:00"),
        ]

        daycare_flow.lang = "ca"
        assert daycare_flow.slot_choices(DAY)[0] == (early, "Dl 03.06 09:00-10:00")

    @pytest.mark.asyncio
    async def test_event_slot_choice_label(self, backend, event_store, birthday_flow):
        slot_id = backend.add_birthday("2024-06-03", "17:00", "19:00")
        await event_store.select_date(DAY)

        assert birthday_flow.slot_choices() == [(slot_id, "Lun 03.06 17:00-19:00")]


class TestSubmit:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("field, value", [
        ("slot_id", None),
        ("guest", ""),
        ("phone", ""),
        ("number_of_kids", 0),
    ])
    async def test_invalid_form_sends_nothing(self, backend, event_store, birthday_flow, notifier,
                                              field, value):
        slot_id = backend.add_birthday("2024-06-03", "10:00", "12:00")
        await event_store.load_month(2024, 6)
        form = _form(slot_id, **{field: value})

        assert await birthday_flow.submit(form) is False

        assert backend.mutation_calls() == []
        assert notifier.total == 1
        assert notifier.successes == []
        assert form == _form(slot_id, **{field: value})

    @pytest.mark.asyncio
    async def test_success_refreshes_day_and_clears_form(self, backend, event_store, birthday_flow,
                                                        notifier):
        slot_id = backend.add_birthday("2024-06-03", "10:00", "12:00")
        await event_store.load_month(2024, 6)
        form = _form(slot_id, guest_email="ana@example.com", pack="FIESTA")

        assert await birthday_flow.submit(form) is True

        assert event_store.get(slot_id).booked
        assert DAY in event_store.fetched_days
        assert ("GET", "/api/birthdaySlots/getSlotsByDay/2024-06-03") in backend.calls
        assert form == BookingForm()
        assert notifier.successes == [t("booking:success", "es")]
        assert notifier.errors == []
        assert birthday_flow.last_booking.slot_id == slot_id
        assert birthday_flow.last_booking.contact_number == "600111222"

    @pytest.mark.asyncio
    async def test_daycare_booking_updates_spots(self, backend, daycare_store, daycare_flow):
        slot_id = backend.add_daycare("2024-07-01", "09:00", "10:00", 10)
        await daycare_store.load_month(2024, 7)

        assert await daycare_flow.submit(_form(slot_id, number_of_kids=3)) is True
        assert daycare_store.get(slot_id).available_spots == 7

    @pytest.mark.asyncio
    async def test_server_rejection_reports_once_and_keeps_form(self, backend, event_store,
                                                               birthday_flow, notifier):
        slot_id = backend.add_birthday("2024-06-03", "10:00", "12:00")
        await event_store.load_month(2024, 6)
        # Booked by someone else after our load
        backend.birthday[slot_id]["isBooked"] = True
        form = _form(slot_id)

        assert await birthday_flow.submit(form) is False

        assert notifier.errors == [t("booking:error", "es")]
        assert notifier.successes == []
        assert form.slot_id == slot_id
        assert not event_store.get(slot_id).booked


class TestVisitBooking:

    @pytest.fixture
    def meeting_flow(self, meeting_store, meeting_booking_repo, notifier):
        return BookingFlow(meeting_store, meeting_booking_repo, notifier, lang="es")

    @pytest.mark.asyncio
    async def test_email_required_phone_optional(self, backend, meeting_store, meeting_flow):
        slot_id = backend.add_meeting("2024-06-03", "10:00", "11:00", 2)
        await meeting_store.load_month(2024, 6)

        with pytest.raises(ValidationError) as exc:
            meeting_flow.validate(_form(slot_id, phone=""))
        assert exc.value.key == "booking:email_required"

        _, request = meeting_flow.validate(_form(slot_id, phone="", guest_email=" ana@example.com "))
        assert request.guest_email == "ana@example.com"

    @pytest.mark.asyncio
    async def test_submit_takes_one_spot(self, backend, meeting_store, meeting_flow, notifier):
        slot_id = backend.add_meeting("2024-06-03", "10:00", "11:00", 2)
        await meeting_store.load_month(2024, 6)

        assert await meeting_flow.submit(_form(slot_id, guest_email="ana@example.com")) is True

        assert meeting_store.get(slot_id).available_spots == 1
        assert ("GET", "/api/meetingSlots/getSlotsByDay/2024-06-03") in backend.calls
        assert meeting_flow.last_booking.guest == "Ana"
        assert notifier.successes == [t("booking:success", "es")]
