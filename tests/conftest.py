import os

os.environ.setdefault("API_URL", "http://testserver")
os.environ.setdefault("DEFAULT_LANG", "es")

import httpx
import pytest

from ludoteca.app.i18n.loader import load_messages
from ludoteca.app.services.bookings import (
    BookingRepository,
    DaycareBookingRepository,
    MeetingBookingRepository,
)
from ludoteca.app.services.slots import (
    BookingConfig,
    EventSlotRepository,
    MeetingSlotRepository,
    RecurringSlotRepository,
    SlotStore,
)
from ludoteca.app.utils.api import ApiClient

from tests.fake_backend import BackendState, create_app
from tests.helpers import RecordingNotifier


@pytest.fixture(autouse=True, scope="session")
def messages():
    load_messages()


@pytest.fixture
def backend() -> BackendState:
    return BackendState()


@pytest.fixture
def client(backend: BackendState) -> ApiClient:
    transport = httpx.ASGITransport(app=create_app(backend))
    return ApiClient(base_url="http://testserver", token=None, transport=transport)


@pytest.fixture
def config() -> BookingConfig:
    return BookingConfig()


@pytest.fixture
def event_repo(client: ApiClient, config: BookingConfig) -> EventSlotRepository:
    return EventSlotRepository(client, config)


@pytest.fixture
def daycare_repo(client: ApiClient, config: BookingConfig) -> RecurringSlotRepository:
    return RecurringSlotRepository(client, config)


@pytest.fixture
def meeting_repo(client: ApiClient, config: BookingConfig) -> MeetingSlotRepository:
    return MeetingSlotRepository(client, config)


@pytest.fixture
def event_store(event_repo: EventSlotRepository) -> SlotStore:
    return SlotStore(event_repo)


@pytest.fixture
def daycare_store(daycare_repo: RecurringSlotRepository) -> SlotStore:
    return SlotStore(daycare_repo)


@pytest.fixture
def meeting_store(meeting_repo: MeetingSlotRepository) -> SlotStore:
    return SlotStore(meeting_repo)


@pytest.fixture
def booking_repo(client: ApiClient) -> BookingRepository:
    return BookingRepository(client)


@pytest.fixture
def daycare_booking_repo(client: ApiClient) -> DaycareBookingRepository:
    return DaycareBookingRepository(client)


@pytest.fixture
def meeting_booking_repo(client: ApiClient) -> MeetingBookingRepository:
    return MeetingBookingRepository(client)


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()
