from datetime import datetime, timezone

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from backend.app.core.config import Settings
from backend.app.db.store import ReservationStore, get_store
from backend.app.main import app
from backend.app.models.reservation import Reservation, ReservationStatus
from backend.app.services.codes import next_code, next_id
from backend.app.services.notifier import Notifier
from backend.app.services.reservations import ReservationService, get_reservation_service

from fakes import NOW, RecordingTransport


@pytest.fixture
def test_settings(tmp_path):
    return Settings(
        _env_file=None,
        SITE_NAME="Test Bistro",
        DATA_DIR=tmp_path / "data",
        STATIC_DIR=None,
        OPEN_DAYS="fri,sat",
        OPEN_TIME="12:00",
        CLOSE_TIME="22:00",
        TIMEZONE="UTC",
        BUSINESS_EMAIL="owner@bistro.test",
        NOTIFY_TO=None,
        SMTP_HOST=None,
        SMTP_USER=None,
        SMTP_PASS=None,
        SMTP_FROM="Test Bistro <no-reply@bistro.test>",
    )


@pytest.fixture
def store(test_settings):
    return ReservationStore(test_settings.reservations_path)


@pytest.fixture
def transport():
    return RecordingTransport()


@pytest.fixture
def notifier(test_settings, transport):
    return Notifier(test_settings, transport)


@pytest.fixture
def service(store, notifier, test_settings):
    return ReservationService(store, notifier, test_settings, clock=lambda: NOW)


@pytest.fixture
def payload():
    return {
        "name": "  Ana Pérez ",
        "phone": "+56 9 1234 5678",
        "email": "ana@example.com",
        "people": 4,
        "date": "2026-10-23",
        "time": "20:00",
        "notes": " window table ",
    }


@pytest.fixture
def make_record():
    def _make(**overrides):
        fields = {
            "id": next_id(),
            "code": next_code(),
            "created_at": NOW,
            "name": "Ana Pérez",
            "phone": "+56912345678",
            "email": "ana@example.com",
            "people": 2,
            "starts_at": datetime(2026, 10, 23, 20, 0, tzinfo=timezone.utc),
            "notes": "",
            "status": ReservationStatus.PENDING.value,
        }
        fields.update(overrides)
        return Reservation(**fields)

    return _make


@pytest_asyncio.fixture
async def client(service, store):
    app.dependency_overrides[get_reservation_service] = lambda: service
    app.dependency_overrides[get_store] = lambda: store

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
