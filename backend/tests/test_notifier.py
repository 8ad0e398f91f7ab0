import asyncio

import pytest

from backend.app.services.notifier import Notifier

from fakes import HangingTransport, RecordingTransport


pytestmark = pytest.mark.asyncio


async def test_sends_internal_and_client_messages(notifier, transport, make_record):
    record = make_record(notes="terraza")

    await notifier.notify(record)

    by_recipient = {message["To"]: message for message in transport.sent}
    assert set(by_recipient) == {"owner@bistro.test", "ana@example.com"}

    internal = by_recipient["owner@bistro.test"]
    assert internal["Subject"] == f"Nueva reserva (#{record.code}) - Test Bistro"
    body = internal.get_content()
    for value in (record.code, record.name, record.phone, record.email, record.id, "terraza"):
        assert value in body

    client = by_recipient["ana@example.com"]
    assert client["Subject"] == f"Reserva recibida (#{record.code}) - Test Bistro"
    assert client["From"] == "Test Bistro <no-reply@bistro.test>"
    assert "23-10-2026, 20:00:00" in client.get_content()


async def test_client_message_skipped_without_email(notifier, transport, make_record):
    await notifier.notify(make_record(email=""))

    assert [message["To"] for message in transport.sent] == ["owner@bistro.test"]


async def test_one_failed_send_does_not_block_the_other(test_settings, make_record):
    transport = RecordingTransport(fail_for={"owner@bistro.test"})
    notifier = Notifier(test_settings, transport)

    await notifier.notify(make_record())

    assert [message["To"] for message in transport.sent] == ["ana@example.com"]


async def test_client_failure_still_delivers_internal(test_settings, make_record):
    transport = RecordingTransport(fail_for={"ana@example.com"})
    notifier = Notifier(test_settings, transport)

    await notifier.notify(make_record())

    assert [message["To"] for message in transport.sent] == ["owner@bistro.test"]


async def test_internal_recipient_prefers_notify_to(test_settings, make_record):
    test_settings.NOTIFY_TO = "desk@bistro.test"
    transport = RecordingTransport()

    await Notifier(test_settings, transport).notify(make_record(email=""))

    assert [message["To"] for message in transport.sent] == ["desk@bistro.test"]


async def test_location_lines_are_optional(test_settings, make_record):
    test_settings.BUSINESS_ADDRESS = "Chiñihue Las Rosas, Melipilla"
    test_settings.BUSINESS_MAPS_URL = "https://maps.example/escondida"
    transport = RecordingTransport()

    await Notifier(test_settings, transport).notify(make_record())

    [client] = [message for message in transport.sent if message["To"] == "ana@example.com"]
    body = client.get_content()
    assert "Chiñihue Las Rosas, Melipilla" in body
    assert "Google Maps: https://maps.example/escondida" in body


async def test_without_transport_notify_is_a_no_op(test_settings, make_record):
    notifier = Notifier(test_settings)

    assert not notifier.active
    await notifier.notify(make_record())


async def test_dispatch_returns_before_sending_finishes(test_settings, make_record):
    transport = HangingTransport()
    notifier = Notifier(test_settings, transport)

    task = notifier.dispatch(make_record())
    assert not task.done()
    assert notifier.pending == 1

    for _ in range(5):
        await asyncio.sleep(0)
    assert transport.started == 2

    await notifier.drain(timeout=0.01)
    await asyncio.sleep(0)
    assert task.cancelled()
    assert notifier.pending == 0


async def test_crashing_transport_is_contained(test_settings, make_record):
    class BrokenTransport:
        async def send(self, message):
            raise RuntimeError("unexpected")

    notifier = Notifier(test_settings, BrokenTransport())

    task = notifier.dispatch(make_record())
    await notifier.drain(timeout=1)

    assert task.done() and task.exception() is None
    assert notifier.pending == 0
