from datetime import UTC, datetime

import pytest

from shedwise import CommandKind, Dispatcher, EventRecord, StartLoadShed
from shedwise.errors import EncodingError, PersistenceError, TransportError
from tests.conftest import (
    FIXED_DATE,
    FIXED_DATE_GPS,
    FlakyEventLog,
    SpyEventLog,
    SpyTransport,
    decode_start_load_shed,
)


async def test_read_clock(
    dispatcher: Dispatcher, transport: SpyTransport, event_log: SpyEventLog
):
    record = await dispatcher.dispatch(CommandKind.READ_CLOCK, "dev-1", {})

    assert record.event_type == CommandKind.READ_CLOCK
    assert record.event_data["device_id"] == "dev-1"
    assert record.event_data["event_sent"] is True
    assert record.event_ack is False

    assert transport.calls == [("dev-1", b"\x01")]
    assert event_log.appended == [record]


async def test_request_connection_info_records_real_outcome(event_log: SpyEventLog):
    dispatcher = Dispatcher(SpyTransport(result=False), event_log)
    record = await dispatcher.dispatch(CommandKind.REQUEST_CONNECTION_INFO, "dev-1")

    assert record.event_data == {"device_id": "dev-1", "event_sent": False}


async def test_start_load_shed(
    dispatcher: Dispatcher, transport: SpyTransport, event_log: SpyEventLog
):
    record = await dispatcher.dispatch(
        CommandKind.START_LOAD_SHED,
        "dev-2",
        {"start_time": FIXED_DATE, "duration": 120},
    )

    [(device_id, payload)] = transport.calls
    assert device_id == "dev-2"
    assert len(payload) == 7
    assert decode_start_load_shed(payload) == (0x03, FIXED_DATE_GPS, 120)
    assert payload[5:7] == (120).to_bytes(2, "big", signed=True)

    assert record.event_type == "START_LOAD_SHED"
    assert record.event_data == {
        "device_id": "dev-2",
        "start_time": "2024-01-01T00:00:00.000Z",
        "duration": 120,
        "event_sent": True,
    }
    assert len(event_log) == 1


async def test_start_load_shed_without_start_time(
    dispatcher: Dispatcher, transport: SpyTransport
):
    record = await dispatcher.send(StartLoadShed(device_id="dev-2", duration=30))

    [(_, payload)] = transport.calls
    assert decode_start_load_shed(payload) == (0x03, 0, 30)
    assert record.event_data["start_time"] == "0"


async def test_time_out_of_range_makes_no_call(
    dispatcher: Dispatcher, transport: SpyTransport, event_log: SpyEventLog
):
    with pytest.raises(EncodingError, match="time out of range"):
        await dispatcher.dispatch(
            CommandKind.START_LOAD_SHED,
            "dev-2",
            {"start_time": datetime(1970, 1, 1, tzinfo=UTC)},
        )

    assert transport.calls == []
    assert event_log.appended == []


async def test_field_overflow_makes_no_call(
    dispatcher: Dispatcher, transport: SpyTransport, event_log: SpyEventLog
):
    with pytest.raises(EncodingError, match="duration"):
        await dispatcher.dispatch(
            CommandKind.START_LOAD_SHED, "dev-2", {"duration": 40000}
        )

    assert transport.calls == []
    assert event_log.appended == []


@pytest.mark.parametrize("device_id", ["", None])
async def test_invalid_device_id(
    dispatcher: Dispatcher, transport: SpyTransport, device_id: str
):
    with pytest.raises(EncodingError):
        await dispatcher.dispatch(CommandKind.READ_CLOCK, device_id)
    assert transport.calls == []


async def test_not_accepted_is_still_recorded(event_log: SpyEventLog):
    dispatcher = Dispatcher(SpyTransport(result=False), event_log)
    record = await dispatcher.dispatch(CommandKind.READ_CLOCK, "dev-1")

    assert record.event_data["event_sent"] is False
    assert record.event_ack is False
    assert event_log.appended == [record]


async def test_transport_error_records_nothing(
    faulty_transport: SpyTransport, event_log: SpyEventLog
):
    dispatcher = Dispatcher(faulty_transport, event_log)
    with pytest.raises(TransportError, match="gateway unreachable"):
        await dispatcher.dispatch(CommandKind.READ_CLOCK, "dev-1")

    assert len(faulty_transport.calls) == 1
    assert event_log.appended == []


async def test_unexpected_transport_fault_is_wrapped(event_log: SpyEventLog):
    dispatcher = Dispatcher(SpyTransport(exc=RuntimeError("boom")), event_log)
    with pytest.raises(TransportError) as exc_info:
        await dispatcher.dispatch(CommandKind.READ_CLOCK, "dev-1")

    assert isinstance(exc_info.value.__cause__, RuntimeError)
    assert event_log.appended == []


async def test_persistence_error_does_not_resend(transport: SpyTransport):
    flaky = FlakyEventLog()
    dispatcher = Dispatcher(transport, flaky)

    with pytest.raises(PersistenceError) as exc_info:
        await dispatcher.dispatch(CommandKind.START_LOAD_SHED, "dev-2", {"duration": 5})

    assert len(transport.calls) == 1
    record = exc_info.value.record
    assert isinstance(record, EventRecord)
    assert record.event_data["event_sent"] is True

    # retry persistence alone
    assert await dispatcher.persist(record) is record
    assert len(transport.calls) == 1
    assert await flaky.get(record.event_id) == record


async def test_unexpected_log_fault_is_wrapped(transport: SpyTransport):
    event_log = SpyEventLog(exc=RuntimeError("db gone"))
    dispatcher = Dispatcher(transport, event_log)

    with pytest.raises(PersistenceError) as exc_info:
        await dispatcher.dispatch(CommandKind.READ_CLOCK, "dev-1")

    assert exc_info.value.record is event_log.appended[0]
    assert isinstance(exc_info.value.__cause__, RuntimeError)
    assert len(transport.calls) == 1


async def test_event_ids_are_unique(dispatcher: Dispatcher):
    records = [
        await dispatcher.dispatch(CommandKind.READ_CLOCK, "dev-1") for _ in range(10)
    ]
    assert len({r.event_id for r in records}) == 10


async def test_normalized_shape(dispatcher: Dispatcher):
    record = await dispatcher.dispatch(CommandKind.READ_CLOCK, "dev-1")
    assert record.__normalized__() == {
        "event_id": record.event_id,
        "event_type": "READ_CLOCK",
        "event_data": {"device_id": "dev-1", "event_sent": True},
        "event_ack": False,
    }


async def test_changing_returned_record_leaves_log_intact(
    dispatcher: Dispatcher, event_log: SpyEventLog
):
    record = await dispatcher.dispatch(CommandKind.READ_CLOCK, "dev-1")
    record.event_data["event_sent"] = False

    stored = await event_log.get(record.event_id)
    assert stored is not None
    assert stored.event_data["event_sent"] is True
