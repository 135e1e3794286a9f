import asyncio
import struct
from datetime import UTC, datetime

import pytest

from shedwise import Dispatcher, InMemoryEventLog
from shedwise.errors import PersistenceError, TransportError
from shedwise.events import EventRecord

FIXED_DATE = datetime(2024, 1, 1, tzinfo=UTC)
FIXED_DATE_GPS = 1388102418


def decode_start_load_shed(payload: bytes) -> tuple[int, int, int]:
    "test-only decoder: opcode, start time epoch, duration"
    return struct.unpack(">BIh", payload)


class SpyTransport:
    def __init__(self, result: bool = True, exc: Exception | None = None):
        self.result = result
        self.exc = exc
        self.calls: list[tuple[str, bytes]] = []

    async def send(self, device_id: str, payload: bytes) -> bool:
        self.calls.append((device_id, payload))
        if self.exc:
            raise self.exc
        return self.result


class SpyEventLog(InMemoryEventLog):
    def __init__(self, exc: Exception | None = None):
        super().__init__()
        self.exc = exc
        self.appended: list[EventRecord] = []

    async def append(self, record: EventRecord) -> None:
        self.appended.append(record)
        if self.exc:
            raise self.exc
        await super().append(record)


class FlakyEventLog(SpyEventLog):
    "fails the first append only"

    async def append(self, record: EventRecord) -> None:
        if not self.appended:
            self.appended.append(record)
            raise PersistenceError(record, "disk full")
        await super().append(record)


@pytest.fixture
def transport() -> SpyTransport:
    return SpyTransport()


@pytest.fixture
def event_log() -> SpyEventLog:
    return SpyEventLog()


@pytest.fixture
def dispatcher(transport: SpyTransport, event_log: SpyEventLog) -> Dispatcher:
    return Dispatcher(transport, event_log)


@pytest.fixture
def faulty_transport() -> SpyTransport:
    return SpyTransport(exc=TransportError("dev-1", "gateway unreachable"))


class DeviceFailingEventLog(SpyEventLog):
    "fails appends for `failing_device`, every other append waits `delay` first"

    def __init__(self, failing_device: str, delay: float = 0.05):
        super().__init__()
        self.failing_device = failing_device
        self.delay = delay

    async def append(self, record: EventRecord) -> None:
        if record.device_id == self.failing_device:
            raise PersistenceError(record, "disk full")
        await asyncio.sleep(self.delay)
        await super().append(record)
