from typing import AsyncGenerator

from loguru import logger

from ..errors import EventNotFoundError, PersistenceError
from .model import EventRecord


class InMemoryEventLog:
    """
    An event log kept in a list, records stay in insertion order.
    Records go in and come out detached, so changing a record
    a caller holds never rewrites the log.
    """

    def __init__(self, volume: int | None = None):
        self._volume = volume
        self._records: list[EventRecord] = []
        self._index: dict[str, int] = {}

    def __len__(self) -> int:
        return len(self._records)

    @property
    def records(self) -> list[EventRecord]:
        return [r.detached() for r in self._records]

    async def append(self, record: EventRecord) -> None:
        if record.event_id in self._index:
            raise PersistenceError(record, "duplicate event id")
        if self._volume is not None and len(self._records) >= self._volume:
            raise PersistenceError(record, f"log is full ({self._volume} records)")

        self._index[record.event_id] = len(self._records)
        self._records.append(record.detached())
        logger.debug(f"appended event {record.event_id}")

    async def get(self, event_id: str) -> EventRecord | None:
        try:
            return self._records[self._index[event_id]].detached()
        except KeyError:
            return None

    async def list_events(self, device_id: str) -> list[EventRecord]:
        return [r.detached() for r in self._records if r.device_id == device_id]

    async def list_all_events(self) -> AsyncGenerator[EventRecord, None]:
        for record in self._records[:]:
            yield record.detached()

    async def mark_acknowledged(self, event_id: str) -> EventRecord:
        try:
            pos = self._index[event_id]
        except KeyError:
            raise EventNotFoundError(event_id) from None

        record = self._records[pos].acknowledged()
        self._records[pos] = record
        return record.detached()
