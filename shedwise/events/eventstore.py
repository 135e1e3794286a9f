from typing import AsyncGenerator

from loguru import logger
from sqlalchemy import insert, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from ..errors import EventNotFoundError, PersistenceError
from .model import EventRecord
from .table import EventTable, mapping_to_record, record_to_mapping

RECORD_COLUMNS = (
    EventTable.event_id,
    EventTable.event_type,
    EventTable.event_data,
    EventTable.event_ack,
)


def engine_factory(
    url: str = "sqlite+aiosqlite:///shedwise.db", *, echo: bool = False
) -> AsyncEngine:
    return create_async_engine(url, echo=echo)


class EventStore:
    """
    Durable event log backed by a sqlalchemy async engine.

    Records are written once; the only later change is the acknowledgment
    flag, applied by `mark_acknowledged`.
    """

    def __init__(self, engine: AsyncEngine):
        self._engine = engine

    @property
    def engine(self) -> AsyncEngine:
        return self._engine

    async def append(self, record: EventRecord) -> None:
        stmt = insert(EventTable).values(**record_to_mapping(record))
        try:
            async with self._engine.begin() as conn:
                await conn.execute(stmt)
        except SQLAlchemyError as exc:
            logger.error(f"failed to append event {record.event_id}: {exc}")
            raise PersistenceError(record, exc) from exc
        logger.debug(f"appended event {record.event_id}")

    async def get(self, event_id: str) -> EventRecord | None:
        stmt = select(*RECORD_COLUMNS).where(EventTable.event_id == event_id)
        async with self._engine.begin() as conn:
            cursor = await conn.execute(stmt)
            mapping = cursor.mappings().one_or_none()

        if mapping is None:
            return None
        return mapping_to_record(mapping)

    async def list_events(self, device_id: str) -> list[EventRecord]:
        stmt = (
            select(*RECORD_COLUMNS)
            .where(EventTable.device_id == device_id)
            .order_by(EventTable.id)
        )
        async with self._engine.begin() as conn:
            cursor = await conn.execute(stmt)
            return [mapping_to_record(row) for row in cursor.mappings().all()]

    async def list_all_events(self) -> AsyncGenerator[EventRecord, None]:
        stmt = select(*RECORD_COLUMNS).order_by(EventTable.id)
        async with self._engine.begin() as conn:
            cursor = await conn.stream(stmt)
            async for row in cursor.mappings():
                yield mapping_to_record(row)

    async def mark_acknowledged(self, event_id: str) -> EventRecord:
        stmt = (
            update(EventTable)
            .where(EventTable.event_id == event_id)
            .values(event_ack=True)
        )
        async with self._engine.begin() as conn:
            result = await conn.execute(stmt)
            if result.rowcount == 0:
                raise EventNotFoundError(event_id)

        record = await self.get(event_id)
        if record is None:
            raise EventNotFoundError(event_id)
        return record
