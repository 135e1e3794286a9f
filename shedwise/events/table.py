from typing import Any, Mapping

import sqlalchemy as sa
from sqlalchemy import orm as sa_orm
from sqlalchemy.ext import asyncio as saio
from sqlalchemy.sql import func

from .model import EventRecord

TABLE_RESERVED_VARS: set[str] = {
    "id",  # primary key
    "device_id",
    "gmt_created",
    "gmt_modified",
}
"Values that exist in event table but should be ignored to rebuild the event record."


def declarative(cls: type) -> type[sa_orm.DeclarativeBase]:
    """
    A more pythonic way to declare a sqlalchemy table
    """

    return sa_orm.declarative_base(cls=cls)


@declarative
class TableBase:
    "Exert constraints on table creation, and reduce duplicate code"
    gmt_modified = sa.Column(
        "gmt_modified", sa.DateTime, server_default=func.now(), onupdate=func.now()
    )
    gmt_created = sa.Column("gmt_created", sa.DateTime, server_default=func.now())


class EventTable(TableBase):
    __tablename__: str = "events"
    __table_args__: tuple[Any] = (
        sa.Index("idx_events_device_id_type", "device_id", "event_type"),
    )

    id = sa.Column("id", sa.Integer, primary_key=True, autoincrement=True)
    event_id = sa.Column(
        "event_id", sa.String, index=False, nullable=False, unique=True
    )
    event_type = sa.Column("event_type", sa.String, nullable=False)
    device_id = sa.Column("device_id", sa.String, index=True, nullable=False)
    event_data = sa.Column("event_data", sa.JSON, nullable=False)
    event_ack = sa.Column("event_ack", sa.Boolean, nullable=False, default=False)


async def create_tables(engine: saio.AsyncEngine):
    async with engine.begin() as conn:
        await conn.run_sync(TableBase.metadata.create_all)


def record_to_mapping(record: EventRecord) -> dict[str, Any]:
    mapping: dict[str, Any] = dict(record.__normalized__())
    mapping["device_id"] = record.device_id
    return mapping


def mapping_to_record(row_mapping: Mapping[Any, Any]) -> EventRecord:
    mapping = {k: v for k, v in row_mapping.items() if k not in TABLE_RESERVED_VARS}
    return EventRecord(**mapping)
