from datetime import datetime
from enum import StrEnum
from typing import ClassVar

from msgspec import Struct

from ..codec import Layout, layout


class CommandKind(StrEnum):
    "the value doubles as the `event_type` of the recorded event"

    READ_CLOCK = "READ_CLOCK"
    REQUEST_CONNECTION_INFO = "REQUEST_CONNECTION_INFO"
    START_LOAD_SHED = "START_LOAD_SHED"


class Command(Struct, frozen=True, kw_only=True, forbid_unknown_fields=True):
    """
    Base of every device command.

    Subclasses declare their wire identity as class variables:

    ```py
    class SetRelay(Command, frozen=True, kw_only=True):
        __kind__ = "SET_RELAY"
        __layout__ = layout(0x40, relay="B")

        relay: int
    ```
    """

    __kind__: ClassVar[CommandKind]
    __layout__: ClassVar[Layout]

    device_id: str


class ReadClock(Command, frozen=True, kw_only=True):
    "ask the device to report its clock"

    __kind__ = CommandKind.READ_CLOCK
    __layout__ = layout(0x01)


class RequestConnectionInfo(Command, frozen=True, kw_only=True):
    "ask the device to report link diagnostics"

    __kind__ = CommandKind.REQUEST_CONNECTION_INFO
    __layout__ = layout(0x02)


class StartLoadShed(Command, frozen=True, kw_only=True):
    """
    start_time: when shedding begins, None lets the device start right away
    duration: how long to shed for, signed 16 bit on the wire
    """

    __kind__ = CommandKind.START_LOAD_SHED
    __layout__ = layout(0x03, start_time="I", duration="h")

    start_time: datetime | None = None
    duration: int = 0
