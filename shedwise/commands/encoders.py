"""
Built-in encoders, one pure function per command kind.

Each encoder only packs values into the layout its command declares,
it never performs I/O.
"""

from ..Interface import EventData
from .._registry import CommandRegistry
from ..timecodec import as_utc, to_gps_epoch
from .model import Command, ReadClock, RequestConnectionInfo, StartLoadShed

default_registry = CommandRegistry(command_base=Command)


@default_registry
def encode_opcode_only(command: ReadClock | RequestConnectionInfo) -> bytes:
    return command.__layout__.pack()


@default_registry
def encode_start_load_shed(command: StartLoadShed) -> bytes:
    return command.__layout__.pack(
        {
            "start_time": to_gps_epoch(command.start_time),
            "duration": command.duration,
        }
    )


@default_registry.extractor
def start_load_shed_fields(command: StartLoadShed) -> EventData:
    start_time = "0"
    if command.start_time:
        stamp = as_utc(command.start_time).isoformat(timespec="milliseconds")
        start_time = stamp.replace("+00:00", "Z")
    return {"start_time": start_time, "duration": command.duration}
