from copy import deepcopy
from typing import Any, TypedDict
from uuid import uuid4

from msgspec import Struct, field, json, structs


def uuid_factory() -> str:
    return str(uuid4())


class NormalizedEvent(TypedDict):
    event_id: str
    event_type: str
    event_data: dict[str, Any]
    event_ack: bool


class EventRecord(Struct, frozen=True, kw_only=True):
    """
    Immutable audit entry for one dispatched command.

    event_data holds at least `device_id` and `event_sent`, plus the
    fields of the command kind, e.g. for START_LOAD_SHED

    {
        "device_id": "dev-2",
        "start_time": "2024-01-01T00:00:00.000Z",
        "duration": 120,
        "event_sent": true
    }
    """

    event_id: str = field(default_factory=uuid_factory)
    event_type: str
    event_data: dict[str, Any]
    event_ack: bool = False

    @property
    def device_id(self) -> str:
        return self.event_data["device_id"]

    @property
    def event_sent(self) -> bool:
        return self.event_data["event_sent"]

    def acknowledged(self) -> "EventRecord":
        "a copy of this record, acknowledged, under the same event id"
        return structs.replace(self, event_ack=True)

    def detached(self) -> "EventRecord":
        "a copy that shares no mutable state with this record"
        return structs.replace(self, event_data=deepcopy(self.event_data))

    def __normalized__(self) -> NormalizedEvent:
        return NormalizedEvent(
            event_id=self.event_id,
            event_type=self.event_type,
            event_data=dict(self.event_data),
            event_ack=self.event_ack,
        )


_encoder = json.Encoder()
_decoder = json.Decoder(EventRecord)


def dumps(record: EventRecord) -> bytes:
    return _encoder.encode(record)


def loads(raw: bytes | str) -> EventRecord:
    return _decoder.decode(raw)
