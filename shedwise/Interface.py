"Interface, type alias, and related stuff"

from typing import (
    TYPE_CHECKING,
    Any,
    Callable,
    Mapping,
    Protocol,
)

if TYPE_CHECKING:
    from .events.model import EventRecord

type Params = Mapping[str, Any]
type EventData = dict[str, Any]

type Encoder[C] = Callable[[C], bytes]
type Extractor[C] = Callable[[C], EventData]


class ITransport(Protocol):
    """
    Hands a payload to the device gateway.

    The returned bool means "accepted for delivery", not "executed".
    A send that can't complete returns False; an unrecoverable fault
    raises `TransportError`.
    """

    async def send(self, device_id: str, payload: bytes) -> bool: ...


class IEventLog(Protocol):
    """
    Append-only log of event records, durable once `append` returns.
    Raises `PersistenceError` on failure.
    """

    async def append(self, record: "EventRecord") -> None: ...


class IAckLog(IEventLog, Protocol):
    async def get(self, event_id: str) -> "EventRecord | None": ...

    async def mark_acknowledged(self, event_id: str) -> "EventRecord": ...

