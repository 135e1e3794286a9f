from typing import Any

from loguru import logger

from .commands import Command, default_registry
from ._registry import CommandRegistry
from .errors import EncodingError, PersistenceError, TransportError
from .events.model import EventRecord
from .Interface import EventData, IEventLog, ITransport, Params


class Dispatcher:
    """
    The single path every command kind flows through:

    1. encode the command, failures abort before any I/O
    2. hand the payload to the transport, capture whether it was accepted
    3. build the event record of the outcome
    4. append the record to the event log
    5. return the record

    Nothing is retried here. A `TransportError` leaves the command state
    unknown, a `PersistenceError` carries the record so that only
    persistence gets retried, via `persist`.

    ```py
    dispatcher = Dispatcher(transport, event_log)
    record = await dispatcher.dispatch(CommandKind.READ_CLOCK, "dev-1")
    record = await dispatcher.send(StartLoadShed(device_id="dev-2", duration=120))
    ```
    """

    def __init__(
        self,
        transport: ITransport,
        event_log: IEventLog,
        *,
        registry: CommandRegistry[Command] = default_registry,
    ):
        self._transport = transport
        self._event_log = event_log
        self._registry = registry

    @property
    def transport(self) -> ITransport:
        return self._transport

    @property
    def event_log(self) -> IEventLog:
        return self._event_log

    @property
    def registry(self) -> CommandRegistry[Command]:
        return self._registry

    async def dispatch(
        self, kind: Any, device_id: str, params: Params | None = None
    ) -> EventRecord:
        command = self._registry.build(kind, device_id, params)
        return await self.send(command)

    async def send(self, command: Command) -> EventRecord:
        device_id = command.device_id
        if not isinstance(device_id, str) or not device_id:
            raise EncodingError("invalid device id", field="device_id")

        payload = self._registry.encode(command)
        event_type = str(command.__kind__)

        with logger.contextualize(device_id=device_id, event_type=event_type):
            sent = await self._deliver(device_id, payload)

            event_data: EventData = {"device_id": device_id}
            event_data.update(self._registry.extract(command))
            event_data["event_sent"] = sent
            record = EventRecord(event_type=event_type, event_data=event_data)

            await self.persist(record)

            if sent:
                logger.success(f"event {record.event_id} recorded, payload {payload.hex()}")
            else:
                logger.warning(f"event {record.event_id} recorded, payload not accepted")
            return record

    async def _deliver(self, device_id: str, payload: bytes) -> bool:
        try:
            sent = await self._transport.send(device_id, payload)
        except TransportError as exc:
            logger.error(exc)
            raise
        except Exception as exc:
            logger.error(f"transport fault: {exc!r}")
            raise TransportError(device_id, exc) from exc
        return bool(sent)

    async def persist(self, record: EventRecord) -> EventRecord:
        "append `record` to the event log, never sends anything"
        try:
            await self._event_log.append(record)
        except PersistenceError as exc:
            logger.error(exc)
            raise
        except Exception as exc:
            logger.error(f"event log fault: {exc!r}")
            raise PersistenceError(record, exc) from exc
        return record
