from typing import TYPE_CHECKING, Any, Sequence

if TYPE_CHECKING:
    from .events.model import EventRecord


class ShedwiseError(Exception): ...


class EncodingError(ShedwiseError):
    """
    Bad command input, raised before any I/O happens.
    """

    def __init__(self, reason: str, *, field: str | None = None):
        self.reason = reason
        self.field = field
        msg = f"{reason}: {field}" if field else reason
        super().__init__(msg)


class TransportError(ShedwiseError):
    def __init__(self, device_id: str, reason: Any = "transport fault"):
        self.device_id = device_id
        super().__init__(f"failed to hand payload to device {device_id!r}: {reason}")


class PersistenceError(ShedwiseError):
    """
    The command was already handed to the transport but its record could not
    be logged. `record` is intact so only persistence is retried.
    """

    def __init__(self, record: "EventRecord", reason: Any = "event log failure"):
        self.record = record
        super().__init__(f"failed to persist event {record.event_id}: {reason}")


class EventNotFoundError(ShedwiseError):
    def __init__(self, event_id: str):
        self.event_id = event_id
        super().__init__(f"event {event_id} not found")


class CommandRegisterFailError(ShedwiseError): ...


class NotSupportedEncoderTypeError(CommandRegisterFailError):
    def __init__(self, encoder: Any):
        super().__init__(f"{encoder} of type {type(encoder)} is not supported")


class InvalidCommandTypeError(CommandRegisterFailError):
    def __init__(self, cmd_type: Any):
        super().__init__(f"{cmd_type} is not a valid command type")


class EncoderNotFoundError(CommandRegisterFailError):
    def __init__(self, base_type: Any, encoder: Any):
        super().__init__(f"can't find param of type `{base_type}` in {encoder}")


class DuplicateEncoderError(CommandRegisterFailError):
    def __init__(self, kind: Any, existing: Any):
        super().__init__(f"{kind} is already encoded by {existing}")


class UnregisteredCommandError(EncodingError):
    def __init__(self, kind: Any):
        self.kind = kind
        super().__init__(f"encoder for command {kind} is not found")


class DispatchGroupError(ExceptionGroup):
    """
    Failures of a batch of dispatches, raised once every dispatch has finished.

    records: one entry per request, in request order,
    None where that dispatch raised one of `exceptions`.
    """

    records: "list[EventRecord | None]"

    def __new__(
        cls,
        message: str,
        exceptions: Sequence[Exception],
        records: "Sequence[EventRecord | None]",
    ):
        group = super().__new__(cls, message, exceptions)
        group.records = list(records)
        return group

    def derive(self, excs: Sequence[Exception]) -> "DispatchGroupError":
        return DispatchGroupError(self.message, excs, self.records)
