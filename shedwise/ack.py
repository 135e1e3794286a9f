from loguru import logger

from .errors import EventNotFoundError
from .events.model import EventRecord
from .Interface import IAckLog


class AckProcessor:
    """
    Applies a device acknowledgment that arrives after the command was
    dispatched. The acknowledgment is an update to the record with the same
    event id, the dispatcher never sets `event_ack` itself.
    """

    def __init__(self, event_log: IAckLog):
        self._event_log = event_log

    async def acknowledge(self, event_id: str) -> EventRecord:
        record = await self._event_log.get(event_id)
        if record is None:
            raise EventNotFoundError(event_id)

        if record.event_ack:
            logger.debug(f"event {event_id} already acknowledged")
            return record

        acked = await self._event_log.mark_acknowledged(event_id)
        logger.success(f"event {event_id} acknowledged by {acked.device_id}")
        return acked
