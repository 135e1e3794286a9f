"""
Conversion between calendar time and the protocol's GPS epoch counter.

Devices count seconds since the GPS epoch (1980-01-06T00:00:00Z). GPS time
does not observe leap seconds, so it runs ahead of UTC by a fixed offset.
"""

from datetime import UTC, datetime, timedelta
from typing import Final

from .errors import EncodingError

GPS_EPOCH: Final[datetime] = datetime(1980, 1, 6, tzinfo=UTC)
GPS_LEAP_SECONDS: Final[int] = 18
U32_MAX: Final[int] = 0xFFFFFFFF

NO_TIME: Final[int] = 0
"encoded value meaning no start time was given"


def as_utc(ts: datetime) -> datetime:
    "naive datetimes are taken to be UTC already"
    if ts.tzinfo is None:
        return ts.replace(tzinfo=UTC)
    return ts.astimezone(UTC)


def to_gps_epoch(ts: datetime | None) -> int:
    """
    convert `ts` into whole seconds on the GPS time scale

    e.g.
    to_gps_epoch(datetime(2024, 1, 1, tzinfo=UTC)) == 1388102418
    to_gps_epoch(None) == 0
    """
    if ts is None:
        return NO_TIME

    delta = as_utc(ts) - GPS_EPOCH
    seconds = delta.days * 86400 + delta.seconds + GPS_LEAP_SECONDS
    if not 0 <= seconds <= U32_MAX:
        raise EncodingError("time out of range")
    return seconds


def from_gps_epoch(seconds: int) -> datetime:
    if not 0 <= seconds <= U32_MAX:
        raise EncodingError("time out of range")
    return GPS_EPOCH + timedelta(seconds=seconds - GPS_LEAP_SECONDS)
