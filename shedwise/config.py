import os
import sys
from typing import Any, Literal, Mapping

import msgspec
from loguru import logger

ENV_PREFIX = "SHEDWISE_"

LogLevel = Literal["TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR"]


class Settings(msgspec.Struct, frozen=True, kw_only=True):
    """
    database_url: sqlalchemy async url of the event store
    transport_timeout: seconds a send may take before it counts as not accepted
    """

    database_url: str = "sqlite+aiosqlite:///shedwise.db"
    transport_timeout: float = 5.0
    echo_sql: bool = False
    log_level: LogLevel = "INFO"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        """
        read SHEDWISE_* variables, e.g.

        SHEDWISE_DATABASE_URL=sqlite+aiosqlite:///events.db
        SHEDWISE_TRANSPORT_TIMEOUT=2.5
        """
        environ = os.environ if environ is None else environ
        raw: dict[str, Any] = {
            key[len(ENV_PREFIX) :].lower(): value
            for key, value in environ.items()
            if key.startswith(ENV_PREFIX)
        }
        known = {k: v for k, v in raw.items() if k in cls.__struct_fields__}
        return msgspec.convert(known, type=cls, strict=False)


def configure_logging(level: LogLevel = "INFO") -> int:
    "replace loguru's default sink, returns the new handler id"
    logger.remove()
    return logger.add(
        sys.stderr,
        level=level,
        format=(
            "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | "
            "{extra} - <level>{message}</level>"
        ),
    )
