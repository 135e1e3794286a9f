import asyncio

from loguru import logger

from ..errors import TransportError
from ..Interface import ITransport


class BoundedTransport:
    """
    Wraps a transport so a send that can't complete reports False.

    - timeouts and connection failures: False
    - `TransportError` from the inner transport: propagated
    - anything else: wrapped in `TransportError`
    """

    def __init__(self, inner: ITransport, timeout: float | None = 5.0):
        self._inner = inner
        self._timeout = timeout

    @property
    def inner(self) -> ITransport:
        return self._inner

    async def send(self, device_id: str, payload: bytes) -> bool:
        try:
            async with asyncio.timeout(self._timeout):
                return bool(await self._inner.send(device_id, payload))
        except TimeoutError:
            logger.warning(f"send to {device_id} timed out after {self._timeout}s")
            return False
        except (ConnectionError, OSError) as exc:
            logger.warning(f"send to {device_id} failed: {exc}")
            return False
        except TransportError:
            raise
        except Exception as exc:
            raise TransportError(device_id, exc) from exc
