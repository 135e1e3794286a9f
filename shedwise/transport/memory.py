from loguru import logger


class InMemoryTransport:
    """
    A loopback transport that keeps every payload it is handed.

    accept: what `send` reports back, False simulates a gateway that
    refuses delivery
    """

    def __init__(self, accept: bool = True):
        self.accept = accept
        self.sent: list[tuple[str, bytes]] = []

    async def send(self, device_id: str, payload: bytes) -> bool:
        self.sent.append((device_id, payload))
        logger.debug(f"loopback {device_id} <- {payload.hex()}")
        return self.accept
