"""
Ways to run several dispatches.

- sequential_dispatch: one after another, in request order. Use it when the
  commands target the same device and must reach the gateway in order.

- concurrent_dispatch: all at once. Each dispatch builds its own payload and
  record, so nothing is shared between them. A failing dispatch never
  cancels its siblings, a command that reached the transport always ends up
  either recorded or on a `PersistenceError`.

    ```py
    records = await concurrent_dispatch(
        dispatcher,
        [
            DispatchRequest(CommandKind.READ_CLOCK, "dev-1"),
            DispatchRequest(CommandKind.START_LOAD_SHED, "dev-2", {"duration": 60}),
        ],
    )
    ```
"""

import asyncio
from typing import Any, NamedTuple, Sequence

from .dispatcher import Dispatcher
from .errors import DispatchGroupError
from .events.model import EventRecord
from .Interface import Params


class DispatchRequest(NamedTuple):
    kind: Any
    device_id: str
    params: Params | None = None


async def sequential_dispatch(
    dispatcher: Dispatcher, requests: Sequence[DispatchRequest]
) -> list[EventRecord]:
    return [
        await dispatcher.dispatch(req.kind, req.device_id, req.params)
        for req in requests
    ]


async def concurrent_dispatch(
    dispatcher: Dispatcher, requests: Sequence[DispatchRequest]
) -> list[EventRecord]:
    """
    records come back in request order.
    every dispatch runs to completion, then the failures are raised together
    as a `DispatchGroupError` that still carries the successful records
    """
    pending = [
        dispatcher.dispatch(req.kind, req.device_id, req.params) for req in requests
    ]
    results = await asyncio.gather(*pending, return_exceptions=True)

    records: list[EventRecord | None] = []
    failures: list[Exception] = []
    for result in results:
        if isinstance(result, EventRecord):
            records.append(result)
            continue
        if not isinstance(result, Exception):
            raise result
        records.append(None)
        failures.append(result)

    if failures:
        raise DispatchGroupError(
            f"{len(failures)} of {len(requests)} dispatches failed", failures, records
        )
    return [r for r in records if r is not None]
