from ididi import Graph
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncEngine

from .config import Settings
from .dispatcher import Dispatcher
from .events import EventStore, create_tables, engine_factory
from .Interface import ITransport
from .transport import BoundedTransport


def build_graph(settings: Settings) -> Graph:
    dg = Graph()
    dg.register_singleton(settings)

    @dg.node
    def settings_engine(settings: Settings) -> AsyncEngine:
        logger.info(f"event store at {settings.database_url}")
        return engine_factory(settings.database_url, echo=settings.echo_sql)

    return dg


async def create_dispatcher(
    transport: ITransport,
    settings: Settings | None = None,
    *,
    graph: Graph | None = None,
) -> Dispatcher:
    """
    wire a dispatcher to the durable event store,
    `transport` is bounded by `settings.transport_timeout`
    """
    settings = settings or Settings.from_env()
    dg = graph or build_graph(settings)

    async with dg.scope("app") as app_scope:
        store = await app_scope.resolve(EventStore)

    await create_tables(store.engine)
    bounded = BoundedTransport(transport, timeout=settings.transport_timeout)
    return Dispatcher(bounded, store)
