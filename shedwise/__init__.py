VERSION = "0.1.0"


from .ack import AckProcessor as AckProcessor
from .codec import FieldSpec as FieldSpec
from .codec import Layout as Layout
from .codec import layout as layout
from .commands import Command as Command
from .commands import CommandKind as CommandKind
from .commands import ReadClock as ReadClock
from .commands import RequestConnectionInfo as RequestConnectionInfo
from .commands import StartLoadShed as StartLoadShed
from .commands import default_registry as default_registry
from .dispatcher import Dispatcher as Dispatcher
from .errors import DispatchGroupError as DispatchGroupError
from .errors import EncodingError as EncodingError
from .errors import PersistenceError as PersistenceError
from .errors import ShedwiseError as ShedwiseError
from .errors import TransportError as TransportError
from .events import EventRecord as EventRecord
from .events import EventStore as EventStore
from .events import InMemoryEventLog as InMemoryEventLog
from .Interface import IEventLog as IEventLog
from .Interface import ITransport as ITransport
from ._registry import CommandRegistry as CommandRegistry
from .strategies import DispatchRequest as DispatchRequest
from .strategies import concurrent_dispatch as concurrent_dispatch
from .strategies import sequential_dispatch as sequential_dispatch
from .transport import BoundedTransport as BoundedTransport
from .transport import InMemoryTransport as InMemoryTransport
