"""
pre-defined event record, event table and event logs
"""

from .eventstore import EventStore as EventStore
from .eventstore import engine_factory as engine_factory
from .memory import InMemoryEventLog as InMemoryEventLog
from .model import EventRecord as EventRecord
from .model import NormalizedEvent as NormalizedEvent
from .table import EventTable as EventTable
from .table import create_tables as create_tables
