"""
adapters for the device gateway boundary
"""

from .bounded import BoundedTransport as BoundedTransport
from .memory import InMemoryTransport as InMemoryTransport
