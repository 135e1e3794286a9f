"""
pre-defined device commands and their encoders
"""

from .encoders import default_registry as default_registry
from .model import Command as Command
from .model import CommandKind as CommandKind
from .model import ReadClock as ReadClock
from .model import RequestConnectionInfo as RequestConnectionInfo
from .model import StartLoadShed as StartLoadShed
