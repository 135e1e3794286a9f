from types import UnionType
from typing import Any, Union, get_args, get_origin

from .errors import InvalidCommandTypeError


def command_family(cmd_type: type) -> set[type]:
    "`cmd_type` together with every class deriving from it"
    family = {cmd_type}
    for sub in cmd_type.__subclasses__():
        family |= command_family(sub)
    return family


def annotated_commands(annotation: Any) -> set[type]:
    """
    the command classes an encoder parameter accepts, e.g.

    annotated_commands(ReadClock | RequestConnectionInfo)
    """
    if get_origin(annotation) in (UnionType, Union):
        found: set[type] = set()
        for member in get_args(annotation):
            found |= annotated_commands(member)
        return found

    if not isinstance(annotation, type) or get_origin(annotation):
        raise InvalidCommandTypeError(annotation)
    return command_family(annotation)
