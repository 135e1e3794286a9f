"""
Fixed-width binary layouts for command payloads.

A payload is an opcode byte followed by big-endian integer fields, with
no padding, no length prefix and no checksum:

    START_LOAD_SHED: 7 bytes
    | opcode u8 | start_time u32 | duration i16 |
"""

import struct
from dataclasses import dataclass, field
from typing import Any, Final, Mapping

from .errors import EncodingError

BYTE_ORDER: Final[str] = ">"

INT_RANGES: Final[dict[str, tuple[int, int]]] = {
    "B": (0, 0xFF),
    "H": (0, 0xFFFF),
    "I": (0, 0xFFFFFFFF),
    "b": (-0x80, 0x7F),
    "h": (-0x8000, 0x7FFF),
    "i": (-0x80000000, 0x7FFFFFFF),
}
"struct codes a layout may declare, with their inclusive value ranges"


@dataclass(frozen=True, slots=True)
class FieldSpec:
    name: str
    code: str

    def __post_init__(self):
        if self.code not in INT_RANGES:
            raise ValueError(f"unsupported field code {self.code!r} for {self.name}")

    @property
    def width(self) -> int:
        return struct.calcsize(BYTE_ORDER + self.code)

    def check(self, value: Any) -> int:
        if isinstance(value, bool) or not isinstance(value, int):
            raise EncodingError("field overflow", field=self.name)
        low, high = INT_RANGES[self.code]
        if not low <= value <= high:
            raise EncodingError("field overflow", field=self.name)
        return value


@dataclass(frozen=True, slots=True)
class Layout:
    """
    opcode: the single-byte wire identifier, always byte 0
    fields: the fields after the opcode, in wire order
    """

    opcode: int
    fields: tuple[FieldSpec, ...] = ()
    _struct: struct.Struct = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        if not 0 <= self.opcode <= 0xFF:
            raise ValueError(f"opcode {self.opcode} does not fit in one byte")
        fmt = BYTE_ORDER + "B" + "".join(f.code for f in self.fields)
        object.__setattr__(self, "_struct", struct.Struct(fmt))

    @property
    def width(self) -> int:
        return self._struct.size

    @property
    def field_names(self) -> tuple[str, ...]:
        return tuple(f.name for f in self.fields)

    def pack(self, values: Mapping[str, Any] | None = None) -> bytes:
        values = values or {}
        unknown = set(values) - set(self.field_names)
        if unknown:
            raise EncodingError("unknown field", field=", ".join(sorted(unknown)))

        checked: list[int] = []
        for fs in self.fields:
            if fs.name not in values:
                raise EncodingError("missing field", field=fs.name)
            checked.append(fs.check(values[fs.name]))
        return self._struct.pack(self.opcode, *checked)


def layout(opcode: int, **fields: str) -> Layout:
    """
    a shorter way to declare a layout

    layout(0x03, start_time="I", duration="h")
    """
    return Layout(opcode, tuple(FieldSpec(name, code) for name, code in fields.items()))
