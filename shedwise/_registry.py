import inspect
from typing import Any, Callable, Mapping

import msgspec

from ._ds import EncoderMeta, ExtractorMeta
from ._visitor import annotated_commands
from .codec import Layout
from .errors import (
    DuplicateEncoderError,
    EncoderNotFoundError,
    EncodingError,
    InvalidCommandTypeError,
    NotSupportedEncoderTypeError,
    UnregisteredCommandError,
)
from .Interface import EventData

KIND_ATTR = "__kind__"
LAYOUT_ATTR = "__layout__"


def get_commandtypes(cmd_base: type, func: Callable[..., Any]) -> list[type]:
    """
    read the command types out of the first parameter of `func`,
    only classes that declare their own kind are kept, e.g.

    def encode(command: ReadClock | RequestConnectionInfo) -> bytes: ...
    """
    if not inspect.isfunction(func):
        raise NotSupportedEncoderTypeError(func)

    params = list(inspect.signature(func).parameters.values())
    if not params:
        raise EncoderNotFoundError(cmd_base, func)

    annotation = params[0].annotation
    if annotation is inspect.Parameter.empty:
        raise EncoderNotFoundError(cmd_base, func)

    derived_cmdtypes = annotated_commands(annotation)
    if not derived_cmdtypes:
        raise EncoderNotFoundError(cmd_base, func)

    for cmd_type in derived_cmdtypes:
        if not issubclass(cmd_type, cmd_base):
            raise InvalidCommandTypeError(cmd_type)

    return [t for t in derived_cmdtypes if KIND_ATTR in vars(t)]


def get_encodermetas(cmd_base: type, func: Callable[..., bytes]) -> list[EncoderMeta[Any]]:
    return [
        EncoderMeta[Any](
            command_type=t,
            kind=getattr(t, KIND_ATTR),
            layout=getattr(t, LAYOUT_ATTR),
            encoder=func,
        )
        for t in get_commandtypes(cmd_base, func)
    ]


def get_extractormetas(
    cmd_base: type, func: Callable[..., EventData]
) -> list[ExtractorMeta[Any]]:
    return [
        ExtractorMeta[Any](command_type=t, kind=getattr(t, KIND_ATTR), extractor=func)
        for t in get_commandtypes(cmd_base, func)
    ]


class CommandRegistry[C]:
    """
    A table keyed by command kind, holding the pure encoder that turns a
    command into its payload and the extractor that picks the kind-specific
    fields of its event record.

    ```py
    registry = CommandRegistry(command_base=Command)

    @registry
    def encode_start_load_shed(command: StartLoadShed) -> bytes: ...

    @registry.extractor
    def start_load_shed_fields(command: StartLoadShed) -> EventData: ...
    ```
    """

    def __init__(self, *, command_base: type[C]):
        self._command_base = command_base
        self.encoder_mapping: dict[Any, EncoderMeta[C]] = {}
        self.extractor_mapping: dict[Any, ExtractorMeta[C]] = {}

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(command_base={self._command_base}, kinds={self.kinds()})"

    def __call__[**P](self, encoder: Callable[P, bytes]) -> Callable[P, bytes]:
        self.register(encoder)
        return encoder

    @property
    def command_base(self) -> type[C]:
        return self._command_base

    def _add_encoder(self, meta: EncoderMeta[C]) -> None:
        existing = self.encoder_mapping.get(meta.kind)
        if existing and existing.encoder is not meta.encoder:
            raise DuplicateEncoderError(meta.kind, existing.encoder)
        self.encoder_mapping[meta.kind] = meta

    def register(self, *encoders: Callable[..., bytes]) -> None:
        for encoder in encoders:
            metas = get_encodermetas(self._command_base, encoder)
            if not metas:
                raise EncoderNotFoundError(self._command_base, encoder)
            for meta in metas:
                self._add_encoder(meta)

    def extractor[**P](self, func: Callable[P, EventData]) -> Callable[P, EventData]:
        for meta in get_extractormetas(self._command_base, func):
            self.extractor_mapping[meta.kind] = meta
        return func

    def include(self, *registries: "CommandRegistry[Any]") -> None:
        for registry in registries:
            for meta in registry.encoder_mapping.values():
                self._add_encoder(meta)
            self.extractor_mapping.update(registry.extractor_mapping)

    def kinds(self) -> list[Any]:
        return list(self.encoder_mapping)

    def _get_meta(self, kind: Any) -> EncoderMeta[C]:
        try:
            return self.encoder_mapping[kind]
        except KeyError:
            raise UnregisteredCommandError(kind) from None

    def command_type(self, kind: Any) -> type[C]:
        return self._get_meta(kind).command_type

    def layout(self, kind: Any) -> Layout:
        return self._get_meta(kind).layout

    def build(
        self, kind: Any, device_id: str, params: Mapping[str, Any] | None = None
    ) -> C:
        "convert loosely typed parameters into the command of `kind`"
        cmd_type = self.command_type(kind)
        if params is not None and not isinstance(params, Mapping):
            reason = f"{type(params).__name__} is not a mapping"
            raise EncodingError(f"invalid parameters ({reason})")
        raw = {**(params or {}), "device_id": device_id}
        try:
            return msgspec.convert(raw, type=cmd_type, strict=False)
        except msgspec.ValidationError as exc:
            raise EncodingError(f"invalid parameters ({exc})") from exc

    def encode(self, command: C) -> bytes:
        meta = self._get_meta(getattr(type(command), KIND_ATTR, None))
        if not isinstance(command, meta.command_type):
            raise UnregisteredCommandError(type(command))

        payload = bytes(meta.encoder(command))
        if len(payload) != meta.layout.width or payload[0] != meta.layout.opcode:
            raise EncodingError(f"payload does not match layout of {meta.kind}")
        return payload

    def extract(self, command: C) -> EventData:
        kind = getattr(type(command), KIND_ATTR, None)
        try:
            meta = self.extractor_mapping[kind]
        except KeyError:
            return {}
        return meta.extractor(command)
