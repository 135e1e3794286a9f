from dataclasses import dataclass
from typing import Any

from .codec import Layout
from .Interface import Encoder, Extractor


@dataclass(frozen=True, slots=True, kw_only=True)
class EncoderMeta[Command]:
    """
    kind: the command kind this encoder serializes
    layout: the fixed layout every payload it produces must match
    """

    command_type: type[Command]
    kind: Any
    layout: Layout
    encoder: Encoder[Command]


@dataclass(frozen=True, slots=True, kw_only=True)
class ExtractorMeta[Command]:
    command_type: type[Command]
    kind: Any
    extractor: Extractor[Command]
