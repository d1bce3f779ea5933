"""
Per-session decoding options.
"""
import codecs
from dataclasses import dataclass, field, replace
from typing import Any, Hashable, Mapping


@dataclass(frozen=True)
class BencodeConfig:
    """
    ignore_unknown_keys: skip record keys missing from the field table instead of failing.
    string_charset:      codec used for STRING scalars (never for BYTES).
    shapes:              registry consulted by Contextual shapes, keyed by any hashable (usually a type).
    """
    ignore_unknown_keys: bool = False
    string_charset: str = "utf-8"
    shapes: Mapping[Hashable, Any] = field(default_factory=dict)

    def __post_init__(self):
        codecs.lookup(self.string_charset)  # raises LookupError for unknown codecs

    def with_options(self, **changes) -> "BencodeConfig":
        return replace(self, **changes)

    def with_shape(self, key: Hashable, shape) -> "BencodeConfig":
        shapes = dict(self.shapes)
        shapes[key] = shape
        return replace(self, shapes=shapes)


DEFAULT_CONFIG = BencodeConfig()
