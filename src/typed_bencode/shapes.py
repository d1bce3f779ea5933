"""
Target shapes for structural decoding.

A shape describes what the caller wants out of the input (a scalar, a list,
a map, a record or a raw element tree) and knows how to drive a
StructuralDecoder to produce it. Shapes are built by hand; nothing here
inspects application classes.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Hashable, Iterable, Optional

from .errors import MissingField
from .parser import DICT_START, LIST_START
from .structure import BencodeElement

__all__ = [
    "NO_DEFAULT",
    "Shape",
    "ScalarKind",
    "Scalar",
    "ListOf",
    "MapOf",
    "Field",
    "Record",
    "ElementShape",
    "Raw",
    "Contextual",
    "STRING",
    "BYTES",
    "BYTE",
    "SHORT",
    "INT",
    "LONG",
    "CHAR",
    "ELEMENT",
    "RAW",
]


class _NoDefault:
    def __repr__(self):
        return "NO_DEFAULT"


NO_DEFAULT = _NoDefault()


class Shape:
    """Base class for all decode targets."""

    def decode(self, decoder):
        raise NotImplementedError

    def accepts_empty(self, config) -> bool:
        """Whether an empty top-level input decodes to None for this shape."""
        return False


class ScalarKind(Enum):
    STRING = "string"
    BYTES = "bytes"
    BYTE = "byte"
    SHORT = "short"
    INT = "int"
    LONG = "long"
    CHAR = "char"


_INT_WIDTHS = {
    ScalarKind.BYTE: 8,
    ScalarKind.SHORT: 16,
    ScalarKind.INT: 32,
    ScalarKind.LONG: 64,
}


@dataclass(frozen=True)
class Scalar(Shape):
    kind: ScalarKind

    def decode(self, decoder):
        if self.kind is ScalarKind.STRING:
            return decoder.decode_string()
        if self.kind is ScalarKind.BYTES:
            return decoder.decode_bytes()
        if self.kind is ScalarKind.CHAR:
            return decoder.decode_char()
        return decoder.decode_int(_INT_WIDTHS[self.kind])


@dataclass(frozen=True)
class ListOf(Shape):
    element: Shape

    def decode(self, decoder):
        decoder.begin_structure(LIST_START)
        items = []

        while decoder.has_next():
            items.append(decoder.decode_value(self.element))
            decoder.advance()

        decoder.end_structure()
        return items


@dataclass(frozen=True)
class MapOf(Shape):
    key: Shape
    value: Shape

    def decode(self, decoder):
        decoder.begin_structure(DICT_START)
        result = {}

        while decoder.has_next():
            key = decoder.decode_map_key(self.key)
            decoder.advance()
            decoder.expect_value(key)
            result[key] = decoder.decode_value(self.value)
            decoder.advance()

        decoder.end_structure()
        return result


@dataclass(frozen=True)
class Field:
    """
    One entry of a record's field table.
    `name` is the dictionary key as it appears in the input, `attr` the
    keyword passed to the record factory (defaults to `name`).
    """
    name: str
    shape: Shape
    default: Any = NO_DEFAULT
    default_factory: Optional[Callable[[], Any]] = None
    attr: Optional[str] = None

    @property
    def attr_name(self) -> str:
        return self.attr or self.name

    @property
    def required(self) -> bool:
        return self.default is NO_DEFAULT and self.default_factory is None

    def default_value(self):
        if self.default_factory is not None:
            return self.default_factory()
        return self.default


class Record(Shape):
    """
    A dictionary decoded field by field into `factory(**values)`.
    """
    def __init__(self, name: str, fields: Iterable[Field], factory: Callable[..., Any] = dict):
        self.name = name
        self.fields = tuple(fields)
        self.factory = factory
        self.field_table = {}
        for index, f in enumerate(self.fields):
            if f.name in self.field_table:
                raise ValueError(f"Duplicate field '{f.name}' in record {name}")
            self.field_table[f.name] = index

    def index_of(self, name: str) -> Optional[int]:
        return self.field_table.get(name)

    def decode(self, decoder):
        start = decoder.offset
        decoder.begin_structure(DICT_START)
        values = {}

        while decoder.has_next():
            key_at = decoder.offset
            name = decoder.decode_key()
            index = self.index_of(name)
            if index is None:
                decoder.skip_unknown(name, key_at)
            else:
                f = self.fields[index]
                decoder.expect_value(name)
                values[f.attr_name] = decoder.decode_value(f.shape)
            decoder.advance()

        decoder.end_structure()
        return self.build(values, start)

    def build(self, values: dict, at: Optional[int] = None):
        missing = []
        for f in self.fields:
            if f.attr_name in values:
                continue
            if f.required:
                missing.append(f.name)
            else:
                values[f.attr_name] = f.default_value()

        if missing:
            raise MissingField(missing, at)
        return self.factory(**values)

    def __repr__(self):
        return f"Record({self.name!r}, fields={[f.name for f in self.fields]})"


@dataclass(frozen=True)
class ElementShape(Shape):
    """
    Generic passthrough: the subtree is handed to the grammar parser.
    With `kind` set (e.g. BencodeList) the element must be of that kind.
    """
    kind: Optional[type] = None

    def __post_init__(self):
        if self.kind is not None and not issubclass(self.kind, BencodeElement):
            raise TypeError(f"ElementShape kind must be a BencodeElement subclass, not {self.kind!r}")

    def decode(self, decoder):
        return decoder.decode_element(self.kind)

    def accepts_empty(self, config) -> bool:
        return self.kind is None or self.kind is BencodeElement


@dataclass(frozen=True)
class Raw(Shape):
    """The exact encoded bytes of one element, e.g. for hashing."""

    def decode(self, decoder):
        return decoder.decode_raw()


@dataclass(frozen=True)
class Contextual(Shape):
    """A shape looked up by key in the session's shape registry."""
    key: Hashable

    def resolve(self, config) -> Shape:
        shape = config.shapes.get(self.key)
        if shape is None:
            raise ValueError(f"No shape registered for {self.key!r}")
        return shape

    def decode(self, decoder):
        return decoder.decode_value(self.resolve(decoder.config))

    def accepts_empty(self, config) -> bool:
        return self.resolve(config).accepts_empty(config)


STRING = Scalar(ScalarKind.STRING)
BYTES = Scalar(ScalarKind.BYTES)
BYTE = Scalar(ScalarKind.BYTE)
SHORT = Scalar(ScalarKind.SHORT)
INT = Scalar(ScalarKind.INT)
LONG = Scalar(ScalarKind.LONG)
CHAR = Scalar(ScalarKind.CHAR)
ELEMENT = ElementShape()
RAW = Raw()
