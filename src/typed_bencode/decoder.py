"""
Structural decoder: walks Bencoded input straight into a caller-described shape.
"""
import logging
from typing import Optional

from .config import DEFAULT_CONFIG, BencodeConfig
from .errors import CharsetError, NestingTooDeep, ParsingException, UnexpectedToken, UnknownField
from .parser import DICT_START, INTEGER_START, LIST_START, check_end, check_key, check_value, has_next, \
    is_digit, read_byte_string, read_element, read_integer, read_length, skip_element
from .reader import END_TOKEN, Reader
from .shapes import ELEMENT, Shape
from .structure import BencodeDict, BencodeElement, BencodeInt, BencodeList, BencodeString

logger = logging.getLogger(__name__)

_ELEMENT_TOKENS = {
    BencodeInt: INTEGER_START,
    BencodeList: LIST_START,
    BencodeDict: DICT_START,
}


def narrow(value: int, bits: int) -> int:
    """Truncates to a signed integer of the given width, no overflow check."""
    span = 1 << bits
    value &= span - 1
    return value - span if value >= span >> 1 else value


class StructuralDecoder:
    """
    Decodes one element per shape using the same grammar as the parser.
    Keeps a stack of positions, one counter per open list/map/record.
    """
    def __init__(self, reader: Reader, config: BencodeConfig = DEFAULT_CONFIG):
        self.reader = reader
        self.config = config
        self._positions = []

    @property
    def offset(self) -> int:
        return self.reader.offset

    @property
    def positions(self) -> tuple:
        return tuple(self._positions)

    def decode_value(self, shape: Shape):
        return shape.decode(self)

    # --------------------------
    # Scalars
    # --------------------------

    def decode_long(self) -> int:
        return read_integer(self.reader)

    def decode_int(self, bits: int = 64) -> int:
        return narrow(self.decode_long(), bits)

    def decode_char(self) -> str:
        return chr(self.decode_int(16) & 0xFFFF)

    def decode_string(self) -> str:
        length = read_length(self.reader)
        at = self.reader.offset
        payload = self.reader.take(length)
        try:
            return payload.decode(self.config.string_charset)
        except UnicodeDecodeError as exc:
            raise CharsetError(self.config.string_charset, at) from exc

    def decode_bytes(self) -> bytes:
        """Raw payload, never charset-decoded. A list of integers is also accepted."""
        if self.reader.peek() != LIST_START:
            return read_byte_string(self.reader)

        self.begin_structure(LIST_START)
        buf = bytearray()
        while self.has_next():
            buf.append(self.decode_int(8) & 0xFF)
            self.advance()
        self.end_structure()
        return bytes(buf)

    def decode_element(self, kind: Optional[type] = None) -> BencodeElement:
        """Hands the subtree to the grammar parser."""
        if kind is not None and kind is not BencodeElement:
            token = self.reader.peek()
            matches = is_digit(token) if kind is BencodeString else token == _ELEMENT_TOKENS.get(kind)
            if not matches:
                raise UnexpectedToken(kind.__name__, token, self.reader.offset)
        return read_element(self.reader)

    def decode_raw(self) -> bytes:
        start = self.reader.offset
        skip_element(self.reader)
        return self.reader.slice(start)

    # --------------------------
    # Structures
    # --------------------------

    def begin_structure(self, start_token: bytes) -> None:
        self.reader.consume(start_token)
        self._positions.append(0)

    def has_next(self) -> bool:
        return has_next(self.reader)

    def advance(self) -> None:
        self._positions[-1] += 1

    def end_structure(self) -> None:
        self.reader.consume(END_TOKEN)
        self._positions.pop()

    def decode_key(self) -> str:
        """Reads a record key as text."""
        check_key(self.reader)
        return self.decode_string()

    def decode_map_key(self, shape: Shape):
        check_key(self.reader)
        return self.decode_value(shape)

    def expect_value(self, key) -> None:
        check_value(self.reader, key)

    def skip_unknown(self, name: str, at: int) -> None:
        if not self.config.ignore_unknown_keys:
            raise UnknownField(name, at)
        self.expect_value(name)
        logger.debug("[Decoder] Skipping unknown field %r at offset %d", name, at)
        skip_element(self.reader)


def decode(data, shape: Optional[Shape] = None, config: Optional[BencodeConfig] = None, **options):
    """
    Decodes exactly one Bencoded element from data.

    shape defaults to the generic element tree; options (ignore_unknown_keys,
    string_charset, shapes) override fields of config for this call only.
    Empty input yields None only when the shape is the generic element.
    """
    config = config if config is not None else DEFAULT_CONFIG
    if options:
        config = config.with_options(**options)
    shape = shape if shape is not None else ELEMENT

    reader = Reader(data)
    decoder = StructuralDecoder(reader, config)
    logger.debug("[Decoder] Decoding %d bytes as %r", reader.remaining(), shape)

    if reader.peek() is None and shape.accepts_empty(config):
        return None

    try:
        try:
            value = decoder.decode_value(shape)
        except RecursionError as exc:
            raise NestingTooDeep(reader.offset) from exc
        check_end(reader)
    except ParsingException as exc:
        exc.path = decoder.positions
        logger.debug("[Decoder] Failed at offset %s (path %s): %s", exc.at, exc.path, exc.reason)
        raise
    return value
