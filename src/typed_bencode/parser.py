"""
Recursive-descent parser building a generic Bencode element tree.
"""
import sys
from typing import Optional

from .errors import KeyTypeError, LengthTooLarge, MissingDictionaryValue, NestingTooDeep, TrailingInput, \
    UnexpectedToken, UnterminatedStructure
from .reader import END_TOKEN, Reader
from .structure import BencodeDict, BencodeElement, BencodeInt, BencodeList, BencodeString

INTEGER_START = b"i"
LIST_START = b"l"
DICT_START = b"d"
MINUS_SIGN = b"-"
LENGTH_SEPARATOR = b":"

MAX_LENGTH = sys.maxsize
MAX_LENGTH_DIGITS = len(str(MAX_LENGTH))

_INT64_SPAN = 1 << 64
_INT64_MIN = -(1 << 63)


def is_digit(token: Optional[bytes]) -> bool:
    return token is not None and token.isdigit()


def wrap_int64(value: int) -> int:
    """Two's complement wraparound into the signed 64-bit range."""
    return (value - _INT64_MIN) % _INT64_SPAN + _INT64_MIN


# --------------------------
# Scalars
# --------------------------

def digits_to_int(digits: bytes, modulus: Optional[int] = None) -> int:
    """
    Accumulates ASCII digits 18 at a time, so digit runs longer than the
    interpreter's int() conversion limit still parse.
    """
    value = 0
    for i in range(0, len(digits), 18):
        chunk = digits[i:i + 18]
        value = value * 10 ** len(chunk) + int(chunk)
        if modulus is not None:
            value %= modulus
    return value


def read_digits(reader: Reader) -> bytes:
    """Reads one or more decimal digits."""
    token = reader.peek()
    if not is_digit(token):
        raise UnexpectedToken("decimal digit", token, reader.offset)
    return reader.take_digits()


def read_integer(reader: Reader) -> int:
    """Parses i<int>e into a signed 64-bit value."""
    reader.consume(INTEGER_START)

    negative = reader.peek() == MINUS_SIGN
    if negative:
        reader.next()  # pop minus sign

    magnitude = digits_to_int(read_digits(reader), _INT64_SPAN)
    reader.consume(END_TOKEN)

    return wrap_int64(-magnitude if negative else magnitude)


def read_length(reader: Reader) -> int:
    """Parses the <len>: prefix of a byte string."""
    start = reader.offset
    digits = read_digits(reader).lstrip(b"0")
    if len(digits) > MAX_LENGTH_DIGITS:
        raise LengthTooLarge(None, start, digit_count=len(digits))

    length = digits_to_int(digits)
    if length > MAX_LENGTH:
        raise LengthTooLarge(length, start)

    reader.consume(LENGTH_SEPARATOR)
    return length


def read_byte_string(reader: Reader) -> bytes:
    """Parses <len>:<bytes> and returns a copy of the payload."""
    return reader.take(read_length(reader))


# --------------------------
# Structures
# --------------------------

def has_next(reader: Reader) -> bool:
    """
    True when another element follows inside an open list or dictionary,
    False at its end marker.
    """
    token = reader.peek()
    if token is None:
        raise UnterminatedStructure(reader.offset)
    return token != END_TOKEN


def check_key(reader: Reader) -> None:
    token = reader.peek()
    if is_digit(token):
        return
    if token in (INTEGER_START, LIST_START, DICT_START):
        raise KeyTypeError(reader.offset)
    raise UnexpectedToken("byte string key", token, reader.offset)


def check_value(reader: Reader, key) -> None:
    """Fails when a dictionary key is directly followed by 'e' or end of input."""
    token = reader.peek()
    if token is None or token == END_TOKEN:
        raise MissingDictionaryValue(key, reader.offset)


def read_list(reader: Reader) -> list:
    reader.consume(LIST_START)
    items = []

    while has_next(reader):
        items.append(read_element(reader))

    reader.consume(END_TOKEN)
    return items


def read_dictionary(reader: Reader) -> dict:
    reader.consume(DICT_START)
    obj = {}

    while has_next(reader):
        check_key(reader)
        key = BencodeString(read_byte_string(reader))
        check_value(reader, key.value)
        obj[key] = read_element(reader)  # last duplicate wins

    reader.consume(END_TOKEN)
    return obj


def read_element(reader: Reader) -> BencodeElement:
    """Dispatches on a single lookahead byte."""
    token = reader.peek()

    if is_digit(token):
        return BencodeString(read_byte_string(reader))

    if token == INTEGER_START:
        return BencodeInt(read_integer(reader))

    if token == LIST_START:
        return BencodeList(read_list(reader))

    if token == DICT_START:
        return BencodeDict(read_dictionary(reader))

    raise UnexpectedToken("bencode element", token, reader.offset)


def skip_element(reader: Reader) -> None:
    """Parses and discards one element."""
    read_element(reader)


def check_end(reader: Reader) -> None:
    token = reader.peek()
    if token is not None:
        raise TrailingInput(token, reader.offset)


def parse_root(reader: Reader) -> Optional[BencodeElement]:
    """Parses at most one element and requires the input to end after it."""
    if reader.peek() is None:
        return None
    try:
        element = read_element(reader)
    except RecursionError as exc:
        raise NestingTooDeep(reader.offset) from exc
    check_end(reader)
    return element


def parse(data) -> Optional[BencodeElement]:
    """
    Convenience function to decode Bencoded data into an element tree.
    Returns None for empty input.
    """
    return parse_root(Reader(data))
