"""
Exceptions raised while decoding Bencoded data.
"""
from typing import Iterable, Optional

__all__ = [
    "ParsingException",
    "UnexpectedToken",
    "EndOfInput",
    "UnterminatedStructure",
    "TrailingInput",
    "LengthTooLarge",
    "InsufficientInput",
    "KeyTypeError",
    "MissingDictionaryValue",
    "UnknownField",
    "MissingField",
    "CharsetError",
    "NestingTooDeep",
]


def describe_token(token: Optional[bytes]) -> str:
    """Human readable form of a single-byte token, or end of input."""
    if token is None:
        return "end of input"
    if token[0] < 0x80 and chr(token[0]).isprintable():
        return f"'{chr(token[0])}'"
    return f"byte 0x{token[0]:02x}"


class ParsingException(Exception):
    """
    Base class for every decoding failure.
    `at` is the byte offset of the failure, when known.
    """
    def __init__(self, reason: str, at: Optional[int] = None):
        super().__init__(reason)
        self.reason = reason
        self.at = at
        self.path = ()  # filled in by decoder.decode()


class UnexpectedToken(ParsingException):
    def __init__(self, expected: str, actual: Optional[bytes], at: Optional[int] = None):
        super().__init__(f"Expected {expected}, but got {describe_token(actual)}", at)
        self.expected = expected
        self.actual = actual


class EndOfInput(UnexpectedToken):
    def __init__(self, at: Optional[int] = None):
        super().__init__("token", None, at)


class UnterminatedStructure(UnexpectedToken):
    """List or dictionary ended before its 'e' marker."""
    def __init__(self, at: Optional[int] = None):
        super().__init__("'e'", None, at)


class TrailingInput(UnexpectedToken):
    def __init__(self, actual: bytes, at: Optional[int] = None):
        super().__init__("end of input", actual, at)


class LengthTooLarge(ParsingException):
    """
    `length` is None when the digit run was too long to be worth converting;
    `digit_count` is then the number of significant digits.
    """
    def __init__(self, length: Optional[int], at: Optional[int] = None, digit_count: Optional[int] = None):
        text = str(length) if length is not None else f"a {digit_count}-digit number"
        super().__init__(f"Length of string too big: {text}", at)
        self.length = length
        self.digit_count = digit_count if digit_count is not None else len(text)


class InsufficientInput(ParsingException):
    def __init__(self, missing: int, at: Optional[int] = None):
        super().__init__(f"Expected {missing} more bytes in input to read a string", at)
        self.missing = missing


class KeyTypeError(ParsingException):
    def __init__(self, at: Optional[int] = None):
        super().__init__("Only strings allowed as keys in dictionary", at)


class MissingDictionaryValue(ParsingException):
    def __init__(self, key, at: Optional[int] = None):
        if isinstance(key, (bytes, bytearray)):
            key = bytes(key).decode("utf-8", errors="replace")
        super().__init__(f"Cannot parse dictionary value for key '{key}'", at)
        self.key = key


class UnknownField(ParsingException):
    """Raised only when unknown keys are not being ignored."""
    def __init__(self, name: str, at: Optional[int] = None):
        super().__init__(f"Unknown field '{name}'", at)
        self.name = name


class MissingField(ParsingException):
    def __init__(self, names: Iterable[str], at: Optional[int] = None):
        self.names = list(names)
        fields = ", ".join(f"'{n}'" for n in self.names)
        super().__init__(f"Missing required field(s): {fields}", at)


class NestingTooDeep(ParsingException):
    def __init__(self, at: Optional[int] = None):
        super().__init__("Structures nested too deeply to decode", at)


class CharsetError(ParsingException):
    def __init__(self, charset: str, at: Optional[int] = None):
        super().__init__(f"Cannot decode string using charset '{charset}'", at)
        self.charset = charset
