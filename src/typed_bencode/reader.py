"""
Byte cursor shared by the grammar parser and the structural decoder.
"""
import re
from typing import Optional

from .errors import EndOfInput, InsufficientInput, UnexpectedToken, UnterminatedStructure, describe_token

END_TOKEN = b"e"

_DIGITS = re.compile(rb"[0-9]*")


class Reader:
    """
    Read-only cursor over a complete input buffer.
    The offset only moves forward and never passes the end of the buffer.
    """
    def __init__(self, data):
        if isinstance(data, (bytearray, memoryview)):
            data = bytes(data)
        if not isinstance(data, bytes):
            raise TypeError(f"Reader requires a bytes-like object, not {type(data).__name__}")
        self._data = data
        self._offset = 0  # cursor index

    @property
    def offset(self) -> int:
        return self._offset

    def remaining(self) -> int:
        return len(self._data) - self._offset

    def peek(self) -> Optional[bytes]:
        """Next token without consuming it, None at end of input."""
        if self._offset >= len(self._data):
            return None
        return self._data[self._offset:self._offset + 1]

    def next(self) -> bytes:
        token = self.peek()
        if token is None:
            raise EndOfInput(self._offset)
        self._offset += 1
        return token

    def take(self, n: int) -> bytes:
        """Returns exactly n bytes and moves past them."""
        available = self.remaining()
        if n > available:
            raise InsufficientInput(n - available, self._offset)
        chunk = self._data[self._offset:self._offset + n]
        self._offset += n
        return chunk

    def take_digits(self) -> bytes:
        """Returns the run of ASCII digits at the cursor (possibly empty)."""
        end = _DIGITS.match(self._data, self._offset).end()
        chunk = self._data[self._offset:end]
        self._offset = end
        return chunk

    def consume(self, expected: bytes) -> bytes:
        token = self.peek()
        if token == expected:
            self._offset += 1
            return token
        if token is None and expected == END_TOKEN:
            raise UnterminatedStructure(self._offset)
        raise UnexpectedToken(describe_token(expected), token, self._offset)

    def slice(self, start: int) -> bytes:
        """Copy of the input between start and the cursor."""
        return self._data[start:self._offset]
