"""
Data structures for representing Bencoded types.
"""
__all__ = [
    "BencodeElement",
    "BencodeInt",
    "BencodeString",
    "BencodeList",
    "BencodeDict",
]


class BencodeElement:
    """Base class for all Bencode data types."""
    def __eq__(self, other):
        if type(self) is not type(other):
            return NotImplemented
        return self.value == other.value


class BencodeInt(BencodeElement):
    """Represents a Bencoded integer."""
    def __init__(self, value: int):
        if not isinstance(value, int) or isinstance(value, bool):
            raise TypeError("BencodeInt requires an integer.")
        self.value = value

    def __hash__(self):
        return hash((BencodeInt, self.value))

    def __int__(self):
        return self.value

    def __repr__(self):
        return f"BencodeInt({self.value})"


class BencodeString(BencodeElement):
    """Represents a Bencoded byte string."""
    def __init__(self, value: bytes):
        if not isinstance(value, (bytes, bytearray)):
            raise TypeError("BencodeString requires bytes.")
        self.value = bytes(value)

    def __hash__(self):
        return hash((BencodeString, self.value))

    def __len__(self):
        return len(self.value)

    def __getitem__(self, index):
        return self.value[index]

    def decode(self, charset: str = "utf-8") -> str:
        return self.value.decode(charset)

    def __str__(self):
        return self.value.decode("utf-8", errors="replace")

    def __repr__(self):
        return f"BencodeString({self.value!r})"


def _to_key(key) -> BencodeString:
    if isinstance(key, BencodeString):
        return key
    if isinstance(key, str):
        return BencodeString(key.encode())
    return BencodeString(key)


class BencodeList(BencodeElement):
    """Represents a Bencoded list. Read-only sequence of elements."""
    def __init__(self, value: list):
        if not isinstance(value, list):
            raise TypeError("BencodeList requires a list.")
        self.value = value

    __hash__ = None

    def __len__(self):
        return len(self.value)

    def __iter__(self):
        return iter(self.value)

    def __getitem__(self, index):
        return self.value[index]

    def __repr__(self):
        return f"BencodeList({self.value!r})"


class BencodeDict(BencodeElement):
    """
    Represents a Bencoded dictionary.
    Keys are BencodeString; lookups also accept bytes or str keys.
    """
    def __init__(self, value: dict):
        if not isinstance(value, dict):
            raise TypeError("BencodeDict requires a dict.")
        # keys must be byte strings (bencode requirement)
        for k in value.keys():
            if not isinstance(k, BencodeString):
                raise TypeError("BencodeDict keys must be BencodeString.")
        self.value = value

    __hash__ = None

    def __len__(self):
        return len(self.value)

    def __iter__(self):
        return iter(self.value)

    def __contains__(self, key):
        return _to_key(key) in self.value

    def __getitem__(self, key):
        return self.value[_to_key(key)]

    def get(self, key, default=None):
        return self.value.get(_to_key(key), default)

    def keys(self):
        return self.value.keys()

    def items(self):
        return self.value.items()

    def values(self):
        return self.value.values()

    def __repr__(self):
        return f"BencodeDict({self.value!r})"
