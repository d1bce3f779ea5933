"""
Bencode decoding into element trees or caller-described shapes.
"""
from .config import DEFAULT_CONFIG, BencodeConfig
from .decoder import StructuralDecoder, decode
from .errors import (
    CharsetError,
    EndOfInput,
    InsufficientInput,
    KeyTypeError,
    LengthTooLarge,
    MissingDictionaryValue,
    MissingField,
    NestingTooDeep,
    ParsingException,
    TrailingInput,
    UnexpectedToken,
    UnknownField,
    UnterminatedStructure,
)
from .parser import parse
from .reader import Reader
from .shapes import (
    BYTE,
    BYTES,
    CHAR,
    ELEMENT,
    INT,
    LONG,
    RAW,
    SHORT,
    STRING,
    Contextual,
    ElementShape,
    Field,
    ListOf,
    MapOf,
    Raw,
    Record,
    Scalar,
    ScalarKind,
    Shape,
)
from .structure import BencodeDict, BencodeElement, BencodeInt, BencodeList, BencodeString

__all__ = [
    'decode', 'parse', 'Reader', 'StructuralDecoder', 'BencodeConfig', 'DEFAULT_CONFIG',
    'BencodeElement', 'BencodeInt', 'BencodeString', 'BencodeList', 'BencodeDict',
    'Shape', 'ScalarKind', 'Scalar', 'ListOf', 'MapOf', 'Field', 'Record', 'ElementShape', 'Raw', 'Contextual',
    'STRING', 'BYTES', 'BYTE', 'SHORT', 'INT', 'LONG', 'CHAR', 'ELEMENT', 'RAW',
    'ParsingException', 'UnexpectedToken', 'EndOfInput', 'UnterminatedStructure', 'TrailingInput',
    'LengthTooLarge', 'InsufficientInput', 'KeyTypeError', 'MissingDictionaryValue', 'UnknownField',
    'MissingField', 'CharsetError', 'NestingTooDeep',
]
