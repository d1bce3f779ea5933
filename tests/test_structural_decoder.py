from dataclasses import dataclass
from typing import List

import pytest

from typed_bencode import decode
from typed_bencode.config import BencodeConfig
from typed_bencode.decoder import StructuralDecoder, narrow
from typed_bencode.errors import CharsetError, KeyTypeError, MissingDictionaryValue, MissingField, NestingTooDeep, \
    TrailingInput, UnexpectedToken, UnknownField, UnterminatedStructure
from typed_bencode.reader import Reader
from typed_bencode.shapes import BYTE, BYTES, CHAR, ELEMENT, INT, LONG, RAW, SHORT, STRING, Contextual, \
    ElementShape, Field, ListOf, MapOf, Record
from typed_bencode.structure import BencodeDict, BencodeInt, BencodeList, BencodeString

KNOWN = Record("Known", [Field("knownProperty", STRING)])
UNKNOWN_INPUT = b"d13:knownProperty3:foo15:unknownProperty3:bare"


@dataclass
class Point:
    x: int
    y: int
    label: str = "origin"


POINT_SHAPE = Record("Point", [
    Field("x", LONG),
    Field("y", LONG),
    Field("point label", STRING, default="origin", attr="label"),
], factory=Point)


# ---------------------------------------------------------------------------
# Scalars
# ---------------------------------------------------------------------------

def test_string_scalar():
    assert decode(b"5:hello", STRING) == "hello"
    assert decode(b"5:" + "été".encode("utf-8"), STRING) == "été"


def test_string_charset():
    assert decode(b"1:\xe9", STRING, string_charset="latin-1") == "é"


def test_string_charset_failure():
    with pytest.raises(CharsetError) as info:
        decode(b"2:\xff\xfe", STRING)
    assert info.value.at == 2
    assert info.value.charset == "utf-8"


def test_raw_bytes_ignore_charset():
    data = b"13:AbcdAbcdAbcdA"
    for charset in ("utf-8", "utf-16", "latin-1"):
        assert decode(data, BYTES, string_charset=charset) == b"AbcdAbcdAbcdA"
    # an odd byte count is not valid UTF-16 text
    with pytest.raises(CharsetError):
        decode(data, STRING, string_charset="utf-16")


def test_bytes_from_integer_list():
    assert decode(b"li1ei256ei-1ee", BYTES) == bytes([1, 0, 255])


def test_integer_narrowing():
    assert decode(b"i300e", BYTE) == 44
    assert decode(b"i40000e", SHORT) == -25536
    assert decode(b"i4294967301e", INT) == 5
    assert decode(b"i-9223372036854775808e", LONG) == -2 ** 63
    assert decode(b"i65e", CHAR) == "A"


def test_narrow():
    assert narrow(127, 8) == 127
    assert narrow(128, 8) == -128
    assert narrow(-1, 32) == -1
    assert narrow(2 ** 31, 32) == -2 ** 31


def test_scalar_on_wrong_token():
    with pytest.raises(UnexpectedToken) as info:
        decode(b"3:abc", LONG)
    assert info.value.reason == "Expected 'i', but got '3'"

    with pytest.raises(UnexpectedToken) as info:
        decode(b"i1e", STRING)
    assert info.value.expected == "decimal digit"


# ---------------------------------------------------------------------------
# Lists and maps
# ---------------------------------------------------------------------------

def test_list_of_longs():
    assert decode(b"li1ei2ei3ee", ListOf(LONG)) == [1, 2, 3]
    assert decode(b"le", ListOf(LONG)) == []


def test_nested_lists():
    assert decode(b"lll1:aeee", ListOf(ListOf(ListOf(STRING)))) == [[["a"]]]


def test_unterminated_list():
    with pytest.raises(UnterminatedStructure) as info:
        decode(b"li1e", ListOf(LONG))
    assert info.value.at == 4


def test_map():
    assert decode(b"d1:ai1e1:bi2ee", MapOf(STRING, LONG)) == {"a": 1, "b": 2}
    assert decode(b"d2:\x00\x01i5ee", MapOf(BYTES, ELEMENT)) == {b"\x00\x01": BencodeInt(5)}
    assert decode(b"de", MapOf(STRING, LONG)) == {}


def test_map_key_must_be_string():
    with pytest.raises(KeyTypeError) as info:
        decode(b"di1ei2ee", MapOf(LONG, LONG))
    assert info.value.at == 1


def test_map_missing_value():
    with pytest.raises(MissingDictionaryValue) as info:
        decode(b"d1:ae", MapOf(STRING, LONG))
    assert info.value.key == "a"


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------

def test_record_ignores_unknown_keys():
    assert decode(UNKNOWN_INPUT, KNOWN, ignore_unknown_keys=True) == {"knownProperty": "foo"}


def test_record_rejects_unknown_keys_by_default():
    with pytest.raises(UnknownField) as info:
        decode(UNKNOWN_INPUT, KNOWN)
    assert info.value.name == "unknownProperty"
    assert info.value.at == 22


def test_record_skips_nested_unknown_values():
    data = b"d5:extrald1:xi1eee13:knownProperty3:fooe"
    assert decode(data, KNOWN, ignore_unknown_keys=True) == {"knownProperty": "foo"}


def test_record_unknown_key_without_value():
    with pytest.raises(MissingDictionaryValue):
        decode(b"d5:extrae", KNOWN, ignore_unknown_keys=True)


def test_record_factory_defaults_and_attr_names():
    assert decode(b"d1:xi1e1:yi-2ee", POINT_SHAPE) == Point(1, -2)
    assert decode(b"d11:point label1:P1:xi3e1:yi4ee", POINT_SHAPE) == Point(3, 4, "P")


def test_record_missing_required_fields():
    with pytest.raises(MissingField) as info:
        decode(b"d1:xi1ee", POINT_SHAPE)
    assert info.value.names == ["y"]
    assert info.value.at == 0


def test_record_missing_value():
    with pytest.raises(MissingDictionaryValue) as info:
        decode(b"d1:x", POINT_SHAPE)
    assert info.value.key == "x"


def test_record_duplicate_field_names_rejected():
    with pytest.raises(ValueError):
        Record("Broken", [Field("a", LONG), Field("a", STRING)])


def test_record_default_factory():
    shape = Record("Bag", [Field("items", ListOf(LONG), default_factory=list)])
    first = decode(b"de", shape)
    second = decode(b"de", shape)
    assert first == {"items": []}
    assert first["items"] is not second["items"]


def test_depth_three_typed():
    shape = ListOf(Record("Holder", [Field("xs", ListOf(LONG))]))
    assert decode(b"ld2:xsli1ei2eeee", shape) == [{"xs": [1, 2]}]


def test_error_path_points_at_failing_element():
    with pytest.raises(UnexpectedToken) as info:
        decode(b"lli1eeli2eixeee", ListOf(ListOf(LONG)))
    assert info.value.at == 11
    assert info.value.path == (1, 1)


def test_nesting_too_deep_in_typed_and_generic_decode():
    data = b"l" * 100_000 + b"e" * 100_000
    nested = Contextual("Nested")
    config = BencodeConfig().with_shape("Nested", ListOf(nested))
    with pytest.raises(NestingTooDeep) as info:
        decode(data, nested, config)
    assert len(info.value.path) > 0

    with pytest.raises(NestingTooDeep):
        decode(data)


# ---------------------------------------------------------------------------
# Generic passthrough, raw capture, contextual shapes
# ---------------------------------------------------------------------------

def test_element_passthrough_inside_record():
    shape = Record("Mixed", [Field("name", STRING), Field("extra", ELEMENT)])
    result = decode(b"d5:extrali1e1:ae4:name3:bobe", shape)
    assert result == {"name": "bob", "extra": BencodeList([BencodeInt(1), BencodeString(b"a")])}


def test_element_kind_is_checked():
    assert decode(b"d1:ai1ee", ElementShape(BencodeDict))[b"a"] == BencodeInt(1)
    assert decode(b"3:abc", ElementShape(BencodeString)) == BencodeString(b"abc")
    with pytest.raises(UnexpectedToken) as info:
        decode(b"i1e", ElementShape(BencodeList))
    assert info.value.expected == "BencodeList"


def test_raw_capture():
    shape = Record("Torrent", [Field("info", RAW)])
    assert decode(b"d4:infod1:ai1eee", shape) == {"info": b"d1:ai1ee"}


def test_contextual_recursive_shape():
    node = Record("Node", [
        Field("value", LONG),
        Field("children", ListOf(Contextual("Node")), default_factory=list),
    ])
    config = BencodeConfig().with_shape("Node", node)
    data = b"d8:childrenld5:valuei2eed5:valuei3eee5:valuei1ee"
    assert decode(data, Contextual("Node"), config) == {
        "value": 1,
        "children": [{"value": 2, "children": []}, {"value": 3, "children": []}],
    }


def test_contextual_unregistered():
    with pytest.raises(ValueError):
        decode(b"i1e", Contextual("Missing"))


# ---------------------------------------------------------------------------
# Top level
# ---------------------------------------------------------------------------

def test_empty_input():
    assert decode(b"") is None
    assert decode(b"", ELEMENT) is None
    for shape in (STRING, LONG, ListOf(LONG), MapOf(STRING, LONG), KNOWN, ElementShape(BencodeInt)):
        with pytest.raises(UnexpectedToken):
            decode(b"", shape)


def test_trailing_input_after_typed_value():
    with pytest.raises(TrailingInput) as info:
        decode(b"i1ei2e", LONG)
    assert info.value.at == 3


def test_unknown_charset_rejected():
    with pytest.raises(LookupError):
        BencodeConfig(string_charset="no-such-charset")


def test_decoder_positions_stack():
    decoder = StructuralDecoder(Reader(b"li1ee"))
    decoder.begin_structure(b"l")
    assert decoder.positions == (0,)
    assert decoder.has_next()
    assert decoder.decode_long() == 1
    decoder.advance()
    assert decoder.positions == (1,)
    assert not decoder.has_next()
    decoder.end_structure()
    assert decoder.positions == ()


@dataclass
class Tagged:
    tags: List[str]


def test_config_object_and_options_combine():
    shape = Record("Tagged", [Field("tags", ListOf(STRING))], factory=Tagged)
    config = BencodeConfig(string_charset="latin-1")
    assert decode(b"d4:tagsl1:\xe9e3:fooi1ee", shape, config, ignore_unknown_keys=True) == Tagged(["é"])
