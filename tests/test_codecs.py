import io
import uuid

import pytest

from conjurert import codecs
from conjurert.codecs import CodecError

DATA = b"1234567890"


def test_binary_unmarshal():
    buf = io.BytesIO()
    codecs.BINARY.unmarshal(DATA, buf)
    assert buf.getvalue() == DATA


def test_binary_marshal():
    assert codecs.BINARY.marshal(io.BytesIO(DATA)) == DATA


def test_binary_decode_requires_writer():
    with pytest.raises(CodecError):
        codecs.BINARY.unmarshal(DATA, "not a writer")


def test_binary_encode_requires_reader():
    with pytest.raises(CodecError):
        codecs.BINARY.marshal(DATA)


def test_binary_media_type():
    assert codecs.BINARY.accept() == "application/octet-stream"
    assert codecs.BINARY.content_type() == "application/octet-stream"


@pytest.mark.parametrize(
    "data, target",
    [
        ("hello world", str),
        ("12345678-1234-1234-1234-123456789000", uuid.UUID),
    ],
)
def test_plain_round_trip(data, target):
    value = codecs.PLAIN.decode(io.BytesIO(data.encode()), target)
    assert value == target(data)
    buf = io.BytesIO()
    codecs.PLAIN.encode(buf, value)
    assert buf.getvalue().decode() == data


def test_plain_unmarshal_rejects_target():
    with pytest.raises(CodecError):
        codecs.PLAIN.unmarshal(b"text", 5)


def test_plain_marshal_rejects_value():
    with pytest.raises(CodecError):
        codecs.PLAIN.marshal(42)


def test_plain_marshal_to_text():
    class Named:
        def to_text(self):
            return "named"

    assert codecs.PLAIN.marshal(Named()) == b"named"


def test_form_decode():
    values = codecs.FORM_URL_ENCODED.decode(io.BytesIO(b"a=x&a=y"))
    assert values == {"a": ["x", "y"]}


def test_form_encode():
    buf = io.BytesIO()
    codecs.FORM_URL_ENCODED.encode(buf, {"a": ["x", "y"]})
    assert buf.getvalue() == b"a=x&a=y"


def test_form_round_trip():
    values = {"b": ["1 2", "x/y"], "a": ["&="]}
    assert codecs.FORM_URL_ENCODED.unmarshal(codecs.FORM_URL_ENCODED.marshal(values)) == values


def test_form_encode_sorts_keys():
    encoded = codecs.FORM_URL_ENCODED.marshal({"b": ["1"], "a": ["2"]})
    assert encoded.index(b"a=") < encoded.index(b"b=")


def test_form_decode_invalid_escape():
    with pytest.raises(CodecError):
        codecs.FORM_URL_ENCODED.unmarshal(b"a=%zz")


def test_form_decode_wrong_target():
    with pytest.raises(CodecError):
        codecs.FORM_URL_ENCODED.unmarshal(b"a=x", list)


def test_form_encode_rejects_non_mapping():
    with pytest.raises(CodecError):
        codecs.FORM_URL_ENCODED.marshal(["a", "x"])


def test_json_does_not_escape_html():
    marshaled = codecs.JSON.marshal({"htmlKey": "something&something"})
    assert b"something&something" in marshaled


def test_json_encode_appends_newline():
    buf = io.BytesIO()
    codecs.JSON.encode(buf, {"a": 1})
    assert buf.getvalue().endswith(b"\n")
    assert codecs.JSON.unmarshal(buf.getvalue()) == {"a": 1}


def test_json_round_trip():
    value = {"list": [1, 2.5, None, True], "text": "héllo", "big": 2**70}
    assert codecs.JSON.unmarshal(codecs.JSON.marshal(value)) == value


def test_json_uuid():
    value = uuid.UUID("12345678-1234-1234-1234-123456789000")
    assert codecs.JSON.unmarshal(codecs.JSON.marshal(value)) == str(value)


def test_json_target_callable():
    assert codecs.JSON.unmarshal(b"[1,2]", tuple) == (1, 2)


def test_json_decode_invalid():
    with pytest.raises(CodecError, match="^failed to decode JSON-encoded value"):
        codecs.JSON.decode(io.BytesIO(b"{not json"))


def test_json_marshal_unserializable():
    with pytest.raises(CodecError):
        codecs.JSON.marshal(object())


def test_zlib_round_trip():
    codec = codecs.zlib_codec(codecs.JSON)
    assert codec.unmarshal(codec.marshal({"a": 1})) == {"a": 1}


def test_zlib_encode_decode():
    codec = codecs.zlib_codec(codecs.PLAIN)
    buf = io.BytesIO()
    codec.encode(buf, "hello world")
    assert codec.decode(io.BytesIO(buf.getvalue())) == "hello world"


def test_zlib_delegates_media_type():
    codec = codecs.zlib_codec(codecs.JSON)
    assert codec.content_type() == "application/json"
    assert codec.accept() == "application/json"


def test_zlib_decode_garbage():
    with pytest.raises(CodecError, match="^failed to create zlib reader"):
        codecs.zlib_codec(codecs.JSON).unmarshal(b"not compressed")