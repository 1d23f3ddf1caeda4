import pytest

from conjurert import codecs
from conjurert.error_code import ErrorCode, describe_code

VALID_CODES = [
    ErrorCode.PERMISSION_DENIED,
    ErrorCode.INVALID_ARGUMENT,
    ErrorCode.NOT_FOUND,
    ErrorCode.CONFLICT,
    ErrorCode.REQUEST_ENTITY_TOO_LARGE,
    ErrorCode.FAILED_PRECONDITION,
    ErrorCode.INTERNAL,
    ErrorCode.TIMEOUT,
    ErrorCode.CUSTOM_CLIENT,
    ErrorCode.CUSTOM_SERVER,
]


@pytest.mark.parametrize(
    "code, expected",
    [
        (ErrorCode.PERMISSION_DENIED, "PERMISSION_DENIED"),
        (ErrorCode.INVALID_ARGUMENT, "INVALID_ARGUMENT"),
        (ErrorCode.NOT_FOUND, "NOT_FOUND"),
        (ErrorCode.CONFLICT, "CONFLICT"),
        (ErrorCode.REQUEST_ENTITY_TOO_LARGE, "REQUEST_ENTITY_TOO_LARGE"),
        (ErrorCode.FAILED_PRECONDITION, "FAILED_PRECONDITION"),
        (ErrorCode.INTERNAL, "INTERNAL"),
        (ErrorCode.TIMEOUT, "TIMEOUT"),
        (ErrorCode.CUSTOM_CLIENT, "CUSTOM_CLIENT"),
        (ErrorCode.CUSTOM_SERVER, "CUSTOM_SERVER"),
    ],
)
def test_string(code, expected):
    assert str(code) == expected
    assert describe_code(code) == expected


@pytest.mark.parametrize(
    "value, expected",
    [
        (0, "<invalid error code: 0>"),
        (200, "<invalid error code: 200>"),
        (None, "<invalid error code: 0>"),
        (3, "NOT_FOUND"),
    ],
)
def test_describe_code_of_numbers(value, expected):
    assert describe_code(value) == expected


@pytest.mark.parametrize("code", VALID_CODES)
def test_marshal_json(code):
    assert codecs.JSON.marshal(code) == f'"{code}"'.encode()


@pytest.mark.parametrize("code", VALID_CODES)
def test_unmarshal_json(code):
    serialized = f'"{code}"'.encode()
    assert codecs.JSON.unmarshal(serialized, ErrorCode.parse) is code


def test_unmarshal_json_invalid_code():
    with pytest.raises(ValueError, match="errors: unknown error code string"):
        codecs.JSON.unmarshal(b'"INVALID_ERROR_CODE"', ErrorCode.parse)


@pytest.mark.parametrize("text", ["", "not_found", 3, None])
def test_parse_rejects(text):
    with pytest.raises(ValueError):
        ErrorCode.parse(text)


def test_parse_accepts_bytes():
    assert ErrorCode.parse(b"CONFLICT") is ErrorCode.CONFLICT


@pytest.mark.parametrize(
    "code, status",
    [
        (ErrorCode.PERMISSION_DENIED, 403),
        (ErrorCode.INVALID_ARGUMENT, 400),
        (ErrorCode.NOT_FOUND, 404),
        (ErrorCode.CONFLICT, 409),
        (ErrorCode.REQUEST_ENTITY_TOO_LARGE, 413),
        (ErrorCode.FAILED_PRECONDITION, 500),
        (ErrorCode.INTERNAL, 500),
        (ErrorCode.TIMEOUT, 500),
        (ErrorCode.CUSTOM_CLIENT, 400),
        (ErrorCode.CUSTOM_SERVER, 500),
    ],
)
def test_status_code(code, status):
    assert code.status_code() == status


@pytest.mark.parametrize("code", VALID_CODES)
def test_plain_text_round_trip(code):
    text = codecs.PLAIN.marshal(code)
    assert codecs.PLAIN.unmarshal(text, ErrorCode.parse) is code