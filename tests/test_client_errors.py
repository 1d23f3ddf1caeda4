import pytest

from conjurert import werror
from conjurert.client_errors import (
    ErrorDecoder,
    Response,
    RestErrorDecoder,
    apply_error_decoder,
    status_code_from_error,
)
from conjurert.conjure_error import get_conjure_error, new_not_found, write_error_response
from conjurert.error_code import ErrorCode
from conjurert.error_type import DEFAULT_NOT_FOUND
from conjurert.response import ResponseWriter
from conjurert.werror import ParamStorer

NOT_FOUND_BODY = b"404 page not found\n"
NAME_REGEXP_MESSAGE = (
    "errors: error name does not match regexp `^(([A-Z][a-z0-9]+)+):(([A-Z][a-z0-9]+)+)$`"
)


def make_response(status, body=b"", content_type=None):
    headers = {"Content-Type": content_type} if content_type else {}
    return Response(status, body, headers)


def decode(response, decoder=None):
    with pytest.raises(Exception) as info:
        apply_error_decoder(decoder or RestErrorDecoder(), response)
    return info.value


class FooErrorDecoder(ErrorDecoder):
    def handles(self, response):
        return True

    def decode_error(self, response):
        return RuntimeError("foo error")


class BodyReadingErrorDecoder(ErrorDecoder):
    def handles(self, response):
        return response.status_code == 404

    def decode_error(self, response):
        return RuntimeError(f"error from body: {response.body.read().decode()}")


class StatusDecoder(ErrorDecoder):
    def __init__(self, status_code, message):
        self.status_code = status_code
        self.message = message

    def handles(self, response):
        return response.status_code == self.status_code

    def decode_error(self, response):
        return RuntimeError(self.message)


class NoneDecoder(ErrorDecoder):
    def handles(self, response):
        return True

    def decode_error(self, response):
        return None


def test_ok_response_passes_through():
    response = make_response(200)
    assert apply_error_decoder(RestErrorDecoder(), response) is response


@pytest.mark.parametrize("status, expected", [(200, False), (399, False), (400, True), (503, True)])
def test_rest_decoder_handles(status, expected):
    assert RestErrorDecoder().handles(make_response(status)) is expected


def test_404_default_body():
    err = decode(make_response(404, NOT_FOUND_BODY, "text/plain; charset=utf-8"))
    assert status_code_from_error(err) == 404
    assert str(err) == "404 Not Found"
    assert werror.params_from_error(err) == (
        {"statusCode": 404},
        {"responseBody": "404 page not found\n"},
    )


def test_404_no_body():
    err = decode(make_response(404))
    assert status_code_from_error(err) == 404
    assert str(err) == "404 Not Found"
    assert werror.params_from_error(err) == ({"statusCode": 404}, {})


def test_404_plaintext():
    err = decode(make_response(404, b"route does not exist", "text/plain"))
    assert status_code_from_error(err) == 404
    assert str(err) == "404 Not Found"
    assert werror.params_from_error(err) == (
        {"statusCode": 404},
        {"responseBody": "route does not exist"},
    )


def test_404_non_conjure_json():
    err = decode(make_response(404, b'{"foo":"bar"}', "application/json"))
    assert status_code_from_error(err) == 404
    assert str(err) == "failed to unmarshal body using registered type: " + NAME_REGEXP_MESSAGE
    assert werror.params_from_error(err) == (
        {"statusCode": 404, "type": "conjurert.conjure_error.GenericError"},
        {"responseBody": '{"foo":"bar"}'},
    )


def test_404_conjure():
    writer = ResponseWriter()
    original = new_not_found(ParamStorer(safe={"stringParam": "stringValue"}))
    write_error_response(writer, original)
    err = decode(Response.from_writer(writer))

    assert status_code_from_error(err) == 404
    conjure_err = get_conjure_error(err)
    assert conjure_err.instance_id == original.instance_id
    assert conjure_err.code is ErrorCode.NOT_FOUND
    assert conjure_err.name == DEFAULT_NOT_FOUND.name
    # Safe parameters become unsafe without a registered error type.
    assert werror.params_from_error(err) == (
        {"errorInstanceId": original.instance_id, "statusCode": 404},
        {"stringParam": "stringValue"},
    )


def test_status_without_reason_phrase():
    err = decode(make_response(456, b"hello"))
    assert str(err) == "456 status code 456"
    assert status_code_from_error(err) == 456


def test_custom_simple_decoder():
    err = decode(make_response(404, NOT_FOUND_BODY), FooErrorDecoder())
    assert str(err) == "foo error"
    assert werror.params_from_error(err) == ({}, {})
    assert status_code_from_error(err) is None


def test_custom_body_reading_decoder():
    err = decode(make_response(404, NOT_FOUND_BODY), BodyReadingErrorDecoder())
    assert str(err) == "error from body: 404 page not found\n"


def test_request_decoder_takes_precedence():
    client = StatusDecoder(456, "client custom error decoder error foo")
    request = StatusDecoder(456, "request custom error decoder error bar")
    with pytest.raises(RuntimeError, match="^request custom error decoder error bar$"):
        apply_error_decoder(client, apply_error_decoder(request, make_response(456, b"hello")))


def test_fallback_to_client_decoder():
    client = StatusDecoder(456, "client custom error decoder error foo")
    request = StatusDecoder(457, "request custom error decoder error bar")
    with pytest.raises(RuntimeError, match="^client custom error decoder error foo$"):
        apply_error_decoder(client, apply_error_decoder(request, make_response(456, b"hello")))


def test_body_is_closed_after_decoding():
    response = make_response(500, b"broken")
    decode(response)
    assert response.body.closed is True


def test_decoder_returning_none_is_rejected():
    with pytest.raises(TypeError, match="NoneDecoder"):
        apply_error_decoder(NoneDecoder(), make_response(500))


def test_status_code_from_plain_error():
    assert status_code_from_error(ValueError("plain")) is None