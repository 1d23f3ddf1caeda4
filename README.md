# conjurert

Building blocks for services and clients that exchange Conjure-style
structured errors and bodies over HTTP. The package has no dependencies
outside the standard library.

## Modules

- **`conjurert.codecs`**: codecs for request and response bodies. Each has
  `accept()`, `content_type()`, `encode(writer, value)` /
  `decode(reader, target)` for streams and `marshal(value)` /
  `unmarshal(data, target)` for bytes. The codecs are:
  - `JSONCodec` (`JSON`). It writes compact JSON without HTML escaping.
  - `PlainCodec` (`PLAIN`). It works on strings, UUIDs and objects with
    `to_text`.
  - `BinaryCodec` (`BINARY`). It copies from a readable source or into a
    writable sink.
  - `FormURLEncodedCodec` (`FORM_URL_ENCODED`). It maps names to lists of
    values.
  - `zlib_codec(codec)` / `ZLIBCodec`, which adds zlib compression around any
    other codec.

  Failures raise `CodecError`.
- **`conjurert.werror`**: exceptions that carry parameters.
  - `error(message, ...)` and `wrap(cause, message, ...)` build `WError`
    instances.
  - `safe_param`, `unsafe_param`, `new_param_storer` and `params` build
    `ParamStorer` values.
  - `params_from_error(err)` and `param_from_error(err, key)` collect
    parameters along the chain of causes. Outer errors win.
- **`conjurert.error_code`**: `ErrorCode`, the error categories. Each has
  `status_code()`, and `ErrorCode.parse(text)` looks one up by name.
  `describe_code(value)` names a code, or returns `<invalid error code: N>`.
- **`conjurert.error_type`**: `ErrorType` and the `DEFAULT_*` types.
  `new_error_type(code, name)` checks `PascalCase:PascalCase` names and the
  reserved `Default` namespace. It raises `InvalidErrorTypeError` when the
  check fails.
- **`conjurert.serializable_error`**: `SerializableError` is the wire form of
  an error. It has `to_dict`, `to_json`, `from_dict` and `from_json`.
- **`conjurert.conjure_error`**: conjure errors.
  - `ConjureError` is the abstract base. `GenericError` is the general
    implementation, with an instance id and safe and unsafe parameters.
  - `new_error(error_type, ...)`, `wrap_with_new_error(cause, error_type, ...)`,
    `new_not_found`, `new_internal` and the other `new_*` / `wrap_with_*`
    functions build errors.
  - `write_error_response(writer, error)` writes an error as a JSON response.
  - `unmarshal_error(body)` decodes a response body. It uses the classes added
    with `register_error_type(name, error_class)` and otherwise returns a
    `GenericError` whose parameters are all unsafe.
  - `get_conjure_error(err)` finds a conjure error in a cause chain.
  - `merge_params` and `new_wrapped_error` are also available.
- **`conjurert.response`**: `ResponseWriter`, an in-memory response that
  collects status, headers and body. `http_error(writer, message, status)`
  writes a plain-text error.
- **`conjurert.httpserver`**: handler helpers.
  - `new_json_handler(fn, status_fn, error_fn)` returns a `JSONHandler`.
    `serve_http(writer, request)` runs `fn`. If `fn` raises, it writes a
    conjure error response, a JSON body for errors with `to_json_value`, or a
    plain-text message.
  - `status_code_mapper(err)` takes the status from a conjure error or from
    the legacy `httpStatusCode` parameter, and falls back to 500.
  - `err_handler(request, status_code, err)` logs the error on the request's
    logger: at ERROR for 5xx statuses, at INFO otherwise.
  - Also `write_json_response(writer, obj, status)`,
    `parse_bearer_token_header(request)` and `Request`.
- **`conjurert.client_errors`**: decoding of error responses a client
  receives.
  - `RestErrorDecoder` treats statuses of 400 and above as errors. It adds a
    `statusCode` safe parameter and decodes JSON bodies as conjure errors.
  - `apply_error_decoder(decoder, response)` returns the response, or raises
    the decoded error. `ErrorDecoder` is the base class for decoders of your
    own.
  - `status_code_from_error(err)` reads the status back.
  - `Response.from_writer(writer)` turns a `ResponseWriter` into a received
    `Response`.

## Example

```python
from conjurert import conjure_error, werror
from conjurert.client_errors import (
    Response,
    RestErrorDecoder,
    apply_error_decoder,
    status_code_from_error,
)
from conjurert.response import ResponseWriter

err = conjure_error.new_not_found(werror.safe_param("id", "42"))
writer = ResponseWriter()
conjure_error.write_error_response(writer, err)

decoded = conjure_error.unmarshal_error(bytes(writer.body))
assert decoded.instance_id == err.instance_id
assert decoded.unsafe_params() == {"id": "42"}

try:
    apply_error_decoder(RestErrorDecoder(), Response.from_writer(writer))
except werror.WError as exc:
    assert status_code_from_error(exc) == 404
```

## What it does not do

There is no network layer. The package opens no sockets, runs no HTTP server
and sends no requests. It has no retries, failover or tracing.

`JSONHandler` works on a `Request` and a `ResponseWriter` that you pass to
it. `RestErrorDecoder` works on `Response` objects that you build from
whatever HTTP library you use.

## Running the tests

```
pip install -e ".[test]"
pytest
```