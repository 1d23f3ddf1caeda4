"""HTTP handler helpers that map raised errors to status codes and responses."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from conjurert import codecs, werror
from conjurert.codecs import CodecError
from conjurert.conjure_error import ConjureError, get_conjure_error, write_error_response
from conjurert.error_code import ErrorCode
from conjurert.response import ResponseWriter, http_error

__all__ = [
    "LEGACY_HTTP_STATUS_CODE_PARAM_KEY",
    "JSONHandler",
    "Request",
    "err_handler",
    "new_json_handler",
    "parse_bearer_token_header",
    "status_code_mapper",
    "write_json_response",
]

# Parameter set by older REST error helpers to carry an HTTP status code.
LEGACY_HTTP_STATUS_CODE_PARAM_KEY = "httpStatusCode"

_LOGGER = logging.getLogger(__name__)


@dataclass
class Request:
    """An incoming HTTP request; ``logger`` receives request-scoped logs."""

    method: str = "GET"
    path: str = "/"
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes = b""
    logger: logging.Logger | None = None

    def header(self, name: str) -> str:
        """The value of header ``name`` matched case-insensitively, or ``""``."""
        wanted = name.lower()
        for key, value in self.headers.items():
            if key.lower() == wanted:
                return value
        return ""


HandlerFunc = Callable[[ResponseWriter, Request], Any]
StatusMapper = Callable[[BaseException], int]
ErrorHandler = Callable[[Request, int, BaseException], None]


def _is_json_marshaler(obj: Any) -> bool:
    return callable(getattr(obj, "to_json_value", None))


def _json_marshaler(err: BaseException | None) -> BaseException | None:
    seen: set[int] = set()
    current = err
    while current is not None and id(current) not in seen:
        if _is_json_marshaler(current):
            return current
        if not isinstance(current, werror.WError):
            return None
        seen.add(id(current))
        current = current.cause
    return None


def _serializable_cause(err: BaseException) -> BaseException:
    conjure_err = get_conjure_error(err)
    if conjure_err is not None:
        return conjure_err
    marshaler = _json_marshaler(err)
    if marshaler is not None:
        return marshaler
    return err


@dataclass
class JSONHandler:
    """Runs a handler function and turns any error it raises into a response.

    The handler function is expected not to write a response when it raises.
    """

    handle_fn: HandlerFunc
    status_fn: StatusMapper | None = None
    error_fn: ErrorHandler | None = None

    def serve_http(self, writer: ResponseWriter, request: Request) -> None:
        try:
            self.handle_fn(writer, request)
        except Exception as err:
            status = self.status_fn(err) if self.status_fn is not None else 500
            if self.error_fn is not None:
                self.error_fn(request, status, err)
            cause = _serializable_cause(err)
            if isinstance(cause, ConjureError):
                write_error_response(writer, cause)
            elif _is_json_marshaler(cause):
                write_json_response(writer, cause, status)
            else:
                http_error(writer, str(err), status)


def new_json_handler(
    fn: HandlerFunc,
    status_fn: StatusMapper | None,
    error_fn: ErrorHandler | None,
) -> JSONHandler:
    """A handler mapping raised errors through ``status_fn`` and reporting them to ``error_fn``."""
    return JSONHandler(fn, status_fn, error_fn)


def _legacy_error_code(err: BaseException) -> int:
    value, _ = werror.param_from_error(err, LEGACY_HTTP_STATUS_CODE_PARAM_KEY)
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return 0


def status_code_mapper(err: BaseException) -> int:
    """The HTTP status for ``err``.

    A conjure error in the cause chain decides first, then the legacy
    ``httpStatusCode`` parameter; otherwise 500.
    """
    conjure_err = get_conjure_error(err)
    if conjure_err is not None:
        code = conjure_err.code
        return code.status_code() if isinstance(code, ErrorCode) else 500
    legacy = _legacy_error_code(err)
    if legacy:
        return legacy
    return 500


def err_handler(request: Request, status_code: int, err: BaseException) -> None:
    """Log ``err`` on the request's logger: ERROR for 5xx statuses, INFO otherwise."""
    logger = request.logger if request.logger is not None else _LOGGER
    level = logging.ERROR if status_code >= 500 else logging.INFO
    safe, unsafe = werror.params_from_error(err)
    logger.log(
        level,
        "error handling request: %s",
        err,
        extra={"params": safe, "unsafeParams": unsafe},
    )


def _marshal_json(obj: Any) -> bytes:
    try:
        return codecs.JSON.marshal(obj) + b"\n"
    except CodecError:
        raise
    except Exception as exc:
        raise CodecError(
            f"json: error calling to_json_value for type {type(obj).__name__}: {exc}"
        ) from exc


def write_json_response(writer: ResponseWriter, obj: Any, status: int) -> None:
    """Write ``obj`` as JSON with ``status``.

    Headers are sent before encoding, so an encoding failure appends the
    error text to a response that already carries ``status``.
    """
    writer.header["Content-Type"] = "application/json"
    writer.write_header(status)
    try:
        body = _marshal_json(obj)
    except CodecError as exc:
        http_error(writer, str(exc), 500)
        return
    writer.write(body)


def parse_bearer_token_header(request: Request) -> str:
    """The token of an ``Authorization: Bearer <token>`` header; raise WError otherwise."""
    auth_header = request.header("Authorization")
    if not auth_header:
        raise werror.error("Authorization header not found")
    parts = auth_header.split(" ")
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise werror.error("Illegal authorization header, expected Bearer")
    return parts[1]