"""Decoding of HTTP error responses received by a client."""

from __future__ import annotations

import io
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from http import HTTPStatus
from typing import Any

from conjurert import codecs, werror
from conjurert.conjure_error import unmarshal_error
from conjurert.response import ResponseWriter

__all__ = [
    "ErrorDecoder",
    "Response",
    "RestErrorDecoder",
    "apply_error_decoder",
    "status_code_from_error",
]

_STATUS_CODE_PARAM = "statusCode"


def _status_text(code: int) -> str:
    try:
        return f"{code} {HTTPStatus(code).phrase}"
    except ValueError:
        return f"{code} status code {code}"


@dataclass
class Response:
    """A received HTTP response; ``body`` is a readable binary stream."""

    status_code: int
    body: Any = b""
    headers: dict[str, str] = field(default_factory=dict)
    status: str = ""

    def __post_init__(self) -> None:
        if isinstance(self.body, (bytes, bytearray)):
            self.body = io.BytesIO(bytes(self.body))
        if not self.status:
            self.status = _status_text(self.status_code)

    def header(self, name: str) -> str:
        """The value of header ``name`` matched case-insensitively, or ``""``."""
        wanted = name.lower()
        for key, value in self.headers.items():
            if key.lower() == wanted:
                return value
        return ""

    @classmethod
    def from_writer(cls, writer: ResponseWriter) -> Response:
        """The response a client would receive from what ``writer`` collected."""
        return cls(writer.status_code, bytes(writer.body), dict(writer.result_header))


class ErrorDecoder(ABC):
    """Decides whether a response is an error and decodes it."""

    @abstractmethod
    def handles(self, response: Response) -> bool:
        """Whether ``response`` is considered an error."""

    @abstractmethod
    def decode_error(self, response: Response) -> BaseException:
        """The decoded error, or an error met while decoding; never ``None``."""


class RestErrorDecoder(ErrorDecoder):
    """Default decoder: statuses of 400 and above become errors.

    The error carries the status in its ``statusCode`` safe parameter. JSON
    bodies are decoded as conjure errors; other bodies are kept in the unsafe
    ``responseBody`` parameter.
    """

    def handles(self, response: Response) -> bool:
        return response.status_code >= 400

    def decode_error(self, response: Response) -> BaseException:
        status_param = werror.safe_param(_STATUS_CODE_PARAM, response.status_code)
        try:
            body = response.body.read()
        except OSError as exc:
            return werror.wrap(exc, "server returned an error and failed to read body", status_param)
        if not body:
            return werror.error(response.status, status_param)

        text = bytes(body).decode("utf-8", errors="replace")
        body_param = werror.unsafe_param("responseBody", text)
        if codecs.JSON.content_type() not in response.header("Content-Type"):
            return werror.error(response.status, status_param, body_param)
        try:
            conjure_err = unmarshal_error(body)
        except werror.WError as exc:
            return werror.wrap(exc, "", status_param, body_param)
        return werror.wrap(conjure_err, "", status_param)


def _drain(response: Response) -> None:
    body = response.body
    try:
        read = getattr(body, "read", None)
        if callable(read) and not getattr(body, "closed", False):
            read()
    except (OSError, ValueError):
        pass
    finally:
        close = getattr(body, "close", None)
        if callable(close):
            close()


def apply_error_decoder(decoder: ErrorDecoder, response: Response) -> Response:
    """Return ``response`` unless ``decoder`` handles it; then raise the decoded error.

    The body is drained and closed once the error has been decoded.
    """
    if not decoder.handles(response):
        return response
    try:
        err = decoder.decode_error(response)
    finally:
        _drain(response)
    if err is None:
        raise TypeError(f"error decoder {type(decoder).__name__} returned no error")
    raise err


def status_code_from_error(err: BaseException | None) -> int | None:
    """The ``statusCode`` parameter set by RestErrorDecoder, or ``None``."""
    value, _ = werror.param_from_error(err, _STATUS_CODE_PARAM)
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return None