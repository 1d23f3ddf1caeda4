"""Error codes describing the category of an error, with their HTTP statuses."""

from __future__ import annotations

from enum import Enum
from typing import Any

__all__ = ["ErrorCode", "describe_code"]

_UNKNOWN_CODE_MESSAGE = "errors: unknown error code string"


class ErrorCode(Enum):
    """Category of an error; each code maps to an HTTP status code.

    Serialized as its name, for example ``"NOT_FOUND"``.
    """

    PERMISSION_DENIED = 1
    INVALID_ARGUMENT = 2
    NOT_FOUND = 3
    CONFLICT = 4
    REQUEST_ENTITY_TOO_LARGE = 5
    FAILED_PRECONDITION = 6
    INTERNAL = 7
    TIMEOUT = 8
    CUSTOM_CLIENT = 9
    CUSTOM_SERVER = 10

    def status_code(self) -> int:
        """The HTTP status code associated with this error code."""
        return _STATUS_CODES.get(self, 500)

    def __str__(self) -> str:
        return self.name

    def to_text(self) -> str:
        return self.name

    def to_json_value(self) -> str:
        return self.name

    @classmethod
    def parse(cls, text: Any) -> ErrorCode:
        """Return the code named by ``text``; raise ValueError for unknown names."""
        if isinstance(text, (bytes, bytearray)):
            text = bytes(text).decode("utf-8", errors="replace")
        if not isinstance(text, str):
            raise ValueError(_UNKNOWN_CODE_MESSAGE)
        try:
            return cls[text]
        except KeyError:
            raise ValueError(_UNKNOWN_CODE_MESSAGE) from None


_STATUS_CODES = {
    ErrorCode.PERMISSION_DENIED: 403,
    ErrorCode.INVALID_ARGUMENT: 400,
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.CONFLICT: 409,
    ErrorCode.REQUEST_ENTITY_TOO_LARGE: 413,
    ErrorCode.FAILED_PRECONDITION: 500,
    ErrorCode.INTERNAL: 500,
    ErrorCode.TIMEOUT: 500,
    ErrorCode.CUSTOM_CLIENT: 400,
    ErrorCode.CUSTOM_SERVER: 500,
}


def describe_code(value: Any) -> str:
    """Name of an error code, or ``<invalid error code: N>`` for anything else.

    ``None`` stands for the unset code 0.
    """
    if isinstance(value, ErrorCode):
        return value.name
    number = 0 if value is None else value
    if isinstance(number, int) and not isinstance(number, bool):
        try:
            return ErrorCode(number).name
        except ValueError:
            pass
    return f"<invalid error code: {number}>"