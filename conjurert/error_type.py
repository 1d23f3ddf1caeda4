"""Error types: a validated error name paired with an error code."""

from __future__ import annotations

import re
from dataclasses import dataclass

from conjurert.error_code import ErrorCode, describe_code

__all__ = [
    "DEFAULT_CONFLICT",
    "DEFAULT_FAILED_PRECONDITION",
    "DEFAULT_INTERNAL",
    "DEFAULT_INVALID_ARGUMENT",
    "DEFAULT_NOT_FOUND",
    "DEFAULT_PERMISSION_DENIED",
    "DEFAULT_REQUEST_ENTITY_TOO_LARGE",
    "DEFAULT_TIMEOUT",
    "ErrorType",
    "InvalidErrorTypeError",
    "new_error_type",
]


class InvalidErrorTypeError(ValueError):
    """Raised when an error name or its combination with a code is invalid."""


@dataclass(frozen=True)
class ErrorType:
    """A class of errors, identified by its name and assigned an error code."""

    code: ErrorCode | None
    name: str

    def __str__(self) -> str:
        return f"{describe_code(self.code)} {self.name}"


DEFAULT_PERMISSION_DENIED = ErrorType(ErrorCode.PERMISSION_DENIED, "Default:PermissionDenied")
DEFAULT_INVALID_ARGUMENT = ErrorType(ErrorCode.INVALID_ARGUMENT, "Default:InvalidArgument")
DEFAULT_NOT_FOUND = ErrorType(ErrorCode.NOT_FOUND, "Default:NotFound")
DEFAULT_CONFLICT = ErrorType(ErrorCode.CONFLICT, "Default:Conflict")
DEFAULT_REQUEST_ENTITY_TOO_LARGE = ErrorType(
    ErrorCode.REQUEST_ENTITY_TOO_LARGE, "Default:RequestEntityTooLarge"
)
DEFAULT_FAILED_PRECONDITION = ErrorType(ErrorCode.FAILED_PRECONDITION, "Default:FailedPrecondition")
DEFAULT_INTERNAL = ErrorType(ErrorCode.INTERNAL, "Default:Internal")
DEFAULT_TIMEOUT = ErrorType(ErrorCode.TIMEOUT, "Default:Timeout")

_DEFAULT_TYPES = frozenset(
    {
        DEFAULT_PERMISSION_DENIED,
        DEFAULT_INVALID_ARGUMENT,
        DEFAULT_NOT_FOUND,
        DEFAULT_CONFLICT,
        DEFAULT_REQUEST_ENTITY_TOO_LARGE,
        DEFAULT_FAILED_PRECONDITION,
        DEFAULT_INTERNAL,
        DEFAULT_TIMEOUT,
    }
)
_DEFAULT_NAMES = frozenset(error_type.name for error_type in _DEFAULT_TYPES)
_DEFAULT_PREFIX = "Default:"

# A single upper-case letter is not accepted as a name part.
_ERROR_NAME_PATTERN = "^(([A-Z][a-z0-9]+)+):(([A-Z][a-z0-9]+)+)$"
_ERROR_NAME_REGEXP = re.compile(_ERROR_NAME_PATTERN)


def _verify_name(name: str) -> None:
    if not isinstance(name, str) or not _ERROR_NAME_REGEXP.fullmatch(name):
        raise InvalidErrorTypeError(
            f"errors: error name does not match regexp `{_ERROR_NAME_PATTERN}`"
        )
    if name.startswith(_DEFAULT_PREFIX) and name not in _DEFAULT_NAMES:
        raise InvalidErrorTypeError(
            "errors: error name with default namespace cannot use custom cause"
        )


def _verify_combination(code: ErrorCode | None, name: str) -> None:
    if name.startswith(_DEFAULT_PREFIX) and ErrorType(code, name) not in _DEFAULT_TYPES:
        raise InvalidErrorTypeError(
            "errors: invalid combination of default error name and error code"
        )


def new_error_type(code: ErrorCode | None, name: str) -> ErrorType:
    """Return a validated error type.

    The name must be ``PascalCase:PascalCase``; the ``Default`` namespace is
    reserved for the predefined types and must be used with their codes.
    """
    _verify_name(name)
    _verify_combination(code, name)
    return ErrorType(code, name)