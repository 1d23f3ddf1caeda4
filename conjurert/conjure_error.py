"""Conjure errors: typed errors for transport over RPC channels such as HTTP."""

from __future__ import annotations

import inspect
import uuid
from abc import ABCMeta, abstractmethod
from collections.abc import Mapping
from typing import Any

from conjurert import codecs, werror
from conjurert.codecs import CodecError
from conjurert.error_code import ErrorCode
from conjurert.error_type import (
    DEFAULT_CONFLICT,
    DEFAULT_FAILED_PRECONDITION,
    DEFAULT_INTERNAL,
    DEFAULT_INVALID_ARGUMENT,
    DEFAULT_NOT_FOUND,
    DEFAULT_PERMISSION_DENIED,
    DEFAULT_REQUEST_ENTITY_TOO_LARGE,
    DEFAULT_TIMEOUT,
    ErrorType,
    new_error_type,
)
from conjurert.response import ResponseWriter
from conjurert.serializable_error import SerializableError
from conjurert.werror import ParamStorer, new_param_storer

__all__ = [
    "ConjureError",
    "GenericError",
    "get_conjure_error",
    "merge_params",
    "new_conflict",
    "new_error",
    "new_failed_precondition",
    "new_internal",
    "new_invalid_argument",
    "new_not_found",
    "new_permission_denied",
    "new_request_entity_too_large",
    "new_timeout",
    "new_wrapped_error",
    "register_error_type",
    "unmarshal_error",
    "wrap_with_conflict",
    "wrap_with_failed_precondition",
    "wrap_with_internal",
    "wrap_with_invalid_argument",
    "wrap_with_new_error",
    "wrap_with_not_found",
    "wrap_with_permission_denied",
    "wrap_with_request_entity_too_large",
    "wrap_with_timeout",
    "write_error_response",
]


class ConjureError(Exception, metaclass=ABCMeta):
    """An error with a code, a name, an instance id and parameters.

    Subclasses registered with :func:`register_error_type` are decoded by
    :func:`unmarshal_error` through their ``from_json`` class method.
    """

    @property
    @abstractmethod
    def code(self) -> ErrorCode | None:
        """The category of this error."""

    @property
    @abstractmethod
    def name(self) -> str:
        """The name identifying the type of this error."""

    @property
    @abstractmethod
    def instance_id(self) -> uuid.UUID:
        """The unique identifier of this error instance."""

    @abstractmethod
    def safe_params(self) -> dict[str, Any]:
        """Parameters that are safe to log."""

    @abstractmethod
    def unsafe_params(self) -> dict[str, Any]:
        """Parameters that must not be logged."""

    @classmethod
    @abstractmethod
    def from_json(cls, data: bytes | str) -> ConjureError:
        """Decode an error of this type from its JSON form."""


class GenericError(ConjureError):
    """General purpose conjure error of any error type."""

    def __init__(
        self,
        error_type: ErrorType,
        params: ParamStorer | None = None,
        cause: BaseException | None = None,
        instance_id: uuid.UUID | None = None,
    ) -> None:
        self.error_type = error_type
        self.params = params if params is not None else ParamStorer()
        self.cause = cause
        self._instance_id = instance_id if instance_id is not None else uuid.uuid4()
        super().__init__(str(self))
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        return f"{self.error_type} ({self._instance_id})"

    @property
    def code(self) -> ErrorCode | None:
        return self.error_type.code

    @property
    def name(self) -> str:
        return self.error_type.name

    @property
    def instance_id(self) -> uuid.UUID:
        return self._instance_id

    def _own_safe_params(self) -> dict[str, Any]:
        safe = self.params.safe_params()
        safe["errorInstanceId"] = self._instance_id
        return safe

    def safe_params(self) -> dict[str, Any]:
        """The cause's safe parameters, then this error's where not already set."""
        safe, _ = werror.params_from_error(self.cause)
        for key, value in self._own_safe_params().items():
            safe.setdefault(key, value)
        return safe

    def unsafe_params(self) -> dict[str, Any]:
        """The cause's unsafe parameters, then this error's where not already set."""
        _, unsafe = werror.params_from_error(self.cause)
        for key, value in self.params.unsafe_params().items():
            unsafe.setdefault(key, value)
        return unsafe

    def _serializable(self) -> SerializableError:
        return SerializableError(
            self.error_type.code,
            self.error_type.name,
            self._instance_id,
            merge_params(self.params),
        )

    def to_json_value(self) -> dict[str, Any]:
        return self._serializable().to_dict()

    def to_json(self) -> bytes:
        """The JSON wire form, with all parameters merged."""
        return self._serializable().to_json()

    @classmethod
    def from_json(cls, data: bytes | str) -> GenericError:
        """Decode an error; all decoded parameters are treated as unsafe."""
        serialized = SerializableError.from_json(data)
        error_type = new_error_type(serialized.error_code, serialized.error_name)
        parameters = serialized.parameters
        if parameters is None:
            params = ParamStorer()
        elif isinstance(parameters, Mapping):
            params = ParamStorer(unsafe=dict(parameters))
        else:
            raise ValueError(
                f"cannot decode parameters from JSON value of type {type(parameters).__name__}"
            )
        return cls(error_type, params, instance_id=serialized.error_instance_id)


def new_error(error_type: ErrorType, *args: Any) -> GenericError:
    """A new error of ``error_type`` with the given parameter storers."""
    return GenericError(error_type, new_param_storer(*args))


def wrap_with_new_error(cause: BaseException | None, error_type: ErrorType, *args: Any) -> GenericError:
    """A new error of ``error_type`` wrapping ``cause``."""
    return GenericError(error_type, new_param_storer(*args), cause)


def new_permission_denied(*args: Any) -> GenericError:
    return new_error(DEFAULT_PERMISSION_DENIED, *args)


def wrap_with_permission_denied(cause: BaseException | None, *args: Any) -> GenericError:
    return wrap_with_new_error(cause, DEFAULT_PERMISSION_DENIED, *args)


def new_invalid_argument(*args: Any) -> GenericError:
    return new_error(DEFAULT_INVALID_ARGUMENT, *args)


def wrap_with_invalid_argument(cause: BaseException | None, *args: Any) -> GenericError:
    return wrap_with_new_error(cause, DEFAULT_INVALID_ARGUMENT, *args)


def new_not_found(*args: Any) -> GenericError:
    return new_error(DEFAULT_NOT_FOUND, *args)


def wrap_with_not_found(cause: BaseException | None, *args: Any) -> GenericError:
    return wrap_with_new_error(cause, DEFAULT_NOT_FOUND, *args)


def new_conflict(*args: Any) -> GenericError:
    return new_error(DEFAULT_CONFLICT, *args)


def wrap_with_conflict(cause: BaseException | None, *args: Any) -> GenericError:
    return wrap_with_new_error(cause, DEFAULT_CONFLICT, *args)


def new_request_entity_too_large(*args: Any) -> GenericError:
    return new_error(DEFAULT_REQUEST_ENTITY_TOO_LARGE, *args)


def wrap_with_request_entity_too_large(cause: BaseException | None, *args: Any) -> GenericError:
    return wrap_with_new_error(cause, DEFAULT_REQUEST_ENTITY_TOO_LARGE, *args)


def new_failed_precondition(*args: Any) -> GenericError:
    return new_error(DEFAULT_FAILED_PRECONDITION, *args)


def wrap_with_failed_precondition(cause: BaseException | None, *args: Any) -> GenericError:
    return wrap_with_new_error(cause, DEFAULT_FAILED_PRECONDITION, *args)


def new_internal(*args: Any) -> GenericError:
    return new_error(DEFAULT_INTERNAL, *args)


def wrap_with_internal(cause: BaseException | None, *args: Any) -> GenericError:
    return wrap_with_new_error(cause, DEFAULT_INTERNAL, *args)


def new_timeout(*args: Any) -> GenericError:
    return new_error(DEFAULT_TIMEOUT, *args)


def wrap_with_timeout(cause: BaseException | None, *args: Any) -> GenericError:
    return wrap_with_new_error(cause, DEFAULT_TIMEOUT, *args)


def merge_params(storer: Any) -> dict[str, Any]:
    """All parameters of ``storer`` in one mapping; safe ones win on clashes."""
    merged = dict(storer.unsafe_params())
    merged.update(storer.safe_params())
    return merged


_registry: dict[str, type[ConjureError]] = {}


def _type_label(error_class: type) -> str:
    return f"{error_class.__module__}.{error_class.__qualname__}"


def register_error_type(name: str, error_class: Any) -> None:
    """Register the class used to decode errors named ``name``.

    Raises ValueError if the name is taken and TypeError if ``error_class``
    is not a concrete subclass of ConjureError.
    """
    existing = _registry.get(name)
    if existing is not None:
        raise ValueError(f"ErrorName {name} already registered as {existing.__qualname__}")
    if (
        not isinstance(error_class, type)
        or not issubclass(error_class, ConjureError)
        or inspect.isabstract(error_class)
    ):
        raise TypeError(f"Error type {error_class!r} does not implement ConjureError")
    _registry[name] = error_class


def unmarshal_error(body: bytes | str) -> ConjureError:
    """Decode ``body`` into the registered error class, or a GenericError if unknown.

    Raises WError when the body is not a conjure error.
    """
    if isinstance(body, str):
        body = body.encode("utf-8")
    try:
        decoded = codecs.JSON.unmarshal(body)
        if not isinstance(decoded, Mapping):
            raise ValueError(
                f"cannot decode conjure error from JSON value of type {type(decoded).__name__}"
            )
        name = decoded.get("errorName")
        if name is None:
            name = ""
        elif not isinstance(name, str):
            raise ValueError("errorName must be a string")
    except (CodecError, ValueError) as exc:
        raise werror.wrap(exc, "failed to unmarshal body as conjure error") from exc

    error_class = _registry.get(name, GenericError)
    try:
        return error_class.from_json(body)
    except (CodecError, ValueError, TypeError) as exc:
        raise werror.wrap(
            exc,
            "failed to unmarshal body using registered type",
            werror.safe_param("type", _type_label(error_class)),
        ) from exc


def new_wrapped_error(conjure_err: ConjureError, err: BaseException) -> werror.WError:
    """Wrap ``conjure_err`` with the message of ``err`` and its parameters, if any.

    Deprecated: prefer wrap_with_new_error and the wrap_with_* helpers.
    """
    if callable(getattr(err, "safe_params", None)) and callable(getattr(err, "unsafe_params", None)):
        return werror.wrap(conjure_err, str(err), werror.params(err))
    return werror.wrap(conjure_err, str(err))


def get_conjure_error(err: BaseException | None) -> ConjureError | None:
    """The first ConjureError along the chain of causes, or None."""
    seen: set[int] = set()
    current = err
    while current is not None and id(current) not in seen:
        if isinstance(current, ConjureError):
            return current
        seen.add(id(current))
        cause = getattr(current, "cause", None)
        current = cause if isinstance(cause, BaseException) else None
    return None


def _encode_error(error: ConjureError) -> bytes:
    to_json = getattr(error, "to_json", None)
    if callable(to_json):
        try:
            encoded = to_json()
        except (CodecError, TypeError, ValueError):
            encoded = None
        if encoded:
            return encoded if isinstance(encoded, bytes) else str(encoded).encode("utf-8")

    parameters: dict[str, Any] | None = merge_params(error)
    try:
        codecs.JSON.marshal(parameters)
    except CodecError:
        parameters = None
    return SerializableError(error.code, error.name, error.instance_id, parameters).to_json()


def write_error_response(writer: ResponseWriter, error: ConjureError) -> None:
    """Write ``error`` as a JSON response with the status of its code."""
    body = _encode_error(error)
    code = error.code
    status = code.status_code() if isinstance(code, ErrorCode) else 500
    writer.header["Content-Type"] = "application/json; charset=utf-8"
    writer.write_header(status)
    writer.write(body)