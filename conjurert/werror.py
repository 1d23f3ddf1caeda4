"""Errors that carry safe and unsafe parameters along a chain of causes."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

__all__ = [
    "ParamStorer",
    "WError",
    "error",
    "new_param_storer",
    "param_from_error",
    "params",
    "params_from_error",
    "safe_param",
    "unsafe_param",
    "wrap",
]


@dataclass
class ParamStorer:
    """Holds parameters split into safe (loggable) and unsafe ones."""

    safe: dict[str, Any] = field(default_factory=dict)
    unsafe: dict[str, Any] = field(default_factory=dict)

    def safe_params(self) -> dict[str, Any]:
        return dict(self.safe)

    def unsafe_params(self) -> dict[str, Any]:
        return dict(self.unsafe)


def _is_param_storer(obj: Any) -> bool:
    return callable(getattr(obj, "safe_params", None)) and callable(
        getattr(obj, "unsafe_params", None)
    )


def new_param_storer(*args: Any) -> ParamStorer:
    """Merge storers in order; a later key replaces an earlier one of either kind."""
    safe: dict[str, Any] = {}
    unsafe: dict[str, Any] = {}
    for storer in args:
        if storer is None:
            continue
        for key, value in storer.safe_params().items():
            safe[key] = value
            unsafe.pop(key, None)
        for key, value in storer.unsafe_params().items():
            unsafe[key] = value
            safe.pop(key, None)
    return ParamStorer(safe, unsafe)


def safe_param(key: str, value: Any) -> ParamStorer:
    return ParamStorer(safe={key: value})


def unsafe_param(key: str, value: Any) -> ParamStorer:
    return ParamStorer(unsafe={key: value})


def params(storer: Any) -> ParamStorer:
    """Copy every parameter of ``storer``."""
    return new_param_storer(storer)


class WError(Exception):
    """An error with a message, an optional cause and parameters."""

    def __init__(
        self,
        message: str,
        cause: BaseException | None = None,
        params: ParamStorer | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause
        self.params = params if params is not None else ParamStorer()
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        if self.cause is None:
            return self.message
        if not self.message:
            return str(self.cause)
        return f"{self.message}: {self.cause}"

    def safe_params(self) -> dict[str, Any]:
        safe, _ = params_from_error(self.cause)
        safe.update(self.params.safe_params())
        return safe

    def unsafe_params(self) -> dict[str, Any]:
        _, unsafe = params_from_error(self.cause)
        unsafe.update(self.params.unsafe_params())
        return unsafe


def error(message: str, *args: Any) -> WError:
    """Create a new error with ``message`` and the given parameter storers."""
    return WError(message, params=new_param_storer(*args))


def wrap(cause: BaseException | None, message: str, *args: Any) -> WError | None:
    """Wrap ``cause`` with a message and parameters; ``None`` stays ``None``."""
    if cause is None:
        return None
    return WError(message, cause=cause, params=new_param_storer(*args))


def _cause_of(err: Any) -> BaseException | None:
    cause = getattr(err, "cause", None)
    return cause if isinstance(cause, BaseException) else None


def params_from_error(err: BaseException | None) -> tuple[dict[str, Any], dict[str, Any]]:
    """Collect safe and unsafe parameters along the cause chain; outer errors win."""
    chain = []
    seen = set()
    current = err
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        chain.append(current)
        current = _cause_of(current)
    safe: dict[str, Any] = {}
    unsafe: dict[str, Any] = {}
    for item in reversed(chain):
        if _is_param_storer(item):
            safe.update(item.safe_params())
            unsafe.update(item.unsafe_params())
    return safe, unsafe


def param_from_error(err: BaseException | None, key: str) -> tuple[Any, bool]:
    """Return the value for ``key`` and whether it is safe; ``(None, False)`` if absent."""
    safe, unsafe = params_from_error(err)
    if key in safe:
        return safe[key], True
    if key in unsafe:
        return unsafe[key], False
    return None, False