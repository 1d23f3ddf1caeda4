"""An in-memory HTTP response writer."""

from __future__ import annotations

from collections import UserDict
from dataclasses import dataclass, field
from typing import Any

__all__ = ["ResponseWriter", "http_error"]


def _canonical(key: str) -> str:
    return "-".join(part[:1].upper() + part[1:].lower() for part in key.split("-"))


class _Headers(UserDict):
    """Header map whose keys are matched case-insensitively."""

    def __setitem__(self, key: str, value: Any) -> None:
        super().__setitem__(_canonical(key), value)

    def __getitem__(self, key: str) -> Any:
        return super().__getitem__(_canonical(key))

    def __delitem__(self, key: str) -> None:
        super().__delitem__(_canonical(key))

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and _canonical(key) in self.data


@dataclass
class ResponseWriter:
    """Collects a status, headers and body; headers are fixed once the status is written."""

    header: _Headers = field(default_factory=_Headers)
    status: int | None = None
    body: bytearray = field(default_factory=bytearray)
    sent_header: dict[str, Any] = field(default_factory=dict)

    def write_header(self, status: int) -> None:
        """Send the status and the headers; later calls are ignored."""
        if self.status is not None:
            return
        self.status = status
        self.sent_header = dict(self.header)

    def write(self, data: bytes | str) -> int:
        """Append to the body, sending status 200 first if nothing was sent."""
        if self.status is None:
            self.write_header(200)
        if isinstance(data, str):
            data = data.encode("utf-8")
        self.body.extend(data)
        return len(data)

    @property
    def status_code(self) -> int:
        return 200 if self.status is None else self.status

    @property
    def result_header(self) -> dict[str, Any]:
        """The headers as the client would see them."""
        return dict(self.sent_header) if self.status is not None else dict(self.header)


def http_error(writer: ResponseWriter, message: str, status: int) -> None:
    """Reply with a plain-text error message and ``status``."""
    writer.header["Content-Type"] = "text/plain; charset=utf-8"
    writer.header["X-Content-Type-Options"] = "nosniff"
    writer.write_header(status)
    writer.write(message + "\n")