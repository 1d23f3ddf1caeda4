"""The wire form of an error: code, name, instance id and parameters."""

from __future__ import annotations

import uuid
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from conjurert import codecs
from conjurert.error_code import ErrorCode

__all__ = ["SerializableError"]

_NIL_UUID = uuid.UUID(int=0)


@dataclass
class SerializableError:
    """Serializable representation of an error.

    ``parameters`` holds the decoded JSON parameters, or ``None`` when there
    are none; it is left out of the serialized form in that case. A missing
    error code is ``None``.

    Example of the serialized form::

        {
          "errorCode": "CONFLICT",
          "errorName": "Facebook:LikeAlreadyGiven",
          "errorInstanceId": "00010203-0405-0607-0809-0a0b0c0d0e0f",
          "parameters": {"postId": "5aa734gs3579", "userId": 642764872364}
        }
    """

    error_code: ErrorCode | None = None
    error_name: str = ""
    error_instance_id: uuid.UUID = _NIL_UUID
    parameters: Any = None

    def to_dict(self) -> dict[str, Any]:
        """The JSON-ready mapping, keys in wire order."""
        data: dict[str, Any] = {
            "errorCode": self.error_code.name if self.error_code is not None else None,
            "errorName": self.error_name,
            "errorInstanceId": str(self.error_instance_id),
        }
        if self.parameters is not None:
            data["parameters"] = self.parameters
        return data

    def to_json_value(self) -> dict[str, Any]:
        return self.to_dict()

    def to_json(self) -> bytes:
        """Compact JSON encoding."""
        return codecs.JSON.marshal(self.to_dict())

    @classmethod
    def from_dict(cls, data: Any) -> SerializableError:
        """Build from a decoded JSON object; raise ValueError on malformed fields."""
        if not isinstance(data, Mapping):
            raise ValueError(
                f"cannot decode error from JSON value of type {type(data).__name__}"
            )
        raw_code = data.get("errorCode")
        code = None if raw_code is None else ErrorCode.parse(raw_code)

        name = data.get("errorName")
        if name is None:
            name = ""
        elif not isinstance(name, str):
            raise ValueError("errorName must be a string")

        raw_id = data.get("errorInstanceId")
        if raw_id is None:
            instance_id = _NIL_UUID
        elif isinstance(raw_id, str):
            instance_id = uuid.UUID(raw_id)
        else:
            raise ValueError("errorInstanceId must be a string")

        return cls(code, name, instance_id, data.get("parameters"))

    @classmethod
    def from_json(cls, data: bytes | str) -> SerializableError:
        """Decode from JSON text."""
        if isinstance(data, str):
            data = data.encode("utf-8")
        return cls.from_dict(codecs.JSON.unmarshal(data))