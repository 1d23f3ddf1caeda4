"""Codecs that encode and decode request and response bodies.

Each codec names the media type it produces and accepts, and moves values
between Python objects and byte streams.
"""

from __future__ import annotations

import io
import json
import re
import shutil
import uuid
import zlib
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, BinaryIO
from urllib.parse import quote_plus, unquote_plus

__all__ = [
    "BINARY",
    "FORM_URL_ENCODED",
    "JSON",
    "PLAIN",
    "BinaryCodec",
    "Codec",
    "CodecError",
    "FormURLEncodedCodec",
    "JSONCodec",
    "PlainCodec",
    "ZLIBCodec",
    "zlib_codec",
]


class CodecError(Exception):
    """Raised when a value cannot be encoded or decoded."""


class Codec(ABC):
    """Encodes values to a media type and decodes them back."""

    media_type = ""

    def accept(self) -> str:
        """The media type this codec decodes."""
        return self.media_type

    def content_type(self) -> str:
        """The media type this codec encodes."""
        return self.media_type

    @abstractmethod
    def decode(self, reader: BinaryIO, target: Any = None) -> Any:
        """Read a serialized value from ``reader`` and return it."""

    def unmarshal(self, data: bytes, target: Any = None) -> Any:
        """Decode a value from ``data``."""
        return self.decode(io.BytesIO(bytes(data)), target)

    @abstractmethod
    def encode(self, writer: BinaryIO, value: Any) -> None:
        """Serialize ``value`` into ``writer``."""

    def marshal(self, value: Any) -> bytes:
        """Serialize ``value`` and return the bytes."""
        buffer = io.BytesIO()
        self.encode(buffer, value)
        return buffer.getvalue()


def _close(stream: Any) -> None:
    close = getattr(stream, "close", None)
    if callable(close):
        close()


class BinaryCodec(Codec):
    """Copies raw bytes: decodes into a writable sink, encodes from a readable source."""

    media_type = "application/octet-stream"

    def decode(self, reader: BinaryIO, target: Any = None) -> Any:
        if not callable(getattr(target, "write", None)):
            raise CodecError(
                "failed to decode binary data into a target that has no write method"
            )
        try:
            shutil.copyfileobj(reader, target)
        except OSError as exc:
            raise CodecError(str(exc)) from exc
        finally:
            _close(reader)
        return target

    def encode(self, writer: BinaryIO, value: Any) -> None:
        if not callable(getattr(value, "read", None)):
            raise CodecError(
                "failed to encode binary data from a value that has no read method"
            )
        try:
            shutil.copyfileobj(value, writer)
        except OSError as exc:
            raise CodecError(str(exc)) from exc
        finally:
            _close(value)


def _json_default(obj: Any) -> Any:
    to_json_value = getattr(obj, "to_json_value", None)
    if callable(to_json_value):
        return to_json_value()
    if isinstance(obj, uuid.UUID):
        return str(obj)
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def _dumps(value: Any) -> bytes:
    text = json.dumps(
        value, ensure_ascii=False, separators=(",", ":"), default=_json_default
    )
    return text.encode("utf-8")


def _convert(value: Any, target: Any) -> Any:
    if target is None:
        return value
    if not callable(target):
        raise CodecError(
            f"cannot decode into target of type {type(target).__name__}"
        )
    return target(value)


class JSONCodec(Codec):
    """JSON without HTML escaping; ``target`` may be a callable applied to the parsed value."""

    media_type = "application/json"

    def decode(self, reader: BinaryIO, target: Any = None) -> Any:
        try:
            value = json.loads(reader.read())
        except ValueError as exc:
            raise CodecError(f"failed to decode JSON-encoded value: {exc}") from exc
        return _convert(value, target)

    def unmarshal(self, data: bytes, target: Any = None) -> Any:
        try:
            value = json.loads(bytes(data))
        except ValueError as exc:
            raise CodecError(str(exc)) from exc
        return _convert(value, target)

    def encode(self, writer: BinaryIO, value: Any) -> None:
        try:
            encoded = _dumps(value)
        except (TypeError, ValueError) as exc:
            raise CodecError(f"failed to JSON-encode value: {exc}") from exc
        writer.write(encoded + b"\n")

    def marshal(self, value: Any) -> bytes:
        try:
            return _dumps(value)
        except (TypeError, ValueError) as exc:
            raise CodecError(str(exc)) from exc


class PlainCodec(Codec):
    """text/plain: values are strings, UUIDs or objects with ``to_text``.

    Decoding returns a string, or the result of calling ``target`` with the text.
    """

    media_type = "text/plain"

    def decode(self, reader: BinaryIO, target: Any = None) -> Any:
        return self.unmarshal(reader.read(), target)

    def unmarshal(self, data: bytes, target: Any = None) -> Any:
        text = bytes(data).decode("utf-8", errors="surrogateescape")
        if target is None or target is str:
            return text
        if callable(target):
            return target(text)
        raise CodecError(
            "unmarshal target must be str or a callable that parses text, "
            f"got {type(target).__name__}"
        )

    def encode(self, writer: BinaryIO, value: Any) -> None:
        writer.write(self.marshal(value))

    def marshal(self, value: Any) -> bytes:
        if isinstance(value, str):
            return value.encode("utf-8", errors="surrogateescape")
        if isinstance(value, uuid.UUID):
            return str(value).encode("ascii")
        to_text = getattr(value, "to_text", None)
        if callable(to_text):
            text = to_text()
            return text if isinstance(text, bytes) else str(text).encode("utf-8")
        raise CodecError(
            "marshal target must be str or provide to_text, "
            f"got {type(value).__name__}"
        )


_BAD_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")


def _query_unescape(text: str) -> str:
    bad = _BAD_ESCAPE.search(text)
    if bad:
        raise CodecError(f'invalid URL escape "{text[bad.start():bad.start() + 3]}"')
    return unquote_plus(text)


def _parse_query(query: str) -> dict[str, list[str]]:
    values: dict[str, list[str]] = {}
    for piece in query.split("&"):
        if not piece:
            continue
        if ";" in piece:
            raise CodecError("invalid semicolon separator in query")
        key, _, value = piece.partition("=")
        values.setdefault(_query_unescape(key), []).append(_query_unescape(value))
    return values


class FormURLEncodedCodec(Codec):
    """Form parameters as a mapping of names to lists of values."""

    media_type = "application/x-www-form-urlencoded"

    def decode(self, reader: BinaryIO, target: Any = None) -> dict[str, list[str]]:
        try:
            query = reader.read()
        except OSError as exc:
            raise CodecError(f"failed to read all query bytes: {exc}") from exc
        try:
            values = _parse_query(bytes(query).decode("utf-8", errors="surrogateescape"))
        except CodecError as exc:
            raise CodecError(f"failed to parse query: {exc}") from exc
        if target is not None and target is not dict:
            raise CodecError(
                "could not decode, expected destination to be dict, "
                f"actual: {target!r}"
            )
        return values

    def encode(self, writer: BinaryIO, value: Any) -> None:
        if not isinstance(value, Mapping):
            raise CodecError(
                "could not encode, expected a mapping of names to values, "
                f"actual: {type(value).__name__}"
            )
        parts = []
        for key in sorted(value):
            entries = value[key]
            if isinstance(entries, str):
                entries = [entries]
            parts.extend(f"{quote_plus(key)}={quote_plus(entry)}" for entry in entries)
        try:
            writer.write("&".join(parts).encode("utf-8"))
        except OSError as exc:
            raise CodecError(f"failed to write encoded values to writer: {exc}") from exc


@dataclass(frozen=True)
class ZLIBCodec(Codec):
    """Wraps another codec with zlib compression."""

    codec: Codec

    def accept(self) -> str:
        return self.codec.accept()

    def content_type(self) -> str:
        return self.codec.content_type()

    def decode(self, reader: BinaryIO, target: Any = None) -> Any:
        try:
            data = zlib.decompress(reader.read())
        except zlib.error as exc:
            raise CodecError(f"failed to create zlib reader: {exc}") from exc
        return self.codec.decode(io.BytesIO(data), target)

    def encode(self, writer: BinaryIO, value: Any) -> None:
        content = io.BytesIO()
        self.codec.encode(content, value)
        compressor = zlib.compressobj()
        writer.write(compressor.compress(content.getvalue()) + compressor.flush())

    def marshal(self, value: Any) -> bytes:
        buffer = io.BytesIO()
        self.encode(buffer, value)
        return buffer.getvalue().removesuffix(b"\n")


def zlib_codec(codec: Codec) -> ZLIBCodec:
    """Return a codec that compresses ``codec``'s output with zlib."""
    return ZLIBCodec(codec)


BINARY = BinaryCodec()
JSON = JSONCodec()
PLAIN = PlainCodec()
FORM_URL_ENCODED = FormURLEncodedCodec()