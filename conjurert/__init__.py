"""Conjure runtime: codecs, structured errors, JSON handlers and client error decoding."""

__version__ = "2.0.0"

__all__ = [
    "client_errors",
    "codecs",
    "conjure_error",
    "error_code",
    "error_type",
    "httpserver",
    "response",
    "serializable_error",
    "werror",
]