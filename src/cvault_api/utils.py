"""Utility functions for the ConfidentialVault API."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from hexbytes import HexBytes

from .exceptions import EncodingError

_HEX_DIGITS = frozenset("0123456789abcdefABCDEF")


def strip_hex_prefix(value: str) -> str:
    """Drop a leading ``0x``/``0X`` if present."""
    if value[:2] in ("0x", "0X"):
        return value[2:]
    return value


def hex_to_bytes(value: str, field: str = "hex") -> bytes:
    """Convert hex text to bytes; the ``0x`` prefix is optional."""
    if not isinstance(value, str):
        raise EncodingError("Expected a hex-encoded string", field=field, value=value)

    body = strip_hex_prefix(value.strip())
    if len(body) % 2:
        raise EncodingError("Hex string has an odd number of digits", field=field, value=value)
    if not set(body) <= _HEX_DIGITS:
        raise EncodingError("Hex string contains non-hex characters", field=field, value=value)

    return bytes.fromhex(body)


def bytes_to_hex(value: bytes | bytearray | HexBytes) -> str:
    """Render bytes as ``0x``-prefixed lowercase hex."""
    return "0x" + bytes(value).hex()


def rpc_error_message(exc: BaseException) -> str:
    """Extract the node's free-form error text from a web3/provider exception."""
    rpc_response = getattr(exc, "rpc_response", None)
    if isinstance(rpc_response, Mapping):
        error = rpc_response.get("error")
        if isinstance(error, Mapping) and error.get("message"):
            return str(error["message"])

    message = getattr(exc, "message", None)
    if isinstance(message, str) and message:
        return message

    if exc.args:
        first: Any = exc.args[0]
        if isinstance(first, Mapping) and first.get("message"):
            return str(first["message"])
        return str(first)

    return str(exc) or type(exc).__name__
