"""Call-data codec for the ConfidentialVault contract functions."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from eth_abi import decode as abi_decode
from eth_abi import encode as abi_encode
from eth_abi.exceptions import ABITypeError, DecodingError, ParseError
from eth_abi.exceptions import EncodingError as AbiEncodingError
from web3 import Web3

from ..abi import ConfidentialVault_abi
from ..exceptions import DecodeError, EncodingError

SELECTOR_SIZE = 4


@dataclass(frozen=True)
class FunctionSpec:
    """Name and ordered argument/return types of a contract function."""

    name: str
    inputs: tuple[str, ...]
    outputs: tuple[str, ...]

    @property
    def signature(self) -> str:
        return f"{self.name}({','.join(self.inputs)})"


def _specs_from_abi(abi: Sequence[Mapping[str, Any]]) -> dict[str, FunctionSpec]:
    specs: dict[str, FunctionSpec] = {}
    for entry in abi:
        if entry.get("type") != "function":
            continue
        specs[entry["name"]] = FunctionSpec(
            name=entry["name"],
            inputs=tuple(item["type"] for item in entry.get("inputs", [])),
            outputs=tuple(item["type"] for item in entry.get("outputs", [])),
        )
    return specs


CONTRACT_FUNCTIONS: dict[str, FunctionSpec] = _specs_from_abi(ConfidentialVault_abi)


def get_function_spec(function_name: str) -> FunctionSpec:
    spec = CONTRACT_FUNCTIONS.get(str(function_name))
    if spec is None:
        raise EncodingError(
            f"Unknown contract function: {function_name}",
            field="function_name",
            value=function_name,
        )
    return spec


def function_selector(function_name: str) -> bytes:
    """Return the 4-byte selector (keccak256 of the canonical signature)."""

    spec = get_function_spec(function_name)
    return bytes(Web3.keccak(text=spec.signature)[:SELECTOR_SIZE])


def encode_call(function_name: str, args: Sequence[Any] = ()) -> bytes:
    """Encode ``function_name(*args)`` into call data: selector + padded words."""

    spec = get_function_spec(function_name)
    values = list(args)
    if len(values) != len(spec.inputs):
        raise EncodingError(
            f"{spec.signature} expects {len(spec.inputs)} argument(s), got {len(values)}",
            field="args",
            value=values,
        )

    try:
        encoded = abi_encode(list(spec.inputs), values) if spec.inputs else b""
    except (AbiEncodingError, ABITypeError, TypeError, ValueError) as exc:
        raise EncodingError(
            f"Failed to encode arguments for {spec.signature}",
            field="args",
            value=values,
            details={"error": str(exc)},
        ) from exc

    return function_selector(spec.name) + encoded


def decode_return(
    function_name: str,
    raw: bytes,
    output_types: Sequence[str] | None = None,
) -> tuple[Any, ...]:
    """Decode the raw ``eth_call`` result of ``function_name``.

    ``output_types`` overrides the declared return types. Undersized or
    malformed data raises :class:`DecodeError`; this never signals a revert.
    """

    spec = get_function_spec(function_name)
    types = list(output_types) if output_types is not None else list(spec.outputs)
    if not types:
        return tuple()

    try:
        decoded = abi_decode(types, bytes(raw))
    except (DecodingError, ABITypeError, ParseError, TypeError, ValueError) as exc:
        raise DecodeError(
            f"Failed to decode {spec.name} return data",
            function_name=spec.name,
            details={"error": str(exc), "raw": bytes(raw).hex(), "types": types},
        ) from exc

    return tuple(decoded)


def decode_arguments(function_name: str, call_data: bytes) -> tuple[Any, ...]:
    """Decode call data produced by :func:`encode_call` back into its arguments."""

    spec = get_function_spec(function_name)
    data = bytes(call_data)
    if data[:SELECTOR_SIZE] != function_selector(spec.name):
        raise DecodeError(
            f"Call data does not target {spec.signature}",
            function_name=spec.name,
            details={"selector": data[:SELECTOR_SIZE].hex()},
        )
    if not spec.inputs:
        return tuple()

    try:
        return tuple(abi_decode(list(spec.inputs), data[SELECTOR_SIZE:]))
    except (DecodingError, TypeError, ValueError) as exc:
        raise DecodeError(
            f"Failed to decode {spec.signature} call data",
            function_name=spec.name,
            details={"error": str(exc)},
        ) from exc
