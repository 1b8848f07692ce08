"""Configuration containers for the ConfidentialVault EVM client."""

from __future__ import annotations

import os
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from dotenv import dotenv_values
from web3 import Web3
from web3.types import ChecksumAddress

from ..constants import (
    DEFAULT_CHAIN_ID,
    DEFAULT_GAS_LIMIT,
    DEFAULT_GAS_PRICE,
    DEFAULT_RECEIPT_TIMEOUT,
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_RPC_URL,
)
from ..exceptions import ValidationError


@dataclass(frozen=True)
class ChainContext:
    """Immutable chain parameters injected into the transaction builder."""

    chain_id: int
    contract_address: ChecksumAddress
    gas_price: int = DEFAULT_GAS_PRICE
    gas_limit: int = DEFAULT_GAS_LIMIT

    @property
    def max_gas_cost(self) -> int:
        return self.gas_price * self.gas_limit


@dataclass(frozen=True)
class VaultClientConfig:
    """Aggregated configuration used to construct the EVM protocol client."""

    private_key: str
    contract_address: ChecksumAddress
    rpc_url: str = DEFAULT_RPC_URL
    chain_id: int = DEFAULT_CHAIN_ID
    gas_price: int = DEFAULT_GAS_PRICE
    gas_limit: int = DEFAULT_GAS_LIMIT
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    wait_for_receipt: bool = False
    receipt_timeout: float = DEFAULT_RECEIPT_TIMEOUT
    nonce_retry_attempts: int = 0
    scheme: str = "mock"

    def chain_context(self) -> ChainContext:
        return ChainContext(
            chain_id=self.chain_id,
            contract_address=self.contract_address,
            gas_price=self.gas_price,
            gas_limit=self.gas_limit,
        )


def load_config(
    env: Mapping[str, str | None] | None = None,
    *,
    dotenv_path: str | os.PathLike[str] | None = None,
) -> VaultClientConfig:
    """Build a :class:`VaultClientConfig` from environment variables.

    Values from ``dotenv_path`` (or a ``.env`` in the working directory) are
    overridden by the process environment. Passing ``env`` skips both sources.
    """

    if env is None:
        merged: dict[str, str | None] = dict(dotenv_values(dotenv_path))
        merged.update(os.environ)
        env = merged

    private_key = _require(env, "PRIVATE_KEY")
    raw_contract = _require(env, "CONTRACT_ADDRESS")
    try:
        contract_address = Web3.to_checksum_address(raw_contract)
    except ValueError as exc:
        raise ValidationError(
            "CONTRACT_ADDRESS is not a valid address",
            field="CONTRACT_ADDRESS",
            value=raw_contract,
            details={"error": str(exc)},
        ) from exc

    return VaultClientConfig(
        private_key=private_key,
        contract_address=contract_address,
        rpc_url=_optional(env, "STABLE_RPC_URL", str, DEFAULT_RPC_URL),
        chain_id=_optional(env, "CHAIN_ID", int, DEFAULT_CHAIN_ID),
        gas_price=_optional(env, "GAS_PRICE", int, DEFAULT_GAS_PRICE),
        gas_limit=_optional(env, "GAS_LIMIT", int, DEFAULT_GAS_LIMIT),
        request_timeout=_optional(env, "REQUEST_TIMEOUT", float, DEFAULT_REQUEST_TIMEOUT),
        wait_for_receipt=_optional(env, "WAIT_FOR_RECEIPT", _parse_bool, False),
        receipt_timeout=_optional(env, "RECEIPT_TIMEOUT", float, DEFAULT_RECEIPT_TIMEOUT),
        nonce_retry_attempts=_optional(env, "NONCE_RETRY_ATTEMPTS", int, 0),
        scheme=_optional(env, "FHE_SCHEME", str, "mock").lower(),
    )


def _require(env: Mapping[str, str | None], name: str) -> str:
    value = env.get(name)
    if value is None or not value.strip():
        raise ValidationError(f"{name} not found in environment variables", field=name)
    return value.strip()


def _optional(
    env: Mapping[str, str | None],
    name: str,
    parse: Callable[[str], Any],
    default: Any,
) -> Any:
    value = env.get(name)
    if value is None or not value.strip():
        return default
    try:
        return parse(value.strip())
    except ValueError as exc:
        raise ValidationError(
            f"Invalid value for {name}", field=name, value=value, details={"error": str(exc)}
        ) from exc


def _parse_bool(value: str) -> bool:
    lowered = value.lower()
    if lowered in ("1", "true", "yes", "on"):
        return True
    if lowered in ("0", "false", "no", "off"):
        return False
    raise ValueError(f"not a boolean: {value}")
