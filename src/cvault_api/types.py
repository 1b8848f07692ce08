"""Type definitions and data models for the ConfidentialVault API."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

Address = str  # Ethereum address
Wei = int
HexCipher = str  # 0x-prefixed lowercase hex


class OutcomeKind(str, Enum):
    """Terminal classification of a single submission attempt."""

    SUCCESS = "success"
    NONCE_CONFLICT = "nonce_conflict"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    FATAL = "fatal"


@dataclass(frozen=True)
class SubmissionOutcome:
    """Result of one submission attempt; exactly one per attempt."""

    kind: OutcomeKind
    tx_hash: str | None = None
    message: str | None = None
    nonce: int | None = None
    balance: Wei | None = None
    required: Wei | None = None
    transport_failure: bool = False

    @classmethod
    def success(cls, tx_hash: str, *, nonce: int | None = None) -> SubmissionOutcome:
        return cls(kind=OutcomeKind.SUCCESS, tx_hash=tx_hash, nonce=nonce)

    @classmethod
    def nonce_conflict(cls, message: str, *, nonce: int | None = None) -> SubmissionOutcome:
        return cls(kind=OutcomeKind.NONCE_CONFLICT, message=message, nonce=nonce)

    @classmethod
    def insufficient_funds(
        cls,
        message: str,
        *,
        balance: Wei | None,
        required: Wei,
        nonce: int | None = None,
    ) -> SubmissionOutcome:
        return cls(
            kind=OutcomeKind.INSUFFICIENT_FUNDS,
            message=message,
            balance=balance,
            required=required,
            nonce=nonce,
        )

    @classmethod
    def fatal(
        cls,
        message: str,
        *,
        nonce: int | None = None,
        transport_failure: bool = False,
    ) -> SubmissionOutcome:
        return cls(
            kind=OutcomeKind.FATAL,
            message=message,
            nonce=nonce,
            transport_failure=transport_failure,
        )

    @property
    def ok(self) -> bool:
        return self.kind is OutcomeKind.SUCCESS

    @property
    def retryable(self) -> bool:
        """Only nonce conflicts may be resubmitted as-is."""

        return self.kind is OutcomeKind.NONCE_CONFLICT


@dataclass(frozen=True)
class PendingTransaction:
    """Unsigned legacy transaction assembled for a single attempt."""

    nonce: int
    gas_price: Wei
    gas_limit: int
    to: Address
    value: Wei
    data: bytes

    @property
    def max_cost(self) -> Wei:
        return self.gas_price * self.gas_limit + self.value

    def as_dict(self, chain_id: int) -> dict[str, Any]:
        """Return the EIP-155 transaction dict understood by eth-account."""

        return {
            "nonce": self.nonce,
            "gasPrice": self.gas_price,
            "gas": self.gas_limit,
            "to": self.to,
            "value": self.value,
            "data": self.data,
            "chainId": chain_id,
        }


@dataclass(frozen=True)
class CallResult:
    """Raw ``eth_call`` result or the revert reason reported by the chain."""

    data: bytes = b""
    revert_reason: str | None = None

    @property
    def reverted(self) -> bool:
        return self.revert_reason is not None


@dataclass(frozen=True)
class MetricRecord:
    """Decoded ``getMyMetric()`` return value."""

    payload: bytes
    timestamp: int


@dataclass(frozen=True)
class DecryptedResult:
    """Plaintext recovered from the on-chain result together with its ciphertext."""

    plain: str
    cipher_hex: HexCipher
