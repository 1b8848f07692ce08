"""Transaction assembly and signing for the managed account."""

from __future__ import annotations

from typing import cast

from eth_account import Account
from eth_account.signers.local import LocalAccount
from web3.types import ChecksumAddress

from ..exceptions import ValidationError
from ..types import PendingTransaction
from .config import ChainContext


class ManagedAccount:
    """Signer identity of the engine; the private key never leaves this object."""

    __slots__ = ("_signer",)

    def __init__(self, signer: LocalAccount) -> None:
        self._signer = signer

    @classmethod
    def from_key(cls, private_key: str) -> ManagedAccount:
        try:
            signer = cast(LocalAccount, Account.from_key(private_key))  # type: ignore[arg-type]
        except Exception as exc:  # pragma: no cover - defensive
            raise ValidationError(
                "Failed to derive signer account from provided private key",
                field="private_key",
                details={"error": str(exc)},
            ) from exc
        return cls(signer)

    @property
    def address(self) -> ChecksumAddress:
        return self._signer.address

    def sign(self, pending: PendingTransaction, chain_id: int) -> bytes:
        signed = self._signer.sign_transaction(pending.as_dict(chain_id))
        return bytes(signed.raw_transaction)

    def __repr__(self) -> str:
        return f"ManagedAccount(address={self.address!r})"


class TransactionBuilder:
    """Build legacy EIP-155 transactions against the vault contract."""

    def build(
        self,
        nonce: int,
        chain: ChainContext,
        call_data: bytes,
        *,
        value: int = 0,
    ) -> PendingTransaction:
        if nonce < 0:
            raise ValidationError("Nonce cannot be negative", field="nonce", value=nonce)
        if value < 0:
            raise ValidationError("Value cannot be negative", field="value", value=value)

        return PendingTransaction(
            nonce=nonce,
            gas_price=chain.gas_price,
            gas_limit=chain.gas_limit,
            to=chain.contract_address,
            value=value,
            data=bytes(call_data),
        )

    def sign(self, pending: PendingTransaction, account: ManagedAccount, chain_id: int) -> bytes:
        """Return the raw signed transaction; deterministic for identical inputs."""
        return account.sign(pending, chain_id)
