"""ConfidentialVault EVM implementation acting as the sole signer of one account."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any, cast

import requests
from web3 import Web3
from web3.exceptions import TimeExhausted

from ..base import VaultProtocolBase
from ..constants import (
    DEFAULT_CHAIN_ID,
    DEFAULT_GAS_LIMIT,
    DEFAULT_GAS_PRICE,
    DEFAULT_RECEIPT_TIMEOUT,
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_RPC_URL,
    EMPTY_HEX,
    VaultFunction,
)
from ..exceptions import (
    EncodingError,
    InsufficientFundsError,
    NetworkError,
    NonceConflictError,
    RevertedCallError,
    SubmissionError,
    TransactionFailedError,
    TransportError,
    ValidationError,
)
from ..types import MetricRecord, OutcomeKind, SubmissionOutcome
from ..utils import bytes_to_hex, hex_to_bytes
from .codec import decode_return, encode_call
from .config import VaultClientConfig
from .connections import Web3Connections
from .nonce import NonceSynchronizer
from .reader import ChainReader
from .transactions import TransactionDispatcher

logger = logging.getLogger(__name__)


class VaultProtocolEVM(VaultProtocolBase):
    """Interact with the ConfidentialVault contract through a managed account."""

    def __init__(
        self,
        private_key: str,
        contract_address: str,
        rpc_url: str = DEFAULT_RPC_URL,
        *,
        chain_id: int = DEFAULT_CHAIN_ID,
        gas_price: int = DEFAULT_GAS_PRICE,
        gas_limit: int = DEFAULT_GAS_LIMIT,
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
        wait_for_receipt: bool = False,
        receipt_timeout: float = DEFAULT_RECEIPT_TIMEOUT,
        nonce_retry_attempts: int = 0,
    ) -> None:
        config = VaultClientConfig(
            private_key=private_key,
            contract_address=Web3.to_checksum_address(contract_address),
            rpc_url=rpc_url,
            chain_id=chain_id,
            gas_price=gas_price,
            gas_limit=gas_limit,
            request_timeout=request_timeout,
            wait_for_receipt=wait_for_receipt,
            receipt_timeout=receipt_timeout,
            nonce_retry_attempts=nonce_retry_attempts,
        )
        self._config = config
        self._chain = config.chain_context()
        self._session = requests.Session()
        self._connections = Web3Connections(config, self._session)
        self._reader = ChainReader(self._connections)
        self._nonces: NonceSynchronizer | None = None
        self._dispatcher: TransactionDispatcher | None = None

    @classmethod
    def from_config(cls, config: VaultClientConfig) -> VaultProtocolEVM:
        return cls(
            private_key=config.private_key,
            contract_address=config.contract_address,
            rpc_url=config.rpc_url,
            chain_id=config.chain_id,
            gas_price=config.gas_price,
            gas_limit=config.gas_limit,
            request_timeout=config.request_timeout,
            wait_for_receipt=config.wait_for_receipt,
            receipt_timeout=config.receipt_timeout,
            nonce_retry_attempts=config.nonce_retry_attempts,
        )

    # ------------------------------------------------------------------
    # Connection management
    # ------------------------------------------------------------------
    def connect(self) -> None:
        try:
            self._connections.connect()
        except (ValidationError, NetworkError):
            self.disconnect()
            raise
        except Exception as exc:  # pragma: no cover - defensive
            self.disconnect()
            raise NetworkError(
                "Failed to initialize ConfidentialVault EVM connection",
                endpoint=self.rpc_url,
                details={"error": str(exc)},
            ) from exc

        address = self._connections.account.address
        if self._nonces is None or self._nonces.address != address:
            self._nonces = NonceSynchronizer(address)
        self._dispatcher = TransactionDispatcher(
            self._connections,
            self._reader,
            self._nonces,
            self._chain,
        )

    def disconnect(self) -> None:
        self._connections.disconnect()
        self._dispatcher = None

    def is_connected(self) -> bool:
        return self._connections.is_connected() and self._dispatcher is not None

    def _ensure_connected(self) -> TransactionDispatcher:
        self._connections.ensure_connected()
        if self._dispatcher is None:
            raise NetworkError("EVM connector is not connected", endpoint=self.rpc_url)
        return self._dispatcher

    @property
    def rpc_url(self) -> str:
        return self._config.rpc_url

    @property
    def address(self) -> str:
        return self._connections.account.address

    # ------------------------------------------------------------------
    # Contract writes
    # ------------------------------------------------------------------
    def submit_encrypted_metric(self, cipher_hex: str) -> str:
        """Store ``cipher_hex`` via ``submitMetric(bytes)``; returns the tx hash."""
        payload = hex_to_bytes(cipher_hex, field="cipher_hex")
        return self._send_contract_transaction(
            VaultFunction.SUBMIT_METRIC, [payload], action="submit_metric"
        )

    def post_encrypted_result(self, result_cipher: bytes) -> str:
        """Write an evaluated result for the managed account; returns the tx hash."""
        if not isinstance(result_cipher, bytes | bytearray):
            raise EncodingError(
                "Result ciphertext must be bytes", field="result_cipher", value=result_cipher
            )
        self._ensure_connected()
        return self._send_contract_transaction(
            VaultFunction.POST_ENCRYPTED_RESULT,
            [self.address, bytes(result_cipher)],
            action="post_encrypted_result",
        )

    def _send_contract_transaction(
        self,
        function: VaultFunction,
        args: Sequence[Any],
        *,
        action: str,
    ) -> str:
        dispatcher = self._ensure_connected()
        attempts = 1 + max(0, self._config.nonce_retry_attempts)

        attempt = 1
        outcome = dispatcher.dispatch(function.value, args, action=action)
        while outcome.retryable and attempt < attempts:
            attempt += 1
            logger.info(
                "Resubmitting %s after nonce conflict (attempt %d/%d)", action, attempt, attempts
            )
            outcome = dispatcher.dispatch(function.value, args, action=action)

        if not outcome.ok:
            raise self._outcome_error(action, outcome)

        tx_hash = cast(str, outcome.tx_hash)
        if self._config.wait_for_receipt:
            self._await_receipt(tx_hash, function, action)
        return tx_hash

    def _outcome_error(
        self, action: str, outcome: SubmissionOutcome
    ) -> SubmissionError | NetworkError:
        node_message = outcome.message or "unknown error"
        details = {"action": action, "node_message": node_message, "nonce": outcome.nonce}

        if outcome.kind is OutcomeKind.NONCE_CONFLICT:
            return NonceConflictError(
                "On-chain nonce error (another tx still pending or external tx changed "
                "nonce). Please wait for confirmation and retry.",
                outcome=outcome,
                details=details,
            )

        if outcome.kind is OutcomeKind.INSUFFICIENT_FUNDS:
            return InsufficientFundsError(
                f"Insufficient funds for sender {self.address}. "
                f"on-chain balance = {outcome.balance} wei, gasPrice = {self._chain.gas_price}, "
                f"gasLimit = {self._chain.gas_limit}, required = {outcome.required} wei, "
                f"rawMsg = {node_message}",
                balance=outcome.balance,
                required=outcome.required,
                outcome=outcome,
                details=details,
            )

        if outcome.transport_failure:
            return TransportError(
                f"Transport failure during {action}: {node_message}",
                endpoint=self.rpc_url,
                details=details,
            )

        return TransactionFailedError(
            f"On-chain tx failed: {node_message}", outcome=outcome, details=details
        )

    def _await_receipt(self, tx_hash: str, function: VaultFunction, action: str) -> None:
        web3 = self._connections.web3
        try:
            receipt = web3.eth.wait_for_transaction_receipt(
                tx_hash, timeout=self._config.receipt_timeout
            )
        except TimeExhausted as exc:
            raise TransportError(
                f"Transaction {tx_hash} not mined within {self._config.receipt_timeout}s",
                endpoint=self.rpc_url,
                details={"action": action, "tx_hash": tx_hash},
            ) from exc

        block_number = receipt.get("blockNumber")
        if receipt.get("status", 0) != 1:
            raise RevertedCallError(
                f"{action} reverted on-chain",
                reason="transaction reverted",
                function_name=function.value,
                details={"tx_hash": tx_hash, "block_number": block_number},
            )
        logger.info(
            "Transaction confirmed for action=%s hash=%s block=%s", action, tx_hash, block_number
        )

    # ------------------------------------------------------------------
    # Contract reads
    # ------------------------------------------------------------------
    def get_my_encrypted_result(self) -> str:
        """Return the managed account's result ciphertext as ``0x`` hex."""
        values = self._call_contract(VaultFunction.GET_MY_ENCRYPTED_RESULT)
        if not values:
            return EMPTY_HEX
        return bytes_to_hex(values[0])

    def get_my_metric(self) -> bytes:
        return self.get_my_metric_record().payload

    def get_my_metric_record(self) -> MetricRecord:
        values = self._call_contract(VaultFunction.GET_MY_METRIC)
        if not values:
            return MetricRecord(payload=b"", timestamp=0)
        payload, timestamp = values
        return MetricRecord(payload=bytes(payload), timestamp=int(timestamp))

    def _call_contract(self, function: VaultFunction) -> tuple[Any, ...]:
        self._ensure_connected()
        call_data = encode_call(function.value, [])
        result = self._reader.call(
            self._chain.contract_address, call_data, sender=self.address
        )
        if result.reverted:
            raise RevertedCallError(
                f"Call reverted: {result.revert_reason}",
                reason=result.revert_reason,
                function_name=function.value,
            )
        if not result.data:
            logger.warning("%s returned no data", function.value)
            return tuple()
        return decode_return(function.value, result.data)
