"""Transaction dispatch for the ConfidentialVault EVM client."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from requests.exceptions import RequestException

from ..exceptions import NetworkError, VaultProtocolError
from ..types import OutcomeKind, SubmissionOutcome
from ..utils import rpc_error_message
from .codec import encode_call
from .config import ChainContext
from .connections import Web3Connections
from .nonce import NonceSynchronizer
from .reader import ChainReader
from .signer import TransactionBuilder

logger = logging.getLogger(__name__)

# Ordered (substring, outcome) rules applied to the node's lower-cased error
# text. First match wins; anything unmatched is FATAL. Node implementations
# word these differently, so every pattern we rely on lives here.
#   "invalid nonce"          Cosmos-EVM style nodes, nonce already used/ahead
#   "tx already in mempool"  Cosmos-EVM style nodes, same nonce still pending
#   "nonce too low"          geth family, nonce already mined
#   "already known"          geth family, identical tx already pooled
#   "insufficient funds"     all major nodes, balance < gas * price + value
FAILURE_RULES: tuple[tuple[str, OutcomeKind], ...] = (
    ("invalid nonce", OutcomeKind.NONCE_CONFLICT),
    ("tx already in mempool", OutcomeKind.NONCE_CONFLICT),
    ("nonce too low", OutcomeKind.NONCE_CONFLICT),
    ("already known", OutcomeKind.NONCE_CONFLICT),
    ("insufficient funds", OutcomeKind.INSUFFICIENT_FUNDS),
)


def classify_failure(
    message: str,
    rules: Sequence[tuple[str, OutcomeKind]] = FAILURE_RULES,
) -> OutcomeKind:
    """Map a node error message onto an outcome kind using ``rules``."""
    lowered = (message or "").lower()
    for pattern, kind in rules:
        if pattern in lowered:
            return kind
    return OutcomeKind.FATAL


class TransactionDispatcher:
    """Encode, reserve, sign and send contract writes one at a time per account."""

    def __init__(
        self,
        connections: Web3Connections,
        reader: ChainReader,
        nonces: NonceSynchronizer,
        chain: ChainContext,
        *,
        builder: TransactionBuilder | None = None,
    ) -> None:
        self._connections = connections
        self._reader = reader
        self._nonces = nonces
        self._chain = chain
        self._builder = builder or TransactionBuilder()
        self._last_balance: int | None = None

    @property
    def last_observed_balance(self) -> int | None:
        return self._last_balance

    def dispatch(
        self,
        function_name: str,
        args: Sequence[Any],
        *,
        action: str = "",
        value: int = 0,
    ) -> SubmissionOutcome:
        """Run one full write attempt and return its single terminal outcome.

        Encoding errors are raised before any network call. Everything from
        the balance query to the node's reply happens under the account lock.
        """
        call_data = encode_call(function_name, args)
        action = action or function_name
        account = self._connections.account
        required = self._chain.max_gas_cost + value

        with self._nonces.serialized():
            nonce: int | None = None
            try:
                balance = self._reader.get_balance(account.address)
                self._last_balance = balance
                logger.info(
                    "Sending %s from %s, current balance = %d wei",
                    action,
                    account.address,
                    balance,
                )

                observed = self._reader.get_pending_transaction_count(account.address)
                nonce = self._nonces.reserve_nonce(observed)
                logger.info("Using nonce = %d for %s (node pending = %d)", nonce, action, observed)

                pending = self._builder.build(nonce, self._chain, call_data, value=value)
                raw_tx = self._builder.sign(pending, account, self._chain.chain_id)
            except VaultProtocolError as exc:
                outcome = SubmissionOutcome.fatal(
                    exc.message,
                    nonce=nonce,
                    transport_failure=isinstance(exc, NetworkError),
                )
            except Exception as exc:
                logger.exception("Unexpected failure preparing %s", action)
                outcome = SubmissionOutcome.fatal(str(exc), nonce=nonce)
            else:
                outcome = self.submit(raw_tx, nonce=nonce, balance=balance, required=required)

            if not outcome.ok and outcome.kind is not OutcomeKind.NONCE_CONFLICT:
                if nonce is not None:
                    self._nonces.release_unsent(nonce)

        _log_outcome(action, outcome)
        return outcome

    def submit(
        self,
        raw_tx: bytes,
        *,
        nonce: int | None = None,
        balance: int | None = None,
        required: int | None = None,
    ) -> SubmissionOutcome:
        """Broadcast ``raw_tx`` and classify the node's reply."""
        web3 = self._connections.web3
        try:
            tx_hash = web3.eth.send_raw_transaction(raw_tx)
        except Exception as exc:
            return self._classify(exc, nonce=nonce, balance=balance, required=required)

        return SubmissionOutcome.success(tx_hash.to_0x_hex(), nonce=nonce)

    def _classify(
        self,
        exc: Exception,
        *,
        nonce: int | None,
        balance: int | None,
        required: int | None,
    ) -> SubmissionOutcome:
        message = rpc_error_message(exc)
        if _is_transport_failure(exc):
            return SubmissionOutcome.fatal(message, nonce=nonce, transport_failure=True)

        kind = classify_failure(message)
        if kind is OutcomeKind.NONCE_CONFLICT:
            logger.warning(
                "Nonce-related error for %s: %s (nonce=%s)",
                self._nonces.address,
                message,
                nonce,
            )
            self._nonces.reset_on_conflict()
            return SubmissionOutcome.nonce_conflict(message, nonce=nonce)

        if kind is OutcomeKind.INSUFFICIENT_FUNDS:
            if balance is None:
                balance = self._last_balance
            return SubmissionOutcome.insufficient_funds(
                message,
                balance=balance,
                required=required if required is not None else self._chain.max_gas_cost,
                nonce=nonce,
            )

        return SubmissionOutcome.fatal(message, nonce=nonce)


def _is_transport_failure(exc: Exception) -> bool:
    return isinstance(exc, RequestException | TimeoutError | ConnectionError)


def _log_outcome(action: str, outcome: SubmissionOutcome) -> None:
    if outcome.ok:
        logger.info("Transaction sent for action=%s hash=%s", action, outcome.tx_hash)
    elif outcome.kind is OutcomeKind.NONCE_CONFLICT:
        logger.warning("Nonce conflict for action=%s: %s", action, outcome.message)
    else:
        logger.error(
            "Transaction failed for action=%s kind=%s: %s",
            action,
            outcome.kind.value,
            outcome.message,
        )
