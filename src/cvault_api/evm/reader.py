"""Read-only chain queries; safe to retry and to run concurrently."""

from __future__ import annotations

import logging

from web3.exceptions import ContractLogicError
from web3.types import TxParams

from ..exceptions import TransportError
from ..types import CallResult
from .connections import Web3Connections

logger = logging.getLogger(__name__)

_REVERT_PREFIX = "execution reverted"


class ChainReader:
    """Issue ``eth_call``, balance and nonce queries against the node."""

    def __init__(self, connections: Web3Connections) -> None:
        self._connections = connections

    def call(
        self,
        contract_address: str,
        call_data: bytes,
        *,
        sender: str | None = None,
    ) -> CallResult:
        web3 = self._connections.web3
        tx: TxParams = {"to": contract_address, "data": bytes(call_data)}
        if sender is not None:
            tx["from"] = sender

        try:
            result = web3.eth.call(tx, "latest")
        except ContractLogicError as exc:
            reason = _revert_reason(exc)
            logger.debug("eth_call to %s reverted: %s", contract_address, reason)
            return CallResult(revert_reason=reason)
        except Exception as exc:
            raise TransportError(
                "eth_call failed",
                endpoint=contract_address,
                details={"error": str(exc)},
            ) from exc

        return CallResult(data=bytes(result))

    def get_balance(self, address: str) -> int:
        web3 = self._connections.web3
        try:
            return int(web3.eth.get_balance(address, "latest"))
        except Exception as exc:
            raise TransportError(
                "Failed to query balance", endpoint=address, details={"error": str(exc)}
            ) from exc

    def get_pending_transaction_count(self, address: str) -> int:
        """Node's next nonce including unconfirmed transactions it has accepted."""
        web3 = self._connections.web3
        try:
            return int(web3.eth.get_transaction_count(address, "pending"))
        except Exception as exc:
            raise TransportError(
                "Failed to query pending transaction count",
                endpoint=address,
                details={"error": str(exc)},
            ) from exc


def _revert_reason(exc: ContractLogicError) -> str:
    message = getattr(exc, "message", None) or (str(exc.args[0]) if exc.args else "")
    text = message.strip()
    if text.lower().startswith(_REVERT_PREFIX):
        text = text[len(_REVERT_PREFIX) :].lstrip(": ").strip()
    return text or "execution reverted"
